"""
Change notifications for ledger and roster writes.

Subscribers are keyed by (topic, user id) and receive the full updated
record list after each successful write. Other sessions that are not
subscribed pick changes up on their next read from storage.
"""

from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

TOPIC_LEDGER = "ledger"
TOPIC_TEAM = "team"

Records = List[Dict[str, Any]]
Callback = Callable[[Records], None]


class LedgerEvents:
    """Minimal publish/subscribe registry."""
    
    def __init__(self):
        self._subscribers: Dict[Tuple[str, str], List[Callback]] = {}
    
    def subscribe(self, topic: str, user_id: str, callback: Callback) -> Callable[[], None]:
        """
        Register a callback.
        
        Returns:
            Function that removes the subscription
        """
        key = (topic, str(user_id))
        self._subscribers.setdefault(key, []).append(callback)
        
        def unsubscribe() -> None:
            callbacks = self._subscribers.get(key, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(key, None)
        
        return unsubscribe
    
    def publish(self, topic: str, user_id: str, records: Records) -> int:
        """
        Notify subscribers. A failing callback is logged and skipped.
        
        Returns:
            Number of callbacks that completed
        """
        delivered = 0
        for callback in list(self._subscribers.get((topic, str(user_id)), [])):
            try:
                callback(list(records))
                delivered += 1
            except Exception:
                logger.exception("Subscriber for %s/%s failed", topic, user_id)
        return delivered
    
    def subscriber_count(self, topic: str, user_id: str) -> int:
        return len(self._subscribers.get((topic, str(user_id)), []))
    
    def clear(self) -> None:
        self._subscribers.clear()
