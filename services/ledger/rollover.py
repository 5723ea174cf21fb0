"""
Monthly rollover of the active ledger.

The stored marker (singleFinanceLastResetMonth) names the month the active
ledger belongs to. When the calendar month differs from the marker, the
ledger is copied into the archive bucket for the marker's month, cleared,
and the marker advances. Buckets are written once and never modified.

States per user:
    fresh      no marker stored; first check records the current month
    current    marker == this month; checks are no-ops
    stale      marker != this month; next check archives and resets
"""

from __future__ import annotations
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from deals.calculators.date_ranges import is_month_key, month_key
from deals.constants import ARCHIVE_KIND_PREFIX, KIND_DEALS, KIND_LAST_RESET_MONTH
from deals.deal_adapter import normalize_deals
from ..storage import StorageManager

logger = logging.getLogger(__name__)


def archive_kind(month: str) -> str:
    """Entity kind of the archive bucket for a 'YYYY-MM' month."""
    if not is_month_key(month):
        raise ValueError(f"Invalid archive month: {month!r}")
    return f"{ARCHIVE_KIND_PREFIX}{month}"


def run_rollover(storage: StorageManager, user_id: str, today: Optional[date] = None) -> Optional[str]:
    """
    Archive and reset the active ledger if the month has changed.
    
    Args:
        storage: Store to operate on
        user_id: Ledger owner
        today: Clock override (defaults to date.today())
    
    Returns:
        Month key of the bucket written, or None if nothing was archived
    """
    today = today or date.today()
    current = month_key(today)
    marker = storage.get(KIND_LAST_RESET_MONTH, user_id)
    
    if not is_month_key(marker):
        # The ledger's month is unknown here, so it is kept rather than cleared
        if marker is not None:
            logger.warning("Ignoring malformed rollover marker %r for %s", marker, user_id)
        storage.set(KIND_LAST_RESET_MONTH, user_id, current)
        logger.info("Rollover marker initialized to %s for %s", current, user_id)
        return None
    
    if marker == current:
        return None
    
    if marker > current:
        logger.warning(
            "Rollover marker %s is ahead of the clock (%s) for %s; skipping",
            marker, current, user_id,
        )
        return None
    
    deals = storage.get(KIND_DEALS, user_id)
    archived: Optional[str] = None
    if isinstance(deals, list) and deals:
        kind = archive_kind(marker)
        if storage.exists(kind, user_id):
            logger.warning("Archive %s already exists for %s; not overwriting", marker, user_id)
        else:
            storage.set(kind, user_id, deals)
            archived = marker
            logger.info("Archived %d deals to %s for %s", len(deals), marker, user_id)
    
    storage.set(KIND_DEALS, user_id, [])
    storage.set(KIND_LAST_RESET_MONTH, user_id, current)
    logger.info("Ledger reset for %s (%s -> %s)", user_id, marker, current)
    return archived


def list_archived_months(storage: StorageManager, user_id: str) -> List[str]:
    """Archived month keys for a user, most recent first."""
    months = []
    for kind in storage.list_kinds_for_user(user_id):
        if kind.startswith(ARCHIVE_KIND_PREFIX):
            month = kind[len(ARCHIVE_KIND_PREFIX):]
            if is_month_key(month):
                months.append(month)
    return sorted(months, reverse=True)


def get_archived_deals(storage: StorageManager, user_id: str, month: str) -> List[Dict[str, Any]]:
    """Deals archived for a month; [] if no bucket exists."""
    if not is_month_key(month):
        return []
    return normalize_deals(storage.get(archive_kind(month), user_id))
