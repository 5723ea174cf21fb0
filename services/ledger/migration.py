"""
One-time rewrite of a user's active ledger to the canonical schema.

Reads already go through the deal adapter, so migration is not required
for correctness; it removes legacy field names from the active ledger so
exports and other tools see a single shape. Fields the adapter does not
know are kept. Archive buckets are never rewritten: they stay exactly as
rollover wrote them and are normalized on read.

When an encryption key is configured, plaintext keys left from before
are re-saved encrypted on every run, independent of the schema version.
"""

from __future__ import annotations
import logging
from typing import Any, Dict

from deals.constants import KIND_DEALS, KIND_SCHEMA_VERSION, SCHEMA_VERSION
from deals.deal_adapter import is_legacy_record, upgrade_deal
from ..storage import StorageManager

logger = logging.getLogger(__name__)


def _stored_version(storage: StorageManager, user_id: str) -> int:
    value = storage.get(KIND_SCHEMA_VERSION, user_id)
    try:
        return int(value)
    except (TypeError, ValueError):
        return 1


def _migrate_ledger(storage: StorageManager, user_id: str) -> int:
    raw = storage.get(KIND_DEALS, user_id)
    if not isinstance(raw, list):
        return 0
    legacy = sum(1 for d in raw if is_legacy_record(d))
    if legacy:
        storage.set(KIND_DEALS, user_id, [upgrade_deal(d) for d in raw if isinstance(d, dict)])
    return legacy


def migrate_user_data(storage: StorageManager, user_id: str) -> Dict[str, Any]:
    """
    Encrypt leftover plaintext keys, then normalize the active ledger once.

    Returns:
        Summary dict: migrated (bool), records (legacy records rewritten),
        version (schema version now stored), encrypted (keys re-saved
        encrypted)
    """
    encrypted = storage.encrypt_plaintext(user_id)

    version = _stored_version(storage, user_id)
    if version >= SCHEMA_VERSION:
        return {"migrated": False, "records": 0, "version": version, "encrypted": encrypted}

    rewritten = _migrate_ledger(storage, user_id)
    storage.set(KIND_SCHEMA_VERSION, user_id, SCHEMA_VERSION)
    logger.info(
        "Migrated %s to schema v%d (%d legacy records rewritten)",
        user_id, SCHEMA_VERSION, rewritten,
    )
    return {"migrated": True, "records": rewritten, "version": SCHEMA_VERSION, "encrypted": encrypted}
