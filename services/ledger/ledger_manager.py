"""
Ledger Manager
==============

Facade over the storage, repository and calculator layers.

This module provides:
- Team roster operations
- Deal ledger CRUD and status changes
- Pay plan and pay privacy settings
- Monthly rollover and archive access
- Period selection and metric / pay aggregation
- Change notifications for in-process subscribers

Architecture:
- Uses StorageManager for per-user JSON persistence
- Uses TeamRepository / DealRepository for list operations
- Reads of stored deals go through the deal adapter
- Maintains singleton storage and event instances

Every operation takes an explicit user_id; nothing here knows how the
caller identified the user.

Related Files:
- services/storage/: StorageManager implementation
- services/repositories/: Team and Deal repositories
- services/ledger/rollover.py: archive state machine
- deals/calculators/: metrics and pay calculators
"""

from __future__ import annotations
import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from deals.calculators import (
    MetricsCalculator,
    PayCalculator,
    filter_deals_by_range,
    is_month_key,
    period_label,
    resolve_date_range,
)
from deals.constants import (
    DEAL_STATUSES,
    DEFAULT_PAY_CONFIG,
    KIND_DEALS,
    KIND_LAST_RESET_MONTH,
    KIND_PAY_CONFIG,
    KIND_PAY_PRIVACY,
    KIND_TEAM_MEMBERS,
    STATUS_TRANSITIONS,
)
from deals.deal_adapter import normalize_deals, normalize_status
from ..repositories import DealRepository, TeamRepository
from ..storage import StorageManager
from ..utils import generate_deal_id
from ..validation import validate_deal, validate_member, validate_pay_config
from . import migration, rollover
from .events import TOPIC_LEDGER, TOPIC_TEAM, LedgerEvents
from .exceptions import DealNotFoundError, InvalidStatusTransition

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Errors = Dict[str, str]


# ============================================================================
# SINGLETON INSTANCES
# ============================================================================

_storage: Optional[StorageManager] = None
_events = LedgerEvents()


def _get_storage() -> StorageManager:
    """
    Get or create storage manager instance (singleton).

    Returns:
        StorageManager instance
    """
    global _storage
    if _storage is None:
        _storage = StorageManager()
    return _storage


def set_storage(storage: Optional[StorageManager]) -> None:
    """Replace the storage instance (None resets to the default on next use)."""
    global _storage
    _storage = storage


def get_events() -> LedgerEvents:
    return _events


def _now_iso() -> str:
    """Return current UTC time in ISO format."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _copy(records: List[Record]) -> List[Record]:
    return json.loads(json.dumps(records))


# ============================================================================
# STORE INFO
# ============================================================================

def get_data_path() -> Path:
    return _get_storage().get_path()


def ledger_mtime(user_id: str) -> str:
    """
    Last write time of the active ledger.

    Returns:
        Formatted timestamp, or '(not created yet)'
    """
    return _get_storage().get_mtime(KIND_DEALS, user_id)


def get_last_warning() -> Optional[str]:
    """
    Get last warning from the store (e.g., corrupt file ignored).

    Returns:
        Warning message or None
    """
    return _get_storage().get_last_warning()


def list_user_keys(user_id: str) -> List[str]:
    """Every stored key that belongs to user_id."""
    return _get_storage().list_keys_for_user(user_id)


def export_user_data(user_id: str) -> Dict[str, Any]:
    """Snapshot of every stored value for user_id, keyed by entity kind."""
    storage = _get_storage()
    return {kind: storage.get(kind, user_id) for kind in storage.list_kinds_for_user(user_id)}


# ============================================================================
# CHANGE NOTIFICATIONS
# ============================================================================

def on_ledger_changed(user_id: str, callback: Callable[[List[Record]], None]) -> Callable[[], None]:
    """Subscribe to active-ledger writes. Returns an unsubscribe function."""
    return _events.subscribe(TOPIC_LEDGER, user_id, callback)


def on_team_changed(user_id: str, callback: Callable[[List[Record]], None]) -> Callable[[], None]:
    """Subscribe to roster writes. Returns an unsubscribe function."""
    return _events.subscribe(TOPIC_TEAM, user_id, callback)


# ============================================================================
# TEAM ROSTER
# ============================================================================

def _load_members(user_id: str) -> List[Record]:
    return TeamRepository.list_all(_get_storage().get(KIND_TEAM_MEMBERS, user_id))


def _save_members(user_id: str, members: List[Record]) -> None:
    _get_storage().set(KIND_TEAM_MEMBERS, user_id, members)
    _events.publish(TOPIC_TEAM, user_id, _copy(members))


def list_members(user_id: str) -> List[Record]:
    """Roster in insertion order; [] when nothing is stored."""
    return _load_members(user_id)


def list_active_members(user_id: str) -> List[Record]:
    """Members offered for selection on new deals."""
    return TeamRepository.list_active(_load_members(user_id))


def add_member(user_id: str, first_name: str, last_name: str, role: str) -> Tuple[Optional[Record], Errors]:
    """
    Add an active member to the roster.

    Returns:
        (member, {}) on success, (None, errors) when validation fails
    """
    cleaned, errors = validate_member(first_name, last_name, role)
    if errors:
        return None, errors

    members = _load_members(user_id)
    member = TeamRepository.make_member(
        cleaned["firstName"],
        cleaned["lastName"],
        cleaned["role"],
        set(TeamRepository.list_ids(members)),
    )
    _save_members(user_id, TeamRepository.add(members, member))
    logger.info("Added team member %s for %s", member["id"], user_id)
    return member, {}


def remove_member(user_id: str, member_id: str) -> None:
    """Remove a member. Deals referencing the member are left untouched."""
    members = _load_members(user_id)
    if TeamRepository.get_by_id(members, member_id) is None:
        return
    _save_members(user_id, TeamRepository.remove(members, member_id))
    logger.info("Removed team member %s for %s", member_id, user_id)


def toggle_active(user_id: str, member_id: str) -> Optional[Record]:
    """
    Flip a member's active flag.

    Returns:
        Updated member, or None if member_id is not in the roster
    """
    updated, found = TeamRepository.toggle_active(_load_members(user_id), member_id)
    if not found:
        return None
    _save_members(user_id, updated)
    return TeamRepository.get_by_id(updated, member_id)


# ============================================================================
# DEAL LEDGER
# ============================================================================

def _load_deals(user_id: str) -> List[Record]:
    return normalize_deals(_get_storage().get(KIND_DEALS, user_id))


def _save_deals(user_id: str, deals: List[Record]) -> None:
    _get_storage().set(KIND_DEALS, user_id, deals)
    _events.publish(TOPIC_LEDGER, user_id, _copy(deals))


def list_deals(user_id: str) -> List[Record]:
    """Active ledger, most recent first."""
    return _load_deals(user_id)


def get_deal(user_id: str, deal_id: str) -> Record:
    """
    Get one deal from the active ledger.

    Raises:
        DealNotFoundError: If deal_id is not in the active ledger
    """
    deal = DealRepository.get_by_id(_load_deals(user_id), deal_id)
    if deal is None:
        raise DealNotFoundError(deal_id)
    return deal


def _build_deal(cleaned: Record, deal_id: str, salesperson: str) -> Record:
    deal = {"id": deal_id}
    deal.update({k: v for k, v in cleaned.items() if k != "dealNumber"})
    deal["salesperson"] = salesperson
    return DealRepository.apply_derived_fields(deal)


def create_deal(user_id: str, data: Dict[str, Any]) -> Tuple[Optional[Record], Errors]:
    """
    Validate and prepend a new deal to the active ledger.

    The id is the caller's deal number when given, else a generated
    'SF####'. The salesperson display is resolved from the current roster.

    Returns:
        (deal, {}) on success, (None, errors) when validation fails
    """
    members = _load_members(user_id)
    deals = _load_deals(user_id)
    existing_ids = DealRepository.list_ids(deals)

    cleaned, errors = validate_deal(data, TeamRepository.list_ids(members))
    if cleaned["dealNumber"] and cleaned["dealNumber"] in existing_ids:
        errors["dealNumber"] = "Deal number already exists"
    if errors:
        logger.info("Rejected deal for %s: %s", user_id, sorted(errors))
        return None, errors

    deal_id = cleaned["dealNumber"] or generate_deal_id(existing_ids)
    display = TeamRepository.salesperson_display(
        members,
        cleaned["salespersonId"],
        cleaned["secondSalespersonId"],
        cleaned["isSplitDeal"],
    )
    deal = _build_deal(cleaned, deal_id, display)
    deal["createdAt"] = _now_iso()
    deal["updatedAt"] = None

    _save_deals(user_id, DealRepository.prepend(deals, deal))
    logger.info("Created deal %s for %s", deal_id, user_id)
    return deal, {}


def update_deal(user_id: str, deal_id: str, data: Dict[str, Any]) -> Tuple[Optional[Record], Errors]:
    """
    Replace a deal in place with edited fields.

    Fields missing from data keep their stored values. id and createdAt
    never change. The salesperson display is re-resolved only when the
    salesperson selection changed, so edits do not rewrite history after
    roster changes.

    Returns:
        (deal, {}) on success, (None, errors) when validation fails

    Raises:
        DealNotFoundError: If deal_id is not in the active ledger
    """
    deals = _load_deals(user_id)
    existing = DealRepository.get_by_id(deals, deal_id)
    if existing is None:
        raise DealNotFoundError(deal_id)

    members = _load_members(user_id)
    merged = dict(existing)
    merged.update(data)
    merged["dealNumber"] = ""

    # Salespeople removed from the roster stay valid on their old deals
    roster_ids = TeamRepository.list_ids(members)
    roster_ids += [i for i in (existing["salespersonId"], existing["secondSalespersonId"]) if i]

    # A status left out of data keeps the stored value, legacy ones included
    cleaned, errors = validate_deal(merged, roster_ids, check_status="status" in data)
    if errors:
        return None, errors

    selection = (cleaned["salespersonId"], cleaned["secondSalespersonId"], cleaned["isSplitDeal"])
    previous = (existing["salespersonId"], existing["secondSalespersonId"], existing["isSplitDeal"])
    if selection != previous or not existing["salesperson"]:
        display = TeamRepository.salesperson_display(members, *selection)
    else:
        display = existing["salesperson"]

    deal = _build_deal(cleaned, existing["id"], display)
    deal["createdAt"] = existing["createdAt"]
    deal["updatedAt"] = _now_iso()

    updated, _ = DealRepository.replace(deals, deal_id, deal)
    _save_deals(user_id, updated)
    logger.info("Updated deal %s for %s", deal_id, user_id)
    return deal, {}


def allowed_transitions(status: str) -> Tuple[str, ...]:
    """Statuses reachable from status without an override."""
    return STATUS_TRANSITIONS.get(normalize_status(status), ())


def set_status(user_id: str, deal_id: str, new_status: str, override: bool = False) -> Record:
    """
    Change only the status of a deal.

    Args:
        override: Allow any status change (operator correction)

    Raises:
        ValueError: If new_status is not a known status
        DealNotFoundError: If deal_id is not in the active ledger
        InvalidStatusTransition: If the change is not allowed without override
    """
    status = normalize_status(new_status)
    if status not in DEAL_STATUSES:
        raise ValueError(f"Unknown status: {new_status!r}")

    deals = _load_deals(user_id)
    existing = DealRepository.get_by_id(deals, deal_id)
    if existing is None:
        raise DealNotFoundError(deal_id)

    current = existing["status"]
    if current == status:
        return existing
    if not override and status not in allowed_transitions(current):
        raise InvalidStatusTransition(deal_id, current, status)

    deal = dict(existing)
    deal["status"] = status
    deal["updatedAt"] = _now_iso()
    updated, _ = DealRepository.replace(deals, deal_id, deal)
    _save_deals(user_id, updated)
    logger.info(
        "Deal %s status %s -> %s for %s%s",
        deal_id, current, status, user_id, " (override)" if override else "",
    )
    return deal


def delete_deal(user_id: str, deal_id: str) -> None:
    """
    Remove a deal from the active ledger.

    Raises:
        DealNotFoundError: If deal_id is not in the active ledger
    """
    updated, found = DealRepository.delete(_load_deals(user_id), deal_id)
    if not found:
        raise DealNotFoundError(deal_id)
    _save_deals(user_id, updated)
    logger.info("Deleted deal %s for %s", deal_id, user_id)


# ============================================================================
# PAY PLAN
# ============================================================================

def _merge_pay_config(stored: Any) -> Dict[str, Any]:
    config = json.loads(json.dumps(DEFAULT_PAY_CONFIG))
    if not isinstance(stored, dict):
        return config
    for key in ("commissionRate", "baseRate"):
        if stored.get(key) is not None:
            config[key] = stored[key]
    thresholds = stored.get("bonusThresholds")
    if isinstance(thresholds, dict):
        config["bonusThresholds"].update(
            {k: v for k, v in thresholds.items() if v is not None}
        )
    return config


def get_pay_config(user_id: str) -> Dict[str, Any]:
    """Pay plan for user_id; the defaults are stored on first access."""
    storage = _get_storage()
    stored = storage.get(KIND_PAY_CONFIG, user_id)
    config = _merge_pay_config(stored)
    if stored is None:
        storage.set(KIND_PAY_CONFIG, user_id, config)
        logger.info("Initialized default pay plan for %s", user_id)
    return config


def save_pay_config(user_id: str, config: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Errors]:
    """
    Overwrite the pay plan.

    Returns:
        (config, {}) on success, (None, errors) when validation fails
    """
    cleaned, errors = validate_pay_config(config)
    if errors:
        return None, errors
    _get_storage().set(KIND_PAY_CONFIG, user_id, cleaned)
    logger.info("Saved pay plan for %s", user_id)
    return cleaned, {}


def get_pay_privacy(user_id: str) -> bool:
    """True when pay amounts may be shown on the dashboard."""
    return bool(_get_storage().get(KIND_PAY_PRIVACY, user_id))


def set_pay_privacy(user_id: str, show_amounts: bool) -> None:
    _get_storage().set(KIND_PAY_PRIVACY, user_id, bool(show_amounts))


# ============================================================================
# ROLLOVER / ARCHIVES
# ============================================================================

def check_rollover(user_id: str, today: Optional[date] = None) -> Optional[str]:
    """
    Archive and reset the active ledger if the calendar month changed.

    Safe to call on every dashboard load; re-checks the stored marker
    each time.

    Returns:
        Month key of the new archive bucket, or None
    """
    storage = _get_storage()
    marker_before = storage.get(KIND_LAST_RESET_MONTH, user_id)
    archived = rollover.run_rollover(storage, user_id, today)
    if is_month_key(marker_before) and storage.get(KIND_LAST_RESET_MONTH, user_id) != marker_before:
        _events.publish(TOPIC_LEDGER, user_id, [])
    return archived


def list_archived_months(user_id: str) -> List[str]:
    """Archived month keys, most recent first."""
    return rollover.list_archived_months(_get_storage(), user_id)


def get_archived_deals(user_id: str, month: str) -> List[Record]:
    """Snapshot of an archived month; [] if none."""
    return rollover.get_archived_deals(_get_storage(), user_id, month)


def migrate_user_data(user_id: str) -> Dict[str, Any]:
    """Rewrite legacy stored records once per user."""
    return migration.migrate_user_data(_get_storage(), user_id)


# ============================================================================
# PERIODS / AGGREGATION
# ============================================================================

def get_deals_for_period(
    user_id: str,
    selector: str,
    today: Optional[date] = None,
    start: Any = None,
    end: Any = None,
) -> List[Record]:
    """
    Deals that fall in a period.

    A 'YYYY-MM' selector naming an archived month returns that bucket
    unfiltered. Any other selector filters the active ledger plus all
    archives by saleDate.

    Raises:
        ValueError: Unknown selector, or 'custom' without both dates
    """
    if is_month_key(selector) and selector in list_archived_months(user_id):
        return get_archived_deals(user_id, selector)

    range_start, range_end = resolve_date_range(selector, today=today, start=start, end=end)
    pool = _load_deals(user_id)
    for month in list_archived_months(user_id):
        pool.extend(get_archived_deals(user_id, month))
    return filter_deals_by_range(pool, range_start, range_end)


def get_period_label(selector: str, today: Optional[date] = None) -> str:
    return period_label(selector, today)


def calculate_metrics(deals: List[Record]) -> Dict[str, Any]:
    return MetricsCalculator.calculate(deals)


def calculate_pay(deals: List[Record], config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return PayCalculator.calculate(deals, config)
