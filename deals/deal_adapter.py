"""
Deal Adapter
============

Normalizes stored deal records to the canonical schema.

Deals logged by older versions of the app carry snake_case duplicates
(customer_name, back_end_gross, vsc_profit, ...), backward-compatibility
aliases (amount, profit, dealStatus) and form ids for statuses
('pending', 'deaddeal'). This module is the only place that knows those
names; everything downstream reads the canonical camelCase fields.

Canonical record:

{
  "id", "customerName", "stockNumber", "vinLast8", "vehicleType",
  "vehicleDescription", "manufacturer", "dealType", "lender", "saleDate",
  "status", "frontEndGross", "reserveFlat", <12 product profit fields>,
  "backEndGross", "totalGross", "products", "salespersonId",
  "isSplitDeal", "secondSalespersonId", "salesperson", "notes",
  "createdAt", "updatedAt"
}

Related Files:
- services/ledger/migration.py: one-time rewrite of stored records
- deals/calculators/: consumers of gross_equivalent()
"""

from __future__ import annotations
import math
from typing import Any, Dict, Iterable, List, Optional

from .constants import (
    DEAL_STATUSES,
    DEFAULT_DEAL_TYPE,
    DEAL_TYPES,
    PRODUCT_FIELDS,
    PRODUCT_PROFIT_FIELDS,
    STATUS_DEAD,
    STATUS_PENDING,
    VEHICLE_TYPES,
)

# Legacy names per canonical field, tried in order after the canonical one
LEGACY_FIELD_NAMES: Dict[str, tuple] = {
    "customerName": ("customer_name", "customer"),
    "stockNumber": ("stock_number",),
    "vinLast8": ("vin",),
    "vehicleDescription": ("vehicle",),
    "dealType": ("deal_type",),
    "saleDate": ("sale_date", "dealDate"),
    "status": ("dealStatus",),
    "frontEndGross": ("front_end_gross",),
    "reserveFlat": ("reserve_flat",),
    "backEndGross": ("back_end_gross", "profit"),
    "totalGross": ("total_gross", "amount"),
    "salespersonId": ("salesperson_id",),
    "isSplitDeal": ("is_split_deal",),
    "secondSalespersonId": ("second_salesperson_id",),
    "createdAt": ("created_at",),
    "updatedAt": ("updated_at",),
    "vscProfit": ("vsc_profit",),
    "gapProfit": ("gap_profit",),
    "ppmProfit": ("ppm_profit",),
    "tireWheelProfit": ("tire_wheel_profit", "tireAndWheelProfit"),
    "appearanceProfit": ("appearance_profit",),
    "theftProfit": ("theft_profit",),
    "bundledProfit": ("bundled_profit",),
    "keyReplacementProfit": ("key_replacement_profit",),
    "windshieldProfit": ("windshield_profit",),
    "lojackProfit": ("lojack_profit",),
    "extWarrantyProfit": ("ext_warranty_profit",),
    "otherProfit": ("other_profit",),
}

STATUS_ALIASES: Dict[str, str] = {
    "pending": "Pending",
    "funded": "Funded",
    "held": "Held",
    "unwound": "Unwound",
    "deaddeal": STATUS_DEAD,
    "dead deal": STATUS_DEAD,
    "dead": STATUS_DEAD,
    "complete": "Complete",
    "completed": "Complete",
}

VEHICLE_TYPE_CODES: Dict[str, str] = {"N": "New", "U": "Used", "C": "CPO"}


# ============================================================================
# FIELD HELPERS
# ============================================================================

def to_amount(value: Any) -> float:
    """Parse a currency value; blanks and garbage become 0.0."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        return 0.0
    try:
        amount = float(str(value).replace(",", "").replace("$", "").strip())
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return amount


def _pick(raw: Dict[str, Any], field: str) -> Any:
    """Canonical value, else the first populated legacy alias."""
    value = raw.get(field)
    if value not in (None, ""):
        return value
    for alias in LEGACY_FIELD_NAMES.get(field, ()):
        value = raw.get(alias)
        if value not in (None, ""):
            return value
    return None


def as_bool(value: Any) -> bool:
    """Truthiness that reads "false" / "0" / "no" strings as False."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def normalize_status(value: Any) -> str:
    """Map stored status spellings onto the canonical status values."""
    text = str(value or "").strip()
    if not text:
        return STATUS_PENDING
    if text in DEAL_STATUSES:
        return text
    return STATUS_ALIASES.get(text.casefold(), text)


def normalize_vehicle_type(value: Any) -> str:
    text = str(value or "").strip()
    if text in VEHICLE_TYPES:
        return text
    if text.upper() in VEHICLE_TYPE_CODES:
        return VEHICLE_TYPE_CODES[text.upper()]
    for vt in VEHICLE_TYPES:
        if text.casefold() == vt.casefold():
            return vt
    return text


def normalize_deal_type(value: Any) -> str:
    """Unspecified or unrecognized deal types count as Finance."""
    text = str(value or "").strip()
    for dt in DEAL_TYPES:
        if text.casefold() == dt.casefold():
            return dt
    return DEFAULT_DEAL_TYPE


def gross_equivalent(deal: Dict[str, Any]) -> float:
    """
    Back-end gross of a deal for revenue and commission purposes.

    Reads backEndGross, else the legacy back_end_gross / profit fields,
    treating missing as 0.
    """
    if not isinstance(deal, dict):
        return 0.0
    return to_amount(_pick(deal, "backEndGross"))


def product_amount(deal: Dict[str, Any], field: str) -> float:
    """Profit of one product field, with legacy fallback."""
    if not isinstance(deal, dict):
        return 0.0
    return to_amount(_pick(deal, field))


def products_sold(deal: Dict[str, Any]) -> List[str]:
    """Display names of products with profit > 0."""
    return [label for field, label in PRODUCT_FIELDS if product_amount(deal, field) > 0]


# ============================================================================
# NORMALIZATION
# ============================================================================

def normalize_deal(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a stored deal (any historical format) to a canonical record.

    Stored backEndGross / totalGross are kept when present, since older
    records may carry a gross without the product breakdown behind it.

    Args:
        raw: Deal dict as read from storage

    Returns:
        New canonical dict (raw is not modified)
    """
    if not isinstance(raw, dict):
        return {}

    deal: Dict[str, Any] = {
        "id": str(raw.get("id") or raw.get("dealNumber") or raw.get("deal_number") or ""),
        "customerName": str(_pick(raw, "customerName") or ""),
        "stockNumber": str(_pick(raw, "stockNumber") or ""),
        "vinLast8": str(_pick(raw, "vinLast8") or "").upper()[-8:],
        "vehicleType": normalize_vehicle_type(raw.get("vehicleType")),
        "vehicleDescription": str(_pick(raw, "vehicleDescription") or ""),
        "manufacturer": str(raw.get("manufacturer") or ""),
        "dealType": normalize_deal_type(_pick(raw, "dealType")),
        "lender": str(raw.get("lender") or ""),
        "saleDate": str(_pick(raw, "saleDate") or "")[:10],
        "status": normalize_status(_pick(raw, "status")),
        "frontEndGross": to_amount(_pick(raw, "frontEndGross")),
        "reserveFlat": to_amount(_pick(raw, "reserveFlat")),
    }

    for field in PRODUCT_PROFIT_FIELDS:
        deal[field] = to_amount(_pick(raw, field))

    computed_back = sum(deal[f] for f in PRODUCT_PROFIT_FIELDS) + deal["reserveFlat"]
    stored_back = _pick(raw, "backEndGross")
    deal["backEndGross"] = to_amount(stored_back) if stored_back is not None else computed_back

    stored_total = _pick(raw, "totalGross")
    deal["totalGross"] = (
        to_amount(stored_total) if stored_total is not None
        else deal["frontEndGross"] + deal["backEndGross"]
    )

    products = raw.get("products")
    deal["products"] = list(products) if isinstance(products, list) else products_sold(deal)

    is_split = as_bool(_pick(raw, "isSplitDeal"))
    second = _pick(raw, "secondSalespersonId")
    deal["salespersonId"] = str(_pick(raw, "salespersonId") or "")
    deal["isSplitDeal"] = is_split
    deal["secondSalespersonId"] = str(second) if (is_split and second) else None
    deal["salesperson"] = str(raw.get("salesperson") or "")
    deal["notes"] = str(raw.get("notes") or "")
    deal["createdAt"] = str(_pick(raw, "createdAt") or "")
    updated = _pick(raw, "updatedAt")
    deal["updatedAt"] = str(updated) if updated else None

    return deal


def normalize_deals(raw_deals: Optional[Iterable[Any]]) -> List[Dict[str, Any]]:
    """Normalize a stored list, dropping entries that are not records."""
    if not isinstance(raw_deals, list):
        return []
    return [normalize_deal(d) for d in raw_deals if isinstance(d, dict)]


def is_legacy_record(raw: Dict[str, Any]) -> bool:
    """True if raw uses any legacy field name or a non-canonical status."""
    if not isinstance(raw, dict):
        return False
    for aliases in LEGACY_FIELD_NAMES.values():
        if any(alias in raw for alias in aliases):
            return True
    status = raw.get("status")
    return status is not None and status not in DEAL_STATUSES and status != "Complete"


def upgrade_deal(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Canonical record for rewriting storage in place.

    Legacy aliases are replaced by their canonical fields; any other key
    raw carries (created_by, dashboard_type, ...) is kept unchanged.
    """
    deal = normalize_deal(raw)
    if not deal:
        return {}
    legacy = {alias for aliases in LEGACY_FIELD_NAMES.values() for alias in aliases}
    for key, value in raw.items():
        if key not in deal and key not in legacy:
            deal[key] = value
    return deal
