"""
Input validation for roster members, deals and pay plans.

Validators never raise on bad input. They return (cleaned, errors) where
errors maps field name -> message; callers persist nothing unless errors
is empty.
"""

from __future__ import annotations
import re
from typing import Any, Dict, List, Optional, Tuple

from deals.calculators.date_ranges import parse_date
from deals.constants import (
    CURRENCY_FIELDS,
    DEAL_STATUSES,
    DEAL_TYPES,
    MAX_CURRENCY,
    MAX_PRODUCT_AMOUNT,
    MAX_SALE_DATE,
    MIN_SALE_DATE,
    STATUS_PENDING,
    TEAM_ROLES,
    VEHICLE_TYPES,
)
from deals.deal_adapter import as_bool, normalize_status, normalize_vehicle_type

Errors = Dict[str, str]

NAME_RE = re.compile(r"^[A-Za-z\s\-'.]+$")
CODE_RE = re.compile(r"^[A-Za-z0-9-]+$")
VIN8_RE = re.compile(r"^[A-HJ-NPR-Z0-9]{8}$")

MAX_MEMBER_NAME = 50
MAX_CUSTOMER_NAME = 100
MAX_CODE = 50
MAX_DESCRIPTION = 200
MAX_NOTES = 1000


# ============================================================================
# TEAM MEMBERS
# ============================================================================

def _check_person_name(value: Any, label: str, max_len: int) -> Optional[str]:
    text = str(value or "").strip()
    if not text:
        return f"{label} is required"
    if len(text) > max_len:
        return f"{label} too long"
    if not NAME_RE.match(text):
        return f"{label} contains invalid characters"
    return None


def validate_member(first_name: Any, last_name: Any, role: Any) -> Tuple[Dict[str, str], Errors]:
    """Validate a new roster member."""
    errors: Errors = {}
    for field, value, label in (
        ("firstName", first_name, "First name"),
        ("lastName", last_name, "Last name"),
    ):
        msg = _check_person_name(value, label, MAX_MEMBER_NAME)
        if msg:
            errors[field] = msg

    if role not in TEAM_ROLES:
        errors["role"] = "Must select a valid role"

    cleaned = {
        "firstName": str(first_name or "").strip(),
        "lastName": str(last_name or "").strip(),
        "role": str(role or ""),
    }
    return cleaned, errors


# ============================================================================
# DEALS
# ============================================================================

def _parse_currency(value: Any, limit: float = MAX_CURRENCY) -> Tuple[float, Optional[str]]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0, None
    if isinstance(value, bool):
        return 0.0, "Must be a number"
    try:
        amount = float(str(value).replace(",", "").replace("$", "").strip())
    except (TypeError, ValueError):
        return 0.0, "Must be a number"
    if amount != amount:  # NaN
        return 0.0, "Must be a number"
    if amount < 0:
        return 0.0, "Amount cannot be negative"
    if amount > limit:
        return 0.0, "Amount too large"
    return amount, None


def validate_deal(
    data: Dict[str, Any],
    roster_ids: List[str],
    check_status: bool = True,
) -> Tuple[Dict[str, Any], Errors]:
    """
    Validate deal form input.

    Args:
        data: Deal fields (camelCase); values may be strings from a form
        roster_ids: Member IDs the salesperson fields may reference
        check_status: False passes a stored status through unchecked, so
            edits keep legacy values such as "Complete"

    Returns:
        (cleaned fields, errors)
    """
    errors: Errors = {}
    cleaned: Dict[str, Any] = {}

    deal_number = str(data.get("dealNumber") or "").strip()
    if deal_number:
        if len(deal_number) > MAX_CODE:
            errors["dealNumber"] = "Deal number too long"
        elif not CODE_RE.match(deal_number):
            errors["dealNumber"] = "Deal number can only contain letters, numbers, and hyphens"
    cleaned["dealNumber"] = deal_number

    stock = str(data.get("stockNumber") or "").strip().upper()
    if not stock:
        errors["stockNumber"] = "Stock number is required"
    elif len(stock) > MAX_CODE:
        errors["stockNumber"] = "Stock number too long"
    elif not CODE_RE.match(stock):
        errors["stockNumber"] = "Stock number can only contain letters, numbers, and hyphens"
    cleaned["stockNumber"] = stock

    vin = str(data.get("vinLast8") or "").strip().upper()
    if len(vin) != 8:
        errors["vinLast8"] = "VIN must be exactly 8 characters"
    elif not VIN8_RE.match(vin):
        errors["vinLast8"] = "Invalid VIN format"
    cleaned["vinLast8"] = vin

    msg = _check_person_name(data.get("customerName"), "Customer name", MAX_CUSTOMER_NAME)
    if msg:
        errors["customerName"] = msg
    cleaned["customerName"] = str(data.get("customerName") or "").strip()

    vehicle_type = normalize_vehicle_type(data.get("vehicleType"))
    if vehicle_type not in VEHICLE_TYPES:
        errors["vehicleType"] = "Must select New, Used, or CPO"
    cleaned["vehicleType"] = vehicle_type

    description = str(data.get("vehicleDescription") or "").strip()
    if not description:
        errors["vehicleDescription"] = "Vehicle description is required"
    elif len(description) > MAX_DESCRIPTION:
        errors["vehicleDescription"] = "Vehicle description too long"
    cleaned["vehicleDescription"] = description

    manufacturer = str(data.get("manufacturer") or "").strip()
    if len(manufacturer) > MAX_CODE:
        errors["manufacturer"] = "Manufacturer too long"
    cleaned["manufacturer"] = manufacturer

    deal_type = str(data.get("dealType") or "").strip()
    if deal_type not in DEAL_TYPES:
        errors["dealType"] = "Must select a deal type"
    cleaned["dealType"] = deal_type

    lender = str(data.get("lender") or "").strip()
    if len(lender) > 100:
        errors["lender"] = "Lender name too long"
    # Cash deals have no lender
    cleaned["lender"] = "" if deal_type == "Cash" else lender

    sale_date = parse_date(data.get("saleDate"))
    if sale_date is None:
        errors["saleDate"] = "Invalid date format"
    elif not MIN_SALE_DATE <= sale_date.isoformat() <= MAX_SALE_DATE:
        errors["saleDate"] = "Date must be between 2020 and 2030"
    cleaned["saleDate"] = sale_date.isoformat() if sale_date else ""

    status = normalize_status(data.get("status") or STATUS_PENDING)
    if check_status and status not in DEAL_STATUSES:
        errors["status"] = "Must select a valid status"
    cleaned["status"] = status

    for field in CURRENCY_FIELDS:
        limit = MAX_CURRENCY if field == "frontEndGross" else MAX_PRODUCT_AMOUNT
        amount, msg = _parse_currency(data.get(field), limit)
        if msg:
            errors[field] = msg
        cleaned[field] = amount

    salesperson_id = str(data.get("salespersonId") or "").strip()
    if not salesperson_id:
        errors["salespersonId"] = "Salesperson is required"
    elif salesperson_id not in roster_ids:
        errors["salespersonId"] = "Unknown salesperson"
    cleaned["salespersonId"] = salesperson_id

    is_split = as_bool(data.get("isSplitDeal"))
    second_id = str(data.get("secondSalespersonId") or "").strip()
    if is_split:
        if not second_id:
            errors["secondSalespersonId"] = "Second salesperson is required for split deals"
        elif second_id not in roster_ids:
            errors["secondSalespersonId"] = "Unknown salesperson"
        elif second_id == salesperson_id:
            errors["secondSalespersonId"] = "Second salesperson must be a different person"
    cleaned["isSplitDeal"] = is_split
    cleaned["secondSalespersonId"] = second_id if is_split else None

    notes = str(data.get("notes") or "").strip()
    if len(notes) > MAX_NOTES:
        errors["notes"] = "Notes too long"
    cleaned["notes"] = notes

    return cleaned, errors


# ============================================================================
# PAY PLAN
# ============================================================================

def validate_pay_config(config: Dict[str, Any]) -> Tuple[Dict[str, Any], Errors]:
    """Validate a pay plan before it overwrites the stored one."""
    errors: Errors = {}
    config = config if isinstance(config, dict) else {}
    thresholds = config.get("bonusThresholds") or {}

    rate, msg = _parse_currency(config.get("commissionRate"))
    if msg:
        errors["commissionRate"] = msg
    elif rate > 100:
        errors["commissionRate"] = "Commission rate must be between 0 and 100"

    base, msg = _parse_currency(config.get("baseRate"))
    if msg:
        errors["baseRate"] = msg

    cleaned_thresholds = {}
    for key in ("vscBonus", "gapBonus", "ppmBonus", "totalThreshold"):
        amount, msg = _parse_currency(thresholds.get(key))
        if msg:
            errors[key] = msg
        cleaned_thresholds[key] = amount

    cleaned = {
        "commissionRate": rate,
        "baseRate": base,
        "bonusThresholds": cleaned_thresholds,
    }
    return cleaned, errors
