# deals/constants.py
"""
Ledger constants: statuses, product fields, entity kinds.

Status values and product field names are stored verbatim in user data,
so their spelling and casing must not change.
"""

from typing import Dict, List, Tuple

# =============================================================================
# DEAL STATUS
# =============================================================================

STATUS_PENDING = "Pending"
STATUS_FUNDED = "Funded"
STATUS_HELD = "Held"
STATUS_UNWOUND = "Unwound"
STATUS_DEAD = "Dead Deal"

DEAL_STATUSES: List[str] = [
    STATUS_PENDING,
    STATUS_FUNDED,
    STATUS_HELD,
    STATUS_UNWOUND,
    STATUS_DEAD,
]

# Normal operator transitions. Anything else is an override.
STATUS_TRANSITIONS: Dict[str, Tuple[str, ...]] = {
    STATUS_PENDING: (STATUS_FUNDED, STATUS_UNWOUND, STATUS_DEAD),
    STATUS_FUNDED: (STATUS_HELD, STATUS_UNWOUND, STATUS_DEAD),
    STATUS_HELD: (STATUS_FUNDED, STATUS_UNWOUND, STATUS_DEAD),
    STATUS_UNWOUND: (),
    STATUS_DEAD: (),
}

# "Complete" is a legacy synonym, honored by the pay calculator only
FUNDED_STATUSES = (STATUS_FUNDED, "Complete")

# =============================================================================
# VEHICLE / DEAL TYPES
# =============================================================================

VEHICLE_TYPES: List[str] = ["New", "Used", "CPO"]
DEAL_TYPES: List[str] = ["Finance", "Cash", "Lease"]
DEFAULT_DEAL_TYPE = "Finance"

# =============================================================================
# F&I PRODUCTS
# =============================================================================

# (profit field, display name) in form order
PRODUCT_FIELDS: List[Tuple[str, str]] = [
    ("vscProfit", "Vehicle Service Contract (VSC)"),
    ("gapProfit", "GAP Insurance"),
    ("ppmProfit", "PrePaid Maintenance (PPM)"),
    ("tireWheelProfit", "Tire & Wheel Protection"),
    ("appearanceProfit", "Appearance Protection"),
    ("theftProfit", "Theft Protection"),
    ("bundledProfit", "Bundled Products"),
    ("keyReplacementProfit", "Key Replacement"),
    ("windshieldProfit", "Windshield Protection"),
    ("lojackProfit", "LoJack/Tracking System"),
    ("extWarrantyProfit", "Extended Warranty"),
    ("otherProfit", "Other"),
]

PRODUCT_PROFIT_FIELDS: List[str] = [field for field, _ in PRODUCT_FIELDS]

# Metric categories -> profit fields summed into them
METRIC_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "vsc": ("vscProfit",),
    "gap": ("gapProfit",),
    "ppm": ("ppmProfit",),
    "tireWheel": ("tireWheelProfit",),
    "appearance": ("appearanceProfit",),
    "theft": ("theftProfit",),
    "bundled": ("bundledProfit",),
    "other": (
        "extWarrantyProfit",
        "keyReplacementProfit",
        "windshieldProfit",
        "lojackProfit",
        "otherProfit",
    ),
}

METRIC_CATEGORY_LABELS: Dict[str, str] = {
    "vsc": "VSC",
    "gap": "GAP",
    "ppm": "PPM",
    "tireWheel": "Tire & Wheel",
    "appearance": "Appearance",
    "theft": "Theft",
    "bundled": "Bundled",
    "other": "Other",
}

CURRENCY_FIELDS: List[str] = ["frontEndGross", "reserveFlat"] + PRODUCT_PROFIT_FIELDS
MAX_CURRENCY = 999999
# Reserve and each product profit
MAX_PRODUCT_AMOUNT = 99999

# Accepted sale dates, inclusive
MIN_SALE_DATE = "2020-01-01"
MAX_SALE_DATE = "2030-12-31"

# =============================================================================
# TEAM ROSTER
# =============================================================================

ROLE_SALESPERSON = "salesperson"
ROLE_SALES_MANAGER = "sales_manager"
TEAM_ROLES: List[str] = [ROLE_SALESPERSON, ROLE_SALES_MANAGER]

ROLE_LABELS: Dict[str, str] = {
    ROLE_SALESPERSON: "Salesperson",
    ROLE_SALES_MANAGER: "Sales Manager",
}

# =============================================================================
# PAY PLAN
# =============================================================================

DEFAULT_PAY_CONFIG = {
    "commissionRate": 25,
    "baseRate": 500,
    "bonusThresholds": {
        "vscBonus": 100,
        "gapBonus": 50,
        "ppmBonus": 75,
        "totalThreshold": 15000,
    },
}

# =============================================================================
# STORAGE ENTITY KINDS
# =============================================================================

KIND_TEAM_MEMBERS = "singleFinanceTeamMembers"
KIND_DEALS = "singleFinanceDeals"
KIND_PAY_CONFIG = "singleFinancePayConfig"
KIND_LAST_RESET_MONTH = "singleFinanceLastResetMonth"
KIND_PAY_PRIVACY = "singleFinancePayPrivacy"
KIND_SCHEMA_VERSION = "singleFinanceSchemaVersion"
ARCHIVE_KIND_PREFIX = "singleFinanceArchive."

SCHEMA_VERSION = 2

# =============================================================================
# PERIOD SELECTORS
# =============================================================================

PERIOD_SELECTORS: List[str] = [
    "this-month",
    "last-month",
    "last-quarter",
    "ytd",
    "last-year",
    "custom",
]

PERIOD_LABELS: Dict[str, str] = {
    "this-month": "This Month",
    "last-month": "Last Month",
    "last-quarter": "Last Quarter",
    "ytd": "Year to Date",
    "last-year": "Last Year",
    "custom": "Custom",
}
