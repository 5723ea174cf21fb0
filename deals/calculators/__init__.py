"""Calculator modules for ledger metrics and pay."""

from .metrics_calculator import MetricsCalculator, round_half_up
from .pay_calculator import PayCalculator
from .date_ranges import (
    resolve_date_range,
    filter_deals_by_range,
    period_label,
    is_month_key,
    month_key,
)

__all__ = [
    "MetricsCalculator",
    "PayCalculator",
    "round_half_up",
    "resolve_date_range",
    "filter_deals_by_range",
    "period_label",
    "is_month_key",
    "month_key",
]
