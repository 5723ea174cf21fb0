"""Display formatting shared by the deal pages."""

from __future__ import annotations
from typing import Any

HIDDEN_AMOUNT = "$ ••••"


def fmt_currency(value: Any, decimals: int = 0) -> str:
    """'$1,234' style; negative values as '-$1,234'."""
    try:
        amount = float(value or 0)
    except (TypeError, ValueError):
        amount = 0.0
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.{decimals}f}"


def fmt_percent(value: Any) -> str:
    return f"{int(value or 0)}%"


def masked(value: Any, show: bool, decimals: int = 0) -> str:
    """Currency text, or a placeholder while pay amounts are hidden."""
    return fmt_currency(value, decimals) if show else HIDDEN_AMOUNT
