"""Period selector -> inclusive date range."""

from __future__ import annotations
import calendar
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

MONTH_KEY_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def is_month_key(value: Any) -> bool:
    """True for 'YYYY-MM' strings."""
    return isinstance(value, str) and bool(MONTH_KEY_RE.match(value))


def month_key(day: date) -> str:
    """'YYYY-MM' for a date."""
    return f"{day.year:04d}-{day.month:02d}"


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a calendar month."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def parse_date(value: Any) -> Optional[date]:
    """Parse date/datetime/ISO string; None if unparseable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def resolve_date_range(
    selector: str,
    today: Optional[date] = None,
    start: Any = None,
    end: Any = None,
) -> Tuple[date, date]:
    """
    Resolve a period selector to an inclusive (start, end) range.
    
    Selectors:
        this-month   first day of current month -> today
        last-month   previous calendar month
        last-quarter previous calendar quarter (Q4 of last year during Q1)
        ytd          Jan 1 -> today
        last-year    previous calendar year
        custom       caller-supplied start/end
        YYYY-MM      that calendar month
    
    Raises:
        ValueError: Unknown selector, or custom without both dates
    """
    today = today or date.today()
    
    if selector == "this-month":
        return date(today.year, today.month, 1), today
    
    if selector == "last-month":
        if today.month == 1:
            return month_bounds(today.year - 1, 12)
        return month_bounds(today.year, today.month - 1)
    
    if selector == "last-quarter":
        current_quarter = (today.month - 1) // 3
        if current_quarter == 0:
            year, first_month = today.year - 1, 10
        else:
            year, first_month = today.year, (current_quarter - 1) * 3 + 1
        q_start, _ = month_bounds(year, first_month)
        _, q_end = month_bounds(year, first_month + 2)
        return q_start, q_end
    
    if selector == "ytd":
        return date(today.year, 1, 1), today
    
    if selector == "last-year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
    
    if selector == "custom":
        start_date = parse_date(start)
        end_date = parse_date(end)
        if start_date is None or end_date is None:
            raise ValueError("Custom range needs both a start and an end date")
        if start_date > end_date:
            start_date, end_date = end_date, start_date
        return start_date, end_date
    
    if is_month_key(selector):
        year, month = (int(p) for p in selector.split("-"))
        return month_bounds(year, month)
    
    raise ValueError(f"Unknown period selector: {selector!r}")


def filter_deals_by_range(
    deals: Iterable[Dict[str, Any]],
    start: date,
    end: date,
) -> List[Dict[str, Any]]:
    """Deals whose saleDate falls within [start, end]. Undated deals are skipped."""
    out = []
    for deal in deals:
        sold = parse_date(deal.get("saleDate")) if isinstance(deal, dict) else None
        if sold is not None and start <= sold <= end:
            out.append(deal)
    return out


def period_label(selector: str, today: Optional[date] = None) -> str:
    """Human label for a selector, e.g. 'March 2025', 'Q4 2024'."""
    today = today or date.today()
    
    if selector == "this-month":
        return today.strftime("%B %Y")
    if selector == "last-month":
        start, _ = resolve_date_range("last-month", today)
        return start.strftime("%B %Y")
    if selector == "last-quarter":
        start, _ = resolve_date_range("last-quarter", today)
        return f"Q{(start.month - 1) // 3 + 1} {start.year}"
    if selector == "ytd":
        return f"Year to Date {today.year}"
    if selector == "last-year":
        return str(today.year - 1)
    if selector == "custom":
        return "Custom Range"
    if is_month_key(selector):
        year, month = (int(p) for p in selector.split("-"))
        return date(year, month, 1).strftime("%B %Y")
    return selector
