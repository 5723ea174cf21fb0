"""UI components for the deal ledger."""

from .dashboard import render_dashboard
from .deal_form import render_deal_form
from .deal_log import render_deal_log

__all__ = ["render_dashboard", "render_deal_form", "render_deal_log"]
