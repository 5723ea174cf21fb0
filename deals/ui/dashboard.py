"""
Dashboard UI
============

Period metrics and estimated pay for the signed-in finance manager.

Workflow:
1. Period selection (presets, archived months, custom range)
2. Deals for the period from the service facade
3. Metric cards, product table and pay card
4. Export options

The month rollover check runs in app.py before any page renders.

Related Files:
- services/ledger/ledger_manager.py: data access and aggregation
- deals/calculators/: metrics and pay calculators
- deals/exporters/: Excel and print exporters
"""

from __future__ import annotations
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
import streamlit as st

from deals.calculators import is_month_key
from deals.constants import METRIC_CATEGORY_LABELS, PERIOD_LABELS, PERIOD_SELECTORS
from deals.exporters import export_deals_to_excel, export_to_print
from services.ledger import ledger_manager as lm
from .formatting import fmt_currency, fmt_percent, masked


# ============================================================================
# MAIN PAGE
# ============================================================================

def render_dashboard(user_id: str) -> None:
    """Render the dashboard for user_id."""
    st.title("📊 F&I Dashboard")

    warn = lm.get_last_warning()
    if warn:
        st.info(warn)

    selector, start, end = _render_period_picker(user_id)
    try:
        deals = lm.get_deals_for_period(user_id, selector, start=start, end=end)
    except ValueError as e:
        st.warning(str(e))
        return

    label = lm.get_period_label(selector)
    metrics = lm.calculate_metrics(deals)
    pay = lm.calculate_pay(deals, lm.get_pay_config(user_id))

    st.caption(f"{label} • ledger updated {lm.ledger_mtime(user_id)}")

    _render_metric_cards(metrics)
    st.markdown("---")

    col_products, col_pay = st.columns([3, 2])
    with col_products:
        _render_product_table(metrics)
    with col_pay:
        _render_pay_card(user_id, pay)

    st.markdown("---")
    st.markdown("#### Export")
    exp_l, exp_r = st.columns(2)
    shown_pay = pay if lm.get_pay_privacy(user_id) else None
    with exp_l:
        export_deals_to_excel(deals, metrics, shown_pay, label)
    with exp_r:
        export_to_print(metrics, shown_pay, label)


# ============================================================================
# PERIOD PICKER
# ============================================================================

def _period_option_label(option: str) -> str:
    if is_month_key(option):
        return f"{lm.get_period_label(option)} (archived)"
    return PERIOD_LABELS.get(option, option)


def _render_period_picker(user_id: str) -> Tuple[str, Optional[date], Optional[date]]:
    """
    Period selector with archived months appended.

    Returns:
        (selector, custom_start, custom_end)
    """
    options: List[str] = list(PERIOD_SELECTORS) + lm.list_archived_months(user_id)

    col_sel, col_from, col_to = st.columns([2, 1, 1])
    with col_sel:
        selector = st.selectbox(
            "Period",
            options=options,
            index=0,
            format_func=_period_option_label,
            key="dashboard_period",
        )

    start: Optional[date] = None
    end: Optional[date] = None
    if selector == "custom":
        today = date.today()
        with col_from:
            start = st.date_input("From", value=date(today.year, today.month, 1), key="dashboard_from")
        with col_to:
            end = st.date_input("To", value=today, key="dashboard_to")
    return selector, start, end


# ============================================================================
# DISPLAY
# ============================================================================

def _render_metric_cards(metrics: Dict[str, Any]) -> None:
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Back-End Revenue", fmt_currency(metrics["total_revenue"]))
    c2.metric("Deals Processed", metrics["deals_processed"])
    c3.metric("PVR", fmt_currency(metrics["pvr"]))
    c4.metric("Products / Deal", f"{metrics['products_per_deal']:.2f}")

    types = metrics["deal_types"]
    st.caption(
        " • ".join(f"{name}: {count}" for name, count in types.items())
    )


def _render_product_table(metrics: Dict[str, Any]) -> None:
    st.markdown("#### Product Penetration")
    rows = []
    for category, data in metrics["products"].items():
        rows.append({
            "Product": METRIC_CATEGORY_LABELS.get(category, category),
            "Sold": data["count"],
            "Penetration": fmt_percent(data["penetration"]),
            "Avg Profit": fmt_currency(data["average_profit"]),
            "Total": fmt_currency(data["total"]),
        })
    st.dataframe(rows, use_container_width=True, hide_index=True)


def _render_pay_card(user_id: str, pay: Dict[str, Any]) -> None:
    st.markdown("#### Estimated Pay")
    show = st.toggle(
        "Show pay amounts",
        value=lm.get_pay_privacy(user_id),
        key="dashboard_show_pay",
    )
    if show != lm.get_pay_privacy(user_id):
        lm.set_pay_privacy(user_id, show)

    st.metric("Estimated Pay", masked(pay["estimated_pay"], show))
    st.write(f"Commission: {masked(pay['commission_earnings'], show)}")
    st.write(f"Base: {masked(pay['base_earnings'], show)}")
    st.write(
        f"Bonuses: {masked(pay['total_bonuses'], show)} "
        f"(VSC {masked(pay['vsc_bonuses'], show)}, "
        f"GAP {masked(pay['gap_bonuses'], show)}, "
        f"PPM {masked(pay['ppm_bonuses'], show)})"
    )
    st.caption(f"Funded deals: {pay['funded_deals']} • Commission basis: {masked(pay['total_profit'], show)}")
