"""Deal log: active ledger table, status changes, edit and delete."""

from __future__ import annotations
from typing import Any, Dict, List
import streamlit as st

from deals.calculators import MetricsCalculator
from deals.constants import DEAL_STATUSES
from services.ledger import DealNotFoundError, InvalidStatusTransition
from services.ledger import ledger_manager as lm
from .deal_form import EDIT_KEY
from .formatting import fmt_currency

CONFIRM_DELETE_KEY = "confirm_delete_deal_id"
NAV_REQUEST_KEY = "nav_request"


def _table_rows(deals: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "Deal #": d["id"],
            "Date": d["saleDate"],
            "Customer": d["customerName"],
            "Vehicle": f"{d['vehicleType']} {d['vehicleDescription']}".strip(),
            "Type": d["dealType"],
            "Salesperson": d["salesperson"],
            "Status": d["status"],
            "Front": fmt_currency(d["frontEndGross"]),
            "Back": fmt_currency(d["backEndGross"]),
            "Total": fmt_currency(d["totalGross"]),
            "Products": ", ".join(d["products"]),
        }
        for d in deals
    ]


def render_deal_log(user_id: str) -> None:
    """Render the active ledger with per-deal actions."""
    st.title("📋 Deal Log")
    ss = st.session_state

    deals = lm.list_deals(user_id)
    st.caption(f"{len(deals)} deals this month • updated {lm.ledger_mtime(user_id)}")

    warn = lm.get_last_warning()
    if warn:
        st.info(warn)

    if not deals:
        st.info("No deals logged this month.")
        return

    counts = MetricsCalculator.status_counts(deals)
    st.caption(" • ".join(f"{status}: {n}" for status, n in counts.items()))

    st.dataframe(_table_rows(deals), use_container_width=True, hide_index=True)

    st.markdown("---")
    st.markdown("#### Manage deal")
    labels = {d["id"]: f"{d['id']} • {d['customerName']} • {d['status']}" for d in deals}
    deal_id = st.selectbox(
        "Select deal",
        options=list(labels),
        format_func=lambda v: labels.get(v, v),
        key="deal_log_selected",
    )
    deal = next(d for d in deals if d["id"] == deal_id)

    # ----------------------- status -----------------------
    col_status, col_override, col_apply = st.columns([2, 1, 1])
    allowed = list(lm.allowed_transitions(deal["status"]))
    override = col_override.checkbox(
        "Override",
        key=f"status_override_{deal_id}",
        help="Allow any status change, e.g. to correct a mistake.",
    )
    choices = [s for s in DEAL_STATUSES if s != deal["status"]] if override else allowed
    if not choices:
        col_status.caption(f"{deal['status']} is final. Use override to correct it.")
    else:
        new_status = col_status.selectbox("New status", choices, key=f"status_new_{deal_id}")
        if col_apply.button("Apply", use_container_width=True, key=f"status_apply_{deal_id}"):
            try:
                lm.set_status(user_id, deal_id, new_status, override=override)
            except (DealNotFoundError, InvalidStatusTransition, ValueError) as e:
                st.error(str(e))
            else:
                st.toast(f"Deal {deal_id} is now {new_status}")
                st.rerun()

    # ----------------------- edit / delete -----------------------
    col_edit, col_delete = st.columns(2)
    if col_edit.button("✏️ Edit deal", use_container_width=True, key=f"edit_{deal_id}"):
        ss[EDIT_KEY] = deal_id
        ss[NAV_REQUEST_KEY] = "Log Deal"
        st.rerun()

    if ss.get(CONFIRM_DELETE_KEY) != deal_id:
        if col_delete.button("🗑️ Delete deal", use_container_width=True, key=f"delete_{deal_id}"):
            ss[CONFIRM_DELETE_KEY] = deal_id
            st.rerun()
    else:
        col_delete.warning(f"Delete deal {deal_id}? This cannot be undone.")
        c_yes, c_no = col_delete.columns(2)
        if c_yes.button("Yes, delete", type="primary", key=f"delete_yes_{deal_id}"):
            ss.pop(CONFIRM_DELETE_KEY, None)
            try:
                lm.delete_deal(user_id, deal_id)
            except DealNotFoundError as e:
                st.error(str(e))
            else:
                st.toast(f"🗑️ Deal {deal_id} deleted")
                st.rerun()
        if c_no.button("Cancel", key=f"delete_no_{deal_id}"):
            ss.pop(CONFIRM_DELETE_KEY, None)
            st.rerun()
