"""Deal entry form (create and edit)."""

from __future__ import annotations
from datetime import date
from typing import Any, Dict, List, Optional
import streamlit as st

from deals.calculators.date_ranges import parse_date
from deals.constants import (
    DEAL_STATUSES,
    DEAL_TYPES,
    PRODUCT_FIELDS,
    STATUS_PENDING,
    VEHICLE_TYPES,
)
from services.ledger import DealNotFoundError
from services.ledger import ledger_manager as lm
from .formatting import fmt_currency

EDIT_KEY = "editing_deal_id"


def _member_label(member: Dict[str, Any]) -> str:
    name = f"{member.get('firstName', '')} {member.get('lastName', '')}".strip()
    suffix = "" if member.get("active", True) else " (inactive)"
    return f"{member.get('initials', '')} • {name}{suffix}"


def _index_of(options: List[str], value: Any, default: int = 0) -> int:
    return options.index(value) if value in options else default


def _show_errors(errors: Dict[str, str]) -> None:
    for field, msg in errors.items():
        st.error(f"{field}: {msg}")


def render_deal_form(user_id: str) -> None:
    """Create a deal, or edit the one selected in the deal log."""
    ss = st.session_state
    editing_id: Optional[str] = ss.get(EDIT_KEY)
    existing: Dict[str, Any] = {}
    if editing_id:
        try:
            existing = lm.get_deal(user_id, editing_id)
        except DealNotFoundError:
            st.warning(f"Deal {editing_id} is no longer in the active ledger.")
            ss.pop(EDIT_KEY, None)
            editing_id = None

    st.title(f"📝 Edit Deal {editing_id}" if editing_id else "📝 Log Deal")

    # Active members for selection; keep the deal's current people selectable
    members = lm.list_active_members(user_id)
    current_ids = {existing.get("salespersonId"), existing.get("secondSalespersonId")}
    for m in lm.list_members(user_id):
        if m["id"] in current_ids and m not in members:
            members.append(m)

    if not members:
        st.info("Add a salesperson under Settings → Team members before logging deals.")
        return

    member_ids = [m["id"] for m in members]
    labels = {m["id"]: _member_label(m) for m in members}

    with st.form("deal_form", clear_on_submit=False):
        st.markdown("#### Deal")
        c1, c2, c3 = st.columns(3)
        deal_number = c1.text_input(
            "Deal number (optional)",
            value=editing_id or "",
            disabled=bool(editing_id),
            placeholder="auto-generated if blank",
        )
        sale_date = c2.date_input("Sale date", value=parse_date(existing.get("saleDate")) or date.today())
        status = c3.selectbox(
            "Status",
            options=DEAL_STATUSES,
            index=_index_of(DEAL_STATUSES, existing.get("status", STATUS_PENDING)),
            disabled=bool(editing_id),
            help="Change the status of an existing deal from the deal log.",
        )

        c1, c2, c3 = st.columns(3)
        customer = c1.text_input("Customer name", value=existing.get("customerName", ""))
        stock = c2.text_input("Stock number", value=existing.get("stockNumber", ""))
        vin = c3.text_input("VIN (last 8)", value=existing.get("vinLast8", ""), max_chars=8)

        c1, c2, c3 = st.columns(3)
        vehicle_type = c1.selectbox(
            "Vehicle type", VEHICLE_TYPES, index=_index_of(VEHICLE_TYPES, existing.get("vehicleType"))
        )
        description = c2.text_input("Vehicle", value=existing.get("vehicleDescription", ""))
        manufacturer = c3.text_input("Manufacturer", value=existing.get("manufacturer", ""))

        c1, c2 = st.columns(2)
        deal_type = c1.selectbox("Deal type", DEAL_TYPES, index=_index_of(DEAL_TYPES, existing.get("dealType")))
        lender = c2.text_input("Lender", value=existing.get("lender", ""), help="Ignored for cash deals.")

        st.markdown("#### Salesperson")
        c1, c2, c3 = st.columns([2, 1, 2])
        salesperson_id = c1.selectbox(
            "Salesperson",
            options=member_ids,
            index=_index_of(member_ids, existing.get("salespersonId")),
            format_func=lambda v: labels.get(v, v),
        )
        is_split = c2.checkbox("Split deal", value=bool(existing.get("isSplitDeal")))
        second_options = [""] + member_ids
        second_id = c3.selectbox(
            "Second salesperson",
            options=second_options,
            index=_index_of(second_options, existing.get("secondSalespersonId") or ""),
            format_func=lambda v: labels.get(v, "—"),
        )

        st.markdown("#### Gross")
        c1, c2 = st.columns(2)
        front_end = c1.number_input(
            "Front end gross", min_value=0.0, step=100.0, value=float(existing.get("frontEndGross") or 0)
        )
        reserve = c2.number_input(
            "Reserve / flat", min_value=0.0, step=50.0, value=float(existing.get("reserveFlat") or 0)
        )

        st.markdown("#### F&I Products")
        product_values: Dict[str, float] = {}
        cols = st.columns(3)
        for i, (field, label) in enumerate(PRODUCT_FIELDS):
            product_values[field] = cols[i % 3].number_input(
                label, min_value=0.0, step=50.0, value=float(existing.get(field) or 0), key=f"deal_{editing_id or 'new'}_{field}"
            )

        back_end = sum(product_values.values()) + reserve
        st.caption(
            f"Back end gross: {fmt_currency(back_end)} • Total gross: {fmt_currency(front_end + back_end)}"
        )

        notes = st.text_area("Notes", value=existing.get("notes", ""), max_chars=1000)

        submitted = st.form_submit_button("Save changes" if editing_id else "Log deal", type="primary")

    if editing_id and st.button("Cancel edit"):
        ss.pop(EDIT_KEY, None)
        st.rerun()

    if not submitted:
        return

    data: Dict[str, Any] = {
        "customerName": customer,
        "stockNumber": stock,
        "vinLast8": vin,
        "vehicleType": vehicle_type,
        "vehicleDescription": description,
        "manufacturer": manufacturer,
        "dealType": deal_type,
        "lender": lender,
        "saleDate": sale_date.isoformat() if sale_date else "",
        "frontEndGross": front_end,
        "reserveFlat": reserve,
        "salespersonId": salesperson_id,
        "isSplitDeal": is_split,
        "secondSalespersonId": second_id or None,
        "notes": notes,
        **product_values,
    }

    if editing_id:
        try:
            deal, errors = lm.update_deal(user_id, editing_id, data)
        except DealNotFoundError as e:
            st.error(str(e))
            return
    else:
        data["dealNumber"] = deal_number
        data["status"] = status
        deal, errors = lm.create_deal(user_id, data)

    if errors:
        _show_errors(errors)
        return

    ss.pop(EDIT_KEY, None)
    st.toast(f"✅ Deal {deal['id']} saved", icon="✅")
    st.rerun()
