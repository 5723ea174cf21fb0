# admin/views/team_members.py
from __future__ import annotations
from typing import Any, Dict
import streamlit as st

from deals.constants import ROLE_LABELS, TEAM_ROLES
from services.ledger import ledger_manager as lm

CONFIRM_REMOVE_KEY = "confirm_remove_member_id"


def _member_name(member: Dict[str, Any]) -> str:
    return f"{member.get('firstName', '')} {member.get('lastName', '')}".strip()


# ----------------------------- UI -----------------------------
def page_team_members(user_id: str):
    st.title("Settings • Team Members")
    ss = st.session_state

    warn = lm.get_last_warning()
    if warn:
        st.info(warn)

    # ------------------------- ADD -------------------------
    with st.form("add_member_form", clear_on_submit=True):
        c1, c2, c3 = st.columns([2, 2, 1])
        first = c1.text_input("First name", placeholder="e.g., John")
        last = c2.text_input("Last name", placeholder="e.g., Doe")
        role = c3.selectbox("Role", TEAM_ROLES, format_func=lambda r: ROLE_LABELS.get(r, r))
        submitted = st.form_submit_button("Add member", type="primary")

    if submitted:
        member, errors = lm.add_member(user_id, first, last, role)
        if errors:
            for msg in errors.values():
                st.error(msg)
        else:
            st.toast(f"✅ Added {_member_name(member)} ({member['initials']})", icon="✅")
            st.rerun()

    # ------------------------- LIST -------------------------
    members = lm.list_members(user_id)
    if not members:
        st.info("No team members yet. Add one above.")
        return

    st.markdown("---")
    for m in members:
        mid = m["id"]
        c_name, c_role, c_active, c_remove = st.columns([3, 2, 1, 1])
        c_name.markdown(f"**{m.get('initials', '')}** {_member_name(m)}")
        c_role.caption(ROLE_LABELS.get(m.get("role"), m.get("role", "")))

        active = m.get("active", True)
        if c_active.button("Deactivate" if active else "Activate", key=f"toggle_{mid}"):
            lm.toggle_active(user_id, mid)
            st.rerun()

        if ss.get(CONFIRM_REMOVE_KEY) != mid:
            if c_remove.button("Remove", key=f"remove_{mid}"):
                ss[CONFIRM_REMOVE_KEY] = mid
                st.rerun()
        else:
            if c_remove.button("Confirm", type="primary", key=f"remove_yes_{mid}"):
                ss.pop(CONFIRM_REMOVE_KEY, None)
                lm.remove_member(user_id, mid)
                st.toast(f"Removed {_member_name(m)}. Existing deals keep their initials.")
                st.rerun()

    st.caption("Inactive members stay on their deals but are not offered for new ones.")
