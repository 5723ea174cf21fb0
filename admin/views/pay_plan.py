# admin/views/pay_plan.py
from __future__ import annotations
import streamlit as st

from services.ledger import ledger_manager as lm


# ----------------------------- UI -----------------------------
def page_pay_plan(user_id: str):
    st.title("Settings • Pay Plan")

    config = lm.get_pay_config(user_id)
    thresholds = config.get("bonusThresholds", {})

    with st.form("pay_plan_form"):
        c1, c2 = st.columns(2)
        rate = c1.number_input(
            "Commission rate (%)", min_value=0.0, max_value=100.0, step=0.5,
            value=float(config.get("commissionRate") or 0),
            help="Paid on back-end gross of every deal in the period.",
        )
        base = c2.number_input(
            "Base pay ($)", min_value=0.0, step=50.0, value=float(config.get("baseRate") or 0),
        )

        st.markdown("#### Product bonuses (funded deals only)")
        c1, c2, c3 = st.columns(3)
        vsc = c1.number_input("VSC bonus ($)", min_value=0.0, step=5.0, value=float(thresholds.get("vscBonus") or 0))
        gap = c2.number_input("GAP bonus ($)", min_value=0.0, step=5.0, value=float(thresholds.get("gapBonus") or 0))
        ppm = c3.number_input("PPM bonus ($)", min_value=0.0, step=5.0, value=float(thresholds.get("ppmBonus") or 0))
        total_threshold = st.number_input(
            "Total gross threshold ($)", min_value=0.0, step=500.0,
            value=float(thresholds.get("totalThreshold") or 0),
            help="Stored with the plan; not used in the estimate.",
        )

        submitted = st.form_submit_button("Save pay plan", type="primary")

    if submitted:
        saved, errors = lm.save_pay_config(user_id, {
            "commissionRate": rate,
            "baseRate": base,
            "bonusThresholds": {
                "vscBonus": vsc,
                "gapBonus": gap,
                "ppmBonus": ppm,
                "totalThreshold": total_threshold,
            },
        })
        if errors:
            for field, msg in errors.items():
                st.error(f"{field}: {msg}")
        else:
            st.success("✅ Pay plan saved")

    st.markdown("---")
    show = st.checkbox("Show pay amounts on the dashboard", value=lm.get_pay_privacy(user_id))
    if show != lm.get_pay_privacy(user_id):
        lm.set_pay_privacy(user_id, show)
        st.rerun()
