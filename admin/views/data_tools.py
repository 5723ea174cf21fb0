# admin/views/data_tools.py
from __future__ import annotations
import json
import streamlit as st

from services.ledger import ledger_manager as lm


# ----------------------------- UI -----------------------------
def page_data_tools(user_id: str):
    st.title("Settings • Data")

    st.caption(f"Data directory: {lm.get_data_path()}")
    keys = lm.list_user_keys(user_id)
    if keys:
        st.code("\n".join(sorted(keys)), language=None)
    else:
        st.info("Nothing stored for this user yet.")

    archived = lm.list_archived_months(user_id)
    st.write(f"Archived months: {', '.join(archived) if archived else 'none'}")

    st.download_button(
        "Download all data (JSON)",
        data=json.dumps(lm.export_user_data(user_id), indent=2, ensure_ascii=False),
        file_name=f"ledger_{user_id}.json",
        mime="application/json",
        use_container_width=True,
    )

    if st.button("Upgrade stored records", use_container_width=True):
        result = lm.migrate_user_data(user_id)
        if result["migrated"]:
            st.success(f"✅ Rewrote {result['records']} legacy records (schema v{result['version']})")
        else:
            st.info(f"Already at schema v{result['version']}")
        if result["encrypted"]:
            st.success(f"🔒 Encrypted {result['encrypted']} plaintext keys")
