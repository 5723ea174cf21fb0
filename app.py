"""
Streamlit entrypoint for the F&I Deal Ledger.
- Main screen asks for the app password (if configured) -> ledger UI
- Sidebar picks the user and the page (dashboard, log deal, deal log, settings)
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Add project root to Python path FIRST
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import streamlit as st

from services.app_config import AppConfig
from services.ledger import ledger_manager as lm
from services.storage import StorageManager

# -----------------------------------------------------------------------------
# Config + logging
# -----------------------------------------------------------------------------
CONFIG = AppConfig.load()

logging.basicConfig(
    level=CONFIG.logging_level(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

lm.set_storage(StorageManager(CONFIG.data_dir, encryption_key=CONFIG.encryption_key))

# -----------------------------------------------------------------------------
# Page setup
# -----------------------------------------------------------------------------
st.set_page_config(page_title="F&I Deal Ledger", page_icon="💼", layout="wide")

PAGES = ["Dashboard", "Log Deal", "Deal Log", "Settings"]
NAV_KEY = "nav_page"
NAV_REQUEST_KEY = "nav_request"

# -----------------------------------------------------------------------------
# Password gate (main screen)
# -----------------------------------------------------------------------------
def check_password() -> bool:
    # If no password set, let users in directly
    if not CONFIG.app_password:
        return True
    if st.session_state.get("auth_ok"):
        return True

    st.title("🔐 Enter Password")
    pw = st.text_input("Password", type="password", placeholder="Enter password…", key="user_pw_box")
    if st.button("Sign in", key="user_signin_btn"):
        st.session_state.auth_ok = pw == str(CONFIG.app_password)
        if not st.session_state.auth_ok:
            st.error("Incorrect password.")
        else:
            st.rerun()
    return False

if not check_password():
    st.stop()

# -----------------------------------------------------------------------------
# User id (opaque; identity is resolved outside this app)
# -----------------------------------------------------------------------------
def resolve_user_id() -> str:
    if CONFIG.fixed_user_id:
        return CONFIG.fixed_user_id.strip()
    st.sidebar.markdown("### User")
    uid = st.sidebar.text_input("User ID", key="user_id_box", placeholder="e.g., jdoe")
    return (uid or "").strip()

user_id = resolve_user_id()
if not user_id:
    st.title("💼 F&I Deal Ledger")
    st.info("Enter your user ID in the sidebar to open your ledger.")
    st.stop()

try:
    StorageManager.make_key("userCheck", user_id)
except ValueError as e:
    st.sidebar.error(f"Invalid user ID: {e}")
    st.stop()

# One-time upgrade of records written by older versions
if st.session_state.get("migrated_for") != user_id:
    result = lm.migrate_user_data(user_id)
    if result["migrated"] and result["records"]:
        logger.info("Upgraded %d stored records for %s", result["records"], user_id)
    st.session_state.migrated_for = user_id

# Month rollover runs before any page reads the ledger
archived_month = lm.check_rollover(user_id)
if archived_month:
    st.toast(f"Archived {lm.get_period_label(archived_month)} and started a new month", icon="🗓️")

# -----------------------------------------------------------------------------
# Navigation
# -----------------------------------------------------------------------------
st.session_state.setdefault(NAV_KEY, PAGES[0])
# Pages request navigation through NAV_REQUEST_KEY; the radio key is locked once drawn
if NAV_REQUEST_KEY in st.session_state:
    st.session_state[NAV_KEY] = st.session_state.pop(NAV_REQUEST_KEY)
page = st.sidebar.radio("Pages", options=PAGES, key=NAV_KEY)

if CONFIG.app_password and st.sidebar.button("Logout", use_container_width=True):
    st.session_state.pop("auth_ok", None)
    st.rerun()

st.sidebar.caption(f"Ledger updated: {lm.ledger_mtime(user_id)}")

try:
    if page == "Dashboard":
        from deals.ui import render_dashboard
        render_dashboard(user_id)
    elif page == "Log Deal":
        from deals.ui import render_deal_form
        render_deal_form(user_id)
    elif page == "Deal Log":
        from deals.ui import render_deal_log
        render_deal_log(user_id)
    else:
        from admin.views import SETTINGS_PAGES, admin_router
        choice = st.sidebar.radio("Settings", options=SETTINGS_PAGES, key="settings_page_choice")
        admin_router(choice, user_id)
except Exception as e:
    logger.exception("Page %s failed", page)
    st.error("Something went wrong while rendering this page.")
    st.exception(e)
