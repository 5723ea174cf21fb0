# admin/views/__init__.py
from .team_members import page_team_members
from .pay_plan import page_pay_plan
from .data_tools import page_data_tools

_PAGES = {
    "Team members": page_team_members,
    "Pay plan": page_pay_plan,
    "Data": page_data_tools,
}

SETTINGS_PAGES = list(_PAGES)


def admin_router(choice: str, user_id: str):
    # Unknown choice falls back to the roster
    return _PAGES.get(choice, page_team_members)(user_id)
