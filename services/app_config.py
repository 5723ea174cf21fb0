"""
Application configuration.

Values are read from the environment first, then from Streamlit secrets
(.streamlit/secrets.toml), so the same code runs locally and on
Streamlit Cloud.

Keys:
- LEDGER_DATA_DIR: directory holding the per-user JSON files
- APP_PASSWORD: optional password gate for the UI
- LEDGER_USER_ID: optional fixed user id (otherwise asked in the sidebar)
- LOG_LEVEL: logging level name (default INFO)
- LEDGER_ENCRYPTION_KEY: optional Fernet key; stored values are encrypted
  at rest when set
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .utils import get_data_dir

logger = logging.getLogger(__name__)


def get_secret(name: str) -> Optional[str]:
    """Get secret from environment or Streamlit secrets."""
    value = os.environ.get(name)
    if value:
        return value
    try:
        import streamlit as st
        value = st.secrets.get(name)
    except Exception:
        # No secrets.toml, or running outside Streamlit
        return None
    return str(value) if value else None


@dataclass
class AppConfig:
    """Runtime configuration container"""
    data_dir: Path
    app_password: Optional[str] = None
    fixed_user_id: Optional[str] = None
    log_level: str = "INFO"
    encryption_key: Optional[str] = None

    @classmethod
    def load(cls) -> "AppConfig":
        env_dir = get_secret("LEDGER_DATA_DIR")
        data_dir = Path(env_dir).expanduser().resolve() if env_dir else get_data_dir()
        config = cls(
            data_dir=data_dir,
            app_password=get_secret("APP_PASSWORD"),
            fixed_user_id=get_secret("LEDGER_USER_ID"),
            log_level=(get_secret("LOG_LEVEL") or "INFO").upper(),
            encryption_key=get_secret("LEDGER_ENCRYPTION_KEY"),
        )
        logger.debug("Loaded config: data_dir=%s", config.data_dir)
        return config

    def logging_level(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)
