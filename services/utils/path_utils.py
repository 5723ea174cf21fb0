"""Path utilities."""

from __future__ import annotations
from pathlib import Path


def get_project_root() -> Path:
    """
    Get project root directory.
    
    Returns:
        Path to project root (where app.py is located)
    """
    # services/utils/path_utils.py -> up 2 levels
    return Path(__file__).resolve().parents[2]


def get_data_dir() -> Path:
    """Default ledger data directory (project_root/data/ledger)."""
    return get_project_root() / "data" / "ledger"


def ensure_dir(path: Path) -> Path:
    """Ensure directory exists, create if needed."""
    path.mkdir(parents=True, exist_ok=True)
    return path
