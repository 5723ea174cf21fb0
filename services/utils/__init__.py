"""Utility functions."""

from .id_generator import generate_unique_id, generate_member_id, generate_deal_id, slugify
from .path_utils import get_project_root, get_data_dir, ensure_dir

__all__ = [
    "generate_unique_id",
    "generate_member_id",
    "generate_deal_id",
    "slugify",
    "get_project_root",
    "get_data_dir",
    "ensure_dir",
]
