"""ID generation utilities."""

from __future__ import annotations
import random
import re
import time
from typing import Optional


def slugify(text: str) -> str:
    """
    Convert text to file-name-safe slug.
    
    Examples:
        'John Smith' -> 'john_smith'
        'Q4 2024 / Deals!' -> 'q4_2024_deals'
    """
    text = (text or "").strip().lower()
    text = re.sub(r"[^a-z0-9]+", "_", text)
    text = re.sub(r"_+", "_", text).strip("_")
    return text or "item"


def generate_unique_id(base: str, existing_ids: set[str]) -> str:
    """
    Make base unique against existing IDs.
    
    Args:
        base: Candidate ID (kept verbatim, IDs are case-sensitive)
        existing_ids: Set of existing IDs to avoid
        
    Returns:
        base, or base with _2, _3 suffix if needed
    """
    if base not in existing_ids:
        return base
    
    # Add counter if exists
    counter = 2
    while f"{base}_{counter}" in existing_ids:
        counter += 1
    
    return f"{base}_{counter}"


def generate_member_id(existing_ids: set[str], now_ms: Optional[int] = None) -> str:
    """Team member ID in the 'member_<epoch ms>' format."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return generate_unique_id(f"member_{stamp}", existing_ids)


def generate_deal_id(existing_ids: set[str], attempts: int = 20) -> str:
    """
    Deal ID in the 'SF####' format, used when no deal number is given.
    
    Random 4-digit numbers are tried first; a suffix is appended once
    the attempts run out.
    """
    candidate = ""
    for _ in range(max(1, attempts)):
        candidate = f"SF{random.randint(1000, 9999)}"
        if candidate not in existing_ids:
            return candidate
    return generate_unique_id(candidate, existing_ids)
