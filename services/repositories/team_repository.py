"""Team repository - handles team roster list operations."""

from __future__ import annotations
import json
from typing import Any, Dict, List, Optional, Tuple

from deals.constants import ROLE_SALESPERSON
from ..utils import generate_member_id


class TeamRepository:
    """Manages team member records inside a roster list."""
    
    @staticmethod
    def list_all(members: Any) -> List[Dict[str, Any]]:
        """Get all members, skipping malformed entries."""
        if not isinstance(members, list):
            return []
        return [m for m in members if isinstance(m, dict) and m.get("id")]
    
    @staticmethod
    def list_active(members: Any) -> List[Dict[str, Any]]:
        """Members offered in deal-entry selection lists."""
        return [m for m in TeamRepository.list_all(members) if m.get("active", True)]
    
    @staticmethod
    def get_by_id(members: Any, member_id: str) -> Optional[Dict[str, Any]]:
        """Get member by ID."""
        for m in TeamRepository.list_all(members):
            if str(m.get("id")) == str(member_id):
                return m
        return None
    
    @staticmethod
    def list_ids(members: Any) -> List[str]:
        return [str(m["id"]) for m in TeamRepository.list_all(members)]
    
    @staticmethod
    def initials(first_name: str, last_name: str) -> str:
        """First letter of each name, uppercased."""
        first = (first_name or "").strip()[:1]
        last = (last_name or "").strip()[:1]
        return f"{first}{last}".upper()
    
    @staticmethod
    def make_member(
        first_name: str,
        last_name: str,
        role: str,
        existing_ids: set[str],
    ) -> Dict[str, Any]:
        """Build a new active member record."""
        return {
            "id": generate_member_id(existing_ids),
            "firstName": first_name,
            "lastName": last_name,
            "initials": TeamRepository.initials(first_name, last_name),
            "role": role or ROLE_SALESPERSON,
            "active": True,
        }
    
    @staticmethod
    def add(members: Any, member: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Append a member. Returns a new list."""
        updated = json.loads(json.dumps(TeamRepository.list_all(members)))
        updated.append(member)
        return updated
    
    @staticmethod
    def remove(members: Any, member_id: str) -> List[Dict[str, Any]]:
        """Remove member by ID. Returns a new list."""
        return [
            m for m in json.loads(json.dumps(TeamRepository.list_all(members)))
            if str(m.get("id")) != str(member_id)
        ]
    
    @staticmethod
    def toggle_active(members: Any, member_id: str) -> Tuple[List[Dict[str, Any]], bool]:
        """
        Flip a member's active flag.
        
        Returns:
            (updated_members, found)
        """
        updated = json.loads(json.dumps(TeamRepository.list_all(members)))
        found = False
        for m in updated:
            if str(m.get("id")) == str(member_id):
                m["active"] = not m.get("active", True)
                found = True
                break
        return updated, found
    
    @staticmethod
    def salesperson_display(
        members: Any,
        salesperson_id: str,
        second_salesperson_id: Optional[str] = None,
        is_split: bool = False,
    ) -> str:
        """
        Display snapshot stored on a deal, e.g. 'JD' or 'JD/MK (Split)'.
        """
        first = TeamRepository.get_by_id(members, salesperson_id)
        first_initials = first.get("initials", "") if first else ""
        
        second_initials = ""
        if is_split and second_salesperson_id:
            second = TeamRepository.get_by_id(members, second_salesperson_id)
            second_initials = second.get("initials", "") if second else ""
        
        if is_split and second_initials:
            return f"{first_initials}/{second_initials} (Split)"
        return first_initials
