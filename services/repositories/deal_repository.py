"""Deal repository - handles active ledger list operations."""

from __future__ import annotations
import json
from typing import Any, Dict, List, Optional, Tuple

from deals.constants import PRODUCT_PROFIT_FIELDS
from deals.deal_adapter import products_sold


class DealRepository:
    """Manages deal records inside the active ledger list (most recent first)."""
    
    @staticmethod
    def list_all(deals: Any) -> List[Dict[str, Any]]:
        """Get all deals in stored order."""
        if not isinstance(deals, list):
            return []
        return [d for d in deals if isinstance(d, dict)]
    
    @staticmethod
    def get_by_id(deals: Any, deal_id: str) -> Optional[Dict[str, Any]]:
        """Get deal by ID."""
        for d in DealRepository.list_all(deals):
            if str(d.get("id")) == str(deal_id):
                return d
        return None
    
    @staticmethod
    def list_ids(deals: Any) -> set[str]:
        return {str(d.get("id")) for d in DealRepository.list_all(deals) if d.get("id")}
    
    @staticmethod
    def apply_derived_fields(deal: Dict[str, Any]) -> Dict[str, Any]:
        """
        Recompute backEndGross, totalGross and products in place.
        
        backEndGross = all product profits + reserveFlat
        totalGross   = frontEndGross + backEndGross
        """
        back_end = sum(float(deal.get(f) or 0) for f in PRODUCT_PROFIT_FIELDS)
        back_end += float(deal.get("reserveFlat") or 0)
        deal["backEndGross"] = back_end
        deal["totalGross"] = float(deal.get("frontEndGross") or 0) + back_end
        deal["products"] = products_sold(deal)
        return deal
    
    @staticmethod
    def prepend(deals: Any, deal: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Insert deal at the top of the ledger. Returns a new list."""
        updated = json.loads(json.dumps(DealRepository.list_all(deals)))
        return [deal] + updated
    
    @staticmethod
    def replace(deals: Any, deal_id: str, deal: Dict[str, Any]) -> Tuple[List[Dict[str, Any]], bool]:
        """
        Replace a deal in place, keeping ledger order.
        
        Returns:
            (updated_deals, found)
        """
        updated = json.loads(json.dumps(DealRepository.list_all(deals)))
        for i, d in enumerate(updated):
            if str(d.get("id")) == str(deal_id):
                updated[i] = deal
                return updated, True
        return updated, False
    
    @staticmethod
    def delete(deals: Any, deal_id: str) -> Tuple[List[Dict[str, Any]], bool]:
        """
        Delete deal by ID.
        
        Returns:
            (updated_deals, found)
        """
        current = DealRepository.list_all(deals)
        updated = [d for d in current if str(d.get("id")) != str(deal_id)]
        return json.loads(json.dumps(updated)), len(updated) != len(current)
