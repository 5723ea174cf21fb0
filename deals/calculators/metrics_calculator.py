"""Dashboard metrics - Pure calculation logic."""

from __future__ import annotations
import math
from typing import Any, Dict, List

from deals.constants import DEAL_TYPES, METRIC_CATEGORIES
from deals.deal_adapter import gross_equivalent, normalize_deal_type, product_amount


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from zero."""
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


class MetricsCalculator:
    """Aggregates F&I metrics over an already-filtered list of deals."""
    
    @staticmethod
    def empty() -> Dict[str, Any]:
        """Zero-valued metrics (new user, new month)."""
        return MetricsCalculator.calculate([])
    
    @staticmethod
    def calculate(deals: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Calculate dashboard metrics.
        
        Args:
            deals: Deals already filtered to the selected period
        
        Returns:
            Dict with:
            - total_revenue: sum of back-end gross (unrounded)
            - deals_processed: number of deals
            - products: per category count/total/penetration/average_profit
            - deal_types: counts for Finance/Cash/Lease
            - products_per_deal: product sales per deal
            - pvr: revenue per deal
        """
        deals = [d for d in (deals or []) if isinstance(d, dict)]
        processed = len(deals)
        
        total_revenue = sum(gross_equivalent(d) for d in deals)
        
        products: Dict[str, Dict[str, Any]] = {}
        total_product_count = 0
        for category, fields in METRIC_CATEGORIES.items():
            count = 0
            total = 0.0
            for deal in deals:
                amount = sum(product_amount(deal, f) for f in fields)
                if amount > 0:
                    count += 1
                    total += amount
            
            penetration = round_half_up(count / processed * 100) if processed else 0
            average = round_half_up(total / count) if count else 0
            products[category] = {
                "count": count,
                "total": total,
                "penetration": penetration,
                "average_profit": average,
            }
            total_product_count += count
        
        deal_types = {dt: 0 for dt in DEAL_TYPES}
        for deal in deals:
            deal_types[normalize_deal_type(deal.get("dealType"))] += 1
        
        return {
            "total_revenue": total_revenue,
            "deals_processed": processed,
            "products": products,
            "deal_types": deal_types,
            "products_per_deal": (total_product_count / processed) if processed else 0.0,
            "pvr": (total_revenue / processed) if processed else 0.0,
        }
    
    @staticmethod
    def status_counts(deals: List[Dict[str, Any]]) -> Dict[str, int]:
        """Number of deals per status, in first-seen order."""
        counts: Dict[str, int] = {}
        for deal in deals or []:
            status = str(deal.get("status") or "")
            counts[status] = counts.get(status, 0) + 1
        return counts
