"""Estimated pay calculator - Pure calculation logic."""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from deals.constants import DEFAULT_PAY_CONFIG, FUNDED_STATUSES
from deals.deal_adapter import gross_equivalent, product_amount, to_amount

# bonus key in bonusThresholds -> product profit field
BONUS_PRODUCTS = {
    "vscBonus": "vscProfit",
    "gapBonus": "gapProfit",
    "ppmBonus": "ppmProfit",
}


class PayCalculator:
    """Applies a pay plan to a list of deals."""
    
    @staticmethod
    def calculate(
        deals: List[Dict[str, Any]],
        config: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Calculate estimated pay.
        
        Commission is earned on the back-end gross of every deal passed in,
        whatever its status. Product bonuses are earned on funded deals only.
        
        Args:
            deals: Deals for the selected period
            config: Pay plan; defaults apply when None
        
        Returns:
            Dict with funded_deals, total_profit, commission_earnings,
            base_earnings, vsc_bonuses, gap_bonuses, ppm_bonuses,
            total_bonuses, estimated_pay
        """
        config = config if isinstance(config, dict) else DEFAULT_PAY_CONFIG
        thresholds = config.get("bonusThresholds") or {}
        
        deals = [d for d in (deals or []) if isinstance(d, dict)]
        funded = [d for d in deals if d.get("status") in FUNDED_STATUSES]
        
        total_profit = sum(gross_equivalent(d) for d in deals)
        commission_rate = to_amount(config.get("commissionRate"))
        commission = total_profit * commission_rate / 100.0
        base = to_amount(config.get("baseRate"))
        
        bonuses: Dict[str, float] = {}
        for bonus_key, field in BONUS_PRODUCTS.items():
            sold = sum(1 for d in funded if product_amount(d, field) > 0)
            bonuses[bonus_key] = sold * to_amount(thresholds.get(bonus_key))
        total_bonuses = sum(bonuses.values())
        
        return {
            "funded_deals": len(funded),
            "total_profit": total_profit,
            "commission_earnings": commission,
            "base_earnings": base,
            "vsc_bonuses": bonuses["vscBonus"],
            "gap_bonuses": bonuses["gapBonus"],
            "ppm_bonuses": bonuses["ppmBonus"],
            "total_bonuses": total_bonuses,
            "estimated_pay": base + commission + total_bonuses,
        }
