"""Tests for the estimated pay calculator."""

from __future__ import annotations

import pytest

from deals.calculators import PayCalculator
from deals.constants import DEFAULT_PAY_CONFIG

CONFIG = {
    "commissionRate": 10,
    "baseRate": 500,
    "bonusThresholds": {"vscBonus": 100, "gapBonus": 0, "ppmBonus": 0, "totalThreshold": 0},
}


class TestPayCalculator:

    def test_commission_on_all_deals_bonus_on_funded_only(self):
        deals = [
            {"status": "Pending", "backEndGross": 1000, "vscProfit": 100},
            {"status": "Funded", "backEndGross": 2000, "vscProfit": 100},
        ]
        pay = PayCalculator.calculate(deals, CONFIG)

        assert pay["commission_earnings"] == pytest.approx(300)
        assert pay["vsc_bonuses"] == 100
        assert pay["funded_deals"] == 1
        assert pay["total_profit"] == 3000
        assert pay["estimated_pay"] == pytest.approx(900)

    def test_empty_deals_pay_base_only(self):
        pay = PayCalculator.calculate([], CONFIG)
        assert pay["estimated_pay"] == 500
        assert pay["total_bonuses"] == 0

    def test_defaults_when_config_missing(self):
        deals = [{"status": "Funded", "backEndGross": 1000, "vscProfit": 1, "gapProfit": 1, "ppmProfit": 1}]
        pay = PayCalculator.calculate(deals)
        thresholds = DEFAULT_PAY_CONFIG["bonusThresholds"]

        assert pay["base_earnings"] == DEFAULT_PAY_CONFIG["baseRate"]
        assert pay["commission_earnings"] == pytest.approx(250)
        assert pay["total_bonuses"] == thresholds["vscBonus"] + thresholds["gapBonus"] + thresholds["ppmBonus"]

    def test_legacy_complete_counts_as_funded(self):
        pay = PayCalculator.calculate([{"status": "Complete", "vscProfit": 50}], CONFIG)
        assert pay["funded_deals"] == 1
        assert pay["vsc_bonuses"] == 100

    def test_held_and_dead_deals_earn_commission_but_no_bonus(self):
        deals = [
            {"status": "Held", "backEndGross": 1000, "vscProfit": 100},
            {"status": "Dead Deal", "backEndGross": 1000, "vscProfit": 100},
        ]
        pay = PayCalculator.calculate(deals, CONFIG)
        assert pay["commission_earnings"] == pytest.approx(200)
        assert pay["total_bonuses"] == 0

    def test_legacy_profit_field_used_for_commission(self):
        pay = PayCalculator.calculate([{"status": "Funded", "profit": 1000}], CONFIG)
        assert pay["total_profit"] == 1000
