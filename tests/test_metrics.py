"""Tests for the metrics calculator."""

from __future__ import annotations

import pytest

from deals.calculators import MetricsCalculator, round_half_up
from deals.constants import METRIC_CATEGORIES


def _deal(**fields):
    base = {"status": "Funded", "dealType": "Finance", "backEndGross": 0}
    base.update(fields)
    return base


class TestRoundHalfUp:

    @pytest.mark.parametrize("value,expected", [(12.5, 13), (12.49, 12), (0.5, 1), (2.5, 3), (0, 0)])
    def test_halves_round_up(self, value, expected):
        assert round_half_up(value) == expected


class TestMetricsCalculator:

    def test_zero_state(self):
        metrics = MetricsCalculator.calculate([])

        assert metrics["deals_processed"] == 0
        assert metrics["total_revenue"] == 0
        assert metrics["pvr"] == 0
        assert metrics["products_per_deal"] == 0
        assert set(metrics["products"]) == set(METRIC_CATEGORIES)
        assert all(p["penetration"] == 0 and p["average_profit"] == 0 for p in metrics["products"].values())
        assert metrics["deal_types"] == {"Finance": 0, "Cash": 0, "Lease": 0}

    def test_empty_matches_zero_state(self):
        assert MetricsCalculator.empty() == MetricsCalculator.calculate([])

    def test_revenue_pvr_and_products(self):
        deals = [
            _deal(backEndGross=1500, vscProfit=1000, gapProfit=500),
            _deal(backEndGross=500, vscProfit=500, dealType="Cash"),
            _deal(backEndGross=0, dealType="Lease"),
            _deal(backEndGross=0, dealType="Balloon"),
        ]
        metrics = MetricsCalculator.calculate(deals)

        assert metrics["total_revenue"] == 2000
        assert metrics["deals_processed"] == 4
        assert metrics["pvr"] == 500
        assert metrics["products_per_deal"] == pytest.approx(3 / 4)
        assert metrics["deal_types"] == {"Finance": 2, "Cash": 1, "Lease": 1}

        vsc = metrics["products"]["vsc"]
        assert vsc == {"count": 2, "total": 1500, "penetration": 50, "average_profit": 750}
        assert metrics["products"]["gap"]["penetration"] == 25

    def test_penetration_rounds_half_up(self):
        deals = [_deal(vscProfit=100)] + [_deal() for _ in range(7)]
        assert MetricsCalculator.calculate(deals)["products"]["vsc"]["penetration"] == 13

    def test_other_category_groups_minor_products(self):
        deals = [
            _deal(extWarrantyProfit=100, keyReplacementProfit=50),
            _deal(windshieldProfit=75),
            _deal(lojackProfit=25, otherProfit=25),
        ]
        other = MetricsCalculator.calculate(deals)["products"]["other"]
        assert other["count"] == 3
        assert other["total"] == 275
        assert other["average_profit"] == 92

    def test_legacy_gross_fields(self):
        deals = [{"profit": 800}, {"back_end_gross": "1,200"}, {"amount": 5000}]
        assert MetricsCalculator.calculate(deals)["total_revenue"] == 2000

    def test_average_times_count_close_to_total(self):
        deals = [_deal(vscProfit=v) for v in (333, 333, 334, 101)]
        for data in MetricsCalculator.calculate(deals)["products"].values():
            assert 0 <= data["penetration"] <= 100
            assert abs(data["average_profit"] * data["count"] - data["total"]) <= max(data["count"], 1) * 0.5

    def test_status_counts(self):
        deals = [_deal(status="Funded"), _deal(status="Pending"), _deal(status="Funded")]
        assert MetricsCalculator.status_counts(deals) == {"Funded": 2, "Pending": 1}
