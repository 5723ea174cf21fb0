"""Tests for period selection, pay plan and pay privacy through the facade."""

from __future__ import annotations

from datetime import date

import pytest

from deals.constants import DEFAULT_PAY_CONFIG, KIND_DEALS, KIND_PAY_CONFIG
from services.ledger.rollover import archive_kind
from tests.conftest import USER

TODAY = date(2025, 4, 20)


@pytest.fixture
def seeded(storage):
    storage.set(KIND_DEALS, USER, [
        {"id": "A2", "saleDate": "2025-04-10", "backEndGross": 100},
        {"id": "A1", "saleDate": "2025-04-01", "backEndGross": 100},
    ])
    storage.set(archive_kind("2025-03"), USER, [
        {"id": "M2", "saleDate": "2025-03-30", "backEndGross": 200},
        # Logged in March with an April sale date
        {"id": "M1", "saleDate": "2025-04-02", "backEndGross": 200},
    ])
    storage.set(archive_kind("2024-12"), USER, [
        {"id": "D1", "saleDate": "2024-12-05", "backEndGross": 300},
    ])


class TestGetDealsForPeriod:

    def test_archived_month_returns_bucket_unfiltered(self, lm, seeded):
        deals = lm.get_deals_for_period(USER, "2025-03", today=TODAY)
        assert [d["id"] for d in deals] == ["M2", "M1"]

    def test_this_month_spans_active_and_archives(self, lm, seeded):
        deals = lm.get_deals_for_period(USER, "this-month", today=TODAY)
        assert sorted(d["id"] for d in deals) == ["A1", "A2", "M1"]

    def test_last_quarter(self, lm, seeded):
        deals = lm.get_deals_for_period(USER, "last-quarter", today=TODAY)
        assert [d["id"] for d in deals] == ["M2"]

    def test_last_year(self, lm, seeded):
        deals = lm.get_deals_for_period(USER, "last-year", today=TODAY)
        assert [d["id"] for d in deals] == ["D1"]

    def test_month_without_archive_filters_by_date(self, lm, seeded):
        deals = lm.get_deals_for_period(USER, "2025-04", today=TODAY)
        assert sorted(d["id"] for d in deals) == ["A1", "A2", "M1"]

    def test_custom_requires_dates(self, lm, seeded):
        with pytest.raises(ValueError):
            lm.get_deals_for_period(USER, "custom", today=TODAY)

    def test_period_metrics(self, lm, seeded):
        deals = lm.get_deals_for_period(USER, "ytd", today=TODAY)
        metrics = lm.calculate_metrics(deals)
        assert metrics["deals_processed"] == 4
        assert metrics["total_revenue"] == 600

    def test_label(self, lm):
        assert lm.get_period_label("last-month", TODAY) == "March 2025"


class TestPayPlan:

    def test_defaults_created_on_first_access(self, lm, storage):
        assert storage.get(KIND_PAY_CONFIG, USER) is None
        assert lm.get_pay_config(USER) == DEFAULT_PAY_CONFIG
        assert storage.get(KIND_PAY_CONFIG, USER) == DEFAULT_PAY_CONFIG

    def test_partial_stored_config_filled_from_defaults(self, lm, storage):
        storage.set(KIND_PAY_CONFIG, USER, {"commissionRate": 30, "bonusThresholds": {"vscBonus": 10}})
        config = lm.get_pay_config(USER)
        assert config["commissionRate"] == 30
        assert config["baseRate"] == DEFAULT_PAY_CONFIG["baseRate"]
        assert config["bonusThresholds"]["vscBonus"] == 10
        assert config["bonusThresholds"]["gapBonus"] == DEFAULT_PAY_CONFIG["bonusThresholds"]["gapBonus"]

    def test_save_invalid_keeps_previous(self, lm):
        lm.get_pay_config(USER)
        saved, errors = lm.save_pay_config(USER, {"commissionRate": 101})
        assert saved is None
        assert "commissionRate" in errors
        assert lm.get_pay_config(USER) == DEFAULT_PAY_CONFIG

    def test_save_valid(self, lm):
        saved, errors = lm.save_pay_config(USER, {
            "commissionRate": 20, "baseRate": 0,
            "bonusThresholds": {"vscBonus": 25, "gapBonus": 25, "ppmBonus": 25, "totalThreshold": 0},
        })
        assert errors == {}
        assert lm.get_pay_config(USER) == saved

    def test_pay_privacy_defaults_hidden(self, lm):
        assert lm.get_pay_privacy(USER) is False
        lm.set_pay_privacy(USER, True)
        assert lm.get_pay_privacy(USER) is True


class TestUserData:

    def test_list_and_export(self, lm, roster):
        lm.get_pay_config(USER)
        assert sorted(lm.list_user_keys(USER)) == [
            f"singleFinancePayConfig_{USER}",
            f"singleFinanceTeamMembers_{USER}",
        ]
        exported = lm.export_user_data(USER)
        assert len(exported["singleFinanceTeamMembers"]) == 2
