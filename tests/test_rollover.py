"""Tests for monthly rollover and archive access."""

from __future__ import annotations

from datetime import date

import pytest

from deals.constants import KIND_DEALS, KIND_LAST_RESET_MONTH
from services.ledger.rollover import archive_kind
from tests.conftest import USER


def _seed(storage, marker, deals):
    storage.set(KIND_LAST_RESET_MONTH, USER, marker)
    storage.set(KIND_DEALS, USER, deals)


class TestCheckRollover:

    def test_first_check_sets_marker_only(self, lm, storage, deal_data):
        lm.create_deal(USER, deal_data())

        assert lm.check_rollover(USER, today=date(2025, 3, 15)) is None
        assert storage.get(KIND_LAST_RESET_MONTH, USER) == "2025-03"
        assert len(lm.list_deals(USER)) == 1
        assert lm.list_archived_months(USER) == []

    def test_malformed_marker_keeps_ledger(self, lm, storage):
        _seed(storage, "March", [{"id": "SF1000", "saleDate": "2025-02-20"}])

        assert lm.check_rollover(USER, today=date(2025, 3, 15)) is None
        assert storage.get(KIND_LAST_RESET_MONTH, USER) == "2025-03"
        assert [d["id"] for d in lm.list_deals(USER)] == ["SF1000"]
        assert lm.list_archived_months(USER) == []

    def test_same_month_is_noop(self, lm, storage):
        _seed(storage, "2025-03", [{"id": "SF1000", "saleDate": "2025-03-02"}])
        assert lm.check_rollover(USER, today=date(2025, 3, 31)) is None
        assert len(lm.list_deals(USER)) == 1

    def test_month_change_archives_and_resets(self, lm, storage):
        deals = [
            {"id": "SF1001", "saleDate": "2025-03-20", "backEndGross": 900},
            {"id": "SF1000", "saleDate": "2025-03-02", "backEndGross": 500},
        ]
        _seed(storage, "2025-03", deals)

        assert lm.check_rollover(USER, today=date(2025, 4, 2)) == "2025-03"
        assert lm.list_deals(USER) == []
        assert storage.get(KIND_LAST_RESET_MONTH, USER) == "2025-04"
        assert storage.get(archive_kind("2025-03"), USER) == deals
        assert lm.list_archived_months(USER) == ["2025-03"]

    def test_repeat_check_is_idempotent(self, lm, storage):
        _seed(storage, "2025-03", [{"id": "SF1000"}])
        lm.check_rollover(USER, today=date(2025, 4, 2))
        assert lm.check_rollover(USER, today=date(2025, 4, 3)) is None
        assert lm.list_archived_months(USER) == ["2025-03"]

    def test_empty_ledger_advances_marker_without_bucket(self, lm, storage):
        _seed(storage, "2025-03", [])
        assert lm.check_rollover(USER, today=date(2025, 4, 1)) is None
        assert storage.get(KIND_LAST_RESET_MONTH, USER) == "2025-04"
        assert lm.list_archived_months(USER) == []

    def test_existing_bucket_is_not_overwritten(self, lm, storage):
        original = [{"id": "OLD"}]
        storage.set(archive_kind("2025-03"), USER, original)
        _seed(storage, "2025-03", [{"id": "NEW"}])

        assert lm.check_rollover(USER, today=date(2025, 4, 1)) is None
        assert storage.get(archive_kind("2025-03"), USER) == original
        assert lm.list_deals(USER) == []
        assert storage.get(KIND_LAST_RESET_MONTH, USER) == "2025-04"

    def test_skipped_months_archive_under_marker(self, lm, storage):
        _seed(storage, "2025-01", [{"id": "SF1000"}])
        assert lm.check_rollover(USER, today=date(2025, 4, 1)) == "2025-01"
        assert storage.get(KIND_LAST_RESET_MONTH, USER) == "2025-04"

    def test_year_boundary(self, lm, storage):
        _seed(storage, "2024-12", [{"id": "SF1000"}])
        assert lm.check_rollover(USER, today=date(2025, 1, 1)) == "2024-12"

    def test_clock_behind_marker_does_nothing(self, lm, storage):
        _seed(storage, "2025-05", [{"id": "SF1000"}])
        assert lm.check_rollover(USER, today=date(2025, 4, 1)) is None
        assert storage.get(KIND_LAST_RESET_MONTH, USER) == "2025-05"
        assert len(lm.list_deals(USER)) == 1

    def test_reset_notifies_ledger_subscribers(self, lm, storage):
        _seed(storage, "2025-03", [{"id": "SF1000"}])
        seen = []
        lm.on_ledger_changed(USER, seen.append)
        lm.check_rollover(USER, today=date(2025, 4, 1))
        assert seen == [[]]


class TestArchives:

    def test_months_sorted_descending(self, lm, storage):
        for month in ("2024-11", "2025-02", "2024-12"):
            storage.set(archive_kind(month), USER, [])
        assert lm.list_archived_months(USER) == ["2025-02", "2024-12", "2024-11"]

    def test_missing_bucket_is_empty(self, lm):
        assert lm.get_archived_deals(USER, "2020-01") == []

    def test_archive_reads_are_normalized(self, lm, storage):
        storage.set(archive_kind("2025-02"), USER, [{"id": "X", "customer_name": "Ann Lee", "status": "funded"}])
        deal = lm.get_archived_deals(USER, "2025-02")[0]
        assert deal["customerName"] == "Ann Lee"
        assert deal["status"] == "Funded"

    def test_archive_kind_rejects_bad_month(self):
        with pytest.raises(ValueError):
            archive_kind("2025-13")
