"""Tests for deal CRUD and the status state machine."""

from __future__ import annotations

import pytest

from deals.constants import KIND_DEALS, PRODUCT_PROFIT_FIELDS
from services.ledger import DealNotFoundError, InvalidStatusTransition, LedgerError
from tests.conftest import USER


def _assert_derived(deal):
    back = sum(deal[f] for f in PRODUCT_PROFIT_FIELDS) + deal["reserveFlat"]
    assert deal["backEndGross"] == pytest.approx(back)
    assert deal["totalGross"] == pytest.approx(deal["frontEndGross"] + back)


class TestCreateDeal:

    def test_create_prepends_and_derives(self, lm, deal_data):
        first, errors = lm.create_deal(USER, deal_data(stockNumber="A1"))
        assert errors == {}
        second, _ = lm.create_deal(USER, deal_data(stockNumber="A2"))

        deals = lm.list_deals(USER)
        assert [d["id"] for d in deals] == [second["id"], first["id"]]
        assert first["backEndGross"] == 1900
        assert first["totalGross"] == 3400
        assert first["products"] == ["Vehicle Service Contract (VSC)", "GAP Insurance"]
        assert first["createdAt"].endswith("Z")
        assert first["updatedAt"] is None
        for deal in deals:
            _assert_derived(deal)

    def test_generated_id_format(self, lm, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        assert deal["id"].startswith("SF")
        assert len(deal["id"]) == 6

    def test_deal_number_becomes_id_and_must_be_unique(self, lm, deal_data):
        deal, _ = lm.create_deal(USER, deal_data(dealNumber="D-100"))
        assert deal["id"] == "D-100"

        dup, errors = lm.create_deal(USER, deal_data(dealNumber="D-100"))
        assert dup is None
        assert "dealNumber" in errors
        assert len(lm.list_deals(USER)) == 1

    def test_split_display(self, lm, roster, deal_data):
        deal, errors = lm.create_deal(USER, deal_data(
            isSplitDeal=True, secondSalespersonId=roster["mary"]["id"],
        ))
        assert errors == {}
        assert deal["salesperson"] == "JD/MK (Split)"

    def test_split_requires_distinct_second(self, lm, roster, deal_data):
        _, errors = lm.create_deal(USER, deal_data(
            isSplitDeal=True, secondSalespersonId=roster["john"]["id"],
        ))
        assert "secondSalespersonId" in errors

    def test_validation_failure_persists_nothing(self, lm, deal_data):
        deal, errors = lm.create_deal(USER, deal_data(
            vinLast8="1234567", vscProfit=-5, salespersonId="member_x",
        ))
        assert deal is None
        assert {"vinLast8", "vscProfit", "salespersonId"} <= set(errors)
        assert lm.list_deals(USER) == []

    def test_currency_upper_bound(self, lm, deal_data):
        _, errors = lm.create_deal(USER, deal_data(frontEndGross=1_000_000))
        assert "frontEndGross" in errors

    def test_cash_deal_drops_lender(self, lm, deal_data):
        deal, _ = lm.create_deal(USER, deal_data(dealType="Cash", lender="Ally"))
        assert deal["lender"] == ""

    def test_ledger_scoped_per_user(self, lm, deal_data):
        lm.create_deal(USER, deal_data())
        assert lm.list_deals("someone-else") == []


class TestUpdateDeal:

    def test_update_keeps_id_and_created_at(self, lm, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        updated, errors = lm.update_deal(USER, deal["id"], {"gapProfit": 0, "ppmProfit": 250})

        assert errors == {}
        assert updated["id"] == deal["id"]
        assert updated["createdAt"] == deal["createdAt"]
        assert updated["updatedAt"] is not None
        assert updated["backEndGross"] == 1200 + 250 + 300
        _assert_derived(lm.list_deals(USER)[0])

    def test_update_keeps_position(self, lm, deal_data):
        a, _ = lm.create_deal(USER, deal_data(stockNumber="A1"))
        b, _ = lm.create_deal(USER, deal_data(stockNumber="A2"))
        lm.update_deal(USER, a["id"], {"notes": "edited"})
        assert [d["id"] for d in lm.list_deals(USER)] == [b["id"], a["id"]]

    def test_display_kept_when_selection_unchanged(self, lm, roster, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        lm.remove_member(USER, roster["john"]["id"])

        updated, errors = lm.update_deal(USER, deal["id"], {"notes": "after removal"})
        assert errors == {}
        assert updated["salesperson"] == "JD"

    def test_display_resolved_when_selection_changes(self, lm, roster, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        updated, _ = lm.update_deal(USER, deal["id"], {"salespersonId": roster["mary"]["id"]})
        assert updated["salesperson"] == "MK"

    def test_invalid_update_changes_nothing(self, lm, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        updated, errors = lm.update_deal(USER, deal["id"], {"customerName": ""})
        assert updated is None
        assert "customerName" in errors
        assert lm.list_deals(USER)[0]["customerName"] == "Jane Smith"

    def test_legacy_complete_status_survives_edit(self, lm, storage, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        stored = storage.get(KIND_DEALS, USER)
        stored[0]["status"] = "Complete"
        storage.set(KIND_DEALS, USER, stored)

        updated, errors = lm.update_deal(USER, deal["id"], {"notes": "typo fix"})

        assert errors == {}
        assert updated["status"] == "Complete"
        assert updated["notes"] == "typo fix"

    def test_explicit_status_still_checked_on_edit(self, lm, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        updated, errors = lm.update_deal(USER, deal["id"], {"status": "Complete"})
        assert updated is None
        assert "status" in errors

    def test_unknown_id(self, lm, roster):
        with pytest.raises(DealNotFoundError):
            lm.update_deal(USER, "SF0000", {})


class TestStatus:

    def test_normal_path(self, lm, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        lm.set_status(USER, deal["id"], "Funded")
        lm.set_status(USER, deal["id"], "Held")
        lm.set_status(USER, deal["id"], "Funded")
        assert lm.get_deal(USER, deal["id"])["status"] == "Funded"

    @pytest.mark.parametrize("terminal", ["Unwound", "Dead Deal"])
    def test_terminal_states_need_override(self, lm, deal_data, terminal):
        deal, _ = lm.create_deal(USER, deal_data())
        lm.set_status(USER, deal["id"], terminal)

        with pytest.raises(InvalidStatusTransition):
            lm.set_status(USER, deal["id"], "Funded")

        moved = lm.set_status(USER, deal["id"], "Funded", override=True)
        assert moved["status"] == "Funded"

    def test_pending_to_held_not_allowed(self, lm, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        with pytest.raises(LedgerError):
            lm.set_status(USER, deal["id"], "Held")
        assert lm.get_deal(USER, deal["id"])["status"] == "Pending"

    def test_form_id_accepted(self, lm, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        assert lm.set_status(USER, deal["id"], "deaddeal")["status"] == "Dead Deal"

    def test_unknown_status(self, lm, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        with pytest.raises(ValueError):
            lm.set_status(USER, deal["id"], "Lost")

    def test_unknown_id(self, lm, roster):
        with pytest.raises(DealNotFoundError):
            lm.set_status(USER, "SF0000", "Funded")


class TestDeleteDeal:

    def test_delete(self, lm, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        lm.delete_deal(USER, deal["id"])
        assert lm.list_deals(USER) == []

    def test_delete_unknown(self, lm, roster):
        with pytest.raises(DealNotFoundError):
            lm.delete_deal(USER, "SF0000")
