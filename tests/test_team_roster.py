"""Tests for team roster operations."""

from __future__ import annotations

from services.repositories import TeamRepository
from tests.conftest import USER


class TestAddMember:

    def test_empty_roster(self, lm):
        assert lm.list_members(USER) == []

    def test_add_member_derives_initials_and_id(self, lm):
        member, errors = lm.add_member(USER, "john", "doe", "salesperson")

        assert errors == {}
        assert member["initials"] == "JD"
        assert member["id"].startswith("member_")
        assert member["active"] is True
        assert lm.list_members(USER) == [member]

    def test_invalid_input_persists_nothing(self, lm):
        member, errors = lm.add_member(USER, "", "D0e", "owner")

        assert member is None
        assert set(errors) == {"firstName", "lastName", "role"}
        assert lm.list_members(USER) == []

    def test_name_length_limit(self, lm):
        _, errors = lm.add_member(USER, "A" * 51, "Doe", "salesperson")
        assert "firstName" in errors

    def test_allowed_punctuation(self, lm):
        member, errors = lm.add_member(USER, "Mary-Ann", "O'Neil Jr.", "sales_manager")
        assert errors == {}
        assert member["initials"] == "MO"

    def test_ids_unique_within_roster(self, lm):
        ids = [lm.add_member(USER, "A", "B", "salesperson")[0]["id"] for _ in range(3)]
        assert len(set(ids)) == 3


class TestRemoveAndToggle:

    def test_remove_missing_is_noop(self, lm, roster):
        lm.remove_member(USER, "member_nope")
        assert len(lm.list_members(USER)) == 2

    def test_remove_does_not_touch_deals(self, lm, roster, deal_data):
        deal, _ = lm.create_deal(USER, deal_data())
        lm.remove_member(USER, roster["john"]["id"])

        stored = lm.list_deals(USER)[0]
        assert stored["salespersonId"] == roster["john"]["id"]
        assert stored["salesperson"] == "JD"
        assert deal["salesperson"] == "JD"

    def test_toggle_active(self, lm, roster):
        mid = roster["mary"]["id"]
        assert lm.toggle_active(USER, mid)["active"] is False
        assert [m["id"] for m in lm.list_active_members(USER)] == [roster["john"]["id"]]
        assert lm.toggle_active(USER, mid)["active"] is True

    def test_toggle_missing_returns_none(self, lm, roster):
        assert lm.toggle_active(USER, "member_nope") is None


class TestSalespersonDisplay:

    MEMBERS = [
        {"id": "m1", "initials": "JD"},
        {"id": "m2", "initials": "MK"},
    ]

    def test_single(self):
        assert TeamRepository.salesperson_display(self.MEMBERS, "m1") == "JD"

    def test_split(self):
        assert TeamRepository.salesperson_display(self.MEMBERS, "m1", "m2", True) == "JD/MK (Split)"

    def test_split_flag_without_second(self):
        assert TeamRepository.salesperson_display(self.MEMBERS, "m1", None, True) == "JD"

    def test_unknown_member(self):
        assert TeamRepository.salesperson_display(self.MEMBERS, "zz") == ""
