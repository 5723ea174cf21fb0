"""Shared fixtures: a tmp_path-backed store wired into the ledger facade."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict

import pytest

from services.ledger import ledger_manager
from services.storage import StorageManager

USER = "user-1"


@pytest.fixture(autouse=True)
def _plaintext_store(monkeypatch):
    """Keep a developer's LEDGER_ENCRYPTION_KEY out of the tests."""
    monkeypatch.delenv("LEDGER_ENCRYPTION_KEY", raising=False)


@pytest.fixture
def storage(tmp_path) -> StorageManager:
    return StorageManager(tmp_path / "ledger")


@pytest.fixture
def lm(storage):
    """The ledger facade bound to an isolated store."""
    ledger_manager.set_storage(storage)
    ledger_manager.get_events().clear()
    yield ledger_manager
    ledger_manager.get_events().clear()
    ledger_manager.set_storage(None)


@pytest.fixture
def roster(lm) -> Dict[str, Dict[str, Any]]:
    """Two salespeople: John Doe (JD) and Mary King (MK)."""
    john, errors = lm.add_member(USER, "John", "Doe", "salesperson")
    assert not errors
    mary, errors = lm.add_member(USER, "Mary", "King", "salesperson")
    assert not errors
    return {"john": john, "mary": mary}


@pytest.fixture
def deal_data(roster):
    """Factory for valid deal input; keyword overrides replace fields."""

    def make(**overrides) -> Dict[str, Any]:
        data = {
            "customerName": "Jane Smith",
            "stockNumber": "A1234",
            "vinLast8": "1HGCM826",
            "vehicleType": "Used",
            "vehicleDescription": "2021 Honda Accord",
            "manufacturer": "Honda",
            "dealType": "Finance",
            "lender": "Ally",
            "saleDate": "2025-03-10",
            "status": "Pending",
            "frontEndGross": 1500,
            "reserveFlat": 300,
            "vscProfit": 1200,
            "gapProfit": 400,
            "salespersonId": roster["john"]["id"],
            "isSplitDeal": False,
            "notes": "",
        }
        data.update(overrides)
        return data

    return make


@pytest.fixture
def march_15() -> date:
    return date(2025, 3, 15)
