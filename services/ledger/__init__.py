"""Deal ledger service layer."""

from .exceptions import DealNotFoundError, InvalidStatusTransition, LedgerError
from .events import LedgerEvents
from . import ledger_manager

__all__ = [
    "DealNotFoundError",
    "InvalidStatusTransition",
    "LedgerError",
    "LedgerEvents",
    "ledger_manager",
]
