"""Ledger exceptions."""


class LedgerError(Exception):
    """Base class for ledger operation failures."""
    pass


class DealNotFoundError(LedgerError, LookupError):
    """Raised when a deal id is not in the active ledger."""

    def __init__(self, deal_id: str):
        self.deal_id = deal_id
        super().__init__(f"Deal '{deal_id}' not found in the active ledger")


class InvalidStatusTransition(LedgerError):
    """Raised when a status change is not a normal transition."""

    def __init__(self, deal_id: str, current: str, requested: str):
        self.deal_id = deal_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Deal '{deal_id}' cannot move from {current!r} to {requested!r} "
            f"without an operator override"
        )
