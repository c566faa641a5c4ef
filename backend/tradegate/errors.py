"""
Trade gate exceptions.

Configuration errors fail closed and abort the current work item.
Ledger errors are raised by the tracking client and absorbed by the
order tracker; they never fail the trade itself.
"""


class TradeGateError(Exception):
    """Base error for the trade execution safety gate."""
    pass


class TradingConfigurationError(TradeGateError):
    """Workflow or node configuration does not allow a safe decision."""

    def __init__(self, message: str, workflow_id: str | None = None):
        super().__init__(message)
        self.workflow_id = workflow_id


class LedgerError(TradeGateError):
    """Error while recording an order in the ledger service."""
    pass


class LedgerAuthenticationError(LedgerError):
    """Neither an API key nor a user id is available for the ledger call."""
    pass
