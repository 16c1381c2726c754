from typing import Optional


class PaymentsEngineError(Exception):
    """Base class for errors raised by the payments engine."""


class TransactionParseError(PaymentsEngineError):
    """
    Raised when an input record cannot be structurally parsed.
    This is fatal for the run - no partial report is produced.
    """

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class DuplicateTransactionError(PaymentsEngineError):
    """Raised when a transaction id is inserted into the history cache twice."""

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"transaction {transaction_id} already exists")


class LedgerInvariantError(PaymentsEngineError):
    """Raised when an account ends up with total != available + held."""


class ConfigError(PaymentsEngineError):
    """Raised for invalid configuration values."""
