from collections import Counter
from dataclasses import dataclass
from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    localcontext,
)
from enum import Enum
from typing import Optional

# Balance arithmetic never rounds; a result that would need rounding raises Inexact.
EXACT_CONTEXT = Context(
    prec=MAX_PREC,
    Emax=MAX_EMAX,
    Emin=MIN_EMIN,
    traps=[InvalidOperation, DivisionByZero, Overflow, Inexact],
)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class DisputeState(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    SUCCESS = "success"
    ACCOUNT_LOCKED = "account_locked"
    UNKNOWN_ACCOUNT = "unknown_account"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    CLIENT_MISMATCH = "client_mismatch"
    NOT_DISPUTABLE = "not_disputable"
    INVALID_DISPUTE_STATE = "invalid_dispute_state"

    @property
    def is_success(self) -> bool:
        return self is ProcessingResult.SUCCESS


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if self.transaction_type.carries_amount and self.amount is None:
            raise ValueError(f"{self.transaction_type.value} transaction {self.transaction_id} requires an amount")
        if not self.transaction_type.carries_amount and self.amount is not None:
            raise ValueError(f"{self.transaction_type.value} transaction {self.transaction_id} must not carry an amount")

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    locked: bool = False

    def apply(self, delta_available: Decimal, delta_held: Decimal) -> None:
        with localcontext(EXACT_CONTEXT):
            self.available += delta_available
            self.held += delta_held
            self.total += delta_available + delta_held

    def is_balanced(self) -> bool:
        with localcontext(EXACT_CONTEXT):
            return self.total == self.available + self.held


@dataclass
class CachedTransaction:
    """A previously accepted deposit or withdrawal, kept for dispute lookups."""

    transaction_id: int
    client_id: int
    transaction_type: TransactionType
    amount: Decimal
    dispute_state: DisputeState = DisputeState.NORMAL


class ProcessingStats:
    """Counters for tracking processing outcomes over a run."""

    def __init__(self):
        self.processed = 0
        self.discarded: Counter = Counter()

    def record(self, result: ProcessingResult) -> None:
        if result.is_success:
            self.processed += 1
        else:
            self.discarded[result] += 1

    @property
    def failed(self) -> int:
        return sum(self.discarded.values())

    def summary(self) -> str:
        parts = [f"Processed: {self.processed}", f"Discarded: {self.failed}"]
        for result, count in sorted(self.discarded.items(), key=lambda item: item[0].value):
            parts.append(f"{result.value}={count}")
        return ", ".join(parts)
