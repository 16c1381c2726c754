from decimal import Decimal
from typing import Dict, Optional

from errors import DuplicateTransactionError
from models import CachedTransaction, DisputeState, TransactionType


class TransactionCache:
    """
    History of accepted deposits and withdrawals, keyed by transaction id.
    Consulted by dispute, resolve and chargeback processing.
    """

    def __init__(self):
        self._transactions: Dict[int, CachedTransaction] = {}

    def __len__(self) -> int:
        return len(self._transactions)

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._transactions

    def insert(
        self,
        transaction_id: int,
        client_id: int,
        transaction_type: TransactionType,
        amount: Decimal,
    ) -> CachedTransaction:
        """Store a newly accepted transaction in the NORMAL dispute state."""
        if not transaction_type.carries_amount:
            raise ValueError(f"{transaction_type.value} transactions are not cacheable")
        if transaction_id in self._transactions:
            raise DuplicateTransactionError(transaction_id)

        cached = CachedTransaction(
            transaction_id=transaction_id,
            client_id=client_id,
            transaction_type=transaction_type,
            amount=amount,
        )
        self._transactions[transaction_id] = cached
        return cached

    def lookup(self, transaction_id: int) -> Optional[CachedTransaction]:
        return self._transactions.get(transaction_id)

    def set_dispute_state(self, transaction_id: int, new_state: DisputeState) -> None:
        # Transition legality is checked by the processor.
        self._transactions[transaction_id].dispute_state = new_state
