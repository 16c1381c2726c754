import logging
from decimal import Decimal
from typing import Optional, Tuple

from errors import DuplicateTransactionError
from ledger import AccountLedger
from models import CachedTransaction, DisputeState, ProcessingResult, Transaction, TransactionType
from transaction_cache import TransactionCache

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions, in arrival order, to the ledger and history cache.
    Semantically invalid transactions are discarded and reported through the
    returned ProcessingResult; nothing here raises for bad input.
    """

    def __init__(self, ledger: AccountLedger, cache: TransactionCache):
        self._ledger = ledger
        self._cache = cache

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: the transaction was applied
            anything else: the transaction was discarded, the member names why
        """
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                return self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        if self._ledger.is_locked(transaction.client_id):
            logger.debug(f"Deposit tx {transaction.transaction_id}: client {transaction.client_id} is locked")
            return ProcessingResult.ACCOUNT_LOCKED

        if transaction.amount < 0:
            logger.warning(f"Deposit tx {transaction.transaction_id}: invalid amount {transaction.amount}")
            return ProcessingResult.INVALID_AMOUNT

        result = self._record(transaction)
        if result.is_success:
            self._ledger.apply(transaction.client_id, transaction.amount, Decimal("0"))
        return result

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        account = self._ledger.get(transaction.client_id)

        if account is None:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: unknown client {transaction.client_id}")
            return ProcessingResult.UNKNOWN_ACCOUNT

        if account.locked:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: client {transaction.client_id} is locked")
            return ProcessingResult.ACCOUNT_LOCKED

        if transaction.amount < 0:
            logger.warning(f"Withdrawal tx {transaction.transaction_id}: invalid amount {transaction.amount}")
            return ProcessingResult.INVALID_AMOUNT

        if account.available < transaction.amount:
            logger.debug(
                f"Withdrawal tx {transaction.transaction_id}: insufficient funds "
                f"(available {account.available}, requested {transaction.amount})"
            )
            return ProcessingResult.INSUFFICIENT_FUNDS

        result = self._record(transaction)
        if result.is_success:
            self._ledger.apply(transaction.client_id, transaction.amount.copy_negate(), Decimal("0"))
        return result

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        original, result = self._find_original(transaction)
        if original is None:
            return result

        # Withdrawals are not disputable; their funds have already left the account.
        if original.transaction_type != TransactionType.DEPOSIT:
            logger.info(
                f"Dispute for tx {transaction.transaction_id}: only deposits can be disputed "
                f"(got {original.transaction_type.value})"
            )
            return ProcessingResult.NOT_DISPUTABLE

        # Resolved and charged back transactions are final.
        if original.dispute_state != DisputeState.NORMAL:
            logger.info(f"Dispute for tx {transaction.transaction_id}: transaction is {original.dispute_state.value}")
            return ProcessingResult.INVALID_DISPUTE_STATE

        self._ledger.apply(transaction.client_id, original.amount.copy_negate(), original.amount)
        self._cache.set_dispute_state(original.transaction_id, DisputeState.DISPUTED)
        return ProcessingResult.SUCCESS

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        original, result = self._find_disputed(transaction)
        if original is None:
            return result

        self._ledger.apply(transaction.client_id, original.amount, original.amount.copy_negate())
        self._cache.set_dispute_state(original.transaction_id, DisputeState.RESOLVED)
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        original, result = self._find_disputed(transaction)
        if original is None:
            return result

        self._ledger.apply(transaction.client_id, Decimal("0"), original.amount.copy_negate())
        self._cache.set_dispute_state(original.transaction_id, DisputeState.CHARGED_BACK)
        self._ledger.lock(transaction.client_id)
        return ProcessingResult.SUCCESS

    def _record(self, transaction: Transaction) -> ProcessingResult:
        """Cache a deposit or withdrawal before its funds move."""
        try:
            self._cache.insert(
                transaction.transaction_id,
                transaction.client_id,
                transaction.transaction_type,
                transaction.amount,
            )
        except DuplicateTransactionError:
            logger.info(
                f"{transaction.transaction_type.value.capitalize()} tx {transaction.transaction_id}: "
                f"already processed, skipping"
            )
            return ProcessingResult.DUPLICATE_TRANSACTION
        return ProcessingResult.SUCCESS

    def _find_original(self, transaction: Transaction) -> Tuple[Optional[CachedTransaction], ProcessingResult]:
        """Look up the transaction a dispute, resolve or chargeback refers to."""
        original = self._cache.lookup(transaction.transaction_id)
        kind = transaction.transaction_type.value.capitalize()

        if original is None:
            logger.debug(f"{kind} for tx {transaction.transaction_id}: transaction not found")
            return None, ProcessingResult.UNKNOWN_TRANSACTION

        if original.client_id != transaction.client_id:
            logger.warning(
                f"{kind} for tx {transaction.transaction_id}: client mismatch "
                f"(expected {original.client_id}, got {transaction.client_id})"
            )
            return None, ProcessingResult.CLIENT_MISMATCH

        return original, ProcessingResult.SUCCESS

    def _find_disputed(self, transaction: Transaction) -> Tuple[Optional[CachedTransaction], ProcessingResult]:
        original, result = self._find_original(transaction)
        if original is None:
            return None, result

        if original.dispute_state != DisputeState.DISPUTED:
            logger.debug(
                f"{transaction.transaction_type.value.capitalize()} for tx {transaction.transaction_id}: "
                f"transaction is {original.dispute_state.value}, not disputed"
            )
            return None, ProcessingResult.INVALID_DISPUTE_STATE

        return original, ProcessingResult.SUCCESS
