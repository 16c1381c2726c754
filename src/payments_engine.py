import logging
from typing import Iterable, List, TextIO

from csv_source import read_transactions, read_transactions_from_file
from ledger import AccountLedger
from models import ClientAccount, ProcessingStats, Transaction
from report import write_accounts
from transaction_cache import TransactionCache
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays a transaction stream into client account balances.
    One engine instance is one run: it owns the ledger and history cache.
    """

    def __init__(self):
        self._ledger = AccountLedger()
        self._cache = TransactionCache()
        self._processor = TransactionProcessor(self._ledger, self._cache)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_transactions(self, transactions: Iterable[Transaction]) -> List[ClientAccount]:
        """
        Process transactions in arrival order and return final account states.
        Parse errors raised by the iterator propagate and abort the run.
        """
        logger.info("Starting processing")

        for transaction in transactions:
            result = self._processor.process_transaction(transaction)
            self._stats.record(result)

        logger.info("Processing complete")
        logger.info(self._stats.summary())
        return self._ledger.snapshot()

    def process_stream(self, stream: TextIO) -> List[ClientAccount]:
        """Process CSV text from an open stream."""
        return self.process_transactions(read_transactions(stream))

    def process_file(self, filepath: str) -> List[ClientAccount]:
        """Process CSV file and return final account states."""
        with read_transactions_from_file(filepath) as transactions:
            return self.process_transactions(transactions)


def run(input_stream: TextIO, output_stream: TextIO, decimal_places: int = 4) -> ProcessingStats:
    """Read all transactions from input_stream and write the account report to output_stream."""
    engine = PaymentsEngine()
    accounts = engine.process_stream(input_stream)
    write_accounts(accounts, output_stream, decimal_places)
    return engine.stats
