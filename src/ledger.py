import dataclasses
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from errors import LedgerInvariantError
from models import ClientAccount

logger = logging.getLogger(__name__)


class AccountLedger:
    """
    Client accounts keyed by client id.
    Applies balance mutations and enforces available + held == total.
    Sufficiency of funds is the caller's concern, not the ledger's.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def get(self, client_id: int) -> Optional[ClientAccount]:
        """Return the account, or None if the client has never been seen."""
        return self._accounts.get(client_id)

    def get_or_create(self, client_id: int) -> ClientAccount:
        """Get existing account or create a zeroed, unlocked one."""
        if client_id not in self._accounts:
            logger.debug(f"New client {client_id}")
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def apply(self, client_id: int, delta_available: Decimal, delta_held: Decimal) -> ClientAccount:
        """Add signed deltas to available and held, move total by their sum and verify the balance."""
        account = self.get_or_create(client_id)
        account.apply(delta_available, delta_held)
        if not account.is_balanced():
            raise LedgerInvariantError(
                f"client {client_id}: total {account.total} != available {account.available} + held {account.held}"
            )
        return account

    def is_locked(self, client_id: int) -> bool:
        account = self._accounts.get(client_id)
        return account is not None and account.locked

    def lock(self, client_id: int) -> None:
        """Lock an account. Locking is permanent for the rest of the run."""
        account = self.get_or_create(client_id)
        if not account.locked:
            logger.info(f"Locking client {client_id}")
            account.locked = True

    def snapshot(self) -> List[ClientAccount]:
        """Return copies of all accounts in insertion order (for final output)."""
        return [dataclasses.replace(account) for account in self._accounts.values()]
