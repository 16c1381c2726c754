import csv
import logging
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, Optional, TextIO

from errors import TransactionParseError
from models import Transaction, TransactionType

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_COLUMN = "amount"

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """
    Lazily yield transactions from a CSV stream, one row at a time.

    Raises TransactionParseError on the first row that cannot be parsed.
    """
    reader = csv.DictReader(stream)
    try:
        fieldnames = reader.fieldnames
    except (csv.Error, UnicodeDecodeError) as e:
        raise TransactionParseError(f"unreadable header: {e}", 1) from e
    _check_header(fieldnames)

    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except (csv.Error, UnicodeDecodeError) as e:
            raise TransactionParseError(f"unreadable row: {e}", reader.line_num + 1) from e

        if not any(value.strip() for value in row.values() if isinstance(value, str)):
            continue
        transaction = parse_row(row, line_number=reader.line_num)
        logger.debug(f"Read {transaction}")
        yield transaction


@contextmanager
def read_transactions_from_file(filepath: str) -> Iterator[Iterator[Transaction]]:
    """Open a CSV file and yield a lazy transaction iterator over it."""
    with open(filepath, "r", encoding="utf-8", newline="") as f:
        yield read_transactions(f)


def parse_row(row: Dict[Optional[str], object], line_number: Optional[int] = None) -> Transaction:
    """Parse a CSV row into a Transaction."""
    normalized = {
        k.strip().lower(): v.strip()
        for k, v in row.items()
        if k is not None and isinstance(v, str)
    }

    try:
        transaction_type = TransactionType(normalized.get("type", "").lower())
    except ValueError:
        raise TransactionParseError(f"unknown transaction type {normalized.get('type')!r}", line_number) from None

    client_id = _parse_id(normalized, "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(normalized, "tx", MAX_TRANSACTION_ID, line_number)

    amount = None
    if transaction_type.carries_amount:
        amount = _parse_amount(normalized.get(AMOUNT_COLUMN, ""), line_number)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _check_header(fieldnames) -> None:
    if fieldnames is None:
        raise TransactionParseError("missing header row", 1)

    columns = {name.strip().lower() for name in fieldnames if name}
    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise TransactionParseError(f"header is missing columns: {', '.join(missing)}", 1)


def _parse_id(normalized: Dict[str, str], field: str, maximum: int, line_number: Optional[int]) -> int:
    value = normalized.get(field, "")
    if not value:
        raise TransactionParseError(f"missing {field} id", line_number)
    try:
        parsed = int(value)
    except ValueError:
        raise TransactionParseError(f"invalid {field} id {value!r}", line_number) from None
    if not 0 <= parsed <= maximum:
        raise TransactionParseError(f"{field} id {parsed} out of range", line_number)
    return parsed


def _parse_amount(value: str, line_number: Optional[int]) -> Decimal:
    if not value:
        raise TransactionParseError("missing amount", line_number)
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise TransactionParseError(f"invalid amount {value!r}", line_number) from None
    if not amount.is_finite():
        raise TransactionParseError(f"invalid amount {value!r}", line_number)
    return amount
