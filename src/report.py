import csv
from decimal import Decimal
from typing import Iterable, TextIO

from models import ClientAccount

HEADER = ("client", "available", "held", "total", "locked")


def format_decimal(value: Decimal, decimal_places: int = 4) -> str:
    """Format decimal with a fixed number of decimal places."""
    return f"{value:.{decimal_places}f}"


def write_accounts(accounts: Iterable[ClientAccount], stream: TextIO, decimal_places: int = 4) -> None:
    """Write account rows as CSV, ordered by client id."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(HEADER)
    for account in sorted(accounts, key=lambda a: a.client_id):
        writer.writerow(
            (
                account.client_id,
                format_decimal(account.available, decimal_places),
                format_decimal(account.held, decimal_places),
                format_decimal(account.total, decimal_places),
                str(account.locked).lower(),
            )
        )
