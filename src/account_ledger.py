"""
Client account ledger: balance mutation rules and the final CSV report.

The mutators take the Account to change rather than a client id; looking the
account up (and deciding whether the mutation is allowed at all) is the
transaction engine's job.
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal, localcontext
from typing import Dict, Iterator, Optional

import pandas as pd

from models import Account

REPORT_COLUMNS = ["client", "available", "held", "total", "locked"]
REPORT_PRECISION = Decimal("0.0001")


def format_amount(value: Decimal) -> str:
    """Render an amount with exactly four fractional digits, however large it is."""
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the four decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 6)
        return f"{value.quantize(REPORT_PRECISION, rounding=ROUND_HALF_EVEN):f}"


class AccountLedger:
    """Maps client id to Account; rows are reported in account creation order."""

    def __init__(self) -> None:
        self._accounts: Dict[int, Account] = {}

    def contains(self, client: int) -> bool:
        return client in self._accounts

    def get(self, client: int) -> Optional[Account]:
        return self._accounts.get(client)

    def accounts(self) -> Iterator[Account]:
        return iter(self._accounts.values())

    def __contains__(self, client: int) -> bool:
        return self.contains(client)

    def __len__(self) -> int:
        return len(self._accounts)

    def initialize(self, client: int, initial_deposit: Decimal) -> Account:
        """Open a new account funded by its first deposit."""
        if client in self._accounts:
            raise ValueError(f"Account for client {client} already exists")
        account = Account(
            client=client,
            available=initial_deposit,
            held=Decimal("0"),
            total=initial_deposit,
            locked=False,
        )
        self._accounts[client] = account
        return account

    # ------------------------------------------------------------------
    # Balance mutators
    # ------------------------------------------------------------------
    @staticmethod
    def deposit(account: Account, amount: Decimal) -> None:
        account.available += amount
        account.total += amount

    @staticmethod
    def withdraw(account: Account, amount: Decimal) -> bool:
        """Debit available funds. Returns False, changing nothing, if they are insufficient."""
        if account.available < amount:
            return False
        account.available -= amount
        account.total -= amount
        return True

    @staticmethod
    def dispute(account: Account, amount: Decimal) -> None:
        # available may go negative if the disputed funds were already withdrawn
        account.available -= amount
        account.held += amount

    @staticmethod
    def resolve(account: Account, amount: Decimal) -> None:
        account.held -= amount
        account.available += amount

    @staticmethod
    def chargeback(account: Account, amount: Decimal) -> None:
        account.held -= amount
        account.total -= amount
        account.locked = True

    # ------------------------------------------------------------------
    # Report
    # ------------------------------------------------------------------
    def serialize(self) -> str:
        """
        Render the ledger as CSV text.

        Header ``client,available,held,total,locked`` followed by one row per
        account, every line newline-terminated. An empty ledger yields the
        header only.
        """
        rows = [
            {
                "client": account.client,
                "available": format_amount(account.available),
                "held": format_amount(account.held),
                "total": format_amount(account.total),
                "locked": "true" if account.locked else "false",
            }
            for account in self._accounts.values()
        ]
        frame = pd.DataFrame(rows, columns=REPORT_COLUMNS)
        return frame.to_csv(index=False, lineterminator="\n")
