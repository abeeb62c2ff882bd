"""
Core transaction-application logic.

Applies an ordered stream of transaction records to the account ledger,
retaining deposits and withdrawals so later disputes, resolves and
chargebacks can reference them. Records that fail a guard are dropped
without raising; the caller only sees the returned ApplyOutcome.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable

from account_ledger import AccountLedger
from models import (
    AMOUNT_BEARING_TYPES,
    Account,
    ApplyOutcome,
    RunSummary,
    TransactionRecord,
    TransactionType,
)
from transaction_store import TransactionStore

logger = logging.getLogger(__name__)

Handler = Callable[[Account, TransactionRecord], ApplyOutcome]


class TransactionEngine:
    """Owns the ledger and the transaction store for the duration of a run."""

    def __init__(self) -> None:
        self.ledger = AccountLedger()
        self.store = TransactionStore()
        self._handlers: Dict[TransactionType, Handler] = {
            TransactionType.DEPOSIT: self._handle_deposit,
            TransactionType.WITHDRAWAL: self._handle_withdrawal,
            TransactionType.DISPUTE: self._handle_dispute,
            TransactionType.RESOLVE: self._handle_resolve,
            TransactionType.CHARGEBACK: self._handle_chargeback,
        }

    def process(self, records: Iterable[TransactionRecord]) -> RunSummary:
        """
        Apply every record in arrival order.

        Args:
            records: Decoded records; exceptions raised while iterating
                (e.g. decode failures) propagate to the caller.

        Returns:
            RunSummary with per-outcome counts and final account totals
        """
        summary = RunSummary()
        for record in records:
            summary.record_outcome(self.apply(record))

        summary.accounts_total = len(self.ledger)
        summary.accounts_locked = sum(1 for a in self.ledger.accounts() if a.locked)

        logger.info(
            "Processed %d records: %d applied, %d dropped (%d accounts, %d locked)",
            summary.records_read,
            summary.records_applied,
            summary.total_dropped,
            summary.accounts_total,
            summary.accounts_locked,
        )
        return summary

    def apply(self, record: TransactionRecord) -> ApplyOutcome:
        """Apply a single record and report what happened to it."""
        if record.transaction_type in AMOUNT_BEARING_TYPES and record.amount is None:
            logger.debug("Dropping %r: no amount given", record)
            return ApplyOutcome.MISSING_AMOUNT
        if record.transaction_type in AMOUNT_BEARING_TYPES and record.amount < 0:
            logger.debug("Dropping %r: negative amount", record)
            return ApplyOutcome.NEGATIVE_AMOUNT

        account = self.ledger.get(record.client)
        if account is None:
            # A new account only comes into existence through a deposit.
            if record.transaction_type is not TransactionType.DEPOSIT:
                logger.debug("Dropping %r: client has no account", record)
                return ApplyOutcome.UNKNOWN_CLIENT
            self.ledger.initialize(record.client, record.amount)
            self.store.insert(record)
            return ApplyOutcome.APPLIED

        self.store.insert(record)

        if account.locked:
            logger.debug("Dropping %r: account is locked", record)
            return ApplyOutcome.ACCOUNT_LOCKED

        return self._handlers[record.transaction_type](account, record)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------
    def _handle_deposit(self, account: Account, record: TransactionRecord) -> ApplyOutcome:
        self.ledger.deposit(account, record.amount)
        return ApplyOutcome.APPLIED

    def _handle_withdrawal(self, account: Account, record: TransactionRecord) -> ApplyOutcome:
        if not self.ledger.withdraw(account, record.amount):
            logger.debug(
                "Dropping %r: insufficient funds (available %s)", record, account.available
            )
            return ApplyOutcome.INSUFFICIENT_FUNDS
        return ApplyOutcome.APPLIED

    def _handle_dispute(self, account: Account, record: TransactionRecord) -> ApplyOutcome:
        referenced = self.store.get(record.tx)
        if referenced is None:
            logger.debug("Dropping %r: referenced transaction not found", record)
            return ApplyOutcome.UNKNOWN_TRANSACTION

        referenced.disputed = True
        self.ledger.dispute(account, referenced.amount)
        return ApplyOutcome.APPLIED

    def _handle_resolve(self, account: Account, record: TransactionRecord) -> ApplyOutcome:
        referenced = self.store.get(record.tx)
        if referenced is None:
            logger.debug("Dropping %r: referenced transaction not found", record)
            return ApplyOutcome.UNKNOWN_TRANSACTION
        if not referenced.disputed:
            logger.debug("Dropping %r: transaction is not under dispute", record)
            return ApplyOutcome.NOT_DISPUTED

        self.ledger.resolve(account, referenced.amount)
        referenced.disputed = False
        return ApplyOutcome.APPLIED

    def _handle_chargeback(self, account: Account, record: TransactionRecord) -> ApplyOutcome:
        referenced = self.store.get(record.tx)
        if referenced is None:
            logger.debug("Dropping %r: referenced transaction not found", record)
            return ApplyOutcome.UNKNOWN_TRANSACTION
        if not referenced.disputed:
            logger.debug("Dropping %r: transaction is not under dispute", record)
            return ApplyOutcome.NOT_DISPUTED

        self.ledger.chargeback(account, referenced.amount)
        referenced.disputed = False
        return ApplyOutcome.APPLIED
