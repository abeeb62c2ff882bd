"""
In-memory store of deposits and withdrawals, indexed by transaction id.

Dispute, resolve and chargeback records reference entries here but are never
stored themselves.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from models import AMOUNT_BEARING_TYPES, TransactionRecord

logger = logging.getLogger(__name__)


class TransactionStore:
    """Holds retained records so their dispute flag can be flipped later."""

    def __init__(self) -> None:
        self._records: Dict[int, TransactionRecord] = {}

    def insert(self, record: TransactionRecord) -> None:
        """Retain a deposit or withdrawal; any other kind is ignored."""
        if record.transaction_type not in AMOUNT_BEARING_TYPES:
            return
        if record.tx in self._records:
            logger.debug("Transaction id %s seen again; keeping the latest record", record.tx)
        self._records[record.tx] = record

    def contains(self, tx: int) -> bool:
        return tx in self._records

    def get(self, tx: int) -> Optional[TransactionRecord]:
        """Return the retained record itself, not a copy."""
        return self._records.get(tx)

    def __contains__(self, tx: int) -> bool:
        return self.contains(tx)

    def __len__(self) -> int:
        return len(self._records)
