"""
models.py

Defines the core data models for the transaction ledger engine.
Models are built using Pydantic for validation at the input boundary and for
JSON serialization of run summaries. Monetary values are always Decimal.
"""

from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


# -----------------------------------------------------------------------------
# 1. System Configuration Model
# -----------------------------------------------------------------------------
class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables or .env files.

    Nothing here changes how transactions are applied; it only controls
    logging, input chunking, and the optional run summary and metrics outputs.
    """

    LOG_LEVEL: str = Field(default="WARNING", description="Logging level")
    LOG_FORMAT: str = Field(
        default="console", description="Log renderer: 'console' or 'json'"
    )
    READ_CHUNK_SIZE: int = Field(
        default=10_000, gt=0, description="Rows decoded per CSV chunk"
    )
    RUN_SUMMARY_PATH: Optional[Path] = Field(
        None, description="Where to write the JSON run summary (disabled if unset)"
    )
    METRICS_PORT: Optional[int] = Field(
        None, description="Port for the Prometheus metrics endpoint (disabled if unset)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# -----------------------------------------------------------------------------
# 2. Transaction Models
# -----------------------------------------------------------------------------
class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


# Kinds that carry an amount and are retained for later dispute lookups.
AMOUNT_BEARING_TYPES = frozenset({TransactionType.DEPOSIT, TransactionType.WITHDRAWAL})


class TransactionRecord(BaseModel):
    """
    A single decoded input row.

    Dispute, resolve and chargeback rows reference an earlier deposit or
    withdrawal through ``tx``; their own ``amount`` is ignored. ``disputed`` is
    engine state and is never read from the input.
    """

    transaction_type: TransactionType = Field(..., description="Kind of transaction")
    client: int = Field(..., ge=0, le=MAX_CLIENT_ID, description="Client identifier")
    tx: int = Field(..., ge=0, le=MAX_TRANSACTION_ID, description="Transaction identifier")
    amount: Optional[Decimal] = Field(
        None, description="Amount for deposits and withdrawals"
    )
    disputed: bool = Field(default=False, description="Currently under dispute")

    def __repr__(self) -> str:
        return (
            f"TransactionRecord({self.transaction_type.value}, client={self.client}, "
            f"tx={self.tx}, amount={self.amount})"
        )


# -----------------------------------------------------------------------------
# 3. Account Model
# -----------------------------------------------------------------------------
class Account(BaseModel):
    """
    Per-client balance state.

    ``total`` is tracked explicitly rather than derived so that the ledger
    mutators stay one-to-one with the balance rules; between transactions it
    always equals ``available + held``.
    """

    client: int = Field(..., ge=0, le=MAX_CLIENT_ID, description="Client identifier")
    available: Decimal = Field(default=Decimal("0"), description="Funds free to use")
    held: Decimal = Field(default=Decimal("0"), description="Funds under dispute")
    total: Decimal = Field(default=Decimal("0"), description="available + held")
    locked: bool = Field(default=False, description="Frozen after a chargeback")


# -----------------------------------------------------------------------------
# 4. Processing Outcome Models
# -----------------------------------------------------------------------------
class ApplyOutcome(str, Enum):
    """Verdict for a single record. Everything except APPLIED is a silent drop."""

    APPLIED = "applied"
    UNKNOWN_CLIENT = "unknown_client"
    ACCOUNT_LOCKED = "account_locked"
    MISSING_AMOUNT = "missing_amount"
    NEGATIVE_AMOUNT = "negative_amount"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    NOT_DISPUTED = "not_disputed"
    INSUFFICIENT_FUNDS = "insufficient_funds"


class RunSummary(BaseModel):
    """
    Tally of a processing run.

    Used for the optional JSON summary report and the Prometheus metrics.
    """

    records_read: int = Field(default=0, description="Records handed to the engine")
    records_applied: int = Field(default=0, description="Records that mutated state")
    records_dropped: Dict[str, int] = Field(
        default_factory=dict, description="Dropped record counts keyed by outcome"
    )
    accounts_total: int = Field(default=0, description="Accounts in the ledger")
    accounts_locked: int = Field(default=0, description="Locked accounts in the ledger")

    def record_outcome(self, outcome: ApplyOutcome) -> None:
        self.records_read += 1
        if outcome is ApplyOutcome.APPLIED:
            self.records_applied += 1
        else:
            self.records_dropped[outcome.value] = (
                self.records_dropped.get(outcome.value, 0) + 1
            )

    @property
    def total_dropped(self) -> int:
        return sum(self.records_dropped.values())
