from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import pandas as pd
from pydantic import ValidationError

from models import AMOUNT_BEARING_TYPES, TransactionRecord

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_BEARING_VALUES = frozenset(t.value for t in AMOUNT_BEARING_TYPES)


class TransactionDecodeError(ValueError):
    """Raised when the input file cannot be decoded into transaction records."""

    def __init__(self, message: str, row: Optional[int] = None) -> None:
        self.row = row
        if row is not None:
            message = f"row {row}: {message}"
        super().__init__(message)


def _clean(value: Any) -> Optional[str]:
    """Normalize a raw CSV cell: strip whitespace, map empty/missing to None."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    text = str(value).strip()
    return text or None


class TransactionReader:
    """
    Streams transaction records from a CSV file with header ``type,client,tx,amount``.

    The file is read in chunks through pandas so large inputs never sit in
    memory at once. Every cell is read as text and validated by the
    TransactionRecord model; the first invalid row aborts the stream with a
    TransactionDecodeError.
    """

    def __init__(self, path: Path, chunk_size: int = 10_000) -> None:
        self.path = Path(path)
        self.chunk_size = chunk_size

    def read_records(self) -> Iterator[TransactionRecord]:
        """Yield records in file order. Raises OSError if the file cannot be opened."""
        row_number = 0
        try:
            with pd.read_csv(
                self.path,
                dtype=str,
                keep_default_na=False,
                skipinitialspace=True,
                chunksize=self.chunk_size,
            ) as chunks:
                for chunk in chunks:
                    chunk.columns = [str(c).strip().lower() for c in chunk.columns]
                    self._check_columns(chunk.columns)
                    for row in chunk.to_dict("records"):
                        row_number += 1
                        yield self.parse_row(row, row_number)
        except pd.errors.EmptyDataError as exc:
            raise TransactionDecodeError(f"{self.path} is empty: {exc}") from exc
        except pd.errors.ParserError as exc:
            raise TransactionDecodeError(f"malformed CSV: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise TransactionDecodeError(f"not valid text: {exc}") from exc

        logger.info("Read %d records from %s", row_number, self.path)

    @staticmethod
    def _check_columns(columns: Any) -> None:
        missing = [name for name in REQUIRED_COLUMNS if name not in columns]
        if missing:
            raise TransactionDecodeError(f"missing required column(s): {', '.join(missing)}")

    @staticmethod
    def parse_row(row: Dict[str, Any], row_number: int) -> TransactionRecord:
        """Validate one raw row. Amounts on dispute-lifecycle rows are discarded."""
        raw_type = _clean(row.get("type"))
        amount = _clean(row.get("amount"))

        transaction_type: Any = raw_type.lower() if raw_type else raw_type
        if transaction_type not in AMOUNT_BEARING_VALUES:
            amount = None

        try:
            return TransactionRecord(
                transaction_type=transaction_type,
                client=_clean(row.get("client")),
                tx=_clean(row.get("tx")),
                amount=amount,
            )
        except ValidationError as exc:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise TransactionDecodeError(errors, row_number) from exc
