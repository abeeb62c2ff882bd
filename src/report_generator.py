"""
Account reporting module: the CSV ledger report and the JSON run summary.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, TextIO

import structlog

from account_ledger import AccountLedger
from models import RunSummary

logger = structlog.get_logger()


class ReportGenerator:
    """Writes the final ledger state and, on request, a summary of the run."""

    def write_report(self, ledger: AccountLedger, sink: TextIO) -> None:
        """Write the CSV account report to ``sink`` (normally stdout)."""
        sink.write(ledger.serialize())
        sink.flush()
        logger.info("Wrote account report", accounts=len(ledger))

    def write_run_summary(
        self, summary: RunSummary, output_path: Path, input_path: Optional[Path] = None
    ) -> Path:
        """Write the run summary as JSON, creating parent directories as needed."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        report_data = {
            "input": str(input_path) if input_path is not None else None,
            "run_summary": summary.model_dump(mode="json"),
            "drop_rate": self._drop_rate(summary),
        }

        with open(output_path, "w") as f:
            json.dump(report_data, f, indent=2, default=str)

        logger.info("Wrote run summary", path=str(output_path))
        return output_path

    @staticmethod
    def _drop_rate(summary: RunSummary) -> float:
        if summary.records_read == 0:
            return 0.0
        return summary.total_dropped / summary.records_read
