"""
Transaction Ledger Engine - Main Entry Point

Reads a CSV file of client transactions, applies them to an in-memory ledger,
and prints the final account states as CSV on stdout.
Handles CLI arguments, logging setup, and coordinates service components.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, TextIO

import structlog
from dotenv import load_dotenv
from pydantic import ValidationError

from metrics import metrics
from models import Settings
from report_generator import ReportGenerator
from transaction_engine import TransactionEngine
from transaction_reader import TransactionDecodeError, TransactionReader


load_dotenv()


logger = structlog.get_logger()


class TransactionProcessingSystem:
    """
    Coordinates a single processing run.

    This class wires the pieces of a run together:
    - TransactionReader streams validated records from the input CSV
    - TransactionEngine applies them to a fresh ledger
    - ReportGenerator writes the account report and optional run summary
    - MetricsCollector records run status and record outcomes

    Input and output failures are reported as a failed run rather than
    raised, so the caller only has to map the result to an exit status.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.report_generator = ReportGenerator()

    def _process_file(self, input_path: Path, output: TextIO) -> bool:
        """Execute the processing workflow for one input file."""
        logger.info("Starting transaction processing", input=str(input_path))

        engine = TransactionEngine()
        reader = TransactionReader(input_path, chunk_size=self.settings.READ_CHUNK_SIZE)

        try:
            summary = engine.process(reader.read_records())
        except TransactionDecodeError as e:
            logger.error("Failed to decode input file", input=str(input_path), error=str(e))
            return False
        except OSError as e:
            logger.error("Could not read input file", input=str(input_path), error=str(e))
            return False

        try:
            self.report_generator.write_report(engine.ledger, output)
        except OSError as e:
            logger.error("Failed to write account report", error=str(e))
            return False

        metrics.record_run_summary(summary)

        if self.settings.RUN_SUMMARY_PATH is not None:
            try:
                self.report_generator.write_run_summary(
                    summary, self.settings.RUN_SUMMARY_PATH, input_path=input_path
                )
            except OSError as e:
                logger.warning(
                    "Could not write run summary",
                    path=str(self.settings.RUN_SUMMARY_PATH),
                    error=str(e),
                )

        logger.info(
            "Transaction processing complete",
            records=summary.records_read,
            applied=summary.records_applied,
            dropped=summary.total_dropped,
            accounts=summary.accounts_total,
        )
        return True

    def run(self, input_path: Path, output: Optional[TextIO] = None) -> int:
        """
        Process ``input_path`` and write the report to ``output``.

        Args:
            input_path: CSV file with header ``type,client,tx,amount``
            output: Report sink; defaults to stdout

        Returns:
            Process exit status: 0 on success, 1 on any input/output failure
        """
        start_time = time.perf_counter()
        success = self._process_file(Path(input_path), output or sys.stdout)
        metrics.record_run("success" if success else "failed", time.perf_counter() - start_time)
        return 0 if success else 1


def setup_logging(level: str = "WARNING", fmt: str = "console") -> None:
    """
    Configure structured logging on stderr.

    stdout is reserved for the account report, so every log line, including
    error diagnostics, goes to stderr. ``fmt`` selects JSON output for log
    aggregation or a plain console renderer for interactive use.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if fmt.lower() == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.WARNING),
        stream=sys.stderr,
        force=True,
    )


def main(argv: Optional[List[str]] = None) -> int:
    try:
        settings = Settings()
    except ValidationError as e:
        setup_logging()
        logger.error("Failed to load environment settings. Check your .env file.", error=str(e))
        return 1

    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    parser = argparse.ArgumentParser(
        description="Apply a CSV file of client transactions and print the resulting accounts.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py transactions.csv > accounts.csv
  LOG_LEVEL=DEBUG python main.py transactions.csv
        """,
    )
    parser.add_argument(
        "input",
        type=Path,
        help="CSV file with header: type,client,tx,amount",
    )
    args = parser.parse_args(argv)

    if settings.METRICS_PORT is not None:
        metrics.start_metrics_server(settings.METRICS_PORT)

    system = TransactionProcessingSystem(settings)
    return system.run(args.input)


if __name__ == "__main__":
    sys.exit(main())
