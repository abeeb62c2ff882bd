"""
Prometheus metrics for the transaction ledger engine.
Tracks run health and per-record outcomes for monitoring batch runs.
"""

from prometheus_client import Counter, Histogram, Gauge, start_http_server
import logging

from models import RunSummary

logger = logging.getLogger(__name__)

# Business Metrics
RECORDS_PROCESSED_TOTAL = Counter(
    'ledger_records_processed_total',
    'Total transaction records processed',
    ['outcome']
)

ACCOUNTS = Gauge(
    'ledger_accounts',
    'Accounts in the ledger at the end of the last run',
    ['state']
)

# Technical Metrics
RUNS_TOTAL = Counter(
    'ledger_runs_total',
    'Total number of processing runs',
    ['status']
)

RUN_DURATION_SECONDS = Histogram(
    'ledger_run_duration_seconds',
    'Time spent processing an input file',
    buckets=[0.1, 0.5, 1, 5, 10, 30, 60, 300]
)


class MetricsCollector:
    """Centralized metrics collection for the ledger engine."""

    def __init__(self, port: int = 8000):
        self.port = port
        self.server_started = False

    def start_metrics_server(self, port: int = None) -> bool:
        """Start the Prometheus metrics server. Failures are logged, never raised."""
        if port is not None:
            self.port = port
        if not self.server_started:
            try:
                if not (8000 <= self.port <= 9999):
                    raise ValueError(f"Invalid port {self.port}. Must be between 8000-9999")

                start_http_server(self.port)
                self.server_started = True
                logger.info("Metrics server started on port %d", self.port)
            except (OSError, ValueError) as e:
                logger.error("Failed to start metrics server: %s", e)
        return self.server_started

    def record_run(self, status: str, duration: float):
        """Record processing run metrics."""
        RUNS_TOTAL.labels(status=status).inc()
        RUN_DURATION_SECONDS.observe(duration)

    def record_run_summary(self, summary: RunSummary):
        """Record per-outcome record counts and final account state."""
        if summary.records_applied:
            RECORDS_PROCESSED_TOTAL.labels(outcome='applied').inc(summary.records_applied)
        for outcome, count in summary.records_dropped.items():
            RECORDS_PROCESSED_TOTAL.labels(outcome=outcome).inc(count)

        ACCOUNTS.labels(state='open').set(summary.accounts_total - summary.accounts_locked)
        ACCOUNTS.labels(state='locked').set(summary.accounts_locked)


# Global metrics collector instance
metrics = MetricsCollector()
