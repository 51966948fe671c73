#!/usr/bin/env python3
"""
Metrics Collector with Prometheus Integration

Prometheus metrics for the database failover layer and the request path:
- Establishment attempts by target role and outcome
- Failovers and runtime switches
- Connectivity probes
- Audit write failures
- Error counts by type

Architectural Decision: prometheus-client for industry-standard metrics
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Info,
    generate_latest,
)

from ticketdesk.core.config.settings import get_settings
from ticketdesk.core.logging.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Metric Definitions
# ============================================================================

DB_CONNECTION_ATTEMPTS = Counter(
    'ticketdesk_db_connection_attempts_total',
    'Database connection establishment attempts',
    ['role', 'outcome']  # success, failure, timeout
)

DB_FAILOVERS = Counter(
    'ticketdesk_db_failovers_total',
    'Automatic failovers from the preferred target to the secondary',
    ['outcome']
)

DB_SWITCHES = Counter(
    'ticketdesk_db_switches_total',
    'Runtime database switches',
    ['target', 'outcome']  # noop, success, failed
)

DB_PROBES = Counter(
    'ticketdesk_db_probes_total',
    'Database connectivity probes',
    ['role', 'outcome']
)

DB_CONNECTION_STATE = Gauge(
    'ticketdesk_db_connection_state',
    'Raw connection state (0=disconnected, 1=connected, 2=connecting, 3=disconnecting)'
)

AUDIT_WRITE_FAILURES = Counter(
    'ticketdesk_audit_write_failures_total',
    'Audit records that could not be persisted',
    ['action']
)

ERRORS = Counter(
    'ticketdesk_errors_total',
    'Total errors by type',
    ['error_type', 'stage']
)

APP_INFO = Info(
    'ticketdesk_app',
    'Application information'
)


class MetricsCollector:
    """
    Centralized metrics collector.

    STAGE-M: Metrics collection

    Usage:
        metrics = get_metrics_collector()
        metrics.record_connection_attempt("primary", "failure")
        output = metrics.get_prometheus_metrics()
    """

    def __init__(self):
        self.settings = get_settings()

        APP_INFO.info({
            'version': self.settings.app.APP_VERSION,
            'environment': self.settings.app.ENVIRONMENT,
            'app_name': self.settings.app.APP_NAME
        })

        logger.info("Metrics collector initialized", stage="M.0")

    # =========================================================================
    # Database Metrics
    # =========================================================================

    def record_connection_attempt(self, role: str, outcome: str) -> None:
        DB_CONNECTION_ATTEMPTS.labels(role=role, outcome=outcome).inc()

    def record_failover(self, outcome: str) -> None:
        DB_FAILOVERS.labels(outcome=outcome).inc()

    def record_switch(self, target: str, outcome: str) -> None:
        DB_SWITCHES.labels(target=target, outcome=outcome).inc()

    def record_probe(self, role: str, outcome: str) -> None:
        DB_PROBES.labels(role=role, outcome=outcome).inc()

    def set_connection_state(self, state: int) -> None:
        DB_CONNECTION_STATE.set(state)

    # =========================================================================
    # Audit and Error Metrics
    # =========================================================================

    def record_audit_write_failure(self, action: str) -> None:
        AUDIT_WRITE_FAILURES.labels(action=action).inc()

    def record_error(self, error_type: str, stage: str) -> None:
        ERRORS.labels(error_type=error_type, stage=stage).inc()

    # =========================================================================
    # Export
    # =========================================================================

    def get_prometheus_metrics(self) -> bytes:
        """Get Prometheus metrics output in text format."""
        return generate_latest(REGISTRY)

    def get_content_type(self) -> str:
        return CONTENT_TYPE_LATEST


# Global metrics collector
_metrics: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
