"""
Unit Tests for Monitoring Infrastructure

Tests metrics collection for the database failover layer.
"""

import pytest
from prometheus_client import REGISTRY

from ticketdesk.infrastructure.monitoring.metrics_collector import MetricsCollector, get_metrics_collector


def sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.unit
class TestMetricsCollector:
    """Test suite for MetricsCollector."""

    @pytest.fixture
    def metrics(self):
        return MetricsCollector()

    def test_connection_attempts_are_counted_by_role_and_outcome(self, metrics):
        before = sample("ticketdesk_db_connection_attempts_total", role="primary", outcome="timeout")

        metrics.record_connection_attempt("primary", "timeout")

        after = sample("ticketdesk_db_connection_attempts_total", role="primary", outcome="timeout")
        assert after == before + 1

    def test_switches_are_counted_by_outcome(self, metrics):
        before = sample("ticketdesk_db_switches_total", target="secondary", outcome="noop")

        metrics.record_switch("secondary", "noop")

        assert sample("ticketdesk_db_switches_total", target="secondary", outcome="noop") == before + 1

    def test_connection_state_gauge(self, metrics):
        metrics.set_connection_state(2)

        assert sample("ticketdesk_db_connection_state") == 2.0

    def test_audit_write_failures(self, metrics):
        before = sample("ticketdesk_audit_write_failures_total", action="login")

        metrics.record_audit_write_failure("login")

        assert sample("ticketdesk_audit_write_failures_total", action="login") == before + 1

    def test_prometheus_export(self, metrics):
        metrics.record_probe("primary", "success")

        output = metrics.get_prometheus_metrics()

        assert b"ticketdesk_db_probes_total" in output
        assert metrics.get_content_type().startswith("text/plain")

    def test_global_collector_is_singleton(self):
        assert get_metrics_collector() is get_metrics_collector()
