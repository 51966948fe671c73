"""
Unit Tests for the Failover Orchestrator

Preferred target first, then at most one fallback to the secondary.
"""

import pytest

from ticketdesk.core.config.constants import DatabaseRole, FailoverState
from ticketdesk.core.config.settings import DatabaseSettings
from ticketdesk.core.exceptions import BothTargetsUnavailableError, ConfigurationError, DatabaseConnectionError
from ticketdesk.infrastructure.database.failover import FailoverOrchestrator
from ticketdesk.infrastructure.database.targets import TargetRegistry
from tests.test_fixtures import ScriptedEstablisher

PRIMARY = DatabaseRole.PRIMARY
SECONDARY = DatabaseRole.SECONDARY


@pytest.fixture
def make_orchestrator(registry):
    def _make(outcomes=None, preferred=PRIMARY):
        establisher = ScriptedEstablisher(outcomes=outcomes)
        registry.set_preferred_role(preferred)
        return FailoverOrchestrator(registry, establisher), establisher

    return _make


@pytest.mark.unit
class TestFailoverFromPrimary:
    async def test_primary_success_makes_single_attempt(self, make_orchestrator):
        orchestrator, establisher = make_orchestrator()

        connection = await orchestrator.connect()

        assert connection.role is PRIMARY
        assert establisher.calls == [(PRIMARY, None)]
        assert orchestrator.state is FailoverState.CONNECTED

    async def test_primary_failure_falls_back_to_secondary_once(self, make_orchestrator):
        orchestrator, establisher = make_orchestrator({PRIMARY: "fail"})

        connection = await orchestrator.connect()

        assert connection.role is SECONDARY
        assert [role for role, _ in establisher.calls] == [PRIMARY, SECONDARY]
        assert orchestrator.state is FailoverState.CONNECTED

    async def test_primary_timeout_also_falls_back(self, make_orchestrator):
        orchestrator, establisher = make_orchestrator({PRIMARY: "timeout"})

        connection = await orchestrator.connect()

        assert connection.role is SECONDARY

    async def test_both_failing_raises_with_both_causes(self, make_orchestrator):
        orchestrator, establisher = make_orchestrator({PRIMARY: "fail", SECONDARY: "timeout"})

        with pytest.raises(BothTargetsUnavailableError) as exc_info:
            await orchestrator.connect()

        error = exc_info.value
        assert error.primary_cause.role is PRIMARY
        assert error.secondary_cause.role is SECONDARY
        assert error.secondary_cause.timed_out is True
        assert establisher.count() == 2
        assert orchestrator.state is FailoverState.FAILED

    async def test_failed_request_does_not_poison_the_next_one(self, make_orchestrator):
        orchestrator, establisher = make_orchestrator({PRIMARY: "fail", SECONDARY: "fail"})

        with pytest.raises(BothTargetsUnavailableError):
            await orchestrator.connect()

        establisher.outcomes = {}
        connection = await orchestrator.connect()

        assert connection.role is PRIMARY
        assert establisher.count() == 3


@pytest.mark.unit
class TestFailoverFromSecondary:
    async def test_secondary_failure_never_tries_primary(self, make_orchestrator):
        orchestrator, establisher = make_orchestrator({SECONDARY: "fail"}, preferred=SECONDARY)

        with pytest.raises(BothTargetsUnavailableError) as exc_info:
            await orchestrator.connect()

        assert exc_info.value.primary_cause is None
        assert exc_info.value.secondary_cause.role is SECONDARY
        assert establisher.count(PRIMARY) == 0
        assert establisher.count(SECONDARY) == 1

    async def test_secondary_success(self, make_orchestrator):
        orchestrator, establisher = make_orchestrator(preferred=SECONDARY)

        connection = await orchestrator.connect()

        assert connection.role is SECONDARY


@pytest.mark.unit
class TestFallbackDisabled:
    async def test_preferred_failure_is_final(self, make_orchestrator):
        orchestrator, establisher = make_orchestrator({PRIMARY: "fail"})

        with pytest.raises(DatabaseConnectionError) as exc_info:
            await orchestrator.connect(allow_fallback=False)

        assert not isinstance(exc_info.value, BothTargetsUnavailableError)
        assert exc_info.value.role is PRIMARY
        assert establisher.count() == 1
        assert orchestrator.state is FailoverState.FAILED


@pytest.mark.unit
class TestUnconfiguredTargets:
    async def test_configuration_error_makes_no_attempt(self):
        registry = TargetRegistry(DatabaseSettings(PRIMARY_DB_URI=None, SECONDARY_DB_URI=None))
        establisher = ScriptedEstablisher()
        orchestrator = FailoverOrchestrator(registry, establisher)

        with pytest.raises(ConfigurationError):
            await orchestrator.connect()

        assert establisher.count() == 0
