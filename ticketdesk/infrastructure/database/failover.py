"""
Failover Orchestrator

STAGE-DB.3: Preferred target first, then exactly one fallback.

State machine for a single connection request:

    disconnected -> connecting_preferred -> connected
                                         -> connecting_fallback -> connected
                                                                -> failed
                                         -> failed

Only a request that starts on the primary may fall back (to the secondary).
A request that starts on the secondary has already used the only fallback
there is. ``failed`` is terminal for that request only; every call to
``connect`` starts again from ``disconnected`` with a fresh two-attempt budget.
"""

from ticketdesk.core.config.constants import DatabaseRole, FailoverState, Stage
from ticketdesk.core.exceptions import BothTargetsUnavailableError, DatabaseConnectionError
from ticketdesk.core.logging.logger import get_logger
from ticketdesk.infrastructure.database.establisher import ConnectionEstablisher, DatabaseConnection
from ticketdesk.infrastructure.database.targets import TargetRegistry
from ticketdesk.infrastructure.monitoring.metrics_collector import get_metrics_collector

logger = get_logger(__name__)


class FailoverOrchestrator:
    """
    Runs one connection request against the registry's targets.

    The orchestrator does not cache anything; the connection manager decides
    when a request is needed and makes sure only one runs at a time.
    """

    def __init__(self, registry: TargetRegistry, establisher: ConnectionEstablisher):
        self.registry = registry
        self.establisher = establisher
        self._state = FailoverState.DISCONNECTED

    @property
    def state(self) -> FailoverState:
        """State of the most recent request."""
        return self._state

    async def connect(self, allow_fallback: bool = True) -> DatabaseConnection:
        """
        Connect to the preferred target, falling back once if allowed.

        Args:
            allow_fallback: When False, a failure on the preferred target is
                final and its DatabaseConnectionError is re-raised as is.

        Raises:
            ConfigurationError: If the targets cannot be resolved
            DatabaseConnectionError: Preferred target failed, fallback disabled
            BothTargetsUnavailableError: Every permitted attempt failed
        """
        self._state = FailoverState.DISCONNECTED
        targets = self.registry.resolve_targets()
        preferred = self.registry.preferred_role()

        self._state = FailoverState.CONNECTING_PREFERRED
        try:
            connection = await self.establisher.establish(targets[preferred])
        except DatabaseConnectionError as preferred_error:
            if not allow_fallback:
                self._state = FailoverState.FAILED
                raise

            if preferred is DatabaseRole.SECONDARY:
                self._state = FailoverState.FAILED
                logger.error(
                    "Secondary database failed with no fallback remaining",
                    stage=Stage.DB_FAILOVER,
                    error=preferred_error.message,
                )
                raise BothTargetsUnavailableError(None, preferred_error) from preferred_error

            connection = await self._connect_fallback(targets[DatabaseRole.SECONDARY], preferred_error)

        self._state = FailoverState.CONNECTED
        return connection

    async def _connect_fallback(self, target, primary_error: DatabaseConnectionError) -> DatabaseConnection:
        metrics = get_metrics_collector()
        self._state = FailoverState.CONNECTING_FALLBACK
        logger.warning(
            "Primary database failed, attempting fallback to secondary",
            stage=Stage.DB_FAILOVER,
            error=primary_error.message,
        )

        try:
            connection = await self.establisher.establish(target)
        except DatabaseConnectionError as secondary_error:
            self._state = FailoverState.FAILED
            metrics.record_failover("failed")
            logger.error(
                "Both primary and secondary database connections failed",
                stage=Stage.DB_FAILOVER,
                primary_error=primary_error.message,
                secondary_error=secondary_error.message,
            )
            raise BothTargetsUnavailableError(primary_error, secondary_error) from secondary_error

        metrics.record_failover("success")
        logger.info("Connected to secondary database after failover", stage=Stage.DB_FAILOVER)
        return connection
