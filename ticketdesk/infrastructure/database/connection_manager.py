"""
Database Connection Manager

Owns the single process-wide database connection.

STAGE-DB.4: Connection cache
STAGE-DB.5: Runtime switch
STAGE-DB.6: Connectivity probe
STAGE-DB.7: Disconnect

Concurrency model:
- All work happens on one event loop; there are no worker threads.
- At most one establishment task exists at a time (``_pending``). Every
  caller that needs a connection while it runs awaits that same task and
  receives its outcome, success or failure.
- Waiters await the task through ``asyncio.shield`` so a cancelled caller
  never cancels the shared attempt.
- Switches are serialised by a lock and wait until no attempt is in flight
  before tearing anything down.
- Switch audit events are written only through the live connection; an
  audit write never establishes one.
- Probes use the establisher directly on a throwaway client and never touch
  the cached connection or the active role.

Only this class mutates the cached connection and the active role. Request
handlers receive a DatabaseConnection handle and read/write through it.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

from ticketdesk.core.config.constants import (
    CONNECTION_STATE_LABELS,
    NO_ACTIVE_ROLE,
    AuditAction,
    ConnectionState,
    DatabaseRole,
    Stage,
    SwitchOutcome,
)
from ticketdesk.core.config.settings import Settings, get_settings
from ticketdesk.core.exceptions import DatabaseError, TicketDeskError
from ticketdesk.core.logging.logger import get_logger
from ticketdesk.infrastructure.database.establisher import ConnectionEstablisher, DatabaseConnection
from ticketdesk.infrastructure.database.failover import FailoverOrchestrator
from ticketdesk.infrastructure.database.targets import TargetRegistry
from ticketdesk.infrastructure.monitoring.metrics_collector import get_metrics_collector

logger = get_logger(__name__)


class AuditRecorder(Protocol):
    async def record_event(
        self,
        actor: str,
        action: AuditAction,
        details: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
        context: dict[str, Any] | None = None,
        connect: bool = True,
    ) -> None: ...


@dataclass
class ConnectionStatus:
    """Read-only snapshot of the connection manager."""

    connected: bool
    active_role: DatabaseRole | None
    state: ConnectionState
    preferred_role: DatabaseRole

    @property
    def current_database(self) -> str:
        return self.active_role.value if self.active_role else NO_ACTIVE_ROLE

    def to_response(self) -> dict[str, Any]:
        return {
            "isConnected": self.connected,
            "currentDatabase": self.current_database,
            "connectionState": int(self.state),
            "connectionStates": dict(CONNECTION_STATE_LABELS),
        }


@dataclass
class ProbeResult:
    role: DatabaseRole
    success: bool
    error_message: str | None = None

    def to_response(self) -> dict[str, Any]:
        response: dict[str, Any] = {"success": self.success, "database": self.role.value}
        if self.error_message is not None:
            response["error"] = self.error_message
        return response


@dataclass
class SwitchResult:
    switched: bool
    message: str
    status: ConnectionStatus


class DatabaseConnectionManager:
    """
    Connection cache plus the runtime switch and probe operations.

    Usage:
        manager = DatabaseConnectionManager.from_settings(get_settings())
        connection = await manager.get_connection()
        tickets = connection.database["tickets"]

        result = await manager.switch_to(DatabaseRole.SECONDARY, actor=user_id)
    """

    def __init__(
        self,
        registry: TargetRegistry,
        establisher: ConnectionEstablisher,
        probe_timeout: float = 5.0,
        audit_recorder: AuditRecorder | None = None,
    ):
        self.registry = registry
        self.establisher = establisher
        self.orchestrator = FailoverOrchestrator(registry, establisher)
        self.probe_timeout = probe_timeout
        self.audit_recorder = audit_recorder

        self._connection: DatabaseConnection | None = None
        self._pending: asyncio.Task | None = None
        self._state = ConnectionState.DISCONNECTED
        self._switch_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "DatabaseConnectionManager":
        database_settings = settings.database
        return cls(
            registry=TargetRegistry(database_settings),
            establisher=ConnectionEstablisher.from_settings(database_settings),
            probe_timeout=database_settings.DB_PROBE_TIMEOUT,
            **kwargs,
        )

    @property
    def active_role(self) -> DatabaseRole | None:
        return self._connection.role if self._connection else None

    @property
    def state(self) -> ConnectionState:
        return self._state

    # =========================================================================
    # Connection cache
    # =========================================================================

    async def get_connection(self) -> DatabaseConnection:
        """
        Return the live connection, establishing it if needed.

        Concurrent callers share one establishment attempt.

        Raises:
            ConfigurationError: If the targets are not configured
            BothTargetsUnavailableError: If every permitted attempt failed
        """
        if self._connection is not None:
            return self._connection

        if self._pending is None:
            logger.debug("Starting database connection attempt", stage=Stage.DB_CACHE)
            self._pending = asyncio.create_task(self._establish(allow_fallback=True))
        else:
            logger.debug("Joining in-flight database connection attempt", stage=Stage.DB_CACHE)

        return await asyncio.shield(self._pending)

    def live_connection(self) -> DatabaseConnection:
        """
        Return the cached connection without establishing one.

        Raises:
            DatabaseError: If no connection is currently cached
        """
        if self._connection is None:
            raise DatabaseError("No live database connection")
        return self._connection

    async def disconnect(self) -> None:
        """Close the live connection, if any. The next access re-establishes."""
        await self._wait_for_pending()
        await self._teardown()

    async def _establish(self, allow_fallback: bool) -> DatabaseConnection:
        task = asyncio.current_task()
        self._set_state(ConnectionState.CONNECTING)
        try:
            connection = await self.orchestrator.connect(allow_fallback=allow_fallback)
        except BaseException:
            self._set_state(ConnectionState.DISCONNECTED)
            raise
        finally:
            if self._pending is task:
                self._pending = None

        replaced = self._connection
        if replaced is not None and replaced is not connection:
            self.establisher.close(replaced)
        self._connection = connection
        self._set_state(ConnectionState.CONNECTED)
        logger.info(
            "Database connection cached",
            stage=Stage.DB_CACHE,
            active_role=connection.role.value,
        )
        return connection

    async def _wait_for_pending(self) -> None:
        # Each outcome goes to its own waiters; a waiter woken by a failure
        # may start the next attempt before we resume
        while self._pending is not None:
            await asyncio.wait([self._pending])

    async def _teardown(self) -> None:
        connection = self._connection
        if connection is None:
            return

        self._set_state(ConnectionState.DISCONNECTING)
        self._connection = None
        self.establisher.close(connection)
        self._set_state(ConnectionState.DISCONNECTED)
        logger.info(
            "Disconnected from database",
            stage=Stage.DB_DISCONNECT,
            role=connection.role.value,
        )

    def _set_state(self, state: ConnectionState) -> None:
        self._state = state
        get_metrics_collector().set_connection_state(int(state))

    # =========================================================================
    # Status, probe and switch
    # =========================================================================

    def status(self) -> ConnectionStatus:
        return ConnectionStatus(
            connected=self._state is ConnectionState.CONNECTED and self._connection is not None,
            active_role=self.active_role,
            state=self._state,
            preferred_role=self.registry.preferred_role(),
        )

    async def probe(self, role: DatabaseRole) -> ProbeResult:
        """
        Test connectivity to ``role`` on a throwaway client.

        Never raises for connection or configuration problems; they are
        reported through ``ProbeResult.error_message``.
        """
        metrics = get_metrics_collector()
        logger.info(f"Testing {role.value} database connection", stage=Stage.DB_PROBE, role=role.value)

        try:
            target = self.registry.target_for(role)
            connection = await self.establisher.establish(target, timeout=self.probe_timeout)
        except TicketDeskError as e:
            metrics.record_probe(role.value, "failure")
            logger.warning(
                f"Probe of {role.value} database failed",
                stage=Stage.DB_PROBE,
                role=role.value,
                error=e.message,
            )
            return ProbeResult(role=role, success=False, error_message=e.message)

        self.establisher.close(connection)
        metrics.record_probe(role.value, "success")
        return ProbeResult(role=role, success=True)

    async def switch_to(
        self,
        role: DatabaseRole,
        actor: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> SwitchResult:
        """
        Make ``role`` the active database.

        A switch never falls back to the other target. If the requested
        target cannot be reached the manager is left disconnected and the
        error is re-raised. Every call produces exactly one audit event,
        written only through the live connection: a failed switch's event
        is logged and dropped rather than reconnecting to store it.

        Raises:
            ConfigurationError: If the targets are not configured
            DatabaseConnectionError: If the requested target is unreachable
        """
        metrics = get_metrics_collector()

        async with self._switch_lock:
            await self._wait_for_pending()

            previous = self.active_role
            previous_label = previous.value if previous else NO_ACTIVE_ROLE

            if previous is role:
                message = f"Already connected to {role.value} database"
                logger.info(message, stage=Stage.DB_SWITCH, role=role.value)
                metrics.record_switch(role.value, SwitchOutcome.NOOP.value)
                await self._audit_switch(
                    SwitchOutcome.NOOP, previous_label, role,
                    f"Switch to {role.value} database skipped: already connected",
                    actor, ip_address, user_agent,
                )
                return SwitchResult(switched=False, message=message, status=self.status())

            logger.info(
                f"Switching to {role.value} database",
                stage=Stage.DB_SWITCH,
                previous_role=previous_label,
                requested_role=role.value,
            )

            await self._teardown()
            self.registry.set_preferred_role(role)

            pending = asyncio.create_task(self._establish(allow_fallback=False))
            self._pending = pending
            try:
                await asyncio.shield(pending)
            except TicketDeskError as e:
                metrics.record_switch(role.value, SwitchOutcome.FAILED.value)
                logger.error(
                    f"Failed to switch to {role.value} database",
                    stage=Stage.DB_SWITCH,
                    error=e.message,
                )
                await self._audit_switch(
                    SwitchOutcome.FAILED, previous_label, role,
                    f"Failed to switch to {role.value} database: {e.message}",
                    actor, ip_address, user_agent,
                    error=e.message,
                )
                raise

            status = self.status()
            metrics.record_switch(role.value, SwitchOutcome.SUCCESS.value)
            await self._audit_switch(
                SwitchOutcome.SUCCESS, previous_label, role,
                f"Switched database from {previous_label} to {status.current_database}",
                actor, ip_address, user_agent,
            )
            return SwitchResult(
                switched=True,
                message=f"Successfully switched to {role.value} database",
                status=status,
            )

    async def _audit_switch(
        self,
        outcome: SwitchOutcome,
        previous_label: str,
        role: DatabaseRole,
        details: str,
        actor: str | None,
        ip_address: str | None,
        user_agent: str | None,
        error: str | None = None,
    ) -> None:
        if self.audit_recorder is None:
            logger.warning("No audit recorder configured; switch event not recorded", stage=Stage.DB_SWITCH)
            return

        context = {
            "previous_role": previous_label,
            "requested_role": role.value,
            "outcome": outcome.value,
        }
        if error is not None:
            context["error"] = error

        try:
            await self.audit_recorder.record_event(
                actor=actor or "system",
                action=AuditAction.DATABASE_SWITCH,
                details=details,
                ip_address=ip_address,
                user_agent=user_agent,
                context=context,
                connect=False,
            )
        except Exception as e:
            # Audit is fire-and-forget; never abort the switch
            logger.error("Audit recorder failed for database switch", stage=Stage.AUDIT, error=str(e))

    # =========================================================================
    # Health
    # =========================================================================

    async def health_check(self) -> dict[str, Any]:
        """
        Ping the live database.

        Returns:
            Dict with health status
        """
        try:
            connection = await self.get_connection()
            await connection.client.admin.command("ping")
        except TicketDeskError as e:
            return {"status": "unhealthy", "error": e.message}
        except Exception as e:
            logger.warning("Database health ping failed", stage=Stage.DB_CACHE, error=str(e))
            return {"status": "unhealthy", "error": str(e)}

        return {"status": "healthy", "active_role": connection.role.value}


# Global connection manager instance
_connection_manager: DatabaseConnectionManager | None = None


def get_connection_manager() -> DatabaseConnectionManager:
    """
    Get the global connection manager (singleton).

    Returns:
        DatabaseConnectionManager: Global connection manager
    """
    global _connection_manager

    if _connection_manager is None:
        _connection_manager = DatabaseConnectionManager.from_settings(get_settings())

    return _connection_manager


async def init_database(audit_recorder: AuditRecorder | None = None) -> DatabaseConnectionManager:
    """
    Initialize the global connection manager and try to connect.

    A failed warm-up is logged, not raised: the app still starts and the next
    data access retries from scratch.
    """
    manager = get_connection_manager()
    if audit_recorder is not None:
        manager.audit_recorder = audit_recorder

    try:
        await manager.get_connection()
    except TicketDeskError as e:
        logger.warning(
            "Database unavailable at startup; will retry on first access",
            stage=Stage.DB_CACHE,
            error=e.message,
        )

    return manager


async def close_database() -> None:
    """Disconnect and drop the global connection manager."""
    global _connection_manager

    if _connection_manager:
        await _connection_manager.disconnect()
        _connection_manager = None
