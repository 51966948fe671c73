"""
Connection Establisher

Opens a Motor client against exactly one target and verifies it with a
``ping`` before handing it out.

STAGE-DB.2: Connection establishment

Two independent timeouts bound every attempt:
- connect-phase: bounds the handshake ping (also passed to the driver as
  ``connectTimeoutMS`` / ``serverSelectionTimeoutMS``)
- overall: bounds the whole attempt, including client construction

Whichever elapses first aborts the attempt with a timeout-flavored
DatabaseConnectionError. There are no retries here; retry and fallback policy
belongs to the failover orchestrator. A client created during a failed or
cancelled attempt is always closed before control leaves ``establish``.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import NetworkTimeout, PyMongoError, ServerSelectionTimeoutError

from ticketdesk.core.config.constants import DatabaseRole, Stage
from ticketdesk.core.config.settings import DatabaseSettings
from ticketdesk.core.exceptions import DatabaseConnectionError
from ticketdesk.core.logging.logger import get_logger
from ticketdesk.infrastructure.database.targets import ConnectionTarget
from ticketdesk.infrastructure.monitoring.metrics_collector import get_metrics_collector

logger = get_logger(__name__)


@dataclass
class DatabaseConnection:
    """Handle to a live, verified connection. Owned by the connection manager."""

    target: ConnectionTarget
    client: AsyncIOMotorClient
    database: AsyncIOMotorDatabase

    @property
    def role(self) -> DatabaseRole:
        return self.target.role


class ConnectionEstablisher:
    """
    Opens verified connections to a single target.

    Usage:
        establisher = ConnectionEstablisher.from_settings(settings.database)
        connection = await establisher.establish(target)
        ...
        establisher.close(connection)
    """

    def __init__(
        self,
        database_name: str,
        connect_timeout_ms: int = 10000,
        server_selection_timeout_ms: int = 5000,
        operation_timeout: float = 15.0,
        client_factory: Callable[..., Any] = AsyncIOMotorClient,
    ):
        self.database_name = database_name
        self.connect_timeout_ms = connect_timeout_ms
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.operation_timeout = operation_timeout
        self._client_factory = client_factory

    @classmethod
    def from_settings(cls, settings: DatabaseSettings, **kwargs) -> "ConnectionEstablisher":
        return cls(
            database_name=settings.DATABASE_NAME,
            connect_timeout_ms=settings.DB_CONNECT_TIMEOUT_MS,
            server_selection_timeout_ms=settings.DB_SERVER_SELECTION_TIMEOUT_MS,
            operation_timeout=settings.DB_OPERATION_TIMEOUT,
            **kwargs,
        )

    async def establish(
        self, target: ConnectionTarget, timeout: float | None = None
    ) -> DatabaseConnection:
        """
        Open and verify a connection to ``target``.

        Args:
            target: Endpoint to connect to
            timeout: Overall timeout in seconds (defaults to the configured one)

        Returns:
            DatabaseConnection: Verified connection

        Raises:
            DatabaseConnectionError: On refusal, auth failure or timeout
        """
        overall_timeout = self.operation_timeout if timeout is None else timeout
        connect_timeout = min(self.connect_timeout_ms / 1000, overall_timeout)
        opened: list[Any] = []
        metrics = get_metrics_collector()
        start = time.perf_counter()

        logger.info(
            f"Attempting to connect to {target.role.value} database",
            stage=Stage.DB_ESTABLISH,
            role=target.role.value,
            overall_timeout=overall_timeout,
        )

        try:
            client = await asyncio.wait_for(
                self._open(target, opened, connect_timeout), timeout=overall_timeout
            )
        except asyncio.CancelledError:
            self._close_all(opened)
            raise
        except (asyncio.TimeoutError, ServerSelectionTimeoutError, NetworkTimeout) as e:
            self._close_all(opened)
            metrics.record_connection_attempt(target.role.value, "timeout")
            error = DatabaseConnectionError(target.role, cause=e, timed_out=True)
            logger.error(error.message, stage=Stage.DB_ESTABLISH, role=target.role.value, timed_out=True)
            raise error from e
        except PyMongoError as e:
            self._close_all(opened)
            metrics.record_connection_attempt(target.role.value, "failure")
            error = DatabaseConnectionError(target.role, cause=e)
            logger.error(error.message, stage=Stage.DB_ESTABLISH, role=target.role.value, timed_out=False)
            raise error from e

        metrics.record_connection_attempt(target.role.value, "success")
        logger.info(
            f"Successfully connected to {target.role.value} database",
            stage=Stage.DB_ESTABLISH,
            role=target.role.value,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )

        return DatabaseConnection(
            target=target,
            client=client,
            database=client.get_default_database(self.database_name),
        )

    def close(self, connection: DatabaseConnection) -> None:
        """Release the client behind ``connection``."""
        self._close_all([connection.client])

    async def _open(self, target: ConnectionTarget, opened: list[Any], connect_timeout: float) -> Any:
        client = self._client_factory(
            target.uri,
            connectTimeoutMS=self.connect_timeout_ms,
            serverSelectionTimeoutMS=self.server_selection_timeout_ms,
        )
        opened.append(client)
        await asyncio.wait_for(client.admin.command("ping"), timeout=connect_timeout)
        return client

    @staticmethod
    def _close_all(clients: list[Any]) -> None:
        for client in clients:
            try:
                client.close()
            except PyMongoError as e:
                logger.warning("Failed to close database client", stage=Stage.DB_ESTABLISH, error=str(e))
