"""
Audit Service

Append-only audit trail.

``record_event`` is fire-and-forget: a failed write is logged, counted and
swallowed so it never aborts the operation that triggered it. Reads
(``list_events``) propagate errors like any other data access.
"""

from typing import Any

from pymongo.errors import PyMongoError
from starlette.datastructures import Headers

from ticketdesk.core.config.constants import (
    AUDIT_DETAILS_MAX_LENGTH,
    HEADER_FORWARDED_FOR,
    HEADER_REAL_IP,
    HEADER_USER_AGENT,
    UNKNOWN_CLIENT,
    AuditAction,
    Stage,
)
from ticketdesk.core.exceptions import AuditWriteError, TicketDeskError
from ticketdesk.core.logging.logger import get_logger
from ticketdesk.infrastructure.database.connection_manager import DatabaseConnectionManager
from ticketdesk.infrastructure.database.repositories import (
    AuditLogRepository,
    serialize_document,
    utc_now,
)
from ticketdesk.infrastructure.monitoring.metrics_collector import get_metrics_collector

logger = get_logger(__name__)


def get_request_info(headers: Headers) -> tuple[str, str]:
    """
    Extract (ip_address, user_agent) for audit records.

    The first ``X-Forwarded-For`` entry wins, then ``X-Real-IP``.
    """
    forwarded = headers.get(HEADER_FORWARDED_FOR)
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = headers.get(HEADER_REAL_IP) or UNKNOWN_CLIENT

    user_agent = headers.get(HEADER_USER_AGENT) or UNKNOWN_CLIENT
    return ip_address, user_agent


class AuditService:
    """
    Writes and reads audit log entries.

    Usage:
        audit = AuditService(connection_manager)
        await audit.record_event(user_id, AuditAction.LOGIN, "User logged in")
    """

    def __init__(
        self,
        connection_manager: DatabaseConnectionManager,
        repository_cls: type[AuditLogRepository] = AuditLogRepository,
    ):
        self.repository = repository_cls(connection_manager)

    async def record_event(
        self,
        actor: str,
        action: AuditAction,
        details: str = "",
        ip_address: str | None = None,
        user_agent: str | None = None,
        context: dict[str, Any] | None = None,
        connect: bool = True,
    ) -> None:
        """
        With ``connect=False`` the entry is written only through an already
        live connection; otherwise it is dropped like any failed write.
        """
        action = AuditAction(action)
        document: dict[str, Any] = {
            "who": actor,
            "what": action.value,
            "when": utc_now(),
            "details": (details or "").strip()[:AUDIT_DETAILS_MAX_LENGTH],
        }
        if ip_address:
            document["ipAddress"] = ip_address
        if user_agent:
            document["userAgent"] = user_agent
        if context:
            document["context"] = context

        try:
            await self._write(document, establish=connect)
        except AuditWriteError as e:
            get_metrics_collector().record_audit_write_failure(action.value)
            logger.error(
                "Failed to create audit log",
                stage=Stage.AUDIT,
                who=actor,
                what=action.value,
                error=e.message,
            )
            return

        logger.info(f"Audit log created: {actor} performed {action.value}", stage=Stage.AUDIT)

    async def _write(self, document: dict[str, Any], establish: bool = True) -> None:
        try:
            await self.repository.insert(document, establish=establish)
        except (PyMongoError, TicketDeskError) as e:
            raise AuditWriteError.from_exception(
                e, message="Failed to write audit log", action=document["what"]
            ) from e

    async def list_events(self, limit: int, skip: int) -> dict[str, Any]:
        """
        Newest first.

        Returns:
            {"logs": [...], "total": int, "hasMore": bool}
        """
        logs = await self.repository.list(limit=limit, skip=skip)
        total = await self.repository.count()
        return {
            "logs": [serialize_document(log) for log in logs],
            "total": total,
            "hasMore": skip + limit < total,
        }
