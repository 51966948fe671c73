"""
Admin Routes
============

Operational endpoints:

- ``GET /admin/database``: connection status snapshot (admin only)
- ``POST /admin/database``: probe a target (``test``) or switch the live
  connection to it (``switch``) (admin only)
- ``GET /admin/metrics``: Prometheus metrics in text exposition format

A probe never disturbs the live connection. A switch that cannot reach the
requested target leaves the service disconnected and answers 500 with the
per-target error, so operators can see which endpoint is unreachable.
"""

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from ticketdesk.application.api.dependencies import (
    AuditServiceDep,
    ConnectionManagerDep,
    RequestInfoDep,
)
from ticketdesk.application.api.models.admin import (
    DatabaseActionRequest,
    DatabaseStatusResponse,
    DatabaseSwitchResponse,
    DatabaseTestResponse,
)
from ticketdesk.application.api.security import AdminDep
from ticketdesk.core.config.constants import AuditAction, DatabaseRole, Stage
from ticketdesk.core.exceptions import TicketDeskError
from ticketdesk.core.logging.logger import get_logger
from ticketdesk.infrastructure.monitoring.metrics_collector import get_metrics_collector

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


def _configured(flag: bool) -> str:
    return "configured" if flag else "not configured"


# ============================================================================
# DATABASE MANAGEMENT
# ============================================================================


@router.get("/database", response_model=DatabaseStatusResponse)
async def get_database_status(admin: AdminDep, manager: ConnectionManagerDep):
    return {
        "status": manager.status().to_response(),
        "primaryUri": _configured(manager.registry.primary_configured),
        "secondaryUri": _configured(manager.registry.secondary_configured),
    }


@router.post(
    "/database",
    response_model=DatabaseTestResponse | DatabaseSwitchResponse,
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"description": "Switch failed"}},
)
async def manage_database(
    body: DatabaseActionRequest,
    admin: AdminDep,
    manager: ConnectionManagerDep,
    audit: AuditServiceDep,
    request_info: RequestInfoDep,
):
    role = DatabaseRole.from_flag(body.useSecondary)

    if body.action == "test":
        result = await manager.probe(role)

        await audit.record_event(
            admin.id,
            AuditAction.DATABASE_TEST,
            f"Tested {role.value} database connection: {'success' if result.success else 'failed'}",
            request_info.ip_address,
            request_info.user_agent,
            context={"role": role.value, "success": result.success, "error": result.error_message},
            connect=False,
        )

        return {"testResult": result.to_response()}

    try:
        result = await manager.switch_to(
            role,
            actor=admin.id,
            ip_address=request_info.ip_address,
            user_agent=request_info.user_agent,
        )
    except TicketDeskError as e:
        logger.error("Database switch failed", stage=Stage.DB_SWITCH, role=role.value, error=e.message)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": f"Failed to switch to {role.value} database", "detail": e.message},
        )

    return {"message": result.message, "status": result.status.to_response()}


# ============================================================================
# METRICS
# ============================================================================


@router.get("/metrics")
async def get_metrics():
    """Prometheus scrape endpoint."""
    metrics = get_metrics_collector()
    return Response(content=metrics.get_prometheus_metrics(), media_type=metrics.get_content_type())
