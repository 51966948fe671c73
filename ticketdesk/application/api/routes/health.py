"""
Health Check Routes
===================

LIVENESS (``GET /health``):
   - Question: "Is the process running?"
   - Never touches the database

READINESS (``GET /health/ready``):
   - Question: "Can the service serve ticket traffic?"
   - Pings the live database connection (establishing it if needed,
     with the usual failover)
   - 503 when no target is reachable
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from ticketdesk.application.api.dependencies import ConnectionManagerDep

router = APIRouter(prefix="/health", tags=["Health"])


class HealthResponse(BaseModel):
    status: str  # "healthy" or "unhealthy"
    timestamp: str  # ISO 8601
    components: dict | None = None


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("", response_model=HealthResponse)
async def health_check():
    """Liveness probe."""
    return HealthResponse(status="healthy", timestamp=_timestamp())


@router.get("/ready", response_model=HealthResponse)
async def readiness_check(manager: ConnectionManagerDep):
    """Readiness probe."""
    database = await manager.health_check()

    if database["status"] != "healthy":
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "unhealthy", "components": {"database": database}},
        )

    return HealthResponse(
        status="healthy",
        timestamp=_timestamp(),
        components={"database": database, "connection": manager.status().to_response()},
    )
