"""
FastAPI Dependency Injection Module
===================================

Reusable dependencies for the route handlers.

The connection manager and the audit service are application singletons
created in the lifespan handler and stored on ``app.state``. The providers
below read them from there, falling back to the module-level singletons when
the lifespan did not run (e.g. a bare ``TestClient(app)``).

Tests swap any of these out with ``app.dependency_overrides``:

    app.dependency_overrides[get_db_manager] = lambda: fake_manager
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from ticketdesk.application.services.audit_service import AuditService, get_request_info
from ticketdesk.application.services.auth_service import AuthService
from ticketdesk.application.services.ticket_service import TicketService
from ticketdesk.core.config.settings import Settings, get_settings
from ticketdesk.infrastructure.database.connection_manager import (
    DatabaseConnectionManager,
    get_connection_manager,
)
from ticketdesk.infrastructure.database.repositories import UserRepository

# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


def get_db_manager(request: Request) -> DatabaseConnectionManager:
    """
    Retrieve the process-wide DatabaseConnectionManager.

    Route handlers receive the manager as a handle; only the manager itself
    changes the cached connection or the active role.
    """
    if hasattr(request.app.state, "connection_manager"):
        return request.app.state.connection_manager

    manager = get_connection_manager()
    request.app.state.connection_manager = manager
    return manager


SettingsDep = Annotated[Settings, Depends(get_settings)]
ConnectionManagerDep = Annotated[DatabaseConnectionManager, Depends(get_db_manager)]


def get_audit_service(request: Request, manager: ConnectionManagerDep) -> AuditService:
    if hasattr(request.app.state, "audit_service"):
        return request.app.state.audit_service
    return AuditService(manager)


def get_auth_service(manager: ConnectionManagerDep, settings: SettingsDep) -> AuthService:
    return AuthService(UserRepository(manager), settings.auth)


def get_ticket_service(manager: ConnectionManagerDep) -> TicketService:
    return TicketService(manager)


@dataclass(frozen=True)
class RequestInfo:
    """Client details recorded with every audit event."""

    ip_address: str
    user_agent: str


def get_request_context(request: Request) -> RequestInfo:
    ip_address, user_agent = get_request_info(request.headers)
    return RequestInfo(ip_address=ip_address, user_agent=user_agent)


# ============================================================================
# TYPE ALIASES FOR CLEANER ROUTE SIGNATURES
# ============================================================================

AuditServiceDep = Annotated[AuditService, Depends(get_audit_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
RequestInfoDep = Annotated[RequestInfo, Depends(get_request_context)]
