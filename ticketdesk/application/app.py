#!/usr/bin/env python3
"""
FastAPI Application Entry Point

Configures the TicketDesk application: lifespan (logging, database
connection manager, audit service), middleware, exception handlers and
routes.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ticketdesk.application.api.middleware import setup_middleware
from ticketdesk.application.api.routes.admin import router as admin_router
from ticketdesk.application.api.routes.audit_logs import router as audit_logs_router
from ticketdesk.application.api.routes.auth import router as auth_router
from ticketdesk.application.api.routes.health import router as health_router
from ticketdesk.application.api.routes.tickets import router as tickets_router
from ticketdesk.application.services.audit_service import AuditService
from ticketdesk.core.config.settings import get_settings
from ticketdesk.core.logging.logger import get_logger, setup_logging
from ticketdesk.infrastructure.database.connection_manager import (
    close_database,
    get_connection_manager,
    init_database,
)

logger = get_logger(__name__)


# ============================================================================
# Application Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).
    """
    settings = get_settings()

    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

    logger.info(
        "Starting TicketDesk",
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
    )

    try:
        manager = get_connection_manager()
        audit_service = AuditService(manager)

        # Switch events are recorded through the audit service
        await init_database(audit_recorder=audit_service)

        app.state.connection_manager = manager
        app.state.audit_service = audit_service
        logger.info("Database connection manager ready", status=manager.status().to_response())

        logger.info("Application startup complete")

        yield

    finally:
        logger.info("Shutting down application")
        await close_database()
        logger.info("Application shutdown complete")


# ============================================================================
# Application Factory
# ============================================================================


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Support ticketing service with primary/secondary database failover",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    setup_middleware(app)

    # All API endpoints are prefixed with API_BASE_PATH (default: /api)
    base_path = settings.app.API_BASE_PATH

    app.include_router(health_router, prefix=base_path)
    app.include_router(auth_router, prefix=base_path)
    app.include_router(tickets_router, prefix=base_path)
    app.include_router(audit_logs_router, prefix=base_path)
    app.include_router(admin_router, prefix=base_path)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app.APP_NAME,
            "version": settings.app.APP_VERSION,
            "environment": settings.app.ENVIRONMENT,
            "docs": "/docs",
            "health": f"{base_path}/health",
        }

    return app


app = create_app()


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "ticketdesk.application.app:app",
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        reload=settings.app.ENVIRONMENT == "development",
        log_level=settings.logging.LOG_LEVEL.lower(),
    )
