"""
Middleware Package
==================

- error_handler: exception-to-status mapping and the catch-all error
  middleware
- request_id: ``X-Request-ID`` correlation for logs and responses

Middleware executes in reverse order of registration (last added runs
first), so ``setup_middleware`` adds the error handler last.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ticketdesk.core.config.constants import HEADER_REQUEST_ID
from ticketdesk.core.config.settings import get_settings
from ticketdesk.core.logging.logger import get_logger

from .error_handler import add_error_handling_middleware, register_exception_handlers
from .request_id import RequestIdMiddleware

logger = get_logger(__name__)


def setup_middleware(app: FastAPI) -> None:
    """Register exception handlers and middleware in order."""
    settings = get_settings()

    register_exception_handlers(app)

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[HEADER_REQUEST_ID],
    )
    add_error_handling_middleware(
        app, include_traceback=(settings.app.ENVIRONMENT == "development")
    )

    logger.info("All middleware components registered successfully")


__all__ = [
    "setup_middleware",
    "add_error_handling_middleware",
    "register_exception_handlers",
    "RequestIdMiddleware",
]
