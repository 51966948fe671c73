"""
Error Handling
==============

Two layers:

1. Exception handlers (``register_exception_handlers``) map the domain
   exception hierarchy onto HTTP status codes:

   - ValidationError, RequestValidationError -> 400
   - AuthenticationError -> 401
   - AuthorizationError -> 403
   - ResourceNotFoundError -> 404
   - DatabaseError (incl. BothTargetsUnavailableError) -> 503
   - any other TicketDeskError -> 500

2. ``ErrorHandlingMiddleware`` is the last line of defense for anything no
   handler claimed: it logs with the stack trace, records an error metric and
   returns a 500 JSON body.
"""

import traceback
from collections.abc import Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ticketdesk.core.config.constants import HEADER_REQUEST_ID
from ticketdesk.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DatabaseError,
    ResourceNotFoundError,
    TicketDeskError,
    ValidationError,
)
from ticketdesk.core.logging.logger import get_logger, get_request_id
from ticketdesk.infrastructure.monitoring.metrics_collector import get_metrics_collector

logger = get_logger(__name__)

_CLIENT_ERROR_STATUS: dict[type[TicketDeskError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    ResourceNotFoundError: status.HTTP_404_NOT_FOUND,
}


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Catches exceptions that escaped every route handler and exception handler.
    """

    def __init__(self, app, include_traceback: bool = False):
        """
        Args:
            app: The ASGI application
            include_traceback: Include stack traces in error responses
                               (development only)
        """
        super().__init__(app)
        self.include_traceback = include_traceback

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            method = request.method
            path = request.url.path
            error_type = type(e).__name__
            error_message = str(e)

            logger.error(
                f"Unhandled exception in request: {method} {path}",
                method=method,
                path=path,
                error_type=error_type,
                error_message=error_message,
                exc_info=True,
            )

            get_metrics_collector().record_error(error_type, "unhandled_exception")

            error_response = {
                "error": "internal_server_error",
                "message": "An unexpected error occurred while processing your request",
                "error_type": error_type,
            }

            if self.include_traceback:
                error_response["traceback"] = traceback.format_exc()
                error_response["detail"] = error_message

            return JSONResponse(status_code=500, content=error_response)


def _request_id_headers() -> dict[str, str]:
    request_id = get_request_id()
    return {HEADER_REQUEST_ID: request_id} if request_id else {}


async def client_error_handler(request: Request, exc: TicketDeskError) -> JSONResponse:
    status_code = status.HTTP_400_BAD_REQUEST
    for error_cls, mapped in _CLIENT_ERROR_STATUS.items():
        if isinstance(exc, error_cls):
            status_code = mapped
            break

    logger.info(
        "Request rejected",
        path=request.url.path,
        status_code=status_code,
        error_type=type(exc).__name__,
        error_message=exc.message,
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message, "details": exc.details},
        headers=_request_id_headers(),
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Ordinary routes get a generic body; the details stay in the logs."""
    logger.error(
        "Database unavailable",
        path=request.url.path,
        error_type=type(exc).__name__,
        error_message=exc.message,
        details=exc.details,
    )
    get_metrics_collector().record_error(type(exc).__name__, "database")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": "service_unavailable",
            "message": "The service is temporarily unavailable. Please try again later.",
        },
        headers=_request_id_headers(),
    )


async def ticketdesk_error_handler(request: Request, exc: TicketDeskError) -> JSONResponse:
    logger.error(
        f"Service exception: {exc.message}",
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    get_metrics_collector().record_error(type(exc).__name__, "service")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=exc.with_context(path=request.url.path).to_dict() | {"request_id": get_request_id()},
        headers=_request_id_headers(),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid request",
            "details": [
                {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
                for error in exc.errors()
            ],
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    for error_cls in _CLIENT_ERROR_STATUS:
        app.add_exception_handler(error_cls, client_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(TicketDeskError, ticketdesk_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)


def add_error_handling_middleware(app: FastAPI, include_traceback: bool = False) -> None:
    app.add_middleware(ErrorHandlingMiddleware, include_traceback=include_traceback)
    logger.info("Error handling middleware registered", include_traceback=include_traceback)
