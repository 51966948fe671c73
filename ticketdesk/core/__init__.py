"""
Core Module

Foundational components: configuration, logging and exceptions.
"""

from .exceptions import (
    AuditWriteError,
    AuthenticationError,
    AuthorizationError,
    BothTargetsUnavailableError,
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
    ResourceNotFoundError,
    TicketDeskError,
    ValidationError,
)
from .logging import (
    clear_request_id,
    get_logger,
    get_request_id,
    set_request_id,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_request_id",
    "get_request_id",
    "clear_request_id",
    "TicketDeskError",
    "ConfigurationError",
    "DatabaseError",
    "DatabaseConnectionError",
    "BothTargetsUnavailableError",
    "AuditWriteError",
    "AuthenticationError",
    "AuthorizationError",
    "ResourceNotFoundError",
    "ValidationError",
]
