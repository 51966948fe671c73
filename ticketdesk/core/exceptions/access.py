"""
Request-Level Exceptions

Authentication, authorization, lookup and validation failures raised by the
services and guard dependencies. The application maps each one to an HTTP
status code (401, 403, 404, 400).
"""

from ticketdesk.core.exceptions.base import TicketDeskError


class AuthenticationError(TicketDeskError):
    """No session, or the session token is invalid or expired."""
    pass


class AuthorizationError(TicketDeskError):
    """The session is valid but lacks the role or ownership required."""
    pass


class ResourceNotFoundError(TicketDeskError):
    """The requested document does not exist (or its id is malformed)."""
    pass


class ValidationError(TicketDeskError):
    """
    Raised when request input is invalid.

    Example:
        raise ValidationError(
            "Title cannot exceed 200 characters",
            details={"field": "title", "max_length": 200}
        )
    """
    pass
