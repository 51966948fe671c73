"""
Database-Related Exceptions

Errors raised by the connection establisher and the failover orchestrator.
Single-attempt failures (DatabaseConnectionError) are absorbed by the
orchestrator; only BothTargetsUnavailableError crosses the core's boundary on
ordinary requests.
"""

from ticketdesk.core.config.constants import DatabaseRole
from ticketdesk.core.exceptions.base import TicketDeskError


class DatabaseError(TicketDeskError):
    """Base exception for database connection errors."""
    pass


class DatabaseConnectionError(DatabaseError):
    """
    Raised when a single establishment attempt against one target fails.

    Common causes:
    - Server unreachable or refusing connections
    - Authentication failure
    - Connect-phase or overall timeout (``timed_out`` is True)
    """

    def __init__(
        self,
        role: DatabaseRole,
        cause: BaseException | None = None,
        timed_out: bool = False,
        message: str | None = None,
    ):
        self.role = role
        self.cause = cause
        self.timed_out = timed_out

        if message is None:
            if timed_out:
                reason = "timed out"
            elif cause is not None:
                reason = str(cause) or type(cause).__name__
            else:
                reason = "unknown error"
            message = f"Failed to connect to {role.value} database: {reason}"

        super().__init__(
            message,
            details={
                "role": role.value,
                "timed_out": timed_out,
                "cause": type(cause).__name__ if cause else None,
            },
        )


class BothTargetsUnavailableError(DatabaseError):
    """
    Raised when a connection request exhausted its attempts.

    ``primary_cause`` is None when the request started on the secondary and
    therefore never tried the primary.
    """

    def __init__(
        self,
        primary_cause: DatabaseConnectionError | None,
        secondary_cause: DatabaseConnectionError | None,
    ):
        self.primary_cause = primary_cause
        self.secondary_cause = secondary_cause

        if primary_cause is None:
            message = "Secondary database connection failed and no fallback remains"
        else:
            message = "Both primary and secondary database connections failed"

        super().__init__(
            message,
            details={
                "primary_error": primary_cause.message if primary_cause else None,
                "secondary_error": secondary_cause.message if secondary_cause else None,
            },
        )
