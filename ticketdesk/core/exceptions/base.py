"""
Base Exception Class

This module contains the base exception class that all other exceptions
inherit from, plus ConfigurationError which every layer may raise.
"""

from typing import Any


class TicketDeskError(Exception):
    """
    Base exception for all service errors.

    All custom exceptions inherit from this class to enable:
    - Consistent error handling
    - Request ID correlation
    - Structured error logging

    Attributes:
        message: Error message
        request_id: Request ID for correlation (if available)
        details: Additional error details (dict)

    Example:
        raise DatabaseConnectionError(
            "Failed to connect to primary database",
            details={"role": "primary", "timed_out": True}
        )
    """

    def __init__(
        self, message: str, request_id: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.request_id = request_id
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging/API responses.

        Returns:
            Dict with error_type, message, request_id, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "request_id": self.request_id,
            "details": self.details,
        }

    def with_context(self, **context) -> "TicketDeskError":
        """
        Add additional context to the error details.

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        request_id: str | None = None,
        **details
    ) -> "TicketDeskError":
        """
        Create an error from another exception.

        Useful for wrapping driver exceptions with additional context.

        Example:
            >>> try:
            ...     await collection.insert_one(doc)
            ... except PyMongoError as e:
            ...     raise AuditWriteError.from_exception(e, action="login")
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, request_id=request_id, details=error_details)


class ConfigurationError(TicketDeskError):
    """Raised when configuration is invalid or missing."""
    pass
