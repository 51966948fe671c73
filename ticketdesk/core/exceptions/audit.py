"""
Audit Trail Exceptions
"""

from ticketdesk.core.exceptions.base import TicketDeskError


class AuditWriteError(TicketDeskError):
    """
    Raised when an audit record could not be persisted.

    Never propagated to the operation that triggered the audit event: the
    audit service logs it and carries on.
    """
    pass
