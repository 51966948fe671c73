"""
Application Services

Business operations behind the HTTP routes: audit trail, authentication and
tickets.
"""

from ticketdesk.application.services.audit_service import AuditService, get_request_info
from ticketdesk.application.services.auth_service import AuthService, SessionUser
from ticketdesk.application.services.ticket_service import TicketService

__all__ = ["AuditService", "AuthService", "SessionUser", "TicketService", "get_request_info"]
