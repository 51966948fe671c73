"""
Ticket Service

Tickets, comments and ticket history, guarded by ownership checks.

Access rule used throughout: admins may act on any ticket, regular users only
on tickets they filed. Unknown ids (including malformed ones) raise
ResourceNotFoundError before the ownership check runs.
"""

from typing import Any

from ticketdesk.application.services.auth_service import SessionUser
from ticketdesk.core.config.constants import (
    COMMENT_MAX_LENGTH,
    COMMENT_PREVIEW_LENGTH,
    HISTORY_DESCRIPTION_MAX_LENGTH,
    TICKET_DESCRIPTION_MAX_LENGTH,
    TICKET_TITLE_MAX_LENGTH,
    HistoryAction,
    Stage,
    TicketStatus,
)
from ticketdesk.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from ticketdesk.core.logging.logger import get_logger
from ticketdesk.infrastructure.database.connection_manager import DatabaseConnectionManager
from ticketdesk.infrastructure.database.repositories import (
    CommentRepository,
    TicketHistoryRepository,
    TicketRepository,
    serialize_document,
    utc_now,
)

logger = get_logger(__name__)


def comment_preview(content: str) -> str:
    if len(content) > COMMENT_PREVIEW_LENGTH:
        return f"{content[:COMMENT_PREVIEW_LENGTH]}..."
    return content


class TicketService:
    """
    Usage:
        tickets = TicketService(connection_manager)
        created = await tickets.create_ticket(session_user, "Title", "Description")
    """

    def __init__(self, connection_manager: DatabaseConnectionManager):
        self.tickets = TicketRepository(connection_manager)
        self.comments = CommentRepository(connection_manager)
        self.history = TicketHistoryRepository(connection_manager)

    # =========================================================================
    # Tickets
    # =========================================================================

    async def list_tickets(self, user: SessionUser) -> list[dict[str, Any]]:
        tickets = await self.tickets.list(user_id=None if user.is_admin else user.id)
        return [serialize_document(ticket) for ticket in tickets]

    async def create_ticket(self, user: SessionUser, title: str, description: str) -> dict[str, Any]:
        title = (title or "").strip()
        description = (description or "").strip()

        if not title or not description:
            raise ValidationError("Title and description are required")
        if len(title) > TICKET_TITLE_MAX_LENGTH:
            raise ValidationError(
                f"Title cannot exceed {TICKET_TITLE_MAX_LENGTH} characters",
                details={"field": "title", "max_length": TICKET_TITLE_MAX_LENGTH},
            )
        if len(description) > TICKET_DESCRIPTION_MAX_LENGTH:
            raise ValidationError(
                f"Description cannot exceed {TICKET_DESCRIPTION_MAX_LENGTH} characters",
                details={"field": "description", "max_length": TICKET_DESCRIPTION_MAX_LENGTH},
            )

        now = utc_now()
        ticket = await self.tickets.insert(
            {
                "title": title,
                "description": description,
                "status": TicketStatus.OPEN.value,
                "userId": user.id,
                "createdAt": now,
                "updatedAt": now,
            }
        )
        await self._add_history(str(ticket["_id"]), user, HistoryAction.CREATED, f"Created ticket: {title}")

        logger.info("Ticket created", stage=Stage.TICKETS, ticket_id=str(ticket["_id"]))
        return serialize_document(ticket)

    async def update_status(self, user: SessionUser, ticket_id: str, status: str) -> dict[str, Any]:
        try:
            new_status = TicketStatus(status)
        except ValueError as e:
            raise ValidationError("Valid status (open/closed) is required", details={"field": "status"}) from e

        ticket = await self.get_accessible_ticket(user, ticket_id)
        old_status = ticket.get("status")

        updated = await self.tickets.update_status(ticket_id, new_status.value)
        if updated is None:
            raise ResourceNotFoundError("Ticket not found", details={"ticket_id": ticket_id})

        if old_status != new_status.value:
            await self._add_history(
                ticket_id,
                user,
                HistoryAction.STATUS_CHANGED,
                f"Changed status from {old_status} to {new_status.value}",
                field="status",
                old_value=old_status,
                new_value=new_status.value,
            )

        return serialize_document(updated)

    async def delete_ticket(self, user: SessionUser, ticket_id: str) -> dict[str, Any]:
        """Delete a ticket and return the document as it was."""
        ticket = await self.get_accessible_ticket(user, ticket_id)
        if not await self.tickets.delete(ticket_id):
            raise ResourceNotFoundError("Ticket not found", details={"ticket_id": ticket_id})

        logger.info("Ticket deleted", stage=Stage.TICKETS, ticket_id=ticket_id)
        return serialize_document(ticket)

    async def get_accessible_ticket(self, user: SessionUser, ticket_id: str) -> dict[str, Any]:
        """
        Raises:
            ResourceNotFoundError: Unknown or malformed id
            AuthorizationError: Regular user asking for someone else's ticket
        """
        ticket = await self.tickets.find_by_id(ticket_id)
        if ticket is None:
            raise ResourceNotFoundError("Ticket not found", details={"ticket_id": ticket_id})

        if not user.is_admin and ticket.get("userId") != user.id:
            raise AuthorizationError("Forbidden", details={"ticket_id": ticket_id})

        return ticket

    # =========================================================================
    # Comments and history
    # =========================================================================

    async def list_comments(self, user: SessionUser, ticket_id: str) -> list[dict[str, Any]]:
        await self.get_accessible_ticket(user, ticket_id)
        comments = await self.comments.list_for_ticket(ticket_id)
        return [serialize_document(comment) for comment in comments]

    async def add_comment(
        self, user: SessionUser, ticket_id: str, content: str
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """
        Returns:
            (comment, ticket)
        """
        if not content or not content.strip():
            raise ValidationError("Comment content is required", details={"field": "content"})
        if len(content) > COMMENT_MAX_LENGTH:
            raise ValidationError(
                f"Comment cannot exceed {COMMENT_MAX_LENGTH} characters",
                details={"field": "content", "max_length": COMMENT_MAX_LENGTH},
            )

        ticket = await self.get_accessible_ticket(user, ticket_id)

        now = utc_now()
        comment = await self.comments.insert(
            {
                "ticketId": ticket_id,
                "userId": user.id,
                "userName": user.name,
                "userRole": user.role.value,
                "content": content.strip(),
                "createdAt": now,
                "updatedAt": now,
            }
        )
        await self._add_history(
            ticket_id,
            user,
            HistoryAction.COMMENTED,
            f'Added a comment: "{comment_preview(content)}"',
        )

        return serialize_document(comment), serialize_document(ticket)

    async def list_history(self, user: SessionUser, ticket_id: str) -> list[dict[str, Any]]:
        await self.get_accessible_ticket(user, ticket_id)
        entries = await self.history.list_for_ticket(ticket_id)
        return [serialize_document(entry) for entry in entries]

    async def _add_history(
        self,
        ticket_id: str,
        user: SessionUser,
        action: HistoryAction,
        description: str,
        field: str | None = None,
        old_value: Any = None,
        new_value: Any = None,
    ) -> None:
        entry: dict[str, Any] = {
            "ticketId": ticket_id,
            "userId": user.id,
            "userName": user.name,
            "userRole": user.role.value,
            "action": action.value,
            "description": description[:HISTORY_DESCRIPTION_MAX_LENGTH],
            "createdAt": utc_now(),
        }
        if field is not None:
            entry.update({"field": field, "oldValue": old_value, "newValue": new_value})

        await self.history.insert(entry)
