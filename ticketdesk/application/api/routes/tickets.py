"""
Ticket Routes

Tickets, comments and history. Regular users see and act on their own
tickets; admins on all of them. Every mutating call and the ticket listing
write one audit event.
"""

from fastapi import APIRouter, status

from ticketdesk.application.api.dependencies import AuditServiceDep, RequestInfoDep, TicketServiceDep
from ticketdesk.application.api.models.tickets import (
    CommentCreateRequest,
    TicketCreateRequest,
    TicketUpdateRequest,
)
from ticketdesk.application.api.security import SessionDep
from ticketdesk.core.config.constants import AuditAction

router = APIRouter(prefix="/tickets", tags=["Tickets"])


@router.get("")
async def list_tickets(
    user: SessionDep,
    tickets: TicketServiceDep,
    audit: AuditServiceDep,
    request_info: RequestInfoDep,
):
    """Newest first. Admins get every ticket, users only their own."""
    results = await tickets.list_tickets(user)

    await audit.record_event(
        user.id,
        AuditAction.VIEW_TICKETS,
        f"User viewed {len(results)} tickets",
        request_info.ip_address,
        request_info.user_agent,
    )

    return {"tickets": results}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_ticket(
    body: TicketCreateRequest,
    user: SessionDep,
    tickets: TicketServiceDep,
    audit: AuditServiceDep,
    request_info: RequestInfoDep,
):
    ticket = await tickets.create_ticket(user, body.title, body.description)

    await audit.record_event(
        user.id,
        AuditAction.CREATE_TICKET,
        f"Created ticket: {ticket['title']}",
        request_info.ip_address,
        request_info.user_agent,
        context={"ticket_id": ticket["_id"]},
    )

    return {"message": "Ticket created successfully", "ticket": ticket}


@router.put("/{ticket_id}")
async def update_ticket(
    ticket_id: str,
    body: TicketUpdateRequest,
    user: SessionDep,
    tickets: TicketServiceDep,
    audit: AuditServiceDep,
    request_info: RequestInfoDep,
):
    ticket = await tickets.update_status(user, ticket_id, body.status)

    await audit.record_event(
        user.id,
        AuditAction.UPDATE_TICKET,
        f"Updated ticket {ticket['title']} status to {ticket['status']}",
        request_info.ip_address,
        request_info.user_agent,
        context={"ticket_id": ticket_id},
    )

    return {"message": "Ticket updated successfully", "ticket": ticket}


@router.delete("/{ticket_id}")
async def delete_ticket(
    ticket_id: str,
    user: SessionDep,
    tickets: TicketServiceDep,
    audit: AuditServiceDep,
    request_info: RequestInfoDep,
):
    ticket = await tickets.delete_ticket(user, ticket_id)

    await audit.record_event(
        user.id,
        AuditAction.DELETE_TICKET,
        f"Deleted ticket: {ticket['title']}",
        request_info.ip_address,
        request_info.user_agent,
        context={"ticket_id": ticket_id},
    )

    return {"message": "Ticket deleted successfully"}


@router.get("/{ticket_id}/comments")
async def list_comments(ticket_id: str, user: SessionDep, tickets: TicketServiceDep):
    """Oldest first."""
    return {"comments": await tickets.list_comments(user, ticket_id)}


@router.post("/{ticket_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    ticket_id: str,
    body: CommentCreateRequest,
    user: SessionDep,
    tickets: TicketServiceDep,
    audit: AuditServiceDep,
    request_info: RequestInfoDep,
):
    comment, ticket = await tickets.add_comment(user, ticket_id, body.content)

    await audit.record_event(
        user.id,
        AuditAction.ADD_COMMENT,
        f"Added comment to ticket: {ticket['title']}",
        request_info.ip_address,
        request_info.user_agent,
        context={"ticket_id": ticket_id, "comment_id": comment["_id"]},
    )

    return {"message": "Comment added successfully", "comment": comment}


@router.get("/{ticket_id}/history")
async def list_history(ticket_id: str, user: SessionDep, tickets: TicketServiceDep):
    """Newest first."""
    return {"history": await tickets.list_history(user, ticket_id)}
