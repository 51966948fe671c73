"""
Ticket API Models

Length limits are enforced by the ticket service.
"""

from pydantic import BaseModel

__all__ = ["TicketCreateRequest", "TicketUpdateRequest", "CommentCreateRequest"]


class TicketCreateRequest(BaseModel):
    title: str | None = None
    description: str | None = None


class TicketUpdateRequest(BaseModel):
    status: str | None = None


class CommentCreateRequest(BaseModel):
    content: str | None = None
