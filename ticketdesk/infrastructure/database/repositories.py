"""
Document Repositories

Thin Motor wrappers over the five collections. Every call asks the
connection manager for the live connection, so a runtime switch takes effect
on the next repository call without rebuilding anything.

Documents keep the camelCase field names of the stored schema
(``userId``, ``createdAt`` ...). ``serialize_document`` turns the ObjectId
fields into strings for API responses.
"""

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument

from ticketdesk.core.config.constants import (
    COLLECTION_AUDIT_LOGS,
    COLLECTION_COMMENTS,
    COLLECTION_TICKET_HISTORY,
    COLLECTION_TICKETS,
    COLLECTION_USERS,
)
from ticketdesk.infrastructure.database.connection_manager import DatabaseConnectionManager


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: str) -> ObjectId | None:
    """Parse a document id, returning None when it is malformed."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize_document(document: dict[str, Any] | None) -> dict[str, Any] | None:
    if document is None:
        return None
    return {
        key: str(value) if isinstance(value, ObjectId) else value
        for key, value in document.items()
    }


class BaseRepository:
    collection_name: str = ""

    def __init__(self, connection_manager: DatabaseConnectionManager):
        self.connection_manager = connection_manager

    async def collection(self, establish: bool = True) -> AsyncIOMotorCollection:
        if establish:
            connection = await self.connection_manager.get_connection()
        else:
            connection = self.connection_manager.live_connection()
        return connection.database[self.collection_name]

    async def insert(self, document: dict[str, Any], establish: bool = True) -> dict[str, Any]:
        collection = await self.collection(establish=establish)
        result = await collection.insert_one(document)
        return {"_id": result.inserted_id, **{k: v for k, v in document.items() if k != "_id"}}

    async def find_by_id(self, document_id: str) -> dict[str, Any] | None:
        object_id = to_object_id(document_id)
        if object_id is None:
            return None
        collection = await self.collection()
        return await collection.find_one({"_id": object_id})


class TicketRepository(BaseRepository):
    collection_name = COLLECTION_TICKETS

    async def list(self, user_id: str | None = None) -> list[dict[str, Any]]:
        """Newest first; all tickets when ``user_id`` is None."""
        query = {} if user_id is None else {"userId": user_id}
        collection = await self.collection()
        return await collection.find(query).sort("createdAt", -1).to_list(length=None)

    async def update_status(self, ticket_id: str, status: str) -> dict[str, Any] | None:
        object_id = to_object_id(ticket_id)
        if object_id is None:
            return None
        collection = await self.collection()
        return await collection.find_one_and_update(
            {"_id": object_id},
            {"$set": {"status": status, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )

    async def delete(self, ticket_id: str) -> bool:
        object_id = to_object_id(ticket_id)
        if object_id is None:
            return False
        collection = await self.collection()
        result = await collection.delete_one({"_id": object_id})
        return result.deleted_count == 1


class CommentRepository(BaseRepository):
    collection_name = COLLECTION_COMMENTS

    async def list_for_ticket(self, ticket_id: str) -> list[dict[str, Any]]:
        collection = await self.collection()
        return await collection.find({"ticketId": ticket_id}).sort("createdAt", 1).to_list(length=None)


class TicketHistoryRepository(BaseRepository):
    collection_name = COLLECTION_TICKET_HISTORY

    async def list_for_ticket(self, ticket_id: str) -> list[dict[str, Any]]:
        collection = await self.collection()
        return await collection.find({"ticketId": ticket_id}).sort("createdAt", -1).to_list(length=None)


class AuditLogRepository(BaseRepository):
    """Append-only: exposes no update or delete method."""

    collection_name = COLLECTION_AUDIT_LOGS

    async def list(self, limit: int, skip: int) -> list[dict[str, Any]]:
        collection = await self.collection()
        cursor = collection.find({}).sort("when", -1).skip(skip).limit(limit)
        return await cursor.to_list(length=None)

    async def count(self) -> int:
        collection = await self.collection()
        return await collection.count_documents({})


class UserRepository(BaseRepository):
    collection_name = COLLECTION_USERS

    async def find_by_email(self, email: str) -> dict[str, Any] | None:
        collection = await self.collection()
        return await collection.find_one({"email": email.strip().lower()})
