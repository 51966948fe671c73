"""
Unit Tests for the Document Repositories

Repositories run over the in-memory database behind the scripted establisher.
"""

from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId

from ticketdesk.core.config.constants import DatabaseRole
from ticketdesk.infrastructure.database.repositories import (
    AuditLogRepository,
    CommentRepository,
    TicketRepository,
    UserRepository,
    serialize_document,
    to_object_id,
)

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.unit
class TestHelpers:
    def test_to_object_id_parses_valid_id(self):
        object_id = ObjectId()

        assert to_object_id(str(object_id)) == object_id

    @pytest.mark.parametrize("value", ["not-an-id", "", "123"])
    def test_to_object_id_returns_none_for_malformed_id(self, value):
        assert to_object_id(value) is None

    def test_serialize_document_stringifies_object_ids(self):
        object_id = ObjectId()

        assert serialize_document({"_id": object_id, "title": "t"}) == {"_id": str(object_id), "title": "t"}
        assert serialize_document(None) is None


@pytest.mark.unit
class TestTicketRepository:
    async def test_insert_and_find(self, make_manager):
        manager, _ = make_manager()
        repository = TicketRepository(manager)

        ticket = await repository.insert({"title": "Printer", "userId": "u1", "createdAt": BASE_TIME})
        found = await repository.find_by_id(str(ticket["_id"]))

        assert found["title"] == "Printer"

    async def test_find_by_malformed_id_returns_none(self, make_manager):
        manager, _ = make_manager()

        assert await TicketRepository(manager).find_by_id("bogus") is None

    async def test_list_filters_by_user_newest_first(self, make_manager):
        manager, _ = make_manager()
        repository = TicketRepository(manager)
        for offset, user in enumerate(["u1", "u2", "u1"]):
            await repository.insert(
                {"title": f"T{offset}", "userId": user, "createdAt": BASE_TIME + timedelta(minutes=offset)}
            )

        mine = await repository.list(user_id="u1")
        everything = await repository.list()

        assert [ticket["title"] for ticket in mine] == ["T2", "T0"]
        assert len(everything) == 3

    async def test_update_status_returns_updated_document(self, make_manager):
        manager, _ = make_manager()
        repository = TicketRepository(manager)
        ticket = await repository.insert({"title": "T", "status": "open", "createdAt": BASE_TIME})

        updated = await repository.update_status(str(ticket["_id"]), "closed")

        assert updated["status"] == "closed"
        assert isinstance(updated["updatedAt"], datetime)

    async def test_delete(self, make_manager):
        manager, _ = make_manager()
        repository = TicketRepository(manager)
        ticket = await repository.insert({"title": "T", "createdAt": BASE_TIME})

        assert await repository.delete(str(ticket["_id"])) is True
        assert await repository.delete(str(ticket["_id"])) is False
        assert await repository.delete("bogus") is False

    async def test_writes_follow_the_active_database(self, make_manager):
        manager, establisher = make_manager()
        repository = TicketRepository(manager)
        await repository.insert({"title": "on primary", "createdAt": BASE_TIME})

        await manager.switch_to(DatabaseRole.SECONDARY)
        await repository.insert({"title": "on secondary", "createdAt": BASE_TIME})

        assert [doc["title"] for doc in establisher.databases[DatabaseRole.PRIMARY]["tickets"].documents] == [
            "on primary"
        ]
        assert [doc["title"] for doc in establisher.databases[DatabaseRole.SECONDARY]["tickets"].documents] == [
            "on secondary"
        ]


@pytest.mark.unit
class TestOtherRepositories:
    async def test_comments_are_oldest_first(self, make_manager):
        manager, _ = make_manager()
        repository = CommentRepository(manager)
        await repository.insert({"ticketId": "t1", "content": "second", "createdAt": BASE_TIME + timedelta(seconds=5)})
        await repository.insert({"ticketId": "t1", "content": "first", "createdAt": BASE_TIME})
        await repository.insert({"ticketId": "t2", "content": "other", "createdAt": BASE_TIME})

        comments = await repository.list_for_ticket("t1")

        assert [comment["content"] for comment in comments] == ["first", "second"]

    async def test_audit_log_pagination(self, make_manager):
        manager, _ = make_manager()
        repository = AuditLogRepository(manager)
        for index in range(5):
            await repository.insert({"action": "login", "details": str(index), "when": BASE_TIME + timedelta(minutes=index)})

        page = await repository.list(limit=2, skip=1)

        assert [entry["details"] for entry in page] == ["3", "2"]
        assert await repository.count() == 5

    def test_audit_log_repository_is_append_only(self):
        assert not hasattr(AuditLogRepository, "delete")
        assert not hasattr(AuditLogRepository, "update")

    async def test_find_user_by_email_is_case_insensitive(self, make_manager):
        manager, _ = make_manager()
        repository = UserRepository(manager)
        await repository.insert({"email": "john@example.com", "name": "John"})

        user = await repository.find_by_email("  John@Example.COM ")

        assert user["name"] == "John"
