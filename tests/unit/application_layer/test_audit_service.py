"""
Unit Tests for the Audit Service
"""

from datetime import datetime

import pytest
from starlette.datastructures import Headers

from ticketdesk.application.services.audit_service import AuditService, get_request_info
from ticketdesk.core.config.constants import AuditAction, DatabaseRole


@pytest.mark.unit
class TestRequestInfo:
    def test_forwarded_for_wins(self):
        headers = Headers({"x-forwarded-for": "203.0.113.7, 10.0.0.1", "x-real-ip": "10.0.0.2", "user-agent": "ua"})

        assert get_request_info(headers) == ("203.0.113.7", "ua")

    def test_real_ip_fallback(self):
        assert get_request_info(Headers({"x-real-ip": "10.0.0.2"})) == ("10.0.0.2", "unknown")

    def test_unknown_client(self):
        assert get_request_info(Headers({})) == ("unknown", "unknown")


@pytest.mark.unit
class TestRecordEvent:
    async def test_writes_entry_to_active_database(self, make_manager):
        manager, establisher = make_manager()
        audit = AuditService(manager)

        await audit.record_event(
            "user-1",
            AuditAction.LOGIN,
            "User logged in",
            ip_address="10.0.0.1",
            user_agent="pytest",
            context={"source": "test"},
        )

        [entry] = establisher.databases[DatabaseRole.PRIMARY]["audit_logs"].documents
        assert entry["who"] == "user-1"
        assert entry["what"] == "login"
        assert entry["details"] == "User logged in"
        assert entry["ipAddress"] == "10.0.0.1"
        assert entry["userAgent"] == "pytest"
        assert entry["context"] == {"source": "test"}
        assert isinstance(entry["when"], datetime)

    async def test_details_are_truncated(self, make_manager):
        manager, establisher = make_manager()

        await AuditService(manager).record_event("user-1", AuditAction.VIEW_TICKETS, "x" * 800)

        [entry] = establisher.databases[DatabaseRole.PRIMARY]["audit_logs"].documents
        assert len(entry["details"]) == 500

    async def test_optional_fields_are_omitted(self, make_manager):
        manager, establisher = make_manager()

        await AuditService(manager).record_event("user-1", AuditAction.LOGOUT)

        [entry] = establisher.databases[DatabaseRole.PRIMARY]["audit_logs"].documents
        assert "ipAddress" not in entry
        assert "context" not in entry

    async def test_write_failure_is_swallowed(self, make_manager):
        manager, establisher = make_manager({DatabaseRole.PRIMARY: "fail", DatabaseRole.SECONDARY: "fail"})

        result = await AuditService(manager).record_event("user-1", AuditAction.LOGIN, "User logged in")

        assert result is None
        assert establisher.count() == 2

    async def test_no_connect_is_dropped_while_disconnected(self, make_manager):
        manager, establisher = make_manager()

        await AuditService(manager).record_event("admin-1", AuditAction.DATABASE_SWITCH, "switch", connect=False)

        assert establisher.count() == 0
        assert manager.active_role is None
        assert establisher.databases[DatabaseRole.PRIMARY]["audit_logs"].documents == []

    async def test_no_connect_uses_live_connection(self, make_manager):
        manager, establisher = make_manager()
        await manager.get_connection()

        await AuditService(manager).record_event("admin-1", AuditAction.DATABASE_TEST, "probe", connect=False)

        [entry] = establisher.databases[DatabaseRole.PRIMARY]["audit_logs"].documents
        assert entry["what"] == "database_test"
        assert establisher.count() == 1


@pytest.mark.unit
class TestListEvents:
    async def test_pagination_metadata(self, make_manager):
        manager, _ = make_manager()
        audit = AuditService(manager)
        for index in range(3):
            await audit.record_event("user-1", AuditAction.VIEW_TICKETS, f"view {index}")

        first_page = await audit.list_events(limit=2, skip=0)
        last_page = await audit.list_events(limit=2, skip=2)

        assert first_page["total"] == 3
        assert len(first_page["logs"]) == 2
        assert first_page["hasMore"] is True
        assert last_page["hasMore"] is False
        assert isinstance(first_page["logs"][0]["_id"], str)
