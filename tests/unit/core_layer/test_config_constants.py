"""
Unit Tests for Configuration Constants

Tests the enumerations shared by the database layer and the API.
"""

import pytest

from ticketdesk.core.config.constants import (
    AUDIT_DETAILS_MAX_LENGTH,
    AUDIT_LOG_DEFAULT_LIMIT,
    AUDIT_LOG_MAX_LIMIT,
    CONNECTION_STATE_LABELS,
    COMMENT_MAX_LENGTH,
    AuditAction,
    ConnectionState,
    DatabaseRole,
)


@pytest.mark.unit
class TestDatabaseRole:
    def test_from_flag(self):
        assert DatabaseRole.from_flag(False) is DatabaseRole.PRIMARY
        assert DatabaseRole.from_flag(True) is DatabaseRole.SECONDARY

    def test_roles_compare_as_strings(self):
        assert DatabaseRole.PRIMARY == "primary"
        assert DatabaseRole("secondary") is DatabaseRole.SECONDARY


@pytest.mark.unit
class TestConnectionState:
    def test_codes_follow_driver_convention(self):
        assert CONNECTION_STATE_LABELS == {
            0: "disconnected",
            1: "connected",
            2: "connecting",
            3: "disconnecting",
        }

    def test_label(self):
        assert ConnectionState.CONNECTING.label == "connecting"


@pytest.mark.unit
class TestLimits:
    def test_audit_action_values_are_unique(self):
        values = [action.value for action in AuditAction]

        assert len(set(values)) == len(values)

    def test_database_actions_are_distinct_from_ticket_actions(self):
        assert AuditAction.DATABASE_SWITCH not in (AuditAction.UPDATE_TICKET, AuditAction.VIEW_TICKETS)
        assert AuditAction.DATABASE_TEST not in (AuditAction.UPDATE_TICKET, AuditAction.VIEW_TICKETS)

    def test_limits_are_positive(self):
        assert COMMENT_MAX_LENGTH == 1000
        assert AUDIT_DETAILS_MAX_LENGTH == 500
        assert 0 < AUDIT_LOG_DEFAULT_LIMIT <= AUDIT_LOG_MAX_LIMIT
