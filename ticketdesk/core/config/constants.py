"""
System Constants and Enumerations

Type-safe enums and magic numbers shared by the database layer, the
services and the HTTP layer.
"""

from enum import Enum, IntEnum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Stage identifiers attached to log entries as ``stage=...``.

    Format: {PREFIX}.{STEP}_{DESCRIPTIVE_NAME}
    """

    DB_REGISTRY = "DB.1_TARGET_REGISTRY"
    DB_ESTABLISH = "DB.2_ESTABLISH"
    DB_FAILOVER = "DB.3_FAILOVER"
    DB_CACHE = "DB.4_CONNECTION_CACHE"
    DB_SWITCH = "DB.5_SWITCH"
    DB_PROBE = "DB.6_PROBE"
    DB_DISCONNECT = "DB.7_DISCONNECT"
    AUDIT = "AUDIT_TRAIL"
    AUTH = "AUTH_SESSION"
    TICKETS = "TICKET_OPERATIONS"


# ============================================================================
# Database Roles and States
# ============================================================================


class DatabaseRole(str, Enum):
    """The two interchangeable database targets."""

    PRIMARY = "primary"
    SECONDARY = "secondary"

    @classmethod
    def from_flag(cls, use_secondary: bool) -> "DatabaseRole":
        return cls.SECONDARY if use_secondary else cls.PRIMARY


# Reported as the active role when no live connection exists
NO_ACTIVE_ROLE = "none"


class ConnectionState(IntEnum):
    """
    Raw connection state of the process-wide connection.

    The integer codes follow the driver ready-state convention so the admin
    status endpoint can expose both the code and its label.
    """

    DISCONNECTED = 0
    CONNECTED = 1
    CONNECTING = 2
    DISCONNECTING = 3

    @property
    def label(self) -> str:
        return self.name.lower()


CONNECTION_STATE_LABELS: dict[int, str] = {state.value: state.label for state in ConnectionState}


class FailoverState(str, Enum):
    """States of a single orchestrated connection request."""

    DISCONNECTED = "disconnected"
    CONNECTING_PREFERRED = "connecting_preferred"
    CONNECTING_FALLBACK = "connecting_fallback"
    CONNECTED = "connected"
    FAILED = "failed"


VALID_URI_SCHEMES = ("mongodb://", "mongodb+srv://")


# ============================================================================
# Domain Enumerations
# ============================================================================


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class TicketStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class HistoryAction(str, Enum):
    CREATED = "created"
    STATUS_CHANGED = "status_changed"
    COMMENTED = "commented"


class AuditAction(str, Enum):
    """Actions recorded in the append-only audit trail."""

    LOGIN = "login"
    LOGOUT = "logout"
    REGISTER = "register"
    CREATE_TICKET = "create_ticket"
    UPDATE_TICKET = "update_ticket"
    DELETE_TICKET = "delete_ticket"
    VIEW_TICKETS = "view_tickets"
    VIEW_AUDIT_LOGS = "view_audit_logs"
    ADD_COMMENT = "add_comment"
    DATABASE_TEST = "database_test"
    DATABASE_SWITCH = "database_switch"


class SwitchOutcome(str, Enum):
    NOOP = "noop"
    SUCCESS = "success"
    FAILED = "failed"


# ============================================================================
# Collection Names
# ============================================================================

COLLECTION_TICKETS = "tickets"
COLLECTION_COMMENTS = "comments"
COLLECTION_TICKET_HISTORY = "ticket_history"
COLLECTION_AUDIT_LOGS = "audit_logs"
COLLECTION_USERS = "users"


# ============================================================================
# Field Limits
# ============================================================================

TICKET_TITLE_MAX_LENGTH = 200
TICKET_DESCRIPTION_MAX_LENGTH = 2000
COMMENT_MAX_LENGTH = 1000
HISTORY_DESCRIPTION_MAX_LENGTH = 500
AUDIT_DETAILS_MAX_LENGTH = 500
COMMENT_PREVIEW_LENGTH = 50

AUDIT_LOG_DEFAULT_LIMIT = 50
AUDIT_LOG_MAX_LIMIT = 500


# ============================================================================
# HTTP Headers
# ============================================================================

HEADER_REQUEST_ID = "X-Request-ID"
HEADER_FORWARDED_FOR = "x-forwarded-for"
HEADER_REAL_IP = "x-real-ip"
HEADER_USER_AGENT = "user-agent"
UNKNOWN_CLIENT = "unknown"
