"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

from unittest.mock import AsyncMock

import pytest
from bson import ObjectId

from ticketdesk.core.config.constants import DatabaseRole, UserRole
from ticketdesk.core.config.settings import DatabaseSettings
from ticketdesk.infrastructure.database.connection_manager import DatabaseConnectionManager
from ticketdesk.infrastructure.database.establisher import ConnectionEstablisher
from ticketdesk.infrastructure.database.targets import TargetRegistry
from tests.test_fixtures import PRIMARY_URI, SECONDARY_URI, FakeClientFactory, ScriptedEstablisher

# pytest-asyncio runs in auto mode (see pyproject.toml)


# ============================================================================
# Database Configuration Fixtures
# ============================================================================


@pytest.fixture
def database_settings():
    """Database settings pointing at two fake endpoints with short timeouts."""
    return DatabaseSettings(
        PRIMARY_DB_URI=PRIMARY_URI,
        SECONDARY_DB_URI=SECONDARY_URI,
        USE_SECONDARY_DB=False,
        DATABASE_NAME="ticketdesk",
        DB_CONNECT_TIMEOUT_MS=500,
        DB_SERVER_SELECTION_TIMEOUT_MS=500,
        DB_OPERATION_TIMEOUT=2.0,
        DB_PROBE_TIMEOUT=0.5,
    )


@pytest.fixture
def registry(database_settings):
    return TargetRegistry(database_settings)


@pytest.fixture
def client_factory():
    """Motor client stand-in; script per-URI behavior via ``client_factory.behaviors``."""
    return FakeClientFactory()


@pytest.fixture
def establisher(database_settings, client_factory):
    return ConnectionEstablisher.from_settings(database_settings, client_factory=client_factory)


@pytest.fixture
def audit_recorder():
    """Mock audit collaborator with an async ``record_event``."""
    recorder = AsyncMock()
    recorder.record_event = AsyncMock(return_value=None)
    return recorder


@pytest.fixture
def make_manager(database_settings, audit_recorder):
    """
    Build a DatabaseConnectionManager over a ScriptedEstablisher.

    Usage:
        manager, establisher = make_manager({DatabaseRole.PRIMARY: "fail"})
    """

    def _make(outcomes=None, delay=0.0, preferred=DatabaseRole.PRIMARY):
        scripted = ScriptedEstablisher(outcomes=outcomes, delay=delay)
        registry = TargetRegistry(database_settings)
        registry.set_preferred_role(preferred)
        manager = DatabaseConnectionManager(
            registry,
            scripted,
            probe_timeout=database_settings.DB_PROBE_TIMEOUT,
            audit_recorder=audit_recorder,
        )
        return manager, scripted

    return _make


# ============================================================================
# Session Fixtures
# ============================================================================


@pytest.fixture
def regular_user():
    from ticketdesk.application.services.auth_service import SessionUser

    return SessionUser(id=str(ObjectId()), name="John Doe", email="john@example.com", role=UserRole.USER)


@pytest.fixture
def other_user():
    from ticketdesk.application.services.auth_service import SessionUser

    return SessionUser(id=str(ObjectId()), name="Jane Smith", email="jane@example.com", role=UserRole.USER)


@pytest.fixture
def admin_user():
    from ticketdesk.application.services.auth_service import SessionUser

    return SessionUser(id=str(ObjectId()), name="Admin User", email="admin@example.com", role=UserRole.ADMIN)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def live_manager(database_settings, client_factory):
    """
    Connection manager over the real establisher and the fake client factory,
    with the real audit service as its audit recorder.
    """
    from ticketdesk.application.services.audit_service import AuditService

    manager = DatabaseConnectionManager(
        TargetRegistry(database_settings),
        ConnectionEstablisher.from_settings(database_settings, client_factory=client_factory),
        probe_timeout=database_settings.DB_PROBE_TIMEOUT,
    )
    manager.audit_recorder = AuditService(manager)
    return manager


@pytest.fixture
def test_app(live_manager):
    """FastAPI app with the connection manager overridden. Lifespan does not run."""
    from ticketdesk.application.api.dependencies import get_db_manager
    from ticketdesk.application.app import create_app
    from ticketdesk.core.config.settings import Settings, get_settings

    fast_settings = Settings(BCRYPT_ROUNDS=4)

    app = create_app()
    app.dependency_overrides[get_db_manager] = lambda: live_manager
    app.dependency_overrides[get_settings] = lambda: fast_settings
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    from fastapi.testclient import TestClient

    return TestClient(test_app)


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a SessionUser."""
    from ticketdesk.application.services.auth_service import AuthService
    from ticketdesk.core.config.settings import get_settings

    service = AuthService(user_repository=None, settings=get_settings().auth)

    def _headers(user):
        return {"Authorization": f"Bearer {service.issue_token(user)}"}

    return _headers


@pytest.fixture
def primary_db(client_factory):
    """In-memory database behind the primary endpoint."""
    return client_factory.database_for(PRIMARY_URI)


@pytest.fixture
def secondary_db(client_factory):
    return client_factory.database_for(SECONDARY_URI)
