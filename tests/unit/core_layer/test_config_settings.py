"""
Unit Tests for Configuration Settings

Tests the settings loading, validation, and default values.
"""

import os
from unittest.mock import patch

import pytest

from ticketdesk.core.config.constants import DatabaseRole
from ticketdesk.core.config.settings import DatabaseSettings, Settings, get_settings, reload_settings


@pytest.mark.unit
class TestSettingsInitialization:
    """Test Settings class initialization and validation."""

    def test_settings_has_required_attribute_groups(self):
        settings = Settings()

        assert hasattr(settings, "database")
        assert hasattr(settings, "auth")
        assert hasattr(settings, "logging")
        assert hasattr(settings, "app")

    def test_database_timeouts_have_expected_defaults(self):
        settings = DatabaseSettings()

        assert settings.DB_CONNECT_TIMEOUT_MS == 10000
        assert settings.DB_SERVER_SELECTION_TIMEOUT_MS == 5000
        assert settings.DB_OPERATION_TIMEOUT == 15.0
        assert settings.DB_PROBE_TIMEOUT == 5.0

    def test_auth_settings_have_valid_defaults(self):
        settings = Settings()

        assert settings.auth.AUTH_ALGORITHM == "HS256"
        assert settings.auth.AUTH_TOKEN_TTL_MINUTES > 0
        assert settings.auth.BCRYPT_ROUNDS >= 4

    def test_app_settings_have_valid_defaults(self):
        settings = Settings()

        assert len(settings.app.APP_NAME) > 0
        assert settings.app.API_BASE_PATH.startswith("/")
        assert settings.app.ENVIRONMENT in ["development", "staging", "production", "test"]


@pytest.mark.unit
class TestSettingsFromEnvironment:
    """Test settings loaded from environment variables."""

    def test_database_uris_are_read_from_environment(self):
        env = {
            "PRIMARY_DB_URI": "mongodb://primary:27017/app",
            "SECONDARY_DB_URI": "mongodb://secondary:27017/app",
            "USE_SECONDARY_DB": "true",
        }
        with patch.dict(os.environ, env):
            settings = Settings()

        assert settings.database.PRIMARY_DB_URI == "mongodb://primary:27017/app"
        assert settings.database.SECONDARY_DB_URI == "mongodb://secondary:27017/app"
        assert settings.database.USE_SECONDARY_DB is True
        assert DatabaseRole.from_flag(settings.database.USE_SECONDARY_DB) is DatabaseRole.SECONDARY

    def test_log_level_is_normalized_to_upper_case(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}):
            settings = Settings()

        assert settings.logging.LOG_LEVEL == "DEBUG"

    def test_invalid_log_level_is_rejected(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "CHATTY"}):
            with pytest.raises(ValueError):
                Settings()


@pytest.mark.unit
class TestSettingsSingleton:
    def test_get_settings_returns_same_instance(self):
        assert get_settings() is get_settings()

    def test_reload_settings_replaces_instance(self):
        before = get_settings()
        after = reload_settings()

        assert after is not before
        assert get_settings() is after
