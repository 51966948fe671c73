#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
ticketing service. All configuration is centralized here so the database
failover layer, the auth layer and the HTTP layer read the same values.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms

Note that PRIMARY_DB_URI / SECONDARY_DB_URI are optional here. Their absence
is reported by the target registry as a ConfigurationError on first database
access, so the app can still boot and serve /health.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """
    MongoDB endpoint and timeout configuration.

    STAGE-DB.0: Database target configuration
    """

    PRIMARY_DB_URI: str | None = Field(default=None, description="Primary MongoDB URI")
    SECONDARY_DB_URI: str | None = Field(default=None, description="Secondary MongoDB URI")
    USE_SECONDARY_DB: bool = Field(default=False, description="Prefer the secondary at startup")
    DATABASE_NAME: str = Field(default="ticketdesk", description="Database used when the URI names none")

    DB_CONNECT_TIMEOUT_MS: int = Field(default=10000, description="Connect-phase timeout (ms)")
    DB_SERVER_SELECTION_TIMEOUT_MS: int = Field(default=5000, description="Driver server selection timeout (ms)")
    DB_OPERATION_TIMEOUT: float = Field(default=15.0, description="Overall establish timeout (seconds)")
    DB_PROBE_TIMEOUT: float = Field(default=5.0, description="Connectivity probe timeout (seconds)")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class AuthSettings(BaseSettings):
    """
    Session token and password hashing configuration.

    STAGE-AUTH.0: Auth configuration
    """

    AUTH_SECRET_KEY: str = Field(default="change-me-in-production", description="JWT signing key")
    AUTH_ALGORITHM: str = Field(default="HS256", description="JWT signing algorithm")
    AUTH_TOKEN_TTL_MINUTES: int = Field(default=720, description="Session token lifetime")
    BCRYPT_ROUNDS: int = Field(default=12, description="bcrypt cost factor")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """
    General application settings.

    STAGE-0: Application initialization
    """

    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="TicketDesk", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    API_BASE_PATH: str = Field(default="/api", description="Prefix for all API routes")
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from ticketdesk.core.config.settings import get_settings

        settings = get_settings()
        primary = settings.database.PRIMARY_DB_URI
        level = settings.logging.LOG_LEVEL
    """

    # Database settings
    PRIMARY_DB_URI: str | None = Field(default=None, description="Primary MongoDB URI")
    SECONDARY_DB_URI: str | None = Field(default=None, description="Secondary MongoDB URI")
    USE_SECONDARY_DB: bool = Field(default=False, description="Prefer the secondary at startup")
    DATABASE_NAME: str = Field(default="ticketdesk", description="Database used when the URI names none")
    DB_CONNECT_TIMEOUT_MS: int = Field(default=10000, description="Connect-phase timeout (ms)")
    DB_SERVER_SELECTION_TIMEOUT_MS: int = Field(default=5000, description="Driver server selection timeout (ms)")
    DB_OPERATION_TIMEOUT: float = Field(default=15.0, description="Overall establish timeout (seconds)")
    DB_PROBE_TIMEOUT: float = Field(default=5.0, description="Connectivity probe timeout (seconds)")

    # Auth settings
    AUTH_SECRET_KEY: str = Field(default="change-me-in-production", description="JWT signing key")
    AUTH_ALGORITHM: str = Field(default="HS256", description="JWT signing algorithm")
    AUTH_TOKEN_TTL_MINUTES: int = Field(default=720, description="Session token lifetime")
    BCRYPT_ROUNDS: int = Field(default=12, description="bcrypt cost factor")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="TicketDesk", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    API_BASE_PATH: str = Field(default="/api", description="Prefix for all API routes")
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return DatabaseSettings(
            PRIMARY_DB_URI=self.PRIMARY_DB_URI,
            SECONDARY_DB_URI=self.SECONDARY_DB_URI,
            USE_SECONDARY_DB=self.USE_SECONDARY_DB,
            DATABASE_NAME=self.DATABASE_NAME,
            DB_CONNECT_TIMEOUT_MS=self.DB_CONNECT_TIMEOUT_MS,
            DB_SERVER_SELECTION_TIMEOUT_MS=self.DB_SERVER_SELECTION_TIMEOUT_MS,
            DB_OPERATION_TIMEOUT=self.DB_OPERATION_TIMEOUT,
            DB_PROBE_TIMEOUT=self.DB_PROBE_TIMEOUT,
        )

    @property
    def auth(self) -> AuthSettings:
        """Get auth settings."""
        return AuthSettings(
            AUTH_SECRET_KEY=self.AUTH_SECRET_KEY,
            AUTH_ALGORITHM=self.AUTH_ALGORITHM,
            AUTH_TOKEN_TTL_MINUTES=self.AUTH_TOKEN_TTL_MINUTES,
            BCRYPT_ROUNDS=self.BCRYPT_ROUNDS,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> ApplicationSettings:
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
            API_BASE_PATH=self.API_BASE_PATH,
            CORS_ORIGINS=self.CORS_ORIGINS,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    STAGE-0.3: Settings initialization

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
