"""
Admin API Models

Request/response models for the database management endpoints. Field names
are camelCase to match the JSON the admin settings page consumes.
"""

from typing import Literal

from pydantic import BaseModel, Field, StrictBool

__all__ = [
    "DatabaseActionRequest",
    "ConnectionStatusResponse",
    "DatabaseStatusResponse",
    "ProbeResponse",
    "DatabaseTestResponse",
    "DatabaseSwitchResponse",
]


class DatabaseActionRequest(BaseModel):
    """Body of ``POST /admin/database``."""

    action: Literal["test", "switch"] = Field(..., description="Probe a target or switch to it")
    useSecondary: StrictBool = Field(..., description="True targets the secondary database")


class ConnectionStatusResponse(BaseModel):
    isConnected: bool = Field(..., description="Whether a live connection is cached")
    currentDatabase: Literal["primary", "secondary", "none"] = Field(
        ..., description="Role backing the live connection"
    )
    connectionState: int = Field(..., ge=0, le=3, description="Raw connection state code")
    connectionStates: dict[int, str] = Field(..., description="Labels for every state code")


class DatabaseStatusResponse(BaseModel):
    status: ConnectionStatusResponse
    primaryUri: Literal["configured", "not configured"]
    secondaryUri: Literal["configured", "not configured"]


class ProbeResponse(BaseModel):
    success: bool
    database: Literal["primary", "secondary"]
    error: str | None = Field(default=None, description="Why the probe failed")


class DatabaseTestResponse(BaseModel):
    testResult: ProbeResponse


class DatabaseSwitchResponse(BaseModel):
    message: str
    status: ConnectionStatusResponse
