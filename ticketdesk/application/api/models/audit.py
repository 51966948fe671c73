"""
Audit Log API Models
"""

from typing import Any

from pydantic import BaseModel, Field

__all__ = ["AuditLogListResponse"]


class AuditLogListResponse(BaseModel):
    logs: list[dict[str, Any]] = Field(default_factory=list, description="Newest first")
    total: int = Field(..., ge=0)
    hasMore: bool
