"""
Audit Log Routes

Admin-only, paginated view of the audit trail. Viewing the trail is itself
audited.
"""

from typing import Annotated

from fastapi import APIRouter, Query

from ticketdesk.application.api.dependencies import AuditServiceDep, RequestInfoDep
from ticketdesk.application.api.models.audit import AuditLogListResponse
from ticketdesk.application.api.security import AdminDep
from ticketdesk.core.config.constants import AUDIT_LOG_DEFAULT_LIMIT, AUDIT_LOG_MAX_LIMIT, AuditAction

router = APIRouter(prefix="/audit-logs", tags=["Audit"])


@router.get("", response_model=AuditLogListResponse)
async def list_audit_logs(
    admin: AdminDep,
    audit: AuditServiceDep,
    request_info: RequestInfoDep,
    limit: Annotated[int, Query(ge=1, le=AUDIT_LOG_MAX_LIMIT)] = AUDIT_LOG_DEFAULT_LIMIT,
    skip: Annotated[int, Query(ge=0)] = 0,
):
    result = await audit.list_events(limit=limit, skip=skip)

    await audit.record_event(
        admin.id,
        AuditAction.VIEW_AUDIT_LOGS,
        f"Admin viewed audit logs ({len(result['logs'])} entries)",
        request_info.ip_address,
        request_info.user_agent,
    )

    return result
