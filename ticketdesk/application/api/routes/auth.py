"""
Auth Routes

Registration, login and logout. Sessions are stateless bearer tokens, so
logout only records the event; the client discards its token.
"""

from fastapi import APIRouter, status

from ticketdesk.application.api.dependencies import AuditServiceDep, AuthServiceDep, RequestInfoDep
from ticketdesk.application.api.models.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from ticketdesk.application.api.security import SessionDep
from ticketdesk.core.config.constants import AuditAction

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    auth: AuthServiceDep,
    audit: AuditServiceDep,
    request_info: RequestInfoDep,
):
    user = await auth.register(body.name, body.email, body.password)

    await audit.record_event(
        user.id,
        AuditAction.REGISTER,
        f"User {user.email} registered",
        request_info.ip_address,
        request_info.user_agent,
    )

    return {"message": "User created successfully", "user": user.to_dict()}


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    auth: AuthServiceDep,
    audit: AuditServiceDep,
    request_info: RequestInfoDep,
):
    user, token = await auth.login(body.email, body.password)

    await audit.record_event(
        user.id,
        AuditAction.LOGIN,
        f"User {user.email} logged in successfully",
        request_info.ip_address,
        request_info.user_agent,
    )

    return {"access_token": token, "token_type": "bearer", "user": user.to_dict()}


@router.post("/logout")
async def logout(user: SessionDep, audit: AuditServiceDep, request_info: RequestInfoDep):
    await audit.record_event(
        user.id,
        AuditAction.LOGOUT,
        f"User {user.email} logged out",
        request_info.ip_address,
        request_info.user_agent,
    )
    return {"message": "Logged out successfully"}
