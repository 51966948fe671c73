"""
Session Guards

Plain guard dependencies for the protected routes:

- ``require_session``: a valid bearer token is present (401 otherwise)
- ``require_admin``: the session belongs to an admin (403 otherwise)

Both raise domain exceptions; the application's exception handlers turn them
into status codes.
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ticketdesk.application.api.dependencies import AuthServiceDep
from ticketdesk.application.services.auth_service import SessionUser
from ticketdesk.core.exceptions import AuthenticationError, AuthorizationError

bearer_scheme = HTTPBearer(auto_error=False)


async def require_session(
    auth: AuthServiceDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> SessionUser:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Unauthorized")
    return auth.decode_token(credentials.credentials)


SessionDep = Annotated[SessionUser, Depends(require_session)]


async def require_admin(user: SessionDep) -> SessionUser:
    if not user.is_admin:
        raise AuthorizationError("Forbidden", details={"required_role": "admin"})
    return user


AdminDep = Annotated[SessionUser, Depends(require_admin)]
