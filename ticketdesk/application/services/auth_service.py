"""
Auth Service

Credential checks and session tokens.

Passwords are stored as bcrypt hashes. A successful login issues a signed
JWT (PyJWT) carrying the user's id, name, email and role; the guard
dependencies in ``api/security.py`` decode it on every request.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import bcrypt
import jwt

from ticketdesk.core.config.constants import Stage, UserRole
from ticketdesk.core.config.settings import AuthSettings
from ticketdesk.core.exceptions import AuthenticationError, ValidationError
from ticketdesk.core.logging.logger import get_logger
from ticketdesk.infrastructure.database.repositories import UserRepository, utc_now

logger = get_logger(__name__)

PASSWORD_MIN_LENGTH = 6


@dataclass(frozen=True)
class SessionUser:
    """Identity carried by a session token."""

    id: str
    name: str
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role.value}

    @classmethod
    def from_document(cls, user: dict[str, Any]) -> "SessionUser":
        return cls(
            id=str(user["_id"]),
            name=user["name"],
            email=user["email"],
            role=UserRole(user.get("role", UserRole.USER.value)),
        )


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


class AuthService:
    """
    Registration, login and session token handling.

    Usage:
        auth = AuthService(UserRepository(manager), settings.auth)
        user, token = await auth.login("admin@example.com", "admin123")
        session = auth.decode_token(token)
    """

    def __init__(self, user_repository: UserRepository, settings: AuthSettings):
        self.users = user_repository
        self.settings = settings

    # =========================================================================
    # Tokens
    # =========================================================================

    def issue_token(self, user: SessionUser) -> str:
        now = utc_now()
        payload = {
            "sub": user.id,
            "name": user.name,
            "email": user.email,
            "role": user.role.value,
            "iat": now,
            "exp": now + timedelta(minutes=self.settings.AUTH_TOKEN_TTL_MINUTES),
        }
        return jwt.encode(payload, self.settings.AUTH_SECRET_KEY, algorithm=self.settings.AUTH_ALGORITHM)

    def decode_token(self, token: str) -> SessionUser:
        """
        Raises:
            AuthenticationError: If the token is expired, tampered or incomplete
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.AUTH_SECRET_KEY,
                algorithms=[self.settings.AUTH_ALGORITHM],
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Session expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Invalid session token") from e

        try:
            return SessionUser(
                id=payload["sub"],
                name=payload["name"],
                email=payload["email"],
                role=UserRole(payload["role"]),
            )
        except (KeyError, ValueError) as e:
            raise AuthenticationError("Invalid session token") from e

    # =========================================================================
    # Accounts
    # =========================================================================

    async def register(self, name: str, email: str, password: str) -> SessionUser:
        """
        Create a regular user account.

        Raises:
            ValidationError: Missing fields, short password or duplicate email
        """
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise ValidationError("Name, email and password are required")
        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
                details={"field": "password", "min_length": PASSWORD_MIN_LENGTH},
            )

        if await self.users.find_by_email(email) is not None:
            raise ValidationError("User with this email already exists", details={"field": "email"})

        document = await self.users.insert(
            {
                "name": name,
                "email": email,
                "password": hash_password(password, self.settings.BCRYPT_ROUNDS),
                "role": UserRole.USER.value,
                "createdAt": utc_now(),
            }
        )
        logger.info("User registered", stage=Stage.AUTH, email=email)
        return SessionUser.from_document(document)

    async def login(self, email: str, password: str) -> tuple[SessionUser, str]:
        """
        Raises:
            AuthenticationError: Unknown email or wrong password
        """
        if not email or not password:
            raise AuthenticationError("Invalid email or password")

        user = await self.users.find_by_email(email)
        if user is None or not verify_password(password, user.get("password", "")):
            logger.warning("Login failed", stage=Stage.AUTH, email=email)
            raise AuthenticationError("Invalid email or password")

        session = SessionUser.from_document(user)
        return session, self.issue_token(session)
