"""JWT bearer token verification and role gates.

Tokens are issued by the identity provider; this service only verifies them
and reads the user id (``sub``) and ``role`` claims. No user table is kept.
"""
import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from building_registry.config import get_settings
from building_registry.errors import Forbidden

settings = get_settings()
security = HTTPBearer()


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    WRITE = "WRITE"
    READ = "READ"


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller, passed explicitly into every write operation."""
    id: uuid.UUID
    role: Role


def create_access_token(user_id: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS))
    payload = {
        "sub": str(user_id),
        "role": role,
        "type": "access",
        "exp": expire,
        "iat": now,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str, token_type: str = "access") -> dict:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        if payload.get("type") != token_type:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token type",
            )
        return payload
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """Get the current authenticated user from JWT token."""
    payload = verify_token(credentials.credentials, "access")

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
        role = Role(payload.get("role"))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    return CurrentUser(id=user_id, role=role)


class RoleChecker:
    """Dependency that admits only the given roles."""

    def __init__(self, *allowed: Role):
        self.allowed = allowed

    async def __call__(self, current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in self.allowed:
            raise Forbidden([role.value for role in self.allowed])
        return current_user


require_writer = RoleChecker(Role.WRITE, Role.ADMIN)
require_admin = RoleChecker(Role.ADMIN)
