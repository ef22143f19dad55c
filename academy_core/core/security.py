"""Token verification for requests coming through the authorization layer.

Login, token issuance and password handling live in the identity service.
This module only decodes the bearer token it hands out and exposes the
``{user_id, role}`` pair the core needs for audit attribution.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from academy_core.core.settings import settings


class AdminIdentity(BaseModel):
    """Authenticated caller as supplied by the authorization layer."""

    user_id: int
    role: str


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create access token (used by seed scripts and tests)."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.access_token_expire_minutes
        )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Optional[AdminIdentity]:
    """Verify access token and extract the caller identity."""
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        return None

    subject = payload.get("sub")
    if subject is None:
        return None
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        return None
    return AdminIdentity(user_id=user_id, role=payload.get("role", "ADMIN"))
