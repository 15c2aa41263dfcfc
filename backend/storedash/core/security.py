"""
Security utilities: JWT bearer tokens for store owners.

Sign-in itself happens at the identity provider; this module only issues
(for tooling and tests) and verifies the tokens it hands out.
"""
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from storedash.core.config import settings
from storedash.core.logging import get_logger

logger = get_logger(__name__)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=settings.jwt_expiration_hours)
    )
    to_encode.update({"exp": expire, "iat": datetime.now(timezone.utc)})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a JWT access token."""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        return payload
    except JWTError as e:
        logger.warning("Invalid JWT token", error=str(e))
        return None


def owner_id_from_token(token: str) -> str | None:
    """Return the store owner id (``sub`` claim) carried by a valid token."""
    payload = decode_access_token(token)
    if not payload:
        return None
    subject = payload.get("sub")
    return str(subject) if subject else None
