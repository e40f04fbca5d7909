"""JWT helpers

Identity is issued elsewhere; this service only needs to read the bearer
token and, for scripts and tests, mint one.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from jose import jwt

from splitledger.config import get_settings


def create_access_token(
    user_id: UUID, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed access token for a user.

    Args:
        user_id: Subject of the token
        expires_delta: Optional lifetime override

    Returns:
        Encoded JWT
    """
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    payload = {
        "sub": str(user_id),
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify an access token.

    Raises:
        JWTError: If the token is invalid or expired
    """
    settings = get_settings()
    return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
