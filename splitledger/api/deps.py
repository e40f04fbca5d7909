"""Dependency injection (auth, db, notifier, coordinator)"""

from functools import lru_cache
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.config import get_settings
from splitledger.core.security import verify_token
from splitledger.database import get_db
from splitledger.models.user import User
from splitledger.repositories.user_repository import UserRepository
from splitledger.services.notifier import (Notifier, NullNotifier,
                                           RedisNotifier)
from splitledger.services.transaction_coordinator import TransactionCoordinator

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        credentials: Bearer credentials from the Authorization header
        db: Database session

    Returns:
        Current user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    try:
        payload = verify_token(credentials.credentials)
        user_id_str = payload.get("sub")

        if user_id_str is None:
            raise credentials_exception

        user_id = UUID(user_id_str)

    except (JWTError, ValueError):
        raise credentials_exception

    user = await UserRepository.get_by_id(db, user_id)

    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user"
        )

    return user


@lru_cache()
def get_notifier() -> Notifier:
    """Process-wide notifier: Redis pub/sub, or a no-op when disabled"""
    settings = get_settings()
    if settings.notifications_enabled:
        return RedisNotifier(
            settings.redis_url, channel_prefix=settings.notification_channel_prefix
        )
    return NullNotifier()


def get_coordinator(
    notifier: Notifier = Depends(get_notifier),
) -> TransactionCoordinator:
    """Coordinator bound to the configured notifier"""
    return TransactionCoordinator(notifier)
