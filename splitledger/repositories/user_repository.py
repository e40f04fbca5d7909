"""User data access"""
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.models.user import User


class UserRepository:
    """Repository for User database operations"""

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
        """
        Get user by ID.

        Args:
            db: Database session
            user_id: User UUID

        Returns:
            User if found, None otherwise
        """
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_ids(db: AsyncSession, user_ids: Iterable[UUID]) -> List[User]:
        """Get every user whose id is in user_ids (missing ids are skipped)"""
        ids = list(set(user_ids))
        if not ids:
            return []
        result = await db.execute(select(User).where(User.id.in_(ids)))
        return list(result.scalars().all())
