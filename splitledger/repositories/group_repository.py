"""Group and membership data access"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.models.group import Group, GroupMember


class GroupRepository:
    """Repository for Group and GroupMember reads"""

    @staticmethod
    async def get_by_id(db: AsyncSession, group_id: UUID) -> Optional[Group]:
        """Get group by ID"""
        result = await db.execute(select(Group).where(Group.id == group_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_active_membership(
        db: AsyncSession, group_id: UUID, user_id: UUID
    ) -> Optional[GroupMember]:
        """
        Get a user's active membership row in a group.

        Args:
            db: Database session
            group_id: Group UUID
            user_id: User UUID

        Returns:
            GroupMember if the user is an active member, None otherwise
        """
        result = await db.execute(
            select(GroupMember).where(
                and_(
                    GroupMember.group_id == group_id,
                    GroupMember.user_id == user_id,
                    GroupMember.is_active.is_(True),
                )
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_active_member_ids(db: AsyncSession, group_id: UUID) -> List[UUID]:
        """Ids of all active members of a group, in join order"""
        result = await db.execute(
            select(GroupMember.user_id)
            .where(
                and_(
                    GroupMember.group_id == group_id,
                    GroupMember.is_active.is_(True),
                )
            )
            .order_by(GroupMember.joined_at)
        )
        return list(result.scalars().all())
