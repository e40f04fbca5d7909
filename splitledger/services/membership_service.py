"""Group membership lookups used by the ledger"""
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.models.group import MemberRole
from splitledger.repositories.group_repository import GroupRepository


class MembershipService:
    """Answers membership questions from current (never cached) rows"""

    @staticmethod
    async def is_active_member(db: AsyncSession, user_id: UUID, group_id: UUID) -> bool:
        """
        Check whether a user is an active member of a group.

        Args:
            db: Database session
            user_id: User UUID
            group_id: Group UUID

        Returns:
            True if the user has an active membership
        """
        membership = await GroupRepository.get_active_membership(db, group_id, user_id)
        return membership is not None

    @staticmethod
    async def list_active_members(db: AsyncSession, group_id: UUID) -> List[UUID]:
        """Ids of the group's active members"""
        return await GroupRepository.list_active_member_ids(db, group_id)

    @staticmethod
    async def can_manage_group(db: AsyncSession, user_id: UUID, group_id: UUID) -> bool:
        """True if the user is an active OWNER or ADMIN of the group"""
        membership = await GroupRepository.get_active_membership(db, group_id, user_id)
        return membership is not None and membership.role in (
            MemberRole.OWNER,
            MemberRole.ADMIN,
        )
