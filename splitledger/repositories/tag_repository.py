"""Tag, expense-tag and receipt data access"""
from typing import Iterable, List
from uuid import UUID

from sqlalchemy import delete as sql_delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.models.tag import ExpenseTag, Receipt, Tag


class TagRepository:
    """Repository for tags and their links to expenses"""

    @staticmethod
    async def get_by_ids(db: AsyncSession, tag_ids: Iterable[UUID]) -> List[Tag]:
        """Get tags whose id is in tag_ids"""
        ids = list(set(tag_ids))
        if not ids:
            return []
        result = await db.execute(select(Tag).where(Tag.id.in_(ids)))
        return list(result.scalars().all())

    @staticmethod
    async def attach(db: AsyncSession, expense_id: UUID, tag_ids: Iterable[UUID]) -> int:
        """Link tags to an expense"""
        links = [ExpenseTag(expense_id=expense_id, tag_id=tag_id) for tag_id in tag_ids]
        if links:
            db.add_all(links)
            await db.flush()
        return len(links)

    @staticmethod
    async def detach_all(db: AsyncSession, expense_id: UUID) -> int:
        """Remove every tag link of an expense"""
        result = await db.execute(
            sql_delete(ExpenseTag)
            .where(ExpenseTag.expense_id == expense_id)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount

    @staticmethod
    async def delete_receipts(db: AsyncSession, expense_id: UUID) -> int:
        """Remove every receipt of an expense"""
        result = await db.execute(
            sql_delete(Receipt)
            .where(Receipt.expense_id == expense_id)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount
