"""Split data access"""
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import and_, delete as sql_delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.models.expense import Expense
from splitledger.models.split import Split


class SplitRepository:
    """Repository for Split database operations"""

    @staticmethod
    async def create_batch(db: AsyncSession, splits: List[Split]) -> List[Split]:
        """
        Create multiple splits in a batch.

        Args:
            db: Database session
            splits: List of Split objects

        Returns:
            List of created splits
        """
        db.add_all(splits)
        await db.flush()
        return splits

    @staticmethod
    async def delete_by_expense(db: AsyncSession, expense_id: UUID) -> int:
        """
        Delete all splits of an expense.

        Args:
            db: Database session
            expense_id: Expense UUID

        Returns:
            Number of splits deleted
        """
        result = await db.execute(
            sql_delete(Split)
            .where(Split.expense_id == expense_id)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount

    @staticmethod
    async def has_settled_split(
        db: AsyncSession, expense_id: UUID, exclude_user_id: Optional[UUID] = None
    ) -> bool:
        """True if any split of the expense (optionally ignoring one user's) is settled"""
        condition = and_(Split.expense_id == expense_id, Split.is_settled.is_(True))
        if exclude_user_id is not None:
            condition = and_(condition, Split.user_id != exclude_user_id)

        result = await db.execute(select(exists().where(condition)))
        return bool(result.scalar())

    @staticmethod
    async def get_unsettled_owed_to(
        db: AsyncSession,
        debtor_id: UUID,
        creditor_id: UUID,
        group_id: Optional[UUID] = None,
    ) -> List[Split]:
        """
        Get the debtor's unsettled splits on expenses the creditor paid.

        Args:
            db: Database session
            debtor_id: User holding the splits
            creditor_id: Payer of the expenses
            group_id: Optional group scope (None means every scope)

        Returns:
            Splits ordered by expense date, oldest first
        """
        query = (
            select(Split)
            .join(Expense, Split.expense_id == Expense.id)
            .where(
                and_(
                    Split.user_id == debtor_id,
                    Split.is_settled.is_(False),
                    Expense.paid_by_id == creditor_id,
                )
            )
        )
        if group_id:
            query = query.where(Expense.group_id == group_id)

        query = query.order_by(
            Expense.expense_date, Expense.created_at, Split.created_at
        ).execution_options(populate_existing=True)

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def mark_settled(
        db: AsyncSession, split_ids: Iterable[UUID], settled_at: datetime
    ) -> int:
        """
        Flip unsettled splits to settled.

        Already settled splits are left alone, so a split is settled once.

        Returns:
            Number of splits flipped
        """
        ids = list(split_ids)
        if not ids:
            return 0

        result = await db.execute(
            update(Split)
            .where(and_(Split.id.in_(ids), Split.is_settled.is_(False)))
            .values(is_settled=True, settled_at=settled_at)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount

    @staticmethod
    async def refresh_expense_settled_flags(
        db: AsyncSession, expense_ids: Iterable[UUID]
    ) -> None:
        """Set Expense.is_settled for each expense from the state of its splits"""
        ids = list(set(expense_ids))
        if not ids:
            return

        result = await db.execute(
            select(Split.expense_id)
            .where(and_(Split.expense_id.in_(ids), Split.is_settled.is_(False)))
            .distinct()
        )
        open_ids = set(result.scalars().all())
        settled_ids = [expense_id for expense_id in ids if expense_id not in open_ids]

        if settled_ids:
            await db.execute(
                update(Expense)
                .where(Expense.id.in_(settled_ids))
                .values(is_settled=True)
                .execution_options(synchronize_session=False)
            )
        if open_ids:
            await db.execute(
                update(Expense)
                .where(Expense.id.in_(list(open_ids)))
                .values(is_settled=False)
                .execution_options(synchronize_session=False)
            )
        await db.flush()
