"""Expense data access"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, delete as sql_delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from splitledger.models.expense import Expense
from splitledger.models.split import Split


class ExpenseRepository:
    """Repository for Expense database operations"""

    @staticmethod
    async def create(db: AsyncSession, expense: Expense) -> Expense:
        """
        Create a new expense.

        Args:
            db: Database session
            expense: Expense object to create

        Returns:
            Created expense
        """
        db.add(expense)
        await db.flush()
        return expense

    @staticmethod
    async def get_by_id(db: AsyncSession, expense_id: UUID) -> Optional[Expense]:
        """
        Get expense by ID.

        Args:
            db: Database session
            expense_id: Expense UUID

        Returns:
            Expense if found, None otherwise
        """
        result = await db.execute(select(Expense).where(Expense.id == expense_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_with_splits(
        db: AsyncSession, expense_id: UUID
    ) -> Optional[Expense]:
        """
        Get expense with payer and splits (and their users) eagerly loaded.

        Always re-reads the row so a caller sees splits rewritten earlier in
        the same session.

        Args:
            db: Database session
            expense_id: Expense UUID

        Returns:
            Expense with splits if found, None otherwise
        """
        result = await db.execute(
            select(Expense)
            .where(Expense.id == expense_id)
            .options(
                selectinload(Expense.splits).selectinload(Split.user),
                selectinload(Expense.payer),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _has_split(user_id: UUID):
        """Subquery of expense ids in which the user holds a split"""
        return select(Split.expense_id).where(Split.user_id == user_id)

    @staticmethod
    def _involving_user(user_id: UUID):
        """Expenses the user paid or holds a split in"""
        return or_(
            Expense.paid_by_id == user_id,
            Expense.id.in_(ExpenseRepository._has_split(user_id)),
        )

    @staticmethod
    async def get_user_expenses(
        db: AsyncSession,
        user_id: UUID,
        skip: int = 0,
        limit: int = 20,
        group_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Expense]:
        """
        Get a page of expenses involving a user, most recent first.

        Args:
            db: Database session
            user_id: User UUID
            skip: Number of records to skip
            limit: Maximum number of records to return
            group_id: Optional group filter
            start_date: Optional start date filter
            end_date: Optional end date filter

        Returns:
            List of expenses with payer and splits loaded
        """
        query = select(Expense).where(ExpenseRepository._involving_user(user_id))

        if group_id:
            query = query.where(Expense.group_id == group_id)
        if start_date:
            query = query.where(Expense.expense_date >= start_date)
        if end_date:
            query = query.where(Expense.expense_date <= end_date)

        query = (
            query.order_by(Expense.expense_date.desc(), Expense.created_at.desc())
            .offset(skip)
            .limit(limit)
            .options(selectinload(Expense.splits), selectinload(Expense.payer))
            .execution_options(populate_existing=True)
        )

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def count_user_expenses(
        db: AsyncSession,
        user_id: UUID,
        group_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        """Count expenses involving a user with the same filters as get_user_expenses"""
        query = select(func.count(Expense.id)).where(
            ExpenseRepository._involving_user(user_id)
        )

        if group_id:
            query = query.where(Expense.group_id == group_id)
        if start_date:
            query = query.where(Expense.expense_date >= start_date)
        if end_date:
            query = query.where(Expense.expense_date <= end_date)

        result = await db.execute(query)
        return result.scalar_one()

    @staticmethod
    async def get_expenses_for_balance(
        db: AsyncSession, user_id: UUID, group_id: Optional[UUID] = None
    ) -> List[Expense]:
        """
        Get every expense the user paid or holds a split in, with splits loaded.

        Args:
            db: Database session
            user_id: User UUID
            group_id: Optional group scope

        Returns:
            List of expenses ordered by date
        """
        query = select(Expense).where(ExpenseRepository._involving_user(user_id))
        if group_id:
            query = query.where(Expense.group_id == group_id)

        query = (
            query.order_by(Expense.expense_date, Expense.created_at)
            .options(selectinload(Expense.splits))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_expenses_between(
        db: AsyncSession,
        user_a_id: UUID,
        user_b_id: UUID,
        group_id: Optional[UUID] = None,
    ) -> List[Expense]:
        """
        Get expenses paid by one of the two users with a split for the other.

        Args:
            db: Database session
            user_a_id: First user UUID
            user_b_id: Second user UUID
            group_id: Optional group scope (None means every scope)

        Returns:
            List of expenses with splits loaded, oldest first
        """
        query = select(Expense).where(
            or_(
                and_(
                    Expense.paid_by_id == user_a_id,
                    Expense.id.in_(ExpenseRepository._has_split(user_b_id)),
                ),
                and_(
                    Expense.paid_by_id == user_b_id,
                    Expense.id.in_(ExpenseRepository._has_split(user_a_id)),
                ),
            )
        )
        if group_id:
            query = query.where(Expense.group_id == group_id)

        query = (
            query.order_by(Expense.expense_date, Expense.created_at)
            .options(selectinload(Expense.splits))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def get_group_expenses(db: AsyncSession, group_id: UUID) -> List[Expense]:
        """Get all expenses of a group with splits loaded"""
        result = await db.execute(
            select(Expense)
            .where(Expense.group_id == group_id)
            .order_by(Expense.expense_date, Expense.created_at)
            .options(selectinload(Expense.splits))
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def delete(db: AsyncSession, expense_id: UUID) -> bool:
        """
        Delete an expense row. Children must already be removed.

        Args:
            db: Database session
            expense_id: Expense UUID

        Returns:
            True if a row was deleted
        """
        result = await db.execute(
            sql_delete(Expense)
            .where(Expense.id == expense_id)
            .execution_options(synchronize_session=False)
        )
        await db.flush()
        return result.rowcount > 0
