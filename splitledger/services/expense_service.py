"""Expense read operations"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.core.exceptions import AuthorizationError, NotFoundError
from splitledger.models.expense import Expense
from splitledger.repositories.expense_repository import ExpenseRepository
from splitledger.schemas.common import PaginationMeta
from splitledger.schemas.expense import (ExpenseListItem, ExpenseListResponse,
                                         ExpenseResponse)
from splitledger.schemas.user import UserBrief
from splitledger.utils.decimal_utils import ZERO, sum_decimals


class ExpenseService:
    """Service for expense reads; writes go through TransactionCoordinator"""

    @staticmethod
    def share_for(expense: Expense, user_id: UUID) -> ExpenseListItem:
        """
        Summarize an expense from one user's point of view.

        The payer sees what the others owe them ("credit"); everybody else
        sees their own split ("debit").
        """
        if expense.paid_by_id == user_id:
            your_share = sum_decimals(
                s.amount for s in expense.splits if s.user_id != user_id
            )
            share_type = "credit"
        else:
            your_share = next(
                (s.amount for s in expense.splits if s.user_id == user_id), ZERO
            )
            share_type = "debit"

        return ExpenseListItem(
            id=expense.id,
            expense_date=expense.expense_date,
            group_id=expense.group_id,
            description=expense.description,
            amount=expense.amount,
            your_share=your_share,
            share_type=share_type,
            paid_by=UserBrief.model_validate(expense.payer),
        )

    @staticmethod
    async def get_user_expenses(
        user_id: UUID,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 20,
        group_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ExpenseListResponse:
        """
        Get expenses for a user with pagination.

        Args:
            user_id: User ID
            db: Database session
            page: Page number (1-indexed)
            page_size: Items per page
            group_id: Optional group filter
            start_date: Optional start date filter
            end_date: Optional end date filter

        Returns:
            Page of expenses with the user's share in each
        """
        skip = (page - 1) * page_size

        expenses = await ExpenseRepository.get_user_expenses(
            db,
            user_id,
            skip=skip,
            limit=page_size,
            group_id=group_id,
            start_date=start_date,
            end_date=end_date,
        )
        total_count = await ExpenseRepository.count_user_expenses(
            db,
            user_id,
            group_id=group_id,
            start_date=start_date,
            end_date=end_date,
        )

        items: List[ExpenseListItem] = [
            ExpenseService.share_for(expense, user_id) for expense in expenses
        ]
        return ExpenseListResponse(
            items=items,
            pagination=PaginationMeta.for_page(page, page_size, total_count),
        )

    @staticmethod
    async def get_expense_details(
        expense_id: UUID, user_id: UUID, db: AsyncSession
    ) -> ExpenseResponse:
        """
        Get expense details with authorization check.

        Args:
            expense_id: Expense ID
            user_id: User ID requesting the expense
            db: Database session

        Returns:
            Expense with payer and splits

        Raises:
            NotFoundError: If expense not found
            AuthorizationError: If user is neither payer nor participant
        """
        expense = await ExpenseRepository.get_with_splits(db, expense_id)

        if not expense:
            raise NotFoundError("Expense not found")

        involved = expense.paid_by_id == user_id or any(
            split.user_id == user_id for split in expense.splits
        )
        if not involved:
            raise AuthorizationError("You are not authorized to view this expense")

        return ExpenseResponse.model_validate(expense)
