"""Expense endpoints"""
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.api.deps import get_coordinator, get_current_user
from splitledger.database import get_db
from splitledger.models.user import User
from splitledger.schemas.expense import (ExpenseCreate, ExpenseListResponse,
                                         ExpenseResponse, ExpenseUpdate)
from splitledger.services.expense_service import ExpenseService
from splitledger.services.transaction_coordinator import TransactionCoordinator

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
):
    """
    Create a new expense paid by the current user.

    Args:
        expense_data: Expense creation data with split inputs
        current_user: Current authenticated user
        db: Database session
        coordinator: Ledger transaction coordinator

    Returns:
        Created expense with all splits

    Raises:
        400: If validation fails (amounts, split inputs, group membership)
        403: If the user is not a member of the group
        404: If a participant, group or tag doesn't exist
        409: If a tag is given twice
    """
    expense = await coordinator.create_expense(expense_data, current_user.id, db)
    return ExpenseResponse.model_validate(expense)


@router.get("", response_model=ExpenseListResponse)
async def list_expenses(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    group_id: Optional[UUID] = Query(None, description="Filter by group"),
    start_date: Optional[date] = Query(None, description="Filter by start date"),
    end_date: Optional[date] = Query(None, description="Filter by end date"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get list of expenses involving the current user.

    Each item carries the user's share: what others owe them on expenses
    they paid ("credit"), or their own split otherwise ("debit").
    """
    return await ExpenseService.get_user_expenses(
        current_user.id,
        db,
        page=page,
        page_size=page_size,
        group_id=group_id,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get detailed information about a specific expense.

    Raises:
        404: If expense not found
        403: If user is neither payer nor participant
    """
    return await ExpenseService.get_expense_details(expense_id, current_user.id, db)


@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: UUID,
    expense_data: ExpenseUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
):
    """
    Update an existing expense; its splits are recomputed.

    Raises:
        400: If validation fails
        403: If user is neither payer nor group owner/admin
        404: If expense or a participant doesn't exist
        409: If some participant already settled their split
    """
    expense = await coordinator.update_expense(
        expense_id, expense_data, current_user.id, db
    )
    return ExpenseResponse.model_validate(expense)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
):
    """
    Delete an expense with its splits, tags and receipts.

    Raises:
        404: If expense not found
        403: If user is neither payer nor group owner/admin
    """
    await coordinator.delete_expense(expense_id, current_user.id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
