"""Settlement endpoints"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.api.deps import get_coordinator, get_current_user
from splitledger.database import get_db
from splitledger.models.settlement import SettlementMethod, SettlementStatus
from splitledger.models.user import User
from splitledger.schemas.settlement import (PendingSettlementListResponse,
                                            SettlementCreate,
                                            SettlementListResponse,
                                            SettlementResponse)
from splitledger.services.settlement_service import SettlementService
from splitledger.services.transaction_coordinator import TransactionCoordinator

router = APIRouter(prefix="/settlements", tags=["Settlements"])


@router.post("", response_model=SettlementResponse, status_code=status.HTTP_201_CREATED)
async def create_settlement(
    settlement_data: SettlementCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
):
    """
    Record a payment from the current user to another user.

    The settlement starts PENDING; it settles splits once completed.

    Raises:
        400: If paying oneself or amount is not positive
        403: If the user is not a member of the group
        404: If the payee or group doesn't exist
        409: If nothing is outstanding or the amount exceeds it
    """
    settlement = await coordinator.create_settlement(settlement_data, current_user.id, db)
    return SettlementResponse.model_validate(settlement)


@router.get("", response_model=SettlementListResponse)
async def get_settlement_history(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    status_filter: Optional[SettlementStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Settlements the current user paid or received, newest first"""
    return await SettlementService.get_settlement_history(
        current_user.id, db, page=page, page_size=page_size, status=status_filter
    )


@router.get("/pending", response_model=PendingSettlementListResponse)
async def get_pending_settlements(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Pending settlements of the current user with their total amount"""
    return await SettlementService.get_pending_settlements(
        current_user.id, db, page=page, page_size=page_size
    )


@router.get("/groups/{group_id}", response_model=SettlementListResponse)
async def get_group_settlements(
    group_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    status_filter: Optional[SettlementStatus] = Query(None, alias="status"),
    method: Optional[SettlementMethod] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Settlements within a group.

    Raises:
        403: If the user is not a member of the group
        404: If the group doesn't exist
    """
    return await SettlementService.get_group_settlements(
        group_id,
        current_user.id,
        db,
        page=page,
        page_size=page_size,
        status=status_filter,
        method=method,
        start_date=start_date,
        end_date=end_date,
    )


@router.post("/{settlement_id}/complete", response_model=SettlementResponse)
async def complete_settlement(
    settlement_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
):
    """
    Mark a pending settlement completed and settle the splits it covers.

    Raises:
        403: If the user is neither payer nor payee
        404: If the settlement doesn't exist
        409: If the settlement is already completed or cancelled
    """
    settlement = await coordinator.complete_settlement(settlement_id, current_user.id, db)
    return SettlementResponse.model_validate(settlement)


@router.post("/{settlement_id}/cancel", response_model=SettlementResponse)
async def cancel_settlement(
    settlement_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    coordinator: TransactionCoordinator = Depends(get_coordinator),
):
    """
    Cancel a pending settlement; no splits change.

    Raises:
        403: If the user is neither payer nor payee
        404: If the settlement doesn't exist
        409: If the settlement is already completed or cancelled
    """
    settlement = await coordinator.cancel_settlement(settlement_id, current_user.id, db)
    return SettlementResponse.model_validate(settlement)
