"""Balance endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.api.deps import get_current_user
from splitledger.database import get_db
from splitledger.models.user import User
from splitledger.schemas.balance import BalanceSummary, OptimizedSettlementPlan
from splitledger.schemas.settlement import SettlementSuggestion
from splitledger.services.ledger_aggregator import LedgerAggregator
from splitledger.services.settlement_service import SettlementService

router = APIRouter(prefix="/balances", tags=["Balances"])


@router.get("", response_model=BalanceSummary)
async def get_balances(
    group_id: Optional[UUID] = Query(None, description="Limit to one group"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the current user's balances.

    Totals owed and owing, one entry per counterparty, and the most recent
    settlements. Balances are computed from unsettled splits on every call.

    Args:
        group_id: Optional group scope
        current_user: Current authenticated user
        db: Database session

    Returns:
        Balance summary
    """
    return await LedgerAggregator.compute_balances(current_user.id, db, group_id)


@router.get("/suggestions", response_model=List[SettlementSuggestion])
async def get_suggestions(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Who to collect from or pay, largest amount first"""
    return await LedgerAggregator.get_settlement_suggestions(current_user.id, db)


@router.get("/groups/{group_id}/optimized", response_model=OptimizedSettlementPlan)
async def get_optimized_group_settlement(
    group_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Fewest transfers that settle every balance in a group.

    Raises:
        403: If the user is not a member of the group
        404: If the group doesn't exist
    """
    return await SettlementService.plan_group_settlement(group_id, current_user.id, db)
