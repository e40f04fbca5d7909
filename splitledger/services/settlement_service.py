"""Settlement read operations and group settle-up plans"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.core.exceptions import AuthorizationError, NotFoundError
from splitledger.models.settlement import SettlementMethod, SettlementStatus
from splitledger.repositories.group_repository import GroupRepository
from splitledger.repositories.settlement_repository import SettlementRepository
from splitledger.schemas.balance import OptimizedSettlementPlan
from splitledger.schemas.common import PaginationMeta
from splitledger.schemas.settlement import (PendingSettlementListResponse,
                                            SettlementListResponse,
                                            SettlementResponse)
from splitledger.services.ledger_aggregator import LedgerAggregator
from splitledger.services.membership_service import MembershipService
from splitledger.services.settlement_optimizer import SettlementOptimizer


class SettlementService:
    """Service for settlement reads; writes go through TransactionCoordinator"""

    @staticmethod
    async def get_settlement_history(
        user_id: UUID,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        status: Optional[SettlementStatus] = None,
    ) -> SettlementListResponse:
        """
        Get settlements the user paid or received, newest first.

        Args:
            user_id: User ID
            db: Database session
            page: Page number (1-indexed)
            page_size: Items per page
            status: Optional status filter

        Returns:
            Page of settlements
        """
        filters = {"user_id": user_id, "status": status}
        settlements = await SettlementRepository.get_settlements(
            db, skip=(page - 1) * page_size, limit=page_size, **filters
        )
        total = await SettlementRepository.count(db, **filters)

        return SettlementListResponse(
            items=[SettlementResponse.model_validate(s) for s in settlements],
            pagination=PaginationMeta.for_page(page, page_size, total),
        )

    @staticmethod
    async def get_pending_settlements(
        user_id: UUID, db: AsyncSession, page: int = 1, page_size: int = 10
    ) -> PendingSettlementListResponse:
        """Pending settlements the user is part of, with their total amount"""
        filters = {"user_id": user_id, "status": SettlementStatus.PENDING}
        settlements = await SettlementRepository.get_settlements(
            db, skip=(page - 1) * page_size, limit=page_size, **filters
        )
        total = await SettlementRepository.count(db, **filters)
        total_amount = await SettlementRepository.sum_amount(db, **filters)

        return PendingSettlementListResponse(
            items=[SettlementResponse.model_validate(s) for s in settlements],
            pagination=PaginationMeta.for_page(page, page_size, total),
            total_pending_amount=total_amount,
        )

    @staticmethod
    async def _require_member(db: AsyncSession, user_id: UUID, group_id: UUID) -> None:
        group = await GroupRepository.get_by_id(db, group_id)
        if group is None:
            raise NotFoundError("Group does not exist")
        if not await MembershipService.is_active_member(db, user_id, group_id):
            raise AuthorizationError("You are not a member of this group")

    @staticmethod
    async def get_group_settlements(
        group_id: UUID,
        user_id: UUID,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        status: Optional[SettlementStatus] = None,
        method: Optional[SettlementMethod] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> SettlementListResponse:
        """
        Get a group's settlements; only active members may look.

        Raises:
            NotFoundError: If the group does not exist
            AuthorizationError: If the user is not an active member
        """
        await SettlementService._require_member(db, user_id, group_id)

        filters = {
            "group_id": group_id,
            "status": status,
            "method": method,
            "start_date": start_date,
            "end_date": end_date,
        }
        settlements = await SettlementRepository.get_settlements(
            db, skip=(page - 1) * page_size, limit=page_size, **filters
        )
        total = await SettlementRepository.count(db, **filters)

        return SettlementListResponse(
            items=[SettlementResponse.model_validate(s) for s in settlements],
            pagination=PaginationMeta.for_page(page, page_size, total),
        )

    @staticmethod
    async def plan_group_settlement(
        group_id: UUID, user_id: UUID, db: AsyncSession
    ) -> OptimizedSettlementPlan:
        """
        Minimal set of transfers that would settle a group.

        original_transactions is the number of members with a non-zero
        balance.

        Raises:
            NotFoundError: If the group does not exist
            AuthorizationError: If the user is not an active member
        """
        await SettlementService._require_member(db, user_id, group_id)

        balances = await LedgerAggregator.get_group_balances(group_id, db)
        transfers = SettlementOptimizer.optimize(balances)

        original = len(balances)

        return OptimizedSettlementPlan(
            group_id=group_id,
            original_transactions=original,
            optimized_transactions=len(transfers),
            savings=original - len(transfers),
            balances=balances,
            transactions=transfers,
        )
