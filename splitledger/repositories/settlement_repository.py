"""Settlement data access"""
import hashlib
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, func, or_, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.models.settlement import (Settlement, SettlementMethod,
                                           SettlementStatus)
from splitledger.utils.decimal_utils import round_decimal


class SettlementRepository:
    """Repository for Settlement database operations"""

    @staticmethod
    async def create(db: AsyncSession, settlement: Settlement) -> Settlement:
        """
        Create a new settlement.

        Args:
            db: Database session
            settlement: Settlement object to create

        Returns:
            Created settlement
        """
        db.add(settlement)
        await db.flush()
        return settlement

    @staticmethod
    async def get_by_id(db: AsyncSession, settlement_id: UUID) -> Optional[Settlement]:
        """
        Get settlement by ID, re-reading its current status.

        Args:
            db: Database session
            settlement_id: Settlement UUID

        Returns:
            Settlement if found, None otherwise
        """
        result = await db.execute(
            select(Settlement)
            .where(Settlement.id == settlement_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def pair_lock_key(
        paid_by_id: UUID, paid_to_id: UUID, group_id: Optional[UUID]
    ) -> int:
        """Stable signed 64-bit key for a user pair and group, either direction"""
        first, second = sorted((str(paid_by_id), str(paid_to_id)))
        raw = f"{first}:{second}:{group_id or '-'}".encode()
        digest = hashlib.blake2b(raw, digest_size=8).digest()
        return int.from_bytes(digest, "big", signed=True)

    @staticmethod
    async def lock_pair(
        db: AsyncSession,
        paid_by_id: UUID,
        paid_to_id: UUID,
        group_id: Optional[UUID] = None,
    ) -> None:
        """
        Serialize settlement writes between two users within one scope.

        Takes a transaction-scoped advisory lock on PostgreSQL; it is released
        when the surrounding transaction commits or rolls back. Other backends
        (SQLite in tests) already serialize writers.
        """
        if db.get_bind().dialect.name != "postgresql":
            return

        key = SettlementRepository.pair_lock_key(paid_by_id, paid_to_id, group_id)
        await db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": key})

    @staticmethod
    def _filters(
        user_id: Optional[UUID] = None,
        paid_by_id: Optional[UUID] = None,
        paid_to_id: Optional[UUID] = None,
        group_id: Optional[UUID] = None,
        status: Optional[SettlementStatus] = None,
        method: Optional[SettlementMethod] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list:
        conditions = []
        if user_id:
            conditions.append(
                or_(Settlement.paid_by_id == user_id, Settlement.paid_to_id == user_id)
            )
        if paid_by_id:
            conditions.append(Settlement.paid_by_id == paid_by_id)
        if paid_to_id:
            conditions.append(Settlement.paid_to_id == paid_to_id)
        if group_id:
            conditions.append(Settlement.group_id == group_id)
        if status:
            conditions.append(Settlement.status == status)
        if method:
            conditions.append(Settlement.method == method)
        if start_date:
            conditions.append(Settlement.created_at >= start_date)
        if end_date:
            conditions.append(Settlement.created_at <= end_date)
        return conditions

    @staticmethod
    async def get_settlements(
        db: AsyncSession,
        skip: int = 0,
        limit: int = 10,
        **filters,
    ) -> List[Settlement]:
        """
        Get settlements matching the filters, newest first.

        Args:
            db: Database session
            skip: Number of records to skip
            limit: Maximum number of records to return
            **filters: user_id, paid_by_id, paid_to_id, group_id, status, method, start_date, end_date

        Returns:
            List of settlements
        """
        query = select(Settlement)
        conditions = SettlementRepository._filters(**filters)
        if conditions:
            query = query.where(and_(*conditions))

        query = query.order_by(Settlement.created_at.desc()).offset(skip).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def count(db: AsyncSession, **filters) -> int:
        """Count settlements matching the filters"""
        query = select(func.count(Settlement.id))
        conditions = SettlementRepository._filters(**filters)
        if conditions:
            query = query.where(and_(*conditions))

        result = await db.execute(query)
        return result.scalar_one()

    @staticmethod
    async def sum_amount(db: AsyncSession, **filters) -> Decimal:
        """Sum of settlement amounts matching the filters"""
        query = select(func.coalesce(func.sum(Settlement.amount), 0))
        conditions = SettlementRepository._filters(**filters)
        if conditions:
            query = query.where(and_(*conditions))

        result = await db.execute(query)
        return round_decimal(Decimal(str(result.scalar_one())))
