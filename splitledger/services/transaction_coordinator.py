"""Atomic ledger mutations: expenses and settlements"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.config import get_settings
from splitledger.core.exceptions import (AuthorizationError, ConflictError,
                                         NotFoundError, ValidationError)
from splitledger.core.scope import GroupScope, LedgerScope, scope_for
from splitledger.database import atomic
from splitledger.models.activity import Activity, ActivityType
from splitledger.models.expense import Expense
from splitledger.models.settlement import Settlement, SettlementStatus
from splitledger.models.split import Split
from splitledger.repositories.activity_repository import ActivityRepository
from splitledger.repositories.expense_repository import ExpenseRepository
from splitledger.repositories.group_repository import GroupRepository
from splitledger.repositories.settlement_repository import SettlementRepository
from splitledger.repositories.split_repository import SplitRepository
from splitledger.repositories.tag_repository import TagRepository
from splitledger.repositories.user_repository import UserRepository
from splitledger.schemas.event import LedgerEvent
from splitledger.schemas.expense import ExpenseCreate, ExpenseUpdate
from splitledger.schemas.settlement import SettlementCreate
from splitledger.services.ledger_aggregator import LedgerAggregator
from splitledger.services.membership_service import MembershipService
from splitledger.services.notifier import Notifier
from splitledger.services.split_calculator import SplitCalculator
from splitledger.services.split_strategies import ParticipantSplit
from splitledger.utils.decimal_utils import ZERO, sum_decimals

logger = logging.getLogger(__name__)


class TransactionCoordinator:
    """
    Runs every multi-record ledger mutation as one unit of work.

    Checks (existence, authorization, membership, split maths) run first
    against fresh reads. The writes and the activity entry then go through
    ``atomic()``: either all of them commit or none do. Events reach the
    notifier only after commit.
    """

    def __init__(self, notifier: Notifier):
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Pre-checks
    # ------------------------------------------------------------------

    @staticmethod
    async def _check_scope(
        db: AsyncSession,
        scope: LedgerScope,
        actor_id: UUID,
        payer_id: UUID,
        participant_ids: Iterable[UUID],
    ) -> None:
        """
        Ensure every participant exists and, for group scope, is an active member.

        Raises:
            NotFoundError: If a participant or the group does not exist
            AuthorizationError: If the actor is not an active member
            ValidationError: If the group is inactive or the payer or a
                participant is not an active member
        """
        participant_ids = list(participant_ids)
        found = {user.id for user in await UserRepository.get_by_ids(db, participant_ids)}
        missing = [str(user_id) for user_id in participant_ids if user_id not in found]
        if missing:
            raise NotFoundError(f"User(s) not found: {', '.join(missing)}")

        if not isinstance(scope, GroupScope):
            return

        group = await GroupRepository.get_by_id(db, scope.group_id)
        if group is None:
            raise NotFoundError("Group does not exist")
        if not group.is_active:
            raise ValidationError("Group is not active")

        if not await MembershipService.is_active_member(db, actor_id, scope.group_id):
            raise AuthorizationError("You are not a member of this group")
        if not await MembershipService.is_active_member(db, payer_id, scope.group_id):
            raise ValidationError("Payer must be a member of the group")

        for user_id in participant_ids:
            if not await MembershipService.is_active_member(db, user_id, scope.group_id):
                raise ValidationError("One or more split users are not in the group")

    @staticmethod
    async def _check_tags(db: AsyncSession, tag_ids: List[UUID]) -> None:
        if len(set(tag_ids)) != len(tag_ids):
            raise ConflictError("The same tag is attached to the expense more than once")

        found = {tag.id for tag in await TagRepository.get_by_ids(db, tag_ids)}
        missing = [str(tag_id) for tag_id in tag_ids if tag_id not in found]
        if missing:
            raise NotFoundError(f"Tag(s) not found: {', '.join(missing)}")

    @staticmethod
    async def _authorize_expense_mutation(
        db: AsyncSession, expense: Expense, actor_id: UUID
    ) -> None:
        """Only the payer or an owner/admin of the expense's group may mutate it"""
        if expense.paid_by_id == actor_id:
            return
        if expense.group_id is not None and await MembershipService.can_manage_group(
            db, actor_id, expense.group_id
        ):
            return
        raise AuthorizationError(
            "Only the payer or a group owner/admin can modify this expense"
        )

    @staticmethod
    def _compute_splits(expense_data) -> List[ParticipantSplit]:
        return SplitCalculator.compute(
            expense_data.split_type,
            expense_data.amount,
            [split.model_dump() for split in expense_data.splits],
        )

    @staticmethod
    def _build_split_rows(
        expense_id: UUID, payer_id: UUID, computed: List[ParticipantSplit], now: datetime
    ) -> List[Split]:
        # The payer's own share is never owed to anyone
        return [
            Split(
                expense_id=expense_id,
                user_id=split.user_id,
                amount=split.amount,
                percentage=split.percentage,
                shares=split.shares,
                is_settled=split.user_id == payer_id,
                settled_at=now if split.user_id == payer_id else None,
            )
            for split in computed
        ]

    async def _notify(self, event: LedgerEvent) -> None:
        await self.notifier.publish(event)

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    async def create_expense(
        self, expense_data: ExpenseCreate, user_id: UUID, db: AsyncSession
    ) -> Expense:
        """
        Create an expense paid by the caller, with its splits and tags.

        Args:
            expense_data: Expense creation data
            user_id: Caller, recorded as payer
            db: Database session

        Returns:
            Created expense with splits loaded

        Raises:
            ValidationError, NotFoundError, AuthorizationError, ConflictError
        """
        scope = scope_for(expense_data.group_id)
        participant_ids = [split.user_id for split in expense_data.splits]

        computed = self._compute_splits(expense_data)
        await self._check_scope(db, scope, user_id, user_id, participant_ids)
        await self._check_tags(db, expense_data.tag_ids)

        now = datetime.utcnow()
        async with atomic(db):
            expense = await ExpenseRepository.create(
                db,
                Expense(
                    group_id=scope.group_id,
                    paid_by_id=user_id,
                    description=expense_data.description,
                    amount=expense_data.amount,
                    currency=expense_data.currency or get_settings().default_currency,
                    split_type=expense_data.split_type,
                    expense_date=expense_data.expense_date,
                    notes=expense_data.notes,
                    is_settled=all(split.user_id == user_id for split in computed),
                ),
            )
            await SplitRepository.create_batch(
                db, self._build_split_rows(expense.id, user_id, computed, now)
            )
            await TagRepository.attach(db, expense.id, expense_data.tag_ids)

            await ActivityRepository.append(
                db,
                Activity(
                    type=ActivityType.EXPENSE_CREATED,
                    user_id=user_id,
                    group_id=scope.group_id,
                    expense_id=expense.id,
                    action=f"Added expense '{expense_data.description}' of {expense_data.amount}",
                    details={
                        "amount": str(expense_data.amount),
                        "split_type": expense_data.split_type.value,
                        "participants": [str(p) for p in participant_ids],
                    },
                ),
            )
            expense_id = expense.id

        logger.info("Expense %s created by %s", expense_id, user_id)
        await self._notify(
            LedgerEvent(
                type=ActivityType.EXPENSE_CREATED,
                actor_id=user_id,
                recipient_ids=[p for p in participant_ids if p != user_id],
                group_id=scope.group_id,
                expense_id=expense_id,
                summary=f"New expense '{expense_data.description}'",
                payload={"amount": str(expense_data.amount)},
            )
        )

        return await ExpenseRepository.get_with_splits(db, expense_id)

    async def update_expense(
        self,
        expense_id: UUID,
        expense_data: ExpenseUpdate,
        user_id: UUID,
        db: AsyncSession,
    ) -> Expense:
        """
        Replace an expense's fields, splits and tags.

        Splits are recomputed from scratch and rewritten, never patched.

        Raises:
            NotFoundError: If expense not found
            AuthorizationError: If user is neither payer nor group owner/admin
            ConflictError: If some participant's split is already settled
            ValidationError: If the new split inputs are invalid
        """
        expense = await ExpenseRepository.get_by_id(db, expense_id)
        if not expense:
            raise NotFoundError("Expense not found")

        await self._authorize_expense_mutation(db, expense, user_id)

        payer_id = expense.paid_by_id
        if await SplitRepository.has_settled_split(db, expense_id, exclude_user_id=payer_id):
            raise ConflictError("Expense has settled splits and can no longer be edited")

        scope = scope_for(expense_data.group_id)
        participant_ids = [split.user_id for split in expense_data.splits]

        computed = self._compute_splits(expense_data)
        await self._check_scope(db, scope, user_id, payer_id, participant_ids)
        await self._check_tags(db, expense_data.tag_ids)

        now = datetime.utcnow()
        async with atomic(db):
            expense.group_id = scope.group_id
            expense.description = expense_data.description
            expense.amount = expense_data.amount
            if expense_data.currency:
                expense.currency = expense_data.currency
            expense.split_type = expense_data.split_type
            expense.expense_date = expense_data.expense_date
            expense.notes = expense_data.notes
            expense.is_settled = all(split.user_id == payer_id for split in computed)

            await SplitRepository.delete_by_expense(db, expense_id)
            await SplitRepository.create_batch(
                db, self._build_split_rows(expense_id, payer_id, computed, now)
            )
            await TagRepository.detach_all(db, expense_id)
            await TagRepository.attach(db, expense_id, expense_data.tag_ids)

            await ActivityRepository.append(
                db,
                Activity(
                    type=ActivityType.EXPENSE_UPDATED,
                    user_id=user_id,
                    group_id=scope.group_id,
                    expense_id=expense_id,
                    action=f"Updated expense '{expense_data.description}'",
                    details={
                        "amount": str(expense_data.amount),
                        "split_type": expense_data.split_type.value,
                        "participants": [str(p) for p in participant_ids],
                    },
                ),
            )

        logger.info("Expense %s updated by %s", expense_id, user_id)
        await self._notify(
            LedgerEvent(
                type=ActivityType.EXPENSE_UPDATED,
                actor_id=user_id,
                recipient_ids=[p for p in {payer_id, *participant_ids} if p != user_id],
                group_id=scope.group_id,
                expense_id=expense_id,
                summary=f"Expense '{expense_data.description}' was updated",
                payload={"amount": str(expense_data.amount)},
            )
        )

        return await ExpenseRepository.get_with_splits(db, expense_id)

    async def delete_expense(
        self, expense_id: UUID, user_id: UUID, db: AsyncSession
    ) -> bool:
        """
        Delete an expense with its splits, tag links and receipts.

        Raises:
            NotFoundError: If expense not found
            AuthorizationError: If user is neither payer nor group owner/admin
        """
        expense = await ExpenseRepository.get_with_splits(db, expense_id)
        if not expense:
            raise NotFoundError("Expense not found")

        await self._authorize_expense_mutation(db, expense, user_id)

        involved = {expense.paid_by_id, *(split.user_id for split in expense.splits)}
        description = expense.description
        amount = expense.amount
        group_id = expense.group_id

        async with atomic(db):
            await TagRepository.detach_all(db, expense_id)
            await TagRepository.delete_receipts(db, expense_id)
            await SplitRepository.delete_by_expense(db, expense_id)
            await ExpenseRepository.delete(db, expense_id)

            await ActivityRepository.append(
                db,
                Activity(
                    type=ActivityType.EXPENSE_DELETED,
                    user_id=user_id,
                    group_id=group_id,
                    expense_id=expense_id,
                    action=f"Deleted expense '{description}'",
                    details={"amount": str(amount)},
                ),
            )

        logger.info("Expense %s deleted by %s", expense_id, user_id)
        await self._notify(
            LedgerEvent(
                type=ActivityType.EXPENSE_DELETED,
                actor_id=user_id,
                recipient_ids=[p for p in involved if p != user_id],
                group_id=group_id,
                expense_id=expense_id,
                summary=f"Expense '{description}' was deleted",
            )
        )
        return True

    # ------------------------------------------------------------------
    # Settlements
    # ------------------------------------------------------------------

    async def create_settlement(
        self, settlement_data: SettlementCreate, user_id: UUID, db: AsyncSession
    ) -> Settlement:
        """
        Record that the caller paid paid_to_id, as a PENDING settlement.

        The outstanding balance check and the insert run under one per-pair
        lock inside the same transaction, so two concurrent requests cannot
        both pass the check. Pending settlements already recorded for the
        pair count against the outstanding balance. An amount below what is
        still available must pay off whole splits, oldest first, so that
        completing it always settles exactly that much.

        Raises:
            ValidationError: Non-positive amount or paying oneself
            NotFoundError: Counterparty or group not found
            AuthorizationError: Caller not a member of the group
            ConflictError: Nothing outstanding, amount exceeds it, or a
                partial amount that does not match whole splits
        """
        paid_to_id = settlement_data.paid_to_id
        amount = settlement_data.amount

        if amount <= 0:
            raise ValidationError("Amount should be greater than 0")
        if paid_to_id == user_id:
            raise ValidationError("You can't settle with yourself")

        scope = scope_for(settlement_data.group_id)
        await self._check_scope(db, scope, user_id, user_id, [paid_to_id])

        async with atomic(db):
            await SettlementRepository.lock_pair(db, user_id, paid_to_id, scope.group_id)

            outstanding = await LedgerAggregator.calculate_outstanding_balance(
                user_id, paid_to_id, db, scope.group_id
            )
            pending = await SettlementRepository.sum_amount(
                db,
                paid_by_id=user_id,
                paid_to_id=paid_to_id,
                group_id=scope.group_id,
                status=SettlementStatus.PENDING,
            )
            available = outstanding - pending

            if available <= ZERO:
                logger.warning(
                    "Settlement rejected: %s owes %s nothing outstanding", user_id, paid_to_id
                )
                raise ConflictError("No outstanding balance to settle with this user")
            if amount > available:
                logger.warning(
                    "Settlement rejected: %s tried %s against outstanding %s",
                    user_id, amount, available,
                )
                raise ConflictError(
                    f"You are trying to settle {amount}, but your outstanding balance is only {available}",
                    details={"outstanding": str(available)},
                )
            if amount < available:
                # Pending partial payments claim the oldest splits first
                owed = await SplitRepository.get_unsettled_owed_to(
                    db, user_id, paid_to_id, scope.group_id
                )
                if self._oldest_splits_totalling(owed, amount, pending) is None:
                    logger.warning(
                        "Settlement rejected: %s tried partial %s not on a split boundary",
                        user_id, amount,
                    )
                    raise ConflictError(
                        f"A partial payment must cover whole splits, oldest first; "
                        f"{amount} does not. Pay {available} to settle everything.",
                        details={"outstanding": str(available)},
                    )

            settlement = await SettlementRepository.create(
                db,
                Settlement(
                    paid_by_id=user_id,
                    paid_to_id=paid_to_id,
                    group_id=scope.group_id,
                    amount=amount,
                    method=settlement_data.method,
                    status=SettlementStatus.PENDING,
                    description=settlement_data.note,
                ),
            )
            await ActivityRepository.append(
                db,
                Activity(
                    type=ActivityType.SETTLEMENT_CREATED,
                    user_id=user_id,
                    group_id=scope.group_id,
                    settlement_id=settlement.id,
                    action=f"Recorded a payment of {amount}",
                    details={
                        "amount": str(amount),
                        "method": settlement_data.method.value,
                        "paid_to_id": str(paid_to_id),
                        "note": settlement_data.note,
                    },
                ),
            )

        logger.info("Settlement %s created by %s", settlement.id, user_id)
        await self._notify(
            LedgerEvent(
                type=ActivityType.SETTLEMENT_CREATED,
                actor_id=user_id,
                recipient_ids=[paid_to_id],
                group_id=scope.group_id,
                settlement_id=settlement.id,
                summary=f"Payment of {amount} recorded",
                payload={"amount": str(amount)},
            )
        )
        return settlement

    @staticmethod
    async def _load_pending_settlement(
        db: AsyncSession, settlement_id: UUID, user_id: UUID
    ) -> Settlement:
        settlement = await SettlementRepository.get_by_id(db, settlement_id)
        if settlement is None:
            raise NotFoundError("Settlement not found")
        if user_id not in (settlement.paid_by_id, settlement.paid_to_id):
            raise AuthorizationError("You are not a participant of this settlement")
        if settlement.status != SettlementStatus.PENDING:
            raise ConflictError(f"Settlement already {settlement.status.value.lower()}")
        return settlement

    @staticmethod
    async def _lock_pending_settlement(db: AsyncSession, settlement: Settlement) -> Settlement:
        """Take the pair lock, then re-read the settlement and require PENDING"""
        await SettlementRepository.lock_pair(
            db, settlement.paid_by_id, settlement.paid_to_id, settlement.group_id
        )
        current = await SettlementRepository.get_by_id(db, settlement.id)
        if current is None:
            raise NotFoundError("Settlement not found")
        if current.status != SettlementStatus.PENDING:
            raise ConflictError(f"Settlement already {current.status.value.lower()}")
        return current

    @staticmethod
    def _oldest_splits_totalling(
        owed: List[Split], amount: Decimal, claimed: Decimal = ZERO
    ) -> Optional[List[Split]]:
        """
        Run of splits, oldest first, adding up to exactly amount.

        The first splits worth claimed are skipped; they belong to earlier
        pending payments. Returns None when the boundaries don't line up.
        """
        covered = ZERO
        start = None
        for index, split in enumerate(owed):
            if start is None and covered == claimed:
                start = index
            covered += split.amount
            if start is not None and covered == claimed + amount:
                return owed[start : index + 1]
            if covered >= claimed + amount:
                break
        return None

    @staticmethod
    async def _select_splits_to_settle(
        db: AsyncSession, settlement: Settlement
    ) -> List[Split]:
        """
        Pick the splits a completed settlement pays off.

        A settlement equal to the outstanding balance settles every open
        split between the pair in scope, both directions. A smaller one
        settles the payer's own splits, oldest first after those claimed by
        earlier pending payments, which must add up to exactly its amount.
        Anything else is refused so a completed payment is never left
        without the splits it paid.

        Raises:
            ConflictError: Nothing outstanding, amount above it, or no run
                of oldest splits matching the amount
        """
        owed = await SplitRepository.get_unsettled_owed_to(
            db, settlement.paid_by_id, settlement.paid_to_id, settlement.group_id
        )
        offsets = await SplitRepository.get_unsettled_owed_to(
            db, settlement.paid_to_id, settlement.paid_by_id, settlement.group_id
        )

        outstanding = sum_decimals(s.amount for s in owed) - sum_decimals(
            s.amount for s in offsets
        )
        if outstanding <= ZERO:
            raise ConflictError("No outstanding balance left for this settlement")
        if settlement.amount > outstanding:
            raise ConflictError(
                f"Settlement of {settlement.amount} exceeds the outstanding balance of {outstanding}",
                details={"outstanding": str(outstanding)},
            )
        if settlement.amount == outstanding:
            return owed + offsets

        pending_up_to_this = await SettlementRepository.sum_amount(
            db,
            paid_by_id=settlement.paid_by_id,
            paid_to_id=settlement.paid_to_id,
            group_id=settlement.group_id,
            status=SettlementStatus.PENDING,
            end_date=settlement.created_at,
        )
        earlier_pending = max(pending_up_to_this - settlement.amount, ZERO)
        selected = TransactionCoordinator._oldest_splits_totalling(
            owed, settlement.amount, earlier_pending
        )
        if selected is None:
            raise ConflictError(
                f"Settlement of {settlement.amount} no longer matches whole open splits; "
                "cancel it and record a new one",
                details={"outstanding": str(outstanding)},
            )
        return selected

    async def complete_settlement(
        self, settlement_id: UUID, user_id: UUID, db: AsyncSession
    ) -> Settlement:
        """
        Mark a PENDING settlement COMPLETED and settle the splits it pays off.

        Either party may complete it. The status is checked again under the
        pair lock, so of two concurrent completions only one settles splits.

        Raises:
            NotFoundError: Settlement not found
            AuthorizationError: Caller is not payer or payee
            ConflictError: Settlement already COMPLETED or CANCELLED, or its
                amount no longer matches the open splits
        """
        settlement = await self._load_pending_settlement(db, settlement_id, user_id)

        now = datetime.utcnow()
        async with atomic(db):
            settlement = await self._lock_pending_settlement(db, settlement)

            splits = await self._select_splits_to_settle(db, settlement)
            flipped = await SplitRepository.mark_settled(db, [s.id for s in splits], now)
            await SplitRepository.refresh_expense_settled_flags(
                db, [s.expense_id for s in splits]
            )

            settlement.status = SettlementStatus.COMPLETED
            settlement.settled_at = now
            await db.flush()

            await ActivityRepository.append(
                db,
                Activity(
                    type=ActivityType.SETTLEMENT_COMPLETED,
                    user_id=user_id,
                    group_id=settlement.group_id,
                    settlement_id=settlement.id,
                    action=f"Completed settlement of {settlement.amount}",
                    details={
                        "amount": str(settlement.amount),
                        "splits_settled": flipped,
                    },
                ),
            )

        logger.info(
            "Settlement %s completed by %s (%d splits settled)", settlement_id, user_id, flipped
        )
        await self._notify(
            LedgerEvent(
                type=ActivityType.SETTLEMENT_COMPLETED,
                actor_id=user_id,
                recipient_ids=self.settlement_recipients(settlement, user_id),
                group_id=settlement.group_id,
                settlement_id=settlement.id,
                summary=f"Settlement of {settlement.amount} completed",
                payload={"amount": str(settlement.amount), "splits_settled": flipped},
            )
        )
        return settlement

    async def cancel_settlement(
        self, settlement_id: UUID, user_id: UUID, db: AsyncSession
    ) -> Settlement:
        """
        Abandon a PENDING settlement; splits are untouched.

        Raises:
            NotFoundError: Settlement not found
            AuthorizationError: Caller is not payer or payee
            ConflictError: Settlement already COMPLETED or CANCELLED
        """
        settlement = await self._load_pending_settlement(db, settlement_id, user_id)

        async with atomic(db):
            settlement = await self._lock_pending_settlement(db, settlement)
            settlement.status = SettlementStatus.CANCELLED
            await db.flush()

            await ActivityRepository.append(
                db,
                Activity(
                    type=ActivityType.SETTLEMENT_CANCELLED,
                    user_id=user_id,
                    group_id=settlement.group_id,
                    settlement_id=settlement.id,
                    action=f"Cancelled settlement of {settlement.amount}",
                    details={"amount": str(settlement.amount)},
                ),
            )

        logger.info("Settlement %s cancelled by %s", settlement_id, user_id)
        await self._notify(
            LedgerEvent(
                type=ActivityType.SETTLEMENT_CANCELLED,
                actor_id=user_id,
                recipient_ids=self.settlement_recipients(settlement, user_id),
                group_id=settlement.group_id,
                settlement_id=settlement.id,
                summary=f"Settlement of {settlement.amount} cancelled",
            )
        )
        return settlement

    @staticmethod
    def settlement_recipients(settlement: Settlement, actor_id: UUID) -> List[UUID]:
        """Parties of a settlement other than the actor"""
        return [p for p in (settlement.paid_by_id, settlement.paid_to_id) if p != actor_id]
