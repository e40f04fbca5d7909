"""Balance aggregation over unsettled splits"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from splitledger.config import get_settings
from splitledger.models.settlement import SettlementMethod
from splitledger.repositories.expense_repository import ExpenseRepository
from splitledger.repositories.settlement_repository import SettlementRepository
from splitledger.repositories.user_repository import UserRepository
from splitledger.schemas.balance import (BalanceSummary, MemberBalance,
                                         RelationshipBalance)
from splitledger.schemas.settlement import (SettlementResponse,
                                            SettlementSuggestion)
from splitledger.schemas.user import UserBrief
from splitledger.utils.decimal_utils import ZERO


class LedgerAggregator:
    """
    Derives balances by scanning current unsettled splits.

    Settlements never enter the arithmetic directly: completing one flips
    the matching splits to settled, which removes them from the scan.
    Nothing here writes or caches.
    """

    @staticmethod
    async def compute_balances(
        user_id: UUID, db: AsyncSession, group_id: Optional[UUID] = None
    ) -> BalanceSummary:
        """
        Compute what a user is owed and owes, per counterparty.

        Args:
            user_id: User to compute balances for
            db: Database session
            group_id: Optional group scope

        Returns:
            BalanceSummary (empty when the user has no open splits)
        """
        expenses = await ExpenseRepository.get_expenses_for_balance(db, user_id, group_id)

        owed_to_me: Dict[UUID, Decimal] = defaultdict(lambda: ZERO)
        i_owe: Dict[UUID, Decimal] = defaultdict(lambda: ZERO)
        total_owed = ZERO
        total_owing = ZERO

        for expense in expenses:
            if expense.paid_by_id == user_id:
                # Others owe the user their unsettled shares
                for split in expense.splits:
                    if split.user_id == user_id or split.is_settled:
                        continue
                    owed_to_me[split.user_id] += split.amount
                    total_owed += split.amount
            else:
                own_split = next(
                    (s for s in expense.splits if s.user_id == user_id and not s.is_settled),
                    None,
                )
                if own_split is not None:
                    i_owe[expense.paid_by_id] += own_split.amount
                    total_owing += own_split.amount

        counterparties = sorted(set(owed_to_me) | set(i_owe), key=str)
        relationships = [
            RelationshipBalance(
                counterparty_id=counterparty_id,
                owed_to_me=owed_to_me[counterparty_id],
                i_owe=i_owe[counterparty_id],
                net_balance=owed_to_me[counterparty_id] - i_owe[counterparty_id],
            )
            for counterparty_id in counterparties
        ]

        settings = get_settings()
        recent = await SettlementRepository.get_settlements(
            db,
            skip=0,
            limit=settings.recent_settlements_limit,
            user_id=user_id,
            group_id=group_id,
        )

        return BalanceSummary(
            total_owed=total_owed,
            total_owing=total_owing,
            net_balance=total_owed - total_owing,
            relationships=relationships,
            recent_settlements=[SettlementResponse.model_validate(s) for s in recent],
        )

    @staticmethod
    async def calculate_outstanding_balance(
        paid_by_id: UUID,
        paid_to_id: UUID,
        db: AsyncSession,
        group_id: Optional[UUID] = None,
    ) -> Decimal:
        """
        Amount paid_by currently owes paid_to, net of what paid_to owes back.

        Args:
            paid_by_id: Prospective settlement payer (debtor)
            paid_to_id: Prospective settlement payee (creditor)
            db: Database session
            group_id: Optional group scope (None means every scope)

        Returns:
            Outstanding amount; zero or negative means nothing is owed
        """
        expenses = await ExpenseRepository.get_expenses_between(
            db, paid_by_id, paid_to_id, group_id
        )

        debtor_owes = ZERO
        creditor_owes = ZERO
        for expense in expenses:
            for split in expense.splits:
                if split.is_settled:
                    continue
                if expense.paid_by_id == paid_to_id and split.user_id == paid_by_id:
                    debtor_owes += split.amount
                elif expense.paid_by_id == paid_by_id and split.user_id == paid_to_id:
                    creditor_owes += split.amount

        return debtor_owes - creditor_owes

    @staticmethod
    async def get_group_balances(group_id: UUID, db: AsyncSession) -> List[MemberBalance]:
        """
        Net balance per user across a group's unsettled splits.

        Every split moves its amount from the split owner to the payer, so
        the returned balances always sum to zero. Users who have left the
        group but still hold open splits are included.

        Args:
            group_id: Group UUID
            db: Database session

        Returns:
            Non-zero balances sorted by user id
        """
        expenses = await ExpenseRepository.get_group_expenses(db, group_id)

        net: Dict[UUID, Decimal] = defaultdict(lambda: ZERO)
        for expense in expenses:
            for split in expense.splits:
                if split.is_settled or split.user_id == expense.paid_by_id:
                    continue
                net[expense.paid_by_id] += split.amount
                net[split.user_id] -= split.amount

        return [
            MemberBalance(user_id=user_id, net_balance=amount)
            for user_id, amount in sorted(net.items(), key=lambda item: str(item[0]))
            if amount != ZERO
        ]

    @staticmethod
    def suggest_payment_method(amount: Decimal) -> SettlementMethod:
        """Pick a payment method by size of the amount"""
        if amount < Decimal("100"):
            return SettlementMethod.CASH
        if amount < Decimal("1000"):
            return SettlementMethod.UPI
        return SettlementMethod.BANK_TRANSFER

    @staticmethod
    async def get_settlement_suggestions(
        user_id: UUID, db: AsyncSession
    ) -> List[SettlementSuggestion]:
        """
        Suggest who the user should collect from or pay, largest first.

        Relationships whose net is at or below the configured minimum are
        left out.
        """
        settings = get_settings()
        summary = await LedgerAggregator.compute_balances(user_id, db)

        candidates = [
            rel for rel in summary.relationships
            if abs(rel.net_balance) > settings.suggestion_min_amount
        ]
        if not candidates:
            return []

        users = {
            user.id: user
            for user in await UserRepository.get_by_ids(
                db, [rel.counterparty_id for rel in candidates]
            )
        }

        suggestions = []
        for rel in candidates:
            user = users.get(rel.counterparty_id)
            if user is None:
                continue
            amount = abs(rel.net_balance)
            suggestions.append(
                SettlementSuggestion(
                    user=UserBrief.model_validate(user),
                    amount=amount,
                    type="COLLECT" if rel.net_balance > 0 else "PAY",
                    suggested_method=LedgerAggregator.suggest_payment_method(amount),
                )
            )

        suggestions.sort(key=lambda s: (-s.amount, str(s.user.id)))
        return suggestions
