"""Unit tests for expense and settlement read services"""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from splitledger.core.exceptions import AuthorizationError, NotFoundError
from splitledger.schemas.balance import MemberBalance
from splitledger.services.expense_service import ExpenseService
from splitledger.services.settlement_service import SettlementService


@pytest.fixture
def mock_db():
    """Mock database session"""
    return AsyncMock()


@pytest.fixture
def payer_id():
    return uuid4()


@pytest.fixture
def participant_id():
    return uuid4()


@pytest.fixture
def expense(payer_id, participant_id):
    """Lunch of 50 paid by the payer, split evenly with one participant"""
    payer = MagicMock(id=payer_id, username="alice", full_name="Alice Adams")
    return MagicMock(
        id=uuid4(),
        expense_date=date(2024, 5, 1),
        group_id=None,
        description="Lunch",
        amount=Decimal("50.00"),
        paid_by_id=payer_id,
        payer=payer,
        splits=[
            MagicMock(user_id=payer_id, amount=Decimal("25.00")),
            MagicMock(user_id=participant_id, amount=Decimal("25.00")),
        ],
    )


class TestShareFor:
    """Test ExpenseService.share_for"""

    def test_payer_sees_credit(self, expense, payer_id):
        item = ExpenseService.share_for(expense, payer_id)

        assert item.share_type == "credit"
        assert item.your_share == Decimal("25.00")
        assert item.paid_by.username == "alice"

    def test_participant_sees_debit(self, expense, participant_id):
        item = ExpenseService.share_for(expense, participant_id)

        assert item.share_type == "debit"
        assert item.your_share == Decimal("25.00")


class TestGetExpenseDetails:
    """Test expense visibility"""

    @pytest.mark.asyncio
    @patch("splitledger.services.expense_service.ExpenseRepository")
    async def test_not_found(self, mock_repo, mock_db, payer_id):
        mock_repo.get_with_splits = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError, match="Expense not found"):
            await ExpenseService.get_expense_details(uuid4(), payer_id, mock_db)

    @pytest.mark.asyncio
    @patch("splitledger.services.expense_service.ExpenseRepository")
    async def test_stranger_refused(self, mock_repo, mock_db, expense):
        mock_repo.get_with_splits = AsyncMock(return_value=expense)

        with pytest.raises(AuthorizationError):
            await ExpenseService.get_expense_details(expense.id, uuid4(), mock_db)


class TestGroupSettlementPlan:
    """Test SettlementService.plan_group_settlement"""

    @pytest.mark.asyncio
    @patch("splitledger.services.settlement_service.LedgerAggregator")
    @patch("splitledger.services.settlement_service.MembershipService")
    @patch("splitledger.services.settlement_service.GroupRepository")
    async def test_plan_counts_savings(
        self, mock_group_repo, mock_membership, mock_aggregator, mock_db
    ):
        a, b, c, d = uuid4(), uuid4(), uuid4(), uuid4()
        group_id = uuid4()
        mock_group_repo.get_by_id = AsyncMock(return_value=MagicMock(id=group_id))
        mock_membership.is_active_member = AsyncMock(return_value=True)
        mock_aggregator.get_group_balances = AsyncMock(
            return_value=[
                MemberBalance(user_id=a, net_balance=Decimal("90")),
                MemberBalance(user_id=b, net_balance=Decimal("-30")),
                MemberBalance(user_id=c, net_balance=Decimal("-30")),
                MemberBalance(user_id=d, net_balance=Decimal("-30")),
            ]
        )

        plan = await SettlementService.plan_group_settlement(group_id, a, mock_db)

        assert plan.original_transactions == 4
        assert plan.optimized_transactions == 3
        assert plan.savings == 1
        assert all(t.to_user_id == a for t in plan.transactions)

    @pytest.mark.asyncio
    @patch("splitledger.services.settlement_service.GroupRepository")
    async def test_unknown_group(self, mock_group_repo, mock_db):
        mock_group_repo.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError, match="Group does not exist"):
            await SettlementService.plan_group_settlement(uuid4(), uuid4(), mock_db)

    @pytest.mark.asyncio
    @patch("splitledger.services.settlement_service.MembershipService")
    @patch("splitledger.services.settlement_service.GroupRepository")
    async def test_non_member_refused(self, mock_group_repo, mock_membership, mock_db):
        mock_group_repo.get_by_id = AsyncMock(return_value=MagicMock())
        mock_membership.is_active_member = AsyncMock(return_value=False)

        with pytest.raises(AuthorizationError, match="not a member"):
            await SettlementService.plan_group_settlement(uuid4(), uuid4(), mock_db)
