"""Unit tests for balance aggregation"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from splitledger.models.settlement import SettlementMethod
from splitledger.services.ledger_aggregator import LedgerAggregator


@pytest.fixture
def user_a():
    return uuid4()


@pytest.fixture
def user_b():
    return uuid4()


@pytest.fixture
def user_c():
    return uuid4()


@pytest.fixture
def mock_db():
    """Mock database session"""
    return AsyncMock()


def make_split(user_id, amount, is_settled=False):
    split = MagicMock()
    split.user_id = user_id
    split.amount = Decimal(amount)
    split.is_settled = is_settled
    return split


def make_expense(paid_by_id, splits, group_id=None):
    expense = MagicMock()
    expense.id = uuid4()
    expense.paid_by_id = paid_by_id
    expense.group_id = group_id
    expense.splits = splits
    return expense


@pytest.fixture
def dinner(user_a, user_b, user_c):
    """A paid 90 split equally three ways; A's own split is settled"""
    return make_expense(
        user_a,
        [
            make_split(user_a, "30", is_settled=True),
            make_split(user_b, "30"),
            make_split(user_c, "30"),
        ],
    )


class TestComputeBalances:
    """Test LedgerAggregator.compute_balances"""

    @pytest.mark.asyncio
    @patch("splitledger.services.ledger_aggregator.SettlementRepository")
    @patch("splitledger.services.ledger_aggregator.ExpenseRepository")
    async def test_payer_is_owed_by_each_participant(
        self, mock_expense_repo, mock_settlement_repo, mock_db, dinner, user_a, user_b, user_c
    ):
        mock_expense_repo.get_expenses_for_balance = AsyncMock(return_value=[dinner])
        mock_settlement_repo.get_settlements = AsyncMock(return_value=[])

        summary = await LedgerAggregator.compute_balances(user_a, mock_db)

        assert summary.total_owed == Decimal("60")
        assert summary.total_owing == Decimal("0")
        assert summary.net_balance == Decimal("60")
        relationships = {r.counterparty_id: r for r in summary.relationships}
        assert set(relationships) == {user_b, user_c}
        assert relationships[user_b].owed_to_me == Decimal("30")
        assert relationships[user_b].net_balance == Decimal("30")
        assert relationships[user_c].net_balance == Decimal("30")

    @pytest.mark.asyncio
    @patch("splitledger.services.ledger_aggregator.SettlementRepository")
    @patch("splitledger.services.ledger_aggregator.ExpenseRepository")
    async def test_participant_owes_payer(
        self, mock_expense_repo, mock_settlement_repo, mock_db, dinner, user_a, user_b
    ):
        mock_expense_repo.get_expenses_for_balance = AsyncMock(return_value=[dinner])
        mock_settlement_repo.get_settlements = AsyncMock(return_value=[])

        summary = await LedgerAggregator.compute_balances(user_b, mock_db)

        assert summary.total_owing == Decimal("30")
        assert summary.net_balance == Decimal("-30")
        assert len(summary.relationships) == 1
        assert summary.relationships[0].counterparty_id == user_a
        assert summary.relationships[0].i_owe == Decimal("30")
        assert summary.relationships[0].net_balance == Decimal("-30")

    @pytest.mark.asyncio
    @patch("splitledger.services.ledger_aggregator.SettlementRepository")
    @patch("splitledger.services.ledger_aggregator.ExpenseRepository")
    async def test_settled_splits_are_ignored(
        self, mock_expense_repo, mock_settlement_repo, mock_db, user_a, user_b
    ):
        expense = make_expense(
            user_a, [make_split(user_a, "50", True), make_split(user_b, "50", True)]
        )
        mock_expense_repo.get_expenses_for_balance = AsyncMock(return_value=[expense])
        mock_settlement_repo.get_settlements = AsyncMock(return_value=[])

        summary = await LedgerAggregator.compute_balances(user_b, mock_db)

        assert summary.total_owing == Decimal("0")
        assert summary.relationships == []

    @pytest.mark.asyncio
    @patch("splitledger.services.ledger_aggregator.SettlementRepository")
    @patch("splitledger.services.ledger_aggregator.ExpenseRepository")
    async def test_both_directions_net_out(
        self, mock_expense_repo, mock_settlement_repo, mock_db, user_a, user_b
    ):
        expenses = [
            make_expense(user_a, [make_split(user_a, "50", True), make_split(user_b, "50")]),
            make_expense(user_b, [make_split(user_b, "20", True), make_split(user_a, "20")]),
        ]
        mock_expense_repo.get_expenses_for_balance = AsyncMock(return_value=expenses)
        mock_settlement_repo.get_settlements = AsyncMock(return_value=[])

        summary = await LedgerAggregator.compute_balances(user_a, mock_db)

        relationship = summary.relationships[0]
        assert relationship.owed_to_me == Decimal("50")
        assert relationship.i_owe == Decimal("20")
        assert relationship.net_balance == Decimal("30")

    @pytest.mark.asyncio
    @patch("splitledger.services.ledger_aggregator.SettlementRepository")
    @patch("splitledger.services.ledger_aggregator.ExpenseRepository")
    async def test_group_scope_is_passed_through(
        self, mock_expense_repo, mock_settlement_repo, mock_db, user_a
    ):
        group_id = uuid4()
        mock_expense_repo.get_expenses_for_balance = AsyncMock(return_value=[])
        mock_settlement_repo.get_settlements = AsyncMock(return_value=[])

        summary = await LedgerAggregator.compute_balances(user_a, mock_db, group_id)

        mock_expense_repo.get_expenses_for_balance.assert_awaited_once_with(
            mock_db, user_a, group_id
        )
        assert mock_settlement_repo.get_settlements.await_args.kwargs["group_id"] == group_id
        assert summary.net_balance == Decimal("0")


class TestOutstandingBalance:
    """Test LedgerAggregator.calculate_outstanding_balance"""

    @pytest.mark.asyncio
    @patch("splitledger.services.ledger_aggregator.ExpenseRepository")
    async def test_offsets_reverse_debt(self, mock_expense_repo, mock_db, user_a, user_b):
        expenses = [
            make_expense(user_a, [make_split(user_a, "50", True), make_split(user_b, "50")]),
            make_expense(user_b, [make_split(user_b, "20", True), make_split(user_a, "20")]),
        ]
        mock_expense_repo.get_expenses_between = AsyncMock(return_value=expenses)

        owed = await LedgerAggregator.calculate_outstanding_balance(user_b, user_a, mock_db)
        reverse = await LedgerAggregator.calculate_outstanding_balance(user_a, user_b, mock_db)

        assert owed == Decimal("30")
        assert reverse == Decimal("-30")


class TestGroupBalances:
    """Test LedgerAggregator.get_group_balances"""

    @pytest.mark.asyncio
    @patch("splitledger.services.ledger_aggregator.ExpenseRepository")
    async def test_balances_conserve(
        self, mock_expense_repo, mock_db, dinner, user_a, user_b, user_c
    ):
        second = make_expense(
            user_b, [make_split(user_b, "10", True), make_split(user_c, "10")]
        )
        mock_expense_repo.get_group_expenses = AsyncMock(return_value=[dinner, second])

        balances = await LedgerAggregator.get_group_balances(uuid4(), mock_db)

        by_user = {b.user_id: b.net_balance for b in balances}
        assert by_user == {
            user_a: Decimal("60"),
            user_b: Decimal("-20"),
            user_c: Decimal("-40"),
        }
        assert sum(by_user.values()) == 0
        assert [b.user_id for b in balances] == sorted(by_user, key=str)

    @pytest.mark.asyncio
    @patch("splitledger.services.ledger_aggregator.ExpenseRepository")
    async def test_zero_balances_dropped(self, mock_expense_repo, mock_db, user_a, user_b):
        expenses = [
            make_expense(user_a, [make_split(user_b, "25")]),
            make_expense(user_b, [make_split(user_a, "25")]),
        ]
        mock_expense_repo.get_group_expenses = AsyncMock(return_value=expenses)

        assert await LedgerAggregator.get_group_balances(uuid4(), mock_db) == []


class TestSuggestions:
    """Test settlement suggestions"""

    @pytest.mark.parametrize(
        "amount, method",
        [
            (Decimal("99.99"), SettlementMethod.CASH),
            (Decimal("100"), SettlementMethod.UPI),
            (Decimal("999.99"), SettlementMethod.UPI),
            (Decimal("1000"), SettlementMethod.BANK_TRANSFER),
        ],
    )
    def test_suggest_payment_method(self, amount, method):
        assert LedgerAggregator.suggest_payment_method(amount) == method

    @pytest.mark.asyncio
    @patch("splitledger.services.ledger_aggregator.UserRepository")
    @patch("splitledger.services.ledger_aggregator.SettlementRepository")
    @patch("splitledger.services.ledger_aggregator.ExpenseRepository")
    async def test_small_balances_are_skipped(
        self,
        mock_expense_repo,
        mock_settlement_repo,
        mock_user_repo,
        mock_db,
        user_a,
        user_b,
        user_c,
    ):
        expenses = [
            make_expense(
                user_a,
                [make_split(user_a, "5", True), make_split(user_b, "5"), make_split(user_c, "500")],
            )
        ]
        mock_expense_repo.get_expenses_for_balance = AsyncMock(return_value=expenses)
        mock_settlement_repo.get_settlements = AsyncMock(return_value=[])

        carol = MagicMock(id=user_c, username="carol", full_name="Carol Clark")
        mock_user_repo.get_by_ids = AsyncMock(return_value=[carol])

        suggestions = await LedgerAggregator.get_settlement_suggestions(user_a, mock_db)

        assert len(suggestions) == 1
        assert suggestions[0].user.id == user_c
        assert suggestions[0].type == "COLLECT"
        assert suggestions[0].amount == Decimal("500")
        assert suggestions[0].suggested_method == SettlementMethod.UPI
