"""Test debt simplification"""

import random
from collections import defaultdict
from decimal import Decimal
from uuid import uuid4

import pytest

from splitledger.core.exceptions import InternalConsistencyError
from splitledger.schemas.balance import MemberBalance, Transfer
from splitledger.services.settlement_optimizer import SettlementOptimizer


def _apply(transfers, balances):
    """Net positions after the transfers are paid"""
    net = defaultdict(Decimal, {b.user_id: b.net_balance for b in balances})
    for transfer in transfers:
        net[transfer.from_user_id] += transfer.amount
        net[transfer.to_user_id] -= transfer.amount
    return net


class TestOptimize:
    """Test SettlementOptimizer.optimize"""

    def test_one_creditor_two_debtors(self):
        a, b, c = uuid4(), uuid4(), uuid4()
        balances = [
            MemberBalance(user_id=a, net_balance=Decimal("60")),
            MemberBalance(user_id=b, net_balance=Decimal("-30")),
            MemberBalance(user_id=c, net_balance=Decimal("-30")),
        ]

        transfers = SettlementOptimizer.optimize(balances)

        assert len(transfers) == 2
        assert {(t.from_user_id, t.to_user_id, t.amount) for t in transfers} == {
            (b, a, Decimal("30")),
            (c, a, Decimal("30")),
        }

    def test_largest_debtor_pays_largest_creditor_first(self):
        a, b, c, d = uuid4(), uuid4(), uuid4(), uuid4()
        balances = [
            MemberBalance(user_id=a, net_balance=Decimal("100")),
            MemberBalance(user_id=b, net_balance=Decimal("20")),
            MemberBalance(user_id=c, net_balance=Decimal("-70")),
            MemberBalance(user_id=d, net_balance=Decimal("-50")),
        ]

        transfers = SettlementOptimizer.optimize(balances)

        assert transfers == [
            Transfer(from_user_id=c, to_user_id=a, amount=Decimal("70")),
            Transfer(from_user_id=d, to_user_id=a, amount=Decimal("30")),
            Transfer(from_user_id=d, to_user_id=b, amount=Decimal("20")),
        ]

    def test_settled_group_needs_no_transfers(self):
        assert SettlementOptimizer.optimize([]) == []
        assert SettlementOptimizer.optimize(
            [MemberBalance(user_id=uuid4(), net_balance=Decimal("0"))]
        ) == []

    def test_zeroes_everyone_within_n_minus_one(self):
        rng = random.Random(7)
        users = [uuid4() for _ in range(8)]
        amounts = [Decimal(rng.randint(-5000, 5000)) / 100 for _ in users[:-1]]
        amounts.append(-sum(amounts))
        balances = [MemberBalance(user_id=u, net_balance=a) for u, a in zip(users, amounts)]

        transfers = SettlementOptimizer.optimize(balances)

        nonzero = sum(1 for a in amounts if a != 0)
        assert len(transfers) <= max(nonzero - 1, 0)
        assert all(t.amount > 0 for t in transfers)
        assert all(v == 0 for v in _apply(transfers, balances).values())

    def test_order_independent(self):
        users = [uuid4() for _ in range(5)]
        amounts = [Decimal("40"), Decimal("-10"), Decimal("25"), Decimal("-30"), Decimal("-25")]
        balances = [MemberBalance(user_id=u, net_balance=a) for u, a in zip(users, amounts)]

        expected = SettlementOptimizer.optimize(balances)
        shuffled = list(reversed(balances))

        assert SettlementOptimizer.optimize(shuffled) == expected

    def test_ties_broken_by_user_id(self):
        first, second = sorted([uuid4(), uuid4()], key=str)
        debtor = uuid4()
        balances = [
            MemberBalance(user_id=second, net_balance=Decimal("10")),
            MemberBalance(user_id=first, net_balance=Decimal("10")),
            MemberBalance(user_id=debtor, net_balance=Decimal("-20")),
        ]

        transfers = SettlementOptimizer.optimize(balances)

        assert [t.to_user_id for t in transfers] == [first, second]

    def test_non_conserving_input(self):
        balances = [
            MemberBalance(user_id=uuid4(), net_balance=Decimal("50")),
            MemberBalance(user_id=uuid4(), net_balance=Decimal("-49.99")),
        ]

        with pytest.raises(InternalConsistencyError, match="sum to 0.01"):
            SettlementOptimizer.optimize(balances)


class TestTransferSerialization:
    """Transfers are exposed as from/to/amount"""

    def test_aliases(self):
        a, b = uuid4(), uuid4()
        transfer = Transfer(from_user_id=a, to_user_id=b, amount=Decimal("5.00"))

        data = transfer.model_dump(by_alias=True)

        assert data == {"from": a, "to": b, "amount": Decimal("5.00")}
