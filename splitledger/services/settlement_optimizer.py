"""Debt simplification (minimum cash flow, greedy)"""

import logging
from decimal import Decimal
from typing import List, Sequence

from splitledger.core.exceptions import InternalConsistencyError
from splitledger.schemas.balance import MemberBalance, Transfer
from splitledger.utils.decimal_utils import ZERO, sum_decimals

logger = logging.getLogger(__name__)


class SettlementOptimizer:
    """Turns net balances into the fewest transfers that zero them"""

    @staticmethod
    def _sorted_parties(parties: List[List]) -> List[List]:
        # Largest amount first; user id string breaks ties
        return sorted(parties, key=lambda party: (-party[1], str(party[0])))

    @staticmethod
    def optimize(balances: Sequence[MemberBalance]) -> List[Transfer]:
        """
        Compute settling transfers for a set of net balances.

        Creditors (positive net) and debtors (negative net) are each sorted
        by amount descending, then the largest remaining debtor pays the
        largest remaining creditor min(both remainders) until everyone is
        at zero. For n non-zero participants this yields at most n - 1
        transfers. Output depends only on the multiset of balances, not on
        their order.

        Args:
            balances: Net balance per participant

        Returns:
            Transfers from debtor to creditor

        Raises:
            InternalConsistencyError: If the balances do not sum to zero
        """
        total = sum_decimals(b.net_balance for b in balances)
        if total != ZERO:
            raise InternalConsistencyError(
                f"Balances do not conserve money: they sum to {total}",
                details={"sum": str(total)},
            )

        creditors = SettlementOptimizer._sorted_parties(
            [[b.user_id, b.net_balance] for b in balances if b.net_balance > 0]
        )
        debtors = SettlementOptimizer._sorted_parties(
            [[b.user_id, -b.net_balance] for b in balances if b.net_balance < 0]
        )

        transfers: List[Transfer] = []
        i = j = 0
        while i < len(creditors) and j < len(debtors):
            creditor = creditors[i]
            debtor = debtors[j]

            amount: Decimal = min(creditor[1], debtor[1])
            transfers.append(
                Transfer(from_user_id=debtor[0], to_user_id=creditor[0], amount=amount)
            )

            creditor[1] -= amount
            debtor[1] -= amount

            if creditor[1] == ZERO:
                i += 1
            if debtor[1] == ZERO:
                j += 1

        logger.debug(
            "Optimized %d balances into %d transfers", len(balances), len(transfers)
        )
        return transfers
