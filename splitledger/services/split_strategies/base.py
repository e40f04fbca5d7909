"""Base strategy interface"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from splitledger.utils.decimal_utils import ZERO, sum_decimals


class ParticipantSplit(BaseModel):
    """Result of split calculation for a participant"""

    user_id: UUID
    amount: Decimal
    percentage: Optional[Decimal] = None
    shares: Optional[Decimal] = None


class BaseSplitStrategy(ABC):
    """Base class for split strategies"""

    @abstractmethod
    def calculate_splits(
        self, total_amount: Decimal, participant_data: List[dict]
    ) -> List[ParticipantSplit]:
        """
        Calculate split amounts for participants.

        Args:
            total_amount: Total expense amount, already validated positive
                with at most two decimal places
            participant_data: Non-empty list of participant dicts

        Returns:
            List of ParticipantSplit in input order
        """

    @staticmethod
    def reconcile_remainder(
        total_amount: Decimal, splits: List[ParticipantSplit]
    ) -> List[ParticipantSplit]:
        """
        Make the split amounts add up to total_amount exactly.

        A shortfall left by rounding goes to the first participant. An
        overshoot (half-up rounding, or percentages a hair over 100) is taken
        back from the largest amounts first, ties in input order, never
        below zero.
        """
        difference = total_amount - sum_decimals(split.amount for split in splits)
        if difference >= ZERO:
            splits[0].amount += difference
            return splits

        excess = -difference
        for split in sorted(splits, key=lambda s: s.amount, reverse=True):
            taken = min(split.amount, excess)
            split.amount -= taken
            excess -= taken
            if excess == ZERO:
                break
        return splits
