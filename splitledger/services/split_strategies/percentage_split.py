"""Percentage split strategy"""

from decimal import Decimal, InvalidOperation
from typing import List

from splitledger.core.exceptions import ValidationError
from splitledger.services.split_strategies.base import (BaseSplitStrategy,
                                                        ParticipantSplit)
from splitledger.utils.decimal_utils import round_decimal, to_decimal

PERCENTAGE_TOLERANCE = Decimal("0.01")
HUNDRED = Decimal("100")


class PercentageSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting expense by percentage"""

    def calculate_splits(
        self, total_amount: Decimal, participant_data: List[dict]
    ) -> List[ParticipantSplit]:
        """
        Calculate percentage-based split for participants.

        Args:
            total_amount: Total expense amount
            participant_data: List of dicts with user_id and percentage

        Returns:
            List of ParticipantSplit with calculated amounts

        Raises:
            ValidationError: If a percentage is missing or out of range, or
                percentages don't sum to 100 (within 0.01)
        """
        percentages = []
        for participant in participant_data:
            raw = participant.get("percentage")
            if raw is None:
                raise ValidationError(
                    f"Percentage is required for participant {participant['user_id']}"
                )
            try:
                percentage = to_decimal(raw)
            except InvalidOperation:
                raise ValidationError(f"Invalid percentage: {raw}")

            if percentage < 0 or percentage > HUNDRED:
                raise ValidationError(
                    f"Percentage must be between 0 and 100, got {percentage}"
                )
            percentages.append(percentage)

        total_percentage = sum(percentages, Decimal("0"))
        if abs(total_percentage - HUNDRED) > PERCENTAGE_TOLERANCE:
            raise ValidationError(
                f"Percentages must sum to 100%, got {total_percentage}%"
            )

        splits = [
            ParticipantSplit(
                user_id=participant["user_id"],
                amount=round_decimal(total_amount * percentage / HUNDRED),
                percentage=percentage,
            )
            for participant, percentage in zip(participant_data, percentages)
        ]
        return self.reconcile_remainder(total_amount, splits)
