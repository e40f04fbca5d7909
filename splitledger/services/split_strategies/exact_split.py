"""Exact split strategy"""
from decimal import Decimal, InvalidOperation
from typing import List

from splitledger.core.exceptions import ValidationError
from splitledger.services.split_strategies.base import BaseSplitStrategy, ParticipantSplit
from splitledger.utils.decimal_utils import has_minor_unit_precision, sum_decimals, to_decimal


class ExactSplitStrategy(BaseSplitStrategy):
    """Strategy for splits where each participant's amount is given"""

    def calculate_splits(
        self,
        total_amount: Decimal,
        participant_data: List[dict]
    ) -> List[ParticipantSplit]:
        """
        Use the supplied amounts as-is.

        Args:
            total_amount: Total expense amount
            participant_data: List of dicts with user_id and amount

        Returns:
            List of ParticipantSplit with the specified amounts

        Raises:
            ValidationError: If an amount is missing, negative, finer than a
                minor unit, or the amounts don't sum to total_amount exactly
        """
        splits = []
        for participant in participant_data:
            raw = participant.get("amount")
            if raw is None:
                raise ValidationError(
                    f"Amount is required for participant {participant['user_id']} in an EXACT split"
                )
            try:
                amount = to_decimal(raw)
            except InvalidOperation:
                raise ValidationError(f"Invalid amount: {raw}")

            if amount < 0:
                raise ValidationError(f"Amount owed cannot be negative, got {amount}")
            if not has_minor_unit_precision(amount):
                raise ValidationError(f"Amount {amount} has more than two decimal places")

            splits.append(ParticipantSplit(user_id=participant["user_id"], amount=amount))

        total_assigned = sum_decimals(split.amount for split in splits)
        if total_assigned != total_amount:
            raise ValidationError(
                f"Exact split amounts ({total_assigned}) must sum to the total amount ({total_amount})"
            )

        return splits
