"""Shares split strategy"""

from decimal import Decimal, InvalidOperation
from typing import List

from splitledger.core.exceptions import ValidationError
from splitledger.services.split_strategies.base import (BaseSplitStrategy,
                                                        ParticipantSplit)
from splitledger.utils.decimal_utils import round_decimal, to_decimal


class SharesSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting expense by relative share weights"""

    def calculate_splits(
        self, total_amount: Decimal, participant_data: List[dict]
    ) -> List[ParticipantSplit]:
        """
        Split proportionally to each participant's shares.

        Shares [1, 1, 2] on 80.00 give 20.00, 20.00, 40.00.

        Raises:
            ValidationError: If a share is missing or negative, or the total
                of shares is not positive
        """
        weights = []
        for participant in participant_data:
            raw = participant.get("shares")
            if raw is None:
                raise ValidationError(
                    f"Shares are required for participant {participant['user_id']}"
                )
            try:
                shares = to_decimal(raw)
            except InvalidOperation:
                raise ValidationError(f"Invalid shares: {raw}")

            if shares < 0:
                raise ValidationError(f"Shares cannot be negative, got {shares}")
            weights.append(shares)

        total_shares = sum(weights, Decimal("0"))
        if total_shares <= 0:
            raise ValidationError("Total shares must be greater than zero")

        splits = [
            ParticipantSplit(
                user_id=participant["user_id"],
                amount=round_decimal(total_amount * shares / total_shares),
                shares=shares,
            )
            for participant, shares in zip(participant_data, weights)
        ]
        return self.reconcile_remainder(total_amount, splits)
