"""Split calculation entry point"""

from decimal import InvalidOperation
from typing import List, Sequence

from splitledger.core.exceptions import (InternalConsistencyError,
                                         ValidationError)
from splitledger.services.split_strategies import (ParticipantSplit,
                                                   get_split_strategy)
from splitledger.utils.decimal_utils import (has_minor_unit_precision,
                                             sum_decimals, to_decimal)


class SplitCalculator:
    """Turns a split type, an amount and participant inputs into owed amounts"""

    @staticmethod
    def compute(
        split_type, total_amount, participants: Sequence[dict]
    ) -> List[ParticipantSplit]:
        """
        Compute per-participant owed amounts.

        The result always sums to total_amount exactly. Identical inputs in
        identical order give identical output.

        Args:
            split_type: SplitType (or its string value)
            total_amount: Positive amount with at most two decimal places
            participants: Dicts with user_id plus amount, percentage or
                shares depending on split_type

        Returns:
            List of ParticipantSplit in input order

        Raises:
            ValidationError: On empty or duplicate participants, non-positive
                or over-precise amount, unknown split type, or invalid
                per-participant inputs
            InternalConsistencyError: If the computed splits do not sum to
                total_amount
        """
        strategy = get_split_strategy(split_type)

        if not participants:
            raise ValidationError("At least one participant is required")

        try:
            total = to_decimal(total_amount)
        except InvalidOperation:
            raise ValidationError(f"Invalid amount: {total_amount}")

        if total <= 0:
            raise ValidationError("Amount should be greater than 0")
        if not has_minor_unit_precision(total):
            raise ValidationError(f"Amount {total} has more than two decimal places")

        user_ids = [p["user_id"] for p in participants]
        if len(set(user_ids)) != len(user_ids):
            raise ValidationError("Each participant may appear only once in a split")

        splits = strategy.calculate_splits(total, [dict(p) for p in participants])

        assigned = sum_decimals(split.amount for split in splits)
        if assigned != total or len(splits) != len(participants):
            raise InternalConsistencyError(
                f"Computed splits sum to {assigned}, expected {total}",
                details={"split_type": str(split_type)},
            )

        return splits

