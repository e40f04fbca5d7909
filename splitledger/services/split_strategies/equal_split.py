"""Equal split strategy"""

from decimal import Decimal
from typing import List

from splitledger.services.split_strategies.base import (BaseSplitStrategy,
                                                        ParticipantSplit)
from splitledger.utils.decimal_utils import floor_decimal


class EqualSplitStrategy(BaseSplitStrategy):
    """Strategy for splitting expense equally among participants"""

    def calculate_splits(
        self, total_amount: Decimal, participant_data: List[dict]
    ) -> List[ParticipantSplit]:
        """
        Calculate equal split for all participants.

        100.00 among three gives 33.34, 33.33, 33.33: the first participant
        absorbs the residue. Shares are truncated to the cent, so the
        residue is never negative and any positive total can be split.
        """
        share = floor_decimal(total_amount / len(participant_data))

        splits = [
            ParticipantSplit(user_id=participant["user_id"], amount=share)
            for participant in participant_data
        ]
        return self.reconcile_remainder(total_amount, splits)
