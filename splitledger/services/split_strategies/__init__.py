"""Split calculation strategies"""

from splitledger.core.exceptions import ValidationError
from splitledger.models.expense import SplitType
from splitledger.services.split_strategies.base import (BaseSplitStrategy,
                                                        ParticipantSplit)
from splitledger.services.split_strategies.equal_split import \
    EqualSplitStrategy
from splitledger.services.split_strategies.exact_split import \
    ExactSplitStrategy
from splitledger.services.split_strategies.percentage_split import \
    PercentageSplitStrategy
from splitledger.services.split_strategies.shares_split import \
    SharesSplitStrategy

_STRATEGIES = {
    SplitType.EQUAL: EqualSplitStrategy(),
    SplitType.EXACT: ExactSplitStrategy(),
    SplitType.PERCENTAGE: PercentageSplitStrategy(),
    SplitType.SHARES: SharesSplitStrategy(),
}


def get_split_strategy(split_type) -> BaseSplitStrategy:
    """
    Get appropriate split strategy based on split type.

    Args:
        split_type: SplitType member or its string value

    Returns:
        Instance of appropriate strategy

    Raises:
        ValidationError: If split_type is not recognized
    """
    try:
        split_type = SplitType(split_type)
    except ValueError:
        raise ValidationError(f"Unknown split type: {split_type}")

    return _STRATEGIES[split_type]


__all__ = [
    "BaseSplitStrategy",
    "ParticipantSplit",
    "EqualSplitStrategy",
    "ExactSplitStrategy",
    "PercentageSplitStrategy",
    "SharesSplitStrategy",
    "get_split_strategy",
]
