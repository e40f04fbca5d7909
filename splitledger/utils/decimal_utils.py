"""Decimal arithmetic helpers

Money is held as ``Decimal`` quantised to minor currency units (cents).
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

MINOR_UNIT = Decimal("0.01")
ZERO = Decimal("0")


def round_decimal(value: Decimal, decimal_places: int = 2) -> Decimal:
    """
    Round a decimal value to specified decimal places.

    Args:
        value: Decimal value to round
        decimal_places: Number of decimal places (default 2)

    Returns:
        Rounded decimal value
    """
    quantize_value = Decimal(10) ** -decimal_places
    return value.quantize(quantize_value, rounding=ROUND_HALF_UP)


def floor_decimal(value: Decimal) -> Decimal:
    """Truncate a non-negative value to whole minor units"""
    return value.quantize(MINOR_UNIT, rounding=ROUND_DOWN)


def sum_decimals(values: Iterable[Decimal]) -> Decimal:
    """
    Sum decimal values.

    Args:
        values: Decimal values

    Returns:
        Sum of all values
    """
    return sum(values, ZERO)


def to_decimal(value) -> Decimal:
    """
    Convert int/str/float/Decimal input to Decimal without float noise.

    Raises:
        InvalidOperation: If the value is not a number, or is NaN or infinite
    """
    result = value if isinstance(value, Decimal) else Decimal(str(value))
    if not result.is_finite():
        raise InvalidOperation(f"{value} is not a finite number")
    return result


def has_minor_unit_precision(value: Decimal) -> bool:
    """True if the value has no precision below one minor unit"""
    return value == value.quantize(MINOR_UNIT)