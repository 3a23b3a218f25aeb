"""
Unit handling and number formatting for dosage output.

Doses are computed in pounds of product and reported in ounces for the
acid/base/additive chemicals and in pounds (plus bag count) for salt.
Formatting mirrors what technicians type into the test-kit fields: whole
numbers print without a decimal point, fractional readings keep theirs.
"""

import math
from typing import Union

Number = Union[int, float]

# Supported display units for dosage quantities
OUNCES = "oz"
POUNDS = "lbs"


def format_number(value: Number) -> str:
    """
    Render a reading the way it was entered.

    Examples:
        >>> format_number(6.9)
        '6.9'
        >>> format_number(100.0)
        '100'
        >>> format_number(1.0)
        '1'
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward (toward +inf)"""
    return int(math.floor(value + 0.5))


def pounds_to_ounces(pounds: float, ounces_per_pound: float) -> float:
    """Convert a dose in pounds to ounces"""
    return pounds * ounces_per_pound


def bags_needed(pounds: float, bag_size_lbs: float) -> int:
    """
    Number of whole bags that cover ``pounds`` of product.

    Args:
        pounds: Required product weight (lbs)
        bag_size_lbs: Weight of one retail bag (lbs)

    Returns:
        Bag count, at least 1 for any positive requirement
    """
    if bag_size_lbs <= 0:
        raise ValueError(f"bag_size_lbs must be positive, got {bag_size_lbs}")
    if pounds <= 0:
        return 0
    return int(math.ceil(pounds / bag_size_lbs))
