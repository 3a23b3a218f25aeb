"""
Live in/out-of-range classification of single readings.

Drives the colour of each test-kit field while the technician types, so it
never needs the pool profile and never fails for a known parameter: an
empty field is ``unknown``, which must not be rendered as an alarm.
"""

import math
from typing import Any, Dict, Optional

from core.range_table import get_target_range
from core.schemas import ChemicalParameterId, RangeStatus, TargetRange


def classify(
    parameter_id: Any,
    value: Optional[float],
    ranges: Optional[Dict[ChemicalParameterId, TargetRange]] = None,
) -> RangeStatus:
    """
    Classify one reading against its target band.

    Args:
        parameter_id: ChemicalParameterId or alias string (e.g. "chlorine")
        value: Reading, or None/NaN when nothing has been entered
        ranges: Alternate band table (defaults to the shipped CSV)

    Returns:
        RangeStatus.IN when min <= value <= max, RangeStatus.OUT otherwise,
        RangeStatus.UNKNOWN when there is no value

    Raises:
        UnknownParameter: If the id is not a known parameter

    Example:
        >>> classify("ph", 7.2)
        <RangeStatus.IN: 'in'>
        >>> classify("ph", None)
        <RangeStatus.UNKNOWN: 'unknown'>
    """
    target = get_target_range(parameter_id, ranges)
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return RangeStatus.UNKNOWN
    return RangeStatus.IN if target.contains(value) else RangeStatus.OUT
