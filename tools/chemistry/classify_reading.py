"""
Tool: Classify Readings Against Target Bands

Live, single-value classification used while a technician fills in the
test-kit fields during a visit. Does not need the pool profile and never
computes dosages.

Statuses:
- in: reading within the inclusive target band
- out: reading present but below or above the band
- unknown: no reading entered yet (render neutral, not as an alarm)

Performance: <1 ms
"""

from typing import Any, Dict, Optional
import logging

from core.range_classifier import classify
from core.range_table import EVALUATION_ORDER, get_target_range
from core.recommendation_engine import Readings, normalize_readings
from core.schemas import RangeStatus

logger = logging.getLogger(__name__)


def classify_reading(parameter_id: str, value: Optional[float] = None) -> Dict[str, Any]:
    """
    Classify one reading for UI colouring.

    Args:
        parameter_id: Parameter id or alias (e.g. "ph", "chlorine", "cya")
        value: Reading, or None when the field is empty

    Returns:
        Dictionary containing:
        - parameter: Canonical parameter id
        - label: Display label
        - value: The reading (None when empty)
        - status: "in", "out" or "unknown"
        - target: {"min", "max", "unit"}
        - target_text: Band as text, e.g. "7.2-7.6"
        - interpretation: Short text for the field hint

    Raises:
        UnknownParameter: If the parameter id is not known

    Example:
        >>> result = classify_reading("chlorine", 0.5)
        >>> result["status"]
        'out'
        >>> result["interpretation"]
        'Below target band (1-3 ppm)'
    """
    target = get_target_range(parameter_id)
    status = classify(target.parameter_id, value)

    if status == RangeStatus.UNKNOWN:
        interpretation = "No reading entered"
    elif status == RangeStatus.IN:
        interpretation = f"Within target band ({target.describe()})"
    elif value < target.min:
        interpretation = f"Below target band ({target.describe()})"
    else:
        interpretation = f"Above target band ({target.describe()})"

    return {
        "parameter": target.parameter_id.value,
        "label": target.label,
        "value": value if status != RangeStatus.UNKNOWN else None,
        "status": status.value,
        "target": {"min": target.min, "max": target.max, "unit": target.unit},
        "target_text": target.describe(),
        "interpretation": interpretation,
    }


def summarize_readings(readings: Readings) -> Dict[str, Dict[str, Any]]:
    """
    Classify every reading of a visit at once.

    Args:
        readings: TestReading sequence or ``{parameter: value}`` mapping;
            empty fields may be passed as None

    Returns:
        ``{parameter: classify_reading(...)}`` in evaluation order, covering
        only the parameters present in ``readings``

    Raises:
        UnknownParameter: If any key is not a known parameter
    """
    values = normalize_readings(readings)
    summary = {
        pid.value: classify_reading(pid.value, values[pid])
        for pid in EVALUATION_ORDER
        if pid in values
    }
    out_of_range = [p for p, s in summary.items() if s["status"] == RangeStatus.OUT.value]
    if out_of_range:
        logger.debug(f"Readings out of range: {', '.join(out_of_range)}")
    return summary
