"""
Tool: Calculate Chemical Recommendations

Standalone calculation for one pool: takes the pool profile and a full or
partial set of test readings, returns the ordered recommendation list as
plain JSON-compatible data.

Evaluation order (also the output order):
    pH → free chlorine → total alkalinity → cyanuric acid →
    calcium hardness → salt (salt pools only)

The output carries no timestamp; a caller that stores the calculation
attaches its own (see core.calculation_record).
"""

from typing import Any, Dict, Mapping, Optional, Union
import json
import logging

from core.recommendation_engine import is_balanced, normalize_readings, recommend
from core.schemas import PoolProfile
from tools.chemistry.classify_reading import summarize_readings

logger = logging.getLogger(__name__)


def _parse_readings(readings: Union[str, Mapping[str, Any]]) -> Dict[str, Any]:
    if isinstance(readings, str):
        try:
            readings = json.loads(readings)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON for readings: {e}") from e

    if not isinstance(readings, Mapping):
        raise ValueError("readings must be a JSON object (dictionary)")
    return dict(readings)


def calculate_chemical_recommendations(
    readings: Union[str, Mapping[str, Any]],
    volume_gallons: Optional[float],
    pool_type: str = "chlorine",
    client_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Calculate prioritized chemical recommendations for a pool.

    Args:
        readings: Test readings as a mapping or JSON object string, keyed by
                  parameter id or alias; null values mean "not measured"
                  Example: '{"ph": 6.9, "chlorine": 0.5, "alkalinity": null}'
        volume_gallons: Pool volume in US gallons (positive, finite)
        pool_type: "chlorine", "salt", "mineral" or "natural"
        client_id: Optional client reference, echoed back

    Returns:
        Dictionary containing:
        - pool_volume_gallons, pool_type, client_id: Echo of the profile
        - balanced: True when the result is the single balanced record
        - recommendation_count: Number of recommendations
        - recommendations: List of {chemical, amount, reason, priority, parameter}
        - test_results: Readings as {parameter: value}
        - readings_summary: Per-parameter in/out/unknown classification

    Example:
        >>> result = calculate_chemical_recommendations('{"ph": 6.9}', 20000)
        >>> result["recommendations"][0]["chemical"]
        'Sodium Carbonate (Soda Ash)'
        >>> result["recommendations"][0]["amount"]["display"]
        '19 oz'

    Raises:
        ValueError: If readings are not a JSON object or pool_type is invalid
        InvalidPoolProfile: If the pool volume is absent, zero, negative or
            non-finite
        UnknownParameter: If a reading names an unknown parameter
    """
    values = _parse_readings(readings)
    profile = PoolProfile(volume_gallons=volume_gallons, pool_type=pool_type, client_id=client_id)

    recommendations = recommend(profile, values)
    test_results = {pid.value: value for pid, value in normalize_readings(values).items()}

    output = {
        "pool_volume_gallons": profile.volume_gallons,
        "pool_type": profile.pool_type.value,
        "client_id": profile.client_id,
        "balanced": is_balanced(recommendations),
        "recommendation_count": len(recommendations),
        "recommendations": [r.to_payload() for r in recommendations],
        "test_results": test_results,
        "readings_summary": summarize_readings(values),
    }

    high = sum(1 for r in recommendations if r.priority.value == "high")
    if high:
        logger.info(f"{high} high-priority action(s) for client {client_id}")

    return output
