"""
Pool Chemistry Tools - water-test classification and dosing.

These tools provide instant (<1 ms) calculations for:
- Live in/out-of-range classification of single readings
- Prioritized chemical recommendations for a whole pool
- Plain-English dosage hints for one reading

All tools share the target bands in data/target_ranges.csv and the
coefficients in databases/dosage_coefficients.yaml.
"""

from .classify_reading import classify_reading, summarize_readings
from .recommend_chemicals import calculate_chemical_recommendations
from .dosage_instruction import dosage_instruction

__all__ = [
    "classify_reading",
    "summarize_readings",
    "calculate_chemical_recommendations",
    "dosage_instruction",
]
