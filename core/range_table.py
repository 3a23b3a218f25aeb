"""
Target band lookup shared by the live classifier and the dosage formulas.

One band per parameter, loaded from data/target_ranges.csv. Both consumers
go through this module, so a reading that classifies as "in" never
receives a dosage and vice versa.
"""

from typing import Any, Dict, List, Optional

from core.schemas import ChemicalParameterId, TargetRange
from data.csv_loaders import load_target_ranges_from_csv
from utils.exceptions import UnknownParameter

# Fixed evaluation order for recommendations (also the display order)
EVALUATION_ORDER = (
    ChemicalParameterId.PH,
    ChemicalParameterId.FREE_CHLORINE,
    ChemicalParameterId.TOTAL_ALKALINITY,
    ChemicalParameterId.CYANURIC_ACID,
    ChemicalParameterId.CALCIUM_HARDNESS,
    ChemicalParameterId.SALT,
)


def get_target_range(
    parameter_id: Any,
    ranges: Optional[Dict[ChemicalParameterId, TargetRange]] = None,
) -> TargetRange:
    """
    Return the target band for ``parameter_id``.

    Args:
        parameter_id: ChemicalParameterId or any accepted alias string
        ranges: Alternate table (defaults to the shipped CSV)

    Raises:
        UnknownParameter: If the id is not a known parameter
    """
    pid = ChemicalParameterId.parse(parameter_id)
    table = ranges if ranges is not None else load_target_ranges_from_csv()
    try:
        return table[pid]
    except KeyError:
        raise UnknownParameter(parameter_id) from None


def list_target_ranges(
    ranges: Optional[Dict[ChemicalParameterId, TargetRange]] = None,
) -> List[TargetRange]:
    """All target bands in evaluation order"""
    table = ranges if ranges is not None else load_target_ranges_from_csv()
    return [table[pid] for pid in EVALUATION_ORDER if pid in table]
