"""
CSV Data Loaders for Pool Chemistry Target Bands

Target bands are kept in a version-controlled CSV file instead of a
hardcoded dictionary, so the field-service forms, the live classifier and
the dosage formulas all read the same table.

CSV Files:
- target_ranges.csv - Inclusive min/max band, unit, label and input step
  per chemical parameter

Loaders are lazy (data loaded on first access) and the default table is
cached. Unlike a best-effort lookup, a bad row fails the load: silently
dropping a parameter would make every reading of it look unknown.
"""

import csv
from pathlib import Path
from typing import Dict, Optional, Union
import logging

from core.schemas import ChemicalParameterId, TargetRange

logger = logging.getLogger(__name__)

# Location of CSV data files
DATA_DIR = Path(__file__).parent
TARGET_RANGES_CSV = DATA_DIR / "target_ranges.csv"

# Cache for loaded data (lazy loading)
_TARGET_RANGES_CACHE: Optional[Dict[ChemicalParameterId, TargetRange]] = None


def load_target_ranges_from_csv(
    csv_path: Optional[Union[str, Path]] = None,
) -> Dict[ChemicalParameterId, TargetRange]:
    """
    Load target bands from CSV file.

    Args:
        csv_path: Alternate table to load. Only the default table is cached.

    Returns:
        Dictionary mapping ChemicalParameterId to TargetRange

    Raises:
        FileNotFoundError: If the CSV file does not exist
        ValueError: If a row is malformed, duplicated, has min >= max, or a
            parameter is missing from the table

    Example:
        >>> ranges = load_target_ranges_from_csv()
        >>> ph = ranges[ChemicalParameterId.PH]
        >>> (ph.min, ph.max)
        (7.2, 7.6)
    """
    global _TARGET_RANGES_CACHE

    use_cache = csv_path is None
    if use_cache and _TARGET_RANGES_CACHE is not None:
        return _TARGET_RANGES_CACHE

    csv_file = Path(csv_path) if csv_path is not None else TARGET_RANGES_CSV

    if not csv_file.exists():
        raise FileNotFoundError(
            f"Target ranges CSV not found: {csv_file}. "
            f"Expected file: target_ranges.csv"
        )

    ranges: Dict[ChemicalParameterId, TargetRange] = {}

    with open(csv_file, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        for line_no, row in enumerate(reader, start=2):
            try:
                parameter_id = ChemicalParameterId.parse(row['parameter_id'])
                target = TargetRange(
                    parameter_id=parameter_id,
                    label=row['label'],
                    unit=row.get('unit') or "",
                    min=float(row['min']),
                    max=float(row['max']),
                    step=float(row['step']),
                )
            except (KeyError, TypeError, ValueError) as e:  # UnknownParameter is a KeyError
                raise ValueError(f"{csv_file}:{line_no}: invalid target range row {row}: {e}") from e

            if parameter_id in ranges:
                raise ValueError(f"{csv_file}:{line_no}: duplicate row for {parameter_id.value}")
            ranges[parameter_id] = target

    missing = [p.value for p in ChemicalParameterId if p not in ranges]
    if missing:
        raise ValueError(f"{csv_file}: no target range for {', '.join(missing)}")

    logger.info(f"Loaded {len(ranges)} target ranges from {csv_file}")

    if use_cache:
        _TARGET_RANGES_CACHE = ranges
    return ranges


def clear_caches():
    """Clear all cached CSV data (useful for testing or reloading)."""
    global _TARGET_RANGES_CACHE
    _TARGET_RANGES_CACHE = None
    logger.info("Cleared all CSV data caches")


__all__ = [
    "DATA_DIR",
    "TARGET_RANGES_CSV",
    "load_target_ranges_from_csv",
    "clear_caches",
]
