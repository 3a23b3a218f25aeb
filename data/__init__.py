"""
Pool chemistry reference data.

Contains:
- target_ranges.csv - Inclusive target band per chemical parameter, as
  used by the live classifier and the dosage formulas

Loaded through data.csv_loaders (lazy, cached).
"""

from .csv_loaders import (
    DATA_DIR,
    TARGET_RANGES_CSV,
    load_target_ranges_from_csv,
    clear_caches,
)

__all__ = [
    "DATA_DIR",
    "TARGET_RANGES_CSV",
    "load_target_ranges_from_csv",
    "clear_caches",
]
