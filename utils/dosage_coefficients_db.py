"""
Dosage Coefficient Database

Loads the empirical dosing coefficients from the pre-extracted YAML file
(databases/dosage_coefficients.yaml). The file is the single source of
truth for every per-gallon coefficient the dosage formulas use; there is
no second hardcoded set.

The YAML is parsed once per database instance and validated through a
pydantic model, so a missing or non-positive coefficient fails on load
rather than producing a silent zero dose.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class DosageCoefficients(BaseModel):
    """
    Pounds of product per gallon per unit of deviation, plus unit conversions.

    Field names match the keys of the ``coefficients`` and ``conversions``
    sections of the YAML file.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    soda_ash: float = Field(..., gt=0, description="Sodium carbonate, raises pH")
    muriatic_acid_ph: float = Field(..., gt=0, description="Muriatic acid, lowers pH")
    cal_hypo: float = Field(..., gt=0, description="Calcium hypochlorite, raises free chlorine")
    baking_soda: float = Field(..., gt=0, description="Sodium bicarbonate, raises total alkalinity")
    muriatic_acid_alkalinity: float = Field(..., gt=0, description="Muriatic acid, lowers total alkalinity")
    stabilizer: float = Field(..., gt=0, description="Cyanuric acid, raises CYA")
    calcium_chloride: float = Field(..., gt=0, description="Calcium chloride, raises calcium hardness")
    pool_salt: float = Field(..., gt=0, description="Pool-grade salt, raises salt (lbs)")

    ounces_per_pound: float = Field(16.0, gt=0)
    salt_bag_lbs: float = Field(40.0, gt=0)


class DosageCoefficientDatabase:
    """
    YAML-backed coefficient lookup.

    Usage:
        db = DosageCoefficientDatabase()
        coefficients = db.get_coefficients()
        coefficients.soda_ash  # 0.0002
    """

    def __init__(self, yaml_path: Optional[Union[str, Path]] = None):
        """
        Initialize coefficient database.

        Args:
            yaml_path: Path to the coefficient YAML file (defaults to the
                file shipped in databases/)
        """
        self.yaml_path = Path(yaml_path) if yaml_path is not None else self._default_yaml_path()
        self._coefficients: Optional[DosageCoefficients] = None

    @staticmethod
    def _default_yaml_path() -> Path:
        """Get default YAML path relative to this module"""
        base_dir = Path(__file__).parent.parent
        return base_dir / "databases" / "dosage_coefficients.yaml"

    def _load_yaml(self) -> Dict[str, Any]:
        if not self.yaml_path.exists():
            raise FileNotFoundError(f"Dosage coefficient YAML not found: {self.yaml_path}")

        with open(self.yaml_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict) or "coefficients" not in data:
            raise ValueError(f"{self.yaml_path}: missing 'coefficients' section")

        logger.info(f"Loaded dosage coefficients from {self.yaml_path}")
        return data

    def get_coefficients(self) -> DosageCoefficients:
        """
        Return the validated coefficient set (lazy loaded on first access).

        Raises:
            FileNotFoundError: If the YAML file does not exist
            ValueError: If the file is malformed or a coefficient is missing
                or not positive (pydantic ValidationError is a ValueError)
        """
        if self._coefficients is not None:
            return self._coefficients

        data = self._load_yaml()
        values: Dict[str, Any] = dict(data["coefficients"] or {})
        values.update(data.get("conversions") or {})

        self._coefficients = DosageCoefficients(**values)
        return self._coefficients

    def as_dict(self) -> Dict[str, float]:
        """Coefficients as a plain dictionary (for server info / reports)"""
        return self.get_coefficients().model_dump()


_DEFAULT_DB: Optional[DosageCoefficientDatabase] = None


def get_default_coefficients() -> DosageCoefficients:
    """Coefficients from the shipped YAML file, loaded once per process"""
    global _DEFAULT_DB
    if _DEFAULT_DB is None:
        _DEFAULT_DB = DosageCoefficientDatabase()
    return _DEFAULT_DB.get_coefficients()


def clear_coefficient_cache():
    """Drop the cached default database (useful for testing or reloading)."""
    global _DEFAULT_DB
    _DEFAULT_DB = None
