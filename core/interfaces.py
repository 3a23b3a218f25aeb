"""
Abstract base classes defining the engine's plugin contracts.

These interfaces enable:
- One formula class per dosed parameter, swappable without touching the
  aggregator
- A persistence collaborator that the engine hands records to, without the
  engine knowing anything about the storage behind it
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from core.schemas import ChemicalParameterId, ChemicalRecommendation, TargetRange


# ============================================================================
# Dosage Formulas
# ============================================================================

class DosageFormula(ABC):
    """
    Abstract base for per-parameter dosage formulas.

    A formula is a pure function of the reading and pool volume: it returns
    None when the reading is inside the target band and a
    ChemicalRecommendation otherwise. Formulas hold only immutable
    configuration (their band and coefficients), so a single instance can
    be shared between concurrent callers.
    """

    parameter_id: ChemicalParameterId

    def __init__(self, target_range: TargetRange):
        if target_range.parameter_id != self.parameter_id:
            raise ValueError(
                f"{type(self).__name__} needs the {self.parameter_id.value} band, "
                f"got {target_range.parameter_id.value}"
            )
        self.target_range = target_range

    @abstractmethod
    def recommend(
        self,
        reading: float,
        pool_volume_gallons: float,
    ) -> Optional[ChemicalRecommendation]:
        """
        Compute the recommendation for one reading.

        Args:
            reading: Measured value (pH units or ppm)
            pool_volume_gallons: Positive finite pool volume

        Returns:
            ChemicalRecommendation, or None when no action is needed
        """
        pass


# ============================================================================
# Persistence Collaborator
# ============================================================================

class CalculationStore(ABC):
    """
    Abstract base for calculation history storage.

    Implementations live outside the engine (database table, HTTP API,
    file). They receive the JSON-compatible payload of a CalculationRecord
    and must not expect engine types.
    """

    @abstractmethod
    def save(self, payload: Dict[str, Any]) -> Optional[str]:
        """
        Persist one calculation payload.

        Args:
            payload: CalculationRecord.to_payload() output

        Returns:
            Storage identifier of the saved record, if the backend has one
        """
        pass
