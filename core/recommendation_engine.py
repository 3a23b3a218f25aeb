"""
Recommendation aggregator.

Runs the dosage formula of every measured parameter for one pool and
returns the ordered list of actions. The output order is the fixed
evaluation order (pH, free chlorine, total alkalinity, cyanuric acid,
calcium hardness, salt), never a priority sort, so identical inputs give
identical lists.

When nothing needs attention the result is a single "balanced" record,
which never appears alongside real recommendations.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from core.dosage_formulas import build_formulas, validate_pool_volume
from core.interfaces import DosageFormula
from core.range_table import EVALUATION_ORDER
from core.schemas import (
    ChemicalParameterId,
    ChemicalRecommendation,
    PoolProfile,
    PoolType,
    Priority,
    TestReading,
)

logger = logging.getLogger(__name__)

Readings = Union[Iterable[TestReading], Mapping[Any, Optional[float]]]

BALANCED_CHEMICAL = "No chemicals needed"
BALANCED_AMOUNT = "Pool chemistry is balanced"
BALANCED_REASON = "All levels are within target ranges"


def balanced_recommendation() -> ChemicalRecommendation:
    """The single record returned when no parameter needs adjustment"""
    return ChemicalRecommendation(
        chemical_name=BALANCED_CHEMICAL,
        amount=BALANCED_AMOUNT,
        reason_text=BALANCED_REASON,
        priority=Priority.LOW,
    )


def is_balanced(recommendations: List[ChemicalRecommendation]) -> bool:
    """True for the one-element balanced result"""
    return (
        len(recommendations) == 1
        and recommendations[0].chemical_name == BALANCED_CHEMICAL
        and recommendations[0].parameter_id is None
    )


def normalize_readings(readings: Readings) -> Dict[ChemicalParameterId, Optional[float]]:
    """
    Collapse readings into ``{parameter: value}``.

    Accepts a sequence of TestReading or a mapping of parameter id (or
    alias) to value. Later entries for the same parameter replace earlier
    ones. NaN values are treated as absent.

    Raises:
        UnknownParameter: If any key is not a known parameter
    """
    if isinstance(readings, Mapping):
        items = [TestReading(parameter_id=k, value=v) for k, v in readings.items()]
    else:
        items = [r if isinstance(r, TestReading) else TestReading.model_validate(r) for r in readings]

    values: Dict[ChemicalParameterId, Optional[float]] = {}
    for reading in items:
        values[reading.parameter_id] = reading.value
    return values


class RecommendationEngine:
    """
    Stateless aggregator over a fixed set of formulas.

    Usage:
        engine = RecommendationEngine()
        recs = engine.recommend(
            PoolProfile(volume_gallons=20000, pool_type="chlorine"),
            {"ph": 6.9},
        )
        recs[0].chemical_name  # "Sodium Carbonate (Soda Ash)"
    """

    def __init__(self, formulas: Optional[Dict[ChemicalParameterId, DosageFormula]] = None):
        """
        Args:
            formulas: Formula per parameter (defaults to the shipped bands
                and coefficients)
        """
        self.formulas = formulas if formulas is not None else build_formulas()

    def recommend(self, profile: PoolProfile, readings: Readings) -> List[ChemicalRecommendation]:
        """
        Compute ordered recommendations for one pool.

        Args:
            profile: Pool profile; its volume must be positive and finite
            readings: TestReading sequence or ``{parameter: value}`` mapping

        Returns:
            Non-empty list of ChemicalRecommendation in evaluation order, or
            the single balanced record

        Raises:
            InvalidPoolProfile: If the pool volume cannot be dosed against
            UnknownParameter: If a reading names an unknown parameter
        """
        volume = validate_pool_volume(profile.volume_gallons)
        values = normalize_readings(readings)

        recommendations: List[ChemicalRecommendation] = []
        for parameter_id in EVALUATION_ORDER:
            value = values.get(parameter_id)
            if value is None or math.isnan(value):
                continue
            if parameter_id == ChemicalParameterId.SALT and profile.pool_type != PoolType.SALT:
                logger.debug(f"Skipping salt reading for {profile.pool_type.value} pool")
                continue

            formula = self.formulas.get(parameter_id)
            if formula is None:
                logger.debug(f"No dosage formula for {parameter_id.value}")
                continue

            recommendation = formula.recommend(value, volume)
            if recommendation is not None:
                logger.debug(
                    f"{parameter_id.value}={value}: {recommendation.chemical_name} "
                    f"({recommendation.priority.value})"
                )
                recommendations.append(recommendation)

        if not recommendations:
            recommendations.append(balanced_recommendation())

        logger.info(
            f"Calculated {len(recommendations)} recommendation(s) for "
            f"{volume:g} gal {profile.pool_type.value} pool"
        )
        return recommendations


_DEFAULT_ENGINE: Optional[RecommendationEngine] = None


def recommend(profile: PoolProfile, readings: Readings) -> List[ChemicalRecommendation]:
    """Module-level shortcut using the shipped bands and coefficients"""
    global _DEFAULT_ENGINE
    if _DEFAULT_ENGINE is None:
        _DEFAULT_ENGINE = RecommendationEngine()
    return _DEFAULT_ENGINE.recommend(profile, readings)
