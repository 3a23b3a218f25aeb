"""
Per-parameter dosage formulas.

Every formula follows the same rule:

    dose_lb = coefficient × |reading − nearest band boundary| × volume_gal

converted to ounces (×16) for the acid, base and additive products. Salt is
the exception and is reported in pounds with the 40 lb bag count, because
it is bought and added by the bag.

Distance is measured from the nearest edge of the band, not its midpoint,
so a reading just outside the band gets a small correction and a reading
inside it gets none. The coefficients are independent empirical values
read from databases/dosage_coefficients.yaml.

Conditions that no chemical fixes (high free chlorine, high CYA, high
calcium hardness, high salt) produce an instruction instead of a quantity.
"""

import math
from abc import abstractmethod
from typing import Any, Dict, Optional

from core.interfaces import DosageFormula
from core.range_table import EVALUATION_ORDER, get_target_range
from core.schemas import (
    ChemicalParameterId,
    ChemicalRecommendation,
    DosageAmount,
    Priority,
    TargetRange,
)
from utils.dosage_coefficients_db import DosageCoefficients, get_default_coefficients
from utils.exceptions import InvalidPoolProfile, UnknownParameter
from utils.units import OUNCES, POUNDS, pounds_to_ounces

# Products and actions
SODA_ASH = "Sodium Carbonate (Soda Ash)"
MURIATIC_ACID = "Muriatic Acid"
CAL_HYPO = "Calcium Hypochlorite (Cal-Hypo)"
BAKING_SODA = "Sodium Bicarbonate (Baking Soda)"
STABILIZER = "Cyanuric Acid (Stabilizer)"
CALCIUM_CHLORIDE = "Calcium Chloride"
POOL_SALT = "Pool-Grade Salt"
NATURAL_DISSIPATION = "None - Allow natural dissipation"
PARTIAL_WATER_REPLACEMENT = "Partial water replacement recommended"

DISSIPATION_WAIT = "Wait 24-48 hours"
DRAIN_AND_REFILL = "Drain and refill 25-50% of pool"
DRAIN_AND_REFILL_SALT = "Drain and refill to dilute salt level"


def validate_pool_volume(volume_gallons: Any) -> float:
    """
    Check that a pool volume can be dosed against.

    Returns:
        Volume as float

    Raises:
        InvalidPoolProfile: If the volume is absent, not a number, zero,
            negative, NaN or infinite
    """
    if volume_gallons is None:
        raise InvalidPoolProfile("Pool volume is required to compute dosages", volume_gallons)
    if isinstance(volume_gallons, bool) or not isinstance(volume_gallons, (int, float)):
        raise InvalidPoolProfile(
            f"Pool volume must be a number of gallons, got {volume_gallons!r}", volume_gallons
        )
    volume = float(volume_gallons)
    if not math.isfinite(volume) or volume <= 0:
        raise InvalidPoolProfile(
            f"Pool volume must be a positive finite number of gallons, got {volume_gallons!r}",
            volume_gallons,
        )
    return volume


class BandFormula(DosageFormula):
    """
    Shared band logic: in-band readings return None, others are routed to
    ``too_low`` / ``too_high`` with their distance from the nearest boundary.
    """

    reason_label: str = ""

    def __init__(self, target_range: TargetRange, coefficients: DosageCoefficients):
        super().__init__(target_range)
        self.coefficients = coefficients

    def recommend(
        self,
        reading: Optional[float],
        pool_volume_gallons: float,
    ) -> Optional[ChemicalRecommendation]:
        volume = validate_pool_volume(pool_volume_gallons)
        if reading is None or math.isnan(reading):
            return None

        band = self.target_range
        if band.contains(reading):
            return None
        if reading < band.min:
            return self.too_low(reading, band.min - reading, volume)
        return self.too_high(reading, reading - band.max, volume)

    @abstractmethod
    def too_low(self, reading: float, deficit: float, volume: float) -> ChemicalRecommendation:
        pass

    @abstractmethod
    def too_high(self, reading: float, excess: float, volume: float) -> ChemicalRecommendation:
        pass

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def ounces(self, coefficient: float, distance: float, volume: float) -> DosageAmount:
        pounds = coefficient * distance * volume
        return DosageAmount(
            value=pounds_to_ounces(pounds, self.coefficients.ounces_per_pound),
            unit=OUNCES,
        )

    def reason(self, reading: float, direction: str) -> str:
        band = self.target_range
        return (
            f"{self.reason_label} is too {direction} ({band.format_reading(reading)}). "
            f"Target: {band.describe()}"
        )

    def build(
        self,
        chemical_name: str,
        amount,
        reading: float,
        direction: str,
        priority: Priority,
    ) -> ChemicalRecommendation:
        return ChemicalRecommendation(
            chemical_name=chemical_name,
            amount=amount,
            reason_text=self.reason(reading, direction),
            priority=priority,
            parameter_id=self.parameter_id,
        )


# ============================================================================
# Formulas
# ============================================================================

class PhFormula(BandFormula):
    """Soda ash raises pH, muriatic acid lowers it; both urgent"""

    parameter_id = ChemicalParameterId.PH
    reason_label = "pH"

    def too_low(self, reading, deficit, volume):
        amount = self.ounces(self.coefficients.soda_ash, deficit, volume)
        return self.build(SODA_ASH, amount, reading, "low", Priority.HIGH)

    def too_high(self, reading, excess, volume):
        amount = self.ounces(self.coefficients.muriatic_acid_ph, excess, volume)
        return self.build(MURIATIC_ACID, amount, reading, "high", Priority.HIGH)


class FreeChlorineFormula(BandFormula):
    """
    Low chlorine is dosed with cal-hypo.

    High chlorine is left to dissipate: sunlight and bather load bring it
    down within a day or two, and nothing should be added.
    """

    parameter_id = ChemicalParameterId.FREE_CHLORINE
    reason_label = "Free chlorine"

    def too_low(self, reading, deficit, volume):
        amount = self.ounces(self.coefficients.cal_hypo, deficit, volume)
        return self.build(CAL_HYPO, amount, reading, "low", Priority.HIGH)

    def too_high(self, reading, excess, volume):
        return self.build(NATURAL_DISSIPATION, DISSIPATION_WAIT, reading, "high", Priority.MEDIUM)


class TotalAlkalinityFormula(BandFormula):
    parameter_id = ChemicalParameterId.TOTAL_ALKALINITY
    reason_label = "Total alkalinity"

    def too_low(self, reading, deficit, volume):
        amount = self.ounces(self.coefficients.baking_soda, deficit, volume)
        return self.build(BAKING_SODA, amount, reading, "low", Priority.MEDIUM)

    def too_high(self, reading, excess, volume):
        amount = self.ounces(self.coefficients.muriatic_acid_alkalinity, excess, volume)
        return self.build(MURIATIC_ACID, amount, reading, "high", Priority.MEDIUM)


class CyanuricAcidFormula(BandFormula):
    """No chemical removes CYA; high readings call for dilution"""

    parameter_id = ChemicalParameterId.CYANURIC_ACID
    reason_label = "Cyanuric acid"

    def too_low(self, reading, deficit, volume):
        amount = self.ounces(self.coefficients.stabilizer, deficit, volume)
        return self.build(STABILIZER, amount, reading, "low", Priority.LOW)

    def too_high(self, reading, excess, volume):
        return self.build(PARTIAL_WATER_REPLACEMENT, DRAIN_AND_REFILL, reading, "high", Priority.HIGH)


class CalciumHardnessFormula(BandFormula):
    parameter_id = ChemicalParameterId.CALCIUM_HARDNESS
    reason_label = "Calcium hardness"

    def too_low(self, reading, deficit, volume):
        amount = self.ounces(self.coefficients.calcium_chloride, deficit, volume)
        return self.build(CALCIUM_CHLORIDE, amount, reading, "low", Priority.LOW)

    def too_high(self, reading, excess, volume):
        return self.build(PARTIAL_WATER_REPLACEMENT, DRAIN_AND_REFILL, reading, "high", Priority.MEDIUM)


class SaltFormula(BandFormula):
    """Salt is bought by the bag, so the dose stays in pounds"""

    parameter_id = ChemicalParameterId.SALT
    reason_label = "Salt"

    def too_low(self, reading, deficit, volume):
        amount = DosageAmount(
            value=self.coefficients.pool_salt * deficit * volume,
            unit=POUNDS,
            bag_size_lbs=self.coefficients.salt_bag_lbs,
        )
        return self.build(POOL_SALT, amount, reading, "low", Priority.MEDIUM)

    def too_high(self, reading, excess, volume):
        return self.build(
            PARTIAL_WATER_REPLACEMENT, DRAIN_AND_REFILL_SALT, reading, "high", Priority.MEDIUM
        )


FORMULA_CLASSES = {
    ChemicalParameterId.PH: PhFormula,
    ChemicalParameterId.FREE_CHLORINE: FreeChlorineFormula,
    ChemicalParameterId.TOTAL_ALKALINITY: TotalAlkalinityFormula,
    ChemicalParameterId.CYANURIC_ACID: CyanuricAcidFormula,
    ChemicalParameterId.CALCIUM_HARDNESS: CalciumHardnessFormula,
    ChemicalParameterId.SALT: SaltFormula,
}


def get_formula(
    parameter_id: Any,
    ranges: Optional[Dict[ChemicalParameterId, TargetRange]] = None,
    coefficients: Optional[DosageCoefficients] = None,
) -> DosageFormula:
    """
    Build the formula for one parameter.

    Raises:
        UnknownParameter: If the id is unknown or has no dosage formula
    """
    pid = ChemicalParameterId.parse(parameter_id)
    formula_cls = FORMULA_CLASSES.get(pid)
    if formula_cls is None:
        raise UnknownParameter(parameter_id)
    return formula_cls(
        get_target_range(pid, ranges),
        coefficients if coefficients is not None else get_default_coefficients(),
    )


def build_formulas(
    ranges: Optional[Dict[ChemicalParameterId, TargetRange]] = None,
    coefficients: Optional[DosageCoefficients] = None,
) -> Dict[ChemicalParameterId, DosageFormula]:
    """All formulas keyed by parameter, in evaluation order"""
    coefficients = coefficients if coefficients is not None else get_default_coefficients()
    return {
        pid: get_formula(pid, ranges, coefficients)
        for pid in EVALUATION_ORDER
        if pid in FORMULA_CLASSES
    }
