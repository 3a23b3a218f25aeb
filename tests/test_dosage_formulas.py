"""
Unit tests for per-parameter dosage formulas

Tests cover:
1. Dose quantities for each product
2. Monotonicity and linear volume scaling
3. Instruction-only outcomes (dissipation, dilution)
4. Reason text and priorities
5. Pool volume validation
"""

import math
import pytest
from core.dosage_formulas import (
    BAKING_SODA,
    CAL_HYPO,
    CALCIUM_CHLORIDE,
    DISSIPATION_WAIT,
    DRAIN_AND_REFILL,
    DRAIN_AND_REFILL_SALT,
    MURIATIC_ACID,
    NATURAL_DISSIPATION,
    PARTIAL_WATER_REPLACEMENT,
    POOL_SALT,
    SODA_ASH,
    STABILIZER,
    BandFormula,
    PhFormula,
    build_formulas,
    get_formula,
    validate_pool_volume,
)
from core.range_table import EVALUATION_ORDER, get_target_range
from core.schemas import ChemicalParameterId, DosageAmount, Priority
from utils.dosage_coefficients_db import get_default_coefficients
from utils.exceptions import InvalidPoolProfile, UnknownParameter
from utils.units import round_half_up


def dose(parameter_id, reading, volume):
    return get_formula(parameter_id).recommend(reading, volume)


class TestPhFormula:

    def test_low_ph_soda_ash(self):
        """0.3 below band in 20,000 gal: 0.0002 x 0.3 x 20000 lb = 19.2 oz"""
        rec = dose("ph", 6.9, 20000)
        assert rec.chemical_name == SODA_ASH
        assert rec.priority == Priority.HIGH
        assert rec.amount.unit == "oz"
        assert rec.amount.value == pytest.approx(19.2)
        assert rec.amount_text == "19 oz"
        assert rec.reason_text == "pH is too low (6.9). Target: 7.2-7.6"

    def test_high_ph_muriatic_acid(self):
        rec = dose("ph", 7.8, 20000)
        assert rec.chemical_name == MURIATIC_ACID
        assert rec.priority == Priority.HIGH
        assert rec.amount.value == pytest.approx(0.0003 * 0.2 * 20000 * 16)
        assert "too high (7.8)" in rec.reason_text

    def test_distance_from_nearest_boundary(self):
        """Just below the band gets a small correction, not a midpoint one"""
        rec = dose("ph", 7.1, 20000)
        assert rec.amount.value == pytest.approx(0.0002 * 0.1 * 20000 * 16)

    def test_lower_ph_needs_more_soda_ash(self):
        doses = [dose("ph", v, 20000).amount.value for v in (7.1, 6.9, 6.5, 6.0)]
        assert doses == sorted(doses)
        assert len(set(doses)) == len(doses)

    def test_higher_ph_needs_more_acid(self):
        doses = [dose("ph", v, 20000).amount.value for v in (7.7, 7.9, 8.2)]
        assert doses == sorted(doses)

    @pytest.mark.parametrize("reading", [7.2, 7.4, 7.6])
    def test_in_band_returns_none(self, reading):
        assert dose("ph", reading, 20000) is None


class TestFreeChlorineFormula:

    def test_low_chlorine_cal_hypo(self):
        rec = dose("freeChlorine", 0.5, 10000)
        assert rec.chemical_name == CAL_HYPO
        assert rec.priority == Priority.HIGH
        # Deficit is measured from the 1.0 ppm lower bound
        assert rec.amount.value == pytest.approx(0.00013 * 0.5 * 10000 * 16)
        assert rec.reason_text == "Free chlorine is too low (0.5 ppm). Target: 1-3 ppm"

    def test_high_chlorine_dissipates(self):
        rec = dose("freeChlorine", 6.0, 15000)
        assert rec.chemical_name == NATURAL_DISSIPATION
        assert rec.amount == DISSIPATION_WAIT
        assert rec.priority == Priority.MEDIUM
        assert not rec.is_dosage
        assert "6 ppm" in rec.reason_text
        assert "1-3 ppm" in rec.reason_text

    def test_zero_chlorine_is_dosed(self):
        rec = dose("chlorine", 0.0, 10000)
        assert rec.chemical_name == CAL_HYPO
        assert rec.amount.value == pytest.approx(0.00013 * 1.0 * 10000 * 16)


class TestTotalAlkalinityFormula:

    def test_low_alkalinity_baking_soda(self):
        rec = dose("totalAlkalinity", 60, 10000)
        assert rec.chemical_name == BAKING_SODA
        assert rec.priority == Priority.MEDIUM
        assert rec.amount.value == pytest.approx(480)
        assert rec.amount_text == "480 oz"

    def test_high_alkalinity_muriatic_acid(self):
        rec = dose("totalAlkalinity", 140, 10000)
        assert rec.chemical_name == MURIATIC_ACID
        assert rec.priority == Priority.MEDIUM
        assert rec.amount.value == pytest.approx(640)


class TestCyanuricAcidFormula:

    def test_low_cya_stabilizer(self):
        rec = dose("cyanuricAcid", 20, 10000)
        assert rec.chemical_name == STABILIZER
        assert rec.priority == Priority.LOW
        assert rec.amount.value == pytest.approx(208)

    def test_high_cya_partial_drain(self):
        rec = dose("cyanuricAcid", 110, 15000)
        assert rec.chemical_name == PARTIAL_WATER_REPLACEMENT
        assert rec.amount == DRAIN_AND_REFILL
        assert rec.priority == Priority.HIGH
        assert "110 ppm" in rec.reason_text
        assert "30-50 ppm" in rec.reason_text

    def test_just_above_band_also_drains(self):
        """Any reading above the band gets the same instruction"""
        rec = dose("cya", 51, 15000)
        assert rec.chemical_name == PARTIAL_WATER_REPLACEMENT


class TestCalciumHardnessFormula:

    def test_low_calcium_chloride(self):
        rec = dose("calciumHardness", 120, 10000)
        assert rec.chemical_name == CALCIUM_CHLORIDE
        assert rec.priority == Priority.LOW
        assert rec.amount.value == pytest.approx(576)

    def test_high_calcium_partial_drain(self):
        rec = dose("calciumHardness", 450, 10000)
        assert rec.chemical_name == PARTIAL_WATER_REPLACEMENT
        assert rec.amount == DRAIN_AND_REFILL
        assert rec.priority == Priority.MEDIUM


class TestSaltFormula:

    def test_low_salt_in_pounds_and_bags(self):
        """0.000083 x 200 ppm x 20000 gal = 332 lb = 9 bags of 40 lb"""
        rec = dose("salt", 2500, 20000)
        assert rec.chemical_name == POOL_SALT
        assert rec.priority == Priority.MEDIUM
        assert rec.amount.unit == "lbs"
        assert rec.amount.value == pytest.approx(332)
        assert rec.amount.bag_size_lbs == 40
        assert rec.amount_text == "332 lbs (9 × 40 lb bags)"

    def test_single_bag(self):
        rec = dose("salt", 2650, 5000)
        assert rec.amount.value == pytest.approx(0.000083 * 50 * 5000)
        assert rec.amount_text.endswith("(1 × 40 lb bag)")

    def test_high_salt_dilution(self):
        rec = dose("salt", 3800, 20000)
        assert rec.chemical_name == PARTIAL_WATER_REPLACEMENT
        assert rec.amount == DRAIN_AND_REFILL_SALT
        assert rec.priority == Priority.MEDIUM


class TestDisplayRounding:
    """Work-order amounts round the exact dose, ignoring float noise"""

    def test_half_ounce_rounds_up(self):
        """1 ppm below band at 625 gal: 0.00015 x 1 x 625 x 16 = 1.5 oz"""
        rec = dose("totalAlkalinity", 79, 625)
        assert rec.amount.value == pytest.approx(1.5)
        assert rec.amount_text == "2 oz"

    def test_ounce_display_ignores_float_noise(self):
        assert DosageAmount(value=1.4999999999999998, unit="oz").display == "2 oz"
        assert DosageAmount(value=1.49, unit="oz").display == "1 oz"

    def test_round_half_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4999) == 2


class TestVolumeScaling:
    """Doses scale linearly with pool volume"""

    @pytest.mark.parametrize("parameter_id,reading", [
        ("ph", 6.9),
        ("ph", 7.9),
        ("freeChlorine", 0.5),
        ("totalAlkalinity", 60),
        ("totalAlkalinity", 140),
        ("cyanuricAcid", 20),
        ("calciumHardness", 120),
        ("salt", 2500),
    ])
    def test_doubling_volume_doubles_dose(self, parameter_id, reading):
        small = dose(parameter_id, reading, 10000)
        large = dose(parameter_id, reading, 20000)
        assert large.amount.value == pytest.approx(2 * small.amount.value)

    def test_tiny_pool_gets_positive_dose(self):
        rec = dose("ph", 7.0, 1)
        assert rec.amount.value > 0

    def test_instruction_independent_of_volume(self):
        assert dose("cya", 120, 5000).amount == dose("cya", 120, 50000).amount


class TestPoolVolumeValidation:

    @pytest.mark.parametrize("volume", [0, -5000, None, math.nan, math.inf, "20000", True])
    def test_invalid_volume_rejected(self, volume):
        with pytest.raises(InvalidPoolProfile):
            validate_pool_volume(volume)

    @pytest.mark.parametrize("volume", [0, -1, math.nan])
    def test_formula_rejects_invalid_volume(self, volume):
        """Rejected even when the reading needs no action"""
        with pytest.raises(InvalidPoolProfile):
            dose("ph", 7.4, volume)

    def test_invalid_volume_is_value_error(self):
        with pytest.raises(ValueError):
            validate_pool_volume(-1)

    def test_integer_volume_accepted(self):
        assert validate_pool_volume(15000) == 15000.0


class TestFormulaConstruction:

    def test_empty_reading_returns_none(self):
        assert dose("ph", None, 20000) is None
        assert dose("ph", math.nan, 20000) is None

    def test_unknown_parameter(self):
        with pytest.raises(UnknownParameter):
            get_formula("phosphate")

    def test_formula_must_define_both_directions(self):
        class LowOnly(BandFormula):
            parameter_id = ChemicalParameterId.PH

            def too_low(self, reading, deficit, volume):
                return None

        with pytest.raises(TypeError):
            LowOnly(get_target_range("ph"), get_default_coefficients())

    def test_band_mismatch_rejected(self):
        with pytest.raises(ValueError):
            PhFormula(get_target_range("salt"), get_default_coefficients())

    def test_build_formulas_covers_every_parameter(self):
        formulas = build_formulas()
        assert list(formulas) == list(EVALUATION_ORDER)
        for pid, formula in formulas.items():
            assert formula.parameter_id == pid

    def test_custom_coefficients(self):
        coefficients = get_default_coefficients().model_copy(update={"soda_ash": 0.0004})
        rec = get_formula("ph", coefficients=coefficients).recommend(6.9, 20000)
        assert rec.amount.value == pytest.approx(38.4)

    def test_dosage_amount_payload(self):
        rec = dose("ph", 6.9, 20000)
        payload = rec.to_payload()
        assert payload["chemical"] == SODA_ASH
        assert payload["amount"]["unit"] == "oz"
        assert payload["amount"]["display"] == "19 oz"
        assert payload["priority"] == "high"
        assert payload["parameter"] == ChemicalParameterId.PH.value
        assert isinstance(rec.amount, DosageAmount)


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
