"""
Tool: Plain-English Dosage Instruction

One-line instruction for a single out-of-range reading, shown next to the
test-kit field during a service visit. Uses the same formulas as the full
calculation, so the field hint and the calculator never disagree.

Salt is answered for any pool: asking about a salt reading implies a salt
system, even when the pool profile is not at hand.
"""

from typing import Optional
import math

from core.dosage_formulas import get_formula


def dosage_instruction(
    parameter_id: str,
    value: Optional[float],
    pool_volume_gallons: float,
) -> Optional[str]:
    """
    Return a plain-English instruction, or None when no action is needed.

    Args:
        parameter_id: Parameter id or alias (e.g. "ph", "cya")
        value: Reading; None/NaN means nothing entered yet
        pool_volume_gallons: Pool volume in US gallons

    Returns:
        None for empty or in-band readings, otherwise e.g.
        "pH is too low (6.9). Target: 7.2-7.6. Add ~19 oz of Sodium Carbonate (Soda Ash)."

    Raises:
        UnknownParameter: If the parameter id is not known
        InvalidPoolProfile: If the reading is present and the volume is not
            a positive finite number
    """
    formula = get_formula(parameter_id)
    if value is None or math.isnan(value):
        return None

    recommendation = formula.recommend(value, pool_volume_gallons)
    if recommendation is None:
        return None

    if recommendation.is_dosage:
        return (
            f"{recommendation.reason_text}. "
            f"Add ~{recommendation.amount_text} of {recommendation.chemical_name}."
        )
    return f"{recommendation.reason_text}. {recommendation.chemical_name}: {recommendation.amount_text}."
