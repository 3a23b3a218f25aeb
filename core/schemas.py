"""
Pydantic models for pool chemistry requests and results.

All engine results are plain models that serialise to JSON-compatible
payloads (``to_payload``), so the calculation output can be handed to any
storage or display collaborator without leaking engine types.

Design Philosophy:
- Typed inputs replace ad-hoc form objects; unknown parameter ids fail fast
- Results are immutable and built fresh per calculation
- Quantities keep the exact computed value; rounding happens only on display
"""

import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator

from utils.exceptions import UnknownParameter
from utils.units import POUNDS, bags_needed, format_number, round_half_up


# ============================================================================
# Enumerations
# ============================================================================

class ChemicalParameterId(str, Enum):
    """Water-test parameters tracked by the engine"""
    PH = "ph"
    FREE_CHLORINE = "freeChlorine"
    TOTAL_ALKALINITY = "totalAlkalinity"
    CYANURIC_ACID = "cyanuricAcid"
    CALCIUM_HARDNESS = "calciumHardness"
    SALT = "salt"

    @classmethod
    def parse(cls, value: Any) -> "ChemicalParameterId":
        """
        Resolve a parameter id, accepting the short names used on test forms.

        Matching ignores case, underscores, hyphens and spaces, so
        ``"free_chlorine"``, ``"FreeChlorine"`` and ``"chlorine"`` all map
        to FREE_CHLORINE.

        Raises:
            UnknownParameter: If the id matches no parameter
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise UnknownParameter(value)
        key = value.strip().lower().replace("_", "").replace("-", "").replace(" ", "")
        try:
            return _PARAMETER_ALIASES[key]
        except KeyError:
            raise UnknownParameter(value) from None


_PARAMETER_ALIASES: Dict[str, ChemicalParameterId] = {
    "ph": ChemicalParameterId.PH,
    "freechlorine": ChemicalParameterId.FREE_CHLORINE,
    "chlorine": ChemicalParameterId.FREE_CHLORINE,
    "fc": ChemicalParameterId.FREE_CHLORINE,
    "totalalkalinity": ChemicalParameterId.TOTAL_ALKALINITY,
    "alkalinity": ChemicalParameterId.TOTAL_ALKALINITY,
    "ta": ChemicalParameterId.TOTAL_ALKALINITY,
    "cyanuricacid": ChemicalParameterId.CYANURIC_ACID,
    "cya": ChemicalParameterId.CYANURIC_ACID,
    "calciumhardness": ChemicalParameterId.CALCIUM_HARDNESS,
    "calcium": ChemicalParameterId.CALCIUM_HARDNESS,
    "ch": ChemicalParameterId.CALCIUM_HARDNESS,
    "salt": ChemicalParameterId.SALT,
}


class PoolType(str, Enum):
    """Sanitation system of the pool"""
    CHLORINE = "chlorine"
    SALT = "salt"
    MINERAL = "mineral"
    NATURAL = "natural"


class Priority(str, Enum):
    """Urgency of a recommendation"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RangeStatus(str, Enum):
    """Live classification of a single reading"""
    IN = "in"            # Within the inclusive target band
    OUT = "out"          # Present but outside the band
    UNKNOWN = "unknown"  # No reading entered yet (never rendered as an alarm)


# ============================================================================
# Target Ranges
# ============================================================================

class TargetRange(BaseModel):
    """Inclusive target band for one chemical parameter"""
    model_config = ConfigDict(frozen=True)

    parameter_id: ChemicalParameterId
    label: str = Field(..., description="Display label (e.g., 'Free Chlorine')")
    unit: str = Field("", description="Reading unit ('ppm', or '' for pH)")
    min: float = Field(..., description="Lower bound, inclusive")
    max: float = Field(..., description="Upper bound, inclusive")
    step: float = Field(..., description="Input step used by entry forms", gt=0)

    @model_validator(mode="after")
    def min_below_max(self) -> "TargetRange":
        if not self.min < self.max:
            raise ValueError(
                f"{self.parameter_id.value}: min ({self.min}) must be below max ({self.max})"
            )
        return self

    def contains(self, value: float) -> bool:
        """True when ``value`` lies inside the band, bounds included"""
        return self.min <= value <= self.max

    def describe(self) -> str:
        """Band as shown in reason text, e.g. '7.2-7.6' or '1-3 ppm'"""
        band = f"{format_number(self.min)}-{format_number(self.max)}"
        return f"{band} {self.unit}" if self.unit else band

    def format_reading(self, value: float) -> str:
        """Reading with its unit, e.g. '6.9' or '110 ppm'"""
        text = format_number(value)
        return f"{text} {self.unit}" if self.unit else text

    def to_payload(self) -> Dict[str, Any]:
        return {
            "parameter": self.parameter_id.value,
            "label": self.label,
            "unit": self.unit,
            "min": self.min,
            "max": self.max,
            "step": self.step,
        }


# ============================================================================
# Inputs
# ============================================================================

class PoolProfile(BaseModel):
    """
    Physical profile of the pool being serviced.

    ``volume_gallons`` may be absent so a profile can be built from a
    partially filled form; the recommendation engine refuses to dose until
    it is a positive finite number. Booleans are kept as booleans rather
    than coerced to 0/1 gallons, so the engine rejects them too.
    """
    model_config = ConfigDict(frozen=True)

    volume_gallons: Optional[Union[StrictBool, float]] = Field(None, description="Pool volume (US gallons)")
    pool_type: PoolType = Field(PoolType.CHLORINE, description="Sanitation system")
    client_id: Optional[str] = Field(None, description="Opaque client reference")


class TestReading(BaseModel):
    """One water-test value; ``None`` means the parameter was not measured"""
    model_config = ConfigDict(frozen=True)

    __test__ = False  # keep pytest from collecting this model

    parameter_id: ChemicalParameterId
    value: Optional[float] = None

    @field_validator("parameter_id", mode="before")
    @classmethod
    def resolve_parameter(cls, v):
        return ChemicalParameterId.parse(v)

    @field_validator("value")
    @classmethod
    def nan_is_absent(cls, v):
        if v is not None and math.isnan(v):
            return None
        return v


# ============================================================================
# Results
# ============================================================================

class DosageAmount(BaseModel):
    """
    Quantity of product to add.

    ``value`` is the exact computed dose. ``display`` renders what goes on
    the work order: whole ounces, or whole pounds with the 40 lb bag count.
    """
    model_config = ConfigDict(frozen=True)

    value: float = Field(..., description="Computed dose in ``unit``")
    unit: Literal["oz", "lbs"]
    bag_size_lbs: Optional[float] = Field(None, description="Retail bag size for pound doses", gt=0)

    @property
    def display(self) -> str:
        if self.unit == POUNDS:
            # Drop float noise (e.g. 332.00000000000006) before rounding
            lbs = int(math.ceil(round(self.value, 6)))
            if self.bag_size_lbs is None:
                return f"{lbs} lbs"
            bags = bags_needed(lbs, self.bag_size_lbs)
            plural = "s" if bags > 1 else ""
            return f"{lbs} lbs ({bags} × {format_number(self.bag_size_lbs)} lb bag{plural})"
        return f"{round_half_up(round(self.value, 6))} {self.unit}"

    def __str__(self) -> str:
        return self.display

    def to_payload(self) -> Dict[str, Any]:
        return {"value": self.value, "unit": self.unit, "display": self.display}


class ChemicalRecommendation(BaseModel):
    """
    One action for the technician.

    ``amount`` is a DosageAmount for chemical additions, or a plain
    instruction ("Wait 24-48 hours", "Drain and refill 25-50% of pool")
    when no chemical fixes the condition.
    """
    model_config = ConfigDict(frozen=True)

    chemical_name: str
    amount: Union[DosageAmount, str]
    reason_text: str
    priority: Priority
    parameter_id: Optional[ChemicalParameterId] = Field(
        None, description="Parameter that triggered the action (None for the balanced record)"
    )

    @property
    def is_dosage(self) -> bool:
        """True when the recommendation carries a numeric chemical quantity"""
        return isinstance(self.amount, DosageAmount)

    @property
    def amount_text(self) -> str:
        return str(self.amount)

    def to_payload(self) -> Dict[str, Any]:
        amount = self.amount.to_payload() if isinstance(self.amount, DosageAmount) else self.amount
        return {
            "chemical": self.chemical_name,
            "amount": amount,
            "reason": self.reason_text,
            "priority": self.priority.value,
            "parameter": self.parameter_id.value if self.parameter_id else None,
        }


class CalculationRecord(BaseModel):
    """
    Inputs and output of one calculation, ready for an external store.

    The timestamp is supplied by the caller; the engine never reads a clock.
    """
    model_config = ConfigDict(frozen=True)

    pool_profile: PoolProfile
    readings: List[TestReading]
    recommendations: List[ChemicalRecommendation]
    timestamp: datetime
    technician_id: Optional[str] = None

    def test_results(self) -> Dict[str, Optional[float]]:
        """Readings as a plain ``{parameter: value}`` map"""
        return {r.parameter_id.value: r.value for r in self.readings}

    def to_payload(self) -> Dict[str, Any]:
        """
        Storage-agnostic payload.

        Returns:
            {
                "poolVolume": float | None,
                "poolType": str,
                "clientId": str | None,
                "technicianId": str | None,
                "testResults": {parameter: value},
                "chemicalRecommendations": [recommendation payloads],
                "timestamp": ISO-8601 string,
            }
        """
        return {
            "poolVolume": self.pool_profile.volume_gallons,
            "poolType": self.pool_profile.pool_type.value,
            "clientId": self.pool_profile.client_id,
            "technicianId": self.technician_id,
            "testResults": self.test_results(),
            "chemicalRecommendations": [r.to_payload() for r in self.recommendations],
            "timestamp": self.timestamp.isoformat(),
        }
