"""
Pool Chemistry MCP Server

FastMCP server exposing the pool water chemistry engine to field-service
apps and AI agents.

Tools:
- pool_classify_reading: live in/out/unknown status of one reading
- pool_recommend_chemicals: prioritized dosage list for a whole pool
- pool_dosage_instruction: one-line hint for one out-of-range reading
- pool_get_target_ranges: the target band table
- pool_get_server_info: server and tool metadata

All tools are pure calculations (<1 ms). Persistence of calculation
history is left to the caller.

Usage:
    python server.py
"""

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
import anyio
import logging
from typing import Dict, Optional

from core.range_table import EVALUATION_ORDER, list_target_ranges
from core.schemas import ChemicalParameterId, PoolType
from tools.chemistry.classify_reading import classify_reading
from tools.chemistry.dosage_instruction import dosage_instruction
from tools.chemistry.recommend_chemicals import calculate_chemical_recommendations
from utils.dosage_coefficients_db import get_default_coefficients

# Pydantic imports for input validation
from pydantic import BaseModel, Field, ConfigDict, field_validator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

SERVER_VERSION = "1.0.0"
SUPPORTED_PARAMETERS = [p.value for p in EVALUATION_ORDER]
SUPPORTED_POOL_TYPES = [t.value for t in PoolType]


def _validate_parameter(v: str) -> str:
    # Raises UnknownParameter (a KeyError) for unknown ids; pydantic only
    # converts ValueError, so re-raise as one for a clean validation message.
    try:
        return ChemicalParameterId.parse(v).value
    except KeyError:
        raise ValueError(
            f"Parameter '{v}' not supported. Options: {SUPPORTED_PARAMETERS}"
        ) from None


# ============================================================================
# Pydantic Input Models
# ============================================================================

class ClassifyReadingInput(BaseModel):
    """Input for live single-reading classification."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    parameter_id: str = Field(
        ...,
        description=f"Parameter id or alias. Options: {', '.join(SUPPORTED_PARAMETERS)} "
                    f"(aliases: chlorine, alkalinity, cya, calcium)",
        min_length=1,
        max_length=50
    )
    value: Optional[float] = Field(
        default=None,
        description="Reading (pH units or ppm). Omit when the field is still empty."
    )

    @field_validator('parameter_id')
    @classmethod
    def validate_parameter(cls, v: str) -> str:
        return _validate_parameter(v)


class RecommendChemicalsInput(BaseModel):
    """Input for a whole-pool chemical recommendation."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    volume_gallons: float = Field(
        ...,
        description="Pool volume in US gallons",
        gt=0.0,
        strict=True  # reject true/false instead of reading them as 1/0 gallons
    )
    pool_type: str = Field(
        default="chlorine",
        description=f"Pool sanitation system. Options: {', '.join(SUPPORTED_POOL_TYPES)}"
    )
    client_id: Optional[str] = Field(
        default=None,
        description="Optional client reference, echoed back in the result"
    )
    readings: Dict[str, Optional[float]] = Field(
        ...,
        description="Test readings keyed by parameter id or alias; null = not measured. "
                    "Example: {\"ph\": 6.9, \"chlorine\": 0.5}"
    )

    @field_validator('pool_type')
    @classmethod
    def validate_pool_type(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in SUPPORTED_POOL_TYPES:
            raise ValueError(f"Pool type '{v}' not supported. Options: {SUPPORTED_POOL_TYPES}")
        return v_lower

    @field_validator('readings')
    @classmethod
    def validate_readings(cls, v: Dict[str, Optional[float]]) -> Dict[str, Optional[float]]:
        for key in v:
            _validate_parameter(key)
        return v


class DosageInstructionInput(BaseModel):
    """Input for a one-line dosage hint."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    parameter_id: str = Field(
        ...,
        description=f"Parameter id or alias. Options: {', '.join(SUPPORTED_PARAMETERS)}",
        min_length=1,
        max_length=50
    )
    value: Optional[float] = Field(
        default=None,
        description="Reading (pH units or ppm)"
    )
    volume_gallons: float = Field(
        ...,
        description="Pool volume in US gallons",
        gt=0.0,
        strict=True
    )

    @field_validator('parameter_id')
    @classmethod
    def validate_parameter(cls, v: str) -> str:
        return _validate_parameter(v)


# ============================================================================
# Initialize MCP Server
# ============================================================================

mcp = FastMCP("Pool Chemistry")


@mcp.tool(
    name="pool_classify_reading",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
    )
)
async def classify(params: ClassifyReadingInput) -> dict:
    """
    Classify one water-test reading as in, out of, or unknown against its band.

    Used for instant colour feedback while readings are typed in. Does not
    need the pool profile.

    Args:
        params (ClassifyReadingInput): Validated input parameters containing:
            - parameter_id (str): Parameter id or alias (e.g. "ph", "chlorine")
            - value (Optional[float]): Reading, omitted when empty

    Returns:
        Dictionary with status ("in", "out", "unknown"), target band and a
        short interpretation.

    Example:
        result = await classify(ClassifyReadingInput(parameter_id="ph", value=7.8))
        print(result["status"])  # "out"
    """
    return classify_reading(params.parameter_id, params.value)


@mcp.tool(
    name="pool_recommend_chemicals",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
    )
)
async def recommend_chemicals(params: RecommendChemicalsInput) -> dict:
    """
    Calculate prioritized chemical recommendations for a pool.

    Parameters are evaluated in fixed order (pH, free chlorine, total
    alkalinity, cyanuric acid, calcium hardness, salt for salt pools) and
    the output keeps that order. When everything is in range the result
    is the single "No chemicals needed" record.

    Args:
        params (RecommendChemicalsInput): Validated input parameters containing:
            - volume_gallons (float): Pool volume in US gallons
            - pool_type (str): chlorine, salt, mineral or natural
            - client_id (Optional[str]): Client reference
            - readings (Dict[str, Optional[float]]): Readings by parameter

    Returns:
        Dictionary with the recommendation list, the echoed test results
        and a per-parameter classification summary.

    Example:
        result = await recommend_chemicals(RecommendChemicalsInput(
            volume_gallons=20000,
            readings={"ph": 6.9}
        ))
        print(result["recommendations"][0]["chemical"])  # "Sodium Carbonate (Soda Ash)"
    """
    logger.info(
        f"Recommending chemicals for {params.volume_gallons:g} gal {params.pool_type} pool "
        f"({len(params.readings)} readings)"
    )

    # Wrap sync call to prevent blocking event loop
    result = await anyio.to_thread.run_sync(
        lambda: calculate_chemical_recommendations(
            readings=params.readings,
            volume_gallons=params.volume_gallons,
            pool_type=params.pool_type,
            client_id=params.client_id,
        )
    )

    logger.info(f"Recommendations: {result['recommendation_count']} (balanced={result['balanced']})")
    return result


@mcp.tool(
    name="pool_dosage_instruction",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
    )
)
async def get_dosage_instruction(params: DosageInstructionInput) -> dict:
    """
    Get a plain-English dosage hint for one reading.

    Args:
        params (DosageInstructionInput): Validated input parameters containing:
            - parameter_id (str): Parameter id or alias
            - value (Optional[float]): Reading
            - volume_gallons (float): Pool volume in US gallons

    Returns:
        {"parameter": str, "value": float | None, "instruction": str | None}
        where instruction is None when no action is needed.

    Example:
        result = await get_dosage_instruction(DosageInstructionInput(
            parameter_id="ph", value=6.9, volume_gallons=20000
        ))
        print(result["instruction"])
        # "pH is too low (6.9). Target: 7.2-7.6. Add ~19 oz of Sodium Carbonate (Soda Ash)."
    """
    instruction = dosage_instruction(params.parameter_id, params.value, params.volume_gallons)
    return {
        "parameter": params.parameter_id,
        "value": params.value,
        "instruction": instruction,
    }


@mcp.tool(
    name="pool_get_target_ranges",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,
    )
)
async def get_target_ranges() -> dict:
    """
    Get the target band table used by classification and dosing.

    Returns:
        {"ranges": [{"parameter", "label", "unit", "min", "max", "step"}, ...]}
        in evaluation order.
    """
    return {"ranges": [r.to_payload() for r in list_target_ranges()]}


# ============================================================================
# Server Information
# ============================================================================

@mcp.tool(
    name="pool_get_server_info",
    annotations=ToolAnnotations(
        readOnlyHint=True,
        openWorldHint=False,  # Returns static server info
    )
)
async def get_server_info() -> dict:
    """
    Get pool chemistry MCP server information.

    Returns:
        Dictionary with server version, supported parameters and pool types,
        dosing coefficients and the tool registry.
    """
    tool_registry = [
        {
            "name": "pool_classify_reading",
            "description": "Live in/out/unknown classification of one reading",
        },
        {
            "name": "pool_recommend_chemicals",
            "description": "Prioritized chemical recommendations for a pool",
        },
        {
            "name": "pool_dosage_instruction",
            "description": "Plain-English dosage hint for one reading",
        },
        {
            "name": "pool_get_target_ranges",
            "description": "Target band table",
        },
        {
            "name": "pool_get_server_info",
            "description": "Server information",
        },
    ]

    return {
        "server_name": "Pool Chemistry MCP Server",
        "version": SERVER_VERSION,
        "supported_parameters": SUPPORTED_PARAMETERS,
        "supported_pool_types": SUPPORTED_POOL_TYPES,
        "dosing_coefficients": get_default_coefficients().model_dump(),
        "tool_count": len(tool_registry),
        "tool_registry": tool_registry,
    }


# ============================================================================
# Run Server
# ============================================================================

if __name__ == "__main__":
    logger.info("=" * 70)
    logger.info("Pool Chemistry MCP Server")
    logger.info("=" * 70)
    logger.info("Implemented Tools:")
    logger.info("  pool_classify_reading - Live reading classification")
    logger.info("  pool_recommend_chemicals - Chemical recommendations")
    logger.info("  pool_dosage_instruction - One-line dosage hint")
    logger.info("  pool_get_target_ranges - Target band table")
    logger.info("  pool_get_server_info - Server information")
    logger.info("=" * 70)
    logger.info(f"Parameters: {', '.join(SUPPORTED_PARAMETERS)}")
    logger.info("=" * 70)

    # Run the server
    mcp.run()
