"""
MCP tool implementations for pool water chemistry.

Tools are plain synchronous functions returning JSON-compatible
dictionaries; server.py wraps them as MCP tools.
"""

from tools.chemistry import (
    classify_reading,
    summarize_readings,
    calculate_chemical_recommendations,
    dosage_instruction,
)

__all__ = [
    "classify_reading",
    "summarize_readings",
    "calculate_chemical_recommendations",
    "dosage_instruction",
]
