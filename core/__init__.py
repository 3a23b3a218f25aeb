"""
Core contracts for the pool chemistry MCP server.

This package provides the foundational pieces shared by every tool:
- Standardized request/response schemas (pydantic models)
- Plugin contracts (dosage formulas, calculation storage)

Engine modules (range_table, range_classifier, dosage_formulas,
recommendation_engine, calculation_record) are imported from their own
modules so that the data loaders can depend on the schemas alone.
"""

from .schemas import (
    ChemicalParameterId,
    PoolType,
    Priority,
    RangeStatus,
    TargetRange,
    PoolProfile,
    TestReading,
    DosageAmount,
    ChemicalRecommendation,
    CalculationRecord,
)
from .interfaces import DosageFormula, CalculationStore

__all__ = [
    "ChemicalParameterId",
    "PoolType",
    "Priority",
    "RangeStatus",
    "TargetRange",
    "PoolProfile",
    "TestReading",
    "DosageAmount",
    "ChemicalRecommendation",
    "CalculationRecord",
    "DosageFormula",
    "CalculationStore",
]
