"""
Validation dataset registry and regression framework.

This module provides:
- Reference service-visit scenarios with expected recommendations
- Automated regression runs against any recommend() implementation
- Pass-rate reporting
"""

from .reference_scenarios import ReferenceScenario, ReferenceScenarioValidation
from .run_validation import run_all_validations, ValidationReport, export_validation_report

__all__ = [
    "ReferenceScenario",
    "ReferenceScenarioValidation",
    "run_all_validations",
    "ValidationReport",
    "export_validation_report",
]
