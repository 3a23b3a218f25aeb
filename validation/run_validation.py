"""
Automated validation runner and reporting.

Executes the reference scenarios and generates a report.
"""

from typing import Dict, Any, List, Callable, Optional
from dataclasses import dataclass
import json
import logging
from datetime import datetime

from .reference_scenarios import ReferenceScenarioValidation


@dataclass
class ValidationReport:
    """
    Validation report across all datasets.

    Attributes:
        timestamp: When validation was run
        datasets: List of dataset names validated
        overall_pass_rate: Aggregate pass rate across all datasets
        details: Per-dataset validation results
        summary: Text summary of validation
    """
    timestamp: datetime
    datasets: List[str]
    overall_pass_rate: float
    details: Dict[str, Any]
    summary: str


def run_all_validations(recommend_function: Optional[Callable] = None) -> ValidationReport:
    """
    Run all validation datasets.

    Args:
        recommend_function: recommend(profile, readings) callable to validate
            (defaults to core.recommendation_engine.recommend)

    Returns:
        ValidationReport with results from all datasets

    Example:
        report = run_all_validations()
        print(f"Overall pass rate: {report.overall_pass_rate:.1%}")
        print(report.summary)
    """
    logger = logging.getLogger(__name__)
    logger.info("Starting validation...")

    if recommend_function is None:
        from core.recommendation_engine import recommend
        recommend_function = recommend

    results = {
        "ReferenceScenarios": ReferenceScenarioValidation().validate_model(recommend_function),
    }

    total_cases = sum(r.get("total_cases", 0) for r in results.values())
    total_passed = sum(r.get("passed", 0) for r in results.values())
    overall_pass_rate = total_passed / total_cases if total_cases > 0 else 0.0

    report = ValidationReport(
        timestamp=datetime.now(),
        datasets=list(results.keys()),
        overall_pass_rate=overall_pass_rate,
        details=results,
        summary=_generate_summary(results, overall_pass_rate),
    )

    logger.info(f"Validation complete. Overall pass rate: {overall_pass_rate:.1%}")

    return report


def _generate_summary(results: Dict[str, Any], overall_pass_rate: float) -> str:
    """Generate human-readable validation summary"""
    lines = [
        "=" * 70,
        "POOL CHEMISTRY VALIDATION REPORT",
        "=" * 70,
        "",
        f"Overall Pass Rate: {overall_pass_rate:.1%}",
        "",
        "Dataset Results:",
        "-" * 70,
    ]

    for dataset, result in results.items():
        lines.append(f"\n{dataset}:")
        lines.append(f"  Total Cases: {result.get('total_cases', 0)}")
        lines.append(f"  Passed: {result.get('passed', 0)}")
        lines.append(f"  Failed: {result.get('failed', 0)}")
        lines.append(f"  Pass Rate: {result.get('pass_rate', 0):.1%}")
        for case in result.get("details", []):
            if not case["passed"]:
                lines.append(f"  ✗ {case['case_id']}: {'; '.join(case['problems'])}")

    lines.extend([
        "",
        "=" * 70,
    ])

    if overall_pass_rate == 1.0:
        lines.append("✓ All reference scenarios reproduce the expected recommendations")
    else:
        lines.append("✗ Reference scenarios changed - review formula or band edits")

    lines.append("=" * 70)

    return "\n".join(lines)


def export_validation_report(report: ValidationReport, filepath: str):
    """Export validation report to JSON file"""
    data = {
        "timestamp": report.timestamp.isoformat(),
        "datasets": report.datasets,
        "overall_pass_rate": report.overall_pass_rate,
        "details": report.details,
        "summary": report.summary,
    }

    with open(filepath, 'w') as f:
        json.dump(data, f, indent=2)

    logging.getLogger(__name__).info(f"Validation report exported to {filepath}")
