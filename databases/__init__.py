"""Database configurations for pool chemistry tools.

This package contains YAML configuration files for:
- dosage_coefficients.yaml: Empirical per-gallon dosing coefficients
"""
