"""
Utility modules for pool chemistry calculations.

- exceptions.py - PoolChemistryError hierarchy
- units.py - Ounce/pound conversion, bag counts, number formatting
- dosage_coefficients_db.py - YAML-backed dosing coefficients
"""
