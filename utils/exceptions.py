"""
Exception hierarchy for the pool chemistry engine.

Every error the engine raises on purpose derives from PoolChemistryError so
callers (the MCP surface, a field-service form handler) can catch the whole
family in one place. The concrete classes also derive from the builtin they
specialise, so code written against ValueError/KeyError keeps working.
"""


class PoolChemistryError(Exception):
    """Base class for pool chemistry engine errors"""


class InvalidPoolProfile(PoolChemistryError, ValueError):
    """
    Pool profile cannot be dosed.

    Raised when the pool volume is absent, zero, negative or non-finite.
    Every dosage formula scales with volume, so the whole calculation is
    refused instead of returning zero or negative doses.
    """

    def __init__(self, message: str, volume_gallons=None):
        super().__init__(message)
        self.volume_gallons = volume_gallons


class UnknownParameter(PoolChemistryError, KeyError):
    """
    Parameter id is not part of the chemistry table.

    A mismatched id would otherwise be classified or dosed against the
    wrong band, so lookups fail fast.
    """

    def __init__(self, parameter_id):
        self.parameter_id = parameter_id
        super().__init__(parameter_id)

    def __str__(self) -> str:
        return f"Unknown chemical parameter: {self.parameter_id!r}"
