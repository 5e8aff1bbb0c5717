"""Exceptions raised around the calculation engine.

The engine itself never raises for bad rule configuration; these cover the
collaborators that feed it (storage, configuration, batch jobs).
"""


class CalculationError(RuntimeError):
    """Base error for calculation and reconciliation failures."""


class ReferenceDataError(CalculationError):
    """Raised when professionals, procedures, rules or settings cannot be loaded."""


class OwnerNotConfiguredError(CalculationError):
    """Raised when no owner professional id is configured."""


class MissingReferenceError(CalculationError):
    """Raised when an appointment points at an unknown professional, procedure or payment method."""
