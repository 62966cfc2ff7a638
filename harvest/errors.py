"""
Exception taxonomy for the telemetry pipeline.

Validation failures are reported to the caller; persistence and prediction
failures are isolated and logged; anything else surfaces as an InternalError
without leaving a partially stored reading behind.

CHANGELOG:
- 2026-10-18: Initial creation
"""


class HarvestError(Exception):
    """Base class for all harvest service errors."""


class ReadingValidationError(HarvestError):
    """Raised when a raw reading is malformed or out of range.

    Attributes:
        violations: Every violated constraint, in check order.
    """

    def __init__(self, violations: list[str]):
        self.violations = list(violations)
        super().__init__("; ".join(self.violations) or "invalid reading")


class PersistenceError(HarvestError):
    """Raised when the persistence store is unavailable or a write fails."""


class PredictionError(HarvestError):
    """Raised when a prediction cannot be computed."""


class InternalError(HarvestError):
    """Raised for unexpected faults while processing a reading."""
