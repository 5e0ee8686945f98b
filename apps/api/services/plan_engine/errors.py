"""
Plan engine errors.

Validation problems fail fast before any computation; placement and
recovery failures are hard failures the caller must surface.
Catalog misses are not errors (see catalog.WorkoutCatalog).
"""

from typing import List, Optional


class PlanEngineError(Exception):
    """Base class for plan engine failures."""


class PlanValidationError(PlanEngineError, ValueError):
    """
    Raised when inputs are missing or invalid.

    `fields` names every offending input so callers can point the athlete
    at what to fix.
    """

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        self.fields = list(fields or [])
        if self.fields:
            message = f"{message} (fields: {', '.join(self.fields)})"
        super().__init__(message)


class RaceDayPlacementError(PlanEngineError, RuntimeError):
    """No session in the final week could be replaced by the race."""

    def __init__(self, message: str, week_number: Optional[int] = None):
        super().__init__(message)
        self.week_number = week_number


class InjuryRecoveryError(PlanEngineError):
    """Injury recovery could not be applied or reverted."""
