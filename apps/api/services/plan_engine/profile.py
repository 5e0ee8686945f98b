"""
Athlete Profile

Inputs for one plan-generation request, with validation.

Usage:
    profile = AthleteProfile.from_dict(payload)
    profile.validate()   # raises PlanValidationError naming bad fields

    profile.sessions_per_week   # -> 5
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from .constants import (
    DAY_NAMES,
    Equipment,
    ExperienceLevel,
    RACE_DISTANCE_ALIASES,
    RaceDistance,
    RunningStatus,
)
from .errors import PlanValidationError

logger = logging.getLogger(__name__)


def parse_race_distance(value: Any) -> RaceDistance:
    """Normalize "half_marathon", "half", "Half" etc. to a RaceDistance."""
    if isinstance(value, RaceDistance):
        return value
    if value is None:
        raise PlanValidationError("Race distance is required", ["race_distance"])
    try:
        return RaceDistance(value)
    except ValueError:
        pass
    alias = RACE_DISTANCE_ALIASES.get(str(value).strip().lower())
    if alias is None:
        raise PlanValidationError(
            f"Unsupported race distance: {value}. Must be one of: "
            f"{', '.join(d.value for d in RaceDistance)}",
            ["race_distance"],
        )
    return alias


def parse_equipment(value: Any) -> Optional[Equipment]:
    if value is None or isinstance(value, Equipment):
        return value
    try:
        return Equipment(value)
    except ValueError:
        raise PlanValidationError(
            f"Unsupported cross-training equipment: {value}",
            ["cross_train_equipment"],
        )


@dataclass
class AthleteProfile:
    """Everything the engine needs to know about one athlete."""

    race_distance: RaceDistance
    race_date: Optional[date]
    start_date: Optional[date]
    current_weekly_volume: float
    current_long_session_distance: float
    experience_level: ExperienceLevel
    available_days: List[str]
    hard_session_days: List[str]
    long_session_day: str
    preferred_cross_train_days: List[str] = field(default_factory=list)
    cross_train_equipment: Optional[Equipment] = None
    running_status: RunningStatus = RunningStatus.ACTIVE
    total_weeks: Optional[int] = None

    # Pace inputs (optional)
    goal_time_seconds: Optional[int] = None
    recent_race_distance: Optional[RaceDistance] = None
    recent_race_time_seconds: Optional[int] = None
    estimate_fitness: bool = False

    @property
    def sessions_per_week(self) -> int:
        return len(self.available_days)

    @property
    def has_equipment(self) -> bool:
        return self.cross_train_equipment is not None

    @property
    def effective_equipment(self) -> Optional[Equipment]:
        """Bike-only athletes ride a stand-up bike unless told otherwise."""
        if self.cross_train_equipment is None and self.running_status == RunningStatus.BIKE_ONLY:
            return Equipment.STAND_UP_BIKE
        return self.cross_train_equipment

    def resolve_total_weeks(self) -> int:
        """
        Plan length: explicit total_weeks, else calendar weeks from the
        Monday of the start week through the race week.
        """
        if self.total_weeks:
            return self.total_weeks
        if self.start_date and self.race_date:
            monday = self.start_date - timedelta(days=self.start_date.weekday())
            return (self.race_date - monday).days // 7 + 1
        raise PlanValidationError(
            "Plan length requires total_weeks or both start_date and race_date",
            ["total_weeks"],
        )

    def validate(self) -> None:
        """
        Check every required field and the day-subset invariants.

        Collects all problems first so the error names every bad field.
        """
        problems: List[str] = []
        messages: List[str] = []

        def bad(name: str, message: str):
            problems.append(name)
            messages.append(message)

        if self.current_weekly_volume is None or self.current_weekly_volume <= 0:
            bad("current_weekly_volume", "current weekly volume must be positive")
        if self.current_long_session_distance is None or self.current_long_session_distance <= 0:
            bad("current_long_session_distance", "current long session must be positive")
        if not self.available_days:
            bad("available_days", "at least one available day is required")

        for name in ("available_days", "hard_session_days", "preferred_cross_train_days"):
            unknown = [d for d in getattr(self, name) or [] if d not in DAY_NAMES]
            if unknown:
                bad(name, f"{name} contains unknown weekdays: {', '.join(unknown)}")

        available = set(self.available_days or [])
        if not self.long_session_day:
            bad("long_session_day", "long session day is required")
        elif self.long_session_day not in available:
            bad("long_session_day", f"{self.long_session_day} is not an available day")

        outside = [d for d in self.hard_session_days or [] if d not in available]
        if outside:
            bad("hard_session_days", f"hard session days not available: {', '.join(outside)}")
        outside = [d for d in self.preferred_cross_train_days or [] if d not in available]
        if outside:
            bad("preferred_cross_train_days", f"cross-train days not available: {', '.join(outside)}")

        if self.recent_race_time_seconds is not None and self.recent_race_distance is None:
            bad("recent_race_distance", "recent race time given without its distance")

        if self.start_date and self.race_date and self.race_date < self.start_date:
            bad("race_date", "race date is before the plan start date")

        if problems:
            logger.warning(f"Profile validation failed: {'; '.join(messages)}")
            raise PlanValidationError(
                "Invalid athlete profile: " + "; ".join(messages),
                sorted(set(problems), key=problems.index),
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AthleteProfile":
        """
        Build a profile from a plain mapping (API payloads, fixtures).

        Missing required keys are reported together.
        """
        required = [
            "race_distance",
            "current_weekly_volume",
            "current_long_session_distance",
            "available_days",
            "long_session_day",
        ]
        missing = [k for k in required if data.get(k) in (None, "", [])]
        if missing:
            raise PlanValidationError("Missing required profile fields", missing)

        try:
            experience = ExperienceLevel(data.get("experience_level") or ExperienceLevel.INTERMEDIATE.value)
        except ValueError:
            raise PlanValidationError(
                f"Unsupported experience level: {data.get('experience_level')}",
                ["experience_level"],
            )
        try:
            status = RunningStatus(data.get("running_status") or RunningStatus.ACTIVE.value)
        except ValueError:
            raise PlanValidationError(
                f"Unsupported running status: {data.get('running_status')}",
                ["running_status"],
            )

        recent = data.get("recent_race_distance")
        return cls(
            race_distance=parse_race_distance(data["race_distance"]),
            race_date=_to_date(data.get("race_date")),
            start_date=_to_date(data.get("start_date")),
            current_weekly_volume=float(data["current_weekly_volume"]),
            current_long_session_distance=float(data["current_long_session_distance"]),
            experience_level=experience,
            available_days=list(data["available_days"]),
            hard_session_days=list(data.get("hard_session_days") or []),
            long_session_day=data["long_session_day"],
            preferred_cross_train_days=list(data.get("preferred_cross_train_days") or []),
            cross_train_equipment=parse_equipment(data.get("cross_train_equipment")),
            running_status=status,
            total_weeks=data.get("total_weeks"),
            goal_time_seconds=data.get("goal_time_seconds"),
            recent_race_distance=parse_race_distance(recent) if recent else None,
            recent_race_time_seconds=data.get("recent_race_time_seconds"),
            estimate_fitness=bool(data.get("estimate_fitness", False)),
        )


def _to_date(value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value))
