"""
Pace Engine

Training paces from race performances (Daniels/Gilbert oxygen-cost
formulas) and week-by-week progression from current fitness toward
goal pace.

Usage:
    calculator = PaceCalculator()
    goal = calculator.from_race(RaceDistance.MARATHON, time_seconds=4 * 3600)
    current = calculator.from_race(RaceDistance.HALF_MARATHON, time_seconds=2 * 3600 + 300)

    blender = PaceBlender()
    progression = blender.build_progression(current, goal, total_weeks=16)
    progression.weeks[0].progression_ratio   # -> 0.0625
    progression.weeks[-1].paces.threshold    # -> goal threshold pace
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import (
    LONG_SESSION_VDOT_TABLE,
    PACE_ZONE_INTENSITY,
    RACE_DISTANCE_METERS,
    RaceDistance,
    TRACK_SPLITS_METERS,
    WEEKLY_VOLUME_VDOT_TABLE,
)
from .errors import PlanValidationError

logger = logging.getLogger(__name__)

METERS_PER_MILE = 1609.34


class PaceMode(str, Enum):
    """How weekly paces were derived."""
    PROGRESSIVE = "progressive"      # Blended from measured current fitness to goal
    ESTIMATED = "estimated"          # Blended from a training-volume estimate to goal
    GOAL_ONLY = "goal_only"          # No current fitness: goal paces every week
    CURRENT_ONLY = "current_only"    # No goal time: current paces every week
    UNAVAILABLE = "unavailable"      # No pace inputs at all


DEGRADED_MODES = {PaceMode.GOAL_ONLY, PaceMode.CURRENT_ONLY, PaceMode.UNAVAILABLE}


@dataclass
class PaceSet:
    """Training paces in seconds per mile."""
    easy_low: int    # Faster end of easy range
    easy_high: int   # Slower end of easy range
    marathon: int
    threshold: int
    interval: int
    repetition: int
    # {"threshold": {"800m": 245, ...}, "interval": {"400m": 110, ...}} in seconds
    track_intervals: Dict[str, Dict[str, int]] = field(default_factory=dict)
    vdot: Optional[float] = None

    ZONES = ("easy_low", "easy_high", "marathon", "threshold", "interval", "repetition")

    def describe(self, workout_type: str) -> str:
        """
        Pace + effort context for a workout type (e.g. "9:30-10:00/mi (conversational)").
        """
        if workout_type in ("easy", "recovery"):
            return f"{format_pace(self.easy_low)}-{format_pace(self.easy_high)}/mi (conversational, relaxed)"
        elif workout_type == "long":
            return f"{format_pace(self.easy_low)}-{format_pace(self.easy_high)}/mi (easy, sustainable)"
        elif workout_type == "race":
            return f"{format_pace(self.marathon)}/mi (goal race pace)"
        elif workout_type == "tempo":
            return f"{format_pace(self.threshold)}/mi (comfortably hard)"
        elif workout_type == "intervals":
            return f"{format_pace(self.interval)}/mi (hard effort)"
        elif workout_type == "hills":
            # Effort-based
            return "strong effort uphill, controlled descent"
        return "conversational pace"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vdot": self.vdot,
            "easy": {"min": format_pace(self.easy_low), "max": format_pace(self.easy_high)},
            "marathon": format_pace(self.marathon),
            "threshold": format_pace(self.threshold),
            "interval": format_pace(self.interval),
            "repetition": format_pace(self.repetition),
            "seconds_per_mile": {zone: getattr(self, zone) for zone in self.ZONES},
            "track_intervals": {
                zone: {split: format_pace(secs) for split, secs in splits.items()}
                for zone, splits in self.track_intervals.items()
            },
        }


@dataclass
class BlendedPaces:
    """Paces for one week plus how far along the progression it is."""
    week_number: int
    progression_ratio: float
    paces: PaceSet

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_number": self.week_number,
            "progression_ratio": round(self.progression_ratio, 4),
            "paces": self.paces.to_dict(),
        }


@dataclass
class PaceProgression:
    """Pace plan for a whole training block."""
    mode: PaceMode
    current: Optional[PaceSet]
    goal: Optional[PaceSet]
    weeks: List[BlendedPaces]

    @property
    def degraded(self) -> bool:
        return self.mode in DEGRADED_MODES

    def for_week(self, week_number: int) -> Optional[PaceSet]:
        if not self.weeks:
            return None
        return self.weeks[min(week_number, len(self.weeks)) - 1].paces

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "degraded": self.degraded,
            "current": self.current.to_dict() if self.current else None,
            "goal": self.goal.to_dict() if self.goal else None,
            "weekly": [w.to_dict() for w in self.weeks],
        }


def format_pace(seconds_per_mile: int) -> str:
    """Format pace as m:ss."""
    minutes = int(seconds_per_mile) // 60
    seconds = int(seconds_per_mile) % 60
    return f"{minutes}:{seconds:02d}"


class PaceCalculator:
    """
    Calculate training paces from race performances.
    Uses the Daniels/Gilbert oxygen cost and drop-dead equations.
    """

    def calculate_vdot(self, distance_meters: float, time_seconds: int) -> float:
        """VDOT (effective VO2max) from a race result."""
        if distance_meters <= 0 or time_seconds <= 0:
            raise PlanValidationError("Race distance and time must be positive", ["race_time_seconds"])

        time_minutes = time_seconds / 60.0
        velocity = distance_meters / time_minutes  # meters per minute

        # VO2 = -4.6 + 0.182258*v + 0.000104*v^2
        vo2 = -4.6 + 0.182258 * velocity + 0.000104 * velocity * velocity
        # %VO2max = 0.8 + 0.1894393*e^(-0.012778*t) + 0.2989558*e^(-0.1932605*t)
        pct_max = (
            0.8
            + 0.1894393 * math.exp(-0.012778 * time_minutes)
            + 0.2989558 * math.exp(-0.1932605 * time_minutes)
        )
        return round(vo2 / pct_max, 1)

    def paces_from_vdot(self, vdot: float) -> PaceSet:
        """Zone paces at fixed fractions of VDOT."""
        def pace_at(intensity: float) -> int:
            velocity = _vo2_to_velocity(vdot * intensity)
            return int(round(METERS_PER_MILE / velocity * 60))

        threshold = pace_at(PACE_ZONE_INTENSITY["threshold"])
        interval = pace_at(PACE_ZONE_INTENSITY["interval"])

        track = {
            "threshold": {
                f"{m}m": int(round(threshold * m / METERS_PER_MILE))
                for m in TRACK_SPLITS_METERS["threshold"]
            },
            "interval": {
                f"{m}m": int(round(interval * m / METERS_PER_MILE))
                for m in TRACK_SPLITS_METERS["interval"]
            },
        }

        return PaceSet(
            easy_low=pace_at(PACE_ZONE_INTENSITY["easy_fast"]),
            easy_high=pace_at(PACE_ZONE_INTENSITY["easy_slow"]),
            marathon=pace_at(PACE_ZONE_INTENSITY["marathon"]),
            threshold=threshold,
            interval=interval,
            repetition=pace_at(PACE_ZONE_INTENSITY["repetition"]),
            track_intervals=track,
            vdot=vdot,
        )

    def from_race(self, race_distance: RaceDistance, time_seconds: int) -> PaceSet:
        """
        Calculate training paces from a race time.

        Args:
            race_distance: Distance of the (goal or recent) race
            time_seconds: Race time in seconds

        Returns:
            PaceSet with all zones
        """
        vdot = self.calculate_vdot(RACE_DISTANCE_METERS[race_distance], time_seconds)
        logger.debug(f"VDOT {vdot} from {race_distance.value} in {time_seconds}s")
        return self.paces_from_vdot(vdot)

    @staticmethod
    def estimate_vdot_from_training(long_session: float, weekly_volume: float) -> int:
        """
        Conservative VDOT estimate when no race result exists.

        Long session is the primary signal; weekly volume nudges it.
        """
        if not long_session or long_session <= 0:
            vdot = next(v for minimum, v in WEEKLY_VOLUME_VDOT_TABLE if weekly_volume >= minimum)
        else:
            vdot = next(v for minimum, v in LONG_SESSION_VDOT_TABLE if long_session >= minimum)
            if weekly_volume >= 50:
                vdot += 2
            elif weekly_volume < 20:
                vdot -= 2
        return max(25, min(55, vdot))

    def from_training(self, long_session: float, weekly_volume: float) -> PaceSet:
        vdot = self.estimate_vdot_from_training(long_session, weekly_volume)
        logger.info(f"Estimated current VDOT {vdot} from training volume")
        return self.paces_from_vdot(vdot)


def _vo2_to_velocity(target_vo2: float) -> float:
    """Reverse-solve the oxygen cost equation (quadratic) for m/min."""
    a = 0.000104
    b = 0.182258
    c = -(4.6 + target_vo2)
    return (-b + math.sqrt(b * b - 4 * a * c)) / (2 * a)


class PaceBlender:
    """
    Interpolate weekly paces between current fitness and goal.

    Prevents prescribing goal pace in week 1 when the athlete is slower.
    """

    @staticmethod
    def progression_ratio(week_number: int, total_weeks: int) -> float:
        return min(1.0, week_number / total_weeks)

    def blend(
        self,
        current: PaceSet,
        goal: PaceSet,
        week_number: int,
        total_weeks: int,
    ) -> BlendedPaces:
        """blended = current + ratio * (goal - current), per zone and track split."""
        ratio = self.progression_ratio(week_number, total_weeks)

        def mix(c: float, g: float) -> int:
            return int(round(c + ratio * (g - c)))

        values = {zone: mix(getattr(current, zone), getattr(goal, zone)) for zone in PaceSet.ZONES}

        track: Dict[str, Dict[str, int]] = {}
        for zone, splits in goal.track_intervals.items():
            current_splits = current.track_intervals.get(zone, {})
            track[zone] = {
                split: mix(current_splits.get(split, secs), secs)
                for split, secs in splits.items()
            }

        vdot = None
        if current.vdot is not None and goal.vdot is not None:
            vdot = round(current.vdot + ratio * (goal.vdot - current.vdot), 1)

        return BlendedPaces(
            week_number=week_number,
            progression_ratio=ratio,
            paces=PaceSet(track_intervals=track, vdot=vdot, **values),
        )

    def build_progression(
        self,
        current: Optional[PaceSet],
        goal: Optional[PaceSet],
        total_weeks: int,
        estimated: bool = False,
    ) -> PaceProgression:
        """
        Paces for every week of the plan.

        Missing inputs degrade explicitly: the mode says which pace set was
        used statically so consumers can warn the athlete.
        """
        if current and goal:
            mode = PaceMode.ESTIMATED if estimated else PaceMode.PROGRESSIVE
            weeks = [self.blend(current, goal, w, total_weeks) for w in range(1, total_weeks + 1)]
        elif goal:
            mode = PaceMode.GOAL_ONLY
            logger.warning("No current-fitness paces: using goal paces for every week")
            weeks = [
                BlendedPaces(w, self.progression_ratio(w, total_weeks), goal)
                for w in range(1, total_weeks + 1)
            ]
        elif current:
            mode = PaceMode.CURRENT_ONLY
            logger.warning("No goal time: using current-fitness paces for every week")
            weeks = [
                BlendedPaces(w, self.progression_ratio(w, total_weeks), current)
                for w in range(1, total_weeks + 1)
            ]
        else:
            mode = PaceMode.UNAVAILABLE
            logger.warning("No pace inputs: plan will use effort descriptions only")
            weeks = []

        return PaceProgression(mode=mode, current=current, goal=goal, weeks=weeks)
