"""
Periodization Calculator

Computes the week-by-week volume and long-session targets for a plan:
- Peak weekly volume and long-session maximum from race parameters,
  the sessions-per-week band, and experience level
- Linear build from current volume to peak, with recovery weeks
- A two-week taper into race day

Usage:
    calculator = PeriodizationCalculator()
    targets = calculator.calculate(
        current_weekly_volume=25,
        current_long_session_distance=6,
        total_weeks=19,
        race_distance=RaceDistance.MARATHON,
        experience_level=ExperienceLevel.INTERMEDIATE,
        sessions_per_week=6,
    )
    targets.peak_weekly_volume   # -> 51
    targets.weeks[0].weekly_volume   # -> 25
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import ConfigService
from .constants import (
    ExperienceLevel,
    GROWTH_RATE_LIMITS,
    LONG_SESSION_MAX_RATIO,
    RaceDistance,
)
from .errors import PlanValidationError
from .profile import parse_race_distance

logger = logging.getLogger(__name__)


@dataclass
class WeekTarget:
    """Volume targets for one plan week."""
    week_number: int
    weekly_volume: float
    long_session_distance: float
    is_recovery_week: bool
    is_taper_week: bool = False
    # Quality-session distances for this week's volume (tempo/intervals/hills)
    quality_distances: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_number": self.week_number,
            "weekly_volume": self.weekly_volume,
            "long_session_distance": self.long_session_distance,
            "is_recovery_week": self.is_recovery_week,
            "is_taper_week": self.is_taper_week,
            "quality_distances": dict(self.quality_distances),
        }


@dataclass
class PeriodizationTargets:
    """Plan-level targets plus the per-week sequence."""
    race_distance: RaceDistance
    experience_level: ExperienceLevel
    total_weeks: int
    sessions_per_week: int
    growth_rate: float
    base_peak_volume: float       # Before experience scaling
    base_long_session_max: float
    peak_weekly_volume: float
    long_session_max: float
    long_session_floor: float
    floor_applied: bool
    weeks: List[WeekTarget]

    def get_week(self, week_number: int) -> WeekTarget:
        return self.weeks[week_number - 1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "race_distance": self.race_distance.value,
            "experience_level": self.experience_level.value,
            "total_weeks": self.total_weeks,
            "sessions_per_week": self.sessions_per_week,
            "growth_rate": round(self.growth_rate, 4),
            "base_peak_volume": self.base_peak_volume,
            "base_long_session_max": self.base_long_session_max,
            "peak_weekly_volume": self.peak_weekly_volume,
            "long_session_max": self.long_session_max,
            "long_session_floor": self.long_session_floor,
            "floor_applied": self.floor_applied,
            "weeks": [w.to_dict() for w in self.weeks],
        }


class PeriodizationCalculator:
    """
    Deterministic volume math for the whole plan.

    Same inputs always produce the same WeekTarget sequence.
    """

    def calculate(
        self,
        current_weekly_volume: Optional[float],
        current_long_session_distance: Optional[float],
        total_weeks: Optional[int],
        race_distance: Any,
        experience_level: Optional[ExperienceLevel] = ExperienceLevel.INTERMEDIATE,
        sessions_per_week: Optional[int] = None,
    ) -> PeriodizationTargets:
        """
        Compute targets for every week, 1..total_weeks.

        Args:
            current_weekly_volume: Week 1 volume (miles)
            current_long_session_distance: Current long session (miles)
            total_weeks: Plan length
            race_distance: RaceDistance or an accepted alias ("half_marathon")
            experience_level: Scales peak volume and long session
            sessions_per_week: Selects the peak band; defaults to the
                middle band for the distance

        Returns:
            PeriodizationTargets
        """
        missing = [
            name for name, value in (
                ("current_weekly_volume", current_weekly_volume),
                ("current_long_session_distance", current_long_session_distance),
                ("total_weeks", total_weeks),
                ("race_distance", race_distance),
                ("experience_level", experience_level),
            ) if value is None
        ]
        if missing:
            raise PlanValidationError("Missing periodization inputs", missing)

        distance = parse_race_distance(race_distance)
        try:
            experience_level = ExperienceLevel(experience_level)
        except ValueError:
            raise PlanValidationError(
                f"Unsupported experience level: {experience_level}", ["experience_level"]
            )

        invalid = []
        if current_weekly_volume <= 0:
            invalid.append("current_weekly_volume")
        if current_long_session_distance <= 0:
            invalid.append("current_long_session_distance")
        if total_weeks < 1:
            invalid.append("total_weeks")
        if invalid:
            raise PlanValidationError("Periodization inputs must be positive", invalid)

        params = ConfigService.get_race_params(distance)
        bands = ConfigService.get_session_bands(distance)
        if sessions_per_week is None:
            sessions_per_week = sorted(bands)[len(bands) // 2]
        if sessions_per_week not in bands:
            raise PlanValidationError(
                f"{sessions_per_week} sessions per week not supported for {distance.value} "
                f"(supported: {', '.join(str(n) for n in sorted(bands))})",
                ["available_days"],
            )
        band_peak, band_long = bands[sessions_per_week]

        volume_factors, long_factors = ConfigService.get_taper_factors()
        # Week 1 always starts from current volume, so it is never a taper week
        taper_weeks = min(len(volume_factors), total_weeks - 1)
        build_weeks = total_weeks - taper_weeks

        growth_rate = self._growth_rate(total_weeks)
        growth_weeks = (build_weeks // 3) * 2
        projected = round(current_weekly_volume * (1 + growth_rate) ** growth_weeks)
        base_peak = min(projected, band_peak, params["peak_volume_cap"])

        base_long = self._long_session_max(
            current_long_session_distance, build_weeks, base_peak, band_long, params, distance
        )

        multipliers = ConfigService.get_experience_multipliers(experience_level)
        peak_volume = round(base_peak * multipliers["volume"])
        scaled_long = round(base_long * multipliers["long_session"])

        floor = params["long_session_floor"]
        long_max = max(scaled_long, floor)
        floor_applied = scaled_long < floor
        if floor_applied:
            logger.info(
                f"Long session floor applied: {scaled_long} raised to {floor} "
                f"({distance.value} minimum)"
            )

        # Never regress an athlete already above the computed peak
        if current_weekly_volume > peak_volume:
            logger.info(
                f"Current volume {current_weekly_volume} exceeds peak {peak_volume}; holding volume"
            )
            peak_volume = current_weekly_volume
        long_max = max(long_max, current_long_session_distance)

        support = ConfigService.get_min_support_session()
        if build_weeks > 1 and long_max > peak_volume - (sessions_per_week - 1) * support:
            logger.warning(
                f"{distance.value}: long session {long_max} does not fit a peak week of "
                f"{peak_volume} over {sessions_per_week} sessions",
                extra={
                    "extra_fields": {
                        "race_distance": distance.value,
                        "long_session_max": long_max,
                        "peak_weekly_volume": peak_volume,
                        "sessions_per_week": sessions_per_week,
                    }
                },
            )
            raise PlanValidationError(
                f"A {distance.value} plan needs a {long_max:g} mile long session, but peak "
                f"volume only reaches {peak_volume:g} over {sessions_per_week} sessions; "
                f"increase current weekly volume or plan length",
                ["current_weekly_volume"],
            )

        weeks = self._build_weeks(
            total_weeks=total_weeks,
            build_weeks=build_weeks,
            sessions_per_week=sessions_per_week,
            start_volume=current_weekly_volume,
            start_long=current_long_session_distance,
            peak_volume=peak_volume,
            long_max=long_max,
            min_support=support,
            volume_factors=volume_factors,
            long_factors=long_factors,
            params=params,
        )

        logger.info(
            f"{distance.value} targets: {current_weekly_volume} -> {peak_volume} per week, "
            f"long session {current_long_session_distance} -> {long_max} "
            f"({total_weeks} weeks, {experience_level.value})"
        )

        return PeriodizationTargets(
            race_distance=distance,
            experience_level=experience_level,
            total_weeks=total_weeks,
            sessions_per_week=sessions_per_week,
            growth_rate=growth_rate,
            base_peak_volume=base_peak,
            base_long_session_max=base_long,
            peak_weekly_volume=peak_volume,
            long_session_max=long_max,
            long_session_floor=floor,
            floor_applied=floor_applied,
            weeks=weeks,
        )

    def _build_weeks(
        self,
        total_weeks: int,
        build_weeks: int,
        sessions_per_week: int,
        start_volume: float,
        start_long: float,
        peak_volume: float,
        long_max: float,
        min_support: float,
        volume_factors: List[float],
        long_factors: List[float],
        params: Dict[str, Any],
    ) -> List[WeekTarget]:
        recovery = ConfigService.get_recovery_rules()
        weeks = []

        for week in range(1, total_weeks + 1):
            is_recovery = False
            is_taper = week > build_weeks

            if week == 1:
                volume = start_volume
                long_session = start_long
            elif is_taper:
                # Factors are aligned so the race week takes the last one
                index = len(volume_factors) - 1 - (total_weeks - week)
                volume = round(peak_volume * volume_factors[index], 1)
                long_session = round(long_max * long_factors[index], 1)
            else:
                progress = (week - 1) / (build_weeks - 1)
                volume = start_volume + (peak_volume - start_volume) * progress
                long_session = start_long + (long_max - start_long) * progress

                is_recovery = (
                    week % recovery["frequency"] == 0
                    and total_weeks - week > recovery["race_buffer"]
                )
                if is_recovery:
                    volume *= recovery["reduction"]
                    long_session *= recovery["reduction"]

                volume = round(volume, 1)
                long_session = round(long_session, 1)

            # The week carrying the long-session maximum may pass the ratio so the
            # race floor holds, as long as every other session keeps its minimum
            if week == build_weeks and week > 1:
                ceiling = volume - (sessions_per_week - 1) * min_support
            else:
                ceiling = volume * LONG_SESSION_MAX_RATIO
            long_session = min(long_session, _round_down(ceiling))

            weeks.append(WeekTarget(
                week_number=week,
                weekly_volume=volume,
                long_session_distance=long_session,
                is_recovery_week=is_recovery,
                is_taper_week=is_taper,
                quality_distances=self._quality_distances(volume, params),
            ))
            logger.debug(
                f"Week {week}: volume={volume} long={long_session} "
                f"recovery={is_recovery} taper={is_taper}"
            )

        return weeks

    @staticmethod
    def _growth_rate(total_weeks: int) -> float:
        """Adaptive weekly growth: 10% for short plans down to 4% for long ones."""
        high = GROWTH_RATE_LIMITS["max"]
        low = GROWTH_RATE_LIMITS["min"]
        short = GROWTH_RATE_LIMITS["short_plan_weeks"]
        long = GROWTH_RATE_LIMITS["long_plan_weeks"]

        if total_weeks <= short:
            return high
        if total_weeks >= long:
            return low
        position = (total_weeks - short) / (long - short)
        return high - position * (high - low)

    @staticmethod
    def _long_session_max(
        current_long: float,
        build_weeks: int,
        base_peak: float,
        band_long: float,
        params: Dict[str, Any],
        distance: RaceDistance,
    ) -> float:
        """
        Longest session the build can safely reach before experience scaling.

        Growth is 0.5 mi/week, raised toward the distance's target (up to the
        aggressive rate) when the athlete is far from it.
        """
        growth = params["long_session_growth"]
        rate = growth["safe"]
        if growth.get("target"):
            required = max(0, growth["target"] - current_long) / build_weeks
            rate = min(max(growth["safe"], required), growth["aggressive"])
            if required > growth["aggressive"]:
                logger.warning(
                    f"{distance.value}: required long-session growth {required:.2f}/week "
                    f"exceeds safe maximum; plan may be too short for current fitness"
                )

        theoretical = current_long + build_weeks * rate
        long_max = min(
            round(theoretical),
            band_long,
            params["long_session_cap"],
            round(base_peak * params["long_session_share"]),
        )

        if long_max < params["minimum_long_session_target"]:
            logger.warning(
                f"{distance.value}: long session only reaches {long_max}, "
                f"typically needs {params['minimum_long_session_target']}+"
            )
        return long_max

    @staticmethod
    def _quality_distances(volume: float, params: Dict[str, Any]) -> Dict[str, float]:
        distances = {}
        for workout_type, share in params["workout_shares"].items():
            low, high = params["workout_bounds"][workout_type]
            distances[workout_type] = round(min(max(volume * share, low), high))
        return distances


def _round_down(value: float) -> float:
    """Round down to one decimal so a rounded cap never exceeds the exact one."""
    return math.floor(value * 10 + 1e-9) / 10
