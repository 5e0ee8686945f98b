"""
Race Day Transformer

Replaces one session of the final week with the race itself.

The session is located by an ordered list of matchers; the first that
finds a day wins:
1. ByRole            - the week's long session
2. ByDay             - the athlete's long session day
3. ByLongestDistance - the non-rest day with the most distance

If none matches, RaceDayPlacementError is raised. When a race date names
another weekday of the final week, the race goes on that day and the
located session becomes rest.

Usage:
    transformer = RaceDayTransformer()
    weeks = transformer.apply(weeks, RaceDistance.HALF_MARATHON, race_date=date(2026, 5, 3),
                              long_session_day="Sunday")
    weeks[-1].get_day("Sunday").role   # -> DayRole.RACE
"""

import copy
import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence

from .constants import (
    DAY_NAMES,
    DayRole,
    RACE_DAY_ADVICE,
    RACE_DISPLAY_NAMES,
    RACE_DISTANCE_MILES,
    RaceDistance,
    WorkoutType,
)
from .errors import RaceDayPlacementError
from .pace_engine import PaceSet
from .profile import parse_race_distance
from .week_builder import DayPlan, WeekPlan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ByRole:
    role: DayRole = DayRole.LONG_SESSION

    def find(self, week: WeekPlan) -> Optional[int]:
        for index, plan in enumerate(week.days):
            if plan.role == self.role:
                return index
        return None


@dataclass(frozen=True)
class ByDay:
    day: Optional[str]

    def find(self, week: WeekPlan) -> Optional[int]:
        if not self.day:
            return None
        for index, plan in enumerate(week.days):
            if plan.day == self.day:
                return index
        return None


@dataclass(frozen=True)
class ByLongestDistance:

    def find(self, week: WeekPlan) -> Optional[int]:
        sessions = [(i, d) for i, d in enumerate(week.days) if not d.is_rest]
        if not sessions:
            return None
        # First of equal distances wins
        index, _ = max(sessions, key=lambda pair: (pair[1].effective_distance, -pair[0]))
        return index


def default_matchers(long_session_day: Optional[str]) -> List[object]:
    return [ByRole(), ByDay(long_session_day), ByLongestDistance()]


def format_race_date(race_date: date) -> str:
    return f"{race_date:%A, %B} {race_date.day}, {race_date.year}"


def build_race_day(
    day: DayPlan,
    race_distance: RaceDistance,
    race_date: Optional[date] = None,
    paces: Optional[PaceSet] = None,
) -> DayPlan:
    """Race session that takes over a day of the final week."""
    name = RACE_DISPLAY_NAMES[race_distance]
    notes = list(RACE_DAY_ADVICE[race_distance])
    if race_date:
        notes.append(f"Race Date: {format_race_date(race_date)}")

    return DayPlan(
        day=day.day,
        role=DayRole.RACE,
        workout_type=WorkoutType.RACE,
        distance=RACE_DISTANCE_MILES[race_distance],
        workout_ref=f"race:{race_distance.value}",
        workout_name=f"{name} Race Day",
        structure=f"Warmup as rehearsed + {name} ({RACE_DISTANCE_MILES[race_distance]} mi) at goal pace",
        focus="Race day",
        pace=paces.describe(WorkoutType.RACE.value) if paces else None,
        date=day.date or race_date,
        notes=notes,
        original_workout_type=day.workout_type,
        original_distance=day.effective_distance or None,
    )


def rest_for_race(day: DayPlan, race_day_name: str) -> DayPlan:
    """Rest in place of the session the race stands in for."""
    return DayPlan(
        day=day.day,
        role=DayRole.REST,
        focus="Recovery",
        date=day.date,
        notes=[f"Race on {race_day_name} replaces this session"],
        original_workout_type=day.workout_type,
        original_distance=day.effective_distance or None,
    )


class RaceDayTransformer:
    """
    Substitute the race into the final week. Input weeks are left untouched.
    """

    def __init__(self, matchers: Optional[Sequence[object]] = None):
        self.matchers = list(matchers) if matchers is not None else None

    def apply(
        self,
        weeks: List[WeekPlan],
        race_distance,
        race_date: Optional[date] = None,
        long_session_day: Optional[str] = None,
        paces: Optional[PaceSet] = None,
    ) -> List[WeekPlan]:
        """
        Return a new week list whose final week contains the race.

        Raises:
            RaceDayPlacementError: no matcher located a session to replace
        """
        distance = parse_race_distance(race_distance)
        if not weeks:
            logger.error("Race day requested for an empty plan")
            raise RaceDayPlacementError("Plan has no weeks to place the race in")

        updated = copy.deepcopy(weeks)
        final = updated[-1]
        matchers = self.matchers if self.matchers is not None else default_matchers(long_session_day)

        for matcher in matchers:
            index = matcher.find(final)
            if index is not None:
                break
        else:
            logger.error(f"No session in week {final.week_number} can become race day")
            raise RaceDayPlacementError(
                f"Could not place race day in week {final.week_number}: no long session, "
                f"long session day, or non-rest day found",
                week_number=final.week_number,
            )

        replaced = final.days[index]
        race_index = self._race_date_index(final, race_date)
        if race_index is None:
            race_index = index
        elif race_index != index:
            # The race stands in for the located session, which becomes rest
            race_day_name = final.days[race_index].day
            final.days[index] = rest_for_race(replaced, race_day_name)
            logger.info(
                f"Race date falls on {race_day_name}; {replaced.day} session of week "
                f"{final.week_number} becomes rest"
            )

        final.days[race_index] = build_race_day(final.days[race_index], distance, race_date, paces)
        if "Race week" not in final.notes:
            final.notes.append("Race week")

        logger.info(
            f"Race day ({distance.value}) placed on {final.days[race_index].day} of week "
            f"{final.week_number} via {type(matcher).__name__}"
        )
        return updated

    @staticmethod
    def _race_date_index(week: WeekPlan, race_date: Optional[date]) -> Optional[int]:
        """Index of the weekday named by race_date, when the week can hold that date."""
        if not race_date:
            return None
        name = DAY_NAMES[race_date.weekday()]
        for index, plan in enumerate(week.days):
            if plan.day == name and plan.date in (None, race_date):
                return index
        logger.warning(
            f"Race date {race_date.isoformat()} is outside week {week.week_number}; "
            f"keeping the located session's date"
        )
        return None
