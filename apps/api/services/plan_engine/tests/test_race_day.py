"""
Race Day Tests

The race replaces one session of the final week: the long session,
else the long-session day, else the longest session.
"""

import random
from datetime import date

import pytest

from services.plan_engine import (
    ByDay,
    ByLongestDistance,
    DayPlan,
    DayRole,
    PlanGenerator,
    RaceDayPlacementError,
    RaceDayTransformer,
    RaceDistance,
    PhaseName,
    WeekPlan,
    WorkoutType,
)
from services.plan_engine.constants import DAY_NAMES
from services.plan_engine.race_day import format_race_date

RACE_DATE = date(2026, 5, 3)  # Sunday


def week_of(sessions, week_number=4):
    """WeekPlan from {day: (role, workout_type, distance)}; other days rest."""
    days = []
    for name in DAY_NAMES:
        if name in sessions:
            role, workout_type, distance = sessions[name]
            days.append(DayPlan(day=name, role=role, workout_type=workout_type, distance=distance))
        else:
            days.append(DayPlan(day=name, role=DayRole.REST))
    return WeekPlan(week_number=week_number, phase=PhaseName.TAPER, total_volume=20, days=days)


class TestRaceDayScenario:
    """Half marathon, 12 weeks, race date set."""

    @pytest.fixture
    def plan(self, make_profile):
        profile = make_profile(
            race_distance="Half",
            current_weekly_volume=20,
            total_weeks=12,
            race_date=RACE_DATE,
            goal_time_seconds=2 * 3600,
        )
        return PlanGenerator().generate(profile, rng=random.Random(11))

    def test_final_long_session_becomes_race(self, plan):
        sunday = plan.weeks[-1].get_day("Sunday")

        assert plan.race_day_applied
        assert sunday.role == DayRole.RACE
        assert sunday.workout_type == WorkoutType.RACE
        assert sunday.distance == 13.1
        assert sunday.workout_name == "Half Marathon Race Day"
        assert sunday.date == RACE_DATE
        assert sunday.original_workout_type == WorkoutType.LONG

    def test_race_notes(self, plan):
        sunday = plan.weeks[-1].get_day("Sunday")

        assert "Race Date: Sunday, May 3, 2026" in sunday.notes
        assert any(n.startswith("Race Strategy") for n in sunday.notes)
        assert "Race week" in plan.weeks[-1].notes

    def test_race_pace_from_goal(self, plan):
        sunday = plan.weeks[-1].get_day("Sunday")
        assert sunday.pace == plan.paces.goal.describe("race")

    def test_only_final_week_changes(self, plan):
        races = [(w.week_number, d.day) for w in plan.weeks for d in w.days if d.role == DayRole.RACE]
        assert races == [(12, "Sunday")]


class TestMatchers:

    def test_by_role_first(self):
        week = week_of({
            "Tuesday": (DayRole.HARD_SESSION, WorkoutType.TEMPO, 8.0),
            "Saturday": (DayRole.LONG_SESSION, WorkoutType.LONG, 6.0),
        })
        updated = RaceDayTransformer().apply([week], RaceDistance.TEN_K, long_session_day="Sunday")

        assert updated[0].get_day("Saturday").role == DayRole.RACE
        assert updated[0].get_day("Saturday").distance == 6.2

    def test_falls_back_to_long_session_day(self):
        week = week_of({
            "Tuesday": (DayRole.CROSS_TRAIN_HARD, WorkoutType.TEMPO, None),
            "Sunday": (DayRole.CROSS_TRAIN_HARD, WorkoutType.LONG, None),
        })
        updated = RaceDayTransformer().apply([week], "5K", long_session_day="Sunday")

        assert updated[0].get_day("Sunday").role == DayRole.RACE

    def test_falls_back_to_longest_session(self):
        week = week_of({
            "Monday": (DayRole.EASY_SESSION, WorkoutType.EASY, 4.0),
            "Wednesday": (DayRole.EASY_SESSION, WorkoutType.EASY, 6.0),
            "Thursday": (DayRole.EASY_SESSION, WorkoutType.EASY, 6.0),
        })
        updated = RaceDayTransformer().apply([week], "Marathon")

        race = [d.day for d in updated[0].days if d.role == DayRole.RACE]
        assert race == ["Wednesday"]
        assert updated[0].get_day("Wednesday").original_distance == 6.0

    def test_custom_matchers(self):
        week = week_of({"Friday": (DayRole.EASY_SESSION, WorkoutType.EASY, 3.0)})
        assert ByDay("Friday").find(week) == 4
        assert ByLongestDistance().find(week) == 4
        assert ByDay(None).find(week) is None

    def test_race_date_weekday_wins(self):
        """A Saturday race takes Saturday; the Sunday long session becomes rest."""
        week = week_of({
            "Saturday": (DayRole.EASY_SESSION, WorkoutType.EASY, 3.0),
            "Sunday": (DayRole.LONG_SESSION, WorkoutType.LONG, 8.0),
        })
        updated = RaceDayTransformer().apply(
            [week], "Half", race_date=date(2026, 5, 2), long_session_day="Sunday"
        )
        saturday = updated[0].get_day("Saturday")
        sunday = updated[0].get_day("Sunday")

        assert saturday.role == DayRole.RACE
        assert saturday.date == date(2026, 5, 2)
        assert saturday.original_workout_type == WorkoutType.EASY
        assert sunday.role == DayRole.REST
        assert sunday.original_workout_type == WorkoutType.LONG
        assert sunday.original_distance == 8.0
        assert sunday.notes == ["Race on Saturday replaces this session"]

    def test_no_session_raises(self):
        week = week_of({}, week_number=9)
        with pytest.raises(RaceDayPlacementError) as exc:
            RaceDayTransformer().apply([week], "Half")
        assert exc.value.week_number == 9

    def test_empty_plan_raises(self):
        with pytest.raises(RaceDayPlacementError):
            RaceDayTransformer().apply([], "Half")

    def test_input_weeks_unchanged(self):
        week = week_of({"Sunday": (DayRole.LONG_SESSION, WorkoutType.LONG, 10.0)})
        RaceDayTransformer().apply([week], "Half", race_date=RACE_DATE)

        assert week.get_day("Sunday").role == DayRole.LONG_SESSION
        assert week.notes == []

    def test_format_race_date(self):
        assert format_race_date(RACE_DATE) == "Sunday, May 3, 2026"


class TestSaturdayRace:
    """Sunday start, Saturday race, Sunday long sessions."""

    RACE = date(2026, 1, 31)

    @pytest.fixture
    def plan(self, make_profile):
        profile = make_profile(
            race_distance="Half",
            total_weeks=None,
            start_date=date(2026, 1, 4),
            race_date=self.RACE,
        )
        return PlanGenerator().generate(profile, rng=random.Random(6))

    def test_race_lands_on_race_date(self, plan):
        final = plan.weeks[-1]
        races = [(d.day, d.date) for d in final.days if d.role == DayRole.RACE]

        assert races == [("Saturday", self.RACE)]
        assert final.get_day("Sunday").role == DayRole.REST
        assert final.get_day("Sunday").original_workout_type == WorkoutType.LONG

    def test_day_names_match_dates(self, plan):
        for week in plan.weeks:
            days = week.calendar_days()
            dates = [d.date for d in days]
            assert len(dates) == len(set(dates)), f"Week {week.week_number} repeats a date"
            for day in days:
                assert day.day == f"{day.date:%A}"
