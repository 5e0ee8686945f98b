"""
Weekly Schedule Assembler Tests

Day roles come from an ordered decision table; every week has exactly
seven days, Monday first, with distances split around the long session.
"""

from datetime import date, timedelta

import pytest

from services.plan_engine import (
    DayRole,
    Equipment,
    PhaseName,
    PlanPhase,
    VarietyHistory,
    WeekPlan,
    WeeklyScheduleAssembler,
    WeekTarget,
    WorkoutType,
    WorkoutVarietySelector,
    decide_day_role,
)
from services.plan_engine.constants import DAY_NAMES
from services.plan_engine.pace_engine import PaceCalculator
from services.plan_engine.week_builder import running_fraction

BASE = PlanPhase(PhaseName.BASE, 1, 8, "Aerobic foundation")
BUILD = PlanPhase(PhaseName.BUILD, 9, 14, "Strength and threshold")


def target(week_number=1, volume=30.0, long_session=10.0, recovery=False, taper=False):
    return WeekTarget(
        week_number=week_number,
        weekly_volume=volume,
        long_session_distance=long_session,
        is_recovery_week=recovery,
        is_taper_week=taper,
    )


@pytest.fixture
def assembler(catalog):
    return WeeklyScheduleAssembler(catalog)


@pytest.fixture
def selector(catalog, rng):
    return WorkoutVarietySelector(catalog, VarietyHistory(), rng)


def roles(week):
    return {d.day: d.role for d in week.days}


class TestDecisionTable:
    """One test per rule, first match wins."""

    def test_unavailable_day_is_rest(self, make_profile):
        assert decide_day_role("Friday", make_profile()) == DayRole.REST

    def test_long_session_day(self, make_profile):
        assert decide_day_role("Sunday", make_profile()) == DayRole.LONG_SESSION

    def test_long_day_without_running(self, make_profile):
        with_pool = make_profile(running_status="crossTrainingOnly", cross_train_equipment="pool")
        without = make_profile(running_status="crossTrainingOnly")

        assert decide_day_role("Sunday", with_pool) == DayRole.CROSS_TRAIN_HARD
        assert decide_day_role("Sunday", without) == DayRole.REST

    def test_hard_preferred_cross_day_with_equipment(self, make_profile):
        profile = make_profile(
            preferred_cross_train_days=["Tuesday", "Wednesday"],
            cross_train_equipment="elliptical",
        )
        assert decide_day_role("Tuesday", profile) == DayRole.CROSS_TRAIN_HARD

    def test_hard_day(self, make_profile):
        assert decide_day_role("Tuesday", make_profile()) == DayRole.HARD_SESSION
        no_running = make_profile(running_status="crossTrainingOnly", cross_train_equipment="rowing")
        assert decide_day_role("Tuesday", no_running) == DayRole.CROSS_TRAIN_HARD

    def test_preferred_cross_day_needs_equipment(self, make_profile):
        with_equipment = make_profile(
            preferred_cross_train_days=["Wednesday"], cross_train_equipment="elliptical"
        )
        without = make_profile(preferred_cross_train_days=["Wednesday"])

        assert decide_day_role("Wednesday", with_equipment) == DayRole.CROSS_TRAIN_EASY
        assert decide_day_role("Wednesday", without) == DayRole.EASY_SESSION

    def test_other_available_day(self, make_profile):
        assert decide_day_role("Monday", make_profile()) == DayRole.EASY_SESSION
        bike = make_profile(running_status="bikeOnly")
        assert decide_day_role("Monday", bike) == DayRole.CROSS_TRAIN_EASY

    def test_bike_only_defaults_to_stand_up_bike(self, make_profile):
        profile = make_profile(running_status="bikeOnly")
        assert profile.effective_equipment == Equipment.STAND_UP_BIKE
        assert decide_day_role("Sunday", profile) == DayRole.CROSS_TRAIN_HARD


class TestWeekStructure:

    def test_seven_days_monday_first(self, assembler, make_profile, selector):
        week = assembler.build_week(make_profile(), target(), BASE, 16, selector=selector)

        assert [d.day for d in week.days] == DAY_NAMES
        assert week.rest_days == 1
        assert week.get_day("Friday").is_rest
        assert week.get_day("Friday").workout_name == "Rest Day"

    def test_hard_rotation_by_phase(self, assembler, make_profile, selector):
        week = assembler.build_week(make_profile(), target(), BASE, 16, selector=selector)

        assert week.get_day("Tuesday").workout_type == WorkoutType.TEMPO
        assert week.get_day("Thursday").workout_type == WorkoutType.HILLS
        assert week.get_day("Sunday").workout_type == WorkoutType.LONG

    def test_easy_rotation_slot_demotes_hard_day(self, assembler, make_profile, selector):
        """Base week 3 puts an easy week on the first hard day."""
        week = assembler.build_week(make_profile(), target(week_number=3), BASE, 16, selector=selector)

        assert week.get_day("Tuesday").role == DayRole.EASY_SESSION
        assert week.get_day("Tuesday").workout_type == WorkoutType.EASY
        assert week.get_day("Thursday").workout_type == WorkoutType.TEMPO

    def test_every_session_has_a_workout(self, assembler, make_profile, selector):
        week = assembler.build_week(make_profile(), target(), BASE, 16, selector=selector)

        for day in week.days:
            if day.is_rest:
                continue
            assert day.workout_name, f"{day.day} has no workout"
            assert day.workout_ref
            assert not day.is_placeholder, f"{day.day} fell back to a placeholder"


class TestDistances:

    def test_long_session_and_overheads(self, assembler, make_profile, selector):
        """(30 - 10) / 5 other sessions = 4.0 base, scaled by workout overhead."""
        week = assembler.build_week(make_profile(), target(), BASE, 16, selector=selector)

        assert week.get_day("Sunday").distance == 10.0
        assert week.get_day("Monday").distance == pytest.approx(4.0)
        assert week.get_day("Tuesday").distance == pytest.approx(5.6)   # tempo x1.4
        assert week.get_day("Thursday").distance == pytest.approx(4.8)  # hills x1.2
        assert week.running_volume == pytest.approx(32.4)
        assert week.run_eq_volume == 0

    def test_long_session_falls_back_to_share(self, assembler, make_profile, selector):
        week = assembler.build_week(
            make_profile(), target(long_session=None), BASE, 16, selector=selector
        )
        # Six sessions a week: 30% of volume
        assert week.get_day("Sunday").distance == 9

    def test_low_frequency_share(self, assembler, make_profile, selector):
        profile = make_profile(
            race_distance="10K",
            available_days=["Tuesday", "Thursday", "Saturday", "Sunday"],
        )
        week = assembler.build_week(profile, target(long_session=None), BASE, 10, selector=selector)
        # Four sessions a week: 35% of volume
        assert week.get_day("Sunday").distance == round(30 * 0.35)


class TestCrossTraining:

    def test_cross_training_only_week(self, assembler, make_profile, selector):
        profile = make_profile(running_status="crossTrainingOnly", cross_train_equipment="pool")
        week = assembler.build_week(profile, target(), BASE, 16, selector=selector)

        sessions = [d for d in week.days if not d.is_rest]
        assert all(d.is_cross_training for d in sessions)
        for day in sessions:
            assert day.distance is None
            assert day.equipment == Equipment.POOL
            assert day.duration_minutes == int(round(day.run_eq_distance * 10))
        assert week.get_day("Sunday").workout_type == WorkoutType.LONG
        assert week.get_day("Sunday").run_eq_distance == 10.0
        assert week.running_volume == 0
        assert week.run_eq_volume > 0

    def test_cross_training_overhead(self, assembler, make_profile, selector):
        profile = make_profile(running_status="crossTrainingOnly", cross_train_equipment="pool")
        week = assembler.build_week(profile, target(), BASE, 16, selector=selector)

        assert week.get_day("Tuesday").run_eq_distance == pytest.approx(3.2)

    def test_bike_only_ride_distance(self, assembler, make_profile, selector):
        profile = make_profile(running_status="bikeOnly")
        week = assembler.build_week(profile, target(), BASE, 16, selector=selector)

        sunday = week.get_day("Sunday")
        assert sunday.equipment == Equipment.STAND_UP_BIKE
        assert sunday.ride_distance == pytest.approx(sunday.run_eq_distance * 2)
        assert week.get_day("Tuesday").workout_type == WorkoutType.TEMPO
        assert week.get_day("Thursday").workout_type == WorkoutType.INTERVALS

    @pytest.mark.parametrize("week_number", [1, 2])
    def test_transition_starts_with_cross_training(self, assembler, make_profile, selector, week_number):
        profile = make_profile(running_status="transitioning", cross_train_equipment="elliptical")
        week = assembler.build_week(profile, target(week_number=week_number), BUILD, 16, selector=selector)

        assert not any(d.is_running for d in week.days)
        assert any("Return from cross-training" in note for note in week.notes)

    def test_transition_halfway(self, assembler, make_profile, selector):
        """Week 5: half the sessions run, quality and long first."""
        profile = make_profile(running_status="transitioning", cross_train_equipment="elliptical")
        week = assembler.build_week(profile, target(week_number=5), BUILD, 16, selector=selector)

        running = {d.day for d in week.days if d.is_running}
        assert running == {"Tuesday", "Thursday", "Sunday"}
        assert week.get_day("Monday").role == DayRole.CROSS_TRAIN_EASY

    def test_running_fraction_schedule(self):
        assert [running_fraction(w) for w in (1, 2, 3, 5, 7, 12)] == [0.0, 0.0, 0.25, 0.5, 0.75, 0.75]


class TestCalendar:

    def test_partial_first_week(self, assembler, make_profile, selector):
        start = date(2026, 3, 4)  # Wednesday
        profile = make_profile(start_date=start)
        week = assembler.build_week(profile, target(), BASE, 16, selector=selector)

        assert len(week.days) == 7
        assert week.days[0].date == date(2026, 3, 2)
        assert week.start_date == start
        assert week.end_date == date(2026, 3, 8)
        assert week.is_partial
        assert [d.day for d in week.calendar_days()] == ["Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

    def test_days_before_start_flagged(self, assembler, make_profile, selector):
        profile = make_profile(start_date=date(2026, 3, 4))
        week = assembler.build_week(profile, target(), BASE, 16, selector=selector)
        days = week.to_dict()["days"]

        assert [d["in_plan"] for d in days] == [False, False, True, True, True, True, True]
        assert days[0]["date"] == "2026-03-02"

    def test_later_weeks_are_full(self, assembler, make_profile, selector):
        profile = make_profile(start_date=date(2026, 3, 4))
        week = assembler.build_week(profile, target(week_number=2), BASE, 16, selector=selector)

        assert week.start_date == date(2026, 3, 9)
        assert week.end_date == week.start_date + timedelta(days=6)
        assert not week.is_partial
        assert len(week.calendar_days()) == 7


class TestWeekDetails:

    def test_paces_on_running_days_only(self, assembler, make_profile, selector):
        paces = PaceCalculator().from_race(make_profile().race_distance, 4 * 3600)
        profile = make_profile(preferred_cross_train_days=["Wednesday"], cross_train_equipment="rowing")
        week = assembler.build_week(profile, target(), BASE, 16, selector=selector, paces=paces)

        assert week.get_day("Tuesday").pace == paces.describe("tempo")
        assert week.get_day("Wednesday").pace is None
        assert week.get_day("Friday").pace is None

    def test_recovery_and_race_week_notes(self, assembler, make_profile, selector):
        recovery = assembler.build_week(
            make_profile(), target(week_number=4, recovery=True), BASE, 16, selector=selector
        )
        final = assembler.build_week(
            make_profile(), target(week_number=16, taper=True), BASE, 16, selector=selector
        )

        assert any(n.startswith("Recovery week") for n in recovery.notes)
        assert "Race week" in final.notes
        assert any(n.startswith("Taper") for n in final.notes)

    def test_serialization_round_trip(self, assembler, make_profile, selector):
        profile = make_profile(start_date=date(2026, 3, 4), cross_train_equipment="pool",
                               preferred_cross_train_days=["Monday"])
        week = assembler.build_week(profile, target(), BASE, 16, selector=selector)

        restored = WeekPlan.from_dict(week.to_dict())
        assert restored.to_dict() == week.to_dict()
