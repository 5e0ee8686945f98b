"""
Weekly Schedule Assembler

Turns one week's volume targets plus the athlete's day preferences into
seven concrete days.

Each weekday is classified by an ordered decision table (first match wins):
1. Not an available day                           -> Rest
2. Long session day                                -> LongSession
   (cross-training-only / bike-only: CrossTrainHard with equipment, else Rest)
3. Hard day, preferred cross-train day, equipment  -> CrossTrainHard
4. Hard day                                        -> HardSession
   (cross-training-only / bike-only: CrossTrainHard)
5. Preferred cross-train day with equipment        -> CrossTrainEasy
6. Any other available day                         -> EasySession
   (cross-training-only / bike-only: CrossTrainEasy)
7. Otherwise                                       -> Rest

Usage:
    assembler = WeeklyScheduleAssembler()
    week = assembler.build_week(profile, target, phase, total_weeks=16, selector=selector)
    [d.role for d in week.days]   # Monday..Sunday
    week.running_volume, week.run_eq_volume
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from .catalog import WorkoutCatalog
from .config import ConfigService
from .constants import (
    BIKE_HARD_ROTATION,
    CROSS_TRAINING_MINUTES_PER_MILE,
    CROSS_TRAINING_OVERHEAD,
    CROSS_TRAINING_ROLES,
    DAY_NAMES,
    DayRole,
    Equipment,
    HARD_SESSION_ROTATION,
    LONG_SESSION_SHARE,
    PhaseName,
    RUNNING_ROLES,
    RUN_EQ_BIKE_FACTOR,
    RunningStatus,
    TRANSITION_SCHEDULE,
    WorkoutType,
)
from .pace_engine import PaceSet
from .periodization import WeekTarget
from .phase_builder import PlanPhase
from .profile import AthleteProfile
from .variety import VarietyHistory, WorkoutVarietySelector

logger = logging.getLogger(__name__)

NO_RUNNING_STATUSES = {RunningStatus.CROSS_TRAINING_ONLY, RunningStatus.BIKE_ONLY}

ROLE_LABELS = {
    DayRole.REST: "Rest Day",
    DayRole.LONG_SESSION: "Long Run",
    DayRole.HARD_SESSION: "Quality Session",
    DayRole.CROSS_TRAIN_HARD: "Hard Cross-Training",
    DayRole.CROSS_TRAIN_EASY: "Easy Cross-Training",
    DayRole.EASY_SESSION: "Easy Run",
    DayRole.RACE: "Race Day",
}

TYPE_FOCUS = {
    WorkoutType.REST: "Recovery",
    WorkoutType.EASY: "Aerobic base",
    WorkoutType.RECOVERY: "Active recovery",
    WorkoutType.LONG: "Endurance",
    WorkoutType.TEMPO: "Lactate threshold",
    WorkoutType.INTERVALS: "VO2 max",
    WorkoutType.HILLS: "Strength and power",
    WorkoutType.AEROBIC_POWER: "Aerobic power",
    WorkoutType.RACE: "Race day",
}


@dataclass
class DayPlan:
    """One calendar day of a training week."""
    day: str
    role: DayRole
    workout_type: WorkoutType = WorkoutType.REST
    distance: Optional[float] = None          # Running miles
    run_eq_distance: Optional[float] = None   # Cross-training credit in RunEQ miles
    ride_distance: Optional[float] = None     # Stand-up bike miles
    duration_minutes: Optional[int] = None
    equipment: Optional[Equipment] = None
    workout_ref: Optional[str] = None
    workout_name: Optional[str] = None
    structure: Optional[str] = None
    focus: str = ""
    pace: Optional[str] = None
    date: Optional[date] = None
    is_placeholder: bool = False
    notes: List[str] = field(default_factory=list)
    # Retained when a transformer replaces the session
    original_workout_type: Optional[WorkoutType] = None
    original_distance: Optional[float] = None

    @property
    def is_rest(self) -> bool:
        return self.role == DayRole.REST

    @property
    def is_running(self) -> bool:
        return self.role in RUNNING_ROLES

    @property
    def is_cross_training(self) -> bool:
        return self.role in CROSS_TRAINING_ROLES

    @property
    def effective_distance(self) -> float:
        """Running miles, or RunEQ miles for cross-training."""
        if self.distance is not None:
            return self.distance
        return self.run_eq_distance or 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day,
            "date": self.date.isoformat() if self.date else None,
            "role": self.role.value,
            "workout_type": self.workout_type.value,
            "distance": self.distance,
            "run_eq_distance": self.run_eq_distance,
            "ride_distance": self.ride_distance,
            "duration_minutes": self.duration_minutes,
            "equipment": self.equipment.value if self.equipment else None,
            "workout_ref": self.workout_ref,
            "workout_name": self.workout_name,
            "structure": self.structure,
            "focus": self.focus,
            "pace": self.pace,
            "is_placeholder": self.is_placeholder,
            "notes": list(self.notes),
            "original_workout_type": (
                self.original_workout_type.value if self.original_workout_type else None
            ),
            "original_distance": self.original_distance,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DayPlan":
        equipment = data.get("equipment")
        original_type = data.get("original_workout_type")
        day_date = data.get("date")
        return cls(
            day=data["day"],
            role=DayRole(data["role"]),
            workout_type=WorkoutType(data.get("workout_type") or WorkoutType.REST.value),
            distance=data.get("distance"),
            run_eq_distance=data.get("run_eq_distance"),
            ride_distance=data.get("ride_distance"),
            duration_minutes=data.get("duration_minutes"),
            equipment=Equipment(equipment) if equipment else None,
            workout_ref=data.get("workout_ref"),
            workout_name=data.get("workout_name"),
            structure=data.get("structure"),
            focus=data.get("focus") or "",
            pace=data.get("pace"),
            date=date.fromisoformat(day_date) if isinstance(day_date, str) else day_date,
            is_placeholder=bool(data.get("is_placeholder", False)),
            notes=list(data.get("notes") or []),
            original_workout_type=WorkoutType(original_type) if original_type else None,
            original_distance=data.get("original_distance"),
        )


@dataclass
class WeekPlan:
    """Seven days (Monday..Sunday) plus week-level targets."""
    week_number: int
    phase: PhaseName
    total_volume: float
    days: List[DayPlan]
    long_session_distance: Optional[float] = None
    is_recovery_week: bool = False
    is_taper_week: bool = False
    focus: str = ""
    notes: List[str] = field(default_factory=list)
    start_date: Optional[date] = None   # First calendar day (start date for week 1)
    end_date: Optional[date] = None     # Sunday

    @property
    def running_volume(self) -> float:
        return round(sum(d.distance or 0 for d in self.days if d.is_running), 1)

    @property
    def run_eq_volume(self) -> float:
        return round(sum(d.run_eq_distance or 0 for d in self.days if d.is_cross_training), 1)

    @property
    def rest_days(self) -> int:
        return sum(1 for d in self.days if d.is_rest)

    @property
    def is_partial(self) -> bool:
        return bool(self.start_date and self.start_date.weekday() != 0)

    def get_day(self, day: str) -> Optional[DayPlan]:
        for plan in self.days:
            if plan.day == day:
                return plan
        return None

    def in_plan(self, day: DayPlan) -> bool:
        """False for week-1 days dated before the plan starts."""
        if not self.start_date or not day.date:
            return True
        return self.start_date <= day.date <= self.end_date

    def calendar_days(self) -> List[DayPlan]:
        """Days in calendar order, limited to the dated span of the week."""
        if not self.start_date:
            return list(self.days)
        return sorted((d for d in self.days if d.date and self.in_plan(d)), key=lambda d: d.date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_number": self.week_number,
            "phase": self.phase.value,
            "focus": self.focus,
            "total_volume": self.total_volume,
            "running_volume": self.running_volume,
            "run_eq_volume": self.run_eq_volume,
            "long_session_distance": self.long_session_distance,
            "is_recovery_week": self.is_recovery_week,
            "is_taper_week": self.is_taper_week,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "is_partial": self.is_partial,
            "notes": list(self.notes),
            "days": [dict(d.to_dict(), in_plan=self.in_plan(d)) for d in self.days],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeekPlan":
        start = data.get("start_date")
        end = data.get("end_date")
        return cls(
            week_number=int(data["week_number"]),
            phase=PhaseName(data["phase"]),
            total_volume=data.get("total_volume") or 0,
            days=[DayPlan.from_dict(d) for d in data.get("days") or []],
            long_session_distance=data.get("long_session_distance"),
            is_recovery_week=bool(data.get("is_recovery_week", False)),
            is_taper_week=bool(data.get("is_taper_week", False)),
            focus=data.get("focus") or "",
            notes=list(data.get("notes") or []),
            start_date=date.fromisoformat(start) if start else None,
            end_date=date.fromisoformat(end) if end else None,
        )


def decide_day_role(day: str, profile: AthleteProfile) -> DayRole:
    """Role for one weekday from the athlete's preferences alone."""
    available = set(profile.available_days)
    has_equipment = profile.effective_equipment is not None
    no_running = profile.running_status in NO_RUNNING_STATUSES

    if day not in available:
        return DayRole.REST

    if day == profile.long_session_day:
        if no_running:
            return DayRole.CROSS_TRAIN_HARD if has_equipment else DayRole.REST
        return DayRole.LONG_SESSION

    hard = day in profile.hard_session_days
    preferred_cross = day in profile.preferred_cross_train_days

    if hard and preferred_cross and has_equipment:
        return DayRole.CROSS_TRAIN_HARD
    if hard:
        return DayRole.CROSS_TRAIN_HARD if no_running else DayRole.HARD_SESSION
    if preferred_cross and has_equipment:
        return DayRole.CROSS_TRAIN_EASY
    return DayRole.CROSS_TRAIN_EASY if no_running else DayRole.EASY_SESSION


def running_fraction(week_number: int) -> float:
    """Share of sessions that are runs for a transitioning athlete."""
    fraction = 0.0
    for first_week, share in TRANSITION_SCHEDULE:
        if week_number >= first_week:
            fraction = share
    return fraction


def week_monday(start_date: date, week_number: int) -> date:
    return start_date - timedelta(days=start_date.weekday()) + timedelta(weeks=week_number - 1)


class WeeklyScheduleAssembler:
    """
    Build one WeekPlan: roles, workout types, distances and workouts.
    """

    def __init__(self, catalog: Optional[WorkoutCatalog] = None):
        self.catalog = catalog or WorkoutCatalog()

    def build_week(
        self,
        profile: AthleteProfile,
        target: WeekTarget,
        phase: PlanPhase,
        total_weeks: int,
        selector: Optional[WorkoutVarietySelector] = None,
        paces: Optional[PaceSet] = None,
    ) -> WeekPlan:
        """
        Assemble a week.

        Args:
            profile: Validated athlete profile
            target: Volume targets; a None long session distance falls back
                to a share of weekly volume
            phase: Phase containing this week
            total_weeks: Plan length (drives rep progression)
            selector: Session-scoped variety selector (a fresh one if None)
            paces: This week's paces for running days

        Returns:
            WeekPlan with 7 days, Monday first
        """
        if selector is None:
            selector = WorkoutVarietySelector(self.catalog, VarietyHistory(), random.Random())

        week_number = target.week_number
        equipment = profile.effective_equipment
        days = [DayPlan(day=name, role=decide_day_role(name, profile)) for name in DAY_NAMES]

        self._assign_workout_types(days, profile, phase.name, week_number)
        if profile.running_status == RunningStatus.TRANSITIONING:
            self._apply_transition(days, week_number)
        self._assign_distances(days, target, profile)

        for plan in days:
            if plan.is_cross_training:
                self._finish_cross_training(plan, equipment)
            self._select_workout(plan, phase.name, week_number, total_weeks, selector, equipment)
            if plan.is_running and paces is not None:
                plan.pace = paces.describe(plan.workout_type.value)

        week = WeekPlan(
            week_number=week_number,
            phase=phase.name,
            total_volume=target.weekly_volume,
            days=days,
            long_session_distance=target.long_session_distance,
            is_recovery_week=target.is_recovery_week,
            is_taper_week=target.is_taper_week,
            focus=phase.focus,
            notes=self._week_notes(target, profile, total_weeks),
        )
        if profile.start_date:
            self.project_calendar(week, profile.start_date)

        logger.debug(
            f"Week {week_number} ({phase.name.value}): "
            + ", ".join(f"{d.day[:3]}={d.role.value}" for d in days)
        )
        return week

    def _assign_workout_types(
        self,
        days: List[DayPlan],
        profile: AthleteProfile,
        phase: PhaseName,
        week_number: int,
    ):
        rotation = HARD_SESSION_ROTATION[phase]
        bike = profile.effective_equipment == Equipment.STAND_UP_BIKE
        hard_index = 0

        for plan in days:
            if plan.role == DayRole.REST:
                plan.workout_type = WorkoutType.REST
            elif plan.day == profile.long_session_day:
                plan.workout_type = WorkoutType.LONG
            elif plan.role in (DayRole.HARD_SESSION, DayRole.CROSS_TRAIN_HARD):
                slot = (week_number - 1 + hard_index) % len(rotation)
                hard_index += 1
                if plan.role == DayRole.CROSS_TRAIN_HARD and bike:
                    plan.workout_type = BIKE_HARD_ROTATION[slot % len(BIKE_HARD_ROTATION)]
                else:
                    plan.workout_type = rotation[slot]
                # Rotation slot without a quality session
                if plan.workout_type == WorkoutType.EASY:
                    plan.role = (
                        DayRole.CROSS_TRAIN_EASY
                        if plan.role == DayRole.CROSS_TRAIN_HARD
                        else DayRole.EASY_SESSION
                    )
            else:
                plan.workout_type = WorkoutType.EASY

    @staticmethod
    def _apply_transition(days: List[DayPlan], week_number: int):
        """Keep a share of runs (quality first, then long, then easy); cross-train the rest."""
        sessions = [d for d in days if not d.is_rest]
        run_count = int(round(running_fraction(week_number) * len(sessions)))

        order = {DayRole.HARD_SESSION: 0, DayRole.LONG_SESSION: 1, DayRole.EASY_SESSION: 2}
        runs = sorted((d for d in sessions if d.role in order), key=lambda d: order[d.role])

        for plan in runs[run_count:]:
            if plan.role == DayRole.EASY_SESSION:
                plan.role = DayRole.CROSS_TRAIN_EASY
            else:
                plan.role = DayRole.CROSS_TRAIN_HARD

    def _assign_distances(self, days: List[DayPlan], target: WeekTarget, profile: AthleteProfile):
        volume = target.weekly_volume
        sessions = [d for d in days if not d.is_rest]
        if not sessions:
            return

        long_day = next(
            (d for d in sessions if d.day == profile.long_session_day and d.workout_type == WorkoutType.LONG),
            None,
        )
        long_distance = 0.0
        if long_day is not None:
            if target.long_session_distance is not None:
                long_distance = target.long_session_distance
            else:
                share_key = (
                    "low_frequency"
                    if profile.sessions_per_week <= LONG_SESSION_SHARE["low_frequency_max_sessions"]
                    else "high_frequency"
                )
                long_distance = round(volume * LONG_SESSION_SHARE[share_key])
            self._set_distance(long_day, long_distance)

        others = [d for d in sessions if d is not long_day]
        if not others:
            return

        base = round(max(volume - long_distance, 0) / len(others), 1)
        for plan in others:
            if plan.is_cross_training:
                overhead = CROSS_TRAINING_OVERHEAD
            else:
                overhead = ConfigService.get_workout_overhead(plan.workout_type.value)
            self._set_distance(plan, round(base * overhead, 1))

    @staticmethod
    def _set_distance(plan: DayPlan, miles: float):
        if plan.is_cross_training:
            plan.run_eq_distance = miles
            plan.distance = None
        else:
            plan.distance = miles

    @staticmethod
    def _finish_cross_training(plan: DayPlan, equipment: Optional[Equipment]):
        plan.equipment = equipment
        if plan.run_eq_distance is None:
            return
        plan.duration_minutes = int(round(plan.run_eq_distance * CROSS_TRAINING_MINUTES_PER_MILE))
        if equipment == Equipment.STAND_UP_BIKE:
            plan.ride_distance = round(plan.run_eq_distance * RUN_EQ_BIKE_FACTOR, 1)

    def _select_workout(
        self,
        plan: DayPlan,
        phase: PhaseName,
        week_number: int,
        total_weeks: int,
        selector: WorkoutVarietySelector,
        equipment: Optional[Equipment],
    ):
        if plan.is_rest:
            plan.workout_name = ROLE_LABELS[DayRole.REST]
            plan.focus = TYPE_FOCUS[WorkoutType.REST]
            return

        if plan.is_cross_training:
            category = self.catalog.cross_training_category(equipment, plan.workout_type)
        else:
            category = self.catalog.running_category(plan.workout_type, phase)

        workout = selector.select(category, week_number, total_weeks, ROLE_LABELS[plan.role])
        plan.workout_ref = workout.ref
        plan.workout_name = workout.name
        plan.structure = workout.structure
        plan.focus = workout.focus or TYPE_FOCUS.get(plan.workout_type, "")
        plan.is_placeholder = workout.is_placeholder

    @staticmethod
    def _week_notes(target: WeekTarget, profile: AthleteProfile, total_weeks: int) -> List[str]:
        notes = []
        if target.is_recovery_week:
            notes.append("Recovery week: volume reduced to let training adapt")
        if target.is_taper_week:
            notes.append("Taper: less volume, keep some intensity")
        if target.week_number == total_weeks:
            notes.append("Race week")
        if profile.running_status == RunningStatus.TRANSITIONING:
            share = int(running_fraction(target.week_number) * 100)
            notes.append(f"Return from cross-training: about {share}% of sessions are runs")
        return notes

    @staticmethod
    def project_calendar(week: WeekPlan, start_date: date) -> WeekPlan:
        """
        Date every day of the week. Week 1 runs from the start date through
        Sunday, so it may be partial; later weeks are Monday..Sunday.
        """
        monday = week_monday(start_date, week.week_number)
        for index, plan in enumerate(week.days):
            plan.date = monday + timedelta(days=index)
        week.start_date = start_date if week.week_number == 1 else monday
        week.end_date = monday + timedelta(days=6)
        return week
