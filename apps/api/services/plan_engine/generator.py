"""
Plan Generator

Main orchestrator for plan generation.
Coordinates all components to produce a complete week-by-week plan.

Usage:
    generator = PlanGenerator()
    plan = generator.generate(profile, rng=random.Random(7))

    plan.targets.peak_weekly_volume
    plan.weeks[0].days           # Monday..Sunday DayPlans
    plan.pace_mode               # PaceMode.PROGRESSIVE, or a flagged degraded mode
    plan.to_dict()               # JSON-serializable

    # Post-processing
    weeks = apply_race_day(plan.weeks, "Half", race_date)
    result = apply_injury_recovery(weeks, 5, 2, 1, ["pool", "rowing"])
    weeks = revert_injury_recovery(result.weeks, result.original_weeks)
"""

import logging
import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence, Union

from .catalog import WorkoutCatalog
from .constants import DayRole, RACE_DISPLAY_NAMES, WorkoutType
from .injury_recovery import InjuryRecoveryResult, InjuryRecoveryTransformer
from .pace_engine import PaceBlender, PaceCalculator, PaceMode, PaceProgression
from .periodization import PeriodizationCalculator, PeriodizationTargets
from .phase_builder import PhaseBuilder, PlanPhase
from .profile import AthleteProfile
from .race_day import RaceDayTransformer
from .variety import VarietyHistory, WorkoutVarietySelector
from .week_builder import WeeklyScheduleAssembler, WeekPlan, week_monday

logger = logging.getLogger(__name__)


@dataclass
class GeneratedPlan:
    """Complete generated training plan."""

    profile: AthleteProfile
    total_weeks: int

    # Plan dates
    start_date: Optional[date]
    end_date: Optional[date]
    race_date: Optional[date]

    # Structure
    targets: PeriodizationTargets
    phases: List[PlanPhase]
    weeks: List[WeekPlan]
    paces: PaceProgression
    race_day_applied: bool = False

    @property
    def pace_mode(self) -> PaceMode:
        return self.paces.mode

    @property
    def degraded(self) -> bool:
        return self.paces.degraded

    def get_week(self, week_number: int) -> WeekPlan:
        return self.weeks[week_number - 1]

    @property
    def plan_overview(self) -> Dict[str, Any]:
        return {
            "race_distance": self.profile.race_distance.value,
            "race_name": RACE_DISPLAY_NAMES[self.profile.race_distance],
            "experience_level": self.profile.experience_level.value,
            "running_status": self.profile.running_status.value,
            "total_weeks": self.total_weeks,
            "sessions_per_week": self.profile.sessions_per_week,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "race_date": self.race_date.isoformat() if self.race_date else None,
            "starting_weekly_volume": self.profile.current_weekly_volume,
            "peak_weekly_volume": self.targets.peak_weekly_volume,
            "long_session_max": self.targets.long_session_max,
            "long_session_floor": self.targets.long_session_floor,
            "floor_applied": self.targets.floor_applied,
            "pace_mode": self.pace_mode.value,
            "degraded_pacing": self.degraded,
            "race_day_applied": self.race_day_applied,
        }

    @property
    def summary(self) -> Dict[str, Any]:
        """Totals across the plan; target, running and RunEQ volumes are kept apart."""
        named = [
            d.workout_name
            for w in self.weeks for d in w.days
            if not d.is_rest and not d.is_placeholder and d.role != DayRole.RACE
        ]
        quality = sum(
            1
            for w in self.weeks for d in w.days
            if d.role in (DayRole.HARD_SESSION, DayRole.CROSS_TRAIN_HARD)
            and d.workout_type != WorkoutType.LONG
        )
        peak_week = max(self.weeks, key=lambda w: w.total_volume) if self.weeks else None
        return {
            "total_target_volume": round(sum(w.total_volume for w in self.weeks), 1),
            "total_running_volume": round(sum(w.running_volume for w in self.weeks), 1),
            "total_run_eq_volume": round(sum(w.run_eq_volume for w in self.weeks), 1),
            "total_quality_sessions": quality,
            "peak_week": peak_week.week_number if peak_week else None,
            "variety_score": round(len(set(named)) / len(named), 2) if named else 0.0,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "plan_overview": self.plan_overview,
            "phases": [p.to_dict() for p in self.phases],
            "weeks": [w.to_dict() for w in self.weeks],
            "paces": self.paces.to_dict(),
            "pace_mode": self.pace_mode.value,
            "degraded": self.degraded,
            "targets": self.targets.to_dict(),
            "summary": self.summary,
        }


class PlanGenerator:
    """
    Generate training plans.

    Holds only stateless components; variety history is created per
    generate() call so concurrent plans never share selections.
    """

    def __init__(self, catalog: Optional[WorkoutCatalog] = None):
        self.catalog = catalog or WorkoutCatalog()
        self.periodization = PeriodizationCalculator()
        self.phase_builder = PhaseBuilder()
        self.pace_calculator = PaceCalculator()
        self.pace_blender = PaceBlender()
        self.assembler = WeeklyScheduleAssembler(self.catalog)
        self.race_day = RaceDayTransformer()

    def generate(
        self,
        profile: Union[AthleteProfile, Dict[str, Any]],
        rng: Optional[random.Random] = None,
    ) -> GeneratedPlan:
        """
        Generate a complete plan.

        Args:
            profile: AthleteProfile or a mapping accepted by AthleteProfile.from_dict
            rng: Random source for workout variety (seed it for reproducible plans)

        Returns:
            GeneratedPlan

        Raises:
            PlanValidationError: before any computation, naming the bad fields
            RaceDayPlacementError: race date set but no session could become the race
        """
        if isinstance(profile, dict):
            profile = AthleteProfile.from_dict(profile)
        profile.validate()
        total_weeks = profile.resolve_total_weeks()

        targets = self.periodization.calculate(
            current_weekly_volume=profile.current_weekly_volume,
            current_long_session_distance=profile.current_long_session_distance,
            total_weeks=total_weeks,
            race_distance=profile.race_distance,
            experience_level=profile.experience_level,
            sessions_per_week=profile.sessions_per_week,
        )
        phases = self.phase_builder.build_phases(total_weeks)
        paces = self._build_paces(profile, total_weeks)

        selector = WorkoutVarietySelector(self.catalog, VarietyHistory(), rng or random.Random())

        weeks = []
        for target in targets.weeks:
            phase = self.phase_builder.phase_for_week(phases, target.week_number)
            weeks.append(self.assembler.build_week(
                profile,
                target,
                phase,
                total_weeks,
                selector=selector,
                paces=paces.for_week(target.week_number),
            ))

        race_day_applied = False
        if profile.race_date:
            weeks = self.race_day.apply(
                weeks,
                profile.race_distance,
                race_date=profile.race_date,
                long_session_day=profile.long_session_day,
                paces=paces.goal or paces.for_week(total_weeks),
            )
            race_day_applied = True

        end_date = None
        if profile.start_date:
            end_date = week_monday(profile.start_date, total_weeks) + timedelta(days=6)

        plan = GeneratedPlan(
            profile=profile,
            total_weeks=total_weeks,
            start_date=profile.start_date,
            end_date=end_date,
            race_date=profile.race_date,
            targets=targets,
            phases=phases,
            weeks=weeks,
            paces=paces,
            race_day_applied=race_day_applied,
        )

        logger.info(
            f"Generated {total_weeks}-week {profile.race_distance.value} plan: "
            f"peak {targets.peak_weekly_volume}, long max {targets.long_session_max}, "
            f"pace mode {paces.mode.value}",
            extra={
                "extra_fields": {
                    "race_distance": profile.race_distance.value,
                    "total_weeks": total_weeks,
                    "peak_weekly_volume": targets.peak_weekly_volume,
                    "long_session_max": targets.long_session_max,
                    "floor_applied": targets.floor_applied,
                    "pace_mode": paces.mode.value,
                    "race_day_applied": race_day_applied,
                }
            },
        )
        return plan

    def _build_paces(self, profile: AthleteProfile, total_weeks: int) -> PaceProgression:
        goal = None
        if profile.goal_time_seconds:
            goal = self.pace_calculator.from_race(profile.race_distance, profile.goal_time_seconds)

        current = None
        estimated = False
        if profile.recent_race_distance and profile.recent_race_time_seconds:
            current = self.pace_calculator.from_race(
                profile.recent_race_distance, profile.recent_race_time_seconds
            )
        elif profile.estimate_fitness:
            current = self.pace_calculator.from_training(
                profile.current_long_session_distance, profile.current_weekly_volume
            )
            estimated = True

        return self.pace_blender.build_progression(current, goal, total_weeks, estimated=estimated)


def generate_plan(
    profile: Union[AthleteProfile, Dict[str, Any]],
    rng: Optional[random.Random] = None,
) -> GeneratedPlan:
    return PlanGenerator().generate(profile, rng=rng)


def apply_race_day(
    weeks: List[WeekPlan],
    race_distance: Any,
    race_date: Optional[date] = None,
    long_session_day: Optional[str] = None,
) -> List[WeekPlan]:
    return RaceDayTransformer().apply(weeks, race_distance, race_date, long_session_day)


def apply_injury_recovery(
    weeks: List[WeekPlan],
    start_week: int,
    duration_weeks: int,
    reduce_by_days: int,
    equipment: Sequence[Any],
    rng: Optional[random.Random] = None,
) -> InjuryRecoveryResult:
    transformer = InjuryRecoveryTransformer()
    selector = WorkoutVarietySelector(transformer.catalog, VarietyHistory(), rng or random.Random())
    return transformer.apply(weeks, start_week, duration_weeks, reduce_by_days, equipment, selector=selector)


def revert_injury_recovery(
    weeks: List[WeekPlan],
    original_weeks: Optional[List[WeekPlan]],
) -> List[WeekPlan]:
    return InjuryRecoveryTransformer().revert(weeks, original_weeks)
