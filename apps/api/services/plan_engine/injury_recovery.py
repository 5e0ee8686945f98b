"""
Injury Recovery Transformer

Rewrites a span of weeks for an injured athlete:
- Injury weeks: keep the highest-priority sessions (long > tempo >
  intervals > hills > easy > recovery), turn the rest into rest days,
  and replace every kept session with cross-training spread fairly
  across the available equipment
- The week after the span: about half the kept sessions become short
  easy runs, the rest stay easy cross-training

The input weeks are retained unmodified so the change can be reverted.

Usage:
    transformer = InjuryRecoveryTransformer()
    result = transformer.apply(weeks, start_week=5, duration_weeks=2,
                               reduce_by_days=1, equipment=["pool", "rowing"])
    result.weeks            # modified plan
    transformer.revert(result.weeks, result.original_weeks)
"""

import copy
import logging
import math
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .catalog import WorkoutCatalog
from .constants import (
    CROSS_TRAINING_MINUTES_PER_MILE,
    DayRole,
    Equipment,
    RETURN_TO_RUNNING,
    WORKOUT_PRIORITY,
    WorkoutType,
)
from .errors import InjuryRecoveryError, PlanValidationError
from .variety import VarietyHistory, WorkoutVarietySelector
from .week_builder import DayPlan, WeekPlan

logger = logging.getLogger(__name__)

HARD_TYPES = {
    WorkoutType.LONG,
    WorkoutType.TEMPO,
    WorkoutType.INTERVALS,
    WorkoutType.HILLS,
    WorkoutType.AEROBIC_POWER,
    WorkoutType.RACE,
}

DEFAULT_CROSS_TRAINING_MINUTES = 45


@dataclass
class InjuryRecoveryResult:
    weeks: List[WeekPlan]
    original_weeks: List[WeekPlan]
    injury_weeks: List[int]
    return_week: Optional[int]
    equipment: List[Equipment]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weeks": [w.to_dict() for w in self.weeks],
            "original_weeks": [w.to_dict() for w in self.original_weeks],
            "injury_weeks": list(self.injury_weeks),
            "return_week": self.return_week,
            "equipment": [e.value for e in self.equipment],
        }


def priority_rank(workout_type: WorkoutType) -> int:
    """Lower is more important; unknown types rank last."""
    try:
        return WORKOUT_PRIORITY.index(workout_type)
    except ValueError:
        return 999


def fair_assignments(total: int, equipment_count: int) -> List[int]:
    """
    Equipment index per kept session, e.g. 5 sessions over 3 types -> [0, 0, 1, 1, 2].
    """
    base, extra = divmod(total, equipment_count)
    assignments = []
    for index in range(equipment_count):
        assignments.extend([index] * (base + (1 if index < extra else 0)))
    return assignments


class InjuryRecoveryTransformer:
    """
    Apply or revert an injury-recovery block.
    """

    def __init__(self, catalog: Optional[WorkoutCatalog] = None):
        self.catalog = catalog or WorkoutCatalog()

    def apply(
        self,
        weeks: List[WeekPlan],
        start_week: int,
        duration_weeks: int,
        reduce_by_days: int,
        equipment: Sequence[Any],
        selector: Optional[WorkoutVarietySelector] = None,
    ) -> InjuryRecoveryResult:
        """
        Rewrite weeks start_week..start_week+duration_weeks-1 as cross-training
        and the following week as a return to running.

        Args:
            weeks: Current plan (left unmodified)
            start_week: First injured week (1-based)
            duration_weeks: Weeks without running
            reduce_by_days: Sessions to drop from each affected week
            equipment: Available cross-training equipment

        Returns:
            InjuryRecoveryResult with the new weeks and the retained originals
        """
        kinds = self._parse_equipment(equipment)
        total = len(weeks)

        invalid = []
        if not isinstance(start_week, int) or not 1 <= start_week <= total:
            invalid.append("start_week")
        if not isinstance(duration_weeks, int) or duration_weeks < 1:
            invalid.append("duration_weeks")
        if not isinstance(reduce_by_days, int) or reduce_by_days < 0:
            invalid.append("reduce_by_days")
        if invalid:
            raise PlanValidationError(f"Invalid injury recovery request for a {total}-week plan", invalid)

        if selector is None:
            selector = WorkoutVarietySelector(self.catalog, VarietyHistory(), random.Random())

        original_weeks = copy.deepcopy(weeks)
        updated = copy.deepcopy(weeks)

        last_injury_week = min(start_week + duration_weeks - 1, total)
        injury_weeks = list(range(start_week, last_injury_week + 1))
        return_week = start_week + duration_weeks
        if return_week > total:
            return_week = None

        for week in updated:
            if week.week_number in injury_weeks:
                self._cross_training_week(week, reduce_by_days, kinds, selector, total)
            elif week.week_number == return_week:
                self._return_week(week, reduce_by_days, kinds, selector, total)

        logger.info(
            f"Injury recovery applied: weeks {start_week}-{last_injury_week} cross-training only "
            f"on {', '.join(k.value for k in kinds)}; return to running in week {return_week}",
            extra={
                "extra_fields": {
                    "injury_weeks": injury_weeks,
                    "return_week": return_week,
                    "reduce_by_days": reduce_by_days,
                    "equipment": [k.value for k in kinds],
                }
            },
        )
        return InjuryRecoveryResult(
            weeks=updated,
            original_weeks=original_weeks,
            injury_weeks=injury_weeks,
            return_week=return_week,
            equipment=kinds,
        )

    def revert(self, weeks: List[WeekPlan], original_weeks: Optional[List[WeekPlan]]) -> List[WeekPlan]:
        """Restore the plan exactly as it was before apply()."""
        if not original_weeks:
            raise InjuryRecoveryError("Cannot revert injury recovery: original weeks were not retained")
        if weeks and len(weeks) != len(original_weeks):
            logger.warning(
                f"Reverting a {len(weeks)}-week plan to {len(original_weeks)} retained weeks"
            )
        logger.info("Injury recovery reverted")
        return copy.deepcopy(original_weeks)

    @staticmethod
    def _parse_equipment(equipment: Sequence[Any]) -> List[Equipment]:
        if not equipment:
            raise InjuryRecoveryError("Injury recovery needs at least one cross-training equipment type")
        try:
            kinds = {Equipment(e) for e in equipment}
        except ValueError as e:
            raise PlanValidationError(f"Unsupported equipment: {e}", ["equipment"])
        # Assignment order follows the Equipment enum
        return [kind for kind in Equipment if kind in kinds]

    @staticmethod
    def _keep_sessions(week: WeekPlan, reduce_by_days: int) -> List[DayPlan]:
        """Highest-priority sessions first; dropped sessions become rest."""
        sessions = [d for d in week.days if not d.is_rest]
        if not sessions:
            return []
        ranked = sorted(sessions, key=lambda d: priority_rank(d.workout_type))
        keep = max(1, len(sessions) - reduce_by_days)
        for dropped in ranked[keep:]:
            _make_rest(dropped)
        return ranked[:keep]

    def _cross_training_week(
        self,
        week: WeekPlan,
        reduce_by_days: int,
        kinds: List[Equipment],
        selector: WorkoutVarietySelector,
        total_weeks: int,
    ):
        kept = self._keep_sessions(week, reduce_by_days)
        assignments = fair_assignments(len(kept), len(kinds))

        for position, plan in enumerate(kept):
            equipment = kinds[assignments[position]]
            original_type = plan.workout_type
            workout_type = WorkoutType.LONG if original_type == WorkoutType.RACE else original_type
            role = DayRole.CROSS_TRAIN_HARD if original_type in HARD_TYPES else DayRole.CROSS_TRAIN_EASY
            self._to_cross_training(plan, role, workout_type, equipment, selector, week.week_number, total_weeks)
            plan.notes = ["Injury recovery: cross-training replaces running"]

        week.notes = ["Cross-training only - no running during injury recovery"]
        logger.debug(
            f"Week {week.week_number}: {len(kept)} cross-training sessions "
            f"assigned {assignments}"
        )

    def _return_week(
        self,
        week: WeekPlan,
        reduce_by_days: int,
        kinds: List[Equipment],
        selector: WorkoutVarietySelector,
        total_weeks: int,
    ):
        kept = self._keep_sessions(week, reduce_by_days)
        running = math.ceil(len(kept) * RETURN_TO_RUNNING["running_share"])

        for position, plan in enumerate(kept):
            if position < running:
                previous = plan.effective_distance
                _retain_original(plan)
                plan.role = DayRole.EASY_SESSION
                plan.workout_type = WorkoutType.EASY
                plan.distance = (
                    round(previous * RETURN_TO_RUNNING["distance_factor"], 1)
                    if previous else RETURN_TO_RUNNING["default_distance"]
                )
                plan.run_eq_distance = None
                plan.ride_distance = None
                plan.duration_minutes = None
                plan.equipment = None
                plan.workout_ref = "easy.RETURN"
                plan.workout_name = "Easy Return Run"
                plan.structure = "Easy-paced running to gradually return from injury"
                plan.focus = "Return to running"
                plan.is_placeholder = False
                plan.notes = ["Return to running: start slow, listen to your body"]
            else:
                equipment = kinds[(position - running) % len(kinds)]
                self._to_cross_training(
                    plan, DayRole.CROSS_TRAIN_EASY, WorkoutType.EASY, equipment,
                    selector, week.week_number, total_weeks,
                )
                plan.notes = []

        week.notes = ["Gradual return to running - mix of easy runs and cross-training"]

    def _to_cross_training(
        self,
        plan: DayPlan,
        role: DayRole,
        workout_type: WorkoutType,
        equipment: Equipment,
        selector: WorkoutVarietySelector,
        week_number: int,
        total_weeks: int,
    ):
        previous = plan.effective_distance
        _retain_original(plan)
        category = self.catalog.cross_training_category(equipment, workout_type)
        workout = selector.select(category, week_number, total_weeks, f"{equipment.value} - {workout_type.value}")

        plan.role = role
        plan.workout_type = workout_type
        plan.equipment = equipment
        plan.distance = None
        plan.run_eq_distance = previous or None
        plan.ride_distance = None
        plan.duration_minutes = (
            int(round(previous * CROSS_TRAINING_MINUTES_PER_MILE))
            if previous else DEFAULT_CROSS_TRAINING_MINUTES
        )
        plan.pace = None
        plan.workout_ref = workout.ref
        plan.workout_name = workout.name
        plan.structure = workout.structure
        plan.focus = workout.focus or "Cross-training"
        plan.is_placeholder = workout.is_placeholder


def _retain_original(plan: DayPlan):
    if plan.original_workout_type is None:
        plan.original_workout_type = plan.workout_type
        plan.original_distance = plan.effective_distance or None


def _make_rest(plan: DayPlan):
    _retain_original(plan)
    plan.role = DayRole.REST
    plan.workout_type = WorkoutType.REST
    plan.distance = None
    plan.run_eq_distance = None
    plan.ride_distance = None
    plan.duration_minutes = None
    plan.equipment = None
    plan.pace = None
    plan.workout_ref = None
    plan.workout_name = "Rest Day"
    plan.structure = None
    plan.focus = "Recovery day - focus on healing"
    plan.is_placeholder = False
    plan.notes = []
