# Plan Engine
#
# Periodized endurance-training plan generation.
#
# Architecture:
# - Periodization math (volume and long-session progression)
# - Phase segmentation (Base / Build / Peak / Taper)
# - Pace progression from current fitness toward goal pace
# - Weekly assembly from an ordered day-role decision table
# - Session-scoped workout variety with an injectable RNG
# - Race-day and injury-recovery transformers
# - Config-driven business rules (config/plan_rules.yaml)

from .config import ConfigService
from .constants import (
    DayRole,
    Equipment,
    ExperienceLevel,
    PhaseName,
    RaceDistance,
    RunningStatus,
    WorkoutType,
)
from .errors import (
    InjuryRecoveryError,
    PlanEngineError,
    PlanValidationError,
    RaceDayPlacementError,
)
from .profile import AthleteProfile
from .periodization import PeriodizationCalculator, PeriodizationTargets, WeekTarget
from .phase_builder import PhaseBuilder, PlanPhase
from .pace_engine import PaceBlender, PaceCalculator, PaceMode, PaceProgression, PaceSet
from .catalog import WorkoutCatalog, WorkoutDescriptor
from .variety import VarietyHistory, WorkoutVarietySelector
from .week_builder import DayPlan, WeekPlan, WeeklyScheduleAssembler, decide_day_role
from .race_day import ByDay, ByLongestDistance, ByRole, RaceDayTransformer
from .injury_recovery import InjuryRecoveryResult, InjuryRecoveryTransformer
from .generator import (
    GeneratedPlan,
    PlanGenerator,
    apply_injury_recovery,
    apply_race_day,
    generate_plan,
    revert_injury_recovery,
)

__all__ = [
    # Core services
    'ConfigService',
    'WorkoutCatalog',
    'WorkoutDescriptor',

    # Generator components
    'AthleteProfile',
    'PeriodizationCalculator',
    'PeriodizationTargets',
    'WeekTarget',
    'PhaseBuilder',
    'PlanPhase',
    'PaceCalculator',
    'PaceBlender',
    'PaceProgression',
    'PaceSet',
    'PaceMode',
    'VarietyHistory',
    'WorkoutVarietySelector',
    'WeeklyScheduleAssembler',
    'DayPlan',
    'WeekPlan',
    'decide_day_role',
    'RaceDayTransformer',
    'ByRole',
    'ByDay',
    'ByLongestDistance',
    'InjuryRecoveryTransformer',
    'InjuryRecoveryResult',

    # Main generator
    'PlanGenerator',
    'GeneratedPlan',
    'generate_plan',
    'apply_race_day',
    'apply_injury_recovery',
    'revert_injury_recovery',

    # Errors
    'PlanEngineError',
    'PlanValidationError',
    'RaceDayPlacementError',
    'InjuryRecoveryError',

    # Constants
    'RaceDistance',
    'ExperienceLevel',
    'RunningStatus',
    'PhaseName',
    'DayRole',
    'WorkoutType',
    'Equipment',
]
