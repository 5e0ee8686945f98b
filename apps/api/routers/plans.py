"""
Plan Engine API Router

Stateless endpoints over the plan engine.

Endpoints for:
- Plan generation from an athlete profile
- Race-day substitution on an existing plan
- Injury recovery (apply and revert)
- Supported options for building a request
"""

import logging
import random
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from core.config import settings
from core.exceptions import PlanGenerationError, ValidationError
from services.plan_engine import (
    AthleteProfile,
    ConfigService,
    DayRole,
    Equipment,
    ExperienceLevel,
    InjuryRecoveryError,
    PlanGenerator,
    PlanValidationError,
    RaceDayPlacementError,
    RaceDistance,
    RunningStatus,
    WeekPlan,
    apply_injury_recovery,
    apply_race_day,
    revert_injury_recovery,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/plans", tags=["Plan Engine"])


# ============ Request Models ============

class GeneratePlanRequest(BaseModel):
    """Athlete profile for plan generation."""
    race_distance: str = Field(..., description="Goal distance: 5K, 10K, Half, Marathon")
    race_date: Optional[date] = Field(None, description="Goal race date; places race day in the final week")
    start_date: Optional[date] = Field(None, description="Plan start date (week 1 may be partial)")
    total_weeks: Optional[int] = Field(None, ge=1, le=52, description="Plan length; derived from dates if omitted")

    # Current fitness
    current_weekly_volume: float = Field(..., gt=0, le=200, description="Current weekly mileage")
    current_long_session_distance: float = Field(..., gt=0, le=50, description="Current long run (miles)")
    experience_level: str = Field("intermediate", description="beginner, intermediate, advanced")

    # Schedule preferences
    available_days: List[str] = Field(..., min_length=1, max_length=7, description="Weekday names")
    hard_session_days: List[str] = Field(default_factory=list, description="Quality days (subset of available)")
    long_session_day: str = Field(..., description="Weekday for the long session")
    preferred_cross_train_days: List[str] = Field(default_factory=list)
    cross_train_equipment: Optional[str] = Field(None, description="pool, elliptical, stationary_bike, ...")
    running_status: str = Field("active", description="active, crossTrainingOnly, transitioning, bikeOnly")

    # Paces
    goal_time_seconds: Optional[int] = Field(None, gt=0, description="Goal race time in seconds")
    recent_race_distance: Optional[str] = Field(None, description="Recent race distance")
    recent_race_time_seconds: Optional[int] = Field(None, gt=0, description="Recent race time in seconds")
    estimate_fitness: bool = Field(False, description="Estimate current paces from training volume")

    seed: Optional[int] = Field(None, description="Seed for reproducible workout selection")


class RaceDayRequest(BaseModel):
    """Existing plan weeks plus the race to place in the final week."""
    weeks: List[Dict[str, Any]] = Field(..., min_length=1)
    race_distance: str
    race_date: Optional[date] = None
    long_session_day: Optional[str] = None


class InjuryRecoveryRequest(BaseModel):
    """Existing plan weeks plus the injury window."""
    weeks: List[Dict[str, Any]] = Field(..., min_length=1)
    start_week: int = Field(..., ge=1, description="First week without running")
    duration_weeks: int = Field(..., ge=1, le=12, description="Weeks without running")
    reduce_by_days: int = Field(0, ge=0, le=6, description="Sessions to drop per week")
    equipment: List[str] = Field(..., min_length=1, description="Available cross-training equipment")
    seed: Optional[int] = None


class RevertInjuryRecoveryRequest(BaseModel):
    weeks: List[Dict[str, Any]]
    original_weeks: List[Dict[str, Any]]


# ============ Helpers ============

def _validation_error(e: PlanValidationError) -> ValidationError:
    return ValidationError(str(e), field=e.fields[0] if e.fields else None)


def _rng(seed: Optional[int]) -> Optional[random.Random]:
    if seed is None:
        seed = settings.PLAN_RANDOM_SEED
    return random.Random(seed) if seed is not None else None


def _parse_weeks(payload: List[Dict[str, Any]], field: str = "weeks") -> List[WeekPlan]:
    try:
        return [WeekPlan.from_dict(w) for w in payload]
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid week data: {e}", field=field)


# ============ Endpoints ============

@router.post("/generate", response_model=Dict[str, Any])
async def generate_plan(request: GeneratePlanRequest):
    """
    Generate a complete periodized plan.

    Returns plan overview, phases, weeks (7 days each), paces and summary.
    """
    data = request.model_dump(exclude={"seed"})
    try:
        profile = AthleteProfile.from_dict(data)
        profile.validate()
        total_weeks = profile.resolve_total_weeks()
        if not settings.MIN_PLAN_WEEKS <= total_weeks <= settings.MAX_PLAN_WEEKS:
            raise PlanValidationError(
                f"Plan length {total_weeks} weeks is outside "
                f"{settings.MIN_PLAN_WEEKS}-{settings.MAX_PLAN_WEEKS}",
                ["total_weeks"],
            )
        plan = PlanGenerator().generate(profile, rng=_rng(request.seed))
    except PlanValidationError as e:
        raise _validation_error(e)
    except RaceDayPlacementError as e:
        raise PlanGenerationError(str(e))

    logger.info(
        f"Plan generated: {plan.total_weeks} weeks {profile.race_distance.value}, "
        f"pace mode {plan.pace_mode.value}",
        extra={
            "extra_fields": {
                "endpoint": "generate",
                "total_weeks": plan.total_weeks,
                "race_distance": profile.race_distance.value,
                "seeded": request.seed is not None,
            }
        },
    )
    return plan.to_dict()


@router.post("/race-day", response_model=Dict[str, Any])
async def place_race_day(request: RaceDayRequest):
    """
    Replace a session in the final week with race day.
    """
    weeks = _parse_weeks(request.weeks)
    try:
        updated = apply_race_day(weeks, request.race_distance, request.race_date, request.long_session_day)
    except PlanValidationError as e:
        raise _validation_error(e)
    except RaceDayPlacementError as e:
        raise PlanGenerationError(str(e))

    return {"weeks": [w.to_dict() for w in updated]}


@router.post("/injury-recovery", response_model=Dict[str, Any])
async def start_injury_recovery(request: InjuryRecoveryRequest):
    """
    Rewrite the injury window as cross-training plus a return-to-running week.

    The response carries the original weeks so the change can be reverted.
    """
    weeks = _parse_weeks(request.weeks)
    try:
        result = apply_injury_recovery(
            weeks,
            start_week=request.start_week,
            duration_weeks=request.duration_weeks,
            reduce_by_days=request.reduce_by_days,
            equipment=request.equipment,
            rng=_rng(request.seed),
        )
    except PlanValidationError as e:
        raise _validation_error(e)
    except InjuryRecoveryError as e:
        raise PlanGenerationError(str(e))

    return result.to_dict()


@router.post("/injury-recovery/revert", response_model=Dict[str, Any])
async def cancel_injury_recovery(request: RevertInjuryRecoveryRequest):
    """
    Restore the plan as it was before injury recovery.
    """
    weeks = _parse_weeks(request.weeks)
    original = _parse_weeks(request.original_weeks, field="original_weeks")
    try:
        restored = revert_injury_recovery(weeks, original)
    except InjuryRecoveryError as e:
        raise PlanGenerationError(str(e))

    return {"weeks": [w.to_dict() for w in restored]}


@router.get("/options")
async def get_plan_options():
    """
    Supported values for building a generation request.
    """
    return {
        "race_distances": [d.value for d in RaceDistance],
        "experience_levels": [e.value for e in ExperienceLevel],
        "running_statuses": [s.value for s in RunningStatus],
        "equipment": [e.value for e in Equipment],
        "day_roles": [r.value for r in DayRole],
        "sessions_per_week": {
            d.value: sorted(ConfigService.get_session_bands(d)) for d in RaceDistance
        },
        "plan_weeks": {"min": settings.MIN_PLAN_WEEKS, "max": settings.MAX_PLAN_WEEKS},
    }
