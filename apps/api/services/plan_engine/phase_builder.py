"""
Phase Builder

Partitions a plan into contiguous Base / Build / Peak / Taper blocks.

- Plans of 8 weeks or less: Base 40%, Build 40%, Peak 20%, no Taper
- Longer plans: Base 40%, Build 35%, Peak 15%, Taper 10%

Each block is rounded up, except the last, which absorbs the remainder.
Very short plans compress: earlier blocks give up weeks so later blocks
keep at least one, and blocks that cannot get a week are dropped.

Usage:
    builder = PhaseBuilder()
    phases = builder.build_phases(total_weeks=16)
    builder.phase_for_week(phases, 9).name   # -> PhaseName.BUILD
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List

from .constants import (
    PHASE_FOCUS,
    PhaseName,
    SHORT_PLAN_MAX_WEEKS,
    SHORT_PLAN_PROPORTIONS,
    STANDARD_PLAN_PROPORTIONS,
)
from .errors import PlanValidationError

logger = logging.getLogger(__name__)


@dataclass
class PlanPhase:
    """A single training phase (inclusive week range)."""
    name: PhaseName
    start_week: int
    end_week: int
    focus: str

    @property
    def weeks(self) -> List[int]:
        return list(range(self.start_week, self.end_week + 1))

    @property
    def length(self) -> int:
        return self.end_week - self.start_week + 1

    def contains(self, week: int) -> bool:
        return self.start_week <= week <= self.end_week

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name.value,
            "start_week": self.start_week,
            "end_week": self.end_week,
            "weeks": self.length,
            "focus": self.focus,
        }


class PhaseBuilder:
    """
    Build the phase structure for a plan.
    """

    def build_phases(self, total_weeks: int) -> List[PlanPhase]:
        """
        Split 1..total_weeks into phases.

        Args:
            total_weeks: Plan length (>= 1)

        Returns:
            Contiguous, non-overlapping phases covering every week
        """
        if total_weeks is None or total_weeks < 1:
            raise PlanValidationError("Plan must be at least one week long", ["total_weeks"])

        if total_weeks <= SHORT_PLAN_MAX_WEEKS:
            proportions = SHORT_PLAN_PROPORTIONS
        else:
            proportions = STANDARD_PLAN_PROPORTIONS

        names = list(proportions)
        phases = []
        remaining = total_weeks
        start = 1

        for index, name in enumerate(names):
            if remaining <= 0:
                break

            later = len(names) - index - 1
            if later == 0:
                length = remaining
            else:
                # Leave one week for each later block while there is room
                reserve = min(later, remaining - 1)
                length = min(math.ceil(proportions[name] * total_weeks), remaining - reserve)

            phases.append(PlanPhase(
                name=name,
                start_week=start,
                end_week=start + length - 1,
                focus=PHASE_FOCUS[name],
            ))
            start += length
            remaining -= length

        logger.debug(
            f"Phases for {total_weeks} weeks: "
            + ", ".join(f"{p.name.value} {p.start_week}-{p.end_week}" for p in phases)
        )
        return phases

    @staticmethod
    def phase_for_week(phases: List[PlanPhase], week: int) -> PlanPhase:
        for phase in phases:
            if phase.contains(week):
                return phase
        raise PlanValidationError(f"Week {week} is outside the plan", ["week_number"])
