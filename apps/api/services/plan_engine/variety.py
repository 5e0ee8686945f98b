"""
Workout Variety Selector

Chooses a named workout per category while avoiding recent repeats.

History is owned by one plan-generation session: create a fresh
VarietyHistory per plan, never share it between athletes. Randomness
comes from an injected random.Random so plans can be reproduced.

Usage:
    selector = WorkoutVarietySelector(catalog, VarietyHistory(), random.Random(42))
    workout = selector.select("tempo.TRADITIONAL_TEMPO", week_number=3, total_weeks=16)
    workout.name        # -> "Sandwich Tempo"
"""

import logging
import random
import re
from dataclasses import replace
from typing import Dict, List, Optional

from .catalog import WorkoutCatalog, WorkoutDescriptor
from .constants import PROGRESSION_CAP, VARIETY_HISTORY_LIMIT

logger = logging.getLogger(__name__)

# "4-8 x 800m", "10–30 × (1 min on ...)"
REP_RANGE_PATTERN = re.compile(r"(\d+)\s*[-–]\s*(\d+)(\s*[x×])")


class VarietyHistory:
    """Recently used workout names per category, newest last."""

    def __init__(self, limit: int = VARIETY_HISTORY_LIMIT):
        self.limit = limit
        self._recent: Dict[str, List[str]] = {}

    def recent(self, category: str) -> List[str]:
        return list(self._recent.get(category, []))

    def record(self, category: str, name: str):
        names = self._recent.setdefault(category, [])
        names.append(name)
        del names[:-self.limit]

    def reset(self, category: Optional[str] = None):
        if category is None:
            self._recent.clear()
        else:
            self._recent.pop(category, None)

    def to_dict(self) -> Dict[str, List[str]]:
        return {k: list(v) for k, v in self._recent.items()}


def progressive_count(low: int, high: int, week_number: int, total_weeks: int) -> int:
    """Rep count moving linearly from low to high, maxing out at 75% of the plan."""
    if total_weeks <= 0:
        return low
    progress = min(1.0, week_number / (total_weeks * PROGRESSION_CAP))
    return int(round(low + (high - low) * progress))


def apply_rep_progression(text: Optional[str], week_number: int, total_weeks: int) -> Optional[str]:
    """Replace the first rep range in a prescription with this week's count."""
    if not text:
        return text

    def substitute(match):
        count = progressive_count(int(match.group(1)), int(match.group(2)), week_number, total_weeks)
        return f"{count}{match.group(3)}"

    return REP_RANGE_PATTERN.sub(substitute, text, count=1)


class WorkoutVarietySelector:
    """
    Pick a workout for a category:
    - Categories with 2 or fewer workouts skip only the last one used
    - Larger categories skip the last 2 used
    - If that leaves nothing, the category history resets
    """

    def __init__(
        self,
        catalog: WorkoutCatalog,
        history: Optional[VarietyHistory] = None,
        rng: Optional[random.Random] = None,
    ):
        self.catalog = catalog
        self.history = history if history is not None else VarietyHistory()
        self.rng = rng if rng is not None else random.Random()

    def select(
        self,
        category: Optional[str],
        week_number: int,
        total_weeks: int,
        placeholder_label: str = "Workout",
    ) -> WorkoutDescriptor:
        candidates = self.catalog.entries(category)
        if not candidates:
            return self.catalog.placeholder(category, placeholder_label)

        recent = self.history.recent(category)
        exclude_count = 1 if len(candidates) <= 2 else 2
        excluded = set(recent[-exclude_count:]) if recent else set()

        available = [c for c in candidates if c.name not in excluded]
        if not available:
            logger.debug(f"Variety history exhausted for {category}; resetting")
            self.history.reset(category)
            available = candidates

        choice = self.rng.choice(available)
        self.history.record(category, choice.name)

        structure = apply_rep_progression(choice.structure, week_number, total_weeks)
        if structure != choice.structure:
            choice = replace(choice, structure=structure)
        return choice
