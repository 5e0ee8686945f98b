"""
Workout Catalog

Read-only view over the named workout descriptors in workout_catalog.yaml.

Running categories are keyed "<workout type>.<SUB_CATEGORY>"
(e.g. "tempo.TRADITIONAL_TEMPO"); cross-training categories are keyed
"<equipment>.<SESSION TYPE>" (e.g. "rowing.INTERVALS").

A lookup that finds nothing degrades to a placeholder descriptor instead
of failing the plan.

Usage:
    catalog = WorkoutCatalog()
    category = catalog.running_category(WorkoutType.TEMPO, PhaseName.BASE)
    catalog.entries(category)   # -> [WorkoutDescriptor(name="Classic Tempo Run", ...), ...]

    category = catalog.cross_training_category(Equipment.ROWING, WorkoutType.HILLS)
    # -> "rowing.INTERVALS" (rowing has no hill sessions)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import ConfigService
from .constants import (
    EQUIPMENT_CATEGORY_FALLBACKS,
    Equipment,
    PhaseName,
    RUNNING_CATEGORY_BY_PHASE,
    WorkoutType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkoutDescriptor:
    """One named workout from the catalog."""
    name: str
    category: str
    duration: Optional[str] = None
    structure: Optional[str] = None
    focus: Optional[str] = None
    equipment: Optional[str] = None
    is_placeholder: bool = False

    @property
    def ref(self) -> str:
        """Opaque identifier into the catalog."""
        return f"{self.category}:{self.name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ref": self.ref,
            "name": self.name,
            "category": self.category,
            "duration": self.duration,
            "structure": self.structure,
            "focus": self.focus,
            "equipment": self.equipment,
            "is_placeholder": self.is_placeholder,
        }


# Cross-training session type for each training intent
CROSS_TRAINING_SESSION_TYPES: Dict[WorkoutType, str] = {
    WorkoutType.EASY: "EASY",
    WorkoutType.RECOVERY: "RECOVERY",
    WorkoutType.LONG: "LONG",
    WorkoutType.TEMPO: "TEMPO",
    WorkoutType.INTERVALS: "INTERVALS",
    WorkoutType.HILLS: "HILLS",
    WorkoutType.AEROBIC_POWER: "AEROBIC_POWER",
}


class WorkoutCatalog:
    """
    Category -> ordered list of workout descriptors.

    The catalog is never mutated by the engine.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        if data is None:
            data = ConfigService.get_catalog()
        self._categories: Dict[str, List[WorkoutDescriptor]] = {}

        for workout_type, groups in (data.get("running") or {}).items():
            for sub_category, entries in (groups or {}).items():
                self._add(f"{workout_type}.{sub_category}", entries, None)

        for equipment, groups in (data.get("cross_training") or {}).items():
            for session_type, entries in (groups or {}).items():
                self._add(f"{equipment}.{session_type}", entries, equipment)

        logger.debug(f"Workout catalog loaded: {len(self._categories)} categories")

    def _add(self, category: str, entries: List[Dict[str, Any]], equipment: Optional[str]):
        self._categories[category] = [
            WorkoutDescriptor(
                name=entry["name"],
                category=category,
                duration=entry.get("duration"),
                structure=entry.get("structure"),
                focus=entry.get("focus"),
                equipment=equipment,
            )
            for entry in entries or []
            if entry and entry.get("name")
        ]

    @property
    def categories(self) -> List[str]:
        return list(self._categories)

    def has_category(self, category: Optional[str]) -> bool:
        return bool(category) and bool(self._categories.get(category))

    def entries(self, category: Optional[str]) -> List[WorkoutDescriptor]:
        if not category:
            return []
        return list(self._categories.get(category, []))

    def running_category(self, workout_type: WorkoutType, phase: PhaseName) -> str:
        """Sub-category for a running workout in a given phase."""
        by_phase = RUNNING_CATEGORY_BY_PHASE.get(workout_type)
        if by_phase:
            return f"{workout_type.value}.{by_phase[phase]}"
        return f"{workout_type.value}.{workout_type.value.upper()}"

    def cross_training_category(
        self,
        equipment: Optional[Equipment],
        workout_type: WorkoutType,
    ) -> Optional[str]:
        """
        Category for a cross-training session on the given equipment.

        Equipment without an equivalent session (no hills on a rowing
        machine) maps to the closest supported session type.
        """
        if equipment is None:
            return None

        workout_type = EQUIPMENT_CATEGORY_FALLBACKS.get(equipment, {}).get(workout_type, workout_type)
        session_type = CROSS_TRAINING_SESSION_TYPES.get(workout_type, "EASY")
        category = f"{equipment.value}.{session_type}"

        if not self.has_category(category) and session_type in ("HILLS", "AEROBIC_POWER"):
            fallback = f"{equipment.value}.INTERVALS"
            logger.debug(f"{category} not in catalog, using {fallback}")
            category = fallback
        return category

    def placeholder(self, category: Optional[str], label: str) -> WorkoutDescriptor:
        """Generic stand-in used when a category has no workouts."""
        logger.warning(f"No catalog workouts for category {category!r}; using placeholder")
        return WorkoutDescriptor(
            name=label,
            category=category or "unknown",
            structure=None,
            focus=None,
            is_placeholder=True,
        )
