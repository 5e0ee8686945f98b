"""
Workout Catalog and Variety Tests

- Category lookup for running and cross-training sessions
- No back-to-back repeats within a category
- Rep ranges progress across the plan
- Seeded selection is reproducible
"""

import random

from services.plan_engine import (
    Equipment,
    PhaseName,
    VarietyHistory,
    WorkoutCatalog,
    WorkoutType,
    WorkoutVarietySelector,
)
from services.plan_engine.variety import apply_rep_progression, progressive_count


def small_catalog(*names, structure="Warmup + 4-6 x 5 min @ tempo + Cooldown"):
    return WorkoutCatalog(data={
        "running": {
            "tempo": {
                "TEST": [{"name": name, "structure": structure} for name in names],
            },
        },
    })


def pick(selector, count, category="tempo.TEST"):
    return [selector.select(category, week, 16).name for week in range(1, count + 1)]


class TestWorkoutCatalog:

    def test_running_category_by_phase(self, catalog):
        assert catalog.running_category(WorkoutType.TEMPO, PhaseName.BASE) == "tempo.TRADITIONAL_TEMPO"
        assert catalog.running_category(WorkoutType.INTERVALS, PhaseName.BUILD) == "intervals.VO2_MAX"
        assert catalog.running_category(WorkoutType.LONG, PhaseName.PEAK) == "long.RACE_SIMULATION"
        assert catalog.running_category(WorkoutType.EASY, PhaseName.PEAK) == "easy.EASY"

    def test_shipped_catalog_covers_running_categories(self, catalog):
        for workout_type in (WorkoutType.TEMPO, WorkoutType.INTERVALS, WorkoutType.HILLS, WorkoutType.LONG):
            for phase in PhaseName:
                category = catalog.running_category(workout_type, phase)
                assert catalog.has_category(category), f"{category} missing from catalog"

    def test_cross_training_category(self, catalog):
        assert catalog.cross_training_category(Equipment.STATIONARY_BIKE, WorkoutType.HILLS) == \
            "stationary_bike.HILLS"
        assert catalog.cross_training_category(Equipment.POOL, WorkoutType.LONG) == "pool.LONG"

    def test_equipment_without_hills_uses_intervals(self, catalog):
        assert catalog.cross_training_category(Equipment.ROWING, WorkoutType.HILLS) == "rowing.INTERVALS"
        assert catalog.cross_training_category(Equipment.POOL, WorkoutType.AEROBIC_POWER) == \
            "pool.INTERVALS"

    def test_no_equipment_has_no_category(self, catalog):
        assert catalog.cross_training_category(None, WorkoutType.EASY) is None

    def test_shipped_catalog_covers_every_equipment(self, catalog):
        for equipment in Equipment:
            for workout_type in (WorkoutType.EASY, WorkoutType.TEMPO, WorkoutType.INTERVALS,
                                 WorkoutType.HILLS, WorkoutType.LONG, WorkoutType.RECOVERY):
                category = catalog.cross_training_category(equipment, workout_type)
                assert catalog.has_category(category), f"{category} missing from catalog"

    def test_descriptor_ref(self):
        workout = small_catalog("Alpha").entries("tempo.TEST")[0]
        assert workout.ref == "tempo.TEST:Alpha"
        assert not workout.is_placeholder


class TestVarietySelection:

    def test_large_category_skips_last_two(self):
        selector = WorkoutVarietySelector(small_catalog("A", "B", "C", "D"), rng=random.Random(1))
        names = pick(selector, 20)

        for i in range(2, len(names)):
            assert names[i] not in names[i - 2:i], f"{names[i]} repeated within 2 picks: {names}"

    def test_two_workouts_alternate(self):
        selector = WorkoutVarietySelector(small_catalog("A", "B"), rng=random.Random(3))
        names = pick(selector, 8)

        for previous, current in zip(names, names[1:]):
            assert previous != current

    def test_single_workout_resets_history(self):
        selector = WorkoutVarietySelector(small_catalog("Only"), rng=random.Random(3))
        names = pick(selector, 4)

        assert names == ["Only"] * 4
        assert selector.history.recent("tempo.TEST") == ["Only"]

    def test_empty_category_gives_placeholder(self):
        selector = WorkoutVarietySelector(small_catalog("A"), rng=random.Random(3))
        workout = selector.select("tempo.MISSING", 1, 10, placeholder_label="Quality Session")

        assert workout.is_placeholder
        assert workout.name == "Quality Session"
        assert workout.category == "tempo.MISSING"

    def test_seeded_selection_is_reproducible(self):
        catalog = small_catalog("A", "B", "C", "D", "E")
        first = pick(WorkoutVarietySelector(catalog, VarietyHistory(), random.Random(7)), 12)
        second = pick(WorkoutVarietySelector(catalog, VarietyHistory(), random.Random(7)), 12)
        assert first == second

    def test_histories_are_independent(self):
        catalog = small_catalog("A", "B", "C")
        one = WorkoutVarietySelector(catalog, VarietyHistory(), random.Random(5))
        two = WorkoutVarietySelector(catalog, VarietyHistory(), random.Random(5))

        pick(one, 6)
        assert two.history.recent("tempo.TEST") == []

    def test_selected_structure_is_progressed(self):
        selector = WorkoutVarietySelector(small_catalog("A"), rng=random.Random(1))
        workout = selector.select("tempo.TEST", 12, 16)

        assert workout.structure == "Warmup + 6 x 5 min @ tempo + Cooldown"
        # Catalog entry is untouched
        assert small_catalog("A").entries("tempo.TEST")[0].structure.startswith("Warmup + 4-6 x")


class TestVarietyHistory:

    def test_keeps_last_five(self):
        history = VarietyHistory()
        for name in "ABCDEFG":
            history.record("tempo.TEST", name)
        assert history.recent("tempo.TEST") == ["C", "D", "E", "F", "G"]

    def test_reset_one_category(self):
        history = VarietyHistory()
        history.record("tempo.TEST", "A")
        history.record("long.TEST", "B")
        history.reset("tempo.TEST")

        assert history.recent("tempo.TEST") == []
        assert history.recent("long.TEST") == ["B"]


class TestRepProgression:

    def test_progressive_count(self):
        assert progressive_count(4, 6, 0, 16) == 4
        assert progressive_count(4, 6, 6, 16) == 5
        assert progressive_count(4, 6, 12, 16) == 6
        assert progressive_count(4, 6, 16, 16) == 6

    def test_rewrites_first_range_only(self):
        text = "Warmup + 3-4 x 1 mile, then 4-6 x 200m strides"
        assert apply_rep_progression(text, 0, 16) == "Warmup + 3 x 1 mile, then 4-6 x 200m strides"

    def test_text_without_range_unchanged(self):
        text = "15-20 min easy warmup + 20-40 min tempo"
        assert apply_rep_progression(text, 8, 16) == text
        assert apply_rep_progression(None, 8, 16) is None

    def test_unicode_multiplication_sign(self):
        assert apply_rep_progression("10–30 × (1 min on)", 12, 16) == "30 × (1 min on)"
