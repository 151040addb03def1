"""Tests for exercise selection."""

import random
import pytest
from datetime import timedelta

from workout_planner.planning.errors import NoExercisesForCategoryError
from workout_planner.planning.history import HistoryIndex
from workout_planner.planning.models import Category, Exercise
from workout_planner.planning.selector import (
    ExerciseSelector,
    covers_muscle_group,
    target_exercise_count,
)
from builders import (
    BENCH_PRESS,
    CABLE_FLY,
    CALF_RAISE,
    CURL,
    DEADLIFT,
    LATERAL_RAISE,
    LEG_CURL,
    LEG_PRESS,
    LOWER_POOL,
    MONDAY,
    POOL,
    PULLDOWN,
    PUSHDOWN,
    ROW,
    UPPER_POOL,
    completed_session,
    performed,
)

LAST_MONDAY = MONDAY - timedelta(days=7)


def make_selector(pool=POOL, history=(), seed=42):
    return ExerciseSelector(pool, HistoryIndex(list(history)), random.Random(seed))


class TestMuscleGroups:
    """Test muscle group coverage helpers."""

    def test_back_covers_lats_and_upper_back(self):
        assert covers_muscle_group(PULLDOWN, "Back")
        assert not covers_muscle_group(CURL, "Back")

    def test_quadriceps_alias(self):
        assert covers_muscle_group(LEG_PRESS, "Quadriceps")

    def test_target_counts(self):
        assert target_exercise_count(Category.FULL_BODY) == 6
        assert target_exercise_count(Category.UPPER) == 5
        assert target_exercise_count(Category.LOWER) == 5


class TestCategoryFilter:
    """Test pool filtering by category."""

    def test_split_categories(self):
        selector = make_selector()
        assert {ex.id for ex in selector.filter_by_category(Category.LOWER)} == {ex.id for ex in LOWER_POOL}
        assert {ex.id for ex in selector.filter_by_category(Category.UPPER)} == {ex.id for ex in UPPER_POOL}

    def test_full_body_uses_whole_pool(self):
        selector = make_selector()
        assert len(selector.filter_by_category(Category.FULL_BODY)) == len(POOL)

    def test_duplicate_ids_are_dropped(self):
        selector = make_selector(pool=[BENCH_PRESS, BENCH_PRESS, CURL])
        assert [ex.id for ex in selector.filter_by_category(Category.UPPER)] == [BENCH_PRESS.id, CURL.id]

    def test_missing_category_raises(self):
        selector = make_selector(pool=UPPER_POOL)
        with pytest.raises(NoExercisesForCategoryError) as exc_info:
            selector.select_exercises(Category.LOWER, MONDAY)
        assert exc_info.value.category is Category.LOWER


class TestExerciseSelector:
    """Test continuity, balance and uniqueness of the selection."""

    def test_selection_is_unique_and_sized(self):
        for seed in range(20):
            selected = make_selector(seed=seed).select_exercises(Category.FULL_BODY, MONDAY)
            ids = [ex.id for ex in selected]
            assert len(ids) == 6
            assert len(set(ids)) == len(ids)

    def test_selection_stays_in_category(self):
        selected = make_selector().select_exercises(Category.UPPER, MONDAY)
        assert all(ex.category is Category.UPPER for ex in selected)

    def test_small_pool_returns_everything(self):
        selected = make_selector().select_exercises(Category.LOWER, MONDAY)
        assert {ex.id for ex in selected} == {ex.id for ex in LOWER_POOL}

    def test_zero_target_returns_empty(self):
        assert make_selector().select_exercises(Category.UPPER, MONDAY, target_count=0) == []

    def test_muscle_groups_covered_without_history(self):
        selected = make_selector().select_exercises(Category.LOWER, MONDAY, target_count=3)
        for muscle_group in ("Quadriceps", "Hamstrings", "Calves"):
            assert any(covers_muscle_group(ex, muscle_group) for ex in selected)

    def test_continuity_from_same_weekday(self):
        """At least four of five exercises carry over from last Monday."""
        anchor_exercises = [BENCH_PRESS, PULLDOWN, CURL, PUSHDOWN, LATERAL_RAISE]
        history = [completed_session(LAST_MONDAY, *[performed(ex) for ex in anchor_exercises])]

        for seed in range(10):
            selected = make_selector(history=history, seed=seed).select_exercises(Category.UPPER, MONDAY, 5)
            carried = {ex.id for ex in selected} & {ex.id for ex in anchor_exercises}
            assert len(carried) >= 4

    def test_continuity_prefers_compound_movements(self):
        anchor = completed_session(
            LAST_MONDAY,
            performed(CURL), performed(PUSHDOWN), performed(LATERAL_RAISE),
            performed(CABLE_FLY), performed(BENCH_PRESS), performed(ROW),
        )
        selector = make_selector()

        carried = selector.select_continuity(anchor, selector.filter_by_category(Category.UPPER), 5)

        assert len(carried) == 4
        assert carried[:2] == [BENCH_PRESS, ROW]

    def test_continuity_capped_by_anchor_size(self):
        history = [completed_session(LAST_MONDAY, performed(BENCH_PRESS), performed(CURL))]
        selected = make_selector(history=history).select_exercises(Category.UPPER, MONDAY, 5)

        assert selected[:2] == [BENCH_PRESS, CURL]
        assert len(selected) == 5

    def test_continuity_ignores_exercises_outside_pool(self):
        retired = Exercise(99, "Smith Machine Press", Category.UPPER, primary_muscle_groups=("Chest",))
        anchor = completed_session(LAST_MONDAY, performed(retired), performed(BENCH_PRESS))
        selector = make_selector()

        carried = selector.select_continuity(anchor, selector.filter_by_category(Category.UPPER), 5)
        assert carried == [BENCH_PRESS]

    def test_recently_trained_exercises_are_filled_last(self):
        # Thursday's session makes these recent without being a Monday anchor
        recent = [LEG_PRESS, LEG_CURL]
        history = [completed_session(MONDAY - timedelta(days=4), *[performed(ex) for ex in recent])]

        selected = make_selector(history=history).select_exercises(Category.LOWER, MONDAY, 1)
        assert selected == [CALF_RAISE]

    def test_recent_exercises_used_when_nothing_else_left(self):
        history = [completed_session(MONDAY - timedelta(days=4), *[performed(ex) for ex in LOWER_POOL])]
        selected = make_selector(history=history).select_exercises(Category.LOWER, MONDAY, 3)
        assert len(selected) == 3

    def test_same_seed_same_selection(self):
        first = make_selector(seed=7).select_exercises(Category.FULL_BODY, MONDAY)
        second = make_selector(seed=7).select_exercises(Category.FULL_BODY, MONDAY)
        assert first == second

    def test_full_body_pool_includes_full_body_exercises(self):
        selector = make_selector(pool=[DEADLIFT, BENCH_PRESS])
        selected = selector.select_exercises(Category.FULL_BODY, MONDAY)
        assert set(selected) == {DEADLIFT, BENCH_PRESS}
