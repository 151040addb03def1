"""Exercise selection with week-over-week continuity and muscle group balance."""

import logging
import math
import random
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import config
from .errors import NoExercisesForCategoryError
from .history import HistoryIndex
from .models import Category, Exercise, Session

logger = logging.getLogger(__name__)


# Muscle groups each category should cover, most important first
TARGET_MUSCLE_GROUPS: Dict[Category, Tuple[str, ...]] = {
    Category.UPPER: ("Chest", "Back", "Shoulders", "Biceps", "Triceps"),
    Category.LOWER: ("Quadriceps", "Hamstrings", "Glutes", "Calves"),
    Category.FULL_BODY: (
        "Chest", "Back", "Shoulders", "Quadriceps", "Hamstrings", "Glutes",
        "Biceps", "Triceps", "Calves",
    ),
}

# Reference data names more specific muscles than the coverage targets
MUSCLE_GROUP_ALIASES: Dict[str, Tuple[str, ...]] = {
    "Back": ("Back", "Upper Back", "Lats"),
    "Quadriceps": ("Quadriceps", "Quads"),
}


def covers_muscle_group(exercise: Exercise, muscle_group: str) -> bool:
    """Check if an exercise primarily works a target muscle group or one of its aliases."""
    names = MUSCLE_GROUP_ALIASES.get(muscle_group, (muscle_group,))
    return any(exercise.targets(name) for name in names)


def target_exercise_count(category: Category) -> int:
    return config.get_target_exercise_count(getattr(category, "value", category))


class ExerciseSelector:
    """Picks the exercises of a session from the exercise pool.

    Roughly 80% of the exercises carry over from the last session on the same
    weekday, compound movements first, so progress stays comparable week to
    week. The remaining slots go to exercises that have not been trained
    recently, chosen to cover the category's muscle groups before falling
    back to a random pick.
    """

    def __init__(
        self,
        pool: Sequence[Exercise],
        history: HistoryIndex,
        rng: Optional[random.Random] = None,
    ):
        self.pool = list(pool)
        self.history = history
        self.rng = rng or random.Random()

    def filter_by_category(self, category: Category) -> List[Exercise]:
        """Exercises matching the category; full body sessions use the whole pool."""
        candidates = []
        seen_ids = set()
        for exercise in self.pool:
            if exercise.id in seen_ids:
                continue
            if category is Category.FULL_BODY or exercise.category is category:
                candidates.append(exercise)
                seen_ids.add(exercise.id)
        return candidates

    def select_exercises(
        self,
        category: Category,
        day: date,
        target_count: Optional[int] = None,
    ) -> List[Exercise]:
        """Select up to ``target_count`` unique exercises for a session.

        Args:
            category: Workout category of the session
            day: Date of the session
            target_count: Number of exercises wanted, defaults to the category's count

        Returns:
            Selected exercises in session order

        Raises:
            NoExercisesForCategoryError: If no exercise matches the category
        """
        if target_count is None:
            target_count = target_exercise_count(category)

        candidates = self.filter_by_category(category)
        if not candidates:
            raise NoExercisesForCategoryError(category)
        if target_count <= 0:
            return []

        anchor = self.history.same_weekday_anchor(day)
        selected = self.select_continuity(anchor, candidates, target_count)

        if len(selected) < target_count:
            selected_ids = {ex.id for ex in selected}
            remaining = [ex for ex in candidates if ex.id not in selected_ids]
            recent_ids = self.history.recently_trained_ids(day)

            # The two tiers partition the remaining pool, so together they are
            # the full-pool fallback
            tiers = [
                [ex for ex in remaining if ex.id not in recent_ids],
                [ex for ex in remaining if ex.id in recent_ids],
            ]
            for tier in tiers:
                if len(selected) >= target_count:
                    break
                selected = self._fill_from_tier(tier, selected, category, target_count)

        if len(selected) < target_count:
            logger.warning(
                f"Only {len(selected)} of {target_count} exercises available for {category.value}"
            )

        logger.debug(
            f"Selected {[ex.name for ex in selected]} for {category.value} on {day.isoformat()}"
        )
        return selected

    def select_continuity(
        self,
        anchor: Optional[Session],
        candidates: Sequence[Exercise],
        target_count: int,
    ) -> List[Exercise]:
        """Carry exercises over from the previous same-weekday session.

        Only anchor exercises still present in the candidate pool are eligible;
        the pool's copy of the exercise is used so reference data stays current.
        """
        if anchor is None or target_count <= 0:
            return []

        candidates_by_id = {ex.id: ex for ex in candidates}
        previous = []
        for exercise_set in anchor.exercise_sets:
            exercise = candidates_by_id.get(exercise_set.exercise.id)
            if exercise is not None and exercise not in previous:
                previous.append(exercise)

        continuity_count = math.ceil(target_count * config.CONTINUITY_PERCENTAGE)
        continuity_count = min(continuity_count, target_count, len(previous))

        selected: List[Exercise] = []
        for compound_tier in (True, False):
            for exercise in previous:
                if len(selected) >= continuity_count:
                    break
                if exercise.is_compound == compound_tier and exercise not in selected:
                    selected.append(exercise)

        return selected

    def _fill_from_tier(
        self,
        tier: Sequence[Exercise],
        selected: List[Exercise],
        category: Category,
        target_count: int,
    ) -> List[Exercise]:
        selected = list(selected)
        selected_ids = {ex.id for ex in selected}
        available = [ex for ex in tier if ex.id not in selected_ids]

        # Cover muscle groups nothing selected so far works
        for muscle_group in TARGET_MUSCLE_GROUPS.get(category, ()):
            if len(selected) >= target_count:
                return selected
            if any(covers_muscle_group(ex, muscle_group) for ex in selected):
                continue
            for exercise in available:
                if covers_muscle_group(exercise, muscle_group):
                    selected.append(exercise)
                    available.remove(exercise)
                    break

        open_slots = target_count - len(selected)
        if open_slots > 0 and available:
            shuffled = list(available)
            self.rng.shuffle(shuffled)
            selected.extend(shuffled[:open_slots])

        return selected
