"""Workout session generation.

Composes the split scheduler, exercise selector and progression engine into
a complete, unsaved session plan for one day.
"""

import logging
import random
from datetime import date, datetime
from typing import List, Optional, Sequence

from ..config import config
from .errors import (
    EmptyPoolError,
    InsufficientSelectionError,
    InvalidDateError,
    PlanInvariantError,
)
from .history import HistoryIndex
from .models import Category, Exercise, ExerciseSet, Preferences, Session, to_calendar_date
from .progression import ProgressionEngine
from .scheduler import SplitScheduler
from .selector import ExerciseSelector, target_exercise_count

logger = logging.getLogger(__name__)


class SessionAssembler:
    """Builds a planned session from selected exercises and their sets."""

    def assemble(
        self,
        day: date,
        category: Category,
        exercise_sets: Sequence[ExerciseSet],
    ) -> Session:
        seen_ids = set()
        for exercise_set in exercise_sets:
            exercise = exercise_set.exercise
            if not exercise_set.sets:
                raise PlanInvariantError(f"no sets planned for {exercise.name}")
            if exercise.id in seen_ids:
                raise PlanInvariantError(f"{exercise.name} planned twice")
            seen_ids.add(exercise.id)

        return Session(
            date=day,
            exercise_sets=list(exercise_sets),
            difficulty_rating=None,
            started_at=None,
            completed_at=None,
            category=category,
        )


def validate_date(value) -> date:
    """Normalize a workout date, rejecting missing or placeholder values."""
    if value is None or not isinstance(value, (date, datetime)):
        raise InvalidDateError(value)
    day = to_calendar_date(value)
    if day == date.min:
        raise InvalidDateError(value)
    return day


class WorkoutGenerator:
    """Generates workout sessions from a snapshot of the user's data.

    Args:
        preferences: Weekly training availability
        history: Previous sessions, typically the last six months
        pool: Available exercises
        rng: Random source for exercise selection
    """

    def __init__(
        self,
        preferences: Preferences,
        history: Sequence[Session],
        pool: Sequence[Exercise],
        rng: Optional[random.Random] = None,
    ):
        if not pool:
            raise EmptyPoolError()

        self.preferences = preferences
        self.pool = list(pool)
        self.history = HistoryIndex(history)
        self.rng = rng or random.Random(config.get_random_seed())

        self.scheduler = SplitScheduler(preferences, self.history)
        self.selector = ExerciseSelector(self.pool, self.history, self.rng)
        self.assembler = SessionAssembler()

    def generate(self, target_date) -> Session:
        """Generate the planned session for a date.

        Raises:
            InvalidDateError: If the date is missing
            NoExercisesForCategoryError: If the pool has nothing for the chosen category
            InsufficientSelectionError: If selection came back empty
        """
        day = validate_date(target_date)

        category = self.scheduler.determine_category(day)
        target_count = target_exercise_count(category)
        exercises = self.selector.select_exercises(category, day, target_count)
        if len(exercises) < config.MIN_EXERCISES_PER_SESSION:
            raise InsufficientSelectionError(category, len(exercises), config.MIN_EXERCISES_PER_SESSION)

        progression = ProgressionEngine(self.history, day)
        exercise_sets = [
            ExerciseSet(exercise=exercise, sets=progression.plan_for(exercise))
            for exercise in exercises
        ]

        session = self.assembler.assemble(day, category, exercise_sets)
        logger.info(
            f"Generated {category.value} workout for {day.isoformat()} "
            f"({progression.experience.value}): {[ex.name for ex in exercises]}"
        )
        return session


def generate(
    pool: Sequence[Exercise],
    history: Sequence[Session],
    preferences: Preferences,
    target_date,
    rng: Optional[random.Random] = None,
) -> Session:
    """Plan a workout session for ``target_date``.

    Pure given its inputs: nothing is persisted and ``history`` is not
    modified.
    """
    return WorkoutGenerator(preferences, history, pool, rng).generate(target_date)
