"""Workout service: fetches a user's data, plans sessions and records progress."""

import logging
import random
import threading
import weakref
from datetime import date, datetime, timedelta
from typing import List, Optional

from .config import config
from .db.database import Database, get_db
from .db.repositories import (
    ExerciseRepository,
    PreferencesRepository,
    SessionRepository,
)
from .planning.generator import generate, validate_date
from .planning.history import HistoryIndex
from .planning.models import Exercise, ExerciseSet, FeedbackLevel, Preferences, Session
from .planning.progression import ProgressionEngine

logger = logging.getLogger(__name__)

# One lock per (user, date) so concurrent starts of the same workout plan once;
# an entry disappears once no caller holds its lock
_generation_locks = weakref.WeakValueDictionary()
_generation_locks_guard = threading.Lock()


def _generation_lock(user_id: str, day: date) -> threading.Lock:
    with _generation_locks_guard:
        return _generation_locks.setdefault((user_id, day), threading.Lock())


class InvalidFeedbackError(Exception):
    """Difficulty rating outside the 1-5 scale."""


class WorkoutService:
    """Entry point for planning and logging workouts of one user."""

    def __init__(
        self,
        db: Optional[Database] = None,
        user_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ):
        self.db = db or get_db()
        self.user_id = user_id or config.USER_ID
        self.rng = rng

        self.exercises = ExerciseRepository(self.db)
        self.sessions = SessionRepository(self.db, self.user_id)
        self.preferences = PreferencesRepository(self.db, self.user_id)

    def get_preferences(self) -> Preferences:
        return self.preferences.get()

    def save_preferences(self, preferences: Preferences) -> None:
        self.preferences.set(preferences)

    def plan_session(self, day) -> Session:
        """Plan a workout for a day from the stored snapshot, without saving it.

        History covers ``HISTORY_LOOKBACK_DAYS`` before the day; sessions on or
        after the day itself are left out.
        """
        day = validate_date(day)
        return generate(
            pool=self.exercises.list(),
            history=self._history_before(day),
            preferences=self.preferences.get(),
            target_date=day,
            rng=self.rng,
        )

    def get_session(self, day) -> Session:
        """Get the stored workout for a day, or a fresh plan when none is stored."""
        day = validate_date(day)
        stored = self.sessions.get(day)
        if stored is not None:
            return stored
        return self.plan_session(day)

    def start_session(self, day, at: Optional[datetime] = None) -> Session:
        """Start the workout for a day, planning and saving it first if needed."""
        day = validate_date(day)
        with _generation_lock(self.user_id, day):
            if self.sessions.get(day) is None:
                self.sessions.save(self.plan_session(day))
            self.sessions.start(day, at)

        logger.info(f"Started workout for {self.user_id} on {day.isoformat()}")
        return self.sessions.get(day)

    def complete_session(self, day, at: Optional[datetime] = None) -> None:
        day = validate_date(day)
        self.sessions.complete(day, at)
        logger.info(f"Completed workout for {self.user_id} on {day.isoformat()}")

    def save_feedback(self, day, difficulty: int) -> None:
        """Store the 1-5 difficulty rating of a workout.

        Raises:
            InvalidFeedbackError: If the rating is outside 1-5
            SessionNotFoundError: If no workout is stored for the day
        """
        try:
            FeedbackLevel(difficulty)
        except ValueError:
            raise InvalidFeedbackError(f"Difficulty must be between 1 and 5, got {difficulty}")

        day = validate_date(day)
        self.sessions.save_feedback(day, difficulty)
        logger.info(f"Saved difficulty {difficulty} for workout on {day.isoformat()}")

    def update_set_weight(self, day, exercise_id: int, set_index: int, weight_kg: float) -> None:
        self.sessions.update_set_weight(validate_date(day), exercise_id, set_index, weight_kg)

    def record_set(
        self,
        day,
        exercise_id: int,
        set_index: int,
        completed_reps: int,
        weight_kg: Optional[float] = None,
        at: Optional[datetime] = None,
    ) -> None:
        """Record the reps of a performed set, optionally correcting its weight."""
        day = validate_date(day)
        if weight_kg is not None:
            self.sessions.update_set_weight(day, exercise_id, set_index, weight_kg)
        self.sessions.update_completed_reps(day, exercise_id, set_index, completed_reps, at)
        logger.debug(
            f"Recorded set {set_index + 1} of exercise {exercise_id} on {day.isoformat()}: "
            f"{completed_reps} reps"
        )

    def mark_warmup_complete(self, day, exercise_id: int, at: Optional[datetime] = None) -> None:
        self.sessions.mark_warmup_complete(validate_date(day), exercise_id, at)

    def add_exercise(self, day, exercise_id: int) -> Session:
        """Add an exercise to the stored workout of a day.

        Its sets are planned from the exercise's own history, as if the
        planner had picked it.

        Raises:
            SessionNotFoundError: If no workout is stored for the day
            ExerciseNotFoundError: If the exercise does not exist or is
                already part of the workout
        """
        day = validate_date(day)
        exercise = self.exercises.get(exercise_id)
        self.sessions.add_exercise(day, self._plan_exercise(day, exercise))
        return self.sessions.get(day)

    def swap_exercise(self, day, current_exercise_id: int, new_exercise_id: int) -> Session:
        """Replace an exercise of the stored workout with a freshly planned one."""
        day = validate_date(day)
        exercise = self.exercises.get(new_exercise_id)
        self.sessions.swap_exercise(day, current_exercise_id, self._plan_exercise(day, exercise))
        return self.sessions.get(day)

    def find_compatible_exercises(self, exercise_id: int) -> List[Exercise]:
        return self.exercises.find_compatible(exercise_id)

    def weekly_schedule(self, week_of: Optional[date] = None) -> List[Session]:
        """Monday to Sunday of the week containing ``week_of`` (default today).

        Stored workouts are returned as they are; other days are planned.
        """
        week_of = validate_date(week_of or date.today())
        monday = week_of - timedelta(days=week_of.weekday())
        return [self.get_session(monday + timedelta(days=i)) for i in range(7)]

    def history(self, days: Optional[int] = None) -> List[Session]:
        """Stored sessions of the last ``days`` days (default lookback), oldest first."""
        since = date.today() - timedelta(days=days or config.HISTORY_LOOKBACK_DAYS)
        return self.sessions.list(since)

    def _history_before(self, day: date) -> List[Session]:
        since = day - timedelta(days=config.HISTORY_LOOKBACK_DAYS)
        return [s for s in self.sessions.list(since) if s.date < day]

    def _plan_exercise(self, day: date, exercise: Exercise) -> ExerciseSet:
        engine = ProgressionEngine(HistoryIndex(self._history_before(day)), day)
        return ExerciseSet(exercise=exercise, sets=engine.plan_for(exercise))
