"""Repositories translating between database records and planning models.

Each repository opens its own database session per call and returns plain
planning dataclasses, so nothing handed to the planner is bound to SQLAlchemy.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.orm import Session as DBSession

from ..config import config
from ..planning.models import (
    WEEKDAYS,
    Category,
    Exercise,
    ExerciseSet,
    ExerciseType,
    FeedbackLevel,
    Preferences,
    Session,
    Set,
)
from .database import Database, get_db
from .models import (
    ExerciseMuscleGroup,
    ExerciseRecord,
    ExerciseSetRecord,
    MuscleGroup,
    WorkoutExerciseRecord,
    WorkoutPreferencesRecord,
    WorkoutSessionRecord,
)

logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """No workout session is stored for the requested date."""


class ExerciseNotFoundError(Exception):
    """The exercise (or one of its sets) does not exist."""


def to_exercise(record: ExerciseRecord) -> Exercise:
    """Convert an exercise record to planning reference data."""
    return Exercise(
        id=record.id,
        name=record.name,
        category=Category(record.category),
        exercise_type=ExerciseType(record.exercise_type),
        primary_muscle_groups=tuple(
            link.muscle_group_name for link in record.muscle_groups if link.is_primary
        ),
        secondary_muscle_groups=tuple(
            link.muscle_group_name for link in record.muscle_groups if not link.is_primary
        ),
        description_markdown=record.description_markdown or "",
    )


def to_session(record: WorkoutSessionRecord) -> Session:
    """Convert a workout session record, including its exercises and sets."""
    exercise_sets = []
    for workout_exercise in record.exercises:
        exercise_sets.append(
            ExerciseSet(
                exercise=to_exercise(workout_exercise.exercise),
                sets=[
                    Set(
                        min_reps=s.min_reps,
                        max_reps=s.max_reps,
                        weight_kg=s.weight_kg,
                        completed_reps=s.completed_reps,
                        completed_at=s.completed_at,
                    )
                    for s in workout_exercise.sets
                ],
                warmup_completed_at=workout_exercise.warmup_completed_at,
            )
        )

    return Session(
        date=record.workout_date,
        exercise_sets=exercise_sets,
        difficulty_rating=record.difficulty_rating,
        started_at=record.started_at,
        completed_at=record.completed_at,
        category=Category(record.category) if record.category else None,
    )


class ExerciseRepository:
    """Access to the exercise catalogue."""

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_db()

    def list(self) -> List[Exercise]:
        """Get every exercise with its muscle groups."""
        with self.db.get_session() as session:
            records = session.query(ExerciseRecord).order_by(ExerciseRecord.id).all()
            return [to_exercise(record) for record in records]

    def get(self, exercise_id: int) -> Exercise:
        with self.db.get_session() as session:
            record = session.get(ExerciseRecord, exercise_id)
            if record is None:
                raise ExerciseNotFoundError(f"Exercise {exercise_id} not found")
            return to_exercise(record)

    def upsert(self, exercise: Exercise) -> Exercise:
        """Insert or update an exercise and its muscle groups."""
        with self.db.get_session() as session:
            record = session.get(ExerciseRecord, exercise.id)
            if record is None:
                record = ExerciseRecord(id=exercise.id)
                session.add(record)

            record.name = exercise.name
            record.category = exercise.category.value
            record.exercise_type = exercise.exercise_type.value
            record.description_markdown = exercise.description_markdown

            # Replace muscle group links; flush the removal before re-adding
            record.muscle_groups.clear()
            session.flush()

            groups = [(name, True) for name in exercise.primary_muscle_groups]
            groups += [(name, False) for name in exercise.secondary_muscle_groups]
            for position, (name, is_primary) in enumerate(groups):
                if session.get(MuscleGroup, name) is None:
                    session.add(MuscleGroup(name=name))
                    session.flush()
                record.muscle_groups.append(
                    ExerciseMuscleGroup(muscle_group_name=name, is_primary=is_primary, position=position)
                )

            session.flush()
            return to_exercise(record)

    def find_compatible(self, exercise_id: int) -> List[Exercise]:
        """Exercises that can replace the given one, in catalogue order.

        A replacement has the same category and works at least one of the
        same primary muscle groups.

        Raises:
            ExerciseNotFoundError: If the exercise does not exist
        """
        current = self.get(exercise_id)
        primary = set(current.primary_muscle_groups)
        return [
            exercise
            for exercise in self.list()
            if exercise.id != current.id
            and exercise.category is current.category
            and primary.intersection(exercise.primary_muscle_groups)
        ]


class PreferencesRepository:
    """Weekly training availability of a user."""

    def __init__(self, db: Optional[Database] = None, user_id: Optional[str] = None):
        self.db = db or get_db()
        self.user_id = user_id or config.USER_ID

    def get(self) -> Preferences:
        """Get preferences; users who never set any train on no day."""
        with self.db.get_session() as session:
            record = session.get(WorkoutPreferencesRecord, self.user_id)
            if record is None:
                return Preferences()
            return Preferences(**{day: getattr(record, f"{day}_minutes") for day in WEEKDAYS})

    def set(self, preferences: Preferences) -> None:
        with self.db.get_session() as session:
            record = session.get(WorkoutPreferencesRecord, self.user_id)
            if record is None:
                record = WorkoutPreferencesRecord(user_id=self.user_id)
                session.add(record)
            for day, minutes in preferences.to_dict().items():
                setattr(record, f"{day}_minutes", minutes)
        logger.info(f"Saved workout preferences for {self.user_id}: {preferences.to_dict()}")


class SessionRepository:
    """Workout sessions of a user and their lifecycle writes."""

    def __init__(self, db: Optional[Database] = None, user_id: Optional[str] = None):
        self.db = db or get_db()
        self.user_id = user_id or config.USER_ID

    def list(self, since: date) -> List[Session]:
        """Get sessions on or after ``since``, oldest first."""
        with self.db.get_session() as session:
            records = (
                session.query(WorkoutSessionRecord)
                .filter(
                    WorkoutSessionRecord.user_id == self.user_id,
                    WorkoutSessionRecord.workout_date >= since,
                )
                .order_by(WorkoutSessionRecord.workout_date)
                .all()
            )
            return [to_session(record) for record in records]

    def get(self, day: date) -> Optional[Session]:
        with self.db.get_session() as session:
            record = self._find(session, day)
            return to_session(record) if record is not None else None

    def save(self, workout: Session) -> None:
        """Insert or replace the stored session for the workout's date."""
        with self.db.get_session() as session:
            record = self._find(session, workout.date)
            if record is None:
                record = WorkoutSessionRecord(user_id=self.user_id, workout_date=workout.date)
                session.add(record)

            record.category = workout.category.value if workout.category else None
            record.difficulty_rating = workout.difficulty_rating
            record.started_at = workout.started_at
            record.completed_at = workout.completed_at

            record.exercises.clear()
            session.flush()

            for position, exercise_set in enumerate(workout.exercise_sets):
                record.exercises.append(self._exercise_record(exercise_set, position))

        logger.info(f"Saved workout for {self.user_id} on {workout.date.isoformat()}")

    def add_exercise(self, day: date, exercise_set: ExerciseSet) -> None:
        """Append a planned exercise to the end of a stored workout.

        Raises:
            SessionNotFoundError: If no workout is stored for the day
            ExerciseNotFoundError: If the exercise is already part of the workout
        """
        exercise_id = exercise_set.exercise.id
        with self.db.get_session() as session:
            record = self._require(session, day)
            if any(we.exercise_id == exercise_id for we in record.exercises):
                raise ExerciseNotFoundError(
                    f"Exercise {exercise_id} is already part of the workout on {day.isoformat()}"
                )

            position = max((we.position for we in record.exercises), default=-1) + 1
            record.exercises.append(self._exercise_record(exercise_set, position))

        logger.info(f"Added exercise {exercise_id} to workout on {day.isoformat()}")

    def swap_exercise(self, day: date, current_exercise_id: int, exercise_set: ExerciseSet) -> None:
        """Replace an exercise of a stored workout, keeping its place in the order.

        Raises:
            SessionNotFoundError: If no workout is stored for the day
            ExerciseNotFoundError: If the current exercise is not part of the
                workout, or the replacement already is
        """
        new_id = exercise_set.exercise.id
        with self.db.get_session() as session:
            current = self._require_exercise(session, day, current_exercise_id)
            record = current.session
            if any(we.exercise_id == new_id for we in record.exercises):
                raise ExerciseNotFoundError(
                    f"Exercise {new_id} is already part of the workout on {day.isoformat()}"
                )

            position = current.position
            record.exercises.remove(current)
            session.flush()
            record.exercises.append(self._exercise_record(exercise_set, position))

        logger.info(f"Swapped exercise {current_exercise_id} for {new_id} on {day.isoformat()}")

    def start(self, day: date, at: Optional[datetime] = None) -> None:
        with self.db.get_session() as session:
            record = self._require(session, day)
            if record.started_at is None:
                record.started_at = at or datetime.utcnow()

    def complete(self, day: date, at: Optional[datetime] = None) -> None:
        with self.db.get_session() as session:
            record = self._require(session, day)
            record.completed_at = at or datetime.utcnow()

    def save_feedback(self, day: date, difficulty: int) -> None:
        FeedbackLevel(difficulty)  # raises ValueError outside 1-5
        with self.db.get_session() as session:
            record = self._require(session, day)
            record.difficulty_rating = difficulty

    def update_set_weight(self, day: date, exercise_id: int, set_index: int, weight_kg: float) -> None:
        if weight_kg < 0:
            raise ValueError(f"weight_kg cannot be negative, got {weight_kg}")
        with self.db.get_session() as session:
            set_record = self._require_set(session, day, exercise_id, set_index)
            set_record.weight_kg = weight_kg

    def update_completed_reps(
        self,
        day: date,
        exercise_id: int,
        set_index: int,
        completed_reps: int,
        at: Optional[datetime] = None,
    ) -> None:
        if completed_reps < 0:
            raise ValueError(f"completed_reps cannot be negative, got {completed_reps}")
        with self.db.get_session() as session:
            set_record = self._require_set(session, day, exercise_id, set_index)
            set_record.completed_reps = completed_reps
            set_record.completed_at = at or datetime.utcnow()

    def mark_warmup_complete(self, day: date, exercise_id: int, at: Optional[datetime] = None) -> None:
        with self.db.get_session() as session:
            workout_exercise = self._require_exercise(session, day, exercise_id)
            workout_exercise.warmup_completed_at = at or datetime.utcnow()

    @staticmethod
    def _exercise_record(exercise_set: ExerciseSet, position: int) -> WorkoutExerciseRecord:
        workout_exercise = WorkoutExerciseRecord(
            exercise_id=exercise_set.exercise.id,
            position=position,
            warmup_completed_at=exercise_set.warmup_completed_at,
        )
        for number, s in enumerate(exercise_set.sets, start=1):
            workout_exercise.sets.append(
                ExerciseSetRecord(
                    set_number=number,
                    weight_kg=s.weight_kg,
                    min_reps=s.min_reps,
                    max_reps=s.max_reps,
                    completed_reps=s.completed_reps,
                    completed_at=s.completed_at,
                )
            )
        return workout_exercise

    def _find(self, session: DBSession, day: date) -> Optional[WorkoutSessionRecord]:
        return (
            session.query(WorkoutSessionRecord)
            .filter_by(user_id=self.user_id, workout_date=day)
            .first()
        )

    def _require(self, session: DBSession, day: date) -> WorkoutSessionRecord:
        record = self._find(session, day)
        if record is None:
            raise SessionNotFoundError(f"No workout stored for {day.isoformat()}")
        return record

    def _require_exercise(self, session: DBSession, day: date, exercise_id: int) -> WorkoutExerciseRecord:
        record = self._require(session, day)
        for workout_exercise in record.exercises:
            if workout_exercise.exercise_id == exercise_id:
                return workout_exercise
        raise ExerciseNotFoundError(f"Exercise {exercise_id} is not part of the workout on {day.isoformat()}")

    def _require_set(self, session: DBSession, day: date, exercise_id: int, set_index: int) -> ExerciseSetRecord:
        workout_exercise = self._require_exercise(session, day, exercise_id)
        if not 0 <= set_index < len(workout_exercise.sets):
            raise ExerciseNotFoundError(
                f"Set {set_index + 1} of exercise {exercise_id} not found on {day.isoformat()}"
            )
        return workout_exercise.sets[set_index]
