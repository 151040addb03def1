"""Database module for workout storage."""

from .database import Database, close_db, get_db
from .models import (
    Base,
    ExerciseMuscleGroup,
    ExerciseRecord,
    ExerciseSetRecord,
    MuscleGroup,
    WorkoutExerciseRecord,
    WorkoutPreferencesRecord,
    WorkoutSessionRecord,
)
from .repositories import (
    ExerciseNotFoundError,
    ExerciseRepository,
    PreferencesRepository,
    SessionNotFoundError,
    SessionRepository,
)
from .seed import load_exercises, seed_exercises

__all__ = [
    "Database",
    "get_db",
    "close_db",
    "Base",
    "MuscleGroup",
    "ExerciseRecord",
    "ExerciseMuscleGroup",
    "WorkoutPreferencesRecord",
    "WorkoutSessionRecord",
    "WorkoutExerciseRecord",
    "ExerciseSetRecord",
    "ExerciseRepository",
    "SessionRepository",
    "PreferencesRepository",
    "SessionNotFoundError",
    "ExerciseNotFoundError",
    "load_exercises",
    "seed_exercises",
]
