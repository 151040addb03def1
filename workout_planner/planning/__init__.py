"""Workout planning engine."""

from .errors import (
    EmptyPoolError,
    InsufficientSelectionError,
    InvalidDateError,
    NoExercisesForCategoryError,
    PlanInvariantError,
    PlanningError,
)
from .generator import SessionAssembler, WorkoutGenerator, generate
from .models import (
    Category,
    Exercise,
    ExerciseSet,
    ExerciseType,
    Experience,
    FeedbackLevel,
    Preferences,
    Session,
    SessionStatus,
    Set,
    WorkoutFocus,
)

__all__ = [
    "generate",
    "WorkoutGenerator",
    "SessionAssembler",
    "Category",
    "Exercise",
    "ExerciseSet",
    "ExerciseType",
    "Experience",
    "FeedbackLevel",
    "Preferences",
    "Session",
    "SessionStatus",
    "Set",
    "WorkoutFocus",
    "PlanningError",
    "EmptyPoolError",
    "NoExercisesForCategoryError",
    "InvalidDateError",
    "InsufficientSelectionError",
    "PlanInvariantError",
]
