"""Domain model for workout planning.

Exercises are immutable reference data. Sets, exercise sets and sessions are
plain mutable records: the planner creates them in the planned state and the
calling service records performance on them afterwards.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Tuple

from ..config import config


class Category(Enum):
    """Workout split category, used for both exercises and sessions."""
    FULL_BODY = "full_body"
    UPPER = "upper"
    LOWER = "lower"


class ExerciseType(Enum):
    """How an exercise is loaded."""
    WEIGHTED = "weighted"
    BODYWEIGHT = "bodyweight"


class WorkoutFocus(Enum):
    """Phase of the undulating periodization cycle."""
    STRENGTH = "strength"        # 3-6 reps
    HYPERTROPHY = "hypertrophy"  # 8-12 reps
    ENDURANCE = "endurance"      # 12-15 reps

    @property
    def rep_range(self) -> Tuple[int, int]:
        return PHASE_REP_RANGES[self]

    def next_phase(self) -> "WorkoutFocus":
        """Next phase in the strength -> hypertrophy -> endurance cycle."""
        return PHASE_CYCLE[self]

    @classmethod
    def from_rep_range(cls, min_reps: int, max_reps: int) -> "WorkoutFocus":
        """Infer the phase a rep range belongs to.

        Ranges are checked in cycle order, so 12-12 counts as hypertrophy.
        Anything outside the known ranges falls back to hypertrophy.
        """
        for phase in (cls.STRENGTH, cls.HYPERTROPHY, cls.ENDURANCE):
            low, high = PHASE_REP_RANGES[phase]
            if min_reps >= low and max_reps <= high:
                return phase
        return cls.HYPERTROPHY


PHASE_REP_RANGES: Dict[WorkoutFocus, Tuple[int, int]] = {
    WorkoutFocus.STRENGTH: (3, 6),
    WorkoutFocus.HYPERTROPHY: (8, 12),
    WorkoutFocus.ENDURANCE: (12, 15),
}

PHASE_CYCLE: Dict[WorkoutFocus, WorkoutFocus] = {
    WorkoutFocus.STRENGTH: WorkoutFocus.HYPERTROPHY,
    WorkoutFocus.HYPERTROPHY: WorkoutFocus.ENDURANCE,
    WorkoutFocus.ENDURANCE: WorkoutFocus.STRENGTH,
}


class Experience(Enum):
    """Training age classification."""
    BEGINNER = "beginner"
    EXPERIENCED = "experienced"


class FeedbackLevel(IntEnum):
    """Post-workout difficulty rating."""
    TOO_EASY = 1
    OPTIMAL_LOW = 2
    OPTIMAL_MID = 3
    OPTIMAL_HIGH = 4
    TOO_DIFFICULT = 5


class SessionStatus(Enum):
    """Lifecycle state of a session, derived from its timestamps."""
    PLANNED = "planned"
    STARTED = "started"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Exercise:
    """Exercise reference data, e.g. Squat or Bench Press."""
    id: int
    name: str
    category: Category
    exercise_type: ExerciseType = ExerciseType.WEIGHTED
    primary_muscle_groups: Tuple[str, ...] = ()
    secondary_muscle_groups: Tuple[str, ...] = ()
    description_markdown: str = ""

    @property
    def is_bodyweight(self) -> bool:
        return self.exercise_type is ExerciseType.BODYWEIGHT

    @property
    def is_compound(self) -> bool:
        """Compound movements work at least two primary muscle groups."""
        return len(self.primary_muscle_groups) >= config.MIN_COMPOUND_MOVEMENT_MUSCLES

    def targets(self, muscle_group: str) -> bool:
        """Check if the exercise primarily targets a muscle group."""
        return muscle_group in self.primary_muscle_groups


@dataclass
class Set:
    """A single set with its target and, once performed, the actual result."""
    min_reps: int
    max_reps: int
    weight_kg: Optional[float] = None  # None for bodyweight exercises
    completed_reps: Optional[int] = None
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        if self.min_reps < 1:
            raise ValueError(f"min_reps must be positive, got {self.min_reps}")
        if self.min_reps > self.max_reps:
            raise ValueError(f"min_reps ({self.min_reps}) exceeds max_reps ({self.max_reps})")
        if self.weight_kg is not None and self.weight_kg < 0:
            raise ValueError(f"weight_kg cannot be negative, got {self.weight_kg}")

    @property
    def is_completed(self) -> bool:
        return self.completed_reps is not None


@dataclass
class ExerciseSet:
    """All sets of one exercise within a session."""
    exercise: Exercise
    sets: List[Set] = field(default_factory=list)
    warmup_completed_at: Optional[datetime] = None

    def all_completed_at_max(self) -> bool:
        """Check if every set was performed at or above its maximum reps."""
        return bool(self.sets) and all(
            s.completed_reps is not None and s.completed_reps >= s.max_reps
            for s in self.sets
        )


@dataclass
class Session:
    """One calendar day's workout."""
    date: date
    exercise_sets: List[ExerciseSet] = field(default_factory=list)
    difficulty_rating: Optional[int] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    category: Optional[Category] = None

    def __post_init__(self):
        if self.difficulty_rating is not None:
            FeedbackLevel(self.difficulty_rating)  # raises ValueError when out of range

    @property
    def status(self) -> SessionStatus:
        if self.completed_at is not None:
            return SessionStatus.COMPLETED
        if self.started_at is not None:
            return SessionStatus.STARTED
        return SessionStatus.PLANNED

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def exercise_ids(self) -> List[int]:
        return [es.exercise.id for es in self.exercise_sets]

    def find_exercise_set(self, exercise_id: int) -> Optional[ExerciseSet]:
        for es in self.exercise_sets:
            if es.exercise.id == exercise_id:
                return es
        return None


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass
class Preferences:
    """Planned training minutes per weekday; zero means rest day.

    Booleans are accepted for each day and mean the default session length
    or a rest day.
    """
    monday: int = 0
    tuesday: int = 0
    wednesday: int = 0
    thursday: int = 0
    friday: int = 0
    saturday: int = 0
    sunday: int = 0

    def __post_init__(self):
        for day in WEEKDAYS:
            minutes = getattr(self, day)
            if isinstance(minutes, bool):
                minutes = config.DEFAULT_SESSION_MINUTES if minutes else 0
                setattr(self, day, minutes)
            if minutes not in config.ALLOWED_SESSION_MINUTES:
                raise ValueError(
                    f"{day} minutes must be one of {config.ALLOWED_SESSION_MINUTES}, got {minutes}"
                )

    @classmethod
    def from_weekdays(cls, *weekdays: int, minutes: Optional[int] = None) -> "Preferences":
        """Create preferences training on the given weekdays (0=Monday, 6=Sunday)."""
        minutes = config.DEFAULT_SESSION_MINUTES if minutes is None else minutes
        return cls(**{WEEKDAYS[day]: minutes for day in weekdays})

    def minutes_for(self, day: date) -> int:
        return getattr(self, WEEKDAYS[day.weekday()])

    def is_workout_day(self, day: date) -> bool:
        """Check if the weekday of the given date is a planned training day."""
        return self.minutes_for(day) > 0

    def to_dict(self) -> Dict[str, int]:
        return {day: getattr(self, day) for day in WEEKDAYS}


def to_calendar_date(value) -> date:
    """Normalize a date or datetime to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value
