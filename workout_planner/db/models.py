"""Database models for exercises, preferences and workout sessions."""

from datetime import datetime
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class MuscleGroup(Base):
    """Muscle group taxonomy entry, e.g. Chest or Quads."""

    __tablename__ = "muscle_groups"

    name = Column(String(64), primary_key=True)

    def __repr__(self):
        return f"<MuscleGroup(name={self.name})>"


class ExerciseRecord(Base):
    """Exercise reference data."""

    __tablename__ = "exercises"
    __table_args__ = (
        CheckConstraint("category IN ('full_body', 'upper', 'lower')", name="ck_exercise_category"),
        CheckConstraint("exercise_type IN ('weighted', 'bodyweight')", name="ck_exercise_type"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(124), unique=True, nullable=False)
    category = Column(String(20), nullable=False)
    exercise_type = Column(String(20), nullable=False, default="weighted")
    description_markdown = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    muscle_groups = relationship(
        "ExerciseMuscleGroup",
        back_populates="exercise",
        cascade="all, delete-orphan",
        order_by="ExerciseMuscleGroup.position",
    )

    def __repr__(self):
        return f"<ExerciseRecord(id={self.id}, name={self.name}, category={self.category})>"


class ExerciseMuscleGroup(Base):
    """Link between an exercise and a muscle group it works."""

    __tablename__ = "exercise_muscle_groups"

    exercise_id = Column(Integer, ForeignKey("exercises.id", ondelete="CASCADE"), primary_key=True)
    muscle_group_name = Column(String(64), ForeignKey("muscle_groups.name", ondelete="CASCADE"), primary_key=True)
    is_primary = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False, default=0)  # keeps reference data order

    exercise = relationship("ExerciseRecord", back_populates="muscle_groups")

    def __repr__(self):
        return f"<ExerciseMuscleGroup(exercise_id={self.exercise_id}, muscle={self.muscle_group_name})>"


class WorkoutPreferencesRecord(Base):
    """Planned training minutes per weekday."""

    __tablename__ = "workout_preferences"

    user_id = Column(String(50), primary_key=True)
    monday_minutes = Column(Integer, nullable=False, default=0)
    tuesday_minutes = Column(Integer, nullable=False, default=0)
    wednesday_minutes = Column(Integer, nullable=False, default=0)
    thursday_minutes = Column(Integer, nullable=False, default=0)
    friday_minutes = Column(Integer, nullable=False, default=0)
    saturday_minutes = Column(Integer, nullable=False, default=0)
    sunday_minutes = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<WorkoutPreferencesRecord(user_id={self.user_id})>"


class WorkoutSessionRecord(Base):
    """One day's workout for a user."""

    __tablename__ = "workout_sessions"
    __table_args__ = (
        # One plan per user and day; concurrent writers update instead of duplicating
        UniqueConstraint("user_id", "workout_date", name="uq_workout_session_user_date"),
        CheckConstraint(
            "difficulty_rating IS NULL OR difficulty_rating BETWEEN 1 AND 5",
            name="ck_session_difficulty_rating",
        ),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(String(50), nullable=False, default="default")
    workout_date = Column(Date, nullable=False)
    category = Column(String(20))  # full_body, upper, lower
    difficulty_rating = Column(Integer)
    started_at = Column(DateTime)
    completed_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    exercises = relationship(
        "WorkoutExerciseRecord",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="WorkoutExerciseRecord.position",
    )

    def __repr__(self):
        return f"<WorkoutSessionRecord(user_id={self.user_id}, date={self.workout_date})>"


class WorkoutExerciseRecord(Base):
    """An exercise planned within a workout session."""

    __tablename__ = "workout_exercises"
    __table_args__ = (
        UniqueConstraint("session_id", "exercise_id", name="uq_workout_exercise"),
    )

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("workout_sessions.id", ondelete="CASCADE"), nullable=False)
    exercise_id = Column(Integer, ForeignKey("exercises.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    warmup_completed_at = Column(DateTime)

    session = relationship("WorkoutSessionRecord", back_populates="exercises")
    exercise = relationship("ExerciseRecord")
    sets = relationship(
        "ExerciseSetRecord",
        back_populates="workout_exercise",
        cascade="all, delete-orphan",
        order_by="ExerciseSetRecord.set_number",
    )

    def __repr__(self):
        return f"<WorkoutExerciseRecord(session_id={self.session_id}, exercise_id={self.exercise_id})>"


class ExerciseSetRecord(Base):
    """A planned or performed set."""

    __tablename__ = "exercise_sets"
    __table_args__ = (
        UniqueConstraint("workout_exercise_id", "set_number", name="uq_exercise_set_number"),
        CheckConstraint("set_number > 0", name="ck_set_number_positive"),
        CheckConstraint("weight_kg IS NULL OR weight_kg >= 0", name="ck_set_weight_non_negative"),
        CheckConstraint("min_reps > 0", name="ck_set_min_reps_positive"),
        CheckConstraint("max_reps >= min_reps", name="ck_set_rep_range"),
    )

    id = Column(Integer, primary_key=True)
    workout_exercise_id = Column(
        Integer, ForeignKey("workout_exercises.id", ondelete="CASCADE"), nullable=False
    )
    set_number = Column(Integer, nullable=False)  # 1-based
    weight_kg = Column(Float)  # NULL for bodyweight exercises
    min_reps = Column(Integer, nullable=False)
    max_reps = Column(Integer, nullable=False)
    completed_reps = Column(Integer)
    completed_at = Column(DateTime)

    workout_exercise = relationship("WorkoutExerciseRecord", back_populates="sets")

    def __repr__(self):
        return f"<ExerciseSetRecord(set_number={self.set_number}, weight_kg={self.weight_kg}, reps={self.min_reps}-{self.max_reps})>"
