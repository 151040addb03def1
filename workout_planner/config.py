"""Configuration management for the workout planner."""

import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./workout_planner.db")

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    USER_ID: str = os.getenv("WORKOUT_USER_ID", "default")
    HISTORY_LOOKBACK_DAYS: int = int(os.getenv("HISTORY_LOOKBACK_DAYS", "180"))  # ~6 months
    RANDOM_SEED: str = os.getenv("RANDOM_SEED", "")

    # Weekly availability
    DEFAULT_SESSION_MINUTES: int = int(os.getenv("DEFAULT_SESSION_MINUTES", "60"))
    ALLOWED_SESSION_MINUTES = (0, 45, 60, 90)

    # Exercise selection
    CONTINUITY_PERCENTAGE: float = float(os.getenv("CONTINUITY_PERCENTAGE", "0.8"))
    MIN_COMPOUND_MOVEMENT_MUSCLES: int = int(os.getenv("MIN_COMPOUND_MOVEMENT_MUSCLES", "2"))
    RECENT_EXERCISE_DAYS: int = int(os.getenv("RECENT_EXERCISE_DAYS", "14"))
    FULL_BODY_EXERCISE_COUNT: int = int(os.getenv("FULL_BODY_EXERCISE_COUNT", "6"))
    SPLIT_EXERCISE_COUNT: int = int(os.getenv("SPLIT_EXERCISE_COUNT", "5"))  # upper / lower
    MIN_EXERCISES_PER_SESSION: int = 1

    # Progression
    BEGINNER_PERIOD_DAYS: int = int(os.getenv("BEGINNER_PERIOD_DAYS", "90"))
    STANDARD_WEIGHT_INCREMENT_KG: float = float(os.getenv("STANDARD_WEIGHT_INCREMENT_KG", "2.5"))
    LARGE_WEIGHT_INCREMENT_KG: float = float(os.getenv("LARGE_WEIGHT_INCREMENT_KG", "5.0"))
    WEIGHT_REDUCTION_FACTOR: float = float(os.getenv("WEIGHT_REDUCTION_FACTOR", "0.1"))
    MAX_CONSECUTIVE_COMPLETIONS: int = int(os.getenv("MAX_CONSECUTIVE_COMPLETIONS", "2"))
    MAX_STANDARD_SETS: int = 3

    # Phase transition weight factors, keyed by the phase being entered
    STRENGTH_ENTRY_WEIGHT_FACTOR: float = float(os.getenv("STRENGTH_ENTRY_WEIGHT_FACTOR", "1.3"))
    HYPERTROPHY_ENTRY_WEIGHT_FACTOR: float = float(os.getenv("HYPERTROPHY_ENTRY_WEIGHT_FACTOR", "0.85"))
    ENDURANCE_ENTRY_WEIGHT_FACTOR: float = float(os.getenv("ENDURANCE_ENTRY_WEIGHT_FACTOR", "0.8"))

    # Default prescription for exercises without history
    DEFAULT_SETS: int = 3
    DEFAULT_REPS: int = 8

    # Bodyweight progression
    BODYWEIGHT_REP_STEP: int = 2
    BODYWEIGHT_MIN_REPS: int = 5
    BODYWEIGHT_MAX_REPS: int = 15
    BODYWEIGHT_MIN_SETS: int = 2
    BODYWEIGHT_MAX_SETS: int = 5

    @classmethod
    def get_random_seed(cls) -> Optional[int]:
        """Get the configured random seed, or None for non-deterministic selection."""
        if not cls.RANDOM_SEED:
            return None
        try:
            return int(cls.RANDOM_SEED)
        except ValueError:
            raise ValueError(f"RANDOM_SEED must be an integer, got {cls.RANDOM_SEED!r}")

    @classmethod
    def get_target_exercise_count(cls, category_value: str) -> int:
        """Get the number of exercises planned for a workout category."""
        counts = {
            "full_body": cls.FULL_BODY_EXERCISE_COUNT,
            "upper": cls.SPLIT_EXERCISE_COUNT,
            "lower": cls.SPLIT_EXERCISE_COUNT,
        }
        # Unrecognized categories plan like a full body session
        return counts.get(category_value, cls.FULL_BODY_EXERCISE_COUNT)


config = Config()
