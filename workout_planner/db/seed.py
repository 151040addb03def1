"""Load exercise reference data into the database."""

import json
import logging
from pathlib import Path
from typing import List, Optional

from ..planning.models import Category, Exercise, ExerciseType
from .database import Database, get_db
from .repositories import ExerciseRepository

logger = logging.getLogger(__name__)

EXERCISES_FILE = Path(__file__).resolve().parent.parent / "data" / "exercises.json"


def load_exercises(path: Optional[Path] = None) -> List[Exercise]:
    """Read exercise reference data from a JSON file.

    Args:
        path: JSON file with a list of exercise objects; defaults to the
            bundled catalogue

    Returns:
        Exercises in file order
    """
    with open(path or EXERCISES_FILE, encoding="utf-8") as f:
        raw = json.load(f)

    return [
        Exercise(
            id=int(item["id"]),
            name=item["name"],
            category=Category(item["category"]),
            exercise_type=ExerciseType(item.get("exercise_type", ExerciseType.WEIGHTED.value)),
            primary_muscle_groups=tuple(item.get("primary_muscle_groups", [])),
            secondary_muscle_groups=tuple(item.get("secondary_muscle_groups", [])),
            description_markdown=item.get("description_markdown", ""),
        )
        for item in raw
    ]


def seed_exercises(db: Optional[Database] = None, path: Optional[Path] = None) -> int:
    """Upsert the exercise catalogue. Returns the number of exercises written."""
    repository = ExerciseRepository(db or get_db())
    exercises = load_exercises(path)
    for exercise in exercises:
        repository.upsert(exercise)
    logger.info(f"Seeded {len(exercises)} exercises")
    return len(exercises)
