"""Workout split scheduling."""

import logging
from datetime import date, timedelta

from .history import HistoryIndex
from .models import Category, Preferences

logger = logging.getLogger(__name__)


class SplitScheduler:
    """Decides whether a day trains upper body, lower body or full body.

    The rules form a fixed priority chain rather than a rotation:

    1. Days outside the weekly preferences get a full body filler plan.
    2. If tomorrow is also a training day, train lower body today.
    3. If yesterday was trained, assume it was lower body and train upper.
    4. Otherwise train full body.

    Tomorrow is checked before yesterday, so an isolated pair of training days
    always comes out as lower then upper.
    """

    def __init__(self, preferences: Preferences, history: HistoryIndex):
        self.preferences = preferences
        self.history = history

    def determine_category(self, day: date) -> Category:
        if not self.preferences.is_workout_day(day):
            category = Category.FULL_BODY
        elif self.preferences.is_workout_day(day + timedelta(days=1)):
            category = Category.LOWER
        elif self.history.was_training_day(day - timedelta(days=1)):
            category = Category.UPPER
        else:
            category = Category.FULL_BODY

        logger.debug(f"Workout category for {day.isoformat()}: {category.value}")
        return category
