"""Lookups over a user's completed workout history."""

from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence
from typing import Set as SetType

from ..config import config
from .models import Experience, ExerciseSet, Session, to_calendar_date


class HistoryIndex:
    """Read-only index of completed sessions.

    Only sessions with a completion timestamp count. They are kept newest
    first in a private list; sessions sharing a date keep their input order.
    The caller's list is never modified.
    """

    def __init__(self, history: Sequence[Session]):
        completed = [s for s in history if s.is_completed]
        self._sessions: List[Session] = sorted(
            completed, key=lambda s: to_calendar_date(s.date), reverse=True
        )

        self._by_date: Dict[date, Session] = {}
        for session in self._sessions:
            self._by_date.setdefault(to_calendar_date(session.date), session)

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def sessions(self) -> List[Session]:
        """Completed sessions, newest first."""
        return list(self._sessions)

    def was_training_day(self, day: date) -> bool:
        """Check if there is a completed session on the given day."""
        return to_calendar_date(day) in self._by_date

    def exercise_history(self, exercise_id: int) -> List[ExerciseSet]:
        """Every completed performance of an exercise, newest first."""
        performances = []
        for session in self._sessions:
            exercise_set = session.find_exercise_set(exercise_id)
            if exercise_set is not None:
                performances.append(exercise_set)
        return performances

    def most_recent_exercise_set(self, exercise_id: int) -> Optional[ExerciseSet]:
        """Most recent completed performance of an exercise."""
        for session in self._sessions:
            exercise_set = session.find_exercise_set(exercise_id)
            if exercise_set is not None:
                return exercise_set
        return None

    def most_recent_feedback(self, exercise_id: int) -> Optional[int]:
        """Difficulty rating of the newest rated session containing the exercise."""
        for session in self._sessions:
            if session.difficulty_rating is None:
                continue
            if session.find_exercise_set(exercise_id) is not None:
                return session.difficulty_rating
        return None

    def same_weekday_anchor(self, day: date) -> Optional[Session]:
        """Newest completed session before ``day`` on the same weekday."""
        day = to_calendar_date(day)
        for session in self._sessions:
            session_date = to_calendar_date(session.date)
            if session_date < day and session_date.weekday() == day.weekday():
                return session
        return None

    def recently_trained_ids(self, day: date, days: Optional[int] = None) -> SetType[int]:
        """Exercise ids performed within the lookback window ending on ``day``."""
        days = config.RECENT_EXERCISE_DAYS if days is None else days
        day = to_calendar_date(day)
        window_start = day - timedelta(days=days)

        recent = set()
        for session in self._sessions:
            session_date = to_calendar_date(session.date)
            if window_start <= session_date <= day:
                recent.update(session.exercise_ids)
        return recent

    def first_training_date(self) -> Optional[date]:
        if not self._sessions:
            return None
        return to_calendar_date(self._sessions[-1].date)

    def experience(self, as_of: date) -> Experience:
        """Classify training age: beginner for the first months of training."""
        first = self.first_training_date()
        if first is None:
            return Experience.BEGINNER

        training_age = to_calendar_date(as_of) - first
        if training_age < timedelta(days=config.BEGINNER_PERIOD_DAYS):
            return Experience.BEGINNER
        return Experience.EXPERIENCED
