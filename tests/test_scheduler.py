"""Tests for split scheduling."""

from datetime import timedelta

from workout_planner.planning.history import HistoryIndex
from workout_planner.planning.models import Category, Preferences
from workout_planner.planning.scheduler import SplitScheduler
from builders import BENCH_PRESS, MONDAY, completed_session, performed

TUESDAY = MONDAY + timedelta(days=1)
WEDNESDAY = MONDAY + timedelta(days=2)
SUNDAY = MONDAY - timedelta(days=1)


class TestSplitScheduler:
    """Test the category priority chain."""

    def schedule(self, day, prefs, history=()):
        return SplitScheduler(prefs, HistoryIndex(list(history))).determine_category(day)

    def test_non_preferred_day_is_full_body(self):
        prefs = Preferences.from_weekdays(1)
        assert self.schedule(MONDAY, prefs) is Category.FULL_BODY

    def test_isolated_training_day_is_full_body(self):
        prefs = Preferences.from_weekdays(0)
        assert self.schedule(MONDAY, prefs) is Category.FULL_BODY

    def test_training_tomorrow_means_lower(self):
        prefs = Preferences.from_weekdays(0, 1)
        assert self.schedule(MONDAY, prefs) is Category.LOWER

    def test_trained_yesterday_means_upper(self):
        prefs = Preferences.from_weekdays(0, 1)
        history = [completed_session(MONDAY, performed(BENCH_PRESS))]
        assert self.schedule(TUESDAY, prefs, history) is Category.UPPER

    def test_tomorrow_is_checked_before_yesterday(self):
        prefs = Preferences.from_weekdays(0, 1, 2)
        history = [completed_session(MONDAY, performed(BENCH_PRESS))]
        assert self.schedule(TUESDAY, prefs, history) is Category.LOWER

    def test_yesterday_must_be_completed(self):
        prefs = Preferences.from_weekdays(0, 1)
        assert self.schedule(TUESDAY, prefs) is Category.FULL_BODY

    def test_training_yesterday_off_schedule_still_counts(self):
        prefs = Preferences.from_weekdays(0)
        history = [completed_session(SUNDAY, performed(BENCH_PRESS))]
        assert self.schedule(MONDAY, prefs, history) is Category.UPPER
