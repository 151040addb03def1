"""Tests for the progression model."""

import pytest
from datetime import timedelta

from workout_planner.planning.feedback import FeedbackInterpreter
from workout_planner.planning.history import HistoryIndex
from workout_planner.planning.models import Experience, ExerciseSet, WorkoutFocus
from workout_planner.planning.progression import (
    CompletionStatus,
    ProgressionEngine,
    escalate_bodyweight,
    evaluate_completion,
    regress_bodyweight,
)
from builders import (
    BENCH_PRESS,
    CURL,
    MONDAY,
    PUSH_UP,
    completed_session,
    make_sets,
    performed,
)


def beginner_engine(history=()):
    return ProgressionEngine(HistoryIndex(list(history)), MONDAY)


def experienced_history(*performances):
    """Weekly Monday sessions, newest first, after a long training age."""
    sessions = [completed_session(MONDAY - timedelta(days=200), performed(CURL))]
    for weeks_ago, exercise_set in enumerate(performances, start=1):
        sessions.append(completed_session(MONDAY - timedelta(weeks=weeks_ago), exercise_set))
    return sessions


def weights(sets):
    return [s.weight_kg for s in sets]


class TestCompletion:
    """Test evaluation of the last attempt."""

    def test_completed_max(self):
        assert evaluate_completion(make_sets(completed=12)) is CompletionStatus.COMPLETED_MAX

    def test_failed(self):
        sets = make_sets(completed=12)
        sets[2].completed_reps = 6
        assert evaluate_completion(sets) is CompletionStatus.FAILED

    def test_partial(self):
        assert evaluate_completion(make_sets(completed=10)) is CompletionStatus.PARTIAL

    def test_not_completed(self):
        sets = make_sets(completed=12)
        sets[1].completed_reps = None
        assert evaluate_completion(sets) is CompletionStatus.NOT_COMPLETED


class TestDefaults:
    """Test plans for exercises without history."""

    def test_weighted_defaults(self):
        sets = beginner_engine().plan_sets(BENCH_PRESS)

        assert len(sets) == 3
        assert all((s.min_reps, s.max_reps, s.weight_kg) == (8, 8, 0.0) for s in sets)

    def test_bodyweight_defaults(self):
        sets = beginner_engine().plan_sets(PUSH_UP)

        assert len(sets) == 3
        assert all((s.min_reps, s.max_reps, s.weight_kg) == (8, 8, None) for s in sets)

    def test_empty_last_performance_uses_defaults(self):
        sets = beginner_engine().plan_sets(BENCH_PRESS, ExerciseSet(BENCH_PRESS, []))
        assert len(sets) == 3


class TestLinearProgression:
    """Test beginner progression."""

    def setup_method(self):
        self.engine = beginner_engine()

    def test_max_completion_adds_standard_increment(self):
        sets = self.engine.plan_sets(BENCH_PRESS, performed(BENCH_PRESS, weight=60.0, completed=12))
        assert weights(sets) == [62.5, 62.5, 62.5]
        assert (sets[0].min_reps, sets[0].max_reps) == (8, 12)

    def test_partial_completion_repeats(self):
        sets = self.engine.plan_sets(BENCH_PRESS, performed(BENCH_PRESS, weight=60.0, completed=10))
        assert weights(sets) == [60.0, 60.0, 60.0]

    def test_failure_reduces_weight(self):
        last = performed(BENCH_PRESS, weight=60.0, completed=12)
        last.sets[0].completed_reps = 5

        sets = self.engine.plan_sets(BENCH_PRESS, last)
        assert weights(sets) == [54.0, 54.0, 54.0]

    def test_bodyweight_failure_regresses_reps(self):
        last = performed(PUSH_UP, min_reps=8, max_reps=12, completed=12)
        last.sets[1].completed_reps = 4

        sets = self.engine.plan_sets(PUSH_UP, last)
        assert [(s.min_reps, s.max_reps, s.weight_kg) for s in sets] == [(6, 10, None)] * 3

    def test_bodyweight_failure_at_rep_floor_drops_set(self):
        last = performed(PUSH_UP, min_reps=5, max_reps=5, completed=3)

        sets = self.engine.plan_sets(PUSH_UP, last, feedback=3)
        assert [(s.min_reps, s.max_reps) for s in sets] == [(5, 5)] * 2

    def test_failure_stays_reduced_with_optimal_feedback(self):
        last = performed(BENCH_PRESS, weight=60.0, completed=6)
        sets = self.engine.plan_sets(BENCH_PRESS, last, feedback=3)
        assert all(w < 60.0 for w in weights(sets))

    def test_optimal_feedback_adds_increment(self):
        sets = self.engine.plan_sets(BENCH_PRESS, performed(BENCH_PRESS, weight=60.0, completed=12), feedback=2)
        assert weights(sets) == [65.0, 65.0, 65.0]

    def test_output_has_no_completion_data(self):
        sets = self.engine.plan_sets(BENCH_PRESS, performed(BENCH_PRESS, completed=12), feedback=3)
        assert all(s.completed_reps is None and s.completed_at is None for s in sets)

    def test_last_performance_not_mutated(self):
        last = performed(BENCH_PRESS, weight=60.0, completed=12)
        self.engine.plan_sets(BENCH_PRESS, last, feedback=1)

        assert weights(last.sets) == [60.0, 60.0, 60.0]
        assert all(s.completed_reps == 12 for s in last.sets)


class TestFeedbackOverrides:
    """Test difficulty feedback adjustments."""

    def test_too_easy_adds_five_kg_for_beginners(self):
        last = performed(BENCH_PRESS, weight=60.0, completed=5)  # failed attempt
        sets = beginner_engine().plan_sets(BENCH_PRESS, last, feedback=1)
        assert weights(sets) == [65.0, 65.0, 65.0]

    def test_too_easy_adds_five_kg_for_experienced(self):
        last = performed(BENCH_PRESS, min_reps=3, max_reps=6, weight=100.0, completed=6)
        history = experienced_history(last, performed(BENCH_PRESS, min_reps=3, max_reps=6, weight=97.5, completed=6))
        engine = ProgressionEngine(HistoryIndex(history), MONDAY)

        sets = engine.plan_sets(BENCH_PRESS, last, feedback=1)
        assert weights(sets) == [105.0, 105.0, 105.0]
        assert (sets[0].min_reps, sets[0].max_reps) == (3, 6)

    def test_too_easy_adds_two_reps_for_bodyweight(self):
        last = performed(PUSH_UP, min_reps=8, max_reps=12, completed=12)
        sets = beginner_engine().plan_sets(PUSH_UP, last, feedback=1)

        assert [(s.min_reps, s.max_reps) for s in sets] == [(10, 14)] * 3
        assert weights(sets) == [None, None, None]

    def test_too_difficult_reduces_weight(self):
        last = performed(BENCH_PRESS, weight=60.0, completed=10)
        sets = beginner_engine().plan_sets(BENCH_PRESS, last, feedback=5)
        assert weights(sets) == [54.0, 54.0, 54.0]

    def test_too_difficult_drops_extra_set_first(self):
        last = performed(BENCH_PRESS, count=4, weight=60.0, completed=10)
        sets = beginner_engine().plan_sets(BENCH_PRESS, last, feedback=5)

        assert len(sets) == 3
        assert weights(sets) == [60.0, 60.0, 60.0]

    def test_too_difficult_regresses_bodyweight_reps(self):
        last = performed(PUSH_UP, min_reps=8, max_reps=12, completed=10)
        sets = beginner_engine().plan_sets(PUSH_UP, last, feedback=5)

        assert [(s.min_reps, s.max_reps, s.weight_kg) for s in sets] == [(6, 10, None)] * 3

    def test_too_difficult_drops_extra_bodyweight_set(self):
        last = performed(PUSH_UP, count=4, min_reps=8, max_reps=12, completed=10)
        sets = beginner_engine().plan_sets(PUSH_UP, last, feedback=5)

        assert [(s.min_reps, s.max_reps) for s in sets] == [(8, 12)] * 3

    def test_out_of_range_feedback_raises(self):
        with pytest.raises(ValueError):
            beginner_engine().plan_sets(BENCH_PRESS, performed(BENCH_PRESS), feedback=7)

    def test_override_decided_by_interpreter(self):
        class NeverOverrides(FeedbackInterpreter):
            def overrides_progression(self, rating):
                return False

        engine = ProgressionEngine(HistoryIndex([]), MONDAY, interpreter=NeverOverrides())
        sets = engine.plan_sets(BENCH_PRESS, performed(BENCH_PRESS, weight=60.0, completed=12), feedback=1)

        assert weights(sets) == [62.5, 62.5, 62.5]


class TestUndulatingProgression:
    """Test experienced progression through the phase cycle."""

    def plan(self, *performances, feedback=None):
        engine = ProgressionEngine(HistoryIndex(experienced_history(*performances)), MONDAY)
        assert engine.experience is Experience.EXPERIENCED
        return engine.plan_sets(BENCH_PRESS, performances[0], feedback)

    def test_single_max_completion_stays_in_phase(self):
        sets = self.plan(
            performed(BENCH_PRESS, min_reps=3, max_reps=6, weight=100.0, completed=6),
            performed(BENCH_PRESS, min_reps=3, max_reps=6, weight=97.5, completed=5),
        )
        assert (sets[0].min_reps, sets[0].max_reps) == (3, 6)
        assert weights(sets) == [102.5, 102.5, 102.5]

    def test_incomplete_attempt_repeats(self):
        sets = self.plan(performed(BENCH_PRESS, min_reps=3, max_reps=6, weight=100.0, completed=5))
        assert weights(sets) == [100.0, 100.0, 100.0]

    @pytest.mark.parametrize(
        "phase,next_phase,factor",
        [
            (WorkoutFocus.STRENGTH, WorkoutFocus.HYPERTROPHY, 0.85),
            (WorkoutFocus.HYPERTROPHY, WorkoutFocus.ENDURANCE, 0.8),
            (WorkoutFocus.ENDURANCE, WorkoutFocus.STRENGTH, 1.3),
        ],
    )
    def test_two_max_completions_advance_one_phase(self, phase, next_phase, factor):
        min_reps, max_reps = phase.rep_range
        sets = self.plan(
            performed(BENCH_PRESS, min_reps=min_reps, max_reps=max_reps, weight=100.0, completed=max_reps),
            performed(BENCH_PRESS, min_reps=min_reps, max_reps=max_reps, weight=97.5, completed=max_reps),
        )

        assert (sets[0].min_reps, sets[0].max_reps) == next_phase.rep_range
        assert weights(sets) == [round(100.0 * factor, 2)] * 3
        assert len(sets) == 3

    def test_phase_change_with_optimal_feedback_adds_increment(self):
        sets = self.plan(
            performed(BENCH_PRESS, min_reps=3, max_reps=6, weight=100.0, completed=6),
            performed(BENCH_PRESS, min_reps=3, max_reps=6, weight=97.5, completed=6),
            feedback=3,
        )
        assert (sets[0].min_reps, sets[0].max_reps) == WorkoutFocus.HYPERTROPHY.rep_range
        assert weights(sets) == [87.5, 87.5, 87.5]

    def test_phase_cycle_over_consecutive_sessions(self):
        strength = [
            performed(BENCH_PRESS, min_reps=3, max_reps=6, weight=110.0, completed=6),
            performed(BENCH_PRESS, min_reps=3, max_reps=6, weight=107.5, completed=6),
        ]
        hypertrophy = self.plan(*strength)
        assert (hypertrophy[0].min_reps, hypertrophy[0].max_reps) == WorkoutFocus.HYPERTROPHY.rep_range
        assert weights(hypertrophy) == [93.5, 93.5, 93.5]

        done = performed(BENCH_PRESS, min_reps=8, max_reps=12, weight=93.5, completed=12)
        sets = self.plan(done, *strength)
        assert (sets[0].min_reps, sets[0].max_reps) == WorkoutFocus.HYPERTROPHY.rep_range
        assert weights(sets) == [96.0, 96.0, 96.0]

        done_again = performed(BENCH_PRESS, min_reps=8, max_reps=12, weight=96.0, completed=12)
        sets = self.plan(done_again, done, *strength)
        assert (sets[0].min_reps, sets[0].max_reps) == WorkoutFocus.ENDURANCE.rep_range
        assert weights(sets) == [76.8, 76.8, 76.8]

    def test_streak_resets_across_phases(self):
        # The older max completion was in a different phase
        sets = self.plan(
            performed(BENCH_PRESS, min_reps=8, max_reps=12, weight=80.0, completed=12),
            performed(BENCH_PRESS, min_reps=3, max_reps=6, weight=100.0, completed=6),
        )
        assert (sets[0].min_reps, sets[0].max_reps) == (8, 12)
        assert weights(sets) == [82.5, 82.5, 82.5]

    def test_bodyweight_phase_change_adopts_rep_range(self):
        last = performed(PUSH_UP, min_reps=8, max_reps=12, completed=12)
        history = experienced_history(last, performed(PUSH_UP, min_reps=8, max_reps=12, completed=12))
        engine = ProgressionEngine(HistoryIndex(history), MONDAY)

        sets = engine.plan_sets(PUSH_UP, last)
        assert [(s.min_reps, s.max_reps, s.weight_kg) for s in sets] == [(12, 15, None)] * 3


class TestBodyweightSteps:
    """Test rep and set escalation for bodyweight exercises."""

    def test_escalate_adds_reps_up_to_ceiling(self):
        sets = escalate_bodyweight(make_sets(min_reps=8, max_reps=14))
        assert [(s.min_reps, s.max_reps) for s in sets] == [(10, 15)] * 3

    def test_escalate_adds_set_at_ceiling(self):
        sets = escalate_bodyweight(make_sets(min_reps=12, max_reps=15))
        assert len(sets) == 4
        assert (sets[0].min_reps, sets[0].max_reps) == (8, 8)

    def test_escalate_holds_at_set_ceiling(self):
        sets = escalate_bodyweight(make_sets(count=5, min_reps=12, max_reps=15))
        assert len(sets) == 5
        assert (sets[0].min_reps, sets[0].max_reps) == (12, 15)

    def test_regress_reduces_reps_then_sets(self):
        sets = regress_bodyweight(make_sets(min_reps=8, max_reps=12))
        assert [(s.min_reps, s.max_reps) for s in sets] == [(6, 10)] * 3

        sets = regress_bodyweight(make_sets(min_reps=5, max_reps=5))
        assert len(sets) == 2

        sets = regress_bodyweight(make_sets(count=2, min_reps=5, max_reps=5))
        assert len(sets) == 2
