"""Progression model: next session's sets, reps and load for an exercise.

Beginners follow linear progression driven by how the last attempt went.
Experienced lifters follow undulating periodization, cycling through
strength, hypertrophy and endurance rep ranges once a phase has been
completed at maximum reps for consecutive sessions. Difficulty feedback from
the most recent rated session adjusts the result, and "too easy" feedback
replaces the normal progression with a larger jump.

Weighted exercises progress by load; bodyweight exercises progress by reps
and then sets, since they have no load to change.
"""

import logging
from datetime import date
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..config import config
from .feedback import FeedbackAdjustment, FeedbackInterpreter
from .history import HistoryIndex
from .models import Exercise, ExerciseSet, ExerciseType, Experience, Set, WorkoutFocus

logger = logging.getLogger(__name__)


class CompletionStatus(Enum):
    """Outcome of the last attempt at an exercise."""
    NOT_COMPLETED = "not_completed"  # some set has no recorded reps
    FAILED = "failed"                # some set fell short of its minimum
    COMPLETED_MAX = "completed_max"  # every set reached its maximum
    PARTIAL = "partial"              # everything else


def evaluate_completion(sets: Sequence[Set]) -> CompletionStatus:
    all_at_max = True
    any_failed = False

    for s in sets:
        if s.completed_reps is None:
            return CompletionStatus.NOT_COMPLETED
        if s.completed_reps < s.min_reps:
            any_failed = True
        elif s.completed_reps < s.max_reps:
            all_at_max = False

    if any_failed:
        return CompletionStatus.FAILED
    if all_at_max:
        return CompletionStatus.COMPLETED_MAX
    return CompletionStatus.PARTIAL


def infer_phase(sets: Sequence[Set]) -> WorkoutFocus:
    """Phase of a performance, judged by the rep range of its first set."""
    if not sets:
        return WorkoutFocus.HYPERTROPHY
    return WorkoutFocus.from_rep_range(sets[0].min_reps, sets[0].max_reps)


def phase_entry_factor(phase: WorkoutFocus) -> float:
    """Weight multiplier applied when entering a phase."""
    if phase is WorkoutFocus.STRENGTH:
        return config.STRENGTH_ENTRY_WEIGHT_FACTOR
    if phase is WorkoutFocus.HYPERTROPHY:
        return config.HYPERTROPHY_ENTRY_WEIGHT_FACTOR
    if phase is WorkoutFocus.ENDURANCE:
        return config.ENDURANCE_ENTRY_WEIGHT_FACTOR
    raise ValueError(f"Unknown workout phase: {phase}")


def _round_weight(weight: float) -> float:
    return round(max(weight, 0.0), 2)


def _weight_of(exercise: Exercise, s: Set) -> Optional[float]:
    if exercise.exercise_type is ExerciseType.BODYWEIGHT:
        return None
    if exercise.exercise_type is ExerciseType.WEIGHTED:
        return _round_weight(s.weight_kg or 0.0)
    raise ValueError(f"Unknown exercise type: {exercise.exercise_type}")


def copy_without_completion(exercise: Exercise, sets: Sequence[Set]) -> List[Set]:
    """Repeat the same targets as a fresh, unperformed plan."""
    return [Set(min_reps=s.min_reps, max_reps=s.max_reps, weight_kg=_weight_of(exercise, s)) for s in sets]


def default_sets(exercise: Exercise) -> List[Set]:
    """Starting prescription for an exercise without history.

    Weighted exercises start at zero so the lifter picks a working weight on
    the first attempt.
    """
    weight = None if exercise.is_bodyweight else 0.0
    return [
        Set(min_reps=config.DEFAULT_REPS, max_reps=config.DEFAULT_REPS, weight_kg=weight)
        for _ in range(config.DEFAULT_SETS)
    ]


def increase_weight(exercise: Exercise, sets: Sequence[Set], increment: float) -> List[Set]:
    return [
        Set(
            min_reps=s.min_reps,
            max_reps=s.max_reps,
            weight_kg=_round_weight((_weight_of(exercise, s) or 0.0) + increment),
        )
        for s in sets
    ]


def reduce_weight(exercise: Exercise, sets: Sequence[Set], factor: float) -> List[Set]:
    new_sets = []
    for s in sets:
        weight = _weight_of(exercise, s) or 0.0
        new_sets.append(
            Set(min_reps=s.min_reps, max_reps=s.max_reps, weight_kg=_round_weight(weight - weight * factor))
        )
    return new_sets


def add_reps(sets: Sequence[Set], reps: int) -> List[Set]:
    return [Set(min_reps=s.min_reps + reps, max_reps=s.max_reps + reps) for s in sets]


def escalate_bodyweight(sets: Sequence[Set]) -> List[Set]:
    """One progression step for a bodyweight exercise.

    Reps climb towards the ceiling first; at the ceiling a set is added and
    reps restart at the default target. At the set ceiling nothing changes.
    """
    ceiling = config.BODYWEIGHT_MAX_REPS
    step = config.BODYWEIGHT_REP_STEP

    if max(s.max_reps for s in sets) < ceiling:
        return [
            Set(min_reps=min(s.min_reps + step, ceiling), max_reps=min(s.max_reps + step, ceiling))
            for s in sets
        ]
    if len(sets) < config.BODYWEIGHT_MAX_SETS:
        return [
            Set(min_reps=config.DEFAULT_REPS, max_reps=config.DEFAULT_REPS)
            for _ in range(len(sets) + 1)
        ]
    return [Set(min_reps=s.min_reps, max_reps=s.max_reps) for s in sets]


def regress_bodyweight(sets: Sequence[Set]) -> List[Set]:
    """One regression step for a bodyweight exercise.

    The rep range shrinks towards the floor first; at the floor the last set
    is dropped, down to the minimum number of sets.
    """
    floor = config.BODYWEIGHT_MIN_REPS
    step = config.BODYWEIGHT_REP_STEP

    if max(s.max_reps for s in sets) > floor:
        new_sets = []
        for s in sets:
            max_reps = max(s.max_reps - step, floor)
            min_reps = min(max(s.min_reps - step, floor), max_reps)
            new_sets.append(Set(min_reps=min_reps, max_reps=max_reps))
        return new_sets
    if len(sets) > config.BODYWEIGHT_MIN_SETS:
        return [Set(min_reps=s.min_reps, max_reps=s.max_reps) for s in sets[:-1]]
    return [Set(min_reps=s.min_reps, max_reps=s.max_reps) for s in sets]


class ProgressionEngine:
    """Computes planned sets for one exercise at a time.

    The engine is bound to a history snapshot and the date being planned;
    training age is measured against that date.
    """

    def __init__(
        self,
        history: HistoryIndex,
        as_of: date,
        interpreter: Optional[FeedbackInterpreter] = None,
    ):
        self.history = history
        self.as_of = as_of
        self.interpreter = interpreter or FeedbackInterpreter()
        self.experience = history.experience(as_of)

    def plan_for(self, exercise: Exercise) -> List[Set]:
        """Plan sets using the exercise's most recent performance and feedback."""
        return self.plan_sets(
            exercise,
            self.history.most_recent_exercise_set(exercise.id),
            self.history.most_recent_feedback(exercise.id),
        )

    def plan_sets(
        self,
        exercise: Exercise,
        last: Optional[ExerciseSet] = None,
        feedback: Optional[int] = None,
    ) -> List[Set]:
        """Plan the next session's sets for an exercise.

        Args:
            exercise: Exercise to plan
            last: Most recent performance of the exercise, if any
            feedback: Most recent difficulty rating (1-5) covering the exercise

        Returns:
            Fresh sets without completion data
        """
        if last is None or not last.sets:
            logger.debug(f"{exercise.name}: no history, using defaults")
            return default_sets(exercise)

        if self.interpreter.overrides_progression(feedback):
            logger.debug(f"{exercise.name}: rated too easy, large increase")
            return self._large_increase(exercise, last.sets)
        adjustment = self.interpreter.interpret(feedback)

        if self.experience is Experience.BEGINNER:
            sets, regressed = self._progress_linear(exercise, last)
        elif self.experience is Experience.EXPERIENCED:
            sets, regressed = self._progress_undulating(exercise, last)
        else:
            raise ValueError(f"Unknown experience level: {self.experience}")

        if adjustment is FeedbackAdjustment.REDUCE:
            logger.debug(f"{exercise.name}: rated too difficult, reducing")
            sets = self._reduce_for_difficulty(exercise, sets)
        elif adjustment is FeedbackAdjustment.STANDARD_INCREASE and not regressed:
            sets = self._standard_increase(exercise, sets)

        return sets

    def _large_increase(self, exercise: Exercise, sets: Sequence[Set]) -> List[Set]:
        if exercise.exercise_type is ExerciseType.BODYWEIGHT:
            return add_reps(sets, config.BODYWEIGHT_REP_STEP)
        if exercise.exercise_type is ExerciseType.WEIGHTED:
            return increase_weight(exercise, sets, config.LARGE_WEIGHT_INCREMENT_KG)
        raise ValueError(f"Unknown exercise type: {exercise.exercise_type}")

    def _standard_increase(self, exercise: Exercise, sets: Sequence[Set]) -> List[Set]:
        if exercise.exercise_type is ExerciseType.BODYWEIGHT:
            return escalate_bodyweight(sets)
        if exercise.exercise_type is ExerciseType.WEIGHTED:
            return increase_weight(exercise, sets, config.STANDARD_WEIGHT_INCREMENT_KG)
        raise ValueError(f"Unknown exercise type: {exercise.exercise_type}")

    def _regress(self, exercise: Exercise, sets: Sequence[Set]) -> List[Set]:
        if exercise.exercise_type is ExerciseType.BODYWEIGHT:
            return regress_bodyweight(sets)
        if exercise.exercise_type is ExerciseType.WEIGHTED:
            return reduce_weight(exercise, sets, config.WEIGHT_REDUCTION_FACTOR)
        raise ValueError(f"Unknown exercise type: {exercise.exercise_type}")

    def _reduce_for_difficulty(self, exercise: Exercise, sets: Sequence[Set]) -> List[Set]:
        # Volume goes first, intensity only once at the standard set count
        if len(sets) > config.MAX_STANDARD_SETS:
            return copy_without_completion(exercise, sets[:-1])
        return self._regress(exercise, sets)

    def _progress_linear(self, exercise: Exercise, last: ExerciseSet) -> Tuple[List[Set], bool]:
        """Linear progression for beginners.

        Returns:
            Tuple of (planned sets, whether the plan regressed after a failure)
        """
        status = evaluate_completion(last.sets)
        logger.debug(f"{exercise.name}: beginner, last attempt {status.value}")

        if status is CompletionStatus.FAILED:
            return self._regress(exercise, last.sets), True
        if status is CompletionStatus.COMPLETED_MAX:
            return self._standard_increase(exercise, last.sets), False
        if status in (CompletionStatus.NOT_COMPLETED, CompletionStatus.PARTIAL):
            return copy_without_completion(exercise, last.sets), False
        raise ValueError(f"Unknown completion status: {status}")

    def _progress_undulating(self, exercise: Exercise, last: ExerciseSet) -> Tuple[List[Set], bool]:
        """Undulating periodization for experienced lifters.

        Returns:
            Tuple of (planned sets, whether the plan regressed after a failure)
        """
        phase = infer_phase(last.sets)

        if not last.all_completed_at_max():
            failed = evaluate_completion(last.sets) is CompletionStatus.FAILED
            logger.debug(f"{exercise.name}: {phase.value} phase held, not all sets at max")
            return copy_without_completion(exercise, last.sets), failed

        streak = self.max_completion_streak(exercise, last, phase)
        if streak >= config.MAX_CONSECUTIVE_COMPLETIONS:
            next_phase = phase.next_phase()
            logger.debug(
                f"{exercise.name}: {streak} sessions at max, {phase.value} -> {next_phase.value}"
            )
            return self._enter_phase(exercise, last.sets, next_phase), False

        return self._standard_increase(exercise, last.sets), False

    def max_completion_streak(self, exercise: Exercise, last: ExerciseSet, phase: WorkoutFocus) -> int:
        """Count consecutive max-rep performances in the current phase, newest first.

        The last performance counts towards the streak even when it is not
        part of the indexed history.
        """
        performances = self.history.exercise_history(exercise.id)
        if not performances or performances[0] is not last:
            performances = [last] + performances

        streak = 0
        for performance in performances:
            if not performance.all_completed_at_max() or infer_phase(performance.sets) is not phase:
                break
            streak += 1
        return streak

    def _enter_phase(self, exercise: Exercise, sets: Sequence[Set], phase: WorkoutFocus) -> List[Set]:
        min_reps, max_reps = phase.rep_range

        if exercise.exercise_type is ExerciseType.BODYWEIGHT:
            return [Set(min_reps=min_reps, max_reps=max_reps) for _ in sets]
        if exercise.exercise_type is ExerciseType.WEIGHTED:
            base_weight = _weight_of(exercise, sets[0]) or 0.0
            weight = _round_weight(base_weight * phase_entry_factor(phase))
            return [Set(min_reps=min_reps, max_reps=max_reps, weight_kg=weight) for _ in sets]
        raise ValueError(f"Unknown exercise type: {exercise.exercise_type}")
