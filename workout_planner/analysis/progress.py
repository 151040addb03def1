"""Strength progress and training volume reports built from workout history."""

import logging
from typing import Sequence

import numpy as np
import pandas as pd

from ..planning.models import Session

logger = logging.getLogger(__name__)

SET_LOG_COLUMNS = ["date", "exercise_id", "exercise", "set_number", "weight_kg", "reps"]
PROGRESS_COLUMNS = ["exercise_id", "exercise", "sessions", "last_weight_kg", "best_e1rm_kg", "trend_kg_per_week"]
VOLUME_COLUMNS = ["sets", "reps", "volume_kg"]


def estimate_one_rep_max(weight_kg, reps):
    """Estimate the one-repetition maximum with the Epley formula.

    Works on scalars and numpy/pandas arrays. A single rep is its own maximum;
    sets without reps give NaN.

    Args:
        weight_kg: Load lifted
        reps: Repetitions completed

    Returns:
        Estimated 1RM in kg
    """
    weight = np.asarray(weight_kg, dtype=float)
    reps = np.asarray(reps, dtype=float)
    e1rm = np.where(reps == 1, weight, weight * (1 + reps / 30.0))
    return np.where(reps > 0, e1rm, np.nan)


class ProgressAnalyzer:
    """Summarizes completed sessions into pandas tables."""

    def __init__(self, history: Sequence[Session]):
        self.history = [s for s in history if s.is_completed]

    def set_log(self) -> pd.DataFrame:
        """One row per performed set of every completed session."""
        rows = []
        for session in self.history:
            for exercise_set in session.exercise_sets:
                for number, s in enumerate(exercise_set.sets, start=1):
                    if s.completed_reps is None:
                        continue
                    rows.append({
                        "date": pd.Timestamp(session.date),
                        "exercise_id": exercise_set.exercise.id,
                        "exercise": exercise_set.exercise.name,
                        "set_number": number,
                        "weight_kg": s.weight_kg if s.weight_kg is not None else np.nan,
                        "reps": s.completed_reps,
                    })

        return pd.DataFrame(rows, columns=SET_LOG_COLUMNS)

    def exercise_progress(self) -> pd.DataFrame:
        """Per-exercise strength summary.

        Columns: sessions performed, heaviest weight of the latest session,
        best estimated 1RM, and the 1RM trend in kg per week from a linear fit
        over each session's best estimate. The trend needs two weighted
        sessions and is NaN otherwise.
        """
        log = self.set_log()
        if log.empty:
            return pd.DataFrame(columns=PROGRESS_COLUMNS)

        log["e1rm"] = estimate_one_rep_max(log["weight_kg"], log["reps"])

        rows = []
        for (exercise_id, name), group in log.groupby(["exercise_id", "exercise"], sort=False):
            per_session = group.groupby("date")["e1rm"].max().sort_index()
            last_date = per_session.index.max()
            weighted = per_session.dropna()

            trend = np.nan
            if len(weighted) >= 2:
                days = (weighted.index - weighted.index[0]).days.to_numpy(dtype=float)
                slope = np.polyfit(days, weighted.to_numpy(dtype=float), 1)[0]
                trend = round(float(slope) * 7, 2)

            rows.append({
                "exercise_id": exercise_id,
                "exercise": name,
                "sessions": len(per_session),
                "last_weight_kg": group.loc[group["date"] == last_date, "weight_kg"].max(),
                "best_e1rm_kg": round(float(weighted.max()), 2) if not weighted.empty else np.nan,
                "trend_kg_per_week": trend,
            })

        logger.debug(f"Progress computed for {len(rows)} exercises")
        return pd.DataFrame(rows, columns=PROGRESS_COLUMNS).sort_values("exercise").reset_index(drop=True)

    def weekly_volume(self) -> pd.DataFrame:
        """Sets, reps and tonnage per calendar week (weeks end on Sunday).

        Bodyweight sets count towards sets and reps but add no tonnage.
        """
        log = self.set_log()
        if log.empty:
            empty = pd.DataFrame(columns=VOLUME_COLUMNS)
            empty.index.name = "week"
            return empty

        log["volume_kg"] = log["weight_kg"].fillna(0.0) * log["reps"]
        weekly = log.groupby(pd.Grouper(key="date", freq="W")).agg(
            sets=("reps", "count"),
            reps=("reps", "sum"),
            volume_kg=("volume_kg", "sum"),
        )
        weekly.index.name = "week"
        return weekly
