"""Workout Planner - individualized resistance training sessions."""

__version__ = "0.1.0"
