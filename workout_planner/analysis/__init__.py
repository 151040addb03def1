"""Analysis module for training progress reports."""

from .progress import ProgressAnalyzer, estimate_one_rep_max

__all__ = ["ProgressAnalyzer", "estimate_one_rep_max"]
