"""Interpretation of post-workout difficulty ratings."""

from enum import Enum
from typing import Optional

from .models import FeedbackLevel


class FeedbackAdjustment(Enum):
    """Adjustment the progression engine applies for a rating."""
    NONE = "none"                            # no rating recorded
    LARGE_INCREASE = "large_increase"        # too easy, overrides progression
    STANDARD_INCREASE = "standard_increase"  # optimal challenge
    REDUCE = "reduce"                        # too difficult


FEEDBACK_ADJUSTMENTS = {
    FeedbackLevel.TOO_EASY: FeedbackAdjustment.LARGE_INCREASE,
    FeedbackLevel.OPTIMAL_LOW: FeedbackAdjustment.STANDARD_INCREASE,
    FeedbackLevel.OPTIMAL_MID: FeedbackAdjustment.STANDARD_INCREASE,
    FeedbackLevel.OPTIMAL_HIGH: FeedbackAdjustment.STANDARD_INCREASE,
    FeedbackLevel.TOO_DIFFICULT: FeedbackAdjustment.REDUCE,
}


class FeedbackInterpreter:
    """Maps the 1-5 difficulty scale onto progression adjustments."""

    def interpret(self, rating: Optional[int]) -> FeedbackAdjustment:
        """Translate a difficulty rating.

        Raises:
            ValueError: If the rating is outside 1-5
        """
        if rating is None:
            return FeedbackAdjustment.NONE
        return FEEDBACK_ADJUSTMENTS[FeedbackLevel(rating)]

    def overrides_progression(self, rating: Optional[int]) -> bool:
        """Too-easy feedback replaces the normal progression entirely."""
        return self.interpret(rating) is FeedbackAdjustment.LARGE_INCREASE
