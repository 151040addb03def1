"""Errors raised by the workout planner."""


class PlanningError(Exception):
    """Base class for workout planning failures."""


class EmptyPoolError(PlanningError):
    """No exercises were supplied, nothing can be planned."""

    def __init__(self):
        super().__init__("exercise pool cannot be empty")


class NoExercisesForCategoryError(PlanningError):
    """The pool has no exercise matching the chosen workout category."""

    def __init__(self, category):
        self.category = category
        super().__init__(f"no exercises found for category: {getattr(category, 'value', category)}")


class InvalidDateError(PlanningError):
    """The workout date is missing or not a calendar date."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"invalid workout date: {value!r}")


class InsufficientSelectionError(PlanningError):
    """Exercise selection produced fewer exercises than a session needs."""

    def __init__(self, category, selected: int, minimum: int):
        self.category = category
        self.selected = selected
        self.minimum = minimum
        super().__init__(
            f"selected {selected} exercises for {getattr(category, 'value', category)}, "
            f"need at least {minimum}"
        )


class PlanInvariantError(PlanningError):
    """An assembled plan broke one of the planner's own guarantees."""
