"""Exceptions raised by the match-cascade engine."""


class InvalidRequest(ValueError):
    """A swap or selection request that cannot be applied to the grid.

    Raised before any mutation, so the grid is untouched.
    """


class InconsistentGrid(RuntimeError):
    """An internal invariant failed after a resolving step.

    Signals a bug in the engine rather than a recoverable condition.
    """
