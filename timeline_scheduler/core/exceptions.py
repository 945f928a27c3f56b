"""Exception types for the timeline scheduler.

Remote failures and policy violations are returned as values; only
programmer errors are raised.
"""


class TimelineError(Exception):
    """Base exception for the timeline scheduler."""
    pass


class InvariantViolationError(TimelineError, ValueError):
    """Raised when a caller breaks a scheduler invariant."""
    pass


class UnknownTierError(InvariantViolationError):
    """Raised for a tier value outside the closed set."""
    pass
