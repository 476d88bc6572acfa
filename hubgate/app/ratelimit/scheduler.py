"""Admission decisions for outbound GitHub requests."""

from hubgate.app.ratelimit.models import (
    SECONDARY_LIMIT,
    WINDOW_SECONDS,
    RateLimitState,
    SecondaryWindowCounter,
)

# Shortest wait applied whenever either quota is exhausted
MIN_WAIT_SECONDS = 1.0

# Even spacing that keeps a full minute of traffic under the secondary limit
PACING_INTERVAL_SECONDS = 1.0 / (SECONDARY_LIMIT / WINDOW_SECONDS)


class DelayScheduler:
    """Decides whether a request may be issued now and how long to wait if not.

    Holds references to the executor's quota state; it never mutates the
    primary snapshot and only rolls the secondary window forward.

    Example:
        >>> scheduler = DelayScheduler(RateLimitState(), SecondaryWindowCounter())
        >>> while not scheduler.can_proceed(now):
        ...     await asyncio.sleep(scheduler.delay_before_next_attempt(now))
    """

    def __init__(self, state: RateLimitState, window: SecondaryWindowCounter):
        self.state = state
        self.window = window

    def can_proceed(self, now: float) -> bool:
        """Return True when both the secondary window and the primary quota have room."""
        return self.window.admit(now) and not self.state.is_exhausted(now)

    def delay_before_next_attempt(self, now: float) -> float:
        """Calculate the wait in seconds before the next admission check.

        Args:
            now: Current epoch time in seconds

        Returns:
            Seconds until the secondary window rolls, or until the primary
            quota resets (both floored at MIN_WAIT_SECONDS), or the pacing
            interval when a request is already admissible.
        """
        if not self.window.admit(now):
            return max(self.window.seconds_until_roll(now), MIN_WAIT_SECONDS)

        if self.state.is_exhausted(now):
            return max(self.state.reset_at - now, MIN_WAIT_SECONDS)

        return PACING_INTERVAL_SECONDS
