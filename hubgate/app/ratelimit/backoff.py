"""Exponential backoff with jitter for retried GitHub requests."""

import random
from dataclasses import dataclass, field
from typing import Callable


@dataclass
class BackoffPolicy:
    """Configuration for retry delays with exponential backoff and jitter.

    Attributes:
        base_delay: Delay for attempt 0 in seconds (default: 1.0)
        max_delay: Upper bound for any returned delay in seconds (default: 30.0)
        exponential_base: Base for exponential calculation (default: 2.0)
        max_jitter: Jitter is drawn uniformly from [0, max_jitter) seconds
        jitter_source: Source of uniform floats in [0, 1)

    Example:
        >>> policy = BackoffPolicy(jitter_source=lambda: 0.0)
        >>> policy.backoff(2)  # Returns 4.0
    """

    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    max_jitter: float = 1.0
    jitter_source: Callable[[], float] = field(default=random.random, repr=False)

    def calculate_delay(self, attempt: int) -> float:
        """Calculate the non-jitter component for a given attempt.

        Uses exponential backoff: delay = min(base_delay * (exponential_base ^ attempt), max_delay)

        Args:
            attempt: The current attempt index (0-indexed)

        Returns:
            Delay in seconds
        """
        delay = self.base_delay * (self.exponential_base**attempt)
        return min(delay, self.max_delay)

    def backoff(self, attempt: int) -> float:
        """Calculate the full retry delay including jitter, capped at max_delay."""
        jitter = self.jitter_source() * self.max_jitter
        return min(self.calculate_delay(attempt) + jitter, self.max_delay)
