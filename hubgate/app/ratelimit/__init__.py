"""Outbound rate limiting for the GitHub API.

This package tracks GitHub's primary (hourly, header-reported) and secondary
(100 requests per minute) quotas and serializes every request through a single
executor that waits, backs off and retries as needed.
"""

from hubgate.app.ratelimit.backoff import BackoffPolicy
from hubgate.app.ratelimit.executor import (
    DEFAULT_MAX_RETRIES,
    RequestFn,
    SerializedExecutor,
)
from hubgate.app.ratelimit.models import (
    SECONDARY_LIMIT,
    WINDOW_SECONDS,
    RateLimitState,
    RateLimitStatus,
    SecondaryWindowCounter,
)
from hubgate.app.ratelimit.scheduler import (
    MIN_WAIT_SECONDS,
    PACING_INTERVAL_SECONDS,
    DelayScheduler,
)

__all__ = [
    # Models
    "RateLimitState",
    "RateLimitStatus",
    "SecondaryWindowCounter",
    "SECONDARY_LIMIT",
    "WINDOW_SECONDS",
    # Scheduling
    "DelayScheduler",
    "MIN_WAIT_SECONDS",
    "PACING_INTERVAL_SECONDS",
    "BackoffPolicy",
    # Executor
    "SerializedExecutor",
    "RequestFn",
    "DEFAULT_MAX_RETRIES",
]
