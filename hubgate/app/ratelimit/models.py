"""Rate limiting data models.

This module contains the primary quota snapshot reported by GitHub and the
client-side counter for the secondary per-minute quota.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

import httpx

# GitHub's documented secondary limit: 100 requests per rolling minute
SECONDARY_LIMIT = 100
WINDOW_SECONDS = 60.0

# Assumed until the first response reports the real primary quota
DEFAULT_PRIMARY_LIMIT = 100

HEADER_REMAINING = "X-RateLimit-Remaining"
HEADER_RESET = "X-RateLimit-Reset"
HEADER_USED = "X-RateLimit-Used"
HEADER_LIMIT = "X-RateLimit-Limit"

HeadersLike = Union[httpx.Headers, Mapping[str, Any]]


def parse_int_header(value: Any) -> Optional[int]:
    """Parse an integer header value, returning None when absent or malformed."""
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class RateLimitStatus:
    """Point-in-time copy of both quotas, safe to hand out to callers."""
    remaining: int
    limit: int
    used: int
    reset_at: float
    secondary_count: int
    secondary_window_start: float


@dataclass
class RateLimitState:
    """Last known primary quota, derived entirely from response headers.

    Never decremented locally; only update() mutates it.
    """
    remaining: int = DEFAULT_PRIMARY_LIMIT
    limit: int = DEFAULT_PRIMARY_LIMIT
    used: int = 0
    reset_at: float = field(default_factory=lambda: time.time() + WINDOW_SECONDS)

    def update(self, headers: HeadersLike) -> None:
        """Overwrite each field present (and parseable) in headers."""
        if not isinstance(headers, httpx.Headers):
            # httpx.Headers only accepts str or bytes values
            headers = httpx.Headers(
                {
                    key: value if isinstance(value, (str, bytes)) else str(value)
                    for key, value in headers.items()
                    if value is not None
                }
            )

        remaining = parse_int_header(headers.get(HEADER_REMAINING))
        if remaining is not None:
            self.remaining = remaining

        reset = parse_int_header(headers.get(HEADER_RESET))
        if reset is not None:
            self.reset_at = float(reset)

        used = parse_int_header(headers.get(HEADER_USED))
        if used is not None:
            self.used = used

        limit = parse_int_header(headers.get(HEADER_LIMIT))
        if limit is not None:
            self.limit = limit

    def is_exhausted(self, now: float) -> bool:
        # A stale zero past reset_at admits the request that refreshes it.
        return self.remaining <= 0 and now < self.reset_at

    def snapshot(self, window: "SecondaryWindowCounter") -> RateLimitStatus:
        return RateLimitStatus(
            remaining=self.remaining,
            limit=self.limit,
            used=self.used,
            reset_at=self.reset_at,
            secondary_count=window.count,
            secondary_window_start=window.window_start,
        )


@dataclass
class SecondaryWindowCounter:
    """Fixed 60-second window counting requests issued by this process."""
    count: int = 0
    window_start: float = field(default_factory=time.time)
    max_requests: int = SECONDARY_LIMIT
    window_seconds: float = WINDOW_SECONDS

    def roll_if_expired(self, now: float) -> None:
        if now - self.window_start >= self.window_seconds:
            self.count = 0
            self.window_start = now

    def admit(self, now: float) -> bool:
        self.roll_if_expired(now)
        return self.count < self.max_requests

    def record_attempt(self, now: float) -> None:
        self.roll_if_expired(now)
        self.count += 1

    def record_failure_before_completion(self) -> None:
        """Undo record_attempt() for a request that never reached the server."""
        self.count = max(0, self.count - 1)

    def seconds_until_roll(self, now: float) -> float:
        return self.window_start + self.window_seconds - now
