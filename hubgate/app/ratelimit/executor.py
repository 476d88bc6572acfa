"""Serialized, rate-limited execution of outbound GitHub requests.

Every call goes through one FIFO admission lock per executor instance, so at
most one request is in flight at a time. That keeps the primary quota snapshot
and the secondary window counter consistent without any locking of their own.

Outcome handling per attempt:
- 2xx and 404 are returned immediately.
- 429 waits for Retry-After (or backs off) and retries.
- Any other non-2xx response backs off and retries; once attempts run out it is
  returned to the caller, never raised.
- An exception from request_fn means the server was never reached: the
  secondary counter is corrected, and the exception is re-raised once attempts
  run out.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

import httpx

from hubgate.app.core.logging import get_log_context, get_logger
from hubgate.app.exceptions import MaxRetriesExceededError
from hubgate.app.ratelimit.backoff import BackoffPolicy
from hubgate.app.ratelimit.models import (
    WINDOW_SECONDS,
    RateLimitState,
    RateLimitStatus,
    SecondaryWindowCounter,
    parse_int_header,
)
from hubgate.app.ratelimit.scheduler import DelayScheduler

logger = get_logger(__name__)

DEFAULT_MAX_RETRIES = 2

HTTP_NOT_FOUND = 404
HTTP_TOO_MANY_REQUESTS = 429

RequestFn = Callable[[], Awaitable[httpx.Response]]


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class SerializedExecutor:
    """Runs request functions one at a time within GitHub's rate limits.

    Create one instance per process and pass it to every call site; the quota
    state it owns is only meaningful if all traffic goes through it.

    Usage:
        executor = SerializedExecutor()
        response = await executor.execute(
            lambda: client.get(f"{base_url}/repos/{full_name}")
        )
        if response.status_code == 404:
            ...
    """

    def __init__(
        self,
        state: Optional[RateLimitState] = None,
        window: Optional[SecondaryWindowCounter] = None,
        backoff_policy: Optional[BackoffPolicy] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the executor.

        Args:
            state: Primary quota snapshot (defaults to a conservative guess)
            window: Secondary per-minute counter
            backoff_policy: Retry delay policy
            clock: Returns the current epoch time in seconds
            sleep: Awaitable sleep used for every timed suspension
        """
        self._clock = clock
        self._sleep = sleep
        now = clock()
        self.state = state or RateLimitState(reset_at=now + WINDOW_SECONDS)
        self.window = window or SecondaryWindowCounter(window_start=now)
        self.backoff_policy = backoff_policy or BackoffPolicy()
        self.scheduler = DelayScheduler(self.state, self.window)
        # asyncio.Lock wakes waiters in arrival order and does not let a new
        # caller barge ahead of queued ones.
        self._lock = asyncio.Lock()

    async def execute(
        self,
        request_fn: RequestFn,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> httpx.Response:
        """Execute request_fn under the rate limiter, retrying transient failures.

        Waits for every earlier execute() call on this instance to finish,
        including all of its retries, before issuing anything.

        Args:
            request_fn: Zero-argument coroutine function performing exactly one
                HTTP request; it must not retry on its own
            max_retries: Retries after the first attempt (up to max_retries + 1
                invocations of request_fn)

        Returns:
            The final response. Non-2xx responses are returned, not raised.

        Raises:
            Exception: Whatever request_fn raised on its final attempt.
            MaxRetriesExceededError: If no attempt produced an outcome.
        """
        async with self._lock:
            return await self._run_attempts(request_fn, max_retries)

    def get_rate_limit_status(self) -> RateLimitStatus:
        """Return a copy of the current quota state."""
        return self.state.snapshot(self.window)

    async def _wait_for_admission(self) -> None:
        now = self._clock()
        while not self.scheduler.can_proceed(now):
            delay = self.scheduler.delay_before_next_attempt(now)
            logger.info(
                f"GitHub rate limit reached, waiting {delay:.2f}s",
                extra=get_log_context(
                    delay_seconds=delay,
                    remaining=self.state.remaining,
                    secondary_count=self.window.count,
                ),
            )
            await self._sleep(delay)
            now = self._clock()

    async def _run_attempts(
        self, request_fn: RequestFn, max_retries: int
    ) -> httpx.Response:
        total_attempts = max_retries + 1

        for attempt in range(total_attempts):
            is_last_attempt = attempt == max_retries

            await self._wait_for_admission()
            # Counted before issuing so the window stays accurate under bursts.
            self.window.record_attempt(self._clock())

            try:
                response = await request_fn()
            except Exception as e:
                self.window.record_failure_before_completion()

                if is_last_attempt:
                    logger.error(
                        f"Request failed after {total_attempts} attempt(s): "
                        f"{type(e).__name__}: {e}",
                        extra=get_log_context(attempt=attempt + 1),
                    )
                    raise

                delay = self.backoff_policy.backoff(attempt)
                logger.warning(
                    f"Retry {attempt + 1}/{max_retries} after {type(e).__name__}: {e}. "
                    f"Waiting {delay:.2f}s...",
                    extra=get_log_context(attempt=attempt + 1, delay_seconds=delay),
                )
                await self._sleep(delay)
                continue

            headers = httpx.Headers(response.headers)
            self.state.update(headers)
            status_code = response.status_code

            if _is_success(status_code) or status_code == HTTP_NOT_FOUND:
                logger.debug(
                    f"Request completed with {status_code}",
                    extra=get_log_context(
                        attempt=attempt + 1,
                        status_code=status_code,
                        remaining=self.state.remaining,
                    ),
                )
                return response

            if is_last_attempt:
                logger.error(
                    f"Giving up after {total_attempts} attempt(s), last status {status_code}",
                    extra=get_log_context(attempt=attempt + 1, status_code=status_code),
                )
                return response

            retry_after = None
            if status_code == HTTP_TOO_MANY_REQUESTS:
                retry_after = parse_int_header(headers.get("Retry-After"))

            if retry_after is not None:
                delay = float(max(retry_after, 0))
            else:
                delay = self.backoff_policy.backoff(attempt)

            logger.warning(
                f"Retry {attempt + 1}/{max_retries} after HTTP {status_code}. "
                f"Waiting {delay:.2f}s...",
                extra=get_log_context(
                    attempt=attempt + 1, status_code=status_code, delay_seconds=delay
                ),
            )
            await self._sleep(delay)

        raise MaxRetriesExceededError(total_attempts)
