"""Shared fixtures for hubgate tests."""

import asyncio

import pytest

from hubgate.app.ratelimit import BackoffPolicy, SerializedExecutor

START_TIME = 1_700_000_000.0


class FakeClock:
    """Controllable epoch clock whose sleep() advances time instantly."""

    def __init__(self, start: float = START_TIME):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        # Still yield so queued tasks get a chance to run.
        await asyncio.sleep(0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def no_jitter_policy() -> BackoffPolicy:
    return BackoffPolicy(jitter_source=lambda: 0.0)


@pytest.fixture
def executor(clock, no_jitter_policy) -> SerializedExecutor:
    return SerializedExecutor(
        backoff_policy=no_jitter_policy, clock=clock, sleep=clock.sleep
    )
