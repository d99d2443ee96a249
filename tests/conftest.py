"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins the environment before settings are imported so a developer's
.env.development never leaks into the suite.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["RATE_GUARD_ENV"] = "testing"
os.environ.setdefault("RATE_GUARD_STORE_BACKEND", "memory")

import pytest  # noqa: E402

from rate_guard.adapters.store.in_memory import InMemoryStore  # noqa: E402
from rate_guard.core.config import LimiterSettings  # noqa: E402
from rate_guard.core.limiter import RateLimiter  # noqa: E402


class FakeTime:
    """Deterministic clock used to test expiration and delay logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def time(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class SleepRecorder:
    """Stand-in for time.sleep/asyncio.sleep that records requested delays.

    Advances the fake clock so the limiter observes time passing.
    """

    def __init__(self, clock: FakeTime) -> None:
        self.clock = clock
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        self.clock.advance(seconds)

    async def async_sleep(self, seconds: float) -> None:
        self(seconds)


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def sleeper(fake_time: FakeTime) -> SleepRecorder:
    return SleepRecorder(fake_time)


@pytest.fixture
def limiter_settings() -> LimiterSettings:
    return LimiterSettings(key_prefix="test:rate_limit")


@pytest.fixture
def store(fake_time: FakeTime) -> InMemoryStore:
    return InMemoryStore(clock=fake_time.time)


@pytest.fixture
def limiter(
    store: InMemoryStore,
    limiter_settings: LimiterSettings,
    fake_time: FakeTime,
    sleeper: SleepRecorder,
) -> RateLimiter:
    return RateLimiter(
        store,
        limiter_settings=limiter_settings,
        clock=fake_time.time,
        sleep=sleeper,
        async_sleep=sleeper.async_sleep,
    )
