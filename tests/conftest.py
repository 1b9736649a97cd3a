"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any import that builds settings.
"""

import os

os.environ["APP_ENV"] = "testing"
os.environ.pop("REDIS_URL", None)
os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("LLM_MODEL", "gpt-4o-mini")
os.environ.setdefault("LLM_API_KEY", "test-key-123")
os.environ.setdefault("SPOTIFY_CLIENT_ID", "test-client-id")
os.environ.setdefault("SPOTIFY_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("SPOTIFY_REDIRECT_URI", "http://localhost:3000/callback")

from typing import Iterator  # noqa: E402

import pytest  # noqa: E402

from moodic.adapters.rate_limit.base import CounterStore, StoreError  # noqa: E402
from moodic.adapters.rate_limit.in_memory import InMemoryCounterStore  # noqa: E402
from moodic.adapters.rate_limit.limiter import FixedWindowRateLimiter  # noqa: E402
from moodic.core import rate_limit as rate_limit_module  # noqa: E402


class FakeClock:
    """Controllable millisecond clock shared by a store and a limiter."""

    def __init__(self, now_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


class FailingCounterStore(CounterStore):
    """Store whose every command fails, as if Redis were unreachable."""

    def __init__(self) -> None:
        self.calls = 0

    async def increment(self, key: str) -> int:
        self.calls += 1
        raise StoreError("connection refused")

    async def expire(self, key: str, ttl_ms: int) -> None:
        raise StoreError("connection refused")

    async def ttl(self, key: str) -> int:
        raise StoreError("connection refused")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> InMemoryCounterStore:
    return InMemoryCounterStore(clock=clock)


@pytest.fixture
def limiter(memory_store: InMemoryCounterStore, clock: FakeClock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(memory_store, clock=clock)


@pytest.fixture(autouse=True)
def isolated_rate_limiter(monkeypatch: pytest.MonkeyPatch) -> Iterator[FixedWindowRateLimiter]:
    """Give every test a fresh process-wide limiter over an empty store."""
    fresh = FixedWindowRateLimiter(InMemoryCounterStore())
    monkeypatch.setattr(rate_limit_module, "_limiter", fresh)
    yield fresh


@pytest.fixture
def failing_store() -> FailingCounterStore:
    return FailingCounterStore()
