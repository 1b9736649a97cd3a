"""In-memory counter store.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Used for local development without Redis and as the test double.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from moodic.adapters.rate_limit.base import TTL_KEY_MISSING, TTL_NO_EXPIRY, CounterStore


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class _Counter:
    value: int
    expires_at_ms: int | None = None


class InMemoryCounterStore(CounterStore):
    """Counter store with Redis-like INCR/PEXPIRE/PTTL semantics.

    All mutations happen between awaits on a single event loop, so no lock is
    needed for atomic increments within one process.
    """

    def __init__(self, *, clock: Callable[[], int] = _now_ms) -> None:
        """Initialize the store.

        Args:
            clock: Time source returning UNIX time in milliseconds.
        """
        self._clock = clock
        self._counters: dict[str, _Counter] = {}

    def _live(self, key: str) -> _Counter | None:
        counter = self._counters.get(key)
        if counter is None:
            return None
        if counter.expires_at_ms is not None and counter.expires_at_ms <= self._clock():
            del self._counters[key]
            return None
        return counter

    async def increment(self, key: str) -> int:
        counter = self._live(key)
        if counter is None:
            counter = _Counter(value=0)
            self._counters[key] = counter
        counter.value += 1
        return counter.value

    async def expire(self, key: str, ttl_ms: int) -> None:
        counter = self._live(key)
        if counter is not None:
            counter.expires_at_ms = self._clock() + ttl_ms

    async def ttl(self, key: str) -> int:
        counter = self._live(key)
        if counter is None:
            return TTL_KEY_MISSING
        if counter.expires_at_ms is None:
            return TTL_NO_EXPIRY
        return counter.expires_at_ms - self._clock()
