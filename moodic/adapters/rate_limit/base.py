"""Rate limiter interfaces.

The limiter depends on this counter-store abstraction (not a concrete client)
so Redis can be swapped for an in-memory or failing fake in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

# Sentinels returned by ``CounterStore.ttl`` (same values Redis PTTL uses)
TTL_NO_EXPIRY = -1
TTL_KEY_MISSING = -2


class StoreError(Exception):
    """Raised when the shared counter store is unreachable or a command fails."""


@dataclass(frozen=True)
class RateLimitPolicy:
    """Quota applied to one route.

    Attributes:
        max_requests: Requests allowed per window.
        window_ms: Window length in milliseconds.
        key_namespace: Prefix isolating this route's counters from other routes.
    """

    max_requests: int
    window_ms: int
    key_namespace: str = "ratelimit"

    def key_for(self, identity: str) -> str:
        return f"{self.key_namespace}:{identity}"


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request may proceed.
        limit: Max requests per window (echoed for response headers).
        remaining: Requests left in the current window, never negative.
        reset_at: Epoch milliseconds when the current window resets.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int

    def retry_after_seconds(self, now_ms: int) -> int:
        """Seconds until the window resets, rounded up and never negative."""
        return max(0, -(-(self.reset_at - now_ms) // 1000))


class CounterStore(ABC):
    """Networked counter capability the limiter needs.

    Implementations must make ``increment`` atomic across every process that
    shares the store. The other two commands need no atomicity guarantees.
    """

    @abstractmethod
    async def increment(self, key: str) -> int:
        """Atomically increment ``key`` (creating it at 0) and return the new value.

        Raises:
            StoreError: If the store is unreachable or the command fails.
        """
        raise NotImplementedError

    @abstractmethod
    async def expire(self, key: str, ttl_ms: int) -> None:
        """Set ``key`` to expire ``ttl_ms`` milliseconds from now.

        Raises:
            StoreError: If the store is unreachable or the command fails.
        """
        raise NotImplementedError

    @abstractmethod
    async def ttl(self, key: str) -> int:
        """Remaining time-to-live of ``key`` in milliseconds.

        Returns:
            Milliseconds left, ``TTL_NO_EXPIRY`` if the key has no expiry, or
            ``TTL_KEY_MISSING`` if the key does not exist.

        Raises:
            StoreError: If the store is unreachable or the command fails.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release network resources held by the store."""
        return None
