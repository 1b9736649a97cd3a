"""Rate limiting adapters.

A fixed-window limiter over a small counter-store abstraction, with a Redis
store for shared quotas and an in-memory store for local development.
"""

from moodic.adapters.rate_limit.base import (
    CounterStore,
    RateLimitDecision,
    RateLimitPolicy,
    StoreError,
)
from moodic.adapters.rate_limit.in_memory import InMemoryCounterStore
from moodic.adapters.rate_limit.limiter import FixedWindowRateLimiter
from moodic.adapters.rate_limit.redis_store import RedisCounterStore

__all__ = [
    "CounterStore",
    "FixedWindowRateLimiter",
    "InMemoryCounterStore",
    "RateLimitDecision",
    "RateLimitPolicy",
    "RedisCounterStore",
    "StoreError",
]
