"""Rate limiting dependency for FastAPI routes.

This module wires the fixed-window limiter into the HTTP layer.

Rate limiting strategy:
- Fixed window per client IP (see ``moodic.core.client_ip``).
- Each quota-bearing route has its own policy and key namespace, so limits on
  different routes never share a counter.
- Store failures fail open; the route is served without quota enforcement.
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from fastapi import Request, Response

from moodic.adapters.rate_limit.base import CounterStore, RateLimitDecision, RateLimitPolicy
from moodic.adapters.rate_limit.in_memory import InMemoryCounterStore
from moodic.adapters.rate_limit.limiter import FixedWindowRateLimiter
from moodic.adapters.rate_limit.redis_store import RedisCounterStore
from moodic.core.client_ip import get_client_ip
from moodic.core.config import settings
from moodic.core.errors import RateLimitExceededError
from moodic.core.logging import hash_identifier

logger = logging.getLogger(__name__)

MOOD_NAMESPACE = "ratelimit:mood"
PLAYLISTS_NAMESPACE = "ratelimit:playlists"

_limiter: FixedWindowRateLimiter | None = None


def _build_store() -> CounterStore:
    if settings.redis.url:
        return RedisCounterStore.from_url(
            settings.redis.url,
            socket_timeout=settings.redis.socket_timeout_seconds,
            socket_connect_timeout=settings.redis.socket_connect_timeout_seconds,
        )

    logger.warning(
        "rate_limit.in_memory_store",
        extra={"reason": "redis_url_not_configured"},
    )
    return InMemoryCounterStore()


def get_rate_limiter() -> FixedWindowRateLimiter:
    """Return the process-wide rate limiter, creating it on first use."""

    global _limiter

    if _limiter is None:
        _limiter = FixedWindowRateLimiter(_build_store())
    return _limiter


async def close_rate_limiter() -> None:
    """Close the limiter's store connection (application shutdown)."""

    global _limiter

    if _limiter is not None:
        await _limiter.store.close()
        _limiter = None


def mood_policy() -> RateLimitPolicy:
    return RateLimitPolicy(
        max_requests=settings.app.mood_rate_limit_requests,
        window_ms=settings.app.mood_rate_limit_window_seconds * 1000,
        key_namespace=MOOD_NAMESPACE,
    )


def playlists_policy() -> RateLimitPolicy:
    return RateLimitPolicy(
        max_requests=settings.app.playlists_rate_limit_requests,
        window_ms=settings.app.playlists_rate_limit_window_seconds * 1000,
        key_namespace=PLAYLISTS_NAMESPACE,
    )


def build_rate_limit_headers(decision: RateLimitDecision) -> dict[str, str]:
    """X-RateLimit-* headers describing a decision."""

    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(decision.reset_at),
    }


class RateLimit:
    """FastAPI dependency enforcing one route's policy.

    Usage:
        @router.post("/mood", dependencies=[Depends(RateLimit(mood_policy))])

    On success the X-RateLimit-* headers are added to the route's response.
    On denial ``RateLimitExceededError`` is raised and rendered as HTTP 429.
    """

    def __init__(self, policy: Callable[[], RateLimitPolicy]) -> None:
        """Initialize the dependency.

        Args:
            policy: Callable returning the policy, evaluated per request so
                settings changes take effect without rebuilding routes.
        """
        self.policy = policy

    async def __call__(self, request: Request, response: Response) -> RateLimitDecision | None:
        if not settings.app.rate_limit_enabled:
            return None

        policy = self.policy()
        client_ip = get_client_ip(request.headers)
        limiter = get_rate_limiter()
        decision = await limiter.check(client_ip, policy)
        headers = build_rate_limit_headers(decision)

        log_extra = {
            "namespace": policy.key_namespace,
            "client_hash": hash_identifier(client_ip),
            "limit": decision.limit,
            "remaining": decision.remaining,
            "reset_at": decision.reset_at,
        }

        if decision.allowed:
            logger.info("rate_limit.allowed", extra=log_extra)
            response.headers.update(headers)
            return decision

        retry_after = decision.retry_after_seconds(limiter.now_ms())
        logger.warning("rate_limit.exceeded", extra={**log_extra, "retry_after_s": retry_after})

        minutes = max(1, math.ceil(retry_after / 60))
        raise RateLimitExceededError(
            code="rate_limit_exceeded",
            message=f"You have exceeded the request limit. Try again in {minutes} minutes.",
            limit=decision.limit,
            reset_at=decision.reset_at,
            headers={**headers, "Retry-After": str(retry_after)},
        )
