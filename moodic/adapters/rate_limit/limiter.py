"""Fixed-window rate limiter over a shared counter store.

Algorithm per check:
1. INCR ``{namespace}:{identity}``.
2. On the first hit of a window (count == 1) set the key's expiry to the
   window length. Later hits never touch the expiry, so windows are fixed.
3. Read the remaining TTL to report when the window resets.

Every call is counted, denied ones included, so the counter keeps growing
past the limit until the key expires. Blocking is never stored; it is derived
from the count on each check.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from moodic.adapters.rate_limit.base import (
    TTL_NO_EXPIRY,
    CounterStore,
    RateLimitDecision,
    RateLimitPolicy,
    StoreError,
)
from moodic.core.logging import hash_identifier

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class FixedWindowRateLimiter:
    """Rate limiter whose counters live in a ``CounterStore``.

    The store's increment is the only atomic step. The increment, the
    conditional expire and the TTL read are three independent round-trips.
    """

    def __init__(
        self,
        store: CounterStore,
        *,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        """Initialize the limiter.

        Args:
            store: Shared counter store.
            clock: Time source returning UNIX time in milliseconds.
        """
        self.store = store
        self._clock = clock

    def now_ms(self) -> int:
        """Current time on the limiter's clock, in epoch milliseconds."""
        return self._clock()

    async def evaluate(self, identity: str, policy: RateLimitPolicy) -> RateLimitDecision:
        """Count one request for ``identity`` and decide whether it may proceed.

        Args:
            identity: Client partition key (usually the resolved client IP).
            policy: Quota to apply.

        Returns:
            RateLimitDecision for this request.

        Raises:
            StoreError: If any store command fails.
        """
        key = policy.key_for(identity)

        count = await self.store.increment(key)
        if count == 1:
            await self.store.expire(key, policy.window_ms)

        ttl_ms = await self.store.ttl(key)
        if ttl_ms == TTL_NO_EXPIRY:
            # A previous expire was lost after its increment succeeded.
            # Re-arm it so the key cannot block the client forever.
            logger.warning(
                "rate_limit.expiry_missing",
                extra={"namespace": policy.key_namespace, "count": count},
            )
            await self.store.expire(key, policy.window_ms)
            ttl_ms = policy.window_ms
        elif ttl_ms < 0:
            # Key expired between INCR and PTTL; the window is effectively fresh.
            ttl_ms = policy.window_ms

        return RateLimitDecision(
            allowed=count <= policy.max_requests,
            limit=policy.max_requests,
            remaining=max(0, policy.max_requests - count),
            reset_at=self._clock() + ttl_ms,
        )

    def fail_open(self, policy: RateLimitPolicy) -> RateLimitDecision:
        """Decision used when the store cannot be consulted."""
        return RateLimitDecision(
            allowed=True,
            limit=policy.max_requests,
            remaining=policy.max_requests,
            reset_at=self._clock() + policy.window_ms,
        )

    async def check(self, identity: str, policy: RateLimitPolicy) -> RateLimitDecision:
        """Like ``evaluate`` but never raises: store failures fail open.

        Args:
            identity: Client partition key.
            policy: Quota to apply.

        Returns:
            The evaluated decision, or the fail-open decision on store failure.
        """
        try:
            return await self.evaluate(identity, policy)
        except StoreError as exc:
            logger.error(
                "rate_limit.store_failed",
                extra={
                    "namespace": policy.key_namespace,
                    "client_hash": hash_identifier(identity),
                    "error_msg": str(exc),
                },
            )
            return self.fail_open(policy)
