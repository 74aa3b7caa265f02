"""Fixed-window rate limiter with named policies.

For a key at time `now`:

1. no record: start a window (count 1, reset_at = now + window), allow
2. window elapsed (now > reset_at): start a new window, allow
3. otherwise count += 1 and deny once count exceeds the policy maximum
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)


class KeyScope(str, Enum):
    """What a policy's counter is keyed on."""

    IP = "ip"
    IP_USER_AGENT = "ip_user_agent"
    EMAIL = "email"


@dataclass(frozen=True)
class RateLimitPolicy:
    name: str
    window_seconds: int
    max_requests: int
    key_scope: KeyScope
    message: str = "Too many requests, please try again later."


@dataclass
class RateLimitRecord:
    count: int
    reset_at: float  # epoch seconds


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after: int = 0  # whole seconds, only meaningful when denied
    message: Optional[str] = None

    @property
    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(math.ceil(self.reset_at)),
        }


class InMemoryRateLimitStore:
    """Process-local counter store.

    Each key maps to one of a fixed set of locks, so the read-modify-write in
    increment() is atomic per key for asyncio tasks and threads alike. The
    critical sections never await.

    A distributed backend can replace this class as long as increment()
    keeps the same atomicity.
    """

    SHARDS = 64

    def __init__(self):
        self._records: dict[str, RateLimitRecord] = {}
        self._locks = [threading.Lock() for _ in range(self.SHARDS)]

    def _lock_for(self, key: str) -> threading.Lock:
        return self._locks[hash(key) % self.SHARDS]

    async def increment(self, key: str, window_seconds: int, now: float) -> RateLimitRecord:
        """Count one request and return a snapshot of the key's record."""
        with self._lock_for(key):
            record = self._records.get(key)
            if record is None or now > record.reset_at:
                record = RateLimitRecord(count=1, reset_at=now + window_seconds)
                self._records[key] = record
            else:
                record.count += 1
            return RateLimitRecord(count=record.count, reset_at=record.reset_at)

    async def get(self, key: str) -> Optional[RateLimitRecord]:
        with self._lock_for(key):
            record = self._records.get(key)
            if record is None:
                return None
            return RateLimitRecord(count=record.count, reset_at=record.reset_at)

    async def delete(self, key: str) -> None:
        with self._lock_for(key):
            self._records.pop(key, None)

    async def sweep(self, now: float) -> int:
        """Drop records whose window has passed. Returns the number removed."""
        removed = 0
        for key in list(self._records.keys()):
            with self._lock_for(key):
                record = self._records.get(key)
                if record is not None and now > record.reset_at:
                    del self._records[key]
                    removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._records)


class RateLimiter:
    """Apply named policies to keys.

    hit() returns a decision value; a denial is not an exception. When
    disabled every hit is allowed and nothing is counted.
    """

    def __init__(
        self,
        policies: Iterable[RateLimitPolicy],
        store: Optional[InMemoryRateLimitStore] = None,
        clock: Callable[[], float] = time.time,
        enabled: bool = True,
    ):
        self._policies = {policy.name: policy for policy in policies}
        self.store = store or InMemoryRateLimitStore()
        self._clock = clock
        self.enabled = enabled

    def policy(self, name: str) -> RateLimitPolicy:
        try:
            return self._policies[name]
        except KeyError:
            raise ValueError(f"Unknown rate limit policy: {name}") from None

    @staticmethod
    def _store_key(policy: RateLimitPolicy, key: str) -> str:
        return f"{policy.name}:{key}"

    async def hit(self, policy_name: str, key: str) -> RateLimitDecision:
        policy = self.policy(policy_name)
        now = self._clock()

        if not self.enabled:
            return RateLimitDecision(
                allowed=True,
                limit=policy.max_requests,
                remaining=policy.max_requests,
                reset_at=now + policy.window_seconds,
            )

        record = await self.store.increment(self._store_key(policy, key), policy.window_seconds, now)
        remaining = max(0, policy.max_requests - record.count)

        if record.count > policy.max_requests:
            return RateLimitDecision(
                allowed=False,
                limit=policy.max_requests,
                remaining=0,
                reset_at=record.reset_at,
                retry_after=max(1, math.ceil(record.reset_at - now)),
                message=policy.message,
            )

        return RateLimitDecision(
            allowed=True,
            limit=policy.max_requests,
            remaining=remaining,
            reset_at=record.reset_at,
        )

    async def remaining(self, policy_name: str, key: str) -> int:
        policy = self.policy(policy_name)
        record = await self.store.get(self._store_key(policy, key))
        if record is None or self._clock() > record.reset_at:
            return policy.max_requests
        return max(0, policy.max_requests - record.count)

    async def is_limited(self, policy_name: str, key: str) -> bool:
        policy = self.policy(policy_name)
        record = await self.store.get(self._store_key(policy, key))
        if record is None or self._clock() > record.reset_at:
            return False
        return record.count >= policy.max_requests

    async def reset(self, policy_name: str, key: str) -> None:
        policy = self.policy(policy_name)
        await self.store.delete(self._store_key(policy, key))

    async def sweep(self) -> int:
        removed = await self.store.sweep(self._clock())
        if removed:
            logger.debug(f"Rate limiter sweep removed {removed} stale record(s)")
        return removed
