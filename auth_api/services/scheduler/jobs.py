"""Periodic maintenance jobs run by the scheduler."""

from typing import Awaitable, Callable

from auth_api.db import get_db_session
from auth_api.services.accounts import account_store
from auth_api.services.rate_limit import RateLimiter
from auth_api.utils import logger

PURGE_EXPIRED_TOKENS = "purge_expired_tokens"
SWEEP_RATE_LIMITS = "sweep_rate_limits"


async def purge_expired_tokens() -> int:
    """Delete expired verification, reset and refresh token rows."""
    async with get_db_session() as db:
        removed = await account_store.purge_expired_tokens(db)

    if removed > 0:
        logger.info(f"Scheduler: purged {removed} expired token row(s)")
    return removed


def make_rate_limit_sweep(limiter: RateLimiter) -> Callable[[], Awaitable[int]]:
    async def sweep_rate_limits() -> int:
        return await limiter.sweep()

    return sweep_rate_limits
