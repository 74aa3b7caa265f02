"""Rate limiting service package."""

from auth_api.services.rate_limit.rate_limiter import (
    InMemoryRateLimitStore,
    KeyScope,
    RateLimitDecision,
    RateLimiter,
    RateLimitPolicy,
    RateLimitRecord,
)
from auth_api.services.rate_limit.rate_limit_config import (
    AUTH,
    EMAIL_VERIFICATION,
    GENERAL,
    PASSWORD_RESET,
    STRICT,
    RateLimitSettings,
    build_policies,
    rate_limit_settings,
)

__all__ = [
    "AUTH",
    "EMAIL_VERIFICATION",
    "GENERAL",
    "PASSWORD_RESET",
    "STRICT",
    "InMemoryRateLimitStore",
    "KeyScope",
    "RateLimitDecision",
    "RateLimitPolicy",
    "RateLimitRecord",
    "RateLimitSettings",
    "RateLimiter",
    "build_policies",
    "rate_limit_settings",
]
