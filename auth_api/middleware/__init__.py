"""HTTP middleware and request-level helpers."""

from auth_api.middleware.performance import PerformanceMiddleware
from auth_api.middleware.rate_limit import (
    RATE_LIMIT_HEADERS,
    RateLimit,
    RateLimitMiddleware,
    client_ip,
    enforce_rate_limit,
)
from auth_api.middleware.request_context import BodyCaptureMiddleware

__all__ = [
    "BodyCaptureMiddleware",
    "PerformanceMiddleware",
    "RATE_LIMIT_HEADERS",
    "RateLimit",
    "RateLimitMiddleware",
    "client_ip",
    "enforce_rate_limit",
]
