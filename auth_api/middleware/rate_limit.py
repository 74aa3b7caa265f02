"""Rate limiting middleware and route dependencies."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from auth_api.config import settings
from auth_api.services.accounts import normalize_email
from auth_api.services.rate_limit import GENERAL, KeyScope, RateLimitDecision, RateLimiter, RateLimitPolicy
from auth_api.utils.errors import ApiError, ErrorKind
from auth_api.utils.logger import logger
from auth_api.utils.response_utils import rate_limited_error

# Response headers browsers may read cross-origin
RATE_LIMIT_HEADERS = ["Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"]


def client_ip(request: Request) -> str:
    """Client address; the first X-Forwarded-For hop when behind a trusted proxy."""
    if settings.trust_proxy:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


def rate_limit_key(request: Request, policy: RateLimitPolicy) -> str:
    ip = client_ip(request)
    if policy.key_scope == KeyScope.IP_USER_AGENT:
        return f"{ip}:{request.headers.get('User-Agent', '')}"
    return ip


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def _retry_hint(decision: RateLimitDecision) -> str:
    return f"Please wait {decision.retry_after} seconds before trying again."


async def check_rate_limit(request: Request, policy_name: str, key: str) -> RateLimitDecision:
    """
    Count one request against a policy.

    The decision is kept on request.state so the middleware can emit its
    X-RateLimit-* headers.

    Raises:
        ApiError: 429 when the policy denies the request
    """
    limiter = get_rate_limiter(request)
    decision = await limiter.hit(policy_name, key)
    request.state.rate_limit = decision

    if not decision.allowed:
        logger.warning(
            f"[RATE LIMIT] policy={policy_name} key={key} "
            f"{request.method} {request.url.path} retry_after={decision.retry_after}s"
        )
        raise ApiError(
            ErrorKind.RATE_LIMITED,
            decision.message or "Too many requests, please try again later.",
            errors=[_retry_hint(decision)],
            headers={"Retry-After": str(decision.retry_after), **decision.headers},
        )
    return decision


async def enforce_rate_limit(request: Request, policy_name: str, email: str) -> RateLimitDecision:
    """Check an email-keyed policy from inside a route, after the body is parsed."""
    return await check_rate_limit(request, policy_name, normalize_email(email))


class RateLimit:
    """Route dependency applying an IP or IP+User-Agent keyed policy.

    Usage:
        @router.post("/signin", dependencies=[Depends(RateLimit(AUTH))])
    """

    def __init__(self, policy_name: str):
        self.policy_name = policy_name

    async def __call__(self, request: Request) -> None:
        policy = get_rate_limiter(request).policy(self.policy_name)
        await check_rate_limit(request, self.policy_name, rate_limit_key(request, policy))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply the general policy to every request.

    Also copies the most specific decision made for the request into the
    X-RateLimit-* response headers.
    """

    EXCLUDED_PATHS = {
        "/health",
        "/",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        limiter: RateLimiter | None = getattr(request.app.state, "rate_limiter", None)
        if limiter is None or request.url.path in self.EXCLUDED_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        key = client_ip(request)
        decision = await limiter.hit(GENERAL, key)
        if not decision.allowed:
            logger.warning(
                f"[RATE LIMIT] policy={GENERAL} key={key} "
                f"{request.method} {request.url.path} retry_after={decision.retry_after}s"
            )
            return rate_limited_error(
                decision.message or "Too many requests, please try again later.",
                decision.retry_after,
                headers=decision.headers,
            )

        request.state.rate_limit = decision
        response = await call_next(request)

        final_decision: RateLimitDecision = getattr(request.state, "rate_limit", decision)
        for name, value in final_decision.headers.items():
            response.headers[name] = value
        return response
