"""Rate limit policy configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings

from auth_api.services.rate_limit.rate_limiter import KeyScope, RateLimitPolicy
from auth_api.utils.environment import is_debug

GENERAL = "general"
STRICT = "strict"
AUTH = "auth"
PASSWORD_RESET = "password_reset"
EMAIL_VERIFICATION = "email_verification"


class RateLimitSettings(BaseSettings):
    """Window length (seconds) and request budget per named policy."""

    ENABLED: bool = True
    SWEEP_INTERVAL_SECONDS: int = Field(default=60, gt=0)

    GENERAL_WINDOW_SECONDS: int = Field(default=15 * 60, gt=0)
    GENERAL_MAX: int = Field(default=100, gt=0)
    # Used instead of GENERAL_MAX when running locally
    GENERAL_MAX_LOCAL: int = Field(default=1000, gt=0)

    STRICT_WINDOW_SECONDS: int = Field(default=15 * 60, gt=0)
    STRICT_MAX: int = Field(default=5, gt=0)

    AUTH_WINDOW_SECONDS: int = Field(default=15 * 60, gt=0)
    AUTH_MAX: int = Field(default=10, gt=0)

    PASSWORD_RESET_WINDOW_SECONDS: int = Field(default=15 * 60, gt=0)
    PASSWORD_RESET_MAX: int = Field(default=3, gt=0)

    EMAIL_VERIFICATION_WINDOW_SECONDS: int = Field(default=60 * 60, gt=0)
    EMAIL_VERIFICATION_MAX: int = Field(default=5, gt=0)

    class Config:
        env_prefix = "RATE_LIMIT_"


def build_policies(settings: RateLimitSettings) -> list[RateLimitPolicy]:
    """Build the named policies from settings."""
    return [
        RateLimitPolicy(
            name=GENERAL,
            window_seconds=settings.GENERAL_WINDOW_SECONDS,
            max_requests=settings.GENERAL_MAX_LOCAL if is_debug() else settings.GENERAL_MAX,
            key_scope=KeyScope.IP,
            message="Too many requests from this IP, please try again later.",
        ),
        RateLimitPolicy(
            name=STRICT,
            window_seconds=settings.STRICT_WINDOW_SECONDS,
            max_requests=settings.STRICT_MAX,
            key_scope=KeyScope.IP,
            message="Too many requests from this IP, please try again later.",
        ),
        RateLimitPolicy(
            name=AUTH,
            window_seconds=settings.AUTH_WINDOW_SECONDS,
            max_requests=settings.AUTH_MAX,
            key_scope=KeyScope.IP_USER_AGENT,
            message="Too many authentication attempts, please try again later.",
        ),
        RateLimitPolicy(
            name=PASSWORD_RESET,
            window_seconds=settings.PASSWORD_RESET_WINDOW_SECONDS,
            max_requests=settings.PASSWORD_RESET_MAX,
            key_scope=KeyScope.EMAIL,
            message="Too many password reset requests, please try again later.",
        ),
        RateLimitPolicy(
            name=EMAIL_VERIFICATION,
            window_seconds=settings.EMAIL_VERIFICATION_WINDOW_SECONDS,
            max_requests=settings.EMAIL_VERIFICATION_MAX,
            key_scope=KeyScope.EMAIL,
            message="Too many email verification requests, please try again later.",
        ),
    ]


rate_limit_settings = RateLimitSettings()
