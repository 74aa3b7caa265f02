"""Sentry error tracking utilities."""

import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from auth_api.utils.environment import get_environment, is_deployed

# Track if Sentry has been initialized
_sentry_initialized = False


def configure_sentry(dsn_env_var: str = "SENTRY_DSN") -> bool:
    """Initialize Sentry for error tracking.

    Only initializes in deployed environments (staging/production) and
    requires the DSN environment variable to be set.

    Args:
        dsn_env_var: Environment variable name containing the Sentry DSN

    Returns:
        True if Sentry was initialized, False otherwise
    """
    global _sentry_initialized

    if _sentry_initialized:
        return True

    if not is_deployed():
        return False

    dsn = os.getenv(dsn_env_var)
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=get_environment(),
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.2")),
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        # Credentials flow through this service; never attach request PII
        send_default_pii=False,
    )

    _sentry_initialized = True
    return True


def capture_exception(exception: Exception) -> None:
    """Capture an exception and send it to Sentry (no-op when not initialized)."""
    if not _sentry_initialized:
        return

    sentry_sdk.capture_exception(exception)


def set_user_context(user_id: str) -> None:
    """Set the user context for Sentry events.

    Only the id is attached; emails stay out of error reports.
    """
    if not _sentry_initialized:
        return

    sentry_sdk.set_user({"id": user_id})
