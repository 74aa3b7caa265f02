"""Environment detection utilities."""

import os

DEPLOYED_ENVIRONMENTS = ("staging", "production")


def get_environment() -> str:
    """Get the current environment name.

    Returns:
        Environment name: 'local', 'test', 'staging', or 'production'
    """
    return os.getenv("ENV", "local")


def is_production() -> bool:
    """Check if running in production environment."""
    return get_environment() == "production"


def is_debug() -> bool:
    """Check if running in debug/local mode.

    Returns:
        True if ENV is 'local' or not set
    """
    return get_environment() == "local"


def is_deployed() -> bool:
    """Check if running in a deployed environment (staging or production)."""
    return get_environment() in DEPLOYED_ENVIRONMENTS
