"""Utility modules for the auth API."""

from auth_api.utils.logger import logger, setup_logger
from auth_api.utils.environment import is_production, is_debug, is_deployed, get_environment
from auth_api.utils.sentry_utils import configure_sentry, capture_exception
from auth_api.utils.response_utils import success, success_response, error_response
from auth_api.utils.errors import ApiError, ErrorKind
from auth_api.utils.datetime_utils import utcnow
from auth_api.utils.constants import API_VERSION, API_PREFIX

__all__ = [
    # Logger
    "logger",
    "setup_logger",
    # Environment
    "is_production",
    "is_debug",
    "is_deployed",
    "get_environment",
    # Sentry
    "configure_sentry",
    "capture_exception",
    # Response
    "success",
    "success_response",
    "error_response",
    # Errors
    "ApiError",
    "ErrorKind",
    # Time
    "utcnow",
    # API
    "API_VERSION",
    "API_PREFIX",
]
