"""Logging configuration for the application."""

import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from auth_api.utils.environment import is_debug

LOGGER_NAME = "auth-api"

# Bearer credentials and anything shaped like a JWT
TOKEN_PATTERNS = (
    re.compile(r"(Bearer\s+)[\w\-.~+/]+=*", re.IGNORECASE),
    re.compile(r"()eyJ[\w-]+\.[\w-]+\.[\w-]+"),
)
MASK = "***"


class TokenRedactingFilter(logging.Filter):
    """Mask access and refresh tokens that end up in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = message
        for pattern in TOKEN_PATTERNS:
            redacted = pattern.sub(lambda m: f"{m.group(1)}{MASK}", redacted)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _build_handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(TokenRedactingFilter())
    return handler


def setup_logger(
    name: str = LOGGER_NAME,
    log_file: str | None = None,
    log_level: str | None = None,
) -> logging.Logger:
    """Configure and return the application logger.

    Module loggers under ``auth_api.*`` share these handlers.

    Args:
        name: Logger name
        log_file: Path to log file (default: from LOG_FILE env or logs/app.log;
            an empty LOG_FILE disables file logging)
        log_level: Log level (default: from LOG_LEVEL env or DEBUG for local, INFO otherwise)

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "DEBUG" if is_debug() else "INFO")
    level = getattr(logging, log_level.upper(), logging.INFO)

    log = logging.getLogger(name)
    log.setLevel(level)
    if log.handlers:
        return log

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handlers: list[logging.Handler] = [_build_handler(logging.StreamHandler(sys.stdout), level, formatter)]

    if log_file is None:
        log_file = os.getenv("LOG_FILE", "logs/app.log")

    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            # 10MB max, keep 5 backups
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
            handlers.append(_build_handler(file_handler, level, formatter))
        except OSError as e:
            log.warning(f"Failed to create file handler for {log_file}: {e}")

    # Services log through logging.getLogger(__name__)
    package_log = logging.getLogger("auth_api")
    package_log.setLevel(level)
    for handler in handlers:
        log.addHandler(handler)
        package_log.addHandler(handler)

    log.propagate = False
    package_log.propagate = False
    return log


# Global logger instance
logger = setup_logger()
