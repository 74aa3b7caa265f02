"""Background scheduler service module for periodic tasks."""

from auth_api.services.scheduler.scheduler_service import (
    ScheduledJob,
    SchedulerService,
    scheduler_service,
)
from auth_api.services.scheduler.jobs import (
    PURGE_EXPIRED_TOKENS,
    SWEEP_RATE_LIMITS,
    make_rate_limit_sweep,
    purge_expired_tokens,
)

__all__ = [
    "PURGE_EXPIRED_TOKENS",
    "SWEEP_RATE_LIMITS",
    "ScheduledJob",
    "SchedulerService",
    "make_rate_limit_sweep",
    "purge_expired_tokens",
    "scheduler_service",
]
