"""Datetime helpers.

All timestamps are stored as naive UTC datetimes so the same comparisons work
against PostgreSQL and SQLite.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
