"""
Timestamp helpers shared by both scheduling tracks.

Persisted scheduling timestamps (dueAt, lastReviewedAt) are ISO-8601 UTC
strings with millisecond precision and a trailing "Z", e.g.
"2024-01-01T12:00:00.000Z". Every string produced here has that exact
shape so that lexicographic order matches chronological order.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


SECONDS_PER_DAY = 86400.0


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    """
    Format a datetime as "YYYY-MM-DDTHH:MM:SS.mmmZ".

    Sub-millisecond precision is truncated.
    """
    value = ensure_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_iso(value: object) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp (or pass through a datetime).

    Returns None for missing or unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def days_between(start: Optional[datetime], end: datetime) -> float:
    """
    Elapsed days from start to end (fractional, never negative).

    A missing start means "never reviewed" and yields 0.
    """
    if start is None:
        return 0.0
    delta = ensure_utc(end) - ensure_utc(start)
    return max(0.0, delta.total_seconds() / SECONDS_PER_DAY)


def add_days(base: datetime, days: int) -> datetime:
    """Shift a timestamp forward by whole calendar days."""
    return ensure_utc(base) + timedelta(days=days)
