"""
Duration primitives shared by the calculator and the formatter.

Durations arrive either as a timedelta or as a number of seconds. Whole-unit
conversions truncate toward zero, so a slightly negative duration (clock skew)
still counts as "0 minutes" rather than "-1 minute".
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Union

Duration = Union[timedelta, float, int]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(instant: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_seconds(duration: Duration) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


def whole_seconds(duration: Duration) -> int:
    """Elapsed seconds with the fractional part discarded."""
    return int(to_seconds(duration))


def trunc_div(n: int, d: int) -> int:
    q = abs(n) // d
    return q if n >= 0 else -q


def trunc_mod(n: int, d: int) -> int:
    return n - d * trunc_div(n, d)
