"""
Duration / goal text formatting.

Two registers:
  compact  — "8h 30m", "16h", "45m"            (widgets, notifications, API)
  natural  — "8 hours and 30 minutes", "1 hour" (spoken intent responses)
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Optional, Tuple

from .units import Duration, as_utc, trunc_div, trunc_mod, whole_seconds


def hours_and_minutes(interval: Duration) -> Tuple[int, int]:
    """Split an interval into (hours, minutes); seconds are discarded first."""
    total_minutes = trunc_div(whole_seconds(interval), 60)
    hours = trunc_div(total_minutes, 60)
    return hours, trunc_mod(total_minutes, 60)


# ── Compact ──────────────────────────────────────────────────────────────────

def format_compact(hours: int, minutes: int) -> str:
    if hours > 0 and minutes > 0:
        return f"{hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h"
    return f"{minutes}m"


def format_from_interval(interval: Duration) -> str:
    return format_compact(*hours_and_minutes(interval))


def format_goal_text(goal_minutes: int) -> str:
    """Compact goal label used in notification titles, e.g. "16h 30m"."""
    return format_compact(goal_minutes // 60, goal_minutes % 60)


# ── Natural language ─────────────────────────────────────────────────────────

def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_natural_language(hours: int, minutes: int) -> str:
    if hours > 0 and minutes > 0:
        return f"{_plural(hours, 'hour')} and {_plural(minutes, 'minute')}"
    if hours > 0:
        return _plural(hours, "hour")
    return _plural(minutes, "minute")


def format_natural_language_from_interval(interval: Duration) -> str:
    return format_natural_language(*hours_and_minutes(interval))


def format_remaining_natural_language(remaining_minutes: int) -> str:
    return format_natural_language(remaining_minutes // 60, remaining_minutes % 60)


def format_goal_description(goal_minutes: int) -> str:
    return format_natural_language(goal_minutes // 60, goal_minutes % 60)


def format_goal_description_hours(hours: float) -> str:
    """Describe a goal given in (possibly fractional) hours: 18.25 -> "18 hours and 15 minutes"."""
    whole_hours = int(hours)
    minutes = int((hours - whole_hours) * 60)
    return format_natural_language(whole_hours, minutes)


# ── Clock times ──────────────────────────────────────────────────────────────

def format_24h_time(instant: datetime, tz: Optional[tzinfo] = None) -> str:
    """Wall-clock "HH:MM" in *tz* (UTC when omitted)."""
    return as_utc(instant).astimezone(tz or timezone.utc).strftime("%H:%M")


# ── Running-clock strings ────────────────────────────────────────────────────

def format_clock_duration(interval: Duration) -> str:
    """Running clock text: 1h 2m 3s, 2m 3s or 3s."""
    total = whole_seconds(interval)
    hours = trunc_div(total, 3600)
    minutes = trunc_div(trunc_mod(total, 3600), 60)
    seconds = trunc_mod(total, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def format_clock_duration_short(interval: Duration) -> str:
    """Hours and zero-padded minutes, e.g. 16:05 or 0:42."""
    total = whole_seconds(interval)
    hours = trunc_div(total, 3600)
    minutes = trunc_div(trunc_mod(total, 3600), 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}"
    return f"0:{minutes:02d}"
