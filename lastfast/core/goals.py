"""
Goal / Progress Calculator — pure functions over (elapsed duration, goal minutes).

Every surface (API, timeline entries, live status, voice intents) derives its
numbers from these functions with the same three inputs, so two consumers
evaluating the same instant can never disagree on "is the goal met yet".

Boundary rule: a goal of G minutes is met at the exact second the whole
elapsed-second count reaches G*60; one second earlier it is not.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from .units import Duration, to_seconds, trunc_div, trunc_mod, whole_seconds


class GoalMode(str, Enum):
    DURATION = "duration"
    END_TIME = "end_time"


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------

def elapsed_whole_minutes(current_duration: Duration) -> int:
    return trunc_div(whole_seconds(current_duration), 60)


def remaining_minutes(current_duration: Duration, goal_minutes: Optional[int]) -> int:
    """Minutes left until the goal; 0 once met or when there is no goal."""
    if goal_minutes is None:
        return 0
    return max(0, goal_minutes - elapsed_whole_minutes(current_duration))


def progress(current_duration: Duration, goal_minutes: Optional[int]) -> float:
    """Fraction of the goal elapsed, clamped to [0, 1]. Absent or zero goal gives 0."""
    if not goal_minutes or goal_minutes <= 0:
        return 0.0
    ratio = (to_seconds(current_duration) / 60.0) / goal_minutes
    return max(0.0, min(1.0, ratio))


def is_goal_met(current_duration: Duration, goal_minutes: Optional[int]) -> bool:
    if goal_minutes is None:
        return False
    return elapsed_whole_minutes(current_duration) >= goal_minutes


# ---------------------------------------------------------------------------
# Component extraction
# ---------------------------------------------------------------------------

def elapsed_hours(current_duration: Duration) -> int:
    return trunc_div(whole_seconds(current_duration), 3600)


def elapsed_minutes_component(current_duration: Duration) -> int:
    """Minutes past the last whole hour (0-59)."""
    return trunc_div(trunc_mod(whole_seconds(current_duration), 3600), 60)


def hours_from_minutes(total_minutes: int) -> int:
    return total_minutes // 60


def minutes_component(total_minutes: int) -> int:
    return total_minutes % 60


# ---------------------------------------------------------------------------
# Goal selection
# ---------------------------------------------------------------------------

def goal_time(start_time: datetime, goal_minutes: int) -> datetime:
    """Instant at which a fast started at *start_time* reaches its goal."""
    return start_time + timedelta(minutes=goal_minutes)


def goal_minutes_from_hours(hours: float) -> int:
    """Hours (possibly fractional) to whole minutes; 18.5 -> 1110. Truncates."""
    return int(hours * 60)


def minutes_until_end_time(end_time: datetime, now: datetime) -> int:
    """Whole minutes from *now* until *end_time*, clamped to 0 when in the past."""
    return max(0, int((end_time - now).total_seconds() / 60))


def is_goal_valid(
    mode: GoalMode,
    selected_hours: int,
    selected_minutes: int,
    minutes_until_end: int,
) -> bool:
    if mode == GoalMode.DURATION:
        return selected_hours > 0 or selected_minutes > 0
    return minutes_until_end > 0


def compute_goal_minutes(
    mode: GoalMode,
    selected_hours: int,
    selected_minutes: int,
    minutes_until_end: int,
) -> int:
    if mode == GoalMode.DURATION:
        return selected_hours * 60 + selected_minutes
    return minutes_until_end
