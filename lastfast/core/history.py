"""
History Aggregator — reduces completed fasts into summary statistics and the
bounded windows the history chart and the widget graph draw from.

Inputs are lists of sessions ordered most recent first (the store's order).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

import numpy as np

from .session import FastingSession
from .units import as_utc, utcnow

# Chart height used when there is nothing to scale against
_EMPTY_CHART_SCALE_S = 3600.0


@dataclass
class HistoryStats:
    total: int
    goals_met: int
    success_rate: float                      # percent, 0 when there are no fasts
    avg_duration: Optional[timedelta]        # None = no data, distinct from zero


@dataclass
class ChartBar:
    session_id: str
    start_time: datetime
    duration_seconds: float
    height_fraction: float                   # bar height relative to the chart scale
    goal_fraction: Optional[float]           # goal line position, None without a goal
    goal_met: bool


@dataclass
class DayTotal:
    """All fasts that ended on one calendar day, summed."""
    date: datetime                           # start of the day
    total_fasted_hours: float
    goal_met: bool                           # any fast that day met its goal


def completed_fasts(sessions: List[FastingSession]) -> List[FastingSession]:
    return [s for s in sessions if not s.is_active]


def recent_window(sessions: List[FastingSession], n: int) -> List[FastingSession]:
    """The *n* most recent sessions, oldest first (chart order)."""
    if n <= 0:
        return []
    return list(reversed(sessions))[-n:]


def _durations(sessions: List[FastingSession], now: datetime) -> np.ndarray:
    return np.array([s.duration(now).total_seconds() for s in sessions], dtype=np.float64)


def stats(sessions: List[FastingSession], now: Optional[datetime] = None) -> HistoryStats:
    now = now or utcnow()
    total = len(sessions)
    goals_met = sum(1 for s in sessions if s.goal_met(now))
    if total == 0:
        return HistoryStats(total=0, goals_met=0, success_rate=0.0, avg_duration=None)
    return HistoryStats(
        total=total,
        goals_met=goals_met,
        success_rate=goals_met / total * 100,
        avg_duration=timedelta(seconds=float(_durations(sessions, now).mean())),
    )


def chart_scale(sessions: List[FastingSession], now: Optional[datetime] = None) -> float:
    """
    Seconds represented by the full chart height: the longest fast or the
    largest goal, whichever is greater, so a goal line never clips.
    """
    now = now or utcnow()
    max_fasted = float(_durations(sessions, now).max()) if sessions else _EMPTY_CHART_SCALE_S
    goal_seconds = [g * 60.0 for g in (s.goal_minutes for s in sessions) if g is not None]
    max_goal = max(goal_seconds) if goal_seconds else 0.0
    return max(max_fasted, max_goal)


def chart_bars(sessions: List[FastingSession], now: Optional[datetime] = None) -> List[ChartBar]:
    now = now or utcnow()
    scale = chart_scale(sessions, now)
    bars = []
    for s in sessions:
        seconds = s.duration(now).total_seconds()
        goal_fraction = None
        if s.goal_minutes is not None and scale > 0:
            goal_fraction = s.goal_minutes * 60.0 / scale
        bars.append(ChartBar(
            session_id=s.id,
            start_time=s.start_time,
            duration_seconds=seconds,
            height_fraction=max(0.0, seconds / scale) if scale > 0 else 0.0,
            goal_fraction=goal_fraction,
            goal_met=s.goal_met(now),
        ))
    return bars


def daily_totals(
    sessions: List[FastingSession],
    today: datetime,
    days: int = 5,
) -> List[DayTotal]:
    """
    Per-day totals for the *days* calendar days before *today* (today excluded),
    oldest first. A fast counts towards the day on which it ended; day
    boundaries follow the timezone *today* carries (UTC when naive).
    """
    if today.tzinfo is None:
        today = as_utc(today)
    day0 = today.replace(hour=0, minute=0, second=0, microsecond=0)
    result = []
    for offset in range(1, days + 1):
        day_start = day0 - timedelta(days=offset)
        day_end = day_start + timedelta(days=1)
        day_fasts = [
            s for s in sessions
            if s.end_time is not None and day_start <= s.end_time < day_end
        ]
        total_s = sum(s.duration().total_seconds() for s in day_fasts)
        result.append(DayTotal(
            date=day_start,
            total_fasted_hours=total_s / 3600.0,
            goal_met=any(s.goal_met() for s in day_fasts),
        ))
    return list(reversed(result))
