"""
Timeline / Refresh Policy — precomputed evaluation points for glanceable
surfaces (widgets, watch complication).

While a fast is running the surface gets one entry per minute for the next
hour and is asked to refresh after an hour; otherwise it gets a single entry
and refreshes after 15 minutes. Every entry re-derives its numbers from the
snapshot at its own date, so entries can be consumed in any order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from ..core import goals
from ..core.formatting import format_from_interval, format_remaining_natural_language
from ..core.history import completed_fasts, recent_window
from ..core.session import FastingSession
from ..core.units import utcnow

logger = logging.getLogger(__name__)

ACTIVE_ENTRY_COUNT = 60
ACTIVE_REFRESH = timedelta(minutes=60)
INACTIVE_REFRESH = timedelta(minutes=15)
RECENT_FAST_COUNT = 5


@dataclass
class FastHistoryPoint:
    """A completed fast as drawn in the widget graph."""
    start_date: datetime
    fasted_hours: float
    goal_hours: float
    goal_met: bool


@dataclass
class FastingSnapshot:
    """Everything a surface needs, read once per recomputation."""
    is_active: bool
    start_time: Optional[datetime]
    goal_minutes: Optional[int]
    saved_goal_minutes: int
    last_fast_duration: Optional[timedelta] = None
    last_fast_goal_met: Optional[bool] = None
    last_fast_start_time: Optional[datetime] = None
    last_fast_end_time: Optional[datetime] = None
    recent_fasts: List[FastHistoryPoint] = field(default_factory=list)

    @classmethod
    def empty(cls, saved_goal_minutes: int) -> "FastingSnapshot":
        """The "nothing is running, no history" state used on any load failure."""
        return cls(
            is_active=False,
            start_time=None,
            goal_minutes=None,
            saved_goal_minutes=saved_goal_minutes,
        )


@dataclass
class FastingEntry:
    date: datetime
    snapshot: FastingSnapshot

    def elapsed(self) -> timedelta:
        if not self.snapshot.is_active or self.snapshot.start_time is None:
            return timedelta(0)
        return self.date - self.snapshot.start_time

    @property
    def effective_goal_minutes(self) -> int:
        """Running fast's goal, else the goal a new fast would get."""
        if self.snapshot.goal_minutes is not None:
            return self.snapshot.goal_minutes
        return self.snapshot.saved_goal_minutes

    @property
    def goal_met(self) -> bool:
        return self.snapshot.is_active and goals.is_goal_met(self.elapsed(), self.snapshot.goal_minutes)

    @property
    def progress(self) -> float:
        return goals.progress(self.elapsed(), self.snapshot.goal_minutes)

    @property
    def remaining_minutes(self) -> int:
        return goals.remaining_minutes(self.elapsed(), self.snapshot.goal_minutes)

    @property
    def elapsed_hours(self) -> int:
        return goals.elapsed_hours(self.elapsed())

    @property
    def elapsed_minutes(self) -> int:
        return goals.elapsed_minutes_component(self.elapsed())

    @property
    def end_time(self) -> Optional[datetime]:
        """Instant the running fast reaches its goal."""
        if not self.snapshot.is_active or self.snapshot.start_time is None:
            return None
        return goals.goal_time(self.snapshot.start_time, self.effective_goal_minutes)

    def elapsed_text(self) -> str:
        return format_from_interval(max(self.elapsed(), timedelta(0)))

    def remaining_text(self) -> str:
        return format_remaining_natural_language(self.remaining_minutes)


@dataclass
class Timeline:
    entries: List[FastingEntry]
    refresh_at: datetime


# ---------------------------------------------------------------------------
# Snapshot loading
# ---------------------------------------------------------------------------

def _history_point(session: FastingSession) -> FastHistoryPoint:
    return FastHistoryPoint(
        start_date=session.start_time,
        fasted_hours=session.duration().total_seconds() / 3600.0,
        goal_hours=(session.goal_minutes or 0) / 60.0,
        goal_met=session.goal_met(),
    )


def snapshot_from_sessions(
    sessions: List[FastingSession],
    saved_goal_minutes: int,
    recent_count: int = RECENT_FAST_COUNT,
) -> FastingSnapshot:
    """*sessions* must be ordered most recent first."""
    active = next((s for s in sessions if s.is_active), None)
    completed = completed_fasts(sessions)
    last = completed[0] if completed else None
    return FastingSnapshot(
        is_active=active is not None,
        start_time=active.start_time if active else None,
        goal_minutes=active.goal_minutes if active else None,
        saved_goal_minutes=saved_goal_minutes,
        last_fast_duration=last.duration() if last else None,
        last_fast_goal_met=last.goal_met() if last else None,
        last_fast_start_time=last.start_time if last else None,
        last_fast_end_time=last.end_time if last else None,
        recent_fasts=[_history_point(s) for s in recent_window(completed, recent_count)],
    )


def load_snapshot(
    fetch_sessions: Callable[[], List[FastingSession]],
    saved_goal_minutes: int,
    recent_count: int = RECENT_FAST_COUNT,
) -> FastingSnapshot:
    """Read the store; any failure yields the empty snapshot instead of an error."""
    try:
        sessions = fetch_sessions()
    except Exception:
        logger.exception("Failed to fetch fasting data; using empty snapshot")
        return FastingSnapshot.empty(saved_goal_minutes)
    return snapshot_from_sessions(sessions, saved_goal_minutes, recent_count)


# ---------------------------------------------------------------------------
# Refresh policy
# ---------------------------------------------------------------------------

def build_timeline(
    snapshot: FastingSnapshot,
    now: Optional[datetime] = None,
    active_entry_count: int = ACTIVE_ENTRY_COUNT,
    active_refresh: timedelta = ACTIVE_REFRESH,
    inactive_refresh: timedelta = INACTIVE_REFRESH,
) -> Timeline:
    now = now or utcnow()
    if snapshot.is_active:
        entries = [
            FastingEntry(date=now + timedelta(minutes=k), snapshot=snapshot)
            for k in range(active_entry_count)
        ]
        return Timeline(entries=entries, refresh_at=now + active_refresh)
    return Timeline(
        entries=[FastingEntry(date=now, snapshot=snapshot)],
        refresh_at=now + inactive_refresh,
    )


class TimelineProvider:
    """Binds the refresh policy to a session source and the saved goal."""

    def __init__(
        self,
        fetch_sessions: Callable[[], List[FastingSession]],
        saved_goal: Callable[[], int],
        active_entry_count: int = ACTIVE_ENTRY_COUNT,
        active_refresh: timedelta = ACTIVE_REFRESH,
        inactive_refresh: timedelta = INACTIVE_REFRESH,
        recent_count: int = RECENT_FAST_COUNT,
    ):
        self._fetch = fetch_sessions
        self._saved_goal = saved_goal
        self._active_entry_count = active_entry_count
        self._active_refresh = active_refresh
        self._inactive_refresh = inactive_refresh
        self._recent_count = recent_count

    def snapshot(self) -> FastingSnapshot:
        return load_snapshot(self._fetch, self._saved_goal(), self._recent_count)

    def entry(self, now: Optional[datetime] = None) -> FastingEntry:
        return FastingEntry(date=now or utcnow(), snapshot=self.snapshot())

    def timeline(
        self, now: Optional[datetime] = None, snapshot: Optional[FastingSnapshot] = None
    ) -> Timeline:
        return build_timeline(
            snapshot if snapshot is not None else self.snapshot(),
            now,
            self._active_entry_count,
            self._active_refresh,
            self._inactive_refresh,
        )
