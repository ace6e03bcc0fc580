"""
Fasting Session — the single persisted entity and its derived properties.

Only start_time, end_time, goal_minutes and goal_celebration_shown are stored.
Duration and goal status are always re-derived for an evaluation instant, so a
completed session's duration is frozen the moment end_time is set.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from ..errors import InvalidCorrectionError
from . import formatting, goals
from .units import as_utc, utcnow


@dataclass
class FastingSession:
    start_time: datetime = field(default_factory=utcnow)
    goal_minutes: Optional[int] = None        # None = no goal; goal_met is then always False
    end_time: Optional[datetime] = None       # None while the fast is running
    goal_celebration_shown: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        self.start_time = as_utc(self.start_time)
        if self.end_time is not None:
            self.end_time = as_utc(self.end_time)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    def duration(self, now: Optional[datetime] = None) -> timedelta:
        """
        Elapsed time: now - start while active, end - start once stopped.
        Negative when start_time lies in the future; callers treat that as
        "not yet valid" rather than an error.
        """
        end = self.end_time if self.end_time is not None else as_utc(now or utcnow())
        return end - self.start_time

    def goal_met(self, now: Optional[datetime] = None) -> bool:
        return goals.is_goal_met(self.duration(now), self.goal_minutes)

    def formatted_duration(self, now: Optional[datetime] = None) -> str:
        return formatting.format_clock_duration(self.duration(now))

    def formatted_duration_short(self, now: Optional[datetime] = None) -> str:
        return formatting.format_clock_duration_short(self.duration(now))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def stop(self, now: Optional[datetime] = None) -> None:
        """End the fast. Stopping an already stopped session is a no-op."""
        if self.end_time is not None:
            return
        self.end_time = as_utc(now or utcnow())

    def correct(self, start_time: datetime, end_time: datetime, goal_minutes: int) -> None:
        """Replace the time range and goal together; the new values must be valid."""
        start_time, end_time = as_utc(start_time), as_utc(end_time)
        if end_time <= start_time:
            raise InvalidCorrectionError("end_time must be after start_time")
        if goal_minutes <= 0:
            raise InvalidCorrectionError("goal_minutes must be positive")
        self.start_time = start_time
        self.end_time = end_time
        self.goal_minutes = goal_minutes

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat() if self.end_time else None,
            "goalMinutes": self.goal_minutes,
            "goalCelebrationShown": self.goal_celebration_shown,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FastingSession":
        end_raw = data.get("endTime")
        goal_raw = data.get("goalMinutes")
        return cls(
            id=str(data["id"]),
            start_time=datetime.fromisoformat(data["startTime"]),
            end_time=datetime.fromisoformat(end_raw) if end_raw else None,
            goal_minutes=int(goal_raw) if goal_raw is not None else None,
            goal_celebration_shown=bool(data.get("goalCelebrationShown", False)),
        )
