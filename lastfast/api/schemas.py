"""
Pydantic schemas for the FastAPI local API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..core.goals import goal_minutes_from_hours

# ── Sessions ───────────────────────────────────────────────────────────────

class SessionOut(BaseModel):
    id: str
    start_time: datetime
    end_time: Optional[datetime]
    goal_minutes: Optional[int]
    goal_celebration_shown: bool
    active: bool
    duration_seconds: float
    duration_text: str
    goal_met: bool


class StartFastRequest(BaseModel):
    goal_minutes: Optional[int] = Field(None, ge=1, le=7 * 24 * 60)


class CorrectionRequest(BaseModel):
    start_time: datetime
    end_time: datetime
    goal_minutes: int


class NotificationActionRequest(BaseModel):
    action: str = Field(..., description="CONTINUE_FASTING | END_FASTING | DEFAULT")


# ── Current state ──────────────────────────────────────────────────────────

class FastingStateOut(BaseModel):
    active: bool
    session_id: Optional[str]
    start_time: Optional[datetime]
    goal_minutes: Optional[int]
    saved_goal_minutes: int
    elapsed_seconds: int
    elapsed_hours: int
    elapsed_minutes: int
    remaining_minutes: int = Field(..., ge=0)
    progress: float = Field(..., ge=0.0, le=1.0)
    goal_met: bool
    goal_end_time: Optional[datetime]
    elapsed_text: str
    remaining_text: str
    goal_text: str


class CelebrationOut(BaseModel):
    celebrate: bool


# ── History ────────────────────────────────────────────────────────────────

class HistoryStatsOut(BaseModel):
    total: int
    goals_met: int
    success_rate: float
    avg_duration_seconds: Optional[float]
    avg_duration_text: Optional[str]


class ChartBarOut(BaseModel):
    session_id: str
    start_time: datetime
    duration_seconds: float
    height_fraction: float
    goal_fraction: Optional[float]
    goal_met: bool


class HistoryChartOut(BaseModel):
    view: str = Field(..., description="graph | list")
    scale_seconds: float
    bars: List[ChartBarOut]


class DayTotalOut(BaseModel):
    date: datetime
    total_fasted_hours: float
    goal_met: bool


# ── Timeline ───────────────────────────────────────────────────────────────

class FastHistoryPointOut(BaseModel):
    start_date: datetime
    fasted_hours: float
    goal_hours: float
    goal_met: bool


class TimelineEntryOut(BaseModel):
    date: datetime
    is_active: bool
    start_time: Optional[datetime]
    goal_minutes: Optional[int]
    saved_goal_minutes: int
    elapsed_hours: int
    elapsed_minutes: int
    remaining_minutes: int
    progress: float = Field(..., ge=0.0, le=1.0)
    goal_met: bool
    end_time: Optional[datetime]
    elapsed_text: str


class TimelineOut(BaseModel):
    entries: List[TimelineEntryOut]
    refresh_at: datetime
    last_fast_duration_seconds: Optional[float]
    last_fast_goal_met: Optional[bool]
    last_fast_start_time: Optional[datetime]
    last_fast_end_time: Optional[datetime]
    recent_fasts: List[FastHistoryPointOut]


# ── Intents ────────────────────────────────────────────────────────────────

class StartIntentRequest(BaseModel):
    duration_hours: Optional[float] = Field(None, gt=0, description="e.g. 16 or 18.5")

    @field_validator("duration_hours")
    @classmethod
    def at_least_one_minute(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and goal_minutes_from_hours(v) < 1:
            raise ValueError("duration must be at least one minute")
        return v


class StartUntilIntentRequest(BaseModel):
    end_time: datetime


class IntentOut(BaseModel):
    dialog: str
    changed: bool


# ── Snapshot ───────────────────────────────────────────────────────────────

class SnapshotImportOut(BaseModel):
    imported: int


class SnapshotIn(BaseModel):
    version: int = 1
    exportDate: Optional[str] = None
    sessions: List[Dict[str, Any]]
