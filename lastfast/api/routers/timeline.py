"""
/timeline — precomputed widget entries and the next refresh instant.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ...api.schemas import FastHistoryPointOut, TimelineEntryOut, TimelineOut
from ...scheduling.timeline import FastingEntry

router = APIRouter(prefix="/timeline", tags=["timeline"])


def _get_provider(request: Request):
    return request.app.state.timeline_provider


def _entry_out(entry: FastingEntry) -> TimelineEntryOut:
    snap = entry.snapshot
    return TimelineEntryOut(
        date=entry.date,
        is_active=snap.is_active,
        start_time=snap.start_time,
        goal_minutes=snap.goal_minutes,
        saved_goal_minutes=snap.saved_goal_minutes,
        elapsed_hours=entry.elapsed_hours,
        elapsed_minutes=entry.elapsed_minutes,
        remaining_minutes=entry.remaining_minutes,
        progress=entry.progress,
        goal_met=entry.goal_met,
        end_time=entry.end_time,
        elapsed_text=entry.elapsed_text(),
    )


@router.get("", response_model=TimelineOut)
def get_timeline(provider=Depends(_get_provider)):
    """
    One entry per minute for the next hour while fasting, otherwise a single
    entry; refresh_at tells the surface when to ask again.
    """
    snap = provider.snapshot()
    timeline = provider.timeline(snapshot=snap)
    last = snap.last_fast_duration
    return TimelineOut(
        entries=[_entry_out(e) for e in timeline.entries],
        refresh_at=timeline.refresh_at,
        last_fast_duration_seconds=last.total_seconds() if last is not None else None,
        last_fast_goal_met=snap.last_fast_goal_met,
        last_fast_start_time=snap.last_fast_start_time,
        last_fast_end_time=snap.last_fast_end_time,
        recent_fasts=[FastHistoryPointOut(**p.__dict__) for p in snap.recent_fasts],
    )


@router.get("/entry", response_model=TimelineEntryOut)
def get_entry(provider=Depends(_get_provider)):
    """A single entry evaluated now, for placeholder and snapshot renders."""
    return _entry_out(provider.entry())
