"""
/history — completed fasts, summary statistics and chart data.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from ...api.routers.fasts import session_out
from ...api.schemas import ChartBarOut, DayTotalOut, HistoryChartOut, HistoryStatsOut, SessionOut
from ...config import config
from ...core import history
from ...core.formatting import format_from_interval
from ...core.units import utcnow
from ...settings import get_settings

router = APIRouter(prefix="/history", tags=["history"])


def _get_store(request: Request):
    return request.app.state.store


def _completed(store):
    return history.completed_fasts(store.list_sessions())


@router.get("", response_model=List[SessionOut])
def list_history(
    limit: int = Query(default=200, le=1000),
    store=Depends(_get_store),
):
    """Completed fasts, most recent first."""
    now = utcnow()
    return [session_out(s, now) for s in _completed(store)[:limit]]


@router.get("/stats", response_model=HistoryStatsOut)
def get_stats(store=Depends(_get_store)):
    s = history.stats(_completed(store))
    avg = s.avg_duration
    return HistoryStatsOut(
        total=s.total,
        goals_met=s.goals_met,
        success_rate=s.success_rate,
        avg_duration_seconds=avg.total_seconds() if avg is not None else None,
        avg_duration_text=format_from_interval(avg) if avg is not None else None,
    )


@router.get("/chart", response_model=HistoryChartOut)
def get_chart(
    window: Optional[int] = Query(
        default=None, ge=1, le=365,
        description="Number of recent fasts to chart; defaults to user setting",
    ),
    store=Depends(_get_store),
):
    """Bars for the most recent fasts, oldest first, scaled so goal lines never clip."""
    n = window if window is not None else get_settings()["history_chart_window"]
    recent = history.recent_window(_completed(store), n)
    now = utcnow()
    return HistoryChartOut(
        view="graph" if config.use_graph_history_view else "list",
        scale_seconds=history.chart_scale(recent, now),
        bars=[ChartBarOut(**b.__dict__) for b in history.chart_bars(recent, now)],
    )


@router.get("/recent", response_model=List[SessionOut])
def get_recent(
    n: int = Query(default=5, ge=1, le=365),
    store=Depends(_get_store),
):
    now = utcnow()
    return [session_out(s, now) for s in history.recent_window(_completed(store), n)]


@router.get("/daily", response_model=List[DayTotalOut])
def get_daily(
    days: int = Query(default=5, ge=1, le=60),
    store=Depends(_get_store),
):
    """Per-day fasted hours for the days before today, oldest first."""
    totals = history.daily_totals(store.list_sessions(), utcnow().astimezone(config.tz), days)
    return [DayTotalOut(**d.__dict__) for d in totals]
