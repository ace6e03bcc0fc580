"""
Integration tests for the FastAPI application.
Uses httpx.AsyncClient with the ASGI transport (no running server needed).
Fixtures are provided by tests/conftest.py.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from lastfast.scheduling.timeline import TimelineProvider


def _iso(dt: datetime) -> str:
    return dt.replace(microsecond=0).isoformat()


def _snapshot(*sessions: dict) -> dict:
    return {"version": 1, "exportDate": _iso(datetime.now(timezone.utc)), "sessions": list(sessions)}


def _session(sid: str, started_hours_ago: float, hours: float | None = None, goal: int | None = 960) -> dict:
    start = datetime.now(timezone.utc) - timedelta(hours=started_hours_ago)
    return {
        "id": sid,
        "startTime": _iso(start),
        "endTime": _iso(start + timedelta(hours=hours)) if hours is not None else None,
        "goalMinutes": goal,
        "goalCelebrationShown": False,
    }


class TestHealth:
    async def test_health_ok(self, client):
        r = await client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"
        assert r.json()["live_status"] is False


# ── /fasts ───────────────────────────────────────────────────────────────────

class TestFasts:
    async def test_idle_state(self, client):
        r = await client.get("/fasts/current")
        assert r.status_code == 200
        body = r.json()
        assert body["active"] is False
        assert body["saved_goal_minutes"] == 960
        assert body["progress"] == 0.0

    async def test_start_returns_running_state(self, client, app):
        r = await client.post("/fasts/start", json={"goal_minutes": 720})
        assert r.status_code == 201
        body = r.json()
        assert body["active"] is True
        assert body["goal_minutes"] == 720
        assert body["goal_met"] is False
        assert body["goal_text"] == "12h"
        pending = app.state.notification_center.pending()
        assert [p.identifier for p in pending] == ["oneHourBefore", "goalMet"]

    async def test_start_twice_conflicts(self, client):
        await client.post("/fasts/start", json={})
        r = await client.post("/fasts/start", json={})
        assert r.status_code == 409

    async def test_start_rejects_zero_goal(self, client):
        r = await client.post("/fasts/start", json={"goal_minutes": 0})
        assert r.status_code == 422

    async def test_start_remembers_goal(self, client):
        await client.post("/fasts/start", json={"goal_minutes": 600})
        r = await client.get("/settings")
        assert r.json()["settings"]["fasting_goal_minutes"] == 600

    async def test_stop(self, client, app):
        await client.post("/fasts/start", json={})
        r = await client.post("/fasts/stop")
        assert r.status_code == 200
        body = r.json()
        assert body["active"] is False
        assert body["end_time"] is not None
        assert app.state.notification_center.pending() == []

    async def test_stop_without_fast_is_404(self, client):
        r = await client.post("/fasts/stop")
        assert r.status_code == 404

    async def test_correction(self, client):
        await client.post("/snapshot", json=_snapshot(_session("a", 30, hours=10)))
        start = datetime(2024, 3, 4, 20, 0, tzinfo=timezone.utc)
        r = await client.put("/fasts/a", json={
            "start_time": start.isoformat(),
            "end_time": (start + timedelta(hours=17)).isoformat(),
            "goal_minutes": 960,
        })
        assert r.status_code == 200
        body = r.json()
        assert body["duration_seconds"] == 17 * 3600
        assert body["goal_met"] is True

    async def test_correction_with_end_before_start_is_422(self, client):
        await client.post("/snapshot", json=_snapshot(_session("a", 30, hours=10)))
        start = datetime(2024, 3, 4, 20, 0, tzinfo=timezone.utc)
        r = await client.put("/fasts/a", json={
            "start_time": start.isoformat(),
            "end_time": (start - timedelta(hours=1)).isoformat(),
            "goal_minutes": 960,
        })
        assert r.status_code == 422

    async def test_correction_of_unknown_fast_is_404(self, client):
        start = datetime(2024, 3, 4, 20, 0, tzinfo=timezone.utc)
        r = await client.put("/fasts/missing", json={
            "start_time": start.isoformat(),
            "end_time": (start + timedelta(hours=1)).isoformat(),
            "goal_minutes": 60,
        })
        assert r.status_code == 404

    async def test_delete(self, client):
        await client.post("/snapshot", json=_snapshot(_session("a", 30, hours=10)))
        assert (await client.delete("/fasts/a")).status_code == 200
        assert (await client.delete("/fasts/a")).status_code == 404

    async def test_celebration_claimed_once(self, client):
        await client.post("/snapshot", json=_snapshot(_session("run", 17)))
        first = await client.post("/fasts/celebration")
        second = await client.post("/fasts/celebration")
        assert first.json()["celebrate"] is True
        assert second.json()["celebrate"] is False

    async def test_end_fasting_notification_action(self, client):
        await client.post("/fasts/start", json={})
        r = await client.post("/fasts/notification-action", json={"action": "END_FASTING"})
        assert r.status_code == 200
        assert r.json()["active"] is False

    async def test_continue_notification_action(self, client):
        await client.post("/fasts/start", json={})
        r = await client.post("/fasts/notification-action", json={"action": "CONTINUE_FASTING"})
        assert r.json()["active"] is True


# ── /history ─────────────────────────────────────────────────────────────────

class TestHistory:
    async def test_empty_stats(self, client):
        r = await client.get("/history/stats")
        assert r.status_code == 200
        body = r.json()
        assert body["total"] == 0
        assert body["success_rate"] == 0.0
        assert body["avg_duration_seconds"] is None

    async def test_history_excludes_running_fast(self, client):
        await client.post("/snapshot", json=_snapshot(
            _session("old", 48, hours=16),
            _session("new", 24, hours=10),
            _session("run", 2),
        ))
        r = await client.get("/history")
        assert [s["id"] for s in r.json()] == ["new", "old"]

    async def test_stats(self, client):
        await client.post("/snapshot", json=_snapshot(
            _session("old", 48, hours=16),
            _session("new", 24, hours=10),
        ))
        body = (await client.get("/history/stats")).json()
        assert body["total"] == 2
        assert body["goals_met"] == 1
        assert body["success_rate"] == pytest.approx(50.0)
        assert body["avg_duration_text"] == "13h"

    async def test_empty_chart(self, client):
        body = (await client.get("/history/chart")).json()
        assert body["view"] == "graph"
        assert body["scale_seconds"] == 3600
        assert body["bars"] == []

    async def test_chart_window(self, client):
        await client.post("/snapshot", json=_snapshot(
            *[_session(f"f{d}", 24 * d, hours=12 + d) for d in range(1, 5)]
        ))
        body = (await client.get("/history/chart", params={"window": 2})).json()
        # oldest first
        assert [b["session_id"] for b in body["bars"]] == ["f2", "f1"]
        assert body["scale_seconds"] == 16 * 3600

    async def test_chart_window_must_be_positive(self, client):
        r = await client.get("/history/chart", params={"window": 0})
        assert r.status_code == 422

    async def test_recent(self, client):
        await client.post("/snapshot", json=_snapshot(
            *[_session(f"f{d}", 24 * d, hours=12) for d in range(1, 8)]
        ))
        body = (await client.get("/history/recent")).json()
        assert [s["id"] for s in body] == ["f5", "f4", "f3", "f2", "f1"]

    async def test_daily(self, client):
        body = (await client.get("/history/daily", params={"days": 3})).json()
        assert len(body) == 3
        assert all(d["total_fasted_hours"] == 0 for d in body)


# ── /timeline ────────────────────────────────────────────────────────────────

class TestTimeline:
    async def test_idle_timeline(self, client):
        body = (await client.get("/timeline")).json()
        assert len(body["entries"]) == 1
        assert body["entries"][0]["is_active"] is False
        assert body["last_fast_duration_seconds"] is None

    async def test_active_timeline(self, client):
        await client.post("/snapshot", json=_snapshot(
            _session("old", 48, hours=16),
            _session("run", 8),
        ))
        body = (await client.get("/timeline")).json()
        assert len(body["entries"]) == 60
        assert body["entries"][0]["elapsed_hours"] == 8
        assert body["last_fast_duration_seconds"] == 16 * 3600
        assert body["last_fast_goal_met"] is True
        assert len(body["recent_fasts"]) == 1

    async def test_zero_entry_timeline(self, app, client):
        app.state.timeline_provider = TimelineProvider(
            app.state.store.list_sessions, lambda: 960, active_entry_count=0
        )
        await client.post("/snapshot", json=_snapshot(
            _session("old", 48, hours=16),
            _session("run", 8),
        ))
        r = await client.get("/timeline")
        assert r.status_code == 200
        body = r.json()
        assert body["entries"] == []
        assert body["last_fast_duration_seconds"] == 16 * 3600

    async def test_single_entry(self, client):
        body = (await client.get("/timeline/entry")).json()
        assert body["saved_goal_minutes"] == 960


# ── /intents ─────────────────────────────────────────────────────────────────

class TestIntents:
    async def test_status_when_idle(self, client):
        body = (await client.get("/intents/status")).json()
        assert body == {"dialog": "You're not currently fasting.", "changed": False}

    async def test_start_and_stop(self, client):
        r = await client.post("/intents/start", json={"duration_hours": 16})
        assert r.json() == {"dialog": "Started your 16 hours fast. Good luck!", "changed": True}
        assert (await client.get("/fasts/current")).json()["goal_minutes"] == 960

        r = await client.post("/intents/stop")
        assert r.json()["dialog"].startswith("You fasted for")
        assert r.json()["changed"] is True

    async def test_start_rejects_non_positive_hours(self, client):
        r = await client.post("/intents/start", json={"duration_hours": 0})
        assert r.status_code == 422

    async def test_start_rejects_sub_minute_hours(self, client):
        r = await client.post("/intents/start", json={"duration_hours": 0.001})
        assert r.status_code == 422
        assert (await client.get("/fasts/current")).json()["active"] is False

    async def test_start_until_past(self, client):
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        r = await client.post("/intents/start-until", json={"end_time": past.isoformat()})
        assert r.json()["dialog"] == "The end time must be in the future."


# ── /settings & /snapshot ────────────────────────────────────────────────────

class TestSettingsDriveGoal:
    async def test_saved_goal_used_for_new_fast(self, client):
        await client.put("/settings", json={"fasting_goal_minutes": 720})
        body = (await client.post("/fasts/start", json={})).json()
        assert body["goal_minutes"] == 720


class TestSnapshot:
    async def test_export_after_import(self, client):
        r = await client.post("/snapshot", json=_snapshot(_session("a", 30, hours=10)))
        assert r.json() == {"imported": 1}
        body = (await client.get("/snapshot")).json()
        assert body["version"] == 1
        assert [s["id"] for s in body["sessions"]] == ["a"]

    async def test_malformed_session_is_400(self, client):
        r = await client.post("/snapshot", json={"version": 1, "sessions": [{"id": "x"}]})
        assert r.status_code == 400

    async def test_import_schedules_alerts_for_running_fast(self, client, app):
        await client.post("/snapshot", json=_snapshot(_session("run", 1)))
        pending = app.state.notification_center.pending()
        assert [p.identifier for p in pending] == ["oneHourBefore", "goalMet"]
