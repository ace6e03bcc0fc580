"""
Unit tests for the SQLite session store and JSON snapshots.

Each test gets a fresh store backed by a temp file (see conftest.store).
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from lastfast.core.session import FastingSession
from lastfast.errors import (
    AlreadyFastingError,
    InvalidCorrectionError,
    SessionNotFoundError,
    SnapshotError,
)
from lastfast.store.sessions import SessionStore
from lastfast.store.snapshot import (
    SNAPSHOT_VERSION,
    export_snapshot,
    import_snapshot,
    load_seed_file,
    write_snapshot,
)

T0 = datetime(2024, 3, 4, 8, 0, tzinfo=timezone.utc)


def _completed(days_ago: int, hours: float = 16, goal: int | None = 960) -> FastingSession:
    start = T0 - timedelta(days=days_ago)
    return FastingSession(start_time=start, goal_minutes=goal, end_time=start + timedelta(hours=hours))


# ── SessionStore ─────────────────────────────────────────────────────────────

def test_empty_store(store):
    assert store.list_sessions() == []
    assert store.active_session() is None


def test_create_and_get_round_trips_fields(store):
    s = store.create(FastingSession(start_time=T0, goal_minutes=960))
    fetched = store.get(s.id)
    assert fetched == s
    assert fetched.start_time.tzinfo is not None


def test_list_is_most_recent_first(store):
    for days_ago in (3, 1, 2):
        store.create(_completed(days_ago))
    starts = [s.start_time for s in store.list_sessions()]
    assert starts == sorted(starts, reverse=True)


def test_list_limit(store):
    for days_ago in range(1, 6):
        store.create(_completed(days_ago))
    assert len(store.list_sessions(limit=2)) == 2


def test_active_session(store):
    store.create(_completed(1))
    running = store.create(FastingSession(start_time=T0, goal_minutes=720))
    assert store.active_session() == running


def test_set_end_time_completes_session(store):
    s = store.create(FastingSession(start_time=T0, goal_minutes=960))
    updated = store.set_end_time(s.id, T0 + timedelta(hours=10))
    assert not updated.is_active
    assert updated.duration() == timedelta(hours=10)
    assert store.active_session() is None


def test_set_goal_celebration_shown(store):
    s = store.create(FastingSession(start_time=T0, goal_minutes=960))
    assert store.set_goal_celebration_shown(s.id).goal_celebration_shown
    assert store.get(s.id).goal_celebration_shown


def test_start_refuses_second_running_fast(store):
    store.create(_completed(1))
    running = store.start(FastingSession(start_time=T0, goal_minutes=960))
    with pytest.raises(AlreadyFastingError) as exc:
        store.start(FastingSession(start_time=T0 + timedelta(minutes=1), goal_minutes=720))
    assert exc.value.session == running
    assert len(store.list_sessions()) == 2


def test_claim_goal_celebration_only_once(store):
    s = store.create(FastingSession(start_time=T0, goal_minutes=60))
    assert store.claim_goal_celebration(s.id) is True
    assert store.claim_goal_celebration(s.id) is False
    assert store.get(s.id).goal_celebration_shown


def test_correct_persists(store):
    s = store.create(_completed(1, hours=10))
    store.correct(s.id, s.start_time - timedelta(hours=7), s.end_time, 900)
    fetched = store.get(s.id)
    assert fetched.duration() == timedelta(hours=17)
    assert fetched.goal_minutes == 900


def test_invalid_correction_leaves_row_untouched(store):
    s = store.create(_completed(1, hours=10))
    with pytest.raises(InvalidCorrectionError):
        store.correct(s.id, s.end_time, s.start_time, 900)
    assert store.get(s.id) == s


def test_delete(store):
    s = store.create(_completed(1))
    assert store.delete(s.id) is True
    assert store.delete(s.id) is False
    assert store.list_sessions() == []


def test_unknown_id_raises(store):
    with pytest.raises(SessionNotFoundError):
        store.get("missing")
    with pytest.raises(SessionNotFoundError):
        store.set_end_time("missing", T0)


def test_clear_and_replace_all(store):
    store.create(_completed(1))
    store.create(_completed(2))
    assert store.clear() == 2
    assert store.replace_all([_completed(3), _completed(4)]) == 2
    assert len(store.list_sessions()) == 2


# ── Snapshots ────────────────────────────────────────────────────────────────

def test_export_shape(store):
    store.create(_completed(1))
    snap = export_snapshot(store, now=T0)
    assert snap["version"] == SNAPSHOT_VERSION
    assert snap["exportDate"] == T0.isoformat()
    assert snap["sessions"][0]["goalMinutes"] == 960


def test_import_replaces_existing_sessions(store, tmp_path):
    source = store
    source.create(_completed(1))
    source.create(FastingSession(start_time=T0, goal_minutes=720))
    payload = json.dumps(export_snapshot(source, now=T0))

    target = SessionStore(tmp_path / "other.db")
    target.create(_completed(9))
    assert import_snapshot(target, payload) == 2
    assert target.list_sessions() == source.list_sessions()
    assert target.active_session().goal_minutes == 720


@pytest.mark.parametrize("bad", [
    "not json{{",
    {"version": 1},
    {"version": 1, "sessions": [{"id": "x"}]},
    {"version": 1, "sessions": [{"id": "x", "startTime": "yesterday"}]},
])
def test_import_rejects_malformed_snapshots(store, bad):
    store.create(_completed(1))
    with pytest.raises(SnapshotError):
        import_snapshot(store, bad)
    assert len(store.list_sessions()) == 1


def test_write_snapshot_and_load_it_back(store, tmp_path):
    store.create(_completed(1))
    path = write_snapshot(store, tmp_path / "snapshots", now=T0)
    assert path.name.startswith("snapshot_2024-03-04T08-00-00")
    store.clear()
    assert load_seed_file(store, path) == 1


def test_missing_seed_file(store, tmp_path):
    with pytest.raises(SnapshotError):
        load_seed_file(store, tmp_path / "nope.json")
