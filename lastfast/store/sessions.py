"""
Session Store — SQLite persistence for fasting sessions.

The store owns storage and lifetime; callers receive FastingSession value
snapshots and hand back mutation requests (create, set end time, set
celebration shown, correct, delete). Instants are stored as UTC Unix
timestamps.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from ..core.session import FastingSession
from ..errors import AlreadyFastingError, SessionNotFoundError

_COLUMNS = "id, start_ts, end_ts, goal_minutes, goal_celebration_shown"
_ACTIVE_SQL = (
    f"SELECT {_COLUMNS} FROM sessions WHERE end_ts IS NULL "
    "ORDER BY start_ts DESC LIMIT 1"
)


class SessionStore:
    """Thread-safe SQLite-backed session store."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._init_db()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create(self, session: FastingSession) -> FastingSession:
        with self._conn() as conn:
            conn.execute(
                f"INSERT INTO sessions ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                _to_row(session),
            )
        return session

    def start(self, session: FastingSession) -> FastingSession:
        """
        Insert *session* unless a fast is already running. The check and the
        insert share one write transaction, so concurrent starts serialise.
        """
        with self._conn() as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(_ACTIVE_SQL).fetchone()
            if row is not None:
                raise AlreadyFastingError(_from_row(row))
            conn.execute(
                f"INSERT INTO sessions ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                _to_row(session),
            )
        return session

    def set_end_time(self, session_id: str, end_time: datetime) -> FastingSession:
        with self._conn() as conn:
            cur = conn.execute(
                "UPDATE sessions SET end_ts = ? WHERE id = ?",
                (end_time.timestamp(), session_id),
            )
            _require(cur, session_id)
        return self.get(session_id)

    def set_goal_celebration_shown(self, session_id: str, shown: bool = True) -> FastingSession:
        with self._conn() as conn:
            cur = conn.execute(
                "UPDATE sessions SET goal_celebration_shown = ? WHERE id = ?",
                (int(shown), session_id),
            )
            _require(cur, session_id)
        return self.get(session_id)

    def claim_goal_celebration(self, session_id: str) -> bool:
        """Set the celebration flag; True only for the caller that flipped it."""
        with self._conn() as conn:
            cur = conn.execute(
                "UPDATE sessions SET goal_celebration_shown = 1 "
                "WHERE id = ? AND goal_celebration_shown = 0",
                (session_id,),
            )
            return cur.rowcount == 1

    def correct(
        self,
        session_id: str,
        start_time: datetime,
        end_time: datetime,
        goal_minutes: int,
    ) -> FastingSession:
        """Validate and apply a manual correction of range and goal."""
        session = self.get(session_id)
        session.correct(start_time, end_time, goal_minutes)
        with self._conn() as conn:
            conn.execute(
                "UPDATE sessions SET start_ts = ?, end_ts = ?, goal_minutes = ? WHERE id = ?",
                (
                    session.start_time.timestamp(),
                    session.end_time.timestamp() if session.end_time else None,
                    session.goal_minutes,
                    session_id,
                ),
            )
        return session

    def delete(self, session_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
            return cur.rowcount > 0

    def clear(self) -> int:
        with self._conn() as conn:
            return conn.execute("DELETE FROM sessions").rowcount

    def replace_all(self, sessions: Iterable[FastingSession]) -> int:
        """Atomically swap the whole table for *sessions*."""
        rows = [_to_row(s) for s in sessions]
        with self._conn() as conn:
            conn.execute("DELETE FROM sessions")
            conn.executemany(
                f"INSERT INTO sessions ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)", rows
            )
        return len(rows)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, session_id: str) -> FastingSession:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE id = ?", (session_id,)
            ).fetchone()
        if row is None:
            raise SessionNotFoundError(session_id)
        return _from_row(row)

    def list_sessions(self, limit: Optional[int] = None) -> List[FastingSession]:
        """All sessions, most recent start first."""
        sql = f"SELECT {_COLUMNS} FROM sessions ORDER BY start_ts DESC"
        params: list = []
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        with self._conn() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_from_row(r) for r in rows]

    def active_session(self) -> Optional[FastingSession]:
        with self._conn() as conn:
            row = conn.execute(_ACTIVE_SQL).fetchone()
        return _from_row(row) if row else None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS sessions (
                    id                     TEXT    PRIMARY KEY,
                    start_ts               REAL    NOT NULL,
                    end_ts                 REAL,
                    goal_minutes           INTEGER,
                    goal_celebration_shown INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_start ON sessions(start_ts)")

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _ts(value: Optional[float]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _to_row(session: FastingSession) -> tuple:
    return (
        session.id,
        session.start_time.timestamp(),
        session.end_time.timestamp() if session.end_time else None,
        session.goal_minutes,
        int(session.goal_celebration_shown),
    )


def _from_row(row: tuple) -> FastingSession:
    session_id, start_ts, end_ts, goal_minutes, shown = row
    return FastingSession(
        id=session_id,
        start_time=_ts(start_ts),
        end_time=_ts(end_ts),
        goal_minutes=goal_minutes,
        goal_celebration_shown=bool(shown),
    )


def _require(cur: sqlite3.Cursor, session_id: str) -> None:
    if cur.rowcount == 0:
        raise SessionNotFoundError(session_id)
