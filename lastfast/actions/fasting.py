"""
Fasting Controller — start/stop orchestration across the store, the
notification scheduler and the live status overlay.

Starting a fast persists it, remembers the chosen goal, cancels stale alerts
and schedules fresh ones. Stopping a fast sets its end time and cancels both
alerts unconditionally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from ..core import goals
from ..core.formatting import (
    format_from_interval,
    format_goal_text,
    format_remaining_natural_language,
)
from ..core.session import FastingSession
from ..core.units import utcnow
from ..scheduling.notifications import NotificationAction, NotificationScheduler, parse_action
from ..store.sessions import SessionStore
from .live_status import LiveStatus

logger = logging.getLogger(__name__)


@dataclass
class FastingState:
    """Main-view numbers for one evaluation instant."""
    active: bool
    session_id: Optional[str]
    start_time: Optional[datetime]
    goal_minutes: Optional[int]
    saved_goal_minutes: int
    elapsed_seconds: int
    elapsed_hours: int
    elapsed_minutes: int
    remaining_minutes: int
    progress: float
    goal_met: bool
    goal_end_time: Optional[datetime]
    elapsed_text: str
    remaining_text: str
    goal_text: str


class FastingController:

    def __init__(
        self,
        store: SessionStore,
        notifier: NotificationScheduler,
        live_status: LiveStatus,
        saved_goal: Callable[[], int],
        remember_goal: Optional[Callable[[int], None]] = None,
    ):
        self._store = store
        self._notifier = notifier
        self._live = live_status
        self._saved_goal = saved_goal
        self._remember_goal = remember_goal

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def active(self) -> Optional[FastingSession]:
        return self._store.active_session()

    def start_fast(
        self,
        goal_minutes: Optional[int] = None,
        now: Optional[datetime] = None,
        remember: bool = True,
    ) -> FastingSession:
        """Start a fast; raises AlreadyFastingError while another is running."""
        now = now or utcnow()
        goal = goal_minutes if goal_minutes is not None else self._saved_goal()
        session = self._store.start(FastingSession(start_time=now, goal_minutes=goal))
        if remember and self._remember_goal is not None:
            self._remember_goal(goal)

        self._notifier.reschedule(session.start_time, goal, now)
        self._live.start(session.start_time, goal, now)
        logger.info("Fast %s started with a %s goal", session.id, format_goal_text(goal))
        return session

    def stop_fast(self, now: Optional[datetime] = None) -> Optional[FastingSession]:
        """Stop the running fast; returns None when nothing was running."""
        now = now or utcnow()
        self._notifier.cancel()
        self._live.end()
        session = self._store.active_session()
        if session is None:
            return None
        session.stop(now)
        session = self._store.set_end_time(session.id, session.end_time)
        logger.info("Fast %s stopped after %s", session.id, format_from_interval(session.duration()))
        return session

    def claim_celebration(self, now: Optional[datetime] = None) -> bool:
        """
        True exactly once per fast: the first time it is evaluated with its
        goal met. The flag is persisted so repeated evaluations stay quiet.
        """
        session = self._store.active_session()
        if session is None or session.goal_celebration_shown:
            return False
        if not session.goal_met(now or utcnow()):
            return False
        return self._store.claim_goal_celebration(session.id)

    def correct(
        self,
        session_id: str,
        start_time: datetime,
        end_time: datetime,
        goal_minutes: int,
    ) -> FastingSession:
        return self._store.correct(session_id, start_time, end_time, goal_minutes)

    def delete(self, session_id: str) -> bool:
        return self._store.delete(session_id)

    def history(self) -> List[FastingSession]:
        return self._store.list_sessions()

    def resync(self, now: Optional[datetime] = None) -> Optional[FastingSession]:
        """Rebuild alerts and the overlay from whatever fast the store holds."""
        now = now or utcnow()
        session = self._store.active_session()
        if session is None:
            self._notifier.cancel()
        else:
            self._notifier.reschedule(session.start_time, session.goal_minutes, now)
        self._live.resume_if_needed(
            session.start_time if session else None,
            session.goal_minutes if session else None,
            now,
        )
        return session

    # ------------------------------------------------------------------
    # Notification responses
    # ------------------------------------------------------------------

    def handle_notification_action(
        self, action_id: str, now: Optional[datetime] = None
    ) -> Optional[FastingSession]:
        """Apply a tapped notification action; only "end the fast" changes state."""
        action = parse_action(action_id)
        if action == NotificationAction.END_FASTING:
            logger.info("Ending fast from notification action")
            return self.stop_fast(now)
        if action == NotificationAction.CONTINUE_FASTING:
            logger.info("User chose to continue fasting")
        elif action is None:
            logger.warning("Ignoring unknown notification action %r", action_id)
        return None

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    def current_state(self, now: Optional[datetime] = None) -> FastingState:
        now = now or utcnow()
        session = self._store.active_session()
        saved = self._saved_goal()
        if session is None:
            return FastingState(
                active=False, session_id=None, start_time=None, goal_minutes=None,
                saved_goal_minutes=saved, elapsed_seconds=0, elapsed_hours=0,
                elapsed_minutes=0, remaining_minutes=0, progress=0.0, goal_met=False,
                goal_end_time=None, elapsed_text=format_from_interval(0),
                remaining_text=format_remaining_natural_language(0),
                goal_text=format_goal_text(saved),
            )

        elapsed = session.duration(now)
        goal = session.goal_minutes
        remaining = goals.remaining_minutes(elapsed, goal)
        self._live.update(now)
        return FastingState(
            active=True,
            session_id=session.id,
            start_time=session.start_time,
            goal_minutes=goal,
            saved_goal_minutes=saved,
            elapsed_seconds=max(0, int(elapsed.total_seconds())),
            elapsed_hours=goals.elapsed_hours(elapsed),
            elapsed_minutes=goals.elapsed_minutes_component(elapsed),
            remaining_minutes=remaining,
            progress=goals.progress(elapsed, goal),
            goal_met=goals.is_goal_met(elapsed, goal),
            goal_end_time=goals.goal_time(session.start_time, goal) if goal is not None else None,
            elapsed_text=format_from_interval(max(elapsed.total_seconds(), 0.0)),
            remaining_text=format_remaining_natural_language(remaining),
            goal_text=format_goal_text(goal) if goal is not None else "",
        )
