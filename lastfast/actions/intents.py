"""
Voice intents — start / start-until / stop / status, answered with spoken
dialog text. Arithmetic comes from the shared calculator and formatter so a
spoken answer always matches what the widgets show at the same instant.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Optional

from ..core import goals
from ..core.formatting import (
    format_24h_time,
    format_goal_description,
    format_goal_text,
    format_natural_language_from_interval,
    format_remaining_natural_language,
)
from ..core.units import utcnow
from ..errors import AlreadyFastingError
from .fasting import FastingController


@dataclass
class IntentResult:
    dialog: str
    changed: bool = False                    # whether the store was mutated


class FastingIntents:

    def __init__(self, controller: FastingController, tz: Optional[tzinfo] = None):
        self._controller = controller
        self._tz = tz

    def _already_fasting(self, err: AlreadyFastingError) -> IntentResult:
        started = format_24h_time(err.session.start_time, self._tz)
        return IntentResult(f"You're already fasting. Your fast started at {started}.")

    def start(self, duration_hours: Optional[float] = None,
              now: Optional[datetime] = None) -> IntentResult:
        """Start a fast for *duration_hours* (18.5 -> 1110 minutes), or the saved goal."""
        goal = goals.goal_minutes_from_hours(duration_hours) if duration_hours is not None else None
        try:
            session = self._controller.start_fast(goal, now=now, remember=False)
        except AlreadyFastingError as err:
            return self._already_fasting(err)
        description = format_goal_description(session.goal_minutes)
        return IntentResult(f"Started your {description} fast. Good luck!", changed=True)

    def start_until(self, end_time: datetime, now: Optional[datetime] = None) -> IntentResult:
        now = now or utcnow()
        minutes_until_end = int((end_time - now).total_seconds() / 60)
        if minutes_until_end <= 0:
            return IntentResult("The end time must be in the future.")
        try:
            self._controller.start_fast(minutes_until_end, now=now, remember=False)
        except AlreadyFastingError as err:
            return self._already_fasting(err)
        until = format_24h_time(end_time, self._tz)
        return IntentResult(f"Started your fast until {until}. Good luck!", changed=True)

    def stop(self, now: Optional[datetime] = None) -> IntentResult:
        now = now or utcnow()
        session = self._controller.active()
        if session is None:
            return IntentResult("You're not currently fasting.")
        # goal status is read before stopping, at the same instant the fast ends
        goal_met = session.goal_met(now)
        duration_text = format_natural_language_from_interval(session.duration(now))
        self._controller.stop_fast(now)
        if goal_met:
            return IntentResult(
                f"Congratulations! You fasted for {duration_text} and reached your goal!",
                changed=True,
            )
        return IntentResult(f"You fasted for {duration_text}.", changed=True)

    def status(self, now: Optional[datetime] = None) -> IntentResult:
        now = now or utcnow()
        session = self._controller.active()
        if session is None:
            return IntentResult("You're not currently fasting.")

        elapsed = session.duration(now)
        duration_text = format_natural_language_from_interval(elapsed)
        goal = session.goal_minutes
        if goal is None:
            return IntentResult(f"You've been fasting for {duration_text}.")
        if goals.is_goal_met(elapsed, goal):
            return IntentResult(
                f"You've been fasting for {duration_text}. "
                f"You've reached your {format_goal_text(goal)} goal!"
            )
        remaining_text = format_remaining_natural_language(goals.remaining_minutes(elapsed, goal))
        return IntentResult(
            f"You've been fasting for {duration_text}. "
            f"You have {remaining_text} left to reach your goal."
        )
