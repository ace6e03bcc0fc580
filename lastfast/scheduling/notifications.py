"""
Notification Scheduler — goal-met and one-hour-remaining alerts.

The policy is pure: given (start_time, goal_minutes, now) it produces
ScheduleRequests for alerts whose fire time is still in the future and skips
the rest. Delivery belongs to a NotificationCenter collaborator and is best
effort.

Alert identifiers are fixed, not per session: at most one alert of each kind
is outstanding, and starting or stopping a fast always cancels both before
anything new is scheduled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from enum import Enum
from typing import Dict, List, Optional, Protocol, Tuple

from ..core.formatting import format_24h_time, format_goal_text
from ..core.goals import goal_time

logger = logging.getLogger(__name__)

ONE_HOUR = timedelta(hours=1)


class NotificationIdentifier(str, Enum):
    GOAL_MET = "goalMet"
    ONE_HOUR_BEFORE = "oneHourBefore"


class NotificationCategory(str, Enum):
    GOAL_MET = "FASTING_GOAL_MET"


class NotificationAction(str, Enum):
    CONTINUE_FASTING = "CONTINUE_FASTING"
    END_FASTING = "END_FASTING"
    DEFAULT = "DEFAULT"                      # notification body tapped


@dataclass(frozen=True)
class ScheduleRequest:
    identifier: str
    fire_time: datetime
    title: str
    body: str
    category: Optional[str] = None


@dataclass(frozen=True)
class CancelRequest:
    identifiers: Tuple[str, ...]


ALL_IDENTIFIERS: Tuple[str, ...] = (
    NotificationIdentifier.GOAL_MET.value,
    NotificationIdentifier.ONE_HOUR_BEFORE.value,
)


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------

def one_hour_before_time(start_time: datetime, goal_minutes: int) -> datetime:
    return goal_time(start_time, goal_minutes) - ONE_HOUR


def plan_goal_notification(
    start_time: datetime,
    goal_minutes: int,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> Optional[ScheduleRequest]:
    """Goal-met alert, or None when the goal instant is not in the future."""
    fire_time = goal_time(start_time, goal_minutes)
    if fire_time <= now:
        return None
    return ScheduleRequest(
        identifier=NotificationIdentifier.GOAL_MET.value,
        fire_time=fire_time,
        title=f"🎉 Goal Achieved - {format_goal_text(goal_minutes)}",
        body=(
            f"Amazing work! You fasted from {format_24h_time(start_time, tz)}"
            f" → {format_24h_time(fire_time, tz)}"
        ),
        category=NotificationCategory.GOAL_MET.value,
    )


def plan_one_hour_notification(
    start_time: datetime,
    goal_minutes: int,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> Optional[ScheduleRequest]:
    """One-hour-remaining alert; never produced for goals under an hour away."""
    fire_time = one_hour_before_time(start_time, goal_minutes)
    if fire_time <= now:
        return None
    return ScheduleRequest(
        identifier=NotificationIdentifier.ONE_HOUR_BEFORE.value,
        fire_time=fire_time,
        title="⏰ One Hour to Go!",
        body=(
            "You're almost there! Your goal will be complete at "
            f"{format_24h_time(goal_time(start_time, goal_minutes), tz)}"
        ),
    )


def plan_notifications(
    start_time: datetime,
    goal_minutes: Optional[int],
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> List[ScheduleRequest]:
    if goal_minutes is None:
        return []
    planned = [
        plan_one_hour_notification(start_time, goal_minutes, now, tz),
        plan_goal_notification(start_time, goal_minutes, now, tz),
    ]
    return [r for r in planned if r is not None]


def cancellation() -> CancelRequest:
    return CancelRequest(identifiers=ALL_IDENTIFIERS)


def parse_action(action_id: str) -> Optional[NotificationAction]:
    try:
        return NotificationAction(action_id)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Delivery collaborator
# ---------------------------------------------------------------------------

class NotificationCenter(Protocol):
    def add(self, request: ScheduleRequest) -> None: ...

    def remove(self, request: CancelRequest) -> None: ...


class LocalNotificationCenter:
    """In-process notification center: keeps pending requests keyed by identifier."""

    def __init__(self):
        self._pending: Dict[str, ScheduleRequest] = {}

    def add(self, request: ScheduleRequest) -> None:
        # same identifier replaces the earlier request
        self._pending[request.identifier] = request
        logger.info("Notification %s scheduled for %s", request.identifier, request.fire_time)

    def remove(self, request: CancelRequest) -> None:
        for identifier in request.identifiers:
            self._pending.pop(identifier, None)

    def pending(self) -> List[ScheduleRequest]:
        return sorted(self._pending.values(), key=lambda r: r.fire_time)

    def due(self, now: datetime) -> List[ScheduleRequest]:
        """Pop and return every request whose fire time has arrived."""
        fired = [r for r in self._pending.values() if r.fire_time <= now]
        for r in fired:
            del self._pending[r.identifier]
        return sorted(fired, key=lambda r: r.fire_time)


class NotificationScheduler:
    """Applies the alert policy through a NotificationCenter."""

    def __init__(self, center: NotificationCenter, tz: Optional[tzinfo] = None):
        self._center = center
        self._tz = tz

    def reschedule(
        self,
        start_time: datetime,
        goal_minutes: Optional[int],
        now: datetime,
    ) -> List[ScheduleRequest]:
        """Cancel any outstanding alerts, then schedule those still ahead of *now*."""
        self.cancel()
        requests = plan_notifications(start_time, goal_minutes, now, self._tz)
        for request in requests:
            try:
                self._center.add(request)
            except Exception:
                logger.exception("Error scheduling notification %s", request.identifier)
        return requests

    def cancel(self) -> None:
        try:
            self._center.remove(cancellation())
        except Exception:
            logger.exception("Error cancelling goal notifications")
