"""
Live Status — the lock-screen overlay for a running fast.

Holds fixed attributes (start time, goal) set when the overlay starts and a
content state (elapsed seconds, goal met) refreshed on update. Every call is
a no-op while the feature is disabled in config.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.goals import is_goal_met
from ..core.units import utcnow, whole_seconds

logger = logging.getLogger(__name__)


@dataclass
class LiveStatusAttributes:
    start_time: datetime
    goal_minutes: Optional[int]


@dataclass
class LiveStatusState:
    elapsed_seconds: int
    goal_met: bool


class LiveStatus:

    def __init__(self, enabled: bool = False):
        self.enabled = enabled
        self.attributes: Optional[LiveStatusAttributes] = None
        self.state: Optional[LiveStatusState] = None

    @property
    def running(self) -> bool:
        return self.attributes is not None

    def start(self, start_time: datetime, goal_minutes: Optional[int],
              now: Optional[datetime] = None) -> Optional[LiveStatusState]:
        if not self.enabled:
            return None
        self.attributes = LiveStatusAttributes(start_time=start_time, goal_minutes=goal_minutes)
        logger.info("Live status started for fast beginning %s", start_time)
        return self.update(now)

    def update(self, now: Optional[datetime] = None) -> Optional[LiveStatusState]:
        if not self.enabled or self.attributes is None:
            return None
        elapsed = whole_seconds((now or utcnow()) - self.attributes.start_time)
        self.state = LiveStatusState(
            elapsed_seconds=elapsed,
            goal_met=is_goal_met(elapsed, self.attributes.goal_minutes),
        )
        return self.state

    def end(self) -> None:
        if not self.enabled:
            return
        if self.attributes is not None:
            logger.info("Live status ended")
        self.attributes = None
        self.state = None

    def resume_if_needed(self, start_time: Optional[datetime], goal_minutes: Optional[int],
                         now: Optional[datetime] = None) -> Optional[LiveStatusState]:
        """Bring the overlay in line with the store: end it without a fast, start it if missing."""
        if not self.enabled:
            return None
        if start_time is None:
            self.end()
            return None
        if self.attributes is None:
            return self.start(start_time, goal_minutes, now)
        return self.update(now)
