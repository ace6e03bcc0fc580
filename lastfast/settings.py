"""
User-tunable runtime settings — persisted to data/settings.json.

Import get_settings() anywhere in the engine to read current values.
Import update_settings(patch) to mutate and save.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .config import config

logger = logging.getLogger(__name__)

_FILE: Path = config.data_dir / "settings.json"

# Key under which the user's last chosen goal is remembered
GOAL_STORAGE_KEY = "fasting_goal_minutes"

DEFAULTS: dict[str, Any] = {
    GOAL_STORAGE_KEY:       config.default_goal_minutes,
    "history_chart_window": 14,     # bars in the history chart
    "widget_recent_count":  5,      # bars in the widget graph
}

_current: dict[str, Any] = {}


def _load() -> None:
    global _current
    _current = dict(DEFAULTS)
    if _FILE.exists():
        try:
            saved = json.loads(_FILE.read_text())
            for k, v in saved.items():
                if k in DEFAULTS:
                    # coerce to the same type as the default
                    _current[k] = type(DEFAULTS[k])(v)
        except (ValueError, TypeError, OSError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", _FILE, e)


def get_settings() -> dict[str, Any]:
    """Return a copy of the current settings dict."""
    if not _current:
        _load()
    return dict(_current)


def update_settings(patch: dict[str, Any]) -> dict[str, Any]:
    """Apply *patch* (unknown keys ignored), persist to disk, return full settings."""
    if not _current:
        _load()
    for k, v in patch.items():
        if k in DEFAULTS:
            _current[k] = type(DEFAULTS[k])(v)
    _FILE.parent.mkdir(parents=True, exist_ok=True)
    _FILE.write_text(json.dumps(_current, indent=2))
    return dict(_current)


def saved_goal_minutes() -> int:
    """Last chosen goal, or the default goal when none (or a non-positive one) is stored."""
    goal = get_settings().get(GOAL_STORAGE_KEY, 0)
    return goal if goal > 0 else config.default_goal_minutes


# Eagerly load on import
_load()
