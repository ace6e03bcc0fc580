"""
Central configuration for the LastFast engine.
All values can be overridden via environment variables or a local config.json.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo

_ROOT = Path(__file__).parent.parent
_CONFIG_FILE = _ROOT / "config.json"

# Goal used whenever no explicit goal is supplied (16 hours)
DEFAULT_GOAL_MINUTES: int = 960


@dataclass
class Config:
    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8765

    # Storage
    data_dir: Path = field(default_factory=lambda: _ROOT / "data")
    sessions_db: str = "sessions.db"

    # Goals
    default_goal_minutes: int = DEFAULT_GOAL_MINUTES

    # Refresh cadence for glanceable surfaces
    timeline_entry_count: int = 60           # one entry per minute while fasting
    active_refresh_minutes: int = 60
    inactive_refresh_minutes: int = 15

    # Feature switches
    live_status_enabled: bool = False
    use_graph_history_view: bool = True

    # Rendering of wall-clock times ("HH:MM") in notifications and dialogs
    display_timezone: str = "UTC"

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def tz(self) -> tzinfo:
        if self.display_timezone.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(self.display_timezone)

    @classmethod
    def load(cls) -> "Config":
        cfg = cls()
        if _CONFIG_FILE.exists():
            overrides = json.loads(_CONFIG_FILE.read_text())
            for k, v in overrides.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, v)
        # environment variable overrides (LF_*)
        for k in cfg.__dataclass_fields__:  # type: ignore[attr-defined]
            env_key = f"LF_{k.upper()}"
            if env_key in os.environ:
                setattr(cfg, k, _coerce(getattr(cfg, k), os.environ[env_key]))
        cfg.data_dir = Path(cfg.data_dir)
        cfg.data_dir.mkdir(parents=True, exist_ok=True)
        return cfg


def _coerce(current, raw: str):
    # bool("false") is True, so flags need their own parsing
    if isinstance(current, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    return type(current)(raw)


# Module-level singleton
config = Config.load()
