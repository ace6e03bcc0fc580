"""
/settings — read and update user-tunable runtime settings.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ...settings import DEFAULTS, get_settings, update_settings

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsPatch(BaseModel):
    fasting_goal_minutes: Optional[int] = Field(None, ge=1,  le=7 * 24 * 60)
    history_chart_window: Optional[int] = Field(None, ge=1,  le=365)
    widget_recent_count:  Optional[int] = Field(None, ge=1,  le=30)


@router.get("")
def read_settings():
    """Return current settings with their defaults for reference."""
    current = get_settings()
    return {"settings": current, "defaults": DEFAULTS}


@router.put("")
def write_settings(patch: SettingsPatch):
    """Apply a partial update; unset fields are left alone. Persists to data/settings.json."""
    data = {k: v for k, v in patch.model_dump().items() if v is not None}
    return {"settings": update_settings(data)}
