"""
Data snapshots — versioned JSON export/import of every stored session.

Used to seed a store for manual testing and to carry history between
installs:

    {"version": 1, "exportDate": "...", "sessions": [{...}, ...]}
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..core.session import FastingSession
from ..core.units import utcnow
from ..errors import SnapshotError
from .sessions import SessionStore

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def export_snapshot(store: SessionStore, now: Optional[datetime] = None) -> Dict[str, Any]:
    sessions = store.list_sessions()
    return {
        "version": SNAPSHOT_VERSION,
        "exportDate": (now or utcnow()).isoformat(),
        "sessions": [s.to_dict() for s in sessions],
    }


def write_snapshot(
    store: SessionStore,
    directory: Path,
    now: Optional[datetime] = None,
) -> Path:
    """Export to ``directory/snapshot_<timestamp>.json`` and return the path."""
    now = now or utcnow()
    snapshot = export_snapshot(store, now)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SnapshotError(f"Failed to create snapshots directory {directory}") from e
    stamp = now.replace(microsecond=0).isoformat().replace(":", "-")
    path = directory / f"snapshot_{stamp}.json"
    path.write_text(json.dumps(snapshot, indent=2, sort_keys=True))
    logger.info("Snapshot exported to %s (%d sessions)", path, len(snapshot["sessions"]))
    return path


def import_snapshot(store: SessionStore, data: Union[str, bytes, Dict[str, Any]]) -> int:
    """Replace every stored session with the snapshot's; returns the count imported."""
    try:
        payload = json.loads(data) if isinstance(data, (str, bytes)) else data
        sessions = [FastingSession.from_dict(d) for d in payload["sessions"]]
    except (ValueError, KeyError, TypeError) as e:
        raise SnapshotError("Failed to decode snapshot data") from e
    count = store.replace_all(sessions)
    logger.info("Snapshot imported: version %s, %d sessions", payload.get("version"), count)
    return count


def load_seed_file(store: SessionStore, path: Path) -> int:
    if not path.exists():
        raise SnapshotError(f"Seed file {path} not found")
    return import_snapshot(store, path.read_bytes())
