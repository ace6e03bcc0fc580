"""
History Simulator — generates a realistic synthetic fasting history so the
history chart, stats and widget graph have something to show without weeks
of real fasting.

Usage:
    python scripts/simulate.py --out seed.json          # write a snapshot file
    python scripts/simulate.py --post                   # replace the running API's data
    python scripts/simulate.py --profile struggling     # mostly short fasts
    python scripts/simulate.py --days 30 --active       # leave a fast running
"""

from __future__ import annotations

import argparse
import json
import random
import urllib.error
import urllib.request
import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterator

API = "http://127.0.0.1:8765"


# ---------------------------------------------------------------------------
# Low-level HTTP helper
# ---------------------------------------------------------------------------

def _post(path: str, body: dict) -> dict | None:
    try:
        data = json.dumps(body).encode()
        req = urllib.request.Request(
            f"{API}{path}",
            data=data,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        with urllib.request.urlopen(req, timeout=3) as r:
            return json.loads(r.read())
    except (urllib.error.URLError, OSError) as e:
        print(f"  [!] API unreachable: {e}")
        return None


def _get(path: str) -> dict | None:
    try:
        with urllib.request.urlopen(f"{API}{path}", timeout=3) as r:
            return json.loads(r.read())
    except (urllib.error.URLError, OSError, ValueError):
        return None


def _session(start: datetime, hours: float, goal_minutes: int | None, ended: bool = True) -> dict:
    start = start.replace(microsecond=0)
    end = start + timedelta(hours=hours) if ended else None
    return {
        "id": str(uuid.uuid4()),
        "startTime": start.isoformat(),
        "endTime": end.replace(microsecond=0).isoformat() if end else None,
        "goalMinutes": goal_minutes,
        "goalCelebrationShown": bool(ended and goal_minutes and hours * 60 >= goal_minutes),
    }


# ---------------------------------------------------------------------------
# Profiles — each yields (fasted hours, goal minutes) for one day
# ---------------------------------------------------------------------------

def profile_consistent() -> Iterator[tuple[float, int | None]]:
    """Steady 16:8 with the odd early break."""
    while True:
        yield random.gauss(16.5, 1.0) if random.random() > 0.15 else random.uniform(11, 15), 960


def profile_struggling() -> Iterator[tuple[float, int | None]]:
    """Aiming for 18 hours, usually stopping well short."""
    while True:
        yield random.uniform(8, 17), 1080


def profile_mixed() -> Iterator[tuple[float, int | None]]:
    """Alternating goals, some fasts started without one."""
    goals = [720, 960, 1080, 1200, None]
    while True:
        goal = random.choice(goals)
        target = (goal or 840) / 60
        yield max(1.0, random.gauss(target, 2.0)), goal


PROFILES = {
    "consistent": profile_consistent,
    "struggling": profile_struggling,
    "mixed": profile_mixed,
}


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

def build_snapshot(profile: str, days: int, active: bool, now: datetime) -> dict:
    gen = PROFILES[profile]()
    sessions = []
    for offset in range(days, 0, -1):
        hours, goal = next(gen)
        # evening start, so the fast ends on the following day
        start = (now - timedelta(days=offset)).replace(hour=20, minute=0, second=0)
        start += timedelta(minutes=random.randint(-90, 90))
        sessions.append(_session(start, max(0.5, hours), goal))
    if active:
        sessions.append(_session(now - timedelta(hours=random.uniform(1, 14)), 0, 960, ended=False))
    return {"version": 1, "exportDate": now.isoformat(), "sessions": sessions}


def main() -> None:
    parser = argparse.ArgumentParser(description="LastFast History Simulator")
    parser.add_argument("--profile", choices=list(PROFILES.keys()), default="consistent")
    parser.add_argument("--days", type=int, default=21, help="Days of history (default 21)")
    parser.add_argument("--active", action="store_true", help="Leave a fast running")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    parser.add_argument("--out", help="Write the snapshot to this file")
    parser.add_argument("--post", action="store_true", help="POST the snapshot to the running API")
    args = parser.parse_args()

    if args.seed is not None:
        random.seed(args.seed)

    snapshot = build_snapshot(args.profile, args.days, args.active, datetime.now(timezone.utc))
    print(f"[✓] Generated {len(snapshot['sessions'])} fasts ({args.profile})")

    if args.out:
        with open(args.out, "w") as f:
            json.dump(snapshot, f, indent=2)
        print(f"    Written to {args.out}  (load with: python start.py --seed-data {args.out})")

    if args.post:
        if not _get("/health"):
            print(f"[!] Cannot reach API at {API}")
            print("    Start it first: python start.py")
            return
        result = _post("/snapshot", snapshot)
        if result:
            stats = _get("/history/stats") or {}
            print(f"    Imported {result['imported']} fasts; "
                  f"success rate {stats.get('success_rate', 0):.0f}%")

    if not args.out and not args.post:
        print(json.dumps(snapshot, indent=2))


if __name__ == "__main__":
    main()
