"""
Convenience launcher — prepares the data directory and starts the LastFast API.

Usage:
    python start.py                          # API only
    python start.py --clear-data             # wipe stored fasts first
    python start.py --seed-data seed.json    # replace stored fasts from a snapshot
    python start.py --export-snapshot        # write data/snapshots/snapshot_<ts>.json first
"""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path

from lastfast.config import config
from lastfast.errors import SnapshotError
from lastfast.store.sessions import SessionStore
from lastfast.store.snapshot import load_seed_file, write_snapshot


def start_engine() -> subprocess.Popen:
    return subprocess.Popen(
        [sys.executable, "-m", "lastfast.main"],
        stdout=sys.stdout,
        stderr=sys.stderr,
    )


def prepare_data(args: argparse.Namespace) -> None:
    """Apply the data-handling launch flags before the API opens the store."""
    store = SessionStore(config.data_dir / config.sessions_db)
    if args.clear_data:
        removed = store.clear()
        print(f"Cleared {removed} stored fasts.")
    if args.seed_data:
        try:
            count = load_seed_file(store, Path(args.seed_data))
        except SnapshotError as e:
            print(f"  [!] {e}: {e.__cause__ or ''}")
            sys.exit(1)
        print(f"Seeded {count} fasts from {args.seed_data}.")
    if args.export_snapshot:
        path = write_snapshot(store, config.data_dir / "snapshots")
        print(f"Snapshot written to {path}.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Start the LastFast API")
    parser.add_argument("--clear-data", action="store_true", help="Delete every stored fast")
    parser.add_argument("--seed-data", metavar="FILE", help="Replace stored fasts from a snapshot file")
    parser.add_argument("--export-snapshot", action="store_true", help="Export stored fasts before starting")
    args = parser.parse_args()

    prepare_data(args)

    print("Starting LastFast API…")
    engine_proc = start_engine()

    print(f"\nAPI → http://{config.api_host}:{config.api_port}")
    print("Press Ctrl+C to stop.\n")

    try:
        engine_proc.wait()
    except KeyboardInterrupt:
        print("\nShutting down…")
        engine_proc.terminate()
        engine_proc.wait()


if __name__ == "__main__":
    main()
