#!/usr/bin/env python3
"""
Count the unseen tiles of a recorded board.

Usage:
    # Remaining counts of a board snapshot
    python read_snapshot.py board.json

    # Also list every observed tile, with cycle timings
    python read_snapshot.py board.json --observed --timings --log-level DEBUG

    # Show the texture id layout
    python read_snapshot.py --list-textures
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from crawlers import SnapshotNodeCrawler
from tile_reader.config import STANDARD_TEXTURES, ReaderConfig, texture_table_summary
from tile_reader.display import render_observed, render_remaining
from tile_reader.session import ReaderSession
from tile_reader.textures import build_registry


logger = logging.getLogger(__name__)


def read_snapshot(snapshot_path: str, show_observed: bool = False, timings: bool = False) -> int:
    """
    Run one reconciliation cycle over a board snapshot and print the counts.

    Returns:
        Process exit code: 0, or 1 if more tiles were seen than exist
    """
    config = ReaderConfig(textures=STANDARD_TEXTURES, log_timings=timings)
    registry = build_registry(config.textures)

    crawler = SnapshotNodeCrawler.from_json_file(snapshot_path)
    session = ReaderSession(registry, crawler, config)
    snapshot = session.run_cycle()

    print(f"Observed {len(snapshot.observed)} tiles")
    print()
    print(render_remaining(snapshot.remaining, snapshot.suit_remaining))

    if show_observed and snapshot.observed:
        print()
        print(render_observed(snapshot.observed, registry))

    if snapshot.anomalies:
        logger.error(f"Counts below zero: {snapshot.anomalies}")
        return 1
    return 0


def main():
    parser = argparse.ArgumentParser(description="Count unseen Mahjong tiles from a board snapshot")
    parser.add_argument("snapshot", nargs="?", help="Path to a JSON board snapshot")
    parser.add_argument("--observed", action="store_true", help="List every observed tile")
    parser.add_argument("--timings", action="store_true", help="Log cycle durations (DEBUG level)")
    parser.add_argument("--list-textures", action="store_true", help="Print the texture id layout and exit")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    if args.list_textures:
        print("\n".join(texture_table_summary(STANDARD_TEXTURES)))
        return 0

    if not args.snapshot:
        parser.error("a snapshot path is required")

    return read_snapshot(args.snapshot, show_observed=args.observed, timings=args.timings)


if __name__ == "__main__":
    sys.exit(main())
