#!/usr/bin/env python3
"""
Print a player's stat line and zone chart from a TrackMan parquet.

Usage:
    python3 scripts/trackman_report.py --role pitcher --player 1000123
    python3 scripts/trackman_report.py --role hitter --player 1000456 --season "2024 Regular Season"
    python3 scripts/trackman_report.py --role pitcher --player 1000123 --balls 0 --strikes 2 --zones
    python3 scripts/trackman_report.py --role pitcher --player 1000123 --arsenal
"""
from __future__ import annotations

import argparse
import logging
import os
import sys

# Ensure project root is on sys.path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analytics.arsenal import pitch_arsenal
from analytics.filters import FilterCriteria, filter_pitches, pitches_for_player
from analytics.zones import ZONE_METRICS, zone_grid, zone_ids
from config import LOG_LEVEL, PARQUET_PATH
from data.hierarchy import final_pitches
from data.loader import load_trackman_parquet, trackman_frame
from data.stats import compute_player_stats


def print_stat_line(stats) -> None:
    line = stats.as_dict()
    width = max(len(k) for k in line)
    print(f"\n{'=' * 40}")
    print(f"  {stats.role.value.title()} stat line")
    print(f"{'=' * 40}")
    for name, value in line.items():
        print(f"  {name:<{width}}  {value}")


def print_zone_grid(grid: dict) -> None:
    for metric in ZONE_METRICS:
        values = grid[metric]
        print(f"\n  {metric}")
        for row in range(3):
            cells = [values[row * 3 + col + 1] for col in range(3)]
            print("    " + "  ".join(f"{c:>6}" for c in cells))
        outside = [zid for zid in zone_ids() if isinstance(zid, str)]
        print("    " + "  ".join(f"{zid}={values[zid]}" for zid in outside))


def print_arsenal(arsenal) -> None:
    print("\n  Arsenal")
    if arsenal.empty:
        print("    (no pitches with full pitch metrics)")
        return
    print(arsenal.round(1).to_string(index=False))


def main() -> int:
    parser = argparse.ArgumentParser(description="TrackMan player stat line from parquet")
    parser.add_argument("--parquet", default=PARQUET_PATH, help="TrackMan parquet (default: config.PARQUET_PATH)")
    parser.add_argument("--role", required=True, choices=["pitcher", "hitter"])
    parser.add_argument("--player", required=True, help="PitcherId or BatterId")
    parser.add_argument("--season", default="all", help='Season label, e.g. "2024 Regular Season"')
    parser.add_argument("--month", default="all")
    parser.add_argument("--pitch-type", default="all")
    parser.add_argument("--pitch-call", default="all")
    parser.add_argument("--balls", default="all")
    parser.add_argument("--strikes", default="all")
    parser.add_argument("--outs", default="all")
    parser.add_argument("--side", default="all", help="Batter side (pitcher role) or pitcher hand (hitter role)")
    parser.add_argument("--game", action="append", default=[], help="Restrict to a GameID (repeatable)")
    parser.add_argument("--zones", action="store_true", help="Also print the zone chart")
    parser.add_argument("--arsenal", action="store_true", help="Also print the pitch-type summary (pitcher role)")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    parquet = os.path.abspath(args.parquet)
    if not os.path.exists(parquet):
        raise SystemExit(f"Parquet file not found: {parquet}")

    criteria = FilterCriteria(
        season=args.season, month=args.month, pitch_type=args.pitch_type,
        pitch_call=args.pitch_call, balls=args.balls, strikes=args.strikes,
        outs=args.outs, batter_side=args.side, game_ids=frozenset(args.game),
    )

    pitches = trackman_frame(load_trackman_parquet(parquet, game_ids=args.game or None))
    print(f"Loaded {len(pitches):,} pitches across {pitches['season'].nunique()} season(s)")

    print_stat_line(compute_player_stats(pitches, args.role, args.player, criteria))

    mine = pitches_for_player(pitches, args.role, args.player, criteria)
    if args.zones:
        finals = filter_pitches(final_pitches(pitches, args.role, args.player), criteria, args.role)
        print_zone_grid(zone_grid(mine, finals))
    if args.arsenal:
        print_arsenal(pitch_arsenal(mine))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
