"""
Rebuild championship reigns from the stored match history.

Replays every match in chronological order using the after-ratings stored
on each match, then replaces the championship_reigns table in a single
transaction and prints a summary.

Usage examples:
  ladderkeeper-backfill --database-url sqlite:///ladder.db
  ladderkeeper-backfill --create-schema --dry-run
  python -m ladderkeeper.backfill --json-logs --log-level DEBUG
"""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from ladderkeeper.config import DATABASE_URL, LOG_LEVEL
from ladderkeeper.errors import LadderError
from ladderkeeper.logging import configure_logging, get_logger
from ladderkeeper.reigns.display import (
    ReplayProgressHandler,
    console,
    create_leaderboard_table,
    print_summary,
)
from ladderkeeper.reigns.reconstruct import rebuild_reigns
from ladderkeeper.reigns.stats import aggregate_stats, to_view, utcnow
from ladderkeeper.sql import SqlLadderStore

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ladderkeeper-backfill",
        description="Reconstruct championship reigns from match history",
    )
    parser.add_argument(
        "--database-url",
        default=DATABASE_URL or None,
        help="SQLAlchemy URL (default: LADDERKEEPER_DATABASE_URL or DATABASE_URL)",
    )
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create missing tables before running",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and print reigns without writing them",
    )
    parser.add_argument("--log-level", default=LOG_LEVEL)
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON logs instead of console output",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Leaderboard rows to print after the summary (0 to skip)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(cli_mode=not args.json_logs, log_level=args.log_level)

    try:
        store = SqlLadderStore.from_url(args.database_url, create_schema=args.create_schema)
        with ReplayProgressHandler() as progress:
            result = rebuild_reigns(store, dry_run=args.dry_run, event_handler=progress)
        competitors = store.list_competitors()
    except (LadderError, RuntimeError) as exc:
        log.error("backfill_failed", error=str(exc))
        return 1

    if result.matches_processed == 0:
        console.print("[dim]No matches found, nothing to backfill[/dim]")
        return 0

    now = utcnow()
    names = {c.id: c.name for c in competitors}
    views = [to_view(r, now, names) for r in result.reigns]
    print_summary(views, aggregate_stats(result.reigns, now, names))
    if args.top > 0:
        console.print(create_leaderboard_table(competitors, top_n=args.top))

    if args.dry_run:
        console.print("[yellow]Dry run: championship reigns were not modified[/yellow]")
    else:
        console.print("\n🎉 Championship history backfill complete!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
