#!/usr/bin/env python3
"""
Rituals CLI - daily ritual tracking from the terminal.

COMMANDS:
  rituals list <category>         Show a category with today's progress
  rituals tap <id> [--times N]         Count repetitions of an item
  rituals skip <id>                    Skip an item for today
  rituals fav <id>                     Toggle an item as favorite
  rituals move <category> <id> up|down Move an item within its category
  rituals stats                        Show history statistics
  rituals reset                        Clear today's counters

Settings come from .env / environment (RITUALS_DB_PATH, RITUALS_CATALOG_PATH,
RITUALS_TIMEZONE, RITUALS_RECENT_LIMIT, RITUALS_LOG_DIR).
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project is in path
RITUALS_DIR = Path(__file__).parent
if str(RITUALS_DIR) not in sys.path:
    sys.path.insert(0, str(RITUALS_DIR))

from Rituals.category_view import CategoryView  # noqa: E402
from Rituals.config import RitualsConfig  # noqa: E402
from Rituals.overlay_store import (  # noqa: E402
    Catalog,
    InvalidArgumentError,
    KVStore,
    Ledger,
    NotFoundError,
    OverlayStore,
    PersistenceFailure,
    ProgressStore,
)
from Rituals.rich_output import category_table, console, stats_panel  # noqa: E402


def build_view(config: RitualsConfig) -> CategoryView:
    """Wire the stores from configuration."""
    kv = KVStore(config.db_path)
    catalog = Catalog.from_json(config.catalog_path)
    return CategoryView(
        OverlayStore(kv, catalog),
        ProgressStore(kv, tz=config.tzinfo()),
        Ledger(kv, recent_limit=config.recent_limit),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rituals",
        description="Track daily rituals",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--db", type=Path, help="Database path (overrides RITUALS_DB_PATH)")
    parser.add_argument("--catalog", type=Path, help="Catalog JSON (overrides RITUALS_CATALOG_PATH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="Show a category")
    p_list.add_argument("category")

    p_tap = sub.add_parser("tap", help="Count repetitions")
    p_tap.add_argument("id", type=int)
    p_tap.add_argument("--times", type=int, default=1)

    p_skip = sub.add_parser("skip", help="Skip an item for today")
    p_skip.add_argument("id", type=int)

    p_fav = sub.add_parser("fav", help="Toggle favorite")
    p_fav.add_argument("id", type=int)

    p_move = sub.add_parser("move", help="Move an item up or down")
    p_move.add_argument("category")
    p_move.add_argument("id", type=int)
    p_move.add_argument("direction", choices=["up", "down"])

    sub.add_parser("stats", help="Show statistics")
    sub.add_parser("reset", help="Clear today's counters")

    return parser


def run(args: argparse.Namespace, view: CategoryView) -> int:
    if args.command == "list":
        snapshot = view.open(args.category)
        if not snapshot.items:
            console.print(f"[yellow]No items in '{args.category}'[/yellow]")
            return 1
        category_table(snapshot)

    elif args.command == "tap":
        count = 0
        for _ in range(max(1, args.times)):
            count = view.tap(args.id)
        console.print(f"{args.id}: {count}")

    elif args.command == "skip":
        view.skip(args.id)
        console.print(f"{args.id}: skipped")

    elif args.command == "fav":
        state = "added to" if view.toggle_favorite(args.id) else "removed from"
        console.print(f"{args.id} {state} favorites")

    elif args.command == "move":
        if view.overlay.move_adjacent(args.category, args.id, args.direction):
            category_table(view.load(args.category))
        else:
            console.print(f"[dim]{args.id} not moved[/dim]")

    elif args.command == "stats":
        stats_panel(view.progress.get_stats())

    elif args.command == "reset":
        cleared = view.progress.reset_today()
        console.print(f"Cleared {len(cleared)} counters for {view.progress.today()}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    config = RitualsConfig.from_env()
    if args.db:
        config.db_path = args.db
    if args.catalog:
        config.catalog_path = args.catalog

    try:
        view = build_view(config)
        return run(args, view)
    except NotFoundError as e:
        console.print(f"[red]{e}[/red]")
        return 1
    except InvalidArgumentError as e:
        console.print(f"[red]Invalid argument: {e}[/red]")
        return 1
    except PersistenceFailure as e:
        console.print(f"[red]{e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
