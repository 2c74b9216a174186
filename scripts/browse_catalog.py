#!/usr/bin/env python3
"""
Browse the live catalog from the terminal.

Drives the pagination engine against the real upstream: submits one query,
then keeps signalling near-end until the results are exhausted, an error
occurs, or the page limit is reached.

Usage:
    OMDB_API_KEY=... python scripts/browse_catalog.py batman
    OMDB_API_KEY=... python scripts/browse_catalog.py --type series --year 2019
    OMDB_API_KEY=... python scripts/browse_catalog.py drama --genre horror --pages 3
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from catalog_browser.adapters.omdb_title_catalog import OmdbTitleCatalog
from catalog_browser.domain.browse_state import BrowseSnapshot, LoadStatus
from catalog_browser.domain.title import Query, TitleKind
from catalog_browser.entrypoints.http.dependencies import build_controller
from catalog_browser.infra.config import load_settings


# ==============================================================================
# Configuration
# ==============================================================================

MAX_PAGES = 5  # Stop after this many pages unless --pages says otherwise


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("text", nargs="?", default="", help="search text (empty = popular)")
    parser.add_argument("--type", choices=[k.value for k in TitleKind], default="any")
    parser.add_argument("--year", default=None)
    parser.add_argument("--genre", default=None)
    parser.add_argument("--pages", type=int, default=MAX_PAGES)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def print_snapshot(snapshot: BrowseSnapshot) -> None:
    state = snapshot.load_state
    if state.is_loading:
        print(f"⏳ Loading page {snapshot.page}...")
    elif state.status is LoadStatus.ERROR:
        print(f"❌ {state.reason} ({state.error_kind})")
    elif state.status is LoadStatus.EXHAUSTED and not snapshot.aggregate:
        print("🔍 No titles found")
    else:
        print(f"🎯 {snapshot.summary} | loaded {len(snapshot.aggregate)}")


async def browse(args: argparse.Namespace) -> int:
    settings = load_settings()
    query = Query(
        text=args.text,
        kind=TitleKind(args.type),
        year=args.year,
        genre=args.genre,
    )

    async with OmdbTitleCatalog.from_settings(settings) as catalog:
        controller = build_controller(catalog, settings)
        controller.subscribe(print_snapshot)

        controller.submit_query(query)
        await controller.wait_idle()

        pages = 1
        while pages < args.pages and controller.notify_near_end():
            await controller.wait_idle()
            pages += 1

        snapshot = controller.snapshot

    print("\n📊 Results:")
    for i, record in enumerate(snapshot.aggregate, 1):
        poster = "🖼️ " if record.has_poster else "  "
        print(f"   {i:>3}. {poster}{record.title} ({record.year}) [{record.kind}] {record.id}")

    return 1 if snapshot.load_state.status is LoadStatus.ERROR else 0


# ==============================================================================
# Main
# ==============================================================================


if __name__ == "__main__":
    arguments = parse_args(sys.argv[1:])
    logging.basicConfig(level=logging.DEBUG if arguments.verbose else logging.WARNING)
    try:
        sys.exit(asyncio.run(browse(arguments)))
    except Exception as e:
        print(f"❌ Error browsing catalog: {e}", file=sys.stderr)
        sys.exit(1)
