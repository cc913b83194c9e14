#!/usr/bin/env python3
"""Page through a JSON list endpoint with the routepager engine.

The endpoint must answer ``GET`` requests carrying the page, page-size and
filter values as query parameters with ``{"data": [...], "total": n}``.

Usage
-----
::

    python scripts/page_through.py http://localhost:8000/api/orders \\
        --filter status=open --filter sort_date=desc --per-page 50

Options::

    --filter KEY=VALUE   Commit a filter before paging (repeatable)
    --per-page N         Page size (default: 20)
    --max-pages N        Stop after N pages (default: 5)
    --json               Print rows as JSON lines instead of a summary
    --verbose            Enable DEBUG logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import aiohttp

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from routepager import ActionRegistry, HttpListAction, MemoryRouter, PagerConfig, RoutePager  # noqa: E402
from routepager.keys import to_canonical  # noqa: E402


def _parse_filters(raw: list[str]) -> dict[str, str]:
    filters: dict[str, str] = {}
    for item in raw:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise SystemExit(f"--filter expects KEY=VALUE, got {item!r}")
        filters[key] = value
    return filters


def _initial_query(filters: dict[str, str], config: PagerConfig, per_page: int) -> dict[str, Any]:
    """Route query keyed by canonical names, as the pager reads it."""
    query: dict[str, Any] = {to_canonical(key): value for key, value in filters.items()}
    query[to_canonical(config.per_page_key)] = per_page
    return query


def _print_rows(rows: list[Any], *, as_json: bool) -> None:
    for row in rows:
        print(json.dumps(row, default=str) if as_json else f"  {row}")


async def _run(args: argparse.Namespace) -> int:
    filters = _parse_filters(args.filter)
    config = PagerConfig.from_env(filters=tuple(filters), fetch_on_start=True)
    router = MemoryRouter(name="list", query=_initial_query(filters, config, args.per_page))

    async with aiohttp.ClientSession() as http_session:
        store = ActionRegistry({config.action_name: HttpListAction(http_session, args.url)})
        async with RoutePager(store, router, config) as pager:
            await pager.settle()

            shown = 0
            for page in range(1, args.max_pages + 1):
                meta = pager.data_meta
                if not args.json:
                    print(f"page {page}: rows {meta.from_}-{meta.to} of {meta.of} ({router.url})")
                _print_rows(pager.items[shown:], as_json=args.json)
                shown = len(pager.items)
                if not pager.can_show_load_more:
                    break
                pager.load_more()
                await pager.settle()

    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("url", help="List endpoint URL")
    parser.add_argument("--filter", action="append", default=[], metavar="KEY=VALUE")
    parser.add_argument("--per-page", type=int, default=20)
    parser.add_argument("--max-pages", type=int, default=5)
    parser.add_argument("--json", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
