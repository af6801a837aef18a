"""Command-line entry point for querying a crawl database.

Usage:
    python -m crawl_search search "red panda diet"
    python -m crawl_search suggest "red pan" --db /data/crawler.db
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys

import orjson

from crawl_search.adapters.sqlite_store import SqliteCrawlStore
from crawl_search.config import Settings, get_settings
from crawl_search.domain.errors import SearchBackendUnavailableError
from crawl_search.observability.logging import configure_logging
from crawl_search.observability.tracing import init_tracing
from crawl_search.service_layer.search_service import SearchService


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="crawl_search", description="Query the crawl search index")
    parser.add_argument("command", choices=("search", "suggest"))
    parser.add_argument("term", help="Free-text query")
    parser.add_argument("--db", type=Path, default=None, help="SQLite database (defaults to CRAWL_DB_PATH)")
    parser.add_argument("--timeout", type=float, default=None, help="Per-call deadline in seconds")
    parser.add_argument("--plain-logs", action="store_true", help="Emit plain text logs instead of JSON")
    return parser


async def run(command: str, term: str, settings: Settings, *, timeout: float | None = None) -> list:
    store = SqliteCrawlStore(settings.crawl_db_path)
    try:
        service = SearchService.from_settings(store, settings)
        if command == "search":
            documents = await service.search(term, timeout=timeout)
            return [document.model_dump() for document in documents]
        return await service.suggest(term, timeout=timeout)
    finally:
        store.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    if args.db is not None:
        settings = settings.model_copy(update={"crawl_db_path": args.db})

    configure_logging(settings.log_level, json_output=settings.log_json and not args.plain_logs)
    init_tracing(settings.service_name)

    try:
        results = asyncio.run(run(args.command, args.term, settings, timeout=args.timeout))
    except SearchBackendUnavailableError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 2

    sys.stdout.write(orjson.dumps(results, option=orjson.OPT_INDENT_2).decode("utf-8") + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
