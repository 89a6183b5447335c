"""Command-line entry point for querying an offline documentation index."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
import json
import logging
from pathlib import Path
import sys

from pydantic import ValidationError

from offline_docs_search.adapters.history_store import JsonFileKeyValueStore
from offline_docs_search.config import Settings
from offline_docs_search.documentation_search_engine import create_documentation_search_engine
from offline_docs_search.observability.logging import configure_logging
from offline_docs_search.observability.metrics import get_metrics
from offline_docs_search.observability.tracing import init_tracing
from offline_docs_search.search.mini_engine import MiniSearchEngine
from offline_docs_search.service_layer.history_service import SearchHistoryService
from offline_docs_search.service_layer.search_service import SearchService, SearchState


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="offline-docs-search",
        description="Search a prebuilt documentation index without network access",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Print Prometheus metrics to stderr before exiting",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Run a ranked query against an index file")
    search.add_argument("index", type=Path, help="Path to the serialized search index (JSON)")
    search.add_argument("query", help='Query text; supports "phrases", -exclude, title:word, code:word')
    search.add_argument("--max-results", type=int, help="Results per page (default from settings)")
    search.add_argument("--page", type=int, default=1, help="Page to fetch (default: 1)")
    search.add_argument("--json", action="store_true", help="Emit the results as JSON")
    search.add_argument("--store", type=Path, help="History file (default from settings)")

    fuzzy = subparsers.add_parser("fuzzy", help="Fuzzy/prefix search over raw documents")
    fuzzy.add_argument("documents", type=Path, help="JSON object mapping path -> document")
    fuzzy.add_argument("query", help="Keywords to match")
    fuzzy.add_argument("--limit", type=int, default=10, help="Maximum hits to print")
    fuzzy.add_argument("--json", action="store_true", help="Emit the hits as JSON")

    history = subparsers.add_parser("history", help="Show or clear remembered queries")
    history.add_argument("action", choices=("list", "clear"))
    history.add_argument("--store", type=Path, help="History file (default from settings)")
    return parser


def _history_service(settings: Settings, store_path: Path | None) -> SearchHistoryService:
    store = JsonFileKeyValueStore(store_path or settings.search_history_path)
    return SearchHistoryService(store, limit=settings.search_history_limit)


def _format_state(state: SearchState) -> str:
    lines = [f"{state.total_results} result(s) for {state.query!r} (page {state.page})"]
    for position, result in enumerate(state.results, start=1):
        lines.append(f"{position:>3}. {result.title:<40} score={result.score:.4f} {result.path}")
    if state.has_more:
        lines.append("... more results available (use --page)")
    return "\n".join(lines)


async def _run_search(args: argparse.Namespace, settings: Settings) -> int:
    max_results = args.max_results if args.max_results is not None else settings.search_max_results
    if max_results < 1 or args.page < 1:
        sys.stderr.write("--max-results and --page must be >= 1\n")
        return EXIT_FAILURE

    engine = create_documentation_search_engine(settings, index_path=args.index)
    service = SearchService(engine, _history_service(settings, args.store), max_results=max_results)

    state = SearchState()
    for page in range(1, args.page + 1):
        state = await service.search(args.query) if page == 1 else await service.load_more()
        if state.error is not None or not state.has_more:
            break

    if state.error is not None:
        sys.stderr.write(f"error: {state.error}\n")
        return EXIT_FAILURE

    if args.json:
        payload = state.model_dump(mode="json", exclude={"history", "is_searching"})
        sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    else:
        sys.stdout.write(_format_state(state) + "\n")
    return EXIT_OK


def _run_fuzzy(args: argparse.Namespace) -> int:
    try:
        documents = json.loads(args.documents.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        sys.stderr.write(f"error: cannot read documents: {exc}\n")
        return EXIT_FAILURE
    if not isinstance(documents, dict):
        sys.stderr.write("error: documents file must contain a JSON object\n")
        return EXIT_FAILURE

    engine = MiniSearchEngine()
    engine.index_documents(documents)
    hits = engine.search(args.query)[: max(args.limit, 0)]

    if args.json:
        payload = [
            {"id": hit.id, "title": hit.title, "path": hit.path, "score": hit.score, "match": hit.match}
            for hit in hits
        ]
        sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    else:
        for position, hit in enumerate(hits, start=1):
            sys.stdout.write(f"{position:>3}. {hit.title:<40} score={hit.score:.4f} {hit.path}\n")
    return EXIT_OK


async def _run_history(args: argparse.Namespace, settings: Settings) -> int:
    service = _history_service(settings, args.store)
    if args.action == "clear":
        await service.clear_history()
        sys.stdout.write("History cleared\n")
        return EXIT_OK

    for query in await service.get_history():
        sys.stdout.write(f"{query}\n")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings()
    except ValidationError as exc:
        sys.stderr.write(f"Invalid configuration:\n{exc}\n")
        return EXIT_FAILURE

    configure_logging(level=settings.log_level, json_output=settings.log_json)
    init_tracing()

    if args.command == "search":
        exit_code = asyncio.run(_run_search(args, settings))
    elif args.command == "fuzzy":
        exit_code = _run_fuzzy(args)
    else:
        exit_code = asyncio.run(_run_history(args, settings))

    if args.metrics:
        sys.stderr.write(get_metrics().decode("utf-8"))
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
