#!/usr/bin/env python3
"""Saved Places Search - Command line entry point.

Imports a saved-places export, builds the vector index and prints the
best matches for a query.

Usage:
    python main.py exports/saved_places.json "ramen in my tokyo list"
    python main.py exports/list.csv "bakery" --lexical --open
"""

import argparse
import sys
from pathlib import Path

from core.settings import Settings, SettingsError, load_settings
from core.types import CanonicalRecord, IndexProgress, SearchResult
from ingestion.importer import Importer, ImportFileError
from ingestion.index_builder import IndexBuilder
from libs.embedding.base_embedding import EmbeddingError
from libs.embedding.embedding_factory import EmbeddingFactory
from libs.embedding.vector_utils import DimensionMismatchError
from libs.parser.parser_dispatcher import ParserDispatcher
from libs.store.base_store import StoreError
from libs.store.store_factory import StoreFactory
from observability.logger import configure_logger, get_logger
from retrieval.destination import build_destination_url, open_destination
from retrieval.match_explainer import explain_match
from retrieval.query_parser import matches_list_filter, parse_query
from retrieval.search_engine import SearchEngine

logger = get_logger(__name__)

# Default settings path
SETTINGS_PATH = Path(__file__).parent / "config" / "settings.yaml"


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Semantic search over exported saved places"
    )
    parser.add_argument("export_file", type=Path, help="GeoJSON or CSV export to import.")
    parser.add_argument("query", help="Free-text query, e.g. 'coffee in my work list'.")
    parser.add_argument(
        "--settings",
        type=Path,
        default=SETTINGS_PATH,
        help="Path to settings.yaml.",
    )
    parser.add_argument("--top-k", type=int, default=None, help="Maximum number of results.")
    parser.add_argument(
        "--min-score",
        type=float,
        default=None,
        help="Minimum cosine similarity (default from settings).",
    )
    parser.add_argument(
        "--lexical",
        action="store_true",
        help="Skip the index and use substring matching only.",
    )
    parser.add_argument("--open", action="store_true", help="Open the top result in a browser.")
    return parser


def _log_progress(progress: IndexProgress) -> None:
    logger.info(f"[{progress.phase.value}] {progress.message} ({progress.current}/{progress.total})")


def _effective_min_score(args: argparse.Namespace, settings: Settings) -> float:
    if args.min_score is not None:
        return args.min_score
    # Fake vectors carry no meaning, so their scores cluster near zero.
    if (settings.embedding.provider or "").lower() == "fake":
        return 0.0
    return settings.search.min_score


def print_results(
    results: list[SearchResult],
    records: dict[str, CanonicalRecord],
    search_terms: str,
) -> None:
    for result in results:
        record = records[result.record_id]
        list_suffix = f"  ({record.list_name})" if record.list_name else ""
        print(f"{result.rank:>3}. [{result.score:.3f}] {record.name}{list_suffix}")
        for explanation in explain_match(record, search_terms):
            print(f"       {explanation.label}: {explanation.snippet}")
        print(f"       {build_destination_url(record)}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for configuration, import or provider errors)
    """
    args = build_arg_parser().parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except SettingsError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    configure_logger(
        level=settings.observability.log_level,
        log_file=settings.observability.log_file,
    )
    logger.info(f"Configuration loaded from {args.settings}")

    try:
        stores = StoreFactory.create(settings)
    except StoreError as e:
        logger.error(f"Store error: {e}")
        return 1

    importer = Importer(ParserDispatcher(), stores.records, stores.config, stores.embeddings)
    try:
        outcome = importer.import_file(args.export_file)
    except ImportFileError as e:
        logger.error(str(e))
        return 1

    for problem in outcome.problems:
        logger.warning(f"{problem.severity.value}: {problem.message}")
    if not outcome.succeeded:
        print(outcome.problems[0].message if outcome.problems else "No records found", file=sys.stderr)
        return 1

    parsed = parse_query(args.query)
    search_terms = parsed.search_terms or parsed.raw_query.strip()
    top_k = args.top_k if args.top_k is not None else settings.search.top_k

    try:
        provider = EmbeddingFactory.create(settings)
        engine = SearchEngine(provider, stores.embeddings, stores.records, stores.config)

        if not args.lexical:
            IndexBuilder(provider, stores.embeddings, stores.config).build_index(
                list(outcome.records), on_progress=_log_progress
            )

        if args.lexical or not engine.is_index_ready():
            results = engine.lexical_search(search_terms, limit=settings.search.fallback_limit)
        else:
            results = engine.search(search_terms, top_k=top_k, min_score=_effective_min_score(args, settings))
    except (EmbeddingError, DimensionMismatchError, StoreError) as e:
        logger.error(f"Search failed: {e}")
        return 1

    records = {record.id: record for record in engine.get_records(results)}
    results = [
        result for result in results
        if result.record_id in records and matches_list_filter(records[result.record_id], parsed.list_filter)
    ]

    if parsed.has_list_filter:
        logger.info(f"List filter '{parsed.list_filter}': {len(results)} results")

    if not results:
        print("No matching places.")
        return 0

    print_results(results, records, search_terms)

    if args.open:
        open_destination(build_destination_url(records[results[0].record_id]))

    return 0


if __name__ == "__main__":
    sys.exit(main())
