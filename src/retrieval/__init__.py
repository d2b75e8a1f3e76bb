# Retrieval - Search, query parsing and result presentation
from retrieval.search_engine import (
    LEXICAL_PLACEHOLDER_SCORE,
    SearchEngine,
)
from retrieval.query_parser import matches_list_filter, parse_query
from retrieval.match_explainer import explain_match
from retrieval.destination import build_destination_url, open_destination

__all__ = [
    "LEXICAL_PLACEHOLDER_SCORE",
    "SearchEngine",
    "matches_list_filter",
    "parse_query",
    "explain_match",
    "build_destination_url",
    "open_destination",
]
