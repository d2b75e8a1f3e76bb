"""Query Parser - Splits a free-text query into search terms and a list filter.

Recognised forms, tried in order (case-insensitive):

    "... in my <list> list ..." / "... from <list> list ..."
    "... in <word> ..." / "... from <word> ..."

The patterns are unanchored, so "in" or "from" inside another word can
also trigger them.
"""

import re
from collections.abc import Mapping
from typing import Any

from core.types import ParsedQuery

LIST_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(?:in|from)\s+(?:my\s+)?(.+?)\s+list", re.IGNORECASE),
    re.compile(r"(?:in|from)\s+(.+?)(?:\s|$)", re.IGNORECASE),
)


def parse_query(query: str) -> ParsedQuery:
    """Extract an optional list filter from a query.

    The filter is trimmed and lower-cased. The first occurrence of the
    matched text is removed from the trimmed query to form the search terms.

    Example:
        >>> parse_query("ramen in my tokyo list")
        ParsedQuery(raw_query='ramen in my tokyo list', search_terms='ramen', list_filter='tokyo')
    """
    trimmed = query.strip()

    for pattern in LIST_PATTERNS:
        match = pattern.search(trimmed)
        if match:
            list_filter = match.group(1).strip().lower() or None
            search_terms = trimmed.replace(match.group(0), "", 1).strip()
            return ParsedQuery(raw_query=query, search_terms=search_terms, list_filter=list_filter)

    return ParsedQuery(raw_query=query, search_terms=trimmed)


def _list_name_of(record: Any) -> str | None:
    if isinstance(record, Mapping):
        return record.get("list_name")
    return getattr(record, "list_name", None)


def matches_list_filter(record: Any, list_filter: str | None) -> bool:
    """Check a record's list name against a filter.

    No filter matches everything; a record without a list name matches no
    filter. Otherwise either side may contain the other, ignoring case.
    """
    if not list_filter:
        return True
    list_name = _list_name_of(record)
    if not list_name:
        return False

    name = list_name.lower()
    wanted = list_filter.lower()
    return wanted in name or name in wanted
