"""Match Explainer - Shows which record fields contain the query terms."""

from core.types import CanonicalRecord, MatchExplanation

MIN_TERM_LENGTH = 3
SNIPPET_LEAD = 20
SNIPPET_LENGTH = 80
ELLIPSIS = "..."

EXPLAINED_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "Name"),
    ("notes", "Notes"),
    ("list_name", "List"),
    ("address", "Address"),
)


def _query_terms(search_terms: str) -> list[str]:
    return [term for term in search_terms.lower().split() if len(term) >= MIN_TERM_LENGTH]


def create_snippet(text: str, matched_terms: list[str]) -> str:
    """Cut a window of text around the earliest matched term.

    The window starts up to 20 characters before the match and spans at
    most 80 characters; an ellipsis marks each truncated side.
    """
    lower_text = text.lower()
    positions = [pos for pos in (lower_text.find(term) for term in matched_terms) if pos != -1]

    if not positions:
        if len(text) > SNIPPET_LENGTH:
            return text[:SNIPPET_LENGTH] + ELLIPSIS
        return text

    first = min(positions)
    start = max(0, first - SNIPPET_LEAD)
    end = min(len(text), first + SNIPPET_LENGTH - SNIPPET_LEAD)

    snippet = text[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(text):
        snippet = snippet + ELLIPSIS
    return snippet


def explain_match(
    record: CanonicalRecord,
    search_terms: str,
    max_explanations: int = 2,
) -> list[MatchExplanation]:
    """Explain which fields of a record matched the search terms.

    Terms shorter than three characters are ignored. Relevance is the
    number of terms a field contains; the most relevant fields come first,
    ties keeping field order (name, notes, list, address).

    Args:
        record: Record returned by a search.
        search_terms: Query text, usually ParsedQuery.search_terms.
        max_explanations: Maximum number of explanations returned.
    """
    terms = _query_terms(search_terms)
    if not terms:
        return []

    explanations: list[MatchExplanation] = []
    for field_name, label in EXPLAINED_FIELDS:
        value = getattr(record, field_name)
        if not value:
            continue

        lower_value = value.lower()
        matched = [term for term in terms if term in lower_value]
        if matched:
            explanations.append(
                MatchExplanation(
                    field=field_name,
                    label=label,
                    snippet=create_snippet(value, matched),
                    relevance=len(matched),
                )
            )

    explanations.sort(key=lambda explanation: explanation.relevance, reverse=True)
    return explanations[:max_explanations]
