"""Search Engine - Ranks indexed records against a query.

Vector search embeds the query with the same provider that built the
index and scores every stored embedding by cosine similarity. Lexical
search is the fallback used before an index exists: a plain
case-insensitive substring match over name, notes and address.

Example:
    >>> engine = SearchEngine(provider, stores.embeddings, stores.records)
    >>> results = engine.search("quiet coffee", top_k=5)
    >>> [r.rank for r in results]
    [1, 2, 3, 4, 5]
"""

from core.trace.trace_context import TraceContext
from core.types import CanonicalRecord, IndexedEmbedding, IndexStats, SearchResult
from libs.embedding.base_embedding import BaseEmbedding
from libs.embedding.vector_utils import cosine_similarity
from libs.store.base_store import BaseConfigStore, BaseStore
from observability.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TOP_K = 20
DEFAULT_MIN_SCORE = 0.3
DEFAULT_FALLBACK_LIMIT = 20
LEXICAL_PLACEHOLDER_SCORE = 0.8


class SearchEngine:
    """Vector and lexical search over the stored index.

    Attributes:
        provider: Embedding provider used for queries
        embedding_store: Indexed embeddings
        record_store: Canonical records, needed for lexical search and stats
        config_store: Optional config record reset by clear_index
    """

    def __init__(
        self,
        provider: BaseEmbedding,
        embedding_store: BaseStore[IndexedEmbedding],
        record_store: BaseStore[CanonicalRecord] | None = None,
        config_store: BaseConfigStore | None = None,
    ) -> None:
        self._provider = provider
        self._embedding_store = embedding_store
        self._record_store = record_store
        self._config_store = config_store

    def search(
        self,
        query: str,
        top_k: int = DEFAULT_TOP_K,
        min_score: float = DEFAULT_MIN_SCORE,
        trace: TraceContext | None = None,
    ) -> list[SearchResult]:
        """Rank stored embeddings by cosine similarity to the query.

        Args:
            query: Free-text query.
            top_k: Maximum number of results.
            min_score: Results scoring below this are dropped.
            trace: Optional trace context for observability.

        Returns:
            Results in descending score order, ranked 1..n. Equal scores
            keep store order.

        Raises:
            EmbeddingError: If the query cannot be embedded.
            DimensionMismatchError: If the query vector and a stored vector
                differ in length.
        """
        query_vector = self._provider.embed(query)
        embeddings = self._embedding_store.all()

        if not embeddings:
            logger.info("Search on empty index")
            return []

        scored = [
            (embedding.record_id, cosine_similarity(query_vector, embedding.vector))
            for embedding in embeddings
        ]
        kept = [item for item in scored if item[1] >= min_score]
        kept.sort(key=lambda item: item[1], reverse=True)

        results = [
            SearchResult(record_id=record_id, score=score, rank=rank)
            for rank, (record_id, score) in enumerate(kept[:top_k], start=1)
        ]

        logger.info(
            f"Search complete: candidates={len(scored)}, above_threshold={len(kept)}, "
            f"returned={len(results)}"
        )

        if trace:
            trace.record_stage(
                "vector_search",
                {
                    "provider": self._provider.provider_name,
                    "candidates": len(scored),
                    "returned": len(results),
                    "top_k": top_k,
                    "min_score": min_score,
                },
            )

        return results

    def lexical_search(self, query: str, limit: int = DEFAULT_FALLBACK_LIMIT) -> list[SearchResult]:
        """Substring search over name, notes and address.

        Every hit gets the same placeholder score; ranks follow store order.
        """
        needle = query.strip().lower()
        if not needle or self._record_store is None:
            return []

        hits = []
        for record in self._record_store.all():
            haystacks = (record.name, record.notes, record.address)
            if any(text and needle in text.lower() for text in haystacks):
                hits.append(record)
                if len(hits) >= limit:
                    break

        logger.info(f"Lexical search: query={needle!r}, hits={len(hits)}")
        return [
            SearchResult(record_id=record.id, score=LEXICAL_PLACEHOLDER_SCORE, rank=rank)
            for rank, record in enumerate(hits, start=1)
        ]

    def get_records(self, results: list[SearchResult]) -> list[CanonicalRecord]:
        """Resolve results to records, in result order, skipping unknown ids."""
        if self._record_store is None or not results:
            return []
        found = self._record_store.bulk_get([result.record_id for result in results])
        return [record for record in found if record is not None]

    def is_index_ready(self) -> bool:
        return self._embedding_store.count() > 0

    def get_stats(self) -> IndexStats:
        embeddings = self._embedding_store.all()
        first = embeddings[0] if embeddings else None
        return IndexStats(
            total_records=self._record_store.count() if self._record_store is not None else 0,
            total_embeddings=len(embeddings),
            provider_name=first.provider_name if first else "none",
            dimensions=first.vector.dimensions if first else 0,
            last_updated=first.created_at if first else None,
        )

    def clear_index(self) -> None:
        self._embedding_store.clear()
        if self._config_store is not None:
            self._config_store.update_config(total_embeddings=0, model_loaded=False)
        logger.info("Search index cleared")
