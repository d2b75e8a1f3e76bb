"""Unit tests for SearchEngine."""

import pytest

from core.trace.trace_context import TraceContext
from core.types import EmbeddingVector, IndexedEmbedding
from libs.embedding.base_embedding import BaseEmbedding
from libs.embedding.fake_embedding import FakeEmbedding
from libs.embedding.vector_utils import DimensionMismatchError
from libs.store.memory_store import (
    InMemoryConfigStore,
    InMemoryEmbeddingStore,
    InMemoryRecordStore,
)
from retrieval.search_engine import LEXICAL_PLACEHOLDER_SCORE, SearchEngine


class FixedQueryEmbedding(BaseEmbedding):
    """Embeds every query as the same vector."""

    def __init__(self, values) -> None:
        self._vector = EmbeddingVector.from_values(values)

    @property
    def provider_name(self) -> str:
        return "fixed"

    @property
    def dimensions(self) -> int:
        return self._vector.dimensions

    def _embed_texts(self, texts):
        return [self._vector for _ in texts]

    def is_ready(self) -> bool:
        return True


def _indexed(record_id: str, values, provider_name: str = "fake") -> IndexedEmbedding:
    return IndexedEmbedding(
        record_id=record_id,
        vector=EmbeddingVector.from_values(values),
        embedding_text=record_id,
        provider_name=provider_name,
    )


@pytest.fixture
def embeddings() -> InMemoryEmbeddingStore:
    store = InMemoryEmbeddingStore()
    store.bulk_insert([
        _indexed("far", [0.0, 1.0]),
        _indexed("close", [0.8, 0.6]),
        _indexed("exact", [1.0, 0.0]),
        _indexed("opposite", [-1.0, 0.0]),
    ])
    return store


class TestVectorSearch:
    """Tests for cosine ranking."""

    def test_ranked_by_descending_score(self, embeddings):
        engine = SearchEngine(FixedQueryEmbedding([1.0, 0.0]), embeddings)

        results = engine.search("anything", top_k=10, min_score=-2.0)

        assert [r.record_id for r in results] == ["exact", "close", "far", "opposite"]
        assert [r.rank for r in results] == [1, 2, 3, 4]
        assert results[0].score == pytest.approx(1.0)
        assert results[1].score == pytest.approx(0.8)

    def test_min_score_filters(self, embeddings):
        engine = SearchEngine(FixedQueryEmbedding([1.0, 0.0]), embeddings)

        results = engine.search("anything", top_k=10, min_score=0.3)

        assert [r.record_id for r in results] == ["exact", "close"]
        assert all(r.score >= 0.3 for r in results)

    def test_top_k_truncates(self, embeddings):
        engine = SearchEngine(FixedQueryEmbedding([1.0, 0.0]), embeddings)

        results = engine.search("anything", top_k=1, min_score=-2.0)

        assert len(results) == 1
        assert results[0].record_id == "exact"

    def test_ties_keep_store_order(self):
        store = InMemoryEmbeddingStore()
        store.bulk_insert([_indexed("first", [1.0, 0.0]), _indexed("second", [1.0, 0.0])])
        engine = SearchEngine(FixedQueryEmbedding([1.0, 0.0]), store)

        results = engine.search("q", min_score=0.0)

        assert [r.record_id for r in results] == ["first", "second"]

    def test_empty_index(self):
        engine = SearchEngine(FakeEmbedding(dimensions=4), InMemoryEmbeddingStore())

        assert engine.search("coffee") == []

    def test_dimension_mismatch(self, embeddings):
        engine = SearchEngine(FixedQueryEmbedding([1.0, 0.0, 0.0]), embeddings)

        with pytest.raises(DimensionMismatchError):
            engine.search("q")

    def test_records_trace(self, embeddings):
        engine = SearchEngine(FixedQueryEmbedding([1.0, 0.0]), embeddings)
        trace = TraceContext("search")

        engine.search("q", top_k=5, min_score=0.3, trace=trace)

        stage = trace.get_stage("vector_search")
        assert stage["candidates"] == 4
        assert stage["returned"] == 2


class TestLexicalSearch:
    """Tests for the substring fallback."""

    @pytest.fixture
    def engine(self, make_record) -> SearchEngine:
        records = InMemoryRecordStore()
        records.bulk_insert([
            make_record("Blue Bottle Coffee", id="a", notes="pour over"),
            make_record("Tartine Bakery", id="b", address="600 Guerrero St"),
            make_record("Dolores Park", id="c", notes="Coffee nearby"),
        ])
        return SearchEngine(FakeEmbedding(dimensions=4), InMemoryEmbeddingStore(), records)

    def test_matches_name_notes_and_address(self, engine):
        assert [r.record_id for r in engine.lexical_search("coffee")] == ["a", "c"]
        assert [r.record_id for r in engine.lexical_search("GUERRERO")] == ["b"]

    def test_placeholder_score_and_ranks(self, engine):
        results = engine.lexical_search("  Coffee ")

        assert [r.rank for r in results] == [1, 2]
        assert all(r.score == LEXICAL_PLACEHOLDER_SCORE for r in results)

    def test_limit(self, engine):
        assert len(engine.lexical_search("coffee", limit=1)) == 1

    def test_empty_query(self, engine):
        assert engine.lexical_search("   ") == []

    def test_list_name_not_searched(self, make_record):
        records = InMemoryRecordStore()
        records.bulk_insert([make_record("Cafe", list_name="Tokyo")])
        engine = SearchEngine(FakeEmbedding(dimensions=4), InMemoryEmbeddingStore(), records)

        assert engine.lexical_search("tokyo") == []

    def test_without_record_store(self):
        engine = SearchEngine(FakeEmbedding(dimensions=4), InMemoryEmbeddingStore())

        assert engine.lexical_search("coffee") == []


class TestIndexHelpers:
    """Tests for stats, readiness, record lookup and clearing."""

    def test_stats_from_first_embedding(self, embeddings, make_record):
        records = InMemoryRecordStore()
        records.bulk_insert([make_record("A"), make_record("B")])
        engine = SearchEngine(FakeEmbedding(dimensions=2), embeddings, records)

        stats = engine.get_stats()

        assert stats.total_records == 2
        assert stats.total_embeddings == 4
        assert stats.provider_name == "fake"
        assert stats.dimensions == 2
        assert stats.last_updated is not None

    def test_stats_when_empty(self):
        stats = SearchEngine(FakeEmbedding(dimensions=2), InMemoryEmbeddingStore()).get_stats()

        assert stats.provider_name == "none"
        assert stats.dimensions == 0
        assert stats.last_updated is None

    def test_is_index_ready(self, embeddings):
        assert SearchEngine(FakeEmbedding(), embeddings).is_index_ready()
        assert not SearchEngine(FakeEmbedding(), InMemoryEmbeddingStore()).is_index_ready()

    def test_get_records_in_result_order(self, make_record):
        records = InMemoryRecordStore()
        records.bulk_insert([make_record("A", id="a"), make_record("B", id="b")])
        store = InMemoryEmbeddingStore()
        store.bulk_insert([_indexed("a", [0.0, 1.0]), _indexed("b", [1.0, 0.0]), _indexed("gone", [1.0, 0.1])])
        engine = SearchEngine(FixedQueryEmbedding([1.0, 0.0]), store, records)

        found = engine.get_records(engine.search("q", min_score=-2.0))

        assert [r.id for r in found] == ["b", "a"]

    def test_clear_index(self, embeddings):
        config = InMemoryConfigStore()
        config.update_config(total_embeddings=4, model_loaded=True)
        engine = SearchEngine(FakeEmbedding(), embeddings, config_store=config)

        engine.clear_index()

        assert embeddings.count() == 0
        assert config.get_config().model_loaded is False
