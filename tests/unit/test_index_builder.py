"""Unit tests for IndexBuilder and embedding text construction."""

import pytest

from core.trace.trace_context import TraceContext
from core.types import IndexPhase
from libs.embedding.base_embedding import EmbeddingCancelledError, EmbeddingError
from libs.embedding.fake_embedding import FakeEmbedding
from ingestion.index_builder import IndexBuilder, build_embedding_text
from libs.store.memory_store import InMemoryConfigStore, InMemoryEmbeddingStore


class FailingEmbedding(FakeEmbedding):
    """Fake provider whose second batch fails."""

    def __init__(self) -> None:
        super().__init__(dimensions=4)
        self.calls = 0

    @property
    def batch_size(self) -> int:
        return 1

    def _embed_texts(self, texts):
        self.calls += 1
        if self.calls == 2:
            raise EmbeddingError("OpenAI API error: Rate limit reached", provider="fake", code=429)
        return super()._embed_texts(texts)


@pytest.fixture
def store() -> InMemoryEmbeddingStore:
    return InMemoryEmbeddingStore()


class TestBuildEmbeddingText:
    """Tests for the text each record is embedded from."""

    def test_all_fields(self, make_record):
        record = make_record(
            "Blue Bottle Coffee",
            notes="great pour over",
            list_name="Coffee",
            address="66 Mint St",
        )

        assert build_embedding_text(record) == (
            "great pour over | Blue Bottle Coffee | List: Coffee | 66 Mint St"
        )

    def test_name_only(self, make_record):
        assert build_embedding_text(make_record("Tartine")) == "Tartine"

    def test_skips_missing_fields(self, make_record):
        record = make_record("Dolores Park", address="Dolores St")

        assert build_embedding_text(record) == "Dolores Park | Dolores St"


class TestBuildIndex:
    """Tests for build_index."""

    def test_stores_one_unit_embedding_per_record(self, make_record, store):
        records = [make_record("A"), make_record("B"), make_record("C")]
        builder = IndexBuilder(FakeEmbedding(dimensions=16), store)

        count = builder.build_index(records)

        assert count == 3
        assert store.count() == 3
        stored = store.bulk_get([r.id for r in records])
        for record, embedding in zip(records, stored):
            assert embedding.record_id == record.id
            assert embedding.provider_name == "fake"
            assert embedding.embedding_text == record.name
            assert embedding.vector.norm == pytest.approx(1.0, abs=1e-5)

    def test_progress_phases(self, make_record, store):
        records = [make_record(str(i)) for i in range(3)]
        builder = IndexBuilder(FakeEmbedding(dimensions=8), store)
        events = []

        builder.build_index(records, on_progress=events.append)

        assert [e.message for e in events] == [
            "Preparing texts...",
            "Generating embeddings...",
            "Embedding 3/3...",
            "Storing embeddings...",
            "Index built successfully!",
        ]
        assert [e.phase for e in events] == [
            IndexPhase.PREPARING,
            IndexPhase.EMBEDDING,
            IndexPhase.EMBEDDING,
            IndexPhase.STORING,
            IndexPhase.COMPLETE,
        ]
        assert events[-1].current == events[-1].total == 3

    def test_rebuild_replaces_previous_index(self, make_record, store):
        builder = IndexBuilder(FakeEmbedding(dimensions=8), store)
        builder.build_index([make_record("Old", id="old")])

        builder.build_index([make_record("New", id="new")])

        assert store.count() == 1
        assert store.bulk_get(["old"]) == [None]

    def test_provider_failure_keeps_previous_index(self, make_record, store):
        IndexBuilder(FakeEmbedding(dimensions=4), store).build_index([make_record("Kept", id="kept")])
        builder = IndexBuilder(FailingEmbedding(), store)
        events = []

        with pytest.raises(EmbeddingError, match="Rate limit"):
            builder.build_index([make_record("X"), make_record("Y")], on_progress=events.append)

        assert store.count() == 1
        assert store.bulk_get(["kept"])[0] is not None
        assert IndexPhase.STORING not in [e.phase for e in events]

    def test_cancellation_keeps_previous_index(self, make_record, store):
        IndexBuilder(FakeEmbedding(dimensions=4), store).build_index([make_record("Kept", id="kept")])
        builder = IndexBuilder(FakeEmbedding(dimensions=4), store)

        with pytest.raises(EmbeddingCancelledError):
            builder.build_index([make_record("X")], should_cancel=lambda: True)

        assert store.bulk_get(["kept"])[0] is not None

    def test_empty_records(self, store):
        events = []

        count = IndexBuilder(FakeEmbedding(dimensions=4), store).build_index([], on_progress=events.append)

        assert count == 0
        assert store.count() == 0
        assert events[-1].phase is IndexPhase.COMPLETE

    def test_updates_config(self, make_record, store):
        config = InMemoryConfigStore()
        builder = IndexBuilder(FakeEmbedding(dimensions=4), store, config)

        builder.build_index([make_record("A"), make_record("B")])

        current = config.get_config()
        assert current.total_embeddings == 2
        assert current.model_loaded is True
        assert current.model_version == "fake"

    def test_records_trace_stages(self, make_record, store):
        trace = TraceContext("build_index")

        IndexBuilder(FakeEmbedding(dimensions=4), store).build_index([make_record("A")], trace=trace)

        assert trace.stage_names() == ["embedding", "storing"]
        assert trace.get_stage("embedding")["dimensions"] == 4
        assert trace.get_stage("storing")["embedding_count"] == 1


class TestClearIndex:
    """Tests for clear_index."""

    def test_clears_store_and_config(self, make_record, store):
        config = InMemoryConfigStore()
        builder = IndexBuilder(FakeEmbedding(dimensions=4), store, config)
        builder.build_index([make_record("A")])

        builder.clear_index()

        assert store.count() == 0
        assert config.get_config().model_loaded is False
        assert config.get_config().total_embeddings == 0
