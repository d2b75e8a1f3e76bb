"""Unit tests for Importer."""

from pathlib import Path

import pytest

from core.types import IndexedEmbedding, EmbeddingVector
from ingestion.importer import Importer, ImportFileError
from libs.parser import ParserDispatcher
from libs.store.memory_store import (
    InMemoryConfigStore,
    InMemoryEmbeddingStore,
    InMemoryRecordStore,
)


@pytest.fixture
def stores():
    return InMemoryRecordStore(), InMemoryConfigStore(), InMemoryEmbeddingStore()


@pytest.fixture
def importer(stores) -> Importer:
    records, config, embeddings = stores
    return Importer(ParserDispatcher(), records, config, embeddings)


class TestImportContent:
    """Tests for import_content."""

    def test_successful_import_persists_records(self, importer, stores, sample_exports_path: Path):
        records, config, _ = stores
        content = (sample_exports_path / "list.csv").read_text(encoding="utf-8")

        outcome = importer.import_content(content, "list.csv")

        assert outcome.succeeded
        assert records.count() == len(outcome.records) == 3
        assert config.get_config().total_records == 3
        assert config.get_config().last_import_at is not None

    def test_partial_success_keeps_survivors(self, importer, stores, sample_exports_path: Path):
        records, _, _ = stores
        content = (sample_exports_path / "saved_places.json").read_text(encoding="utf-8")

        outcome = importer.import_content(content, "saved_places.json")

        assert outcome.succeeded
        assert len(outcome.warnings) == 1
        assert records.count() == 4

    def test_failed_parse_writes_nothing(self, importer, stores):
        records, config, _ = stores

        outcome = importer.import_content("just some text", "notes.txt")

        assert not outcome.succeeded
        assert records.count() == 0
        assert config.get_config().last_import_at is None

    def test_second_import_accumulates(self, importer, stores, sample_exports_path: Path):
        records, config, _ = stores

        importer.import_file(sample_exports_path / "list.csv")
        importer.import_file(sample_exports_path / "travel_list.csv")

        assert records.count() == 5
        assert config.get_config().total_records == 5


class TestImportFile:
    """Tests for import_file."""

    def test_uses_file_name_as_source(self, importer, sample_exports_path: Path):
        outcome = importer.import_file(sample_exports_path / "not_an_export.txt")

        assert "Unsupported file format: not_an_export.txt" in outcome.problems[0].message

    def test_tolerates_bom(self, importer, stores, tmp_path: Path):
        path = tmp_path / "bom.csv"
        path.write_bytes("\ufeffTitle,Note\nCafe,nice\n".encode("utf-8"))

        outcome = importer.import_file(path)

        assert outcome.succeeded
        assert outcome.records[0].name == "Cafe"

    def test_missing_file(self, importer, tmp_path: Path):
        with pytest.raises(ImportFileError, match="not found") as exc_info:
            importer.import_file(tmp_path / "missing.csv")

        assert exc_info.value.path.endswith("missing.csv")

    def test_not_utf8(self, importer, tmp_path: Path):
        path = tmp_path / "latin1.csv"
        path.write_bytes("Title\nCaf\xe9\n".encode("latin-1"))

        with pytest.raises(ImportFileError, match="UTF-8"):
            importer.import_file(path)


class TestClearAll:
    """Tests for clear_all."""

    def test_resets_everything(self, importer, stores, sample_exports_path: Path):
        records, config, embeddings = stores
        importer.import_file(sample_exports_path / "list.csv")
        embeddings.bulk_insert([
            IndexedEmbedding(
                record_id="x",
                vector=EmbeddingVector.from_values([1.0]),
                embedding_text="x",
                provider_name="fake",
            )
        ])
        config.update_config(total_embeddings=1, model_loaded=True)

        importer.clear_all()

        assert records.count() == 0
        assert embeddings.count() == 0
        current = config.get_config()
        assert current.total_records == 0
        assert current.total_embeddings == 0
        assert current.model_loaded is False
        assert current.last_import_at is None
