"""Importer - Parses an export and persists the surviving records.

The importer is the only writer to the record store. A failed parse
writes nothing; a partial success stores the records that survived and
returns the per-unit problems alongside them.
"""

from datetime import datetime, timezone
from pathlib import Path

from core.types import CanonicalRecord, IndexedEmbedding, ParseOutcome
from libs.parser.parser_dispatcher import ParserDispatcher
from libs.store.base_store import BaseConfigStore, BaseStore
from observability.logger import get_logger

logger = get_logger(__name__)


class ImportFileError(Exception):
    """Raised when an export file cannot be read or decoded."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class Importer:
    """Imports exported saved places into the record store.

    Attributes:
        dispatcher: Parser dispatcher used for format detection
        record_store: Destination for parsed records
        config_store: Config record updated after each import
    """

    def __init__(
        self,
        dispatcher: ParserDispatcher,
        record_store: BaseStore[CanonicalRecord],
        config_store: BaseConfigStore,
        embedding_store: BaseStore[IndexedEmbedding] | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._record_store = record_store
        self._config_store = config_store
        self._embedding_store = embedding_store

    def import_content(self, content: str, source_name: str = "unknown") -> ParseOutcome:
        """Parse export content and store the records it yields.

        Returns:
            The ParseOutcome; records are stored only if it succeeded.
        """
        outcome = self._dispatcher.parse(content, source_name)
        if not outcome.succeeded:
            logger.warning(
                f"Import of {source_name} produced no records: "
                f"problems={len(outcome.problems)}"
            )
            return outcome

        self._record_store.bulk_insert(list(outcome.records))
        self._config_store.update_config(
            total_records=self._record_store.count(),
            last_import_at=datetime.now(timezone.utc),
        )

        logger.info(
            f"Imported {source_name}: records={len(outcome.records)}, "
            f"skipped={outcome.stats.failure_count}"
        )
        return outcome

    def import_file(self, path: str | Path) -> ParseOutcome:
        """Read an export file (UTF-8, BOM tolerated) and import it.

        Raises:
            ImportFileError: If the file is missing, unreadable or not UTF-8.
        """
        file_path = Path(path)
        try:
            content = file_path.read_text(encoding="utf-8-sig")
        except FileNotFoundError as e:
            raise ImportFileError(f"Export file not found: {file_path}", path=str(file_path)) from e
        except UnicodeDecodeError as e:
            raise ImportFileError(
                f"Export file is not valid UTF-8: {file_path}", path=str(file_path)
            ) from e
        except OSError as e:
            raise ImportFileError(f"Failed to read export file {file_path}: {e}", path=str(file_path)) from e

        return self.import_content(content, source_name=file_path.name)

    def clear_all(self) -> None:
        """Remove imported records (and the index, when known) and reset counters."""
        self._record_store.clear()
        changes = {"total_records": 0, "last_import_at": None}
        if self._embedding_store is not None:
            self._embedding_store.clear()
            changes.update(total_embeddings=0, model_loaded=False)
        self._config_store.update_config(**changes)
        logger.info("Cleared all imported data")
