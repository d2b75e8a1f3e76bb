"""Index Builder - Turns canonical records into a stored vector index.

Builds run in four ordered phases (preparing, embedding, storing,
complete), each announced with an IndexProgress event. The embedding
collection is only touched in the storing phase, so a provider failure
or cancellation leaves the previous index intact.

Example:
    >>> builder = IndexBuilder(FakeEmbedding(), InMemoryEmbeddingStore())
    >>> builder.build_index(records, on_progress=lambda p: print(p.message))
    Preparing texts...
    Generating embeddings...
    Embedding 3/3...
    Storing embeddings...
    Index built successfully!
    3
"""

from typing import Callable

from core.trace.trace_context import TraceContext
from core.types import CanonicalRecord, IndexedEmbedding, IndexPhase, IndexProgress
from libs.embedding.base_embedding import BaseEmbedding, CancelCheck
from libs.embedding.vector_utils import normalize_vector
from libs.store.base_store import BaseConfigStore, BaseStore
from observability.logger import get_logger

logger = get_logger(__name__)

EMBEDDING_TEXT_SEPARATOR = " | "

IndexProgressCallback = Callable[[IndexProgress], None]


def build_embedding_text(record: CanonicalRecord) -> str:
    """Concatenate the record's present fields, most distinctive first.

    Order is notes, name, list name (prefixed with "List: "), address.
    Missing fields are omitted.
    """
    parts: list[str] = []
    if record.notes:
        parts.append(record.notes)
    parts.append(record.name)
    if record.list_name:
        parts.append(f"List: {record.list_name}")
    if record.address:
        parts.append(record.address)
    return EMBEDDING_TEXT_SEPARATOR.join(parts)


class IndexBuilder:
    """Builds and replaces the embedding collection.

    Attributes:
        provider: Embedding provider used for every record
        embedding_store: Destination collection, cleared on every build
        config_store: Optional config record updated after a build
    """

    def __init__(
        self,
        provider: BaseEmbedding,
        embedding_store: BaseStore[IndexedEmbedding],
        config_store: BaseConfigStore | None = None,
    ) -> None:
        self._provider = provider
        self._embedding_store = embedding_store
        self._config_store = config_store

    @property
    def provider(self) -> BaseEmbedding:
        return self._provider

    def build_index(
        self,
        records: list[CanonicalRecord],
        on_progress: IndexProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
        trace: TraceContext | None = None,
    ) -> int:
        """Embed every record and replace the stored index.

        Args:
            records: Records to index.
            on_progress: Receives one IndexProgress per phase transition plus
                the provider's per-batch progress during embedding.
            should_cancel: Checked between provider batches.
            trace: Optional trace context for observability.

        Returns:
            Number of stored embeddings.

        Raises:
            EmbeddingError: If the provider fails (index left untouched).
            EmbeddingCancelledError: If the build was cancelled.
        """
        total = len(records)

        def emit(current: int, phase: IndexPhase, message: str) -> None:
            if on_progress is not None:
                on_progress(IndexProgress(current=current, total=total, phase=phase, message=message))

        logger.info(
            f"Building index: record_count={total}, provider={self._provider.provider_name}"
        )

        emit(0, IndexPhase.PREPARING, "Preparing texts...")
        texts = [build_embedding_text(record) for record in records]

        emit(0, IndexPhase.EMBEDDING, "Generating embeddings...")

        def on_embedding_progress(current: int, batch_total: int) -> None:
            logger.debug(f"Embedding progress: {current}/{batch_total}")
            if on_progress is not None:
                on_progress(
                    IndexProgress(
                        current=current,
                        total=batch_total,
                        phase=IndexPhase.EMBEDDING,
                        message=f"Embedding {current}/{batch_total}...",
                    )
                )

        vectors = self._provider.embed_batch(
            texts,
            on_progress=on_embedding_progress,
            should_cancel=should_cancel,
        )

        if trace:
            trace.record_stage(
                "embedding",
                {
                    "provider": self._provider.provider_name,
                    "text_count": len(texts),
                    "dimensions": vectors[0].dimensions if vectors else 0,
                },
            )

        emit(0, IndexPhase.STORING, "Storing embeddings...")
        provider_name = self._provider.provider_name
        embeddings = [
            IndexedEmbedding(
                record_id=record.id,
                vector=normalize_vector(vector),
                embedding_text=text,
                provider_name=provider_name,
            )
            for record, vector, text in zip(records, vectors, texts)
        ]

        self._embedding_store.clear()
        self._embedding_store.bulk_insert(embeddings)

        if self._config_store is not None:
            self._config_store.update_config(
                total_embeddings=len(embeddings),
                model_loaded=True,
                model_version=provider_name,
            )

        if trace:
            trace.record_stage(
                "storing",
                {"embedding_count": len(embeddings), "store": self._embedding_store.provider_name},
            )

        emit(total, IndexPhase.COMPLETE, "Index built successfully!")
        logger.info(f"Index built: embedding_count={len(embeddings)}")
        return len(embeddings)

    def clear_index(self) -> None:
        """Remove all stored embeddings and mark the model as unloaded."""
        self._embedding_store.clear()
        if self._config_store is not None:
            self._config_store.update_config(total_embeddings=0, model_loaded=False)
        logger.info("Index cleared")

    def __repr__(self) -> str:
        return (
            f"IndexBuilder(provider={self._provider.provider_name}, "
            f"store={self._embedding_store.provider_name})"
        )
