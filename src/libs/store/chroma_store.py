"""ChromaDB embedding store.

Persists IndexedEmbeddings in a local ChromaDB collection keyed by record
id. The embedding text goes into the document slot; provider name and
creation time go into metadata. Similarity ranking stays in the search
engine, so this backend is only used for durable storage.

Design Principles:
    - ChromaDB-backed: Uses ChromaDB for local persistence
    - Lazy dependency: chromadb is only imported when this store is built
"""

from datetime import datetime
from typing import Any

from core.types import EmbeddingVector, IndexedEmbedding
from libs.store.base_store import BaseStore, StoreConfigurationError, StoreError
from observability.logger import get_logger

logger = get_logger(__name__)

_INCLUDE = ["embeddings", "documents", "metadatas"]


class ChromaEmbeddingStore(BaseStore[IndexedEmbedding]):
    """ChromaDB-backed store of indexed embeddings.

    Attributes:
        persist_directory: Directory for local persistence
        collection_name: Name of the ChromaDB collection
    """

    DEFAULT_COLLECTION_NAME = "saved_places"
    DEFAULT_PERSIST_DIR = "data/db/chroma"

    def __init__(
        self,
        persist_directory: str | None = None,
        collection_name: str | None = None,
        client: Any = None,
    ) -> None:
        """Initialize the ChromaEmbeddingStore.

        Args:
            persist_directory: Directory for local persistence.
            collection_name: Name of the ChromaDB collection.
            client: Pre-built chromadb client (e.g. an EphemeralClient).

        Raises:
            StoreConfigurationError: If chromadb is not installed.
        """
        self._persist_directory = persist_directory or self.DEFAULT_PERSIST_DIR
        self._collection_name = collection_name or self.DEFAULT_COLLECTION_NAME

        if client is None:
            try:
                import chromadb
            except ImportError as e:
                raise StoreConfigurationError(
                    "chromadb is not installed. "
                    "Install it with: pip install chromadb",
                    provider="chroma"
                ) from e
            client = chromadb.PersistentClient(path=self._persist_directory)

        self._client = client
        self._collection = self._open_collection()

    def _open_collection(self) -> Any:
        return self._client.get_or_create_collection(
            name=self._collection_name,
            metadata={"hnsw:space": "cosine"},
        )

    @property
    def provider_name(self) -> str:
        return "chroma"

    def key_of(self, item: IndexedEmbedding) -> str:
        return item.record_id

    def bulk_insert(self, items: list[IndexedEmbedding]) -> list[str]:
        """Upsert embeddings into the collection."""
        if not items:
            return []

        logger.info(
            f"ChromaEmbeddingStore upsert: record_count={len(items)}, "
            f"collection={self._collection_name}"
        )

        ids = [item.record_id for item in items]
        try:
            self._collection.upsert(
                ids=ids,
                embeddings=[item.vector.to_list() for item in items],
                documents=[item.embedding_text for item in items],
                metadatas=[
                    {
                        "provider_name": item.provider_name,
                        "created_at": item.created_at.isoformat(),
                    }
                    for item in items
                ],
            )
        except Exception as e:
            raise StoreError(
                f"Failed to upsert embeddings: {e}",
                provider=self.provider_name,
                details={"record_count": len(items)}
            ) from e

        return ids

    def _to_embeddings(self, results: dict[str, Any]) -> list[IndexedEmbedding]:
        ids = results.get("ids") or []
        embeddings = results.get("embeddings")
        if embeddings is None:
            embeddings = []
        documents = results.get("documents") or [""] * len(ids)
        metadatas = results.get("metadatas") or [{}] * len(ids)

        items = []
        for record_id, values, document, metadata in zip(ids, embeddings, documents, metadatas):
            metadata = metadata or {}
            created_at = metadata.get("created_at")
            kwargs: dict[str, Any] = {}
            if created_at:
                kwargs["created_at"] = datetime.fromisoformat(created_at)
            items.append(
                IndexedEmbedding(
                    record_id=record_id,
                    vector=EmbeddingVector.from_values(values),
                    embedding_text=document or "",
                    provider_name=metadata.get("provider_name", ""),
                    **kwargs,
                )
            )
        return items

    def bulk_get(self, ids: list[str]) -> list[IndexedEmbedding | None]:
        if not ids:
            return []
        try:
            results = self._collection.get(ids=list(ids), include=_INCLUDE)
        except Exception as e:
            raise StoreError(
                f"Failed to fetch embeddings: {e}",
                provider=self.provider_name,
                details={"id_count": len(ids)}
            ) from e

        by_id = {item.record_id: item for item in self._to_embeddings(results)}
        return [by_id.get(record_id) for record_id in ids]

    def count(self) -> int:
        try:
            return self._collection.count()
        except Exception as e:
            raise StoreError(
                f"Failed to count embeddings: {e}",
                provider=self.provider_name
            ) from e

    def clear(self) -> None:
        """Drop and recreate the collection."""
        logger.info(f"ChromaEmbeddingStore clear: collection={self._collection_name}")
        try:
            self._client.delete_collection(name=self._collection_name)
            self._collection = self._open_collection()
        except Exception as e:
            raise StoreError(
                f"Failed to clear collection: {e}",
                provider=self.provider_name
            ) from e

    def all(self) -> list[IndexedEmbedding]:
        try:
            results = self._collection.get(include=_INCLUDE)
        except Exception as e:
            raise StoreError(
                f"Failed to read embeddings: {e}",
                provider=self.provider_name
            ) from e
        return self._to_embeddings(results)

    def __repr__(self) -> str:
        return (
            f"ChromaEmbeddingStore("
            f"collection={self._collection_name}, "
            f"persist_dir={self._persist_directory})"
        )
