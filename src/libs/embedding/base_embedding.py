"""Abstract base class for Embedding providers.

This module defines the BaseEmbedding interface that all embedding
implementations must follow. The index builder and the search engine
receive a provider instance and never construct one themselves.

Design Principles:
    - Pluggable: All providers implement this interface
    - Ordered: embed_batch returns vectors in input order
    - Cooperative: cancellation is checked between batches only
"""

from abc import ABC, abstractmethod
from typing import Any, Callable

from core.types import EmbeddingVector

ProgressCallback = Callable[[int, int], None]
CancelCheck = Callable[[], bool]


class BaseEmbedding(ABC):
    """Abstract base class for embedding providers.

    Example:
        >>> class MyEmbedding(BaseEmbedding):
        ...     def _embed_texts(self, texts):
        ...         # call the backend once for this batch
        ...         pass
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider.

        Returns:
            Provider identifier (e.g., 'openai', 'fake')
        """
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Return the dimensionality of produced vectors."""
        ...

    @property
    def batch_size(self) -> int:
        """Number of texts sent to the backend per call."""
        return 1

    @abstractmethod
    def _embed_texts(self, texts: list[str]) -> list[EmbeddingVector]:
        """Embed one batch with a single backend call.

        Raises:
            EmbeddingError: If the backend fails.
        """
        ...

    def _between_batches(self) -> None:
        """Hook run after every batch except the last."""
        return None

    def embed(self, text: str) -> EmbeddingVector:
        """Generate the embedding for a single text.

        Raises:
            EmbeddingError: If embedding fails.
        """
        vectors = self._embed_texts([text])
        if not vectors or vectors[0].dimensions == 0:
            raise EmbeddingError(
                "Provider returned an empty embedding",
                provider=self.provider_name,
            )
        return vectors[0]

    def embed_batch(
        self,
        texts: list[str],
        on_progress: ProgressCallback | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> list[EmbeddingVector]:
        """Generate embeddings for many texts, batch by batch.

        Args:
            texts: Texts to embed.
            on_progress: Called as on_progress(completed, total) after each batch.
            should_cancel: Checked before each batch; True aborts.

        Returns:
            One vector per text, in input order.

        Raises:
            EmbeddingError: If any batch fails.
            EmbeddingCancelledError: If should_cancel() returned True.
        """
        total = len(texts)
        vectors: list[EmbeddingVector] = []
        if total == 0:
            return vectors

        step = max(1, self.batch_size)
        starts = range(0, total, step)
        for batch_number, start in enumerate(starts):
            if should_cancel is not None and should_cancel():
                raise EmbeddingCancelledError(
                    f"Embedding cancelled after {len(vectors)}/{total} texts",
                    provider=self.provider_name,
                    details={"completed": len(vectors), "total": total},
                )

            batch = texts[start : start + step]
            batch_vectors = self._embed_texts(batch)
            if len(batch_vectors) != len(batch):
                raise EmbeddingError(
                    f"Provider returned {len(batch_vectors)} vectors for {len(batch)} texts",
                    provider=self.provider_name,
                )
            vectors.extend(batch_vectors)

            if on_progress is not None:
                on_progress(len(vectors), total)

            if batch_number < len(starts) - 1:
                self._between_batches()

        return vectors

    @abstractmethod
    def is_ready(self) -> bool:
        """Liveness probe. Must report failures as False, never raise."""
        ...


class EmbeddingError(Exception):
    """Base exception for embedding-related errors."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        code: int | None = None,
        details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.code = code
        self.details = details or {}


class UnknownEmbeddingProviderError(EmbeddingError):
    """Raised when an unknown embedding provider is specified."""

    pass


class EmbeddingConfigurationError(EmbeddingError):
    """Raised when embedding configuration is invalid."""

    pass


class EmbeddingCancelledError(EmbeddingError):
    """Raised when a caller cancels embed_batch between batches."""

    pass
