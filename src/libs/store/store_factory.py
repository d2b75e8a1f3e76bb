"""Store Factory for creating store instances based on configuration.

Records and the configuration record always live in memory; the
embedding collection backend is selected by settings.store.provider.

Usage:
    settings = load_settings()
    stores = StoreFactory.create(settings)
    stores.embeddings.count()
"""

from dataclasses import dataclass
from typing import Callable

from core.settings import Settings
from core.types import CanonicalRecord, IndexedEmbedding
from libs.store.base_store import (
    BaseConfigStore,
    BaseStore,
    StoreConfigurationError,
    UnknownStoreProviderError,
)
from libs.store.chroma_store import ChromaEmbeddingStore
from libs.store.memory_store import (
    InMemoryConfigStore,
    InMemoryEmbeddingStore,
    InMemoryRecordStore,
)
from observability.logger import get_logger

logger = get_logger(__name__)

EmbeddingStoreBuilder = Callable[[Settings], BaseStore[IndexedEmbedding]]


@dataclass
class StoreBundle:
    """The three stores one pipeline run works against."""
    records: BaseStore[CanonicalRecord]
    embeddings: BaseStore[IndexedEmbedding]
    config: BaseConfigStore


def _build_memory(settings: Settings) -> BaseStore[IndexedEmbedding]:
    return InMemoryEmbeddingStore()


def _build_chroma(settings: Settings) -> BaseStore[IndexedEmbedding]:
    return ChromaEmbeddingStore(
        persist_directory=settings.store.persist_directory,
        collection_name=settings.store.collection_name,
    )


class StoreFactory:
    """Factory for store bundles, with a runtime registry of embedding backends."""

    _providers: dict[str, EmbeddingStoreBuilder] = {
        "memory": _build_memory,
        "chroma": _build_chroma,
    }

    @classmethod
    def register(cls, provider_name: str, builder: EmbeddingStoreBuilder) -> None:
        cls._providers[provider_name.lower()] = builder
        logger.debug(f"Registered store provider: {provider_name}")

    @classmethod
    def get_provider_names(cls) -> list[str]:
        return list(cls._providers.keys())

    @classmethod
    def create_embedding_store(cls, settings: Settings) -> BaseStore[IndexedEmbedding]:
        """Create the embedding store named by settings.store.provider.

        Raises:
            StoreConfigurationError: If no provider is configured.
            UnknownStoreProviderError: If the provider is not registered.
        """
        provider = (settings.store.provider or "").lower()
        if not provider:
            raise StoreConfigurationError(
                "Store provider is not configured. Set 'store.provider' in settings.yaml"
            )
        if provider not in cls._providers:
            available = ", ".join(sorted(cls._providers.keys()))
            raise UnknownStoreProviderError(
                f"Unknown store provider: '{provider}'. Available providers: {available}",
                provider=provider
            )

        logger.info(f"Creating embedding store: provider={provider}")
        return cls._providers[provider](settings)

    @classmethod
    def create(cls, settings: Settings) -> StoreBundle:
        return StoreBundle(
            records=InMemoryRecordStore(),
            embeddings=cls.create_embedding_store(settings),
            config=InMemoryConfigStore(),
        )
