# Store - Record, embedding and config storage

from libs.store.base_store import (
    BaseStore,
    BaseConfigStore,
    StoreError,
    StoreConfigurationError,
    UnknownStoreProviderError,
)
from libs.store.memory_store import (
    InMemoryStore,
    InMemoryRecordStore,
    InMemoryEmbeddingStore,
    InMemoryConfigStore,
)
from libs.store.chroma_store import ChromaEmbeddingStore
from libs.store.store_factory import StoreBundle, StoreFactory

__all__ = [
    # Base
    "BaseStore",
    "BaseConfigStore",
    "StoreError",
    "StoreConfigurationError",
    "UnknownStoreProviderError",
    # Implementations
    "InMemoryStore",
    "InMemoryRecordStore",
    "InMemoryEmbeddingStore",
    "InMemoryConfigStore",
    "ChromaEmbeddingStore",
    # Factory
    "StoreBundle",
    "StoreFactory",
]
