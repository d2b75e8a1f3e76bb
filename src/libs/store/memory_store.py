"""In-memory store backends.

Dict-backed; items live for the life of the process. Python dicts keep
insertion order, so all() returns items in the order they were first
inserted.
"""

from dataclasses import fields, replace
from typing import Any, Callable, TypeVar

from core.types import CanonicalRecord, IndexedEmbedding, StoreConfig
from libs.store.base_store import BaseConfigStore, BaseStore, StoreError
from observability.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class InMemoryStore(BaseStore[T]):
    """Generic dict-backed store keyed by a key function."""

    def __init__(self, key_fn: Callable[[T], str], name: str = "items") -> None:
        self._key_fn = key_fn
        self._name = name
        self._items: dict[str, T] = {}

    @property
    def provider_name(self) -> str:
        return "memory"

    def key_of(self, item: T) -> str:
        return self._key_fn(item)

    def bulk_insert(self, items: list[T]) -> list[str]:
        keys = []
        for item in items:
            key = self.key_of(item)
            self._items[key] = item
            keys.append(key)
        logger.debug(f"InMemoryStore[{self._name}] insert: count={len(keys)}")
        return keys

    def bulk_get(self, ids: list[str]) -> list[T | None]:
        return [self._items.get(item_id) for item_id in ids]

    def count(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()
        logger.debug(f"InMemoryStore[{self._name}] cleared")

    def all(self) -> list[T]:
        return list(self._items.values())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name}, count={len(self._items)})"


class InMemoryRecordStore(InMemoryStore[CanonicalRecord]):
    """Canonical records keyed by record id."""

    def __init__(self) -> None:
        super().__init__(key_fn=lambda record: record.id, name="records")


class InMemoryEmbeddingStore(InMemoryStore[IndexedEmbedding]):
    """Indexed embeddings keyed by the id of the record they represent."""

    def __init__(self) -> None:
        super().__init__(key_fn=lambda embedding: embedding.record_id, name="embeddings")


class InMemoryConfigStore(BaseConfigStore):
    """Keeps the singleton StoreConfig in memory."""

    _FIELD_NAMES = frozenset(f.name for f in fields(StoreConfig))

    def __init__(self, initial: StoreConfig | None = None) -> None:
        self._config = initial or StoreConfig()

    def get_config(self) -> StoreConfig:
        return replace(self._config)

    def update_config(self, **changes: Any) -> StoreConfig:
        unknown = sorted(set(changes) - self._FIELD_NAMES)
        if unknown:
            raise StoreError(
                f"Unknown config fields: {', '.join(unknown)}",
                provider="memory",
                details={"unknown_fields": unknown},
            )
        self._config = replace(self._config, **changes)
        return self.get_config()
