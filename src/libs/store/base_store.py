"""Abstract base classes for record, embedding and configuration stores.

Stores are opaque key-indexed collections. The index builder and the
search engine depend only on this contract, so the in-memory and Chroma
backends are interchangeable.

Design Principles:
    - Pluggable: All backends implement this interface
    - Ordered: bulk_get returns one slot per requested id, None when absent
    - Last write wins: inserting an existing key replaces the item
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from core.types import StoreConfig

T = TypeVar("T")


class BaseStore(ABC, Generic[T]):
    """Abstract base class for key-indexed item stores.

    Example:
        >>> class DictStore(BaseStore[CanonicalRecord]):
        ...     def key_of(self, item):
        ...         return item.id
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the backend identifier (e.g., 'memory', 'chroma')."""
        ...

    @abstractmethod
    def key_of(self, item: T) -> str:
        """Return the key an item is stored under."""
        ...

    @abstractmethod
    def bulk_insert(self, items: list[T]) -> list[str]:
        """Insert items, replacing any with the same key.

        Returns:
            Keys of the inserted items, in input order.

        Raises:
            StoreError: If the backend write fails.
        """
        ...

    @abstractmethod
    def bulk_get(self, ids: list[str]) -> list[T | None]:
        """Fetch items by key.

        Returns:
            One entry per id, None where the key is unknown.
        """
        ...

    @abstractmethod
    def count(self) -> int:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    @abstractmethod
    def all(self) -> list[T]:
        """Return every stored item, in insertion order where the backend keeps one."""
        ...


class BaseConfigStore(ABC):
    """Holder of the singleton StoreConfig record."""

    @abstractmethod
    def get_config(self) -> StoreConfig:
        ...

    @abstractmethod
    def update_config(self, **changes: Any) -> StoreConfig:
        """Apply field changes and return the updated record.

        Raises:
            StoreError: If a change names an unknown field.
        """
        ...


class StoreError(Exception):
    """Base exception for store-related errors."""

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


class UnknownStoreProviderError(StoreError):
    """Raised when an unknown store provider is specified."""

    pass


class StoreConfigurationError(StoreError):
    """Raised when store configuration is invalid or a backend is unavailable."""

    pass
