"""Embedding Factory for creating Embedding instances based on configuration.

Design Principles:
    - Factory Pattern: Creates the right implementation based on config
    - Configuration-Driven: Provider selection via settings.embedding.provider
    - Extensible: Extra providers can be registered at runtime

Usage:
    settings = load_settings()
    embedding = EmbeddingFactory.create(settings)

    # Swap in another implementation
    EmbeddingFactory.register("mine", MyEmbedding)
"""

from typing import Any

from core.settings import Settings
from libs.embedding.base_embedding import (
    BaseEmbedding,
    EmbeddingConfigurationError,
    UnknownEmbeddingProviderError,
)
from libs.embedding.fake_embedding import FakeEmbedding
from libs.embedding.openai_embedding import OpenAIEmbedding
from observability.logger import get_logger

logger = get_logger(__name__)


class EmbeddingFactory:
    """Factory for creating Embedding instances based on configuration.

    'fake' and 'openai' are registered on import.
    """

    _providers: dict[str, type[BaseEmbedding]] = {}

    @classmethod
    def register(
        cls,
        provider_name: str,
        implementation_class: type[BaseEmbedding]
    ) -> None:
        """Register an embedding provider.

        Args:
            provider_name: Provider identifier (e.g., 'openai', 'fake')
            implementation_class: Class that implements BaseEmbedding
        """
        cls._providers[provider_name.lower()] = implementation_class
        logger.debug(f"Registered embedding provider: {provider_name}")

    @classmethod
    def unregister(cls, provider_name: str) -> bool:
        """Unregister an embedding provider.

        Returns:
            True if removed, False if not found
        """
        provider = provider_name.lower()
        if provider in cls._providers:
            del cls._providers[provider]
            logger.debug(f"Unregistered embedding provider: {provider_name}")
            return True
        return False

    @classmethod
    def get_provider_names(cls) -> list[str]:
        return list(cls._providers.keys())

    @classmethod
    def has_provider(cls, provider_name: str) -> bool:
        return provider_name.lower() in cls._providers

    @classmethod
    def create(
        cls,
        settings: Settings,
        **kwargs: Any
    ) -> BaseEmbedding:
        """Create an Embedding instance based on configuration.

        Args:
            settings: Settings object containing embedding configuration
            **kwargs: Overrides for constructor arguments (None values ignored)

        Returns:
            BaseEmbedding implementation instance

        Raises:
            UnknownEmbeddingProviderError: If the provider is not registered
            EmbeddingConfigurationError: If configuration is invalid
        """
        embed_config = settings.embedding

        provider = (embed_config.provider or "").lower()
        if not provider:
            raise EmbeddingConfigurationError(
                "Embedding provider is not configured. "
                "Set 'embedding.provider' in settings.yaml"
            )

        if provider not in cls._providers:
            available = ", ".join(sorted(cls._providers.keys())) or "(none)"
            raise UnknownEmbeddingProviderError(
                f"Unknown embedding provider: '{provider}'. "
                f"Available providers: {available}",
                provider=provider
            )

        implementation_class = cls._providers[provider]

        if provider == "fake":
            init_kwargs: dict[str, Any] = {"dimensions": embed_config.dimensions}
        else:
            init_kwargs = {
                "api_key": embed_config.api_key,
                "base_url": embed_config.base_url,
                "model": embed_config.model,
                "dimensions": embed_config.dimensions,
                "batch_size": embed_config.batch_size,
                "inter_batch_delay": embed_config.inter_batch_delay,
                "timeout": embed_config.timeout,
            }

        for key, value in kwargs.items():
            if value is not None:
                init_kwargs[key] = value

        init_kwargs = {k: v for k, v in init_kwargs.items() if v is not None}

        logger.info(
            f"Creating embedding instance: provider={provider}, "
            f"model={embed_config.model or 'N/A'}"
        )

        return implementation_class(**init_kwargs)


def _register_default_providers() -> None:
    EmbeddingFactory.register("fake", FakeEmbedding)
    EmbeddingFactory.register("openai", OpenAIEmbedding)


_register_default_providers()
