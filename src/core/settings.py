"""Configuration management for the saved places search pipeline.

This module provides the Settings dataclass and loading/validation functions.
Configuration values are read from config/settings.yaml.

Design Principles:
    - Config-Driven: Provider, store and search defaults come from settings.yaml
    - Fail-Fast: Missing required fields cause immediate failure
    - Clear Errors: Error messages include field paths (e.g., 'embedding.provider')
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class EmbeddingConfig:
    """Embedding provider configuration.

    Attributes:
        provider: Embedding provider type (fake, openai) - REQUIRED
        model: Model name for remote providers
        dimensions: Vector dimensions
        api_key: API key for remote providers (falls back to OPENAI_API_KEY)
        base_url: Base URL for the embeddings endpoint
        batch_size: Texts per remote request
        inter_batch_delay: Seconds to wait between remote batches
        timeout: Request timeout in seconds
    """
    provider: str | None = None
    model: str | None = None
    dimensions: int | None = None
    api_key: str | None = None
    base_url: str | None = None
    batch_size: int = 100
    inter_batch_delay: float = 0.1
    timeout: float = 30.0


@dataclass
class SearchConfig:
    """Search configuration.

    Attributes:
        top_k: Maximum number of vector results
        min_score: Minimum cosine similarity kept
        fallback_limit: Maximum number of lexical fallback results
    """
    top_k: int = 20
    min_score: float = 0.3
    fallback_limit: int = 20


@dataclass
class StoreSettings:
    """Record and embedding store configuration.

    Attributes:
        provider: Store type (memory, chroma)
        persist_directory: Directory for persistent embedding storage
        collection_name: Embedding collection name
    """
    provider: str = "memory"
    persist_directory: str = "./data/db/chroma"
    collection_name: str = "saved_places"


@dataclass
class ObservabilityConfig:
    """Logging configuration.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to a log file
    """
    log_level: str = "INFO"
    log_file: str | None = None


@dataclass
class Settings:
    """Application settings container.

    Attributes:
        embedding: Embedding configuration
        search: Search configuration
        store: Store configuration
        observability: Logging configuration
    """
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    store: StoreSettings = field(default_factory=StoreSettings)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)


class SettingsError(Exception):
    """Base exception for settings-related errors."""

    pass


class SettingsFileError(SettingsError):
    """Raised when settings file cannot be read or parsed."""

    pass


class SettingsValidationError(SettingsError):
    """Raised when settings validation fails."""

    def __init__(self, message: str, missing_fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing_fields = missing_fields or []


_REQUIRED_FIELDS = ("embedding.provider",)


def _flatten_dict(d: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten a nested dictionary to dot-notation keys."""
    result: dict[str, Any] = {}
    for key, value in d.items():
        new_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            result.update(_flatten_dict(value, new_key))
        else:
            result[new_key] = value
    return result


def validate_settings(settings: Settings) -> None:
    """Validate required fields and value ranges.

    Args:
        settings: Settings object to validate

    Raises:
        SettingsValidationError: If required fields are missing or out of range
    """
    missing: list[str] = []
    for field_path in _REQUIRED_FIELDS:
        section, name = field_path.split(".")
        if getattr(getattr(settings, section), name, None) in (None, ""):
            missing.append(field_path)

    if missing:
        raise SettingsValidationError(
            f"Missing required configuration fields: {', '.join(missing)}",
            missing_fields=missing
        )

    if settings.embedding.batch_size < 1:
        raise SettingsValidationError(
            f"embedding.batch_size must be >= 1, got {settings.embedding.batch_size}"
        )
    if settings.search.top_k < 1:
        raise SettingsValidationError(
            f"search.top_k must be >= 1, got {settings.search.top_k}"
        )
    if not -1.0 <= settings.search.min_score <= 1.0:
        raise SettingsValidationError(
            f"search.min_score must be within [-1, 1], got {settings.search.min_score}"
        )


def _yaml_to_settings(data: dict[str, Any]) -> Settings:
    """Convert YAML dictionary to Settings object."""
    embedding = data.get("embedding") or {}
    search = data.get("search") or {}
    store = data.get("store") or {}
    observability = data.get("observability") or {}

    return Settings(
        embedding=EmbeddingConfig(
            provider=embedding.get("provider"),
            model=embedding.get("model"),
            dimensions=embedding.get("dimensions"),
            api_key=embedding.get("api_key"),
            base_url=embedding.get("base_url"),
            batch_size=embedding.get("batch_size", 100),
            inter_batch_delay=embedding.get("inter_batch_delay", 0.1),
            timeout=embedding.get("timeout", 30.0),
        ),
        search=SearchConfig(
            top_k=search.get("top_k", 20),
            min_score=search.get("min_score", 0.3),
            fallback_limit=search.get("fallback_limit", 20),
        ),
        store=StoreSettings(
            provider=store.get("provider", "memory"),
            persist_directory=store.get("persist_directory", "./data/db/chroma"),
            collection_name=store.get("collection_name", "saved_places"),
        ),
        observability=ObservabilityConfig(
            log_level=observability.get("log_level", "INFO"),
            log_file=observability.get("log_file"),
        ),
    )


def load_settings(path: str | Path = "config/settings.yaml") -> Settings:
    """Load settings from a YAML file.

    Args:
        path: Path to the settings YAML file (default: config/settings.yaml)

    Returns:
        Settings object with all configuration loaded

    Raises:
        SettingsFileError: If the file cannot be read or parsed
        SettingsValidationError: If required fields are missing

    Example:
        >>> settings = load_settings()
        >>> print(settings.embedding.provider)
        fake
    """
    path = Path(path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise SettingsFileError(f"Settings file not found: {path}") from e
    except yaml.YAMLError as e:
        raise SettingsFileError(f"Invalid YAML in settings file: {e}") from e

    if not isinstance(data, dict):
        raise SettingsFileError(f"Settings file must contain a mapping: {path}")

    settings = _yaml_to_settings(data)
    validate_settings(settings)
    return settings


def get_effective_settings(
    path: str | Path = "config/settings.yaml",
    overrides: dict[str, Any] | None = None
) -> Settings:
    """Load settings with optional runtime overrides.

    Args:
        path: Path to the settings YAML file
        overrides: Optional dictionary of field paths to override.
                   Use dot-notation (e.g., {"embedding.provider": "openai"})

    Returns:
        Settings object with overrides applied and re-validated
    """
    settings = load_settings(path)

    if overrides:
        for field_path, value in _flatten_dict(overrides).items():
            parts = field_path.split(".")
            obj: Any = settings
            for part in parts[:-1]:
                if not hasattr(obj, part):
                    raise SettingsValidationError(f"Unknown configuration field: {field_path}")
                obj = getattr(obj, part)
            if not hasattr(obj, parts[-1]):
                raise SettingsValidationError(f"Unknown configuration field: {field_path}")
            setattr(obj, parts[-1], value)
        validate_settings(settings)

    return settings
