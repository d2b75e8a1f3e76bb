"""Core data types for the import and search pipeline.

This module defines the shared data structures used across the whole
pipeline: from parsing an export file to ranking search results.

Design Principles:
    - Serializable: All types can be converted to dict/JSON
    - Immutable: Core types use frozen dataclasses
    - Extensible: metadata keeps the raw source fields for debugging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import numpy as np


class SourceFormat(str, Enum):
    """Export format a record was parsed from."""

    GEOJSON = "geojson"
    CSV = "csv"


class Severity(str, Enum):
    """Severity of a parse problem.

    WARNING means a single input unit was skipped, ERROR means the whole
    file was rejected.
    """

    WARNING = "warning"
    ERROR = "error"


class IndexPhase(str, Enum):
    """Phases reported while building the embedding index."""

    PREPARING = "preparing"
    EMBEDDING = "embedding"
    STORING = "storing"
    COMPLETE = "complete"


@dataclass(frozen=True)
class RecordMetadata:
    """Provenance of a canonical record.

    Attributes:
        source_format: Format of the export the record came from
        original_fields: Raw fields of the input unit (property bag or row)
    """
    source_format: SourceFormat
    original_fields: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source_format": self.source_format.value,
            "original_fields": self.original_fields,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecordMetadata":
        """Create from dictionary."""
        return cls(
            source_format=SourceFormat(data["source_format"]),
            original_fields=data.get("original_fields"),
        )


@dataclass(frozen=True)
class CanonicalRecord:
    """A saved location, independent of the export format it came from.

    Attributes:
        id: Opaque unique identifier
        name: Display name, never empty
        metadata: Source format and raw fields
        list_name: Saved list or category the place belongs to
        notes: Free-text note or comment
        source_url: Maps URL from the export
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        address: Postal address
    """
    id: str
    name: str
    metadata: RecordMetadata
    list_name: str | None = None
    notes: str | None = None
    source_url: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    address: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("CanonicalRecord.name must be a non-empty string")

    @property
    def has_coordinates(self) -> bool:
        """True when both latitude and longitude are known."""
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "list_name": self.list_name,
            "notes": self.notes,
            "source_url": self.source_url,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address,
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CanonicalRecord":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            metadata=RecordMetadata.from_dict(data["metadata"]),
            list_name=data.get("list_name"),
            notes=data.get("notes"),
            source_url=data.get("source_url"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            address=data.get("address"),
        )


@dataclass(frozen=True)
class ParseProblem:
    """A problem found while parsing an export file.

    Attributes:
        message: Human-readable description
        severity: WARNING (unit skipped) or ERROR (file rejected)
        unit_index: 1-based position of the offending input unit
        field_name: Logical field the problem relates to
        original_data: Raw input unit, when available
    """
    message: str
    severity: Severity
    unit_index: int | None = None
    field_name: str | None = None
    original_data: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "message": self.message,
            "severity": self.severity.value,
            "unit_index": self.unit_index,
            "field_name": self.field_name,
        }


@dataclass(frozen=True)
class ParseStats:
    """Counters collected while parsing one export file."""
    total_input_units: int
    success_count: int
    failure_count: int
    elapsed_millis: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_input_units": self.total_input_units,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "elapsed_millis": self.elapsed_millis,
        }


@dataclass(frozen=True)
class ParseOutcome:
    """Result envelope returned by every parser and the dispatcher.

    ``succeeded`` is true exactly when at least one record survived.
    """
    records: list[CanonicalRecord]
    problems: list[ParseProblem]
    stats: ParseStats

    @property
    def succeeded(self) -> bool:
        return len(self.records) > 0

    @property
    def warnings(self) -> list[ParseProblem]:
        return [p for p in self.problems if p.severity is Severity.WARNING]

    @property
    def errors(self) -> list[ParseProblem]:
        return [p for p in self.problems if p.severity is Severity.ERROR]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "succeeded": self.succeeded,
            "records": [r.to_dict() for r in self.records],
            "problems": [p.to_dict() for p in self.problems],
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def fatal(cls, message: str, elapsed_millis: float = 0.0) -> "ParseOutcome":
        """Build the outcome for a file-level failure."""
        return cls(
            records=[],
            problems=[ParseProblem(message=message, severity=Severity.ERROR)],
            stats=ParseStats(
                total_input_units=0,
                success_count=0,
                failure_count=1,
                elapsed_millis=elapsed_millis,
            ),
        )


@dataclass(frozen=True, eq=False)
class EmbeddingVector:
    """Fixed-length float32 embedding.

    Attributes:
        values: 1-D float32 array
        dimensions: Number of components, always ``len(values)``
    """
    values: np.ndarray
    dimensions: int

    def __post_init__(self) -> None:
        values = np.asarray(self.values, dtype=np.float32)
        if values.ndim != 1:
            raise ValueError(f"Embedding values must be 1-D, got shape {values.shape}")
        if values.shape[0] != self.dimensions:
            raise ValueError(
                f"Embedding has {values.shape[0]} values but declares "
                f"{self.dimensions} dimensions"
            )
        object.__setattr__(self, "values", values)

    @classmethod
    def from_values(cls, values: Any) -> "EmbeddingVector":
        """Create from any sequence of numbers."""
        array = np.asarray(values, dtype=np.float32)
        return cls(values=array, dimensions=int(array.shape[0]))

    @property
    def norm(self) -> float:
        return float(np.linalg.norm(self.values))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EmbeddingVector):
            return NotImplemented
        return self.dimensions == other.dimensions and bool(
            np.array_equal(self.values, other.values)
        )

    def to_list(self) -> list[float]:
        return [float(x) for x in self.values]


@dataclass(frozen=True)
class IndexedEmbedding:
    """Stored embedding linked to a canonical record.

    Attributes:
        record_id: ID of the CanonicalRecord this vector represents
        vector: Unit-norm embedding
        embedding_text: Text the vector was computed from
        provider_name: Provider that produced the vector
        created_at: Time the index entry was built
    """
    record_id: str
    vector: EmbeddingVector
    embedding_text: str
    provider_name: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "record_id": self.record_id,
            "vector": self.vector.to_list(),
            "dimensions": self.vector.dimensions,
            "embedding_text": self.embedding_text,
            "provider_name": self.provider_name,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IndexedEmbedding":
        """Create from dictionary."""
        return cls(
            record_id=data["record_id"],
            vector=EmbeddingVector.from_values(data["vector"]),
            embedding_text=data.get("embedding_text", ""),
            provider_name=data.get("provider_name", ""),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass(frozen=True)
class SearchResult:
    """One ranked hit returned by the search engine."""
    record_id: str
    score: float
    rank: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"record_id": self.record_id, "score": self.score, "rank": self.rank}


@dataclass(frozen=True)
class ParsedQuery:
    """A raw query split into search terms and an optional list filter."""
    raw_query: str
    search_terms: str
    list_filter: str | None = None

    @property
    def has_list_filter(self) -> bool:
        return self.list_filter is not None


@dataclass(frozen=True)
class IndexProgress:
    """Progress event emitted while building the index."""
    current: int
    total: int
    phase: IndexPhase
    message: str


@dataclass(frozen=True)
class MatchExplanation:
    """Evidence that a record field matched the search terms."""
    field: str
    label: str
    snippet: str
    relevance: int


@dataclass(frozen=True)
class IndexStats:
    """Summary of the current index."""
    total_records: int
    total_embeddings: int
    provider_name: str
    dimensions: int
    last_updated: datetime | None = None


@dataclass
class StoreConfig:
    """Singleton configuration record kept next to the stores.

    Attributes:
        total_records: Number of records imported
        total_embeddings: Number of embeddings in the index
        model_loaded: Whether an index has been built
        model_version: Provider name of the current index
        last_import_at: Time of the last successful import
    """
    total_records: int = 0
    total_embeddings: int = 0
    model_loaded: bool = False
    model_version: str = "none"
    last_import_at: datetime | None = None
