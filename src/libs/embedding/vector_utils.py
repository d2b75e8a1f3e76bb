"""Vector helpers shared by providers, the index builder and search.

All vectors are float32 numpy arrays. A zero vector has no direction,
so its cosine similarity with anything is defined as 0.0.
"""

from typing import Any, Sequence, TypeVar

import numpy as np

from core.types import EmbeddingVector

T = TypeVar("T")


class DimensionMismatchError(ValueError):
    """Raised when two vectors of different lengths are compared."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Vector dimension mismatch: {expected} vs {actual}")
        self.expected = expected
        self.actual = actual


def to_array(values: Any) -> np.ndarray:
    """Coerce an EmbeddingVector or number sequence to a float32 array."""
    if isinstance(values, EmbeddingVector):
        return values.values
    return np.asarray(values, dtype=np.float32)


def normalize(values: Any) -> np.ndarray:
    """Scale a vector to unit length.

    Zero vectors are returned unchanged. Normalizing twice gives the
    same result as normalizing once.

    Example:
        >>> normalize([3.0, 4.0, 0.0]).tolist()
        [0.6000000238418579, 0.800000011920929, 0.0]
    """
    array = to_array(values).astype(np.float32, copy=True)
    norm = float(np.linalg.norm(array.astype(np.float64)))
    if norm == 0.0:
        return array
    return (array.astype(np.float64) / norm).astype(np.float32)


def normalize_vector(vector: EmbeddingVector) -> EmbeddingVector:
    """Return a unit-norm copy of an EmbeddingVector."""
    values = normalize(vector.values)
    return EmbeddingVector(values=values, dimensions=vector.dimensions)


def cosine_similarity(a: Any, b: Any) -> float:
    """Cosine similarity of two equal-length vectors.

    Returns:
        dot(a, b) / (|a| * |b|), or 0.0 when either vector is zero.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    left = to_array(a).astype(np.float64)
    right = to_array(b).astype(np.float64)
    if left.shape[0] != right.shape[0]:
        raise DimensionMismatchError(left.shape[0], right.shape[0])

    norm_left = float(np.linalg.norm(left))
    norm_right = float(np.linalg.norm(right))
    if norm_left == 0.0 or norm_right == 0.0:
        return 0.0

    return float(np.dot(left, right) / (norm_left * norm_right))


def batch_array(items: Sequence[T], batch_size: int) -> list[list[T]]:
    """Split a sequence into consecutive batches of at most batch_size.

    Example:
        >>> batch_array([1, 2, 3, 4, 5, 6, 7], 3)
        [[1, 2, 3], [4, 5, 6], [7]]
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return [list(items[i : i + batch_size]) for i in range(0, len(items), batch_size)]
