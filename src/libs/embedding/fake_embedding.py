"""Deterministic fake embedding provider.

Generates reproducible unit vectors from a hash of the text so the whole
pipeline can be exercised offline. The same text always maps to the same
vector, across calls, instances and interpreter runs (Python's built-in
``hash`` is salted per process, so a fixed string hash is used instead).
"""

import time

import numpy as np

from core.types import EmbeddingVector
from libs.embedding.base_embedding import BaseEmbedding
from libs.embedding.vector_utils import normalize
from observability.logger import get_logger

logger = get_logger(__name__)

_LCG_MULTIPLIER = 1103515245
_LCG_INCREMENT = 12345
_LCG_MASK = 0x7FFFFFFF


def string_hash(text: str) -> int:
    """32-bit rolling hash (h = h * 31 + code point), as a non-negative int."""
    h = 0
    for char in text:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


class FakeEmbedding(BaseEmbedding):
    """Fake embedding for testing and offline use.

    Attributes:
        dimensions: Dimensions of the fake embeddings
        delay: Seconds to sleep per text, to simulate a slow backend
    """

    DEFAULT_DIMENSIONS = 384

    def __init__(self, dimensions: int | None = None, delay: float = 0.0, **kwargs) -> None:
        """Initialize the Fake Embedding.

        Args:
            dimensions: Embedding dimensions. Defaults to 384.
            delay: Per-text delay in seconds.
            **kwargs: Remote-provider settings, ignored.
        """
        self._dimensions = dimensions or self.DEFAULT_DIMENSIONS
        if self._dimensions < 1:
            raise ValueError(f"dimensions must be >= 1, got {self._dimensions}")
        self._delay = delay

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _generate_vector(self, text: str) -> np.ndarray:
        seed = string_hash(text)
        values = np.empty(self._dimensions, dtype=np.float64)
        for i in range(self._dimensions):
            seed = (seed * _LCG_MULTIPLIER + _LCG_INCREMENT) & _LCG_MASK
            values[i] = (seed / _LCG_MASK) * 2 - 1
        return normalize(values)

    def _embed_texts(self, texts: list[str]) -> list[EmbeddingVector]:
        vectors = []
        for text in texts:
            if self._delay > 0:
                time.sleep(self._delay)
            vectors.append(
                EmbeddingVector(values=self._generate_vector(text), dimensions=self._dimensions)
            )
        logger.debug(f"Fake embedding: text_count={len(texts)}, dimensions={self._dimensions}")
        return vectors

    def is_ready(self) -> bool:
        return True

    def __repr__(self) -> str:
        return (
            f"FakeEmbedding("
            f"provider={self.provider_name}, "
            f"dimensions={self.dimensions}, "
            f"delay={self._delay})"
        )
