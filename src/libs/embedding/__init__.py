# Embedding - Embedding providers and vector helpers

from libs.embedding.base_embedding import (
    BaseEmbedding,
    EmbeddingError,
    EmbeddingConfigurationError,
    EmbeddingCancelledError,
    UnknownEmbeddingProviderError,
)
from libs.embedding.fake_embedding import FakeEmbedding, string_hash
from libs.embedding.openai_embedding import OpenAIEmbedding
from libs.embedding.embedding_factory import EmbeddingFactory
from libs.embedding.vector_utils import (
    DimensionMismatchError,
    batch_array,
    cosine_similarity,
    normalize,
    normalize_vector,
)

__all__ = [
    # Base
    "BaseEmbedding",
    "EmbeddingError",
    "EmbeddingConfigurationError",
    "EmbeddingCancelledError",
    "UnknownEmbeddingProviderError",
    # Providers
    "FakeEmbedding",
    "OpenAIEmbedding",
    "EmbeddingFactory",
    "string_hash",
    # Vectors
    "DimensionMismatchError",
    "batch_array",
    "cosine_similarity",
    "normalize",
    "normalize_vector",
]
