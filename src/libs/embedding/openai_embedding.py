"""OpenAI Embedding implementation.

This module provides the network-backed provider. It works with OpenAI's
embeddings API and any service exposing the same request/response format.

Design Principles:
    - OpenAI-compatible: Follows OpenAI embeddings API conventions
    - Rate-limit friendly: fixed delay between batches
    - Fail-Fast: a missing API key fails at construction time
    - Injectable transport: tests pass their own httpx.Client
"""

import os
import time
from typing import Any, Callable

import httpx

from core.types import EmbeddingVector
from libs.embedding.base_embedding import (
    BaseEmbedding,
    EmbeddingConfigurationError,
    EmbeddingError,
)
from libs.embedding.vector_utils import normalize
from observability.logger import get_logger

logger = get_logger(__name__)


class OpenAIEmbedding(BaseEmbedding):
    """OpenAI Embedding implementation.

    Attributes:
        api_key: OpenAI API key
        base_url: Base URL for the API endpoint
        model: Model name to use
        dimensions: Requested embedding dimensions
        batch_size: Texts per request
        inter_batch_delay: Seconds slept between requests
        timeout: Request timeout in seconds
        http_client: Optional HTTP client for custom configuration

    Example:
        >>> embedding = OpenAIEmbedding(api_key="sk-...", batch_size=50)
        >>> vectors = embedding.embed_batch(["ramen near the station", "quiet cafe"])
    """

    DEFAULT_MODEL = "text-embedding-3-small"
    DEFAULT_DIMENSIONS = 1536
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_BATCH_SIZE = 100
    DEFAULT_INTER_BATCH_DELAY = 0.1

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        dimensions: int | None = None,
        batch_size: int | None = None,
        inter_batch_delay: float | None = None,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the OpenAI Embedding.

        Args:
            api_key: OpenAI API key. If None, reads from OPENAI_API_KEY env var.
            base_url: Base URL for the API. Defaults to OpenAI's official API.
            model: Model name. Defaults to text-embedding-3-small.
            dimensions: Embedding dimensions to request. Optional.
            batch_size: Texts per request. Defaults to 100.
            inter_batch_delay: Seconds between requests. Defaults to 0.1.
            timeout: Request timeout in seconds.
            http_client: Optional pre-configured HTTP client.
            sleep: Sleep function used between batches.

        Raises:
            EmbeddingConfigurationError: If the API key is missing or the
                batch settings are invalid.
        """
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self._api_key:
            raise EmbeddingConfigurationError(
                "OpenAI API key is not configured. Set 'embedding.api_key' in settings or "
                "OPENAI_API_KEY env var.",
                provider="openai"
            )

        self._base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self._model = model or self.DEFAULT_MODEL
        self._dimensions = dimensions
        self._batch_size = batch_size or self.DEFAULT_BATCH_SIZE
        self._inter_batch_delay = (
            self.DEFAULT_INTER_BATCH_DELAY if inter_batch_delay is None else inter_batch_delay
        )
        self._timeout = timeout
        self._http_client = http_client
        self._sleep = sleep

        if self._batch_size < 1:
            raise EmbeddingConfigurationError(
                f"batch_size must be >= 1, got {self._batch_size}",
                provider="openai"
            )
        if self._inter_batch_delay < 0:
            raise EmbeddingConfigurationError(
                f"inter_batch_delay must be >= 0, got {self._inter_batch_delay}",
                provider="openai"
            )

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def dimensions(self) -> int:
        return self._dimensions or self.DEFAULT_DIMENSIONS

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def _build_request_payload(self, texts: list[str]) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "input": texts,
            "model": self._model,
        }
        if self._dimensions is not None:
            payload["dimensions"] = self._dimensions
        return payload

    def _parse_response(self, response_data: dict[str, Any], expected: int) -> list[EmbeddingVector]:
        """Parse the API response into unit vectors, in input order."""
        data = response_data.get("data") if isinstance(response_data, dict) else None
        if not data:
            raise EmbeddingError(
                "Empty response from OpenAI Embeddings API",
                provider=self.provider_name,
                details={"response_body": response_data}
            )
        if len(data) != expected:
            raise EmbeddingError(
                f"OpenAI returned {len(data)} embeddings for {expected} inputs",
                provider=self.provider_name,
            )

        items = sorted(data, key=lambda item: item.get("index", 0))
        vectors: list[EmbeddingVector] = []
        for item in items:
            embedding = item.get("embedding") or []
            if not embedding:
                raise EmbeddingError(
                    "OpenAI returned an empty embedding",
                    provider=self.provider_name,
                )
            values = normalize(embedding)
            vectors.append(EmbeddingVector(values=values, dimensions=len(values)))
        return vectors

    def _handle_http_error(self, error: httpx.HTTPStatusError) -> EmbeddingError:
        """Turn a non-2xx response into an EmbeddingError with the upstream message."""
        response = error.response
        message = response.reason_phrase or f"HTTP {response.status_code}"
        error_type = "api_error"
        body: Any = None

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            upstream = body.get("error")
            if isinstance(upstream, dict):
                message = upstream.get("message") or message
                error_type = upstream.get("type") or error_type
            elif isinstance(upstream, str) and upstream:
                message = upstream

        return EmbeddingError(
            f"OpenAI API error: {message}",
            provider=self.provider_name,
            code=response.status_code,
            details={
                "error_type": error_type,
                "status_code": response.status_code,
                "response_body": body,
            }
        )

    def _embed_texts(self, texts: list[str]) -> list[EmbeddingVector]:
        """Send one batch to the embeddings endpoint."""
        logger.info(
            f"OpenAI embedding request: model={self._model}, "
            f"text_count={len(texts)}"
        )

        url = f"{self._base_url}/embeddings"
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        client = self._http_client or httpx.Client(timeout=self._timeout)

        try:
            response = client.post(url, headers=headers, json=self._build_request_payload(texts))
            response.raise_for_status()
            vectors = self._parse_response(response.json(), expected=len(texts))
        except httpx.HTTPStatusError as e:
            raise self._handle_http_error(e) from e
        except httpx.RequestError as e:
            raise EmbeddingError(
                f"Failed to connect to OpenAI API: {e}",
                provider=self.provider_name,
                details={"url": url, "error": str(e)}
            ) from e
        except ValueError as e:
            raise EmbeddingError(
                f"Invalid response from OpenAI API: {e}",
                provider=self.provider_name,
            ) from e
        finally:
            if self._http_client is None:
                client.close()

        logger.info(
            f"OpenAI embedding response: vector_count={len(vectors)}, "
            f"dimensions={vectors[0].dimensions}"
        )
        return vectors

    def _between_batches(self) -> None:
        if self._inter_batch_delay > 0:
            self._sleep(self._inter_batch_delay)

    def is_ready(self) -> bool:
        """Perform a trial call; any failure is reported as False."""
        try:
            self.embed("test")
            return True
        except EmbeddingError as e:
            logger.warning(f"OpenAI provider not ready: {e}")
            return False

    def __repr__(self) -> str:
        return (
            f"OpenAIEmbedding(provider={self.provider_name}, "
            f"model={self._model}, "
            f"dimensions={self.dimensions}, "
            f"batch_size={self._batch_size})"
        )
