"""
Embeddings Module - Single Responsibility: Generate text embeddings.

It has ONE job: convert text to unit-length vectors of dimension D.

Providers:
- openai: OpenAI embeddings API
- ollama: Ollama's OpenAI-compatible /v1 endpoint (local models)
- mock: deterministic vectors for tests

Groq has no embeddings endpoint. The hash-based stand-in other systems
use for it produces vectors with no semantic meaning, so asking for it
is a configuration error rather than a silent fallback.
"""

from __future__ import annotations

import hashlib
import logging
import os
from typing import TYPE_CHECKING

import numpy as np
from openai import OpenAI, OpenAIError

from thesis_search.core.errors import (
    ConfigurationError,
    DimensionMismatch,
    EmbeddingServiceError,
)
from thesis_search.core.protocols import EmbeddingProvider
from thesis_search.retrieval.vector_math import normalize

if TYPE_CHECKING:
    from thesis_search.config import SearchConfig

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_MODELS = {
    "openai": "text-embedding-3-small",
    "ollama": "all-minilm",
}


def document_text(title: str, abstract: str) -> str:
    """Text embedded for a thesis; the title leads so it weighs more."""
    return f"Title: {title}\n\nAbstract: {abstract}"


class OpenAIEmbeddings:
    """
    Embedding provider for OpenAI-compatible endpoints.

    Vectors are normalized before they are returned so that dot product
    equals cosine similarity downstream. The client never retries; a
    failure or timeout surfaces as EmbeddingServiceError.
    """

    supports_native_embeddings = True

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        dimensions: int = 384,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
    ):
        self.model = model
        self._dimensions = dimensions
        self._client = OpenAI(
            api_key=api_key or os.environ.get("OPENAI_API_KEY"),
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _request_kwargs(self) -> dict:
        # Only the text-embedding-3 family can be shortened server-side
        if self.model.startswith("text-embedding-3"):
            return {"dimensions": self._dimensions}
        return {}

    def _to_vector(self, values: list[float]) -> np.ndarray:
        vector = np.array(values, dtype=np.float32)
        if vector.shape[0] != self._dimensions:
            raise DimensionMismatch(expected=self._dimensions, actual=vector.shape[0])
        return normalize(vector)

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        try:
            response = self._client.embeddings.create(
                input=text, model=self.model, **self._request_kwargs()
            )
        except OpenAIError as e:
            logger.error(f"Error generating embedding: {e}")
            raise EmbeddingServiceError(f"Embedding generation failed: {e}") from e
        return self._to_vector(response.data[0].embedding)

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings for multiple texts in one request."""
        if not texts:
            return []

        try:
            response = self._client.embeddings.create(
                input=texts, model=self.model, **self._request_kwargs()
            )
        except OpenAIError as e:
            logger.error(f"Error in batch embedding generation: {e}")
            raise EmbeddingServiceError(f"Batch embedding generation failed: {e}") from e

        # The API may return items out of order; index tells us where they go
        items = sorted(response.data, key=lambda item: item.index)
        return [self._to_vector(item.embedding) for item in items]

    def check_health(self) -> bool:
        """Embed a short text against the backend. Never raises."""
        try:
            self.embed("health check")
        except Exception as e:
            logger.error(f"Embedding service health check failed ({self.model}): {e}")
            return False
        return True


class MockEmbeddings:
    """
    Mock embedding provider for testing without API calls.

    Generates deterministic unit vectors seeded from a text hash.
    Identical text gives identical vectors; different text gives unrelated
    vectors. NOT semantically meaningful.
    """

    supports_native_embeddings = False

    def __init__(self, dimensions: int = 384):
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def embed(self, text: str) -> np.ndarray:
        seed = int.from_bytes(hashlib.sha256(text.encode()).digest()[:8], "big")
        rng = np.random.default_rng(seed)
        return normalize(rng.standard_normal(self._dimensions).astype(np.float32))

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        return [self.embed(text) for text in texts]

    def check_health(self) -> bool:
        return True


def get_embedding_provider(config: SearchConfig | None = None) -> EmbeddingProvider:
    """
    Factory function to get the configured embedding provider.

    Raises:
        ConfigurationError: provider unknown or without native embeddings
    """
    from thesis_search.config import get_config

    config = config or get_config()
    provider = config.embedding_provider

    if provider == "mock":
        return MockEmbeddings(dimensions=config.embedding_dim)

    if provider == "groq":
        raise ConfigurationError(
            "Groq has no native embedding endpoint; set EMBEDDING_PROVIDER to ollama or openai"
        )

    if provider not in DEFAULT_EMBEDDING_MODELS:
        raise ConfigurationError(f"Unknown embedding provider: {provider}")

    model = config.embedding_model or DEFAULT_EMBEDDING_MODELS[provider]
    base_url = None
    api_key = None
    if provider == "ollama":
        base_url = f"{config.ollama_base_url.rstrip('/')}/v1"
        api_key = "ollama"  # required by the SDK, ignored by Ollama

    logger.info(f"Using {provider} embeddings ({model}, {config.embedding_dim} dimensions)")
    return OpenAIEmbeddings(
        model=model,
        dimensions=config.embedding_dim,
        api_key=api_key,
        base_url=base_url,
        timeout=config.request_timeout_s,
    )
