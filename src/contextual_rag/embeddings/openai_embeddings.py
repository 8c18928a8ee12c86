"""
Embeddings Module - Single Responsibility: Generate text embeddings.

It has ONE job: convert text to vector embeddings.
No database logic, no document handling.
"""

from __future__ import annotations

import hashlib
import os

import numpy as np
import openai
from openai import AsyncOpenAI

from contextual_rag.core import EmbeddingProvider, ProviderFault


class OpenAIEmbeddings:
    """
    OpenAI-based embedding provider.

    Uses text-embedding-3-small by default (1536 dimensions).
    A timeout of 0 means requests are never timed out.
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        timeout: float = 0,
        api_key: str | None = None,
    ):
        self.model = model
        self.timeout = timeout
        try:
            self._client = AsyncOpenAI(
                api_key=api_key or os.environ.get("OPENAI_API_KEY"),
                timeout=timeout if timeout > 0 else None,
            )
        except openai.OpenAIError as e:
            raise ProviderFault(f"Cannot create embeddings client: {e}") from e

    @property
    def dimensions(self) -> int:
        """Return embedding dimensions for the model."""
        model_dims = {
            "text-embedding-3-small": 1536,
            "text-embedding-3-large": 3072,
            "text-embedding-ada-002": 1536,
        }
        return model_dims.get(self.model, 1536)

    async def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        try:
            response = await self._client.embeddings.create(
                input=text,
                model=self.model,
            )
        except openai.OpenAIError as e:
            raise ProviderFault(f"Embedding request failed: {e}") from e
        return np.array(response.data[0].embedding, dtype=np.float32)


class MockEmbeddings:
    """
    Mock embedding provider for testing without API calls.

    Generates deterministic pseudo-embeddings from text hashes.
    NOT for production use - only for testing/development.
    """

    def __init__(self, dimensions: int = 1536):
        self._dimensions = dimensions
        self.calls: list[str] = []

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def embed(self, text: str) -> np.ndarray:
        """Generate deterministic pseudo-embedding from text hash."""
        self.calls.append(text)
        h = hashlib.sha256(text.encode()).digest()
        # Repeat hash to fill dimensions, scaled into [-1, 1]
        repeated = (h * (self._dimensions // 32 + 1))[: self._dimensions]
        return np.frombuffer(repeated, dtype=np.uint8).astype(np.float32) / 127.5 - 1.0


def get_embedding_provider(
    use_mock: bool = False,
    timeout: float | None = None,
) -> EmbeddingProvider:
    """
    Factory function to get the appropriate embedding provider.

    Args:
        use_mock: If True, return MockEmbeddings (for testing)
        timeout: Request timeout in seconds (default: RAG_EMBEDDINGS_TIMEOUT)
    """
    from contextual_rag.config import get_config

    config = get_config()
    if use_mock:
        return MockEmbeddings()
    return OpenAIEmbeddings(
        model=config.embedding_model,
        timeout=config.embeddings_timeout if timeout is None else timeout,
    )
