"""
Core protocols defining contracts for the entire system.

All backends (document store, embeddings, completions, cache layers)
implement these protocols, so the orchestrator, ingestion and assembler
receive their collaborators by injection and tests substitute doubles.

PATTERN:
- Protocol defines the contract
- Production implementation (PgDocumentStore, OpenAIEmbeddings, ...)
- Test double (InMemoryDocumentStore, MockEmbeddings, ...)
- Factory function for instantiation
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import numpy as np

from contextual_rag.core.result import StoreResult


# ---------------------------------------------------------------------------
# EMBEDDING PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Contract for embedding generation.

    Implementations:
    - OpenAIEmbeddings (production)
    - MockEmbeddings (testing)

    Request timeout is configured when the provider is built.
    Failures raise ProviderFault.
    """

    async def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        ...


# ---------------------------------------------------------------------------
# DOCUMENT STORE PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class DocumentStore(Protocol):
    """
    Contract for document storage and search.

    Implementations:
    - PgDocumentStore (production with PostgreSQL + pgvector)
    - InMemoryDocumentStore (testing/development)

    Every method returns Ok(documents) or Err(StoreFault).
    """

    async def hybrid_search(self, query: str) -> StoreResult:
        """Vector + lexical search in one call."""
        ...

    async def text_search(self, query: str, profile: str = "english") -> StoreResult:
        """Websearch-style full-text search."""
        ...

    async def insert(
        self,
        content: str,
        embedding: np.ndarray,
        metadata: dict[str, Any] | None = None,
    ) -> StoreResult:
        """Insert a document with its embedding."""
        ...

    async def scan_all(self, table: str) -> StoreResult:
        """Return every document in a table."""
        ...


# ---------------------------------------------------------------------------
# COMPLETION SERVICE PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class CompletionService(Protocol):
    """
    Contract for text generation.

    Implementations:
    - OpenAICompletion (production)
    - MockCompletion (testing)

    Failures raise CompletionFault.
    """

    async def complete(self, prompt: str) -> str:
        """Generate text for a rendered prompt."""
        ...

    async def complete_with_context(self, query: str, documents: list[str]) -> str:
        """Answer a query grounded in the given documents."""
        ...


# ---------------------------------------------------------------------------
# CACHE INVALIDATION PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class CacheInvalidator(Protocol):
    """Contract for signalling external caches that a tag is stale."""

    def invalidate(self, tag: str) -> None:
        """Mark every cached entry under tag as stale."""
        ...
