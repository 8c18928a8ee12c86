"""
Embedding Ingestion - write new content into the document store.

Pipeline: validate → embed → rate-limit → insert.
No retries here; retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Any

from contextual_rag.core import (
    DataIntegrityFault,
    DocumentStore,
    EmbeddingProvider,
    IngestionFault,
    Ok,
    ProviderFault,
    ValidationFault,
)
from contextual_rag.observability import TracerProtocol, get_tracer, mark_failed
from contextual_rag.observability.attributes import RAG_INGEST_CONTENT_LENGTH
from contextual_rag.retrieval.rate_limiter import RateLimiter, get_rate_limiter

logger = logging.getLogger(__name__)


class EmbeddingIngestion:
    """
    Stores content together with its embedding.

    Args:
        embeddings: EmbeddingProvider (timeout configured on the provider)
        store: DocumentStore to insert into
        rate_limiter: Limiter gating store calls (default: process-wide limiter)
        table: Table scanned by list_contents when none is named
    """

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        store: DocumentStore,
        rate_limiter: RateLimiter | None = None,
        tracer: TracerProtocol | None = None,
        table: str = "documents",
    ):
        self._embeddings = embeddings
        self.table = table
        self._store = store
        self._limiter = rate_limiter or get_rate_limiter()
        self._tracer = tracer or get_tracer()

    async def store_embedding(self, content: str, metadata: dict[str, Any] | None = None) -> Ok:
        """
        Embed content and insert it into the store.

        Raises:
            ValidationFault: content is empty (no network call is made)
            IngestionFault: embedding or insert failed; carries the content
        """
        if not content or not content.strip():
            raise ValidationFault("Cannot store empty content")

        with self._tracer.start_span(
            "rag.ingest", attributes={RAG_INGEST_CONTENT_LENGTH: len(content)}
        ) as span:
            try:
                embedding = await self._embeddings.embed(content)
            except ProviderFault as e:
                mark_failed(span, e)
                raise IngestionFault(f"Failed to embed content: {e}", content) from e

            await self._limiter.acquire()
            result = await self._store.insert(content, embedding, metadata)
            if not result.is_ok:
                mark_failed(span, result.fault)
                raise IngestionFault(
                    f"Failed to insert document into store: {result.fault}", content
                ) from result.fault

        logger.info(f"Stored document ({len(content)} chars) with embedding")
        return result

    async def list_contents(self, table: str | None = None) -> list[str]:
        """
        Return the content of every document in a table (default: self.table).

        Raises:
            StoreFault: the scan failed
            DataIntegrityFault: a stored document has empty content
        """
        table = table or self.table
        await self._limiter.acquire()
        docs = (await self._store.scan_all(table)).unwrap()

        contents = []
        for doc in docs:
            if not doc.content:
                raise DataIntegrityFault(f"Document {doc.id!r} in {table!r} has empty content")
            contents.append(doc.content)
        return contents

