"""
Unit Tests for Embedding Ingestion

Tests validation before any network call, fault wrapping, and the
document listing used to inspect a table.
"""

from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest

from contextual_rag.core import (
    DataIntegrityFault,
    Err,
    IngestionFault,
    Ok,
    ProviderFault,
    StoreFault,
    ValidationFault,
)
from contextual_rag.embeddings import MockEmbeddings
from contextual_rag.ingestion import EmbeddingIngestion
from contextual_rag.retrieval.document import Document
from contextual_rag.retrieval.store import DocumentStoreConfig, InMemoryDocumentStore


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def embeddings():
    provider = MagicMock()
    provider.embed = AsyncMock(return_value=np.array([0.1, 0.2, 0.3]))
    return provider


@pytest.fixture
def store():
    mock = MagicMock()
    mock.insert = AsyncMock(return_value=Ok([Document(id=1, content="hello")]))
    mock.scan_all = AsyncMock(return_value=Ok([]))
    return mock


@pytest.fixture
def ingestion(embeddings, store, limiter):
    return EmbeddingIngestion(embeddings, store, rate_limiter=limiter)


# ---------------------------------------------------------------------------
# STORE EMBEDDING
# ---------------------------------------------------------------------------


class TestStoreEmbedding:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    async def test_empty_content_makes_no_calls(self, ingestion, embeddings, store, content):
        with pytest.raises(ValidationFault):
            await ingestion.store_embedding(content)

        embeddings.embed.assert_not_awaited()
        store.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success_returns_store_result(self, ingestion, embeddings, store, limiter):
        result = await ingestion.store_embedding("hello", {"source": "unit"})

        assert result.is_ok
        assert result.documents[0].content == "hello"
        embeddings.embed.assert_awaited_once_with("hello")
        args = store.insert.await_args.args
        assert args[0] == "hello"
        assert np.array_equal(args[1], np.array([0.1, 0.2, 0.3]))
        assert args[2] == {"source": "unit"}
        assert limiter.acquired == 1

    @pytest.mark.asyncio
    async def test_insert_failure_raises_ingestion_fault(self, ingestion, embeddings, store):
        store.insert.return_value = Err(StoreFault("duplicate key"))

        with pytest.raises(IngestionFault) as exc_info:
            await ingestion.store_embedding("hello")

        assert exc_info.value.content == "hello"
        assert isinstance(exc_info.value.__cause__, StoreFault)
        embeddings.embed.assert_awaited_once()
        store.insert.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_embedding_failure_skips_insert(self, ingestion, embeddings, store):
        embeddings.embed.side_effect = ProviderFault("rate limited")

        with pytest.raises(IngestionFault) as exc_info:
            await ingestion.store_embedding("hello")

        assert exc_info.value.content == "hello"
        assert isinstance(exc_info.value.__cause__, ProviderFault)
        store.insert.assert_not_awaited()


# ---------------------------------------------------------------------------
# LIST CONTENTS
# ---------------------------------------------------------------------------


class TestListContents:
    @pytest.mark.asyncio
    async def test_returns_contents_in_order(self, ingestion, store):
        store.scan_all.return_value = Ok(
            [Document(id=1, content="first"), Document(id=2, content="second")]
        )

        assert await ingestion.list_contents("documents") == ["first", "second"]
        store.scan_all.assert_awaited_once_with("documents")

    @pytest.mark.asyncio
    async def test_defaults_to_configured_table(self, embeddings, store, limiter):
        ingestion = EmbeddingIngestion(embeddings, store, rate_limiter=limiter, table="notes")

        await ingestion.list_contents()

        store.scan_all.assert_awaited_once_with("notes")

    @pytest.mark.asyncio
    async def test_empty_content_is_integrity_fault(self, ingestion, store):
        store.scan_all.return_value = Ok([Document(id=9, content="")])

        with pytest.raises(DataIntegrityFault):
            await ingestion.list_contents()

    @pytest.mark.asyncio
    async def test_scan_failure_propagates(self, ingestion, store):
        store.scan_all.return_value = Err(StoreFault("relation does not exist"))

        with pytest.raises(StoreFault):
            await ingestion.list_contents("missing")


# ---------------------------------------------------------------------------
# END TO END WITH IN-MEMORY STORE
# ---------------------------------------------------------------------------


class TestWithInMemoryStore:
    @pytest.mark.asyncio
    async def test_stored_content_is_searchable(self, limiter):
        embeddings = MockEmbeddings(dimensions=32)
        store = InMemoryDocumentStore(embeddings, DocumentStoreConfig(connection_string=""))
        ingestion = EmbeddingIngestion(embeddings, store, rate_limiter=limiter)

        await ingestion.store_embedding("sourdough starter feeding schedule")
        await ingestion.store_embedding("tomato sauce basics")

        assert await ingestion.list_contents() == [
            "sourdough starter feeding schedule",
            "tomato sauce basics",
        ]
        found = (await store.hybrid_search("sourdough starter feeding schedule")).unwrap()
        assert found[0].content == "sourdough starter feeding schedule"
