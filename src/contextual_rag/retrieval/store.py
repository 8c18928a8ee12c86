"""
Document store implementations.

Pattern: Protocol → Production impl → Test double → Factory

This module contains:
1. DocumentStoreConfig - Configuration dataclass
2. PgDocumentStore - PostgreSQL with pgvector (production)
3. InMemoryDocumentStore - In-memory store (testing/development)
4. get_document_store() - Factory function

Every search/insert/scan returns Ok(documents) or Err(StoreFault);
database exceptions never escape a store method.

Hybrid search mirrors the Supabase hybrid retriever: a cosine-similarity
leg (similarity_k rows) followed by a keyword leg (keyword_k rows),
de-duplicated by content, similarity hits first.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import numpy as np
import psycopg
from pgvector.psycopg import register_vector_async
from psycopg import sql
from psycopg.types.json import Jsonb

from contextual_rag.core import EmbeddingProvider, Err, Ok, StoreFault, StoreResult
from contextual_rag.retrieval.document import Document

logger = logging.getLogger(__name__)

_COLUMNS = sql.SQL("id, content, metadata, created_at, embedding")


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------


@dataclass
class DocumentStoreConfig:
    """Configuration for the document store."""

    connection_string: str = "postgresql://localhost/contextual_rag"
    table_name: str = "documents"
    embedding_dim: int = 1536
    similarity_k: int = 2
    keyword_k: int = 2
    text_search_limit: int = 10


def _dedupe_by_content(docs: list[Document]) -> list[Document]:
    seen: set[str] = set()
    unique = []
    for doc in docs:
        if doc.content not in seen:
            seen.add(doc.content)
            unique.append(doc)
    return unique


def _store_error(operation: str, error: Exception) -> Err:
    fault = StoreFault(f"{operation} failed: {error}")
    fault.__cause__ = error
    logger.error(f"Document store {operation} failed: {error}")
    return Err(fault)


# ---------------------------------------------------------------------------
# PGVECTOR STORE (Production)
# ---------------------------------------------------------------------------


class PgDocumentStore:
    """
    PostgreSQL document store using pgvector and built-in full-text search.

    Dependencies are INJECTED, not created internally: the embedding
    provider turns hybrid-search queries into vectors.

    One AsyncConnection is shared by all callers; psycopg serializes
    statements on it, each insert/search is independently atomic.
    """

    def __init__(
        self,
        config: DocumentStoreConfig,
        embeddings: EmbeddingProvider,
    ):
        self.config = config
        self._embeddings = embeddings
        self._conn: psycopg.AsyncConnection | None = None
        self._connect_lock = asyncio.Lock()

    @property
    def _table(self) -> sql.Identifier:
        return sql.Identifier(self.config.table_name)

    async def connect(self) -> psycopg.AsyncConnection:
        """Establish database connection (idempotent)."""
        async with self._connect_lock:
            if self._conn is None or self._conn.closed:
                conn = await psycopg.AsyncConnection.connect(
                    self.config.connection_string, autocommit=True
                )
                await conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
                await register_vector_async(conn)
                self._conn = conn
                logger.info(f"Connected to document store table {self.config.table_name!r}")
        return self._conn

    async def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    async def create_schema(self) -> None:
        """Create the documents table and its vector and full-text indexes."""
        conn = await self.connect()

        await conn.execute(
            sql.SQL(
                """
                CREATE TABLE IF NOT EXISTS {table} (
                    id BIGSERIAL PRIMARY KEY,
                    content TEXT NOT NULL,
                    metadata JSONB NOT NULL DEFAULT '{{}}'::jsonb,
                    embedding vector({dim}),
                    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                )
                """
            ).format(table=self._table, dim=sql.Literal(self.config.embedding_dim))
        )

        # HNSW index for fast similarity search
        await conn.execute(
            sql.SQL(
                """
                CREATE INDEX IF NOT EXISTS {index}
                ON {table}
                USING hnsw (embedding vector_cosine_ops)
                WITH (m = 16, ef_construction = 64)
                """
            ).format(
                index=sql.Identifier(f"{self.config.table_name}_embedding_idx"),
                table=self._table,
            )
        )

        # GIN index for full-text search
        await conn.execute(
            sql.SQL(
                """
                CREATE INDEX IF NOT EXISTS {index}
                ON {table}
                USING GIN (to_tsvector('english', content))
                """
            ).format(
                index=sql.Identifier(f"{self.config.table_name}_content_fts_idx"),
                table=self._table,
            )
        )

    @staticmethod
    def _to_documents(rows: list[tuple]) -> list[Document]:
        return [
            Document(
                id=row[0],
                content=row[1],
                metadata=row[2] or {},
                created_at=row[3],
                embedding=row[4],
            )
            for row in rows
        ]

    async def _fetch(self, query: sql.Composable, params: tuple) -> list[Document]:
        conn = await self.connect()
        cursor = await conn.execute(query, params)
        return self._to_documents(await cursor.fetchall())

    async def hybrid_search(self, query: str) -> StoreResult:
        """Similarity leg + keyword leg, de-duplicated by content."""
        query_embedding = await self._embeddings.embed(query)

        try:
            similar = await self._fetch(
                sql.SQL(
                    "SELECT {columns} FROM {table} ORDER BY embedding <=> %s LIMIT %s"
                ).format(columns=_COLUMNS, table=self._table),
                (query_embedding, self.config.similarity_k),
            )
            keyword = await self._fetch(
                sql.SQL(
                    """
                    SELECT {columns} FROM {table}
                    WHERE to_tsvector('english', content) @@ plainto_tsquery('english', %s)
                    ORDER BY ts_rank(to_tsvector('english', content),
                                     plainto_tsquery('english', %s)) DESC
                    LIMIT %s
                    """
                ).format(columns=_COLUMNS, table=self._table),
                (query, query, self.config.keyword_k),
            )
        except psycopg.Error as e:
            return _store_error("hybrid search", e)

        return Ok(_dedupe_by_content(similar + keyword))

    async def text_search(self, query: str, profile: str = "english") -> StoreResult:
        """Websearch-syntax full-text search with the given language profile."""
        try:
            docs = await self._fetch(
                sql.SQL(
                    """
                    SELECT {columns} FROM {table}
                    WHERE to_tsvector(%s::regconfig, content)
                          @@ websearch_to_tsquery(%s::regconfig, %s)
                    LIMIT %s
                    """
                ).format(columns=_COLUMNS, table=self._table),
                (profile, profile, query, self.config.text_search_limit),
            )
        except psycopg.Error as e:
            return _store_error("text search", e)
        return Ok(docs)

    async def insert(
        self,
        content: str,
        embedding: np.ndarray,
        metadata: dict[str, Any] | None = None,
    ) -> StoreResult:
        """Insert a document and return the stored row."""
        try:
            docs = await self._fetch(
                sql.SQL(
                    """
                    INSERT INTO {table} (content, embedding, metadata)
                    VALUES (%s, %s, %s)
                    RETURNING {columns}
                    """
                ).format(columns=_COLUMNS, table=self._table),
                (content, embedding, Jsonb(metadata or {})),
            )
        except psycopg.Error as e:
            return _store_error("insert", e)
        return Ok(docs)

    async def scan_all(self, table: str) -> StoreResult:
        """Return every row of a table."""
        try:
            docs = await self._fetch(
                sql.SQL("SELECT {columns} FROM {table} ORDER BY id").format(
                    columns=_COLUMNS, table=sql.Identifier(table)
                ),
                (),
            )
        except psycopg.Error as e:
            return _store_error("scan", e)
        return Ok(docs)


# ---------------------------------------------------------------------------
# IN-MEMORY STORE (Testing/Development)
# ---------------------------------------------------------------------------


_WORD = re.compile(r"\w+")


def _terms(text: str) -> set[str]:
    return {w.lower() for w in _WORD.findall(text)}


class InMemoryDocumentStore:
    """
    In-memory document store for development/testing.

    Implements the same interface as PgDocumentStore but doesn't require
    Postgres. Similarity uses cosine distance, the keyword leg ranks by
    term overlap, and text_search requires every term (a leading "-"
    excludes a term).
    """

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        config: DocumentStoreConfig | None = None,
    ):
        self.config = config or DocumentStoreConfig()
        self._embeddings = embeddings
        self._documents: list[Document] = []

    async def connect(self) -> None:
        """No-op for in-memory store."""

    async def close(self) -> None:
        """No-op for in-memory store."""

    async def create_schema(self) -> None:
        """No-op for in-memory store."""

    @staticmethod
    def _cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
        denom = np.linalg.norm(a) * np.linalg.norm(b)
        if denom == 0:
            return 0.0
        return float(np.dot(a, b) / denom)

    async def hybrid_search(self, query: str) -> StoreResult:
        query_emb = await self._embeddings.embed(query)

        scored = [
            (doc, self._cosine_similarity(query_emb, doc.embedding))
            for doc in self._documents
            if doc.embedding is not None
        ]
        scored.sort(key=lambda x: x[1], reverse=True)
        similar = [doc for doc, _ in scored[: self.config.similarity_k]]

        query_terms = _terms(query)
        keyword_scored = [
            (doc, len(query_terms & _terms(doc.content))) for doc in self._documents
        ]
        keyword = [
            doc
            for doc, overlap in sorted(keyword_scored, key=lambda x: x[1], reverse=True)
            if overlap > 0
        ][: self.config.keyword_k]

        return Ok(_dedupe_by_content(similar + keyword))

    async def text_search(self, query: str, profile: str = "english") -> StoreResult:
        words = query.split()
        required = _terms(" ".join(w for w in words if not w.startswith("-")))
        excluded = _terms(" ".join(w[1:] for w in words if w.startswith("-")))

        matches = []
        for doc in self._documents:
            terms = _terms(doc.content)
            if required and required <= terms and not excluded & terms:
                matches.append(doc)
        return Ok(matches[: self.config.text_search_limit])

    async def insert(
        self,
        content: str,
        embedding: np.ndarray,
        metadata: dict[str, Any] | None = None,
    ) -> StoreResult:
        doc = Document(
            id=len(self._documents) + 1,
            content=content,
            created_at=datetime.now(timezone.utc),
            embedding=embedding,
            metadata=dict(metadata or {}),
        )
        self._documents.append(doc)
        return Ok([doc])

    async def scan_all(self, table: str) -> StoreResult:
        if table != self.config.table_name:
            return Err(StoreFault(f'relation "{table}" does not exist'))
        return Ok(list(self._documents))


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_document_store(
    use_postgres: bool = False,
    embeddings: EmbeddingProvider | None = None,
    config: DocumentStoreConfig | None = None,
) -> PgDocumentStore | InMemoryDocumentStore:
    """
    Factory function to get the appropriate document store.

    Args:
        use_postgres: Use PostgreSQL store (default: False for dev)
        embeddings: Embedding provider (will create one if not provided)
        config: Store configuration (defaults from RagConfig if not provided)

    Returns:
        DocumentStore implementation
    """
    from contextual_rag.config import get_config

    rag_config = get_config()

    if embeddings is None:
        from contextual_rag.embeddings import get_embedding_provider

        embeddings = get_embedding_provider(
            use_mock=rag_config.use_mock_embeddings and not use_postgres
        )

    config = config or DocumentStoreConfig(
        connection_string=rag_config.database_url,
        table_name=rag_config.documents_table,
    )

    if use_postgres:
        return PgDocumentStore(config, embeddings)
    return InMemoryDocumentStore(embeddings, config)
