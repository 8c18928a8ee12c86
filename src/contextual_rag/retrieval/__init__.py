"""
Retrieval module - tiered document retrieval for RAG.

This module provides:
- Document: The document model
- RetrievalResult: Ordered set of distinct contents
- DocumentStoreConfig, PgDocumentStore, InMemoryDocumentStore, get_document_store()
- RateLimiter: Process-wide gate on store calls
- RetrievalOrchestrator: Search-and-escalate across three tiers

ARCHITECTURE:
-------------
1. Protocol defines the contract (in core.protocols)
2. Multiple implementations (PgDocumentStore, InMemoryDocumentStore)
3. Factory function for instantiation
4. Test doubles for fast unit tests
"""

from contextual_rag.retrieval.document import Document
from contextual_rag.retrieval.result import RetrievalResult
from contextual_rag.retrieval.store import (
    DocumentStoreConfig,
    PgDocumentStore,
    InMemoryDocumentStore,
    get_document_store,
)
from contextual_rag.retrieval.rate_limiter import (
    RateLimiter,
    RateWindow,
    get_rate_limiter,
    reset_rate_limiter,
)
from contextual_rag.retrieval.orchestrator import (
    RetrievalOrchestrator,
    EmptyContentPolicy,
    normalize_query,
    query_tokens,
)

__all__ = [
    # Models
    "Document",
    "RetrievalResult",
    # Stores
    "DocumentStoreConfig",
    "PgDocumentStore",
    "InMemoryDocumentStore",
    "get_document_store",
    # Rate limiting
    "RateLimiter",
    "RateWindow",
    "get_rate_limiter",
    "reset_rate_limiter",
    # Orchestration
    "RetrievalOrchestrator",
    "EmptyContentPolicy",
    "normalize_query",
    "query_tokens",
]
