"""
Span attribute keys for retrieval, ingestion and answer spans.

All keys live in the rag.* namespace.
"""

from __future__ import annotations

from typing import Any

# Retrieval
RAG_QUERY = "rag.query"  # only when capture_content is enabled
RAG_QUERY_LENGTH = "rag.query.length"
RAG_MIN_RESULTS = "rag.min_results"
RAG_RESULT_COUNT = "rag.result_count"
RAG_TIERS_RUN = "rag.tiers_run"

# Tier level
RAG_TIER_NAME = "rag.tier.name"  # "hybrid", "keyword", "fulltext"
RAG_TIER_RESULT_COUNT = "rag.tier.result_count"

# Ingestion
RAG_INGEST_CONTENT_LENGTH = "rag.ingest.content_length"

# Answer
RAG_SOURCE_COUNT = "rag.answer.source_count"
RAG_CACHE_TAGS = "rag.answer.cache_tags"


def retrieval_attributes(query: str, min_results: int, capture_content: bool = False) -> dict[str, Any]:
    """Attributes for a rag.retrieve span."""
    attrs: dict[str, Any] = {
        RAG_QUERY_LENGTH: len(query),
        RAG_MIN_RESULTS: min_results,
    }
    if capture_content:
        attrs[RAG_QUERY] = query
    return attrs


def tier_attributes(tier: str) -> dict[str, Any]:
    """Attributes for a rag.tier.<name> span."""
    return {RAG_TIER_NAME: tier}
