"""
Wiring - build every component from one RagConfig.

This is the only place concrete backends are chosen; everything else
receives its collaborators by injection.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from contextual_rag.assembler import ContextualResponseAssembler
from contextual_rag.cache import TagInvalidationBus
from contextual_rag.completion import get_completion_service
from contextual_rag.config import RagConfig, get_config
from contextual_rag.embeddings import get_embedding_provider
from contextual_rag.ingestion import EmbeddingIngestion
from contextual_rag.keywords import KeywordExtractor
from contextual_rag.retrieval import (
    DocumentStoreConfig,
    EmptyContentPolicy,
    InMemoryDocumentStore,
    PgDocumentStore,
    RetrievalOrchestrator,
    get_document_store,
    get_rate_limiter,
)


@dataclass
class Pipeline:
    """All components sharing one store, limiter and cache bus."""

    store: PgDocumentStore | InMemoryDocumentStore
    orchestrator: RetrievalOrchestrator
    ingestion: EmbeddingIngestion
    keywords: KeywordExtractor
    assembler: ContextualResponseAssembler
    cache: TagInvalidationBus = field(default_factory=TagInvalidationBus)

    async def close(self) -> None:
        await self.store.close()


def build_pipeline(config: RagConfig | None = None, use_mock: bool = False) -> Pipeline:
    """
    Build the pipeline.

    Args:
        config: Settings (default: loaded from environment)
        use_mock: In-memory store, hash embeddings and scripted completions
    """
    config = config or get_config()
    use_postgres = config.use_postgres and not use_mock

    embeddings = get_embedding_provider(
        use_mock=use_mock or (config.use_mock_embeddings and not use_postgres)
    )
    store = get_document_store(
        use_postgres=use_postgres,
        embeddings=embeddings,
        config=DocumentStoreConfig(
            connection_string=config.database_url,
            table_name=config.documents_table,
        ),
    )
    completion = get_completion_service(use_mock=use_mock)
    limiter = get_rate_limiter()
    cache = TagInvalidationBus()

    orchestrator = RetrievalOrchestrator(
        store,
        rate_limiter=limiter,
        min_results=config.min_results,
        empty_content_policy=EmptyContentPolicy(config.empty_content_policy),
        fail_fast=config.fail_fast,
    )

    return Pipeline(
        store=store,
        orchestrator=orchestrator,
        ingestion=EmbeddingIngestion(
            embeddings, store, rate_limiter=limiter, table=config.documents_table
        ),
        keywords=KeywordExtractor(completion),
        assembler=ContextualResponseAssembler(
            orchestrator,
            completion,
            cache=cache,
            input_word_limit=config.input_word_limit,
        ),
        cache=cache,
    )
