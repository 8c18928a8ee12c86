"""
Retrieval Orchestrator - tiered search-and-escalate.

Given a query, collect at least min_results distinct document contents
by escalating through progressively looser searches:

    1. hybrid   - one hybrid search over the whole query
    2. keyword  - one hybrid search per each of the first three tokens,
                  run concurrently and joined before the count is read
    3. fulltext - one websearch-syntax full-text search (english profile)

A tier runs only while the distinct count is still below min_results,
so a call makes at most 1 + 3 + 1 store calls. Coming up short after
tier 3 is a normal outcome, not an error. Every store call first waits
on the shared rate limiter.

Each tier is also a public coroutine (hybrid_tier, keyword_tier,
fulltext_tier) so callers can run tiers independently and recover at
tier boundaries.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable

from contextual_rag.core import (
    Cancelled,
    DataIntegrityFault,
    DocumentStore,
    RetrievalFault,
    ValidationFault,
)
from contextual_rag.observability import TracerProtocol, get_tracer, mark_failed
from contextual_rag.observability import get_config as get_tracing_config
from contextual_rag.observability.attributes import (
    RAG_RESULT_COUNT,
    RAG_TIER_RESULT_COUNT,
    RAG_TIERS_RUN,
    retrieval_attributes,
    tier_attributes,
)
from contextual_rag.retrieval.document import Document
from contextual_rag.retrieval.rate_limiter import RateLimiter, get_rate_limiter
from contextual_rag.retrieval.result import RetrievalResult

logger = logging.getLogger(__name__)

DEFAULT_MIN_RESULTS = 3
MAX_KEYWORD_TOKENS = 3
FULLTEXT_PROFILE = "english"

TIER_HYBRID = "hybrid"
TIER_KEYWORD = "keyword"
TIER_FULLTEXT = "fulltext"


class EmptyContentPolicy(str, Enum):
    """What to do when a backend returns a document with empty content."""

    ABORT = "abort"  # raise DataIntegrityFault, aborting the tier
    SKIP = "skip"  # log and drop just that document


def normalize_query(text: str) -> str:
    """Trim and turn every line break into a single space."""
    return text.replace("\r\n", "\n").replace("\r", "\n").strip().replace("\n", " ")


def query_tokens(query: str, limit: int = MAX_KEYWORD_TOKENS) -> list[str]:
    """First `limit` whitespace-delimited tokens of a normalized query."""
    return query.split()[:limit]


class RetrievalOrchestrator:
    """
    Runs the tiered retrieval algorithm against an injected DocumentStore.

    Args:
        store: DocumentStore implementation (PgDocumentStore, InMemoryDocumentStore, ...)
        rate_limiter: Limiter gating every store call (default: process-wide limiter)
        min_results: Distinct documents wanted before escalation stops
        empty_content_policy: ABORT raises DataIntegrityFault, SKIP drops the document
        fail_fast: If False, a faulting tier contributes nothing and escalation continues
        tracer: Tracer for spans (default: global tracer)
    """

    def __init__(
        self,
        store: DocumentStore,
        rate_limiter: RateLimiter | None = None,
        min_results: int = DEFAULT_MIN_RESULTS,
        empty_content_policy: EmptyContentPolicy = EmptyContentPolicy.ABORT,
        fail_fast: bool = True,
        tracer: TracerProtocol | None = None,
    ):
        _check_min_results(min_results)
        self._store = store
        self._limiter = rate_limiter or get_rate_limiter()
        self.min_results = min_results
        self.empty_content_policy = EmptyContentPolicy(empty_content_policy)
        self.fail_fast = fail_fast
        self._tracer = tracer or get_tracer()

    # -----------------------------------------------------------------------
    # PUBLIC API
    # -----------------------------------------------------------------------

    async def retrieve(
        self,
        query: str,
        min_results: int | None = None,
        timeout: float | None = None,
    ) -> RetrievalResult:
        """
        Collect distinct document contents for a query.

        Args:
            query: Raw query text; line breaks are normalized to spaces
            min_results: Override the orchestrator's threshold (0 disables escalation)
            timeout: Seconds before in-flight calls are cancelled and Cancelled is raised

        Returns:
            RetrievalResult ordered tier 1, then tier 2, then tier 3.
            It may hold fewer than min_results contents.
        """
        min_results = self.min_results if min_results is None else min_results
        _check_min_results(min_results)

        normalized = normalize_query(query)
        if not normalized:
            raise ValidationFault("Query is empty")

        if timeout is None:
            return await self._retrieve(normalized, min_results)

        # Deadline is read from task state; a backend TimeoutError propagates
        task = asyncio.create_task(self._retrieve(normalized, min_results))
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout)
        except asyncio.CancelledError:
            await _cancel_and_wait(task)
            raise

        if not done:
            await _cancel_and_wait(task)
            raise Cancelled(f"Retrieval cancelled after {timeout}s")
        return task.result()

    async def hybrid_tier(self, query: str) -> list[str]:
        """Tier 1: one hybrid search over the whole query."""
        query = normalize_query(query)
        docs = await self._hybrid_search(query)
        logger.info(f"Found {len(docs)} relevant docs using hybrid search")
        return self._contents(docs, TIER_HYBRID)

    async def keyword_tier(self, query: str) -> list[str]:
        """
        Tier 2: one hybrid search per each of the first three tokens.

        All searches run concurrently and are joined before anything is
        merged. If one fails, the others are cancelled and the fault
        propagates, so the tier contributes nothing.
        """
        tokens = query_tokens(normalize_query(query))
        tasks = [asyncio.create_task(self._token_search(token)) for token in tokens]

        try:
            per_token = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return [content for contents in per_token for content in contents]

    async def fulltext_tier(self, query: str) -> list[str]:
        """Tier 3: websearch-syntax full-text search with the english profile."""
        query = normalize_query(query)
        await self._limiter.acquire()
        docs = (await self._store.text_search(query, profile=FULLTEXT_PROFILE)).unwrap()
        logger.info(f"Found {len(docs)} similar docs using full-text search")
        return self._contents(docs, TIER_FULLTEXT)

    # -----------------------------------------------------------------------
    # INTERNALS
    # -----------------------------------------------------------------------

    async def _retrieve(self, query: str, min_results: int) -> RetrievalResult:
        result = RetrievalResult()
        tiers: list[tuple[str, Callable[[str], Awaitable[list[str]]]]] = [
            (TIER_HYBRID, self.hybrid_tier),
            (TIER_KEYWORD, self.keyword_tier),
            (TIER_FULLTEXT, self.fulltext_tier),
        ]

        attributes = retrieval_attributes(
            query, min_results, capture_content=get_tracing_config().capture_content
        )
        with self._tracer.start_span("rag.retrieve", attributes=attributes) as span:
            tiers_run = 0
            for name, run_tier in tiers:
                if tiers_run > 0 and len(result) >= min_results:
                    break
                tiers_run += 1
                added = result.extend(await self._run_tier(name, run_tier, query))
                logger.debug(f"Tier {name} added {added} new docs, {len(result)} total")

            span.set_attribute(RAG_TIERS_RUN, tiers_run)
            span.set_attribute(RAG_RESULT_COUNT, len(result))

        if len(result) < min_results:
            logger.info(f"Returning {len(result)} docs, fewer than the {min_results} wanted")
        return result

    async def _run_tier(
        self,
        name: str,
        run_tier: Callable[[str], Awaitable[list[str]]],
        query: str,
    ) -> list[str]:
        with self._tracer.start_span(f"rag.tier.{name}", attributes=tier_attributes(name)) as span:
            try:
                contents = await run_tier(query)
            except Cancelled:
                raise
            except RetrievalFault as e:
                mark_failed(span, e)
                if self.fail_fast:
                    raise
                logger.warning(f"Tier {name} failed, continuing without it: {e}")
                return []

            span.set_attribute(RAG_TIER_RESULT_COUNT, len(contents))
            return contents

    async def _hybrid_search(self, query: str) -> list[Document]:
        await self._limiter.acquire()
        return (await self._store.hybrid_search(query)).unwrap()

    async def _token_search(self, token: str) -> list[str]:
        docs = await self._hybrid_search(token)
        logger.info(f"Found {len(docs)} relevant docs for token: {token}")
        return self._contents(docs, TIER_KEYWORD, token=token)

    def _contents(self, docs: list[Document], tier: str, token: str | None = None) -> list[str]:
        contents = []
        for doc in docs:
            if doc.content:
                contents.append(doc.content)
                continue

            where = f" for token {token!r}" if token is not None else ""
            if self.empty_content_policy is EmptyContentPolicy.SKIP:
                logger.warning(f"Skipping document {doc.id!r} with empty content from {tier} search{where}")
                continue
            raise DataIntegrityFault(
                f"{tier} search returned document {doc.id!r} with empty content{where}",
                token=token,
            )
        return contents


async def _cancel_and_wait(task: asyncio.Task) -> None:
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)


def _check_min_results(min_results: int) -> None:
    if min_results < 0:
        raise ValidationFault(f"min_results must be >= 0, got {min_results}")
