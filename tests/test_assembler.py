"""
Unit Tests for the Contextual Response Assembler

Tests input normalization, cache invalidation and fault propagation,
then runs the whole answer path against the in-memory store.

STAFF ENGINEER PATTERNS:
------------------------
1. Mock the orchestrator to isolate the assembler's own behavior
2. Assert what reached each collaborator, not just the return value
3. One end-to-end test with real in-process components
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from contextual_rag.assembler import ContextualResponse, ContextualResponseAssembler
from contextual_rag.cache import RecordingInvalidator
from contextual_rag.completion import MockCompletion
from contextual_rag.core import CompletionFault, StoreFault, ValidationFault
from contextual_rag.embeddings import MockEmbeddings
from contextual_rag.ingestion import EmbeddingIngestion
from contextual_rag.retrieval.orchestrator import RetrievalOrchestrator
from contextual_rag.retrieval.result import RetrievalResult
from contextual_rag.retrieval.store import InMemoryDocumentStore


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def orchestrator():
    mock = MagicMock()
    mock.retrieve = AsyncMock(return_value=RetrievalResult(["doc one", "doc two"]))
    return mock


@pytest.fixture
def completion():
    return MockCompletion()


@pytest.fixture
def cache():
    return RecordingInvalidator()


@pytest.fixture
def assembler(orchestrator, completion, cache):
    return ContextualResponseAssembler(orchestrator, completion, cache=cache)


# ---------------------------------------------------------------------------
# ANSWER
# ---------------------------------------------------------------------------


class TestAnswer:
    @pytest.mark.asyncio
    async def test_returns_answer_and_sources(self, assembler):
        response = await assembler.answer("what is in the docs")

        assert isinstance(response, ContextualResponse)
        assert response.answer == "Answer to 'what is in the docs' from 2 documents"
        assert response.sources == ["doc one", "doc two"]

    @pytest.mark.asyncio
    async def test_normalized_input_reaches_both_collaborators(
        self, assembler, orchestrator, completion
    ):
        await assembler.answer("line1\nline2")

        orchestrator.retrieve.assert_awaited_once_with("line1 line2", timeout=None)
        assert completion.context_calls == [("line1 line2", ["doc one", "doc two"])]

    @pytest.mark.asyncio
    async def test_invalidates_tags_before_retrieval(self, assembler, orchestrator, cache):
        seen_at_retrieval: list[str] = []

        async def retrieve(query, timeout=None):
            seen_at_retrieval.extend(cache.tags)
            return RetrievalResult()

        orchestrator.retrieve.side_effect = retrieve

        await assembler.answer("question")

        assert seen_at_retrieval == ["document-index", "completion-cache"]

    @pytest.mark.asyncio
    async def test_timeout_forwarded(self, assembler, orchestrator):
        await assembler.answer("question", timeout=2.5)

        orchestrator.retrieve.assert_awaited_once_with("question", timeout=2.5)

    @pytest.mark.asyncio
    async def test_works_without_cache(self, orchestrator, completion):
        assembler = ContextualResponseAssembler(orchestrator, completion)

        response = await assembler.answer("question")

        assert len(response.sources) == 2

    def test_to_dict(self):
        response = ContextualResponse(answer="yes", sources=RetrievalResult(["a"]))

        assert response.to_dict() == {"answer": "yes", "sources": ["a"]}


# ---------------------------------------------------------------------------
# VALIDATION AND FAULTS
# ---------------------------------------------------------------------------


class TestFaults:
    @pytest.mark.asyncio
    async def test_empty_input_rejected(self, assembler, orchestrator):
        with pytest.raises(ValidationFault):
            await assembler.answer("\n \n")

        orchestrator.retrieve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_word_limit_enforced(self, orchestrator, completion):
        assembler = ContextualResponseAssembler(orchestrator, completion, input_word_limit=5)

        with pytest.raises(ValidationFault, match="limit is 5"):
            await assembler.answer("one two three four five six")

        orchestrator.retrieve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retrieval_fault_propagates_without_completion(
        self, assembler, orchestrator, completion
    ):
        orchestrator.retrieve.side_effect = StoreFault("database unreachable")

        with pytest.raises(StoreFault):
            await assembler.answer("question")

        assert completion.context_calls == []

    @pytest.mark.asyncio
    async def test_completion_fault_propagates(self, orchestrator):
        completion = MagicMock()
        completion.complete_with_context = AsyncMock(side_effect=CompletionFault("timeout"))
        assembler = ContextualResponseAssembler(orchestrator, completion)

        with pytest.raises(CompletionFault):
            await assembler.answer("question")


# ---------------------------------------------------------------------------
# END TO END
# ---------------------------------------------------------------------------


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_ingest_then_answer(self, limiter):
        embeddings = MockEmbeddings(dimensions=64)
        store = InMemoryDocumentStore(embeddings)
        ingestion = EmbeddingIngestion(embeddings, store, rate_limiter=limiter)
        for text in [
            "Sourdough needs an active starter",
            "Starter is fed flour and water daily",
            "Pizza dough rests overnight",
        ]:
            await ingestion.store_embedding(text)

        completion = MockCompletion()
        assembler = ContextualResponseAssembler(
            RetrievalOrchestrator(store, rate_limiter=limiter),
            completion,
            cache=RecordingInvalidator(),
        )

        response = await assembler.answer("sourdough\nstarter")

        assert "Sourdough needs an active starter" in response.sources
        assert len(response.sources) >= 2
        query, documents = completion.context_calls[0]
        assert query == "sourdough starter"
        assert documents == response.sources.to_list()
