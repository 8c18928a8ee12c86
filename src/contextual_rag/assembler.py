"""
Contextual Response Assembler - retrieval + completion in one call.

answer(input):
    1. invalidate the document-index and completion-cache tags
    2. normalize the input (trim, line breaks → spaces)
    3. retrieve supporting documents
    4. generate an answer grounded in them
    5. return {answer, sources}

Faults from retrieval or completion propagate unchanged; no fallback
answer is ever synthesized.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from contextual_rag.cache import ANSWER_TAGS
from contextual_rag.core import CacheInvalidator, CompletionService, ValidationFault
from contextual_rag.observability import TracerProtocol, get_tracer
from contextual_rag.observability.attributes import RAG_CACHE_TAGS, RAG_SOURCE_COUNT
from contextual_rag.retrieval.orchestrator import RetrievalOrchestrator, normalize_query
from contextual_rag.retrieval.result import RetrievalResult

logger = logging.getLogger(__name__)

DEFAULT_INPUT_WORD_LIMIT = 1000  # ~1 token per word


@dataclass
class ContextualResponse:
    """Generated answer plus the documents it was grounded in."""

    answer: str
    sources: RetrievalResult

    def to_dict(self) -> dict:
        return {"answer": self.answer, "sources": self.sources.to_list()}


class ContextualResponseAssembler:
    """
    Ties the orchestrator to the completion service.

    Args:
        orchestrator: RetrievalOrchestrator supplying sources
        completion: CompletionService generating the answer
        cache: CacheInvalidator signalled on every call (optional)
        input_word_limit: Reject inputs longer than this many words
    """

    def __init__(
        self,
        orchestrator: RetrievalOrchestrator,
        completion: CompletionService,
        cache: CacheInvalidator | None = None,
        input_word_limit: int = DEFAULT_INPUT_WORD_LIMIT,
        tracer: TracerProtocol | None = None,
    ):
        self._orchestrator = orchestrator
        self._completion = completion
        self._cache = cache
        self.input_word_limit = input_word_limit
        self._tracer = tracer or get_tracer()

    async def answer(self, input: str, timeout: float | None = None) -> ContextualResponse:
        """
        Answer user input with retrieved context.

        Args:
            input: Raw user text
            timeout: Retrieval timeout in seconds (None = unbounded)
        """
        with self._tracer.start_span(
            "rag.answer", attributes={RAG_CACHE_TAGS: list(ANSWER_TAGS)}
        ) as span:
            if self._cache is not None:
                for tag in ANSWER_TAGS:
                    self._cache.invalidate(tag)

            text = normalize_query(input)
            if not text:
                raise ValidationFault("Input is empty")
            word_count = len(text.split())
            if word_count > self.input_word_limit:
                raise ValidationFault(
                    f"Input has {word_count} words, limit is {self.input_word_limit}"
                )

            sources = await self._orchestrator.retrieve(text, timeout=timeout)
            answer = await self._completion.complete_with_context(text, sources.to_list())

            span.set_attribute(RAG_SOURCE_COUNT, len(sources))

        logger.info(f"Answered input with {len(sources)} sources")
        return ContextualResponse(answer=answer, sources=sources)
