"""
Completion Service - text generation for keyword extraction and answers.

Production calls OpenAI chat completions; MockCompletion returns
scripted replies and records every call for assertions.
"""

from __future__ import annotations

import logging
import os

import openai
from openai import AsyncOpenAI

from contextual_rag.core import CompletionFault, CompletionService
from contextual_rag.prompts import ANSWER_SYSTEM_PROMPT, format_answer_user_prompt

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_CHARS = 24_000


class OpenAICompletion:
    """OpenAI chat-completion backed CompletionService."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: str | None = None,
        temperature: float = 0.2,
        max_context_chars: int = DEFAULT_CONTEXT_CHARS,
    ):
        self.model = model
        self.temperature = temperature
        self.max_context_chars = max_context_chars
        try:
            self._client = AsyncOpenAI(api_key=api_key or os.environ.get("OPENAI_API_KEY"))
        except openai.OpenAIError as e:
            raise CompletionFault(f"Cannot create completion client: {e}") from e

    async def _chat(self, messages: list[dict[str, str]]) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
            )
        except openai.OpenAIError as e:
            raise CompletionFault(f"Completion request failed: {e}") from e

        content = response.choices[0].message.content
        if content is None:
            raise CompletionFault("Model returned no content")
        return content

    async def complete(self, prompt: str) -> str:
        """Generate text for a rendered prompt."""
        return await self._chat([{"role": "user", "content": prompt}])

    async def complete_with_context(self, query: str, documents: list[str]) -> str:
        """Answer a query grounded in the given documents."""
        logger.info(f"Generating answer from {len(documents)} documents")
        return await self._chat(
            [
                {"role": "system", "content": ANSWER_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": format_answer_user_prompt(query, documents, self.max_context_chars),
                },
            ]
        )


class MockCompletion:
    """
    Mock completion service for testing without API calls.

    complete() returns the next scripted reply (the last one repeats).
    Without scripted replies it echoes up to five distinct words from the
    last line of the prompt, comma separated, so keyword extraction works
    offline. complete_with_context() returns answer_template filled in.
    """

    def __init__(
        self,
        replies: list[str] | None = None,
        answer_template: str = "Answer to {query!r} from {count} documents",
    ):
        self._replies = list(replies or [])
        self.answer_template = answer_template
        self.prompts: list[str] = []
        self.context_calls: list[tuple[str, list[str]]] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._replies:
            return _echo_words(prompt)
        if len(self._replies) > 1:
            return self._replies.pop(0)
        return self._replies[0]

    async def complete_with_context(self, query: str, documents: list[str]) -> str:
        self.context_calls.append((query, list(documents)))
        return self.answer_template.format(query=query, count=len(documents))


def _echo_words(prompt: str, limit: int = 5) -> str:
    last_line = prompt.strip().splitlines()[-1] if prompt.strip() else ""
    words = []
    for word in last_line.lower().split():
        word = word.strip(".,;:!?\"'()")
        if len(word) > 3 and word not in words:
            words.append(word)
    return ", ".join(words[:limit]) or "mock"


def get_completion_service(use_mock: bool = False) -> CompletionService:
    """
    Factory function to get the appropriate completion service.

    Args:
        use_mock: If True, return MockCompletion (for testing)
    """
    from contextual_rag.config import get_config

    if use_mock:
        return MockCompletion()
    return OpenAICompletion(model=get_config().completion_model)
