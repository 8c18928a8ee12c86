"""Completion module - LLM text generation behind the CompletionService protocol."""

from contextual_rag.completion.openai_completion import (
    OpenAICompletion,
    MockCompletion,
    get_completion_service,
)

__all__ = [
    "OpenAICompletion",
    "MockCompletion",
    "get_completion_service",
]
