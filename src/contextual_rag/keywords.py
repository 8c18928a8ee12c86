"""
Keyword Extraction - ask the completion service for a text's keywords.

Reusable capability; the retrieval tiers tokenize the query directly
and do not call this.
"""

from __future__ import annotations

import logging

from contextual_rag.core import CompletionService, ValidationFault
from contextual_rag.prompts import format_keywords_prompt

logger = logging.getLogger(__name__)

KEYWORD_SEPARATOR = ", "
MIN_KEYWORDS = 1
MAX_KEYWORDS = 10


def parse_keywords(response: str) -> list[str]:
    """
    Split a completion response into keywords.

    Raises:
        ValidationFault: fewer than 1 or more than 10 keywords
    """
    keywords = [k.strip() for k in response.strip().split(KEYWORD_SEPARATOR)]
    keywords = [k for k in keywords if k]

    if not MIN_KEYWORDS <= len(keywords) <= MAX_KEYWORDS:
        raise ValidationFault(
            f"Invalid keywords: expected {MIN_KEYWORDS}-{MAX_KEYWORDS}, got {len(keywords)}"
        )
    return keywords


class KeywordExtractor:
    """Extracts 1-10 ordered keywords from text via an injected CompletionService."""

    def __init__(self, completion: CompletionService):
        self._completion = completion

    async def extract_keywords(self, text: str) -> list[str]:
        response = await self._completion.complete(format_keywords_prompt(text))
        keywords = parse_keywords(response)
        logger.debug(f"Extracted {len(keywords)} keywords")
        return keywords
