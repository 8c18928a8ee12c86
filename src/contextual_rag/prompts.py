"""
Prompt templates - externalized for versioning and testing.

Formatting functions are pure: given the same inputs they always
return the same prompt, so they can be tested without API calls.
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# KEYWORD EXTRACTION
# ---------------------------------------------------------------------------
# The response is split on ", " so the template insists on exactly that
# separator and nothing else in the reply.

KEYWORDS_PROMPT = """Extract the most important keywords from the text below.

RULES:
- Return between 1 and 10 keywords, most important first
- Separate keywords with a comma followed by a single space
- Return ONLY the keywords, no numbering, quotes or explanation

TEXT:
{text}"""


def format_keywords_prompt(text: str) -> str:
    """Render the keyword extraction prompt for a piece of text."""
    return KEYWORDS_PROMPT.format(text=text)


# ---------------------------------------------------------------------------
# CONTEXTUAL ANSWER
# ---------------------------------------------------------------------------

ANSWER_SYSTEM_PROMPT = """You are a helpful assistant that answers questions using the provided documents.

CONSTRAINTS:
1. Prefer information from the documents over prior knowledge
2. If the documents do not contain the answer, say so plainly
3. Never invent document content or sources
4. Keep answers concise and directly responsive to the question"""

NO_DOCUMENTS = "No relevant documents were found."


def format_context(documents: list[str], max_chars: int | None = None) -> str:
    """
    Number documents into a context block.

    Documents past max_chars of accumulated context are dropped whole,
    never cut mid-document. The first document is always kept.
    """
    if not documents:
        return NO_DOCUMENTS

    parts: list[str] = []
    used = 0
    for i, doc in enumerate(documents, 1):
        part = f"[{i}] {doc}"
        if parts and max_chars is not None and used + len(part) > max_chars:
            break
        parts.append(part)
        used += len(part)
    return "\n\n".join(parts)


def format_answer_user_prompt(query: str, documents: list[str], max_chars: int | None = None) -> str:
    """Format the user message for a document-grounded answer."""
    return f"""DOCUMENTS:
{format_context(documents, max_chars)}

QUESTION: {query}"""
