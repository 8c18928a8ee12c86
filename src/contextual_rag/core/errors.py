"""
Fault taxonomy for the retrieval pipeline.

Every fault raised by the core derives from RetrievalFault so callers
can recover at a single boundary. Adapters translate third-party
exceptions (psycopg, openai) into these types and chain the original.
"""

from __future__ import annotations


class RetrievalFault(Exception):
    """Base class for all faults raised by contextual_rag."""


class ValidationFault(RetrievalFault):
    """Malformed caller input (bad keyword count, empty content, ...)."""


class DataIntegrityFault(RetrievalFault):
    """A backend returned a document with empty content."""

    def __init__(self, message: str, token: str | None = None):
        super().__init__(message)
        self.token = token


class StoreFault(RetrievalFault):
    """A Document Store call failed."""


class ProviderFault(RetrievalFault):
    """An Embedding Provider call failed."""


class CompletionFault(RetrievalFault):
    """A Completion Service call failed."""


class IngestionFault(RetrievalFault):
    """Embed-then-insert failed for a piece of content."""

    def __init__(self, message: str, content: str):
        super().__init__(message)
        self.content = content


class Cancelled(RetrievalFault):
    """The caller aborted the operation (timeout or cancellation)."""
