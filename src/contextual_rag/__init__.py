"""
contextual_rag - retrieval-augmented context assembly.

Finds a sufficient set of stored documents for a query by escalating
through hybrid, per-keyword and full-text search, then hands them to a
completion model to produce a grounded answer.
"""

from contextual_rag.assembler import ContextualResponse, ContextualResponseAssembler
from contextual_rag.ingestion import EmbeddingIngestion
from contextual_rag.keywords import KeywordExtractor
from contextual_rag.retrieval import RetrievalOrchestrator, RetrievalResult

__version__ = "0.1.0"

__all__ = [
    "ContextualResponse",
    "ContextualResponseAssembler",
    "EmbeddingIngestion",
    "KeywordExtractor",
    "RetrievalOrchestrator",
    "RetrievalResult",
]
