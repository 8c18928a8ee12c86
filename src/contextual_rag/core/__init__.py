"""
Core module - shared protocols, faults and result types.

USAGE:
------
from contextual_rag.core import DocumentStore, Ok, Err, StoreFault

class MyStore:
    '''Implements DocumentStore protocol.'''
    ...
"""

from contextual_rag.core.errors import (
    RetrievalFault,
    ValidationFault,
    DataIntegrityFault,
    StoreFault,
    ProviderFault,
    CompletionFault,
    IngestionFault,
    Cancelled,
)
from contextual_rag.core.result import Ok, Err, StoreResult
from contextual_rag.core.protocols import (
    EmbeddingProvider,
    DocumentStore,
    CompletionService,
    CacheInvalidator,
)

__all__ = [
    # Faults
    "RetrievalFault",
    "ValidationFault",
    "DataIntegrityFault",
    "StoreFault",
    "ProviderFault",
    "CompletionFault",
    "IngestionFault",
    "Cancelled",
    # Results
    "Ok",
    "Err",
    "StoreResult",
    # Protocols
    "EmbeddingProvider",
    "DocumentStore",
    "CompletionService",
    "CacheInvalidator",
]
