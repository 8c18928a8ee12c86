"""
Tagged result type for Document Store responses.

A store call either succeeds with a list of documents (possibly empty,
which is a normal "no results" outcome) or fails with a StoreFault.
Callers never inspect optional error/data fields ad hoc.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

from contextual_rag.core.errors import StoreFault

if TYPE_CHECKING:
    from contextual_rag.retrieval.document import Document


@dataclass(frozen=True)
class Ok:
    """Successful store response."""

    documents: list[Document] = field(default_factory=list)

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> list[Document]:
        return self.documents


@dataclass(frozen=True)
class Err:
    """Failed store response."""

    fault: StoreFault

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> list[Document]:
        raise self.fault


StoreResult = Union[Ok, Err]
