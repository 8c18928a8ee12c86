"""
Document model for the retrieval system.

Single responsibility: Define the structure of documents
held by document stores.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import numpy as np


@dataclass
class Document:
    """
    A stored document.

    Content must be non-empty once it enters the pipeline; an empty
    content coming back from a backend is a data-integrity fault, not
    an empty result.
    """
    content: str
    id: int | str | None = None
    created_at: datetime | None = None
    embedding: np.ndarray | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "content": self.content,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "metadata": self.metadata,
        }
