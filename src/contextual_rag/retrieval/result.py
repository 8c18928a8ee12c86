"""
RetrievalResult - ordered set of distinct document contents.

Identity is exact string equality. Insertion order is preserved, so
contents from earlier tiers always come before later ones.
"""

from __future__ import annotations

from typing import Iterable, Iterator


class RetrievalResult:
    """An ordered-by-arrival set of distinct document contents."""

    def __init__(self, contents: Iterable[str] = ()):
        # dict keeps insertion order and gives O(1) membership
        self._contents: dict[str, None] = {}
        self.extend(contents)

    def add(self, content: str) -> bool:
        """Add content; return True if it was not already present."""
        if content in self._contents:
            return False
        self._contents[content] = None
        return True

    def extend(self, contents: Iterable[str]) -> int:
        """Add many contents; return how many were new."""
        return sum(1 for content in contents if self.add(content))

    def __len__(self) -> int:
        return len(self._contents)

    def __iter__(self) -> Iterator[str]:
        return iter(self._contents)

    def __contains__(self, content: object) -> bool:
        return content in self._contents

    def __getitem__(self, index: int) -> str:
        return list(self._contents)[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RetrievalResult):
            return list(self) == list(other)
        if isinstance(other, list):
            return list(self) == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"RetrievalResult({list(self)!r})"

    def to_list(self) -> list[str]:
        return list(self._contents)
