"""
Cache invalidation signal exposed to external cache layers.

answer() marks two logical tags stale on every call; cache layers
subscribe to the tags they hold entries under.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from typing import Callable

logger = logging.getLogger(__name__)

DOCUMENT_INDEX_TAG = "document-index"
COMPLETION_CACHE_TAG = "completion-cache"
ANSWER_TAGS = (DOCUMENT_INDEX_TAG, COMPLETION_CACHE_TAG)


class TagInvalidationBus:
    """
    Fans invalidate(tag) out to subscribed callbacks.

    A failing subscriber is logged and does not stop delivery to the
    others or the caller's request.
    """

    def __init__(self):
        self._subscribers: dict[str, list[Callable[[str], None]]] = defaultdict(list)
        self.counts: Counter[str] = Counter()

    def subscribe(self, tag: str, callback: Callable[[str], None]) -> None:
        """Call callback(tag) whenever tag is invalidated."""
        self._subscribers[tag].append(callback)

    def unsubscribe(self, tag: str, callback: Callable[[str], None]) -> None:
        if callback in self._subscribers.get(tag, []):
            self._subscribers[tag].remove(callback)

    def invalidate(self, tag: str) -> None:
        self.counts[tag] += 1
        for callback in list(self._subscribers.get(tag, [])):
            try:
                callback(tag)
            except Exception as e:
                logger.warning(f"Cache subscriber for tag {tag!r} failed: {e}")


class RecordingInvalidator:
    """Test double that records invalidated tags in order."""

    def __init__(self):
        self.tags: list[str] = []

    def invalidate(self, tag: str) -> None:
        self.tags.append(tag)
