"""
Shared test doubles.

ScriptedStore is a DocumentStore whose responses are scripted per query
and which records every call, so tests can assert exactly which tiers
ran and how many store calls were made.
"""

from __future__ import annotations

import asyncio

import pytest

from contextual_rag.core import Err, Ok, StoreResult
from contextual_rag.observability import reset_config as reset_tracing_config
from contextual_rag.observability import reset_tracer
from contextual_rag.retrieval.document import Document
from contextual_rag.retrieval.rate_limiter import RateLimiter


def _as_result(value) -> StoreResult:
    if isinstance(value, (Ok, Err)):
        return value
    return Ok([Document(id=i, content=content) for i, content in enumerate(value)])


class ScriptedStore:
    """
    DocumentStore double.

    hybrid / text map a query to a list of contents, an Ok, or an Err.
    Unknown queries return no documents. delays maps a query to seconds
    slept before answering.
    """

    def __init__(self, hybrid=None, text=None, delays=None):
        self.hybrid = hybrid or {}
        self.text = text or {}
        self.delays = delays or {}
        self.hybrid_calls: list[str] = []
        self.text_calls: list[tuple[str, str]] = []
        self.active = 0
        self.max_active = 0
        self.cancelled: list[str] = []

    async def _wait(self, query: str) -> None:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(query, 0))
        except asyncio.CancelledError:
            self.cancelled.append(query)
            raise
        finally:
            self.active -= 1

    async def hybrid_search(self, query: str) -> StoreResult:
        self.hybrid_calls.append(query)
        await self._wait(query)
        return _as_result(self.hybrid.get(query, []))

    async def text_search(self, query: str, profile: str = "english") -> StoreResult:
        self.text_calls.append((query, profile))
        await self._wait(query)
        return _as_result(self.text.get(query, []))

    async def insert(self, content, embedding, metadata=None) -> StoreResult:
        return Ok([Document(id=1, content=content, embedding=embedding)])

    async def scan_all(self, table: str) -> StoreResult:
        return Ok([])

    @property
    def total_calls(self) -> int:
        return len(self.hybrid_calls) + len(self.text_calls)


class CountingLimiter(RateLimiter):
    """RateLimiter that never blocks in practice and counts acquisitions."""

    def __init__(self):
        super().__init__(window_duration=60, max_per_window=10_000)
        self.acquired = 0

    async def acquire(self) -> None:
        await super().acquire()
        self.acquired += 1


@pytest.fixture
def limiter() -> CountingLimiter:
    return CountingLimiter()


@pytest.fixture(autouse=True)
def _tracing_disabled(monkeypatch):
    """Every test runs with the no-op tracer."""
    monkeypatch.delenv("PHOENIX_ENABLED", raising=False)
    reset_tracing_config()
    reset_tracer()
    yield
    reset_tracing_config()
    reset_tracer()
