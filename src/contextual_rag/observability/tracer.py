"""
Span API used by retrieval, ingestion and answer code.

Callers only ever see SpanProtocol/TracerProtocol. get_tracer() picks
the backing implementation once per process:

    PHOENIX_ENABLED unset/false      -> NoOpTracer
    opentelemetry not importable     -> NoOpTracer
    no SDK provider installed yet    -> NoOpTracer (call init_phoenix() first)
    otherwise                        -> OTelTracer over the global provider
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Protocol

logger = logging.getLogger(__name__)

_SCALARS = (str, bool, int, float)


class SpanProtocol(Protocol):
    def set_attribute(self, key: str, value: Any) -> None:
        ...

    def set_status(self, status: str, description: str | None = None) -> None:
        """status is "ok" or "error"."""
        ...

    def record_exception(self, exception: BaseException) -> None:
        ...


class TracerProtocol(Protocol):
    def start_span(self, name: str, attributes: dict[str, Any] | None = None) -> Any:
        """Context manager yielding a SpanProtocol."""
        ...


def mark_failed(span: SpanProtocol, error: BaseException) -> None:
    """Record a fault on a span and flag the span as errored."""
    span.record_exception(error)
    span.set_status("error", f"{type(error).__name__}: {error}")


def _attribute_value(value: Any) -> Any:
    """Coerce a value into something OpenTelemetry accepts, or None to drop it."""
    if value is None or isinstance(value, _SCALARS):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        return [v if isinstance(v, _SCALARS) else str(v) for v in value]
    return str(value)


def _attributes(attributes: Mapping[str, Any] | None) -> dict[str, Any]:
    cleaned = {}
    for key, value in (attributes or {}).items():
        value = _attribute_value(value)
        if value is not None:
            cleaned[key] = value
    return cleaned


# ---------------------------------------------------------------------------
# NO-OP (tracing disabled)
# ---------------------------------------------------------------------------


class NoOpSpan:
    def set_attribute(self, key: str, value: Any) -> None:
        pass

    def set_status(self, status: str, description: str | None = None) -> None:
        pass

    def record_exception(self, exception: BaseException) -> None:
        pass


class NoOpTracer:
    @contextmanager
    def start_span(self, name: str, attributes: dict[str, Any] | None = None) -> Iterator[NoOpSpan]:
        yield NoOpSpan()


# ---------------------------------------------------------------------------
# OPENTELEMETRY
# ---------------------------------------------------------------------------


class OTelSpan:
    """Adapts an OpenTelemetry span to SpanProtocol."""

    def __init__(self, span: Any):
        self._span = span

    def set_attribute(self, key: str, value: Any) -> None:
        value = _attribute_value(value)
        if value is not None:
            self._span.set_attribute(key, value)

    def set_status(self, status: str, description: str | None = None) -> None:
        from opentelemetry.trace import Status, StatusCode

        if status == "ok":
            self._span.set_status(Status(StatusCode.OK))
        else:
            self._span.set_status(Status(StatusCode.ERROR, description))

    def record_exception(self, exception: BaseException) -> None:
        self._span.record_exception(exception)


class OTelTracer:
    """Adapts an OpenTelemetry tracer to TracerProtocol."""

    def __init__(self, tracer: Any):
        self._tracer = tracer

    @contextmanager
    def start_span(self, name: str, attributes: dict[str, Any] | None = None) -> Iterator[OTelSpan]:
        # Faults are recorded explicitly via mark_failed, not on the way out
        with self._tracer.start_as_current_span(
            name,
            attributes=_attributes(attributes),
            record_exception=False,
            set_status_on_exception=True,
        ) as span:
            yield OTelSpan(span)


def _build_tracer(scope: str) -> TracerProtocol:
    try:
        from opentelemetry import trace
        from opentelemetry.sdk.trace import TracerProvider
    except ImportError:
        logger.debug("opentelemetry not installed, spans disabled")
        return NoOpTracer()

    if not isinstance(trace.get_tracer_provider(), TracerProvider):
        logger.debug("No tracer provider installed, spans disabled")
        return NoOpTracer()

    return OTelTracer(trace.get_tracer(scope))


_tracer: TracerProtocol | None = None


def get_tracer(scope: str | None = None) -> TracerProtocol:
    """
    Get the process tracer.

    Args:
        scope: Instrumentation scope name (default: the Phoenix project
            name). Only honored on the first call.
    """
    global _tracer
    if _tracer is None:
        from contextual_rag.observability.config import get_config

        config = get_config()
        if config.enabled:
            _tracer = _build_tracer(scope or config.project_name)
        else:
            _tracer = NoOpTracer()
    return _tracer


def reset_tracer() -> None:
    """Forget the process tracer (tests, and init_phoenix after installing a provider)."""
    global _tracer
    _tracer = None
