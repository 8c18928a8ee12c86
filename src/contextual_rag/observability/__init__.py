"""
Observability - Phoenix traces for retrieval, ingestion and answers.

Spans emitted by the pipeline:

    rag.retrieve             one per retrieve() call
      rag.tier.hybrid        one per tier that actually ran
      rag.tier.keyword
      rag.tier.fulltext
    rag.ingest               one per store_embedding() call
    rag.answer               one per answer() call, wraps rag.retrieve

OpenAI embedding and chat calls appear as child spans through the
OpenInference instrumentor. Query text is only attached when
PHOENIX_CAPTURE_CONTENT is set.

Startup:
    from contextual_rag.observability import init_phoenix
    init_phoenix()        # no-op unless PHOENIX_ENABLED=true
"""

from __future__ import annotations

import logging

from contextual_rag.observability.config import (
    PhoenixConfig,
    get_config,
    reset_config,
)
from contextual_rag.observability.tracer import (
    NoOpSpan,
    NoOpTracer,
    SpanProtocol,
    TracerProtocol,
    get_tracer,
    mark_failed,
    reset_tracer,
)

logger = logging.getLogger(__name__)

_provider = None


def init_phoenix(config: PhoenixConfig | None = None) -> bool:
    """
    Install a Phoenix tracer provider and instrument the OpenAI client.

    Returns:
        True when spans will be exported, False when tracing is disabled
        or the observability extra is not installed.
    """
    global _provider
    if _provider is not None:
        return True

    config = config or get_config()
    if not config.enabled:
        logger.debug("Phoenix observability disabled")
        return False

    try:
        from phoenix.otel import register
    except ImportError as e:
        logger.warning(f"Phoenix not installed, observability disabled: {e}")
        return False

    from contextual_rag.observability.instrumentation import register_instrumentors

    provider = register(
        project_name=config.project_name,
        endpoint=config.collector_endpoint,
        set_global_tracer_provider=True,
    )
    if not register_instrumentors():
        logger.info("OpenAI calls will not appear as child spans")
    _provider = provider

    where = config.collector_endpoint or "local collector"
    logger.info(f"Exporting rag spans for project {config.project_name!r} to {where}")
    # Spans created before this point went to a NoOpTracer
    reset_tracer()
    return True


def shutdown_phoenix() -> None:
    """Flush pending spans and drop the provider."""
    global _provider
    if _provider is None:
        return

    from contextual_rag.observability.instrumentation import uninstrument

    uninstrument()
    _provider.shutdown()
    _provider = None
    reset_tracer()
    reset_config()


__all__ = [
    "init_phoenix",
    "shutdown_phoenix",
    "PhoenixConfig",
    "get_config",
    "reset_config",
    "TracerProtocol",
    "SpanProtocol",
    "NoOpTracer",
    "NoOpSpan",
    "get_tracer",
    "mark_failed",
    "reset_tracer",
]
