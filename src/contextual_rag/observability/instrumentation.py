"""
OpenInference auto-instrumentation for the OpenAI client.

Embedding and completion calls are traced without code changes once
register_instrumentors() has run.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

_instrumented = False


def register_instrumentors() -> bool:
    """
    Instrument the OpenAI SDK.

    Returns:
        True when instrumentation is active, False when the instrumentor
        is not installed or failed to attach
    """
    global _instrumented
    if _instrumented:
        return True

    try:
        from openinference.instrumentation.openai import OpenAIInstrumentor

        OpenAIInstrumentor().instrument()
    except ImportError:
        logger.debug("OpenAI instrumentor not available")
        return False
    except Exception as e:
        logger.warning(f"Failed to instrument OpenAI: {e}")
        return False

    logger.info("Registered instrumentors: openai")
    _instrumented = True
    return True


def uninstrument() -> None:
    """Remove the OpenAI instrumentor (useful for testing)."""
    global _instrumented
    if not _instrumented:
        return

    from openinference.instrumentation.openai import OpenAIInstrumentor

    OpenAIInstrumentor().uninstrument()
    _instrumented = False
