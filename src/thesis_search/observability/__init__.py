"""
Observability Module - Phoenix + OpenTelemetry tracing.

USAGE:
------
# At application startup:
from thesis_search.observability import init_phoenix

init_phoenix()  # No-op unless PHOENIX_ENABLED=true

# Around an operation:
from thesis_search.observability import get_tracer

with get_tracer().start_span("retrieval.search", attributes={...}) as span:
    span.set_attribute(RETRIEVAL_RESULT_COUNT, len(results))

Phoenix itself and the OpenInference instrumentors ship in the optional
"observability" extra; without them tracing stays disabled.
"""

from __future__ import annotations

import logging

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from thesis_search.observability.config import (
    TracingConfig,
    get_tracing_config,
    reset_tracing_config,
)
from thesis_search.observability.tracer import (
    NoOpSpan,
    NoOpTracer,
    get_tracer,
    reset_tracer,
)
from thesis_search.observability.attributes import (
    CHAT_HISTORY_LENGTH,
    CHAT_OUTCOME,
    CHAT_QUERY,
    CHAT_QUERY_REWRITTEN,
    CHAT_SOURCE_COUNT,
    GEN_AI_REQUEST_MODEL,
    RETRIEVAL_FALLBACK_REASON,
    RETRIEVAL_PATH,
    RETRIEVAL_RESULT_COUNT,
    generation_attributes,
    retrieval_attributes,
)

logger = logging.getLogger(__name__)

_phoenix_initialized = False


def _register_instrumentors() -> list[str]:
    registered = []
    try:
        from openinference.instrumentation.openai import OpenAIInstrumentor

        OpenAIInstrumentor().instrument()
        registered.append("openai")
    except ImportError:
        logger.debug("OpenAI instrumentor not available")

    try:
        from openinference.instrumentation.langchain import LangChainInstrumentor

        LangChainInstrumentor().instrument()
        registered.append("langchain")
    except ImportError:
        logger.debug("LangChain instrumentor not available")

    if registered:
        logger.info(f"Registered instrumentors: {', '.join(registered)}")
    return registered


def init_phoenix(config: TracingConfig | None = None) -> bool:
    """
    Initialize Phoenix tracing once at application startup.

    Returns:
        True if tracing is active, False if disabled or Phoenix is missing
    """
    global _phoenix_initialized
    if _phoenix_initialized:
        return True

    config = config or get_tracing_config()
    if not config.enabled:
        logger.debug("Phoenix tracing disabled")
        return False

    try:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        if config.collector_endpoint:
            endpoint = config.collector_endpoint
            logger.info(f"Phoenix connecting to remote: {endpoint}")
        else:
            import phoenix as px

            session = px.launch_app()
            endpoint = f"{session.url.rstrip('/')}/v1/traces"
            logger.info(f"Phoenix UI available at: {session.url}")
        exporter = OTLPSpanExporter(endpoint=endpoint)
    except ImportError as e:
        logger.warning(f"Phoenix not installed, tracing disabled: {e}")
        return False

    provider = TracerProvider()
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    _register_instrumentors()

    reset_tracer()
    _phoenix_initialized = True
    return True


def shutdown_phoenix() -> None:
    """Flush spans and reset tracing state."""
    global _phoenix_initialized
    if not _phoenix_initialized:
        return

    provider = trace.get_tracer_provider()
    if hasattr(provider, "shutdown"):
        provider.shutdown()

    reset_tracer()
    reset_tracing_config()
    _phoenix_initialized = False


__all__ = [
    "init_phoenix",
    "shutdown_phoenix",
    "TracingConfig",
    "get_tracing_config",
    "reset_tracing_config",
    "NoOpTracer",
    "NoOpSpan",
    "get_tracer",
    "reset_tracer",
    "GEN_AI_REQUEST_MODEL",
    "RETRIEVAL_PATH",
    "RETRIEVAL_RESULT_COUNT",
    "RETRIEVAL_FALLBACK_REASON",
    "CHAT_QUERY",
    "CHAT_QUERY_REWRITTEN",
    "CHAT_HISTORY_LENGTH",
    "CHAT_SOURCE_COUNT",
    "CHAT_OUTCOME",
    "retrieval_attributes",
    "generation_attributes",
]
