"""
Span helpers for retrieval and chat.

get_tracer() hands out an OpenTelemetry-backed tracer once init_phoenix has
installed a TracerProvider, and a NoOpTracer otherwise. Callers open spans
unconditionally and only ever set attributes or mark a span as failed.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import StatusCode

SERVICE_NAME = "thesis-search"


class NoOpSpan:
    """Span used while tracing is disabled."""

    def set_attribute(self, key: str, value: Any) -> None:
        pass

    def fail(self, exception: BaseException) -> None:
        pass


class NoOpTracer:
    @contextmanager
    def start_span(self, name: str, attributes: dict[str, Any] | None = None) -> Iterator[NoOpSpan]:
        yield NoOpSpan()


class OTelSpan:
    def __init__(self, span: Any):
        self._span = span

    def set_attribute(self, key: str, value: Any) -> None:
        self._span.set_attribute(key, value)

    def fail(self, exception: BaseException) -> None:
        """Record the exception and mark the span as errored."""
        self._span.record_exception(exception)
        self._span.set_status(StatusCode.ERROR, str(exception))


class OTelTracer:
    def __init__(self, tracer: Any):
        self._tracer = tracer

    @contextmanager
    def start_span(self, name: str, attributes: dict[str, Any] | None = None) -> Iterator[OTelSpan]:
        with self._tracer.start_as_current_span(name, attributes=attributes) as span:
            yield OTelSpan(span)


_tracer: NoOpTracer | OTelTracer | None = None


def get_tracer() -> NoOpTracer | OTelTracer:
    """OTelTracer when tracing is enabled and a provider is installed, else NoOpTracer."""
    global _tracer
    if _tracer is not None:
        return _tracer

    from thesis_search.observability.config import get_tracing_config

    if get_tracing_config().enabled and isinstance(trace.get_tracer_provider(), TracerProvider):
        _tracer = OTelTracer(trace.get_tracer(SERVICE_NAME))
    else:
        _tracer = NoOpTracer()
    return _tracer


def reset_tracer() -> None:
    global _tracer
    _tracer = None
