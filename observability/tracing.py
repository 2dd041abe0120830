"""
Rivet - Distributed Tracing with OpenTelemetry

Spans for application bootstrap, each request run and every lifecycle
event triggered during it, so a slow listener shows up as a slow child
span of ``rivet.run``.

Tracing is off unless ``OTEL_TRACING_ENABLED=true``; while off, a no-op
provider is installed and every helper here still works.

Usage:
    from observability.tracing import setup_tracing, create_span

    setup_tracing(TracingConfig(service_name="shop", enabled=True))

    with create_span("rivet.run", attributes={"http.method": "GET"}) as span:
        ...
"""
from __future__ import annotations

import functools
import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.b3 import B3MultiFormat
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.sdk.trace.sampling import ALWAYS_OFF, ALWAYS_ON, ParentBased, TraceIdRatioBased
from opentelemetry.trace import SpanKind, Status, StatusCode
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from config import get_settings

logger = logging.getLogger("rivet.observability.tracing")

F = TypeVar("F", bound=Callable[..., Any])

_tracer_provider: Optional[TracerProvider] = None
_initialized: bool = False


@dataclass
class TracingConfig:
    """Configuration for OpenTelemetry tracing."""

    service_name: str = field(default_factory=lambda: get_settings().service_name)
    service_version: str = "1.0.0"
    enabled: bool = field(default_factory=lambda: get_settings().tracing_enabled)
    otlp_endpoint: str = field(
        default_factory=lambda: os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    )
    sample_rate: float = field(
        default_factory=lambda: float(os.getenv("OTEL_SAMPLE_RATE", "1.0"))
    )
    environment: str = field(default_factory=lambda: get_settings().env.value)
    console_export: bool = field(
        default_factory=lambda: os.getenv("OTEL_CONSOLE_EXPORT", "false").lower() == "true"
    )
    batch_export: bool = True
    extra_attributes: Dict[str, str] = field(default_factory=dict)


def setup_tracing(config: Optional[TracingConfig] = None) -> trace.TracerProvider:
    """
    Install the global tracer provider.

    Returns the provider in use; repeated calls return the first one.
    """
    global _tracer_provider, _initialized

    if _initialized:
        return _tracer_provider or trace.get_tracer_provider()

    config = config or TracingConfig()

    if not config.enabled:
        _initialized = True
        return trace.get_tracer_provider()

    resource = Resource.create({
        SERVICE_NAME: config.service_name,
        SERVICE_VERSION: config.service_version,
        "deployment.environment": config.environment,
        "service.namespace": "rivet",
        **config.extra_attributes,
    })

    if config.sample_rate <= 0.0:
        sampler = ALWAYS_OFF
    elif config.sample_rate >= 1.0:
        sampler = ALWAYS_ON
    else:
        sampler = ParentBased(root=TraceIdRatioBased(config.sample_rate))

    _tracer_provider = TracerProvider(resource=resource, sampler=sampler)

    exporter = OTLPSpanExporter(endpoint=config.otlp_endpoint, insecure=True)
    if config.batch_export:
        _tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    else:
        _tracer_provider.add_span_processor(SimpleSpanProcessor(exporter))

    if config.console_export:
        _tracer_provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(_tracer_provider)
    set_global_textmap(CompositePropagator([TraceContextTextMapPropagator(), B3MultiFormat()]))

    logger.info(f"Tracing enabled for {config.service_name} -> {config.otlp_endpoint}")
    _initialized = True
    return _tracer_provider


def get_tracer_provider() -> trace.TracerProvider:
    if not _initialized:
        setup_tracing()
    return _tracer_provider or trace.get_tracer_provider()


def get_tracer(name: str, version: str = "1.0.0") -> trace.Tracer:
    """Tracer for manual instrumentation."""
    return get_tracer_provider().get_tracer(name, version)


def shutdown_tracing() -> None:
    """Flush pending spans. Call during application shutdown."""
    global _tracer_provider, _initialized
    if _tracer_provider is not None:
        _tracer_provider.shutdown()
    _initialized = False
    _tracer_provider = None


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: Optional[Dict[str, Any]] = None,
    tracer_name: str = "rivet",
):
    """
    Open a span as the current span; exceptions are recorded and re-raised.

    Example:
        >>> with create_span("rivet.bootstrap", attributes={"listener.count": 5}):
        ...     attach_listeners()
    """
    tracer = get_tracer(tracer_name)
    with tracer.start_as_current_span(name, kind=kind) as span:
        if attributes:
            for key, value in attributes.items():
                _set_safe_attribute(span, key, value)
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise


def span_decorator(name: Optional[str] = None, kind: SpanKind = SpanKind.INTERNAL) -> Callable[[F], F]:
    """Wrap a function call in a span named ``name`` (default: its qualname)."""

    def decorator(func: F) -> F:
        span_name = name or func.__qualname__

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with create_span(span_name, kind=kind):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def start_lifecycle_span(event_name: str, event: Any = None):
    """Child span for one lifecycle event of a request."""
    attributes: Dict[str, Any] = {"rivet.event": event_name}
    error = getattr(event, "error", None)
    if error is not None:
        attributes["rivet.error"] = error.value
    return create_span(f"rivet.event.{event_name}", attributes=attributes)


def _set_safe_attribute(span: Any, key: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, (str, bool, int, float)):
        span.set_attribute(key, value)
    elif isinstance(value, (list, tuple)) and all(isinstance(v, (str, bool, int, float)) for v in value):
        span.set_attribute(key, list(value))
    else:
        span.set_attribute(key, str(value))
