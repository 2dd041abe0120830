"""
Rivet - Observability Package

Structured logging (structlog), distributed tracing and metrics
(OpenTelemetry) for the request lifecycle.

Usage:
    from observability import setup_observability, get_logger

    setup_observability(service_name="shop")
    logger = get_logger(__name__)
"""
from typing import Optional

from observability.logging import (
    LifecycleLogger,
    LogContext,
    LoggingConfig,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from observability.metrics import (
    MetricsConfig,
    RivetMetrics,
    get_meter,
    get_metrics,
    setup_metrics,
    shutdown_metrics,
)
from observability.tracing import (
    TracingConfig,
    create_span,
    get_tracer,
    get_tracer_provider,
    setup_tracing,
    shutdown_tracing,
    span_decorator,
    start_lifecycle_span,
)

__all__ = [
    # Tracing
    "TracingConfig",
    "create_span",
    "get_tracer",
    "get_tracer_provider",
    "setup_tracing",
    "shutdown_tracing",
    "span_decorator",
    "start_lifecycle_span",
    # Metrics
    "MetricsConfig",
    "RivetMetrics",
    "get_meter",
    "get_metrics",
    "setup_metrics",
    "shutdown_metrics",
    # Logging
    "LifecycleLogger",
    "LogContext",
    "LoggingConfig",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    # Combined setup
    "setup_observability",
    "shutdown_observability",
]


def setup_observability(
    service_name: Optional[str] = None,
    tracing_enabled: Optional[bool] = None,
    log_level: Optional[str] = None,
    json_logs: Optional[bool] = None,
    metrics_enabled: Optional[bool] = None,
) -> None:
    """Configure logging, tracing and metrics in one call; unset arguments come from settings."""
    logging_config = LoggingConfig()
    tracing_config = TracingConfig()
    metrics_config = MetricsConfig()
    if service_name is not None:
        logging_config.service_name = service_name
        tracing_config.service_name = service_name
        metrics_config.service_name = service_name
    if log_level is not None:
        logging_config.level = log_level.upper()
    if json_logs is not None:
        logging_config.json_format = json_logs
    if tracing_enabled is not None:
        tracing_config.enabled = tracing_enabled
    if metrics_enabled is not None:
        metrics_config.enabled = metrics_enabled

    setup_logging(logging_config)
    setup_tracing(tracing_config)
    setup_metrics(metrics_config)


def shutdown_observability() -> None:
    shutdown_tracing()
    shutdown_metrics()
    shutdown_logging()
