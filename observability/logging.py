"""
Rivet - Structured Logging with Trace Context

Integrates structlog with OpenTelemetry trace context so that every log
line emitted while a request is in flight carries its trace_id/span_id
and the request it belongs to.

Library modules log through ``logging.getLogger("rivet.<area>")``; the
stdlib handlers installed here render those records the same way as
structlog's own output.

Usage:
    from observability.logging import setup_logging, get_logger, LogContext

    setup_logging(LoggingConfig(level="INFO", json_format=True))

    logger = get_logger(__name__)
    with LogContext(request_method="GET", request_path="/users/1"):
        logger.info("Dispatching", controller="Users")
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog
from structlog.types import EventDict, WrappedLogger

from config import get_settings

_configured: bool = False


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    service_name: str = field(default_factory=lambda: get_settings().service_name)
    level: str = field(default_factory=lambda: get_settings().log_level.upper())
    json_format: bool = field(default_factory=lambda: get_settings().log_json)
    environment: str = field(default_factory=lambda: get_settings().env.value)
    enable_trace_context: bool = True
    include_timestamp: bool = True
    include_caller_info: bool = False


def add_trace_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add trace_id/span_id of the current OpenTelemetry span, if any."""
    from opentelemetry import trace

    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        if ctx.is_valid:
            event_dict["trace_id"] = format(ctx.trace_id, "032x")
            event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def add_service_context(service_name: str, environment: str) -> structlog.types.Processor:
    """Create a processor that stamps service name and environment."""

    def processor(
        logger: WrappedLogger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict["service"] = service_name
        event_dict["environment"] = environment
        return event_dict

    return processor


def add_caller_info(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    record = event_dict.get("_record")
    if record:
        event_dict["module"] = record.module
        event_dict["function"] = record.funcName
        event_dict["line"] = record.lineno
    return event_dict


def add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call more than once; only the first call has an effect until
    shutdown_logging() resets it.
    """
    global _configured

    if _configured:
        return

    config = config or LoggingConfig()

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_service_context(config.service_name, config.environment),
    ]
    if config.include_timestamp:
        processors.append(add_timestamp)
    if config.enable_trace_context:
        processors.append(add_trace_context)
    if config.include_caller_info:
        processors.append(add_caller_info)

    processors.extend([
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ])

    if config.json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configure_stdlib_logging(config)
    _configured = True


def _configure_stdlib_logging(config: LoggingConfig) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, config.level))
    if config.json_format:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level))
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    logging.getLogger("opentelemetry").setLevel(logging.WARNING)


class _JsonFormatter(logging.Formatter):
    """JSON formatter for records coming from stdlib loggers."""

    def format(self, record: logging.LogRecord) -> str:
        import json

        from opentelemetry import trace

        log_record: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_record.update(structlog.contextvars.get_contextvars())

        span = trace.get_current_span()
        if span.is_recording():
            ctx = span.get_span_context()
            if ctx.is_valid:
                log_record["trace_id"] = format(ctx.trace_id, "032x")
                log_record["span_id"] = format(ctx.span_id, "016x")

        if record.exc_info:
            log_record["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_record, default=str)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger, configuring logging with defaults on first use.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Bootstrapped", listeners=5)
    """
    if not _configured:
        setup_logging()
    return structlog.get_logger(name)


def shutdown_logging() -> None:
    """Flush handlers and allow setup_logging() to run again."""
    global _configured

    for handler in logging.getLogger().handlers:
        handler.flush()

    structlog.reset_defaults()
    _configured = False


class LogContext:
    """
    Bind key/value pairs to every log line emitted inside the block.

    Example:
        >>> with LogContext(request_method="GET", request_path="/"):
        ...     logger.info("Routing")
    """

    def __init__(self, **kwargs: Any):
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())


class LifecycleLogger:
    """Logger specialized for the request lifecycle stages."""

    def __init__(self, name: str = "rivet.lifecycle"):
        self.logger = get_logger(name)

    def bootstrapped(self, application: str, listeners: list) -> None:
        self.logger.info(
            "Application bootstrapped",
            application=application,
            listener_count=len(listeners),
            listeners=list(listeners),
        )

    def stage(self, event_name: str, listener_count: int, stopped: bool) -> None:
        self.logger.debug(
            "Lifecycle event triggered",
            lifecycle_event=event_name,
            listener_count=listener_count,
            stopped=stopped,
        )

    def diverted(self, event_name: str, error: str) -> None:
        self.logger.info(
            "Lifecycle diverted to error handling",
            lifecycle_event=event_name,
            error=error,
        )

    def completed(self, status_code: Optional[int], short_circuited: bool = False) -> None:
        self.logger.info(
            "Request completed",
            status_code=status_code,
            short_circuited=short_circuited,
        )
