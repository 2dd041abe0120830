"""
Rivet - Unified Error Handling

Provides the error hierarchy shared by the container, the event layer,
module loading and the MVC orchestrator.

Features:
- Hierarchical exception classes with context preservation
- Error severity levels for prioritized handling
- Structured error context for debugging
- OpenTelemetry integration for error tracing

Wiring errors (unknown services, reserved-name collisions, bad listener
names) derive from RivetConfigError or ServiceError and are fatal to
application startup. Request failures are not exceptions at this level;
they are tagged on the MvcEvent with an ErrorKind.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode


class ErrorSeverity(Enum):
    """Error severity levels for prioritized handling."""

    DEBUG = "debug"      # Non-critical, informational
    INFO = "info"        # Minor issue, operation continues
    WARNING = "warning"  # Potential problem, degraded operation
    ERROR = "error"      # Significant failure, operation failed
    CRITICAL = "critical"  # Startup cannot continue
    FATAL = "fatal"      # Unrecoverable


@dataclass
class ErrorContext:
    """Structured context for error debugging and tracing."""

    operation: str
    component: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    trace_id: Optional[str] = None
    span_id: Optional[str] = None
    service_name: Optional[str] = None
    event_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for serialization."""
        return {
            "operation": self.operation,
            "component": self.component,
            "timestamp": self.timestamp.isoformat(),
            "trace_id": self.trace_id,
            "span_id": self.span_id,
            "service_name": self.service_name,
            "event_name": self.event_name,
            "metadata": self.metadata,
            "stack_trace": self.stack_trace,
        }

    @classmethod
    def from_current_span(
        cls,
        operation: str,
        component: str,
        **kwargs: Any
    ) -> "ErrorContext":
        """Create context from current OpenTelemetry span."""
        span = trace.get_current_span()
        trace_id = None
        span_id = None

        if span and span.is_recording():
            ctx = span.get_span_context()
            if ctx.is_valid:
                trace_id = format(ctx.trace_id, "032x")
                span_id = format(ctx.span_id, "016x")

        return cls(
            operation=operation,
            component=component,
            trace_id=trace_id,
            span_id=span_id,
            stack_trace=traceback.format_exc(),
            **kwargs
        )


class RivetError(Exception):
    """
    Base exception for all Rivet-specific errors.

    Provides:
    - Structured error context
    - Severity level
    - Chained exception support
    - OpenTelemetry span recording
    """

    default_severity: ErrorSeverity = ErrorSeverity.ERROR
    error_code: str = "RIVET_ERROR"

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        severity: Optional[ErrorSeverity] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = False,
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context
        self.severity = severity or self.default_severity
        self.cause = cause
        self.recoverable = recoverable
        self.suggestions = suggestions or []
        self.timestamp = datetime.now(timezone.utc)

        self._record_to_span()

    def _record_to_span(self) -> None:
        """Record exception to current OpenTelemetry span."""
        span = trace.get_current_span()
        if span and span.is_recording():
            span.set_status(Status(StatusCode.ERROR, self.message))
            span.record_exception(self)
            span.set_attribute("error.code", self.error_code)
            span.set_attribute("error.severity", self.severity.value)
            span.set_attribute("error.recoverable", self.recoverable)
            if self.context:
                span.set_attribute("error.component", self.context.component)
                span.set_attribute("error.operation", self.context.operation)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for error responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context.to_dict() if self.context else None,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        parts = [f"[{self.error_code}] {self.message}"]
        if self.context:
            parts.append(f" (component: {self.context.component})")
        if self.cause:
            parts.append(f" [caused by: {self.cause}]")
        return "".join(parts)

    def with_context(self, **kwargs: Any) -> "RivetError":
        """Add additional context to the error."""
        if self.context:
            self.context.metadata.update(kwargs)
        else:
            self.context = ErrorContext(
                operation="unknown",
                component="unknown",
                metadata=kwargs
            )
        return self


class RivetConfigError(RivetError):
    """Configuration and wiring errors. Fatal to application startup."""

    error_code = "CONFIG_ERROR"
    default_severity = ErrorSeverity.CRITICAL

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.config_key = config_key
        self.actual_value = actual_value


class ServiceError(RivetError):
    """Container resolution errors."""

    error_code = "SERVICE_ERROR"
    default_severity = ErrorSeverity.CRITICAL

    def __init__(
        self,
        message: str,
        service_name: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.service_name = service_name


class ServiceNotFoundError(ServiceError, LookupError):
    """Requested service name is not registered."""

    error_code = "SERVICE_NOT_FOUND"

    def __init__(self, service_name: str, **kwargs: Any):
        super().__init__(
            f"Service '{service_name}' is not registered",
            service_name=service_name,
            suggestions=[f"Register '{service_name}' under service_manager in the configuration"],
            **kwargs,
        )


class CircularDependencyError(ServiceError):
    """A service was requested again while it was still being created."""

    error_code = "CIRCULAR_DEPENDENCY"

    def __init__(self, service_name: str, chain: Sequence[str], **kwargs: Any):
        self.chain = [*chain, service_name]
        super().__init__(
            f"Circular dependency detected for '{service_name}': {' -> '.join(self.chain)}",
            service_name=service_name,
            **kwargs,
        )


class ServiceNotCreatedError(ServiceError):
    """A factory or invokable raised while building a service."""

    error_code = "SERVICE_NOT_CREATED"


class DuplicateServiceError(RivetConfigError):
    """A service name is already registered and overrides are disabled."""

    error_code = "DUPLICATE_SERVICE"

    def __init__(self, service_name: str, **kwargs: Any):
        super().__init__(
            f"A service named '{service_name}' is already registered",
            config_key=service_name,
            **kwargs,
        )
        self.service_name = service_name


class InvalidListenerError(RivetConfigError):
    """A configured listener name resolved to an object without attach()."""

    error_code = "INVALID_LISTENER"


class ModuleLoadError(RivetConfigError):
    """A module could not be resolved or initialized."""

    error_code = "MODULE_LOAD_ERROR"

    def __init__(self, message: str, module_name: Optional[str] = None, **kwargs: Any):
        super().__init__(message, config_key=module_name, **kwargs)
        self.module_name = module_name


class LifecycleContextError(RivetError):
    """A write-once field of the lifecycle context was reassigned."""

    error_code = "LIFECYCLE_CONTEXT_ERROR"
