"""
Rivet - OpenTelemetry Metrics

Request lifecycle metrics.

Key Metrics:
- rivet_request_duration_seconds: time spent in Application.run()
- rivet_requests_total: completed requests by status code
- rivet_lifecycle_errors_total: diversions to error handling by error kind
- rivet_short_circuits_total: requests answered early by a route/dispatch listener

Metrics are off unless ``OTEL_METRICS_ENABLED=true``; instruments are then
created on the global no-op meter and recording costs nothing.

Usage:
    from observability.metrics import get_metrics

    get_metrics().record_request(method="GET", status_code=200, duration=0.012)
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from opentelemetry import metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.metrics import Meter
from opentelemetry.sdk.metrics import MeterProvider as SDKMeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource

from config import get_settings

_meter_provider: Optional[SDKMeterProvider] = None
_initialized: bool = False
_rivet_metrics: Optional["RivetMetrics"] = None


@dataclass
class MetricsConfig:
    """Configuration for OpenTelemetry metrics."""

    service_name: str = field(default_factory=lambda: get_settings().service_name)
    service_version: str = "1.0.0"
    otlp_endpoint: str = field(
        default_factory=lambda: os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    )
    enabled: bool = field(
        default_factory=lambda: os.getenv("OTEL_METRICS_ENABLED", "false").lower() == "true"
    )
    environment: str = field(default_factory=lambda: get_settings().env.value)
    console_export: bool = field(
        default_factory=lambda: os.getenv("OTEL_CONSOLE_EXPORT", "false").lower() == "true"
    )
    export_interval_millis: int = 60000


class RivetMetrics:
    """Instruments recorded by the Application."""

    def __init__(self, meter: Meter):
        self.meter = meter

        self.request_duration = meter.create_histogram(
            name="rivet_request_duration_seconds",
            description="Duration of a request lifecycle run",
            unit="s",
        )
        self.requests_total = meter.create_counter(
            name="rivet_requests_total",
            description="Completed requests",
            unit="1",
        )
        self.lifecycle_errors = meter.create_counter(
            name="rivet_lifecycle_errors_total",
            description="Requests diverted to error handling",
            unit="1",
        )
        self.short_circuits = meter.create_counter(
            name="rivet_short_circuits_total",
            description="Requests answered by a listener before rendering",
            unit="1",
        )

    def record_request(
        self,
        method: str,
        status_code: Optional[int],
        duration: float,
        short_circuited: bool = False,
    ) -> None:
        attributes = {"method": method, "status_code": str(status_code)}
        self.request_duration.record(duration, attributes)
        self.requests_total.add(1, attributes)
        if short_circuited:
            self.short_circuits.add(1, {"method": method})

    def record_error(self, stage: str, error_kind: str) -> None:
        self.lifecycle_errors.add(1, {"stage": stage, "error": error_kind})


def setup_metrics(config: Optional[MetricsConfig] = None) -> metrics.MeterProvider:
    """Install the global meter provider; repeated calls return the first one."""
    global _meter_provider, _initialized

    if _initialized:
        return _meter_provider or metrics.get_meter_provider()

    config = config or MetricsConfig()

    if not config.enabled:
        _initialized = True
        return metrics.get_meter_provider()

    resource = Resource.create({
        SERVICE_NAME: config.service_name,
        SERVICE_VERSION: config.service_version,
        "deployment.environment": config.environment,
    })

    readers = [
        PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=config.otlp_endpoint, insecure=True),
            export_interval_millis=config.export_interval_millis,
        )
    ]
    if config.console_export:
        readers.append(
            PeriodicExportingMetricReader(
                ConsoleMetricExporter(),
                export_interval_millis=config.export_interval_millis,
            )
        )

    _meter_provider = SDKMeterProvider(resource=resource, metric_readers=readers)
    metrics.set_meter_provider(_meter_provider)
    _initialized = True
    return _meter_provider


def get_meter(name: str = "rivet", version: str = "1.0.0") -> Meter:
    if not _initialized:
        setup_metrics()
    return metrics.get_meter(name, version)


def get_metrics() -> RivetMetrics:
    """Process-wide RivetMetrics, created on first use."""
    global _rivet_metrics
    if _rivet_metrics is None:
        _rivet_metrics = RivetMetrics(get_meter())
    return _rivet_metrics


def shutdown_metrics() -> None:
    global _meter_provider, _initialized, _rivet_metrics
    if _meter_provider is not None:
        _meter_provider.shutdown()
    _meter_provider = None
    _initialized = False
    _rivet_metrics = None
