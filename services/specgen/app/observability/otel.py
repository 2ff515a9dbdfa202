"""OpenTelemetry helpers for the spec generation service."""
from __future__ import annotations

from dataclasses import dataclass

import structlog
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from ..config import SpecgenSettings, get_settings

logger = structlog.get_logger(__name__)


@dataclass
class Telemetry:
    """Providers installed for the process; flushed by the app on shutdown."""

    tracer_provider: TracerProvider
    meter_provider: MeterProvider | None = None

    def shutdown(self) -> None:
        self.tracer_provider.shutdown()
        if self.meter_provider is not None:
            self.meter_provider.shutdown()


def _otlp_url(endpoint: str, signal: str) -> str:
    return f"{endpoint.rstrip('/')}/v1/{signal}"


def configure_telemetry(settings: SpecgenSettings | None = None, version: str = "0.1.0") -> Telemetry:
    """Install tracer and meter providers; OTLP export is enabled only when an endpoint is configured.

    Pipeline spans (``specgen.generate``, ``specgen.platform``, ``specgen.integration``)
    and the per-platform outcome counter are recorded through these providers.
    """
    settings = settings or get_settings()
    observability = settings.observability
    resource = Resource(
        attributes={
            SERVICE_NAME: observability.otel_service_name,
            SERVICE_VERSION: version,
            "deployment.environment": settings.environment,
        }
    )

    tracer_provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(tracer_provider)

    endpoint = observability.otel_exporter_otlp_endpoint
    if not endpoint:
        logger.info("specgen.telemetry.local_only", service=observability.otel_service_name)
        return Telemetry(tracer_provider=tracer_provider)

    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=_otlp_url(endpoint, "traces"))))
    reader = PeriodicExportingMetricReader(OTLPMetricExporter(endpoint=_otlp_url(endpoint, "metrics")))
    meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(meter_provider)
    logger.info("specgen.telemetry.exporting", endpoint=endpoint, service=observability.otel_service_name)
    return Telemetry(tracer_provider=tracer_provider, meter_provider=meter_provider)


__all__ = ["Telemetry", "configure_telemetry"]
