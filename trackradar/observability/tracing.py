"""Optional OpenTelemetry tracing for inbound Flask and outbound catalog calls."""

import logging
import os

from flask import Flask

try:
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.flask import FlaskInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
except Exception:  # pragma: no cover - optional dependency
    FlaskInstrumentor = None  # type: ignore

try:
    from opentelemetry.instrumentation.requests import RequestsInstrumentor
except Exception:  # pragma: no cover - optional dependency
    RequestsInstrumentor = None  # type: ignore

logger = logging.getLogger(__name__)


def _otlp_endpoint(app: Flask):
    return app.config.get("OTEL_EXPORTER_OTLP_ENDPOINT") or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")


def init_tracing(app: Flask) -> bool:
    """Instrument the app when an OTLP endpoint is configured. Returns True if enabled."""
    if FlaskInstrumentor is None:  # pragma: no cover - optional dependency
        return False

    endpoint = _otlp_endpoint(app)
    if not endpoint:
        return False

    resource = Resource.create({"service.name": app.config.get("OTEL_SERVICE_NAME", "trackradar")})
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(
                endpoint=endpoint,
                headers=app.config.get("OTEL_EXPORTER_OTLP_HEADERS") or os.getenv("OTEL_EXPORTER_OTLP_HEADERS"),
                insecure=app.config.get("OTEL_EXPORTER_OTLP_INSECURE", True),
            )
        )
    )
    trace.set_tracer_provider(provider)

    FlaskInstrumentor().instrument_app(app)
    # Token exchange and catalog lookups go through requests
    if RequestsInstrumentor is not None:
        RequestsInstrumentor().instrument()
    logger.info("Tracing enabled, exporting spans to %s", endpoint)
    return True
