"""
Tracing and metrics bootstrap.

``setup_opentelemetry`` runs once from the app config when
``OBSERVABILITY_ENABLED`` is set. Until then OpenTelemetry's global tracer
is the no-op proxy, so the spans opened by the license views cost nothing
in tests.
"""

import logging
import os
import socket

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.django import DjangoInstrumentor
from opentelemetry.instrumentation.psycopg2 import Psycopg2Instrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Status, StatusCode  # noqa: F401
from prometheus_client import start_http_server

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == "true"


def setup_opentelemetry():
    """
    Export spans over OTLP, instrument Django, psycopg2 and Redis, and
    serve Prometheus metrics.
    """
    resource = Resource.create(
        {
            "service.name": os.environ.get("OTEL_SERVICE_NAME", "digital-license-service"),
            "service.version": os.environ.get("OTEL_SERVICE_VERSION", "1.0.0"),
            "deployment.environment": os.environ.get("ENVIRONMENT", "development"),
        }
    )
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(
                endpoint=os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", "http://tempo:4317"),
                insecure=_env_flag("OTEL_EXPORTER_OTLP_INSECURE", "true"),
            )
        )
    )
    trace.set_tracer_provider(provider)

    for instrumentor in (DjangoInstrumentor(), Psycopg2Instrumentor(), RedisInstrumentor()):
        instrumentor.instrument()

    start_metrics_server(int(os.environ.get("PROMETHEUS_PORT", "9090")))
    logger.info("Tracing exported to %s", os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", "default"))


def _port_taken(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        return sock.connect_ex(("127.0.0.1", port)) == 0


def start_metrics_server(port: int):
    """
    Serve Prometheus metrics on ``port`` unless another worker already does.

    Worker processes share the host port; the first one to start wins.
    """
    if _port_taken(port):
        logger.info("Metrics port %s already served by another worker", port)
        return
    try:
        start_http_server(port, addr="0.0.0.0")
    except OSError as e:
        logger.warning("Could not start Prometheus metrics server: %s", e)
        return
    logger.info("Prometheus metrics served on port %s", port)


def get_tracer(name: str) -> trace.Tracer:
    """Tracer for manual spans, usually named after the module."""
    return trace.get_tracer(name)
