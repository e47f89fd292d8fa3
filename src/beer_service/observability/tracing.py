"""OpenTelemetry Tracing Setup."""

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.semconv.resource import ResourceAttributes

from .. import __version__

_tracer = None


def init_tracing(service_name: str = "beer-service", otlp_endpoint: str = "") -> None:
    """Initialize OpenTelemetry tracing.

    Spans are only exported when an OTLP endpoint is configured.
    """
    global _tracer

    resource = Resource.create({
        ResourceAttributes.SERVICE_NAME: service_name,
        ResourceAttributes.SERVICE_VERSION: __version__,
    })

    provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(service_name)


def get_tracer():
    """Get the configured tracer."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("beer-service")
    return _tracer
