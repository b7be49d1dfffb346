import os, logging
from typing import Optional
from opentelemetry import trace
from opentelemetry.propagators.textmap import TextMapPropagator
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

from .propagation import set_global_propagator

_INITIALIZED = False

def init_tracing(service: str, propagator: Optional[TextMapPropagator] = None):
    """Install an OTLP-exporting tracer provider once per process.

    ``propagator`` replaces the global textmap; carriers still prepend W3C
    TraceContext when resolving their default propagator.
    """
    global _INITIALIZED
    if _INITIALIZED:
        return
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    # Strip http:// for grpc OTLP exporter if present
    clean = endpoint.replace("http://","" ).replace("https://","")
    resource = Resource.create({"service.name": service})
    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=clean, insecure=True)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    if propagator is not None:
        set_global_propagator(propagator)
    logging.getLogger(__name__).info("otel tracing initialized", extra={"endpoint": endpoint})
    _INITIALIZED = True

__all__ = ["init_tracing"]
