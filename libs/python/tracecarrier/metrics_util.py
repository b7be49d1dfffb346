import os, logging
from typing import Optional
from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader

METER_NAME = "tracecarrier"

_INIT = False
_BUNDLE: Optional["PropagationMetrics"] = None


class PropagationMetrics:
    def __init__(self, meter):
        self.injections = meter.create_counter(
            "tracecarrier_inject_total",
            description="Trace contexts injected into a carrier",
        )
        self.extractions = meter.create_counter(
            "tracecarrier_extract_total",
            description="Carriers extracted into a trace context",
        )
        self.decode_errors = meter.create_counter(
            "tracecarrier_decode_errors_total",
            description="Carrier payloads rejected by the JSON decoder",
        )


def get_propagation_metrics() -> PropagationMetrics:
    """Counters shared by the carrier code.

    Instruments come from the global meter; until a provider is installed
    they are proxies that record nothing.
    """
    global _BUNDLE
    if _BUNDLE is None:
        _BUNDLE = PropagationMetrics(metrics.get_meter(METER_NAME))
    return _BUNDLE


def init_metrics(service: str) -> PropagationMetrics:
    global _INIT
    if not _INIT:
        endpoint = os.getenv("OTEL_EXPORTER_OTLP_METRICS_ENDPOINT") or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or "http://localhost:4317"
        clean = endpoint.replace("http://","").replace("https://","")
        exporter = OTLPMetricExporter(endpoint=clean, insecure=True)
        reader = PeriodicExportingMetricReader(exporter)
        provider = MeterProvider(resource=Resource.create({"service.name": service}), metric_readers=[reader])
        metrics.set_meter_provider(provider)
        logging.getLogger(__name__).info("otel metrics initialized", extra={"endpoint": endpoint})
        _INIT = True
    return get_propagation_metrics()

__all__ = ["init_metrics", "get_propagation_metrics", "PropagationMetrics", "METER_NAME"]
