"""Serializable trace-context carriers and Pulsar message adapters."""

from .carrier import TraceContextMap
from .envelope import TracedEnvelope
from .exceptions import CarrierDecodeError, CarrierError
from .propagation import (
    TRACEPARENT_KEY,
    TRACESTATE_KEY,
    TextMapCarrier,
    extract_context,
    get_global_propagator,
    inject_context,
    resolve_default_propagator,
    resolve_propagator,
    set_global_propagator,
)
from .pulsar_context import (
    ConsumerMessageCarrier,
    ProducerMessage,
    ProducerMessageCarrier,
    extract_from_message,
    inject_into_message,
)

__version__ = "0.1.0"

__all__ = [
    "TraceContextMap",
    "TracedEnvelope",
    "CarrierError",
    "CarrierDecodeError",
    "TRACEPARENT_KEY",
    "TRACESTATE_KEY",
    "TextMapCarrier",
    "inject_context",
    "extract_context",
    "get_global_propagator",
    "set_global_propagator",
    "resolve_default_propagator",
    "resolve_propagator",
    "ProducerMessage",
    "ProducerMessageCarrier",
    "ConsumerMessageCarrier",
    "inject_into_message",
    "extract_from_message",
]
