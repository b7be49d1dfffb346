"""Move trace context between an OpenTelemetry context and a carrier.

A carrier is anything with ``get``/``set``/``keys`` over string headers: the
in-memory :class:`~tracecarrier.carrier.TraceContextMap`, or the Pulsar
message adapters in :mod:`tracecarrier.pulsar_context`.

The default propagator is always ``[W3C TraceContext, <global textmap>]``. The
global textmap may have been replaced by a no-op (or by a format that does not
write ``traceparent``), so the W3C handler goes first and trace propagation
keeps working without any setup. Callers wanting deterministic behaviour, e.g.
in tests, pass ``propagator=`` explicitly instead of relying on global state.

Usage:

    carrier = TraceContextMap()
    propagation.inject_context(carrier)              # current context
    ctx = propagation.extract_context(carrier)       # on the consumer side
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, runtime_checkable

from opentelemetry import context as otel_context
from opentelemetry.propagate import get_global_textmap, set_global_textmap
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.propagators.textmap import Getter, Setter, TextMapPropagator
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from .metrics_util import get_propagation_metrics

TRACEPARENT_KEY = "traceparent"
TRACESTATE_KEY = "tracestate"

logger = logging.getLogger(__name__)


@runtime_checkable
class TextMapCarrier(Protocol):
    """String key/value store that trace headers are written to and read from.

    ``get`` returns ``""`` for a missing key and ``keys`` never returns None.
    """

    def get(self, key: str) -> str: ...

    def set(self, key: str, value: str) -> None: ...

    def keys(self) -> List[str]: ...


class CarrierGetter(Getter):
    """Adapts a :class:`TextMapCarrier` to OpenTelemetry's getter contract."""

    def get(self, carrier: TextMapCarrier, key: str) -> Optional[List[str]]:
        value = carrier.get(key)
        if not value:
            return None
        return [value]

    def keys(self, carrier: TextMapCarrier) -> List[str]:
        return list(carrier.keys())


class CarrierSetter(Setter):
    def set(self, carrier: TextMapCarrier, key: str, value: str) -> None:
        carrier.set(key, value)


carrier_getter = CarrierGetter()
carrier_setter = CarrierSetter()


def get_global_propagator() -> TextMapPropagator:
    """Process-wide propagator (OpenTelemetry's global textmap)."""
    return get_global_textmap()


def set_global_propagator(propagator: TextMapPropagator) -> None:
    """Replace the process-wide propagator; applies to subsequent calls only."""
    set_global_textmap(propagator)
    logger.debug("global propagator set to %s", type(propagator).__name__)


def resolve_default_propagator() -> TextMapPropagator:
    return CompositePropagator([TraceContextTextMapPropagator(), get_global_textmap()])


def resolve_propagator(propagator: Optional[TextMapPropagator] = None) -> TextMapPropagator:
    if propagator is not None:
        return propagator
    return resolve_default_propagator()


def inject_context(
    carrier: TextMapCarrier,
    ctx: Optional[otel_context.Context] = None,
    propagator: Optional[TextMapPropagator] = None,
) -> None:
    """Write the trace fields of ``ctx`` (default: current context) into ``carrier``."""
    resolve_propagator(propagator).inject(carrier, context=ctx, setter=carrier_setter)
    get_propagation_metrics().injections.add(1, {"carrier": type(carrier).__name__})


def extract_context(
    carrier: TextMapCarrier,
    ctx: Optional[otel_context.Context] = None,
    propagator: Optional[TextMapPropagator] = None,
) -> otel_context.Context:
    """Return ``ctx`` extended with whatever trace fields ``carrier`` holds.

    A carrier without recognizable keys is not an error: the baseline context
    comes back unchanged (an empty context when ``ctx`` is None).
    """
    if ctx is None:
        ctx = otel_context.Context()
    result = resolve_propagator(propagator).extract(carrier, context=ctx, getter=carrier_getter)
    get_propagation_metrics().extractions.add(1, {"carrier": type(carrier).__name__})
    return result


__all__ = [
    "TRACEPARENT_KEY",
    "TRACESTATE_KEY",
    "TextMapCarrier",
    "CarrierGetter",
    "CarrierSetter",
    "carrier_getter",
    "carrier_setter",
    "get_global_propagator",
    "set_global_propagator",
    "resolve_default_propagator",
    "resolve_propagator",
    "inject_context",
    "extract_context",
]
