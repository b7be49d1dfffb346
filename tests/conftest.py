from __future__ import annotations

import pytest
from opentelemetry import trace
from opentelemetry.propagate import get_global_textmap, set_global_textmap
from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags, TraceState

TRACE_ID = 0x11111111111111111111111111111111
SPAN_ID = 0x2222222222222222
TRACE_STATE = "a=b,c=d"


@pytest.fixture(autouse=True)
def restore_global_propagator():
    saved = get_global_textmap()
    yield
    set_global_textmap(saved)


@pytest.fixture
def span_context() -> SpanContext:
    return SpanContext(
        trace_id=TRACE_ID,
        span_id=SPAN_ID,
        is_remote=False,
        trace_flags=TraceFlags(TraceFlags.SAMPLED),
        trace_state=TraceState.from_header([TRACE_STATE]),
    )


@pytest.fixture
def source_context(span_context):
    return trace.set_span_in_context(NonRecordingSpan(span_context))


class FakeConsumerMessage:
    """Stand-in for pulsar.Message exposing only properties()."""

    def __init__(self, properties=None):
        self._properties = properties

    def properties(self):
        return self._properties


def span_context_of(ctx) -> SpanContext:
    return trace.get_current_span(ctx).get_span_context()


ROUND_TRIP_SPAN_CONTEXTS = [
    pytest.param((TRACE_ID, SPAN_ID, TraceFlags.SAMPLED, TRACE_STATE), id="sampled-with-state"),
    pytest.param((TRACE_ID, SPAN_ID, TraceFlags.DEFAULT, ""), id="unsampled-no-state"),
    pytest.param((1 << 127 | 1, 1, TraceFlags.SAMPLED, ""), id="top-bit-trace-id-min-span-id"),
    pytest.param(((1 << 128) - 1, (1 << 64) - 1, TraceFlags.DEFAULT, "vendor=opaque-value"), id="max-ids"),
    pytest.param((0x0AF7651916CD43DD8448EB211C80319C, 0x00F067AA0BA902B7, TraceFlags.SAMPLED, "rojo=00f067aa0ba902b7,congo=t61rcWkgMzE"), id="w3c-example"),
]


@pytest.fixture(params=ROUND_TRIP_SPAN_CONTEXTS)
def any_span_context(request) -> SpanContext:
    trace_id, span_id, flags, state = request.param
    return SpanContext(
        trace_id=trace_id,
        span_id=span_id,
        is_remote=False,
        trace_flags=TraceFlags(flags),
        trace_state=TraceState.from_header([state]) if state else TraceState(),
    )


def assert_same_trace(extracted: SpanContext, original: SpanContext) -> None:
    assert extracted.is_valid
    assert extracted.is_remote
    assert extracted.trace_id == original.trace_id
    assert extracted.span_id == original.span_id
    assert extracted.trace_flags == original.trace_flags
    assert extracted.trace_state.to_header() == original.trace_state.to_header()
