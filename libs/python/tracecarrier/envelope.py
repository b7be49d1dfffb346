"""Message envelope that carries its trace context alongside the payload."""

from __future__ import annotations

from typing import Any, Dict, Optional

from opentelemetry import context as otel_context
from opentelemetry.propagators.textmap import TextMapPropagator
from pydantic import BaseModel, Field

from .carrier import TraceContextMap


class TracedEnvelope(BaseModel):
    payload: Dict[str, Any] = Field(default_factory=dict)
    tracing_info: TraceContextMap = Field(default_factory=TraceContextMap)

    @classmethod
    def wrap(
        cls,
        payload: Dict[str, Any],
        ctx: Optional[otel_context.Context] = None,
        propagator: Optional[TextMapPropagator] = None,
    ) -> "TracedEnvelope":
        """Build an envelope for ``payload`` stamped with the trace context of ``ctx``."""
        return cls(payload=payload, tracing_info=TraceContextMap.from_context(ctx, propagator=propagator))

    def context(
        self,
        ctx: Optional[otel_context.Context] = None,
        propagator: Optional[TextMapPropagator] = None,
    ) -> otel_context.Context:
        return self.tracing_info.propagate_into_context(ctx, propagator=propagator)

    def detached(self) -> "TracedEnvelope":
        """Copy of the envelope with trace context stripped, for third-party recipients."""
        return self.model_copy(update={"payload": dict(self.payload), "tracing_info": TraceContextMap()})


__all__ = ["TracedEnvelope"]
