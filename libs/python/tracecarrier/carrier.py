"""Serializable trace-context carrier.

:class:`TraceContextMap` is a plain string map that is safe to use before it
holds anything: every accessor allocates the backing dict on first use, and an
empty carrier always encodes as ``{}`` (never ``null``), so a consumer in
another process can decode it unconditionally.

Embed it in a message model and propagate through it:

    class OrderEvent(BaseModel):
        payload: str
        tracing_info: TraceContextMap = Field(default_factory=TraceContextMap)

    event.tracing_info.inject_context()
    ctx = event.tracing_info.propagate_into_context()
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from opentelemetry import context as otel_context
from opentelemetry.propagators.textmap import TextMapPropagator
from pydantic import TypeAdapter, ValidationError
from pydantic_core import core_schema

from .exceptions import CarrierDecodeError
from .metrics_util import get_propagation_metrics
from .propagation import TRACEPARENT_KEY, TextMapCarrier, extract_context, inject_context

logger = logging.getLogger(__name__)

_MAPPING = TypeAdapter(Dict[str, str])


class TraceContextMap(TextMapCarrier):
    def __init__(self, carrier: Optional[Mapping[str, str]] = None):
        self._carrier: Optional[Dict[str, str]] = dict(carrier) if carrier is not None else None

    def _ensure_carrier(self) -> Dict[str, str]:
        # must run before any access to _carrier
        if self._carrier is None:
            self._carrier = {}
        return self._carrier

    # -- TextMapCarrier ---------------------------------------------------

    def get(self, key: str) -> str:
        return self._ensure_carrier().get(key, "")

    def set(self, key: str, value: str) -> None:
        self._ensure_carrier()[key] = value

    def keys(self) -> List[str]:
        return list(self._ensure_carrier())

    # -- JSON codec -------------------------------------------------------

    def encode(self) -> bytes:
        return json.dumps(self._ensure_carrier(), separators=(",", ":"), sort_keys=True).encode("utf-8")

    @classmethod
    def decode(cls, data: Union[bytes, str]) -> "TraceContextMap":
        """Decode a JSON object of string values.

        Raises :class:`CarrierDecodeError` for malformed JSON, a top-level value
        that is not an object, or non-string values.
        """
        try:
            mapping = _MAPPING.validate_json(data)
        except ValidationError as exc:
            get_propagation_metrics().decode_errors.add(1)
            logger.warning("rejected trace carrier payload: %d validation error(s)", exc.error_count())
            raise CarrierDecodeError(f"invalid trace carrier payload: {exc.errors()[0]['msg']}", payload=data) from exc
        return cls(mapping)

    # -- propagation helpers ----------------------------------------------

    @classmethod
    def from_context(
        cls,
        ctx: Optional[otel_context.Context] = None,
        propagator: Optional[TextMapPropagator] = None,
    ) -> "TraceContextMap":
        return cls().inject_context(ctx, propagator=propagator)

    def inject_context(
        self,
        ctx: Optional[otel_context.Context] = None,
        propagator: Optional[TextMapPropagator] = None,
    ) -> "TraceContextMap":
        inject_context(self, ctx, propagator=propagator)
        return self

    def propagate_into_context(
        self,
        ctx: Optional[otel_context.Context] = None,
        propagator: Optional[TextMapPropagator] = None,
    ) -> otel_context.Context:
        return extract_context(self, ctx, propagator=propagator)

    def clear_context(self) -> "TraceContextMap":
        """Drop all trace headers, e.g. before a message leaves for a third party."""
        self._carrier = None
        self._ensure_carrier()
        return self

    def get_traceparent(self) -> str:
        """Return the W3C ``traceparent`` header, or ``""``.

        Only populated when the propagator that last wrote into this carrier
        includes the W3C TraceContext format; other formats leave it empty even
        if the carrier holds trace context.
        """
        return self.get(TRACEPARENT_KEY)

    # -- container protocol -----------------------------------------------

    def to_dict(self) -> Dict[str, str]:
        return dict(self._ensure_carrier())

    def __len__(self) -> int:
        return len(self._ensure_carrier())

    def __contains__(self, key: object) -> bool:
        return key in self._ensure_carrier()

    def __bool__(self) -> bool:
        return len(self) > 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TraceContextMap):
            return self.to_dict() == other.to_dict()
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"TraceContextMap({self.to_dict()!r})"

    # -- pydantic ---------------------------------------------------------

    @classmethod
    def _from_mapping(cls, value: Optional[Mapping[str, str]]) -> "TraceContextMap":
        return cls(value) if value is not None else cls()

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        # null is accepted and validates to an empty carrier
        from_mapping = core_schema.no_info_after_validator_function(
            cls._from_mapping,
            core_schema.nullable_schema(
                core_schema.dict_schema(core_schema.str_schema(), core_schema.str_schema())
            ),
        )
        return core_schema.json_or_python_schema(
            json_schema=from_mapping,
            python_schema=core_schema.union_schema([core_schema.is_instance_schema(cls), from_mapping]),
            serialization=core_schema.plain_serializer_function_ser_schema(lambda carrier: carrier.to_dict()),
        )


__all__ = ["TraceContextMap"]
