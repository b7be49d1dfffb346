"""Trace context carriers for Pulsar message properties.

Producer side: wrap the outgoing message in :class:`ProducerMessageCarrier`
and inject; the trace headers land in ``message.properties``, which is
allocated on the first write if the message has none yet.

Consumer side: wrap the received ``pulsar.Message`` in
:class:`ConsumerMessageCarrier` and extract. Received properties are treated as
read-only; ``set`` on a consumer carrier is a logged no-op.

No Pulsar client import is needed here: any object exposing the property
interface below works, so the adapters can be used with ``pulsar-client`` or a
test double alike.

    message = ProducerMessage(content=b"...")
    pulsar_context.inject_into_message(message)
    producer.send(**message.send_kwargs())

    ctx = pulsar_context.extract_from_message(consumer.receive())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol

from opentelemetry import context as otel_context
from opentelemetry.propagators.textmap import TextMapPropagator

from .propagation import TextMapCarrier, extract_context, inject_context

logger = logging.getLogger(__name__)


class OutgoingMessage(Protocol):
    properties: Optional[Dict[str, str]]


class IncomingMessage(Protocol):
    def properties(self) -> Optional[Mapping[str, str]]: ...


@dataclass
class ProducerMessage:
    """Message about to be sent; fields mirror ``pulsar.Producer.send`` arguments."""

    content: bytes = b""
    properties: Optional[Dict[str, str]] = None
    partition_key: Optional[str] = None

    def send_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"content": self.content}
        if self.properties:
            kwargs["properties"] = dict(self.properties)
        if self.partition_key is not None:
            kwargs["partition_key"] = self.partition_key
        return kwargs


class ProducerMessageCarrier(TextMapCarrier):
    """Writes trace headers into an outgoing message's properties in place.

    The carrier does not own the message; the mapping it allocates is attached
    to the message and lives as long as the message does.
    """

    def __init__(self, message: OutgoingMessage):
        self.message = message

    def get(self, key: str) -> str:
        properties = self.message.properties
        if properties is None:
            return ""
        return properties.get(key, "")

    def set(self, key: str, value: str) -> None:
        properties = self.message.properties
        if properties is None:
            properties = {}
            self.message.properties = properties
        properties[key] = value

    def keys(self) -> List[str]:
        properties = self.message.properties
        if not properties:
            return []
        return list(properties)


class ConsumerMessageCarrier(TextMapCarrier):
    """Reads trace headers from a received message's properties."""

    def __init__(self, message: IncomingMessage):
        self.message = message

    def _properties(self) -> Mapping[str, str]:
        properties = self.message.properties()
        if properties is None:
            return {}
        return properties

    def get(self, key: str) -> str:
        return self._properties().get(key, "")

    def set(self, key: str, value: str) -> None:
        # received messages are immutable; keep the carrier contract without writing
        logger.debug("ignoring set of %r on consumer message carrier", key)

    def keys(self) -> List[str]:
        return list(self._properties())


def inject_into_message(
    message: OutgoingMessage,
    ctx: Optional[otel_context.Context] = None,
    propagator: Optional[TextMapPropagator] = None,
) -> OutgoingMessage:
    inject_context(ProducerMessageCarrier(message), ctx, propagator=propagator)
    return message


def extract_from_message(
    message: IncomingMessage,
    ctx: Optional[otel_context.Context] = None,
    propagator: Optional[TextMapPropagator] = None,
) -> otel_context.Context:
    return extract_context(ConsumerMessageCarrier(message), ctx, propagator=propagator)


__all__ = [
    "ProducerMessage",
    "ProducerMessageCarrier",
    "ConsumerMessageCarrier",
    "inject_into_message",
    "extract_from_message",
]
