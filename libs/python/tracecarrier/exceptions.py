"""Errors raised by the trace carrier package.

Only decoding externally supplied bytes can fail; every carrier read and
write is total.
"""


class CarrierError(Exception):
    """Base class for errors raised by tracecarrier."""


class CarrierDecodeError(CarrierError, ValueError):
    """Carrier payload was malformed JSON or not a flat object of strings."""

    def __init__(self, message: str, payload=None):
        super().__init__(message)
        self.payload = payload


__all__ = ["CarrierError", "CarrierDecodeError"]
