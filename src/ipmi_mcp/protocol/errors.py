"""Error taxonomy for the codec and transports.

Every failure surfaced by this package is an :class:`IPMIError` carrying an
:class:`ErrorKind`, so callers can branch on the kind instead of matching
message strings.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Closed set of failure categories."""

    SHORT_PACKET = "short-packet"
    LONG_PACKET = "long-packet"
    DEVICE_FAILURE = "device-reported-failure"
    TRANSPORT = "transport-failure"


class IPMIError(Exception):
    """Base class for all errors raised by this package."""

    kind: ErrorKind


class MalformedPacketError(IPMIError):
    """A buffer does not have the size its message type declares."""

    def __init__(self, kind: ErrorKind, message: str, expected: int, actual: int) -> None:
        self.kind = kind
        self.message = message
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{kind.value}: {message} expects {expected} bytes, got {actual}"
        )


class ShortPacketError(MalformedPacketError):
    """Fewer bytes than the message requires."""

    def __init__(self, message: str, expected: int, actual: int) -> None:
        super().__init__(ErrorKind.SHORT_PACKET, message, expected, actual)


class LongPacketError(MalformedPacketError):
    """More bytes than the message allows."""

    def __init__(self, message: str, expected: int, actual: int) -> None:
        super().__init__(ErrorKind.LONG_PACKET, message, expected, actual)


class DeviceError(IPMIError):
    """The BMC answered with a nonzero completion code.

    Attributes:
        code: The raw completion code byte.
        name: Human-readable name for known codes, else ``None``.
        response: The decoded response, whose payload fields are unset.
    """

    kind = ErrorKind.DEVICE_FAILURE

    def __init__(self, code: int, name: str | None = None, response=None) -> None:
        self.code = code
        self.name = name
        self.response = response
        if name:
            text = f"device-reported failure: {name} (code=0x{code:02X})"
        else:
            text = f"device-reported failure: code=0x{code:02X}"
        super().__init__(text)


class TransportError(IPMIError, ConnectionError):
    """The channel to the BMC could not be opened, used, or closed."""

    kind = ErrorKind.TRANSPORT


class TransportTimeout(TransportError):
    """No reply arrived before the configured deadline."""


def check_length(message: str, data: bytes, expected: int) -> None:
    """Enforce an exact-length contract on ``data``."""
    if len(data) < expected:
        raise ShortPacketError(message, expected, len(data))
    if len(data) > expected:
        raise LongPacketError(message, expected, len(data))


def check_bounds(message: str, data: bytes, sizes: tuple[int, ...]) -> None:
    """Enforce that ``data`` has exactly one of the allowed ``sizes``.

    A length between two allowed sizes is treated as a truncated read of
    the larger layout.
    """
    if len(data) in sizes:
        return
    larger = [size for size in sizes if size > len(data)]
    if larger:
        raise ShortPacketError(message, min(larger), len(data))
    raise LongPacketError(message, max(sizes), len(data))
