"""Request/response envelope shared by every message type.

A :class:`Request` carries the routing key and a payload object that knows
how to serialize itself. Responses derive from :class:`Response`, whose
first field is always the completion code because the status byte leads
every IPMI reply.

Decoding a response::

    +-----------------+------------------------------------+
    | Completion code |  Command-specific payload          |
    | 1 byte          |  fixed or bounded length           |
    +-----------------+------------------------------------+

A nonzero completion code ends decoding: the payload may legitimately be
absent, so its fields keep their defaults and no size check is made.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from .errors import ShortPacketError, check_bounds, check_length


@dataclass
class EmptyRequest:
    """Request payload for commands that take no data."""

    SIZE: ClassVar[int] = 0

    def to_bytes(self) -> bytes:
        return b""

    @classmethod
    def from_bytes(cls, data: bytes):
        check_length(cls.__name__, data, cls.SIZE)
        return cls()


@dataclass
class RawRequest:
    """Request payload passed to the wire verbatim."""

    data: bytes = b""

    def to_bytes(self) -> bytes:
        return bytes(self.data)

    @classmethod
    def from_bytes(cls, data: bytes) -> RawRequest:
        return cls(data=bytes(data))


@dataclass
class Response:
    """Base class for decoded replies.

    Subclasses declare the permitted total sizes (status byte included) in
    ``SIZES``, or override :meth:`sizes` when the size depends on the data,
    and implement :meth:`_decode` and :meth:`_payload`.
    """

    SIZES: ClassVar[tuple[int, ...]] = (1,)

    completion_code: int = 0

    @property
    def ok(self) -> bool:
        return self.completion_code == 0

    @classmethod
    def sizes(cls, data: bytes) -> tuple[int, ...]:
        return cls.SIZES

    @classmethod
    def from_bytes(cls, data: bytes):
        if len(data) < 1:
            raise ShortPacketError(cls.__name__, 1, len(data))
        if data[0] != 0:
            return cls(completion_code=data[0])
        check_bounds(cls.__name__, data, cls.sizes(data))
        return cls._decode(bytes(data))

    @classmethod
    def _decode(cls, data: bytes):
        return cls(completion_code=data[0])

    def to_bytes(self) -> bytes:
        if not self.ok:
            return bytes([self.completion_code])
        return bytes([self.completion_code]) + self._payload()

    def _payload(self) -> bytes:
        return b""


@dataclass
class RawResponse(Response):
    """Reply of unknown layout; the payload is kept verbatim."""

    data: bytes = b""

    @classmethod
    def from_bytes(cls, data: bytes) -> RawResponse:
        if len(data) < 1:
            raise ShortPacketError(cls.__name__, 1, len(data))
        return cls(completion_code=data[0], data=bytes(data[1:]))

    def _payload(self) -> bytes:
        return self.data


@dataclass
class Request:
    """A command addressed by network function and command code."""

    netfn: int
    command: int
    payload: Any = field(default_factory=EmptyRequest)

    def to_bytes(self) -> bytes:
        return self.payload.to_bytes()

    def __repr__(self) -> str:
        return (
            f"Request(netfn=0x{int(self.netfn):02X}, "
            f"command=0x{int(self.command):02X}, payload={self.payload!r})"
        )
