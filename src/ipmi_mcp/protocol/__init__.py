"""Protocol layer: envelope, completion codes, errors, and LAN framing."""

from .commands import AppCommand, ChassisCommand, NetworkFunction
from .completion import CompletionCode, check_completion
from .envelope import EmptyRequest, RawRequest, RawResponse, Request, Response
from .errors import (
    DeviceError,
    ErrorKind,
    IPMIError,
    LongPacketError,
    MalformedPacketError,
    ShortPacketError,
    TransportError,
    TransportTimeout,
)
