"""Transport interface.

Every backend moves encoded request bytes to the BMC and returns the raw
reply, status byte first. Encoding, decoding and the completion check
live here so that all backends behave identically above the wire.

Usage::

    transport = new_transport(Connection(hostname="10.0.0.5", ...))
    with transport:
        info = transport.send(Request(NetworkFunction.APP,
                                      AppCommand.GET_DEVICE_ID,
                                      DeviceIDRequest()))
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from ..protocol.commands import format_command
from ..protocol.completion import check_completion
from ..protocol.envelope import Request
from ..protocol.errors import TransportError
from ..protocol.registry import response_type_for
from .connection import Connection

logger = logging.getLogger(__name__)


class Transport(ABC):
    """One session with one BMC. Not safe for concurrent use."""

    def __init__(self, connection: Connection) -> None:
        self._connection = connection
        self._open = False

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        """Acquire the channel. A no-op when already open."""
        if self._open:
            return
        self._open_channel()
        self._open = True
        logger.info("Opened %s to %s", type(self).__name__, self._connection.hostname)

    def close(self) -> None:
        """Release the channel. Closing a closed transport does nothing."""
        if not self._open:
            return
        try:
            self._close_channel()
        finally:
            self._open = False
            logger.info("Closed %s to %s", type(self).__name__, self._connection.hostname)

    def send(self, request: Request, response_type: type | None = None):
        """Run one command and return its decoded, successful response.

        Args:
            request: The command to send.
            response_type: Class to decode the reply into. Defaults to the
                registered response for the request's routing key.

        Raises:
            TransportError: The transport is closed or the exchange failed.
            MalformedPacketError: The request or reply has the wrong size.
            DeviceError: The BMC returned a nonzero completion code.
        """
        if not self._open:
            raise TransportError("Transport is not open")
        return self._roundtrip(request, response_type)

    def _roundtrip(self, request: Request, response_type: type | None = None):
        if response_type is None:
            response_type = response_type_for(request)

        data = request.to_bytes()
        name = format_command(request.netfn, request.command)
        logger.debug("-> %s %s", name, data.hex(" "))
        reply = self._exchange(int(request.netfn), int(request.command), data)
        logger.debug("<- %s %s", name, reply.hex(" "))

        return check_completion(response_type.from_bytes(reply))

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @abstractmethod
    def _open_channel(self) -> None:
        """Establish the underlying process handle or socket."""

    @abstractmethod
    def _close_channel(self) -> None:
        """Tear down the underlying process handle or socket."""

    @abstractmethod
    def _exchange(self, netfn: int, command: int, data: bytes) -> bytes:
        """Deliver one request and return the reply, status byte first."""
