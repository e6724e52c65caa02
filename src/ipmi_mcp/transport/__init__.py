"""Transports: how encoded commands reach the BMC."""

from __future__ import annotations

from .base import Transport
from .connection import Connection
from .lan import LANTransport
from .tool import ToolTransport


def new_transport(connection: Connection) -> Transport:
    """Select a backend for ``connection``.

    A configured utility path selects the subprocess backend; otherwise
    the native LAN backend is used.
    """
    if connection.path:
        return ToolTransport(connection)
    return LANTransport(connection)
