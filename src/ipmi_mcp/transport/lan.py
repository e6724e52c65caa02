"""Native IPMI v1.5 LAN transport over UDP.

Opens an unauthenticated (auth type NONE) session::

    Get Channel Auth Capabilities   session-less
    Get Session Challenge           session-less, yields a temporary id
    Activate Session                temporary id, sequence 0
    Set Session Privilege           session id, administrator

Every later command is one datagram out and one matching datagram in.
Replies to other requests are dropped. Nothing is retried; a missing
reply raises :class:`TransportTimeout`.
"""

from __future__ import annotations

import logging
import socket
import time

from ..models.session import (
    ActivateSessionRequest,
    AuthType,
    CloseSessionRequest,
    GetChannelAuthCapabilitiesRequest,
    GetSessionChallengeRequest,
    PrivilegeLevel,
    SetSessionPrivilegeRequest,
)
from ..protocol.commands import AppCommand, NetworkFunction, response_netfn
from ..protocol.envelope import Request
from ..protocol.errors import TransportError, TransportTimeout
from ..protocol.framing import Frame, build_frame, parse_frame
from .base import Transport
from .connection import Connection

logger = logging.getLogger(__name__)

MAX_DATAGRAM = 1024


class LANTransport(Transport):
    """Talks RMCP directly to the BMC's UDP port."""

    def __init__(self, connection: Connection, privilege: int = PrivilegeLevel.ADMINISTRATOR) -> None:
        super().__init__(connection)
        self._privilege = privilege
        self._sock: socket.socket | None = None
        self._session_id = 0
        self._sequence = 0
        self._rq_seq = 0

    @property
    def session_id(self) -> int:
        return self._session_id

    def _open_channel(self) -> None:
        conn = self._connection
        try:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self._sock.settimeout(conn.timeout)
            self._sock.connect((conn.hostname, conn.effective_port))
        except OSError as e:
            self._reset()
            raise TransportError(
                f"Could not reach {conn.hostname}:{conn.effective_port}: {e}"
            ) from e

        try:
            self._activate_session()
        except Exception:
            self._reset()
            raise

    def _activate_session(self) -> None:
        caps = self._roundtrip(Request(
            NetworkFunction.APP,
            AppCommand.GET_CHANNEL_AUTH_CAPABILITIES,
            GetChannelAuthCapabilitiesRequest(privilege=self._privilege),
        ))
        if not caps.supports(AuthType.NONE):
            raise TransportError(
                f"BMC does not accept auth type NONE "
                f"(supported mask 0x{caps.auth_type_support:02X})"
            )

        challenge = self._roundtrip(Request(
            NetworkFunction.APP,
            AppCommand.GET_SESSION_CHALLENGE,
            GetSessionChallengeRequest(AuthType.NONE, self._connection.username),
        ))

        self._session_id = challenge.temporary_session_id
        activated = self._roundtrip(Request(
            NetworkFunction.APP,
            AppCommand.ACTIVATE_SESSION,
            ActivateSessionRequest(
                auth_type=AuthType.NONE,
                privilege=self._privilege,
                challenge=challenge.challenge,
            ),
        ))
        self._session_id = activated.session_id
        self._sequence = activated.initial_inbound_sequence

        self._roundtrip(Request(
            NetworkFunction.APP,
            AppCommand.SET_SESSION_PRIVILEGE,
            SetSessionPrivilegeRequest(self._privilege),
        ))
        logger.debug("Session 0x%08X active", self._session_id)

    def _close_channel(self) -> None:
        try:
            if self._session_id:
                self._roundtrip(Request(
                    NetworkFunction.APP,
                    AppCommand.CLOSE_SESSION,
                    CloseSessionRequest(self._session_id),
                ))
        except Exception as e:
            logger.warning("Error closing session 0x%08X: %s", self._session_id, e)
            raise
        finally:
            self._reset()

    def _reset(self) -> None:
        if self._sock is not None:
            self._sock.close()
        self._sock = None
        self._session_id = 0
        self._sequence = 0

    def _next_sequence(self) -> int:
        # Session-less messages and Activate Session carry sequence 0.
        if not self._sequence:
            return 0
        sequence = self._sequence
        self._sequence = (self._sequence + 1) & 0xFFFFFFFF or 1
        return sequence

    def _next_rq_seq(self) -> int:
        self._rq_seq = (self._rq_seq + 1) & 0x3F
        return self._rq_seq

    def _exchange(self, netfn: int, command: int, data: bytes) -> bytes:
        if self._sock is None:
            raise TransportError("Socket is not connected")

        request = Frame(
            netfn=netfn,
            command=command,
            data=data,
            sequence=self._next_sequence(),
            session_id=self._session_id,
            rq_seq=self._next_rq_seq(),
        )
        deadline = time.monotonic() + self._connection.timeout
        self._io(self._sock.send, build_frame(request))
        while True:
            reply = parse_frame(self._receive(deadline))
            if (
                reply.netfn == response_netfn(netfn)
                and reply.command == command
                and reply.rq_seq == request.rq_seq
            ):
                return reply.data
            # Late reply to an earlier request.
            logger.debug(
                "Dropping unexpected reply %r to netfn=0x%02X command=0x%02X seq=%d",
                reply, netfn, command, request.rq_seq,
            )

    def _receive(self, deadline: float) -> bytes:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise self._timeout()
        self._sock.settimeout(remaining)
        return self._io(self._sock.recv, MAX_DATAGRAM)

    def _io(self, operation, argument):
        try:
            return operation(argument)
        except socket.timeout as e:
            raise self._timeout() from e
        except OSError as e:
            raise TransportError(f"Socket error: {e}") from e

    def _timeout(self) -> TransportTimeout:
        return TransportTimeout(
            f"No reply from {self._connection.hostname} "
            f"within {self._connection.timeout}s"
        )
