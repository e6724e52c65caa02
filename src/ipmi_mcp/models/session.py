"""IPMI v1.5 session establishment messages (App 0x38-0x3C).

Only the message shapes live here; the LAN transport drives the
handshake.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar

from ..protocol.envelope import Response
from ..protocol.errors import check_length
from .user import MAX_USERNAME_LEN, decode_username, encode_username

CHALLENGE_LEN = 16
CURRENT_CHANNEL = 0x0E


class AuthType(IntEnum):
    NONE = 0x00
    MD2 = 0x01
    MD5 = 0x02
    PASSWORD = 0x04
    OEM = 0x05


class PrivilegeLevel(IntEnum):
    CALLBACK = 0x01
    USER = 0x02
    OPERATOR = 0x03
    ADMINISTRATOR = 0x04
    OEM = 0x05


@dataclass
class GetChannelAuthCapabilitiesRequest:
    SIZE: ClassVar[int] = 2

    channel: int = CURRENT_CHANNEL
    privilege: int = PrivilegeLevel.ADMINISTRATOR

    def to_bytes(self) -> bytes:
        return bytes([self.channel, self.privilege])

    @classmethod
    def from_bytes(cls, data: bytes) -> GetChannelAuthCapabilitiesRequest:
        check_length(cls.__name__, data, cls.SIZE)
        return cls(channel=data[0], privilege=data[1])


@dataclass
class GetChannelAuthCapabilitiesResponse(Response):
    SIZES: ClassVar[tuple[int, ...]] = (9,)

    channel: int = 0
    auth_type_support: int = 0
    auth_status: int = 0
    extended_capabilities: int = 0
    oem_id: int = 0
    oem_aux: int = 0

    def supports(self, auth_type: AuthType) -> bool:
        """Whether the channel accepts ``auth_type``."""
        return bool(self.auth_type_support & (1 << auth_type))

    @classmethod
    def _decode(cls, data: bytes) -> GetChannelAuthCapabilitiesResponse:
        return cls(
            completion_code=data[0],
            channel=data[1],
            auth_type_support=data[2],
            auth_status=data[3],
            extended_capabilities=data[4],
            oem_id=int.from_bytes(data[5:8], "little"),
            oem_aux=data[8],
        )

    def _payload(self) -> bytes:
        return bytes([
            self.channel, self.auth_type_support,
            self.auth_status, self.extended_capabilities,
        ]) + self.oem_id.to_bytes(3, "little") + bytes([self.oem_aux])


@dataclass
class GetSessionChallengeRequest:
    SIZE: ClassVar[int] = 1 + MAX_USERNAME_LEN

    auth_type: int = AuthType.NONE
    username: str = ""

    def to_bytes(self) -> bytes:
        return bytes([self.auth_type]) + encode_username(type(self).__name__, self.username)

    @classmethod
    def from_bytes(cls, data: bytes) -> GetSessionChallengeRequest:
        check_length(cls.__name__, data, cls.SIZE)
        return cls(auth_type=data[0], username=decode_username(data[1:]))


@dataclass
class GetSessionChallengeResponse(Response):
    SIZES: ClassVar[tuple[int, ...]] = (1 + 4 + CHALLENGE_LEN,)

    temporary_session_id: int = 0
    challenge: bytes = field(default_factory=lambda: b"\x00" * CHALLENGE_LEN)

    @classmethod
    def _decode(cls, data: bytes) -> GetSessionChallengeResponse:
        return cls(
            completion_code=data[0],
            temporary_session_id=int.from_bytes(data[1:5], "little"),
            challenge=data[5:],
        )

    def _payload(self) -> bytes:
        return self.temporary_session_id.to_bytes(4, "little") + self.challenge


@dataclass
class ActivateSessionRequest:
    SIZE: ClassVar[int] = 2 + CHALLENGE_LEN + 4

    auth_type: int = AuthType.NONE
    privilege: int = PrivilegeLevel.ADMINISTRATOR
    challenge: bytes = field(default_factory=lambda: b"\x00" * CHALLENGE_LEN)
    initial_outbound_sequence: int = 1

    def to_bytes(self) -> bytes:
        check_length(type(self).__name__ + ".challenge", self.challenge, CHALLENGE_LEN)
        return bytes([self.auth_type, self.privilege]) + self.challenge \
            + self.initial_outbound_sequence.to_bytes(4, "little")

    @classmethod
    def from_bytes(cls, data: bytes) -> ActivateSessionRequest:
        check_length(cls.__name__, data, cls.SIZE)
        return cls(
            auth_type=data[0],
            privilege=data[1],
            challenge=data[2:18],
            initial_outbound_sequence=int.from_bytes(data[18:22], "little"),
        )


@dataclass
class ActivateSessionResponse(Response):
    SIZES: ClassVar[tuple[int, ...]] = (11,)

    auth_type: int = AuthType.NONE
    session_id: int = 0
    initial_inbound_sequence: int = 0
    max_privilege: int = 0

    @classmethod
    def _decode(cls, data: bytes) -> ActivateSessionResponse:
        return cls(
            completion_code=data[0],
            auth_type=data[1],
            session_id=int.from_bytes(data[2:6], "little"),
            initial_inbound_sequence=int.from_bytes(data[6:10], "little"),
            max_privilege=data[10],
        )

    def _payload(self) -> bytes:
        return bytes([self.auth_type]) + self.session_id.to_bytes(4, "little") \
            + self.initial_inbound_sequence.to_bytes(4, "little") \
            + bytes([self.max_privilege])


@dataclass
class SetSessionPrivilegeRequest:
    SIZE: ClassVar[int] = 1

    privilege: int = PrivilegeLevel.ADMINISTRATOR

    def to_bytes(self) -> bytes:
        return bytes([self.privilege])

    @classmethod
    def from_bytes(cls, data: bytes) -> SetSessionPrivilegeRequest:
        check_length(cls.__name__, data, cls.SIZE)
        return cls(privilege=data[0])


@dataclass
class SetSessionPrivilegeResponse(Response):
    SIZES: ClassVar[tuple[int, ...]] = (2,)

    privilege: int = 0

    @classmethod
    def _decode(cls, data: bytes) -> SetSessionPrivilegeResponse:
        return cls(completion_code=data[0], privilege=data[1])

    def _payload(self) -> bytes:
        return bytes([self.privilege])


@dataclass
class CloseSessionRequest:
    SIZE: ClassVar[int] = 4

    session_id: int = 0

    def to_bytes(self) -> bytes:
        return self.session_id.to_bytes(4, "little")

    @classmethod
    def from_bytes(cls, data: bytes) -> CloseSessionRequest:
        check_length(cls.__name__, data, cls.SIZE)
        return cls(session_id=int.from_bytes(data, "little"))


@dataclass
class CloseSessionResponse(Response):
    pass
