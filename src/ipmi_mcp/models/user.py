"""User management messages (App 0x43-0x47).

Usernames and passwords occupy fixed 16-byte fields on the wire; the
limit applies to the UTF-8 encoded bytes. Names are zero-padded on encode and have trailing zeros stripped on decode;
passwords are copied verbatim and are not null-terminated.

Set User Password (0x47) also enables and disables users: byte 1 selects
the operation, see :class:`UserPasswordOperation`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from ..protocol.envelope import Response
from ..protocol.errors import LongPacketError, ShortPacketError, check_length

MAX_USERNAME_LEN = 16
MAX_PASSWORD_LEN = 16


class UserPasswordOperation(IntEnum):
    DISABLE_USER = 0x00
    ENABLE_USER = 0x01
    SET_PASSWORD = 0x02
    TEST_PASSWORD = 0x03


def encode_username(message: str, username: str) -> bytes:
    """Encode ``username`` into its fixed-width, zero-padded field."""
    raw = username.encode("utf-8")
    if len(raw) > MAX_USERNAME_LEN:
        raise LongPacketError(message + ".username", MAX_USERNAME_LEN, len(raw))
    return raw.ljust(MAX_USERNAME_LEN, b"\x00")


def decode_username(field: bytes) -> str:
    """Decode a fixed-width username field, dropping the zero padding."""
    return field.rstrip(b"\x00").decode("utf-8", errors="replace")


@dataclass
class GetUserNameRequest:
    SIZE: ClassVar[int] = 1

    user_id: int = 0

    def to_bytes(self) -> bytes:
        return bytes([self.user_id])

    @classmethod
    def from_bytes(cls, data: bytes) -> GetUserNameRequest:
        check_length(cls.__name__, data, cls.SIZE)
        return cls(user_id=data[0])


@dataclass
class GetUserNameResponse(Response):
    SIZES: ClassVar[tuple[int, ...]] = (1 + MAX_USERNAME_LEN,)

    username: str = ""

    @classmethod
    def _decode(cls, data: bytes) -> GetUserNameResponse:
        return cls(completion_code=data[0], username=decode_username(data[1:]))

    def _payload(self) -> bytes:
        return encode_username(type(self).__name__, self.username)


@dataclass
class SetUserNameRequest:
    SIZE: ClassVar[int] = 1 + MAX_USERNAME_LEN

    user_id: int = 0
    username: str = ""

    def to_bytes(self) -> bytes:
        return bytes([self.user_id]) + encode_username(type(self).__name__, self.username)

    @classmethod
    def from_bytes(cls, data: bytes) -> SetUserNameRequest:
        check_length(cls.__name__, data, cls.SIZE)
        return cls(user_id=data[0], username=decode_username(data[1:]))


@dataclass
class SetUserNameResponse(Response):
    pass


@dataclass
class SetUserPassRequest:
    """Set a user's password: user id, operation 0x02, 16 password bytes."""

    SIZE: ClassVar[int] = 2 + MAX_PASSWORD_LEN

    user_id: int = 0
    password: bytes = b""

    def to_bytes(self) -> bytes:
        password = bytes(self.password)
        if len(password) > MAX_PASSWORD_LEN:
            raise LongPacketError(
                type(self).__name__ + ".password", MAX_PASSWORD_LEN, len(password)
            )
        buf = bytearray(self.SIZE)
        buf[0] = self.user_id
        buf[1] = UserPasswordOperation.SET_PASSWORD
        buf[2 : 2 + len(password)] = password
        return bytes(buf)

    @classmethod
    def from_bytes(cls, data: bytes) -> SetUserPassRequest:
        check_length(cls.__name__, data, cls.SIZE)
        return cls(user_id=data[0], password=bytes(data[2:]))


@dataclass
class SetUserPassResponse(Response):
    pass


@dataclass
class EnableUserRequest:
    """Enable a user: user id followed by operation 0x01."""

    SIZE: ClassVar[int] = 2
    OPERATION: ClassVar[int] = UserPasswordOperation.ENABLE_USER

    user_id: int = 0

    def to_bytes(self) -> bytes:
        return bytes([self.user_id, self.OPERATION])

    @classmethod
    def from_bytes(cls, data: bytes):
        check_length(cls.__name__, data, cls.SIZE)
        return cls(user_id=data[0])


@dataclass
class EnableUserResponse(Response):
    pass


@dataclass
class DisableUserRequest(EnableUserRequest):
    """Disable a user: user id followed by operation 0x00."""

    OPERATION: ClassVar[int] = UserPasswordOperation.DISABLE_USER


@dataclass
class DisableUserResponse(Response):
    pass


def parse_user_password_request(data: bytes):
    """Decode a Set User Password request according to its operation byte."""
    if len(data) < 2:
        raise ShortPacketError("SetUserPasswordRequest", 2, len(data))
    operation = data[1] & 0x03
    if operation == UserPasswordOperation.ENABLE_USER:
        return EnableUserRequest.from_bytes(data)
    if operation == UserPasswordOperation.DISABLE_USER:
        return DisableUserRequest.from_bytes(data)
    return SetUserPassRequest.from_bytes(data)


@dataclass
class GetUserSummaryRequest:
    """Get User Access: channel number and user id."""

    SIZE: ClassVar[int] = 2

    channel_number: int = 0
    user_id: int = 0

    def to_bytes(self) -> bytes:
        return bytes([self.channel_number, self.user_id])

    @classmethod
    def from_bytes(cls, data: bytes) -> GetUserSummaryRequest:
        check_length(cls.__name__, data, cls.SIZE)
        return cls(channel_number=data[0], user_id=data[1])


@dataclass
class GetUserSummaryResponse(Response):
    SIZES: ClassVar[tuple[int, ...]] = (5,)

    max_users: int = 0
    curr_enabled_users: int = 0
    fixed_name_users: int = 0
    channel_access: int = 0

    @classmethod
    def _decode(cls, data: bytes) -> GetUserSummaryResponse:
        return cls(
            completion_code=data[0],
            max_users=data[1] & 0x3F,
            curr_enabled_users=data[2] & 0x3F,
            fixed_name_users=data[3] & 0x3F,
            channel_access=data[4],
        )

    def _payload(self) -> bytes:
        return bytes([
            self.max_users, self.curr_enabled_users,
            self.fixed_name_users, self.channel_access,
        ])

    @property
    def privilege(self) -> int:
        return self.channel_access & 0x0F


@dataclass
class SetUserAccessRequest:
    SIZE: ClassVar[int] = 4

    access_options: int = 0
    user_id: int = 0
    user_limits: int = 0
    user_session_limit: int = 0

    def to_bytes(self) -> bytes:
        return bytes([
            self.access_options, self.user_id,
            self.user_limits, self.user_session_limit,
        ])

    @classmethod
    def from_bytes(cls, data: bytes) -> SetUserAccessRequest:
        check_length(cls.__name__, data, cls.SIZE)
        return cls(
            access_options=data[0],
            user_id=data[1],
            user_limits=data[2],
            user_session_limit=data[3],
        )


@dataclass
class SetUserAccessResponse(Response):
    pass
