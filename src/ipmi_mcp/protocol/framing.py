"""RMCP / IPMI v1.5 LAN datagram builder and parser.

Datagram layout::

    +-------------+------+----------+------------+-----------+--------+---------------+
    | RMCP header | Auth | Sequence | Session ID | Auth code | Length | IPMI message  |
    | 4 bytes     | 1    | 4 LE     | 4 LE       | 16, opt.  | 1      | Length bytes  |
    +-------------+------+----------+------------+-----------+--------+---------------+

IPMI message layout::

    +--------+-----------+------+--------+-----------+-----+------+------+
    | Target | NetFn/LUN | Chk1 | Source | Seq/LUN   | Cmd | Data | Chk2 |
    +--------+-----------+------+--------+-----------+-----+------+------+

- RMCP header: version 0x06, reserved, sequence 0xFF (no ACK), class 0x07
- Auth code: present only when the auth type is not NONE
- Chk1 covers target and netfn; Chk2 covers source through data
- For responses, Data begins with the completion code
"""

from __future__ import annotations

from dataclasses import dataclass

from ..utils.checksum import checksum, verify
from .errors import LongPacketError, ShortPacketError, TransportError

RMCP_HEADER = b"\x06\x00\xFF\x07"
RMCP_CLASS_IPMI = 0x07
BMC_ADDRESS = 0x20
REMOTE_SWID = 0x81
AUTH_CODE_LEN = 16
MIN_MESSAGE_LEN = 7  # target, netfn, chk1, source, seq, cmd, chk2


@dataclass
class Frame:
    """A parsed IPMI LAN datagram."""

    netfn: int
    command: int
    data: bytes = b""
    sequence: int = 0
    session_id: int = 0
    auth_type: int = 0
    auth_code: bytes = b""
    rq_seq: int = 0
    target_address: int = BMC_ADDRESS
    source_address: int = REMOTE_SWID
    target_lun: int = 0
    source_lun: int = 0

    def __repr__(self) -> str:
        return (
            f"Frame(netfn=0x{self.netfn:02X}, command=0x{self.command:02X}, "
            f"seq={self.rq_seq}, session=0x{self.session_id:08X}, "
            f"data={self.data.hex(' ') if self.data else '(empty)'})"
        )


def build_message(frame: Frame) -> bytes:
    """Build the IPMI message portion of ``frame`` with both checksums."""
    head = bytes([frame.target_address, (frame.netfn << 2) | (frame.target_lun & 0x03)])
    body = bytes([
        frame.source_address,
        ((frame.rq_seq & 0x3F) << 2) | (frame.source_lun & 0x03),
        frame.command,
    ]) + frame.data
    return head + bytes([checksum(head)]) + body + bytes([checksum(body)])


def build_frame(frame: Frame) -> bytes:
    """Build a complete RMCP datagram for ``frame``."""
    message = build_message(frame)
    if len(message) > 0xFF:
        raise LongPacketError("IPMI message", 0xFF, len(message))
    session = bytes([frame.auth_type]) \
        + (frame.sequence & 0xFFFFFFFF).to_bytes(4, "little") \
        + (frame.session_id & 0xFFFFFFFF).to_bytes(4, "little")
    if frame.auth_type:
        if len(frame.auth_code) != AUTH_CODE_LEN:
            raise ShortPacketError("auth code", AUTH_CODE_LEN, len(frame.auth_code))
        session += frame.auth_code
    return RMCP_HEADER + session + bytes([len(message)]) + message


def parse_message(message: bytes, **session) -> Frame:
    """Parse an IPMI message, verifying both checksums."""
    if len(message) < MIN_MESSAGE_LEN:
        raise ShortPacketError("IPMI message", MIN_MESSAGE_LEN, len(message))
    if not verify(message[0:2], message[2]):
        raise TransportError("IPMI message header checksum mismatch")
    if not verify(message[3:-1], message[-1]):
        raise TransportError("IPMI message body checksum mismatch")
    return Frame(
        target_address=message[0],
        netfn=message[1] >> 2,
        target_lun=message[1] & 0x03,
        source_address=message[3],
        rq_seq=message[4] >> 2,
        source_lun=message[4] & 0x03,
        command=message[5],
        data=bytes(message[6:-1]),
        **session,
    )


def parse_frame(data: bytes) -> Frame:
    """Parse an RMCP datagram carrying an IPMI v1.5 session message.

    Raises:
        ShortPacketError: The datagram is truncated.
        LongPacketError: Bytes follow the declared message length.
        TransportError: Not an IPMI RMCP datagram, or a checksum fails.
    """
    if len(data) < len(RMCP_HEADER) + 10:
        raise ShortPacketError("RMCP datagram", len(RMCP_HEADER) + 10, len(data))
    if data[0] != RMCP_HEADER[0] or data[3] & 0x1F != RMCP_CLASS_IPMI:
        raise TransportError(f"Not an IPMI RMCP datagram: {data[:4].hex(' ')}")

    offset = len(RMCP_HEADER)
    auth_type = data[offset]
    sequence = int.from_bytes(data[offset + 1 : offset + 5], "little")
    session_id = int.from_bytes(data[offset + 5 : offset + 9], "little")
    offset += 9

    auth_code = b""
    if auth_type:
        auth_code = bytes(data[offset : offset + AUTH_CODE_LEN])
        if len(auth_code) < AUTH_CODE_LEN:
            raise ShortPacketError("RMCP auth code", AUTH_CODE_LEN, len(auth_code))
        offset += AUTH_CODE_LEN

    if len(data) <= offset:
        raise ShortPacketError("RMCP datagram", offset + 1, len(data))
    length = data[offset]
    message = data[offset + 1 :]
    if len(message) < length:
        raise ShortPacketError("IPMI message", length, len(message))
    if len(message) > length:
        raise LongPacketError("IPMI message", length, len(message))

    return parse_message(
        message,
        sequence=sequence,
        session_id=session_id,
        auth_type=auth_type,
        auth_code=auth_code,
    )
