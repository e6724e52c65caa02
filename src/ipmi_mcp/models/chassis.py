"""Chassis status, chassis control and system boot options.

Boot flags (parameter 5) data layout as written by :func:`boot_flags`::

    +-------------+-------------------------------+----------------+
    | Byte 0      | Byte 1                        | Bytes 2-4      |
    | 0x80 valid  | 0x40 persistent | 0x3C device | reserved, zero |
    +-------------+-------------------------------+----------------+
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import ClassVar

from ..protocol.envelope import EmptyRequest, Response
from ..protocol.errors import ShortPacketError, check_length

BOOT_FLAGS_VALID = 0x80
BOOT_FLAGS_PERSISTENT = 0x40
BOOT_DEVICE_MASK = 0x3C
BOOT_PARAM_MASK = 0x7F
BOOT_OPTIONS_VERSION = 0x01


class PowerState(IntFlag):
    """Bits of the current power state byte."""

    SYSTEM_POWER = 0x01
    POWER_OVERLOAD = 0x02
    POWER_INTERLOCK = 0x04
    MAIN_POWER_FAULT = 0x08
    POWER_CONTROL_FAULT = 0x10


class PowerRestorePolicy(IntEnum):
    ALWAYS_OFF = 0
    PREVIOUS = 1
    ALWAYS_ON = 2
    UNKNOWN = 3


class ChassisControl(IntEnum):
    """Chassis Control request values."""

    POWER_DOWN = 0x00
    POWER_UP = 0x01
    POWER_CYCLE = 0x02
    HARD_RESET = 0x03
    PULSE_DIAGNOSTIC_INTERRUPT = 0x04
    SOFT_SHUTDOWN = 0x05


class BootDevice(IntEnum):
    """Boot device selectors, already shifted into bits 5..2."""

    NONE = 0x00
    PXE = 0x04
    DISK = 0x08
    SAFE = 0x0C
    DIAG = 0x10
    CDROM = 0x14
    BIOS = 0x18
    REMOTE_FLOPPY = 0x1C
    REMOTE_PRIMARY_MEDIA = 0x20
    REMOTE_CDROM = 0x24
    REMOTE_DISK = 0x2C
    FLOPPY = 0x3C


class BootParam(IntEnum):
    """System boot option parameter selectors."""

    SET_IN_PROGRESS = 0x00
    SERVICE_PARTITION_SELECTOR = 0x01
    SERVICE_PARTITION_SCAN = 0x02
    BMC_BOOT_FLAG_VALID_BIT_CLEARING = 0x03
    BOOT_INFO_ACKNOWLEDGE = 0x04
    BOOT_FLAGS = 0x05
    BOOT_INITIATOR_INFO = 0x06
    BOOT_INITIATOR_MAILBOX = 0x07


# Data lengths for parameters with a fixed layout. Parameters missing
# here are carried verbatim.
BOOT_PARAM_LENGTHS: dict[int, int] = {
    BootParam.SET_IN_PROGRESS: 1,
    BootParam.SERVICE_PARTITION_SELECTOR: 1,
    BootParam.SERVICE_PARTITION_SCAN: 1,
    BootParam.BMC_BOOT_FLAG_VALID_BIT_CLEARING: 1,
    BootParam.BOOT_INFO_ACKNOWLEDGE: 2,
    BootParam.BOOT_FLAGS: 5,
    BootParam.BOOT_INITIATOR_INFO: 9,
}


def boot_flags(device: BootDevice, persistent: bool = False) -> bytes:
    """Build the 5-byte boot flags parameter data for ``device``."""
    selector = int(device) & BOOT_DEVICE_MASK
    if persistent:
        selector |= BOOT_FLAGS_PERSISTENT
    return bytes([BOOT_FLAGS_VALID, selector, 0x00, 0x00, 0x00])


def _check_param_data(message: str, param: int, data: bytes) -> None:
    expected = BOOT_PARAM_LENGTHS.get(param & BOOT_PARAM_MASK)
    if expected is not None:
        check_length(message, data, expected)


@dataclass
class ChassisStatusRequest(EmptyRequest):
    """Get Chassis Status takes no request data."""


@dataclass
class ChassisStatusResponse(Response):
    """Parsed Get Chassis Status response."""

    SIZES: ClassVar[tuple[int, ...]] = (4, 5)

    power_state: int = 0
    last_power_event: int = 0
    misc_chassis_state: int = 0
    front_panel_buttons: int | None = None

    @property
    def powered_on(self) -> bool:
        return bool(self.power_state & PowerState.SYSTEM_POWER)

    @property
    def power_restore_policy(self) -> PowerRestorePolicy:
        return PowerRestorePolicy((self.power_state >> 5) & 0x03)

    @classmethod
    def _decode(cls, data: bytes) -> ChassisStatusResponse:
        return cls(
            completion_code=data[0],
            power_state=data[1],
            last_power_event=data[2],
            misc_chassis_state=data[3],
            front_panel_buttons=data[4] if len(data) > 4 else None,
        )

    def _payload(self) -> bytes:
        payload = bytes([self.power_state, self.last_power_event, self.misc_chassis_state])
        if self.front_panel_buttons is not None:
            payload += bytes([self.front_panel_buttons])
        return payload

    def to_dict(self) -> dict:
        faults = [
            flag.name.lower() for flag in PowerState
            if flag is not PowerState.SYSTEM_POWER and self.power_state & flag
        ]
        return {
            "powered_on": self.powered_on,
            "power_restore_policy": self.power_restore_policy.name.lower(),
            "faults": faults,
            "last_power_event": self.last_power_event,
            "misc_chassis_state": self.misc_chassis_state,
        }


@dataclass
class ChassisControlRequest:
    """Chassis Control: a single control byte."""

    SIZE: ClassVar[int] = 1

    control: int = ChassisControl.POWER_DOWN

    def to_bytes(self) -> bytes:
        return bytes([self.control])

    @classmethod
    def from_bytes(cls, data: bytes) -> ChassisControlRequest:
        check_length(cls.__name__, data, cls.SIZE)
        return cls(control=data[0])


@dataclass
class ChassisControlResponse(Response):
    pass


@dataclass
class SetSystemBootOptionsRequest:
    """Set System Boot Options: parameter selector plus its data.

    Data for parameters with a declared length must match it exactly, so a
    boot flags payload without its trailing reserved bytes is rejected
    before it reaches the wire.
    """

    param: int = BootParam.BOOT_FLAGS
    data: bytes = b""

    def to_bytes(self) -> bytes:
        _check_param_data(type(self).__name__, self.param, bytes(self.data))
        return bytes([self.param]) + bytes(self.data)

    @classmethod
    def from_bytes(cls, data: bytes) -> SetSystemBootOptionsRequest:
        if len(data) < 1:
            raise ShortPacketError(cls.__name__, 1, len(data))
        _check_param_data(cls.__name__, data[0], data[1:])
        return cls(param=data[0], data=bytes(data[1:]))


@dataclass
class SetSystemBootOptionsResponse(Response):
    pass


@dataclass
class SystemBootOptionsRequest:
    """Get System Boot Options: parameter, set selector, block selector."""

    SIZE: ClassVar[int] = 3

    param: int = BootParam.BOOT_FLAGS
    set_selector: int = 0
    block_selector: int = 0

    def to_bytes(self) -> bytes:
        return bytes([self.param, self.set_selector, self.block_selector])

    @classmethod
    def from_bytes(cls, data: bytes) -> SystemBootOptionsRequest:
        check_length(cls.__name__, data, cls.SIZE)
        return cls(param=data[0], set_selector=data[1], block_selector=data[2])


@dataclass
class SystemBootOptionsResponse(Response):
    """Parsed Get System Boot Options response."""

    version: int = BOOT_OPTIONS_VERSION
    param: int = 0
    data: bytes = b""

    @classmethod
    def sizes(cls, data: bytes) -> tuple[int, ...]:
        if len(data) < 3:
            return (3,)
        expected = BOOT_PARAM_LENGTHS.get(data[2] & BOOT_PARAM_MASK)
        if expected is None:
            return (len(data),)
        return (3 + expected,)

    @classmethod
    def _decode(cls, data: bytes) -> SystemBootOptionsResponse:
        return cls(
            completion_code=data[0],
            version=data[1],
            param=data[2] & BOOT_PARAM_MASK,
            data=data[3:],
        )

    def _payload(self) -> bytes:
        return bytes([self.version, self.param]) + bytes(self.data)

    def boot_device_selector(self) -> BootDevice | int:
        """Return the boot device encoded in boot flags byte 1."""
        if len(self.data) < 2:
            return BootDevice.NONE
        selector = self.data[1] & BOOT_DEVICE_MASK
        try:
            return BootDevice(selector)
        except ValueError:
            return selector

    @property
    def persistent(self) -> bool:
        return len(self.data) > 1 and bool(self.data[1] & BOOT_FLAGS_PERSISTENT)

    @property
    def valid(self) -> bool:
        return len(self.data) > 0 and bool(self.data[0] & BOOT_FLAGS_VALID)
