"""Get Device ID (App 0x01).

Response layout::

    +----+-----+-----+-----+-----+-----+-----+------------+---------+-------------+
    | CC | Dev | Rev | FW1 | FW2 | Ver | Add | Mfr ID     | Product | Aux FW rev  |
    | 1  | 1   | 1   | 1   | 1   | 1   | 1   | 3 bytes LE | 2 LE    | 4, optional |
    +----+-----+-----+-----+-----+-----+-----+------------+---------+-------------+
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from ..protocol.envelope import EmptyRequest, Response
from ..protocol.errors import check_length

DEVICE_ID_SIZE = 12
DEVICE_ID_AUX_SIZE = 16


@dataclass
class DeviceIDRequest(EmptyRequest):
    """Get Device ID takes no request data."""


@dataclass
class DeviceIDResponse(Response):
    """Parsed Get Device ID response."""

    SIZES: ClassVar[tuple[int, ...]] = (DEVICE_ID_SIZE, DEVICE_ID_AUX_SIZE)

    device_id: int = 0
    device_revision: int = 0
    firmware_revision_1: int = 0
    firmware_revision_2: int = 0
    ipmi_version: int = 0
    additional_device_support: int = 0
    manufacturer_id: int = 0
    product_id: int = 0
    aux_firmware_revision: bytes = b""

    @property
    def firmware_version(self) -> str:
        """Firmware revision as ``major.minor`` (minor is BCD)."""
        return f"{self.firmware_revision_1 & 0x7F}.{self.firmware_revision_2:02X}"

    @property
    def ipmi_version_string(self) -> str:
        return f"{self.ipmi_version & 0x0F}.{self.ipmi_version >> 4}"

    @property
    def provides_sdrs(self) -> bool:
        return bool(self.device_revision & 0x80)

    @classmethod
    def _decode(cls, data: bytes) -> DeviceIDResponse:
        return cls(
            completion_code=data[0],
            device_id=data[1],
            device_revision=data[2],
            firmware_revision_1=data[3],
            firmware_revision_2=data[4],
            ipmi_version=data[5],
            additional_device_support=data[6],
            manufacturer_id=int.from_bytes(data[7:10], "little"),
            product_id=int.from_bytes(data[10:12], "little"),
            aux_firmware_revision=data[12:],
        )

    def _payload(self) -> bytes:
        if self.aux_firmware_revision:
            check_length(
                type(self).__name__ + ".aux_firmware_revision",
                self.aux_firmware_revision,
                DEVICE_ID_AUX_SIZE - DEVICE_ID_SIZE,
            )
        return bytes([
            self.device_id, self.device_revision,
            self.firmware_revision_1, self.firmware_revision_2,
            self.ipmi_version, self.additional_device_support,
        ]) + self.manufacturer_id.to_bytes(3, "little") \
            + self.product_id.to_bytes(2, "little") \
            + self.aux_firmware_revision

    def to_dict(self) -> dict:
        return {
            "device_id": self.device_id,
            "device_revision": self.device_revision & 0x0F,
            "firmware_version": self.firmware_version,
            "ipmi_version": self.ipmi_version_string,
            "manufacturer_id": self.manufacturer_id,
            "product_id": self.product_id,
            "provides_sdrs": self.provides_sdrs,
        }
