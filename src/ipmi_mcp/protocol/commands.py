"""Network function and command identifiers.

A request is routed on the BMC by the pair (network function, command).
IPMI reuses command numbers across network functions (0x01 is both Get
Device ID and Get Chassis Status), so each network function gets its
own command enum.
"""

from __future__ import annotations

from enum import IntEnum


class NetworkFunction(IntEnum):
    """Request network functions. Responses use ``netfn | 1``."""

    CHASSIS = 0x00
    BRIDGE = 0x02
    SENSOR_EVENT = 0x04
    APP = 0x06
    FIRMWARE = 0x08
    STORAGE = 0x0A
    TRANSPORT = 0x0C


class AppCommand(IntEnum):
    """Application network function commands."""

    GET_DEVICE_ID = 0x01
    COLD_RESET = 0x02
    WARM_RESET = 0x03
    GET_CHANNEL_AUTH_CAPABILITIES = 0x38
    GET_SESSION_CHALLENGE = 0x39
    ACTIVATE_SESSION = 0x3A
    SET_SESSION_PRIVILEGE = 0x3B
    CLOSE_SESSION = 0x3C
    SET_USER_ACCESS = 0x43
    GET_USER_ACCESS = 0x44
    SET_USER_NAME = 0x45
    GET_USER_NAME = 0x46
    SET_USER_PASSWORD = 0x47


class ChassisCommand(IntEnum):
    """Chassis network function commands."""

    GET_CHASSIS_CAPABILITIES = 0x00
    GET_CHASSIS_STATUS = 0x01
    CHASSIS_CONTROL = 0x02
    SET_SYSTEM_BOOT_OPTIONS = 0x08
    GET_SYSTEM_BOOT_OPTIONS = 0x09


def response_netfn(netfn: int) -> int:
    """Return the network function a BMC answers ``netfn`` with."""
    return int(netfn) | 0x01


def format_command(netfn: int, command: int) -> str:
    """Render a routing key for log and error messages."""
    try:
        netfn_name = NetworkFunction(netfn).name
    except ValueError:
        netfn_name = f"0x{int(netfn):02X}"
    commands = {
        NetworkFunction.APP: AppCommand,
        NetworkFunction.CHASSIS: ChassisCommand,
    }
    enum = commands.get(netfn)
    try:
        command_name = enum(command).name if enum else f"0x{int(command):02X}"
    except ValueError:
        command_name = f"0x{int(command):02X}"
    return f"{netfn_name}/{command_name}"
