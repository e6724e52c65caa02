"""High-level BMC client.

Wraps a transport with one method per supported command::

    with Client(Connection(hostname="10.0.0.5", username="admin",
                           password="secret", path="ipmitool")) as bmc:
        print(bmc.device_id().firmware_version)
        bmc.set_boot_device(BootDevice.PXE, persistent=True)
"""

from __future__ import annotations

import logging

from .models.app import DeviceIDRequest, DeviceIDResponse
from .models.chassis import (
    BootDevice,
    BootParam,
    ChassisControl,
    ChassisControlRequest,
    ChassisStatusRequest,
    ChassisStatusResponse,
    SetSystemBootOptionsRequest,
    SystemBootOptionsRequest,
    SystemBootOptionsResponse,
    boot_flags,
)
from .models.session import CURRENT_CHANNEL
from .models.user import (
    DisableUserRequest,
    DisableUserResponse,
    EnableUserRequest,
    EnableUserResponse,
    GetUserNameRequest,
    GetUserSummaryRequest,
    GetUserSummaryResponse,
    SetUserAccessRequest,
    SetUserNameRequest,
    SetUserPassRequest,
)
from .protocol.commands import AppCommand, ChassisCommand, NetworkFunction
from .protocol.envelope import Request
from .transport import Connection, Transport, new_transport

logger = logging.getLogger(__name__)


class Client:
    """Issues commands to one BMC over one transport."""

    def __init__(self, connection: Connection, transport: Transport | None = None) -> None:
        self._connection = connection
        self._transport = transport or new_transport(connection)

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def connected(self) -> bool:
        return self._transport.is_open

    def open(self) -> None:
        self._transport.open()

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> Client:
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def send(self, request: Request, response_type: type | None = None):
        return self._transport.send(request, response_type)

    # ─── APP ──────────────────────────────────────────────────────────

    def device_id(self) -> DeviceIDResponse:
        return self.send(Request(
            NetworkFunction.APP, AppCommand.GET_DEVICE_ID, DeviceIDRequest()
        ))

    # ─── CHASSIS ──────────────────────────────────────────────────────

    def chassis_status(self) -> ChassisStatusResponse:
        return self.send(Request(
            NetworkFunction.CHASSIS, ChassisCommand.GET_CHASSIS_STATUS, ChassisStatusRequest()
        ))

    def control(self, control: ChassisControl) -> None:
        """Power on/off, cycle, reset, or soft-shutdown the chassis."""
        name = control.name if isinstance(control, ChassisControl) else f"0x{int(control):02X}"
        logger.info("Chassis control %s on %s", name, self._connection.hostname)
        self.send(Request(
            NetworkFunction.CHASSIS,
            ChassisCommand.CHASSIS_CONTROL,
            ChassisControlRequest(control),
        ))

    def set_boot_device(self, device: BootDevice, persistent: bool = False) -> None:
        """Set the boot device for the next (or every, if persistent) boot."""
        self.send(Request(
            NetworkFunction.CHASSIS,
            ChassisCommand.SET_SYSTEM_BOOT_OPTIONS,
            SetSystemBootOptionsRequest(BootParam.BOOT_FLAGS, boot_flags(device, persistent)),
        ))

    def boot_options(self, param: int = BootParam.BOOT_FLAGS) -> SystemBootOptionsResponse:
        return self.send(Request(
            NetworkFunction.CHASSIS,
            ChassisCommand.GET_SYSTEM_BOOT_OPTIONS,
            SystemBootOptionsRequest(param),
        ))

    def boot_device(self) -> BootDevice | int:
        return self.boot_options().boot_device_selector()

    # ─── USERS ────────────────────────────────────────────────────────

    def user_name(self, user_id: int) -> str:
        response = self.send(Request(
            NetworkFunction.APP, AppCommand.GET_USER_NAME, GetUserNameRequest(user_id)
        ))
        return response.username

    def set_user_name(self, user_id: int, username: str) -> None:
        self.send(Request(
            NetworkFunction.APP,
            AppCommand.SET_USER_NAME,
            SetUserNameRequest(user_id, username),
        ))

    def set_user_password(self, user_id: int, password: str | bytes) -> None:
        if isinstance(password, str):
            password = password.encode("utf-8")
        self.send(Request(
            NetworkFunction.APP,
            AppCommand.SET_USER_PASSWORD,
            SetUserPassRequest(user_id, password),
        ))

    def enable_user(self, user_id: int) -> None:
        self.send(
            Request(NetworkFunction.APP, AppCommand.SET_USER_PASSWORD, EnableUserRequest(user_id)),
            EnableUserResponse,
        )

    def disable_user(self, user_id: int) -> None:
        self.send(
            Request(NetworkFunction.APP, AppCommand.SET_USER_PASSWORD, DisableUserRequest(user_id)),
            DisableUserResponse,
        )

    def user_summary(self, user_id: int, channel: int = CURRENT_CHANNEL) -> GetUserSummaryResponse:
        return self.send(Request(
            NetworkFunction.APP,
            AppCommand.GET_USER_ACCESS,
            GetUserSummaryRequest(channel, user_id),
        ))

    def set_user_access(
        self,
        user_id: int,
        privilege: int,
        channel: int = CURRENT_CHANNEL,
        session_limit: int = 0,
    ) -> None:
        """Grant ``user_id`` a privilege level on ``channel``.

        Also enables IPMI messaging for the user on that channel.
        """
        self.send(Request(
            NetworkFunction.APP,
            AppCommand.SET_USER_ACCESS,
            SetUserAccessRequest(
                access_options=0x80 | 0x10 | (channel & 0x0F),
                user_id=user_id,
                user_limits=privilege & 0x0F,
                user_session_limit=session_limit,
            ),
        ))
