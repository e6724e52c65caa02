"""Request and response message types, one pair per command."""

from .app import DeviceIDRequest, DeviceIDResponse
from .chassis import (
    BootDevice,
    BootParam,
    ChassisControl,
    ChassisControlRequest,
    ChassisControlResponse,
    ChassisStatusRequest,
    ChassisStatusResponse,
    SetSystemBootOptionsRequest,
    SetSystemBootOptionsResponse,
    SystemBootOptionsRequest,
    SystemBootOptionsResponse,
    boot_flags,
)
from .user import (
    DisableUserRequest,
    DisableUserResponse,
    EnableUserRequest,
    EnableUserResponse,
    GetUserNameRequest,
    GetUserNameResponse,
    GetUserSummaryRequest,
    GetUserSummaryResponse,
    SetUserAccessRequest,
    SetUserAccessResponse,
    SetUserNameRequest,
    SetUserNameResponse,
    SetUserPassRequest,
    SetUserPassResponse,
)
