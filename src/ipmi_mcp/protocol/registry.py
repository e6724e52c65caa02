"""Message table keyed by (network function, command).

Dispatch never inspects payload types: the routing key alone selects
the request and response classes.
"""

from __future__ import annotations

from ..models import app, chassis, session, user
from .commands import AppCommand, ChassisCommand, NetworkFunction
from .envelope import RawRequest, RawResponse, Request

MESSAGES: dict[tuple[int, int], tuple[type, type]] = {}


def register(netfn: int, command: int, request_type: type, response_type: type) -> None:
    """Add a routing key. Registering a key twice is an error."""
    key = (int(netfn), int(command))
    if key in MESSAGES:
        raise ValueError(
            f"netfn=0x{key[0]:02X} command=0x{key[1]:02X} is already registered "
            f"to {MESSAGES[key][0].__name__}"
        )
    MESSAGES[key] = (request_type, response_type)


for _netfn, _command, _request, _response in (
    (NetworkFunction.APP, AppCommand.GET_DEVICE_ID,
     app.DeviceIDRequest, app.DeviceIDResponse),
    (NetworkFunction.APP, AppCommand.GET_CHANNEL_AUTH_CAPABILITIES,
     session.GetChannelAuthCapabilitiesRequest, session.GetChannelAuthCapabilitiesResponse),
    (NetworkFunction.APP, AppCommand.GET_SESSION_CHALLENGE,
     session.GetSessionChallengeRequest, session.GetSessionChallengeResponse),
    (NetworkFunction.APP, AppCommand.ACTIVATE_SESSION,
     session.ActivateSessionRequest, session.ActivateSessionResponse),
    (NetworkFunction.APP, AppCommand.SET_SESSION_PRIVILEGE,
     session.SetSessionPrivilegeRequest, session.SetSessionPrivilegeResponse),
    (NetworkFunction.APP, AppCommand.CLOSE_SESSION,
     session.CloseSessionRequest, session.CloseSessionResponse),
    (NetworkFunction.APP, AppCommand.SET_USER_ACCESS,
     user.SetUserAccessRequest, user.SetUserAccessResponse),
    (NetworkFunction.APP, AppCommand.GET_USER_ACCESS,
     user.GetUserSummaryRequest, user.GetUserSummaryResponse),
    (NetworkFunction.APP, AppCommand.SET_USER_NAME,
     user.SetUserNameRequest, user.SetUserNameResponse),
    (NetworkFunction.APP, AppCommand.GET_USER_NAME,
     user.GetUserNameRequest, user.GetUserNameResponse),
    (NetworkFunction.APP, AppCommand.SET_USER_PASSWORD,
     user.SetUserPassRequest, user.SetUserPassResponse),
    (NetworkFunction.CHASSIS, ChassisCommand.GET_CHASSIS_STATUS,
     chassis.ChassisStatusRequest, chassis.ChassisStatusResponse),
    (NetworkFunction.CHASSIS, ChassisCommand.CHASSIS_CONTROL,
     chassis.ChassisControlRequest, chassis.ChassisControlResponse),
    (NetworkFunction.CHASSIS, ChassisCommand.SET_SYSTEM_BOOT_OPTIONS,
     chassis.SetSystemBootOptionsRequest, chassis.SetSystemBootOptionsResponse),
    (NetworkFunction.CHASSIS, ChassisCommand.GET_SYSTEM_BOOT_OPTIONS,
     chassis.SystemBootOptionsRequest, chassis.SystemBootOptionsResponse),
):
    register(_netfn, _command, _request, _response)

def lookup(netfn: int, command: int) -> tuple[type, type] | None:
    """Return the (request, response) classes for a routing key."""
    return MESSAGES.get((int(netfn), int(command)))


def response_type_for(request: Request) -> type:
    """Pick the response class for ``request``; unknown keys decode raw."""
    entry = lookup(request.netfn, request.command)
    if entry is None:
        return RawResponse
    return entry[1]


def decode_request(netfn: int, command: int, data: bytes):
    """Decode request ``data`` for a routing key, as a BMC would."""
    if (int(netfn), int(command)) == (NetworkFunction.APP, AppCommand.SET_USER_PASSWORD):
        return user.parse_user_password_request(data)
    entry = lookup(netfn, command)
    if entry is None:
        return RawRequest.from_bytes(data)
    return entry[0].from_bytes(data)
