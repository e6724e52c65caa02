"""Exact-length contract for every fixed-size message type."""

import pytest

from ipmi_mcp.models.user import (
    DisableUserRequest,
    DisableUserResponse,
    EnableUserRequest,
    EnableUserResponse,
)
from ipmi_mcp.protocol.errors import LongPacketError, ShortPacketError
from ipmi_mcp.protocol.registry import MESSAGES


def _fixed_size_types():
    pairs = list(MESSAGES.values()) + [
        (EnableUserRequest, EnableUserResponse),
        (DisableUserRequest, DisableUserResponse),
    ]
    types = []
    for request_type, response_type in pairs:
        # Requests without data have no shorter form to reject.
        if getattr(request_type, "SIZE", 0) > 0:
            types.append(request_type)
        # Bounded replies and replies sized by their parameter are
        # covered with their own messages.
        if len(response_type.SIZES) == 1 and "sizes" not in vars(response_type):
            types.append(response_type)
    return types


FIXED_SIZE_TYPES = _fixed_size_types()


def test_fixed_size_types_collected():
    """Guard against the parametrization silently going empty."""
    names = {cls.__name__ for cls in FIXED_SIZE_TYPES}
    assert {
        "GetChannelAuthCapabilitiesResponse",
        "GetSessionChallengeResponse",
        "ActivateSessionResponse",
        "SetSessionPrivilegeRequest",
        "SetSessionPrivilegeResponse",
        "CloseSessionRequest",
        "GetUserSummaryRequest",
        "GetUserSummaryResponse",
        "SetUserAccessRequest",
        "ChassisControlRequest",
        "EnableUserRequest",
        "DisableUserRequest",
    } <= names


@pytest.mark.parametrize("message_type", FIXED_SIZE_TYPES, ids=lambda cls: cls.__name__)
def test_exact_length(message_type):
    """Exact length decodes; one byte short or long is rejected."""
    data = message_type().to_bytes()

    assert message_type.from_bytes(data).to_bytes() == data
    with pytest.raises(ShortPacketError):
        message_type.from_bytes(data[:-1])
    with pytest.raises(LongPacketError):
        message_type.from_bytes(data + b"\x00")
