"""Tests for Get Device ID and the session establishment messages."""

import pytest

from ipmi_mcp.models.app import DeviceIDResponse
from ipmi_mcp.models.session import (
    ActivateSessionRequest,
    ActivateSessionResponse,
    AuthType,
    CloseSessionRequest,
    GetChannelAuthCapabilitiesRequest,
    GetChannelAuthCapabilitiesResponse,
    GetSessionChallengeRequest,
    GetSessionChallengeResponse,
    PrivilegeLevel,
)
from ipmi_mcp.protocol.errors import LongPacketError, ShortPacketError

DEVICE_ID = bytes([
    0x00,              # completion code
    0x20, 0x81,        # device id, revision (provides SDRs)
    0x02, 0x10,        # firmware 2.10
    0x51,              # IPMI 1.5
    0x8F,              # additional device support
    0xBC, 0x1A, 0x00,  # manufacturer id
    0x02, 0x01,        # product id
])


def test_device_id_decode():
    response = DeviceIDResponse.from_bytes(DEVICE_ID)
    assert response.device_id == 0x20
    assert response.ipmi_version == 0x51
    assert response.manufacturer_id == 0x1ABC
    assert response.product_id == 0x0102
    assert response.aux_firmware_revision == b""
    assert response.firmware_version == "2.10"
    assert response.ipmi_version_string == "1.5"
    assert response.provides_sdrs


def test_device_id_with_aux_revision():
    response = DeviceIDResponse.from_bytes(DEVICE_ID + b"\x01\x02\x03\x04")
    assert response.aux_firmware_revision == b"\x01\x02\x03\x04"
    assert response.to_bytes() == DEVICE_ID + b"\x01\x02\x03\x04"


def test_device_id_roundtrip():
    assert DeviceIDResponse.from_bytes(DEVICE_ID).to_bytes() == DEVICE_ID


def test_device_id_short():
    with pytest.raises(ShortPacketError):
        DeviceIDResponse.from_bytes(DEVICE_ID[:-1])


def test_device_id_truncated_aux():
    """Part of an aux revision is a truncated read, not a valid layout."""
    with pytest.raises(ShortPacketError):
        DeviceIDResponse.from_bytes(DEVICE_ID + b"\x01\x02")


def test_device_id_long():
    with pytest.raises(LongPacketError):
        DeviceIDResponse.from_bytes(DEVICE_ID + bytes(5))


def test_device_id_to_dict():
    d = DeviceIDResponse.from_bytes(DEVICE_ID).to_dict()
    assert d["firmware_version"] == "2.10"
    assert d["ipmi_version"] == "1.5"
    assert d["device_revision"] == 1


def test_auth_capabilities_request():
    request = GetChannelAuthCapabilitiesRequest()
    assert request.to_bytes() == bytes([0x0E, PrivilegeLevel.ADMINISTRATOR])


def test_auth_capabilities_supports():
    data = bytes([0x00, 0x01, 0x15, 0x14, 0x00, 0xF2, 0x1B, 0x00, 0x00])
    response = GetChannelAuthCapabilitiesResponse.from_bytes(data)
    assert response.supports(AuthType.NONE)
    assert response.supports(AuthType.MD5)
    assert not response.supports(AuthType.MD2)
    assert response.oem_id == 0x1BF2
    assert response.to_bytes() == data


def test_session_challenge_request_pads_username():
    data = GetSessionChallengeRequest(AuthType.NONE, "admin").to_bytes()
    assert len(data) == 17
    assert data == b"\x00admin" + b"\x00" * 11


def test_session_challenge_response():
    data = b"\x00" + (0x0BADF00D).to_bytes(4, "little") + bytes(range(16))
    response = GetSessionChallengeResponse.from_bytes(data)
    assert response.temporary_session_id == 0x0BADF00D
    assert response.challenge == bytes(range(16))


def test_activate_session_request_layout():
    data = ActivateSessionRequest(challenge=bytes(range(16)), initial_outbound_sequence=7).to_bytes()
    assert len(data) == 22
    assert data[:2] == bytes([AuthType.NONE, PrivilegeLevel.ADMINISTRATOR])
    assert data[2:18] == bytes(range(16))
    assert data[18:] == b"\x07\x00\x00\x00"


def test_activate_session_request_bad_challenge():
    with pytest.raises(ShortPacketError):
        ActivateSessionRequest(challenge=b"\x01").to_bytes()


def test_activate_session_response():
    data = b"\x00\x00" + (0x1234ABCD).to_bytes(4, "little") + (16).to_bytes(4, "little") + b"\x04"
    response = ActivateSessionResponse.from_bytes(data)
    assert response.session_id == 0x1234ABCD
    assert response.initial_inbound_sequence == 16
    assert response.max_privilege == PrivilegeLevel.ADMINISTRATOR


def test_close_session_request():
    data = CloseSessionRequest(0x1234ABCD).to_bytes()
    assert data == b"\xCD\xAB\x34\x12"
    assert CloseSessionRequest.from_bytes(data).session_id == 0x1234ABCD


def test_device_id_encode_rejects_bad_aux_revision():
    with pytest.raises(ShortPacketError):
        DeviceIDResponse(aux_firmware_revision=b"\x01\x02").to_bytes()
    with pytest.raises(LongPacketError):
        DeviceIDResponse(aux_firmware_revision=b"\x01\x02\x03\x04\x05").to_bytes()
