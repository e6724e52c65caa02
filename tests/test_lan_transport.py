"""Tests for the native LAN transport against a loopback BMC."""

from __future__ import annotations

import socket

import pytest

from fake_bmc import INBOUND_SEQUENCE, SESSION_ID, TEMPORARY_SESSION_ID
from ipmi_mcp.models.app import DeviceIDRequest, DeviceIDResponse
from ipmi_mcp.protocol.commands import AppCommand, NetworkFunction
from ipmi_mcp.protocol.envelope import Request
from ipmi_mcp.protocol.errors import DeviceError, TransportError, TransportTimeout
from ipmi_mcp.protocol.framing import BMC_ADDRESS, REMOTE_SWID, Frame, build_frame
from ipmi_mcp.transport import Connection, LANTransport


def _device_id_request() -> Request:
    return Request(NetworkFunction.APP, AppCommand.GET_DEVICE_ID, DeviceIDRequest())


def test_open_establishes_session(bmc, lan_connection):
    transport = LANTransport(lan_connection)
    transport.open()
    try:
        assert transport.is_open
        assert transport.session_id == SESSION_ID
    finally:
        transport.close()

    commands = [frame.command for frame in bmc.frames]
    assert commands == [
        AppCommand.GET_CHANNEL_AUTH_CAPABILITIES,
        AppCommand.GET_SESSION_CHALLENGE,
        AppCommand.ACTIVATE_SESSION,
        AppCommand.SET_SESSION_PRIVILEGE,
        AppCommand.CLOSE_SESSION,
    ]
    # Session-less until Activate Session, which uses the temporary id.
    assert bmc.frames[0].session_id == 0
    assert bmc.frames[2].session_id == TEMPORARY_SESSION_ID
    assert bmc.frames[2].sequence == 0
    assert bmc.frames[3].session_id == SESSION_ID
    assert bmc.frames[3].sequence == INBOUND_SEQUENCE
    assert bmc.closed_sessions == [SESSION_ID]


def test_send_device_id(bmc, lan_connection):
    with LANTransport(lan_connection) as transport:
        response = transport.send(_device_id_request())
    assert isinstance(response, DeviceIDResponse)
    assert response.ipmi_version == 0x51


def test_sequence_numbers_increase(bmc, lan_connection):
    with LANTransport(lan_connection) as transport:
        transport.send(_device_id_request())
        transport.send(_device_id_request())

    sequences = [frame.sequence for frame in bmc.frames[3:]]
    assert sequences == list(range(INBOUND_SEQUENCE, INBOUND_SEQUENCE + len(sequences)))
    rq_seqs = [frame.rq_seq for frame in bmc.frames]
    assert len(set(rq_seqs)) == len(rq_seqs)


def test_unknown_command(bmc, lan_connection):
    """An unsupported command is a device failure, not an empty success."""
    with LANTransport(lan_connection) as transport:
        with pytest.raises(DeviceError) as excinfo:
            transport.send(Request(NetworkFunction.APP, 0xFF, DeviceIDRequest()), DeviceIDResponse)
        assert excinfo.value.code == 0xC1

        # The session is still usable afterwards.
        assert transport.send(_device_id_request()).ok


def test_send_while_closed(lan_connection):
    transport = LANTransport(lan_connection)
    with pytest.raises(TransportError):
        transport.send(_device_id_request())


def test_auth_type_none_not_supported(bmc, lan_connection):
    """Open fails cleanly and can be retried once the BMC allows it."""
    bmc.auth_type_support = 0x04
    transport = LANTransport(lan_connection)
    with pytest.raises(TransportError):
        transport.open()
    assert not transport.is_open

    bmc.auth_type_support = 0x01
    transport.open()
    assert transport.is_open
    transport.close()


def test_timeout(bmc):
    bmc.drop_replies = True
    connection = Connection(hostname="127.0.0.1", port=bmc.port, username="admin", timeout=0.2)
    transport = LANTransport(connection)
    with pytest.raises(TransportTimeout):
        transport.open()
    assert not transport.is_open


def test_close_failure_still_terminates(bmc, lan_connection):
    transport = LANTransport(lan_connection)
    transport.open()
    bmc.drop_replies = True
    with pytest.raises(TransportTimeout):
        transport.close()
    assert not transport.is_open
    transport.close()


def test_unreachable_host():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as spare:
        spare.bind(("127.0.0.1", 0))
        port = spare.getsockname()[1]
    # Nothing listens on the port: the reply never comes (or is refused).
    connection = Connection(hostname="127.0.0.1", port=port, timeout=0.2)
    with pytest.raises(TransportError):
        LANTransport(connection).open()


def _late_device_id_reply(transport: LANTransport) -> bytes:
    """A Device ID reply carrying the request sequence already answered."""
    return build_frame(Frame(
        netfn=NetworkFunction.APP | 0x01,
        command=AppCommand.GET_DEVICE_ID,
        data=DeviceIDResponse(ipmi_version=0x20).to_bytes(),
        session_id=transport.session_id,
        rq_seq=transport._rq_seq,
        target_address=REMOTE_SWID,
        source_address=BMC_ADDRESS,
    ))


def test_late_reply_is_dropped(bmc, lan_connection):
    """A stale datagram in the socket does not shift later exchanges."""
    transport = LANTransport(lan_connection)
    transport.open()
    bmc.sock.sendto(_late_device_id_reply(transport), transport._sock.getsockname())

    for _ in range(3):
        response = transport.send(_device_id_request())
        assert response.ipmi_version == 0x51

    transport.close()
    assert bmc.closed_sessions == [SESSION_ID]


def test_late_reply_does_not_extend_deadline(bmc):
    connection = Connection(hostname="127.0.0.1", port=bmc.port, username="admin", timeout=0.3)
    transport = LANTransport(connection)
    transport.open()
    bmc.drop_replies = True
    bmc.sock.sendto(_late_device_id_reply(transport), transport._sock.getsockname())

    with pytest.raises(TransportTimeout):
        transport.send(_device_id_request())
    with pytest.raises(TransportTimeout):
        transport.close()
