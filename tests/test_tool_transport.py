"""Tests for the ipmitool subprocess transport."""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from ipmi_mcp.models.app import DeviceIDRequest, DeviceIDResponse
from ipmi_mcp.models.chassis import BootParam, SetSystemBootOptionsRequest
from ipmi_mcp.protocol.commands import AppCommand, ChassisCommand, NetworkFunction
from ipmi_mcp.protocol.envelope import Request
from ipmi_mcp.protocol.errors import (
    DeviceError,
    ShortPacketError,
    TransportError,
    TransportTimeout,
)
from ipmi_mcp.transport import Connection, LANTransport, ToolTransport, new_transport
from ipmi_mcp.transport.tool import format_raw_args, parse_raw_output

TOOL = "/usr/bin/ipmitool"
DEVICE_ID_OUTPUT = " 20 81 02 10 51 8f bc 1a 00 02 01\n"


def _connection(**overrides) -> Connection:
    fields = dict(hostname="h", username="u", password="p", path="ipmitool")
    fields.update(overrides)
    return Connection(**fields)


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def transport():
    with patch("ipmi_mcp.transport.tool.shutil.which", return_value=TOOL):
        tr = ToolTransport(_connection())
        tr.open()
    yield tr
    tr.close()


@pytest.mark.parametrize(
    "should, overrides, expect",
    [
        (
            "use default port and interface",
            {},
            ["-H", "h", "-U", "u", "-I", "lanplus", "-E"],
        ),
        (
            "append port",
            {"port": 1623},
            ["-H", "h", "-U", "u", "-I", "lanplus", "-E", "-p", "1623"],
        ),
        (
            "override default interface",
            {"interface": "lan"},
            ["-H", "h", "-U", "u", "-I", "lan", "-E"],
        ),
    ],
)
def test_options(should, overrides, expect):
    """The option list order is fixed: host, user, interface, -E, port."""
    transport = ToolTransport(_connection(**overrides))
    assert transport.options() == expect, should


def test_new_transport_selects_backend():
    """A utility path selects the subprocess backend, else native LAN."""
    assert isinstance(new_transport(_connection()), ToolTransport)
    assert isinstance(new_transport(_connection(path="")), LANTransport)


def test_format_raw_args():
    assert format_raw_args(0x06, 0x46, b"\x01") == ["0x06", "0x46", "0x01"]


def test_parse_raw_output_prepends_status():
    assert parse_raw_output(" 01 02\n 03\n") == b"\x00\x01\x02\x03"
    assert parse_raw_output("") == b"\x00"


def test_parse_raw_output_garbage():
    with pytest.raises(TransportError):
        parse_raw_output("Error: something")


def test_open_missing_utility():
    """Open fails for a missing utility and can be retried."""
    tr = ToolTransport(_connection())
    with patch("ipmi_mcp.transport.tool.shutil.which", return_value=None):
        with pytest.raises(TransportError):
            tr.open()
    assert not tr.is_open

    with patch("ipmi_mcp.transport.tool.shutil.which", return_value=TOOL):
        tr.open()
    assert tr.is_open
    tr.close()


def test_send_while_closed():
    tr = ToolTransport(_connection())
    with pytest.raises(TransportError):
        tr.send(Request(NetworkFunction.APP, AppCommand.GET_DEVICE_ID, DeviceIDRequest()))


def test_close_is_idempotent(transport):
    transport.close()
    transport.close()
    assert not transport.is_open


def test_send_device_id(transport):
    with patch("ipmi_mcp.transport.tool.subprocess.run", return_value=_completed(stdout=DEVICE_ID_OUTPUT)) as run:
        response = transport.send(
            Request(NetworkFunction.APP, AppCommand.GET_DEVICE_ID, DeviceIDRequest())
        )

    assert isinstance(response, DeviceIDResponse)
    assert response.ipmi_version == 0x51

    argv = run.call_args.args[0]
    assert argv == [TOOL, "-H", "h", "-U", "u", "-I", "lanplus", "-E", "raw", "0x06", "0x01"]
    env = run.call_args.kwargs["env"]
    assert env["IPMI_PASSWORD"] == "p"
    assert "p" not in argv


def test_send_unknown_command(transport):
    """A command the BMC rejects becomes a device-reported failure."""
    stderr = (
        "Unable to send RAW command (channel=0x0 netfn=0x6 lun=0x0 "
        "cmd=0xff rsp=0xc1): Invalid command\n"
    )
    with patch("ipmi_mcp.transport.tool.subprocess.run", return_value=_completed(1, stderr=stderr)):
        with pytest.raises(DeviceError) as excinfo:
            transport.send(Request(NetworkFunction.APP, 0xFF, DeviceIDRequest()), DeviceIDResponse)
    assert excinfo.value.code == 0xC1
    assert excinfo.value.name == "invalid command"


def test_send_tool_failure(transport):
    stderr = "Error: Unable to establish IPMI v2 / RMCP+ session\n"
    with patch("ipmi_mcp.transport.tool.subprocess.run", return_value=_completed(1, stderr=stderr)):
        with pytest.raises(TransportError) as excinfo:
            transport.send(Request(NetworkFunction.APP, AppCommand.GET_DEVICE_ID))
    assert "RMCP+" in str(excinfo.value)


def test_send_timeout(transport):
    error = subprocess.TimeoutExpired(cmd=TOOL, timeout=5.0)
    with patch("ipmi_mcp.transport.tool.subprocess.run", side_effect=error):
        with pytest.raises(TransportTimeout):
            transport.send(Request(NetworkFunction.APP, AppCommand.GET_DEVICE_ID))


def test_send_os_error(transport):
    with patch("ipmi_mcp.transport.tool.subprocess.run", side_effect=FileNotFoundError(TOOL)):
        with pytest.raises(TransportError):
            transport.send(Request(NetworkFunction.APP, AppCommand.GET_DEVICE_ID))


def test_send_short_reply(transport):
    """A truncated reply is malformed, not a success."""
    with patch("ipmi_mcp.transport.tool.subprocess.run", return_value=_completed(stdout=" 20 81\n")):
        with pytest.raises(ShortPacketError):
            transport.send(Request(NetworkFunction.APP, AppCommand.GET_DEVICE_ID))


def test_malformed_request_never_runs_tool(transport):
    request = Request(
        NetworkFunction.CHASSIS,
        ChassisCommand.SET_SYSTEM_BOOT_OPTIONS,
        SetSystemBootOptionsRequest(BootParam.BOOT_FLAGS, b"\x80\x44"),
    )
    with patch("ipmi_mcp.transport.tool.subprocess.run") as run:
        with pytest.raises(ShortPacketError):
            transport.send(request)
    run.assert_not_called()


def test_send_boot_options_args(transport):
    request = Request(
        NetworkFunction.CHASSIS,
        ChassisCommand.SET_SYSTEM_BOOT_OPTIONS,
        SetSystemBootOptionsRequest(BootParam.BOOT_FLAGS, b"\x80\x44\x00\x00\x00"),
    )
    with patch("ipmi_mcp.transport.tool.subprocess.run", return_value=_completed(stdout="\n")) as run:
        response = transport.send(request)
    assert response.ok
    assert run.call_args.args[0][-9:] == [
        "raw", "0x00", "0x08", "0x05", "0x80", "0x44", "0x00", "0x00", "0x00",
    ]
