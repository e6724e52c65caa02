"""MCP server entry point for IPMI BMCs.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP

from .client import Client
from .models.chassis import BootDevice, ChassisControl
from .protocol.completion import CompletionCode, describe
from .protocol.envelope import RawRequest, RawResponse, Request
from .protocol.errors import IPMIError
from .transport import Connection
from .transport.tool import PASSWORD_ENV

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "ipmi-bmc",
    instructions="MCP server for IPMI baseboard management controllers",
)

# Global connection state
_client: Client | None = None


def _get_client() -> Client:
    """Get the active client, raising if not connected."""
    if _client is None or not _client.connected:
        raise RuntimeError(
            "Not connected to a BMC. Use the 'connect' tool first."
        )
    return _client


def _error(e: IPMIError) -> dict[str, Any]:
    result: dict[str, Any] = {"error": str(e), "kind": e.kind.value}
    code = getattr(e, "code", None)
    if code is not None:
        result["completion_code"] = f"0x{code:02X}"
    return result


def _lookup(enum, name: str):
    try:
        return enum[name.strip().upper().replace("-", "_").replace(" ", "_")]
    except KeyError:
        raise ValueError(
            f"Unknown {enum.__name__} '{name}'. "
            f"Valid: {[member.name.lower() for member in enum]}"
        ) from None


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(
    hostname: str,
    username: str,
    password: str | None = None,
    port: int = 0,
    interface: str = "",
    path: str = "",
) -> dict[str, Any]:
    """Open a session with a BMC.

    Args:
        hostname: BMC address.
        username: IPMI user.
        password: IPMI password; defaults to the IPMI_PASSWORD environment variable.
        port: UDP port, 0 for the default (623).
        interface: ipmitool interface, empty for "lanplus".
        path: Path to ipmitool. When empty the native LAN transport is used.
    """
    global _client
    if _client is not None and _client.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "hostname": _client.connection.hostname,
        }

    if password is None:
        password = os.environ.get(PASSWORD_ENV, "")

    connection = Connection(
        hostname=hostname,
        username=username,
        password=password,
        port=port,
        interface=interface,
        path=path,
    )
    client = Client(connection)
    try:
        client.open()
        info = client.device_id()
    except IPMIError as e:
        try:
            client.close()
        except IPMIError as close_error:
            logger.warning("Error closing failed connection: %s", close_error)
        return _error(e)

    _client = client
    return {
        "connected": True,
        "hostname": hostname,
        "transport": type(client.transport).__name__,
        **info.to_dict(),
    }


@mcp.tool()
def disconnect() -> dict[str, Any]:
    """Close the session with the BMC."""
    global _client
    if _client is None:
        return {"disconnected": True}
    try:
        _client.close()
    except IPMIError as e:
        return {"disconnected": True, **_error(e)}
    finally:
        _client = None
    return {"disconnected": True}


@mcp.tool()
def get_device_info() -> dict[str, Any]:
    """Retrieve BMC identification (Get Device ID)."""
    try:
        return _get_client().device_id().to_dict()
    except IPMIError as e:
        return _error(e)


# ─── CHASSIS TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def get_chassis_status() -> dict[str, Any]:
    """Read the chassis power state and fault flags."""
    try:
        return _get_client().chassis_status().to_dict()
    except IPMIError as e:
        return _error(e)


@mcp.tool()
def chassis_control(action: str) -> dict[str, Any]:
    """Power on, power off, cycle, reset, or soft-shutdown the host.

    Args:
        action: One of power_up, power_down, power_cycle, hard_reset,
                pulse_diagnostic_interrupt, soft_shutdown.
    """
    try:
        control = _lookup(ChassisControl, action)
    except ValueError as e:
        return {"error": str(e)}
    try:
        _get_client().control(control)
    except IPMIError as e:
        return _error(e)
    return {"action": control.name.lower(), "sent": True}


@mcp.tool()
def set_boot_device(device: str, persistent: bool = False) -> dict[str, Any]:
    """Choose the boot device for the next boot.

    Args:
        device: Boot device name, e.g. pxe, disk, cdrom, bios.
        persistent: Apply to every boot rather than only the next one.
    """
    try:
        boot_device = _lookup(BootDevice, device)
    except ValueError as e:
        return {"error": str(e)}
    try:
        _get_client().set_boot_device(boot_device, persistent)
    except IPMIError as e:
        return _error(e)
    return {"device": boot_device.name.lower(), "persistent": persistent}


@mcp.tool()
def get_boot_device() -> dict[str, Any]:
    """Read the configured boot device and persistence flag."""
    try:
        options = _get_client().boot_options()
    except IPMIError as e:
        return _error(e)
    selector = options.boot_device_selector()
    name = selector.name.lower() if isinstance(selector, BootDevice) else f"0x{selector:02X}"
    return {
        "device": name,
        "persistent": options.persistent,
        "valid": options.valid,
        "raw": options.data.hex(" "),
    }


# ─── USER TOOLS ──────────────────────────────────────────────────────

@mcp.tool()
def get_user(user_id: int) -> dict[str, Any]:
    """Read a user's name and channel access.

    Args:
        user_id: User slot (1-63).
    """
    client = _get_client()
    try:
        name = client.user_name(user_id)
        summary = client.user_summary(user_id)
    except IPMIError as e:
        return _error(e)
    return {
        "user_id": user_id,
        "username": name,
        "privilege": summary.privilege,
        "max_users": summary.max_users,
        "enabled_users": summary.curr_enabled_users,
    }


@mcp.tool()
def set_user(
    user_id: int,
    username: str | None = None,
    password: str | None = None,
    enabled: bool | None = None,
    privilege: int | None = None,
) -> dict[str, Any]:
    """Create or update a user slot.

    Args:
        user_id: User slot (2-63; slot 1 is the anonymous user).
        username: New name, at most 16 characters.
        password: New password, at most 16 characters.
        enabled: Enable or disable the user.
        privilege: Channel privilege level (1 callback .. 4 administrator).
    """
    client = _get_client()
    changed = []
    try:
        if username is not None:
            client.set_user_name(user_id, username)
            changed.append("username")
        if password is not None:
            client.set_user_password(user_id, password)
            changed.append("password")
        if privilege is not None:
            client.set_user_access(user_id, privilege)
            changed.append("privilege")
        if enabled is not None:
            if enabled:
                client.enable_user(user_id)
            else:
                client.disable_user(user_id)
            changed.append("enabled")
    except IPMIError as e:
        return {"user_id": user_id, "changed": changed, **_error(e)}
    return {"user_id": user_id, "changed": changed}


@mcp.tool()
def raw_command(netfn: int, command: int, data: str = "") -> dict[str, Any]:
    """Send an arbitrary command and return the raw response bytes.

    Args:
        netfn: Network function (e.g. 6 for App, 0 for Chassis).
        command: Command code.
        data: Request bytes as hex, e.g. "05 00 00".
    """
    try:
        payload = bytes.fromhex(data)
    except ValueError:
        return {"error": f"Invalid hex data: {data!r}"}
    try:
        response = _get_client().send(
            Request(netfn, command, RawRequest(payload)), RawResponse
        )
    except IPMIError as e:
        return _error(e)
    return {"completion_code": "0x00", "data": response.data.hex(" ")}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("ipmi://connection/info")
def resource_connection_info() -> str:
    """Connection target and state."""
    if _client is None or not _client.connected:
        return json.dumps({"connected": False})

    conn = _client.connection
    return json.dumps({
        "connected": True,
        "hostname": conn.hostname,
        "port": conn.effective_port,
        "username": conn.username,
        "interface": conn.effective_interface,
        "transport": type(_client.transport).__name__,
    })


@mcp.resource("ipmi://catalog/boot-devices")
def resource_boot_devices() -> str:
    """Boot device names and selector values."""
    devices = [
        {"name": device.name.lower(), "selector": f"0x{device.value:02X}"}
        for device in BootDevice
    ]
    return json.dumps({"boot_devices": devices})


@mcp.resource("ipmi://catalog/chassis-controls")
def resource_chassis_controls() -> str:
    """Chassis control actions."""
    controls = [{"name": c.name.lower(), "value": c.value} for c in ChassisControl]
    return json.dumps({"chassis_controls": controls})


@mcp.resource("ipmi://catalog/completion-codes")
def resource_completion_codes() -> str:
    """Generic completion codes and their meaning."""
    codes = [
        {"code": f"0x{code.value:02X}", "description": describe(code)}
        for code in CompletionCode
    ]
    return json.dumps({"completion_codes": codes})


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def reinstall_host(device: str = "pxe") -> str:
    """Guide the AI through network- or media-booting the host once.

    Args:
        device: Boot device to use for the install.
    """
    return f"""Prepare the connected host for a reinstall from {device}.
Steps:
- Read get_chassis_status and report the current power state and any faults
- Use set_boot_device with device="{device}" and persistent=false
- Confirm with get_boot_device
- If the host is powered on, use chassis_control with power_cycle,
  otherwise power_up

Stop and report if any step returns an error."""


@mcp.prompt()
def provision_user(user_id: int, username: str) -> str:
    """Help create an administrator account on the BMC.

    Args:
        user_id: Slot to use.
        username: Account name.
    """
    return f"""Check slot {user_id} with get_user before changing anything.
If the slot is empty or already named {username}, use set_user with
username="{username}", a strong password of at most 16 characters,
privilege=4 and enabled=true. Read the slot back with get_user to verify."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
