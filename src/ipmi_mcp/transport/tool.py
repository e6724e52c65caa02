"""Subprocess transport driving an external ``ipmitool``.

Each command runs the utility once in ``raw`` mode::

    ipmitool -H <host> -U <user> -I <interface> -E [-p <port>] raw <netfn> <cmd> <data...>

The password travels in the ``IPMI_PASSWORD`` environment variable, which
is what ``-E`` reads, so it never appears on a command line. Successful
output is the response payload as hex bytes without the completion code;
failures report the completion code on stderr as ``rsp=0xNN``.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess

from ..protocol.errors import TransportError, TransportTimeout
from .base import Transport
from .connection import DEFAULT_INTERFACE, Connection

logger = logging.getLogger(__name__)

PASSWORD_ENV = "IPMI_PASSWORD"

_STATUS_RE = re.compile(r"rsp=(0x[0-9a-fA-F]+)")


def format_raw_args(netfn: int, command: int, data: bytes) -> list[str]:
    """Render a request as ``ipmitool raw`` arguments."""
    return [f"0x{netfn:02x}", f"0x{command:02x}"] + [f"0x{b:02x}" for b in data]


def parse_raw_output(output: str) -> bytes:
    """Parse ``ipmitool raw`` hex output into a reply with a success status."""
    try:
        payload = bytes(int(token, 16) for token in output.split())
    except ValueError as e:
        raise TransportError(f"Unparseable ipmitool output: {output!r}") from e
    return b"\x00" + payload


class ToolTransport(Transport):
    """Runs one ``ipmitool`` process per command.

    Nothing persistent is spawned: :meth:`open` only resolves the utility
    and :meth:`close` only changes state.
    """

    def __init__(self, connection: Connection) -> None:
        super().__init__(connection)
        self._executable: str | None = None

    def options(self) -> list[str]:
        """Connection options in the order ipmitool expects them."""
        conn = self._connection
        options = [
            "-H", conn.hostname,
            "-U", conn.username,
            "-I", conn.interface or DEFAULT_INTERFACE,
            "-E",
        ]
        if conn.port:
            options += ["-p", str(conn.port)]
        return options

    def _open_channel(self) -> None:
        executable = shutil.which(self._connection.path)
        if executable is None:
            raise TransportError(
                f"IPMI utility {self._connection.path!r} not found or not executable"
            )
        self._executable = executable

    def _close_channel(self) -> None:
        self._executable = None

    def _exchange(self, netfn: int, command: int, data: bytes) -> bytes:
        args = self.options() + ["raw"] + format_raw_args(netfn, command, data)
        result = self._run(args)
        if result.returncode == 0:
            return parse_raw_output(result.stdout)

        match = _STATUS_RE.search(result.stderr)
        if match:
            # The BMC answered; its status goes through the completion check.
            return bytes([int(match.group(1), 16) & 0xFF])
        raise TransportError(
            f"{self._connection.path} exited with status "
            f"{result.returncode}: {result.stderr.strip()}"
        )

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        argv = [self._executable or self._connection.path] + args
        env = dict(os.environ)
        env[PASSWORD_ENV] = self._connection.password
        logger.debug("Running %s", " ".join(argv))

        try:
            return subprocess.run(
                argv,
                env=env,
                capture_output=True,
                text=True,
                timeout=self._connection.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise TransportTimeout(
                f"{argv[0]} did not finish within {self._connection.timeout}s"
            ) from e
        except OSError as e:
            raise TransportError(f"Could not run {argv[0]}: {e}") from e
