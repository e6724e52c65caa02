"""Connection settings for a single BMC."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PORT = 623
DEFAULT_INTERFACE = "lanplus"
DEFAULT_TIMEOUT = 5.0


@dataclass(frozen=True)
class Connection:
    """Where and how to reach a BMC.

    A non-empty ``path`` names an external ``ipmitool``-compatible utility
    and selects the subprocess transport; otherwise the native LAN
    transport is used. ``port`` 0 and an empty ``interface`` mean the
    protocol defaults.
    """

    hostname: str
    username: str = ""
    password: str = ""
    port: int = 0
    interface: str = ""
    path: str = ""
    timeout: float = DEFAULT_TIMEOUT

    @property
    def effective_port(self) -> int:
        return self.port or DEFAULT_PORT

    @property
    def effective_interface(self) -> str:
        return self.interface or DEFAULT_INTERFACE

    def __repr__(self) -> str:
        return (
            f"Connection(hostname={self.hostname!r}, port={self.port}, "
            f"username={self.username!r}, interface={self.interface!r}, "
            f"path={self.path!r})"
        )
