"""Shared fixtures."""

from __future__ import annotations

import pytest

from fake_bmc import FakeBMC
from ipmi_mcp.transport import Connection


@pytest.fixture
def bmc():
    server = FakeBMC()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def lan_connection(bmc) -> Connection:
    return Connection(
        hostname="127.0.0.1",
        port=bmc.port,
        username="admin",
        password="cow",
        timeout=1.0,
    )
