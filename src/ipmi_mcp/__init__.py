"""IPMI command codec, BMC transports, and an MCP server exposing them."""

from .client import Client
from .transport import Connection, new_transport

__version__ = "0.1.0"
