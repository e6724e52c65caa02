"""IPMI 8-bit two's-complement checksum.

Every IPMI LAN message carries two checksums: one over the responder
address and network function, and one over the remainder of the message.
A block is valid when the sum of its bytes plus its checksum is zero
modulo 256.
"""

from __future__ import annotations


def checksum(data: bytes) -> int:
    """Return the two's-complement checksum of ``data``."""
    return (0x100 - (sum(data) & 0xFF)) & 0xFF


def verify(data: bytes, expected: int) -> bool:
    """Check ``expected`` against the checksum of ``data``."""
    return (sum(data) + expected) & 0xFF == 0
