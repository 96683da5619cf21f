"""Cheap binary-content detection for collected files."""

from __future__ import annotations

BINARY_SAMPLE_SIZE = 1024


def is_binary(content: bytes, sample_size: int = BINARY_SAMPLE_SIZE) -> bool:
    """Return whether ``content`` looks binary.

    Only the first ``sample_size`` bytes are inspected; any NUL byte in that
    prefix marks the buffer as binary.
    """
    return b"\x00" in content[:sample_size]


__all__ = ["BINARY_SAMPLE_SIZE", "is_binary"]
