"""Public package surface for apc.

Exports ``main`` for programmatic CLI invocation.
Scanning, ignore resolution and rendering live in submodules under ``apc``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
