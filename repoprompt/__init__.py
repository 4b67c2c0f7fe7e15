"""Public package surface for repoprompt.

Exports ``main`` for programmatic CLI invocation.
Scanning, selection, and prompt assembly live in submodules.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["main"]
