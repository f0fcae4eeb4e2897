"""Public package surface for codebasenotes.

Exports ``main`` for programmatic CLI invocation.
The annotation store itself lives in ``codebasenotes.store``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
