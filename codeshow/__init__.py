"""Public package surface for codeshow.

Exports ``main`` for programmatic CLI invocation.
The display pipeline lives in ``codeshow.syntax``, ``codeshow.layout`` and
``codeshow.runtime``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
