"""Inline, keystroke-driven directory browser for the terminal.

Exports ``main`` for programmatic CLI invocation; the engine lives in
submodules under ``peek``.
"""

from __future__ import annotations

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())


def main(*args, **kwargs):
    """Lazily import the CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["__version__", "main"]
