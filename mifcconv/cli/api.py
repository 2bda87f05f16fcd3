from __future__ import annotations

from typing import Optional, Sequence

from .cli import build_parser, configure_logging
from .cli import main as _main

__all__ = ["build_parser", "configure_logging", "main"]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Public API (CLI)

    Contract:
    - `convert INPUT...` and `normalize INPUT...` subcommands.
    - Exit status 0 when every file finished, 1 when any failed or the config is bad.
    """
    return _main(argv)
