# src/app/logging_config.py
"""
Central logging configuration for nav2d tools.

Call configure_logging() from your main entrypoint once, for example:

    from app.logging_config import configure_logging
    configure_logging()

After that, grid rebuilds, "no walkable node" warnings and (at DEBUG)
per-search statistics from nav2d are visible on stdout.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional


def configure_logging(level: int = logging.INFO, stream: Optional[IO[str]] = None) -> None:
    """
    Configure root logging if no handlers are attached yet.

    Args:
        level: default logging level (e.g., logging.INFO, logging.DEBUG)
        stream: where records go; stdout when omitted
    """
    root = logging.getLogger()

    # Don't duplicate handlers if someone already configured logging.
    if root.handlers:
        return

    handler = logging.StreamHandler(stream=stream or sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(level)
