# src/app/__init__.py
"""
Application wiring for nav2d.

Exposes:
- build_runtime: NavigationConfig -> registry + engine + event bus
- configure_logging: one-shot stdout logging setup
"""

from __future__ import annotations

from .logging_config import configure_logging
from .runtime import NavRuntime, build_runtime

__all__ = [
    "NavRuntime",
    "build_runtime",
    "configure_logging",
]
