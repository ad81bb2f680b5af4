# path: src/monitoring/events.py
"""
Event schema for nav2d monitoring.

This module defines:
- EventType enum
- MonitoringEvent (structured navigation events)

All events are JSON-serializable via `.to_dict()` and are intended
for use with monitoring.bus.EventBus and monitoring.logger.JsonFileLogger.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class EventType(Enum):
    """Typed monitoring events emitted by the navigation engine."""

    # A region grid was (re)built
    GRID_REBUILT = auto()

    # Static polygon holes added to / removed from the regions
    STATIC_HOLES_CHANGED = auto()

    # Agents carved into a grid for one query
    EVASION_APPLIED = auto()

    # Query outcomes
    PATH_FOUND = auto()
    PATH_NOT_FOUND = auto()

    # Generic log messages
    LOG = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by the navigation engine or the runtime wiring.

    All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module string ("nav2d.engine", "cli", etc.)
    event_type: EventType       # Enum describing the event class
    message: str                # Short human-readable description
    payload: Dict[str, Any]     # Structured data (points, counts, grid sizes)
    correlation_id: Optional[str] = None  # Used for grouping events per query

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name  # store name, not enum
        return data
