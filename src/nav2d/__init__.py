# src/nav2d/__init__.py
"""
2D grid navigation.

Provides:
- GridField: discretized walkable area over a Boundary
- Pathfinder: A* search + string pulling over a GridField
- ObstacleEvasionOverlay: other agents as per-query obstacles
- NavigationEngine: multi-region entry point tying the above together
"""

from __future__ import annotations

from .agents import Agent, AgentRegistry, AgentState, Footprint, MovementMethod
from .engine import CELL_SIZE_FACTOR, NavigationEngine
from .evasion import EvasionPolicy, ObstacleEvasionOverlay
from .grid import GridField
from .heap import Heap, HeapItem
from .node import Node
from .pathfinder import Pathfinder, get_distance
from .shapes import (
    Boundary,
    Bounds,
    CompoundBoundary,
    Point,
    PolygonBoundary,
    RectBoundary,
)

__all__ = [
    "Agent",
    "AgentRegistry",
    "AgentState",
    "Footprint",
    "MovementMethod",
    "CELL_SIZE_FACTOR",
    "NavigationEngine",
    "EvasionPolicy",
    "ObstacleEvasionOverlay",
    "GridField",
    "Heap",
    "HeapItem",
    "Node",
    "Pathfinder",
    "get_distance",
    "Boundary",
    "Bounds",
    "CompoundBoundary",
    "Point",
    "PolygonBoundary",
    "RectBoundary",
]
