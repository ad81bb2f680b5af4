# src/nav2d/node.py
"""
Grid cell representation used by GridField and the A* search.

Node identity matters: the search keeps nodes in a closed set and walks
parent pointers, so equality and hashing are by object identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .shapes import Point


@dataclass(eq=False)
class Node:
    """
    One discretized cell.

    Static part (set when the grid is built):
      - position, grid_x, grid_y, walkable

    Transient part:
      - evade: owned by the evasion overlay, False outside an evasion pass
      - g_cost, h_cost, parent, heap_index: search scratch, overwritten by
        each search only for the nodes it visits
    """

    position: Point
    grid_x: int
    grid_y: int
    walkable: bool

    evade: bool = False

    g_cost: int = 0
    h_cost: int = 0
    parent: Optional["Node"] = field(default=None, repr=False)
    heap_index: int = 0

    @property
    def traversable(self) -> bool:
        """Walkable for the current query (static test and no evasion hole)."""
        return self.walkable and not self.evade

    @property
    def f_cost(self) -> int:
        return self.g_cost + self.h_cost

    def compare_to(self, other: "Node") -> int:
        """
        Heap ordering: positive when self has HIGHER priority than other.

        Lower f_cost wins; ties go to the lower h_cost.
        """
        compare = (self.f_cost > other.f_cost) - (self.f_cost < other.f_cost)
        if compare == 0:
            compare = (self.h_cost > other.h_cost) - (self.h_cost < other.h_cost)
        return -compare

    def __str__(self) -> str:
        return f"[{self.grid_x}, {self.grid_y}]"
