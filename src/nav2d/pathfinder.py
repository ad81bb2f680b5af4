# src/nav2d/pathfinder.py
"""
A* pathfinding over a GridField.

- 8-directional neighbours, octile integer costs (14 diagonal, 10 straight).
- Fixed-capacity binary heap as the open set, sized to the grid.
- Result is string-pulled into a minimal list of waypoints.

Search scratch (g_cost, h_cost, parent, heap_index) lives on the Nodes
and is only written for nodes a search actually visits. Nothing is
reset between searches: every node read in a search is written by that
same search first, except the start node whose stale g_cost only shifts
all costs by a constant.

This module does not mutate the walkable state of the grid.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Set

from .grid import GridField
from .heap import Heap
from .node import Node
from .shapes import Point

logger = logging.getLogger(__name__)

MAX_NEIGHBOURS = 8

DIAGONAL_COST = 14
STRAIGHT_COST = 10

DEFAULT_DESTINATION_THRESHOLD = 0.1


def get_distance(a: Node, b: Node) -> int:
    """Octile distance between two nodes in grid steps."""
    dx = abs(a.grid_x - b.grid_x)
    dy = abs(a.grid_y - b.grid_y)
    if dx > dy:
        return DIAGONAL_COST * dy + STRAIGHT_COST * (dx - dy)
    return DIAGONAL_COST * dx + STRAIGHT_COST * (dy - dx)


class Pathfinder:
    """
    A* search bound to one GridField.

    The neighbour buffer is owned by this instance and reused on every
    expansion, so one Pathfinder must not run two searches at once.
    """

    def __init__(
        self,
        grid: GridField,
        destination_threshold: float = DEFAULT_DESTINATION_THRESHOLD,
    ) -> None:
        self.grid = grid
        self.destination_threshold = destination_threshold
        self._neighbour_cache: List[Optional[Node]] = [None] * MAX_NEIGHBOURS

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def find_path(self, start: Point, target: Point) -> List[Point]:
        """
        Waypoints from (just after) start to target.

        Returns [] when either point resolves to no node, when no route
        exists, or when start and target share a cell.
        """
        start_node = self.grid.position_to_node(start)
        target_node = self.grid.position_to_node(target)
        if start_node is None or target_node is None:
            return []

        nodes = self.search(start_node, target_node)
        if nodes is None:
            logger.info("No path from %s to %s", start, target)
            return []

        points = self.nodes_to_points(start_node, nodes)
        logger.debug(
            "Path %s -> %s: %d raw nodes, %d waypoints",
            start,
            target,
            len(nodes),
            len(points),
        )
        return points

    def find_node_path(self, start: Point, target: Point) -> List[Node]:
        """Raw retraced nodes (start excluded), before any simplification."""
        start_node = self.grid.position_to_node(start)
        target_node = self.grid.position_to_node(target)
        if start_node is None or target_node is None:
            return []
        return self.search(start_node, target_node) or []

    def search(self, start_node: Node, target_node: Node) -> Optional[List[Node]]:
        """
        Run A* between two nodes of this grid.

        Returns the retraced node list (start excluded, target included),
        or None when the open set runs dry.
        """
        open_set: Heap[Node] = Heap(self.grid.max_size)
        closed_set: Set[Node] = set()
        open_set.add(start_node)

        expanded = 0
        while open_set.count > 0:
            current = open_set.remove_first()
            closed_set.add(current)
            expanded += 1

            if current is target_node:
                logger.debug("A* reached target after %d expansions", expanded)
                return self.retrace_path(start_node, target_node)

            num_neighbours = self.grid.get_neighbours(current, self._neighbour_cache)
            for i in range(num_neighbours):
                neighbour = self._neighbour_cache[i]
                if not neighbour.traversable:  # type: ignore[union-attr]
                    continue

                tentative_g = current.g_cost + get_distance(current, neighbour)  # type: ignore[arg-type]
                if neighbour in closed_set and tentative_g >= neighbour.g_cost:  # type: ignore[union-attr]
                    continue

                in_open = open_set.contains(neighbour)  # type: ignore[arg-type]
                if tentative_g < neighbour.g_cost or not in_open:  # type: ignore[union-attr]
                    neighbour.g_cost = tentative_g  # type: ignore[union-attr]
                    neighbour.h_cost = get_distance(neighbour, target_node)  # type: ignore[arg-type]
                    neighbour.parent = current  # type: ignore[union-attr]

                    if in_open:
                        open_set.update_item(neighbour)  # type: ignore[arg-type]
                    else:
                        open_set.add(neighbour)  # type: ignore[arg-type]

        logger.debug("A* open set exhausted after %d expansions", expanded)
        return None

    # ------------------------------------------------------------------
    # Retracing and simplification
    # ------------------------------------------------------------------

    @staticmethod
    def retrace_path(start_node: Node, end_node: Node) -> List[Node]:
        path: List[Node] = []
        current = end_node
        while current is not start_node:
            path.append(current)
            current = current.parent  # type: ignore[assignment]
        path.reverse()
        return path

    def nodes_to_points(self, start_node: Node, nodes: List[Node]) -> List[Point]:
        """Threshold trim, string pulling and projection to positions."""
        nodes = list(nodes)

        if nodes:
            sx, sy = start_node.position
            fx, fy = nodes[0].position
            start_sqr_distance = (sx - fx) ** 2 + (sy - fy) ** 2
            if start_sqr_distance <= self.destination_threshold ** 2:
                nodes.pop(0)

        nodes.insert(0, start_node)
        self.pull_strings(nodes)

        if nodes and nodes[0] is start_node:
            nodes.pop(0)

        return [node.position for node in nodes]

    def pull_strings(self, nodes: List[Node]) -> None:
        """Drop every node whose neighbours in the list can see each other."""
        i = 0
        while i < len(nodes) - 2:
            if self.path_is_clear(nodes[i], nodes[i + 2]):
                del nodes[i + 1]
            else:
                i += 1

    def path_is_clear(self, start: Node, end: Node) -> bool:
        """
        True when the straight segment between two cell centers only
        crosses traversable cells.

        Shared row or column: every cell in between is checked. Otherwise
        the segment is swept column by column from left to right; for each
        column the line is evaluated over the x-span the segment covers in
        that column and every row whose cell the segment enters there must
        be traversable. Passing exactly through a cell corner does not count
        as entering it. Cells outside the grid count as blocked.
        """
        if start is end:
            return start.traversable

        grid = self.grid

        if start.grid_x == end.grid_x:
            low = min(start.grid_y, end.grid_y)
            high = max(start.grid_y, end.grid_y)
            return all(
                grid.grid_to_node(start.grid_x, y).traversable  # type: ignore[union-attr]
                for y in range(low, high + 1)
            )

        if start.grid_y == end.grid_y:
            low = min(start.grid_x, end.grid_x)
            high = max(start.grid_x, end.grid_x)
            return all(
                grid.grid_to_node(x, start.grid_y).traversable  # type: ignore[union-attr]
                for x in range(low, high + 1)
            )

        if end.grid_x < start.grid_x:
            start, end = end, start

        m = (end.grid_y - start.grid_y) / (end.grid_x - start.grid_x)
        c = start.grid_y - m * start.grid_x

        for x in range(start.grid_x, end.grid_x + 1):
            x_low = max(x - 0.5, start.grid_x)
            x_high = min(x + 0.5, end.grid_x)
            y1 = m * x_low + c
            y2 = m * x_high + c
            if y1 > y2:
                y1, y2 = y2, y1

            for y in range(math.floor(y1 + 0.5), math.ceil(y2 - 0.5) + 1):
                node = grid.grid_to_node(x, y)
                if node is None or not node.traversable:
                    return False
        return True
