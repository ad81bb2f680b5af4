# src/nav2d/grid.py
"""
GridField: discretization of a 2D walkable region.

Responsibilities:
- Build a 2D array of Nodes from a Boundary and a cell size.
- Convert world positions to nodes (snapping to the nearest walkable
  cell when the direct cell is blocked).
- Enumerate the 8 neighbours of a node.
- Carve and clear transient obstacle holes (used by the evasion overlay).

It does NOT:
- Run searches (see nav2d.pathfinder).
- Decide which agents become holes (see nav2d.evasion).

Threading: a GridField is shared mutable state. One query at a time, and
never rebuild while a search is running; rebuild() replaces every Node.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from .node import Node
from .shapes import Boundary, Bounds, Point

logger = logging.getLogger(__name__)

# Ring-search offsets, in the order they are tried at each radius d.
_RING_OFFSETS = (
    (0, 1),
    (1, 0),
    (0, -1),
    (-1, 0),
    (1, 1),
    (1, -1),
    (-1, -1),
    (-1, 1),
)


def _clamp01(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * _clamp01(t)


class GridField:
    """Queryable grid of Nodes over a Boundary."""

    def __init__(
        self,
        boundary: Boundary,
        cell_width: float,
        cell_height: Optional[float] = None,
    ) -> None:
        if cell_height is None:
            cell_height = cell_width
        if cell_width <= 0 or cell_height <= 0:
            raise ValueError(
                f"Cell size must be positive, got ({cell_width}, {cell_height})"
            )

        self.boundary = boundary
        self.cell_width = float(cell_width)
        self.cell_height = float(cell_height)

        self.grid_size_x = 0
        self.grid_size_y = 0
        self._bounds = Bounds(0.0, 0.0, 0.0, 0.0)
        self._nodes: List[List[Node]] = []

        self.rebuild()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def rebuild(self) -> None:
        """
        Recompute grid size from the boundary and recreate every Node.

        A cell is walkable iff its center lies inside the boundary. A
        zero-area boundary gives a zero-cell grid.
        """
        self._bounds = self.boundary.bounds()
        size_x, size_y = self._bounds.size

        self.grid_size_x = max(int(round(size_x / self.cell_width)), 0)
        self.grid_size_y = max(int(round(size_y / self.cell_height)), 0)

        left, bottom = self._bounds.bottom_left
        nodes: List[List[Node]] = []
        for x in range(self.grid_size_x):
            column: List[Node] = []
            px = left + x * self.cell_width + self.cell_width * 0.5
            for y in range(self.grid_size_y):
                py = bottom + y * self.cell_height + self.cell_height * 0.5
                position = (px, py)
                column.append(Node(position, x, y, self.is_point_inside(position)))
            nodes.append(column)
        self._nodes = nodes

        logger.info(
            "Grid rebuilt: %dx%d cells (%d walkable), cell size %.3fx%.3f",
            self.grid_size_x,
            self.grid_size_y,
            self.walkable_count(),
            self.cell_width,
            self.cell_height,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def bounds(self) -> Bounds:
        return self._bounds

    @property
    def max_size(self) -> int:
        return self.grid_size_x * self.grid_size_y

    def iter_nodes(self) -> Iterator[Node]:
        for column in self._nodes:
            yield from column

    def walkable_count(self) -> int:
        return sum(1 for node in self.iter_nodes() if node.walkable)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def in_bounds(self, grid_x: int, grid_y: int) -> bool:
        return 0 <= grid_x < self.grid_size_x and 0 <= grid_y < self.grid_size_y

    def grid_to_node(self, grid_x: int, grid_y: int) -> Optional[Node]:
        """Node at grid coordinates, or None outside the grid."""
        if not self.in_bounds(grid_x, grid_y):
            return None
        return self._nodes[grid_x][grid_y]

    def position_to_grid_x(self, position: Point) -> int:
        size_x = self._bounds.size[0]
        if size_x <= 0:
            return 0
        percent = _clamp01((position[0] - self._bounds.min_x) / size_x)
        return int(round((self.grid_size_x - 1) * percent))

    def position_to_grid_y(self, position: Point) -> int:
        size_y = self._bounds.size[1]
        if size_y <= 0:
            return 0
        percent = _clamp01((position[1] - self._bounds.min_y) / size_y)
        return int(round((self.grid_size_y - 1) * percent))

    def position_to_node(self, position: Point) -> Optional[Node]:
        """
        Map a world point to the nearest grid cell.

        Positions outside the bounds are clamped onto the edge. If the cell
        is not traversable, the nearest traversable cell found by the ring
        search is returned instead; None when the grid has none.
        """
        if self.max_size == 0:
            logger.warning(
                "Cannot find nearest node to position %s: grid has no cells",
                position,
            )
            return None

        node = self._nodes[self.position_to_grid_x(position)][
            self.position_to_grid_y(position)
        ]
        if node.traversable:
            return node
        return self.get_nearest_walkable(node)

    def get_nearest_walkable(self, node: Node) -> Optional[Node]:
        """
        Expanding ring search around `node`.

        At each Chebyshev radius d only the 8 axis/diagonal offsets are
        tried, in a fixed rotational order.
        """
        if node.traversable:
            return node

        for d in range(1, max(self.grid_size_x, self.grid_size_y) + 1):
            for dx, dy in _RING_OFFSETS:
                nx = node.grid_x + dx * d
                ny = node.grid_y + dy * d
                if not self.in_bounds(nx, ny):
                    continue
                candidate = self._nodes[nx][ny]
                if candidate.traversable:
                    return candidate

        logger.warning("Cannot find nearest node to position %s", node.position)
        return None

    def get_neighbours(self, node: Node, buffer: List[Optional[Node]]) -> int:
        """
        Fill `buffer` with the in-bounds Moore neighbours of `node`.

        Returns the number of slots written. `buffer` must hold at least 8
        entries and is overwritten on every call: do not keep references
        from one call across the next.
        """
        count = 0
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                nx = node.grid_x + dx
                ny = node.grid_y + dy
                if 0 <= nx < self.grid_size_x and 0 <= ny < self.grid_size_y:
                    buffer[count] = self._nodes[nx][ny]
                    count += 1
        return count

    def is_point_inside(self, position: Point) -> bool:
        return self.boundary.contains(position)

    # ------------------------------------------------------------------
    # Obstacle holes
    # ------------------------------------------------------------------

    def clear_obstacle_holes(self) -> None:
        for node in self.iter_nodes():
            node.evade = False

    def add_obstacle_hole(self, center: Point, radius: float, y_scale: float) -> None:
        """
        Mark a rhombus of cells around `center` as evaded.

        The cross (center +/- radius along x, +/- radius * y_scale along y)
        is marked directly; the left and right wings are filled by
        interpolating the vertical extent towards the tips. Cells outside
        the grid are skipped.
        """
        center_node = self.position_to_node(center)
        if center_node is None:
            return

        cx, cy = center
        left_point = (cx - radius, cy)
        right_point = (cx + radius, cy)
        top_point = (cx, cy + radius * y_scale)
        bottom_point = (cx, cy - radius * y_scale)

        far_left_x = self.position_to_grid_x(left_point)
        far_left_y = self.position_to_grid_y(left_point)
        far_right_x = self.position_to_grid_x(right_point)
        far_right_y = self.position_to_grid_y(right_point)
        far_top_y = self.position_to_grid_y(top_point)
        far_bottom_y = self.position_to_grid_y(bottom_point)

        for x in range(far_left_x, far_right_x + 1):
            self._mark_evade(x, center_node.grid_y)

        for y in range(far_bottom_y, far_top_y + 1):
            self._mark_evade(center_node.grid_x, y)

        # Left wing
        if center_node.grid_x != far_left_x:
            span = center_node.grid_x - far_left_x
            for x in range(far_left_x, center_node.grid_x + 1):
                t = (x - far_left_x) / span
                max_y = int(_lerp(far_left_y, far_top_y, t))
                min_y = int(_lerp(far_left_y, far_bottom_y, t))
                for y in range(min_y, max_y + 1):
                    self._mark_evade(x, y)

        # Right wing
        if far_right_x != center_node.grid_x:
            span = far_right_x - center_node.grid_x
            for x in range(center_node.grid_x, far_right_x + 1):
                t = (x - center_node.grid_x) / span
                max_y = int(_lerp(far_top_y, far_right_y, t))
                min_y = int(_lerp(far_bottom_y, far_right_y, t))
                for y in range(min_y, max_y + 1):
                    self._mark_evade(x, y)

    def _mark_evade(self, grid_x: int, grid_y: int) -> None:
        if self.in_bounds(grid_x, grid_y):
            self._nodes[grid_x][grid_y].evade = True
