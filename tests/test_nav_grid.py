# tests/test_nav_grid.py
"""
Unit tests for nav2d.grid.GridField.

Grids are built over synthetic boundaries: a 10x10 square offset by half a
cell, so that cell (i, j) is centred exactly on world point (i, j).
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set, Tuple

import pytest

from nav2d.grid import GridField
from nav2d.node import Node
from nav2d.shapes import Bounds, Point, PolygonBoundary, RectBoundary


def open_square() -> RectBoundary:
    return RectBoundary(-0.5, -0.5, 10.0, 10.0)


def square_with_pillar() -> PolygonBoundary:
    return PolygonBoundary(
        points=[(-0.5, -0.5), (9.5, -0.5), (9.5, 9.5), (-0.5, 9.5)],
        holes=[[(3.5, 3.5), (5.5, 3.5), (5.5, 5.5), (3.5, 5.5)]],
    )


class NothingBoundary:
    """Has bounds but contains no point at all."""

    def contains(self, point: Point) -> bool:
        return False

    def bounds(self) -> Bounds:
        return Bounds(0.0, 0.0, 3.0, 3.0)


def evaded_cells(grid: GridField) -> Set[Tuple[int, int]]:
    return {(n.grid_x, n.grid_y) for n in grid.iter_nodes() if n.evade}


def classification(grid: GridField) -> List[Tuple[int, int, bool]]:
    return [(n.grid_x, n.grid_y, n.traversable) for n in grid.iter_nodes()]


def test_rebuild_dimensions_and_cell_centres() -> None:
    grid = GridField(open_square(), 1.0)

    assert (grid.grid_size_x, grid.grid_size_y) == (10, 10)
    assert grid.max_size == 100
    assert grid.walkable_count() == 100

    node = grid.grid_to_node(3, 7)
    assert node is not None
    assert node.position == pytest.approx((3.0, 7.0))
    assert (node.grid_x, node.grid_y) == (3, 7)


def test_rebuild_with_finer_cells() -> None:
    grid = GridField(open_square(), 0.5, 0.25)
    assert (grid.grid_size_x, grid.grid_size_y) == (20, 40)


def test_rebuild_is_deterministic_and_replaces_nodes() -> None:
    grid = GridField(square_with_pillar(), 1.0)
    first = classification(grid)
    old_node = grid.grid_to_node(0, 0)

    grid.rebuild()

    assert classification(grid) == first
    assert grid.grid_to_node(0, 0) is not old_node
    # pillar covers cells 4..5 on both axes
    blocked = {(x, y) for x, y, ok in first if not ok}
    assert blocked == {(4, 4), (4, 5), (5, 4), (5, 5)}


def test_zero_area_boundary_gives_empty_grid(caplog: pytest.LogCaptureFixture) -> None:
    grid = GridField(RectBoundary(2.0, 2.0, 0.0, 0.0), 1.0)
    assert grid.max_size == 0

    with caplog.at_level(logging.WARNING, logger="nav2d.grid"):
        assert grid.position_to_node((2.0, 2.0)) is None
    assert "Cannot find nearest node" in caplog.text


def test_invalid_cell_size_rejected() -> None:
    with pytest.raises(ValueError):
        GridField(open_square(), 0.0)
    with pytest.raises(ValueError):
        GridField(open_square(), 1.0, -1.0)


def test_grid_to_node_out_of_bounds_is_none() -> None:
    grid = GridField(open_square(), 1.0)
    assert grid.grid_to_node(-1, 0) is None
    assert grid.grid_to_node(0, -1) is None
    assert grid.grid_to_node(10, 0) is None
    assert grid.grid_to_node(0, 10) is None


def test_position_to_node_direct_and_clamped() -> None:
    grid = GridField(open_square(), 1.0)

    node = grid.position_to_node((6.1, 2.9))
    assert (node.grid_x, node.grid_y) == (6, 3)

    clamped = grid.position_to_node((-100.0, 50.0))
    assert (clamped.grid_x, clamped.grid_y) == (0, 9)


def test_position_to_node_snaps_out_of_blocked_cell() -> None:
    grid = GridField(square_with_pillar(), 1.0)

    # (4, 4) is inside the pillar; ring order tries up, right, then down.
    node = grid.position_to_node((4.0, 4.0))
    assert node is not None
    assert (node.grid_x, node.grid_y) == (4, 3)
    assert node.traversable


def test_nearest_walkable_exhausted(caplog: pytest.LogCaptureFixture) -> None:
    grid = GridField(NothingBoundary(), 1.0)
    assert grid.max_size == 9
    assert grid.walkable_count() == 0

    with caplog.at_level(logging.WARNING, logger="nav2d.grid"):
        assert grid.position_to_node((1.5, 1.5)) is None
    assert "Cannot find nearest node" in caplog.text


def test_get_neighbours_counts_and_buffer_reuse() -> None:
    grid = GridField(open_square(), 1.0)
    buffer: List[Optional[Node]] = [None] * 8

    assert grid.get_neighbours(grid.grid_to_node(0, 0), buffer) == 3
    corner = {(n.grid_x, n.grid_y) for n in buffer[:3]}
    assert corner == {(0, 1), (1, 0), (1, 1)}

    assert grid.get_neighbours(grid.grid_to_node(0, 5), buffer) == 5
    assert grid.get_neighbours(grid.grid_to_node(5, 5), buffer) == 8
    interior = {(n.grid_x, n.grid_y) for n in buffer}
    assert (5, 5) not in interior
    assert len(interior) == 8


def test_add_obstacle_hole_marks_rhombus() -> None:
    grid = GridField(open_square(), 1.0)
    grid.add_obstacle_hole((5.0, 5.0), 2.0, 1.0)

    expected = {
        (x, y)
        for x in range(10)
        for y in range(10)
        if abs(x - 5) + abs(y - 5) <= 2
    }
    assert evaded_cells(grid) == expected
    assert not grid.grid_to_node(5, 5).traversable
    # static classification is untouched
    assert grid.grid_to_node(5, 5).walkable


def test_add_obstacle_hole_respects_y_scale() -> None:
    grid = GridField(open_square(), 1.0)
    grid.add_obstacle_hole((5.0, 5.0), 2.0, 0.5)

    column = {y for x, y in evaded_cells(grid) if x == 5}
    assert column == {4, 5, 6}
    row = {x for x, y in evaded_cells(grid) if y == 5}
    assert row == {3, 4, 5, 6, 7}


def test_add_obstacle_hole_near_edge_is_clipped() -> None:
    grid = GridField(open_square(), 1.0)
    grid.add_obstacle_hole((0.0, 0.0), 3.0, 1.0)

    cells = evaded_cells(grid)
    assert (0, 0) in cells
    assert all(0 <= x < 10 and 0 <= y < 10 for x, y in cells)


def test_clear_obstacle_holes_restores_static_classification() -> None:
    grid = GridField(square_with_pillar(), 1.0)
    before = classification(grid)

    grid.add_obstacle_hole((2.0, 2.0), 1.5, 1.0)
    grid.add_obstacle_hole((7.0, 7.0), 1.0, 0.5)
    assert classification(grid) != before

    grid.clear_obstacle_holes()
    assert classification(grid) == before
    assert not evaded_cells(grid)


def test_is_point_inside_delegates_to_boundary() -> None:
    grid = GridField(square_with_pillar(), 1.0)
    assert grid.is_point_inside((1.0, 1.0))
    assert not grid.is_point_inside((4.5, 4.5))
    assert not grid.is_point_inside((20.0, 1.0))
