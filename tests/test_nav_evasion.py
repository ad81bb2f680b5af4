# tests/test_nav_evasion.py
"""
Tests for the agent registry and the obstacle evasion overlay.

Grid: 10x10 cells of size 1, cell (i, j) centred on world point (i, j).
"""

from __future__ import annotations

from typing import Set, Tuple

import pytest

from nav2d.agents import Agent, AgentRegistry, AgentState, Footprint, MovementMethod
from nav2d.evasion import EvasionPolicy, ObstacleEvasionOverlay
from nav2d.grid import GridField
from nav2d.pathfinder import Pathfinder
from nav2d.shapes import RectBoundary


def make_grid() -> GridField:
    return GridField(RectBoundary(-0.5, -0.5, 10.0, 10.0), 1.0)


def make_registry() -> AgentRegistry:
    registry = AgentRegistry()
    registry.add(Agent("me", (0.0, 0.0), Footprint(0.5), is_player=True))
    registry.add(Agent("guard", (3.0, 3.0), Footprint(1.0)))
    registry.add(Agent("runner", (6.0, 6.0), Footprint(1.0), state=AgentState.MOVING))
    registry.add(Agent("ghost", (8.0, 1.0)))
    registry.add(Agent("far_away", (50.0, 50.0), Footprint(1.0)))
    return registry


def evaded(grid: GridField) -> Set[Tuple[int, int]]:
    return {(n.grid_x, n.grid_y) for n in grid.iter_nodes() if n.evade}


def plus(cx: int, cy: int) -> Set[Tuple[int, int]]:
    return {(cx, cy), (cx - 1, cy), (cx + 1, cy), (cx, cy - 1), (cx, cy + 1)}


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def test_registry_basic_operations():
    registry = make_registry()

    assert len(registry) == 5
    assert "guard" in registry
    assert "nobody" not in registry
    assert [a.agent_id for a in registry] == ["me", "guard", "runner", "ghost", "far_away"]

    registry.update_position("guard", (4, 4))
    assert registry.get("guard").position == (4.0, 4.0)

    registry.set_state("runner", AgentState.IDLE)
    assert registry.get("runner").is_idle

    removed = registry.remove("ghost")
    assert removed.agent_id == "ghost"
    assert "ghost" not in registry


def test_registry_rejects_duplicates_and_unknown_ids():
    registry = make_registry()

    with pytest.raises(ValueError):
        registry.add(Agent("guard", (1.0, 1.0)))
    with pytest.raises(KeyError):
        registry.get("nobody")
    with pytest.raises(KeyError):
        registry.remove("nobody")
    with pytest.raises(KeyError):
        registry.update_position("nobody", (0.0, 0.0))


# ---------------------------------------------------------------------------
# Overlay
# ---------------------------------------------------------------------------


def test_invalid_y_scale_rejected():
    with pytest.raises(ValueError):
        ObstacleEvasionOverlay(AgentRegistry(), EvasionPolicy.IDLE_ONLY, y_scale=0.0)
    with pytest.raises(ValueError):
        ObstacleEvasionOverlay(AgentRegistry(), EvasionPolicy.IDLE_ONLY, y_scale=1.5)


def test_eligible_agents_per_policy():
    grid = make_grid()
    registry = make_registry()

    def ids(policy: EvasionPolicy, exclude=None):
        overlay = ObstacleEvasionOverlay(registry, policy)
        return [a.agent_id for a in overlay.eligible_agents(grid, exclude)]

    assert ids(EvasionPolicy.NONE, "me") == []
    assert ids(EvasionPolicy.IDLE_ONLY, "me") == ["guard"]
    assert ids(EvasionPolicy.ALL_AGENTS, "me") == ["guard", "runner"]
    # without an exclusion the querying agent is carved like anyone else
    assert ids(EvasionPolicy.IDLE_ONLY) == ["me", "guard"]


def test_apply_carves_plus_shaped_holes():
    grid = make_grid()
    overlay = ObstacleEvasionOverlay(make_registry(), EvasionPolicy.ALL_AGENTS)

    carved = overlay.apply(grid, exclude="me")

    assert carved == 2
    assert evaded(grid) == plus(3, 3) | plus(6, 6)


def test_apply_replaces_previous_holes_and_clear_resets():
    grid = make_grid()
    registry = make_registry()
    overlay = ObstacleEvasionOverlay(registry, EvasionPolicy.IDLE_ONLY)

    overlay.apply(grid, exclude="me")
    assert evaded(grid) == plus(3, 3)

    registry.update_position("guard", (7.0, 2.0))
    overlay.apply(grid, exclude="me")
    assert evaded(grid) == plus(7, 2)

    overlay.clear(grid)
    assert evaded(grid) == set()


def test_none_policy_leaves_grid_untouched():
    grid = make_grid()
    overlay = ObstacleEvasionOverlay(make_registry(), EvasionPolicy.NONE)

    assert not overlay.enabled
    assert overlay.apply(grid, exclude="me") == 0
    assert evaded(grid) == set()


def test_trigger_flag_follows_movement_method():
    registry = make_registry()
    grid = make_grid()

    ObstacleEvasionOverlay(
        registry, EvasionPolicy.IDLE_ONLY, movement_method=MovementMethod.DIRECT
    ).apply(grid)
    assert registry.get("guard").footprint.is_trigger
    assert not registry.get("me").footprint.is_trigger

    ObstacleEvasionOverlay(
        registry, EvasionPolicy.IDLE_ONLY, movement_method=MovementMethod.POINT_AND_CLICK
    ).apply(grid)
    assert registry.get("me").footprint.is_trigger


def test_search_routes_around_carved_agent():
    grid = make_grid()
    registry = AgentRegistry()
    registry.add(Agent("blocker", (5.0, 5.0), Footprint(1.0)))
    overlay = ObstacleEvasionOverlay(registry, EvasionPolicy.IDLE_ONLY)
    pathfinder = Pathfinder(grid)

    overlay.apply(grid)
    try:
        nodes = pathfinder.find_node_path((0.0, 0.0), (9.0, 9.0))
        points = pathfinder.find_path((0.0, 0.0), (9.0, 9.0))
    finally:
        overlay.clear(grid)

    assert nodes
    assert all((n.grid_x, n.grid_y) not in plus(5, 5) for n in nodes)
    assert len(points) >= 2
    assert points[-1] == pytest.approx((9.0, 9.0))

    # once cleared, the direct diagonal is back
    assert pathfinder.find_path((0.0, 0.0), (9.0, 9.0)) == [pytest.approx((9.0, 9.0))]


@pytest.mark.parametrize("policy", [EvasionPolicy.ALL_AGENTS, EvasionPolicy.NONE])
def test_two_agents_on_the_diagonal(policy):
    grid = make_grid()
    overlay = ObstacleEvasionOverlay(make_registry(), policy)
    pathfinder = Pathfinder(grid)

    overlay.apply(grid, exclude="me")
    try:
        nodes = pathfinder.find_node_path((0.0, 0.0), (9.0, 9.0))
        points = pathfinder.find_path((0.0, 0.0), (9.0, 9.0))
    finally:
        overlay.clear(grid)

    if policy == EvasionPolicy.NONE:
        assert points == [pytest.approx((9.0, 9.0))]
    else:
        blocked = plus(3, 3) | plus(6, 6)
        assert all((n.grid_x, n.grid_y) not in blocked for n in nodes)
        assert len(points) >= 2
        assert points[-1] == pytest.approx((9.0, 9.0))
