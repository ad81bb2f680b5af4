# src/nav2d/evasion.py
"""
Dynamic obstacle overlay: other agents become temporary holes.

Per query:
    overlay.apply(grid, exclude=querying_agent_id)
    ... run the search ...
    overlay.clear(grid)

The overlay is the only writer of Node.evade.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterator, Optional

from .agents import Agent, AgentRegistry, MovementMethod
from .grid import GridField

logger = logging.getLogger(__name__)

MIN_Y_SCALE = 0.1
MAX_Y_SCALE = 1.0


class EvasionPolicy(Enum):
    """Which agents are carved into the grid."""

    NONE = "none"
    IDLE_ONLY = "idle_only"
    ALL_AGENTS = "all_agents"


class ObstacleEvasionOverlay:
    """Marks cells under other agents' footprints as evaded."""

    def __init__(
        self,
        registry: AgentRegistry,
        policy: EvasionPolicy = EvasionPolicy.NONE,
        y_scale: float = 1.0,
        movement_method: MovementMethod = MovementMethod.POINT_AND_CLICK,
    ) -> None:
        if not MIN_Y_SCALE <= y_scale <= MAX_Y_SCALE:
            raise ValueError(
                f"Evasion y-scale must be in [{MIN_Y_SCALE}, {MAX_Y_SCALE}], got {y_scale}"
            )
        self.registry = registry
        self.policy = policy
        self.y_scale = y_scale
        self.movement_method = movement_method

    @property
    def enabled(self) -> bool:
        return self.policy != EvasionPolicy.NONE

    def eligible_agents(
        self,
        grid: GridField,
        exclude: Optional[str] = None,
    ) -> Iterator[Agent]:
        """Agents that would be carved into `grid` under the current policy."""
        if not self.enabled:
            return

        for agent in self.registry:
            if not grid.is_point_inside(agent.position):
                continue
            if agent.footprint is None:
                continue
            if exclude is not None and agent.agent_id == exclude:
                continue
            if self.policy == EvasionPolicy.IDLE_ONLY and not agent.is_idle:
                continue
            yield agent

    def apply(self, grid: GridField, exclude: Optional[str] = None) -> int:
        """
        Replace the grid's holes with one hole per eligible agent.

        Returns the number of agents carved. A NONE policy leaves the grid
        untouched.
        """
        if not self.enabled:
            return 0

        grid.clear_obstacle_holes()

        carved = 0
        for agent in self.eligible_agents(grid, exclude):
            footprint = agent.footprint
            # A directly-driven player keeps a solid footprint.
            if not (agent.is_player and self.movement_method == MovementMethod.DIRECT):
                footprint.is_trigger = True  # type: ignore[union-attr]

            grid.add_obstacle_hole(agent.position, footprint.radius, self.y_scale)  # type: ignore[union-attr]
            carved += 1

        logger.debug(
            "Evasion (%s): carved %d agent holes, excluded=%s",
            self.policy.value,
            carved,
            exclude,
        )
        return carved

    def clear(self, grid: GridField) -> None:
        grid.clear_obstacle_holes()
