# src/nav2d/agents.py
"""
Agent registry consumed by the evasion overlay.

nav2d does not move agents. The registry is a plain, caller-owned view of
who is where: position, optional circular footprint, and whether the agent
is currently idle. Whatever drives movement keeps it up to date through
update_position() / set_state().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional

from .shapes import Point


class AgentState(Enum):
    """Coarse movement state; only IDLE counts as standing still."""

    IDLE = "idle"
    MOVING = "moving"
    CUSTOM = "custom"


class MovementMethod(Enum):
    """How the player agent is driven."""

    POINT_AND_CLICK = "point_and_click"
    DIRECT = "direct"


@dataclass
class Footprint:
    """
    Circular base of an agent.

    is_trigger mirrors the collider mode: once an agent is carved into the
    grid as a hole its footprint stops physically blocking others.
    """

    radius: float
    is_trigger: bool = False


@dataclass
class Agent:
    agent_id: str
    position: Point
    footprint: Optional[Footprint] = None
    state: AgentState = AgentState.IDLE
    is_player: bool = False

    @property
    def is_idle(self) -> bool:
        return self.state == AgentState.IDLE


@dataclass
class AgentRegistry:
    """Active agents keyed by id, iterated in insertion order."""

    _agents: Dict[str, Agent] = field(default_factory=dict)

    def add(self, agent: Agent) -> None:
        if agent.agent_id in self._agents:
            raise ValueError(f"Agent '{agent.agent_id}' is already registered")
        self._agents[agent.agent_id] = agent

    def remove(self, agent_id: str) -> Agent:
        if agent_id not in self._agents:
            raise KeyError(f"Unknown agent '{agent_id}'")
        return self._agents.pop(agent_id)

    def get(self, agent_id: str) -> Agent:
        if agent_id not in self._agents:
            raise KeyError(f"Unknown agent '{agent_id}'")
        return self._agents[agent_id]

    def update_position(self, agent_id: str, position: Point) -> None:
        self.get(agent_id).position = (float(position[0]), float(position[1]))

    def set_state(self, agent_id: str, state: AgentState) -> None:
        self.get(agent_id).state = state

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._agents

    def __iter__(self) -> Iterator[Agent]:
        return iter(list(self._agents.values()))

    def __len__(self) -> int:
        return len(self._agents)
