# src/nav2d/config.py
"""
YAML configuration for nav2d.

Default location: <project root>/config/navigation.yaml

Layout:

    navigation:
      accuracy: 10.0
      destination_threshold: 0.1
      movement_method: point_and_click
      evasion:
        policy: none
        y_scale: 1.0
    regions:
      - type: rect
        min: [0.0, 0.0]
        size: [10.0, 10.0]
    agents:
      - id: npc_1
        position: [3.0, 3.0]
        radius: 0.5
        state: idle
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import yaml

from .agents import Agent, AgentState, Footprint, MovementMethod
from .engine import CELL_SIZE_FACTOR
from .evasion import MAX_Y_SCALE, MIN_Y_SCALE, EvasionPolicy
from .pathfinder import DEFAULT_DESTINATION_THRESHOLD
from .shapes import Boundary, CompoundBoundary, Point, PolygonBoundary, RectBoundary


PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG_PATH = CONFIG_ROOT / "navigation.yaml"

E = TypeVar("E", bound=Enum)


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass
class EvasionConfig:
    policy: EvasionPolicy = EvasionPolicy.NONE
    y_scale: float = 1.0


@dataclass
class NavigationConfig:
    """Fully resolved navigation configuration."""

    accuracy: float = 10.0
    destination_threshold: float = DEFAULT_DESTINATION_THRESHOLD
    movement_method: MovementMethod = MovementMethod.POINT_AND_CLICK
    evasion: EvasionConfig = field(default_factory=EvasionConfig)
    regions: List[Boundary] = field(default_factory=list)
    agents: List[Agent] = field(default_factory=list)

    @property
    def cell_size(self) -> float:
        return self.accuracy * CELL_SIZE_FACTOR


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping from `path`."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _parse_enum(enum_cls: Type[E], value: Any, key: str) -> E:
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"Invalid {key}: {value!r} (expected one of: {allowed})") from None


def _parse_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def _parse_point(value: Any, key: str) -> Point:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"{key} must be a [x, y] pair, got {value!r}")
    return (float(value[0]), float(value[1]))


def _parse_ring(value: Any, key: str) -> List[Point]:
    if not isinstance(value, (list, tuple)) or len(value) < 3:
        raise ValueError(f"{key} must be a list of at least 3 points")
    return [_parse_point(p, f"{key}[{i}]") for i, p in enumerate(value)]


def _build_region(raw: Dict[str, Any], key: str) -> Boundary:
    kind = raw.get("type")
    if kind == "rect":
        min_x, min_y = _parse_point(raw.get("min"), f"{key}.min")
        width, height = _parse_point(raw.get("size"), f"{key}.size")
        if width < 0 or height < 0:
            raise ValueError(f"{key}.size must be non-negative, got {[width, height]}")
        return RectBoundary(min_x, min_y, width, height)

    if kind == "polygon":
        points = _parse_ring(raw.get("points"), f"{key}.points")
        holes = [
            _parse_ring(hole, f"{key}.holes[{i}]")
            for i, hole in enumerate(raw.get("holes") or [])
        ]
        return PolygonBoundary(points=points, holes=holes)

    if kind == "compound":
        parts = raw.get("parts") or []
        return CompoundBoundary(
            parts=[_build_region(part, f"{key}.parts[{i}]") for i, part in enumerate(parts)]
        )

    raise ValueError(f"{key}.type must be rect, polygon or compound, got {kind!r}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_regions(raw_regions: Sequence[Dict[str, Any]]) -> List[Boundary]:
    return [_build_region(raw, f"regions[{i}]") for i, raw in enumerate(raw_regions)]


def build_agents(raw_agents: Sequence[Dict[str, Any]]) -> List[Agent]:
    agents: List[Agent] = []
    for i, raw in enumerate(raw_agents):
        key = f"agents[{i}]"
        agent_id = raw.get("id")
        if not agent_id:
            raise ValueError(f"{key}.id is required")

        footprint: Optional[Footprint] = None
        if raw.get("radius") is not None:
            radius = float(raw["radius"])
            if radius < 0:
                raise ValueError(f"{key}.radius must be non-negative, got {radius}")
            footprint = Footprint(radius=radius)

        agents.append(
            Agent(
                agent_id=str(agent_id),
                position=_parse_point(raw.get("position"), f"{key}.position"),
                footprint=footprint,
                state=_parse_enum(AgentState, raw.get("state", "idle"), f"{key}.state"),
                is_player=_parse_bool(raw.get("is_player", False), f"{key}.is_player"),
            )
        )
    return agents


def parse_navigation_config(raw: Dict[str, Any]) -> NavigationConfig:
    """Build a NavigationConfig from an already-loaded mapping."""
    nav = raw.get("navigation") or {}
    evasion_raw = nav.get("evasion") or {}

    config = NavigationConfig(
        accuracy=float(nav.get("accuracy", 10.0)),
        destination_threshold=float(
            nav.get("destination_threshold", DEFAULT_DESTINATION_THRESHOLD)
        ),
        movement_method=_parse_enum(
            MovementMethod,
            nav.get("movement_method", MovementMethod.POINT_AND_CLICK.value),
            "navigation.movement_method",
        ),
        evasion=EvasionConfig(
            policy=_parse_enum(
                EvasionPolicy,
                evasion_raw.get("policy", EvasionPolicy.NONE.value),
                "navigation.evasion.policy",
            ),
            y_scale=float(evasion_raw.get("y_scale", 1.0)),
        ),
        regions=build_regions(raw.get("regions") or []),
        agents=build_agents(raw.get("agents") or []),
    )

    _validate_config(config)
    return config


def load_navigation_config(path: Optional[Path] = None) -> NavigationConfig:
    """Main entry point: load and validate a navigation YAML file."""
    return parse_navigation_config(_load_yaml(path or DEFAULT_CONFIG_PATH))


def _validate_config(config: NavigationConfig) -> None:
    """Range checks that dataclass construction can't express."""
    if config.cell_size <= 0:
        raise ValueError(
            f"navigation.accuracy must give a positive cell size, got {config.accuracy}"
        )
    if config.destination_threshold < 0:
        raise ValueError(
            "navigation.destination_threshold must be non-negative, "
            f"got {config.destination_threshold}"
        )
    if not MIN_Y_SCALE <= config.evasion.y_scale <= MAX_Y_SCALE:
        raise ValueError(
            f"navigation.evasion.y_scale must be in [{MIN_Y_SCALE}, {MAX_Y_SCALE}], "
            f"got {config.evasion.y_scale}"
        )
    seen = set()
    for agent in config.agents:
        if agent.agent_id in seen:
            raise ValueError(f"Duplicate agent id: {agent.agent_id}")
        seen.add(agent.agent_id)
