# src/app/runtime.py

from __future__ import annotations  # allow forward type hints

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from monitoring.bus import EventBus
from monitoring.logger import JsonFileLogger

from nav2d.agents import AgentRegistry
from nav2d.config import NavigationConfig, load_navigation_config
from nav2d.engine import NavigationEngine
from nav2d.evasion import EvasionPolicy, ObstacleEvasionOverlay
from nav2d.shapes import Point

logger = logging.getLogger(__name__)


@dataclass
class NavRuntime:
    """Everything a caller needs to run navigation queries."""

    config: NavigationConfig
    registry: AgentRegistry
    overlay: ObstacleEvasionOverlay
    engine: NavigationEngine
    bus: EventBus
    file_logger: Optional[JsonFileLogger] = None

    def find_path(
        self,
        start: Point,
        target: Point,
        exclude: Optional[str] = None,
    ) -> List[Point]:
        return self.engine.get_points(start, target, exclude)

    def close(self) -> None:
        if self.file_logger is not None:
            self.file_logger.close()
            self.file_logger = None


def build_runtime(
    config: Optional[NavigationConfig] = None,
    *,
    config_path: Optional[Path] = None,
    policy: Optional[EvasionPolicy] = None,
    log_path: Optional[Path] = None,
    bus: Optional[EventBus] = None,
) -> NavRuntime:
    """
    Wire config -> agent registry -> evasion overlay -> engine.

    `policy` overrides the configured evasion policy. When `log_path` is
    given, every monitoring event is also appended to that JSONL file.
    """
    if config is None:
        config = load_navigation_config(config_path)

    bus = bus or EventBus()
    file_logger = JsonFileLogger(log_path, bus) if log_path is not None else None

    registry = AgentRegistry()
    for agent in config.agents:
        registry.add(agent)

    overlay = ObstacleEvasionOverlay(
        registry,
        policy=policy or config.evasion.policy,
        y_scale=config.evasion.y_scale,
        movement_method=config.movement_method,
    )

    engine = NavigationEngine(
        config.regions,
        accuracy=config.accuracy,
        destination_threshold=config.destination_threshold,
        overlay=overlay,
        bus=bus,
    )

    logger.info(
        "Navigation runtime ready: %d regions, %d agents, evasion=%s",
        len(config.regions),
        len(registry),
        overlay.policy.value,
    )

    return NavRuntime(
        config=config,
        registry=registry,
        overlay=overlay,
        engine=engine,
        bus=bus,
        file_logger=file_logger,
    )
