# src/nav2d/engine.py
"""
NavigationEngine: one GridField per walkable region, one entry point.

Per query:
    1. Pick the region containing the start point (else the nearest one).
    2. Carve other agents into that region's grid (evasion overlay).
    3. Run A* on the grid.
    4. Clear the carved holes again.

Cell size is accuracy * CELL_SIZE_FACTOR for both axes.

Like the grids it owns, the engine is single-threaded: one query at a time,
and no reset() while a query is running.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional, Sequence

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event

from .evasion import ObstacleEvasionOverlay
from .grid import GridField
from .pathfinder import DEFAULT_DESTINATION_THRESHOLD, Pathfinder
from .shapes import Boundary, Point, PolygonBoundary, sqr_distance

logger = logging.getLogger(__name__)

CELL_SIZE_FACTOR = 0.1

_MODULE = "nav2d.engine"


class NavigationEngine:
    """Multi-region A* navigation with optional agent evasion."""

    def __init__(
        self,
        regions: Sequence[Boundary],
        *,
        accuracy: float = 10.0,
        destination_threshold: float = DEFAULT_DESTINATION_THRESHOLD,
        overlay: Optional[ObstacleEvasionOverlay] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        if accuracy <= 0:
            raise ValueError(f"Accuracy must be positive, got {accuracy}")
        self.regions: List[Boundary] = list(regions)
        self.accuracy = accuracy
        self.destination_threshold = destination_threshold
        self.overlay = overlay
        self._bus = bus

        self._grids: List[GridField] = []
        self._pathfinders: List[Pathfinder] = []
        self.reset()

    # ------------------------------------------------------------------
    # Grid lifecycle
    # ------------------------------------------------------------------

    @property
    def cell_size(self) -> float:
        return self.accuracy * CELL_SIZE_FACTOR

    @property
    def grids(self) -> List[GridField]:
        return list(self._grids)

    def reset(self) -> None:
        """Rebuild every region grid from scratch."""
        self._grids = []
        self._pathfinders = []
        for index, region in enumerate(self.regions):
            grid = GridField(region, self.cell_size, self.cell_size)
            self._grids.append(grid)
            self._pathfinders.append(Pathfinder(grid, self.destination_threshold))
            self._emit_grid_rebuilt(index, grid)

    def set_accuracy(self, accuracy: float) -> None:
        if accuracy <= 0:
            raise ValueError(f"Accuracy must be positive, got {accuracy}")
        self.accuracy = accuracy
        self.reset()

    def get_grid(self, region: Boundary) -> Optional[GridField]:
        for candidate, grid in zip(self.regions, self._grids):
            if candidate is region:
                return grid
        return None

    def add_static_hole(self, ring: Sequence[Point]) -> int:
        """
        Cut a polygon hole into every polygon region and rebuild those grids.

        Returns the number of regions changed.
        """
        changed = 0
        for index, region in enumerate(self.regions):
            if not isinstance(region, PolygonBoundary):
                continue
            region.add_hole(ring)
            self._grids[index].rebuild()
            self._emit_grid_rebuilt(index, self._grids[index])
            changed += 1

        if changed == 0:
            logger.warning("Static hole ignored: no polygon regions to cut into")
        self._emit(
            EventType.STATIC_HOLES_CHANGED,
            "Static hole added",
            {"regions_changed": changed, "ring": [list(p) for p in ring]},
        )
        return changed

    def clear_static_holes(self) -> None:
        for index, region in enumerate(self.regions):
            if isinstance(region, PolygonBoundary) and region.holes:
                region.holes.clear()
                self._grids[index].rebuild()
                self._emit_grid_rebuilt(index, self._grids[index])
        self._emit(EventType.STATIC_HOLES_CHANGED, "Static holes cleared", {})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def select_region(self, start: Point) -> Optional[int]:
        """
        Index of the region containing `start`, else the one whose shape
        lies nearest to it.
        """
        best_index: Optional[int] = None
        best_distance = float("inf")
        for index, region in enumerate(self.regions):
            if region.contains(start):
                return index
            distance = sqr_distance(region, start)
            if distance < best_distance:
                best_distance = distance
                best_index = index
        return best_index

    def get_points(
        self,
        start: Point,
        target: Point,
        exclude: Optional[str] = None,
    ) -> List[Point]:
        """
        Waypoints from start to target, avoiding other agents.

        `exclude` is the id of the querying agent, which is never carved as
        an obstacle. With no regions configured the direct route [target]
        is returned.
        """
        query_id = uuid.uuid4().hex[:12]

        index = self.select_region(start)
        if index is None:
            logger.debug("No navigation regions; using direct route to %s", target)
            return [target]

        grid = self._grids[index]
        pathfinder = self._pathfinders[index]

        evading = self.overlay is not None and self.overlay.enabled
        if evading:
            carved = self.overlay.apply(grid, exclude)  # type: ignore[union-attr]
            self._emit(
                EventType.EVASION_APPLIED,
                "Agents carved into grid",
                {"region": index, "agents": carved, "exclude": exclude},
                query_id,
            )

        try:
            points = pathfinder.find_path(start, target)
        finally:
            if evading:
                self.overlay.clear(grid)  # type: ignore[union-attr]

        payload = {
            "region": index,
            "start": list(start),
            "target": list(target),
            "waypoints": [list(p) for p in points],
        }
        if points:
            self._emit(EventType.PATH_FOUND, "Path found", payload, query_id)
        else:
            self._emit(EventType.PATH_NOT_FOUND, "No path found", payload, query_id)
        return points

    # ------------------------------------------------------------------
    # Monitoring
    # ------------------------------------------------------------------

    def _emit_grid_rebuilt(self, index: int, grid: GridField) -> None:
        self._emit(
            EventType.GRID_REBUILT,
            "Region grid rebuilt",
            {
                "region": index,
                "size": [grid.grid_size_x, grid.grid_size_y],
                "walkable": grid.walkable_count(),
                "cell_size": [grid.cell_width, grid.cell_height],
            },
        )

    def _emit(
        self,
        event_type: EventType,
        message: str,
        payload: dict,
        correlation_id: Optional[str] = None,
    ) -> None:
        if self._bus is None:
            return
        log_event(
            bus=self._bus,
            module=_MODULE,
            event_type=event_type,
            message=message,
            payload=payload,
            correlation_id=correlation_id,
        )
