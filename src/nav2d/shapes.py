# src/nav2d/shapes.py
"""
Boundary shapes for nav2d.

The grid never talks to a physics engine. It only needs two things from
whatever describes the walkable area:

- contains(point) -> bool
- bounds()        -> Bounds (axis-aligned)

Anything implementing those two methods satisfies the Boundary protocol.
A shape may also offer closest_point(point); region selection falls back
to the bounding box for shapes that do not.
This module ships the shapes used by config files and tests:

- RectBoundary:      axis-aligned rectangle
- PolygonBoundary:   outer ring plus optional hole rings (even-odd rule)
- CompoundBoundary:  union of several boundaries
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol, Sequence, Tuple

# (x, y) world-space coordinates
Point = Tuple[float, float]

Ring = List[Point]


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box in world space."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def size(self) -> Point:
        return (self.max_x - self.min_x, self.max_y - self.min_y)

    @property
    def center(self) -> Point:
        return ((self.min_x + self.max_x) / 2.0, (self.min_y + self.max_y) / 2.0)

    @property
    def bottom_left(self) -> Point:
        return (self.min_x, self.min_y)

    def closest_point(self, point: Point) -> Point:
        """Clamp `point` onto the box (returns `point` itself when inside)."""
        x = min(max(point[0], self.min_x), self.max_x)
        y = min(max(point[1], self.min_y), self.max_y)
        return (x, y)

    def sqr_distance(self, point: Point) -> float:
        cx, cy = self.closest_point(point)
        return (cx - point[0]) ** 2 + (cy - point[1]) ** 2

    @staticmethod
    def from_points(points: Sequence[Point]) -> "Bounds":
        if not points:
            return Bounds(0.0, 0.0, 0.0, 0.0)
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return Bounds(min(xs), min(ys), max(xs), max(ys))

    def union(self, other: "Bounds") -> "Bounds":
        return Bounds(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )


class Boundary(Protocol):
    """Walkable-area source consumed by GridField."""

    def contains(self, point: Point) -> bool:
        ...

    def bounds(self) -> Bounds:
        ...


def closest_point_on_ring(point: Point, ring: Sequence[Point]) -> Point:
    """Nearest point to `point` on the closed polyline through `ring`."""
    px, py = point
    best = ring[0]
    best_sqr = float("inf")

    j = len(ring) - 1
    for i in range(len(ring)):
        ax, ay = ring[j]
        bx, by = ring[i]
        dx, dy = bx - ax, by - ay
        length_sqr = dx * dx + dy * dy
        t = 0.0
        if length_sqr > 0:
            t = min(max(((px - ax) * dx + (py - ay) * dy) / length_sqr, 0.0), 1.0)
        cx, cy = ax + dx * t, ay + dy * t
        sqr = (cx - px) ** 2 + (cy - py) ** 2
        if sqr < best_sqr:
            best, best_sqr = (cx, cy), sqr
        j = i
    return best


def closest_point(boundary: Boundary, point: Point) -> Point:
    """
    Nearest point of `boundary` to `point`.

    Uses the shape's own closest_point() when it has one, else clamps
    onto its bounding box.
    """
    method = getattr(boundary, "closest_point", None)
    if method is not None:
        return method(point)
    return boundary.bounds().closest_point(point)


def sqr_distance(boundary: Boundary, point: Point) -> float:
    cx, cy = closest_point(boundary, point)
    return (cx - point[0]) ** 2 + (cy - point[1]) ** 2


def point_in_ring(point: Point, ring: Sequence[Point]) -> bool:
    """
    Even-odd ray cast test of `point` against a closed ring.

    The ring does not need to repeat its first vertex.
    """
    x, y = point
    inside = False
    n = len(ring)
    if n < 3:
        return False

    j = n - 1
    for i in range(n):
        xi, yi = ring[i]
        xj, yj = ring[j]
        if (yi > y) != (yj > y):
            x_cross = xi + (y - yi) * (xj - xi) / (yj - yi)
            if x < x_cross:
                inside = not inside
        j = i
    return inside


@dataclass
class RectBoundary:
    """Axis-aligned rectangle anchored at its bottom-left corner."""

    min_x: float
    min_y: float
    width: float
    height: float

    def contains(self, point: Point) -> bool:
        x, y = point
        return (
            self.min_x <= x <= self.min_x + self.width
            and self.min_y <= y <= self.min_y + self.height
        )

    def bounds(self) -> Bounds:
        return Bounds(
            self.min_x,
            self.min_y,
            self.min_x + self.width,
            self.min_y + self.height,
        )

    def closest_point(self, point: Point) -> Point:
        return self.bounds().closest_point(point)


@dataclass
class PolygonBoundary:
    """
    Simple polygon with optional holes.

    A point is inside when it is inside the outer ring and not inside any
    hole. Holes may be added after construction (see
    NavigationEngine.add_static_hole); the owning grid must be rebuilt
    afterwards for the change to be visible.
    """

    points: Ring
    holes: List[Ring] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.points) < 3:
            raise ValueError(
                f"PolygonBoundary needs at least 3 points, got {len(self.points)}"
            )

    def contains(self, point: Point) -> bool:
        if not point_in_ring(point, self.points):
            return False
        for hole in self.holes:
            if point_in_ring(point, hole):
                return False
        return True

    def bounds(self) -> Bounds:
        return Bounds.from_points(self.points)

    def closest_point(self, point: Point) -> Point:
        """`point` itself when inside, else the nearest point on any ring."""
        if self.contains(point):
            return point
        candidates = [closest_point_on_ring(point, self.points)]
        candidates.extend(closest_point_on_ring(point, hole) for hole in self.holes)
        return min(
            candidates,
            key=lambda c: (c[0] - point[0]) ** 2 + (c[1] - point[1]) ** 2,
        )

    def add_hole(self, ring: Sequence[Point]) -> None:
        if len(ring) < 3:
            raise ValueError(f"Hole needs at least 3 points, got {len(ring)}")
        self.holes.append([(float(x), float(y)) for x, y in ring])


@dataclass
class CompoundBoundary:
    """Union of several boundaries treated as one walkable area."""

    parts: List[Boundary]

    def contains(self, point: Point) -> bool:
        return any(part.contains(point) for part in self.parts)

    def bounds(self) -> Bounds:
        if not self.parts:
            return Bounds(0.0, 0.0, 0.0, 0.0)
        result = self.parts[0].bounds()
        for part in self.parts[1:]:
            result = result.union(part.bounds())
        return result

    def closest_point(self, point: Point) -> Point:
        if not self.parts:
            return self.bounds().closest_point(point)
        if self.contains(point):
            return point
        candidates = [closest_point(part, point) for part in self.parts]
        return min(
            candidates,
            key=lambda c: (c[0] - point[0]) ** 2 + (c[1] - point[1]) ** 2,
        )


__all__ = [
    "Point",
    "Ring",
    "Bounds",
    "Boundary",
    "point_in_ring",
    "closest_point_on_ring",
    "closest_point",
    "sqr_distance",
    "RectBoundary",
    "PolygonBoundary",
    "CompoundBoundary",
]
