"""2D value types used by the turtle interpreter."""

from __future__ import annotations

import math
from dataclasses import dataclass

Point = tuple[float, float]


def normalize(v: Point) -> Point:
    length = math.hypot(v[0], v[1])
    if not math.isfinite(length) or length == 0.0:
        raise ValueError(f"cannot normalize heading {v!r}")
    return (v[0] / length, v[1] / length)


def heading_from_degrees(degrees: float) -> Point:
    """Unit vector at ``degrees`` counter-clockwise from +X."""
    rad = math.radians(degrees)
    return (math.cos(rad), math.sin(rad))


@dataclass(frozen=True)
class Cursor:
    """Turtle pose: a position and a unit heading.

    Cursors are values; every move returns a new one, so saving a cursor on a
    stack is just keeping a reference.
    """

    position: Point = (0.0, 0.0)
    heading: Point = (1.0, 0.0)

    def __post_init__(self) -> None:
        x, y = self.position
        object.__setattr__(self, "position", (float(x), float(y)))
        object.__setattr__(self, "heading", normalize(self.heading))

    @classmethod
    def at(cls, x: float, y: float, heading_deg: float = 0.0) -> Cursor:
        return cls((x, y), heading_from_degrees(heading_deg))

    @property
    def angle(self) -> float:
        """Heading in degrees, in (-180, 180]."""
        return math.degrees(math.atan2(self.heading[1], self.heading[0]))

    def forward(self, distance: float) -> Cursor:
        x, y = self.position
        dx, dy = self.heading
        return Cursor((x + dx * distance, y + dy * distance), self.heading)

    def rotate(self, radians: float) -> Cursor:
        """Rotate counter-clockwise (clockwise for negative angles)."""
        c = math.cos(radians)
        s = math.sin(radians)
        dx, dy = self.heading
        return Cursor(self.position, (dx * c - dy * s, dx * s + dy * c))

    def rotate_degrees(self, degrees: float) -> Cursor:
        return self.rotate(math.radians(degrees))

    def with_position(self, position: Point) -> Cursor:
        return Cursor(position, self.heading)

    def with_heading(self, heading: Point) -> Cursor:
        return Cursor(self.position, heading)


@dataclass(frozen=True)
class Segment:
    start: Point
    end: Point

    @property
    def length(self) -> float:
        return math.dist(self.start, self.end)
