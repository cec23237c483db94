"""Geometry primitives.

Usage:
    rect = Rect.from_origin(100, 0, 50, 100)
    rect.center  # Point(x=125.0, y=50.0)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Point:
    """Point in scene (pixel) space."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned rectangle given by two opposite corners.

    Corners are normalized so ``x1 <= x2`` and ``y1 <= y2``.
    """

    x1: float
    y1: float
    x2: float
    y2: float

    def __post_init__(self) -> None:
        if self.x1 > self.x2:
            x1, x2 = self.x2, self.x1
            object.__setattr__(self, "x1", x1)
            object.__setattr__(self, "x2", x2)
        if self.y1 > self.y2:
            y1, y2 = self.y2, self.y1
            object.__setattr__(self, "y1", y1)
            object.__setattr__(self, "y2", y2)

    @classmethod
    def from_origin(cls, x: float, y: float, width: float, height: float) -> Rect:
        """Build a rectangle from its top-left corner and extent."""
        return cls(x, y, x + width, y + height)

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def center(self) -> Point:
        return Point((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)

    def corners(self) -> tuple[Point, Point, Point, Point]:
        """Corners clockwise from the top-left."""
        return (
            Point(self.x1, self.y1),
            Point(self.x2, self.y1),
            Point(self.x2, self.y2),
            Point(self.x1, self.y2),
        )

    def edges(self) -> tuple[Segment, Segment, Segment, Segment]:
        """Top, right, bottom and left edges."""
        top_left, top_right, bottom_right, bottom_left = self.corners()
        return (
            Segment(top_left, top_right),
            Segment(top_right, bottom_right),
            Segment(bottom_right, bottom_left),
            Segment(bottom_left, top_left),
        )


@dataclass(frozen=True, slots=True)
class Segment:
    """Line segment between two points."""

    start: Point
    end: Point
