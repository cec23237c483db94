"""Pure geometry operations used by the cover resolver.

All tests are boundary-inclusive: touching counts as intersecting.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from autocover.core.geometry.models import Point, Rect, Segment

_EPSILON = 1e-9


def _orientation(a: Point, b: Point, c: Point) -> int:
    """Orientation of the triplet (a, b, c).

    Returns:
        0 if collinear, 1 if clockwise, 2 if counter-clockwise.
    """
    value = (b.y - a.y) * (c.x - b.x) - (b.x - a.x) * (c.y - b.y)
    if abs(value) <= _EPSILON:
        return 0
    return 1 if value > 0 else 2


def _on_segment(a: Point, b: Point, c: Point) -> bool:
    """Check whether ``b`` lies within the bounding box of segment ``a``-``c``."""
    return (
        min(a.x, c.x) - _EPSILON <= b.x <= max(a.x, c.x) + _EPSILON
        and min(a.y, c.y) - _EPSILON <= b.y <= max(a.y, c.y) + _EPSILON
    )


def point_in_rect(p: Point, rect: Rect) -> bool:
    """Check if ``p`` lies inside ``rect`` or on its boundary."""
    return rect.x1 <= p.x <= rect.x2 and rect.y1 <= p.y <= rect.y2


def segments_intersect(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    """Check if segment ``p1``-``p2`` intersects segment ``q1``-``q2``.

    Uses the orientation test, with a collinear-overlap fallback so touching
    endpoints and overlapping collinear segments count as intersecting.

    Args:
        p1: Start of the first segment.
        p2: End of the first segment.
        q1: Start of the second segment.
        q2: End of the second segment.

    Returns:
        True if the segments share at least one point.
    """
    o1 = _orientation(p1, p2, q1)
    o2 = _orientation(p1, p2, q2)
    o3 = _orientation(q1, q2, p1)
    o4 = _orientation(q1, q2, p2)

    if o1 != o2 and o3 != o4:
        return True

    # Collinear special cases
    if o1 == 0 and _on_segment(p1, q1, p2):
        return True
    if o2 == 0 and _on_segment(p1, q2, p2):
        return True
    if o3 == 0 and _on_segment(q1, p1, q2):
        return True
    return o4 == 0 and _on_segment(q1, p2, q2)


def segment_intersects_rect(p1: Point, p2: Point, rect: Rect) -> bool:
    """Check if segment ``p1``-``p2`` touches ``rect``.

    True when either endpoint lies inside the rectangle or the segment crosses
    any of its four edges.
    """
    if point_in_rect(p1, rect) or point_in_rect(p2, rect):
        return True
    return any(segments_intersect(p1, p2, edge.start, edge.end) for edge in rect.edges())


def segment_intersects_any(p1: Point, p2: Point, segments: Iterable[Segment]) -> bool:
    """Check if segment ``p1``-``p2`` crosses any of ``segments``."""
    return any(segments_intersect(p1, p2, seg.start, seg.end) for seg in segments)


def segment_rect_overlap(p1: Point, p2: Point, rect: Rect) -> float:
    """Length of the part of segment ``p1``-``p2`` lying inside ``rect``.

    Liang-Barsky clipping. Zero when the segment misses the rectangle or only
    touches it at a single point.
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    t0, t1 = 0.0, 1.0
    for p, q in (
        (-dx, p1.x - rect.x1),
        (dx, rect.x2 - p1.x),
        (-dy, p1.y - rect.y1),
        (dy, rect.y2 - p1.y),
    ):
        if p == 0:
            if q < 0:
                return 0.0
            continue
        r = q / p
        if p < 0:
            if r > t1:
                return 0.0
            t0 = max(t0, r)
        else:
            if r < t0:
                return 0.0
            t1 = min(t1, r)
    if t0 > t1:
        return 0.0
    return math.hypot(dx, dy) * (t1 - t0)


def distance_to_segment(p: Point, a: Point, b: Point) -> float:
    """Shortest distance from ``p`` to segment ``a``-``b``."""
    abx, aby = b.x - a.x, b.y - a.y
    length_sq = abx * abx + aby * aby
    if length_sq == 0:
        return math.hypot(p.x - a.x, p.y - a.y)
    t = ((p.x - a.x) * abx + (p.y - a.y) * aby) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(p.x - (a.x + t * abx), p.y - (a.y + t * aby))
