"""Geometry kernel: points, rectangles and intersection tests."""

from autocover.core.geometry.models import Point, Rect, Segment
from autocover.core.geometry.operations import (
    distance_to_segment,
    point_in_rect,
    segment_intersects_any,
    segment_intersects_rect,
    segment_rect_overlap,
    segments_intersect,
)

__all__ = [
    # Models
    "Point",
    "Rect",
    "Segment",
    # Operations
    "point_in_rect",
    "segments_intersect",
    "segment_intersects_rect",
    "segment_intersects_any",
    "segment_rect_overlap",
    "distance_to_segment",
]
