"""Tests for geometry primitives and intersection tests."""

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from autocover.core.geometry import (
    Point,
    Rect,
    Segment,
    distance_to_segment,
    point_in_rect,
    segment_intersects_any,
    segment_intersects_rect,
    segment_rect_overlap,
    segments_intersect,
)

coords = st.floats(min_value=-1000, max_value=1000, allow_nan=False, allow_infinity=False)


def test_rect_normalizes_corners():
    """Corners given in any order are stored as (min, max)."""
    rect = Rect(10, 20, 0, 5)
    assert (rect.x1, rect.y1, rect.x2, rect.y2) == (0, 5, 10, 20)
    assert rect.width == 10
    assert rect.height == 15


def test_rect_from_origin_and_center():
    rect = Rect.from_origin(100, 0, 50, 100)
    assert rect == Rect(100, 0, 150, 100)
    assert rect.center == Point(125, 50)


def test_rect_edges_close_the_outline():
    """Each edge ends where the next one starts."""
    edges = Rect(0, 0, 1, 1).edges()
    for edge, following in zip(edges, edges[1:] + edges[:1]):
        assert edge.end == following.start


def test_point_in_rect_is_boundary_inclusive():
    rect = Rect(0, 0, 10, 10)
    assert point_in_rect(Point(5, 5), rect)
    assert point_in_rect(Point(0, 10), rect)
    assert not point_in_rect(Point(10.1, 5), rect)


def test_crossing_segments_intersect():
    assert segments_intersect(Point(0, 0), Point(10, 10), Point(0, 10), Point(10, 0))


def test_parallel_segments_do_not_intersect():
    assert not segments_intersect(Point(0, 0), Point(10, 0), Point(0, 1), Point(10, 1))


def test_collinear_overlapping_segments_intersect():
    assert segments_intersect(Point(0, 0), Point(10, 0), Point(5, 0), Point(15, 0))


def test_collinear_disjoint_segments_do_not_intersect():
    assert not segments_intersect(Point(0, 0), Point(4, 0), Point(5, 0), Point(15, 0))


def test_touching_endpoint_counts_as_intersection():
    assert segments_intersect(Point(0, 0), Point(5, 5), Point(5, 5), Point(10, 0))


def test_segment_through_rect_intersects():
    assert segment_intersects_rect(Point(-10, 5), Point(20, 5), Rect(0, 0, 10, 10))


def test_segment_inside_rect_intersects():
    """A segment with no edge crossings still hits when an endpoint is inside."""
    assert segment_intersects_rect(Point(2, 2), Point(3, 3), Rect(0, 0, 10, 10))


def test_segment_grazing_rect_corner_intersects():
    assert segment_intersects_rect(Point(-5, 15), Point(15, -5), Rect(0, 0, 10, 10))


def test_segment_missing_rect():
    assert not segment_intersects_rect(Point(-10, 20), Point(20, 20), Rect(0, 0, 10, 10))


def test_segment_intersects_any():
    walls = [
        Segment(Point(50, -10), Point(50, -5)),
        Segment(Point(50, -1), Point(50, 1)),
    ]
    assert segment_intersects_any(Point(0, 0), Point(100, 0), walls)
    assert not segment_intersects_any(Point(0, 0), Point(100, 0), walls[:1])
    assert not segment_intersects_any(Point(0, 0), Point(100, 0), [])


@given(coords, coords, coords, coords, coords, coords, coords, coords)
def test_segments_intersect_is_symmetric(ax, ay, bx, by, cx, cy, dx, dy):
    """Swapping the two segments never changes the answer."""
    a, b, c, d = Point(ax, ay), Point(bx, by), Point(cx, cy), Point(dx, dy)
    assert segments_intersect(a, b, c, d) == segments_intersect(c, d, a, b)


@given(coords, coords, coords, coords)
def test_segment_between_two_inside_points_hits_rect(x1, y1, x2, y2):
    rect = Rect(-1000, -1000, 1000, 1000)
    assert segment_intersects_rect(Point(x1, y1), Point(x2, y2), rect)


def test_overlap_of_segment_crossing_rect():
    rect = Rect(0, 0, 20, 20)
    assert segment_rect_overlap(Point(-10, 10), Point(30, 10), rect) == pytest.approx(20)
    assert segment_rect_overlap(Point(-10, -10), Point(30, 30), rect) == pytest.approx(
        20 * math.sqrt(2)
    )


def test_overlap_of_segment_ending_inside_rect():
    assert segment_rect_overlap(Point(-10, 5), Point(5, 5), Rect(0, 0, 20, 20)) == pytest.approx(5)


def test_overlap_of_missing_or_touching_segment_is_zero():
    rect = Rect(0, 0, 20, 20)
    assert segment_rect_overlap(Point(-10, 40), Point(30, 40), rect) == 0
    assert segment_rect_overlap(Point(-10, 10), Point(10, -10), rect) == 0


def test_distance_to_segment():
    a, b = Point(0, 0), Point(100, 0)
    assert distance_to_segment(Point(50, 5), a, b) == pytest.approx(5)
    # Beyond an endpoint the distance is to that endpoint
    assert distance_to_segment(Point(103, 4), a, b) == pytest.approx(5)
    assert distance_to_segment(Point(3, 4), a, a) == pytest.approx(5)


@given(coords, coords, coords, coords)
def test_overlap_never_exceeds_segment_length(x1, y1, x2, y2):
    p1, p2 = Point(x1, y1), Point(x2, y2)
    overlap = segment_rect_overlap(p1, p2, Rect(-100, -100, 100, 100))
    assert 0 <= overlap <= math.hypot(x2 - x1, y2 - y1) + 1e-6
