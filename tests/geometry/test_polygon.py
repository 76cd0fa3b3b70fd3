"""Unit tests for Polygon and its intersection predicate."""

import numpy as np
import pytest

from src.geometry.errors import InvalidArgumentError
from src.geometry.polygon import Polygon
from src.geometry.primitives import Bounds


def square(x0, y0, size=1.0):
    return Polygon([(x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)])


class TestPolygonConstruction:
    """Test suite for polygon validation."""

    def test_closing_point_dropped(self):
        """Test that a repeated first point at the end is removed."""
        polygon = Polygon([(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)])
        assert len(polygon) == 4

    def test_too_few_distinct_points(self):
        """Test that fewer than three distinct points raise."""
        with pytest.raises(InvalidArgumentError):
            Polygon([(0, 0), (1, 1), (0, 0)])
        with pytest.raises(InvalidArgumentError):
            Polygon([(0, 0), (1, 1)])

    def test_rectangle(self):
        """Test building a rectangle from bounds."""
        rect = Polygon.rectangle(Bounds(0.0, 0.0, 2.0, 1.0))
        assert rect.area == pytest.approx(2.0)
        with pytest.raises(InvalidArgumentError):
            Polygon.rectangle(Bounds(0.0, 0.0, 2.0, 0.0))

    def test_value_semantics(self):
        """Test equality and hashing by coordinates."""
        assert square(0, 0) == square(0, 0)
        assert hash(square(0, 0)) == hash(square(0, 0))
        assert len({square(0, 0), square(0, 0), square(1, 0)}) == 2


class TestContainsPoint:
    """Test suite for point containment."""

    def test_inside_outside(self):
        """Test interior and exterior points."""
        polygon = Polygon([(0, 0), (4, 0), (4, 4), (2, 1), (0, 4)])
        assert polygon.contains_point(1.0, 0.5)
        assert not polygon.contains_point(2.0, 3.0)
        assert not polygon.contains_point(5.0, 1.0)

    def test_boundary_inclusive(self):
        """Test that boundary points are contained."""
        polygon = square(0, 0)
        assert polygon.contains_point(0.5, 0.0)
        assert polygon.contains_point(1.0, 1.0)


class TestIntersects:
    """Test suite for the closed-set intersection predicate."""

    def test_overlapping(self):
        """Test overlapping interiors."""
        assert square(0, 0).intersects(square(0.5, 0.5))

    def test_containment(self):
        """Test one polygon inside another without touching edges."""
        outer = square(0, 0, 10.0)
        inner = square(4, 4, 1.0)
        assert outer.intersects(inner)
        assert inner.intersects(outer)

    def test_crossing_edges(self):
        """Test a plus shape of two rectangles."""
        horizontal = Polygon([(0, 1), (3, 1), (3, 2), (0, 2)])
        vertical = Polygon([(1, 0), (2, 0), (2, 3), (1, 3)])
        assert horizontal.intersects(vertical)

    def test_shared_edge(self):
        """Test collinear overlapping edges."""
        assert square(0, 0).intersects(square(1, 0))
        assert square(0, 0).intersects(square(1, 0.5))

    def test_shared_vertex(self):
        """Test polygons touching in a single vertex."""
        assert square(0, 0).intersects(square(1, 1))

    def test_vertex_on_edge(self):
        """Test a vertex touching the inside of an edge."""
        triangle = Polygon([(0.5, 1.0), (1.0, 2.0), (0.0, 2.0)])
        assert square(0, 0).intersects(triangle)

    def test_bounding_boxes_overlap_only(self):
        """Test disjoint polygons whose bounding boxes overlap."""
        a = Polygon([(0, 0), (2, 0), (0, 2)])
        b = Polygon([(2, 2), (2, 1.5), (1.5, 2)])
        assert a.bounds.intersects(b.bounds)
        assert not a.intersects(b)
        assert not b.intersects(a)

    def test_tiny_gap(self):
        """Test that a gap just above zero is not an intersection."""
        assert not square(0, 0).intersects(square(1.0 + 1e-9, 0))

    def test_symmetric_random(self):
        """Test that the predicate is symmetric on random triangles."""
        rng = np.random.default_rng(7)
        for _ in range(200):
            a = Polygon(rng.uniform(0, 10, size=(3, 2)))
            b = Polygon(rng.uniform(0, 10, size=(3, 2)))
            assert a.intersects(b) == b.intersects(a)
