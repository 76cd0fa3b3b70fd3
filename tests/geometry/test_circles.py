"""Unit tests for circle constructions."""

import math

import pytest

from src.geometry.circles import circle_centers, circle_intersections
from src.geometry.errors import InvalidArgumentError
from src.geometry.primitives import Point2d


class TestCircleIntersections:
    """Test suite for circle-circle intersections."""

    def test_two_points(self):
        """Test two crossing circles, left point first."""
        points = circle_intersections(Point2d(0, 0), 1.0, Point2d(1.5, 0), 1.0)
        assert len(points) == 2
        assert points[0].x == pytest.approx(0.75)
        assert points[0].y == pytest.approx(math.sqrt(1 - 0.75 ** 2))
        assert points[1].y == pytest.approx(-math.sqrt(1 - 0.75 ** 2))

    def test_external_tangent_single_point(self):
        """Test that externally touching circles give one point."""
        points = circle_intersections(Point2d(0, 0), 1.0, Point2d(2, 0), 1.0)
        assert points == [Point2d(1.0, 0.0)]

    def test_near_tangent_single_point(self):
        """Test that near-tangent circles within epsilon count as touching."""
        points = circle_intersections(Point2d(0, 0), 1.0, Point2d(2.0 + 1e-12, 0), 1.0)
        assert len(points) == 1

    def test_internal_tangent(self):
        """Test internally touching circles in both orders."""
        points = circle_intersections(Point2d(0, 0), 2.0, Point2d(1, 0), 1.0)
        assert points == [Point2d(2.0, 0.0)]
        points = circle_intersections(Point2d(0, 0), 1.0, Point2d(1, 0), 2.0)
        assert points == [Point2d(-1.0, 0.0)]

    def test_no_intersection(self):
        """Test separate, nested and concentric circles."""
        assert circle_intersections(Point2d(0, 0), 1.0, Point2d(3, 0), 1.0) == []
        assert circle_intersections(Point2d(0, 0), 5.0, Point2d(1, 0), 1.0) == []
        assert circle_intersections(Point2d(0, 0), 1.0, Point2d(0, 0), 1.0) == []

    def test_invalid_radius(self):
        """Test that non-positive radii raise."""
        with pytest.raises(InvalidArgumentError):
            circle_intersections(Point2d(0, 0), 0.0, Point2d(1, 0), 1.0)


class TestCircleCenters:
    """Test suite for centres of circles through two points."""

    def test_diameter(self):
        """Test points a diameter apart."""
        assert circle_centers(Point2d(0, 0), Point2d(2, 0), 1.0) == [Point2d(1.0, 0.0)]

    def test_two_centres(self):
        """Test two centres on both sides of the chord."""
        centres = circle_centers(Point2d(0, 0), Point2d(2, 0), 2.0)
        assert len(centres) == 2
        assert centres[0].x == pytest.approx(1.0)
        assert abs(centres[0].y) == pytest.approx(math.sqrt(3.0))
        assert centres[0].y == pytest.approx(-centres[1].y)

    def test_too_far(self):
        """Test points further apart than the diameter."""
        assert circle_centers(Point2d(0, 0), Point2d(3, 0), 1.0) == []
