"""Unit tests for point, pose and bounds value types."""

import math

import pytest

from src.geometry.errors import InvalidArgumentError
from src.geometry.primitives import Bounds, Point2d, Pose2d


class TestPoint2d:
    """Test suite for Point2d."""

    def test_distance(self):
        """Test Euclidean distance."""
        assert Point2d(0.0, 0.0).distance(Point2d(3.0, 4.0)) == pytest.approx(5.0)

    def test_almost_equals(self):
        """Test comparison within an epsilon."""
        p = Point2d(1.0, 2.0)
        assert p.almost_equals(Point2d(1.0 + 1e-10, 2.0), 1e-9)
        assert not p.almost_equals(Point2d(1.0 + 1e-8, 2.0), 1e-9)

    def test_non_finite_rejected(self):
        """Test that NaN and infinity raise InvalidArgumentError."""
        with pytest.raises(InvalidArgumentError):
            Point2d(float("nan"), 0.0)
        with pytest.raises(ValueError):
            Point2d(0.0, math.inf)

    def test_interpolate(self):
        """Test interpolation between points."""
        assert Point2d(0.0, 0.0).interpolate(Point2d(2.0, 4.0), 0.25) == Point2d(0.5, 1.0)


class TestPose2d:
    """Test suite for Pose2d."""

    def test_offset_left_positive(self):
        """Test that a positive offset lies to the left of the heading."""
        pose = Pose2d(0.0, 0.0, 0.0)
        assert pose.offset(2.0) == Point2d(0.0, 2.0)
        left = Pose2d(1.0, 1.0, math.pi / 2).offset(1.0)
        assert left.x == pytest.approx(0.0)
        assert left.y == pytest.approx(1.0)

    def test_offset_right_negative(self):
        """Test that a negative offset lies to the right."""
        point = Pose2d(0.0, 0.0, 0.0).offset(-2.0)
        assert point.y == pytest.approx(-2.0)

    def test_reverse(self):
        """Test reversing the heading."""
        assert Pose2d(1.0, 2.0, 0.5).reverse().direction == pytest.approx(0.5 + math.pi)


class TestBounds:
    """Test suite for Bounds."""

    def test_invalid_order(self):
        """Test that maximum below minimum raises."""
        with pytest.raises(InvalidArgumentError):
            Bounds(1.0, 0.0, 0.0, 1.0)

    def test_zero_extent_allowed(self):
        """Test that a zero width or height is legal."""
        b = Bounds(0.0, 5.0, 10.0, 5.0)
        assert b.width == 10.0
        assert b.height == 0.0

    def test_touching_intersects(self):
        """Test that touching boxes intersect (closed boxes)."""
        a = Bounds(0.0, 0.0, 1.0, 1.0)
        assert a.intersects(Bounds(1.0, 1.0, 2.0, 2.0))
        assert not a.intersects(Bounds(1.0 + 1e-12, 0.0, 2.0, 1.0))

    def test_from_points_and_contains(self):
        """Test bounding box of points and containment."""
        b = Bounds.from_points([(1.0, 2.0), (-1.0, 5.0), (0.0, 0.0)])
        assert b == Bounds(-1.0, 0.0, 1.0, 5.0)
        assert b.contains(Bounds(0.0, 1.0, 1.0, 5.0))
        assert b.contains_point(1.0, 5.0)
        assert b.midpoint == Point2d(0.0, 2.5)
        assert b.union(Bounds(2.0, 2.0, 3.0, 3.0)) == Bounds(-1.0, 0.0, 3.0, 5.0)

    def test_from_no_points(self):
        """Test that an empty point set raises."""
        with pytest.raises(InvalidArgumentError):
            Bounds.from_points([])
