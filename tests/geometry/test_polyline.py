"""Unit tests for Polyline."""

import math

import numpy as np
import pytest

from src.geometry.errors import InvalidArgumentError, OutOfRangeError
from src.geometry.polyline import Polyline
from src.geometry.primitives import Point2d


@pytest.fixture
def bent_line():
    # segments of length 5 and 6
    return Polyline([(0.0, 0.0), (3.0, 4.0), (3.0, 10.0)])


class TestPolylineConstruction:
    """Test suite for polyline validation."""

    def test_too_few_points(self):
        """Test that fewer than two points raise."""
        with pytest.raises(InvalidArgumentError):
            Polyline([(0.0, 0.0)])

    def test_consecutive_duplicates(self):
        """Test that consecutive duplicate points raise."""
        with pytest.raises(InvalidArgumentError):
            Polyline([(0.0, 0.0), (1.0, 1.0), (1.0, 1.0)])

    def test_wrong_shape(self):
        """Test that 3D points are rejected."""
        with pytest.raises(InvalidArgumentError):
            Polyline(np.zeros((3, 3)))

    def test_non_finite(self):
        """Test that non-finite coordinates are rejected."""
        with pytest.raises(InvalidArgumentError):
            Polyline([(0.0, 0.0), (np.nan, 1.0)])

    def test_cleaned_removes_near_duplicates(self):
        """Test that cleaning drops near-duplicates but keeps the ends."""
        line = Polyline.cleaned([(0.0, 0.0), (1.0, 0.0), (1.0 + 1e-12, 0.0), (2.0, 0.0)])
        assert len(line) == 3
        assert line.first == Point2d(0.0, 0.0)
        assert line.last == Point2d(2.0, 0.0)

    def test_points_read_only(self, bent_line):
        """Test that the coordinate array cannot be modified."""
        with pytest.raises(ValueError):
            bent_line.points[0, 0] = 5.0


class TestPolylineAccess:
    """Test suite for indexing and lengths."""

    def test_get(self, bent_line):
        """Test point access."""
        assert bent_line.get(1) == Point2d(3.0, 4.0)
        assert bent_line[2] == Point2d(3.0, 10.0)
        assert len(bent_line) == 3

    def test_out_of_range(self, bent_line):
        """Test that indices outside [0, N) raise OutOfRangeError."""
        with pytest.raises(OutOfRangeError):
            bent_line.get(3)
        with pytest.raises(OutOfRangeError):
            bent_line.get(-1)
        with pytest.raises(IndexError):
            bent_line.get(10)

    def test_length(self, bent_line):
        """Test cached length and per-vertex lengths."""
        assert bent_line.length == pytest.approx(11.0)
        np.testing.assert_allclose(bent_line.segment_lengths, [5.0, 6.0])
        assert bent_line.length_at_index(1) == pytest.approx(5.0)
        assert bent_line.vertex_fraction(1) == pytest.approx(5.0 / 11.0)

    def test_bounds_and_centroid(self, bent_line):
        """Test bounding box and its midpoint."""
        assert bent_line.bounds.max_y == 10.0
        assert bent_line.centroid == Point2d(1.5, 5.0)


class TestPolylineLocation:
    """Test suite for locations along the line."""

    def test_location(self, bent_line):
        """Test pose at a position along the line."""
        pose = bent_line.location(2.5)
        assert pose.x == pytest.approx(1.5)
        assert pose.y == pytest.approx(2.0)
        assert pose.direction == pytest.approx(math.atan2(4.0, 3.0))
        end = bent_line.location(11.0)
        assert (end.x, end.y) == pytest.approx((3.0, 10.0))

    def test_location_out_of_range(self, bent_line):
        """Test that positions beyond the line raise."""
        with pytest.raises(OutOfRangeError):
            bent_line.location(11.5)
        with pytest.raises(OutOfRangeError):
            bent_line.location(-0.1)

    def test_location_extended(self, bent_line):
        """Test extrapolation along the first and last segments."""
        before = bent_line.location_extended(-5.0)
        assert (before.x, before.y) == pytest.approx((-3.0, -4.0))
        after = bent_line.location_extended(12.0)
        assert (after.x, after.y) == pytest.approx((3.0, 11.0))

    def test_location_fraction(self, bent_line):
        """Test fractional locations with tolerance."""
        pose = bent_line.location_fraction(1.0 + 1e-12, tolerance=1e-9)
        assert (pose.x, pose.y) == pytest.approx((3.0, 10.0))
        with pytest.raises(OutOfRangeError):
            bent_line.location_fraction(1.1)

    def test_project_orthogonal(self, bent_line):
        """Test projection of a point onto the line."""
        assert bent_line.project_orthogonal(4.0, 7.0) == pytest.approx(8.0 / 11.0)
        assert bent_line.project_orthogonal(-5.0, -5.0) == pytest.approx(0.0)


class TestPolylineDerived:
    """Test suite for derived polylines."""

    def test_reverse(self, bent_line):
        """Test reversal."""
        reversed_line = bent_line.reverse()
        assert reversed_line.first == bent_line.last
        assert reversed_line.length == pytest.approx(bent_line.length)

    def test_extract(self, bent_line):
        """Test extracting a sub-line across a vertex."""
        part = bent_line.extract(2.5, 8.0)
        assert len(part) == 3
        assert (part.first.x, part.first.y) == pytest.approx((1.5, 2.0))
        assert part[1] == Point2d(3.0, 4.0)
        assert (part.last.x, part.last.y) == pytest.approx((3.0, 7.0))
        assert part.length == pytest.approx(5.5)

    def test_extract_invalid(self, bent_line):
        """Test invalid extract ranges."""
        with pytest.raises(InvalidArgumentError):
            bent_line.extract(5.0, 5.0)
        with pytest.raises(OutOfRangeError):
            bent_line.extract(0.0, 12.0)

    def test_truncate(self, bent_line):
        """Test truncation at a vertex."""
        line = bent_line.truncate(5.0)
        assert len(line) == 2
        assert (line.last.x, line.last.y) == pytest.approx((3.0, 4.0))
        assert bent_line.truncate(bent_line.length) is bent_line

    def test_concatenate(self):
        """Test joining lines end to start."""
        a = Polyline([(0.0, 0.0), (1.0, 0.0)])
        b = Polyline([(1.0, 0.0), (2.0, 1.0)])
        joined = Polyline.concatenate(a, b)
        assert len(joined) == 3
        with pytest.raises(InvalidArgumentError):
            Polyline.concatenate(a, Polyline([(1.5, 0.0), (2.0, 0.0)]))
        assert len(Polyline.concatenate(a, Polyline([(1.0 + 1e-6, 0.0), (2.0, 0.0)]), tolerance=1e-3)) == 3

    def test_simplify_keeps_ends(self):
        """Test Ramer-Douglas-Peucker simplification."""
        line = Polyline([(0.0, 0.0), (1.0, 0.01), (2.0, 0.0), (3.0, 5.0)])
        simple = line.simplify(0.1)
        assert simple.to_list() == [(0.0, 0.0), (2.0, 0.0), (3.0, 5.0)]
        assert line.simplify(100.0).to_list() == [(0.0, 0.0), (3.0, 5.0)]


class TestPolylineValue:
    """Test suite for equality and hashing."""

    def test_equality_and_hash(self):
        """Test that equal coordinates give equal, hash-equal lines."""
        a = Polyline([(0.0, 0.0), (1.0, 1.0)])
        b = Polyline(np.array([[0.0, 0.0], [1.0, 1.0]]))
        assert a == b
        assert hash(a) == hash(b)
        assert a != Polyline([(0.0, 0.0), (1.0, 2.0)])
