"""Unit tests for clothoid construction and evaluation."""

import math

import numpy as np
import pytest
from scipy.integrate import quad

from src.curves.clothoid import ANGLE_TOLERANCE, Clothoid, solve_g1
from src.curves.flattening import MaxDeviation, flatten
from src.geometry.errors import ConvergenceError, InvalidArgumentError
from src.geometry.primitives import Pose2d
from src.utils.angles import normalize_angle
from src.utils.config import GeometryConfig
from src.utils.diagnostics import Diagnostics


def integrated_end(start, length, k0, k1):
    """End point by numerical integration of the heading."""
    rate = (k1 - k0) / length

    def heading(s):
        return start.direction + k0 * s + 0.5 * rate * s * s

    x = quad(lambda s: math.cos(heading(s)), 0.0, length, limit=400, epsabs=1e-11)[0]
    y = quad(lambda s: math.sin(heading(s)), 0.0, length, limit=400, epsabs=1e-11)[0]
    return start.x + x, start.y + y


class TestClothoidWithLength:
    """Test suite for the direct constructions."""

    def test_random_against_quadrature(self):
        """Test end points of random clothoids against numerical integration."""
        rng = np.random.default_rng(42)
        for _ in range(25):
            start = Pose2d(*rng.uniform(-1000, 1000, 2), rng.uniform(-math.pi, math.pi))
            length = rng.uniform(10.0, 510.0)
            k0, k1 = rng.choice([-1.0, 1.0], 2) / rng.uniform(50.0, 1050.0, 2)
            curve = Clothoid.with_length(start, length, k0, k1)
            x, y = integrated_end(start, length, k0, k1)
            end = curve.end_pose
            assert end.x == pytest.approx(x, abs=1e-6)
            assert end.y == pytest.approx(y, abs=1e-6)
            assert curve.start_curvature == k0
            assert curve.end_curvature == k1

    def test_constant_curvature_is_arc(self):
        """Test that equal curvatures give a circular arc."""
        curve = Clothoid.with_length(Pose2d(0.0, 0.0, 0.0), 5.0 * math.pi, 0.1, 0.1)
        end = curve.end_pose
        assert end.x == pytest.approx(10.0)
        assert end.y == pytest.approx(10.0)
        assert curve.a_value == math.inf

    def test_zero_curvature_is_straight(self):
        """Test the straight special case."""
        curve = Clothoid.with_length(Pose2d(1.0, 2.0, 0.0), 10.0, 0.0, 0.0)
        assert curve.is_straight
        assert curve.end_pose.x == pytest.approx(11.0)

    def test_with_a_value(self):
        """Test the A-value construction."""
        curve = Clothoid.with_a_value(Pose2d(0.0, 0.0, 0.0), 100.0, 0.0, 0.01)
        assert curve.length == pytest.approx(100.0)
        assert curve.a_value == pytest.approx(100.0)
        with pytest.raises(InvalidArgumentError):
            Clothoid.with_a_value(Pose2d(0.0, 0.0, 0.0), 100.0, 0.01, 0.01)

    def test_invalid_length(self):
        """Test that non-positive lengths raise."""
        with pytest.raises(InvalidArgumentError):
            Clothoid.with_length(Pose2d(0.0, 0.0, 0.0), 0.0, 0.0, 0.01)


class TestClothoidFromPoses:
    """Test suite for the two-pose G1 fit."""

    def test_roundtrip(self):
        """Test that fitting the end poses of a clothoid recovers it."""
        rng = np.random.default_rng(3)
        checked = 0
        for _ in range(20):
            start = Pose2d(*rng.uniform(-100, 100, 2), rng.uniform(-math.pi, math.pi))
            length = rng.uniform(10.0, 60.0)
            k0, k1 = rng.uniform(-1.0 / 50.0, 1.0 / 50.0, 2)
            source = Clothoid.with_length(start, length, k0, k1)
            diagnostics = Diagnostics()
            fitted = Clothoid.from_poses(start, source.end_pose, diagnostics=diagnostics)
            if "clothoid_arc" in diagnostics or "clothoid_straight" in diagnostics:
                continue
            checked += 1
            assert fitted.converged
            assert fitted.length == pytest.approx(length, rel=1e-2)
            assert fitted.start_curvature == pytest.approx(k0, rel=1e-2, abs=1e-6)
            assert fitted.end_curvature == pytest.approx(k1, rel=1e-2, abs=1e-6)
            heading = float(fitted.direction(1.0)[0])
            assert normalize_angle(heading - source.end_pose.direction) == pytest.approx(0.0, abs=1e-6)
        assert checked > 10

    def test_end_point_exact(self):
        """Test that the fitted curve ends exactly at the target point."""
        start = Pose2d(0.0, 0.0, 0.1)
        end = Pose2d(50.0, 8.0, 0.5)
        curve = Clothoid.from_poses(start, end)
        np.testing.assert_array_equal(curve.position(0.0)[0], [0.0, 0.0])
        np.testing.assert_allclose(curve.position(1.0)[0], [50.0, 8.0], atol=1e-12)
        assert curve.direction(1.0)[0] == pytest.approx(0.5, abs=1e-6)

    def test_straight(self):
        """Test poses aligned with the chord."""
        diagnostics = Diagnostics()
        curve = Clothoid.from_poses(Pose2d(0.0, 0.0, 0.0), Pose2d(100.0, 0.0, 0.0),
                                    diagnostics=diagnostics)
        assert diagnostics.count("clothoid_straight") == 1
        assert curve.is_straight
        assert curve.length == pytest.approx(100.0)
        assert len(flatten(curve, MaxDeviation(1e-5))) == 2

    def test_just_above_angle_tolerance(self):
        """Test that a heading just outside the tolerance bends the curve."""
        diagnostics = Diagnostics()
        curve = Clothoid.from_poses(Pose2d(0.0, 0.0, 2.0 * ANGLE_TOLERANCE), Pose2d(100.0, 0.0, 0.0),
                                    diagnostics=diagnostics)
        assert "clothoid_straight" not in diagnostics
        assert len(flatten(curve, MaxDeviation(1e-5))) > 2

    def test_arc(self):
        """Test mirror-symmetric poses."""
        diagnostics = Diagnostics()
        curve = Clothoid.from_poses(Pose2d(0.0, 0.0, 0.0), Pose2d(10.0, 10.0, math.pi / 2),
                                    diagnostics=diagnostics)
        assert diagnostics.count("clothoid_arc") == 1
        assert curve.start_curvature == pytest.approx(0.1)
        assert curve.end_curvature == pytest.approx(0.1)
        assert curve.length == pytest.approx(5.0 * math.pi)

    def test_coincident_points(self):
        """Test that equal start and end points raise."""
        with pytest.raises(InvalidArgumentError):
            Clothoid.from_poses(Pose2d(1.0, 1.0, 0.0), Pose2d(1.0, 1.0, 1.0))

    def test_no_convergence(self):
        """Test that the iteration ceiling raises instead of looping."""
        config = GeometryConfig(clothoid_max_iterations=1, clothoid_tolerance=1e-300)
        diagnostics = Diagnostics()
        with pytest.raises(ConvergenceError):
            Clothoid.from_poses(Pose2d(0.0, 0.0, 0.3), Pose2d(10.0, 0.0, 0.9),
                                config=config, diagnostics=diagnostics)
        assert diagnostics.count("clothoid_no_convergence") == 1


class TestSolveG1:
    """Test suite for the root finder."""

    def test_converges(self):
        """Test a regular case."""
        result = solve_g1(0.3, 0.9)
        assert result.converged
        assert result.residual <= 1e-12
        assert result.iterations < 20

    def test_bounded(self):
        """Test that the iteration count never exceeds the ceiling."""
        result = solve_g1(0.3, 0.9, tolerance=1e-300, max_iterations=3)
        assert result.iterations <= 3
