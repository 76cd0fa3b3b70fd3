"""Unit tests for angle helpers."""

import math

import numpy as np
import pytest

from src.utils.angles import angle_difference, normalize_angle, normalize_angles, rotate_2d


class TestAngles:
    """Test suite for angle normalisation and rotation."""

    def test_normalize_angle(self):
        """Test the (-pi, pi] range."""
        assert normalize_angle(1.5 * math.pi) == pytest.approx(-0.5 * math.pi)
        assert normalize_angle(math.pi) == math.pi
        assert normalize_angle(-math.pi) == math.pi

    def test_normalize_angles(self):
        """Test the vectorised variant."""
        result = normalize_angles(np.array([0.0, 1.5 * math.pi, -1.5 * math.pi, -math.pi]))
        np.testing.assert_allclose(result, [0.0, -0.5 * math.pi, 0.5 * math.pi, math.pi])

    def test_angle_difference(self):
        """Test the signed smallest rotation."""
        assert angle_difference(0.1, 2.0 * math.pi - 0.1) == pytest.approx(-0.2)
        assert angle_difference(-3.0, 3.0) == pytest.approx(6.0 - 2.0 * math.pi)

    def test_rotate_2d(self):
        """Test a quarter turn."""
        x, y = rotate_2d(1.0, 0.0, math.pi / 2)
        assert x == pytest.approx(0.0, abs=1e-15)
        assert y == pytest.approx(1.0)
