"""Angle helpers.

All angles are in radians.  Headings are measured counter-clockwise
from the positive x axis, so a positive turn is a left turn.
"""

import math
from typing import Tuple

import numpy as np


def normalize_angle(angle: float) -> float:
    """Normalize an angle to the range (-pi, pi]."""
    out = math.fmod(angle, 2.0 * math.pi)
    if out > math.pi:
        out -= 2.0 * math.pi
    elif out <= -math.pi:
        out += 2.0 * math.pi
    return out


def normalize_angles(angles: np.ndarray) -> np.ndarray:
    """Vectorised :func:`normalize_angle`."""
    out = np.fmod(np.asarray(angles, dtype=float), 2.0 * np.pi)
    out = np.where(out > np.pi, out - 2.0 * np.pi, out)
    return np.where(out <= -np.pi, out + 2.0 * np.pi, out)


def angle_difference(from_angle: float, to_angle: float) -> float:
    """Signed smallest rotation from ``from_angle`` to ``to_angle``."""
    return normalize_angle(to_angle - from_angle)


def rotate_2d(x: float, y: float, angle: float) -> Tuple[float, float]:
    """Rotate a 2D vector by ``angle``.

    Parameters
    ----------
    x, y : float or numpy.ndarray
        Vector components; arrays rotate element-wise.
    angle : float
        Rotation angle in radians (counter-clockwise).

    Returns
    -------
    (float, float)
        Rotated vector.
    """
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (
        x * cos_a - y * sin_a,
        x * sin_a + y * cos_a,
    )
