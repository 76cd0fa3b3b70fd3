"""Ambient helpers for the geometry engine: logging, configuration,
diagnostics and angle maths."""

from .logging import get_logger
from .config import load_config, GeometryConfig, DEFAULT_CONFIG
from .diagnostics import Diagnostics, NullDiagnostics, NULL_DIAGNOSTICS
from .angles import normalize_angle, normalize_angles, angle_difference, rotate_2d

__all__ = [
    "get_logger",
    "load_config",
    "GeometryConfig",
    "DEFAULT_CONFIG",
    "Diagnostics",
    "NullDiagnostics",
    "NULL_DIAGNOSTICS",
    "normalize_angle",
    "normalize_angles",
    "angle_difference",
    "rotate_2d",
]
