"""Analytic curves, clothoid fitting and flattening into polylines."""

from .arc import Arc
from .base import Curve
from .bezier import BezierCubic
from .clothoid import ANGLE_TOLERANCE, Clothoid, RootResult, solve_g1
from .composite import CompositeCurve
from .flattening import (
    FixedCount,
    MaxAngle,
    MaxDeviation,
    MaxDeviationAndAngle,
    flatten,
    flatten_offset,
)
from .fresnel import fresnel_cs, generalized_fresnel
from .straight import Straight

__all__ = [
    "ANGLE_TOLERANCE",
    "Arc",
    "BezierCubic",
    "Clothoid",
    "CompositeCurve",
    "Curve",
    "FixedCount",
    "MaxAngle",
    "MaxDeviation",
    "MaxDeviationAndAngle",
    "RootResult",
    "Straight",
    "flatten",
    "flatten_offset",
    "fresnel_cs",
    "generalized_fresnel",
    "solve_g1",
]
