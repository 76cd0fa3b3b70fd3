"""Lane geometry from a design line and its cross section.

A road link has a design line (an analytic curve or a polyline) and a
cross section that describes, at fractions along the link, the lateral
offset of a lane centre and the lane width.  The helpers here turn a
cross section into offset profiles for the lane centre and both edges
and build the corresponding lines, using offset flattening for curves
and the offset line algorithm for polylines.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from ..curves.base import Curve
from ..curves.flattening import Criterion, MaxDeviation, flatten_offset
from ..geometry.errors import InvalidArgumentError
from ..geometry.polygon import Polygon
from ..geometry.polyline import Polyline
from ..offset.offset_line import offset_line
from ..offset.profile import OffsetProfile
from ..utils.config import GeometryConfig
from ..utils.diagnostics import Diagnostics

DesignLine = Union[Curve, Polyline, np.ndarray]


@dataclass(frozen=True)
class CrossSectionSlice:
    """Lane position and width at one fraction of the design line."""
    fraction: float
    offset: float
    """Lateral offset of the lane centre, positive to the left (m)."""
    width: float
    """Lane width (m)."""

    def __post_init__(self):
        if not 0.0 <= self.fraction <= 1.0:
            raise InvalidArgumentError(f"slice fraction must be in [0, 1], got {self.fraction}")
        if not self.width >= 0.0:
            raise InvalidArgumentError(f"slice width must be >= 0, got {self.width}")


def get_slices(center_offset_start: float, center_offset_end: float,
               width_start: float, width_end: float) -> List[CrossSectionSlice]:
    """Slices for a lane whose offset and width change linearly."""
    return [CrossSectionSlice(0.0, center_offset_start, width_start),
            CrossSectionSlice(1.0, center_offset_end, width_end)]


def _profile(slices: Sequence[CrossSectionSlice], side: float) -> OffsetProfile:
    return OffsetProfile([s.fraction for s in slices],
                         [s.offset + side * s.width / 2.0 for s in slices])


def center_offsets(slices: Sequence[CrossSectionSlice]) -> OffsetProfile:
    return _profile(slices, 0.0)


def left_edge_offsets(slices: Sequence[CrossSectionSlice]) -> OffsetProfile:
    return _profile(slices, 1.0)


def right_edge_offsets(slices: Sequence[CrossSectionSlice]) -> OffsetProfile:
    return _profile(slices, -1.0)


def _offset(design_line: DesignLine, profile: OffsetProfile, criterion: Criterion,
            config: Optional[GeometryConfig], diagnostics: Optional[Diagnostics]) -> Polyline:
    if isinstance(design_line, Curve):
        return flatten_offset(design_line, profile, criterion, config, diagnostics)
    return offset_line(design_line, profile, config, diagnostics)


def construct_lane_edges(design_line: DesignLine, slices: Sequence[CrossSectionSlice],
                         criterion: Criterion = MaxDeviation(0.05),
                         config: Optional[GeometryConfig] = None,
                         diagnostics: Optional[Diagnostics] = None) -> Dict[str, Polyline]:
    """Centre line and both edges of a lane.

    Parameters
    ----------
    design_line : Curve, Polyline or numpy.ndarray
        Reference line of the link.  Curves are offset while
        flattening; polylines and (N, 2) arrays are offset directly and
        ignore ``criterion``.
    slices : sequence of CrossSectionSlice
        Cross section, ordered by fraction.
    criterion : flattening criterion
        Accuracy of the flattened lines, 5 cm deviation by default.

    Returns
    -------
    dict
        ``{"left": Polyline, "center": Polyline, "right": Polyline}``.
    """
    return {
        "left": _offset(design_line, left_edge_offsets(slices), criterion, config, diagnostics),
        "center": _offset(design_line, center_offsets(slices), criterion, config, diagnostics),
        "right": _offset(design_line, right_edge_offsets(slices), criterion, config, diagnostics),
    }


def lane_contour(left_edge: Polyline, right_edge: Polyline) -> Polygon:
    """Polygon enclosed by the left edge and the reversed right edge."""
    ring = np.vstack([left_edge.points, right_edge.points[::-1]])
    keep = np.ones(len(ring), dtype=bool)
    keep[1:] = np.any(np.diff(ring, axis=0) != 0.0, axis=1)
    return Polygon(ring[keep])


def construct_lanes(center_line: DesignLine, lane_width: float, num_lanes: int = 2,
                    criterion: Criterion = MaxDeviation(0.05),
                    config: Optional[GeometryConfig] = None,
                    diagnostics: Optional[Diagnostics] = None) -> List[Polyline]:
    """Construct lane centre lines laid out symmetrically around a centre line.

    Parameters
    ----------
    center_line : Curve, Polyline or numpy.ndarray
        Road centre line.
    lane_width : float
        Width of a single lane in metres.
    num_lanes : int
        Number of lanes to construct.

    Returns
    -------
    list of Polyline
        Lane centre lines from right to left.
    """
    if lane_width <= 0.0:
        raise InvalidArgumentError(f"lane width must be positive, got {lane_width}")
    if num_lanes < 1:
        raise InvalidArgumentError(f"number of lanes must be >= 1, got {num_lanes}")
    lanes: List[Polyline] = []
    for i in range(num_lanes):
        offset = (i - (num_lanes - 1) / 2) * lane_width
        lanes.append(_offset(center_line, OffsetProfile.constant(offset), criterion, config, diagnostics))
    return lanes
