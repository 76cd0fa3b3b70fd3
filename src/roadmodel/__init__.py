"""Road model construction utilities."""

from .lanes import (
    CrossSectionSlice,
    center_offsets,
    construct_lane_edges,
    construct_lanes,
    get_slices,
    lane_contour,
    left_edge_offsets,
    right_edge_offsets,
)

__all__ = [
    "CrossSectionSlice",
    "center_offsets",
    "construct_lane_edges",
    "construct_lanes",
    "get_slices",
    "lane_contour",
    "left_edge_offsets",
    "right_edge_offsets",
]
