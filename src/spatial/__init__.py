"""Spatial index answering which polygons overlap a query shape."""

from .grid_index import SpatialIndex

__all__ = ["SpatialIndex"]
