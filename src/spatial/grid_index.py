"""Hierarchical grid index over polygons.

The index region is divided recursively into quadrants, created lazily
while polygons are inserted, down to a minimum cell size.  A polygon is
stored in every cell its bounding box reaches, at the deepest level
unless its box covers a whole cell, in which case it stays at that
cell.  Queries walk the cells overlapping the query's bounding box,
collect the stored polygons once each and confirm them with the exact
:meth:`Polygon.intersects` predicate.

Degenerate regions are allowed: an axis of zero extent, or one whose
midpoint can no longer be represented strictly between the cell edges,
is simply not split, so a cell may have four, two or no children.
"""

import math
from typing import Dict, Iterable, Iterator, List, Optional, Set

import numpy as np

from ..geometry.cleanup import segments_intersect
from ..geometry.errors import InvalidArgumentError
from ..geometry.polygon import Polygon
from ..geometry.primitives import Bounds
from ..utils.config import DEFAULT_CONFIG, GeometryConfig
from ..utils.diagnostics import NULL_DIAGNOSTICS, Diagnostics
from ..utils.logging import get_logger

logger = get_logger(__name__)


class _Cell:
    __slots__ = ("bounds", "shapes", "children")

    def __init__(self, bounds: Bounds):
        self.bounds = bounds
        self.shapes: Set[Polygon] = set()
        self.children: Optional[List["_Cell"]] = None


class SpatialIndex:
    """Mutable set of polygons with overlap queries.

    Parameters
    ----------
    region : Bounds
        Area covered by the cell hierarchy.  Zero width or height is
        accepted.
    minimum_cell_size : float, optional
        Cells are not split below twice this size.  Defaults to
        ``spatial.minimum_cell_size`` of the configuration.
    config : GeometryConfig, optional
        Configuration providing the default cell size.
    diagnostics : Diagnostics, optional
        Receives events for unsplittable axes and rejected polygons.

    Examples
    --------
    >>> index = SpatialIndex(Bounds(0, 0, 100, 100), minimum_cell_size=10)
    >>> index.insert(Polygon([(1, 1), (5, 1), (5, 5)]))
    True
    """

    def __init__(self, region: Bounds, minimum_cell_size: Optional[float] = None,
                 config: Optional[GeometryConfig] = None, diagnostics: Optional[Diagnostics] = None):
        config = config or DEFAULT_CONFIG
        if minimum_cell_size is None:
            minimum_cell_size = config.spatial_minimum_cell_size
        if not (math.isfinite(minimum_cell_size) and minimum_cell_size > 0.0):
            raise InvalidArgumentError(f"minimum cell size must be positive, got {minimum_cell_size}")
        self.region = region
        self.minimum_cell_size = float(minimum_cell_size)
        self.diagnostics = diagnostics or NULL_DIAGNOSTICS
        self._root = _Cell(region)
        self._shapes: Dict[Polygon, None] = {}
        self._overflow: Set[Polygon] = set()

    # Cells ---------------------------------------------------------------

    def _split(self, cell: _Cell) -> Optional[List[_Cell]]:
        b = cell.bounds
        mid_x = (b.min_x + b.max_x) / 2.0
        mid_y = (b.min_y + b.max_y) / 2.0
        split_x = b.width / 2.0 > self.minimum_cell_size
        split_y = b.height / 2.0 > self.minimum_cell_size
        if split_x and not b.min_x < mid_x < b.max_x:
            split_x = False
            self.diagnostics.record("index_unsplittable_axis", axis="x", bounds=b)
            logger.debug("midpoint of %s not representable, %s axis left unsplit", b, "x")
        if split_y and not b.min_y < mid_y < b.max_y:
            split_y = False
            self.diagnostics.record("index_unsplittable_axis", axis="y", bounds=b)
            logger.debug("midpoint of %s not representable, %s axis left unsplit", b, "y")
        if not (split_x or split_y):
            return None
        xs = [(b.min_x, mid_x), (mid_x, b.max_x)] if split_x else [(b.min_x, b.max_x)]
        ys = [(b.min_y, mid_y), (mid_y, b.max_y)] if split_y else [(b.min_y, b.max_y)]
        return [_Cell(Bounds(x0, y0, x1, y1)) for x0, x1 in xs for y0, y1 in ys]

    def _cells(self, bounds: Bounds) -> Iterator[_Cell]:
        """Existing cells overlapping ``bounds``, parents before children."""
        stack = [self._root]
        while stack:
            cell = stack.pop()
            if not cell.bounds.intersects(bounds):
                continue
            yield cell
            if cell.children:
                stack.extend(cell.children)

    @property
    def cell_count(self) -> int:
        count = 0
        stack = [self._root]
        while stack:
            cell = stack.pop()
            count += 1
            if cell.children:
                stack.extend(cell.children)
        return count

    # Mutation ------------------------------------------------------------

    def insert(self, polygon: Polygon) -> bool:
        """Add ``polygon``.

        Returns
        -------
        bool
            False if the polygon is already indexed or its bounding box
            does not touch the region.
        """
        if polygon in self._shapes:
            return False
        box = polygon.bounds
        if not self.region.intersects(box):
            self.diagnostics.record("index_outside_region", bounds=box)
            return False
        stack = [self._root]
        while stack:
            cell = stack.pop()
            if not cell.bounds.intersects(box):
                continue
            if box.contains(cell.bounds):
                cell.shapes.add(polygon)
                continue
            if cell.children is None:
                cell.children = self._split(cell)
                if cell.children is None:
                    cell.shapes.add(polygon)
                    continue
            stack.extend(cell.children)
        if not self.region.contains(box):
            self._overflow.add(polygon)
        self._shapes[polygon] = None
        return True

    def update(self, polygons: Iterable[Polygon]) -> int:
        """Insert several polygons; returns how many were added."""
        return sum(1 for polygon in polygons if self.insert(polygon))

    def remove(self, polygon: Polygon) -> bool:
        """Remove ``polygon``; returns False if it was not indexed."""
        if polygon not in self._shapes:
            return False
        del self._shapes[polygon]
        self._overflow.discard(polygon)
        visited = list(self._cells(polygon.bounds))
        for cell in visited:
            cell.shapes.discard(polygon)
        # prune children that became empty leaves, deepest first
        for cell in reversed(visited):
            if cell.children and all(child.children is None and not child.shapes
                                     for child in cell.children):
                cell.children = None
        return True

    def clear(self) -> None:
        self._root = _Cell(self.region)
        self._shapes.clear()
        self._overflow.clear()

    # Queries -------------------------------------------------------------

    def _candidates(self, box: Bounds) -> Iterator[Polygon]:
        seen: Dict[Polygon, None] = {}
        for cell in self._cells(box):
            for polygon in cell.shapes:
                seen.setdefault(polygon)
        for polygon in self._overflow:
            seen.setdefault(polygon)
        for polygon in seen:
            if polygon.bounds.intersects(box):
                yield polygon

    def query_intersecting(self, polygon: Polygon) -> Set[Polygon]:
        """All indexed polygons for which ``intersects(polygon)`` holds."""
        return {candidate for candidate in self._candidates(polygon.bounds)
                if candidate.intersects(polygon)}

    def query_bounds(self, bounds: Bounds) -> Set[Polygon]:
        """All indexed polygons sharing a point with the closed box ``bounds``."""
        if bounds.width > 0.0 and bounds.height > 0.0:
            return self.query_intersecting(Polygon.rectangle(bounds))
        # degenerate box: a segment or a point
        a = np.array([bounds.min_x, bounds.min_y])
        b = np.array([bounds.max_x, bounds.max_y])
        result = set()
        for candidate in self._candidates(bounds):
            starts, ends = candidate.edges
            if candidate.contains_point(a[0], a[1]) or segments_intersect(starts, ends, a, b).any():
                result.add(candidate)
        return result

    # Collection protocol -------------------------------------------------

    def contains(self, polygon: Polygon) -> bool:
        return polygon in self._shapes

    __contains__ = contains

    def __iter__(self) -> Iterator[Polygon]:
        return iter(list(self._shapes))

    def __len__(self) -> int:
        return len(self._shapes)

    @property
    def is_empty(self) -> bool:
        return not self._shapes

    def __repr__(self) -> str:
        return (f"SpatialIndex(region={self.region}, minimum_cell_size={self.minimum_cell_size}, "
                f"size={len(self)}, cells={self.cell_count})")
