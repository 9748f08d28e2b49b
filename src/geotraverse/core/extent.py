"""
extent.py

Bounding extents collected during `apply(..., calc_extent=True)`.

Each concurrency unit owns one `ExtentAccumulator`; the accumulators are merged
in unit order once every unit has finished, so no extent state is shared
between threads.
"""
from typing import NamedTuple, Optional
import math

from shapely.geometry.base import BaseGeometry

from geotraverse.core import geointerface


class Extent(NamedTuple):
    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    def union(self, other: 'Extent') -> 'Extent':
        return Extent(min(self.xmin, other.xmin), min(self.ymin, other.ymin),
                      max(self.xmax, other.xmax), max(self.ymax, other.ymax))

    def contains(self, x: float, y: float) -> bool:
        return self.xmin <= x <= self.xmax and self.ymin <= y <= self.ymax


class ExtentAccumulator:
    """Running min/max of x and y. Not thread-safe; use one per unit."""

    __slots__ = ('xmin', 'ymin', 'xmax', 'ymax')

    def __init__(self):
        self.xmin = self.ymin = math.inf
        self.xmax = self.ymax = -math.inf

    @property
    def is_empty(self) -> bool:
        return self.xmin > self.xmax

    def add_bounds(self, xmin, ymin, xmax, ymax):
        if xmin < self.xmin:
            self.xmin = xmin
        if ymin < self.ymin:
            self.ymin = ymin
        if xmax > self.xmax:
            self.xmax = xmax
        if ymax > self.ymax:
            self.ymax = ymax

    def add_point(self, x, y):
        self.add_bounds(x, y, x, y)

    def add(self, geom):
        """Grow to cover `geom`. Values that are not geometries are ignored."""
        if geom is None:
            return
        if isinstance(geom, BaseGeometry):
            if not geom.is_empty:
                self.add_bounds(*geom.bounds)
            return
        if not geointerface.is_geometry(geom):
            return
        for c in geointerface.iter_points(geom):
            self.add_point(c[0], c[1])

    def merge(self, other: 'ExtentAccumulator'):
        if not other.is_empty:
            self.add_bounds(other.xmin, other.ymin, other.xmax, other.ymax)

    def extent(self) -> Optional[Extent]:
        if self.is_empty:
            return None
        return Extent(self.xmin, self.ymin, self.xmax, self.ymax)
