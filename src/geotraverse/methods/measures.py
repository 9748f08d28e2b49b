"""
measures.py

Manifold-aware area and length.

Public functions:
- `area(obj, manifold=Planar())`        : summed area of every polygon in `obj`
- `signed_area(poly)`                    : planar signed area of one polygon,
                                           positive for clockwise exteriors
- `arclength(obj, manifold=Planar())`   : summed length of every curve in `obj`
                                           (polygon perimeters included)

Points and curves have zero area; points have zero length. Under `Spherical`
and `Geodesic`, coordinates are longitude/latitude in degrees and results are
in the units of the radius / semimajor axis (metres by default).
`AutoManifold()` picks the manifold from the CRS of `obj`.
"""
from functools import lru_cache
import math
import operator

import numpy as np
import pyproj

from geotraverse.core import geointerface
from geotraverse.core.apply import applyreduce
from geotraverse.core.manifold import Geodesic, Planar, Spherical, concrete
from geotraverse.core.traits import Trait, TraitTarget

_AREA_TARGETS = TraitTarget(Trait.POLYGON, Trait.LINESTRING, Trait.LINEARRING,
                            Trait.MULTIPOINT, Trait.POINT)
_LENGTH_TARGETS = TraitTarget(Trait.LINESTRING, Trait.LINEARRING, Trait.POINT)


@lru_cache(maxsize=16)
def _geod(a, rf):
    return pyproj.Geod(a=a, rf=rf)


def _closed(xy):
    if len(xy) and not np.array_equal(xy[0], xy[-1]):
        xy = np.vstack([xy, xy[:1]])
    return xy


# ── rings ─────────────────────────────────────────────────────────────────────
def _planar_ring_signed(xy):
    """Shoelace sum; positive for clockwise rings."""
    if len(xy) < 3:
        return 0.0
    xy = _closed(xy)
    x, y = xy[:, 0], xy[:, 1]
    return -0.5 * float(np.sum(x[:-1] * y[1:] - x[1:] * y[:-1]))


def _spherical_ring_area(xy, radius):
    if len(xy) < 3:
        return 0.0
    xy = _closed(xy)
    lon = np.radians(xy[:, 0])
    lat = np.radians(xy[:, 1])
    dlon = np.diff(lon)
    dlon = (dlon + np.pi) % (2 * np.pi) - np.pi
    s = np.sum(dlon * (2.0 + np.sin(lat[:-1]) + np.sin(lat[1:])))
    return abs(float(s)) * radius * radius / 2.0


def _geodesic_ring_area(xy, m: Geodesic):
    if len(xy) < 3:
        return 0.0
    a, _ = _geod(m.semimajor_axis, m.inverse_flattening).polygon_area_perimeter(xy[:, 0], xy[:, 1])
    return abs(a)


def _ring_area(xy, m):
    if isinstance(m, Spherical):
        return _spherical_ring_area(xy, m.radius)
    if isinstance(m, Geodesic):
        return _geodesic_ring_area(xy, m)
    return abs(_planar_ring_signed(xy))


# ── polygons ──────────────────────────────────────────────────────────────────
def _polygon_area(poly, m):
    rings = [geointerface.coords_array(r) for r in geointerface.children(poly)]
    if not rings:
        return 0.0
    total = _ring_area(rings[0], m)
    for hole in rings[1:]:
        total -= _ring_area(hole, m)
    return total


def area(obj, manifold=None, *, threaded=False, max_workers=None):
    """Total area of every polygon in `obj` under `manifold` (default planar)."""
    m = concrete(Planar() if manifold is None else manifold, obj)

    def _area(node):
        if geointerface.trait(node) is Trait.POLYGON:
            return _polygon_area(node, m)
        return 0.0

    return applyreduce(_area, operator.add, _AREA_TARGETS, obj, init=0.0,
                       threaded=threaded, max_workers=max_workers)


def signed_area(obj) -> float:
    """Planar signed area of a single polygon; zero for points and curves.

    The exterior sets the sign and holes reduce the magnitude.
    """
    tr = geointerface.trait(obj)
    if tr is None:
        raise TypeError(f'{obj!r} is not a geometry')
    if tr is not Trait.POLYGON:
        if tr in _AREA_TARGETS:
            return 0.0
        raise TypeError(f'signed area is only defined for single polygons, not {tr.name}')
    rings = [geointerface.coords_array(r) for r in geointerface.children(obj)]
    if not rings:
        return 0.0
    s = _planar_ring_signed(rings[0])
    total = abs(s)
    for hole in rings[1:]:
        total -= abs(_planar_ring_signed(hole))
    return math.copysign(total, s)


# ── lengths ───────────────────────────────────────────────────────────────────
def _haversine(xy, radius):
    lon = np.radians(xy[:, 0])
    lat = np.radians(xy[:, 1])
    dlat = np.diff(lat)
    dlon = np.diff(lon)
    h = np.sin(dlat / 2) ** 2 + np.cos(lat[:-1]) * np.cos(lat[1:]) * np.sin(dlon / 2) ** 2
    return float(np.sum(2.0 * radius * np.arcsin(np.sqrt(np.clip(h, 0.0, 1.0)))))


def _curve_length(xy, m):
    if len(xy) < 2:
        return 0.0
    if isinstance(m, Spherical):
        return _haversine(xy, m.radius)
    if isinstance(m, Geodesic):
        return float(_geod(m.semimajor_axis, m.inverse_flattening).line_length(xy[:, 0], xy[:, 1]))
    return float(np.sum(np.hypot(np.diff(xy[:, 0]), np.diff(xy[:, 1]))))


def arclength(obj, manifold=None, *, threaded=False, max_workers=None):
    """Total length of every curve in `obj` under `manifold` (default planar)."""
    m = concrete(Planar() if manifold is None else manifold, obj)

    def _length(node):
        if geointerface.trait(node) is Trait.POINT:
            return 0.0
        return _curve_length(geointerface.coords_array(node), m)

    return applyreduce(_length, operator.add, _LENGTH_TARGETS, obj, init=0.0,
                       threaded=threaded, max_workers=max_workers)
