"""
geointerface.py

The capability interface between the traversal engine and concrete geometry
representations. The engine only ever asks four questions of a node, through
whichever provider claims it:

- `trait(node)`     -> `Trait` (or None when the value is not a geometry)
- `children(node)`  -> ordered sequence of child nodes
- `rebuild(node, children, crs)` -> a node of the same trait holding `children`
- `crs(node)`       -> CRS metadata attached to the node, if any

Built-in providers, in lookup order:

1. `ShapelyProvider`  - shapely 2 geometries
2. `TuplePointProvider` - plain numeric tuples `(x, y[, z[, m]])` are points
3. `ProtocolProvider`  - any object with `trait()`, `children()` and
   `rebuild()` methods, which covers `geotraverse.core.wrappers`

Extra providers can be added with `register_provider`.
"""
from numbers import Real
from typing import List, Optional, Sequence
import logging

import numpy as np
import shapely
from shapely.errors import GEOSException
from shapely.geometry.base import BaseGeometry

from geotraverse.core import wrappers
from geotraverse.core.traits import Trait, CURVE_TRAITS

logger = logging.getLogger(__name__)


class GeometryProvider:
    """Adapter exposing one geometry representation to the engine."""

    def handles(self, obj) -> bool:
        raise NotImplementedError

    def trait(self, obj) -> Trait:
        raise NotImplementedError

    def children(self, obj) -> Sequence:
        raise NotImplementedError

    def rebuild(self, obj, children, crs=None):
        raise NotImplementedError

    def crs(self, obj):
        return None


_SHAPELY_TRAITS = {
    'Point': Trait.POINT,
    'MultiPoint': Trait.MULTIPOINT,
    'LineString': Trait.LINESTRING,
    'LinearRing': Trait.LINEARRING,
    'MultiLineString': Trait.MULTILINESTRING,
    'Polygon': Trait.POLYGON,
    'MultiPolygon': Trait.MULTIPOLYGON,
    'GeometryCollection': Trait.GEOMETRYCOLLECTION,
}


class ShapelyProvider(GeometryProvider):
    """shapely geometries. Curves decompose into shapely Points.

    shapely geometries carry no CRS, so `crs` is ignored on rebuild. When the
    new children cannot be held by a shapely geometry the node is rebuilt as
    the wrapper of the same trait instead.
    """

    def handles(self, obj) -> bool:
        return isinstance(obj, BaseGeometry)

    def trait(self, obj) -> Trait:
        return _SHAPELY_TRAITS[obj.geom_type]

    def children(self, obj) -> Sequence:
        tr = self.trait(obj)
        if tr is Trait.POINT:
            return ()
        if tr is Trait.LINESTRING or tr is Trait.LINEARRING:
            return [shapely.Point(c) for c in obj.coords]
        if tr is Trait.POLYGON:
            if obj.is_empty:
                return []
            return [obj.exterior, *obj.interiors]
        return list(obj.geoms)

    def rebuild(self, obj, children, crs=None):
        tr = self.trait(obj)
        if tr is Trait.POINT:
            return obj
        try:
            return _build_shapely(tr, children)
        except (TypeError, ValueError, GEOSException) as e:
            logger.debug('rebuilding %s as a wrapper: %s', tr.name, e)
            return wrappers.make(tr, children, crs)


class TuplePointProvider(GeometryProvider):
    """Plain tuples of 2-4 real numbers are points."""

    def handles(self, obj) -> bool:
        return (type(obj) is tuple and 2 <= len(obj) <= 4
                and all(isinstance(c, Real) for c in obj))

    def trait(self, obj) -> Trait:
        return Trait.POINT

    def children(self, obj) -> Sequence:
        return ()

    def rebuild(self, obj, children, crs=None):
        return obj


class ProtocolProvider(GeometryProvider):
    """Objects that implement `trait()`, `children()` and `rebuild()` themselves."""

    def handles(self, obj) -> bool:
        if isinstance(obj, type):
            return False
        return (callable(getattr(obj, 'trait', None))
                and callable(getattr(obj, 'children', None))
                and callable(getattr(obj, 'rebuild', None)))

    def trait(self, obj) -> Trait:
        return obj.trait()

    def children(self, obj) -> Sequence:
        return obj.children()

    def rebuild(self, obj, children, crs=None):
        return obj.rebuild(children, crs=crs)

    def crs(self, obj):
        return getattr(obj, 'crs', None)


_PROVIDERS: List[GeometryProvider] = [ShapelyProvider(), TuplePointProvider(), ProtocolProvider()]


def register_provider(provider: GeometryProvider, index: int = 0) -> None:
    """Add a provider. By default it is consulted before the built-in ones."""
    _PROVIDERS.insert(index, provider)


def unregister_provider(provider: GeometryProvider) -> None:
    _PROVIDERS.remove(provider)


def provider_for(obj) -> Optional[GeometryProvider]:
    for p in _PROVIDERS:
        if p.handles(obj):
            return p
    return None


def trait(obj) -> Optional[Trait]:
    p = provider_for(obj)
    return None if p is None else p.trait(obj)


def is_geometry(obj) -> bool:
    return provider_for(obj) is not None


def children(obj) -> Sequence:
    return provider_for(obj).children(obj)


def rebuild(obj, children, crs=None, wrap=False):
    """Rebuild `obj` around new `children`.

    With `wrap=True` the result is always a wrapper geometry of the same trait.
    """
    p = provider_for(obj)
    tr = p.trait(obj)
    if wrap:
        if tr is Trait.POINT:
            return wrappers.Point(point_coords(obj), crs=crs)
        if tr is Trait.FEATURE or tr is Trait.FEATURECOLLECTION:
            return p.rebuild(obj, children, crs=crs)
        return wrappers.make(tr, children, crs)
    return p.rebuild(obj, children, crs=crs)


def crs(obj):
    p = provider_for(obj)
    if p is not None:
        return p.crs(obj)
    return getattr(obj, 'crs', None)


def point_coords(p) -> tuple:
    """Coordinates of a point in any supported representation, as floats."""
    if type(p) is tuple:
        return tuple(float(c) for c in p)
    if isinstance(p, shapely.Point):
        return () if p.is_empty else tuple(p.coords[0])
    if isinstance(p, wrappers.Point):
        return p.coords
    if hasattr(p, 'x') and hasattr(p, 'y'):
        z = getattr(p, 'z', None)
        return (float(p.x), float(p.y)) if z is None else (float(p.x), float(p.y), float(z))
    raise TypeError(f'{p!r} is not a point')


def point_like(template, coords, crs=None):
    """A point holding `coords`, in the same representation as `template`."""
    coords = tuple(coords)
    if isinstance(template, shapely.Point):
        return shapely.Point(coords)
    if isinstance(template, wrappers.Point):
        return wrappers.Point(coords, crs=template.crs if crs is None else crs)
    return coords


def coords_array(curve) -> np.ndarray:
    """(N, 2) float array of a curve's x/y coordinates."""
    if isinstance(curve, BaseGeometry):
        return shapely.get_coordinates(curve)
    pts = [point_coords(p)[:2] for p in children(curve)]
    if not pts:
        return np.empty((0, 2), dtype=float)
    return np.asarray(pts, dtype=float)


def to_shapely(obj) -> BaseGeometry:
    """Convert any supported geometry to shapely. Raises TypeError if impossible."""
    if isinstance(obj, BaseGeometry):
        return obj
    tr = trait(obj)
    if tr is None:
        raise TypeError(f'{obj!r} is not a geometry')
    if tr is Trait.POINT:
        c = point_coords(obj)
        return shapely.Point(c) if c else shapely.Point()
    return _build_shapely(tr, children(obj))


def _ring_coords(ring):
    if isinstance(ring, (shapely.LinearRing, shapely.LineString)):
        return list(ring.coords)
    if trait(ring) not in CURVE_TRAITS:
        raise TypeError(f'{ring!r} is not a ring')
    return [point_coords(p) for p in children(ring)]


def _build_shapely(tr: Trait, kids) -> BaseGeometry:
    if tr is Trait.LINESTRING:
        return shapely.LineString([point_coords(k) for k in kids])
    if tr is Trait.LINEARRING:
        return shapely.LinearRing([point_coords(k) for k in kids])
    if tr is Trait.MULTIPOINT:
        return shapely.MultiPoint([point_coords(k) for k in kids])
    if tr is Trait.POLYGON:
        rings = [_ring_coords(k) for k in kids]
        return shapely.Polygon(rings[0], rings[1:]) if rings else shapely.Polygon()
    if tr is Trait.MULTILINESTRING:
        return shapely.MultiLineString([to_shapely(k) for k in kids])
    if tr is Trait.MULTIPOLYGON:
        return shapely.MultiPolygon([to_shapely(k) for k in kids])
    if tr is Trait.GEOMETRYCOLLECTION:
        return shapely.GeometryCollection([to_shapely(k) for k in kids])
    raise TypeError(f'shapely has no {tr.name} geometry')


def from_shapely(geom, like=None, crs=None):
    """Convert a shapely geometry into the representation of `like`.

    shapely stays shapely; anything else becomes wrapper geometries with tuple
    points.
    """
    if like is None or isinstance(like, BaseGeometry):
        return geom
    tr = _SHAPELY_TRAITS[geom.geom_type]
    if tr is Trait.POINT:
        return wrappers.Point(() if geom.is_empty else geom.coords[0], crs=crs)
    if tr in CURVE_TRAITS or tr is Trait.MULTIPOINT:
        kids = [tuple(c) for c in shapely.get_coordinates(geom, include_z=geom.has_z)]
        return wrappers.make(tr, kids, crs)
    if tr is Trait.POLYGON:
        rings = [] if geom.is_empty else [geom.exterior, *geom.interiors]
        return wrappers.Polygon(tuple(from_shapely(r, like, crs) for r in rings), crs=crs)
    return wrappers.make(tr, [from_shapely(g, like, crs) for g in geom.geoms], crs)


def iter_points(obj):
    """Yield the coordinate tuple of every point at or below `obj`."""
    if isinstance(obj, BaseGeometry):
        if not obj.is_empty:
            yield from map(tuple, shapely.get_coordinates(obj, include_z=obj.has_z))
        return
    tr = trait(obj)
    if tr is Trait.POINT:
        c = point_coords(obj)
        if c:
            yield c
        return
    for child in children(obj):
        if child is not None:
            yield from iter_points(child)
