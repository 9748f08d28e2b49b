"""
wrappers.py

Lightweight immutable geometry containers that implement the capability
interface directly (`trait()`, `children()`, `rebuild()`, `crs`).

`apply` falls back to these when a node cannot be rebuilt in its original
representation (for example when a transform turns shapely points into
something shapely cannot hold), and `tuples` / `apply(..., wrap=True)` produce
them on purpose. They hold whatever children they are given and never validate
or close rings, which is what lets the correction pipeline see open rings.

Children can be given as nested lists for convenience::

    Polygon([[(0, 0), (1, 0), (1, 1), (0, 0)]])
    MultiPolygon([[[(0, 0), (1, 0), (1, 1), (0, 0)]]])
"""
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Optional, Tuple

from geotraverse.core.traits import Trait


@dataclass(frozen=True)
class Geometry:
    geoms: Tuple[Any, ...] = ()
    crs: Any = None

    _trait: ClassVar[Trait]
    _child_type: ClassVar[Optional[type]] = None

    def __post_init__(self):
        object.__setattr__(self, 'geoms', tuple(self._coerce(g) for g in self.geoms))

    def _coerce(self, g):
        if self._child_type is not None and isinstance(g, list):
            return self._child_type(g)
        return g

    def trait(self) -> Trait:
        return self._trait

    def children(self):
        return self.geoms

    def rebuild(self, children, crs=None):
        return type(self)(tuple(children), crs=self.crs if crs is None else crs)

    def __len__(self):
        return len(self.geoms)

    def __iter__(self):
        return iter(self.geoms)

    def __getitem__(self, i):
        return self.geoms[i]

    @property
    def is_empty(self) -> bool:
        return not self.geoms


@dataclass(frozen=True)
class Point:
    coords: Tuple[float, ...] = ()
    crs: Any = None

    def __post_init__(self):
        object.__setattr__(self, 'coords', tuple(float(c) for c in self.coords))

    def trait(self) -> Trait:
        return Trait.POINT

    def children(self):
        return ()

    def rebuild(self, children, crs=None):
        return self if crs is None else replace(self, crs=crs)

    @property
    def x(self) -> float:
        return self.coords[0]

    @property
    def y(self) -> float:
        return self.coords[1]

    @property
    def z(self) -> Optional[float]:
        return self.coords[2] if len(self.coords) > 2 else None

    @property
    def has_z(self) -> bool:
        return len(self.coords) > 2

    @property
    def is_empty(self) -> bool:
        return not self.coords


class MultiPoint(Geometry):
    _trait = Trait.MULTIPOINT
    _child_type = tuple


class LineString(Geometry):
    _trait = Trait.LINESTRING
    _child_type = tuple


class LinearRing(Geometry):
    _trait = Trait.LINEARRING
    _child_type = tuple


class MultiLineString(Geometry):
    _trait = Trait.MULTILINESTRING
    _child_type = LineString


class Polygon(Geometry):
    _trait = Trait.POLYGON
    _child_type = LinearRing

    @property
    def exterior(self):
        return self.geoms[0] if self.geoms else None

    @property
    def interiors(self):
        return self.geoms[1:]


class MultiPolygon(Geometry):
    _trait = Trait.MULTIPOLYGON
    _child_type = Polygon


class GeometryCollection(Geometry):
    _trait = Trait.GEOMETRYCOLLECTION


@dataclass(frozen=True)
class Feature:
    geometry: Any = None
    properties: dict = field(default_factory=dict)
    id: Any = None
    crs: Any = None

    def trait(self) -> Trait:
        return Trait.FEATURE

    def children(self):
        return (self.geometry,)

    def rebuild(self, children, crs=None):
        (geometry,) = children
        return replace(self, geometry=geometry, crs=self.crs if crs is None else crs)


@dataclass(frozen=True)
class FeatureCollection:
    features: Tuple[Feature, ...] = ()
    crs: Any = None

    def __post_init__(self):
        object.__setattr__(self, 'features', tuple(self.features))

    def trait(self) -> Trait:
        return Trait.FEATURECOLLECTION

    def children(self):
        return self.features

    def rebuild(self, children, crs=None):
        return FeatureCollection(tuple(children), crs=self.crs if crs is None else crs)

    def __len__(self):
        return len(self.features)

    def __iter__(self):
        return iter(self.features)


_BY_TRAIT = {
    Trait.MULTIPOINT: MultiPoint,
    Trait.LINESTRING: LineString,
    Trait.LINEARRING: LinearRing,
    Trait.MULTILINESTRING: MultiLineString,
    Trait.POLYGON: Polygon,
    Trait.MULTIPOLYGON: MultiPolygon,
    Trait.GEOMETRYCOLLECTION: GeometryCollection,
}


def make(trait: Trait, children, crs=None):
    """Build the wrapper geometry of `trait` holding `children`."""
    if trait is Trait.POINT:
        raise ValueError('points are leaves; build Point(coords) directly')
    if trait is Trait.FEATURE:
        (geometry,) = children
        return Feature(geometry, crs=crs)
    if trait is Trait.FEATURECOLLECTION:
        return FeatureCollection(tuple(children), crs=crs)
    return _BY_TRAIT[trait](tuple(children), crs=crs)
