"""
manifold.py

How coordinates are interpreted by the algorithms that care: on the plane, on
a sphere, or on an ellipsoid of revolution. A manifold is always passed to an
algorithm explicitly and is never stored on geometry.

| Manifold  | Parameters                          | Shortest path       |
|-----------|-------------------------------------|---------------------|
| Planar    | -                                   | straight line       |
| Spherical | radius                              | great-circle arc    |
| Geodesic  | semimajor_axis, inverse_flattening  | ellipsoidal geodesic|

`AutoManifold()` defers the choice to call time: the algorithm resolves it from
the CRS of the geometry it is given (`best_manifold`).

CRS interpretation is delegated to a `CRSProvider`; `PyprojCRSProvider` is the
default.
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple
import logging

import pyproj
from pyproj.exceptions import CRSError

from geotraverse.config import (
    CARTESIAN_CRS_PATTERNS,
    GEOGRAPHIC_CRS_IDS,
    WGS84,
)
from geotraverse.core import tables

logger = logging.getLogger(__name__)


class Manifold:
    """Base class of the manifold variants."""


@dataclass(frozen=True)
class Planar(Manifold):
    pass


@dataclass(frozen=True)
class Spherical(Manifold):
    radius: float = WGS84['mean_radius']

    def __post_init__(self):
        if not self.radius > 0:
            raise ValueError(f'radius must be positive, got {self.radius}')


@dataclass(frozen=True)
class Geodesic(Manifold):
    semimajor_axis: float = WGS84['semimajor_axis']
    inverse_flattening: float = WGS84['inverse_flattening']

    def __post_init__(self):
        if not self.semimajor_axis > 0:
            raise ValueError(f'semimajor_axis must be positive, got {self.semimajor_axis}')
        if not self.inverse_flattening > 0:
            raise ValueError('inverse_flattening must be positive; use Spherical for a sphere')

    @property
    def flattening(self) -> float:
        return 1.0 / self.inverse_flattening

    @property
    def semiminor_axis(self) -> float:
        return self.semimajor_axis * (1.0 - self.flattening)


@dataclass(frozen=True)
class AutoManifold(Manifold):
    pass


class CRSProvider:
    """Answers the two CRS questions manifold resolution needs."""

    def ellipsoid(self, crs) -> Optional[Tuple[float, float]]:
        """`(semimajor_axis, inverse_flattening)` of a prepared geographic CRS.

        Returns None when `crs` is not a prepared descriptor or not geographic.
        An inverse flattening of 0 means a sphere.
        """
        raise NotImplementedError

    def classify(self, crs) -> Optional[str]:
        """'geographic', 'cartesian' or None when unknown."""
        raise NotImplementedError


def _normalize_id(crs) -> str:
    if isinstance(crs, int):
        return f'EPSG:{crs}'
    return str(crs).strip().upper()


@lru_cache(maxsize=256)
def _parse_classify(text: str) -> Optional[str]:
    try:
        parsed = pyproj.CRS.from_user_input(text)
    except CRSError as e:
        logger.debug('pyproj could not parse %r: %s', text, e)
        return None
    return 'geographic' if parsed.is_geographic else 'cartesian'


class PyprojCRSProvider(CRSProvider):
    def ellipsoid(self, crs):
        if not isinstance(crs, pyproj.CRS) or not crs.is_geographic:
            return None
        e = crs.ellipsoid
        if e is None:
            return None
        return e.semi_major_metre, e.inverse_flattening

    def classify(self, crs):
        if isinstance(crs, pyproj.CRS):
            return 'geographic' if crs.is_geographic else 'cartesian'
        key = _normalize_id(crs)
        if key in GEOGRAPHIC_CRS_IDS:
            return 'geographic'
        if any(p.match(key) for p in CARTESIAN_CRS_PATTERNS):
            return 'cartesian'
        return _parse_classify(key if isinstance(crs, int) else str(crs).strip())


_DEFAULT_PROVIDER = PyprojCRSProvider()


def resolve_manifold(crs, provider: Optional[CRSProvider] = None) -> Manifold:
    """Manifold implied by CRS metadata.

    1. no CRS -> Planar
    2. prepared geographic CRS -> its ellipsoid (Spherical for a sphere)
    3. identifiers classified as geographic -> Geodesic with WGS84 parameters
    4. anything else -> Planar, with a warning when the CRS is not recognised
    """
    if crs is None:
        return Planar()
    provider = _DEFAULT_PROVIDER if provider is None else provider
    ellipsoid = provider.ellipsoid(crs)
    if ellipsoid is not None:
        a, rf = ellipsoid
        m = Spherical(a) if not rf else Geodesic(a, rf)
        logger.debug('resolved %r to %r from its ellipsoid', crs, m)
        return m
    kind = provider.classify(crs)
    if kind == 'geographic':
        return Geodesic()
    if kind is None:
        logger.warning('unrecognised CRS %r; treating coordinates as planar', crs)
    return Planar()


def best_manifold(obj, provider: Optional[CRSProvider] = None) -> Manifold:
    """Manifold implied by the CRS metadata of `obj` itself."""
    return resolve_manifold(tables.crs_of(obj), provider)


def concrete(manifold: Manifold, obj) -> Manifold:
    """Resolve `AutoManifold` against `obj`; other manifolds are returned as is."""
    if isinstance(manifold, AutoManifold):
        return best_manifold(obj)
    return manifold
