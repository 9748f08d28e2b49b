"""
intersecting_polygons.py

Corrections for multipolygons whose sub-polygons overlap.

- `UnionIntersectingPolygons`: merge every pair of intersecting sub-polygons
  whose union is a single polygon, until no such pair is left.
- `DiffIntersectingPolygons`: later sub-polygons carve the overlapping area out
  of earlier ones. Pieces that end up empty are dropped, pieces split in two are
  kept as separate sub-polygons.

Set operations go through shapely. The result keeps the representation of the
input (shapely in, shapely out; wrappers in, wrappers out), and the input object
itself is returned when nothing had to change.

Parameters shared by both corrections
- sliver_area: sub-polygons with area <= sliver_area are slivers
- sliver_policy: 'keep' (default) or 'drop'; either way a diagnostic is emitted
"""
import logging

import shapely
from shapely.errors import GEOSException

from geotraverse.config import CORRECTION_DEFAULTS, SLIVER_POLICIES
from geotraverse.core import geointerface
from geotraverse.core.traits import Trait, TraitTarget
from geotraverse.correction.base import GeometryCorrection
from geotraverse.errors import ConfigurationError
from geotraverse.utils import emit_diagnostic

logger = logging.getLogger(__name__)


def _polygons(geom):
    """Non-empty polygons making up the result of a set operation."""
    if geom.is_empty:
        return []
    if geom.geom_type == 'Polygon':
        return [geom]
    if geom.geom_type in ('MultiPolygon', 'GeometryCollection'):
        out = []
        for g in geom.geoms:
            out.extend(_polygons(g))
        return out
    return []


class _PolygonSetCorrection(GeometryCorrection):
    application_level = TraitTarget(Trait.MULTIPOLYGON)

    def __init__(self, sliver_area=None, sliver_policy=None):
        self.sliver_area = CORRECTION_DEFAULTS['sliver_area'] if sliver_area is None else sliver_area
        self.sliver_policy = CORRECTION_DEFAULTS['sliver_policy'] if sliver_policy is None else sliver_policy
        if self.sliver_policy not in SLIVER_POLICIES:
            raise ConfigurationError(
                f'sliver_policy must be one of {SLIVER_POLICIES}, got {self.sliver_policy!r}')

    def correct(self, trait, multipoly):
        name = type(self).__name__
        try:
            parts = [geointerface.to_shapely(p) for p in geointerface.children(multipoly)]
        except (TypeError, ValueError, GEOSException) as e:
            emit_diagnostic('sub-polygons could not be read; left unchanged', correction=name, error=str(e))
            return multipoly

        try:
            resolved = self._resolve(parts)
        except GEOSException as e:
            emit_diagnostic('set operation failed; left unchanged', correction=name, error=str(e))
            return multipoly

        resolved = self._slivers(resolved)
        if len(resolved) == len(parts) and all(a is b for a, b in zip(resolved, parts)):
            return multipoly

        logger.debug('%s: %d sub-polygons -> %d', name, len(parts), len(resolved))
        out = shapely.MultiPolygon(resolved)
        return geointerface.from_shapely(out, like=multipoly, crs=geointerface.crs(multipoly))

    def _resolve(self, parts):
        raise NotImplementedError

    def _slivers(self, parts):
        kept = []
        for i, p in enumerate(parts):
            if p.area <= self.sliver_area:
                emit_diagnostic('sliver sub-polygon', policy=self.sliver_policy, index=i, area=p.area)
                if self.sliver_policy == 'drop':
                    continue
            kept.append(p)
        return kept

    def __repr__(self):
        return f'{type(self).__name__}(sliver_area={self.sliver_area!r}, sliver_policy={self.sliver_policy!r})'


class UnionIntersectingPolygons(_PolygonSetCorrection):
    def _resolve(self, parts):
        polys = list(parts)
        merged = True
        while merged:
            merged = False
            for i in range(len(polys)):
                for j in range(i + 1, len(polys)):
                    if not polys[i].intersects(polys[j]):
                        continue
                    union = polys[i].union(polys[j])
                    if union.geom_type == 'Polygon':
                        polys[i] = union
                        del polys[j]
                        merged = True
                        break
                if merged:
                    break
        return polys


class DiffIntersectingPolygons(_PolygonSetCorrection):
    """Later sub-polygons carve their overlap out of earlier ones.

    A pair is carved only when the overlap area exceeds `overlap_tolerance`
    times the smaller of the two areas. Pieces left by `difference` share
    boundaries up to rounding, and must not be carved again on a second run.
    """

    def __init__(self, sliver_area=None, sliver_policy=None, overlap_tolerance=None):
        super().__init__(sliver_area=sliver_area, sliver_policy=sliver_policy)
        self.overlap_tolerance = (CORRECTION_DEFAULTS['overlap_tolerance']
                                  if overlap_tolerance is None else overlap_tolerance)
        if self.overlap_tolerance < 0:
            raise ConfigurationError(f'overlap_tolerance must be >= 0, got {self.overlap_tolerance!r}')

    def _overlaps(self, q, p):
        if not q.intersects(p):
            return False
        return q.intersection(p).area > self.overlap_tolerance * min(q.area, p.area)

    def _resolve(self, parts):
        pieces = []
        for p in parts:
            carved = []
            split = []
            for q in pieces:
                if self._overlaps(q, p):
                    rest = _polygons(q.difference(p))
                    if rest:
                        carved.append(rest[0])
                        split.extend(rest[1:])
                else:
                    carved.append(q)
            pieces = carved + split + [p]
        return pieces
