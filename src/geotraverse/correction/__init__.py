"""
Validity corrections for geometries.

    from geotraverse.correction import fix, ClosedRing, UnionIntersectingPolygons

    fixed = fix(multipoly, corrections=(ClosedRing(), UnionIntersectingPolygons()))
"""
from geotraverse.correction.base import CorrectionPipeline, GeometryCorrection, fix
from geotraverse.correction.closed_ring import ClosedRing
from geotraverse.correction.intersecting_polygons import (
    DiffIntersectingPolygons,
    UnionIntersectingPolygons,
)

__all__ = [
    'ClosedRing',
    'CorrectionPipeline',
    'DiffIntersectingPolygons',
    'GeometryCorrection',
    'UnionIntersectingPolygons',
    'fix',
]
