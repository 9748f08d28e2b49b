"""
geotraverse

Traverse, transform and rebuild nested geometric data independently of the
geometry library that holds it.

    import geotraverse as gt

    moved = gt.apply(lambda p: (p[0] + 1.0, p[1]), gt.Trait.POINT, geoms)
    rings = gt.flatten(gt.Trait.LINEARRING, polygons)
    fixed = gt.fix(multipolygon)
"""
import logging

from geotraverse.core.apply import apply, applyreduce, flatten
from geotraverse.core.extent import Extent
from geotraverse.core.manifold import (
    AutoManifold,
    Geodesic,
    Manifold,
    Planar,
    Spherical,
    best_manifold,
    resolve_manifold,
)
from geotraverse.core.tasks import TaskFunctors
from geotraverse.core.traits import Trait, TraitTarget
from geotraverse.correction import (
    ClosedRing,
    CorrectionPipeline,
    DiffIntersectingPolygons,
    GeometryCorrection,
    UnionIntersectingPolygons,
    fix,
)
from geotraverse.errors import (
    ConfigurationError,
    DegenerateGeometryWarning,
    GeoTraverseError,
    TargetNotFoundError,
    TaskCountMismatchError,
)
from geotraverse.methods import arclength, area, signed_area
from geotraverse.transformations import flip, forcexy, forcexyz, reproject, transform, tuples

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = '0.1.0'
