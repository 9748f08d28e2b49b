"""
reproject.py

Reprojection of any geometry input with pyproj.

pyproj `Transformer` objects must not be shared between threads, so a threaded
reprojection builds one transformer per concurrency unit and hands them to the
engine as `TaskFunctors`.
"""
import logging

import pyproj

from geotraverse.config import default_workers
from geotraverse.core import geointerface, tables
from geotraverse.core.apply import apply
from geotraverse.core.tasks import TaskFunctors
from geotraverse.core.traits import Trait
from geotraverse.errors import ConfigurationError

logger = logging.getLogger(__name__)


class _ReprojectPoint:
    """Reprojects one point with its own transformer."""

    def __init__(self, source_crs, target_crs, always_xy=True):
        self.target_crs = target_crs
        self.transformer = pyproj.Transformer.from_crs(source_crs, target_crs, always_xy=always_xy)

    def __call__(self, p):
        c = geointerface.point_coords(p)
        if len(c) >= 3:
            out = self.transformer.transform(c[0], c[1], c[2]) + c[3:]
        else:
            out = self.transformer.transform(c[0], c[1])
        return geointerface.point_like(p, out, self.target_crs)


def reproject(obj, target_crs, source_crs=None, *, threaded=False, max_workers=None,
              always_xy=True, calc_extent=False):
    """Reproject every point of `obj` from `source_crs` to `target_crs`.

    Parameters
    - obj: anything `apply` accepts
    - target_crs: anything `pyproj.CRS.from_user_input` accepts
    - source_crs: defaults to the CRS carried by `obj` (GeoDataFrame, GeoSeries,
      wrapper geometries). Required for bare shapely geometries.
    - threaded: one transformer per worker thread
    - always_xy: pyproj axis order flag; x=longitude, y=latitude when True

    The output carries `target_crs` wherever the representation can hold a CRS.
    """
    if source_crs is None:
        source_crs = tables.crs_of(obj)
    if source_crs is None:
        raise ConfigurationError('source_crs is required: the input carries no CRS')
    source_crs = pyproj.CRS.from_user_input(source_crs)
    target_crs = pyproj.CRS.from_user_input(target_crs)

    def factory():
        return _ReprojectPoint(source_crs, target_crs, always_xy=always_xy)

    if threaded:
        nunits = max_workers or default_workers()
        f = TaskFunctors.from_factory(factory, nunits)
        max_workers = nunits
    else:
        f = factory()
    logger.debug('reprojecting %s -> %s', source_crs.to_string(), target_crs.to_string())
    return apply(f, Trait.POINT, obj, threaded=threaded, max_workers=max_workers,
                 crs=target_crs, calc_extent=calc_extent)
