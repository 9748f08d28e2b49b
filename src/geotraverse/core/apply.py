"""
apply.py

The traversal engine.

`apply(f, target, obj)` walks `obj` down to the nodes whose trait is in
`target`, calls `f` on each of them and rebuilds everything above with the
original nesting. `flatten` collects the `f` outputs into a flat list instead,
and `applyreduce` folds them.

What `obj` may be:
- a geometry any registered provider understands (shapely, wrappers, numeric
  point tuples, objects implementing the protocol)
- a feature or feature collection
- a table (GeoDataFrame, GeoSeries, DataFrame with geometry columns, column
  mapping); see `geotraverse.core.tables`
- any other iterable of the above, which comes back as a list
- None, which passes through

Examples
--------
    apply(lambda p: (p[0] + 1, p[1]), Trait.POINT, poly)
    apply(fix_ring, TraitTarget(Trait.LINEARRING), gdf, threaded=True)
    flatten(Trait.POLYGON, multipolygons)
"""
from collections.abc import Iterable, Iterator
from functools import reduce
from itertools import chain
from typing import Optional
import logging

from geotraverse.config import APPLY_DEFAULTS
from geotraverse.core import geointerface, tables
from geotraverse.core.applicators import (
    ApplyOptions,
    ApplyToArray,
    ApplyToFeatures,
    ApplyToGeom,
)
from geotraverse.core.extent import ExtentAccumulator
from geotraverse.core.tasks import maptasks
from geotraverse.core.traits import Trait, TraitTarget, reachable_traits
from geotraverse.errors import TargetNotFoundError
from geotraverse.utils import identity

logger = logging.getLogger(__name__)

_NOTHING = object()

_NESTED = Trait.GEOMETRYCOLLECTION | Trait.FEATURE | Trait.FEATURECOLLECTION


def apply(f, target, obj, *, threaded=APPLY_DEFAULTS['threaded'],
          calc_extent=APPLY_DEFAULTS['calc_extent'], crs=None,
          max_workers=APPLY_DEFAULTS['max_workers'], strict=APPLY_DEFAULTS['strict'], wrap=False):
    """Apply `f` to every node of `obj` whose trait is in `target`.

    Parameters
    - f: callable taking one node. May be a `TaskFunctors` for threaded runs.
    - target: `Trait`, trait name, or `TraitTarget`.
    - obj: geometry, feature (collection), table, iterable or None.
    - threaded: split the top-level elements over a thread pool.
    - calc_extent: also return the `Extent` of the output, as `(result, extent)`.
      The extent is None when the output holds no coordinates.
    - crs: CRS attached to rebuilt wrapper geometries and materialized tables.
    - max_workers: number of concurrency units when threaded.
    - strict: raise `TargetNotFoundError` when a node bottoms out at a point
      outside the target. With `strict=False` such nodes pass through.
    - wrap: rebuild every decomposed geometry as a wrapper geometry.
    """
    target = TraitTarget(target)
    if isinstance(obj, Iterator):
        obj = list(obj)
    if strict:
        _check_target(target, obj)
    opts = ApplyOptions(strict=strict, crs=crs, wrap=wrap, flat=False, max_workers=max_workers)
    extent = ExtentAccumulator() if calc_extent else None
    result = _apply(f, target, obj, opts, extent, threaded=threaded)
    if calc_extent:
        return result, extent.extent()
    return result


def flatten(f, target, obj=_NOTHING, *, threaded=APPLY_DEFAULTS['threaded'],
            max_workers=APPLY_DEFAULTS['max_workers'], strict=APPLY_DEFAULTS['strict']):
    """Ordered list of `f(node)` for every targeted node, without rebuilding.

    `flatten(target, obj)` collects the nodes themselves.
    """
    if obj is _NOTHING:
        f, target, obj = identity, f, target
    target = TraitTarget(target)
    if isinstance(obj, Iterator):
        obj = list(obj)
    if strict:
        _check_target(target, obj)
    opts = ApplyOptions(strict=strict, flat=True, max_workers=max_workers)
    return _apply(f, target, obj, opts, None, threaded=threaded)


def applyreduce(f, op, target, obj, *, init, threaded=APPLY_DEFAULTS['threaded'],
                max_workers=APPLY_DEFAULTS['max_workers'], strict=APPLY_DEFAULTS['strict']):
    """`reduce(op, flatten(f, target, obj), init)`."""
    values = flatten(f, target, obj, threaded=threaded, max_workers=max_workers, strict=strict)
    return reduce(op, values, init)


def target_reachable(target, obj) -> bool:
    """Whether `target` can be reached from the leading geometries of `obj`."""
    return _unreachable(TraitTarget(target), obj) is None


def _check_target(target: TraitTarget, obj):
    tr = _unreachable(target, obj)
    if tr is not None:
        raise TargetNotFoundError(target, tr)


def _unreachable(target: TraitTarget, obj) -> Optional[Trait]:
    """Trait of the first leading node from which `target` cannot be reached."""
    while obj is not None:
        tr = geointerface.trait(obj)
        if tr is not None:
            if tr in target:
                return None
            if not target.intersects(reachable_traits(tr)):
                return tr
            if tr & _NESTED:
                obj = _leading(geointerface.children(obj))
                continue
            return None
        kind = tables.table_kind(obj)
        if kind is not None:
            cols = kind.columns(obj)
            for name in kind.geometry_columns(obj):
                tr = _unreachable(target, _leading(cols[name]))
                if tr is not None:
                    return tr
            return None
        if isinstance(obj, (str, bytes)) or not isinstance(obj, Iterable):
            return None
        obj = _leading(obj)
    return None


def _leading(values):
    for v in values:
        if v is not None:
            return v
    return None


def _hit(f, node, opts: ApplyOptions, extent):
    out = f(node)
    if extent is not None:
        extent.add(out)
    return [out] if opts.flat else out


def _apply(f, target: TraitTarget, obj, opts: ApplyOptions, extent, threaded=False):
    if obj is None:
        return [] if opts.flat else None

    tr = geointerface.trait(obj)
    if tr is not None:
        if tr in target:
            return _hit(f, obj, opts, extent)
        if tr is Trait.POINT:
            if opts.strict:
                raise TargetNotFoundError(target, tr)
            if opts.flat:
                return []
            if extent is not None:
                extent.add(obj)
            return obj
        if tr is Trait.FEATURECOLLECTION:
            applicator = ApplyToFeatures(f, target, obj, opts)
        else:
            applicator = ApplyToGeom(f, target, obj, opts)
        return maptasks(applicator, threaded=threaded, extent=extent)

    kind = tables.table_kind(obj)
    if kind is not None:
        return _apply_table(f, target, obj, kind, opts, extent, threaded)

    if isinstance(obj, (str, bytes)) or not isinstance(obj, Iterable):
        raise TypeError(f'cannot apply over a {type(obj).__name__}: {obj!r}')
    return maptasks(ApplyToArray(f, target, obj, opts), threaded=threaded, extent=extent)


def _apply_table(f, target, table, kind, opts, extent, threaded):
    columns = kind.columns(table)
    geom_cols = kind.geometry_columns(table)
    logger.debug('applying over %s geometry columns %s', kind.name, geom_cols)
    for name in geom_cols:
        app = ApplyToArray(f, target, columns[name], opts)
        columns[name] = maptasks(app, threaded=threaded, extent=extent)
    if opts.flat:
        return list(chain.from_iterable(columns[name] for name in geom_cols))
    return tables.materialize(kind, table, columns, crs=opts.crs)
