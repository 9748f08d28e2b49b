"""
pointwise.py

Transformations that rewrite every point and rebuild everything else.

Public functions:
- `transform(f, obj)` : f maps a coordinate tuple to a coordinate tuple
- `flip(obj)`         : swap x and y
- `forcexy(obj)`      : drop everything past x and y
- `forcexyz(obj, z)`  : add z where missing, keep existing z
- `tuples(obj)`       : wrapper geometries with plain tuple points

Keyword arguments are passed on to `apply` (`threaded`, `crs`, `calc_extent` ...).
Points keep their representation: shapely points stay shapely points, tuples
stay tuples.
"""
from geotraverse.core import geointerface, tables
from geotraverse.core.apply import apply
from geotraverse.core.traits import Trait


def transform(f, obj, **kwargs):
    """Apply `f(coords) -> coords` to the coordinates of every point in `obj`.

    Parameters
    - f: callable taking a tuple `(x, y[, z])` and returning a sequence of numbers
    - obj: anything `apply` accepts
    """
    def _point(p):
        return geointerface.point_like(p, f(geointerface.point_coords(p)), kwargs.get('crs'))
    return apply(_point, Trait.POINT, obj, **kwargs)


def flip(obj, **kwargs):
    return transform(lambda c: (c[1], c[0]) + c[2:], obj, **kwargs)


def forcexy(obj, **kwargs):
    return transform(lambda c: c[:2], obj, **kwargs)


def forcexyz(obj, z=0.0, **kwargs):
    return transform(lambda c: c[:3] if len(c) >= 3 else (c[0], c[1], float(z)), obj, **kwargs)


def tuples(obj, **kwargs):
    """Rebuild `obj` as wrapper geometries whose points are plain tuples.

    The CRS of `obj` is carried over unless `crs` is given.
    """
    if kwargs.get('crs') is None:
        kwargs['crs'] = tables.crs_of(obj)
    return apply(geointerface.point_coords, Trait.POINT, obj, wrap=True, **kwargs)
