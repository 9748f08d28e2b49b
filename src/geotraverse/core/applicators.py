"""
applicators.py

An applicator binds a transform to one container node and knows how to run it
on the container's i-th element and how to put the results back together.
`maptasks` only ever talks to applicators, so the same scheduler serves
geometries, plain arrays, feature collections and table columns.

- `ApplyToGeom`     : children of one geometry, rebuilt through its provider
- `ApplyToArray`    : elements of a sequence, assembled into a list
- `ApplyToFeatures` : features of a feature collection; only each feature's
                      geometry is transformed unless FEATURE is targeted
"""
from itertools import chain
from typing import Any, NamedTuple, Optional

from geotraverse.core import geointerface
from geotraverse.core.traits import Trait, TraitTarget


class ApplyOptions(NamedTuple):
    strict: bool = True
    crs: Any = None
    wrap: bool = False
    flat: bool = False
    max_workers: Optional[int] = None


class Applicator:
    def __init__(self, f, target: TraitTarget, obj, opts: ApplyOptions = ApplyOptions()):
        self.f = f
        self.target = target
        self.obj = obj
        self.opts = opts
        self.items = self._items(obj)

    def _items(self, obj):
        return geointerface.children(obj)

    def __len__(self):
        return len(self.items)

    def __call__(self, i, extent=None):
        from geotraverse.core.apply import _apply
        return _apply(self.f, self.target, self.items[i], self.opts, extent)

    def rebuild(self, f) -> 'Applicator':
        """The same applicator around another functor."""
        new = object.__new__(type(self))
        new.__dict__.update(self.__dict__)
        new.f = f
        return new

    def assemble(self, results):
        if self.opts.flat:
            return list(chain.from_iterable(results))
        return self._assemble(results)

    def _assemble(self, results):
        raise NotImplementedError

    def __repr__(self):
        return f'{type(self).__name__}({len(self)} elements, target={self.target!r})'


class ApplyToGeom(Applicator):
    def _assemble(self, results):
        return geointerface.rebuild(self.obj, results, crs=self.opts.crs, wrap=self.opts.wrap)


class ApplyToArray(Applicator):
    def _items(self, obj):
        return obj if isinstance(obj, list) else list(obj)

    def _assemble(self, results):
        return list(results)


class ApplyToFeatures(Applicator):
    def __call__(self, i, extent=None):
        from geotraverse.core.apply import _apply
        feature = self.items[i]
        if (feature is None or Trait.FEATURE in self.target
                or geointerface.trait(feature) is not Trait.FEATURE):
            return _apply(self.f, self.target, feature, self.opts, extent)
        (geometry,) = geointerface.children(feature)
        result = _apply(self.f, self.target, geometry, self.opts, extent)
        if self.opts.flat:
            return result
        return geointerface.rebuild(feature, (result,), crs=self.opts.crs)

    def _assemble(self, results):
        return geointerface.rebuild(self.obj, results, crs=self.opts.crs)
