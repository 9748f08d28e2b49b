"""
traits.py

Structural roles of geometry nodes and the targets that select them.

A `Trait` names what a node *is* (a point, a ring, a feature ...). A
`TraitTarget` is a set of traits telling `apply` where to stop decomposing.
Traits are single bits of an `enum.Flag`, so a target is one integer mask and a
membership test is one bitwise AND.

Public names:
- `Trait`
- `TraitTarget`
- `reachable_traits(trait)` -> Trait mask of everything at or below `trait`
- `CURVE_TRAITS`, `POLYGONAL_TRAITS`, `GEOMETRY_TRAITS`
"""
from enum import Flag, auto
from functools import reduce
import operator


class Trait(Flag):
    POINT = auto()
    MULTIPOINT = auto()
    LINESTRING = auto()
    LINEARRING = auto()
    MULTILINESTRING = auto()
    POLYGON = auto()
    MULTIPOLYGON = auto()
    GEOMETRYCOLLECTION = auto()
    FEATURE = auto()
    FEATURECOLLECTION = auto()

    @classmethod
    def from_name(cls, name: str) -> 'Trait':
        """Look a trait up by name, ignoring case, underscores and a `Trait` suffix.

        `Trait.from_name('LineString')`, `Trait.from_name('linear_ring')` and
        `Trait.from_name('PolygonTrait')` all work.
        """
        key = name.replace('_', '').upper()
        if key.endswith('TRAIT'):
            key = key[:-5]
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f'unknown trait name {name!r}') from None


_ALL = reduce(operator.or_, Trait)

_GEOMETRY = _ALL & ~(Trait.FEATURE | Trait.FEATURECOLLECTION)

# What each trait can contain, one level down.
_CHILD_TRAITS = {
    Trait.POINT: Trait(0),
    Trait.MULTIPOINT: Trait.POINT,
    Trait.LINESTRING: Trait.POINT,
    Trait.LINEARRING: Trait.POINT,
    Trait.MULTILINESTRING: Trait.LINESTRING | Trait.LINEARRING,
    Trait.POLYGON: Trait.LINEARRING | Trait.LINESTRING,
    Trait.MULTIPOLYGON: Trait.POLYGON,
    Trait.GEOMETRYCOLLECTION: _GEOMETRY,
    Trait.FEATURE: _GEOMETRY,
    Trait.FEATURECOLLECTION: Trait.FEATURE,
}


def _closure(trait: Trait) -> Trait:
    mask = trait
    frontier = trait
    while frontier:
        nxt = Trait(0)
        for t in Trait:
            if t in frontier:
                nxt |= _CHILD_TRAITS[t]
        frontier = nxt & ~mask
        mask |= nxt
    return mask


_REACHABLE = {t: _closure(t) for t in Trait}


def reachable_traits(trait: Trait) -> Trait:
    """Every trait that can appear at or below a node of `trait`."""
    return _REACHABLE[trait]


class TraitTarget:
    """An immutable set of traits selecting the depth at which `apply` stops.

    Constructors::

        TraitTarget(Trait.POINT)
        TraitTarget('Polygon')
        TraitTarget(Trait.LINESTRING, Trait.LINEARRING)
        TraitTarget(Trait.LINESTRING | Trait.LINEARRING)
        TraitTarget(TraitTarget(...))   # passthrough
    """

    __slots__ = ('_mask',)

    def __init__(self, *traits):
        if not traits:
            raise ValueError('TraitTarget needs at least one trait')
        mask = Trait(0)
        for t in traits:
            mask |= _as_mask(t)
        if not mask:
            raise ValueError('TraitTarget needs at least one trait')
        object.__setattr__(self, '_mask', mask)

    def __setattr__(self, name, value):
        raise AttributeError('TraitTarget is immutable')

    @property
    def mask(self) -> Trait:
        return self._mask

    def __contains__(self, trait) -> bool:
        """Subset test: every bit of `trait` must be in the target."""
        if not isinstance(trait, Trait) or not trait:
            return False
        return (self._mask & trait) == trait

    def intersects(self, traits) -> bool:
        return bool(self._mask & _as_mask(traits))

    def __iter__(self):
        return (t for t in Trait if t & self._mask)

    def __or__(self, other) -> 'TraitTarget':
        return TraitTarget(self._mask | _as_mask(other))

    def __eq__(self, other) -> bool:
        return isinstance(other, TraitTarget) and self._mask == other._mask

    def __hash__(self) -> int:
        return hash(self._mask)

    def __repr__(self) -> str:
        return 'TraitTarget(' + ', '.join(t.name for t in self) + ')'


def _as_mask(t) -> Trait:
    if isinstance(t, TraitTarget):
        return t.mask
    if isinstance(t, Trait):
        return t
    if isinstance(t, str):
        return Trait.from_name(t)
    raise TypeError(f'cannot build a trait target from {t!r}')


CURVE_TRAITS = TraitTarget(Trait.LINESTRING, Trait.LINEARRING)
POLYGONAL_TRAITS = TraitTarget(Trait.POLYGON, Trait.MULTIPOLYGON)
GEOMETRY_TRAITS = TraitTarget(_GEOMETRY)
