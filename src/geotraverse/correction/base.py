"""
base.py

Geometry corrections and the pipeline that runs them.

A correction declares the trait it works on (`application_level`) and fixes
one node of that trait in `correct(trait, geom)`. Calling the correction on any
input applies it at every node of its level through `apply(..., strict=False)`,
so inputs that do not contain the level come back unchanged. Mixed inputs
(a list or collection starting with a point, say) are corrected wherever the
level does occur.

Corrections are idempotent: running one twice gives the same result as once.
"""
from typing import Iterable
import logging

from geotraverse.core import geointerface
from geotraverse.core.apply import apply
from geotraverse.core.traits import TraitTarget
from geotraverse.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _check_apply_kwargs(kwargs):
    if 'strict' in kwargs:
        raise ConfigurationError(
            'corrections always run with strict=False (levels that are absent pass '
            'through unchanged); do not pass strict')


class GeometryCorrection:
    application_level: TraitTarget

    def __call__(self, geom, **kwargs):
        _check_apply_kwargs(kwargs)
        return apply(self._correct_node, self.application_level, geom, strict=False, **kwargs)

    def _correct_node(self, node):
        return self.correct(geointerface.trait(node), node)

    def correct(self, trait, geom):
        raise NotImplementedError

    def __repr__(self):
        return f'{type(self).__name__}()'


class CorrectionPipeline:
    """Ordered corrections. Order matters; each sees the previous one's output."""

    def __init__(self, corrections: Iterable[GeometryCorrection]):
        corrections = tuple(corrections)
        for c in corrections:
            if not callable(c) or not hasattr(c, 'application_level'):
                raise ConfigurationError(f'{c!r} is not a geometry correction')
        self.corrections = corrections

    def __call__(self, geom, **kwargs):
        _check_apply_kwargs(kwargs)
        for c in self.corrections:
            logger.debug('running %r', c)
            geom = c(geom, **kwargs)
        return geom

    def __len__(self):
        return len(self.corrections)

    def __repr__(self):
        return f'CorrectionPipeline({list(self.corrections)!r})'


def fix(geom, corrections=None, **kwargs):
    """Run `corrections` (default: close every ring) over `geom`.

    Extra keyword arguments (`threaded`, `crs`, ...) are passed on to `apply`.
    `strict` is rejected with a ConfigurationError.
    """
    if corrections is None:
        from geotraverse.correction.closed_ring import ClosedRing
        corrections = (ClosedRing(),)
    return CorrectionPipeline(corrections)(geom, **kwargs)
