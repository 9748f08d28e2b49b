"""Close open linear rings by repeating their first coordinate."""
from geotraverse.core import geointerface
from geotraverse.core.traits import Trait, TraitTarget
from geotraverse.correction.base import GeometryCorrection
from geotraverse.utils import emit_diagnostic


class ClosedRing(GeometryCorrection):
    """Append the first point of a ring when its first and last points differ.

    Rings with fewer than three points cannot be closed into anything
    meaningful; they are left as they are and reported.
    """

    application_level = TraitTarget(Trait.LINEARRING)

    def correct(self, trait, ring):
        points = list(geointerface.children(ring))
        if len(points) < 3:
            emit_diagnostic('ring has fewer than three points; left unchanged', npoints=len(points))
            return ring
        if geointerface.point_coords(points[0]) == geointerface.point_coords(points[-1]):
            return ring
        return geointerface.rebuild(ring, points + [points[0]])
