import random
import warnings

import geopandas as gpd
import pytest
import shapely
from shapely import affinity
from shapely.geometry import MultiPolygon, Point, Polygon

from geotraverse import DegenerateGeometryWarning, Trait
from geotraverse.core import wrappers
from geotraverse.correction import (
    ClosedRing,
    CorrectionPipeline,
    DiffIntersectingPolygons,
    UnionIntersectingPolygons,
    fix,
)
from geotraverse.errors import ConfigurationError


def test_closed_ring_example(open_ring):
    closed = ClosedRing()(open_ring)
    assert closed.geoms == ((0, 0), (1, 0), (1, 1), (0, 1), (0, 0))


def test_closed_ring_idempotent(open_ring):
    once = fix(open_ring)
    twice = fix(once)
    assert once == twice


def test_closed_ring_inside_polygons():
    poly = wrappers.Polygon([[(0, 0), (2, 0), (2, 2)], [(0.5, 0.5), (1, 0.5), (1, 1)]])
    out = fix(poly)
    assert out.exterior.geoms[-1] == (0, 0)
    assert out.interiors[0].geoms[-1] == (0.5, 0.5)


def test_closed_ring_already_closed_untouched():
    ring = wrappers.LinearRing([(0, 0), (1, 0), (1, 1), (0, 0)])
    assert ClosedRing().correct(Trait.LINEARRING, ring) is ring


def test_closed_ring_degenerate_warns():
    ring = wrappers.LinearRing([(0, 0), (1, 0)])
    with pytest.warns(DegenerateGeometryWarning):
        out = ClosedRing()(ring)
    assert out.geoms == ((0, 0), (1, 0))


def test_union_merges_overlaps(overlapping_squares):
    out = UnionIntersectingPolygons()(overlapping_squares)
    assert isinstance(out, MultiPolygon)
    assert len(out.geoms) == 1
    assert out.area == pytest.approx(7.0)


def test_union_idempotent(overlapping_squares):
    once = UnionIntersectingPolygons()(overlapping_squares)
    twice = UnionIntersectingPolygons()(once)
    assert twice.equals(once)
    assert len(twice.geoms) == len(once.geoms)


def test_union_leaves_disjoint_alone(separate_squares):
    c = UnionIntersectingPolygons()
    assert c.correct(Trait.MULTIPOLYGON, separate_squares) is separate_squares


def test_diff_carves_earlier(overlapping_squares):
    out = DiffIntersectingPolygons()(overlapping_squares)
    assert len(out.geoms) == 2
    assert out.geoms[0].area == pytest.approx(3.0)
    assert out.geoms[1].area == pytest.approx(4.0)
    assert out.area == pytest.approx(7.0)


def test_diff_idempotent(overlapping_squares):
    once = DiffIntersectingPolygons()(overlapping_squares)
    twice = DiffIntersectingPolygons()(once)
    assert twice.equals(once)
    assert len(twice.geoms) == len(once.geoms)


def test_diff_drops_covered_piece():
    small = Polygon([(1, 1), (2, 1), (2, 2), (1, 2)])
    big = Polygon([(0, 0), (4, 0), (4, 4), (0, 4)])
    out = DiffIntersectingPolygons()(MultiPolygon([small, big]))
    assert len(out.geoms) == 1
    assert out.geoms[0].equals(big)


def test_wrappers_stay_wrappers():
    mp = wrappers.MultiPolygon([
        [[(0, 0), (2, 0), (2, 2), (0, 2), (0, 0)]],
        [[(1, 1), (3, 1), (3, 3), (1, 3), (1, 1)]],
    ], crs='EPSG:3857')
    out = UnionIntersectingPolygons()(mp)
    assert isinstance(out, wrappers.MultiPolygon)
    assert out.crs == 'EPSG:3857'
    assert len(out.geoms) == 1


def test_sliver_policy_drop():
    thin = Polygon([(10, 10), (20, 10), (20, 10.001), (10, 10.001)])
    mp = MultiPolygon([Polygon([(0, 0), (1, 0), (1, 1), (0, 1)]), thin])
    with pytest.warns(DegenerateGeometryWarning):
        out = UnionIntersectingPolygons(sliver_area=0.1, sliver_policy='drop')(mp)
    assert len(out.geoms) == 1


def test_sliver_policy_keep():
    thin = Polygon([(10, 10), (20, 10), (20, 10.001), (10, 10.001)])
    mp = MultiPolygon([Polygon([(0, 0), (1, 0), (1, 1), (0, 1)]), thin])
    with pytest.warns(DegenerateGeometryWarning):
        out = UnionIntersectingPolygons(sliver_area=0.1)(mp)
    assert out is mp


def test_bad_sliver_policy():
    with pytest.raises(ConfigurationError):
        DiffIntersectingPolygons(sliver_policy='shrink')


def test_pipeline_order_and_skip(overlapping_squares):
    pipeline = CorrectionPipeline([ClosedRing(), UnionIntersectingPolygons()])
    with warnings.catch_warnings():
        warnings.simplefilter('error', DegenerateGeometryWarning)
        out = pipeline(overlapping_squares)
    assert len(out.geoms) == 1
    # no multipolygon level in a bare polygon: it comes back unchanged
    square = overlapping_squares.geoms[0]
    assert pipeline(square).equals(square)


def test_pipeline_rejects_non_corrections():
    with pytest.raises(ConfigurationError):
        CorrectionPipeline([len, 'not a correction'])


def test_fix_on_lists(open_ring):
    out = fix([open_ring, None])
    assert out[0].geoms[-1] == (0, 0)
    assert out[1] is None


def _open_polygon():
    return wrappers.Polygon([[(0, 0), (2, 0), (2, 2)]])


def test_fix_list_leading_point():
    out = fix([(5.0, 5.0), _open_polygon()])
    assert out[0] == (5.0, 5.0)
    assert out[1].exterior.geoms == ((0, 0), (2, 0), (2, 2), (0, 0))


def test_fix_collection_leading_point():
    gc = wrappers.GeometryCollection([(5.0, 5.0), _open_polygon()])
    out = fix(gc)
    assert out.geoms[1].exterior.geoms[-1] == (0, 0)


def test_pipeline_table_leading_point(overlapping_squares):
    table = gpd.GeoDataFrame({'geometry': [Point(9, 9), overlapping_squares]})
    direct = UnionIntersectingPolygons()(table)
    piped = fix(table, corrections=(UnionIntersectingPolygons(),))
    assert len(direct.geometry.iloc[1].geoms) == 1
    assert len(piped.geometry.iloc[1].geoms) == 1
    assert piped.geometry.iloc[0].equals(Point(9, 9))


def test_strict_rejected(open_ring):
    with pytest.raises(ConfigurationError, match='strict'):
        fix(open_ring, strict=True)
    with pytest.raises(ConfigurationError):
        ClosedRing()(open_ring, strict=False)


def _rotated_triangles(rng):
    tri = Polygon([(0, 0), (1, 0), (0.3, 0.9)])
    parts = []
    for _ in range(3):
        t = affinity.rotate(tri, rng.uniform(0, 360), origin='centroid')
        parts.append(affinity.translate(t, rng.uniform(-0.3, 0.3), rng.uniform(-0.3, 0.3)))
    return MultiPolygon(parts)


def test_diff_idempotent_on_skewed_overlaps():
    rng = random.Random(11)
    c = DiffIntersectingPolygons()
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', DegenerateGeometryWarning)
        for _ in range(50):
            mp = _rotated_triangles(rng)
            once = c(mp)
            assert c(once) is once
            assert once.area == pytest.approx(shapely.unary_union(mp.geoms).area)


def test_diff_ignores_rounding_overlap():
    a = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
    b = Polygon([(1 - 1e-13, 0), (2, 0), (2, 1), (1 - 1e-13, 1)])
    mp = MultiPolygon([a, b])
    assert DiffIntersectingPolygons()(mp) is mp


def test_bad_overlap_tolerance():
    with pytest.raises(ConfigurationError):
        DiffIntersectingPolygons(overlap_tolerance=-1.0)
