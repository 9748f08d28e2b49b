import geopandas as gpd
import pyproj
import pytest
from shapely.geometry import LineString, Point, Polygon

from geotraverse.core import wrappers
from geotraverse.errors import ConfigurationError
from geotraverse.transformations import flip, forcexy, forcexyz, reproject, transform, tuples


def test_transform_shapely(square):
    out = transform(lambda c: (c[0] * 2, c[1] + 1), square)
    assert isinstance(out, Polygon)
    assert out.bounds == (0.0, 1.0, 2.0, 2.0)


def test_flip():
    out = flip(LineString([(1, 2), (3, 4)]))
    assert list(out.coords) == [(2.0, 1.0), (4.0, 3.0)]


def test_flip_tuples_keep_z():
    out = flip([(1.0, 2.0, 3.0)])
    assert out == [(2.0, 1.0, 3.0)]


def test_forcexyz_and_back():
    line = LineString([(0, 0), (1, 1)])
    xyz = forcexyz(line, z=5.0)
    assert xyz.has_z
    assert list(xyz.coords) == [(0.0, 0.0, 5.0), (1.0, 1.0, 5.0)]
    assert not forcexy(xyz).has_z


def test_forcexyz_keeps_existing_z():
    out = forcexyz(LineString([(0, 0, 1), (1, 1, 2)]), z=9.0)
    assert [c[2] for c in out.coords] == [1.0, 2.0]


def test_tuples(square):
    out = tuples(square)
    assert isinstance(out, wrappers.Polygon)
    assert out.exterior.geoms[0] == (0.0, 0.0)
    assert all(type(p) is tuple for p in out.exterior.geoms)


def test_tuples_carries_crs(wrapper_polygon):
    out = tuples(wrapper_polygon)
    assert out.crs == 'EPSG:4326'


def test_wrapper_points_keep_representation():
    mp = wrappers.MultiPoint([wrappers.Point((1, 2), crs='EPSG:4326')])
    out = flip(mp)
    assert isinstance(out.geoms[0], wrappers.Point)
    assert out.geoms[0].coords == (2.0, 1.0)


def test_reproject_geodataframe():
    gdf = gpd.GeoDataFrame({'geometry': [Point(0, 0), Point(1, 1)]}, crs='EPSG:4326')
    out = reproject(gdf, 'EPSG:3857')
    assert out.crs.to_epsg() == 3857
    expected = gdf.to_crs('EPSG:3857')
    for a, b in zip(out.geometry, expected.geometry):
        assert a.x == pytest.approx(b.x, abs=1e-6)
        assert a.y == pytest.approx(b.y, abs=1e-6)


def test_reproject_threaded_matches_sequential():
    lines = [LineString([(i * 0.1, 0), (i * 0.1, 1)]) for i in range(30)]
    seq = reproject(lines, 'EPSG:3857', source_crs='EPSG:4326')
    par = reproject(lines, 'EPSG:3857', source_crs='EPSG:4326', threaded=True, max_workers=3)
    assert all(a.equals_exact(b, 1e-9) for a, b in zip(seq, par))


def test_reproject_wrapper_sets_crs(wrapper_polygon):
    out = reproject(wrapper_polygon, 'EPSG:3857')
    assert out.crs == pyproj.CRS.from_epsg(3857)
    x, y = out.exterior.geoms[1]
    assert x == pytest.approx(222638.98, abs=0.01)
    assert y == pytest.approx(0.0, abs=1e-6)


def test_reproject_needs_source(square):
    with pytest.raises(ConfigurationError):
        reproject(square, 'EPSG:3857')
