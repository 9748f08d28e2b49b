import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import Point

from geotraverse import Trait
from geotraverse.core import tables
from geotraverse.core.apply import apply, flatten
from geotraverse.core.tables import TableKind, register_table, unregister_table


def shifted(p):
    return Point(p.x + 1.0, p.y)


def test_geodataframe_round_trip(gdf):
    out = apply(shifted, Trait.POINT, gdf)
    assert isinstance(out, gpd.GeoDataFrame)
    assert list(out.columns) == list(gdf.columns)
    assert list(out['name']) == ['a', 'b', 'c']
    assert out.crs == gdf.crs
    assert out.geometry.iloc[1].equals(Point(3, 3))
    assert (out.index == gdf.index).all()


def test_geodataframe_crs_override(gdf):
    out = apply(lambda p: p, Trait.POINT, gdf, crs='EPSG:3857')
    assert out.crs.to_epsg() == 3857


def test_geodataframe_non_geometry_results(gdf):
    out = apply(lambda g: g.geom_type, Trait.POLYGON | Trait.POINT | Trait.LINESTRING, gdf)
    assert isinstance(out, pd.DataFrame)
    assert not isinstance(out, gpd.GeoDataFrame)
    assert list(out['geometry']) == ['Polygon', 'Point', 'LineString']


def test_geoseries(gdf):
    s = gdf.geometry
    out = apply(shifted, Trait.POINT, s)
    assert isinstance(out, gpd.GeoSeries)
    assert out.crs == s.crs
    assert out.iloc[1].equals(Point(3, 3))


def test_geodataframe_calc_extent(gdf):
    _, ext = apply(lambda p: p, Trait.POINT, gdf, calc_extent=True)
    assert tuple(ext) == tuple(gdf.total_bounds)


def test_pandas_dataframe_with_geometry_column():
    df = pd.DataFrame({'geom': [Point(0, 0), None, Point(1, 2)], 'v': [1, 2, 3]})
    out = apply(shifted, Trait.POINT, df)
    assert isinstance(out, pd.DataFrame)
    assert out['geom'][0].equals(Point(1, 0))
    assert out['geom'][1] is None
    assert list(out['v']) == [1, 2, 3]


def test_mapping_falls_back_to_dict():
    table = {'geometry': [Point(0, 0), Point(1, 1)], 'name': ['x', 'y']}
    out = apply(shifted, Trait.POINT, table)
    assert isinstance(out, dict)
    assert out['name'] == ['x', 'y']
    assert out['geometry'][1].equals(Point(2, 1))


def test_flatten_table(gdf):
    assert flatten(lambda p: p.x, Trait.POINT, gdf)[-2:] == [0.0, 1.0]


def test_register_table_kind():
    class Rows:
        def __init__(self, geoms):
            self.geoms = geoms

    kind = TableKind(
        name='Rows',
        match=lambda obj: isinstance(obj, Rows),
        geometry_columns=lambda obj: ['g'],
        columns=lambda obj: {'g': list(obj.geoms)},
        materializer=lambda obj, cols, crs: Rows(cols['g']),
    )
    register_table(kind)
    try:
        assert tables.table_kind(Rows([])) is kind
        out = apply(shifted, Trait.POINT, Rows([Point(0, 0)]))
        assert isinstance(out, Rows)
        assert out.geoms[0].equals(Point(1, 0))
    finally:
        unregister_table(kind)


def test_crs_of(gdf):
    assert tables.crs_of(gdf) == gdf.crs
    assert tables.crs_of([Point(0, 0)]) is None
