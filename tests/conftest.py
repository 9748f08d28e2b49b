import geopandas as gpd
import pytest
from shapely.geometry import LineString, MultiPolygon, Point, Polygon

from geotraverse.core import wrappers


@pytest.fixture
def square():
    return Polygon([(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)])


@pytest.fixture
def square_with_hole():
    shell = [(0, 0), (4, 0), (4, 4), (0, 4), (0, 0)]
    hole = [(1, 1), (1, 2), (2, 2), (2, 1), (1, 1)]
    return Polygon(shell, [hole])


@pytest.fixture
def overlapping_squares():
    a = Polygon([(0, 0), (2, 0), (2, 2), (0, 2)])
    b = Polygon([(1, 1), (3, 1), (3, 3), (1, 3)])
    return MultiPolygon([a, b])


@pytest.fixture
def separate_squares():
    a = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
    b = Polygon([(5, 5), (6, 5), (6, 6), (5, 6)])
    return MultiPolygon([a, b])


@pytest.fixture
def open_ring():
    return wrappers.LinearRing([(0, 0), (1, 0), (1, 1), (0, 1)])


@pytest.fixture
def wrapper_polygon():
    return wrappers.Polygon([[(0, 0), (2, 0), (2, 2), (0, 2), (0, 0)]], crs='EPSG:4326')


@pytest.fixture
def mixed_list(square):
    return [
        square,
        LineString([(0, 0), (3, 4)]),
        Point(5, 5),
        (7.0, 8.0),
        None,
    ]


@pytest.fixture
def gdf(square):
    return gpd.GeoDataFrame(
        {
            'name': ['a', 'b', 'c'],
            'value': [1, 2, 3],
            'geometry': [square, Point(2, 3), LineString([(0, 0), (1, 1)])],
        },
        crs='EPSG:4326',
    )


@pytest.fixture
def feature_collection():
    return wrappers.FeatureCollection([
        wrappers.Feature(wrappers.LineString([(0, 0), (1, 1)]), properties={'id': 1}),
        wrappers.Feature(Point(3, 4), properties={'id': 2}),
        wrappers.Feature(None, properties={'id': 3}),
    ])
