"""
tables.py

Geometry-bearing tables. A table is decomposed by lifting its geometry
column(s) through `apply` and recombining them with the untouched columns.

A table kind is described by a `TableKind`:

- `match(obj)` -> bool
- `geometry_columns(obj)` -> names of the columns holding geometries
- `columns(obj)` -> ordered mapping name -> sequence of values
- `materializer(obj, columns, crs)` -> a new table of the original type, or
  None when the kind cannot be rebuilt (the engine then returns a plain
  dict of lists)
- `crs(obj)` -> CRS metadata of the table

Built-in kinds, in lookup order: geopandas GeoDataFrame, geopandas GeoSeries,
pandas DataFrame with object columns of geometries, and column mappings
(`{'geometry': [...], 'name': [...]}`).
"""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
import logging

import geopandas as gpd
import numpy as np
import pandas as pd
from shapely.errors import GEOSException

from geotraverse.core import geointerface

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableKind:
    name: str
    match: Callable[[Any], bool]
    geometry_columns: Callable[[Any], List[str]]
    columns: Callable[[Any], Dict[str, Any]]
    materializer: Optional[Callable[[Any, Dict[str, list], Any], Any]] = None
    crs: Callable[[Any], Any] = lambda obj: None


def _first_valid(values):
    for v in values:
        if v is None:
            continue
        if isinstance(v, float) and np.isnan(v):
            continue
        return v
    return None


def _holds_geometries(values) -> bool:
    v = _first_valid(values)
    return v is not None and geointerface.is_geometry(v)


def _as_shapely_list(values):
    return [None if v is None else geointerface.to_shapely(v) for v in values]


# ── geopandas.GeoDataFrame ────────────────────────────────────────────────────
def _gdf_geometry_columns(df):
    names = [c for c in df.columns if df[c].dtype.name == 'geometry']
    active = df.active_geometry_name
    if active in names:
        names.remove(active)
        names.insert(0, active)
    return names


def _gdf_materialize(df, columns, crs):
    crs = df.crs if crs is None else crs
    geom_cols = _gdf_geometry_columns(df)
    try:
        data = {}
        for name, values in columns.items():
            if name in geom_cols:
                data[name] = gpd.GeoSeries(_as_shapely_list(values), index=df.index, crs=crs)
            else:
                data[name] = pd.Series(values, index=df.index, name=name)
        active = df.active_geometry_name or (geom_cols[0] if geom_cols else None)
        return gpd.GeoDataFrame(data, index=df.index, geometry=active, crs=crs)
    except (TypeError, ValueError, GEOSException) as e:
        logger.debug('geometry columns no longer hold geometries, returning a DataFrame: %s', e)
        return pd.DataFrame({k: list(v) for k, v in columns.items()}, index=df.index)


GEODATAFRAME = TableKind(
    name='GeoDataFrame',
    match=lambda obj: isinstance(obj, gpd.GeoDataFrame),
    geometry_columns=_gdf_geometry_columns,
    columns=lambda df: {c: list(df[c]) for c in df.columns},
    materializer=_gdf_materialize,
    crs=lambda df: df.crs,
)


# ── geopandas.GeoSeries ───────────────────────────────────────────────────────
def _gs_key(s):
    return 'geometry' if s.name is None else s.name


def _gs_materialize(s, columns, crs):
    values = columns[_gs_key(s)]
    crs = s.crs if crs is None else crs
    try:
        return gpd.GeoSeries(_as_shapely_list(values), index=s.index, crs=crs, name=s.name)
    except (TypeError, ValueError, GEOSException) as e:
        logger.debug('GeoSeries values no longer geometries, returning a Series: %s', e)
        return pd.Series(list(values), index=s.index, name=s.name)


GEOSERIES = TableKind(
    name='GeoSeries',
    match=lambda obj: isinstance(obj, gpd.GeoSeries),
    geometry_columns=lambda s: [_gs_key(s)],
    columns=lambda s: {_gs_key(s): list(s)},
    materializer=_gs_materialize,
    crs=lambda s: s.crs,
)


# ── pandas.DataFrame ──────────────────────────────────────────────────────────
def _df_geometry_columns(df):
    return [c for c in df.columns if df[c].dtype == object and _holds_geometries(df[c])]


def _df_materialize(df, columns, crs):
    out = pd.DataFrame({k: list(v) for k, v in columns.items()}, index=df.index)
    out.attrs = dict(df.attrs)
    if crs is not None:
        out.attrs['crs'] = crs
    return out


DATAFRAME = TableKind(
    name='DataFrame',
    match=lambda obj: isinstance(obj, pd.DataFrame) and bool(_df_geometry_columns(obj)),
    geometry_columns=_df_geometry_columns,
    columns=lambda df: {c: list(df[c]) for c in df.columns},
    materializer=_df_materialize,
    crs=lambda df: df.attrs.get('crs'),
)


# ── column mappings ───────────────────────────────────────────────────────────
def _is_column(v) -> bool:
    return isinstance(v, (list, tuple, np.ndarray, pd.Series))


def _mapping_geometry_columns(m):
    return [k for k, v in m.items() if _is_column(v) and _holds_geometries(v)]


def _mapping_match(obj) -> bool:
    if not isinstance(obj, Mapping) or not obj:
        return False
    if not all(_is_column(v) for v in obj.values()):
        return False
    if len({len(v) for v in obj.values()}) != 1:
        return False
    return bool(_mapping_geometry_columns(obj))


COLUMN_MAPPING = TableKind(
    name='Mapping',
    match=_mapping_match,
    geometry_columns=_mapping_geometry_columns,
    columns=lambda m: {k: list(v) for k, v in m.items()},
)


_KINDS: List[TableKind] = [GEODATAFRAME, GEOSERIES, DATAFRAME, COLUMN_MAPPING]


def register_table(kind: TableKind, index: int = 0) -> None:
    """Add a table kind, consulted before the built-in ones by default."""
    _KINDS.insert(index, kind)


def unregister_table(kind: TableKind) -> None:
    _KINDS.remove(kind)


def table_kind(obj) -> Optional[TableKind]:
    if geointerface.is_geometry(obj):
        return None
    for kind in _KINDS:
        if kind.match(obj):
            return kind
    return None


def is_table(obj) -> bool:
    return table_kind(obj) is not None


def materialize(kind: TableKind, table, columns: Dict[str, list], crs=None):
    """Rebuild `table` from `columns`; a dict of lists when the kind cannot."""
    if kind.materializer is None:
        return {k: list(v) for k, v in columns.items()}
    return kind.materializer(table, columns, crs)


def crs_of(obj):
    """CRS metadata of a table or geometry, or None."""
    kind = table_kind(obj)
    if kind is not None:
        return kind.crs(obj)
    return geointerface.crs(obj)
