# -*- coding: utf-8 -*-

"""
geotraverse/config.py

This module centralizes the configuration constants used by the traversal engine,
the manifold resolver and the correction pipeline. Keeping defaults in one place
keeps `apply`, `fix` and the measures consistent with each other.

Contents:
---------
1. WGS84:
   - Ellipsoid constants used as the default Geodesic parameters and the default
     Spherical radius (mean radius of the WGS84 ellipsoid).

2. APPLY_DEFAULTS:
   - Default keyword values for `apply`, `flatten` and `applyreduce`.
   - `max_workers=None` means "one worker per CPU" (see `default_workers`).

3. CORRECTION_DEFAULTS:
   - Sliver handling for the intersecting-polygon corrections. A sub-polygon whose
     area is <= `sliver_area` is a sliver; `sliver_policy` is "keep" or "drop".
     `overlap_tolerance` is the relative overlap below which DiffIntersectingPolygons
     leaves a pair of sub-polygons alone.

4. GEOGRAPHIC_CRS_IDS / CARTESIAN_CRS_PATTERNS:
   - The cheap CRS classifier table. Identifiers listed here are classified without
     asking pyproj to parse anything.

5. LOGGING:
   - Handler format and default level for `configure_logging`.

Usage:
------
    from geotraverse.config import WGS84, APPLY_DEFAULTS

    radius = WGS84['mean_radius']
"""
import logging
import os
import re
import sys

# ───────────────────────────────────────────────────────────────────────────────
# 1) WGS84 ELLIPSOID (metres)
# ───────────────────────────────────────────────────────────────────────────────
WGS84 = {
    'semimajor_axis': 6378137.0,          # a
    'inverse_flattening': 298.257223563,  # 1/f
    'mean_radius': 6371008.8,             # (2a + b) / 3
}

# ───────────────────────────────────────────────────────────────────────────────
# 2) APPLY ENGINE
# ───────────────────────────────────────────────────────────────────────────────
APPLY_DEFAULTS = {
    'threaded': False,
    'calc_extent': False,
    'max_workers': None,
    'strict': True,
}

# ───────────────────────────────────────────────────────────────────────────────
# 3) CORRECTIONS
# ───────────────────────────────────────────────────────────────────────────────
CORRECTION_DEFAULTS = {
    'sliver_area': 0.0,
    'sliver_policy': 'keep',
    # overlaps below this fraction of the smaller sub-polygon's area are noise
    'overlap_tolerance': 1e-9,
}

SLIVER_POLICIES = ('keep', 'drop')

# ───────────────────────────────────────────────────────────────────────────────
# 4) CHEAP CRS CLASSIFIER
# ───────────────────────────────────────────────────────────────────────────────
GEOGRAPHIC_CRS_IDS = frozenset({
    'EPSG:4326',   # WGS 84
    'EPSG:4979',   # WGS 84 (3D)
    'EPSG:4269',   # NAD83
    'EPSG:4267',   # NAD27
    'EPSG:4258',   # ETRS89
    'EPSG:4283',   # GDA94
    'EPSG:4674',   # SIRGAS 2000
    'OGC:CRS84',
    'CRS84',
    'WGS84',
})

CARTESIAN_CRS_PATTERNS = (
    re.compile(r'^EPSG:3857$'),        # web mercator
    re.compile(r'^EPSG:32[67]\d\d$'),  # WGS 84 / UTM
    re.compile(r'^EPSG:269\d\d$'),     # NAD83 / UTM
    re.compile(r'^EPSG:258\d\d$'),     # ETRS89 / UTM
)

# ───────────────────────────────────────────────────────────────────────────────
# 5) LOGGING
# ───────────────────────────────────────────────────────────────────────────────
LOGGING = {
    'level': logging.INFO,
    'format': '[%(levelname)s] %(message)s',
    'quiet': ('shapely', 'pyproj', 'geopandas'),
}


def default_workers() -> int:
    """Number of worker threads used when `max_workers` is not given."""
    return os.cpu_count() or 1


def configure_logging(level=None) -> logging.Logger:
    """Attach a console handler to the package logger.

    Library code never calls this; applications and test sessions do. Calling it
    twice does not add a second handler.
    """
    log = logging.getLogger('geotraverse')
    if not log.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter(LOGGING['format']))
        log.addHandler(h)
    log.setLevel(LOGGING['level'] if level is None else level)
    for name in LOGGING['quiet']:
        logging.getLogger(name).setLevel(logging.ERROR)
    return log
