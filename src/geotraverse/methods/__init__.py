"""Manifold-aware measures built on `applyreduce`."""
from geotraverse.methods.measures import arclength, area, signed_area

__all__ = ['arclength', 'area', 'signed_area']
