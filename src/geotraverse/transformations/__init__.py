"""Point-wise transformations and reprojection built on `apply`."""
from geotraverse.transformations.pointwise import flip, forcexy, forcexyz, transform, tuples
from geotraverse.transformations.reproject import reproject

__all__ = ['flip', 'forcexy', 'forcexyz', 'reproject', 'transform', 'tuples']
