"""
XSpline Utilities Module

Geometric helpers supporting sampling and projection.
"""

from .geometry import (
    sq_norm, sq_dist, projection_scalar, projection_point,
    sq_dist_to_line, sq_dist_to_segment
)

__all__ = [
    'sq_norm',
    'sq_dist',
    'projection_scalar',
    'projection_point',
    'sq_dist_to_line',
    'sq_dist_to_segment',
]
