"""
XSpline Fitting Module

Interface consumed by external curve-fitting optimizers.
"""

from .fittable import FittableSpline, LinearCoefficient

__all__ = [
    'FittableSpline',
    'LinearCoefficient',
]
