"""
XSpline Core Module

The X-Spline curve model: control point storage, blend functions, segment
evaluation, adaptive sampling, closest point search and energy terms.
"""

from .control_points import ControlPoint, ControlPointStore
from .blend import BlendKind, BlendShape, TensionDerivedParams, blend_weights
from .sampling import SamplingParams, SampleFlag, Sample, SplineSampler
from .projection import ProjectionConfig
from .energy import LinearFunction, QuadraticFunction
from .xspline import XSpline, PointAndDerivs, DecomposedDerivs

__all__ = [
    'ControlPoint',
    'ControlPointStore',
    'BlendKind',
    'BlendShape',
    'TensionDerivedParams',
    'blend_weights',
    'SamplingParams',
    'SampleFlag',
    'Sample',
    'SplineSampler',
    'ProjectionConfig',
    'LinearFunction',
    'QuadraticFunction',
    'XSpline',
    'PointAndDerivs',
    'DecomposedDerivs',
]
