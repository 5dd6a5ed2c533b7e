"""
XSpline Visualization Module

Diagnostic plots of splines using matplotlib.
"""

from .spline_plots import SplineVisualizer, PlotConfig

__all__ = [
    'SplineVisualizer',
    'PlotConfig',
]
