"""Open X-Spline curves for interactive editing and curve fitting."""
__version__="1.0.0"

from .core.xspline import XSpline, PointAndDerivs
from .core.sampling import SamplingParams, SampleFlag, Sample
from .core.projection import ProjectionConfig
from .core.energy import QuadraticFunction
from .fitting.fittable import FittableSpline, LinearCoefficient
from .exceptions import (
    XSplineError, OutOfRangeError, InvalidArgumentError, InvalidStateError
)
