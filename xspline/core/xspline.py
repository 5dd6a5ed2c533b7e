"""
XSpline Curve Model

An open X-Spline: a curve through / near an ordered list of control points,
each carrying its own tension. The global parameter t in [0, 1] is spread
uniformly over the segments between consecutive control points.

Every curve point (and its derivatives) is a linear combination of at most
four control points, so the same decomposition backs point evaluation,
derivatives and the linear combinations handed to curve fitters.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np

from ..exceptions import validate_evaluable, validate_index, validate_parameter
from ..fitting.fittable import FittableSpline, LinearCoefficient
from .blend import TensionDerivedParams, blend_weights_and_derivatives
from .control_points import ControlPointStore
from .energy import (QuadraticFunction, control_points_attraction_force,
                     junction_points_attraction_force)
from .projection import ProjectionConfig, point_closest_to
from .sampling import SamplingParams, SplineSampler

logger = logging.getLogger(__name__)


@dataclass
class PointAndDerivs:
    """A point on a spline plus its derivatives with respect to t"""
    point: np.ndarray
    first_deriv: np.ndarray
    second_deriv: np.ndarray

    def signed_curvature(self) -> float:
        """
        Curvature at the point, signed by the curving direction

        If the coordinate system is rotated so that the X axis aligns with
        the tangent, curvature is positive when the spline curves towards
        positive Y. Note that with the Y axis pointing down, as in images,
        that's clockwise on screen. Returns NaN at zero speed.
        """
        x1, y1 = self.first_deriv
        x2, y2 = self.second_deriv
        denom = (x1 * x1 + y1 * y1) ** 1.5
        if denom == 0.0:
            return math.nan
        return float((x1 * y2 - y1 * x2) / denom)


@dataclass
class DecomposedDerivs:
    """Point, first and second derivative as linear combinations of control points"""
    control_points: Tuple[int, ...]
    zero_deriv_coeffs: np.ndarray
    first_deriv_coeffs: np.ndarray
    second_deriv_coeffs: np.ndarray


class XSpline(FittableSpline):
    """
    An open X-Spline

    Blanc, C., Schlick, C.: X-splines: a spline model designed for the end-user.

    The curve always starts at the first control point and ends at the
    last one. Missing neighbours of the end segments are reflections of
    the second (second-to-last) control point across the end point.
    """

    def __init__(self, control_points: Optional[Iterable[Tuple[object, float]]] = None):
        self._store = ControlPointStore(control_points)

    # Control points

    def num_control_points(self) -> int:
        return self._store.count()

    def num_segments(self) -> int:
        """Number of spans between adjacent control points: max(0, n - 1)"""
        return max(self._store.count() - 1, 0)

    def control_point_index_to_t(self, idx: int) -> float:
        validate_evaluable(self._store.count(), "control point parameter lookup")
        idx = validate_index(idx, self._store.count())
        return idx / self.num_segments()

    def append_control_point(self, pos, tension: float):
        self._store.append(pos, tension)

    def insert_control_point(self, idx: int, pos, tension: float):
        """Insert a control point so that it ends up at position idx"""
        self._store.insert(idx, pos, tension)

    def erase_control_point(self, idx: int):
        self._store.erase(idx)

    def control_point_position(self, idx: int) -> np.ndarray:
        return self._store.position(idx)

    def move_control_point(self, idx: int, pos):
        self._store.move(idx, pos)

    def control_point_tension(self, idx: int) -> float:
        return self._store.tension(idx)

    def set_control_point_tension(self, idx: int, tension: float):
        self._store.set_tension(idx, tension)

    @property
    def control_points(self) -> ControlPointStore:
        return self._store

    def copy(self) -> "XSpline":
        """Independent snapshot, safe to hand to readers while this one is edited"""
        other = XSpline()
        other._store = self._store.copy()
        return other

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        return self.copy()

    def swap(self, other: "XSpline"):
        self._store.swap(other._store)

    # Evaluation

    def _locate(self, t: float) -> Tuple[int, float]:
        """Map global t to (segment, local parameter)"""
        validate_evaluable(self._store.count())
        t = validate_parameter(t)
        num_segments = self.num_segments()

        # t == 1 would otherwise land on a non-existent segment.
        if t == 1.0:
            return num_segments - 1, 1.0

        t2 = t * num_segments
        segment = math.floor(t2)
        if segment >= num_segments:
            return num_segments - 1, 1.0
        return segment, t2 - segment

    def _segment_geometry(self, segment: int) -> List[List[Tuple[int, float]]]:
        """
        The four points shaping a segment, as combinations of control points

        Interior neighbours are control points themselves; at the open ends
        the neighbour is the reflection 2*P[end] - P[inner].
        """
        last = self._store.count() - 1

        if segment > 0:
            before = [(segment - 1, 1.0)]
        else:
            before = [(0, 2.0), (1, -1.0)]

        if segment + 2 <= last:
            after = [(segment + 2, 1.0)]
        else:
            after = [(last, 2.0), (last - 1, -1.0)]

        return [before, [(segment, 1.0)], [(segment + 1, 1.0)], after]

    def _decomposed_derivs_impl(self, segment: int, u: float) -> DecomposedDerivs:
        store = self._store
        params = TensionDerivedParams.from_tensions(
            store.point_ref(segment).tension, store.point_ref(segment + 1).tension
        )
        A, dA, ddA = blend_weights_and_derivatives(params, u)

        # Derivatives are wanted with respect to the global t, not the local u.
        # u = t * num_segments - segment, so du/dt = num_segments.
        dudt = float(self.num_segments())
        dA = dA * dudt
        ddA = ddA * (dudt * dudt)

        s = A.sum()
        ds = dA.sum()
        dds = ddA.sum()

        zero = A / s
        numer = dA * s - A * ds               # d/dt (A / s) == numer / s^2
        first = numer / (s * s)
        d_numer = ddA * s - A * dds
        second = d_numer / (s * s) - 2.0 * numer * ds / (s * s * s)

        merged: Dict[int, np.ndarray] = {}
        for slot, terms in enumerate(self._segment_geometry(segment)):
            for idx, factor in terms:
                coeffs = merged.setdefault(idx, np.zeros(3))
                coeffs[0] += factor * zero[slot]
                coeffs[1] += factor * first[slot]
                coeffs[2] += factor * second[slot]

        indices = tuple(sorted(i for i, c in merged.items() if np.any(c != 0.0)))
        table = np.array([merged[i] for i in indices]).reshape(-1, 3)
        return DecomposedDerivs(
            control_points=indices,
            zero_deriv_coeffs=table[:, 0],
            first_deriv_coeffs=table[:, 1],
            second_deriv_coeffs=table[:, 2],
        )

    def decomposed_derivs(self, t: float) -> DecomposedDerivs:
        segment, u = self._locate(t)
        return self._decomposed_derivs_impl(segment, u)

    def linear_combination_at(self, t: float) -> List[LinearCoefficient]:
        """
        The curve point at t as a weighted sum of control point positions

        Only control points with a non-zero weight are returned, ordered by
        index. The weights sum to 1.
        """
        derivs = self.decomposed_derivs(t)
        return [
            LinearCoefficient(idx, float(coeff))
            for idx, coeff in zip(derivs.control_points, derivs.zero_deriv_coeffs)
            if coeff != 0.0
        ]

    def linear_combination_and_derivatives_at(self, t: float) -> DecomposedDerivs:
        """Like linear_combination_at(), also covering the first two derivatives"""
        return self.decomposed_derivs(t)

    def _combine(self, indices: Iterable[int], coeffs: np.ndarray) -> np.ndarray:
        pt = np.zeros(2)
        for idx, coeff in zip(indices, coeffs):
            pt += self._store.point_ref(idx).position * coeff
        return pt

    def point_at(self, t: float) -> np.ndarray:
        """
        Calculate a point on the spline at position t

        Args:
            t: Position on the spline in [0, 1]

        Returns:
            The point as a float64 array of shape (2,)
        """
        derivs = self.decomposed_derivs(t)
        return self._combine(derivs.control_points, derivs.zero_deriv_coeffs)

    def point_and_derivatives(self, t: float) -> PointAndDerivs:
        """Point at t plus the first and second derivatives with respect to t"""
        derivs = self.decomposed_derivs(t)
        return PointAndDerivs(
            point=self._combine(derivs.control_points, derivs.zero_deriv_coeffs),
            first_deriv=self._combine(derivs.control_points, derivs.first_deriv_coeffs),
            second_deriv=self._combine(derivs.control_points, derivs.second_deriv_coeffs),
        )

    def signed_curvature(self, t: float) -> float:
        return self.point_and_derivatives(t).signed_curvature()

    # Sampling and projection

    def sample(self, params: Optional[SamplingParams] = None,
               from_t: float = 0.0, to_t: float = 1.0) -> SplineSampler:
        """Lazily sample [from_t, to_t]; iterate the result to get Samples"""
        return SplineSampler(self, params, from_t, to_t)

    def to_polyline(self, params: Optional[SamplingParams] = None,
                    from_t: float = 0.0, to_t: float = 1.0) -> List[np.ndarray]:
        return self.sample(params, from_t, to_t).points()

    def point_closest_to(self, to, accuracy: float = 0.2, return_t: bool = False,
                         config: Optional[ProjectionConfig] = None
                         ) -> Union[np.ndarray, Tuple[np.ndarray, float]]:
        """
        Find a point on the spline that's closest to a given point

        Args:
            to: The point we are minimizing the distance to
            accuracy: Maximum distance from the found point to the true one
            return_t: Also return the t value of the found point
            config: Search configuration

        Returns:
            The closest point found, or (point, t) if return_t is set
        """
        pt, t = point_closest_to(self, to, accuracy, config)
        if return_t:
            return pt, t
        return pt

    # Energy terms

    def control_points_attraction_force(self, seg_begin: Optional[int] = None,
                                        seg_end: Optional[int] = None) -> QuadraticFunction:
        return control_points_attraction_force(self, seg_begin, seg_end)

    def junction_points_attraction_force(self, seg_begin: Optional[int] = None,
                                         seg_end: Optional[int] = None) -> QuadraticFunction:
        return junction_points_attraction_force(self, seg_begin, seg_end)

    def __len__(self) -> int:
        return self._store.count()

    def __eq__(self, other):
        if not isinstance(other, XSpline):
            return NotImplemented
        return self._store == other._store

    def __repr__(self):
        return f"XSpline(control_points={self._store.count()})"
