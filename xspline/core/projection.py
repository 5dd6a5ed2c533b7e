"""
XSpline Closest Point Search

Projects an arbitrary point onto a spline: a coarse polyline locates the
closest stretch of curve, which is then re-sampled with shrinking
tolerances until the distance stops improving.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from scipy.optimize import minimize_scalar

from ..exceptions import InvalidArgumentError, validate_evaluable, validate_position
from ..utils.geometry import sq_dist, sq_dist_to_segment
from .sampling import Sample, SamplingParams, SplineSampler

logger = logging.getLogger(__name__)


@dataclass
class ProjectionConfig:
    """Configuration for the closest point search"""
    max_rounds: int = 24   # Refinement rounds after the coarse pass
    polish: bool = True    # Finish with a bounded scalar minimisation


def _closest_edge(samples: List[Sample], to: np.ndarray) -> Tuple[int, float, float]:
    """
    Find the polyline edge closest to a point

    Ties go to the first edge encountered.

    Returns:
        (edge index, clamped position along the edge, squared distance)
    """
    best_idx = 0
    best_s = 0.0
    best_sqdist = math.inf
    for i in range(len(samples) - 1):
        sqdist, s = sq_dist_to_segment(to, samples[i].point, samples[i + 1].point)
        if sqdist < best_sqdist:
            best_idx, best_s, best_sqdist = i, s, sqdist
    return best_idx, best_s, best_sqdist


def _edge_t(samples: List[Sample], idx: int, s: float) -> float:
    t0 = samples[idx].t
    t1 = samples[idx + 1].t
    return min(max(t0 + s * (t1 - t0), 0.0), 1.0)


def _bracket(samples: List[Sample], idx: int) -> Tuple[float, float]:
    """Parameter range of an edge widened by one neighbour on each side"""
    lo = samples[max(idx - 1, 0)].t
    hi = samples[min(idx + 2, len(samples) - 1)].t
    return min(lo, hi), max(lo, hi)


def point_closest_to(spline, to, accuracy: float = 0.2,
                     config: Optional[ProjectionConfig] = None) -> Tuple[np.ndarray, float]:
    """
    Find the point on a spline closest to a given point

    Args:
        spline: Spline to project onto
        to: The point we are minimizing the distance to
        accuracy: Maximum distance between the found point and the true
            closest point
        config: Search configuration

    Returns:
        (closest point, its parameter t)
    """
    validate_evaluable(spline.num_control_points(), "closest point search")
    to = validate_position(to)
    if math.isnan(accuracy) or accuracy <= 0:
        raise InvalidArgumentError(
            "Accuracy must be positive",
            argument="accuracy",
            value=accuracy
        )
    config = config or ProjectionConfig()

    samples = list(SplineSampler(spline, SamplingParams(max_dist_from_spline=accuracy)))
    idx, s, _ = _closest_edge(samples, to)

    best_t = _edge_t(samples, idx, s)
    best_pt = spline.point_at(best_t)
    best_sqdist = sq_dist(best_pt, to)
    lo_t, hi_t = _bracket(samples, idx)

    tolerance = accuracy
    rounds = 0
    while rounds < config.max_rounds:
        rounds += 1
        prev_dist = math.sqrt(best_sqdist)
        tolerance *= 0.5

        params = SamplingParams(max_dist_from_spline=tolerance,
                                max_dist_between_samples=tolerance)
        samples = list(SplineSampler(spline, params, lo_t, hi_t))
        idx, s, _ = _closest_edge(samples, to)

        t = _edge_t(samples, idx, s)
        pt = spline.point_at(t)
        sqdist = sq_dist(pt, to)
        if sqdist < best_sqdist:
            best_t, best_pt, best_sqdist = t, pt, sqdist
        lo_t, hi_t = _bracket(samples, idx)

        improvement = prev_dist - math.sqrt(best_sqdist)
        if tolerance <= 0.25 * accuracy and improvement < accuracy:
            break

    if config.polish and hi_t > lo_t:
        result = minimize_scalar(
            lambda x: sq_dist(spline.point_at(x), to),
            bounds=(lo_t, hi_t),
            method="bounded",
            options={"xatol": 1e-12}
        )
        t = min(max(float(result.x), 0.0), 1.0)
        pt = spline.point_at(t)
        sqdist = sq_dist(pt, to)
        if sqdist < best_sqdist:
            best_t, best_pt, best_sqdist = t, pt, sqdist

    logger.debug(f"Closest point search: t={best_t:.6g}, "
                 f"dist={math.sqrt(best_sqdist):.6g} after {rounds} refinement rounds")
    return best_pt, best_t
