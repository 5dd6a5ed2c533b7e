"""
Geometry Utilities

Small 2D helpers shared by the sampler and the closest point search.
Points are float64 numpy arrays of shape (2,).
"""

from typing import Tuple

import numpy as np


def sq_norm(v: np.ndarray) -> float:
    return float(v[0] * v[0] + v[1] * v[1])


def sq_dist(a: np.ndarray, b: np.ndarray) -> float:
    return sq_norm(b - a)


def projection_scalar(pt: np.ndarray, line_p1: np.ndarray, line_p2: np.ndarray) -> float:
    """
    Position of pt's projection along the line p1 -> p2

    Returns 0 for p1, 1 for p2. A degenerate line projects everything to 0.
    """
    direction = line_p2 - line_p1
    denom = sq_norm(direction)
    if denom == 0.0:
        return 0.0
    return float(np.dot(pt - line_p1, direction)) / denom


def projection_point(pt: np.ndarray, line_p1: np.ndarray, line_p2: np.ndarray) -> np.ndarray:
    """Orthogonal projection of pt onto the infinite line through p1 and p2"""
    s = projection_scalar(pt, line_p1, line_p2)
    return line_p1 + s * (line_p2 - line_p1)


def sq_dist_to_line(pt: np.ndarray, line_p1: np.ndarray, line_p2: np.ndarray) -> float:
    """Squared perpendicular distance from pt to the infinite line p1 p2"""
    return sq_dist(pt, projection_point(pt, line_p1, line_p2))


def sq_dist_to_segment(pt: np.ndarray, seg_p1: np.ndarray,
                       seg_p2: np.ndarray) -> Tuple[float, float]:
    """
    Squared distance from pt to the line segment p1 p2

    Returns:
        (squared distance, clamped projection scalar in [0, 1])
    """
    s = min(max(projection_scalar(pt, seg_p1, seg_p2), 0.0), 1.0)
    closest = seg_p1 + s * (seg_p2 - seg_p1)
    return sq_dist(pt, closest), s
