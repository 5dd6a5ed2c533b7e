"""
XSpline Energy Functions

Quadratic regularisation terms for curve fitting, expressed symbolically
over the vector of control point displacements

    x = [dx0, dy0, dx1, dy1, ...]

so that an optimizer can add them to its other quadratic terms and solve
for the displacements without re-evaluating the curve.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from ..exceptions import InvalidArgumentError, OutOfRangeError

logger = logging.getLogger(__name__)


class QuadraticFunction:
    """
    f(x) = x^T A x + b^T x + c

    A plain value type: forms of the same dimension combine with + and +=.
    """

    def __init__(self, num_vars: int = 0, A: Optional[np.ndarray] = None,
                 b: Optional[np.ndarray] = None, c: float = 0.0):
        self.A = np.zeros((num_vars, num_vars)) if A is None else np.array(A, dtype=np.float64)
        self.b = np.zeros(num_vars) if b is None else np.array(b, dtype=np.float64)
        self.c = float(c)

        n = self.b.shape[0]
        if self.A.shape != (n, n):
            raise InvalidArgumentError(
                f"Matrix shape {self.A.shape} doesn't match vector length {n}",
                argument="A"
            )

    @property
    def num_vars(self) -> int:
        return self.b.shape[0]

    def reset(self):
        """Make this the zero function, keeping the dimension"""
        self.A.fill(0.0)
        self.b.fill(0.0)
        self.c = 0.0

    def evaluate(self, x) -> float:
        x = self._check_vector(x)
        return float(x @ self.A @ x + self.b @ x + self.c)

    def gradient(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Gradient as an affine function of x

        Returns:
            (M, v) such that grad f(x) = M x + v, i.e. (A + A^T, b)
        """
        return self.A + self.A.T, self.b.copy()

    def recalc_for_translated_arguments(self, translation) -> "QuadraticFunction":
        """
        Rewrite f in place so that new_f(x) == old_f(x + translation)

        Useful when the optimizer moves control points and wants to keep
        the same energy expressed around the new positions.
        """
        d = self._check_vector(translation)
        # (x + d)^T A (x + d) = x^T A x + (A d + A^T d)^T x + d^T A d
        self.c += float(d @ self.A @ d + self.b @ d)
        self.b = self.b + (self.A + self.A.T) @ d
        return self

    def copy(self) -> "QuadraticFunction":
        return QuadraticFunction(A=self.A.copy(), b=self.b.copy(), c=self.c)

    def _check_vector(self, x) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64).reshape(-1)
        if x.shape[0] != self.num_vars:
            raise InvalidArgumentError(
                f"Expected a vector of {self.num_vars} values, got {x.shape[0]}",
                argument="x"
            )
        return x

    def _check_compatible(self, other: "QuadraticFunction"):
        if other.num_vars != self.num_vars:
            raise InvalidArgumentError(
                f"Can't combine functions of {self.num_vars} and {other.num_vars} variables",
                argument="other"
            )

    def __iadd__(self, other):
        if not isinstance(other, QuadraticFunction):
            return NotImplemented
        self._check_compatible(other)
        self.A += other.A
        self.b += other.b
        self.c += other.c
        return self

    def __add__(self, other):
        if not isinstance(other, QuadraticFunction):
            return NotImplemented
        result = self.copy()
        result += other
        return result

    def __mul__(self, scalar):
        if not isinstance(scalar, (int, float, np.floating, np.integer)):
            return NotImplemented
        return QuadraticFunction(A=self.A * scalar, b=self.b * scalar, c=self.c * scalar)

    __rmul__ = __mul__

    def __repr__(self):
        return f"QuadraticFunction(num_vars={self.num_vars}, c={self.c:.6g})"


class LinearFunction:
    """f(x) = a^T x + b, used to build quadratic forms by squaring"""

    def __init__(self, num_vars: int = 0, a: Optional[np.ndarray] = None, b: float = 0.0):
        self.a = np.zeros(num_vars) if a is None else np.array(a, dtype=np.float64)
        self.b = float(b)

    @classmethod
    def variable(cls, num_vars: int, idx: int, value: float) -> "LinearFunction":
        """The function value + x[idx], i.e. a coordinate plus its displacement"""
        f = cls(num_vars, b=value)
        f.a[idx] = 1.0
        return f

    @property
    def num_vars(self) -> int:
        return self.a.shape[0]

    def evaluate(self, x) -> float:
        return float(self.a @ np.asarray(x, dtype=np.float64) + self.b)

    def squared(self) -> QuadraticFunction:
        # (a.x + b)^2 = x^T (a a^T) x + 2b a.x + b^2
        return QuadraticFunction(A=np.outer(self.a, self.a), b=2.0 * self.b * self.a,
                                 c=self.b * self.b)

    def __add__(self, other):
        if not isinstance(other, LinearFunction):
            return NotImplemented
        return LinearFunction(a=self.a + other.a, b=self.b + other.b)

    def __sub__(self, other):
        if not isinstance(other, LinearFunction):
            return NotImplemented
        return LinearFunction(a=self.a - other.a, b=self.b - other.b)

    def __mul__(self, scalar):
        if not isinstance(scalar, (int, float, np.floating, np.integer)):
            return NotImplemented
        return LinearFunction(a=self.a * scalar, b=self.b * scalar)

    __rmul__ = __mul__


def _segment_range(spline, seg_begin: Optional[int], seg_end: Optional[int]) -> Tuple[int, int]:
    num_segments = spline.num_segments()
    if seg_begin is None:
        seg_begin = 0
    if seg_end is None:
        seg_end = num_segments

    if not (0 <= seg_begin <= seg_end <= num_segments):
        raise OutOfRangeError(
            f"Invalid segment range [{seg_begin}, {seg_end})",
            valid_range=(0, num_segments)
        )
    return seg_begin, seg_end


def _point_function(num_vars: int, idx: int, pos: np.ndarray) -> Tuple[LinearFunction, LinearFunction]:
    return (LinearFunction.variable(num_vars, 2 * idx, pos[0]),
            LinearFunction.variable(num_vars, 2 * idx + 1, pos[1]))


def _junction_function(spline, num_vars: int, idx: int) -> Tuple[LinearFunction, LinearFunction]:
    x = LinearFunction(num_vars)
    y = LinearFunction(num_vars)
    for coeff in spline.linear_combination_at(spline.control_point_index_to_t(idx)):
        cp_x, cp_y = _point_function(num_vars, coeff.control_point_idx,
                                     spline.control_point_position(coeff.control_point_idx))
        x = x + cp_x * coeff.coeff
        y = y + cp_y * coeff.coeff
    return x, y


def _attraction_force(spline, seg_begin, seg_end, point_function) -> QuadraticFunction:
    seg_begin, seg_end = _segment_range(spline, seg_begin, seg_end)
    num_vars = 2 * spline.num_control_points()

    force = QuadraticFunction(num_vars)
    if seg_begin == seg_end:
        return force

    prev_x, prev_y = point_function(seg_begin)
    for i in range(seg_begin + 1, seg_end + 1):
        next_x, next_y = point_function(i)
        force += (next_x - prev_x).squared()
        force += (next_y - prev_y).squared()
        prev_x, prev_y = next_x, next_y

    return force


def control_points_attraction_force(spline, seg_begin: Optional[int] = None,
                                    seg_end: Optional[int] = None) -> QuadraticFunction:
    """
    sum(|(cp[i] + d[i]) - (cp[i-1] + d[i-1])|^2) over segments [seg_begin, seg_end)

    Args:
        spline: Spline providing control points
        seg_begin: First segment, defaults to 0
        seg_end: One past the last segment, defaults to num_segments

    Returns:
        QuadraticFunction of the control point displacements
    """
    num_vars = 2 * spline.num_control_points()
    force = _attraction_force(
        spline, seg_begin, seg_end,
        lambda i: _point_function(num_vars, i, spline.control_point_position(i))
    )
    logger.debug(f"Built control point attraction force over {num_vars} variables")
    return force


def junction_points_attraction_force(spline, seg_begin: Optional[int] = None,
                                     seg_end: Optional[int] = None) -> QuadraticFunction:
    """
    Same as control_points_attraction_force(), but over the curve points at
    control point parameters. A displacement reaches these points through
    the blend weights, which is what the returned function captures.
    """
    num_vars = 2 * spline.num_control_points()
    force = _attraction_force(
        spline, seg_begin, seg_end,
        lambda i: _junction_function(spline, num_vars, i)
    )
    logger.debug(f"Built junction point attraction force over {num_vars} variables")
    return force
