"""
Fittable Spline Interface

The capability set an external least-squares curve fitter relies on. A
fitter is polymorphic over any curve implementing this interface: it reads
and moves control points, expresses curve points as linear combinations of
control points and samples the curve to find correspondences.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, NamedTuple, Optional

import numpy as np

from ..exceptions import InvalidArgumentError, OutOfRangeError, validate_position


class LinearCoefficient(NamedTuple):
    """Weight of one control point in a linear combination"""
    control_point_idx: int
    coeff: float


class FittableSpline(ABC):
    """Interface of a spline that can be fitted to data"""

    @abstractmethod
    def num_control_points(self) -> int:
        pass

    @abstractmethod
    def control_point_position(self, idx: int) -> np.ndarray:
        pass

    @abstractmethod
    def move_control_point(self, idx: int, pos):
        pass

    @abstractmethod
    def linear_combination_at(self, t: float) -> List[LinearCoefficient]:
        """Express the curve point at t as a weighted sum of control points

        The returned coefficients satisfy
        point_at(t) == sum(c.coeff * control_point_position(c.control_point_idx))
        """

    @abstractmethod
    def sample(self, params=None, from_t: float = 0.0, to_t: float = 1.0) -> Iterable:
        """Lazily sample the curve, yielding objects with point and t attributes"""

    def control_point_positions(self) -> np.ndarray:
        """All control point positions as an (n, 2) array"""
        n = self.num_control_points()
        if n == 0:
            return np.zeros((0, 2))
        return np.stack([self.control_point_position(i) for i in range(n)])

    def displace_control_points(self, displacement: np.ndarray,
                                indices: Optional[Iterable[int]] = None):
        """Apply a displacement vector [dx0, dy0, dx1, dy1, ...] to control points

        This is how a fitter commits the solution of a linear system built
        from linear_combination_at() and energy terms. All new positions are
        validated before any control point moves, so a failing call leaves
        the spline unchanged.

        Args:
            displacement: Flat displacement vector, two entries per control point
            indices: Control points to move; all of them if omitted
        """
        displacement = np.asarray(displacement, dtype=np.float64)
        if displacement.ndim != 1 or displacement.size % 2 != 0:
            raise InvalidArgumentError(
                "Displacement must be a flat vector of (dx, dy) pairs",
                argument="displacement",
                value=displacement.shape
            )
        displacement = displacement.reshape(-1, 2)
        if indices is None:
            indices = range(len(displacement))

        moves = []
        for i in indices:
            if not 0 <= i < len(displacement):
                raise OutOfRangeError(
                    f"No displacement for control point {i}",
                    index=i,
                    valid_range=(0, len(displacement))
                )
            moves.append((i, validate_position(self.control_point_position(i) + displacement[i])))

        for i, pos in moves:
            self.move_control_point(i, pos)
