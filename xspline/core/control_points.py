"""
XSpline Control Point Store

Ordered, index-addressed storage of (position, tension) pairs. This is the
only mutable state of a spline; every edit validates its arguments before
touching the sequence so a failed call leaves the store unchanged.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np

from ..exceptions import validate_index, validate_position, validate_tension

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ControlPoint:
    """A control point of an X-Spline

    Tension lies in [-1, 1]:
      - tension < 0 produces interpolating patches
      - tension == 0 produces sharp angle interpolating patches
      - tension > 0 produces approximating patches
    """
    position: np.ndarray = field(default_factory=lambda: np.zeros(2))
    tension: float = 0.0

    def copy(self) -> "ControlPoint":
        return ControlPoint(self.position.copy(), self.tension)

    def __eq__(self, other):
        if not isinstance(other, ControlPoint):
            return NotImplemented
        return (np.array_equal(self.position, other.position)
                and self.tension == other.tension)


class ControlPointStore:
    """Mutable sequence of control points owned by a single spline"""

    def __init__(self, points: Optional[Iterable[Tuple[object, float]]] = None):
        self._points: List[ControlPoint] = []

        if points is not None:
            for pos, tension in points:
                self.append(pos, tension)

    # Structural edits

    def append(self, pos, tension: float):
        point = ControlPoint(validate_position(pos), validate_tension(tension))
        self._points.append(point)
        logger.debug(f"Appended control point #{len(self._points) - 1} "
                     f"at {tuple(point.position)} tension={point.tension}")

    def insert(self, idx: int, pos, tension: float):
        """Insert a control point so that it ends up at position idx

        Control points at idx and after are shifted by one.
        """
        idx = validate_index(idx, len(self._points), allow_end=True)
        point = ControlPoint(validate_position(pos), validate_tension(tension))
        self._points.insert(idx, point)
        logger.debug(f"Inserted control point #{idx} at {tuple(point.position)}")

    def erase(self, idx: int):
        idx = validate_index(idx, len(self._points))
        del self._points[idx]
        logger.debug(f"Erased control point #{idx}, {len(self._points)} left")

    def move(self, idx: int, pos):
        idx = validate_index(idx, len(self._points))
        self._points[idx].position = validate_position(pos)

    def set_tension(self, idx: int, tension: float):
        idx = validate_index(idx, len(self._points))
        self._points[idx].tension = validate_tension(tension)

    # Read accessors

    def position(self, idx: int) -> np.ndarray:
        idx = validate_index(idx, len(self._points))
        return self._points[idx].position.copy()

    def tension(self, idx: int) -> float:
        idx = validate_index(idx, len(self._points))
        return self._points[idx].tension

    def count(self) -> int:
        return len(self._points)

    def positions(self) -> np.ndarray:
        """All positions as an (n, 2) array"""
        if not self._points:
            return np.zeros((0, 2))
        return np.stack([p.position for p in self._points])

    def tensions(self) -> np.ndarray:
        return np.array([p.tension for p in self._points], dtype=np.float64)

    def point_ref(self, idx: int) -> ControlPoint:
        """The stored control point itself, for evaluators on a hot path

        Neither idx nor the result is validated or copied: callers must pass
        an index already known to be in range and must not mutate the result.
        """
        return self._points[idx]

    def copy(self) -> "ControlPointStore":
        other = ControlPointStore()
        other._points = [p.copy() for p in self._points]
        return other

    def swap(self, other: "ControlPointStore"):
        self._points, other._points = other._points, self._points

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[ControlPoint]:
        for point in self._points:
            yield point.copy()

    def __eq__(self, other):
        if not isinstance(other, ControlPointStore):
            return NotImplemented
        return self._points == other._points

    def __repr__(self):
        return f"ControlPointStore(count={len(self._points)})"
