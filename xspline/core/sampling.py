"""
XSpline Adaptive Sampling

Turns a spline into an error-bounded polyline. The parameter range is
bisected until every interval satisfies both tolerances:

  - the curve point at the middle of the interval is close enough to the
    chord joining the interval endpoints (fit error)
  - the chord itself is short enough (sample density)

Junctions (curve points at control point parameters) are always sampled.
Subdivision runs on an explicit work stack with a depth cap, so degenerate
geometry can't blow up the call stack or loop forever.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional, Tuple

import numpy as np

from ..exceptions import InvalidArgumentError, validate_evaluable, validate_parameter
from ..utils.geometry import sq_dist, sq_dist_to_line

logger = logging.getLogger(__name__)


@dataclass
class SamplingParams:
    """Tolerances and safety caps for adaptive sampling

    Distances are given unsquared; comparisons are done on squared values.
    """
    max_dist_from_spline: float = 0.2
    max_dist_between_samples: float = math.inf
    max_depth: int = 32
    min_chord_sqdist: float = 1e-12

    def __post_init__(self):
        for name in ("max_dist_from_spline", "max_dist_between_samples"):
            value = getattr(self, name)
            if math.isnan(value) or value <= 0:
                raise InvalidArgumentError(
                    "Sampling tolerance must be positive",
                    argument=name,
                    value=value
                )
        if self.max_depth < 0:
            raise InvalidArgumentError(
                "Sampling depth cap can't be negative",
                argument="max_depth",
                value=self.max_depth
            )

    @property
    def max_sqdist_to_spline(self) -> float:
        return self.max_dist_from_spline * self.max_dist_from_spline

    @property
    def max_sqdist_between_samples(self) -> float:
        return self.max_dist_between_samples * self.max_dist_between_samples


class SampleFlag(Enum):
    DEFAULT = "default"
    HEAD = "head"           # first sample of a run
    TAIL = "tail"           # last sample of a run
    JUNCTION = "junction"   # curve point at a control point's parameter


class Sample(NamedTuple):
    point: np.ndarray
    t: float
    flag: SampleFlag = SampleFlag.DEFAULT


# (t0, p0, t1, p1, flag of the t1 sample, depth)
_Interval = Tuple[float, np.ndarray, float, np.ndarray, SampleFlag, int]


class SplineSampler:
    """
    Lazy, restartable sequence of samples along a spline

    Every call to iter() starts a fresh run against the spline's current
    control points. Samples are monotonic in t, going from from_t to to_t.
    """

    def __init__(self, spline, params: Optional[SamplingParams] = None,
                 from_t: float = 0.0, to_t: float = 1.0):
        self.spline = spline
        self.params = params or SamplingParams()
        self.from_t = validate_parameter(from_t, "from_t")
        self.to_t = validate_parameter(to_t, "to_t")

    def __iter__(self) -> Iterator[Sample]:
        spline = self.spline
        validate_evaluable(spline.num_control_points(), "sampling")

        from_t, to_t = self.from_t, self.to_t
        from_pt = spline.point_at(from_t)
        to_pt = spline.point_at(to_t)
        yield Sample(from_pt, from_t, SampleFlag.HEAD)

        num_samples = 1
        depth_capped = False
        stack: List[_Interval] = [(from_t, from_pt, to_t, to_pt, SampleFlag.TAIL, 0)]

        while stack:
            t0, p0, t1, p1, flag1, depth = stack.pop()

            split = None
            if depth < self.params.max_depth:
                split = self._split_point(t0, p0, t1, p1)
            elif not depth_capped:
                depth_capped = True
                logger.warning(f"Sampling depth cap of {self.params.max_depth} reached "
                               f"near t={t0:.6g}; tolerances may not be met there")

            if split is None:
                num_samples += 1
                yield Sample(p1, t1, flag1)
                continue

            mid_t, mid_pt, mid_flag = split
            # Right half first so the left half is processed (and emitted) first.
            stack.append((mid_t, mid_pt, t1, p1, flag1, depth + 1))
            stack.append((t0, p0, mid_t, mid_pt, mid_flag, depth + 1))

        logger.debug(f"Sampled {num_samples} points over t=[{from_t:.6g}, {to_t:.6g}]")

    def _split_point(self, t0: float, p0: np.ndarray,
                     t1: float, p1: np.ndarray) -> Optional[Tuple[float, np.ndarray, SampleFlag]]:
        """Where to split [t0, t1], or None if the interval is good enough"""
        spline = self.spline
        num_segments = spline.num_segments()

        mid_t = 0.5 * (t0 + t1)
        junction_t = math.floor(mid_t * num_segments + 0.5) / num_segments

        # A junction strictly inside the interval always becomes a sample.
        if (junction_t - t0) * (t1 - t0) > 0 and (junction_t - t1) * (t0 - t1) > 0:
            return junction_t, spline.point_at(junction_t), SampleFlag.JUNCTION

        chord_sqdist = sq_dist(p0, p1)
        if chord_sqdist < self.params.min_chord_sqdist:
            # Projecting onto such a short chord is numerically meaningless.
            return None

        mid_pt = spline.point_at(mid_t)
        if (chord_sqdist <= self.params.max_sqdist_between_samples
                and sq_dist_to_line(mid_pt, p0, p1) <= self.params.max_sqdist_to_spline):
            return None

        return mid_t, mid_pt, SampleFlag.DEFAULT

    def points(self) -> List[np.ndarray]:
        return [sample.point for sample in self]

    def __repr__(self):
        return (f"SplineSampler(from_t={self.from_t}, to_t={self.to_t}, "
                f"params={self.params})")
