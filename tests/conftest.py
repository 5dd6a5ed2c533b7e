import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from xspline import XSpline


ARCH = [(0.0, 0.0), (1.0, 1.0), (2.0, 0.0)]


@pytest.fixture
def make_arch():
    """Three-point arch (0,0), (1,1), (2,0) with a shared tension"""
    def _make(tension: float = 0.0) -> XSpline:
        return XSpline([(pos, tension) for pos in ARCH])
    return _make


@pytest.fixture
def make_random_spline():
    def _make(seed: int, min_points: int = 3, max_points: int = 8,
              tensions=None) -> XSpline:
        rng = np.random.default_rng(seed)
        n = int(rng.integers(min_points, max_points + 1))
        spline = XSpline()
        for i in range(n):
            pos = (i * 2.0 + rng.uniform(-0.5, 0.5), rng.uniform(-3.0, 3.0))
            tension = rng.uniform(-1.0, 1.0) if tensions is None else tensions
            spline.append_control_point(pos, tension)
        return spline
    return _make


@pytest.fixture
def wave():
    def _make(tension: float) -> XSpline:
        points = [(0.0, 0.0), (2.0, 3.0), (4.0, -1.0), (6.0, 2.0), (8.0, 0.0)]
        return XSpline([(p, tension) for p in points])
    return _make
