import math

import numpy as np
import pytest

from xspline import XSpline, SamplingParams
from xspline.exceptions import InvalidArgumentError, InvalidStateError


def test_arch_with_corner_tension(make_arch):
    spline = make_arch(0.0)

    assert spline.num_segments() == 2
    assert np.allclose(spline.point_at(0.0), [0.0, 0.0])
    assert np.allclose(spline.point_at(1.0), [2.0, 0.0])

    mid = spline.point_at(0.5)
    assert mid[1] > 0.0
    assert np.allclose(mid, [1.0, 1.0])


def test_approximating_tension_pulls_towards_chord(make_arch):
    corner = make_arch(0.0).point_at(0.5)
    approx = make_arch(1.0).point_at(0.5)

    # Distance to the chord (0,0)-(2,0) is just |y|.
    assert 0.0 < approx[1] < corner[1]
    assert np.allclose(approx, [1.0, 2.0 / 3.0])


def test_interpolating_tension_passes_through_control_point(make_arch):
    spline = make_arch(-1.0)
    assert np.allclose(spline.point_at(0.5), [1.0, 1.0])

    target = np.array([1.0, 1.0])
    for tolerance in (0.5, 0.1, 0.01):
        polyline = spline.to_polyline(SamplingParams(max_dist_from_spline=tolerance))
        closest = min(np.linalg.norm(p - target) for p in polyline)
        assert closest < 1e-9


@pytest.mark.parametrize("tension", [-1.0, -0.5, 0.0, 0.37, 1.0])
def test_curve_passes_through_end_points(make_random_spline, tension):
    for seed in range(5):
        spline = make_random_spline(seed, tensions=tension)
        last = spline.num_control_points() - 1
        assert np.allclose(spline.point_at(0.0), spline.control_point_position(0), atol=1e-9)
        assert np.allclose(spline.point_at(1.0), spline.control_point_position(last), atol=1e-9)


def test_end_points_with_mixed_tensions(make_random_spline):
    for seed in range(10):
        spline = make_random_spline(seed)
        last = spline.num_control_points() - 1
        assert np.allclose(spline.point_at(spline.control_point_index_to_t(0)),
                           spline.control_point_position(0), atol=1e-9)
        assert np.allclose(spline.point_at(spline.control_point_index_to_t(last)),
                           spline.control_point_position(last), atol=1e-9)


def test_non_positive_tension_interpolates_interior_points(make_random_spline):
    for tension in (-1.0, -0.3, 0.0):
        spline = make_random_spline(3, tensions=tension)
        for i in range(spline.num_control_points()):
            t = spline.control_point_index_to_t(i)
            assert np.allclose(spline.point_at(t), spline.control_point_position(i), atol=1e-9)


def test_control_point_index_to_t():
    spline = XSpline([((float(i), 0.0), 0.0) for i in range(5)])
    assert spline.control_point_index_to_t(0) == 0.0
    assert spline.control_point_index_to_t(2) == 0.5
    assert spline.control_point_index_to_t(4) == 1.0


def test_two_point_spline_is_a_straight_line():
    spline = XSpline([((0.0, 0.0), -1.0), ((4.0, 2.0), 1.0)])
    for t in np.linspace(0.0, 1.0, 11):
        pt = spline.point_at(t)
        # On the line y = x / 2
        assert pt[1] == pytest.approx(pt[0] / 2.0, abs=1e-9)


def _interior_ts(spline):
    n = spline.num_segments()
    return [(i + frac) / n for i in range(n) for frac in (0.21, 0.5, 0.83)]


@pytest.mark.parametrize("seed", range(5))
def test_first_derivative_matches_finite_differences(make_random_spline, seed):
    spline = make_random_spline(seed)
    h = 1e-6
    for t in _interior_ts(spline):
        analytic = spline.point_and_derivatives(t).first_deriv
        numeric = (spline.point_at(t + h) - spline.point_at(t - h)) / (2 * h)
        assert np.allclose(analytic, numeric, rtol=1e-4, atol=1e-4)


@pytest.mark.parametrize("seed", range(5))
def test_second_derivative_matches_finite_differences(make_random_spline, seed):
    spline = make_random_spline(seed)
    h = 1e-5
    for t in _interior_ts(spline):
        analytic = spline.point_and_derivatives(t).second_deriv
        numeric = (spline.point_and_derivatives(t + h).first_deriv
                   - spline.point_and_derivatives(t - h).first_deriv) / (2 * h)
        scale = max(1.0, float(np.abs(analytic).max()))
        assert np.allclose(analytic, numeric, rtol=1e-3, atol=1e-3 * scale)


def test_point_and_derivatives_point_matches_point_at(make_random_spline):
    spline = make_random_spline(11)
    for t in np.linspace(0.0, 1.0, 23):
        assert np.allclose(spline.point_and_derivatives(t).point, spline.point_at(t))


def test_signed_curvature_sign(make_arch):
    # Moving right through the top of the arch the curve turns towards -Y.
    spline = make_arch(-1.0)
    assert spline.signed_curvature(0.5) < 0.0

    mirrored = XSpline([((0.0, 0.0), -1.0), ((1.0, -1.0), -1.0), ((2.0, 0.0), -1.0)])
    assert mirrored.signed_curvature(0.5) > 0.0


def test_curvature_of_straight_line_is_zero():
    spline = XSpline([((float(i), 0.0), -1.0) for i in range(4)])
    assert spline.signed_curvature(0.3) == pytest.approx(0.0, abs=1e-12)


def test_curvature_is_nan_at_zero_speed(make_arch):
    # Tension 0 makes a sharp corner: the curve stops at the control point.
    spline = make_arch(0.0)
    derivs = spline.point_and_derivatives(0.5)
    assert np.allclose(derivs.first_deriv, [0.0, 0.0])
    assert math.isnan(derivs.signed_curvature())


def test_evaluation_requires_two_control_points():
    spline = XSpline([((0.0, 0.0), 0.0), ((1.0, 0.0), 0.0)])
    spline.erase_control_point(1)

    with pytest.raises(InvalidStateError):
        spline.point_at(0.5)
    with pytest.raises(InvalidStateError):
        spline.point_and_derivatives(0.5)
    with pytest.raises(InvalidStateError):
        spline.linear_combination_at(0.5)
    with pytest.raises(InvalidStateError):
        spline.control_point_index_to_t(0)
    with pytest.raises(RuntimeError):
        XSpline().point_at(0.0)


@pytest.mark.parametrize("t", [-0.1, 1.1, math.nan])
def test_parameter_outside_unit_range(make_arch, t):
    with pytest.raises(InvalidArgumentError):
        make_arch(0.0).point_at(t)
