import logging
import math

import numpy as np
import pytest

from xspline import SampleFlag, SamplingParams, XSpline
from xspline.exceptions import InvalidArgumentError, InvalidStateError
from xspline.utils.geometry import sq_dist, sq_dist_to_line, sq_dist_to_segment


@pytest.mark.parametrize("seed", range(6))
def test_samples_respect_both_tolerances(make_random_spline, seed):
    spline = make_random_spline(seed)
    params = SamplingParams(max_dist_from_spline=0.05, max_dist_between_samples=0.3)
    samples = list(spline.sample(params))

    for a, b in zip(samples, samples[1:]):
        assert sq_dist(a.point, b.point) <= params.max_sqdist_between_samples + 1e-12

        mid = spline.point_at(0.5 * (a.t + b.t))
        assert sq_dist_to_line(mid, a.point, b.point) <= params.max_sqdist_to_spline + 1e-12


@pytest.mark.parametrize("seed", range(6))
def test_curve_between_samples_stays_near_chord(make_random_spline, seed):
    spline = make_random_spline(seed)
    params = SamplingParams(max_dist_from_spline=0.05, max_dist_between_samples=0.3)
    samples = list(spline.sample(params))
    bound = 3.0 * params.max_dist_from_spline

    # Off-midpoint parameters are never looked at by the sampler.
    for a, b in zip(samples, samples[1:]):
        for frac in (0.1, 0.3, 0.45, 0.6, 0.85):
            pt = spline.point_at(a.t + frac * (b.t - a.t))
            assert sq_dist_to_segment(pt, a.point, b.point)[0] <= bound * bound


def test_samples_are_monotonic_and_flagged(make_random_spline):
    spline = make_random_spline(2)
    samples = list(spline.sample(SamplingParams(max_dist_from_spline=0.01)))

    ts = [s.t for s in samples]
    assert all(t0 < t1 for t0, t1 in zip(ts, ts[1:]))

    assert samples[0].flag is SampleFlag.HEAD and samples[0].t == 0.0
    assert samples[-1].flag is SampleFlag.TAIL and samples[-1].t == 1.0
    assert np.allclose(samples[0].point, spline.control_point_position(0))


def test_every_junction_is_sampled(make_random_spline):
    spline = make_random_spline(5, min_points=6, max_points=6)
    # Huge tolerances: only junctions force samples.
    params = SamplingParams(max_dist_from_spline=1e6)
    samples = list(spline.sample(params))

    junction_ts = [s.t for s in samples if s.flag is SampleFlag.JUNCTION]
    expected = [spline.control_point_index_to_t(i) for i in range(1, 5)]
    assert junction_ts == pytest.approx(expected)
    assert len(samples) == 6


def test_sampler_is_lazy_and_restartable(make_arch):
    spline = XSpline()
    sampler = spline.sample()     # Nothing evaluated yet
    with pytest.raises(InvalidStateError):
        list(sampler)

    spline = make_arch(-0.5)
    sampler = spline.sample(SamplingParams(max_dist_from_spline=0.01))
    first = list(sampler)
    second = list(sampler)
    assert len(first) == len(second)
    assert all(np.array_equal(a.point, b.point) and a.t == b.t for a, b in zip(first, second))

    # Each run sees the current control points.
    spline.move_control_point(1, (1.0, 3.0))
    third = list(sampler)
    assert max(s.point[1] for s in third) > max(s.point[1] for s in first)


def test_sub_range(make_random_spline):
    spline = make_random_spline(8)
    samples = list(spline.sample(SamplingParams(max_dist_from_spline=0.02), 0.25, 0.75))

    assert samples[0].t == 0.25
    assert samples[-1].t == 0.75
    assert all(0.25 <= s.t <= 0.75 for s in samples)
    assert np.allclose(samples[0].point, spline.point_at(0.25))


def test_reversed_range_runs_backwards(make_random_spline):
    spline = make_random_spline(8)
    ts = [s.t for s in spline.sample(SamplingParams(max_dist_from_spline=0.02), 0.8, 0.2)]
    assert ts[0] == 0.8 and ts[-1] == 0.2
    assert all(t0 > t1 for t0, t1 in zip(ts, ts[1:]))


def test_empty_range_yields_head_and_tail(make_arch):
    samples = list(make_arch(0.0).sample(None, 0.3, 0.3))
    assert [s.flag for s in samples] == [SampleFlag.HEAD, SampleFlag.TAIL]


def test_tighter_tolerance_gives_more_samples(make_arch):
    spline = make_arch(1.0)
    coarse = spline.to_polyline(SamplingParams(max_dist_from_spline=0.1))
    fine = spline.to_polyline(SamplingParams(max_dist_from_spline=0.001))
    assert len(fine) > len(coarse)
    assert all(isinstance(p, np.ndarray) and p.shape == (2,) for p in fine)


def test_straight_line_needs_no_subdivision():
    spline = XSpline([((0.0, 0.0), -1.0), ((10.0, 0.0), -1.0)])
    assert len(spline.to_polyline()) == 2

    dense = spline.to_polyline(SamplingParams(max_dist_between_samples=1.0))
    gaps = [np.linalg.norm(b - a) for a, b in zip(dense, dense[1:])]
    assert max(gaps) <= 1.0


def test_depth_cap_terminates_and_warns(make_arch, caplog):
    # Tension 0 segments are straight; the arch must actually curve here.
    spline = make_arch(1.0)
    params = SamplingParams(max_dist_from_spline=1e-9, max_depth=3)

    with caplog.at_level(logging.WARNING, logger="xspline.core.sampling"):
        samples = list(spline.sample(params))

    assert len(samples) <= 2 ** 3 + 1
    assert samples[-1].flag is SampleFlag.TAIL
    assert any("depth cap" in record.getMessage() for record in caplog.records)


def test_zero_length_spline_terminates():
    spline = XSpline([((1.0, 1.0), 0.0), ((1.0, 1.0), 1.0), ((1.0, 1.0), -1.0)])
    samples = list(spline.sample(SamplingParams(max_dist_from_spline=1e-6)))
    assert all(np.allclose(s.point, [1.0, 1.0]) for s in samples)


@pytest.mark.parametrize("kwargs", [
    {"max_dist_from_spline": 0.0},
    {"max_dist_from_spline": -1.0},
    {"max_dist_between_samples": math.nan},
    {"max_depth": -1},
])
def test_invalid_sampling_params(kwargs):
    with pytest.raises(InvalidArgumentError):
        SamplingParams(**kwargs)


def test_invalid_range(make_arch):
    with pytest.raises(InvalidArgumentError):
        make_arch(0.0).sample(None, -0.5, 1.0)
