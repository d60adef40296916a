"""Scale engine: linear/band/point mappings and nice tick expansion."""

from __future__ import annotations

import math

import pytest

from donation_charts.charting.scales import (
    linear_scale_for_values,
    make_band_scale,
    make_linear_scale,
    make_point_scale,
    nice_domain,
    tick_values,
)


@pytest.mark.parametrize(
    "domain,rng",
    [
        ((0, 7), (220, 0)),
        ((-3.5, 12.25), (0, 410)),
        ((1e-3, 2e-3), (10, 20)),
        ((100, 100000), (300, 20)),
    ],
)
def test_linear_scale_endpoints_exact(domain, rng):
    scale = make_linear_scale(domain[0], domain[1], rng[0], rng[1])
    assert scale(domain[0]) == rng[0]
    assert scale(domain[1]) == rng[1]


def test_linear_scale_interpolates():
    scale = make_linear_scale(0, 10, 0, 100)
    assert scale(2.5) == pytest.approx(25.0)
    # outside the domain extrapolates
    assert scale(20) == pytest.approx(200.0)


def test_linear_scale_reversed_domain_is_swapped():
    scale = make_linear_scale(10, 0, 0, 100)
    assert scale.domain == (0.0, 10.0)


def test_linear_scale_degenerate_domain_widened():
    scale = make_linear_scale(5, 5, 0, 100)
    assert scale.domain == (5.0, 6.0)
    assert scale(5) == 0
    assert not math.isnan(scale(5.5))


def test_nice_domain_expands_outward():
    assert nice_domain(0, 7) == (0, 7)
    lo, hi = nice_domain(0.3, 96.2)
    assert lo == 0 and hi == 100
    lo, hi = nice_domain(-13, 47)
    assert lo <= -13 and hi >= 47
    assert (lo, hi) == (-15, 50)


def test_nice_linear_scale_for_values_covers_max():
    scale = linear_scale_for_values([3, 7, 2], 220, 0)
    assert scale.domain[0] == 0
    assert scale.domain[1] >= 7
    assert scale(0) == 220


def test_linear_scale_for_values_all_zero_uses_unit_domain():
    scale = linear_scale_for_values([0, 0], 100, 0)
    assert scale.domain == (0.0, 1.0)


def test_linear_scale_for_empty_values_is_midpoint():
    scale = linear_scale_for_values([], 0, 200)
    assert scale.degenerate
    assert scale(0) == 100
    assert scale(1234) == 100
    assert scale.ticks() == []


def test_tick_values_round_steps():
    assert tick_values(0, 10) == list(range(11))
    ticks = tick_values(0, 1)
    assert ticks[0] == 0 and ticks[-1] == 1
    assert len(ticks) == 11
    assert tick_values(3, 3) == [3]


def test_band_scale_slots_are_centered_and_padded():
    band = make_band_scale(["A", "B", "C"], 0, 300, 0.2)
    assert band.step == pytest.approx(100)
    assert band.bandwidth == pytest.approx(80)
    a = band("A")
    assert a.start == pytest.approx(10)
    assert a.width == pytest.approx(80)
    assert band.center("B") == pytest.approx(150)
    c = band("C")
    # last slot ends inside the range with matching padding
    assert 300 - (c.start + c.width) == pytest.approx(a.start)


def test_band_scale_unknown_or_empty_categories_map_to_midpoint():
    band = make_band_scale(["A"], 0, 100, 0.2)
    miss = band("Z")
    assert miss.start == 50 and miss.width == 0
    empty = make_band_scale([], 0, 100, 0.2)
    assert empty.step == 0
    assert empty("A").start == 50


def test_point_scale_spacing():
    pts = make_point_scale(["Jan", "Feb", "Mar", "Apr", "May"], 0, 400)
    assert [pts.at(i) for i in range(5)] == [0, 100, 200, 300, 400]
    assert pts("Mar") == 200


def test_point_scale_single_category_midpoint():
    pts = make_point_scale(["only"], 0, 400)
    assert pts.at(0) == 200
    assert make_point_scale([], 0, 400)("x") == 200
