import math

import pytest

from quadratic_visualizer.stats import Coefficients, compute_stats, discriminant


def test_two_real_roots_are_sorted():
    stats = compute_stats(1, 0, -4)
    assert stats.roots == pytest.approx((-2, 2))
    assert stats.vertex == pytest.approx((0, -4))
    assert stats.axis_of_symmetry == pytest.approx(0)
    assert stats.y_intercept == -4
    assert stats.discriminant == 16
    assert stats.vertex_form == "y = 1(x - 0)² + -4"


def test_negative_leading_coefficient_roots_still_sorted():
    stats = compute_stats(-2, 4, 6)
    assert stats.roots == pytest.approx((-1, 3))
    assert stats.vertex == pytest.approx((1, 8))


def test_repeated_root():
    stats = compute_stats(1, 2, 1)
    assert stats.discriminant == 0
    assert stats.roots == pytest.approx((-1,))


def test_no_real_roots():
    stats = compute_stats(1, 0, 4)
    assert stats.discriminant < 0
    assert stats.roots is None


def test_zero_leading_coefficient_stays_finite():
    stats = compute_stats(0, 2, 1)
    h, k = stats.vertex
    assert math.isfinite(h) and math.isfinite(k)
    assert stats.y_intercept == 1


def test_helpers():
    assert discriminant(1, 3, 2) == 1
    assert Coefficients(2, -1, 3).evaluate(2) == 9
