import pytest

from quadratic_visualizer.verbal_descriptions import (
    describe_change,
    equation_text,
    format_signed,
    roots_text,
    vertex_form_text,
)


@pytest.mark.parametrize(
    "coeffs, expected",
    [
        ((1, 0, -4), "y = x² + 0x - 4"),
        ((-1, 2.5, 3), "y = -x² + 2.5x + 3"),
        ((0.5, -2, 0), "y = 0.5x² - 2x + 0"),
        ((2, 1e-9, -0.004), "y = 2x² + 0x + 0"),
    ],
)
def test_equation_text(coeffs, expected):
    assert equation_text(*coeffs) == expected


def test_format_signed():
    assert format_signed(-4) == "- 4"
    assert format_signed(1.25) == "+ 1.25"
    assert format_signed(-0.0) == "+ 0"


def test_vertex_form_and_roots_text():
    assert vertex_form_text(1, 0, -4) == "y = 1(x - 0)² + -4"
    assert vertex_form_text(-0.5, 1.234, 2) == "y = -0.5(x - 1.23)² + 2"
    assert roots_text(None) == "None"
    assert roots_text((-2.0, 2.0)) == "[-2, 2]"


def test_describe_a_change():
    assert describe_change("a", 1, 2) == "Increasing |a| makes the parabola narrower."
    assert describe_change("a", 2, 0.5) == "Decreasing |a| makes the parabola wider."
    assert describe_change("a", 1, -3) == "Increasing |a| makes the parabola narrower (flips downward)."
    assert "collapses" in describe_change("a", 1, 0)


def test_describe_b_and_c_changes():
    assert describe_change("b", 0, 1).startswith("Increasing b")
    assert describe_change("b", 1, 0).startswith("Decreasing b")
    assert describe_change("c", 0, 3) == "Changing c shifts the whole parabola up; the y-intercept is now 3."
    assert "down" in describe_change("c", 0, -1.5)


def test_no_description_without_a_change():
    assert describe_change("a", 1, 1) is None
    assert describe_change("d", 1, 2) is None
