import pytest

from quadratic_visualizer.renderer import (
    DARK_THEME,
    LIGHT_THEME,
    Circle,
    FillRect,
    LineSet,
    Polyline,
    Text,
    commands_with_role,
    get_theme,
    render,
)
from quadratic_visualizer.stats import Coefficients, compute_stats
from quadratic_visualizer.viewport import CanvasSize, Viewport, reset_viewport, screen_to_world, toggle_grid

CANVAS = CanvasSize(800, 560)

LAYER_ORDER = ["background", "grid", "axis", "tick", "label", "curve", "symmetry", "vertex", "y_intercept", "root"]


def _render(a, b, c, viewport=None, theme=DARK_THEME):
    viewport = viewport or reset_viewport()
    return render(Coefficients(a, b, c), compute_stats(a, b, c), viewport, CANVAS, theme)


def test_root_annotations_for_two_real_roots():
    viewport = reset_viewport()
    commands = _render(1, 0, -4, viewport)
    roots = commands_with_role(commands, "root")
    assert len(roots) == 2
    xs = sorted(screen_to_world(viewport, CANVAS, c.center.x, c.center.y)[0] for c in roots)
    assert xs == pytest.approx([-2, 2])
    assert sorted(c.world[0] for c in roots) == pytest.approx([-2, 2])

    (vertex,) = commands_with_role(commands, "vertex")
    assert vertex.world == pytest.approx((0, -4))
    (intercept,) = commands_with_role(commands, "y_intercept")
    assert intercept.world == pytest.approx((0, -4))
    assert vertex.radius > intercept.radius


def test_no_root_annotations_without_real_roots():
    commands = _render(1, 0, 4)
    assert commands_with_role(commands, "root") == []
    assert len(commands_with_role(commands, "vertex")) == 1


def test_layers_are_emitted_in_paint_order():
    commands = _render(1, 0, -4)
    first_seen = []
    for cmd in commands:
        if cmd.role not in first_seen:
            first_seen.append(cmd.role)
    assert first_seen == LAYER_ORDER
    positions = {role: [i for i, cmd in enumerate(commands) if cmd.role == role] for role in LAYER_ORDER}
    for earlier, later in zip(LAYER_ORDER, LAYER_ORDER[1:]):
        assert max(positions[earlier]) < min(positions[later])


def test_background_and_grid():
    commands = _render(1, 0, 0)
    background = commands[0]
    assert isinstance(background, FillRect)
    assert (background.width, background.height, background.color) == (800, 560, DARK_THEME.background)
    (grid,) = commands_with_role(commands, "grid")
    assert isinstance(grid, LineSet)
    # step 2 over [-10, 10] on both axes: 11 vertical + 11 horizontal lines
    assert len(grid.segments) == 22


def test_grid_is_skipped_when_disabled():
    commands = _render(1, 0, 0, toggle_grid(reset_viewport()))
    assert commands_with_role(commands, "grid") == []


def test_axes_span_the_canvas_even_when_origin_is_off_screen():
    viewport = Viewport(5, 25, 5, 25)
    (axes,) = commands_with_role(_render(1, 0, 0, viewport), "axis")
    horizontal, vertical = axes.segments
    assert horizontal[0].x == 0 and horizontal[1].x == 800
    assert horizontal[0].y == pytest.approx(horizontal[1].y) == pytest.approx(560 * 1.25)
    assert vertical[0].x == pytest.approx(-200)
    assert (vertical[0].y, vertical[1].y) == (0, 560)


def test_labels_skip_zero_and_share_one_origin_label():
    labels = [cmd for cmd in _render(1, 0, 0) if isinstance(cmd, Text)]
    texts = [label.text for label in labels]
    assert texts.count("0") == 1
    assert len(labels) == 10 + 10 + 1
    assert "-10" in texts and "10" in texts and "2" in texts
    (ticks,) = commands_with_role(_render(1, 0, 0), "tick")
    assert len(ticks.segments) == 20


def test_large_tick_values_use_exponential_labels():
    viewport = Viewport(-50000, 50000, -10, 10)
    texts = [cmd.text for cmd in _render(1, 0, 0, viewport) if isinstance(cmd, Text)]
    assert "1.0e+04" in texts
    assert "-5.0e+04" in texts


def test_curve_and_symmetry_line():
    commands = _render(1, -4, 0)
    curves = commands_with_role(commands, "curve")
    assert curves and all(isinstance(c, Polyline) for c in curves)
    assert all(c.color == DARK_THEME.curve and c.width == DARK_THEME.curve_width for c in curves)
    (symmetry,) = commands_with_role(commands, "symmetry")
    assert symmetry.dash == (5, 5)
    ((top, bottom),) = symmetry.segments
    assert top.x == bottom.x == pytest.approx(480)
    assert (top.y, bottom.y) == (0, 560)


def test_markers_are_outlined_circles():
    markers = [cmd for cmd in _render(1, 0, -4) if isinstance(cmd, Circle)]
    assert len(markers) == 4
    assert all(m.outline == DARK_THEME.outline and m.outline_width > 0 for m in markers)


def test_theme_only_changes_colours():
    dark = _render(1, 0, -4, theme=DARK_THEME)
    light = _render(1, 0, -4, theme=LIGHT_THEME)
    assert [c.role for c in dark] == [c.role for c in light]
    assert dark[0].color != light[0].color
    assert get_theme("light") is LIGHT_THEME
    assert get_theme("unknown") is DARK_THEME
    assert get_theme(None) is DARK_THEME


def test_undrawable_canvas_skips_the_frame():
    stats = compute_stats(1, 0, 0)
    assert render(Coefficients(1, 0, 0), stats, reset_viewport(), CanvasSize(0, 0)) == []


def test_fine_zoom_keeps_neighbouring_labels_distinct():
    viewport = Viewport(4.95e-5, 5.05e-5, -10, 10)
    x_labels = [cmd.text for cmd in _render(1, 0, 0, viewport) if isinstance(cmd, Text) and cmd.baseline == "top" and cmd.align == "center"]
    assert len(x_labels) >= 10
    assert len(set(x_labels)) == len(x_labels)
    assert "0.00005" in x_labels
