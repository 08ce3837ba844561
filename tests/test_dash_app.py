import dash
import pytest

import dash_app
from quadratic_visualizer import config
from quadratic_visualizer import logger as session_log
from quadratic_visualizer.viewport import reset_viewport

CANVAS = {"width": 800, "height": 560, "dpr": 1}


def _session(name):
    return {"session_id": name}


@pytest.fixture(autouse=True)
def no_session_files(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "DATA_DIR", tmp_path)
    monkeypatch.setattr(config, "SESSION_LOG_ENABLED", False)


def test_initial_figure_is_prebuilt():
    assert dash_app._INITIAL_FIGURE is not None
    assert dash_app._INITIAL_FIGURE.layout.width == config.DEFAULT_CANVAS["width"]


def test_plot_waits_for_a_measured_surface():
    assert dash_app._render_plot(config.DEFAULT_PARAMS, None, None, "dark") is dash.no_update
    assert dash_app._render_plot(config.DEFAULT_PARAMS, None, {"width": 0, "height": 0}, "dark") is dash.no_update
    figure = dash_app._render_plot({"a": 1, "b": 0, "c": -4}, reset_viewport().to_dict(), CANVAS, "light")
    assert [trace.name for trace in figure.data].count("Root") == 2


def test_stats_cards():
    equation, vertex, roots, axis, disc, vertex_form = dash_app._render_stats({"a": 1, "b": 0, "c": -4})
    assert equation == "y = x² + 0x - 4"
    assert vertex == "(0, -4)"
    assert roots == "[-2, 2]"
    assert axis == "x = 0"
    assert disc == "16"
    assert vertex_form == "y = 1(x - 0)² + -4"


def test_pointer_drag_updates_gesture_and_viewport():
    viewport = reset_viewport().to_dict()
    gesture, viewport_update, log_update = dash_app._handle_pointer(
        {"type": "pointerdown", "x": 100, "y": 100}, {"state": "idle"}, viewport, CANVAS, None, _session("drag1"), []
    )
    assert gesture == {"state": "panning", "last_x": 100.0, "last_y": 100.0}
    assert viewport_update is dash.no_update
    assert log_update is dash.no_update

    gesture, viewport_update, log_update = dash_app._handle_pointer(
        {"type": "pointermove", "x": 140, "y": 100}, gesture, viewport, CANVAS, None, _session("drag1"), []
    )
    assert gesture["last_x"] == 140.0
    assert (viewport_update["x_min"], viewport_update["x_max"]) == pytest.approx((-11, 9))
    assert log_update[-1].endswith("pan: x=[-11, 9] y=[-10, 10]")


def test_wheel_is_logged_as_zoom():
    _, viewport_update, log_update = dash_app._handle_pointer(
        {"type": "wheel", "x": 400, "y": 280, "deltaY": 100}, None, reset_viewport().to_dict(), CANVAS, None, _session("wheel1"), []
    )
    assert viewport_update["x_max"] == pytest.approx(11)
    assert " zoom: " in log_update[-1]


def test_pointer_events_are_ignored_before_measurement():
    result = dash_app._handle_pointer({"type": "wheel", "x": 1, "y": 1, "deltaY": 1}, None, None, None, None, _session("unmeasured1"), [])
    assert result == (dash.no_update, dash.no_update, dash.no_update)


def test_log_display():
    assert dash_app._render_log_display(None) == "Recent logs will appear here."
    assert dash_app._render_log_display(["#1 a", "#2 b"]) == "Recent logs:\n- #2 b\n- #1 a"


def _component_ids(component):
    ids = set()
    component_id = getattr(component, "id", None)
    if component_id:
        ids.add(component_id)
    children = getattr(component, "children", None)
    if isinstance(children, (list, tuple)):
        for child in children:
            ids |= _component_ids(child)
    elif children is not None and not isinstance(children, str):
        ids |= _component_ids(children)
    return ids


def test_layout_builds_with_every_control():
    ids = _component_ids(dash_app._serve_layout())
    for param in ("a", "b", "c"):
        assert f"slider-{param}" in ids
        assert f"input-{param}" in ids
    assert {"plot-surface", "graph-main", "store-viewport", "store-canvas", "store-pointer"} <= ids
    assert {"btn-reset-view", "btn-toggle-grid", "btn-explain", "ai-feedback", "download-csv"} <= ids


def test_deferred_pan_writes_skip_the_preview(monkeypatch):
    monkeypatch.setattr(config, "LOG_RATE_LIMIT_SECONDS", 60)
    session = _session("burst1")
    state = {"state": "panning", "last_x": 100.0, "last_y": 100.0}
    viewport = reset_viewport().to_dict()
    try:
        state, viewport, first = dash_app._handle_pointer(
            {"type": "pointermove", "x": 110, "y": 100}, state, viewport, CANVAS, None, session, []
        )
        assert len(first) == 1
        state, viewport, second = dash_app._handle_pointer(
            {"type": "pointermove", "x": 120, "y": 100}, state, viewport, CANVAS, None, session, first
        )
        assert second is dash.no_update
        assert viewport["x_min"] == pytest.approx(-10.5)
    finally:
        timer = session_log._THROTTLES["burst1"].timer
        if timer is not None:
            timer.cancel()
