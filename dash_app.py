"""Dash front end for the Quadratic Visualizer."""

from __future__ import annotations

import base64
import logging
import uuid
from typing import Any, Dict, List, Optional

import dash
from dash import Input, Output, State, dcc, html

from quadratic_visualizer import config
from quadratic_visualizer import logger as session_log
from quadratic_visualizer.graph_engine import build_figure
from quadratic_visualizer.interaction import (
    Idle,
    PointerMove,
    Wheel,
    event_from_dict,
    handle_event,
    state_from_dict,
    state_to_dict,
)
from quadratic_visualizer.logging_config import setup_logging
from quadratic_visualizer.narration import (
    EXPLANATION_FALLBACK,
    FEEDBACK_FALLBACK,
    NarrationError,
    NarrationService,
)
from quadratic_visualizer.quiz import QuizState, check_quiz, new_root_quiz, new_vertex_quiz, quiz_hint, randomize_coefficients
from quadratic_visualizer.renderer import get_theme, render
from quadratic_visualizer.stats import Coefficients, compute_stats
from quadratic_visualizer.ui_components import (
    PANEL_STYLE,
    action_button,
    button_grid,
    info_card,
    message_box,
    param_control_row,
)
from quadratic_visualizer.verbal_descriptions import describe_change, equation_text, roots_text, short
from quadratic_visualizer.viewport import CanvasSize, Viewport, reset_viewport, toggle_grid

setup_logging(config.LOG_LEVEL, config.LOG_FILE)
logger = logging.getLogger("quadratic_visualizer.dash_app")

_PARAMS = ("a", "b", "c")
_DEFAULT_CANVAS = CanvasSize(config.DEFAULT_CANVAS["width"], config.DEFAULT_CANVAS["height"], config.DEFAULT_CANVAS["dpr"])
_NARRATION = NarrationService()

_SURFACE_STYLE: Dict[str, Any] = {
    "position": "relative",
    "width": "100%",
    "height": f"{config.PLOT_HEIGHT_PX}px",
    "borderRadius": "8px",
    "overflow": "hidden",
    "cursor": "grab",
    "touchAction": "none",
    "backgroundColor": config.THEME_COLORS["dark"]["background"],
}
_HINT_STYLE: Dict[str, Any] = {
    "position": "absolute",
    "top": "8px",
    "right": "8px",
    "fontSize": "10px",
    "color": "#6b7280",
    "opacity": 0.6,
    "pointerEvents": "none",
}


def _coerce_float(value: Any) -> Optional[float]:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if num == num else None


def _get_session_id(session_data: Optional[Dict[str, Any]]) -> str:
    if isinstance(session_data, dict):
        return session_log.safe_session_id(session_data.get("session_id"))
    return "unknown"


def _coefficients(data: Optional[Dict[str, Any]]) -> Coefficients:
    params = session_log.normalize_params(data)
    return Coefficients(params["a"], params["b"], params["c"])


def _log(
    session_data: Optional[Dict[str, Any]],
    log_store_data: Any,
    *,
    event: str,
    throttled: bool = False,
    **fields: Any,
) -> Any:
    record = session_log.build_record(_get_session_id(session_data), event=event, **fields)
    if throttled:
        if not session_log.write_throttled(record):
            # Deferred records reach the file later; the preview skips them.
            return dash.no_update
    else:
        session_log.write_record(record)
    return session_log.append_preview(log_store_data, session_log.preview_line(record))


def _draw(coeff_data, viewport_data, canvas_data, theme_name):
    canvas = CanvasSize.from_dict(canvas_data)
    if canvas is None or not canvas.is_drawable:
        return None
    coefficients = _coefficients(coeff_data)
    stats = compute_stats(coefficients.a, coefficients.b, coefficients.c)
    viewport = Viewport.from_dict(viewport_data)
    commands = render(coefficients, stats, viewport, canvas, get_theme(theme_name))
    return build_figure(commands, canvas)


_INITIAL_FIGURE = _draw(config.DEFAULT_PARAMS, config.DEFAULT_VIEWPORT, _DEFAULT_CANVAS.to_dict(), config.DEFAULT_THEME)


app = dash.Dash(__name__, title="Quadratic Function Visualizer")
server = app.server


def _controls_panel() -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.Div("Equation", style={"fontSize": "0.75rem", "color": "#9ca3af"}),
                    html.Div(id="equation-text", style={"fontFamily": "monospace", "fontSize": "1.1rem", "fontWeight": 700}),
                ],
                style={"backgroundColor": "#2c313a", "padding": "12px", "borderRadius": "8px"},
            ),
            *[param_control_row(param) for param in _PARAMS],
            html.Div(id="change-description", style={"fontSize": "0.8rem", "color": "#9ca3af", "minHeight": "1.2em"}),
            html.Div(
                [
                    info_card("Vertex (h, k)", "card-vertex"),
                    info_card("Roots", "card-roots"),
                    info_card("Axis of Symmetry", "card-axis"),
                    info_card("Discriminant (Δ)", "card-discriminant"),
                    info_card("Vertex Form", "card-vertex-form", full_width=True),
                ],
                style={"display": "grid", "gridTemplateColumns": "1fr 1fr", "gap": "8px"},
            ),
            button_grid(
                action_button("Explain", "btn-explain", title="Spoken explanation of the current parabola"),
                action_button("Reset View", "btn-reset-view"),
                action_button("Toggle Grid", "btn-toggle-grid"),
                action_button("Randomize", "btn-randomize"),
                columns=4,
            ),
            html.Div(id="narration-status", style={"fontSize": "0.75rem", "color": "#9ca3af"}),
            html.Audio(id="narration-audio", autoPlay=True, controls=False),
            dcc.RadioItems(
                id="theme-choice",
                options=[{"label": "Dark", "value": "dark"}, {"label": "Light", "value": "light"}],
                value=config.DEFAULT_THEME,
                inline=True,
                inputStyle={"marginRight": "4px", "marginLeft": "8px"},
                style={"fontSize": "0.8rem"},
            ),
            html.Hr(style={"borderColor": "#374151", "width": "100%"}),
            html.H3("Quiz Mode", style={"fontSize": "0.9rem", "margin": 0}),
            button_grid(
                action_button("Set Vertex", "btn-quiz-vertex"),
                action_button("Set Root", "btn-quiz-root"),
            ),
            message_box("quiz-message", QuizState().message),
            button_grid(
                action_button("Hint", "btn-quiz-hint"),
                action_button("Check", "btn-quiz-check", accent="#0891b2"),
            ),
            html.Hr(style={"borderColor": "#374151", "width": "100%"}),
            html.H3("AI-Powered Learning Assistant", style={"fontSize": "0.9rem", "margin": 0}),
            html.P(
                "Receive personalized feedback based on your current graph and recent changes.",
                style={"fontSize": "0.75rem", "color": "#9ca3af", "margin": 0},
            ),
            action_button("Get AI Feedback", "btn-ai-feedback", accent="#f97316"),
            dcc.Loading(message_box("ai-feedback"), type="dot"),
        ],
        style=PANEL_STYLE,
    )


def _serve_layout() -> html.Div:
    graph_column = html.Div(
        [
            html.Div(
                [
                    dcc.Graph(
                        id="graph-main",
                        figure=_INITIAL_FIGURE,
                        config={
                            "displaylogo": False,
                            "displayModeBar": False,
                            "scrollZoom": False,
                            "doubleClick": False,
                        },
                        style={"width": "100%", "height": "100%"},
                    ),
                    html.Div("Scroll to zoom • Drag to pan", style=_HINT_STYLE),
                ],
                id="plot-surface",
                style=_SURFACE_STYLE,
            ),
            dcc.Markdown(
                "Recent logs will appear here.",
                id="log-display",
                style={"marginTop": "16px", "fontSize": "0.8rem", "color": "#9ca3af"},
            ),
            html.Button("Download CSV", id="btn-download-csv", n_clicks=0),
            dcc.Download(id="download-csv"),
        ],
        style={"flex": "1", "minWidth": "320px"},
    )

    return html.Div(
        [
            dcc.Store(id="store-session", storage_type="local", data={"session_id": uuid.uuid4().hex}),
            dcc.Store(id="store-coeffs", data=dict(config.DEFAULT_PARAMS)),
            dcc.Store(id="store-prev-coeffs", data=None),
            dcc.Store(id="store-viewport", data=reset_viewport().to_dict()),
            dcc.Store(id="store-gesture", data=state_to_dict(Idle())),
            dcc.Store(id="store-canvas", data=None),
            dcc.Store(id="store-pointer", data=None),
            dcc.Store(id="store-quiz", data=QuizState().to_dict()),
            dcc.Store(id="store-log-sink", data=[]),
            html.Header(
                [
                    html.H1(
                        "Quadratic Function Visualizer",
                        style={"color": "#fb923c", "fontSize": "1.5rem", "margin": 0},
                    ),
                    html.P(
                        "Interactively explore y = ax² + bx + c: move sliders, view roots, vertex, and more.",
                        style={"color": "#9ca3af", "fontSize": "0.9rem", "margin": 0},
                    ),
                ],
                style={"marginBottom": "16px"},
            ),
            html.Main(
                [graph_column, html.Aside(_controls_panel(), style={"width": "400px"})],
                style={"display": "flex", "gap": "16px", "flexWrap": "wrap"},
            ),
        ],
        style={
            "minHeight": "100vh",
            "backgroundColor": "#282c34",
            "color": "#e5e7eb",
            "padding": "16px",
            "fontFamily": "Inter, sans-serif",
        },
    )


app.layout = _serve_layout


# Measures the plot surface and wires pointer, wheel and resize listeners once.
# Pointer moves are coalesced to one per animation frame before reaching the server.
app.clientside_callback(
    """
    function(surfaceId) {
        const surface = document.getElementById(surfaceId);
        if (!surface) {
            return window.dash_clientside.no_update;
        }
        const measure = function() {
            const rect = surface.getBoundingClientRect();
            return {width: rect.width, height: rect.height, dpr: window.devicePixelRatio || 1};
        };
        if (!window.__plotSurfaceAttached) {
            window.__plotSurfaceAttached = true;
            const setProps = window.dash_clientside.set_props;
            const local = function(event) {
                const rect = surface.getBoundingClientRect();
                return {x: event.clientX - rect.left, y: event.clientY - rect.top};
            };
            const send = function(payload) {
                payload.t = Date.now();
                setProps("store-pointer", {data: payload});
            };
            let panning = false;
            let pendingMove = null;
            surface.addEventListener("pointerdown", function(event) {
                if (event.button !== undefined && event.button !== 0) {
                    return;
                }
                panning = true;
                surface.style.cursor = "grabbing";
                const p = local(event);
                send({type: "pointerdown", x: p.x, y: p.y});
            });
            surface.addEventListener("pointermove", function(event) {
                if (!panning) {
                    return;
                }
                if (pendingMove === null) {
                    window.requestAnimationFrame(function() {
                        const move = pendingMove;
                        pendingMove = null;
                        if (move && panning) {
                            send({type: "pointermove", x: move.x, y: move.y});
                        }
                    });
                }
                pendingMove = local(event);
            });
            const finish = function(type) {
                return function(event) {
                    if (!panning) {
                        return;
                    }
                    panning = false;
                    pendingMove = null;
                    surface.style.cursor = "grab";
                    const p = local(event);
                    send({type: type, x: p.x, y: p.y});
                };
            };
            surface.addEventListener("pointerup", finish("pointerup"));
            surface.addEventListener("pointerleave", finish("pointerleave"));
            surface.addEventListener("wheel", function(event) {
                event.preventDefault();
                const p = local(event);
                send({type: "wheel", x: p.x, y: p.y, deltaY: event.deltaY});
            }, {passive: false});
            window.addEventListener("resize", function() {
                setProps("store-canvas", {data: measure()});
            });
        }
        return measure();
    }
    """,
    Output("store-canvas", "data"),
    Input("plot-surface", "id"),
)


@app.callback(
    [
        Output("slider-a", "value"),
        Output("slider-b", "value"),
        Output("slider-c", "value"),
        Output("input-a", "value"),
        Output("input-b", "value"),
        Output("input-c", "value"),
        Output("store-coeffs", "data"),
        Output("store-prev-coeffs", "data"),
        Output("change-description", "children"),
        Output("store-log-sink", "data", allow_duplicate=True),
    ],
    [
        Input("slider-a", "value"),
        Input("slider-b", "value"),
        Input("slider-c", "value"),
        Input("input-a", "value"),
        Input("input-b", "value"),
        Input("input-c", "value"),
        Input("btn-randomize", "n_clicks"),
    ],
    [
        State("store-coeffs", "data"),
        State("store-session", "data"),
        State("store-log-sink", "data"),
    ],
    prevent_initial_call=True,
)
def _sync_coefficients(a_slider, b_slider, c_slider, a_input, b_input, c_input, randomize_clicks, coeff_data, session_data, log_store_data):
    no_change = tuple(dash.no_update for _ in range(10))
    ctx = dash.callback_context
    if not ctx.triggered:
        return no_change
    trigger_id = ctx.triggered[0]["prop_id"].split(".")[0]
    old = session_log.normalize_params(coeff_data)
    new = dict(old)
    source = "slider"
    if trigger_id == "btn-randomize":
        new = session_log.normalize_params(randomize_coefficients())
        source = "randomize"
    else:
        raw_values = {
            "slider-a": a_slider,
            "slider-b": b_slider,
            "slider-c": c_slider,
            "input-a": a_input,
            "input-b": b_input,
            "input-c": c_input,
        }
        value = _coerce_float(raw_values.get(trigger_id))
        if value is None:
            return no_change
        param = trigger_id.split("-")[1]
        new[param] = session_log.normalize_param_value(param, value)
        source = trigger_id.split("-")[0]

    changed = [p for p in _PARAMS if new[p] != old[p]]
    entries = log_store_data
    log_update = dash.no_update
    for param in changed:
        updated = _log(
            session_data,
            entries,
            event="param_change",
            throttled=source == "slider",
            params=new,
            source=source,
            extras={"param_name": param, "old_value": old[param], "new_value": new[param]},
        )
        if updated is not dash.no_update:
            entries = log_update = updated
    description = dash.no_update
    if len(changed) == 1:
        description = describe_change(changed[0], old[changed[0]], new[changed[0]]) or ""
    elif changed:
        description = ""

    values = [new[p] for p in _PARAMS]
    return (*values, *values, new, old if changed else dash.no_update, description, log_update)


@app.callback(
    [
        Output("equation-text", "children"),
        Output("card-vertex", "children"),
        Output("card-roots", "children"),
        Output("card-axis", "children"),
        Output("card-discriminant", "children"),
        Output("card-vertex-form", "children"),
    ],
    Input("store-coeffs", "data"),
)
def _render_stats(coeff_data):
    coefficients = _coefficients(coeff_data)
    stats = compute_stats(coefficients.a, coefficients.b, coefficients.c)
    h, k = stats.vertex
    return (
        equation_text(coefficients.a, coefficients.b, coefficients.c),
        f"({short(h)}, {short(k)})",
        roots_text(stats.roots),
        f"x = {short(stats.axis_of_symmetry)}",
        short(stats.discriminant),
        stats.vertex_form,
    )


@app.callback(
    Output("graph-main", "figure"),
    [
        Input("store-coeffs", "data"),
        Input("store-viewport", "data"),
        Input("store-canvas", "data"),
        Input("theme-choice", "value"),
    ],
)
def _render_plot(coeff_data, viewport_data, canvas_data, theme_name):
    figure = _draw(coeff_data, viewport_data, canvas_data, theme_name)
    if figure is None:
        # Surface not measured yet; the next resize or store update redraws.
        return dash.no_update
    return figure


@app.callback(
    [
        Output("store-gesture", "data"),
        Output("store-viewport", "data", allow_duplicate=True),
        Output("store-log-sink", "data", allow_duplicate=True),
    ],
    Input("store-pointer", "data"),
    [
        State("store-gesture", "data"),
        State("store-viewport", "data"),
        State("store-canvas", "data"),
        State("store-coeffs", "data"),
        State("store-session", "data"),
        State("store-log-sink", "data"),
    ],
    prevent_initial_call=True,
)
def _handle_pointer(event_data, gesture_data, viewport_data, canvas_data, coeff_data, session_data, log_store_data):
    event = event_from_dict(event_data)
    canvas = CanvasSize.from_dict(canvas_data)
    if event is None or canvas is None or not canvas.is_drawable:
        return dash.no_update, dash.no_update, dash.no_update
    state = state_from_dict(gesture_data)
    viewport = Viewport.from_dict(viewport_data)
    new_state, new_viewport = handle_event(state, viewport, event, canvas)

    log_update = dash.no_update
    if new_viewport != viewport:
        kind = "zoom" if isinstance(event, Wheel) else "pan"
        log_update = _log(
            session_data,
            log_store_data,
            event=kind,
            throttled=True,
            params=session_log.normalize_params(coeff_data),
            viewport=new_viewport.to_dict(),
            source="wheel" if kind == "zoom" else "drag",
        )
    viewport_update = new_viewport.to_dict() if new_viewport != viewport else dash.no_update
    gesture_update = state_to_dict(new_state)
    if not isinstance(event, PointerMove):
        logger.debug("Gesture %s -> %s on %s", type(state).__name__, type(new_state).__name__, type(event).__name__)
    return gesture_update, viewport_update, log_update


@app.callback(
    [
        Output("store-viewport", "data", allow_duplicate=True),
        Output("store-gesture", "data", allow_duplicate=True),
        Output("store-log-sink", "data", allow_duplicate=True),
    ],
    [
        Input("btn-reset-view", "n_clicks"),
        Input("btn-toggle-grid", "n_clicks"),
    ],
    [
        State("store-viewport", "data"),
        State("store-session", "data"),
        State("store-log-sink", "data"),
    ],
    prevent_initial_call=True,
)
def _handle_view_buttons(reset_clicks, grid_clicks, viewport_data, session_data, log_store_data):
    ctx = dash.callback_context
    if not ctx.triggered:
        return dash.no_update, dash.no_update, dash.no_update
    trigger_id = ctx.triggered[0]["prop_id"].split(".")[0]
    if trigger_id == "btn-reset-view":
        viewport = reset_viewport()
        event = "reset_view"
    else:
        viewport = toggle_grid(Viewport.from_dict(viewport_data))
        event = "toggle_grid"
    log_update = _log(session_data, log_store_data, event=event, viewport=viewport.to_dict(), source="button")
    return viewport.to_dict(), state_to_dict(Idle()), log_update


@app.callback(
    [
        Output("store-quiz", "data"),
        Output("quiz-message", "children"),
        Output("store-log-sink", "data", allow_duplicate=True),
    ],
    [
        Input("btn-quiz-vertex", "n_clicks"),
        Input("btn-quiz-root", "n_clicks"),
        Input("btn-quiz-hint", "n_clicks"),
        Input("btn-quiz-check", "n_clicks"),
    ],
    [
        State("store-quiz", "data"),
        State("store-coeffs", "data"),
        State("store-session", "data"),
        State("store-log-sink", "data"),
    ],
    prevent_initial_call=True,
)
def _handle_quiz(vertex_clicks, root_clicks, hint_clicks, check_clicks, quiz_data, coeff_data, session_data, log_store_data):
    ctx = dash.callback_context
    if not ctx.triggered:
        return dash.no_update, dash.no_update, dash.no_update
    trigger_id = ctx.triggered[0]["prop_id"].split(".")[0]
    quiz = QuizState.from_dict(quiz_data)
    extras: Dict[str, Any] = {}
    if trigger_id == "btn-quiz-vertex":
        quiz = new_vertex_quiz()
        event = "quiz_start"
    elif trigger_id == "btn-quiz-root":
        quiz = new_root_quiz()
        event = "quiz_start"
    elif trigger_id == "btn-quiz-hint":
        quiz = quiz_hint(quiz)
        event = "quiz_hint"
    else:
        coefficients = _coefficients(coeff_data)
        ok, quiz = check_quiz(quiz, compute_stats(coefficients.a, coefficients.b, coefficients.c))
        event = "quiz_check"
        extras["quiz_result"] = "correct" if ok else "incorrect"
    extras["quiz_kind"] = quiz.kind
    log_update = _log(
        session_data,
        log_store_data,
        event=event,
        params=session_log.normalize_params(coeff_data),
        source="button",
        extras=extras,
    )
    return quiz.to_dict(), quiz.message, log_update


@app.callback(
    [
        Output("narration-audio", "src"),
        Output("narration-status", "children"),
        Output("store-log-sink", "data", allow_duplicate=True),
    ],
    Input("btn-explain", "n_clicks"),
    [
        State("store-coeffs", "data"),
        State("store-session", "data"),
        State("store-log-sink", "data"),
    ],
    prevent_initial_call=True,
)
def _handle_explain(n_clicks, coeff_data, session_data, log_store_data):
    if not n_clicks:
        return dash.no_update, dash.no_update, dash.no_update
    coefficients = _coefficients(coeff_data)
    stats = compute_stats(coefficients.a, coefficients.b, coefficients.c)
    audio = _NARRATION.explanation_audio(coefficients.a, stats)
    status = "ok" if audio else "failed"
    log_update = _log(
        session_data,
        log_store_data,
        event="narration",
        params=session_log.normalize_params(coeff_data),
        source="button",
        extras={"narration_kind": "explanation", "narration_status": status},
    )
    if not audio:
        return dash.no_update, EXPLANATION_FALLBACK, log_update
    src = "data:audio/mpeg;base64," + base64.b64encode(audio).decode("ascii")
    return src, "Playing explanation…", log_update


@app.callback(
    [
        Output("ai-feedback", "children"),
        Output("store-log-sink", "data", allow_duplicate=True),
    ],
    Input("btn-ai-feedback", "n_clicks"),
    [
        State("store-prev-coeffs", "data"),
        State("store-coeffs", "data"),
        State("store-session", "data"),
        State("store-log-sink", "data"),
    ],
    prevent_initial_call=True,
)
def _handle_feedback(n_clicks, prev_data, coeff_data, session_data, log_store_data):
    if not n_clicks:
        return dash.no_update, dash.no_update
    current = _coefficients(coeff_data)
    previous = _coefficients(prev_data) if isinstance(prev_data, dict) else None
    stats = compute_stats(current.a, current.b, current.c)
    try:
        text = _NARRATION.feedback(previous, current, stats)
        status = "ok"
    except NarrationError as exc:
        logger.warning("AI feedback unavailable: %s", exc)
        text = FEEDBACK_FALLBACK
        status = "failed"
    log_update = _log(
        session_data,
        log_store_data,
        event="narration",
        params=session_log.normalize_params(coeff_data),
        source="button",
        extras={"narration_kind": "feedback", "narration_status": status},
    )
    return text, log_update


@app.callback(
    Output("download-csv", "data"),
    Input("btn-download-csv", "n_clicks"),
    State("store-session", "data"),
    prevent_initial_call=True,
)
def _handle_download_csv(n_clicks, session_data):
    if not n_clicks:
        return dash.no_update
    session_id = _get_session_id(session_data)
    csv_content = session_log.build_csv_content(session_log.read_records(session_id))
    if not csv_content:
        return dash.no_update
    return dcc.send_string(csv_content, filename=f"session_{session_id}.csv")


@app.callback(
    Output("log-display", "children"),
    Input("store-log-sink", "data"),
)
def _render_log_display(log_entries):
    if not isinstance(log_entries, list) or not log_entries:
        return "Recent logs will appear here."
    lines: List[str] = [f"- {entry}" for entry in reversed(log_entries)]
    return "\n".join(["Recent logs:", *lines])


if __name__ == "__main__":
    app.run(debug=True)
