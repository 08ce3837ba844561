"""Dash component builders for the controls panel."""

from __future__ import annotations

from typing import Any, Dict, Optional

from dash import dcc, html

from . import config

PANEL_STYLE: Dict[str, Any] = {
    "backgroundColor": "#21252b",
    "borderRadius": "8px",
    "padding": "16px",
    "display": "flex",
    "flexDirection": "column",
    "gap": "12px",
    "color": "#e5e7eb",
}
CARD_STYLE: Dict[str, Any] = {"backgroundColor": "#2c313a", "padding": "8px", "borderRadius": "6px"}
BUTTON_STYLE: Dict[str, Any] = {
    "backgroundColor": "#4a5568",
    "color": "#d1d5db",
    "border": "none",
    "borderRadius": "6px",
    "padding": "8px",
    "cursor": "pointer",
}
_SLIDER_TITLES = {
    "a": "Drag to change a (opening & width). Larger |a| narrows; a < 0 flips downward.",
    "b": "Drag to change b (horizontal shift). Vertex x = -b/(2a).",
    "c": "Drag to change c (vertical shift up/down).",
}


def param_control_row(param: str) -> html.Div:
    cfg = config.PARAM_BOUNDS[param]
    slider_id = f"slider-{param}"
    input_id = f"input-{param}"
    default = config.DEFAULT_PARAMS[param]
    return html.Div(
        [
            html.Label(param, htmlFor=slider_id, style={"width": "24px", "fontFamily": "monospace"}),
            html.Div(
                dcc.Slider(
                    id=slider_id,
                    min=cfg["min"],
                    max=cfg["max"],
                    step=cfg["step"],
                    value=default,
                    marks=None,
                    updatemode="drag",
                    tooltip={"placement": "bottom", "always_visible": False},
                ),
                style={"flex": "1"},
                title=_SLIDER_TITLES[param],
            ),
            dcc.Input(
                id=input_id,
                type="number",
                min=cfg["min"],
                max=cfg["max"],
                step=cfg["step"],
                value=default,
                debounce=True,
                style={"width": "80px", "marginLeft": "8px"},
            ),
        ],
        style={"display": "flex", "alignItems": "center"},
    )


def info_card(label: str, value_id: str, *, full_width: bool = False) -> html.Div:
    style = dict(CARD_STYLE)
    if full_width:
        style["gridColumn"] = "span 2"
    return html.Div(
        [
            html.Div(label, style={"fontSize": "0.75rem", "color": "#9ca3af"}),
            html.Div(id=value_id, style={"fontWeight": 600, "fontSize": "0.9rem"}),
        ],
        style=style,
    )


def action_button(label: str, button_id: str, *, title: Optional[str] = None, accent: Optional[str] = None) -> html.Button:
    style = dict(BUTTON_STYLE)
    if accent:
        style["backgroundColor"] = accent
        style["color"] = "#ffffff"
    return html.Button(label, id=button_id, n_clicks=0, type="button", title=title or label, style=style)


def button_grid(*buttons: html.Button, columns: int = 2) -> html.Div:
    return html.Div(
        list(buttons),
        style={"display": "grid", "gridTemplateColumns": f"repeat({columns}, 1fr)", "gap": "8px"},
    )


def message_box(component_id: str, text: str = "") -> html.Div:
    return html.Div(
        text,
        id=component_id,
        style={**CARD_STYLE, "fontSize": "0.8rem", "textAlign": "center", "minHeight": "3em"},
    )
