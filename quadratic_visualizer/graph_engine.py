from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import plotly.graph_objects as go

from .renderer import Circle, DrawCommand, FillRect, LineSet, Polyline, Text
from .viewport import CanvasSize

_DASH_STYLES: Dict[Tuple[int, ...], str] = {(5, 5): "dash", (2, 2): "dot"}
_VERTICAL_POSITION = {"top": "bottom", "middle": "middle", "bottom": "top"}
_HORIZONTAL_POSITION = {"center": "center", "right": "left", "left": "right"}
_MARKER_NAMES = {"vertex": "Vertex", "y_intercept": "Y-intercept", "root": "Root"}


def _dash_style(dash: Optional[Tuple[int, ...]]) -> str:
    if not dash:
        return "solid"
    return _DASH_STYLES.get(tuple(dash), ",".join(f"{d}px" for d in dash))


def text_position(align: str, baseline: str) -> str:
    return f"{_VERTICAL_POSITION.get(baseline, 'middle')} {_HORIZONTAL_POSITION.get(align, 'center')}"


def line_set_trace(cmd: LineSet) -> go.Scatter:
    xs: List[Optional[float]] = []
    ys: List[Optional[float]] = []
    for start, end in cmd.segments:
        xs.extend([start.x, end.x, None])
        ys.extend([start.y, end.y, None])
    return go.Scatter(
        x=xs,
        y=ys,
        mode="lines",
        name=cmd.role,
        line=dict(color=cmd.color, width=cmd.width, dash=_dash_style(cmd.dash)),
        hoverinfo="skip",
        showlegend=False,
    )


def polyline_trace(cmd: Polyline) -> go.Scatter:
    return go.Scatter(
        x=[p.x for p in cmd.points],
        y=[p.y for p in cmd.points],
        mode="lines",
        name="y = ax^2 + bx + c",
        line=dict(color=cmd.color, width=cmd.width),
        hoverinfo="skip",
        showlegend=False,
    )


def text_trace(cmds: Sequence[Text]) -> go.Scatter:
    first = cmds[0]
    return go.Scatter(
        x=[t.x for t in cmds],
        y=[t.y for t in cmds],
        mode="text",
        name=first.role,
        text=[t.text for t in cmds],
        textposition=[text_position(t.align, t.baseline) for t in cmds],
        textfont=dict(color=first.color, size=first.font_size, family=first.font_family),
        hoverinfo="skip",
        showlegend=False,
    )


def circle_trace(cmd: Circle) -> go.Scatter:
    name = _MARKER_NAMES.get(cmd.role, cmd.role)
    return go.Scatter(
        x=[cmd.center.x],
        y=[cmd.center.y],
        mode="markers",
        name=name,
        marker=dict(
            color=cmd.fill,
            size=2 * cmd.radius,
            symbol="circle",
            line=dict(color=cmd.outline, width=cmd.outline_width),
        ),
        customdata=[list(cmd.world)],
        hovertemplate=f"{name}<br>x=%{{customdata[0]:.2f}}<br>y=%{{customdata[1]:.2f}}<extra></extra>",
        showlegend=False,
    )


def build_figure(commands: Sequence[DrawCommand], canvas: CanvasSize) -> go.Figure:
    """Lay the draw commands out on a figure whose axes are the canvas pixels."""
    fig = go.Figure()
    background = None
    pending_text: List[Text] = []

    def flush_text() -> None:
        if pending_text:
            fig.add_trace(text_trace(pending_text))
            pending_text.clear()

    for cmd in commands:
        if isinstance(cmd, Text):
            pending_text.append(cmd)
            continue
        flush_text()
        if isinstance(cmd, FillRect):
            background = cmd.color
        elif isinstance(cmd, LineSet):
            fig.add_trace(line_set_trace(cmd))
        elif isinstance(cmd, Polyline):
            fig.add_trace(polyline_trace(cmd))
        elif isinstance(cmd, Circle):
            fig.add_trace(circle_trace(cmd))
    flush_text()

    axis = dict(visible=False, fixedrange=True, showgrid=False, zeroline=False)
    fig.update_layout(
        width=canvas.width,
        height=canvas.height,
        autosize=False,
        margin=dict(l=0, r=0, t=0, b=0, pad=0),
        xaxis=dict(axis, range=[0, canvas.width]),
        yaxis=dict(axis, range=[canvas.height, 0]),
        plot_bgcolor=background,
        paper_bgcolor=background,
        dragmode=False,
        hovermode="closest",
        showlegend=False,
    )
    return fig
