"""Turns coefficients, stats and the viewport into ordered draw commands.

The renderer paints nothing itself. It returns a list of immutable commands in
screen space, in the order they must be painted (later commands sit on top):

1. background fill
2. grid lines (only when the viewport's grid flag is set)
3. axis lines at world x=0 and y=0, across the whole canvas
4. tick marks and numeric labels, plus a single shared "0" at the origin
5. curve polylines
6. dashed axis of symmetry
7. point markers: vertex, y-intercept, then each real root

``graph_engine.build_figure`` converts the list into a Plotly figure.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import List, Optional, Sequence, Tuple, Union

from . import config
from .sampler import sample_curve
from .stats import Coefficients, DerivedStats
from .ticks import format_tick, nice_step, tick_values
from .viewport import CanvasSize, ScreenPoint, Viewport, world_to_screen

logger = logging.getLogger(__name__)

Segment = Tuple[ScreenPoint, ScreenPoint]


@dataclasses.dataclass(frozen=True)
class Theme:
    name: str
    background: str
    grid: str
    axis: str
    label: str
    curve: str
    symmetry: str
    vertex: str
    y_intercept: str
    root: str
    outline: str
    curve_width: float = config.CURVE_WIDTH
    grid_width: float = config.GRID_WIDTH
    axis_width: float = config.AXIS_WIDTH
    font_size: int = config.LABEL_FONT_SIZE
    font_family: str = config.LABEL_FONT_FAMILY


DARK_THEME = Theme(name="dark", **config.THEME_COLORS["dark"])
LIGHT_THEME = Theme(name="light", **config.THEME_COLORS["light"])
THEMES = {theme.name: theme for theme in (DARK_THEME, LIGHT_THEME)}


def get_theme(name: Optional[str]) -> Theme:
    return THEMES.get(name or "", DARK_THEME)


@dataclasses.dataclass(frozen=True)
class FillRect:
    role: str
    x: float
    y: float
    width: float
    height: float
    color: str


@dataclasses.dataclass(frozen=True)
class LineSet:
    role: str
    segments: Tuple[Segment, ...]
    color: str
    width: float
    dash: Optional[Tuple[int, ...]] = None


@dataclasses.dataclass(frozen=True)
class Polyline:
    role: str
    points: Tuple[ScreenPoint, ...]
    color: str
    width: float


@dataclasses.dataclass(frozen=True)
class Text:
    role: str
    text: str
    x: float
    y: float
    color: str
    align: str
    baseline: str
    font_size: int
    font_family: str


@dataclasses.dataclass(frozen=True)
class Circle:
    role: str
    center: ScreenPoint
    radius: float
    fill: str
    outline: str
    outline_width: float = 1.0
    world: Tuple[float, float] = (0.0, 0.0)


DrawCommand = Union[FillRect, LineSet, Polyline, Text, Circle]


def _grid(viewport: Viewport, canvas: CanvasSize, x_step: float, y_step: float, theme: Theme) -> LineSet:
    segments: List[Segment] = []
    for x in tick_values(viewport.x_min, viewport.x_max, x_step):
        sx, _ = world_to_screen(viewport, canvas, x, 0)
        segments.append((ScreenPoint(sx, 0), ScreenPoint(sx, canvas.height)))
    for y in tick_values(viewport.y_min, viewport.y_max, y_step):
        _, sy = world_to_screen(viewport, canvas, 0, y)
        segments.append((ScreenPoint(0, sy), ScreenPoint(canvas.width, sy)))
    return LineSet("grid", tuple(segments), theme.grid, theme.grid_width)


def _axes(origin: ScreenPoint, canvas: CanvasSize, theme: Theme) -> LineSet:
    segments = (
        (ScreenPoint(0, origin.y), ScreenPoint(canvas.width, origin.y)),
        (ScreenPoint(origin.x, 0), ScreenPoint(origin.x, canvas.height)),
    )
    return LineSet("axis", segments, theme.axis, theme.axis_width)


def _ticks_and_labels(
    viewport: Viewport,
    canvas: CanvasSize,
    origin: ScreenPoint,
    x_step: float,
    y_step: float,
    theme: Theme,
) -> List[DrawCommand]:
    tick_len = config.TICK_LENGTH_PX
    offset = config.LABEL_OFFSET_PX
    segments: List[Segment] = []
    labels: List[Text] = []

    def label(text: str, x: float, y: float, align: str, baseline: str) -> Text:
        return Text("label", text, x, y, theme.label, align, baseline, theme.font_size, theme.font_family)

    for x in tick_values(viewport.x_min, viewport.x_max, x_step):
        if abs(x) < x_step / 100:
            continue
        sx, _ = world_to_screen(viewport, canvas, x, 0)
        segments.append((ScreenPoint(sx, origin.y), ScreenPoint(sx, origin.y + tick_len)))
        labels.append(label(format_tick(x), sx, origin.y + offset, "center", "top"))

    for y in tick_values(viewport.y_min, viewport.y_max, y_step):
        if abs(y) < y_step / 100:
            continue
        _, sy = world_to_screen(viewport, canvas, 0, y)
        segments.append((ScreenPoint(origin.x, sy), ScreenPoint(origin.x - tick_len, sy)))
        labels.append(label(format_tick(y), origin.x - offset, sy, "right", "middle"))

    origin_offset = config.ORIGIN_LABEL_OFFSET_PX
    labels.append(label("0", origin.x - origin_offset, origin.y + origin_offset, "right", "top"))
    return [LineSet("tick", tuple(segments), theme.label, 1.0), *labels]


def _marker(
    role: str,
    viewport: Viewport,
    canvas: CanvasSize,
    x: float,
    y: float,
    color: str,
    radius: float,
    theme: Theme,
) -> Circle:
    center = world_to_screen(viewport, canvas, x, y)
    return Circle(role, center, radius, color, theme.outline, 1.0, (x, y))


def render(
    coefficients: Coefficients,
    stats: DerivedStats,
    viewport: Viewport,
    canvas: CanvasSize,
    theme: Theme = DARK_THEME,
    *,
    stride: float = config.SAMPLE_STRIDE_PX,
) -> List[DrawCommand]:
    if not canvas.is_drawable:
        logger.debug("Skipping frame for undrawable canvas %r", canvas)
        return []

    commands: List[DrawCommand] = [FillRect("background", 0, 0, canvas.width, canvas.height, theme.background)]

    x_step = nice_step(viewport.x_span)
    y_step = nice_step(viewport.y_span)
    if viewport.grid_enabled:
        commands.append(_grid(viewport, canvas, x_step, y_step, theme))

    origin = world_to_screen(viewport, canvas, 0, 0)
    commands.append(_axes(origin, canvas, theme))
    commands.extend(_ticks_and_labels(viewport, canvas, origin, x_step, y_step, theme))

    for points in sample_curve(coefficients, viewport, canvas, stride):
        commands.append(Polyline("curve", tuple(points), theme.curve, theme.curve_width))

    axis_x, _ = world_to_screen(viewport, canvas, stats.axis_of_symmetry, 0)
    commands.append(
        LineSet(
            "symmetry",
            ((ScreenPoint(axis_x, 0), ScreenPoint(axis_x, canvas.height)),),
            theme.symmetry,
            1.0,
            dash=config.SYMMETRY_DASH,
        )
    )

    h, k = stats.vertex
    commands.append(_marker("vertex", viewport, canvas, h, k, theme.vertex, config.VERTEX_RADIUS, theme))
    commands.append(
        _marker("y_intercept", viewport, canvas, 0, stats.y_intercept, theme.y_intercept, config.POINT_RADIUS, theme)
    )
    for root in stats.roots or ():
        commands.append(_marker("root", viewport, canvas, root, 0, theme.root, config.ROOT_RADIUS, theme))
    return commands


def commands_with_role(commands: Sequence[DrawCommand], role: str) -> List[DrawCommand]:
    return [cmd for cmd in commands if cmd.role == role]
