"""World/screen coordinate mapping and pure viewport transforms."""

from __future__ import annotations

import dataclasses
import logging
import math
from typing import Any, Dict, NamedTuple, Optional

from . import config

logger = logging.getLogger(__name__)


class ScreenPoint(NamedTuple):
    x: float
    y: float


@dataclasses.dataclass(frozen=True)
class CanvasSize:
    """Logical (CSS pixel) size of the drawing surface plus its pixel ratio."""

    width: float
    height: float
    device_pixel_ratio: float = 1.0

    @property
    def backing_width(self) -> int:
        return int(round(self.width * self.device_pixel_ratio))

    @property
    def backing_height(self) -> int:
        return int(round(self.height * self.device_pixel_ratio))

    @property
    def is_drawable(self) -> bool:
        return self.width > 0 and self.height > 0

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> Optional["CanvasSize"]:
        if not isinstance(raw, dict):
            return None
        try:
            width = float(raw.get("width"))
            height = float(raw.get("height"))
            dpr = float(raw.get("dpr") or 1.0)
        except (TypeError, ValueError):
            return None
        if not all(math.isfinite(v) for v in (width, height, dpr)) or dpr <= 0:
            return None
        return cls(width, height, dpr)

    def to_dict(self) -> Dict[str, float]:
        return {"width": self.width, "height": self.height, "dpr": self.device_pixel_ratio}


@dataclasses.dataclass(frozen=True)
class Viewport:
    x_min: float
    x_max: float
    y_min: float
    y_max: float
    grid_enabled: bool = True

    def __post_init__(self) -> None:
        bounds = (self.x_min, self.x_max, self.y_min, self.y_max)
        if not all(math.isfinite(v) for v in bounds):
            raise ValueError(f"viewport bounds must be finite, got {bounds}")
        if not (self.x_min < self.x_max and self.y_min < self.y_max):
            raise ValueError(f"viewport bounds must satisfy min < max, got {bounds}")

    @property
    def x_span(self) -> float:
        return self.x_max - self.x_min

    @property
    def y_span(self) -> float:
        return self.y_max - self.y_min

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "Viewport":
        """Rebuild a viewport from a store payload; anything unusable yields the default."""
        if not isinstance(raw, dict):
            return reset_viewport()
        try:
            return cls(
                float(raw["x_min"]),
                float(raw["x_max"]),
                float(raw["y_min"]),
                float(raw["y_max"]),
                bool(raw.get("grid_enabled", True)),
            )
        except (KeyError, TypeError, ValueError):
            logger.debug("Discarding malformed viewport payload %r", raw)
            return reset_viewport()


def world_to_screen(viewport: Viewport, canvas: CanvasSize, x: float, y: float) -> ScreenPoint:
    sx = (x - viewport.x_min) / viewport.x_span * canvas.width
    sy = (1 - (y - viewport.y_min) / viewport.y_span) * canvas.height
    return ScreenPoint(sx, sy)


def screen_to_world(viewport: Viewport, canvas: CanvasSize, sx: float, sy: float) -> tuple[float, float]:
    x = viewport.x_min + (sx / canvas.width) * viewport.x_span
    y = viewport.y_min + (1 - sy / canvas.height) * viewport.y_span
    return x, y


def _span_ok(lo: float, hi: float) -> bool:
    if not (math.isfinite(lo) and math.isfinite(hi)):
        return False
    span = hi - lo
    return config.MIN_SPAN <= span <= config.MAX_SPAN


def _replace_bounds(viewport: Viewport, x_min: float, x_max: float, y_min: float, y_max: float) -> Viewport:
    if not (_span_ok(x_min, x_max) and _span_ok(y_min, y_max)):
        logger.debug(
            "Refusing viewport change to x=[%r, %r] y=[%r, %r]",
            x_min,
            x_max,
            y_min,
            y_max,
        )
        return viewport
    return dataclasses.replace(viewport, x_min=x_min, x_max=x_max, y_min=y_min, y_max=y_max)


def apply_pan(viewport: Viewport, dx: float, dy: float, canvas: CanvasSize) -> Viewport:
    """Translate the viewport by a pointer drag of (dx, dy) logical pixels.

    Dragging right moves the visible world left; screen y grows downward so
    the vertical delta is inverted before it is applied.
    """
    if not canvas.is_drawable:
        return viewport
    wx = viewport.x_span * (dx / canvas.width)
    wy = viewport.y_span * (-dy / canvas.height)
    return _replace_bounds(
        viewport,
        viewport.x_min - wx,
        viewport.x_max - wx,
        viewport.y_min - wy,
        viewport.y_max - wy,
    )


def apply_zoom(viewport: Viewport, anchor_x: float, anchor_y: float, factor: float) -> Viewport:
    """Scale every bound about the world anchor; factor > 1 zooms out."""
    if not (math.isfinite(factor) and factor > 0):
        logger.debug("Ignoring zoom factor %r", factor)
        return viewport
    return _replace_bounds(
        viewport,
        anchor_x + (viewport.x_min - anchor_x) * factor,
        anchor_x + (viewport.x_max - anchor_x) * factor,
        anchor_y + (viewport.y_min - anchor_y) * factor,
        anchor_y + (viewport.y_max - anchor_y) * factor,
    )


def zoom_at_screen(viewport: Viewport, canvas: CanvasSize, sx: float, sy: float, factor: float) -> Viewport:
    if not canvas.is_drawable:
        return viewport
    anchor_x, anchor_y = screen_to_world(viewport, canvas, sx, sy)
    return apply_zoom(viewport, anchor_x, anchor_y, factor)


def reset_viewport() -> Viewport:
    return Viewport(**config.DEFAULT_VIEWPORT)


def toggle_grid(viewport: Viewport) -> Viewport:
    return dataclasses.replace(viewport, grid_enabled=not viewport.grid_enabled)
