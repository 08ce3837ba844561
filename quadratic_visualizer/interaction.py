"""Pan/zoom state machine driven by pointer and wheel events.

``handle_event`` is a pure transition ``(state, viewport, event, canvas) ->
(state, viewport)``. ``InteractionController`` wraps it for callers that want
to hold the current state in one object. Coordinates are canvas-relative
logical pixels.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from typing import Any, Dict, Optional, Tuple, Union

from . import config
from .viewport import CanvasSize, Viewport, apply_pan, reset_viewport, toggle_grid, zoom_at_screen

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Idle:
    pass


@dataclasses.dataclass(frozen=True)
class Panning:
    last_x: float
    last_y: float


GestureState = Union[Idle, Panning]


@dataclasses.dataclass(frozen=True)
class PointerDown:
    x: float
    y: float


@dataclasses.dataclass(frozen=True)
class PointerMove:
    x: float
    y: float


@dataclasses.dataclass(frozen=True)
class PointerUp:
    x: float
    y: float


@dataclasses.dataclass(frozen=True)
class PointerLeave:
    pass


@dataclasses.dataclass(frozen=True)
class Wheel:
    x: float
    y: float
    delta_y: float


PointerEvent = Union[PointerDown, PointerMove, PointerUp, PointerLeave, Wheel]


def zoom_factor(delta_y: float) -> Optional[float]:
    if delta_y > 0:
        return config.ZOOM_OUT_FACTOR
    if delta_y < 0:
        return config.ZOOM_IN_FACTOR
    return None


def handle_event(
    state: GestureState,
    viewport: Viewport,
    event: PointerEvent,
    canvas: CanvasSize,
) -> Tuple[GestureState, Viewport]:
    if isinstance(event, Wheel):
        factor = zoom_factor(event.delta_y)
        if factor is None:
            return state, viewport
        return state, zoom_at_screen(viewport, canvas, event.x, event.y, factor)

    if isinstance(event, PointerDown):
        return Panning(event.x, event.y), viewport

    if isinstance(event, PointerMove):
        if not isinstance(state, Panning):
            return state, viewport
        dx = event.x - state.last_x
        dy = event.y - state.last_y
        return Panning(event.x, event.y), apply_pan(viewport, dx, dy, canvas)

    if isinstance(event, (PointerUp, PointerLeave)):
        return Idle(), viewport

    logger.debug("Ignoring unknown event %r", event)
    return state, viewport


class InteractionController:
    def __init__(self, viewport: Optional[Viewport] = None, state: Optional[GestureState] = None) -> None:
        self.viewport = viewport or reset_viewport()
        self.state: GestureState = state or Idle()

    @property
    def is_panning(self) -> bool:
        return isinstance(self.state, Panning)

    def dispatch(self, event: PointerEvent, canvas: CanvasSize) -> Viewport:
        self.state, self.viewport = handle_event(self.state, self.viewport, event, canvas)
        return self.viewport

    def reset_view(self) -> Viewport:
        self.viewport = reset_viewport()
        self.state = Idle()
        return self.viewport

    def toggle_grid(self) -> Viewport:
        self.viewport = toggle_grid(self.viewport)
        return self.viewport


# Store (de)serialisation for the browser-side dcc.Store payloads.


def state_to_dict(state: GestureState) -> Dict[str, Any]:
    if isinstance(state, Panning):
        return {"state": "panning", "last_x": state.last_x, "last_y": state.last_y}
    return {"state": "idle"}


def state_from_dict(raw: Optional[Dict[str, Any]]) -> GestureState:
    if not isinstance(raw, dict) or raw.get("state") != "panning":
        return Idle()
    try:
        return Panning(float(raw["last_x"]), float(raw["last_y"]))
    except (KeyError, TypeError, ValueError):
        return Idle()


def _coord(raw: Dict[str, Any], key: str) -> float:
    value = float(raw[key])
    if not math.isfinite(value):
        raise ValueError(f"{key} is not finite")
    return value


def event_from_dict(raw: Optional[Dict[str, Any]]) -> Optional[PointerEvent]:
    if not isinstance(raw, dict):
        return None
    kind = raw.get("type")
    try:
        if kind == "pointerdown":
            return PointerDown(_coord(raw, "x"), _coord(raw, "y"))
        if kind == "pointermove":
            return PointerMove(_coord(raw, "x"), _coord(raw, "y"))
        if kind == "pointerup":
            return PointerUp(_coord(raw, "x"), _coord(raw, "y"))
        if kind == "pointerleave":
            return PointerLeave()
        if kind == "wheel":
            return Wheel(_coord(raw, "x"), _coord(raw, "y"), _coord(raw, "deltaY"))
    except (KeyError, TypeError, ValueError):
        logger.debug("Malformed pointer event %r", raw)
        return None
    return None
