from __future__ import annotations

import math
from typing import Iterator, List

from . import config
from .stats import Coefficients
from .viewport import CanvasSize, ScreenPoint, Viewport, world_to_screen


def clip_threshold(viewport: Viewport) -> float:
    return config.CLIP_FACTOR * max(abs(viewport.y_min), abs(viewport.y_max))


def sample_curve(
    coefficients: Coefficients,
    viewport: Viewport,
    canvas: CanvasSize,
    stride: float = config.SAMPLE_STRIDE_PX,
) -> Iterator[List[ScreenPoint]]:
    """Yield screen-space polylines approximating the parabola.

    Samples whose |y| exceeds the clip threshold break the current polyline;
    the next in-range sample starts a new one.
    """
    if stride <= 0:
        raise ValueError(f"sample stride must be positive, got {stride!r}")
    if not canvas.is_drawable:
        return
    threshold = clip_threshold(viewport)
    steps = int(math.floor(canvas.width / stride))
    current: List[ScreenPoint] = []
    for i in range(steps + 1):
        sx = i * stride
        x = viewport.x_min + (sx / canvas.width) * viewport.x_span
        y = coefficients.evaluate(x)
        if not math.isfinite(y) or abs(y) > threshold:
            if len(current) > 1:
                yield current
            current = []
            continue
        current.append(world_to_screen(viewport, canvas, x, y))
    if len(current) > 1:
        yield current
