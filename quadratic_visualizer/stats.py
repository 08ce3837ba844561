from __future__ import annotations

import dataclasses
import math
from typing import Optional, Tuple

from . import config
from .verbal_descriptions import vertex_form_text


@dataclasses.dataclass(frozen=True)
class Coefficients:
    a: float
    b: float
    c: float

    def evaluate(self, x: float) -> float:
        return self.a * x * x + self.b * x + self.c


@dataclasses.dataclass(frozen=True)
class DerivedStats:
    vertex: Tuple[float, float]
    roots: Optional[Tuple[float, ...]]
    axis_of_symmetry: float
    y_intercept: float
    discriminant: float
    vertex_form: str = ""


def discriminant(a: float, b: float, c: float) -> float:
    return b * b - 4 * a * c


def compute_stats(a: float, b: float, c: float) -> DerivedStats:
    # a == 0 would divide by zero; a tiny stand-in keeps the vertex finite-ish.
    safe_a = config.EPS_ZERO if a == 0 else a
    disc = discriminant(safe_a, b, c)
    h = -b / (2 * safe_a)
    k = safe_a * h * h + b * h + c

    roots: Optional[Tuple[float, ...]] = None
    if disc >= 0:
        sqrt_disc = math.sqrt(disc)
        r1 = (-b + sqrt_disc) / (2 * safe_a)
        r2 = (-b - sqrt_disc) / (2 * safe_a)
        roots = (r1,) if disc == 0 else tuple(sorted((r1, r2)))

    return DerivedStats(
        vertex=(h, k),
        roots=roots,
        axis_of_symmetry=h,
        y_intercept=c,
        discriminant=disc,
        vertex_form=vertex_form_text(a, h, k),
    )
