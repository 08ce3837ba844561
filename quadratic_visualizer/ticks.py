from __future__ import annotations

import math
from typing import Iterator

from . import config


def nice_step(value_range: float) -> float:
    """Return a 1/2/5 x 10^n spacing giving roughly ten ticks over ``value_range``."""
    if not (math.isfinite(value_range) and value_range > 0):
        raise ValueError(f"tick range must be a positive finite number, got {value_range!r}")
    rough = value_range / config.TARGET_TICKS
    power = 10 ** math.floor(math.log10(rough))
    normalized = rough / power
    if normalized < 1.5:
        return power * 1
    if normalized < 3:
        return power * 2
    if normalized < 7:
        return power * 5
    return power * 10


def tick_values(lo: float, hi: float, step: float) -> Iterator[float]:
    # Index-based so long ranges do not accumulate drift.
    first = math.ceil(lo / step)
    last = math.floor(hi / step)
    for k in range(first, last + 1):
        yield k * step


def format_tick(value: float) -> str:
    if not math.isfinite(value):
        return str(value)
    if abs(value) >= config.EXPONENTIAL_THRESHOLD:
        return f"{value:.1e}"
    digits = config.LABEL_SIGNIFICANT_DIGITS
    text = f"{value:.{digits}g}"
    if "e" in text:
        rounded = float(text)
        if abs(rounded) < config.FIXED_LABEL_MIN:
            mantissa, exponent = f"{rounded:.{digits - 1}e}".split("e")
            return f"{_trim_zeros(mantissa)}e{exponent}"
        # %g goes exponential below 1e-4; keep those in fixed form.
        places = digits - 1 - math.floor(math.log10(abs(rounded)))
        text = f"{rounded:.{places}f}"
    text = _trim_zeros(text)
    if text == "-0":
        text = "0"
    return text


def _trim_zeros(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
