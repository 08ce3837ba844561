"""Verbal rules and equation text."""

from __future__ import annotations

from typing import Iterable, Optional


def round_value(value: float, places: int = 2, *, zero_eps: float = 1e-9) -> float:
    if abs(value) < zero_eps:
        return 0.0
    rounded = round(value, places)
    return 0.0 if rounded == 0 else rounded


def number_text(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return repr(value)


def short(value: float) -> str:
    return number_text(round_value(value))


def format_signed(value: float) -> str:
    rounded = round_value(value, zero_eps=1e-6)
    if rounded >= 0:
        return f"+ {number_text(rounded)}"
    return f"- {number_text(abs(rounded))}"


def format_quadratic_term(value: float) -> str:
    rounded = round_value(value, zero_eps=1e-6)
    if rounded == 1:
        return "x²"
    if rounded == -1:
        return "-x²"
    return f"{number_text(rounded)}x²"


def equation_text(a: float, b: float, c: float) -> str:
    return f"y = {format_quadratic_term(a)} {format_signed(b)}x {format_signed(c)}"


def vertex_form_text(a: float, h: float, k: float) -> str:
    return f"y = {short(a)}(x - {short(h)})² + {short(k)}"


def roots_text(roots: Optional[Iterable[float]]) -> str:
    if roots is None:
        return "None"
    return "[" + ", ".join(short(r) for r in roots) + "]"


def describe_a_change(old, new):
    if new == 0:
        return "a = 0 collapses the parabola to a line."
    if abs(new) > abs(old):
        verb, trend = "Increasing", "narrower"
    else:
        verb, trend = "Decreasing", "wider"
    flip = " (flips downward)" if new < 0 else ""
    return f"{verb} |a| makes the parabola {trend}{flip}."


def describe_b_change(old, new):
    if new > old:
        return "Increasing b moves the vertex left when a > 0 and right when a < 0."
    return "Decreasing b moves the vertex right when a > 0 and left when a < 0."


def describe_c_change(old, new):
    direction = "up" if new > old else "down"
    return f"Changing c shifts the whole parabola {direction}; the y-intercept is now {short(new)}."


def describe_change(param: str, old: float, new: float) -> Optional[str]:
    if old == new:
        return None
    describers = {"a": describe_a_change, "b": describe_b_change, "c": describe_c_change}
    describer = describers.get(param)
    return describer(old, new) if describer else None
