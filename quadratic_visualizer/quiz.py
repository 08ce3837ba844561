from __future__ import annotations

import dataclasses
import random
from typing import Any, Dict, Optional

from . import config
from .stats import DerivedStats
from .verbal_descriptions import short

IDLE_MESSAGE = "Start a quiz to get feedback."


@dataclasses.dataclass(frozen=True)
class QuizState:
    kind: Optional[str] = None
    target: Optional[Dict[str, int]] = None
    message: str = IDLE_MESSAGE

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "QuizState":
        if not isinstance(raw, dict):
            return cls()
        kind = raw.get("kind")
        target = raw.get("target")
        message = str(raw.get("message") or IDLE_MESSAGE)
        if kind not in {"vertex", "root"} or not isinstance(target, dict):
            return cls(message=message)
        return cls(kind, dict(target), message)


def _target(rng: random.Random) -> int:
    span = config.QUIZ_TARGET_RANGE
    return round(rng.random() * 2 * span - span)


def new_vertex_quiz(rng: Optional[random.Random] = None) -> QuizState:
    rng = rng or random.Random()
    h, k = _target(rng), _target(rng)
    return QuizState("vertex", {"h": h, "k": k}, f"Goal: Set vertex to ({h}, {k})")


def new_root_quiz(rng: Optional[random.Random] = None) -> QuizState:
    rng = rng or random.Random()
    r = _target(rng)
    return QuizState("root", {"r": r}, f"Goal: Make a root at x = {r}")


def check_quiz(quiz: QuizState, stats: DerivedStats) -> tuple[bool, QuizState]:
    """Grade the current stats against the quiz target; the target is kept."""
    if quiz.kind is None or quiz.target is None:
        return False, quiz
    tol = config.QUIZ_TOLERANCE
    if quiz.kind == "vertex":
        h, k = stats.vertex
        ok = abs(h - quiz.target["h"]) < tol and abs(k - quiz.target["k"]) < tol
        message = "Correct! Vertex is very close." if ok else f"Not quite. Current vertex is ({short(h)}, {short(k)})."
    else:
        r = quiz.target["r"]
        ok = any(abs(root - r) < tol for root in stats.roots or ())
        if ok:
            message = "Great! You created a root at the target."
        else:
            current = ", ".join(short(root) for root in stats.roots) if stats.roots else "none"
            message = f"No root near x={r}. Current roots: {current}"
    return ok, dataclasses.replace(quiz, message=message)


def quiz_hint(quiz: QuizState) -> QuizState:
    if quiz.kind == "vertex":
        hint = "Vertex x-coordinate is h = -b/(2a). Adjust 'a' and 'b' to change it."
    elif quiz.kind == "root" and quiz.target is not None:
        hint = f"To make {quiz.target['r']} a root, the equation a*r² + b*r + c must equal 0. Try adjusting 'c'."
    else:
        hint = "Start a quiz first!"
    return dataclasses.replace(quiz, message=f"Hint: {hint}")


def randomize_coefficients(rng: Optional[random.Random] = None) -> Dict[str, float]:
    rng = rng or random.Random()
    values = {}
    for name, (lo, hi) in config.RANDOM_RANGES.items():
        values[name] = round(lo + rng.random() * (hi - lo), 1)
    if values["a"] == 0:
        values["a"] = 0.1
    return values
