"""AI narration: spoken explanations and tutor feedback through OpenAI."""

from __future__ import annotations

import logging
from typing import Any, Optional

import openai

from . import config
from .stats import Coefficients, DerivedStats
from .verbal_descriptions import short

logger = logging.getLogger(__name__)

FEEDBACK_FALLBACK = "Sorry, I couldn't generate feedback right now."
EXPLANATION_FALLBACK = "Could not generate explanation."


class NarrationError(RuntimeError):
    """Raised when the AI service is unavailable or a call fails."""


def explanation_script(a: float, stats: DerivedStats) -> str:
    h, k = stats.vertex
    message = f"Analyzing the parabola where the 'a' coefficient is {short(a)}. "
    if a > 0:
        message += "Since 'a' is positive, it opens upwards, forming a valley. "
    else:
        message += "Since 'a' is negative, it opens downwards, like a hill. "
    message += (
        f"The vertex, which is the lowest or highest point, is located at x equals {short(h)} "
        f"and y equals {short(k)}. "
    )
    if stats.discriminant < 0 or not stats.roots:
        message += "The parabola does not cross the x-axis, so there are no real roots. "
    elif len(stats.roots) == 1:
        message += f"It touches the x-axis at a single point, a repeated root, at x equals {short(stats.roots[0])}. "
    else:
        message += (
            "It crosses the x-axis at two points, which are the roots, located at approximately "
            f"x equals {short(stats.roots[0])} and x equals {short(stats.roots[1])}. "
        )
    return message


def feedback_prompt(previous: Optional[Coefficients], current: Coefficients, stats: DerivedStats) -> str:
    action = "The student has set the following initial parameters for a quadratic function."
    if previous is not None:
        action = (
            "The student changed the parameters of the quadratic function from "
            f"(a:{short(previous.a)}, b:{short(previous.b)}, c:{short(previous.c)}) to "
            f"(a:{short(current.a)}, b:{short(current.b)}, c:{short(current.c)})."
        )
    h, k = stats.vertex
    roots = ", ".join(short(r) for r in stats.roots) if stats.roots else "None"
    return (
        "You are a friendly and encouraging math tutor AI. A student is exploring quadratic equations "
        "(y = ax^2 + bx + c) using an interactive tool. Provide concise, helpful feedback based on the "
        "changes they made.\n\n"
        f"User's action: {action}\n\n"
        "Current graph properties:\n"
        f"- Vertex: ({short(h)}, {short(k)})\n"
        f"- Roots: {roots}\n"
        f"- Y-intercept: {short(stats.y_intercept)}\n"
        f"- Discriminant: {short(stats.discriminant)}\n\n"
        "Your task: Analyze the change (or the initial state). Explain *why* the graph has its current "
        "properties based on the coefficients. For example, if 'c' was changed, explain its effect on the "
        "y-intercept. If 'a' was changed, talk about the parabola's width and direction. If 'b' was changed, "
        "explain its complex effect on the vertex's position. Keep the feedback encouraging and under 80 "
        "words. Address the student directly."
    )


class NarrationService:
    def __init__(self, client: Any = None) -> None:
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            try:
                self._client = openai.OpenAI(timeout=config.NARRATION_TIMEOUT_SECONDS)
            except openai.OpenAIError as exc:
                logger.error("AI service not initialized; an API key may be missing: %s", exc)
                raise NarrationError("AI service is not configured.") from exc
        return self._client

    def feedback(self, previous: Optional[Coefficients], current: Coefficients, stats: DerivedStats) -> str:
        prompt = feedback_prompt(previous, current, stats)
        try:
            chat = self.client.chat.completions.create(
                model=config.FEEDBACK_MODEL,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=config.FEEDBACK_MAX_TOKENS,
            )
        except openai.OpenAIError as exc:
            logger.error("Error calling text API: %s", exc)
            raise NarrationError("Failed to get AI feedback.") from exc
        text = (chat.choices[0].message.content or "").strip()
        if not text:
            raise NarrationError("AI feedback was empty.")
        return text

    def explanation_audio(self, a: float, stats: DerivedStats) -> Optional[bytes]:
        """Return MP3 bytes narrating the parabola, or None when the call fails."""
        script = explanation_script(a, stats)
        try:
            response = self.client.audio.speech.create(
                model=config.TTS_MODEL,
                voice=config.TTS_VOICE,
                input=script,
                response_format="mp3",
            )
        except NarrationError:
            return None
        except openai.OpenAIError as exc:
            logger.error("Error calling speech API: %s", exc)
            return None
        audio = response.content
        return audio or None
