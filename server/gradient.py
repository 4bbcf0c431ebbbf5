"""Linear-gradient parsing and per-character gradient coloring.

A gradient is given as CSS-like text, e.g.::

    linear-gradient(90deg, rgba(255, 205, 26, 1) 0%, #ff2e9d 100%)

The angle/direction is ignored: text is colored one sample per glyph.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from color_utils import format_color, parse_color, round_half_up
from palette import MARKER

logger = logging.getLogger(__name__)

_WRAPPER_RE = re.compile(r"\s*linear-gradient\((.*)\)\s*", re.DOTALL)
_ANGLE_RE = re.compile(r"-?(?:\d+\.?\d*|\.\d+)(?:deg|rad|grad|turn)")
_POSITION_RE = re.compile(r"(?:\d+\.?\d*|\.\d+)%?")


class FormatError(ValueError):
    """Raised when a gradient description cannot be parsed."""


@dataclass(frozen=True)
class GradientStop:
    position: float
    color: str


def _split_args(params: str) -> list[str]:
    """Split on top-level commas so ``rgba(1, 2, 3)`` stays in one piece."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in params:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        elif ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    parts.append("".join(current).strip())
    return parts


def _is_direction(part: str) -> bool:
    return bool(_ANGLE_RE.fullmatch(part)) or part.startswith("to ")


def _split_stop(part: str) -> tuple[str, str | None]:
    color, _, position = part.rpartition(" ")
    if color and _POSITION_RE.fullmatch(position):
        return color.strip(), position
    return part, None


def parse_linear_gradient(gradient: str) -> list[GradientStop]:
    """Parse ``linear-gradient(...)`` into stops, in the order written.

    Stops without a position are spread evenly by their index.
    """
    match = _WRAPPER_RE.fullmatch(gradient.lower())
    if not match:
        raise FormatError(f"Invalid linear-gradient format: {gradient!r}")

    parts = [p for p in _split_args(match.group(1)) if p]
    while parts and _is_direction(parts[0]):
        parts.pop(0)
    if not parts:
        raise FormatError(f"Gradient has no color stops: {gradient!r}")

    count = len(parts)
    stops: list[GradientStop] = []
    for index, part in enumerate(parts):
        color, position_str = _split_stop(part)
        if position_str is None:
            position = index / (count - 1) if count > 1 else 0.0
        elif position_str.endswith("%"):
            position = float(position_str[:-1]) / 100
        else:
            position = float(position_str)
        stops.append(GradientStop(position=position, color=color))

    logger.debug("parse_linear_gradient %r -> %s", gradient, stops)
    return stops


def _bracket(stops: list[GradientStop], ratio: float) -> tuple[GradientStop, GradientStop]:
    for left, right in zip(stops, stops[1:]):
        if left.position <= ratio <= right.position:
            return left, right
    # Outside every segment: the clamped segment ratio pins to an endpoint.
    return stops[0], stops[-1]


def sample_gradient(
    stops: list[GradientStop],
    count: int,
    ignore_alpha: bool = False,
) -> list[str]:
    """Sample *count* evenly spaced colors from the gradient."""
    if not stops:
        raise FormatError("Gradient has no color stops")
    if count < 1:
        return []

    ordered = sorted(stops, key=lambda s: s.position)
    colors: list[str] = []
    for i in range(count):
        ratio = i / (count - 1) if count > 1 else 0.0
        left, right = _bracket(ordered, ratio)

        width = right.position - left.position
        if width:
            segment = (ratio - left.position) / width
        else:
            segment = 1.0 if ratio >= right.position else 0.0
        segment = max(0.0, min(1.0, segment))

        lr, lg, lb, la = parse_color(left.color)
        rr, rg, rb, ra = parse_color(right.color)
        r = round_half_up(lr + (rr - lr) * segment)
        g = round_half_up(lg + (rg - lg) * segment)
        b = round_half_up(lb + (rb - lb) * segment)
        a = 1.0 if ignore_alpha else la + (ra - la) * segment
        colors.append(format_color(r, g, b, a))

    logger.debug("sample_gradient(%d) -> %s", count, colors)
    return colors


def apply_gradient(text: str, gradient: str) -> str:
    """Prefix every non-whitespace character with a hex color code.

    Returns an empty string when *text* has no visible characters.
    """
    visible = sum(1 for ch in text if not ch.isspace())
    if visible == 0:
        return ""

    colors = iter(sample_gradient(parse_linear_gradient(gradient), visible, ignore_alpha=True))
    out: list[str] = []
    for ch in text:
        if ch.isspace():
            out.append(ch)
        else:
            out.append(f"{MARKER}{next(colors).upper()}{ch}")
    return "".join(out)
