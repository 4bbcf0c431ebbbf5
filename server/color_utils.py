"""Parse and format RGB(A) colors as hex or ``rgba()`` strings."""

from __future__ import annotations

import logging
import math
import re

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"#([0-9a-fA-F]{6})([0-9a-fA-F]{2})?")
_RGBA_RE = re.compile(
    r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*(\d*\.?\d+)\s*)?\)",
    re.IGNORECASE,
)

Rgba = tuple[int, int, int, float]

_DEFAULT: Rgba = (0, 0, 0, 1.0)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp_channel(value: float) -> int:
    return max(0, min(255, round_half_up(value)))


def parse_color(color: str) -> Rgba:
    """Parse ``#RRGGBB``, ``#RRGGBBAA`` or ``rgb[a](r, g, b[, a])``.

    Malformed input yields opaque black instead of raising.
    """
    color = (color or "").strip()
    match = _HEX_RE.fullmatch(color)
    if match:
        rgb, alpha = match.groups()
        r, g, b = (int(rgb[i:i + 2], 16) for i in (0, 2, 4))
        a = int(alpha, 16) / 255 if alpha else 1.0
        return r, g, b, a

    match = _RGBA_RE.fullmatch(color)
    if match:
        r, g, b = (int(match.group(i)) for i in (1, 2, 3))
        a = float(match.group(4)) if match.group(4) is not None else 1.0
        return r, g, b, a

    logger.debug("Unparseable color %r, using black", color)
    return _DEFAULT


def format_color(
    r: float,
    g: float,
    b: float,
    a: float | None = None,
    ignore_alpha_if_opaque: bool = True,
) -> str:
    """Encode channels as lowercase ``#rrggbb`` or ``#rrggbbaa``."""
    hex_str = "#" + "".join(f"{_clamp_channel(c):02x}" for c in (r, g, b))
    if a is not None and not (ignore_alpha_if_opaque and a == 1.0):
        hex_str += f"{_clamp_channel(a * 255):02x}"
    return hex_str


def rgba_string_to_hex(rgba: str) -> str:
    match = _RGBA_RE.fullmatch((rgba or "").strip())
    if not match:
        raise ValueError(f"Invalid RGBA format: {rgba!r}")
    r, g, b = (int(match.group(i)) for i in (1, 2, 3))
    a = float(match.group(4)) if match.group(4) is not None else None
    return format_color(r, g, b, a)
