"""The 16-color legacy palette addressed by format-code digits 0-f."""

from __future__ import annotations

from types import MappingProxyType

MARKER = "§"

# Palette order matters: digit N of a color code selects entry N.
COLORS = MappingProxyType({
    "black": "#000000",
    "dark_blue": "#0000AA",
    "dark_green": "#00AA00",
    "dark_aqua": "#00AAAA",
    "dark_red": "#AA0000",
    "dark_purple": "#AA00AA",
    "gold": "#FFAA00",
    "gray": "#AAAAAA",
    "dark_gray": "#555555",
    "blue": "#5555FF",
    "green": "#55FF55",
    "aqua": "#55FFFF",
    "red": "#FF5555",
    "light_purple": "#FF55FF",
    "yellow": "#FFFF55",
    "white": "#FFFFFF",
})

_NAMES = tuple(COLORS)


def palette_color(name: str) -> str:
    """Return the hex value for a palette name, or *name* unchanged."""
    if not name:
        return name
    return COLORS.get(name, name)


def _index(digit: str | int) -> int:
    if isinstance(digit, bool):
        raise ValueError(f"Invalid palette index: {digit!r}")
    if isinstance(digit, int):
        index = digit
    elif isinstance(digit, str) and len(digit) == 1 and digit.lower() in "0123456789abcdef":
        index = int(digit, 16)
    else:
        raise ValueError(f"Invalid palette digit: {digit!r}")
    if not 0 <= index < len(_NAMES):
        raise ValueError(f"Palette index out of range: {digit!r}")
    return index


def palette_name_by_index(digit: str | int) -> str:
    return _NAMES[_index(digit)]


def palette_color_by_index(digit: str | int) -> str:
    """Look up a palette color by its hex digit (``"c"``) or int index.

    Raises ValueError for anything outside 0-f: a bad digit here means a
    malformed format code reached the caller.
    """
    return COLORS[_NAMES[_index(digit)]]


def color_code(name: str) -> str | None:
    """Return the mnemonic digit for a palette name, e.g. ``"red" -> "c"``."""
    try:
        return format(_NAMES.index(name), "x")
    except ValueError:
        return None


def resolve_color(value: str) -> str:
    """Resolve ``§c``, ``§#RRGGBB`` or a palette name to a hex color.

    Anything unrecognised is returned as-is.
    """
    if not value:
        return value
    if value.startswith(MARKER):
        payload = value[len(MARKER):]
        # Hex literals are passed through without validation.
        if payload.startswith("#"):
            return payload
        try:
            return palette_color_by_index(payload)
        except ValueError:
            return value
    return palette_color(value)
