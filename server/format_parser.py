"""Format-code (``§``) tokenizer and style cascade.

Converts dialog text with embedded format codes into structured spans:
  "§cHello §lworld" -> [Hello (red), world (red, bold)]

A code is ``§`` followed by a color digit ``0-f``, a style letter
``k l m n o``, the reset letter ``r``, or ``#`` and six hex digits.
Anything else after ``§`` is ordinary text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterator

from palette import MARKER, palette_color_by_index

COLOR_MNEMONICS = "0123456789abcdef"
RESET = "r"

# Mnemonic -> StyleState attribute. Color codes and reset clear all of these.
STYLE_MNEMONICS = {
    "l": "bold",
    "o": "italic",
    "n": "underline",
    "m": "strikethrough",
    "k": "obfuscated",
}

# Editor toolbar names. "color" is a category tag only, never a toggle.
STYLE_NAMES = {
    "color": "c",
    "bold": "l",
    "italic": "o",
    "underline": "n",
    "strikethrough": "m",
    "obfuscated": "k",
    "reset": RESET,
}

_CODE_RE = re.compile(MARKER + r"([0-9a-fk-or]|#[0-9a-fA-F]{6})")

_FLAGS = tuple(STYLE_MNEMONICS.values())


def code_category(payload: str) -> str:
    """Classify a code payload as ``"color"``, ``"style"`` or ``"reset"``."""
    if payload == RESET:
        return "reset"
    if payload in STYLE_MNEMONICS:
        return "style"
    if payload.startswith("#") or payload in COLOR_MNEMONICS:
        return "color"
    raise ValueError(f"Unknown format code payload: {payload!r}")


@dataclass(frozen=True)
class Token:
    kind: str  # "text" or "code"
    value: str
    start: int
    end: int

    @property
    def raw(self) -> str:
        return MARKER + self.value if self.kind == "code" else self.value

    @property
    def category(self) -> str | None:
        return code_category(self.value) if self.kind == "code" else None


def tokenize(text: str) -> Iterator[Token]:
    """Yield text and code tokens left to right.

    Zero-length text tokens are never produced. Each call scans from the
    start of *text*.
    """
    last = 0
    for match in _CODE_RE.finditer(text):
        if match.start() > last:
            yield Token("text", text[last:match.start()], last, match.start())
        yield Token("code", match.group(1), match.start(), match.end())
        last = match.end()
    if last < len(text):
        yield Token("text", text[last:], last, len(text))


def strip_codes(text: str) -> str:
    """Remove every format code, keeping malformed ``§`` sequences."""
    return _CODE_RE.sub("", text)


@dataclass(frozen=True)
class Style:
    color: str | None = None
    color_code: str | None = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    obfuscated: bool = False

    def is_plain(self) -> bool:
        return self.color is None and not any(getattr(self, f) for f in _FLAGS)

    def codes(self) -> list[str]:
        """Payloads that recreate this style from a clean state."""
        out = [self.color_code] if self.color_code else []
        out.extend(m for m, f in STYLE_MNEMONICS.items() if getattr(self, f))
        return out

    def to_run(self, text: str) -> dict[str, Any]:
        """Build a compact run dict, omitting falsy fields."""
        run: dict[str, Any] = {"t": text}
        if self.color:
            run["color"] = self.color
        if self.bold:
            run["b"] = True
        if self.italic:
            run["i"] = True
        if self.underline:
            run["u"] = True
        if self.strikethrough:
            run["s"] = True
        if self.obfuscated:
            run["o"] = True
        return run


class StyleState:
    __slots__ = ("color", "color_code", "bold", "italic", "underline", "strikethrough", "obfuscated")

    def __init__(self) -> None:
        self.color: str | None = None
        self.color_code: str | None = None
        self.bold: bool = False
        self.italic: bool = False
        self.underline: bool = False
        self.strikethrough: bool = False
        self.obfuscated: bool = False

    def reset(self) -> None:
        self.color = None
        self.color_code = None
        self.clear_flags()

    def clear_flags(self) -> None:
        self.bold = False
        self.italic = False
        self.underline = False
        self.strikethrough = False
        self.obfuscated = False

    def apply(self, token: Token) -> None:
        """Apply one code token to the state."""
        category = token.category
        if category == "reset":
            self.reset()
        elif category == "color":
            payload = token.value
            if payload.startswith("#"):
                self.color = payload.upper()
            else:
                self.color = palette_color_by_index(payload)
            self.color_code = payload
            self.clear_flags()
        elif category == "style":
            setattr(self, STYLE_MNEMONICS[token.value], True)

    def snapshot(self) -> Style:
        return Style(**{name: getattr(self, name) for name in self.__slots__})


@dataclass(frozen=True)
class StyleSpan:
    """A run of text sharing one style.

    ``start``/``end`` index the text with codes removed; ``source_start``/
    ``source_end`` index the original string.
    """

    start: int
    end: int
    source_start: int
    source_end: int
    text: str
    style: Style = field(default_factory=Style)


def parse_spans(text: str) -> list[StyleSpan]:
    """Resolve the style of every text run in a single forward pass."""
    state = StyleState()
    spans: list[StyleSpan] = []
    offset = 0
    for token in tokenize(text):
        if token.kind == "code":
            state.apply(token)
            continue
        end = offset + len(token.value)
        spans.append(StyleSpan(offset, end, token.start, token.end, token.value, state.snapshot()))
        offset = end
    return spans


def style_at(text: str, offset: int) -> Style:
    """Return the style in effect at *offset* of the source string.

    Codes that end at or before *offset* have been applied.
    """
    state = StyleState()
    for token in tokenize(text):
        if token.kind != "code":
            continue
        if token.end > offset:
            break
        state.apply(token)
    return state.snapshot()


def parse_runs(text: str) -> list[list[dict[str, Any]]]:
    """Parse multi-line text into run dicts, one list per line.

    Style carries across line breaks.
    """
    lines: list[list[dict[str, Any]]] = [[]]
    for span in parse_spans(text):
        pieces = span.text.split("\n")
        for i, piece in enumerate(pieces):
            if i:
                lines.append([])
            if piece:
                lines[-1].append(span.style.to_run(piece))
    return lines
