"""Remove redundant format codes from dialog text.

Two passes over the token list:

1. ``collapse_superseded``: codes immediately followed by a color or reset
   code (no text between) are overwritten before anything uses them.
2. ``drop_redundant``: codes that re-apply a color, style or reset that is
   already in effect.
"""

from __future__ import annotations

from format_parser import MARKER, RESET, Style, StyleSpan, Token, tokenize


def collapse_superseded(tokens: list[Token]) -> list[Token]:
    """Keep only the last color/reset code (and what follows) of each code run."""
    out: list[Token] = []
    run: list[Token] = []

    def flush() -> None:
        cut = 0
        for i, token in enumerate(run):
            if token.category in ("color", "reset"):
                cut = i
        out.extend(run[cut:])
        run.clear()

    for token in tokens:
        if token.kind == "code":
            run.append(token)
        else:
            flush()
            out.append(token)
    flush()
    return out


# A code is at most 8 characters, so a literal marker within the last 7
# characters of emitted text could fuse with text that follows it.
_TAIL = 7


def _push_tail(tail: str, text: str) -> str:
    return (tail + text)[-_TAIL:]


def drop_redundant(tokens: list[Token]) -> list[Token]:
    """Drop codes that do not change the active color/style state.

    A repeated color code counts as redundant only while no style flag has
    been set since it; otherwise it still clears those flags and is kept.
    A redundant code is also kept when the text before it ends near a
    literal marker, since removing it would let that marker join the
    following text into a new code.
    """
    active_color = ""
    active_reset = False
    active_styles: set[str] = set()
    out: list[Token] = []
    tail = ""

    for token in tokens:
        category = token.category
        if category is None:
            out.append(token)
            tail = _push_tail(tail, token.value)
            continue

        redundant = False
        if category == "color":
            active_reset = False
            if token.raw == active_color and not active_styles:
                redundant = True
            else:
                active_color = token.raw
                active_styles.clear()
        elif category == "style":
            active_reset = False
            if token.raw in active_styles:
                redundant = True
            else:
                active_styles.add(token.raw)
        else:
            redundant = active_reset
            active_reset = True
            active_color = ""
            active_styles.clear()

        if not redundant or MARKER in tail:
            out.append(token)
            tail = ""
    return out


def normalize(text: str) -> str:
    """Return the minimal string with the same resolved styles as *text*."""
    tokens = drop_redundant(collapse_superseded(list(tokenize(text))))
    return "".join(token.raw for token in tokens)


def serialize_spans(spans: list[StyleSpan]) -> str:
    """Flatten styled spans back into normalized text with format codes."""
    out: list[str] = []
    previous = Style()
    tail = ""
    for span in spans:
        if not span.text:
            continue
        style = span.style
        if style != previous:
            if style.is_plain() or (style.color_code is None and not previous.is_plain()):
                out.append(MARKER + RESET)
            out.extend(MARKER + code for code in style.codes())
            previous = style
            tail = ""
        elif MARKER in tail:
            # Keep a code between the runs so they cannot fuse.
            out.extend(MARKER + code for code in style.codes() or [RESET])
            tail = ""
        out.append(span.text)
        tail = _push_tail(tail, span.text)
    return normalize("".join(out))
