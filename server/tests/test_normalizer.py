from pathlib import Path
import sys
import unittest

SERVER_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(SERVER_DIR))

from format_parser import parse_spans, tokenize
from normalizer import collapse_superseded, drop_redundant, normalize, serialize_spans


def _resolved(text):
    """(text, style) pairs with adjacent equal styles merged."""
    merged = []
    for span in parse_spans(text):
        style = (span.style.color, span.style.bold, span.style.italic, span.style.underline,
                 span.style.strikethrough, span.style.obfuscated)
        if merged and merged[-1][1] == style:
            merged[-1] = (merged[-1][0] + span.text, style)
        else:
            merged.append((span.text, style))
    return merged


SAMPLES = [
    "",
    "plain text",
    "§l§ltext",
    "§c§dtext",
    "§cHello§r",
    "§r§rA§r",
    "§l§o§cA§lB§lC§r§r",
    "§cA§l§cB",
    "§cA§cB§#FF5555C",
    "§k§#00ff00§mA§m§nB§0",
    "§zA§l§",
    "§lA\n§lB§r\n§rC",
    "§l§§lc",
    "§cx§§r§rr",
    "§l§#ab§lcdef01",
]


class NormalizeTests(unittest.TestCase):
    def test_duplicate_style_collapses(self):
        self.assertEqual(normalize("§l§ltext"), "§ltext")

    def test_superseded_color_collapses(self):
        self.assertEqual(normalize("§c§dtext"), "§dtext")

    def test_styles_before_color_are_dropped(self):
        self.assertEqual(normalize("§l§o§ctext"), "§ctext")

    def test_styles_after_color_are_kept(self):
        self.assertEqual(normalize("§c§l§otext"), "§c§l§otext")

    def test_non_adjacent_duplicate_style(self):
        self.assertEqual(normalize("§lA§lB"), "§lAB")

    def test_repeated_color(self):
        self.assertEqual(normalize("§cA§cB"), "§cAB")

    def test_repeated_reset(self):
        self.assertEqual(normalize("§rA§rB"), "§rAB")

    def test_trailing_reset_run(self):
        self.assertEqual(normalize("§cA§l§r"), "§cA§r")

    def test_color_after_style_is_kept(self):
        self.assertEqual(normalize("§c§lA§cB"), "§c§lA§cB")

    def test_hex_never_equals_named(self):
        self.assertEqual(normalize("§cA§#FF5555B"), "§cA§#FF5555B")

    def test_hex_compared_textually(self):
        self.assertEqual(normalize("§#abcdefA§#abcdefB"), "§#abcdefAB")

    def test_malformed_codes_untouched(self):
        self.assertEqual(normalize("§z§z"), "§z§z")

    def test_literal_marker_does_not_fuse_with_next_text(self):
        self.assertEqual(normalize("§l§§lc"), "§l§§lc")
        self.assertEqual(normalize("§l§#ab§lcdef01"), "§l§#ab§lcdef01")

    def test_redundant_code_dropped_away_from_marker(self):
        self.assertEqual(normalize("§l§zzzzzzzz§lc"), "§l§zzzzzzzzc")

    def test_idempotent(self):
        for text in SAMPLES:
            with self.subTest(text=text):
                once = normalize(text)
                self.assertEqual(normalize(once), once)

    def test_preserves_resolved_styles(self):
        for text in SAMPLES:
            with self.subTest(text=text):
                self.assertEqual(_resolved(normalize(text)), _resolved(text))


class PassTests(unittest.TestCase):
    def test_collapse_keeps_last_color_or_reset(self):
        tokens = collapse_superseded(list(tokenize("§l§c§o§d§nA")))
        self.assertEqual([t.raw for t in tokens], ["§d", "§n", "A"])

    def test_collapse_leaves_style_runs(self):
        tokens = collapse_superseded(list(tokenize("§c§l§oA")))
        self.assertEqual([t.raw for t in tokens], ["§c", "§l", "§o", "A"])

    def test_drop_redundant_alone_keeps_superseded(self):
        tokens = drop_redundant(list(tokenize("§c§dA")))
        self.assertEqual([t.raw for t in tokens], ["§c", "§d", "A"])


class SerializeTests(unittest.TestCase):
    def test_round_trip(self):
        for text in SAMPLES + ["§lA§cB§r§oC", "§#ABCDEFx y§l z"]:
            with self.subTest(text=text):
                flat = serialize_spans(parse_spans(text))
                self.assertEqual(_resolved(flat), _resolved(text))

    def test_plain_after_styled_emits_reset(self):
        self.assertEqual(serialize_spans(parse_spans("§lA§rB")), "§lA§rB")

    def test_uncolored_style_change_resets(self):
        self.assertEqual(serialize_spans(parse_spans("§l§oA§r§nB")), "§l§oA§r§nB")

    def test_same_style_spans_share_codes(self):
        self.assertEqual(serialize_spans(parse_spans("§cA§cB")), "§cAB")

    def test_literal_marker_keeps_runs_apart(self):
        self.assertEqual(serialize_spans(parse_spans("§l§§lc")), "§l§§lc")
        self.assertEqual(serialize_spans(parse_spans("§§rc")), "§§rc")


if __name__ == "__main__":
    unittest.main()
