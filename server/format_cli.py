#!/usr/bin/env python3
"""Normalize, strip or gradient-color dialog text from the command line."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from format_parser import parse_runs, strip_codes
from gradient import FormatError, apply_gradient
from normalizer import normalize

logger = logging.getLogger("format_cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Format-code tools for dialog text")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("normalize", "Remove redundant format codes"),
        ("strip", "Remove all format codes"),
        ("spans", "Print styled runs as JSON, one list per line"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("text", nargs="?", help="Input text (default: stdin)")

    grad = sub.add_parser("gradient", help="Color each visible character along a gradient")
    grad.add_argument("text", nargs="?", help="Input text (default: stdin)")
    grad.add_argument("--gradient", required=True, help="linear-gradient(...) description")
    grad.add_argument("--keep-codes", action="store_true", help="Do not strip existing codes first")

    lang = sub.add_parser("lang", help="Normalize every value of a language JSON file")
    lang.add_argument("path", type=Path)
    lang.add_argument("--write", action="store_true", help="Rewrite the file in place")

    parser.add_argument("--log-level", default=os.environ.get("DF_LOG_LEVEL", "WARNING"))
    return parser.parse_args(argv)


def read_text(value: str | None) -> str:
    if value is not None:
        return value
    return sys.stdin.read().rstrip("\n")


def load_lang_file(path: Path) -> dict[str, str]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} is not a key/value mapping")
    for key, value in data.items():
        if not isinstance(value, str):
            raise ValueError(f"{path}: value for {key!r} is not a string")
    return data


def normalize_lang(entries: dict[str, str]) -> dict[str, str]:
    return {key: normalize(value) for key, value in entries.items()}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "lang":
        try:
            entries = normalize_lang(load_lang_file(args.path))
        except (OSError, ValueError) as exc:
            logger.error("Cannot read language file: %s", exc)
            return 1
        rendered = json.dumps(entries, indent=2, ensure_ascii=False)
        if args.write:
            args.path.write_text(rendered + "\n", encoding="utf-8")
            logger.info("Wrote %d entries to %s", len(entries), args.path)
        else:
            print(rendered)
        return 0

    text = read_text(args.text)
    if args.command == "normalize":
        print(normalize(text))
    elif args.command == "strip":
        print(strip_codes(text))
    elif args.command == "spans":
        print(json.dumps(parse_runs(text), ensure_ascii=False))
    elif args.command == "gradient":
        if not args.keep_codes:
            text = strip_codes(text)
        try:
            annotated = apply_gradient(text, args.gradient)
        except FormatError as exc:
            logger.warning("Gradient not applied: %s", exc)
            return 1
        if not annotated:
            logger.warning("Gradient not applied: no visible text")
            return 1
        print(annotated)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
