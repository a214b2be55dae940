#!/usr/bin/env python3
"""
CLI entry point for the specter vocabulary and UI helpers.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import configure_logging, get_config
from .models.constants import (
    DEFAULTS,
    ENUMERATIONS,
    LINT_SOURCES,
    LOG_LEVELS,
    LintSource,
    LogLevel,
    Platform,
    is_member,
    parse_member,
)
from .models.errors import SpecterToolError
from .models.lint_result import build_lint_result, create_lint_summary, parse_lint_report
from .models.log_entry import LogFilter, filter_log_entries, generate_log_summary, parse_log_output
from .models.ui_context import create_element_summary, element_to_dict
from .mobile.ui_normalizer import extract_interactive_elements, map_element_type, parse_hierarchy


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="specter",
        description="Inspect the shared Android/iOS vocabulary and normalize captured UI hierarchies.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    vocab = sub.add_parser("vocab", help="List valid tags for all enumerations (or one).")
    vocab.add_argument("name", nargs="?", choices=sorted(ENUMERATIONS), help="Enumeration name.")

    check = sub.add_parser("check", help="Exit 0 if VALUE is a valid tag of ENUM, 1 otherwise.")
    check.add_argument("enum", choices=sorted(ENUMERATIONS))
    check.add_argument("value")

    classify = sub.add_parser("classify", help="Map a native widget name to a unified element type.")
    classify.add_argument("--platform", required=True, help="android or ios")
    classify.add_argument("native_name")

    summarize = sub.add_parser("summarize", help="Summarize a captured UI hierarchy XML file.")
    summarize.add_argument("--platform", required=True, help="android or ios")
    summarize.add_argument("xml_path")
    summarize.add_argument(
        "--all",
        action="store_true",
        help="Include non-interactive and invisible elements.",
    )
    summarize.add_argument("--json", action="store_true", help="Print elements as JSON.")

    logs = sub.add_parser("logs", help="Filter and summarize a saved logcat or unified-log dump.")
    logs.add_argument("--platform", required=True, help="android or ios")
    logs.add_argument("log_path")
    logs.add_argument("--min-level", choices=LOG_LEVELS, help="Drop entries below this severity.")
    logs.add_argument("--tag", action="append", default=[], help="Keep only this tag (repeatable).")
    logs.add_argument("--grep", help="Regex matched against message and tag.")
    logs.add_argument(
        "--limit",
        type=int,
        default=DEFAULTS["LOG_LIMIT"],
        help="Keep the newest N entries (0 for all).",
    )

    lint = sub.add_parser("lint", help="Summarize a detekt, ktlint or Android Lint XML report.")
    lint.add_argument("--linter", required=True, choices=LINT_SOURCES)
    lint.add_argument("report_path")

    sub.add_parser("serve", help="Run the MCP server over stdio.")
    return parser


def _cmd_vocab(name: Optional[str]) -> int:
    names = [name] if name else list(ENUMERATIONS)
    for key in names:
        print(f"{key}: {', '.join(m.value for m in ENUMERATIONS[key])}")
    return 0


def _cmd_check(enum_name: str, value: str) -> int:
    if is_member(ENUMERATIONS[enum_name], value):
        print(f"✓ {value!r} is a valid {enum_name}")
        return 0
    print(f"✗ {value!r} is not a valid {enum_name}")
    return 1


def _cmd_classify(platform_raw: str, native_name: str) -> int:
    platform = parse_member(Platform, platform_raw, field="platform")
    print(map_element_type(platform, native_name).value)
    return 0


def _cmd_summarize(platform_raw: str, xml_path: str, *, include_all: bool, as_json: bool) -> int:
    platform = parse_member(Platform, platform_raw, field="platform")
    path = Path(xml_path)
    if not path.is_file():
        print(f"UI XML file not found: {path}", file=sys.stderr)
        return 2

    all_elements = parse_hierarchy(platform, path.read_text(encoding="utf-8"), include_invisible=include_all)
    elements = all_elements if include_all else extract_interactive_elements(all_elements)

    if as_json:
        print(json.dumps([element_to_dict(el) for el in elements], indent=2))
        return 0

    print(f"Parsed {len(all_elements)} element(s), showing {len(elements)}")
    print(create_element_summary(elements))
    return 0


def _read_file(path_str: str, what: str) -> Optional[str]:
    path = Path(path_str)
    if not path.is_file():
        print(f"{what} file not found: {path}", file=sys.stderr)
        return None
    return path.read_text(encoding="utf-8", errors="replace")


def _cmd_logs(args: argparse.Namespace) -> int:
    platform = parse_member(Platform, args.platform, field="platform")
    text = _read_file(args.log_path, "Log")
    if text is None:
        return 2

    entries = parse_log_output(platform, text)
    log_filter = LogFilter(
        min_level=LogLevel(args.min_level) if args.min_level else None,
        tags=tuple(args.tag),
        pattern=args.grep,
        limit=args.limit,
    )
    print(generate_log_summary(platform, filter_log_entries(entries, log_filter)))
    return 0


def _cmd_lint(linter_raw: str, report_path: str) -> int:
    linter = LintSource(linter_raw)
    xml = _read_file(report_path, "Lint report")
    if xml is None:
        return 2

    result = build_lint_result(linter, parse_lint_report(linter, xml))
    print(create_lint_summary(result))
    return 0 if result.success else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(get_config())

    try:
        if args.command == "vocab":
            return _cmd_vocab(args.name)
        if args.command == "check":
            return _cmd_check(args.enum, args.value)
        if args.command == "classify":
            return _cmd_classify(args.platform, args.native_name)
        if args.command == "summarize":
            return _cmd_summarize(args.platform, args.xml_path, include_all=args.all, as_json=args.json)
        if args.command == "logs":
            return _cmd_logs(args)
        if args.command == "lint":
            return _cmd_lint(args.linter, args.report_path)
        if args.command == "serve":
            from .server import main as serve

            serve()
            return 0
    except SpecterToolError as e:
        print(f"[{e.code.value}] {e.message}", file=sys.stderr)
        if e.suggestion:
            print(f"  hint: {e.suggestion}", file=sys.stderr)
        return 2
    return 2


if __name__ == "__main__":
    sys.exit(main())
