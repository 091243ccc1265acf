#!/usr/bin/env python3
"""
xkey - extract string literals into Flutter ARB localization files

Takes a string literal selected in source code, derives a camelCase key and
an ICU template from it, appends both to every configured ARB file without
reformatting them, prints the reference that should replace the literal, and
optionally runs `flutter gen-l10n`.

Commands:
    extract  - Add the selected text to the localization files
    preview  - Show the derived key, template and reference without writing
    check    - Validate the config and every output file
    gen      - Run the configured generator command

Example:
    xkey extract --text '"Hello, ${name}!"' --type name=String
    → Adds "helloName": "Hello, {name}!" (+ @helloName metadata) and prints
      the reference, e.g. S.of(context).helloName(name)
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import load_config
from .errors import ExtractError
from .extractor import PresetPrompter, Prompter, extract_localization_key
from .generator import describe_outcome, run_generator
from .patcher import ArbPatcher
from .transform import (
    build_reference,
    clean_selection,
    extract_placeholders,
    is_valid_key,
    key_from_selection,
    meaning_from_selection,
)


CANCEL_ANSWER = "-"


class TerminalPrompter(Prompter):
    """Interactive prompts on stdin/stderr; flag values become the defaults."""

    def __init__(self, key: Optional[str] = None, types: Optional[dict[str, str]] = None):
        self.key = key
        self.types = types or {}

    def _ask(self, prompt: str, default: str) -> Optional[str]:
        """Empty answer takes the default; "-" or end of input cancels."""
        print(f"{prompt} [{default}] (- to cancel): ", end="", file=sys.stderr, flush=True)
        try:
            answer = input()
        except EOFError:
            return None
        answer = answer.strip()
        if answer == CANCEL_ANSWER:
            return None
        return answer or default

    def ask_key(self, default: str) -> Optional[str]:
        return self._ask("Enter localization key", self.key or default)

    def ask_placeholder_type(self, name: str) -> Optional[str]:
        return self._ask(
            f"Enter data type for placeholder '{name}' (e.g., String, int)",
            self.types.get(name, "String"),
        )


def parse_types(values: Optional[list[str]]) -> dict[str, str]:
    """Parse repeated ``name=Type`` flags."""
    types = {}
    for value in values or []:
        name, sep, declared = value.partition("=")
        if not sep or not name.strip():
            raise argparse.ArgumentTypeError(f"Invalid --type '{value}', expected name=Type")
        types[name.strip()] = declared.strip()
    return types


def read_selection(args) -> str:
    if args.text is not None:
        return args.text
    return sys.stdin.read()


def cmd_extract(args) -> dict:
    """Extract the selection into the localization files."""
    types = parse_types(args.type)
    if args.interactive:
        prompter = TerminalPrompter(key=args.key, types=types)
    else:
        prompter = PresetPrompter(key=args.key, types=types)

    result = extract_localization_key(
        read_selection(args),
        Path(args.root),
        prompter,
        run_gen=not args.no_gen,
    )

    output = result.to_dict()
    if result.generator is not None:
        # Block until the generator finishes so its outcome is part of the report
        error = result.generator.exception()
        output["generator"] = describe_outcome(result.generator)
        if error is not None:
            output["status"] = "partial"
    return output


def cmd_preview(args) -> dict:
    """Show what extract would do."""
    cleaned = clean_selection(read_selection(args))
    key = args.key or key_from_selection(cleaned)
    placeholders = extract_placeholders(cleaned)

    result = {
        "status": "ok",
        "key": key,
        "key_valid": is_valid_key(key),
        "text": meaning_from_selection(cleaned),
        "placeholders": placeholders,
    }

    if args.root:
        config = load_config(Path(args.root))
        result["reference"] = build_reference(config.prefix, key, placeholders)

    return result


def cmd_check(args) -> dict:
    """Validate config and output files."""
    root = Path(args.root)
    config = load_config(root)
    patcher = ArbPatcher()

    files = []
    for path in config.resolve_output_files(root):
        entry = {"path": str(path), "status": "ok"}
        try:
            errors = patcher.validate_content(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            errors = [f"Cannot read file: {e}"]
        if errors:
            entry["status"] = "error"
            entry["errors"] = errors
        files.append(entry)

    failed = [f for f in files if f["status"] != "ok"]
    return {
        "status": "ok" if not failed else "error",
        "config": config.to_dict(),
        "files": files,
        "summary": f"{len(files) - len(failed)}/{len(files)} output file(s) valid.",
    }


def cmd_gen(args) -> dict:
    """Run the configured generator and wait for it."""
    root = Path(args.root)
    config = load_config(root)
    command = config.generator.command
    if not command:
        return {
            "status": "ok",
            "summary": "No generator configured.",
        }

    future = run_generator(command, root)
    future.exception()
    return describe_outcome(future)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="xkey",
        description="xkey - extract string literals into Flutter ARB localization files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Config (extract_localization_config.yaml in the project root):
  outputFiles:
    - lib/l10n/app_en.arb
  prefix: S.of(context)
  generator: default   # none | default (flutter gen-l10n) | any command

Examples:
  # Extract with a key derived from the text
  xkey extract --text '"Welcome back!"'

  # Explicit key and placeholder types
  xkey extract --text 'Hello, ${name}!' --key greeting --type name=String

  # Ask for the key and types on the terminal
  xkey extract --text 'You have $count items' --interactive

  # Preview without writing
  xkey preview --text 'Hello, $name!' --root .
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser("extract", help="Add selected text to the localization files")
    extract_parser.add_argument("--text", "-t", help="Selected text (default: read stdin)")
    extract_parser.add_argument("--key", "-k", help="Localization key (default: derived from text)")
    extract_parser.add_argument("--type", "-T", action="append", metavar="NAME=TYPE",
                                help="Placeholder type, repeatable (e.g., name=String)")
    extract_parser.add_argument("--root", "-r", default=".", help="Project root (default: current directory)")
    extract_parser.add_argument("--interactive", "-i", action="store_true",
                                help="Prompt for the key and placeholder types")
    extract_parser.add_argument("--no-gen", action="store_true", help="Do not run the generator command")

    preview_parser = subparsers.add_parser("preview", help="Show derived key, template and placeholders")
    preview_parser.add_argument("--text", "-t", help="Selected text (default: read stdin)")
    preview_parser.add_argument("--key", "-k", help="Localization key to use in the reference")
    preview_parser.add_argument("--root", "-r", help="Project root, to include the reference token")

    check_parser = subparsers.add_parser("check", help="Validate config and output files")
    check_parser.add_argument("--root", "-r", default=".", help="Project root (default: current directory)")

    gen_parser = subparsers.add_parser("gen", help="Run the configured generator command")
    gen_parser.add_argument("--root", "-r", default=".", help="Project root (default: current directory)")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "extract":
            result = cmd_extract(args)
        elif args.command == "preview":
            result = cmd_preview(args)
        elif args.command == "check":
            result = cmd_check(args)
        elif args.command == "gen":
            result = cmd_gen(args)
    except ExtractError as e:
        print(json.dumps(e.to_dict(), indent=2, ensure_ascii=False), file=sys.stderr)
        return 1
    except argparse.ArgumentTypeError as e:
        print(json.dumps({
            "status": "error",
            "error_type": "INVALID_ARGUMENT",
            "error": str(e),
        }), file=sys.stderr)
        return 2

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0 if result.get("status") == "ok" else 1


if __name__ == "__main__":
    sys.exit(main())
