"""
Command-line interface for notation files.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from lemma_markup import __version__
from lemma_markup.collection import EntryCollection
from lemma_markup.config import Settings, load_settings
from lemma_markup.exceptions import (
    ConfigError,
    ParseError,
    SourceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the lemma-markup CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        args.settings = load_settings(args.config) if args.config else Settings()
    except ConfigError as e:
        print(f"\n  [CONFIG ERROR] {e}")
        if e.line:
            print(f"                Line: {e.line}")
        return 1
    except SourceError as e:
        print(f"\n  [ERROR] {e}")
        return 1

    _configure_logging(args)
    return args.func(args)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="lemma-markup",
        description="Inspect and validate lemma markup files",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML settings file",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug messages",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    def add_command(name: str, help_text: str, func) -> argparse.ArgumentParser:
        command = subparsers.add_parser(name, help=help_text)
        command.add_argument(
            "files",
            type=Path,
            nargs="+",
            metavar="FILE",
            help="Notation file(s); several files are combined",
        )
        command.set_defaults(func=func)
        return command

    add_command("count", "Count entries", cmd_count)
    add_command("words", "List every headword and sub-entry", cmd_words)
    add_command("redirects", "List redirection entries", cmd_redirects)

    find_parser = subparsers.add_parser(
        "find-redirects",
        help="List entries redirecting to a target",
    )
    find_parser.add_argument("target", help="Headword being redirected to")
    find_parser.add_argument(
        "files",
        type=Path,
        nargs="+",
        metavar="FILE",
        help="Notation file(s)",
    )
    find_parser.add_argument(
        "--type",
        dest="relation_type",
        help="Only redirects tagged with this relation type",
    )
    find_parser.set_defaults(func=cmd_find_redirects)

    validate_parser = add_command("validate", "Validate a collection", cmd_validate)
    validate_parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop at the first error",
    )

    shortcuts_parser = add_command(
        "shortcuts", "Show sub-entries with the headword abbreviated", cmd_shortcuts
    )
    shortcuts_parser.add_argument(
        "--placeholder",
        help="Replacement for the headword (default from settings: ~)",
    )

    format_parser = add_command("format", "Print the collection in canonical form", cmd_format)
    format_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write to this file instead of standard output",
    )

    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    if args.verbose:
        level = "DEBUG"
    elif args.quiet:
        level = "ERROR"
    else:
        level = args.settings.log_level
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_collection(files: List[Path], settings: Settings) -> Optional[EntryCollection]:
    """Parse the given files, printing the error and returning None on failure."""
    try:
        collection = EntryCollection.load(files[0], encoding=settings.encoding)
        for path in files[1:]:
            collection.add_all(
                EntryCollection.load(path, encoding=settings.encoding),
                merge=settings.merge,
            )
    except ParseError as e:
        print(f"\n  [PARSE ERROR] {e}")
        return None
    except SourceError as e:
        print(f"\n  [ERROR] {e}")
        return None
    logger.debug("Loaded %d entries from %d file(s)", len(collection), len(files))
    return collection


def cmd_count(args: argparse.Namespace) -> int:
    """Handle count command."""
    collection = _load_collection(args.files, args.settings)
    if collection is None:
        return 1
    print(len(collection))
    return 0


def cmd_words(args: argparse.Namespace) -> int:
    """Handle words command."""
    collection = _load_collection(args.files, args.settings)
    if collection is None:
        return 1
    for word in collection.iter_words():
        print(word)
    return 0


def cmd_redirects(args: argparse.Namespace) -> int:
    """Handle redirects command."""
    collection = _load_collection(args.files, args.settings)
    if collection is None:
        return 1
    for entry in collection.redirected_entries():
        print(entry)
    return 0


def cmd_find_redirects(args: argparse.Namespace) -> int:
    """Handle find-redirects command."""
    collection = _load_collection(args.files, args.settings)
    if collection is None:
        return 1
    for entry in collection.find_redirections_to(args.target, args.relation_type):
        print(entry)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    collection = _load_collection(args.files, args.settings)
    if collection is None:
        return 1

    if args.fail_fast or args.settings.fail_fast:
        try:
            collection.validate()
        except ValidationError as e:
            print(f"  [ERROR] {e}")
            return 1
        print("Validation passed!")
        return 0

    issues = collection.validation_issues()
    for issue in issues:
        print(f"  [{issue.severity}] {issue.rule_id}: {issue.message}")

    if issues:
        print(f"\nFound {len(issues)} error(s) in {len(collection)} entries")
        return 1
    print("Validation passed!")
    return 0


def cmd_shortcuts(args: argparse.Namespace) -> int:
    """Handle shortcuts command."""
    collection = _load_collection(args.files, args.settings)
    if collection is None:
        return 1
    placeholder = args.placeholder or args.settings.placeholder
    for entry in collection.normal_entries():
        for text, shortcut in entry.shortcuts(placeholder).items():
            print(f"{entry.headword}: {text} -> {shortcut}")
    return 0


def cmd_format(args: argparse.Namespace) -> int:
    """Handle format command."""
    collection = _load_collection(args.files, args.settings)
    if collection is None:
        return 1

    if args.output is None:
        for line in collection.to_lines():
            print(line)
        return 0

    try:
        collection.save(args.output, encoding=args.settings.encoding)
    except SourceError as e:
        print(f"\n  [ERROR] {e}")
        return 1
    print(f"Wrote {len(collection)} entries to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
