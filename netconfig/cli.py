from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from netconfig.core.document import ConfigDocument
from netconfig.core.entry import FILE_NAME, GLOBAL_LOCATION, SYSTEM_LOCATION, ConfigLevel
from netconfig.core.errors import MalformedConfigLine, MultipleValuesError

EXIT_NOT_FOUND = 1
EXIT_MALFORMED = 3
EXIT_IO = 4
EXIT_MULTIPLE_VALUES = 5

logger = logging.getLogger(__name__)


def split_key(key: str) -> Tuple[str, Optional[str], str]:
    """Split ``section[.subsection].name`` into its three parts.

    The subsection is everything between the first and the last dot, so it
    may itself contain dots.
    """

    section, dot, rest = key.partition(".")
    if not dot or not section or not rest:
        raise ValueError(f"key does not contain a section: {key}")
    subsection, dot, name = rest.rpartition(".")
    if not name:
        raise ValueError(f"key does not contain a variable name: {key}")
    return section, (subsection if dot else None), name


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netconfig", description="Query and edit a configuration file in place."
    )
    location = parser.add_mutually_exclusive_group()
    location.add_argument("--file", type=Path, help=f"Config file to use (default ./{FILE_NAME})")
    location.add_argument("--global", dest="use_global", action="store_true", help="Use the per-user file")
    location.add_argument("--system", dest="use_system", action="store_true", help="Use the system-wide file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="List every variable")
    for name in ("get", "get-all"):
        sub = commands.add_parser(name, help=f"Print the {'last' if name == 'get' else 'every'} matching value")
        sub.add_argument("key")
        sub.add_argument("value_regex", nargs="?")
    for name in ("add", "set"):
        sub = commands.add_parser(name, help=f"{name.capitalize()} a variable")
        sub.add_argument("key")
        sub.add_argument("value", nargs="?")
    sub = commands.add_parser("unset", help="Remove a single-valued variable")
    sub.add_argument("key")
    sub = commands.add_parser("set-all", help="Replace every matching value")
    sub.add_argument("key")
    sub.add_argument("value")
    sub.add_argument("value_regex", nargs="?")
    sub = commands.add_parser("unset-all", help="Remove every matching value")
    sub.add_argument("key")
    sub.add_argument("value_regex", nargs="?")
    return parser


def _open_document(args: argparse.Namespace) -> ConfigDocument:
    if args.use_global:
        return ConfigDocument.from_file(GLOBAL_LOCATION, ConfigLevel.GLOBAL)
    if args.use_system:
        return ConfigDocument.from_file(SYSTEM_LOCATION, ConfigLevel.SYSTEM)
    return ConfigDocument.from_file(args.file or Path.cwd() / FILE_NAME)


def _format(value: Optional[str]) -> str:
    return "true" if value is None else value


def _run(doc: ConfigDocument, args: argparse.Namespace) -> int:
    if args.command == "list":
        for entry in doc:
            print(f"{entry.key}={_format(entry.value)}")
        return 0

    section, subsection, name = split_key(args.key)
    if args.command in ("get", "get-all"):
        entries = list(doc.find(section, subsection, name, args.value_regex))
        if not entries:
            return EXIT_NOT_FOUND
        if args.command == "get":
            entries = entries[-1:]
        for entry in entries:
            print(_format(entry.value))
        return 0

    if args.command == "add":
        doc.add(section, subsection, name, args.value)
    elif args.command == "set":
        doc.set(section, subsection, name, args.value)
    elif args.command == "unset":
        if not any(doc.find(section, subsection, name)):
            return EXIT_NOT_FOUND
        doc.unset(section, subsection, name)
    elif args.command == "set-all":
        doc.set_all(section, subsection, name, args.value, args.value_regex)
    elif args.command == "unset-all":
        doc.unset_all(section, subsection, name, args.value_regex)
    doc.save()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        doc = _open_document(args)
        logger.debug("Using %s config at %s", doc.level.value, doc.path)
        return _run(doc, args)
    except MalformedConfigLine as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_MALFORMED
    except MultipleValuesError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_MULTIPLE_VALUES
    except (ValueError, re.error) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_IO


if __name__ == "__main__":
    sys.exit(main())
