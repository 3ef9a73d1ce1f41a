"""
miuscript CLI Entrypoint.

This module provides the command-line interface for the miuscript front end.

Features:
    - Read source from `.miu` files or inline strings.
    - Lex and parse, then print the canonical rendering or the JSON tree.
    - Report every parser diagnostic on stderr and exit with status 1.
    - Launch the interactive REPL.

Example usage:
    miuscript hello.miu
    miuscript -s "let x = 1 + 2 * 3;"
    miuscript hello.miu --json -o hello.json
    miuscript --repl --verbose

Logging:
    `--verbose` turns on DEBUG logging; otherwise the level is read from the
    `MIUSCRIPT_LOG_LEVEL` environment variable (default WARNING).
"""

import argparse
import json
import logging
import os
import sys

from miuscript.miu_lexer import CharacterStream, Lexer
from miuscript.miu_parser import Parser

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".miu"
LOG_LEVEL_ENV = "MIUSCRIPT_LOG_LEVEL"


def configure_logging(verbose: bool = False) -> None:
    level_name = "DEBUG" if verbose else os.getenv(LOG_LEVEL_ENV, "WARNING")
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level, format="%(levelname)s %(name)s: %(message)s", force=True
    )


def run_miu(
    source: str,
    is_string: bool = False,
    as_json: bool = False,
    out: str | None = None,
) -> bool:
    """
    Run the miuscript front end: lex, parse, and print or write the result.

    Args:
        source (str): The source code, or a path to a `.miu` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        as_json (bool): If True, output the JSON tree instead of canonical source.
        out (str | None): Optional path to write the output to instead of stdout.

    Returns:
        bool: True if the source parsed without diagnostics.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.miu'.
    """
    if not is_string and not source.endswith(SOURCE_SUFFIX):
        raise ValueError(f"Only {SOURCE_SUFFIX} files are supported.")
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    parser = Parser(Lexer(CharacterStream(source)))
    program = parser.parse_program()

    if parser.errors:
        for msg in parser.errors:
            print(msg, file=sys.stderr)
        return False

    if as_json:
        text = json.dumps(program.to_dict(), indent=2)
    else:
        text = program.render()

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        logger.info("wrote %s", out)
    else:
        print(text)
    return True


def main() -> None:
    """
    Entry point for the miuscript CLI.

    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise parses the given file or string and exits 1 on diagnostics.
    """
    parser = argparse.ArgumentParser(prog="miuscript")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--json", dest="as_json", action="store_true", help="Print the AST as JSON"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--repl", action="store_true", help="Launch interactive REPL"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Debug logging; JSON trees in the REPL"
    )

    args = parser.parse_args()
    configure_logging(args.verbose)

    if args.repl or args.source is None:
        from miuscript.miu_repl import start_repl

        start_repl(verbose=args.verbose)
        return

    ok = run_miu(
        source=args.source,
        is_string=args.string,
        as_json=args.as_json,
        out=args.out,
    )
    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
