"""
Interactive read-parse-print loop for miuscript.

Each input is lexed and parsed. When the parser reports diagnostics, every one
of them is printed; otherwise the canonical rendering of the program is echoed
back, which shows how the parser grouped the input. Nothing is evaluated.

Commands:
    exit, quit     Leave the REPL.
    verbose-mode   Toggle printing of the JSON tree after each parse.

Inputs with unbalanced `{` continue on the next line with a `... ` prompt.
Braces inside string literals and comments do not count.
"""

import json
import logging

from miuscript.miu_constants import LBRACE, RBRACE
from miuscript.miu_lexer import tokenize
from miuscript.miu_parser import parse

logger = logging.getLogger(__name__)

PROMPT = ">> "
CONTINUATION_PROMPT = "... "

MIU_FACE = r"""
        /\_/\
   /\  ( o.o )   < miuscript parser error >
  /  \  > ^ <     neko can't parse this... try again.
"""


def print_parser_errors(errors: list[str]) -> None:
    print(MIU_FACE)
    print("parser errors:")
    for msg in errors:
        print(f"\t{msg}")


def read_source() -> str | None:
    """Reads one logical input, following `{`/`}` balance across lines.

    Returns:
        The joined source, or None if the user asked to leave.
    """
    src_lines: list[str] = []
    brace_count = 0
    while True:
        line = input(PROMPT if not src_lines else CONTINUATION_PROMPT)
        if line.strip() in ("exit", "quit") and not src_lines:
            return None
        src_lines.append(line)
        for tok in tokenize(line):
            if tok.type == LBRACE:
                brace_count += 1
            elif tok.type == RBRACE:
                brace_count -= 1
        if brace_count <= 0:
            break
    return "\n".join(src_lines).strip()


def start_repl(verbose: bool = False) -> None:
    print("miuscript REPL. Type 'exit' or 'quit' to leave.")

    while True:
        try:
            src = read_source()
            if src is None:
                print("Exiting miuscript REPL.")
                return
            if not src or src.startswith("#"):
                continue
            if src.lower() == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue

            program, errors = parse(src)
            logger.debug("%d statement(s) from %r", len(program.statements), src)
            if errors:
                print_parser_errors(errors)
                continue

            print(program.render())
            if verbose:
                print(json.dumps(program.to_dict(), indent=2))

        except (KeyboardInterrupt, EOFError):
            print("\nExiting miuscript REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
