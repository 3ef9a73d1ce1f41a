"""
Lexical analyzer for the miuscript programming language.

This module provides the token source consumed by the parser:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with category, literal text, and source location.
    TokenSource: Protocol for anything that can hand the parser its next token.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips whitespace and single-line comments (`#`)
    - Longest-match recognition of operators (`==` before `=`, `!=` before `!`)
    - Recognizes:
        * ASCII identifiers and keywords (`let`, `fn`, `if`, `else`, `return`, `true`, `false`)
        * Integer literals (ASCII decimal digits)
        * Double-quoted strings (escape sequences are kept raw)
        * Operators and delimiters

The lexer never raises on user input. Characters it cannot place, and strings
that run off the end of the source, come back as `ILLEGAL` tokens so that the
parser can report them alongside every other diagnostic.

Example:
    >>> lexer = Lexer(CharacterStream("let x = 5;"))
    >>> lexer.next_token()
    Token(LET, let)

Exports:
    - CharacterStream
    - Token
    - TokenSource
    - Lexer
    - tokenize
"""

import logging
from typing import Any, Protocol

from miuscript.miu_constants import (
    EOF,
    IDENT,
    ILLEGAL,
    INT,
    STRING,
    lookup_ident,
    token_hashmap,
)

logger = logging.getLogger(__name__)


class CharacterStream:
    """Forward-only cursor over source text, tracking the 1-based line and column."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 1

    def next(self) -> str:
        """Consumes one character; raises EOFError past the end of the source."""
        if self.end_of_file():
            raise EOFError(f"read past end of source at line {self.line}")
        char = self.source[self.position]
        self.position += 1
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """The character `offset` places ahead, or "" past the end."""
        start = self.position + offset
        return self.source[start : start + 1]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


def is_ident_start(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == "_")


def is_ident_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


def is_digit(ch: str) -> bool:
    return ch.isascii() and ch.isdigit()


class Token:
    """Represents a single lexical token.

    Attributes:
        type (str): The token category (e.g. 'IDENT', 'INT', '+', 'EOF').
        literal (str): The exact source text of the token.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: str, literal: str, line: int = 0, col: int = 0):
        self.type = type_
        self.literal = literal
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.literal})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.literal == other.literal
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.literal, self.line, self.col))


class TokenSource(Protocol):
    """Sequential token supplier consumed by the parser.

    Each call advances the source; there is no rewind. Once the input is
    exhausted every further call returns an `EOF` token.
    """

    def next_token(self) -> Token: ...  # pragma: no cover


class Lexer:
    """Lexical analyzer for miuscript.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek() in " \t\r\n":
                self.advance()
            elif self.peek() == "#":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def match_operator(self) -> Token | None:
        """Attempts to match the longest operator or delimiter at the current position.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        max_token = None
        match_len = 0
        candidate = ""

        for i in range(2):  # longest symbol is two characters
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in token_hashmap:
                max_token = candidate
                match_len = i + 1

        if max_token:
            for _ in range(match_len):
                self.advance()
            return Token(token_hashmap[max_token], max_token, line, col)

        return None

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token; `EOF` once the source is exhausted.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return Token(EOF, "", self.stream.line, self.stream.column)

        ch = self.peek()
        line, col = self.stream.line, self.stream.column

        # 1. Identifier or keyword
        if is_ident_start(ch):
            ident = ""
            while not self.stream.end_of_file() and is_ident_char(self.peek()):
                ident += self.advance()
            return Token(lookup_ident(ident), ident, line, col)

        # 2. Integer
        if is_digit(ch):
            num = ""
            while not self.stream.end_of_file() and is_digit(self.peek()):
                num += self.advance()
            return Token(INT, num, line, col)

        # 3. String
        if ch == '"':
            self.advance()
            val = ""
            while not self.stream.end_of_file():
                if self.peek() == "\\":
                    val += self.advance()
                    if not self.stream.end_of_file():
                        val += self.advance()
                elif self.peek() == '"':
                    break
                else:
                    val += self.advance()
            if self.peek() == '"':
                self.advance()
                return Token(STRING, val, line, col)
            logger.debug("unterminated string at line %d, col %d", line, col)
            return Token(ILLEGAL, '"' + val, line, col)

        # 4. Operator or delimiter
        token = self.match_operator()
        if token:
            return token

        # 5. Unknown character
        logger.debug("illegal character %r at line %d, col %d", ch, line, col)
        return Token(ILLEGAL, self.advance(), line, col)


def tokenize(source: str) -> list[Token]:
    """Lexes `source` completely; the returned list ends with the `EOF` token."""
    lexer = Lexer(CharacterStream(source))
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type == EOF:
            break
    return tokens


__all__ = ["CharacterStream", "Lexer", "Token", "TokenSource", "tokenize"]
