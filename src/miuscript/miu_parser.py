"""
miuscript Language Parser

Parses a miuscript token stream into an abstract syntax tree rooted at `Program`.

This module implements a precedence-climbing (Pratt) parser. Every token category
that can start an expression has a prefix production, and every category that can
continue one (binary operators, call `(`, index `[`) has an infix production. The
productions live in two tables built per parser instance, and a static precedence
table decides how tightly each infix operator binds.

Supported Constructs
--------------------
- Statements:
    * `let <ident> = <expr>;`
    * `return <expr>;`
    * expression statements, with an optional trailing `;`
    * `{ ... }` blocks inside `if` and `fn`

- Expressions:
    * Literals: integers, strings, `true` / `false`, arrays `[...]`, hashes `{k: v}`
    * Prefix operators: `!x`, `-x`
    * Infix operators: `+ - * / == != < >`, left-associative
    * Grouping `( ... )`, calls `f(a, b)`, indexing `xs[i]`
    * `if (cond) { ... } else { ... }` and `fn(a, b) { ... }`

Parser Behavior
---------------
- Never raises on bad input. Syntax problems become entries in `diagnostics`
  (`ExpectedTokenError`, `NoPrefixProductionError`, `MalformedLiteralError`,
  `NestingTooDeepError`) and the parse carries on at the next statement boundary.
- Expressions nest at most `MAX_NESTING_DEPTH` levels; deeper input is reported
  instead of exhausting the interpreter stack.
- A failed expression production leaves a `Missing` node in the tree; a failed
  `let` statement is dropped from the program.
- One-token lookahead: `current` and `peek` are the only buffered tokens.
- Single use: construct, call `parse_program()` once, read `errors`.

Entry Points
------------
- `Parser(source).parse_program()`: Parse a whole token source into a `Program`.
- `parse(text)`: Lex and parse a source string; returns `(program, errors)`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import IntEnum
from types import MappingProxyType

from miuscript.miu_ast import (
    ArrayLiteral,
    BlockStatement,
    Boolean,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionLiteral,
    HashLiteral,
    Identifier,
    IfExpression,
    IndexExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    Missing,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
    StringLiteral,
)
from miuscript.miu_constants import (
    ASSIGN,
    ASTERISK,
    BANG,
    COLON,
    COMMA,
    ELSE,
    EOF,
    EQ,
    FALSE,
    FUNCTION,
    GT,
    IDENT,
    IF,
    INT,
    LBRACE,
    LBRACKET,
    LET,
    LPAREN,
    LT,
    MINUS,
    NOT_EQ,
    PLUS,
    RBRACE,
    RBRACKET,
    RETURN,
    RPAREN,
    SEMICOLON,
    SLASH,
    STRING,
    TRUE,
)
from miuscript.miu_errors import (
    ExpectedTokenError,
    MalformedLiteralError,
    NestingTooDeepError,
    NoPrefixProductionError,
    ParseError,
)
from miuscript.miu_lexer import CharacterStream, Lexer, Token, TokenSource

logger = logging.getLogger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Each level costs several interpreter frames (up to five through `if`/`fn` blocks).
MAX_NESTING_DEPTH = 100


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2  # ==
    LESSGREATER = 3  # > or <
    SUM = 4  # +
    PRODUCT = 5  # *
    PREFIX = 6  # -x or !x
    CALL = 7  # f(x)
    INDEX = 8  # xs[i]


precedences: MappingProxyType[str, Precedence] = MappingProxyType(
    {
        EQ: Precedence.EQUALS,
        NOT_EQ: Precedence.EQUALS,
        LT: Precedence.LESSGREATER,
        GT: Precedence.LESSGREATER,
        PLUS: Precedence.SUM,
        MINUS: Precedence.SUM,
        SLASH: Precedence.PRODUCT,
        ASTERISK: Precedence.PRODUCT,
        LPAREN: Precedence.CALL,
        LBRACKET: Precedence.INDEX,
    }
)


def precedence_of(category: str) -> Precedence:
    return precedences.get(category, Precedence.LOWEST)


PrefixProduction = Callable[[], Expression]
InfixProduction = Callable[[Expression], Expression]


class Parser:
    """
    miuscript Parser Class

    Pulls tokens from a `TokenSource` and builds a `Program`. Diagnostics are
    accumulated in order for the whole parse and never cleared.

    Attributes
    ----------
    source : TokenSource
        The token supplier; read forward only.
    current : Token
        The token under examination.
    peek : Token
        The token after `current`.
    diagnostics : list[ParseError]
        Every syntax error recorded so far, in the order found.
    depth : int
        Number of `parse_expression` calls currently open.
    prefix_productions : dict[str, PrefixProduction]
        Leading-token category -> production.
    infix_productions : dict[str, InfixProduction]
        Following-token category -> production taking the left operand.

    Methods
    -------
    parse_program() -> Program
        Parse the entire token source.
    parse_statement() -> Statement | None
        Parse one statement starting at `current`.
    parse_expression(precedence) -> Expression
        Precedence-climbing expression core.
    parse_expression_list(end) -> tuple[Expression, ...] | None
        Comma-separated expressions up to `end`; shared by calls and arrays.
    """

    def __init__(self, source: TokenSource) -> None:
        self.source = source
        self.diagnostics: list[ParseError] = []
        self.depth = 0
        self._used = False

        self.current: Token = Token(EOF, "")
        self.peek: Token = Token(EOF, "")
        self.next_token()
        self.next_token()

        self.prefix_productions: dict[str, PrefixProduction] = {
            IDENT: self.parse_identifier,
            INT: self.parse_integer_literal,
            STRING: self.parse_string_literal,
            TRUE: self.parse_boolean,
            FALSE: self.parse_boolean,
            BANG: self.parse_prefix_expression,
            MINUS: self.parse_prefix_expression,
            LPAREN: self.parse_grouped_expression,
            IF: self.parse_if_expression,
            FUNCTION: self.parse_function_literal,
            LBRACKET: self.parse_array_literal,
            LBRACE: self.parse_hash_literal,
        }

        self.infix_productions: dict[str, InfixProduction] = {
            PLUS: self.parse_infix_expression,
            MINUS: self.parse_infix_expression,
            SLASH: self.parse_infix_expression,
            ASTERISK: self.parse_infix_expression,
            EQ: self.parse_infix_expression,
            NOT_EQ: self.parse_infix_expression,
            LT: self.parse_infix_expression,
            GT: self.parse_infix_expression,
            LPAREN: self.parse_call_expression,
            LBRACKET: self.parse_index_expression,
        }

    @property
    def errors(self) -> list[str]:
        """Diagnostic messages in the order they were recorded."""
        return [d.message for d in self.diagnostics]

    # Token handling

    def next_token(self) -> None:
        self.current = self.peek
        self.peek = self.source.next_token()

    def current_is(self, category: str) -> bool:
        return self.current.type == category

    def peek_is(self, category: str) -> bool:
        return self.peek.type == category

    def expect_peek(self, category: str) -> bool:
        """Advances if `peek` is `category`; otherwise records an ExpectedTokenError."""
        if self.peek_is(category):
            self.next_token()
            return True
        self.record(ExpectedTokenError(category, self.peek))
        return False

    def peek_precedence(self) -> Precedence:
        return precedence_of(self.peek.type)

    def current_precedence(self) -> Precedence:
        return precedence_of(self.current.type)

    def record(self, error: ParseError) -> None:
        logger.debug(
            "line %d, col %d: %s", error.token.line, error.token.col, error.message
        )
        self.diagnostics.append(error)

    # Statements

    def parse_program(self) -> Program:
        """Parse statements until EOF and return the finished tree."""
        if self._used:
            raise RuntimeError("Parser instances are single-use; create a new Parser.")
        self._used = True

        first = self.current
        statements: list[Statement] = []
        while not self.current_is(EOF):
            statement = self.parse_statement()
            if statement is not None:
                statements.append(statement)
            self.next_token()

        logger.debug(
            "parsed %d statement(s) with %d diagnostic(s)",
            len(statements),
            len(self.diagnostics),
        )
        return Program(first, tuple(statements))

    def parse_statement(self) -> Statement | None:
        if self.current_is(LET):
            return self.parse_let_statement()
        if self.current_is(RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> LetStatement | None:
        tok = self.current

        if not self.expect_peek(IDENT):
            return None
        name = Identifier(self.current, self.current.literal)

        if not self.expect_peek(ASSIGN):
            return None
        self.next_token()

        value = self.parse_expression(Precedence.LOWEST)

        if self.peek_is(SEMICOLON):
            self.next_token()

        return LetStatement(tok, name, value)

    def parse_return_statement(self) -> ReturnStatement:
        tok = self.current
        self.next_token()

        value = self.parse_expression(Precedence.LOWEST)

        # Skip to the terminating `;` even past a malformed value.
        while not self.current_is(SEMICOLON) and not self.current_is(EOF):
            self.next_token()

        return ReturnStatement(tok, value)

    def parse_expression_statement(self) -> ExpressionStatement:
        tok = self.current
        value = self.parse_expression(Precedence.LOWEST)

        if self.peek_is(SEMICOLON):
            self.next_token()

        return ExpressionStatement(tok, value)

    def parse_block_statement(self) -> BlockStatement:
        tok = self.current
        body: list[Statement] = []

        self.next_token()
        while not self.current_is(RBRACE) and not self.current_is(EOF):
            statement = self.parse_statement()
            if statement is not None:
                body.append(statement)
            self.next_token()

        return BlockStatement(tok, tuple(body))

    # Expressions

    def parse_expression(self, precedence: Precedence) -> Expression:
        if self.depth >= MAX_NESTING_DEPTH:
            self.record(NestingTooDeepError(self.current, MAX_NESTING_DEPTH))
            return Missing(self.current)
        prefix = self.prefix_productions.get(self.current.type)
        if prefix is None:
            self.record(NoPrefixProductionError(self.current))
            return Missing(self.current)

        self.depth += 1
        try:
            left = prefix()

            while not self.peek_is(SEMICOLON) and precedence < self.peek_precedence():
                infix = self.infix_productions.get(self.peek.type)
                if infix is None:
                    return left
                self.next_token()
                left = infix(left)

            return left
        finally:
            self.depth -= 1

    def parse_identifier(self) -> Expression:
        return Identifier(self.current, self.current.literal)

    def parse_integer_literal(self) -> Expression:
        tok = self.current
        try:
            value = int(tok.literal, 10)
        except ValueError:
            self.record(MalformedLiteralError(tok))
            return Missing(tok)
        if not INT64_MIN <= value <= INT64_MAX:
            self.record(MalformedLiteralError(tok))
            return Missing(tok)
        return IntegerLiteral(tok, value)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.current, self.current.literal)

    def parse_boolean(self) -> Expression:
        return Boolean(self.current, self.current_is(TRUE))

    def parse_prefix_expression(self) -> Expression:
        tok = self.current
        self.next_token()
        operand = self.parse_expression(Precedence.PREFIX)
        return PrefixExpression(tok, tok.literal, operand)

    def parse_infix_expression(self, left: Expression) -> Expression:
        tok = self.current
        precedence = self.current_precedence()
        self.next_token()
        right = self.parse_expression(precedence)
        return InfixExpression(tok, tok.literal, left, right)

    def parse_grouped_expression(self) -> Expression:
        tok = self.current
        self.next_token()

        expression = self.parse_expression(Precedence.LOWEST)

        if not self.expect_peek(RPAREN):
            return Missing(tok)
        return expression

    def parse_if_expression(self) -> Expression:
        tok = self.current

        if not self.expect_peek(LPAREN):
            return Missing(tok)
        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)

        if not self.expect_peek(RPAREN):
            return Missing(tok)
        if not self.expect_peek(LBRACE):
            return Missing(tok)
        consequence = self.parse_block_statement()

        alternative = None
        if self.peek_is(ELSE):
            self.next_token()
            if not self.expect_peek(LBRACE):
                return Missing(tok)
            alternative = self.parse_block_statement()

        return IfExpression(tok, condition, consequence, alternative)

    def parse_function_literal(self) -> Expression:
        tok = self.current

        if not self.expect_peek(LPAREN):
            return Missing(tok)
        parameters = self.parse_function_parameters()
        if parameters is None:
            return Missing(tok)

        if not self.expect_peek(LBRACE):
            return Missing(tok)
        body = self.parse_block_statement()

        return FunctionLiteral(tok, parameters, body)

    def parse_function_parameters(self) -> tuple[Identifier, ...] | None:
        if self.peek_is(RPAREN):
            self.next_token()
            return ()

        parameters: list[Identifier] = []
        if not self.expect_peek(IDENT):
            return None
        parameters.append(Identifier(self.current, self.current.literal))

        while self.peek_is(COMMA):
            self.next_token()
            if not self.expect_peek(IDENT):
                return None
            parameters.append(Identifier(self.current, self.current.literal))

        if not self.expect_peek(RPAREN):
            return None
        return tuple(parameters)

    def parse_call_expression(self, callee: Expression) -> Expression:
        tok = self.current
        arguments = self.parse_expression_list(RPAREN)
        if arguments is None:
            return Missing(tok)
        return CallExpression(tok, callee, arguments)

    def parse_index_expression(self, collection: Expression) -> Expression:
        tok = self.current
        self.next_token()
        index = self.parse_expression(Precedence.LOWEST)

        if not self.expect_peek(RBRACKET):
            return Missing(tok)
        return IndexExpression(tok, collection, index)

    def parse_array_literal(self) -> Expression:
        tok = self.current
        elements = self.parse_expression_list(RBRACKET)
        if elements is None:
            return Missing(tok)
        return ArrayLiteral(tok, elements)

    def parse_hash_literal(self) -> Expression:
        tok = self.current
        pairs: list[tuple[Expression, Expression]] = []

        while not self.peek_is(RBRACE):
            self.next_token()
            key = self.parse_expression(Precedence.LOWEST)

            if not self.expect_peek(COLON):
                return Missing(tok)
            self.next_token()
            value = self.parse_expression(Precedence.LOWEST)
            pairs.append((key, value))

            if not self.peek_is(RBRACE) and not self.expect_peek(COMMA):
                return Missing(tok)

        self.next_token()
        return HashLiteral(tok, tuple(pairs))

    def parse_expression_list(self, end: str) -> tuple[Expression, ...] | None:
        """Parse `expr (, expr)*` followed by `end`; `None` if `end` is missing."""
        if self.peek_is(end):
            self.next_token()
            return ()

        items: list[Expression] = []
        self.next_token()
        items.append(self.parse_expression(Precedence.LOWEST))

        while self.peek_is(COMMA):
            self.next_token()
            self.next_token()
            items.append(self.parse_expression(Precedence.LOWEST))

        if not self.expect_peek(end):
            return None
        return tuple(items)


def parse(source: str) -> tuple[Program, list[str]]:
    """Lex and parse a source string.

    Returns:
        The program and its diagnostic messages. A non-empty message list means
        the tree is only fit for error reporting, not execution.
    """
    parser = Parser(Lexer(CharacterStream(source)))
    program = parser.parse_program()
    return program, parser.errors


__all__ = [
    "MAX_NESTING_DEPTH",
    "Parser",
    "Precedence",
    "parse",
    "precedence_of",
    "precedences",
]
