"""
Syntax diagnostics recorded by the miuscript parser.

The parser never raises these. Each failed production builds one and appends it
to the parser's diagnostics list, then carries on with the next statement, so a
single pass surfaces every problem it can find.

Classes:
    - ParseError: Base class; carries the offending token.
    - ExpectedTokenError: A required keyword or delimiter was not the one observed.
    - NoPrefixProductionError: An expression starts with a token that cannot begin one.
    - MalformedLiteralError: Literal text does not fit its target numeric type.
    - NestingTooDeepError: An expression nests deeper than the parser will follow.
"""

from miuscript.miu_lexer import Token


class ParseError(Exception):
    """Base class for every recorded syntax diagnostic.

    Attributes:
        token (Token): The token the parser was looking at when the error was found.
    """

    def __init__(self, message: str, token: Token):
        super().__init__(message)
        self.token = token

    @property
    def message(self) -> str:
        return str(self)


class ExpectedTokenError(ParseError):
    """A required token category `want` was not the one the parser found.

    Example:
        ExpectedTokenError("=", Token("INT", "5"))
        # expected next token to be `=`, got `INT`
    """

    def __init__(self, want: str, token: Token):
        super().__init__(
            f"expected next token to be `{want}`, got `{token.type}`", token
        )
        self.want = want


class NoPrefixProductionError(ParseError):
    def __init__(self, token: Token):
        super().__init__(f"no prefix production for `{token.type}`", token)


class MalformedLiteralError(ParseError):
    def __init__(self, token: Token):
        super().__init__(
            f"could not parse `{token.literal}` as a 64-bit integer", token
        )


class NestingTooDeepError(ParseError):
    def __init__(self, token: Token, limit: int):
        super().__init__(f"expression nested deeper than {limit} levels", token)
        self.limit = limit


__all__ = [
    "ExpectedTokenError",
    "MalformedLiteralError",
    "NestingTooDeepError",
    "NoPrefixProductionError",
    "ParseError",
]
