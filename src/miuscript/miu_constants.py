"""
Token categories and lookup tables for the miuscript language.

Operator and delimiter categories are named by the symbol they stand for, so a
token's category doubles as its canonical spelling (`"+"`, `"=="`, `"("`).
Keywords and literal kinds use upper-case names.

Exports:
    - Category constants (`EOF`, `IDENT`, `PLUS`, ...)
    - keywords: reserved word -> category
    - token_hashmap: operator/delimiter symbol -> category
"""

ILLEGAL = "ILLEGAL"
EOF = "EOF"

# Identifiers + literals
IDENT = "IDENT"
INT = "INT"
STRING = "STRING"

# Operators
ASSIGN = "="
PLUS = "+"
MINUS = "-"
ASTERISK = "*"
BANG = "!"
SLASH = "/"

EQ = "=="
NOT_EQ = "!="
LT = "<"
GT = ">"

# Delimiters
COMMA = ","
SEMICOLON = ";"
COLON = ":"

LPAREN = "("
RPAREN = ")"
LBRACE = "{"
RBRACE = "}"
LBRACKET = "["
RBRACKET = "]"

# Keywords
LET = "LET"
FUNCTION = "FUNCTION"
IF = "IF"
ELSE = "ELSE"
RETURN = "RETURN"
TRUE = "TRUE"
FALSE = "FALSE"

keywords: dict[str, str] = {
    "let": LET,
    "fn": FUNCTION,
    "if": IF,
    "else": ELSE,
    "return": RETURN,
    "true": TRUE,
    "false": FALSE,
}

token_hashmap: dict[str, str] = {
    sym: sym
    for sym in (
        ASSIGN,
        PLUS,
        MINUS,
        ASTERISK,
        BANG,
        SLASH,
        EQ,
        NOT_EQ,
        LT,
        GT,
        COMMA,
        SEMICOLON,
        COLON,
        LPAREN,
        RPAREN,
        LBRACE,
        RBRACE,
        LBRACKET,
        RBRACKET,
    )
}


def lookup_ident(ident: str) -> str:
    """Returns the keyword category for `ident`, or `IDENT` if it is not reserved."""
    return keywords.get(ident, IDENT)


__all__ = [
    "ASSIGN",
    "ASTERISK",
    "BANG",
    "COLON",
    "COMMA",
    "ELSE",
    "EOF",
    "EQ",
    "FALSE",
    "FUNCTION",
    "GT",
    "IDENT",
    "IF",
    "ILLEGAL",
    "INT",
    "LBRACE",
    "LBRACKET",
    "LET",
    "LPAREN",
    "LT",
    "MINUS",
    "NOT_EQ",
    "PLUS",
    "RBRACE",
    "RBRACKET",
    "RETURN",
    "RPAREN",
    "SEMICOLON",
    "SLASH",
    "STRING",
    "TRUE",
    "keywords",
    "lookup_ident",
    "token_hashmap",
]
