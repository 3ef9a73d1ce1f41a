"""
Defines the abstract syntax tree (AST) for the miuscript programming language.

The tree has two disjoint node families and one root:

    Statement:  LetStatement, ReturnStatement, ExpressionStatement, BlockStatement
    Expression: Identifier, IntegerLiteral, Boolean, StringLiteral,
                PrefixExpression, InfixExpression, IfExpression, FunctionLiteral,
                CallExpression, ArrayLiteral, HashLiteral, IndexExpression, Missing
    Root:       Program

Every node is a frozen dataclass that keeps the token it was built from. The
token is there for diagnostics and positions only: it takes no part in
equality, so two trees parsed from differently formatted sources compare equal
when their structure does. Child sequences are tuples, which keeps source order
and makes the finished tree immutable.

`Missing` marks an expression whose production failed. The failure has already
been recorded in the parser's diagnostics. Optional-by-grammar fields (the
`else` branch of an `if`) use `None` instead, so "absent" and "failed" never
look alike.

Each node tracks:
    kind (str): A snake_case tag naming the variant (e.g. "let", "infix", "call").
    token (Token): The originating token.

Usage:
    >>> program, errors = parse("let x = 5;")
    >>> program.render()
    'let x = 5;'
    >>> program.to_dict()["kind"]
    'program'
"""

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from miuscript.miu_lexer import Token

ASTDict = dict[str, Any]
"""Serialized node: `kind`, `line`, `col`, plus one key per node field."""


def _children(node: "Node") -> list[tuple[str, Any]]:
    return [(f.name, getattr(node, f.name)) for f in fields(node) if f.name != "token"]


def _nodes_in(value: Any) -> list["Node"]:
    if isinstance(value, Node):
        return [value]
    if isinstance(value, tuple):
        return [n for v in value for n in _nodes_in(v)]
    return []


def _serialize(value: Any, done: dict[int, ASTDict]) -> Any:
    if isinstance(value, Node):
        return done[id(value)]
    if isinstance(value, tuple):
        return [_serialize(v, done) for v in value]
    return value


@dataclass(frozen=True)
class Node:
    """
    Base class of every AST node.

    Attributes:
        token (Token): The token the node was built from.
        kind (str): Class-level tag naming the variant.

    Methods:
        to_dict(): Converts the node and its descendants into plain dicts and lists.
        render(): Returns canonical miuscript source text for the node.
    """

    kind: ClassVar[str] = "node"

    token: Token = field(compare=False, repr=False)

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def col(self) -> int:
        return self.token.col

    def to_dict(self) -> ASTDict:
        # Children are serialized before their parent from an explicit stack, so
        # long left-leaning operator chains do not recurse.
        done: dict[int, ASTDict] = {}
        stack: list[tuple[Node, bool]] = [(self, False)]
        while stack:
            node, ready = stack.pop()
            if not ready:
                stack.append((node, True))
                for _, value in _children(node):
                    stack.extend((child, False) for child in _nodes_in(value))
                continue
            data: ASTDict = {"kind": node.kind, "line": node.line, "col": node.col}
            for name, value in _children(node):
                data[name] = _serialize(value, done)
            done[id(node)] = data
        return done[id(self)]

    def render(self) -> str:
        from miuscript.emitters.source_emitter import SourceEmitter

        return SourceEmitter().emit(self)

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class Statement(Node):
    """A node that can stand on its own in a program or block."""


@dataclass(frozen=True)
class Expression(Node):
    """A node that produces a value."""


# Expressions


@dataclass(frozen=True)
class Identifier(Expression):
    kind: ClassVar[str] = "identifier"

    name: str


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    kind: ClassVar[str] = "integer"

    value: int


@dataclass(frozen=True)
class Boolean(Expression):
    kind: ClassVar[str] = "boolean"

    value: bool


@dataclass(frozen=True)
class StringLiteral(Expression):
    """String contents between the quotes, escape sequences kept as written."""

    kind: ClassVar[str] = "string"

    value: str


@dataclass(frozen=True)
class PrefixExpression(Expression):
    kind: ClassVar[str] = "prefix"

    operator: str
    operand: Expression


@dataclass(frozen=True)
class InfixExpression(Expression):
    kind: ClassVar[str] = "infix"

    operator: str
    left: Expression
    right: Expression


@dataclass(frozen=True)
class BlockStatement(Statement):
    kind: ClassVar[str] = "block"

    body: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class IfExpression(Expression):
    kind: ClassVar[str] = "if"

    condition: Expression
    consequence: BlockStatement
    alternative: BlockStatement | None = None


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    kind: ClassVar[str] = "function"

    parameters: tuple[Identifier, ...]
    body: BlockStatement


@dataclass(frozen=True)
class CallExpression(Expression):
    kind: ClassVar[str] = "call"

    callee: Expression
    arguments: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class ArrayLiteral(Expression):
    kind: ClassVar[str] = "array"

    elements: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class HashLiteral(Expression):
    """Key/value pairs in source order; duplicate keys are kept as written."""

    kind: ClassVar[str] = "hash"

    pairs: tuple[tuple[Expression, Expression], ...] = ()


@dataclass(frozen=True)
class IndexExpression(Expression):
    kind: ClassVar[str] = "index"

    collection: Expression
    index: Expression


@dataclass(frozen=True)
class Missing(Expression):
    """Placeholder for an expression whose production failed and was reported."""

    kind: ClassVar[str] = "missing"


# Statements


@dataclass(frozen=True)
class LetStatement(Statement):
    kind: ClassVar[str] = "let"

    name: Identifier
    value: Expression


@dataclass(frozen=True)
class ReturnStatement(Statement):
    kind: ClassVar[str] = "return"

    value: Expression


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    kind: ClassVar[str] = "expression_statement"

    value: Expression


# Root


@dataclass(frozen=True)
class Program(Node):
    """Root of a parsed source; owns the whole tree."""

    kind: ClassVar[str] = "program"

    statements: tuple[Statement, ...] = ()

    def contains_missing(self) -> bool:
        """True if any production in the tree failed and left a `Missing` behind."""
        stack: list[Any] = [self]
        while stack:
            item = stack.pop()
            if isinstance(item, Missing):
                return True
            if isinstance(item, tuple):
                stack.extend(item)
            elif isinstance(item, Node):
                stack.extend(value for _, value in _children(item))
        return False


__all__ = [
    "ASTDict",
    "ArrayLiteral",
    "BlockStatement",
    "Boolean",
    "CallExpression",
    "Expression",
    "ExpressionStatement",
    "FunctionLiteral",
    "HashLiteral",
    "Identifier",
    "IfExpression",
    "IndexExpression",
    "InfixExpression",
    "IntegerLiteral",
    "LetStatement",
    "Missing",
    "Node",
    "PrefixExpression",
    "Program",
    "ReturnStatement",
    "Statement",
    "StringLiteral",
]
