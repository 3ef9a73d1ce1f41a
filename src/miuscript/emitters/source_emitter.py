"""
Renders miuscript AST nodes back into canonical miuscript source.

This module defines the `SourceEmitter` class, used by `Node.render()` (and so
`str(node)`) to turn a tree back into text. The output is built to be parsed
again: feeding it back through the parser yields a structurally equal tree.

Canonical form:
    - Every statement ends in `;`; top-level statements go one per line.
    - Prefix and infix expressions are fully parenthesized: `(-a)`, `(a + b)`.
    - Index expressions are parenthesized: `(xs[i])`.
    - Blocks render on one line: `{ a; b; }`, or `{}` when empty.
    - Strings are re-quoted with their escape sequences exactly as written.
    - Hash pairs keep their source order.
    - Left-leaning runs of infix, call and index nodes (`a + b + c`, `f()()`,
      `xs[0][1]`) are rendered in a loop, so their length is not bounded by the
      interpreter stack.

Raises:
    - `NotImplementedError`: If a node kind has no `emit_*` method.
"""

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
    Node,
    PrefixExpression,
    Program,
    ReturnStatement,
    StringLiteral,
)


class SourceEmitter:
    """Emits canonical miuscript source from AST nodes.

    Methods:
        emit(node): Dispatches to the `emit_<kind>` method for `node`.
    """

    def emit(self, node: Node) -> str:
        method_name = f"emit_{node.kind}"
        emit_method = getattr(self, method_name, None)
        if emit_method is None:
            raise NotImplementedError(
                f"No emitter method for node kind '{node.kind}' "
                f"(line {node.line}, col {node.col})"
            )
        result: str = emit_method(node)
        return result

    def emit_program(self, node: Program) -> str:
        return "\n".join(self.emit(s) for s in node.statements)

    # Statements

    def emit_let(self, node: LetStatement) -> str:
        return f"let {self.emit(node.name)} = {self.emit(node.value)};"

    def emit_return(self, node: ReturnStatement) -> str:
        return f"return {self.emit(node.value)};"

    def emit_expression_statement(self, node: ExpressionStatement) -> str:
        return f"{self.emit(node.value)};"

    def emit_block(self, node: BlockStatement) -> str:
        if not node.body:
            return "{}"
        return "{ " + " ".join(self.emit(s) for s in node.body) + " }"

    # Expressions

    def emit_identifier(self, node: Identifier) -> str:
        return node.name

    def emit_integer(self, node: IntegerLiteral) -> str:
        return str(node.value)

    def emit_boolean(self, node: Boolean) -> str:
        return "true" if node.value else "false"

    def emit_string(self, node: StringLiteral) -> str:
        return f'"{node.value}"'

    def emit_prefix(self, node: PrefixExpression) -> str:
        return f"({node.operator}{self.emit(node.operand)})"

    def emit_infix(self, node: InfixExpression) -> str:
        return self.emit_left_chain(node)

    def emit_if(self, node: IfExpression) -> str:
        out = f"if ({self.emit(node.condition)}) {self.emit(node.consequence)}"
        if node.alternative is not None:
            out += f" else {self.emit(node.alternative)}"
        return out

    def emit_function(self, node: FunctionLiteral) -> str:
        params = ", ".join(self.emit(p) for p in node.parameters)
        return f"fn({params}) {self.emit(node.body)}"

    def emit_call(self, node: CallExpression) -> str:
        return self.emit_left_chain(node)

    def emit_array(self, node: ArrayLiteral) -> str:
        return "[" + ", ".join(self.emit(e) for e in node.elements) + "]"

    def emit_hash(self, node: HashLiteral) -> str:
        pairs = ", ".join(f"{self.emit(k)}: {self.emit(v)}" for k, v in node.pairs)
        return "{" + pairs + "}"

    def emit_index(self, node: IndexExpression) -> str:
        return self.emit_left_chain(node)

    def emit_missing(self, node: Missing) -> str:
        return "<missing>"

    def emit_left_chain(self, node: Expression) -> str:
        """Renders `node` and every infix, call or index node down its left side."""
        spine: list[Expression] = []
        while isinstance(node, (InfixExpression, CallExpression, IndexExpression)):
            spine.append(node)
            if isinstance(node, InfixExpression):
                node = node.left
            elif isinstance(node, CallExpression):
                node = node.callee
            else:
                node = node.collection

        out = self.emit(node)
        for outer in reversed(spine):
            if isinstance(outer, InfixExpression):
                out = f"({out} {outer.operator} {self.emit(outer.right)})"
            elif isinstance(outer, CallExpression):
                args = ", ".join(self.emit(a) for a in outer.arguments)
                out = f"{out}({args})"
            else:
                out = f"({out}[{self.emit(outer.index)}])"
        return out
