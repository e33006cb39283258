"""
Defines the abstract syntax tree (AST) node types produced by the jinjalite parser.

Every node is a frozen dataclass; the set of node classes is closed and each class
carries a class-level `kind` tag. Children are owned exclusively by their parent and
sibling sequences are tuples, so a parsed tree is immutable once built.

Classes:
    Node: Base class providing `kind` and `to_dict()` serialization.
    Program: Root node holding top-level statements in document order.
    NumericLiteral, StringLiteral, BooleanLiteral, ArrayLiteral, ObjectLiteral: Literals.
    Identifier: A bare name.
    MemberExpression: Dot (`computed=False`) or bracket (`computed=True`) access.
    CallExpression: Callee applied to positional and keyword arguments.
    BinaryExpression, UnaryExpression: Operators, stored by their source spelling.
    If: `{% if %}` statement, also used for the inline `a if b else c` form.
    For: `{% for x in xs %}` statement.
    SetStatement: `{% set target = value %}`.
    FilterExpression: `operand | filter`.
    TestExpression: `operand is [not] test`.
    SliceExpression: `[start:stop:step]`, absent components are None.
    KeywordArgumentExpression: `name=value` inside a call.

    ASTDict:
        Shape of the plain-dict form returned by `Node.to_dict()`, suitable for JSON.

Usage:
    >>> BinaryExpression("+", NumericLiteral(1), NumericLiteral(2)).to_dict()["operator"]
    '+'
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, TypedDict, Union


class ASTDict(TypedDict, total=False):
    """
    Plain-dict form of a node.

    `kind` is always present; the remaining keys are the node's own fields, with
    child nodes serialized recursively and sequences turned into lists.
    """

    kind: str


def _serialize(value: Any) -> Any:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_serialize(v) for v in value]
    return value


@dataclass(frozen=True)
class Node:
    kind: ClassVar[str] = "Node"

    def to_dict(self) -> ASTDict:
        result: dict[str, Any] = {"kind": self.kind}
        for f in fields(self):
            result[f.name] = _serialize(getattr(self, f.name))
        return result  # type: ignore[return-value]


@dataclass(frozen=True)
class Program(Node):
    kind: ClassVar[str] = "Program"
    body: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class NumericLiteral(Node):
    kind: ClassVar[str] = "NumericLiteral"
    value: int | float


@dataclass(frozen=True)
class StringLiteral(Node):
    kind: ClassVar[str] = "StringLiteral"
    value: str


@dataclass(frozen=True)
class BooleanLiteral(Node):
    kind: ClassVar[str] = "BooleanLiteral"
    value: bool


@dataclass(frozen=True)
class ArrayLiteral(Node):
    kind: ClassVar[str] = "ArrayLiteral"
    elements: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class ObjectLiteral(Node):
    """Ordered `(key, value)` pairs; keys are arbitrary expressions and are never merged."""

    kind: ClassVar[str] = "ObjectLiteral"
    pairs: tuple[tuple[Expression, Expression], ...] = ()

    def to_dict(self) -> ASTDict:
        return {  # type: ignore[typeddict-unknown-key]
            "kind": self.kind,
            "pairs": [
                {"key": key.to_dict(), "value": value.to_dict()}
                for key, value in self.pairs
            ],
        }


@dataclass(frozen=True)
class Identifier(Node):
    kind: ClassVar[str] = "Identifier"
    name: str


@dataclass(frozen=True)
class MemberExpression(Node):
    """
    Property access on `object`.

    With `computed=False` the property is always an `Identifier` (dot access);
    with `computed=True` it is any expression or a `SliceExpression` (bracket access).
    """

    kind: ClassVar[str] = "MemberExpression"
    object: Expression
    property: Expression | SliceExpression
    computed: bool


@dataclass(frozen=True)
class CallExpression(Node):
    kind: ClassVar[str] = "CallExpression"
    callee: Expression
    args: tuple[Expression | KeywordArgumentExpression, ...] = ()


@dataclass(frozen=True)
class BinaryExpression(Node):
    kind: ClassVar[str] = "BinaryExpression"
    operator: str
    left: Expression
    right: Expression


@dataclass(frozen=True)
class UnaryExpression(Node):
    kind: ClassVar[str] = "UnaryExpression"
    operator: str
    operand: Expression


@dataclass(frozen=True)
class If(Node):
    """
    Conditional node.

    As a statement, `body` and `alternate` hold the branch contents and an
    `elif` chain is a nested `If` as the only element of `alternate`. As an
    inline expression, each branch holds exactly one expression.
    """

    kind: ClassVar[str] = "If"
    test: Expression
    body: tuple[Statement, ...] = ()
    alternate: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class For(Node):
    kind: ClassVar[str] = "For"
    loop_variable: Identifier
    iterable: Expression
    body: tuple[Statement, ...] = ()


@dataclass(frozen=True)
class SetStatement(Node):
    kind: ClassVar[str] = "SetStatement"
    target: Expression
    value: Statement


@dataclass(frozen=True)
class FilterExpression(Node):
    kind: ClassVar[str] = "FilterExpression"
    operand: Expression
    filter: Identifier | CallExpression


@dataclass(frozen=True)
class TestExpression(Node):
    __test__ = False  # keep pytest from collecting this class

    kind: ClassVar[str] = "TestExpression"
    operand: Expression
    negate: bool
    test: Identifier | CallExpression


@dataclass(frozen=True)
class SliceExpression(Node):
    kind: ClassVar[str] = "SliceExpression"
    start: Expression | None = None
    stop: Expression | None = None
    step: Expression | None = None


@dataclass(frozen=True)
class KeywordArgumentExpression(Node):
    kind: ClassVar[str] = "KeywordArgumentExpression"
    key: Identifier
    value: Expression


Expression = Union[
    NumericLiteral,
    StringLiteral,
    BooleanLiteral,
    ArrayLiteral,
    ObjectLiteral,
    Identifier,
    MemberExpression,
    CallExpression,
    BinaryExpression,
    UnaryExpression,
    If,
    FilterExpression,
    TestExpression,
]
"""Any node that can appear where a value is expected."""

Statement = Union[Expression, For, SetStatement]
"""Any node that can appear in a statement body or `Program.body`."""


__all__ = [
    "ASTDict",
    "Node",
    "Program",
    "NumericLiteral",
    "StringLiteral",
    "BooleanLiteral",
    "ArrayLiteral",
    "ObjectLiteral",
    "Identifier",
    "MemberExpression",
    "CallExpression",
    "BinaryExpression",
    "UnaryExpression",
    "If",
    "For",
    "SetStatement",
    "FilterExpression",
    "TestExpression",
    "SliceExpression",
    "KeywordArgumentExpression",
    "Expression",
    "Statement",
]
