"""AST nodes for form expressions."""

from typing import Annotated, Any
from typing import Literal as TypingLiteral

from pydantic import BaseModel, ConfigDict, Field


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


# Expressions - discriminated on `type`
class Literal(_Node):
    type: TypingLiteral["literal"] = "literal"
    value: Any  # int, float, str, bool, None
    raw: str = ""


class Identifier(_Node):
    """Bare field name (e.g. 'avg_pressure')."""

    type: TypingLiteral["identifier"] = "identifier"
    name: str


class MemberExpression(_Node):
    """Property access: `a.b` (computed=False) or `a[b]` (computed=True)."""

    type: TypingLiteral["member"] = "member"
    object: "Expr"
    property: "Expr"
    computed: bool = False


class UnaryExpression(_Node):
    type: TypingLiteral["unary"] = "unary"
    operator: str  # +, -, !, ~
    argument: "Expr"


class BinaryExpression(_Node):
    type: TypingLiteral["binary"] = "binary"
    operator: str  # + - * / % ** && || < <= > >= == != === !==
    left: "Expr"
    right: "Expr"


class ConditionalExpression(_Node):
    """Ternary `test ? consequent : alternate`."""

    type: TypingLiteral["conditional"] = "conditional"
    test: "Expr"
    consequent: "Expr"
    alternate: "Expr"


class CallExpression(_Node):
    """Parsed so that calls fail at evaluation rather than as syntax errors."""

    type: TypingLiteral["call"] = "call"
    callee: "Expr"
    arguments: tuple["Expr", ...] = ()


class ArrayExpression(_Node):
    type: TypingLiteral["array"] = "array"
    elements: tuple["Expr", ...] = ()


Expr = Annotated[
    Literal
    | Identifier
    | MemberExpression
    | UnaryExpression
    | BinaryExpression
    | ConditionalExpression
    | CallExpression
    | ArrayExpression,
    Field(discriminator="type"),
]


def collect_identifiers(node: Expr) -> set[str]:
    """Collect the scope names an expression reads.

    Only root identifiers count: in `a.b[c]` the result is {"a", "c"}.
    """
    acc: set[str] = set()
    _walk(node, acc)
    return acc


def _walk(node: Expr, acc: set[str]) -> None:
    match node:
        case Identifier(name=name):
            acc.add(name)
        case MemberExpression(object=obj, property=prop, computed=computed):
            _walk(obj, acc)
            if computed:
                _walk(prop, acc)
        case UnaryExpression(argument=arg):
            _walk(arg, acc)
        case BinaryExpression(left=left, right=right):
            _walk(left, acc)
            _walk(right, acc)
        case ConditionalExpression(test=test, consequent=then_e, alternate=else_e):
            _walk(test, acc)
            _walk(then_e, acc)
            _walk(else_e, acc)
        case CallExpression(callee=callee, arguments=args):
            _walk(callee, acc)
            for a in args:
                _walk(a, acc)
        case ArrayExpression(elements=elements):
            for e in elements:
                _walk(e, acc)


# Rebuild models for forward references
MemberExpression.model_rebuild()
UnaryExpression.model_rebuild()
BinaryExpression.model_rebuild()
ConditionalExpression.model_rebuild()
CallExpression.model_rebuild()
ArrayExpression.model_rebuild()
