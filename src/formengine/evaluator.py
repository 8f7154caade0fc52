"""Evaluator: walks an expression AST against a read-only scope."""

from collections.abc import Mapping
from typing import Any

from . import ast
from . import semantics as sem
from .errors import ForbiddenKeyError, UnsupportedExpressionError, UnsupportedOperatorError

BINARY_OPS = {
    "+": sem.add,
    "-": sem.subtract,
    "*": sem.multiply,
    "/": sem.divide,
    "%": sem.remainder,
    "**": sem.power,
    "<": sem.less_than,
    "<=": sem.less_equal,
    ">": sem.greater_than,
    ">=": sem.greater_equal,
    "==": sem.loose_equals,
    "!=": lambda a, b: not sem.loose_equals(a, b),
    "===": sem.strict_equals,
    "!==": lambda a, b: not sem.strict_equals(a, b),
}


def evaluate(expr: ast.Expr, scope: Mapping[str, Any]) -> Any:
    """Evaluate an expression against `scope` (field id -> value).

    Identifiers resolve only to keys the scope itself holds; unknown names read
    as UNDEFINED. Forbidden keys raise ForbiddenKeyError, and node kinds or
    operators without an evaluation rule raise UnsupportedExpressionError or
    UnsupportedOperatorError. The scope is never modified.
    """
    match expr:
        case ast.Literal(value=v):
            return v

        case ast.Identifier(name=name):
            return sem.safe_get(scope, name)

        case ast.MemberExpression(object=obj, property=prop, computed=computed):
            target = evaluate(obj, scope)
            if computed:
                key = sem.property_key(evaluate(prop, scope))
            else:
                key = prop.name
            # forbidden keys are rejected even when the target is null/undefined
            if key in sem.FORBIDDEN_KEYS:
                raise ForbiddenKeyError(key)
            if target is None or target is sem.UNDEFINED or key is None:
                return sem.UNDEFINED
            return sem.safe_get(target, key)

        case ast.UnaryExpression(operator=op, argument=argument):
            v = evaluate(argument, scope)
            match op:
                case "+":
                    return sem.number(sem.to_number(v))
                case "-":
                    return sem.number(-sem.to_number(v))
                case "!":
                    return not sem.truthy(v)
                case _:
                    raise UnsupportedOperatorError(f"unsupported unary operator: {op}")

        case ast.BinaryExpression(operator=op, left=left, right=right):
            # both operands are always evaluated, logical operators included
            left_val = evaluate(left, scope)
            right_val = evaluate(right, scope)
            if op == "&&":
                return right_val if sem.truthy(left_val) else left_val
            if op == "||":
                return left_val if sem.truthy(left_val) else right_val
            fn = BINARY_OPS.get(op)
            if fn is None:
                raise UnsupportedOperatorError(f"unsupported binary operator: {op}")
            return fn(left_val, right_val)

        case ast.ConditionalExpression(test=test, consequent=then_e, alternate=else_e):
            if sem.truthy(evaluate(test, scope)):
                return evaluate(then_e, scope)
            return evaluate(else_e, scope)

        case _:
            kind = getattr(expr, "type", type(expr).__name__)
            raise UnsupportedExpressionError(f"unsupported expression: {kind}")
