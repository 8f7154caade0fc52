"""formengine - formulas and validation rules for dynamic forms.

Pipeline: a template's formulas fill calculated fields, then its rules decide
whether the values may be submitted.

Example:
    from formengine import FormTemplate, compute, validate

    template = FormTemplate.model_validate(data)
    values = compute({"p1": 48, "p2": 52}, template)
    errors = validate(values, template)
"""

__version__ = "0.3.0"

from .ast import (
    ArrayExpression,
    BinaryExpression,
    CallExpression,
    ConditionalExpression,
    Expr,
    Identifier,
    Literal,
    MemberExpression,
    UnaryExpression,
    collect_identifiers,
)
from .config import EngineConfig
from .engine import compute, evaluate_expression, validate
from .errors import (
    EvaluationError,
    ExpressionError,
    ForbiddenKeyError,
    ParseError,
    TemplateError,
    UnsupportedExpressionError,
    UnsupportedOperatorError,
)
from .evaluator import evaluate
from .lint import check_template
from .models import (
    FormField,
    FormTemplate,
    Formula,
    Rule,
    SubmitBody,
    SubmitResult,
    ValidationError,
)
from .parser import Lexer, Parser, parse_expression
from .registry import TemplateRegistry
from .semantics import UNDEFINED, Undefined, Value
from .service import load_template, submit, validate_form

__all__ = [
    # Engine
    "compute",
    "validate",
    "evaluate_expression",
    # Parse / evaluate
    "parse_expression",
    "evaluate",
    "Lexer",
    "Parser",
    # AST
    "Expr",
    "Literal",
    "Identifier",
    "MemberExpression",
    "UnaryExpression",
    "BinaryExpression",
    "ConditionalExpression",
    "CallExpression",
    "ArrayExpression",
    "collect_identifiers",
    # Values
    "UNDEFINED",
    "Undefined",
    "Value",
    # Models
    "FormField",
    "Formula",
    "Rule",
    "FormTemplate",
    "ValidationError",
    "SubmitBody",
    "SubmitResult",
    # Workflow
    "load_template",
    "validate_form",
    "submit",
    "TemplateRegistry",
    "check_template",
    "EngineConfig",
    # Errors
    "ExpressionError",
    "ParseError",
    "EvaluationError",
    "ForbiddenKeyError",
    "UnsupportedExpressionError",
    "UnsupportedOperatorError",
    "TemplateError",
]
