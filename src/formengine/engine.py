"""Formula and rule engine.

    from formengine import compute, validate

    values = compute(draft, template)      # fills calculated fields
    errors = validate(values, template)    # blocking rule violations

Each formula and rule is isolated: a parse or evaluation failure affects only
that formula (its output is left as it was) or rule (it does not fire).
"""

import logging
from collections.abc import Mapping
from typing import Any

from .config import EngineConfig
from .errors import ExpressionError
from .evaluator import evaluate
from .models import FormTemplate, ValidationError
from .parser import parse_expression
from .semantics import is_finite_number, truthy

logger = logging.getLogger(__name__)


def evaluate_expression(
    source: str, scope: Mapping[str, Any], config: EngineConfig | None = None
) -> Any:
    """Parse and evaluate a single expression. Raises ExpressionError on failure."""
    return evaluate(parse_expression(source, config), scope)


def compute(
    values: Mapping[str, Any], template: FormTemplate, config: EngineConfig | None = None
) -> dict[str, Any]:
    """Apply every formula in declaration order and return the augmented values.

    Later formulas see the outputs of earlier ones. Only finite numeric results
    are written; anything else leaves the output field untouched. `values` is
    not modified.
    """
    out = dict(values)

    for formula in template.formulas:
        try:
            result = evaluate_expression(formula.expr, out, config)
        except ExpressionError as exc:
            logger.debug("formula for %r skipped: %s", formula.out, exc)
            continue
        if is_finite_number(result):
            out[formula.out] = result
        else:
            logger.debug("formula for %r produced non-numeric result %r", formula.out, result)

    return out


def validate(
    values: Mapping[str, Any], template: FormTemplate, config: EngineConfig | None = None
) -> list[ValidationError]:
    """Evaluate every rule and report the triggered `block` rules in template order."""
    errors: list[ValidationError] = []

    for index, rule in enumerate(template.rules):
        try:
            triggered = evaluate_expression(rule.when, values, config)
        except ExpressionError as exc:
            logger.debug("rule %d (%r) skipped: %s", index, rule.when, exc)
            continue
        # TODO: report `warn` rules once their presentation is decided; they are evaluated but dropped
        if truthy(triggered) and rule.severity == "block":
            errors.append(ValidationError(ref=rule.ref))

    return errors
