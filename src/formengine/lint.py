"""Authoring checks for form templates.

`compute` and `validate` silently skip broken formulas and rules. These checks
let template authors find such problems before a template is published; they
never change how a template evaluates.

Every check returns a list of error strings (empty means success).
"""

from collections import Counter

from . import ast
from .config import EngineConfig
from .errors import ParseError
from .models import FormTemplate
from .parser import parse_expression


def check_fields(template: FormTemplate) -> list[str]:
    errors = []
    for field_id, count in Counter(template.field_ids).items():
        if count > 1:
            errors.append(f"field {field_id!r} is defined {count} times")
    for f in template.fields:
        if f.type == "enum" and not f.options:
            errors.append(f"enum field {f.id!r} has no options")
    return errors


def check_formulas(template: FormTemplate, config: EngineConfig | None = None) -> list[str]:
    """Check formula outputs, dependencies and declaration order."""
    errors: list[str] = []
    known = set(template.field_ids)
    # output field -> index of the first formula that writes it
    producers: dict[str, int] = {}
    for index, formula in enumerate(template.formulas):
        producers.setdefault(formula.out, index)

    for index, formula in enumerate(template.formulas):
        label = f"formula {index} ({formula.out})"
        target = template.get_field(formula.out)
        if target is None:
            errors.append(f"{label}: output {formula.out!r} is not a template field")
        elif not target.is_calculated:
            errors.append(f"{label}: output {formula.out!r} is a {target.type!r} field, not 'calc'")

        for dep in formula.deps:
            if dep not in known:
                errors.append(f"{label}: dependency {dep!r} is not a template field")

        try:
            expr = parse_expression(formula.expr, config)
        except ParseError as exc:
            errors.append(f"{label}: syntax error: {exc}")
            continue

        for name in sorted(ast.collect_identifiers(expr)):
            if name not in known:
                errors.append(f"{label}: unknown field {name!r}")
            elif producers.get(name, index) > index:
                errors.append(
                    f"{label}: reads {name!r} before formula {producers[name]} computes it"
                )

    produced = set(producers)
    for f in template.fields:
        if f.is_calculated and f.id not in produced:
            errors.append(f"calc field {f.id!r} has no formula")
    return errors


def check_rules(template: FormTemplate, config: EngineConfig | None = None) -> list[str]:
    errors: list[str] = []
    known = set(template.field_ids)
    for index, rule in enumerate(template.rules):
        label = f"rule {index}" + (f" ({rule.ref})" if rule.ref else "")
        try:
            expr = parse_expression(rule.when, config)
        except ParseError as exc:
            errors.append(f"{label}: syntax error: {exc}")
            continue
        for name in sorted(ast.collect_identifiers(expr)):
            if name not in known:
                errors.append(f"{label}: unknown field {name!r}")
    return errors


def check_template(template: FormTemplate, config: EngineConfig | None = None) -> list[str]:
    """Run every check."""
    errors = check_fields(template)
    errors.extend(check_formulas(template, config))
    errors.extend(check_rules(template, config))
    return errors
