"""Submission workflow helpers: load templates, run compute + validate.

Example:
    template = load_template("seeds/forms.nshev.json")
    result = validate_form({"p1": 48, "p2": 52}, template)
    if not result.ok:
        ...
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pydantic
import yaml

from .config import EngineConfig
from .engine import compute, validate
from .errors import TemplateError
from .models import FormTemplate, SubmitBody, SubmitResult

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


def parse_template(data: Any, source: str = "<template>") -> FormTemplate:
    """Validate decoded template data into a FormTemplate."""
    try:
        return FormTemplate.model_validate(data)
    except pydantic.ValidationError as exc:
        raise TemplateError(f"{source}: invalid template: {exc}") from exc


def load_template(path: str | Path) -> FormTemplate:
    """Load a template from a JSON or YAML file."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TemplateError(f"{path}: cannot read template: {exc}") from exc

    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(raw)
        else:
            data = json.loads(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise TemplateError(f"{path}: cannot decode template: {exc}") from exc

    return parse_template(data, str(path))


def validate_form(
    values: Mapping[str, Any], template: FormTemplate, config: EngineConfig | None = None
) -> SubmitResult:
    """Compute derived fields, then check rules; ok when nothing blocks."""
    computed = compute(values, template, config)
    errors = validate(computed, template, config)
    return SubmitResult(ok=not errors, errors=errors)


def submit(
    body: SubmitBody | Mapping[str, Any],
    template: FormTemplate,
    config: EngineConfig | None = None,
) -> SubmitResult:
    """Run the submission checks for a submit payload.

    Report generation and persistence happen outside the engine, so `report_id`
    is always None.
    """
    if not isinstance(body, SubmitBody):
        body = SubmitBody.model_validate(body)
    result = validate_form(body.values, template, config)
    if result.ok:
        logger.info("form %s accepted (template %s)", body.form_id, template.id)
    else:
        logger.info(
            "form %s blocked by %d rule(s) (template %s)",
            body.form_id,
            len(result.errors),
            template.id,
        )
    return result
