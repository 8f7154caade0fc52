"""Form template data model and engine result records.

Wire shapes (JSON/YAML templates, submit payloads) use the camelCase and
`items` keys of the forms contract; Python attributes are snake_case.
"""

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

FieldType = Literal["text", "number", "bool", "enum", "calc"]
Severity = Literal["block", "warn"]

WILDCARD_PATH = "*"
RULE_VIOLATION_MESSAGE = "Rule violation"


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class FormField(_Model):
    """One input slot. `calc` fields are only ever written by formulas."""

    id: str
    type: FieldType
    label: str
    unit: str | None = None
    max: float | None = None
    options: list[str] | None = None  # allowed choices for `enum` fields

    @property
    def is_calculated(self) -> bool:
        return self.type == "calc"


class Formula(_Model):
    """Derives the value of field `out` from `expr`.

    `deps` is informational; evaluation order is declaration order.
    """

    out: str
    expr: str
    deps: list[str] = []


class Rule(_Model):
    """Validation condition; a truthy `when` with severity `block` blocks submission."""

    when: str
    severity: Severity
    ref: str | None = None  # citation, e.g. a standards clause


class FormTemplate(_Model):
    id: str
    title: str
    fields: list[FormField] = Field(
        default=[],
        validation_alias=AliasChoices("items", "fields"),
        serialization_alias="items",
    )
    formulas: list[Formula] = []
    rules: list[Rule] = []
    refs: list[str] = []

    @property
    def field_ids(self) -> list[str]:
        return [f.id for f in self.fields]

    def get_field(self, field_id: str) -> FormField | None:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None


class ValidationError(_Model):
    """A blocking rule violation. `path` is template-wide ("*")."""

    path: str = WILDCARD_PATH
    message: str = RULE_VIOLATION_MESSAGE
    ref: str | None = None


class SubmitBody(_Model):
    form_id: str = Field(alias="formId")
    values: dict[str, Any] = {}
    instrument_ids: list[str] | None = Field(default=None, alias="instrumentIds")


class SubmitResult(_Model):
    ok: bool
    errors: list[ValidationError] = []
    report_id: str | None = Field(default=None, alias="reportId")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
