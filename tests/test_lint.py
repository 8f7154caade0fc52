"""Template authoring checks."""

from formengine import FormTemplate, check_template
from formengine.lint import check_fields, check_formulas, check_rules


def template(**kwargs):
    base = {
        "id": "t",
        "title": "T",
        "items": [
            {"id": "a", "type": "number", "label": "A"},
            {"id": "b", "type": "number", "label": "B"},
            {"id": "x", "type": "calc", "label": "X"},
        ],
        "formulas": [{"out": "x", "expr": "a + b", "deps": ["a", "b"]}],
    }
    base.update(kwargs)
    return FormTemplate.model_validate(base)


class TestCheckTemplate:
    def test_clean_template(self):
        assert check_template(template()) == []

    def test_collects_all_sections(self):
        broken = template(
            items=[
                {"id": "a", "type": "number", "label": "A"},
                {"id": "a", "type": "number", "label": "A again"},
            ],
            formulas=[{"out": "a", "expr": "a +"}],
            rules=[{"when": "zz", "severity": "block"}],
        )
        errors = check_template(broken)
        assert any("defined 2 times" in e for e in errors)
        assert any("syntax error" in e for e in errors)
        assert any("unknown field 'zz'" in e for e in errors)


class TestCheckFields:
    def test_duplicate_ids(self):
        t = template(items=[{"id": "a", "type": "text", "label": "A"}] * 3)
        assert check_fields(t) == ["field 'a' is defined 3 times"]

    def test_enum_without_options(self):
        t = template(items=[{"id": "r", "type": "enum", "label": "R"}])
        assert check_fields(t) == ["enum field 'r' has no options"]


class TestCheckFormulas:
    def test_output_not_a_field(self):
        t = template(formulas=[{"out": "zz", "expr": "a"}])
        assert "formula 0 (zz): output 'zz' is not a template field" in check_formulas(t)

    def test_output_not_calc(self):
        t = template(formulas=[{"out": "a", "expr": "b"}, {"out": "x", "expr": "a"}])
        assert check_formulas(t) == ["formula 0 (a): output 'a' is a 'number' field, not 'calc'"]

    def test_unknown_dependency(self):
        t = template(formulas=[{"out": "x", "expr": "a", "deps": ["a", "q"]}])
        assert check_formulas(t) == ["formula 0 (x): dependency 'q' is not a template field"]

    def test_syntax_error(self):
        t = template(formulas=[{"out": "x", "expr": "a +* b"}])
        [error] = check_formulas(t)
        assert error.startswith("formula 0 (x): syntax error: col ")

    def test_unknown_identifier(self):
        t = template(formulas=[{"out": "x", "expr": "a + c"}])
        assert check_formulas(t) == ["formula 0 (x): unknown field 'c'"]

    def test_member_properties_are_not_fields(self):
        t = template(formulas=[{"out": "x", "expr": "a.length + b['k']"}])
        assert check_formulas(t) == []

    def test_reads_before_computed(self):
        t = template(
            items=[
                {"id": "a", "type": "number", "label": "A"},
                {"id": "x", "type": "calc", "label": "X"},
                {"id": "y", "type": "calc", "label": "Y"},
            ],
            formulas=[{"out": "y", "expr": "x * 2"}, {"out": "x", "expr": "a + 1"}],
        )
        assert check_formulas(t) == ["formula 0 (y): reads 'x' before formula 1 computes it"]

    def test_calc_without_formula(self):
        t = template(formulas=[])
        assert check_formulas(t) == ["calc field 'x' has no formula"]


class TestCheckRules:
    def test_clean(self):
        t = template(rules=[{"when": "x < 1", "severity": "block", "ref": "§4"}])
        assert check_rules(t) == []

    def test_syntax_error_labels_ref(self):
        t = template(rules=[{"when": "x <", "severity": "block", "ref": "§4"}])
        [error] = check_rules(t)
        assert error.startswith("rule 0 (§4): syntax error")

    def test_unknown_field(self):
        t = template(rules=[{"when": "avg < 1", "severity": "warn"}])
        assert check_rules(t) == ["rule 0: unknown field 'avg'"]
