"""Command-line tests."""

import json

import pytest

from formengine.cli import main

TEMPLATE = {
    "id": "nshev",
    "title": "NSHEV",
    "items": [
        {"id": "p1", "type": "number", "label": "P1"},
        {"id": "p2", "type": "number", "label": "P2"},
        {"id": "avg", "type": "calc", "label": "Average"},
    ],
    "formulas": [{"out": "avg", "expr": "(p1 + p2) / 2", "deps": ["p1", "p2"]}],
    "rules": [{"when": "avg < 1.0", "severity": "block", "ref": "§4"}],
}


def run_main(argv):
    with pytest.raises(SystemExit) as exc:
        main([str(a) for a in argv])
    return exc.value.code


@pytest.fixture
def template_path(tmp_path):
    path = tmp_path / "nshev.json"
    path.write_text(json.dumps(TEMPLATE), encoding="utf-8")
    return path


class TestCheck:
    def test_clean(self, template_path, capsys):
        assert run_main(["check", template_path]) == 0
        out = capsys.readouterr().out
        assert "OK" in out
        assert "All clear." in out

    def test_reports_problems(self, tmp_path, template_path, capsys):
        broken = tmp_path / "broken.json"
        broken.write_text(json.dumps({**TEMPLATE, "id": "broken", "rules": [{"when": "avg <", "severity": "block"}]}))
        assert run_main(["check", template_path, broken]) == 1
        out = capsys.readouterr().out
        assert "syntax error" in out
        assert "1/2 templates have problems" in out

    def test_unreadable_template(self, tmp_path, capsys):
        assert run_main(["check", tmp_path / "missing.json"]) == 1
        assert "FAIL" in capsys.readouterr().out

    def test_undecodable_template_names_path_once(self, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text("{", encoding="utf-8")
        assert run_main(["check", bad]) == 1
        out = capsys.readouterr().out
        assert "cannot decode" in out
        assert out.count(str(bad)) == 1


class TestRun:
    def write_values(self, tmp_path, values):
        path = tmp_path / "values.json"
        path.write_text(json.dumps(values), encoding="utf-8")
        return path

    def test_ok(self, tmp_path, template_path, capsys):
        values = self.write_values(tmp_path, {"p1": 40, "p2": 60})
        assert run_main(["run", template_path, values]) == 0
        output = json.loads(capsys.readouterr().out)
        assert output == {"values": {"p1": 40, "p2": 60, "avg": 50}, "ok": True, "errors": []}

    def test_blocked(self, tmp_path, template_path, capsys):
        values = self.write_values(tmp_path, {"p1": 0.5, "p2": 0.5})
        assert run_main(["run", template_path, values]) == 1
        output = json.loads(capsys.readouterr().out)
        assert output["ok"] is False
        assert output["errors"] == [{"path": "*", "message": "Rule violation", "ref": "§4"}]

    def test_values_must_be_object(self, tmp_path, template_path, capsys):
        values = self.write_values(tmp_path, [1, 2])
        assert run_main(["run", template_path, values]) == 2
        assert "JSON object" in capsys.readouterr().err

    def test_missing_values_file(self, tmp_path, template_path):
        assert run_main(["run", template_path, tmp_path / "missing.json"]) == 2

    def test_bad_template(self, tmp_path, capsys):
        values = self.write_values(tmp_path, {})
        assert run_main(["run", tmp_path / "missing.json", values]) == 2
        assert "Error:" in capsys.readouterr().err

    def test_huge_integer_value(self, tmp_path, template_path, capsys):
        values = tmp_path / "values.json"
        values.write_text('{"p1": 1' + "0" * 400 + ', "p2": 1}', encoding="utf-8")
        assert run_main(["run", template_path, values]) == 0
        output = json.loads(capsys.readouterr().out)
        assert "avg" not in output["values"]
        assert output["ok"] is True
