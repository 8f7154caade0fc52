"""Tests for row-wise evaluation over DataFrames."""

import numpy as np
import pandas as pd
import pytest

from formengine import UNDEFINED, FormTemplate
from formengine.batch import _native, compute_frame, row_values, validate_frame


@pytest.fixture
def template():
    return FormTemplate.model_validate(
        {
            "id": "nshev",
            "title": "NSHEV",
            "items": [
                {"id": "p1", "type": "number", "label": "P1"},
                {"id": "p2", "type": "number", "label": "P2"},
                {"id": "avg", "type": "calc", "label": "Average"},
            ],
            "formulas": [{"out": "avg", "expr": "(p1 + p2) / 2"}],
            "rules": [{"when": "avg < 1.0", "severity": "block", "ref": "§4"}],
        }
    )


class TestRowValues:
    def test_numpy_scalars_become_python(self):
        assert _native(np.int64(3)) == 3
        assert type(_native(np.int64(3))) is int
        assert type(_native(np.float64(1.5))) is float
        assert _native(np.bool_(True)) is True

    def test_missing_cells(self):
        assert _native(np.nan) is UNDEFINED
        assert _native(None) is UNDEFINED
        assert _native(pd.NaT) is UNDEFINED

    def test_containers_pass_through(self):
        assert _native(np.array([1, 2])) == [1, 2]
        assert _native({"a": 1}) == {"a": 1}

    def test_row_values_drops_missing(self):
        assert row_values({"p1": 1.0, "p2": np.nan, "note": "x"}) == {"p1": 1.0, "note": "x"}


class TestComputeFrame:
    def test_adds_output_column(self, template):
        frame = pd.DataFrame(
            {"p1": [40, 0.5, np.nan], "p2": [60, 0.5, 10]},
            index=["A1", "A2", "A3"],
        )
        result = compute_frame(frame, template)

        assert list(result.columns) == ["p1", "p2", "avg"]
        assert list(result.index) == ["A1", "A2", "A3"]
        assert result.loc["A1", "avg"] == 50
        assert result.loc["A2", "avg"] == 0.5
        assert pd.isna(result.loc["A3", "avg"])

    def test_input_frame_unchanged(self, template):
        frame = pd.DataFrame({"p1": [1], "p2": [3]})
        compute_frame(frame, template)
        assert list(frame.columns) == ["p1", "p2"]

    def test_empty_frame(self, template):
        frame = pd.DataFrame({"p1": [], "p2": []})
        result = compute_frame(frame, template)
        assert list(result.columns) == ["p1", "p2", "avg"]
        assert len(result) == 0


class TestValidateFrame:
    def test_one_row_per_violation(self, template):
        frame = pd.DataFrame({"avg": [0.5, 5.0, 0.1]}, index=["A1", "A2", "A3"])
        violations = validate_frame(frame, template)

        assert list(violations.columns) == ["row", "path", "message", "ref"]
        assert list(violations["row"]) == ["A1", "A3"]
        assert set(violations["ref"]) == {"§4"}
        assert set(violations["path"]) == {"*"}

    def test_no_violations(self, template):
        frame = pd.DataFrame({"avg": [5.0, np.nan]})
        violations = validate_frame(frame, template)
        assert violations.empty
        assert list(violations.columns) == ["row", "path", "message", "ref"]

    def test_compute_then_validate(self, template):
        frame = pd.DataFrame({"p1": [0.5, 40], "p2": [0.5, 60]})
        violations = validate_frame(compute_frame(frame, template), template)
        assert list(violations["row"]) == [0]
