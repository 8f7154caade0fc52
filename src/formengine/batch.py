"""Row-wise evaluation of a template over a table of responses.

Each DataFrame row is one set of form values (e.g. one row per asset in a
repeat-per-asset form). Missing cells (NaN/None/NaT) read as undefined.
"""

from typing import Any

import numpy as np
import pandas as pd

from .config import EngineConfig
from .engine import compute, validate
from .models import FormTemplate
from .semantics import UNDEFINED

VIOLATION_COLUMNS = ["row", "path", "message", "ref"]


def _native(value: Any) -> Any:
    """Convert a cell to an engine value."""
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, (list, tuple, dict)):
        return value
    if pd.isna(value):
        return UNDEFINED
    if isinstance(value, np.generic):
        return value.item()
    return value


def row_values(row: dict[Any, Any]) -> dict[str, Any]:
    """Values map for one row record; missing cells are left out."""
    values = {}
    for column, cell in row.items():
        value = _native(cell)
        if value is not UNDEFINED:
            values[column] = value
    return values


def _rows(frame: pd.DataFrame):
    return zip(frame.index, frame.to_dict(orient="records"))


def compute_frame(
    frame: pd.DataFrame, template: FormTemplate, config: EngineConfig | None = None
) -> pd.DataFrame:
    """Apply `compute` to every row.

    Returns a new frame with the same index; formula outputs become columns
    (NaN where a formula did not produce a value for that row).
    """
    records = [compute(row_values(row), template, config) for _, row in _rows(frame)]
    result = pd.DataFrame(records, index=frame.index) if records else frame.copy()
    # input columns first, then formula outputs in declaration order
    columns = list(frame.columns)
    for name in [f.out for f in template.formulas] + list(result.columns):
        if name not in columns:
            columns.append(name)
    return result.reindex(columns=columns)


def validate_frame(
    frame: pd.DataFrame, template: FormTemplate, config: EngineConfig | None = None
) -> pd.DataFrame:
    """Violations for every row, one output row per triggered blocking rule."""
    records = []
    for label, row in _rows(frame):
        for error in validate(row_values(row), template, config):
            records.append({"row": label, "path": error.path, "message": error.message, "ref": error.ref})
    return pd.DataFrame.from_records(records, columns=VIOLATION_COLUMNS)
