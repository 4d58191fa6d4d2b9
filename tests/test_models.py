from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from reformatter.errors import AppError, BAD_OPERATION, EMPTY_COLUMN_MAP
from reformatter.models import (
    COPY_COLUMN, COPY_ROWS, COPY_SPLIT_ROW,
    Operation, OperationResult, RunReport,
)


# ══════════════════════════════════════════════════════════════════════════════
# CONSTRUCTION
# ══════════════════════════════════════════════════════════════════════════════

def test_keyword_constructors_fill_parameter_names():
    assert dict(Operation.row_copy(0, 1, 2, 4).params) == {
        "srcSheet": 0, "dstSheet": 1, "startRow": 2, "endRow": 4,
    }
    assert Operation.column_copy(0, 3, 1, 5, 2)["dstCol"] == 5
    split = Operation.split_row_copy(0, 0, 1, {2: 0, 3: 0}, True, 4)
    assert split.kind == COPY_SPLIT_ROW
    assert list(split["colMap"].items()) == [(2, 0), (3, 0)]
    assert split["includeHeaders"] is True


def test_missing_parameters_rejected():
    with pytest.raises(AppError) as ei:
        Operation(COPY_COLUMN, {"srcSheet": 0, "srcCol": 1, "dstSheet": 0})
    assert ei.value.code == BAD_OPERATION
    assert ei.value.details["missing"] == ["dstCol", "startRow"]


@pytest.mark.parametrize("value", [-1, "2", 1.5, None, True])
def test_bad_index_values_rejected(value):
    with pytest.raises(AppError) as ei:
        Operation(COPY_ROWS, {"srcSheet": 0, "dstSheet": 0, "startRow": value, "endRow": 5})
    assert ei.value.code == BAD_OPERATION


def test_integral_float_indices_accepted():
    op = Operation(COPY_ROWS, {"srcSheet": 0.0, "dstSheet": 1.0, "startRow": 2.0, "endRow": 3.0})
    assert op["dstSheet"] == 1
    assert isinstance(op["startRow"], int)


def test_start_after_end_rejected():
    with pytest.raises(AppError) as ei:
        Operation.row_copy(0, 0, 5, 4)
    assert ei.value.code == BAD_OPERATION


def test_empty_col_map_rejected():
    with pytest.raises(AppError) as ei:
        Operation.split_row_copy(0, 0, 1, {})
    assert ei.value.code == EMPTY_COLUMN_MAP


def test_include_headers_must_be_bool():
    with pytest.raises(AppError) as ei:
        Operation(COPY_SPLIT_ROW, {
            "srcSheet": 0, "dstSheet": 0, "startRow": 0,
            "colMap": {0: 0}, "includeHeaders": "yes", "headerCol": 0,
        })
    assert ei.value.code == BAD_OPERATION


def test_unknown_kind_rejected():
    with pytest.raises(AppError) as ei:
        Operation("COPY_EVERYTHING", {})
    assert ei.value.code == BAD_OPERATION


def test_unknown_extra_parameters_dropped():
    op = Operation(COPY_ROWS, {"srcSheet": 0, "dstSheet": 0, "startRow": 0, "endRow": 0, "note": "x"})
    assert "note" not in op.params


# ══════════════════════════════════════════════════════════════════════════════
# IMMUTABILITY
# ══════════════════════════════════════════════════════════════════════════════

def test_operation_is_immutable():
    op = Operation.split_row_copy(0, 0, 1, {0: 0})
    with pytest.raises(FrozenInstanceError):
        op.kind = COPY_ROWS
    with pytest.raises(TypeError):
        op.params["startRow"] = 9
    with pytest.raises(TypeError):
        op["colMap"][5] = 0


def test_operation_does_not_alias_caller_mapping():
    col_map = {0: 0}
    op = Operation.split_row_copy(0, 0, 1, col_map)
    col_map[1] = 0
    assert dict(op["colMap"]) == {0: 0}


# ══════════════════════════════════════════════════════════════════════════════
# SERIALIZATION
# ══════════════════════════════════════════════════════════════════════════════

def test_to_dict_writes_string_col_map_keys_in_order():
    op = Operation.split_row_copy(0, 1, 2, {4: 1, 3: 1, 0: 0}, False, 0)
    d = op.to_dict()
    assert d["type"] == COPY_SPLIT_ROW
    assert list(d["parameters"]["colMap"].items()) == [("4", 1), ("3", 1), ("0", 0)]


def test_from_dict_reads_json_shapes():
    op = Operation.from_dict({
        "type": "COPY_SPLIT_ROW",
        "parameters": {
            "srcSheet": 0, "dstSheet": 0, "startRow": 1,
            "colMap": {"1.0": 0.0, "2": 0}, "includeHeaders": False, "headerCol": 3,
        },
    })
    assert list(op["colMap"].items()) == [(1, 0), (2, 0)]


def test_from_dict_needs_type_and_parameters():
    with pytest.raises(AppError) as ei:
        Operation.from_dict({"type": "COPY_ROWS"})
    assert ei.value.code == BAD_OPERATION


# ══════════════════════════════════════════════════════════════════════════════
# REPORTS
# ══════════════════════════════════════════════════════════════════════════════

def test_run_report_totals_and_errors():
    report = RunReport(ok=False, results=[
        OperationResult(index=0, kind=COPY_ROWS, rows_written=3),
        OperationResult(index=1, kind=COPY_COLUMN, rows_written=0, error_code="SHEET_NOT_FOUND"),
    ])
    assert report.rows_written == 3
    assert report.has_errors
