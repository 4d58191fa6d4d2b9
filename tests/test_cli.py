from __future__ import annotations

import logging

import pytest
from openpyxl import Workbook, load_workbook

from reformatter.cli import format_report, main
from reformatter.models import COPY_ROWS, OperationResult, RunReport


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger("reformatter")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _installed_home(tmp_path, capsys):
    home = str(tmp_path / "home")
    assert main(["--home", home, "install"]) == 0
    capsys.readouterr()
    return home


def _source(path):
    wb = Workbook()
    ws = wb.active
    for c, v in enumerate(["Order", "Item A", "Item B", "Item C", "Customer"], 1):
        ws.cell(row=1, column=c, value=v)
    for c, v in enumerate(["O-1", "pen", "ink", "pad", "Ann"], 1):
        ws.cell(row=2, column=c, value=v)
    wb.save(path)


def test_install_then_list(tmp_path, capsys):
    home = str(tmp_path / "home")
    assert main(["--home", home, "install"]) == 0
    assert "Line_Items.json" in capsys.readouterr().out

    assert main(["--home", home, "list"]) == 0
    out = capsys.readouterr().out
    assert "Profiles:" in out
    assert "  Line_Items" in out
    assert "Templates:" in out


def test_show_prints_profile(tmp_path, capsys):
    home = _installed_home(tmp_path, capsys)
    assert main(["--home", home, "show", "Line_Items"]) == 0
    out = capsys.readouterr().out
    assert "Profile Name: Line_Items" in out
    assert "COPY_SPLIT_ROW - Source Sheet: 0 - Destination Sheet: 0" in out


def test_show_unknown_profile(tmp_path, capsys):
    home = _installed_home(tmp_path, capsys)
    assert main(["--home", home, "show", "Ghost"]) == 1
    assert "Profile not found: Ghost" in capsys.readouterr().err


def test_run_bundled_profile(tmp_path, capsys):
    home = _installed_home(tmp_path, capsys)
    src = str(tmp_path / "orders.xlsx")
    out_path = str(tmp_path / "result.xlsx")
    _source(src)

    assert main(["--home", home, "run", "Line_Items", src, "-o", out_path]) == 0
    printed = capsys.readouterr().out
    assert "#0 COPY_ROWS: 1 rows written" in printed
    assert "#1 COPY_SPLIT_ROW: 3 rows written" in printed
    assert f"Output: {out_path}" in printed

    ws = load_workbook(out_path).worksheets[0]
    grid = [[ws.cell(row=r, column=c).value for c in range(1, 5)] for r in range(1, 5)]
    assert grid == [
        ["Order", "Item A", "Item B", "Item C"],
        ["O-1", "pen", "Ann", "Item A"],
        ["O-1", "ink", "Ann", "Item B"],
        ["O-1", "pad", "Ann", "Item C"],
    ]


def test_run_missing_source(tmp_path, capsys):
    home = _installed_home(tmp_path, capsys)
    code = main(["--home", home, "run", "Line_Items", str(tmp_path / "nope.xlsx")])
    assert code == 1
    assert "Source file not found" in capsys.readouterr().err


def test_log_file_dash_writes_home_log(tmp_path, capsys):
    home = tmp_path / "home"
    assert main(["--home", str(home), "--log-file", "-", "-v", "install"]) == 0
    assert (home / "log.txt").exists()


def test_format_report_lines():
    report = RunReport(ok=False, output_path="out.xlsx", results=[
        OperationResult(index=0, kind=COPY_ROWS, rows_written=2),
        OperationResult(
            index=1, kind=COPY_ROWS, rows_written=0,
            error_code="SHEET_NOT_FOUND", error_message="no sheet",
            error_details={"role": "output", "index": 3},
        ),
    ])
    text = format_report(report)
    assert "#0 COPY_ROWS: 2 rows written" in text
    assert "ERROR [SHEET_NOT_FOUND] The output workbook has no sheet number 3." in text
    assert text.endswith("Output: out.xlsx")


def test_format_report_empty():
    assert format_report(RunReport(ok=True, results=[])) == "No operations."
