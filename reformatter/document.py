"""
reformatter/document.py - Zero-based sheet/row/cell access over openpyxl.

openpyxl addresses cells 1-based and has no row objects: a worksheet is a
sparse map of (row, column) -> Cell. The engine thinks in zero-based sheets,
rows and cells, and needs to tell an absent row or cell apart from a blank
one. SheetView builds a row index over the worksheet's stored cells once and
keeps it current for every write made through it.

Rules:
  - A row is present iff it holds at least one cell, or was created through
    the view during this session (an explicit empty row).
  - Reads never touch ws.cell(): calling it registers a phantom cell and
    inflates ws.max_row.
  - create_row / create_cell replace what was there. A created cell is a new
    openpyxl Cell with the workbook's default style.
"""
from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple

from openpyxl.cell.cell import Cell
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from .errors import AppError, BAD_INDEX, SHEET_NOT_FOUND


# Grid limits of the xlsx format, as zero-based exclusive bounds.
MAX_ROWS = 1_048_576
MAX_COLS = 16_384


def check_row_index(row: int) -> None:
    if not 0 <= row < MAX_ROWS:
        raise AppError(BAD_INDEX, f"Row index out of range: {row}", {"row": row})


def check_col_index(col: int) -> None:
    if not 0 <= col < MAX_COLS:
        raise AppError(BAD_INDEX, f"Column index out of range: {col}", {"col": col})


def sheet_at(wb: Workbook, index: int, role: str = "source") -> "SheetView":
    """Return a view over the zero-based `index`-th worksheet, or raise SHEET_NOT_FOUND."""
    sheets = wb.worksheets
    if not 0 <= index < len(sheets):
        raise AppError(
            SHEET_NOT_FOUND,
            f"No sheet at index {index} in the {role} workbook ({len(sheets)} sheets)",
            {"role": role, "index": index, "sheet_count": len(sheets)},
        )
    return SheetView(sheets[index])


class RowView:
    """One row of a SheetView. Cells are keyed by zero-based column."""

    def __init__(self, sheet: "SheetView", index: int, cells: Dict[int, Cell]):
        self.sheet = sheet
        self.index = index
        self._cells = cells

    def __iter__(self) -> Iterator[Tuple[int, Cell]]:
        for col in sorted(self._cells):
            yield col, self._cells[col]

    def __len__(self) -> int:
        return len(self._cells)

    def cell_indices(self) -> List[int]:
        return sorted(self._cells)

    def last_cell_num(self) -> int:
        """One past the last populated column, 0 for a row with no cells."""
        return max(self._cells) + 1 if self._cells else 0

    def get_cell(self, col: int) -> Optional[Cell]:
        return self._cells.get(col)

    def create_cell(self, col: int) -> Cell:
        return self.sheet._create_cell(self.index, col)


class SheetView:

    def __init__(self, ws: Worksheet):
        self.ws = ws
        self._rows: Dict[int, Dict[int, Cell]] = {}
        # _cells is openpyxl's own sparse store; there is no public way to
        # list stored cells without creating the missing ones.
        for (r, c), cell in ws._cells.items():
            self._rows.setdefault(r - 1, {})[c - 1] = cell

    @property
    def title(self) -> str:
        return self.ws.title

    def last_row_num(self) -> int:
        """Zero-based index of the last present row, -1 for an empty sheet."""
        return max(self._rows) if self._rows else -1

    def row_indices(self) -> List[int]:
        return sorted(self._rows)

    def get_row(self, row: int) -> Optional[RowView]:
        cells = self._rows.get(row)
        if cells is None:
            return None
        return RowView(self, row, cells)

    def create_row(self, row: int) -> RowView:
        """Drop every cell stored in `row` and return it as an empty row."""
        check_row_index(row)
        for col in list(self._rows.get(row, {})):
            self.ws._cells.pop((row + 1, col + 1), None)
        cells: Dict[int, Cell] = {}
        self._rows[row] = cells
        return RowView(self, row, cells)

    def get_or_create_row(self, row: int) -> RowView:
        existing = self.get_row(row)
        if existing is not None:
            return existing
        return self.create_row(row)

    def _create_cell(self, row: int, col: int) -> Cell:
        check_row_index(row)
        check_col_index(col)
        key = (row + 1, col + 1)
        self.ws._cells.pop(key, None)
        cell = self.ws.cell(row=key[0], column=key[1])
        self._rows.setdefault(row, {})[col] = cell
        return cell
