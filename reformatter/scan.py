"""
reformatter/scan.py - End-of-data detection for source sheets.

Source sheets often carry trailing blank rows (formatted, or emptied by
hand), so the worksheet's last row is not where the data ends. Data is taken
to end at the first position where END_OF_DATA_RUN consecutive rows are all
empty.

A row is empty when it is absent, holds no cells, or every cell is BLANK or
renders as whitespace only. Rows past the sheet's last row count as empty.
"""
from __future__ import annotations

from typing import Optional

from .cells import BLANK, cell_kind
from .document import RowView, SheetView


END_OF_DATA_RUN = 10


def is_row_empty(row: Optional[RowView]) -> bool:
    if row is None or len(row) == 0:
        return True
    for _, cell in row:
        if cell_kind(cell) != BLANK and str(cell.value).strip() != "":
            return False
    return True


def are_next_rows_empty(sheet: SheetView, start_row: int, n: int = END_OF_DATA_RUN) -> bool:
    last = sheet.last_row_num()
    for i in range(start_row, min(start_row + n, last + 1)):
        if not is_row_empty(sheet.get_row(i)):
            return False
    return True
