"""
reformatter/engine.py - Runs copy operations from a source workbook into an
output workbook.

Three algorithms:
  copy_rows       whole rows, same indices, over an inclusive row range
  copy_column     one column into another, down to the source's last row
  copy_split_row  fan each source row out into several output rows,
                  driven by a many-to-one column map

The engine only mutates the output workbook it is handed. Opening, seeding
and saving workbooks belong to reformatter.workbooks / reformatter.runner.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional

from openpyxl.workbook.workbook import Workbook

from .cells import copy_cell
from .document import SheetView, check_col_index, check_row_index, sheet_at
from .errors import AppError, BAD_OPERATION
from .mapping import invert_col_map, select_source_col, split_plan
from .models import (
    COPY_COLUMN, COPY_ROWS, COPY_SPLIT_ROW,
    Operation, OperationResult, RunReport,
)
from .scan import are_next_rows_empty

log = logging.getLogger(__name__)

ProgressCallback = Callable[[str, Any], None]


# ── Algorithms ────────────────────────────────────────────────────────────────

def copy_rows(
    src: SheetView,
    dst: SheetView,
    start_row: int,
    end_row: int,
    logger: Optional[logging.Logger] = None,
) -> int:
    """
    Copy rows start_row..end_row (inclusive) to the same indices.

    Each output row is recreated empty before the populated source cells are
    copied in, so re-running overwrites rather than merges. A row missing
    from the source leaves an empty output row.
    """
    check_row_index(start_row)
    check_row_index(end_row)

    for i in range(start_row, end_row + 1):
        source_row = src.get_row(i)
        target_row = dst.create_row(i)
        if source_row is None:
            continue
        for col, cell in source_row:
            copy_cell(cell, target_row.create_cell(col), logger)

    return end_row - start_row + 1


def copy_column(
    src: SheetView,
    src_col: int,
    dst: SheetView,
    dst_col: int,
    start_row: int,
    logger: Optional[logging.Logger] = None,
) -> int:
    """
    Copy src_col to dst_col for rows start_row..last source row.

    Rows absent from the source are skipped and the output is not touched
    there. A present row without a src_col cell blanks the output cell.
    """
    check_col_index(src_col)
    check_col_index(dst_col)
    check_row_index(start_row)

    written = 0
    for i in range(start_row, src.last_row_num() + 1):
        source_row = src.get_row(i)
        if source_row is None:
            continue
        target_row = dst.get_or_create_row(i)
        copy_cell(source_row.get_cell(src_col), target_row.create_cell(dst_col), logger)
        written += 1
    return written


def copy_split_row(
    src: SheetView,
    dst: SheetView,
    start_row: int,
    col_map: Mapping[int, int],
    include_headers: bool = False,
    header_col: int = 0,
    logger: Optional[logging.Logger] = None,
) -> int:
    """
    Unpivot repeated column groups into separate output rows.

    The column map is inverted to destination -> [source columns]. The
    largest group sets how many output rows each source row becomes; its
    destination column (the pivot) takes the j-th source column on split row
    j, repeating its last one when the group runs out. Every other
    destination column repeats its first source column on all split rows.

    Output rows are numbered from start_row, one per emitted row, so output
    and source indices drift apart after the first split. Scanning stops at
    the first source row that begins END_OF_DATA_RUN empty rows.

    With include_headers, header_col receives the row-0 label of the source
    column the pivot used on that split row.

    Returns the number of output rows written.
    """
    check_row_index(start_row)
    if include_headers:
        check_col_index(header_col)

    inverted = invert_col_map(col_map)
    for dst_col, group in inverted.items():
        check_col_index(dst_col)
        for src_col in group:
            check_col_index(src_col)
    plan = split_plan(inverted)
    (logger or log).debug("split plan %s for %s", plan, inverted)

    header_row = src.get_row(0)
    target_idx = start_row

    for i in range(start_row, src.last_row_num() + 1):
        if are_next_rows_empty(src, i):
            break
        source_row = src.get_row(i)
        if source_row is None:
            continue

        for j in range(plan.factor):
            target_row = dst.create_row(target_idx)
            target_idx += 1

            for dst_col in inverted:
                src_col = select_source_col(inverted, dst_col, plan, j)
                copy_cell(source_row.get_cell(src_col), target_row.create_cell(dst_col), logger)

            if include_headers:
                label_col = select_source_col(inverted, plan.pivot, plan, j)
                header = header_row.get_cell(label_col) if header_row is not None else None
                copy_cell(header, target_row.create_cell(header_col), logger)

    return target_idx - start_row


# ── Dispatch ──────────────────────────────────────────────────────────────────

def apply_operation(
    source_wb: Workbook,
    output_wb: Workbook,
    op: Operation,
    logger: Optional[logging.Logger] = None,
) -> int:
    """Resolve the operation's sheets and run it. Returns rows written."""
    src = sheet_at(source_wb, op["srcSheet"], "source")
    dst = sheet_at(output_wb, op["dstSheet"], "output")

    if op.kind == COPY_ROWS:
        return copy_rows(src, dst, op["startRow"], op["endRow"], logger)
    if op.kind == COPY_COLUMN:
        return copy_column(src, op["srcCol"], dst, op["dstCol"], op["startRow"], logger)
    if op.kind == COPY_SPLIT_ROW:
        return copy_split_row(
            src, dst, op["startRow"], op["colMap"],
            op["includeHeaders"], op["headerCol"], logger,
        )
    raise AppError(BAD_OPERATION, f"Unknown operation type: {op.kind!r}")


def run_operations(
    source_wb: Workbook,
    output_wb: Workbook,
    operations: Iterable[Operation],
    on_progress: Optional[ProgressCallback] = None,
    logger: Optional[logging.Logger] = None,
) -> RunReport:
    """
    Execute operations strictly in list order against output_wb.

    Later operations see what earlier ones wrote. Fail-fast on the first
    AppError: remaining operations are not run and nothing already written
    is rolled back. Other exceptions propagate.
    """
    logger = logger or log
    results: List[OperationResult] = []
    ok = True

    def _emit(event: str, payload: Any) -> None:
        if on_progress is not None:
            try:
                on_progress(event, payload)
            except Exception:
                logger.debug("progress callback failed on %r", event, exc_info=True)

    for index, op in enumerate(operations):
        _emit("start", {"index": index, "kind": op.kind})
        logger.debug("operation %d: %s %s", index, op.kind, dict(op.params))

        try:
            rows_written = apply_operation(source_wb, output_wb, op, logger)
        except AppError as e:
            result = OperationResult(
                index=index,
                kind=op.kind,
                rows_written=0,
                message=str(e),
                error_code=e.code,
                error_message=e.message,
                error_details=e.details,
            )
            results.append(result)
            logger.error("operation %d (%s) aborted the run: %s", index, op.kind, e)
            _emit("error", result)
            ok = False
            break

        result = OperationResult(
            index=index,
            kind=op.kind,
            rows_written=rows_written,
            message="OK" if rows_written > 0 else "0 rows written",
        )
        results.append(result)
        logger.info("operation %d (%s): %d rows written", index, op.kind, rows_written)
        _emit("result", result)

    report = RunReport(ok=ok, results=results)
    _emit("done", report)
    return report
