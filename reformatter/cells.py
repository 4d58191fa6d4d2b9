"""
reformatter/cells.py - Type-aware copy of one cell's value and style.

Every openpyxl cell falls into one of a closed set of kinds:

  TEXT         string values (shared or inline)
  NUMBER       int/float values, and dates (date values, or numbers under a
               date/time number format)
  BOOLEAN      True/False
  FORMULA      formula text, copied as-is and never evaluated
  BLANK        no value; a styled blank is still a real cell
  UNSUPPORTED  error values, array and data-table formulas

copy_cell() clones the source style into the destination before writing the
value. Order matters: openpyxl replaces a non-date number format when a date
is written, so the source's date format has to be in place first.
"""
from __future__ import annotations

import logging
from copy import copy
from typing import Any, Literal, Optional

from openpyxl.cell.cell import Cell
from openpyxl.utils.datetime import from_excel

from .errors import UNSUPPORTED_CELL_TYPE

log = logging.getLogger(__name__)


TEXT        = "TEXT"
NUMBER      = "NUMBER"
BOOLEAN     = "BOOLEAN"
FORMULA     = "FORMULA"
BLANK       = "BLANK"
UNSUPPORTED = "UNSUPPORTED"

CellKind = Literal["TEXT", "NUMBER", "BOOLEAN", "FORMULA", "BLANK", "UNSUPPORTED"]

_TEXT_TYPES = ("s", "str", "inlineStr")


def cell_kind(cell: Cell) -> CellKind:
    value = cell.value
    if value is None:
        return BLANK
    data_type = cell.data_type
    if data_type == "f":
        # ArrayFormula / DataTableFormula carry a range, not plain text
        return FORMULA if isinstance(value, str) else UNSUPPORTED
    if data_type == "b":
        return BOOLEAN
    if data_type in ("n", "d"):
        return NUMBER
    if data_type in _TEXT_TYPES:
        return TEXT
    return UNSUPPORTED


def is_date_cell(cell: Cell) -> bool:
    return cell_kind(cell) == NUMBER and bool(cell.is_date)


def date_value(cell: Cell) -> Any:
    """Date interpretation of a date cell, using the source workbook's epoch."""
    value = cell.value
    if cell.data_type == "d":
        return value
    return from_excel(value, cell.parent.parent.epoch)


def apply_style(source: Cell, destination: Cell) -> None:
    """Give destination its own copies of the source's style objects."""
    destination.font = copy(source.font)
    destination.fill = copy(source.fill)
    destination.border = copy(source.border)
    destination.alignment = copy(source.alignment)
    destination.protection = copy(source.protection)
    destination.number_format = source.number_format


def clear_cell(destination: Cell) -> None:
    destination.value = None
    if destination.has_style:
        destination.style = "Normal"


def copy_cell(
    source: Optional[Cell],
    destination: Cell,
    logger: Optional[logging.Logger] = None,
) -> CellKind:
    """
    Copy source into destination and return the kind that was copied.

    An absent source blanks the destination with a default style. An
    UNSUPPORTED source leaves the destination untouched and logs a warning.
    The source is never modified.
    """
    logger = logger or log

    if source is None:
        clear_cell(destination)
        return BLANK

    kind = cell_kind(source)

    if kind == UNSUPPORTED:
        logger.warning(
            "%s: skipped %s!%s (data type %r)",
            UNSUPPORTED_CELL_TYPE,
            source.parent.title,
            source.coordinate,
            source.data_type,
        )
        return kind

    apply_style(source, destination)

    if kind == TEXT:
        destination.value = str(source.value)
        # keep "=..." and "#N/A" text from turning into formulas or errors
        destination.data_type = "s"
    elif kind == NUMBER:
        if source.is_date:
            destination.value = date_value(source)
        else:
            destination.value = source.value
    elif kind == BOOLEAN:
        destination.value = bool(source.value)
    elif kind == FORMULA:
        destination.value = source.value
    else:
        destination.value = None

    return kind
