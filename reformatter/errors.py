from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AppError(Exception):
    """
    User-facing error with a short code and structured details.
    Raise AppError from reformatter modules; callers display .message and
    .details, or friendly_message() for a plain-English line.
    """
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} ({self.details})"
        return f"{self.code}: {self.message}"


# ── Error codes (keep stable for tests and the CLI) ──────────────────────────

# Configuration: an operation that cannot run against the documents it was given.
BAD_OPERATION     = "BAD_OPERATION"
EMPTY_COLUMN_MAP  = "EMPTY_COLUMN_MAP"
SHEET_NOT_FOUND   = "SHEET_NOT_FOUND"
BAD_INDEX         = "BAD_INDEX"

# Diagnostic only: logged by the cell copier, never raised.
UNSUPPORTED_CELL_TYPE = "UNSUPPORTED_CELL_TYPE"

# Document I/O.
SOURCE_READ_FAILED = "SOURCE_READ_FAILED"
TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
FILE_LOCKED        = "FILE_LOCKED"
SAVE_FAILED        = "SAVE_FAILED"

# Profile persistence.
PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
BAD_PROFILE       = "BAD_PROFILE"

CONFIGURATION_CODES = frozenset({BAD_OPERATION, EMPTY_COLUMN_MAP, SHEET_NOT_FOUND, BAD_INDEX})
DOCUMENT_IO_CODES = frozenset({SOURCE_READ_FAILED, TEMPLATE_NOT_FOUND, FILE_LOCKED, SAVE_FAILED})


def is_configuration_error(e: AppError) -> bool:
    return e.code in CONFIGURATION_CODES


def is_document_io_error(e: AppError) -> bool:
    return e.code in DOCUMENT_IO_CODES


# ── Friendly message lookup ───────────────────────────────────────────────────

def _file_suffix(e: AppError) -> str:
    if e.details and "path" in e.details:
        return f" ({os.path.basename(str(e.details['path']))})"
    return ""


def friendly_message(e: AppError) -> str:
    """
    Return a plain-English one-liner suitable for printing to a terminal.
    Never exposes raw tracebacks or internal code paths.
    """
    code = e.code
    msg  = e.message or ""

    if code == FILE_LOCKED:
        return f"File is open in another program{_file_suffix(e)}. Close it and try again."

    if code == SAVE_FAILED:
        fname = _file_suffix(e)
        if "permission" in msg.lower() or "locked" in msg.lower() or "access" in msg.lower():
            return f"Could not save, file is open in another program{fname}. Close it and try again."
        return f"Could not save the output file{fname}. Check that the path is valid and the folder exists."

    if code == SOURCE_READ_FAILED:
        if "no such file" in msg.lower() or "not found" in msg.lower():
            return "Source file not found. Check that the file path is correct."
        return f"Could not read the source file. Check that it is a valid XLSX workbook.\n({msg})"

    if code == TEMPLATE_NOT_FOUND:
        return f"Template file not found{_file_suffix(e)}. Check the profile's template path."

    if code == SHEET_NOT_FOUND:
        details = e.details or {}
        which = details.get("role", "")
        idx = details.get("index", "")
        if which and idx != "":
            return f"The {which} workbook has no sheet number {idx}. Check the profile's sheet indices."
        return f"Sheet not found. Check the profile's sheet indices.\n({msg})"

    if code == BAD_INDEX:
        return f"A row or column index is outside the spreadsheet grid.\n({msg})"

    if code == EMPTY_COLUMN_MAP:
        return "A split-row operation has no column mappings. Add at least one column mapping."

    if code == BAD_OPERATION:
        return f"An operation in the profile has invalid settings.\n({msg})"

    if code == PROFILE_NOT_FOUND:
        details = e.details or {}
        name = details.get("name", "")
        return f"Profile not found: {name}" if name else "Profile not found."

    if code == BAD_PROFILE:
        return f"The profile file could not be read. Check that it is valid JSON.\n({msg})"

    # Fallback: first line of the raw message, never a traceback
    clean = msg.splitlines()[0] if msg else "An unexpected error occurred."
    return clean
