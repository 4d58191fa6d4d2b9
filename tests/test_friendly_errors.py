"""
test_friendly_errors.py - Tests for friendly_message() in reformatter.errors.

Verifies that all error codes produce readable plain-English messages
with no raw tracebacks or code gibberish.
"""
from __future__ import annotations

import pytest

from reformatter.errors import (
    AppError,
    friendly_message,
    BAD_INDEX,
    BAD_OPERATION,
    BAD_PROFILE,
    EMPTY_COLUMN_MAP,
    FILE_LOCKED,
    PROFILE_NOT_FOUND,
    SAVE_FAILED,
    SHEET_NOT_FOUND,
    SOURCE_READ_FAILED,
    TEMPLATE_NOT_FOUND,
)


def test_file_locked_message_mentions_program():
    e = AppError(FILE_LOCKED, "File is locked", {"path": "C:/data/output.xlsx"})
    msg = friendly_message(e)
    assert "open in another program" in msg
    assert "output.xlsx" in msg


def test_file_locked_message_no_path():
    msg = friendly_message(AppError(FILE_LOCKED, "File is locked"))
    assert "open in another program" in msg


def test_save_failed_permission_mentions_close():
    e = AppError(SAVE_FAILED, "PermissionError: access denied", {"path": "out.xlsx"})
    assert "close" in friendly_message(e).lower()


def test_save_failed_generic_message():
    msg = friendly_message(AppError(SAVE_FAILED, "disk full", {"path": "out.xlsx"}))
    assert "could not save" in msg.lower()
    assert "out.xlsx" in msg


def test_source_not_found():
    msg = friendly_message(AppError(SOURCE_READ_FAILED, "Source file not found: a.xlsx"))
    assert msg.startswith("Source file not found")


def test_source_unreadable_keeps_reason():
    msg = friendly_message(AppError(SOURCE_READ_FAILED, "File is not a zip file"))
    assert "valid XLSX" in msg
    assert "not a zip file" in msg


def test_template_not_found_names_file():
    e = AppError(TEMPLATE_NOT_FOUND, "missing", {"path": "/t/monthly.xlsx"})
    assert "monthly.xlsx" in friendly_message(e)


def test_sheet_not_found_uses_role_and_index():
    e = AppError(SHEET_NOT_FOUND, "no sheet", {"role": "source", "index": 2, "sheet_count": 1})
    assert friendly_message(e).startswith("The source workbook has no sheet number 2.")


def test_sheet_not_found_without_details():
    assert "Sheet not found" in friendly_message(AppError(SHEET_NOT_FOUND, "no sheet"))


def test_profile_not_found_names_profile():
    e = AppError(PROFILE_NOT_FOUND, "missing", {"name": "Monthly"})
    assert friendly_message(e) == "Profile not found: Monthly"


def test_empty_column_map_explains_fix():
    assert "column mapping" in friendly_message(AppError(EMPTY_COLUMN_MAP, "empty"))


@pytest.mark.parametrize("code", [BAD_INDEX, BAD_OPERATION, BAD_PROFILE])
def test_configuration_messages_keep_raw_detail(code):
    msg = friendly_message(AppError(code, "startRow must be >= 0"))
    assert "startRow must be >= 0" in msg
    assert "Traceback" not in msg


def test_unknown_code_falls_back_to_first_line():
    e = AppError("WEIRD", "first line\nTraceback (most recent call last):")
    assert friendly_message(e) == "first line"


def test_unknown_code_empty_message():
    assert friendly_message(AppError("WEIRD", "")) == "An unexpected error occurred."
