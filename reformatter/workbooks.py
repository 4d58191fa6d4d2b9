"""
reformatter/workbooks.py - Opening, seeding and saving workbooks.

Responsible for:
  - Loading the source workbook (formulas kept as formulas, not cached values)
  - Seeding the output workbook from a profile's template file
  - Saving the output workbook
  - Naming the output file from the profile's naming convention

Every failure here is a document I/O failure: it is mapped to an AppError
and propagated, never retried.
"""
from __future__ import annotations

import datetime as _dt
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Tuple

from openpyxl import Workbook, load_workbook

from .errors import (
    AppError,
    BAD_PROFILE, FILE_LOCKED, SAVE_FAILED,
    SOURCE_READ_FAILED, TEMPLATE_NOT_FOUND,
)
from .models import Profile
from .paths import templates_dir as default_templates_dir

log = logging.getLogger(__name__)

DEFAULT_NAMING_CONVENTION = "{source}_{profile}"


def open_source(path: str) -> Workbook:
    try:
        return load_workbook(path)
    except PermissionError:
        raise AppError(FILE_LOCKED, f"Source file is locked: {path}", {"path": path})
    except FileNotFoundError:
        raise AppError(SOURCE_READ_FAILED, f"Source file not found: {path}", {"path": path})
    except Exception as e:
        raise AppError(SOURCE_READ_FAILED, f"Failed to read source: {e}", {"path": path})


def resolve_template_path(template_path: str, templates_dir: Optional[str] = None) -> str:
    """Absolute paths and paths that exist from the cwd win; otherwise look in the templates dir."""
    p = Path(template_path)
    if p.is_absolute() or p.exists():
        return str(p)
    return str(Path(templates_dir or default_templates_dir()) / p)


def seed_output(template_path: str, templates_dir: Optional[str] = None) -> Workbook:
    """
    Load a fresh output workbook from the template file.

    Each call parses the file again, so the output never shares objects with
    another workbook. A blank template path gives a new one-sheet workbook.
    """
    if not (template_path or "").strip():
        return Workbook()

    path = resolve_template_path(template_path, templates_dir)
    if not os.path.exists(path):
        raise AppError(TEMPLATE_NOT_FOUND, f"Template not found: {path}", {"path": path})
    try:
        return load_workbook(path)
    except PermissionError:
        raise AppError(FILE_LOCKED, f"Template file is locked: {path}", {"path": path})
    except Exception as e:
        raise AppError(SOURCE_READ_FAILED, f"Failed to read template: {e}", {"path": path})


def save_output(wb: Workbook, path: str) -> None:
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        wb.save(path)
    except PermissionError:
        raise AppError(
            FILE_LOCKED,
            f"Output file is open in another program: {path}",
            {"path": path},
        )
    except Exception as e:
        raise AppError(SAVE_FAILED, str(e), {"path": path})
    log.info("saved output to %s", path)


def output_path_for(
    profile: Profile,
    source_path: str,
    output_dir: Optional[str] = None,
    today: Optional[_dt.date] = None,
) -> str:
    """
    Build the output file path from the naming convention.

    Placeholders: {source} (source file stem), {profile} (profile name),
    {date} (ISO date). A blank convention means "{source}_{profile}".
    The file goes next to the source unless output_dir is given.
    """
    convention = (profile.naming_convention or "").strip() or DEFAULT_NAMING_CONVENTION
    today = today or _dt.date.today()
    try:
        name = convention.format(
            source=Path(source_path).stem,
            profile=profile.name,
            date=today.isoformat(),
        )
    except (KeyError, IndexError, ValueError) as e:
        raise AppError(
            BAD_PROFILE,
            f"Bad naming convention {convention!r}: {e}",
            {"name": profile.name},
        )
    if not name.lower().endswith(".xlsx"):
        name += ".xlsx"
    directory = output_dir or os.path.dirname(os.path.abspath(source_path))
    return os.path.join(directory, name)


@contextmanager
def open_documents(
    source_path: str,
    template_path: str,
    templates_dir: Optional[str] = None,
) -> Iterator[Tuple[Workbook, Workbook]]:
    """Yield (source, output); both are closed on every exit path."""
    source = open_source(source_path)
    try:
        output = seed_output(template_path, templates_dir)
        try:
            yield source, output
        finally:
            output.close()
    finally:
        source.close()
