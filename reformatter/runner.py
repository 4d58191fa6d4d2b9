"""
reformatter/runner.py - Runs one profile against one source file.

Responsible for:
  - Opening the source workbook and seeding the output from the template
  - Running the profile's operations in order (engine.run_operations)
  - Saving the output, including the partial output of an aborted run
  - Closing both workbooks on every exit path

This module has NO knowledge of how operations copy cells.
"""
from __future__ import annotations

import logging
from typing import Optional

from .engine import ProgressCallback, run_operations
from .models import Profile, RunReport
from .workbooks import open_documents, output_path_for, save_output

log = logging.getLogger(__name__)


def run_profile(
    profile: Profile,
    source_path: str,
    output_path: Optional[str] = None,
    output_dir: Optional[str] = None,
    templates_dir: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None,
    logger: Optional[logging.Logger] = None,
) -> RunReport:
    """
    Execute `profile` against `source_path` and write the output file.

    output_path wins over output_dir; with neither, the naming convention
    places the file next to the source. Document I/O errors propagate as
    AppError. A configuration error inside the run stops the remaining
    operations; what was written before it is still saved, and the report
    says ok=False.
    """
    logger = logger or log
    target = output_path or output_path_for(profile, source_path, output_dir)
    logger.info("running profile %r on %s", profile.name, source_path)

    with open_documents(source_path, profile.template_path, templates_dir) as (source, output):
        report = run_operations(source, output, profile.operations, on_progress, logger)
        save_output(output, target)

    report.output_path = target
    if not report.ok:
        logger.warning("profile %r stopped early; partial output saved to %s", profile.name, target)
    return report
