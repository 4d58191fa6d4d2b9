"""
Command line entry point.

    python -m reformatter run <profile> <source.xlsx> [-o OUT] [--output-dir DIR]
    python -m reformatter list
    python -m reformatter show <profile>
    python -m reformatter install
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .errors import AppError, friendly_message
from .models import RunReport
from .paths import ensure_dir, log_file, profiles_dir, resolve_home, templates_dir
from .profiles import ProfileStore
from .resources import install_resources
from .runner import run_profile

log = logging.getLogger("reformatter")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(log_path: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """Attach a stderr handler, plus a file handler when log_path is given."""
    logger = logging.getLogger("reformatter")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(stream)

    if log_path:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
    return logger


def format_report(report: RunReport) -> str:
    lines = []
    for r in report.results:
        label = f"#{r.index} {r.kind}"
        if r.error_code:
            err = AppError(r.error_code, r.error_message or "", r.error_details)
            lines.append(f"{label}: ERROR [{r.error_code}] {friendly_message(err)}")
        else:
            lines.append(f"{label}: {r.rows_written} rows written")
    if not lines:
        lines.append("No operations.")
    if report.output_path:
        lines.append(f"Output: {report.output_path}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="reformatter", description="Reshape spreadsheets with saved profiles")
    ap.add_argument("--home", help="Application home (default: $REFORMATTER_HOME or ~/.excelreformatter)")
    ap.add_argument("--log-file", help="Also write the log to this file ('-' for <home>/log.txt)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = ap.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a profile against a source workbook")
    run.add_argument("profile", help="Profile name")
    run.add_argument("source", help="Source .xlsx file")
    run.add_argument("-o", "--output", help="Output file path")
    run.add_argument("--output-dir", help="Directory for the output file")

    sub.add_parser("list", help="List saved profiles and templates")

    show = sub.add_parser("show", help="Print a profile's operations")
    show.add_argument("profile", help="Profile name")

    sub.add_parser("install", help="Copy the bundled profiles and templates into the home")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    home = args.home or resolve_home()

    log_path = None
    if args.log_file:
        log_path = log_file(ensure_dir(home)) if args.log_file == "-" else args.log_file
    configure_logging(log_path, logging.DEBUG if args.verbose else logging.INFO)

    store = ProfileStore(profiles_dir(home), templates_dir(home))

    try:
        if args.command == "install":
            for path in install_resources(home=home):
                print(path)
            return 0

        if args.command == "list":
            print("Profiles:")
            for name in store.names():
                print(f"  {name}")
            print("Templates:")
            for name in store.available_templates():
                print(f"  {name}")
            return 0

        if args.command == "show":
            print("\n".join(store.describe(args.profile)))
            return 0

        profile = store.load(args.profile)
        report = run_profile(
            profile,
            args.source,
            output_path=args.output,
            output_dir=args.output_dir,
            templates_dir=templates_dir(home),
        )
    except AppError as e:
        log.debug("command failed", exc_info=True)
        print(friendly_message(e), file=sys.stderr)
        return 1

    print(format_report(report))
    return 0 if report.ok else 1
