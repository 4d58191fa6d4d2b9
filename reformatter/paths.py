from __future__ import annotations

import os
from pathlib import Path
from typing import Optional


ENV_HOME = "REFORMATTER_HOME"
DEFAULT_HOME_DIRNAME = ".excelreformatter"

PROFILES_DIRNAME = "profiles"
TEMPLATES_DIRNAME = "templates"
LOG_FILENAME = "log.txt"

TEMPLATE_SUFFIXES = (".xls", ".xlsx")


def resolve_home(project_root: Optional[str] = None) -> str:
    """Resolve the application home directory.

    Priority:
    1) REFORMATTER_HOME env var (absolute or relative)
    2) User-home scoped default: ~/.excelreformatter
    """
    env = os.getenv(ENV_HOME)
    if env:
        p = Path(env)
        if not p.is_absolute():
            base = Path(project_root) if project_root else Path.cwd()
            p = base / p
        return str(p)

    return str(Path.home() / DEFAULT_HOME_DIRNAME)


def profiles_dir(home: Optional[str] = None) -> str:
    return str(Path(home or resolve_home()) / PROFILES_DIRNAME)


def templates_dir(home: Optional[str] = None) -> str:
    return str(Path(home or resolve_home()) / TEMPLATES_DIRNAME)


def log_file(home: Optional[str] = None) -> str:
    return str(Path(home or resolve_home()) / LOG_FILENAME)


def ensure_dir(path: str) -> str:
    Path(path).mkdir(parents=True, exist_ok=True)
    return path
