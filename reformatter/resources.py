from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from .paths import PROFILES_DIRNAME, TEMPLATES_DIRNAME, resolve_home

log = logging.getLogger(__name__)

BUNDLE_DIR = Path(__file__).parent / "bundle"


def install_resources(bundle_dir: Optional[str] = None, home: Optional[str] = None) -> List[str]:
    """Copy bundled profiles/ and templates/ into the application home.

    Files already present in the home are left alone, so user edits to an
    installed profile survive reinstalling. Returns the paths written.
    """
    bundle = Path(bundle_dir) if bundle_dir else BUNDLE_DIR
    target_home = Path(home or resolve_home())
    installed: List[str] = []

    for sub in (PROFILES_DIRNAME, TEMPLATES_DIRNAME):
        out_dir = target_home / sub
        out_dir.mkdir(parents=True, exist_ok=True)
        in_dir = bundle / sub
        if not in_dir.is_dir():
            continue
        for src in sorted(in_dir.rglob("*")):
            if not src.is_file():
                continue
            dest = out_dir / src.relative_to(in_dir)
            if dest.exists():
                continue
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dest)
            installed.append(str(dest))

    log.info("installed %d resource file(s) into %s", len(installed), target_home)
    return installed
