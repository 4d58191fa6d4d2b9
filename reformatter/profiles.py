"""
reformatter/profiles.py - Profile JSON persistence.

A profile file is one JSON object:

    {
      "name": "Monthly",
      "templatePath": "monthly_template.xlsx",
      "namingConvention": "{source}_monthly",
      "operations": [
        {"type": "COPY_ROWS", "parameters": {"srcSheet": 0, "dstSheet": 0,
                                             "startRow": 0, "endRow": 0}},
        {"type": "COPY_SPLIT_ROW", "parameters": {..., "colMap": {"3": 1, "4": 1}}}
      ]
    }

colMap is written as a JSON object in map order; its string keys are turned
back into column indices on load. ProfileStore keeps one <name>.json per
profile in the profiles directory.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import AppError, BAD_PROFILE, PROFILE_NOT_FOUND
from .models import COPY_SPLIT_ROW, Operation, Profile
from .paths import TEMPLATE_SUFFIXES, ensure_dir, profiles_dir, templates_dir

log = logging.getLogger(__name__)


# ---------- Serialization ----------

def profile_to_dict(profile: Profile) -> Dict[str, Any]:
    return {
        "name": profile.name,
        "templatePath": profile.template_path,
        "namingConvention": profile.naming_convention,
        "operations": [op.to_dict() for op in profile.operations],
    }


def profile_from_dict(data: Dict[str, Any]) -> Profile:
    if not isinstance(data, dict) or not data.get("name"):
        raise AppError(BAD_PROFILE, "Profile record needs a 'name'")
    records = data.get("operations") or []
    if not isinstance(records, list) or not all(isinstance(o, dict) for o in records):
        raise AppError(BAD_PROFILE, f"Profile {data['name']!r}: 'operations' must be a list of objects")
    try:
        operations = [Operation.from_dict(o) for o in records]
    except AppError as e:
        raise AppError(
            BAD_PROFILE,
            f"Profile {data['name']!r} has an invalid operation: {e.message}",
            {"name": data["name"], "cause": e.code},
        )
    return Profile(
        name=data["name"],
        template_path=data.get("templatePath", "") or "",
        naming_convention=data.get("namingConvention", "") or "",
        operations=operations,
    )


def atomic_write_text(path: str, text: str, encoding: str = "utf-8") -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    tmp.write_text(text, encoding=encoding)
    os.replace(str(tmp), str(p))


def save_profile_json(profile: Profile, path: str) -> None:
    atomic_write_text(path, json.dumps(profile_to_dict(profile), indent=2))


def load_profile_json(path: str) -> Profile:
    p = Path(path)
    if not p.exists():
        raise AppError(PROFILE_NOT_FOUND, f"No profile file at {path}", {"path": path, "name": p.stem})
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise AppError(BAD_PROFILE, f"{p.name}: {e}", {"path": path})
    return profile_from_dict(data)


def describe_operation(op: Operation) -> List[str]:
    """One headline per operation plus one indented line per column mapping."""
    lines = [f"{op.kind} - Source Sheet: {op['srcSheet']} - Destination Sheet: {op['dstSheet']}"]
    if op.kind == COPY_SPLIT_ROW:
        for src_col, dst_col in op["colMap"].items():
            lines.append(f"    Col:{src_col} copy to Col:{dst_col}")
        if op["includeHeaders"]:
            lines.append(f"    Headers to Col:{op['headerCol']}")
    elif "srcCol" in op.params:
        lines.append(f"    Col:{op['srcCol']} copy to Col:{op['dstCol']}")
    else:
        lines.append(f"    Rows:{op['startRow']}-{op['endRow']}")
    return lines


def describe_profile(profile: Profile) -> List[str]:
    lines = [
        f"Profile Name: {profile.name}",
        f"Template Path: {profile.template_path}",
        f"Naming Convention: {profile.naming_convention}",
    ]
    for op in profile.operations:
        lines.extend(describe_operation(op))
    return lines


# ---------- Store ----------

class ProfileStore:
    """Profiles kept as <name>.json files under one directory."""

    def __init__(self, directory: Optional[str] = None, templates: Optional[str] = None):
        self.directory = ensure_dir(directory or profiles_dir())
        self.templates_directory = templates or templates_dir()

    def path_for(self, name: str) -> str:
        return os.path.join(self.directory, f"{name}.json")

    def names(self) -> List[str]:
        return sorted(p.stem for p in Path(self.directory).glob("*.json"))

    def exists(self, name: str) -> bool:
        return os.path.exists(self.path_for(name))

    def load(self, name: str) -> Profile:
        if not self.exists(name):
            raise AppError(PROFILE_NOT_FOUND, f"Profile not found: {name}", {"name": name})
        return load_profile_json(self.path_for(name))

    def save(self, profile: Profile) -> str:
        path = self.path_for(profile.name)
        save_profile_json(profile, path)
        log.debug("saved profile %r to %s", profile.name, path)
        return path

    def create(self, name: str) -> Profile:
        profile = Profile(name=name)
        self.save(profile)
        return profile

    def remove(self, name: str) -> None:
        if not self.exists(name):
            raise AppError(PROFILE_NOT_FOUND, f"Profile not found: {name}", {"name": name})
        os.remove(self.path_for(name))

    def describe(self, name: str) -> List[str]:
        return describe_profile(self.load(name))

    def available_templates(self) -> List[str]:
        d = Path(self.templates_directory)
        if not d.is_dir():
            return []
        return sorted(
            p.name for p in d.iterdir()
            if p.is_file() and p.suffix.lower() in TEMPLATE_SUFFIXES
        )
