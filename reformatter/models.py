from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from .errors import AppError, BAD_OPERATION, EMPTY_COLUMN_MAP
from .mapping import normalize_col_map


# ---- Operation kinds and parameter schemas ----

COPY_ROWS      = "COPY_ROWS"
COPY_COLUMN    = "COPY_COLUMN"
COPY_SPLIT_ROW = "COPY_SPLIT_ROW"

OpKind = Literal["COPY_ROWS", "COPY_COLUMN", "COPY_SPLIT_ROW"]

PARAM_SCHEMAS: Dict[str, Tuple[Tuple[str, str], ...]] = {
    COPY_ROWS: (
        ("srcSheet", "int"), ("dstSheet", "int"),
        ("startRow", "int"), ("endRow", "int"),
    ),
    COPY_COLUMN: (
        ("srcSheet", "int"), ("srcCol", "int"),
        ("dstSheet", "int"), ("dstCol", "int"),
        ("startRow", "int"),
    ),
    COPY_SPLIT_ROW: (
        ("srcSheet", "int"), ("dstSheet", "int"), ("startRow", "int"),
        ("colMap", "colmap"), ("includeHeaders", "bool"), ("headerCol", "int"),
    ),
}


def _as_index(kind: str, key: str, value: Any) -> int:
    # bool is an int subclass; True is not a sheet index
    if isinstance(value, bool):
        raise AppError(BAD_OPERATION, f"{kind}: {key} must be an integer (got {value!r})")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise AppError(BAD_OPERATION, f"{kind}: {key} must be an integer (got {value!r})")
    if value < 0:
        raise AppError(BAD_OPERATION, f"{kind}: {key} must be >= 0 (got {value})")
    return value


def _validate_params(kind: str, params: Mapping[str, Any]) -> Dict[str, Any]:
    if kind not in PARAM_SCHEMAS:
        raise AppError(BAD_OPERATION, f"Unknown operation type: {kind!r}")

    schema = PARAM_SCHEMAS[kind]
    missing = [key for key, _ in schema if key not in params]
    if missing:
        raise AppError(
            BAD_OPERATION,
            f"{kind}: missing parameters {', '.join(missing)}",
            {"missing": missing},
        )

    clean: Dict[str, Any] = {}
    for key, typ in schema:
        value = params[key]
        if typ == "int":
            clean[key] = _as_index(kind, key, value)
        elif typ == "bool":
            if not isinstance(value, bool):
                raise AppError(BAD_OPERATION, f"{kind}: {key} must be true or false (got {value!r})")
            clean[key] = value
        else:
            if not isinstance(value, Mapping):
                raise AppError(BAD_OPERATION, f"{kind}: {key} must be a mapping (got {value!r})")
            col_map = normalize_col_map(value)
            if not col_map:
                raise AppError(EMPTY_COLUMN_MAP, f"{kind}: {key} is empty")
            clean[key] = MappingProxyType(col_map)

    if kind == COPY_ROWS and clean["startRow"] > clean["endRow"]:
        raise AppError(
            BAD_OPERATION,
            f"{kind}: startRow ({clean['startRow']}) is after endRow ({clean['endRow']})",
        )
    return clean


@dataclass(frozen=True)
class Operation:
    """
    One declarative copy instruction.

    Parameters are validated here, so an Operation that exists is complete
    for its kind. The parameter mapping is read-only; colMap keeps the order
    it was given in, which decides the split pivot on ties.
    """
    kind: OpKind
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        clean = _validate_params(self.kind, self.params)
        object.__setattr__(self, "params", MappingProxyType(clean))

    def __getitem__(self, key: str) -> Any:
        return self.params[key]

    # ---------- Keyword constructors ----------

    @classmethod
    def row_copy(cls, src_sheet: int, dst_sheet: int, start_row: int, end_row: int) -> "Operation":
        return cls(COPY_ROWS, {
            "srcSheet": src_sheet, "dstSheet": dst_sheet,
            "startRow": start_row, "endRow": end_row,
        })

    @classmethod
    def column_copy(
        cls, src_sheet: int, src_col: int, dst_sheet: int, dst_col: int, start_row: int,
    ) -> "Operation":
        return cls(COPY_COLUMN, {
            "srcSheet": src_sheet, "srcCol": src_col,
            "dstSheet": dst_sheet, "dstCol": dst_col,
            "startRow": start_row,
        })

    @classmethod
    def split_row_copy(
        cls,
        src_sheet: int,
        dst_sheet: int,
        start_row: int,
        col_map: Mapping[int, int],
        include_headers: bool = False,
        header_col: int = 0,
    ) -> "Operation":
        return cls(COPY_SPLIT_ROW, {
            "srcSheet": src_sheet, "dstSheet": dst_sheet, "startRow": start_row,
            "colMap": col_map, "includeHeaders": include_headers, "headerCol": header_col,
        })

    # ---------- Serialization ----------

    def to_dict(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        for key, value in self.params.items():
            if key == "colMap":
                # JSON object keys are strings; insertion order is kept
                params[key] = {str(src): dst for src, dst in value.items()}
            else:
                params[key] = value
        return {"type": self.kind, "parameters": params}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Operation":
        kind = data.get("type", data.get("kind"))
        params = data.get("parameters", data.get("params"))
        if kind is None or params is None:
            raise AppError(BAD_OPERATION, f"Operation record needs 'type' and 'parameters': {dict(data)!r}")
        return cls(kind, params)


# ---- Profile ----

@dataclass
class Profile:
    """
    Named, ordered list of operations plus the template the output is seeded
    from and the naming convention for the produced file.
    """
    name: str
    template_path: str = ""
    naming_convention: str = ""
    operations: List[Operation] = field(default_factory=list)


# ---- Run reporting ----

@dataclass
class OperationResult:
    index: int
    kind: str
    rows_written: int
    message: str = ""
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[Dict[str, Any]] = None


@dataclass
class RunReport:
    """
    Returned by engine.run_operations and runner.run_profile.
    ok is False when a run aborted; results written before the abort stay.
    """
    ok: bool
    results: List[OperationResult] = field(default_factory=list)
    output_path: Optional[str] = None

    @property
    def has_errors(self) -> bool:
        return any(r.error_code for r in self.results)

    @property
    def rows_written(self) -> int:
        return sum(r.rows_written for r in self.results)
