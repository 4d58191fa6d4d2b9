"""
reformatter/mapping.py - Column map inversion for split-row copies.

A column map assigns source columns to destination columns and may be
many-to-one. Inverting it groups the source columns by destination column.
Group order and the order inside each group both follow the iteration order
of the given map (Python dicts keep insertion order), and that order is
what assigns split rows to source columns:

    {0: 0, 1: 0, 2: 1}  ->  {0: [0, 1], 1: [2]}

The largest group sets the split factor; its destination column is the pivot.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from .errors import AppError, BAD_OPERATION, EMPTY_COLUMN_MAP


ColumnMap = Dict[int, int]
InvertedColumnMap = Dict[int, List[int]]


@dataclass(frozen=True)
class SplitPlan:
    factor: int     # destination rows emitted per source row
    pivot: int      # destination column whose group advances per split row


def _to_col(value: Any) -> int:
    if isinstance(value, bool):
        raise AppError(BAD_OPERATION, f"Bad column index in colMap: {value!r}")
    if isinstance(value, int):
        n = value
    elif isinstance(value, float) and value.is_integer():
        n = int(value)
    elif isinstance(value, str) and value.strip().lstrip("-").isdigit():
        n = int(value.strip())
    else:
        # JSON decoders hand back "1.0" for keys written from floats
        try:
            f = float(value)
        except (TypeError, ValueError):
            raise AppError(BAD_OPERATION, f"Bad column index in colMap: {value!r}")
        if not f.is_integer():
            raise AppError(BAD_OPERATION, f"Bad column index in colMap: {value!r}")
        n = int(f)
    if n < 0:
        raise AppError(BAD_OPERATION, f"Column index in colMap must be >= 0: {value!r}")
    return n


def normalize_col_map(col_map: Mapping[Any, Any]) -> ColumnMap:
    """
    Coerce keys and values to int column indices, keeping entry order.
    Accepts the numeric strings and integral floats that JSON produces.
    """
    return {_to_col(src): _to_col(dst) for src, dst in col_map.items()}


def invert_col_map(col_map: Mapping[int, int]) -> InvertedColumnMap:
    inverted: InvertedColumnMap = {}
    for src_col, dst_col in col_map.items():
        inverted.setdefault(dst_col, []).append(src_col)
    return inverted


def split_plan(inverted: InvertedColumnMap) -> SplitPlan:
    """
    Split factor = size of the largest group.
    Pivot = first destination column, in map order, holding a largest group.
    """
    if not inverted:
        raise AppError(EMPTY_COLUMN_MAP, "Column map is empty")

    pivot = None
    factor = 0
    for dst_col, group in inverted.items():
        if len(group) > factor:
            factor = len(group)
            pivot = dst_col
    return SplitPlan(factor=factor, pivot=pivot)


def select_source_col(inverted: InvertedColumnMap, dst_col: int, plan: SplitPlan, split_index: int) -> int:
    """
    Source column feeding dst_col on split row `split_index`.

    The pivot group advances one entry per split row and repeats its last
    entry once exhausted. Every other group always yields its first entry.
    """
    group = inverted[dst_col]
    if dst_col == plan.pivot:
        return group[min(split_index, len(group) - 1)]
    return group[0]
