# src/allocheck/session/filtering.py
"""
Structured row filter.

Evaluates a criteria mapping (as produced by the query box) against table
rows. All criteria must match (AND). Supported criterion values:

    ">5" / "<10"              numeric comparison against the cell
    {"$gt": 2} / {"$lt": 3}   numeric comparison
    {"$eq": 4}                numeric equality
    "python"                  membership for list cells and comma lists,
                              case-insensitive equality for string cells
    anything else             plain equality
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from allocheck.validator.parsing import parse_number

_NUMERIC_OPS = {
    "$gt": lambda a, b: a > b,
    "$lt": lambda a, b: a < b,
    "$eq": lambda a, b: a == b,
}


def _compare(cell: Any, target: Any, op: str) -> bool:
    left = parse_number(cell)
    right = parse_number(target)
    if not (left.ok and right.ok):
        return False
    return _NUMERIC_OPS[op](left.value, right.value)


def match_criterion(cell: Any, expected: Any) -> bool:
    """True if a single cell satisfies one criterion value."""
    # (1) String-encoded comparisons
    if isinstance(expected, str) and expected.startswith(">"):
        return _compare(cell, expected[1:], "$gt")
    if isinstance(expected, str) and expected.startswith("<"):
        return _compare(cell, expected[1:], "$lt")

    # (2) Operator mappings; the first known operator wins
    if isinstance(expected, Mapping):
        for op in _NUMERIC_OPS:
            if op in expected:
                return _compare(cell, expected[op], op)
        return False

    # (3) Membership in list cells and comma-separated cells
    if isinstance(cell, list):
        return str(expected).lower() in [str(v).lower() for v in cell]
    if isinstance(cell, str) and "," in cell:
        return str(expected).lower() in [v.strip().lower() for v in cell.split(",")]

    # (4) Case-insensitive strings, else equality
    if isinstance(cell, str) and isinstance(expected, str):
        return cell.lower() == expected.lower()
    return cell == expected


def filter_rows(
    rows: Iterable[Mapping[str, Any]], criteria: Mapping[str, Any]
) -> list[dict[str, Any]]:
    """Rows matching every criterion; returned as copies in input order."""
    return [
        dict(row)
        for row in rows
        if all(match_criterion(row.get(key), value) for key, value in criteria.items())
    ]


__all__ = ["filter_rows", "match_criterion"]
