# src/allocheck/validator/parsing.py
"""
Per-field parse results for loosely typed spreadsheet cells.

Cells arrive as strings, numbers or already-decoded values. Validators never
coerce silently: every cell is turned into an explicit result object and the
checks branch on its outcome.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any


@dataclass(frozen=True, slots=True)
class NumberParse:
    """
    @brief
    Outcome of reading a numeric cell.

    @details
    Either `ok=True` with a finite `value`, or `ok=False` with a short
    `reason` describing why the cell is not a usable number.
    """

    ok: bool
    value: float | None = None
    reason: str | None = None


class StructuredStatus(str, Enum):
    ABSENT = "absent"
    UNPARSEABLE = "unparseable"
    WRONG_SHAPE = "wrong_shape"
    OK = "ok"


@dataclass(frozen=True, slots=True)
class StructuredParse:
    """
    @brief
    Outcome of reading a structured-text (JSON) cell.

    @details
    Two-stage result: the text is decoded first, then its shape is checked.
    `value` is populated for WRONG_SHAPE and OK.
    """

    status: StructuredStatus
    value: Any = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is StructuredStatus.OK


def is_blank(value: Any) -> bool:
    """True for missing cells and whitespace-only strings."""
    if value is None:
        return True
    return str(value).strip() == ""


def parse_number(value: Any) -> NumberParse:
    """
    @brief
    Parse a cell as a finite number.

    @details
    Accepts ints, floats and numeric strings (surrounding whitespace ignored).
    Booleans, blanks, non-numeric text, NaN and infinities are failures.
    """
    if isinstance(value, bool):
        return NumberParse(ok=False, reason="boolean is not a number")

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return NumberParse(ok=False, reason="empty")
        try:
            number = float(text)
        except ValueError:
            return NumberParse(ok=False, reason=f"not a number: {value!r}")
    elif value is None:
        return NumberParse(ok=False, reason="empty")
    else:
        return NumberParse(ok=False, reason=f"unsupported type {type(value).__name__}")

    if not math.isfinite(number):
        return NumberParse(ok=False, reason="not finite")
    return NumberParse(ok=True, value=number)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_structured(value: Any, require_array: bool = False) -> StructuredParse:
    """
    @brief
    Parse a cell holding JSON text, optionally requiring an array.

    @details
    Empty cells are ABSENT (the fields are optional). Strings are decoded with
    the json module; the non-standard constants NaN, Infinity and -Infinity are
    rejected. Any other non-empty value is treated as already decoded.
    """
    # (1) Optional field: falsy cells are not checked
    if not value:
        return StructuredParse(StructuredStatus.ABSENT)

    # (2) Decode
    if isinstance(value, str):
        try:
            decoded = json.loads(value, parse_constant=_reject_constant)
        except ValueError as e:
            return StructuredParse(StructuredStatus.UNPARSEABLE, reason=str(e))
    else:
        decoded = value

    # (3) Shape check
    if require_array and not isinstance(decoded, list):
        return StructuredParse(
            StructuredStatus.WRONG_SHAPE,
            value=decoded,
            reason=f"expected array, got {type(decoded).__name__}",
        )
    return StructuredParse(StructuredStatus.OK, value=decoded)


def split_skills(value: Any) -> list[str]:
    """
    @brief
    Split a comma-separated skill list into normalized tokens.

    @details
    Tokens are trimmed and lower-cased; empty tokens are dropped. Order is
    kept and repeated tokens are collapsed to their first occurrence.
    """
    if value is None:
        return []
    tokens: list[str] = []
    for raw in str(value).split(","):
        token = raw.strip().lower()
        if token and token not in tokens:
            tokens.append(token)
    return tokens


def identity_key(value: Any) -> str:
    """Comparison key for an identifier cell: 1, 1.0, "1" and " 1 " are equal."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def phase_key(label: Any) -> str:
    """Canonical key for a phase label so that 1 and "1" name the same phase."""
    if isinstance(label, (list, dict)):
        return json.dumps(label, sort_keys=True)
    return identity_key(label)


def format_number(value: float) -> str:
    """Render 3.0 as '3' and 2.5 as '2.5' in messages."""
    return f"{value:g}"


__all__ = [
    "NumberParse",
    "StructuredParse",
    "StructuredStatus",
    "is_blank",
    "parse_number",
    "parse_structured",
    "split_skills",
    "identity_key",
    "phase_key",
    "format_number",
]
