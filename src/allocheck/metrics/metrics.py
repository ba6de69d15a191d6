# src/allocheck/metrics/metrics.py
from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from typing import Any

import pandas as pd

from allocheck.errors import DataError
from allocheck.schemas.models import TABLES, ErrorKind
from allocheck.session import ValidationSession
from allocheck.validator import PhaseBalance, compute_phase_balance


def collect_metrics(session: ValidationSession) -> dict[str, Any]:
    """
    @brief
    Builds a JSON-serializable summary of one validation run.

    @details
    Counts rows per table, findings per table and per kind, and derives
    phase load figures from the demand/supply balance:
        - num_phases, num_oversubscribed_phases
        - max_phase_load: highest demand/supply ratio over phases with supply
        - unsupplied_phases: phases with demand but zero supply
    """
    if not isinstance(session, ValidationSession):
        raise DataError(
            "collect_metrics expects a ValidationSession",
            source="metrics.collect_metrics",
        )

    # (1) Findings as a DataFrame for grouping
    df = _errors_dataframe(session)

    # (2) Phase balance
    balance = compute_phase_balance(session.rows("tasks"), session.rows("workers"))
    phase_stats = _phase_stats(balance)

    metrics = {
        "timestamp": _utc_now_iso(),
        "valid": session.is_valid,
        "rows": {t: len(session.rows(t)) for t in TABLES},
        "num_errors": int(len(df)),
        "errors_by_table": _counts(df, "table", TABLES),
        "errors_by_kind": _counts(df, "kind", [k.value for k in ErrorKind]),
        "rows_with_errors": {t: len(session.rows_with_errors(t)) for t in TABLES},
        **phase_stats,
    }

    # (3) Numerical integrity and serializability
    _assert_no_nans(metrics)
    json.dumps(metrics, ensure_ascii=False)
    return metrics


# ----------------- internal -----------------


def _errors_dataframe(session: ValidationSession) -> pd.DataFrame:
    records = [e.model_dump() for e in session.errors]
    return pd.DataFrame(records, columns=["table", "row", "field", "message", "kind"])


def _counts(df: pd.DataFrame, column: str, keys: Any) -> dict[str, int]:
    """Value counts for `column`, with zero for every expected key."""
    counts = df[column].value_counts() if not df.empty else pd.Series(dtype="int64")
    return {str(k): int(counts.get(k, 0)) for k in keys}


def _phase_stats(balance: PhaseBalance) -> dict[str, Any]:
    if not balance.phases():
        return {
            "num_phases": 0,
            "num_oversubscribed_phases": 0,
            "max_phase_load": 0.0,
            "unsupplied_phases": [],
        }

    frame = pd.DataFrame(
        {
            "demand": pd.Series(balance.demand, dtype="float64"),
            "supply": pd.Series(balance.supply, dtype="float64"),
        }
    ).fillna(0.0)

    supplied = frame[frame["supply"] > 0]
    load = (supplied["demand"] / supplied["supply"]).max() if not supplied.empty else 0.0
    unsupplied = frame[(frame["supply"] == 0) & (frame["demand"] > 0)].index

    return {
        "num_phases": int(len(frame)),
        "num_oversubscribed_phases": len(balance.oversubscribed()),
        "max_phase_load": round(float(load), 6),
        "unsupplied_phases": [str(p) for p in unsupplied],
    }


def _assert_no_nans(obj: Any) -> None:
    """Raise DataError if any float in a nested structure is NaN or infinite."""
    if isinstance(obj, float) and not math.isfinite(obj):
        raise DataError("metrics contain NaN/inf", source="metrics._assert_no_nans")
    if isinstance(obj, dict):
        for v in obj.values():
            _assert_no_nans(v)
    elif isinstance(obj, list):
        for v in obj:
            _assert_no_nans(v)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


__all__ = ["collect_metrics"]
