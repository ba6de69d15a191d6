# src/allocheck/export/report.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from allocheck.errors import ExportError
from allocheck.session import ValidationSession
from allocheck.validator import compute_phase_balance

logger = logging.getLogger(__name__)


def build_report(session: ValidationSession) -> dict[str, Any]:
    """
    @brief
    Assemble the session's findings into a serializable report.

    @details
    Contains the global validity flag, per-table row/error counts, every
    finding in session order, and the per-phase demand/supply balance.
    No files are written here.
    """
    balance = compute_phase_balance(session.rows("tasks"), session.rows("workers"))
    summary = session.summary()

    return {
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "valid": summary["valid"],
        "rows": summary["rows"],
        "error_counts": summary["errors"],
        "errors": [e.model_dump() for e in session.errors],
        "phase_balance": {
            "demand": balance.demand,
            "supply": balance.supply,
            "oversubscribed": balance.oversubscribed(),
        },
    }


def save_report(
    report: dict[str, Any],
    out_dir: Path | None = None,
    filename: str = "validation_report.json",
) -> Path:
    """
    Writes the report to disk via a temporary file swap.

    Args:
        report: Report dictionary from build_report().
        out_dir: Target directory (defaults to 'data/output').
        filename: Target filename (default 'validation_report.json').

    Returns:
        Path to the written JSON file.
    """
    target_dir = Path(out_dir or "data/output")
    target_dir.mkdir(parents=True, exist_ok=True)
    final_path = target_dir / filename
    tmp_path = final_path.with_suffix(".tmp")

    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
        tmp_path.replace(final_path)
    except (OSError, TypeError, ValueError) as e:
        raise ExportError(
            f"Failed to write validation report: {e}",
            source="report.save_report",
            suggested_action="Check disk permissions and free space.",
        ) from e

    logger.info("Validation report saved: %s", final_path)
    return final_path


__all__ = ["build_report", "save_report"]
