# src/allocheck/export/table_export.py
from __future__ import annotations

import csv
import json
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from allocheck.errors import DataError, ExportError
from allocheck.rules import RuleSet
from allocheck.schemas.models import ExportConfig
from allocheck.session import ValidationSession

logger = logging.getLogger(__name__)

# Positional index added at ingestion; never part of the exported sheet
_INTERNAL_COLUMNS = ("id",)


def _columns_of(rows: Sequence[Mapping[str, Any]]) -> list[str]:
    """
    @brief
    Union of column names in first-seen order.

    @details
    Rows of one table normally share a header, but edited rows may carry an
    extra key; every key seen in any row becomes a column.
    """
    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns and key not in _INTERNAL_COLUMNS:
                columns.append(key)
    return columns


def _cell(value: Any) -> Any:
    # Already-decoded structured cells go back out as JSON text
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return value


def _atomic_write(out_path: Path, write) -> None:
    out_dir = out_path.parent
    out_dir.mkdir(parents=True, exist_ok=True)

    tmp_fd, tmp_name = tempfile.mkstemp(dir=str(out_dir), suffix=".tmp", text=True)
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8", newline="") as f:
            write(f)
        os.replace(tmp_name, out_path)
    except Exception:
        try:
            os.remove(tmp_name)
        except OSError:
            pass
        raise


def write_table_csv(rows: Iterable[Mapping[str, Any]], out_path: Path) -> Path:
    """
    @brief
    Write one table to CSV, unchanged except for the internal `id` column.

    @details
    Column order follows the rows. Missing cells are written empty. The file
    is UTF-8 and replaced atomically.

    @raises
        DataError if any row is not a mapping.
    """
    records = list(rows)
    for row in records:
        if not isinstance(row, Mapping):
            raise DataError(
                "Each row must be a mapping of column -> value.",
                source="export.write_table_csv",
                suggested_action="Pass list[dict] rows as produced by the loader.",
            )

    columns = _columns_of(records)

    def _write(f) -> None:
        writer = csv.DictWriter(f, fieldnames=columns, restval="", extrasaction="ignore")
        writer.writeheader()
        for row in records:
            writer.writerow({k: _cell(v) for k, v in row.items()})

    out_path = Path(out_path)
    _atomic_write(out_path, _write)
    return out_path


def export_tables(
    session: ValidationSession, out_dir: Path, cfg: ExportConfig | None = None
) -> dict[str, Path]:
    """
    @brief
    Export the session's tables as <table>.csv files.

    @details
    Export is gated on a clean data set: while any validation error exists
    and `cfg.require_clean` is set, nothing is written. Empty tables are
    skipped.

    @returns
        Mapping table -> written CSV path.

    @raises
        ExportError if the data set still has validation errors.
    """
    cfg = cfg or ExportConfig()

    if not session.data_loaded:
        raise ExportError(
            "Nothing to export: no data loaded.",
            source="export.export_tables",
            suggested_action="Load a workbook first.",
        )
    if cfg.require_clean and not session.is_valid:
        raise ExportError(
            f"Export blocked: {len(session.errors)} validation error(s) remain.",
            source="export.export_tables",
            suggested_action="Fix all validation errors before exporting.",
        )

    written: dict[str, Path] = {}
    for table in cfg.tables:
        rows = session.rows(table)
        if not rows:
            continue
        written[table] = write_table_csv(rows, Path(out_dir) / f"{table}.csv")

    logger.info("Exported %d table(s) to %s", len(written), out_dir)
    return written


def write_rules_json(rules: RuleSet, out_path: Path) -> Path:
    """Write the rule set as a pretty-printed JSON array (rules.json)."""
    payload = json.dumps(rules.dump(), indent=2, ensure_ascii=False)
    out_path = Path(out_path)
    _atomic_write(out_path, lambda f: f.write(payload + "\n"))
    logger.info("Rules saved: %s (%d rule(s))", out_path, len(rules))
    return out_path


__all__ = ["write_table_csv", "export_tables", "write_rules_json"]
