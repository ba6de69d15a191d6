# src/allocheck/dataloader/workbook_loader.py
from __future__ import annotations

import csv
import logging
import re
import zipfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd

from allocheck.dataloader.types import LoadResult
from allocheck.errors import DataError
from allocheck.schemas.models import TABLES

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xls"}
CSV_SUFFIXES = {".csv"}


def normalize_sheet_name(name: str) -> str:
    """
    @brief
    Map a sheet (or CSV file stem) name onto an internal table key.

    @details
    Lower-cases and removes whitespace, then matches on prefix:
    "Client Data" -> clients, "Workers" -> workers, "Task List" -> tasks.
    Anything else is returned lower-cased.
    """
    compact = re.sub(r"\s+", "", name.lower())
    for table in TABLES:
        if compact.startswith(table[:-1]):
            return table
    return name.lower()


class WorkbookLoader:
    """
    File -> LoadResult.

    Rules:
      - .xlsx / .xls: every sheet is read with pandas; one table per sheet
      - .csv: one table per file, named after the file stem
      - header names are stripped; empty cells become ""
      - every row gets `id` = its position within the table (a column named
        `id` in the sheet takes precedence)
      - sheets that do not normalize to clients/workers/tasks are reported in
        `ignored_sheets` and left out of `tables`

    Fatal errors (raise DataError):
      - missing file, unsupported extension
      - unreadable or corrupt file
      - CSV without header row
    """

    def load(self, path: Path | str) -> LoadResult:
        path = Path(path)
        self._check_path(path)

        suffix = path.suffix.lower()
        if suffix in EXCEL_SUFFIXES:
            sheets = self._read_excel(path)
        else:
            sheets = {path.stem: self._read_csv(path)}

        result = self._sheets_to_result(path, sheets)
        self._report_summary(result)
        return result

    def load_many(self, paths: Iterable[Path | str]) -> LoadResult:
        """
        @brief
        Load several files into one result.

        @details
        Later files replace tables of the same name loaded from earlier ones,
        mirroring repeated uploads.
        """
        paths = list(paths)
        merged = LoadResult(source=", ".join(str(p) for p in paths))
        for p in paths:
            part = self.load(p)
            merged.tables.update(part.tables)
            merged.ignored_sheets.extend(part.ignored_sheets)
        merged.total_rows = sum(len(rows) for rows in merged.tables.values())
        return merged

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _check_path(self, path: Path) -> None:
        if not path.exists():
            raise DataError(
                message=f"Input file not found: {path}",
                source="WorkbookLoader._check_path",
                suggested_action="Verify the input path.",
            )
        if path.suffix.lower() not in EXCEL_SUFFIXES | CSV_SUFFIXES:
            raise DataError(
                message=f"Unsupported input file type: {path.suffix or '<none>'}",
                source="WorkbookLoader._check_path",
                suggested_action="Upload an .xlsx, .xls or .csv file.",
            )

    def _read_excel(self, path: Path) -> dict[str, list[dict[str, Any]]]:
        try:
            frames: dict[str, pd.DataFrame] = pd.read_excel(path, sheet_name=None, dtype=object)
        except (OSError, ValueError, ImportError, zipfile.BadZipFile) as e:
            raise DataError(
                message=f"Unable to read workbook: {e}",
                source="WorkbookLoader._read_excel",
                suggested_action="Check that the file is a valid Excel workbook.",
            ) from e

        sheets: dict[str, list[dict[str, Any]]] = {}
        for sheet_name, df in frames.items():
            df = df.rename(columns=lambda c: str(c).strip())
            df = df.astype(object).where(pd.notna(df), "")
            sheets[str(sheet_name)] = df.to_dict(orient="records")
        return sheets

    def _read_csv(self, path: Path) -> list[dict[str, Any]]:
        try:
            with path.open("r", encoding="utf-8-sig", newline="") as f:
                reader = csv.DictReader(f, restval="")
                if reader.fieldnames is None:
                    raise DataError(
                        message="CSV has no header row.",
                        source="WorkbookLoader._read_csv",
                        suggested_action="Ensure the first line contains column names.",
                    )
                return [
                    {(k or "").strip(): v for k, v in row.items() if k is not None}
                    for row in reader
                ]
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise DataError(
                message=f"Unable to read CSV: {e}",
                source="WorkbookLoader._read_csv",
                suggested_action="Save the file as UTF-8 CSV.",
            ) from e

    def _sheets_to_result(
        self, path: Path, sheets: dict[str, list[dict[str, Any]]]
    ) -> LoadResult:
        result = LoadResult(source=str(path))
        for sheet_name, rows in sheets.items():
            key = normalize_sheet_name(sheet_name)
            if key not in TABLES:
                result.ignored_sheets.append(sheet_name)
                continue
            result.tables[key] = [{"id": i, **row} for i, row in enumerate(rows)]
        result.total_rows = sum(len(rows) for rows in result.tables.values())
        return result

    def _report_summary(self, result: LoadResult) -> None:
        counts = ", ".join(f"{k}={len(v)}" for k, v in result.tables.items())
        logger.info("WorkbookLoader: %s [%s]", result.source, counts or "no tables")
        if result.ignored_sheets:
            logger.warning(
                "WorkbookLoader: ignored sheet(s) in %s: %s",
                result.source,
                ", ".join(result.ignored_sheets),
            )


__all__ = ["WorkbookLoader", "normalize_sheet_name"]
