# src/allocheck/session/orchestrator.py
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from allocheck.errors import DataError
from allocheck.schemas.models import RECORD_MODELS, TABLES, ValidationError
from allocheck.validator import (
    check_phase_saturation,
    check_skill_coverage,
    validate_table,
)
from allocheck.validator.entity_validators import row_key

logger = logging.getLogger(__name__)

CROSS_CHECKS = ("phase_saturation", "skill_coverage")
CROSS_INPUTS = frozenset({"tasks", "workers"})


class ValidationSession:
    """
    @brief
    Holds the current clients/workers/tasks tables and their findings.

    @details
    Every mutation (load or inline edit) re-runs the validators affected by it
    and replaces, never merges, their previous results:
      - the edited table's own validator always re-runs;
      - cross-entity checks re-run whenever tasks or workers change.
    Rows are copied on the way in; caller-owned mappings are never mutated.
    Assumes a single writer: each edit-and-revalidate cycle completes before
    the next one starts.
    """

    def __init__(
        self,
        clients: Iterable[Mapping[str, Any]] = (),
        workers: Iterable[Mapping[str, Any]] = (),
        tasks: Iterable[Mapping[str, Any]] = (),
    ) -> None:
        self._tables: dict[str, list[dict[str, Any]]] = {t: [] for t in TABLES}
        self._table_errors: dict[str, list[ValidationError]] = {t: [] for t in TABLES}
        self._cross_errors: dict[str, list[ValidationError]] = {c: [] for c in CROSS_CHECKS}
        self.load({"clients": clients, "workers": workers, "tasks": tasks})

    # ---------- Mutations ----------
    def load(self, tables: Mapping[str, Iterable[Mapping[str, Any]]]) -> None:
        """
        @brief
        Replace the given tables and revalidate them.

        @details
        Keys other than clients / workers / tasks are ignored with a warning,
        matching how unrelated workbook sheets are treated on upload.
        """
        changed: set[str] = set()
        for name, rows in tables.items():
            if name not in RECORD_MODELS:
                logger.warning("Session: ignoring unknown table %r", name)
                continue
            self._tables[name] = [self._copy_row(r, i) for i, r in enumerate(rows)]
            changed.add(name)
        self._revalidate(changed)

    def update_row(self, table: str, row_id: Any, field: str, value: Any) -> dict[str, Any]:
        """
        @brief
        Replace one cell by swapping in an edited copy of its row.

        @details
        The row is located by its `id` (positional index from ingestion). The
        replacement keeps the same `id` and position.

        @returns
            The new row mapping.

        @raises
            DataError
                If the table is unknown or no row carries `row_id`.
        """
        rows = self._rows(table)
        pos = self._position_of(rows, row_id)
        if pos is None:
            raise DataError(
                message=f"No row with id {row_id!r} in table {table!r}",
                source="ValidationSession.update_row",
                suggested_action="Pass the row's positional id as produced by the loader.",
            )

        updated = dict(rows[pos])
        updated[field] = value
        rows[pos] = updated

        logger.debug("Session: %s[%s].%s updated", table, row_id, field)
        self._revalidate({table})
        return dict(updated)

    def clear(self) -> None:
        """Drop all tables and findings."""
        for name in TABLES:
            self._tables[name] = []
            self._table_errors[name] = []
        for check in CROSS_CHECKS:
            self._cross_errors[check] = []

    # ---------- Read API ----------
    def rows(self, table: str) -> list[dict[str, Any]]:
        """Copies of the current rows of `table`."""
        return [dict(r) for r in self._rows(table)]

    @property
    def tables(self) -> dict[str, list[dict[str, Any]]]:
        return {name: self.rows(name) for name in TABLES}

    @property
    def data_loaded(self) -> bool:
        return any(self._tables[name] for name in TABLES)

    @property
    def errors(self) -> list[ValidationError]:
        """All findings: per-table (clients, workers, tasks), then cross-entity."""
        out: list[ValidationError] = []
        for name in TABLES:
            out.extend(self._table_errors[name])
        for check in CROSS_CHECKS:
            out.extend(self._cross_errors[check])
        return out

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def errors_for(self, table: str) -> list[ValidationError]:
        """All findings whose table is `table`, including aggregate ones."""
        self._rows(table)
        return [e for e in self.errors if e.table == table]

    def error_cells(self) -> set[tuple[str, Any, str]]:
        """(table, row, field) keys used for cell highlighting."""
        return {e.cell() for e in self.errors}

    def has_error(self, table: str, row: Any, field: str) -> bool:
        return (table, row, field) in self.error_cells()

    def rows_with_errors(self, table: str) -> list[dict[str, Any]]:
        """
        @brief
        Rows of `table` referenced by at least one finding.

        @details
        A row matches when its row key equals a finding's row key. The key is
        built the way the validators build it: the natural identifier when
        truthy, else the row's position in the table (not its `id` column).
        """
        keys = {e.row for e in self.errors_for(table)}
        id_field = RECORD_MODELS[table].id_field
        out: list[dict[str, Any]] = []
        for pos, row in enumerate(self._rows(table)):
            if row_key(row.get(id_field), pos) in keys:
                out.append(dict(row))
        return out

    def summary(self) -> dict[str, Any]:
        """Row and error counts per table."""
        return {
            "rows": {name: len(self._tables[name]) for name in TABLES},
            "errors": {name: len(self.errors_for(name)) for name in TABLES},
            "valid": self.is_valid,
        }

    # ---------- Internal ----------
    def _revalidate(self, changed: set[str]) -> None:
        # (1) Per-table validators for every changed table
        for name in TABLES:
            if name in changed:
                self._table_errors[name] = validate_table(name, self._tables[name])

        # (2) Cross-entity checks when either contributing table changed
        if changed & CROSS_INPUTS:
            tasks, workers = self._tables["tasks"], self._tables["workers"]
            self._cross_errors["phase_saturation"] = check_phase_saturation(tasks, workers)
            self._cross_errors["skill_coverage"] = check_skill_coverage(tasks, workers)

        if changed:
            logger.info(
                "Session: revalidated %s: %d error(s) total",
                ", ".join(sorted(changed)),
                len(self.errors),
            )

    def _rows(self, table: str) -> list[dict[str, Any]]:
        if table not in self._tables:
            raise DataError(
                message=f"Unknown table: {table!r}",
                source="ValidationSession",
                suggested_action=f"Use one of: {', '.join(TABLES)}",
            )
        return self._tables[table]

    @staticmethod
    def _copy_row(row: Mapping[str, Any], position: int) -> dict[str, Any]:
        copied = dict(row)
        copied.setdefault("id", position)
        return copied

    @staticmethod
    def _position_of(rows: Sequence[Mapping[str, Any]], row_id: Any) -> int | None:
        for pos, row in enumerate(rows):
            if row.get("id") == row_id:
                return pos
        return None


__all__ = ["ValidationSession"]
