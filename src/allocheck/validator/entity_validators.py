# src/allocheck/validator/entity_validators.py
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from allocheck.errors import DataError
from allocheck.schemas.models import (
    RECORD_MODELS,
    Client,
    ErrorKind,
    Task,
    ValidationError,
    Worker,
    _RecordModel,
)
from allocheck.validator.parsing import (
    NumberParse,
    StructuredParse,
    StructuredStatus,
    format_number,
    identity_key,
    is_blank,
    parse_number,
    parse_structured,
)

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]
RowKey = Any


def row_key(raw_id: Any, idx: int) -> RowKey:
    """Natural identifier when truthy, else the positional index."""
    if not raw_id:
        return idx
    if isinstance(raw_id, (str, int, float)):
        return raw_id
    return str(raw_id)


# ----------------------------
# VALIDATOR CLASSES (instance core)
# ----------------------------
class EntityValidator:
    """
    @brief
    Single-table rule set shared by clients, workers and tasks.

    @details
    Runs, for every row and in this order:
      - identity check (required / duplicate natural identifier),
      - domain check of the table's numeric field,
      - structural check of the table's optional structured-text field,
      - table-specific extra checks (see subclasses).
    No check short-circuits another. All findings on a row share one row key:
    the natural identifier when it is truthy, else the positional index.

    The validator holds no state between calls; `validate()` may be called any
    number of times on the same rows with identical output.
    """

    record: type[_RecordModel]
    require_array: bool = False
    domain_message: str = ""

    # ---------- Public API ----------
    def validate(self, rows: Sequence[Row]) -> list[ValidationError]:
        """
        @brief
        Validate all rows of one table.

        @params
            rows : Sequence[Row]
                Raw row mappings in upload order.

        @returns
            Findings in scan order, then field-check order within a row.
        """
        errors: list[ValidationError] = []
        seen_ids: set[str] = set()

        for idx, row in enumerate(rows):
            # (1) Identity
            key = self._check_identity(row, idx, seen_ids, errors)

            # (2) Numeric domain
            number = self._check_domain(row, key, errors)

            # (3) Structured-text field
            structured = self._check_structured(row, key, errors)

            # (4) Table-specific checks depending on parsed values
            self._check_row_extras(row, key, number, structured, errors)

        logger.debug(
            "%s validator: %d row(s), %d error(s)", self.record.table, len(rows), len(errors)
        )
        return errors

    # ---------- Checks ----------
    def _check_identity(
        self, row: Row, idx: int, seen_ids: set[str], errors: list[ValidationError]
    ) -> RowKey:
        id_field = self.record.id_field
        raw_id = row.get(id_field)
        key = row_key(raw_id, idx)

        if is_blank(raw_id) or not raw_id:
            self._add_error(
                errors, key, id_field, f"{id_field} is required.", ErrorKind.REQUIRED
            )
            return key

        # Identity comparison ignores surrounding whitespace and cell type (1 == 1.0 == "1")
        normalized = identity_key(raw_id)
        if normalized in seen_ids:
            self._add_error(
                errors, key, id_field, f"Duplicate {id_field}: {normalized}.", ErrorKind.DUPLICATE
            )
        else:
            seen_ids.add(normalized)
        return key

    def _check_domain(self, row: Row, key: RowKey, errors: list[ValidationError]) -> NumberParse:
        field = self.record.numeric_field
        parsed = parse_number(row.get(field))
        if not parsed.ok or not self._in_domain(parsed.value):
            self._add_error(errors, key, field, self.domain_message, ErrorKind.DOMAIN)
        return parsed

    def _check_structured(
        self, row: Row, key: RowKey, errors: list[ValidationError]
    ) -> StructuredParse:
        field = self.record.structured_field
        parsed = parse_structured(row.get(field), require_array=self.require_array)

        if parsed.status is StructuredStatus.UNPARSEABLE:
            expected = "a valid JSON array" if self.require_array else "valid JSON"
            self._add_error(
                errors, key, field, f"{field} must be {expected}.", ErrorKind.FORMAT
            )
        elif parsed.status is StructuredStatus.WRONG_SHAPE:
            got = "object" if isinstance(parsed.value, dict) else type(parsed.value).__name__
            self._add_error(
                errors,
                key,
                field,
                f"{field} must be a JSON array (got {got}).",
                ErrorKind.FORMAT,
            )
        return parsed

    def _check_row_extras(
        self,
        row: Row,
        key: RowKey,
        number: NumberParse,
        structured: StructuredParse,
        errors: list[ValidationError],
    ) -> None:
        """Hook for intra-row cross-field checks; nothing by default."""

    def _in_domain(self, value: float | None) -> bool:
        raise NotImplementedError

    # ---------- Utilities ----------
    def _add_error(
        self,
        errors: list[ValidationError],
        key: RowKey,
        field: str,
        message: str,
        kind: ErrorKind,
    ) -> None:
        errors.append(
            ValidationError(table=self.record.table, row=key, field=field, message=message, kind=kind)
        )


class ClientValidator(EntityValidator):
    """PriorityLevel in [1, 5]; AttributesJSON any well-formed JSON."""

    record = Client
    require_array = False
    domain_message = "PriorityLevel must be between 1 and 5."

    PRIORITY_MIN = 1
    PRIORITY_MAX = 5

    def _in_domain(self, value: float | None) -> bool:
        return value is not None and self.PRIORITY_MIN <= value <= self.PRIORITY_MAX


class WorkerValidator(EntityValidator):
    """MaxLoadPerPhase > 0; AvailableSlots a JSON array; load must fit the slots."""

    record = Worker
    require_array = True
    domain_message = "MaxLoadPerPhase must be a number > 0."

    def _in_domain(self, value: float | None) -> bool:
        return value is not None and value > 0

    def _check_row_extras(
        self,
        row: Row,
        key: RowKey,
        number: NumberParse,
        structured: StructuredParse,
        errors: list[ValidationError],
    ) -> None:
        # Overload needs both a parsed load and a parsed slot array
        if not (number.ok and structured.ok):
            return

        slots = len(structured.value)
        if number.value > slots:
            self._add_error(
                errors,
                key,
                Worker.numeric_field,
                (
                    f"MaxLoadPerPhase ({format_number(number.value)}) exceeds the number of "
                    f"available slots ({slots})."
                ),
                ErrorKind.OVERLOAD,
            )


class TaskValidator(EntityValidator):
    """Duration > 0; PreferredPhases a JSON array."""

    record = Task
    require_array = True
    domain_message = "Duration must be a number > 0."

    def _in_domain(self, value: float | None) -> bool:
        return value is not None and value > 0


_VALIDATORS: dict[str, EntityValidator] = {
    "clients": ClientValidator(),
    "workers": WorkerValidator(),
    "tasks": TaskValidator(),
}


# ----------------------------
# THIN FACADES
# ----------------------------
def validate_clients(rows: Sequence[Row]) -> list[ValidationError]:
    """Validate the clients table."""
    return _VALIDATORS["clients"].validate(rows)


def validate_workers(rows: Sequence[Row]) -> list[ValidationError]:
    """Validate the workers table."""
    return _VALIDATORS["workers"].validate(rows)


def validate_tasks(rows: Sequence[Row]) -> list[ValidationError]:
    """Validate the tasks table."""
    return _VALIDATORS["tasks"].validate(rows)


def validate_table(table: str, rows: Sequence[Row]) -> list[ValidationError]:
    """
    @brief
    Dispatch to the validator registered for `table`.

    @raises
        DataError
            If `table` is not one of clients / workers / tasks.
    """
    validator = _VALIDATORS.get(table)
    if validator is None:
        raise DataError(
            message=f"Unknown table: {table!r}",
            source="validator.validate_table",
            suggested_action=f"Use one of: {', '.join(RECORD_MODELS)}",
        )
    return validator.validate(rows)


__all__ = [
    "row_key",
    "EntityValidator",
    "ClientValidator",
    "WorkerValidator",
    "TaskValidator",
    "validate_clients",
    "validate_workers",
    "validate_tasks",
    "validate_table",
]
