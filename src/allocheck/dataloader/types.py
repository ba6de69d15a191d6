from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class LoadResult:
    """
    Structured result of reading one workbook or CSV file.

    Fields:
        source: Path of the file that was read (as string).
        tables: Normalized table name -> rows. Each row maps header -> cell value,
                with empty cells as "" and an `id` key holding the row position.
        ignored_sheets: Sheets whose normalized name is not clients/workers/tasks.
        total_rows: Number of data rows across all recognized tables.
    """

    source: str
    tables: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    ignored_sheets: list[str] = field(default_factory=list)
    total_rows: int = 0
