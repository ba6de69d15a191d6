# tests/dataloader/test_workbook_loader.py
from __future__ import annotations

import csv
import logging
from pathlib import Path

import pandas as pd
import pytest

from allocheck.dataloader import WorkbookLoader, normalize_sheet_name
from allocheck.errors import DataError


def _write_csv(path: Path, header: list[str], rows: list[list[object]]) -> Path:
    """
    @brief
    Writes a small UTF-8 CSV file.
    """
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return path


def _write_workbook(path: Path, sheets: dict[str, list[dict]]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, index=False)
    return path


@pytest.mark.parametrize(
    "name, key",
    [
        ("Clients", "clients"),
        ("client data", "clients"),
        (" Workers ", "workers"),
        ("Task List", "tasks"),
        ("TASKS", "tasks"),
        ("Notes", "notes"),
    ],
)
def test_normalize_sheet_name(name: str, key: str):
    assert normalize_sheet_name(name) == key


def test_load_csv_names_table_after_stem(tmp_path: Path):
    """
    @brief
    A CSV file becomes one table named by its file stem, with positional ids.

    @details
    Header whitespace is stripped; short rows get "" for missing cells.
    """
    # --- Arrange ---
    path = _write_csv(
        tmp_path / "Workers.csv",
        [" WorkerID ", "Skills", "AvailableSlots", "MaxLoadPerPhase"],
        [["W1", "python", "[1,2]", "2"], ["W2"]],
    )

    # --- Act ---
    result = WorkbookLoader().load(path)

    # --- Assert ---
    assert list(result.tables) == ["workers"]
    rows = result.tables["workers"]
    assert rows[0] == {
        "id": 0,
        "WorkerID": "W1",
        "Skills": "python",
        "AvailableSlots": "[1,2]",
        "MaxLoadPerPhase": "2",
    }
    assert rows[1]["id"] == 1
    assert rows[1]["Skills"] == ""
    assert result.total_rows == 2


def test_load_workbook_reads_all_sheets(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    """
    @brief
    Every recognized sheet becomes a table; unknown sheets are skipped with a warning.
    """
    # --- Arrange ---
    path = _write_workbook(
        tmp_path / "data.xlsx",
        {
            "Client Data": [{"ClientID": "C1", "PriorityLevel": 2, "AttributesJSON": None}],
            "Tasks": [
                {"TaskID": "T1", "Duration": 1, "PreferredPhases": "[1]"},
                {"TaskID": "T2", "Duration": None, "PreferredPhases": "[2]"},
            ],
            "Notes": [{"Text": "ignore me"}],
        },
    )

    # --- Act ---
    with caplog.at_level(logging.WARNING):
        result = WorkbookLoader().load(path)

    # --- Assert ---
    assert set(result.tables) == {"clients", "tasks"}
    assert result.ignored_sheets == ["Notes"]
    assert "Notes" in caplog.text

    client = result.tables["clients"][0]
    assert client["ClientID"] == "C1"
    assert client["PriorityLevel"] == 2
    assert client["AttributesJSON"] == ""
    assert result.tables["tasks"][1]["Duration"] == ""
    assert [r["id"] for r in result.tables["tasks"]] == [0, 1]


def test_load_many_later_files_replace_tables(tmp_path: Path):
    # --- Arrange ---
    first = _write_csv(tmp_path / "clients.csv", ["ClientID", "PriorityLevel"], [["C1", "1"]])
    second_dir = tmp_path / "v2"
    second_dir.mkdir()
    second = _write_csv(second_dir / "clients.csv", ["ClientID", "PriorityLevel"], [["C9", "5"], ["C8", "4"]])
    tasks = _write_csv(tmp_path / "tasks.csv", ["TaskID", "Duration"], [["T1", "1"]])

    # --- Act ---
    result = WorkbookLoader().load_many([first, tasks, second])

    # --- Assert ---
    assert [r["ClientID"] for r in result.tables["clients"]] == ["C9", "C8"]
    assert result.total_rows == 3


def test_missing_file_raises_dataerror(tmp_path: Path):
    # --- Act / Assert ---
    with pytest.raises(DataError) as exc:
        WorkbookLoader().load(tmp_path / "absent.xlsx")
    assert "not found" in str(exc.value)


def test_unsupported_extension_raises_dataerror(tmp_path: Path):
    # --- Arrange ---
    path = tmp_path / "clients.json"
    path.write_text("[]", encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(DataError):
        WorkbookLoader().load(path)


def test_corrupt_workbook_raises_dataerror(tmp_path: Path):
    # --- Arrange ---
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"this is not a zip archive")

    # --- Act / Assert ---
    with pytest.raises(DataError):
        WorkbookLoader().load(path)


def test_csv_without_header_raises_dataerror(tmp_path: Path):
    # --- Arrange ---
    path = tmp_path / "tasks.csv"
    path.write_text("", encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(DataError):
        WorkbookLoader().load(path)
