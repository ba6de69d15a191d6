# tests/session/test_filtering.py
from __future__ import annotations

import pytest

from allocheck.session import filter_rows
from allocheck.session.filtering import match_criterion

ROWS = [
    {"id": 0, "TaskID": "T1", "Duration": 1, "Category": "ETL", "RequiredSkills": "python, sql"},
    {"id": 1, "TaskID": "T2", "Duration": "3", "Category": "ML", "RequiredSkills": "ml"},
    {"id": 2, "TaskID": "T3", "Duration": 5, "Category": "etl", "RequiredSkills": "Python"},
]


def ids(rows) -> list[str]:
    return [r["TaskID"] for r in rows]


def test_string_comparison_operators():
    # --- Act / Assert ---
    assert ids(filter_rows(ROWS, {"Duration": ">2"})) == ["T2", "T3"]
    assert ids(filter_rows(ROWS, {"Duration": "<2"})) == ["T1"]


def test_mapping_operators():
    # --- Act / Assert ---
    assert ids(filter_rows(ROWS, {"Duration": {"$gt": 1}})) == ["T2", "T3"]
    assert ids(filter_rows(ROWS, {"Duration": {"$lt": 5}})) == ["T1", "T2"]
    assert ids(filter_rows(ROWS, {"Duration": {"$eq": 3}})) == ["T2"]


def test_membership_and_case_insensitive_equality():
    """
    @brief
    Comma lists match by member; plain strings match regardless of case.
    """
    # --- Act / Assert ---
    assert ids(filter_rows(ROWS, {"RequiredSkills": "python"})) == ["T1", "T3"]
    assert ids(filter_rows(ROWS, {"Category": "ETL"})) == ["T1", "T3"]


def test_criteria_are_combined_with_and():
    # --- Act ---
    result = filter_rows(ROWS, {"Category": "etl", "Duration": ">2"})

    # --- Assert ---
    assert ids(result) == ["T3"]


def test_filter_returns_copies():
    # --- Act ---
    result = filter_rows(ROWS, {})
    result[0]["TaskID"] = "changed"

    # --- Assert ---
    assert ROWS[0]["TaskID"] == "T1"
    assert len(result) == len(ROWS)


@pytest.mark.parametrize(
    "cell, expected, matches",
    [
        (["A", "b"], "a", True),
        (["A", "b"], "c", False),
        ("abc", ">1", False),
        (None, {"$gt": 0}, False),
        (4, 4, True),
        (4, {"$unknown": 4}, False),
    ],
)
def test_match_criterion_edge_cases(cell, expected, matches):
    assert match_criterion(cell, expected) is matches
