# tests/validator/test_cross_checks.py
from __future__ import annotations

from typing import Any

from allocheck.schemas.models import ErrorKind
from allocheck.validator import (
    check_phase_saturation,
    check_skill_coverage,
    compute_phase_balance,
)
from allocheck.validator.cross_checks import AGGREGATE_ROW


def task(tid: str, duration: Any = 1, phases: Any = "[1]", skills: Any = "") -> dict[str, Any]:
    return {"TaskID": tid, "Duration": duration, "PreferredPhases": phases, "RequiredSkills": skills}


def worker(wid: str, slots: Any = "[1]", skills: Any = "") -> dict[str, Any]:
    return {"WorkerID": wid, "AvailableSlots": slots, "Skills": skills, "MaxLoadPerPhase": 1}


# -----------------------------
# PHASE SATURATION
# -----------------------------
def test_saturation_reported_when_demand_exceeds_supply():
    """
    @brief
    Demand 5 against one worker in phase 1 is one aggregate finding.

    @details
    The finding is keyed by row -1 on the tasks table and quotes both figures.
    """
    # --- Arrange ---
    tasks = [task("T1", 5, "[1]")]
    workers = [worker("W1", "[1]")]

    # --- Act ---
    errors = check_phase_saturation(tasks, workers)

    # --- Assert ---
    assert len(errors) == 1
    err = errors[0]
    assert err.kind == ErrorKind.SATURATION
    assert err.table == "tasks"
    assert err.row == AGGREGATE_ROW == -1
    assert err.field == "PreferredPhases"
    assert err.message == "Phase 1 is oversubscribed: demand 5 exceeds supply 1."


def test_saturation_clears_with_enough_workers():
    # --- Arrange ---
    tasks = [task("T1", 5, "[1]")]
    workers = [worker(f"W{i}", "[1]") for i in range(5)]

    # --- Act ---
    errors = check_phase_saturation(tasks, workers)

    # --- Assert ---
    assert errors == []


def test_phase_with_demand_and_no_supply_is_oversubscribed():
    # --- Act ---
    errors = check_phase_saturation([task("T1", 1, "[3]")], [worker("W1", "[1]")])

    # --- Assert ---
    assert [e.message for e in errors] == ["Phase 3 is oversubscribed: demand 1 exceeds supply 0."]


def test_numeric_and_text_phase_labels_are_the_same_phase():
    """
    @brief
    A task preferring phase 1 and a worker available in phase "1" meet.
    """
    # --- Act ---
    balance = compute_phase_balance([task("T1", 1, "[1]")], [worker("W1", '["1"]')])

    # --- Assert ---
    assert balance.demand == {"1": 1.0}
    assert balance.supply == {"1": 1}
    assert balance.oversubscribed() == []


def test_malformed_rows_contribute_nothing():
    """
    @brief
    Tasks with bad phases or durations and workers with bad slots are skipped.
    """
    # --- Arrange ---
    tasks = [
        task("T1", 2, "[1, 2]"),
        task("T2", 3, "{1}"),
        task("T3", "abc", "[1]"),
        task("T4", 0, "[1]"),
        task("T5", 4, '{"p": 1}'),
    ]
    workers = [worker("W1", "[1]"), worker("W2", "nope"), worker("W3", "[2, 2]")]

    # --- Act ---
    balance = compute_phase_balance(tasks, workers)

    # --- Assert ---
    assert balance.demand == {"1": 2.0, "2": 2.0}
    assert balance.supply == {"1": 1, "2": 1}
    assert balance.oversubscribed() == ["1", "2"]
    assert balance.phases() == ["1", "2"]


def test_saturation_sums_demand_across_tasks():
    # --- Arrange ---
    tasks = [task("T1", 1, "[1]"), task("T2", 1.5, "[1]")]
    workers = [worker("W1", "[1]"), worker("W2", "[1]")]

    # --- Act ---
    errors = check_phase_saturation(tasks, workers)

    # --- Assert ---
    assert [e.message for e in errors] == ["Phase 1 is oversubscribed: demand 2.5 exceeds supply 2."]


# -----------------------------
# SKILL COVERAGE
# -----------------------------
def test_missing_skill_reported_and_cleared_by_new_worker():
    """
    @brief
    Task needing "python, ml" with only python available misses ml; adding
    a worker with ml clears the finding.
    """
    # --- Arrange ---
    tasks = [task("T1", skills="python, ml")]
    workers = [worker("W1", skills="python")]

    # --- Act ---
    before = check_skill_coverage(tasks, workers)
    after = check_skill_coverage(tasks, workers + [worker("W2", skills="ML")])

    # --- Assert ---
    assert len(before) == 1
    err = before[0]
    assert err.kind == ErrorKind.COVERAGE
    assert err.row == "T1"
    assert err.field == "RequiredSkills"
    assert err.message == "Required skill 'ml' is not covered by any worker."
    assert after == []


def test_coverage_is_case_and_whitespace_insensitive():
    # --- Act ---
    errors = check_skill_coverage([task("T1", skills=" SQL ,Python")], [worker("W1", skills="python,sql")])

    # --- Assert ---
    assert errors == []


def test_each_task_reports_its_own_missing_skill():
    # --- Act ---
    errors = check_skill_coverage(
        [task("T1", skills="go"), task("T2", skills="go, go")], [worker("W1", skills="python")]
    )

    # --- Assert ---
    assert [(e.row, e.message) for e in errors] == [
        ("T1", "Required skill 'go' is not covered by any worker."),
        ("T2", "Required skill 'go' is not covered by any worker."),
    ]


def test_tasks_without_required_skills_are_always_covered():
    # --- Act ---
    errors = check_skill_coverage([task("T1", skills="")], [])

    # --- Assert ---
    assert errors == []
