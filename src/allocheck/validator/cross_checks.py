# src/allocheck/validator/cross_checks.py
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from allocheck.schemas.models import ErrorKind, Task, ValidationError, Worker
from allocheck.validator.parsing import (
    format_number,
    parse_number,
    parse_structured,
    phase_key,
    split_skills,
)

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

AGGREGATE_ROW = -1


@dataclass(frozen=True)
class PhaseBalance:
    """
    @brief
    Aggregate per-phase demand and supply.

    @details
    `demand` maps phase label -> summed task Duration, in first-seen order of
    the task scan. `supply` maps phase label -> number of available workers,
    in first-seen order of the worker scan.
    """

    demand: dict[str, float] = field(default_factory=dict)
    supply: dict[str, int] = field(default_factory=dict)

    def phases(self) -> list[str]:
        """All phase labels, demand phases first."""
        out = list(self.demand)
        out.extend(p for p in self.supply if p not in self.demand)
        return out

    def oversubscribed(self) -> list[str]:
        """Phases whose demand exceeds supply (missing supply counts as 0)."""
        return [p for p, d in self.demand.items() if d > self.supply.get(p, 0)]


def _unique_phases(labels: list[Any]) -> list[str]:
    out: list[str] = []
    for label in labels:
        key = phase_key(label)
        if key not in out:
            out.append(key)
    return out


def compute_phase_balance(tasks: Sequence[Row], workers: Sequence[Row]) -> PhaseBalance:
    """
    @brief
    Build per-phase demand and supply mappings.

    @details
    Demand: every task whose PreferredPhases parses to an array adds its
    Duration to each listed phase. Tasks with malformed phases or a Duration
    that is not a positive number contribute nothing.
    Supply: every worker whose AvailableSlots parses to an array adds 1 to each
    listed phase. Malformed rows contribute nothing.
    A phase listed twice in one row is counted once for that row.
    """
    demand: dict[str, float] = {}
    supply: dict[str, int] = {}

    # (1) Task demand
    for row in tasks:
        phases = parse_structured(row.get(Task.structured_field), require_array=True)
        duration = parse_number(row.get(Task.numeric_field))
        if not phases.ok or not duration.ok or duration.value <= 0:
            continue
        for phase in _unique_phases(phases.value):
            demand[phase] = demand.get(phase, 0.0) + duration.value

    # (2) Worker supply
    for row in workers:
        slots = parse_structured(row.get(Worker.structured_field), require_array=True)
        if not slots.ok:
            continue
        for phase in _unique_phases(slots.value):
            supply[phase] = supply.get(phase, 0) + 1

    return PhaseBalance(demand=demand, supply=supply)


def check_phase_saturation(
    tasks: Sequence[Row], workers: Sequence[Row]
) -> list[ValidationError]:
    """
    @brief
    Report phases whose aggregate task demand exceeds worker supply.

    @details
    One aggregate finding per oversubscribed phase, keyed by row -1 on the
    tasks table. This certifies aggregate capacity only; it does not prove
    that any concrete assignment exists.
    """
    balance = compute_phase_balance(tasks, workers)
    errors: list[ValidationError] = []

    for phase, demand in balance.demand.items():
        supply = balance.supply.get(phase, 0)
        if demand > supply:
            errors.append(
                ValidationError(
                    table="tasks",
                    row=AGGREGATE_ROW,
                    field=Task.structured_field,
                    message=(
                        f"Phase {phase} is oversubscribed: demand {format_number(demand)} "
                        f"exceeds supply {supply}."
                    ),
                    kind=ErrorKind.SATURATION,
                )
            )

    if errors:
        logger.debug("Phase saturation: %d oversubscribed phase(s)", len(errors))
    return errors


def collect_worker_skills(workers: Sequence[Row]) -> set[str]:
    """Union of normalized skills across all workers."""
    skills: set[str] = set()
    for row in workers:
        skills.update(split_skills(row.get(Worker.skills_field)))
    return skills


def check_skill_coverage(tasks: Sequence[Row], workers: Sequence[Row]) -> list[ValidationError]:
    """
    @brief
    Report required skills that no worker has.

    @details
    One finding per (task, missing skill), keyed by the task's own TaskID.
    Two tasks lacking the same skill produce two findings.
    """
    available = collect_worker_skills(workers)
    errors: list[ValidationError] = []

    for row in tasks:
        task_id = row.get(Task.id_field)
        key = task_id if isinstance(task_id, (str, int, float)) else str(task_id or "")
        for skill in split_skills(row.get(Task.skills_field)):
            if skill not in available:
                errors.append(
                    ValidationError(
                        table="tasks",
                        row=key,
                        field=Task.skills_field,
                        message=f"Required skill '{skill}' is not covered by any worker.",
                        kind=ErrorKind.COVERAGE,
                    )
                )
    return errors


__all__ = [
    "AGGREGATE_ROW",
    "PhaseBalance",
    "compute_phase_balance",
    "check_phase_saturation",
    "collect_worker_skills",
    "check_skill_coverage",
]
