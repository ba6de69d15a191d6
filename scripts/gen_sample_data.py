# scripts/gen_sample_data.py
from __future__ import annotations

import json
import random
import sys
from pathlib import Path

import pandas as pd

"""
Sample workbook generator (single run -> single .xlsx with three sheets).

Design:
- Parameters are hard-coded as constants below (no CLI args).
- Sheets: "Clients", "Workers", "Tasks" with the column headers the loader expects.
- Phases are the integers 1..PHASES; structured cells are JSON text.
- With INJECT_DEFECTS enabled a handful of rows are corrupted on purpose
  (blank id, duplicate id, out-of-range priority, malformed JSON, overload,
  unknown skill) so that every finding kind shows up in the report.

Edit the constants in the "CONFIG" section to produce different workbooks.
"""

# =========================
# CONFIG (edit these)
# =========================
CLIENTS: int = 12
WORKERS: int = 10
TASKS: int = 20
PHASES: int = 6
SKILLS: tuple[str, ...] = ("python", "sql", "ml", "etl", "frontend", "devops")
INJECT_DEFECTS: bool = True
OUTPUT: str = "data/input/sample.xlsx"

RANDOM_SEED: int = 42
# =========================


def _phases(k: int) -> str:
    return json.dumps(sorted(random.sample(range(1, PHASES + 1), k)))


def _skills(k: int) -> str:
    return ", ".join(random.sample(SKILLS, k))


def _clients(task_ids: list[str]) -> list[dict]:
    rows = []
    for i in range(1, CLIENTS + 1):
        rows.append(
            {
                "ClientID": f"C{i}",
                "ClientName": f"Client {i}",
                "PriorityLevel": random.randint(1, 5),
                "RequestedTaskIDs": ",".join(random.sample(task_ids, 3)),
                "GroupTag": random.choice(["GroupA", "GroupB", "GroupC"]),
                "AttributesJSON": json.dumps({"location": random.choice(["NY", "SF", "LDN"])}),
            }
        )
    return rows


def _workers() -> list[dict]:
    rows = []
    for i in range(1, WORKERS + 1):
        slots = random.randint(2, PHASES)
        rows.append(
            {
                "WorkerID": f"W{i}",
                "WorkerName": f"Worker {i}",
                "Skills": _skills(random.randint(1, 3)) if i > 1 else ", ".join(SKILLS),
                "AvailableSlots": _phases(slots),
                "MaxLoadPerPhase": random.randint(1, slots),
                "WorkerGroup": random.choice(["GroupA", "GroupB"]),
                "QualificationLevel": random.randint(1, 5),
            }
        )
    return rows


def _tasks() -> list[dict]:
    rows = []
    for i in range(1, TASKS + 1):
        rows.append(
            {
                "TaskID": f"T{i}",
                "TaskName": f"Task {i}",
                "Category": random.choice(["ETL", "Analytics", "ML", "Infra"]),
                "Duration": random.randint(1, 2),
                "RequiredSkills": _skills(random.randint(1, 2)),
                "PreferredPhases": _phases(random.randint(1, 2)),
                "MaxConcurrent": random.randint(1, 3),
            }
        )
    return rows


def _inject_defects(clients: list[dict], workers: list[dict], tasks: list[dict]) -> None:
    clients[1]["ClientID"] = ""
    clients[2]["ClientID"] = clients[0]["ClientID"]
    clients[3]["PriorityLevel"] = 7
    clients[4]["AttributesJSON"] = "{location: NY"
    workers[1]["AvailableSlots"] = '{"phase": 1}'
    workers[2]["MaxLoadPerPhase"] = PHASES + 1
    tasks[1]["Duration"] = 0
    tasks[2]["RequiredSkills"] = "quantum"
    tasks[3]["PreferredPhases"] = json.dumps([PHASES + 1])


def main() -> int:
    if min(CLIENTS, WORKERS, TASKS) < 5 or PHASES < 2:
        print("Invalid generator configuration: need >= 5 rows per sheet and >= 2 phases",
              file=sys.stderr)
        return 2
    random.seed(RANDOM_SEED)

    tasks = _tasks()
    clients = _clients([t["TaskID"] for t in tasks])
    workers = _workers()
    if INJECT_DEFECTS:
        _inject_defects(clients, workers, tasks)

    output = Path(OUTPUT)
    output.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        pd.DataFrame(clients).to_excel(writer, sheet_name="Clients", index=False)
        pd.DataFrame(workers).to_excel(writer, sheet_name="Workers", index=False)
        pd.DataFrame(tasks).to_excel(writer, sheet_name="Tasks", index=False)

    print(f"[GEN] clients={CLIENTS}, workers={WORKERS}, tasks={TASKS}, phases={PHASES}, "
          f"defects={'on' if INJECT_DEFECTS else 'off'}")
    print(f"[GEN] wrote: {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
