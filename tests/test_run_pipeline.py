import csv
import json
from pathlib import Path

import pytest
import yaml

from scripts.run import main, run_pipeline


# ----------------------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------------------
def _write_csv(path: Path, rows: list[dict]) -> Path:
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(rows[0]))
        writer.writeheader()
        writer.writerows(rows)
    return path


def _data_dir(tmp_path: Path, priority: int = 3) -> Path:
    """
    @brief
    Writes clients/workers/tasks CSVs forming a consistent data set.

    @details
    With `priority` outside [1, 5] the clients table carries one finding.
    """
    data = tmp_path / "input"
    data.mkdir()
    _write_csv(
        data / "clients.csv",
        [{"ClientID": "C1", "ClientName": "Acme", "PriorityLevel": priority, "AttributesJSON": "{}"}],
    )
    _write_csv(
        data / "workers.csv",
        [
            {"WorkerID": "W1", "Skills": "python,sql", "AvailableSlots": "[1,2]", "MaxLoadPerPhase": 2},
            {"WorkerID": "W2", "Skills": "ml", "AvailableSlots": "[1]", "MaxLoadPerPhase": 1},
        ],
    )
    _write_csv(
        data / "tasks.csv",
        [
            {"TaskID": "T1", "Duration": 2, "PreferredPhases": "[1]", "RequiredSkills": "python, ml"},
            {"TaskID": "T2", "Duration": 1, "PreferredPhases": "[2]", "RequiredSkills": "sql"},
        ],
    )
    return data


def _config(tmp_path: Path, data: Path, **overrides) -> Path:
    cfg = {
        "input_paths": [f"input/{name}.csv" for name in ("clients", "workers", "tasks")],
        "output_dir": str(tmp_path / "out"),
        "visual": {"width": 4.0, "height": 3.0, "dpi": 60},
    }
    cfg.update(overrides)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return path


# ----------------------------------------------------------------------------------
# run_pipeline
# ----------------------------------------------------------------------------------
def test_run_pipeline_clean_data_writes_all_artifacts(tmp_path: Path):
    """
    @brief
    A clean data set yields every artifact including exported tables.
    """
    # --- Arrange ---
    data = _data_dir(tmp_path)
    cfg_path = _config(tmp_path, data)

    # --- Act ---
    result = run_pipeline(cfg_path)

    # --- Assert ---
    assert result["valid"] is True
    assert result["num_errors"] == 0
    assert result["rows"] == {"clients": 1, "workers": 2, "tasks": 2}

    arts = result["artifacts"]
    assert Path(arts["validation_report"]).exists()
    assert Path(arts["metrics"]).exists()
    assert Path(arts["phase_balance_plot"]).exists()
    assert set(arts["tables"]) == {"clients", "workers", "tasks"}

    report = json.loads(Path(arts["validation_report"]).read_text(encoding="utf-8"))
    assert report["valid"] is True


def test_run_pipeline_with_findings_skips_export(tmp_path: Path):
    # --- Arrange ---
    data = _data_dir(tmp_path, priority=9)
    cfg_path = _config(tmp_path, data, io_policy={"write_plot": False})

    # --- Act ---
    result = run_pipeline(cfg_path)

    # --- Assert ---
    assert result["valid"] is False
    assert result["num_errors"] == 1
    arts = result["artifacts"]
    assert arts["tables"] == {}
    assert arts["phase_balance_plot"] is None
    metrics = json.loads(Path(arts["metrics"]).read_text(encoding="utf-8"))
    assert metrics["errors_by_kind"]["domain"] == 1


def test_run_pipeline_cli_overrides_and_rules(tmp_path: Path):
    """
    @brief
    --input / --output values replace the config's, and rules are re-exported.
    """
    # --- Arrange ---
    data = _data_dir(tmp_path)
    cfg_path = _config(tmp_path, data, input_paths=[])
    rules_path = tmp_path / "rules_in.json"
    rules_path.write_text(json.dumps([{"type": "co-run", "task1": "T1", "task2": "T2"}]), encoding="utf-8")
    out_dir = tmp_path / "custom"

    # --- Act ---
    result = run_pipeline(
        cfg_path,
        input_paths=sorted(data.glob("*.csv")),
        output_dir=out_dir,
        rules_path=rules_path,
    )

    # --- Assert ---
    assert result["valid"] is True
    assert Path(result["artifacts"]["rules"]) == out_dir / "rules.json"
    assert json.loads((out_dir / "rules.json").read_text(encoding="utf-8"))[0]["task2"] == "T2"


# ----------------------------------------------------------------------------------
# main() exit codes
# ----------------------------------------------------------------------------------
def test_main_exit_code_zero_when_clean(tmp_path: Path):
    # --- Arrange ---
    cfg_path = _config(tmp_path, _data_dir(tmp_path))

    # --- Act / Assert ---
    assert main(["--config", str(cfg_path)]) == 0


def test_main_exit_code_one_when_findings_exist(tmp_path: Path):
    # --- Arrange ---
    cfg_path = _config(tmp_path, _data_dir(tmp_path, priority=0))

    # --- Act / Assert ---
    assert main(["--config", str(cfg_path)]) == 1


@pytest.mark.parametrize("missing", ["config", "input"])
def test_main_exit_code_one_on_controlled_failure(tmp_path: Path, missing: str):
    # --- Arrange ---
    cfg_path = _config(tmp_path, _data_dir(tmp_path))
    argv = ["--config", str(cfg_path)]
    if missing == "config":
        argv = ["--config", str(tmp_path / "absent.yaml")]
    else:
        argv += ["--input", str(tmp_path / "absent.xlsx")]

    # --- Act / Assert ---
    assert main(argv) == 1
