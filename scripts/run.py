# scripts/run.py
from __future__ import annotations

import argparse
import json
import logging
import sys
import time
import traceback
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from allocheck.dataloader import ConfigLoader, WorkbookLoader
from allocheck.errors import AllocheckError, ConfigError, DataError
from allocheck.export import build_report, export_tables, save_report, write_rules_json
from allocheck.metrics import collect_metrics, write_metrics
from allocheck.rules import RuleSet
from allocheck.session import ValidationSession
from allocheck.validator import compute_phase_balance
from allocheck.visualizer import plot_phase_balance


def _setup_logging() -> None:
    """Console logging for the whole pipeline: INFO level, `[LEVEL] message`."""
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for the allocheck pipeline.

    @details
    --input overrides the config's input_paths, --output overrides output_dir.
    --rules points to an optional JSON array of business rules that is
    validated and re-exported as rules.json.
    """
    parser = argparse.ArgumentParser(
        prog="allocheck-run",
        description="Validate a clients/workers/tasks data set: load -> validate -> report -> metrics -> plot -> export",
    )

    # (1) Config path argument
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.yaml",
        help="Path to config YAML (default: config/config.yaml)",
    )

    # (2) Input workbook(s) / CSV files
    parser.add_argument(
        "--input",
        type=str,
        nargs="+",
        default=None,
        help="Workbook (.xlsx/.xls) or CSV files; overrides input_paths from the config",
    )

    # (3) Output directory
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for artifacts; overrides output_dir from the config",
    )

    # (4) Optional rules file
    parser.add_argument(
        "--rules",
        type=str,
        default=None,
        help="JSON array of rules (co-run / exclude / phase-limit) to validate and export",
    )

    return parser.parse_args(argv)


def _load_rules(path: Path) -> RuleSet:
    """
    @brief
    Reads a JSON array of rule objects into a RuleSet.

    @raises
        DataError
            If the file is missing, not JSON, not an array, or a rule is invalid.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise DataError(
            f"Cannot read rules file {path}: {e}",
            source="scripts.run",
            suggested_action="Provide a UTF-8 JSON array of rule objects.",
        ) from e

    if not isinstance(payload, list):
        raise DataError(
            "Rules file must contain a JSON array.",
            source="scripts.run",
            suggested_action='Wrap rules in [...], e.g. [{"type": "co-run", ...}].',
        )

    rules = RuleSet()
    for item in payload:
        rules.add(item)
    return rules


def run_pipeline(
    config_path: Path,
    input_paths: Sequence[Path] | None = None,
    output_dir: Path | None = None,
    rules_path: Path | None = None,
) -> dict[str, Any]:
    """
    @brief
    Executes the full validation pipeline.

    @details
    Performs sequential steps:
    (1) Load configuration and input workbooks.
    (2) Validate all tables in a ValidationSession.
    (3) Write report, metrics and phase balance chart per io_policy.
    (4) Export tables (only when the data set is clean) and rules.

    @returns
        Dictionary with the validity flag, finding count and artifact paths.

    @raises
        AllocheckError
            On configuration, data, export or rendering failures.
    """
    t0 = time.perf_counter()

    # (1) Configuration; CLI values win over the config file
    logging.info("Loading config: %s", config_path)
    cfg = ConfigLoader().load(config_path)

    inputs = [Path(p) for p in input_paths] if input_paths else [Path(p) for p in cfg.input_paths]
    if not inputs:
        raise ConfigError(
            "No input files given.",
            source="scripts.run",
            suggested_action="Set input_paths in the config or pass --input.",
        )
    out_dir = Path(output_dir) if output_dir is not None else Path(cfg.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    # (2) Load and validate
    logging.info("Loading inputs: %s", ", ".join(p.as_posix() for p in inputs))
    loaded = WorkbookLoader().load_many(inputs)
    session = ValidationSession()
    session.load(loaded.tables)

    valid = session.is_valid
    num_errors = len(session.errors)
    if valid:
        logging.info("Validation passed: no findings.")
    else:
        logging.warning("Validation found %d issue(s).", num_errors)

    artifacts: dict[str, Any] = {
        "validation_report": None,
        "metrics": None,
        "phase_balance_plot": None,
        "tables": {},
        "rules": None,
    }

    # (3) Report
    if cfg.io_policy.write_report:
        artifacts["validation_report"] = save_report(build_report(session), out_dir=out_dir)

    # (4) Metrics
    if cfg.io_policy.write_metrics:
        logging.info("Collecting metrics…")
        artifacts["metrics"] = write_metrics(collect_metrics(session), out_dir=out_dir)

    # (5) Phase balance chart; skipped when no phase is declared
    if cfg.io_policy.write_plot:
        balance = compute_phase_balance(session.rows("tasks"), session.rows("workers"))
        if balance.phases():
            logging.info("Rendering phase balance plot…")
            artifacts["phase_balance_plot"] = plot_phase_balance(
                balance, cfg, out_path=out_dir / "phase_balance.png"
            )
        else:
            logging.info("Skipping plot: no phases declared.")

    # (6) Table export, gated on a clean data set
    if not session.data_loaded:
        logging.warning("Skipping table export: no clients/workers/tasks tables found.")
    elif valid or not cfg.export.require_clean:
        artifacts["tables"] = export_tables(session, out_dir, cfg.export)
    else:
        logging.info("Skipping table export: fix the findings first.")

    # (7) Rules
    if rules_path is not None:
        rules = _load_rules(Path(rules_path))
        artifacts["rules"] = write_rules_json(rules, out_dir / "rules.json")

    dt = time.perf_counter() - t0
    logging.info("Pipeline finished in %.2f s", dt)

    return {
        "valid": valid,
        "num_errors": num_errors,
        "rows": session.summary()["rows"],
        "artifacts": artifacts,
    }


def main(argv: Sequence[str] | None = None) -> int:
    """
    @brief
    CLI entry point for the validation pipeline.

    @details
    Exit codes:
      0: data set is clean
      1: findings exist, or controlled failure (config/data/export)
      2: unexpected crash
    """
    _setup_logging()
    args = _parse_args(argv)

    try:
        result = run_pipeline(
            Path(args.config),
            input_paths=[Path(p) for p in args.input] if args.input else None,
            output_dir=Path(args.output) if args.output else None,
            rules_path=Path(args.rules) if args.rules else None,
        )
        arts = result["artifacts"]
        written = [Path(p).name for p in arts["tables"].values()]
        written += [
            Path(arts[k]).name
            for k in ("validation_report", "metrics", "phase_balance_plot", "rules")
            if arts.get(k)
        ]
        logging.info("Artifacts: %s", ", ".join(written) if written else "none")
        return 0 if result["valid"] else 1

    except AllocheckError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
