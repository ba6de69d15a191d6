# src/allocheck/visualizer/plot.py
"""
Phase balance chart.

Responsibilities:
- Turn a PhaseBalance into a long-form DataFrame (phase, measure, value).
- Enforce headless backend (Agg) and figure export parameters (DPI, size).
- Draw grouped demand/supply bars per phase and mark oversubscribed phases.
- Save PNG to the requested out_path and return that Path.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import matplotlib
import pandas as pd
import seaborn as sns

from allocheck.errors import DataError, VisualizationError
from allocheck.schemas.models import Config, VisualConfig
from allocheck.validator import PhaseBalance

matplotlib.use("Agg")

_PALETTE = {"demand": "#d1495b", "supply": "#00798c"}


def balance_frame(balance: PhaseBalance) -> pd.DataFrame:
    """
    @brief
    Long-form table of demand and supply per phase.

    @details
    One row per (phase, measure) with measure in {demand, supply}. Phases
    missing on one side get 0 for that measure. Phase order follows
    PhaseBalance.phases().
    """
    if not isinstance(balance, PhaseBalance):
        raise DataError(
            "plot expects a PhaseBalance",
            source="visualizer.plot.balance_frame",
            suggested_action="Build it with compute_phase_balance(tasks, workers).",
        )

    rows: list[dict[str, Any]] = []
    for phase in balance.phases():
        rows.append({"phase": phase, "measure": "demand", "value": balance.demand.get(phase, 0.0)})
        rows.append({"phase": phase, "measure": "supply", "value": balance.supply.get(phase, 0)})
    return pd.DataFrame(rows, columns=["phase", "measure", "value"])


def _visual_params(cfg: Config | None) -> tuple[float, float, int]:
    visual = cfg.visual if cfg is not None else VisualConfig()
    return float(visual.width), float(visual.height), int(visual.dpi)


def plot_phase_balance(balance: PhaseBalance, cfg: Config | None, out_path: Path) -> Path:
    """
    @brief
    Render demand vs supply per phase and save it as PNG.

    @details
    Steps:
        (1) Build long-form DataFrame.
        (2) Ensure output directory exists.
        (3) Draw grouped bars; oversubscribed phase labels are drawn in red.
        (4) Save with configured size and DPI.

    @raises
        DataError if there is nothing to plot,
        VisualizationError if drawing or saving fails.
    """
    from matplotlib import pyplot as plt

    df = balance_frame(balance)
    if df.empty:
        raise DataError(
            "No phases to plot: tasks and workers declare no phases.",
            source="visualizer.plot.plot_phase_balance",
            suggested_action="Fill PreferredPhases / AvailableSlots or skip the plot.",
        )

    out_path = Path(out_path)
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise VisualizationError(
            f"Cannot create output directory: {out_path.parent} ({exc})",
            source="visualizer.plot.plot_phase_balance",
            suggested_action="Check filesystem permissions or choose another output path",
        ) from exc

    width, height, dpi = _visual_params(cfg)
    oversubscribed = set(balance.oversubscribed())

    fig, ax = plt.subplots(figsize=(width, height))
    try:
        sns.barplot(
            data=df,
            x="phase",
            y="value",
            hue="measure",
            palette=_PALETTE,
            edgecolor="black",
            ax=ax,
        )
        for label in ax.get_xticklabels():
            if label.get_text() in oversubscribed:
                label.set_color(_PALETTE["demand"])
                label.set_fontweight("bold")

        ax.set_xlabel("phase")
        ax.set_ylabel("duration demand / available workers")
        ax.set_title(
            f"Phase balance: {len(oversubscribed)} of {df['phase'].nunique()} phases oversubscribed"
        )
        fig.tight_layout()
        fig.savefig(out_path, dpi=dpi, bbox_inches="tight")
    except (OSError, ValueError) as exc:
        raise VisualizationError(
            f"Failed to render phase balance: {exc}",
            source="visualizer.plot.plot_phase_balance",
            suggested_action="Check disk space and image backend settings",
        ) from exc
    finally:
        plt.close(fig)

    return out_path.resolve()


__all__ = ["balance_frame", "plot_phase_balance"]
