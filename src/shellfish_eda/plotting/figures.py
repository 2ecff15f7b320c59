from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from ..analysis.classification import ClassificationThreshold, pick_thresholds
from ..analysis.describe import (
    CENSOR_STATES,
    DEFAULT_GROUP_BY,
    censoring_state,
    group_geometric_means,
)
from ..config import section
from ..exceptions import ParseError
from ..schema import (
    CLASS_LEVELS,
    DATE_COL,
    TIDE_LEVELS,
    VALUE_COL,
    GrowingAreaClass,
    TidePhase,
    column_label,
)
from ..utils.io import savefig

logger = logging.getLogger(__name__)

DEFAULT_PAIR_COLUMNS = [VALUE_COL, "Temp", "Sal", "DOY", "YEAR"]
LOG_VALUE_COL = "log_ColiVal"

CENSOR_PALETTE: Dict[str, str] = {
    "Uncensored": "#4c72b0",
    "Left censored": "#55a868",
    "Right censored": "#c44e52",
}


def _positive_values(df: pd.DataFrame) -> pd.Series:
    values = pd.to_numeric(df[VALUE_COL], errors="coerce").astype("float64")
    return values[values > 0]


def plot_time_scatter(df: pd.DataFrame, out_png: Path, dpi: int = 150) -> Path:
    present = df[VALUE_COL].notna()
    data = pd.DataFrame(
        {
            DATE_COL: df.loc[present, DATE_COL],
            VALUE_COL: df.loc[present, VALUE_COL].astype("float64"),
            "Censoring": censoring_state(df)[present],
        }
    )
    plt.figure(figsize=(9, 5))
    ax = sns.scatterplot(
        data=data,
        x=DATE_COL,
        y=VALUE_COL,
        hue="Censoring",
        hue_order=CENSOR_STATES,
        palette=CENSOR_PALETTE,
        s=14,
        alpha=0.7,
        edgecolor=None,
    )
    ax.set_yscale("log")
    ax.set_xlabel("Sample date")
    ax.set_ylabel(column_label(VALUE_COL))
    ax.set_title("E. coli counts over time")
    return savefig(out_png, dpi=dpi)


def plot_log_histogram(df: pd.DataFrame, out_png: Path, dpi: int = 150, log_counts: bool = False) -> Path:
    values = _positive_values(df)
    plt.figure(figsize=(7, 4.5))
    ax = sns.histplot(x=values, bins=30, log_scale=True)
    if log_counts:
        ax.set_yscale("log")
    ax.set_xlabel(column_label(VALUE_COL))
    ax.set_ylabel("Samples (log scale)" if log_counts else "Samples")
    ax.set_title("Distribution of E. coli counts" + (" (log-log)" if log_counts else ""))
    return savefig(out_png, dpi=dpi)


def plot_loglog_histogram(df: pd.DataFrame, out_png: Path, dpi: int = 150) -> Path:
    return plot_log_histogram(df, out_png, dpi=dpi, log_counts=True)


def _annotate_spearman(x, y, **kwargs) -> None:
    rho = pd.Series(np.asarray(x, dtype=float)).corr(pd.Series(np.asarray(y, dtype=float)), method="spearman")
    ax = plt.gca()
    text = "ρ = n/a" if pd.isna(rho) else f"ρ = {rho:.2f}"
    ax.annotate(text, xy=(0.5, 0.5), xycoords="axes fraction", ha="center", va="center", fontsize=12)


def _pair_frame(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    data = pd.DataFrame(index=df.index)
    for col in columns:
        if col not in df.columns:
            logger.warning("Pair grid column '%s' not in table; skipping", col)
            continue
        series = pd.to_numeric(df[col], errors="coerce").astype("float64")
        if col == VALUE_COL:
            data[LOG_VALUE_COL] = np.log10(series.where(series > 0))
            continue
        if series.notna().sum() < 3 or series.nunique() < 2:
            logger.warning("Pair grid column '%s' has too few distinct values; skipping", col)
            continue
        data[col] = series
    return data


def plot_pair_grid(df: pd.DataFrame, out_png: Path, columns: Sequence[str] = DEFAULT_PAIR_COLUMNS, dpi: int = 150) -> Path:
    """
    Pairwise relationships between log10 E. coli and covariates: scatter with
    a LOWESS trend below the diagonal, histograms on it, Spearman rho above.
    """
    data = _pair_frame(df, columns)
    grid = sns.PairGrid(data, diag_sharey=False, height=2.2)
    grid.map_lower(
        sns.regplot,
        lowess=True,
        scatter_kws={"s": 6, "alpha": 0.4},
        line_kws={"color": "#c44e52"},
    )
    grid.map_diag(sns.histplot, bins=25)
    grid.map_upper(_annotate_spearman)
    for ax in grid.axes.flat:
        if ax is None:
            continue
        ax.set_xlabel(column_label(ax.get_xlabel()) if ax.get_xlabel() else "")
        ax.set_ylabel(column_label(ax.get_ylabel()) if ax.get_ylabel() else "")
    grid.figure.suptitle("Pairwise relationships", y=1.02)
    return savefig(out_png, dpi=dpi)


def plot_geomean_by_area(
    df: pd.DataFrame,
    out_png: Path,
    by: Sequence[str] = DEFAULT_GROUP_BY,
    thresholds: Optional[Sequence[ClassificationThreshold]] = None,
    dpi: int = 150,
) -> Path:
    """
    Geometric means per group against the classification limits. Two grouping
    columns give one line per area over the second column; a single column
    gives a bar per group.
    """
    by = list(by)[:2]
    if not by:
        raise ParseError("Geometric mean plot needs at least one grouping column")
    area_col = by[0]
    table = group_geometric_means(df, by=by).dropna(subset=["geomean"])
    table[area_col] = table[area_col].astype(str)
    thresholds = list(thresholds) if thresholds is not None else pick_thresholds()

    plt.figure(figsize=(9, 5))
    if len(by) == 1:
        ax = sns.barplot(data=table, x=area_col, y="geomean", color="#8da0cb")
        ax.tick_params(axis="x", labelrotation=45)
        ax.set_title(f"Geometric mean by {area_col}")
    else:
        time_col = by[1]
        table[time_col] = pd.to_numeric(table[time_col], errors="coerce")
        ax = sns.lineplot(data=table, x=time_col, y="geomean", hue=area_col, marker="o")
        ax.set_title(f"Geometric mean by {area_col} and {time_col}")
        if ax.get_legend() is not None:
            ax.legend(title=area_col, bbox_to_anchor=(1.02, 1), loc="upper left", fontsize=7)
    for threshold in thresholds:
        ax.axhline(threshold.max_geomean, ls="--", lw=1, color="grey")
        ax.annotate(
            f"{threshold.code} limit ({threshold.max_geomean:g})",
            xy=(1.0, threshold.max_geomean),
            xycoords=("axes fraction", "data"),
            ha="right",
            va="bottom",
            fontsize=8,
            color="grey",
        )
    ax.set_yscale("log")
    ax.set_ylabel("Geometric mean E. coli (MPN/100 mL)")
    return savefig(out_png, dpi=dpi)


def plot_by_category(df: pd.DataFrame, out_png: Path, dpi: int = 150) -> Path:
    values = pd.to_numeric(df[VALUE_COL], errors="coerce").astype("float64")
    data = pd.DataFrame(
        {
            LOG_VALUE_COL: np.log10(values.where(values > 0)),
            "Tide": df["Tide"].astype(str).where(df["Tide"].notna()),
            "Class": df["Class"].astype(str).where(df["Class"].notna()),
        }
    )
    fig, axes = plt.subplots(1, 2, figsize=(11, 4.5), sharey=True)
    sns.boxplot(data=data, x="Tide", y=LOG_VALUE_COL, order=TIDE_LEVELS, ax=axes[0], color="#8da0cb")
    sns.boxplot(data=data, x="Class", y=LOG_VALUE_COL, order=CLASS_LEVELS, ax=axes[1], color="#66c2a5")
    axes[0].set_title("By tide phase")
    axes[1].set_title("By growing-area class")
    axes[0].set_ylabel(column_label(LOG_VALUE_COL))
    axes[1].set_ylabel("")
    axes[0].set_xticks(range(len(TIDE_LEVELS)), [t.label for t in TidePhase], rotation=45, ha="right")
    axes[1].set_xticks(range(len(CLASS_LEVELS)), [c.label for c in GrowingAreaClass], rotation=30, ha="right")
    return savefig(out_png, dpi=dpi)


def render_all(df: pd.DataFrame, figs_dir: Path, cfg: Optional[Dict[str, Any]] = None) -> Dict[str, Path]:
    """Render the fixed figure sequence into ``figs_dir``."""
    analysis_cfg = section(cfg, "analysis")
    dpi = int(section(cfg, "plots").get("dpi", 150))
    by = analysis_cfg.get("group_by", list(DEFAULT_GROUP_BY))
    pair_columns: List[str] = analysis_cfg.get("pair_columns", DEFAULT_PAIR_COLUMNS)
    thresholds = pick_thresholds(analysis_cfg.get("classification"))

    figs_dir = Path(figs_dir)
    figures = {
        "time_scatter": plot_time_scatter(df, figs_dir / "coli_time_scatter.png", dpi=dpi),
        "log_histogram": plot_log_histogram(df, figs_dir / "coli_hist_log.png", dpi=dpi),
        "loglog_histogram": plot_loglog_histogram(df, figs_dir / "coli_hist_loglog.png", dpi=dpi),
        "pair_grid": plot_pair_grid(df, figs_dir / "pair_grid.png", columns=pair_columns, dpi=dpi),
        "geomean_by_area": plot_geomean_by_area(df, figs_dir / "geomean_by_area.png", by=by, thresholds=thresholds, dpi=dpi),
        "by_category": plot_by_category(df, figs_dir / "coli_by_tide_class.png", dpi=dpi),
    }
    logger.info("Rendered %d figures into %s", len(figures), figs_dir)
    return figures


__all__ = [
    "plot_time_scatter",
    "plot_log_histogram",
    "plot_loglog_histogram",
    "plot_pair_grid",
    "plot_geomean_by_area",
    "plot_by_category",
    "render_all",
    "DEFAULT_PAIR_COLUMNS",
]
