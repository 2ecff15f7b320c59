from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from .analysis.classification import DEFAULT_MIN_SAMPLES, pick_thresholds, screen_groups
from .analysis.describe import (
    DEFAULT_CORRELATION_COLUMNS,
    DEFAULT_GROUP_BY,
    LOW_VALUE_THRESHOLD,
    MissingSummary,
    censoring_summary,
    distinct_values,
    distribution_shape,
    group_geometric_means,
    low_values,
    missing_summary,
    non_integer_values,
    site_summary,
    spearman_matrix,
)
from .config import figs_dir, load_config, section
from .data.load import load_raw
from .data.normalize import normalize
from .plotting.figures import render_all
from .schema import SITE_COL, VALUE_COL

logger = logging.getLogger(__name__)


@dataclass
class ReportResult:
    data: pd.DataFrame
    missing: MissingSummary
    low_values: List[float]
    non_integer_values: List[float]
    tables: Dict[str, pd.DataFrame] = field(default_factory=dict)
    figures: Dict[str, Path] = field(default_factory=dict)


def _resolve_cfg(config_path: str | os.PathLike | None, cfg: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if cfg is not None:
        return cfg
    return load_config(config_path)


def load_normalized(cfg: Dict[str, Any]) -> pd.DataFrame:
    unknown = section(cfg, "normalize").get("unknown_categories", "raise")
    return normalize(load_raw(cfg), unknown=unknown)


def _print_table(title: str, table: pd.DataFrame) -> None:
    print(f"\n=== {title} ===")
    with pd.option_context("display.max_rows", 60, "display.width", 120, "display.float_format", "{:.3f}".format):
        print(table)


def scan_samples(config_path: str | os.PathLike | None = None, cfg: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
    """Load and normalize the samples, printing their shape, types and coverage."""
    cfg = _resolve_cfg(config_path, cfg)
    df = load_normalized(cfg)

    print("Shape:", df.shape)
    _print_table("Column types", df.dtypes.astype(str).to_frame("dtype"))
    _print_table("Missing values per column", df.isna().sum().sort_values(ascending=False).to_frame("missing"))
    _print_table("Samples per site", site_summary(df))
    return df


def build_tables(df: pd.DataFrame, cfg: Optional[Dict[str, Any]] = None) -> Dict[str, pd.DataFrame]:
    analysis_cfg = section(cfg, "analysis")
    by = analysis_cfg.get("group_by", list(DEFAULT_GROUP_BY))
    corr_cols = analysis_cfg.get("correlation_columns", DEFAULT_CORRELATION_COLUMNS)
    thresholds = pick_thresholds(analysis_cfg.get("classification"))
    min_samples = int(analysis_cfg.get("min_samples", DEFAULT_MIN_SAMPLES))

    return {
        "missing": missing_summary(df).as_frame(),
        "distinct_values": distinct_values(df),
        "censoring": censoring_summary(df),
        "distribution_shape": distribution_shape(df[VALUE_COL]),
        "group_geomeans": group_geometric_means(df, by=by),
        "spearman": spearman_matrix(df, columns=corr_cols),
        "classification_screen": screen_groups(
            df,
            by=analysis_cfg.get("classification_group_by", [SITE_COL]),
            thresholds=thresholds,
            min_samples=min_samples,
        ),
    }


TABLE_TITLES: Dict[str, str] = {
    "missing": "Missing E. coli values",
    "distinct_values": "Distinct ColiVal values and censoring",
    "censoring": "Censoring by year",
    "distribution_shape": "Distribution shape",
    "group_geomeans": "Geometric mean by group",
    "spearman": "Spearman rank correlations",
    "classification_screen": "Classification screen",
}


def run_report(
    config_path: str | os.PathLike | None = None,
    cfg: Optional[Dict[str, Any]] = None,
    render: bool = True,
) -> ReportResult:
    """
    Run the exploratory report: load, normalize, print descriptive tables and
    render the figure sequence under ``<outputs>/figs``.
    """
    cfg = _resolve_cfg(config_path, cfg)
    df = load_normalized(cfg)
    threshold = float(section(cfg, "analysis").get("low_value_threshold", LOW_VALUE_THRESHOLD))

    missing = missing_summary(df)
    lows = low_values(df[VALUE_COL], threshold=threshold)
    fractional = non_integer_values(df[VALUE_COL])
    tables = build_tables(df, cfg)

    print(f"Samples: {missing.n_rows}  missing ColiVal: {missing.n_missing} ({missing.proportion:.1%})")
    print(f"  of which scheduled but not collected: {missing.n_scheduled}")
    print(f"Values <= {threshold:g}: {lows}")
    print(f"Non-integer values: {fractional}")
    for key, table in tables.items():
        _print_table(TABLE_TITLES.get(key, key), table)

    figures: Dict[str, Path] = {}
    if render:
        figures = render_all(df, figs_dir(cfg), cfg)
        print("\nFigures:")
        for name, path in figures.items():
            print(f"  {name:<18} → {path}")

    return ReportResult(
        data=df,
        missing=missing,
        low_values=lows,
        non_integer_values=fractional,
        tables=tables,
        figures=figures,
    )


__all__ = ["ReportResult", "run_report", "scan_samples", "build_tables", "load_normalized"]
