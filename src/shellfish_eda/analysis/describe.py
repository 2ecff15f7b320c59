from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from ..exceptions import DomainError, ParseError
from ..schema import (
    AREA_COL,
    DATE_COL,
    LEFT_FLAG,
    METADATA_COLUMNS,
    RIGHT_FLAG,
    SITE_COL,
    VALUE_COL,
)


LOW_VALUE_THRESHOLD = 10.0
DEFAULT_GROUP_BY = (AREA_COL, "YEAR")
DEFAULT_CORRELATION_COLUMNS = [VALUE_COL, "Temp", "Sal", "DOY", "YEAR"]

# z-score of the 90th percentile of a standard normal
Z_90 = 1.2816

CENSOR_LEFT = "Left censored"
CENSOR_RIGHT = "Right censored"
CENSOR_NONE = "Uncensored"
CENSOR_STATES = [CENSOR_NONE, CENSOR_LEFT, CENSOR_RIGHT]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _numeric(values: Iterable) -> np.ndarray:
    series = values if isinstance(values, pd.Series) else pd.Series(list(values), dtype=object)
    present = series[series.notna()]
    converted = pd.to_numeric(present, errors="coerce")
    bad = converted.isna()
    if bad.any():
        examples = ", ".join(repr(v) for v in present[bad].unique()[:5])
        raise ParseError(f"Non-numeric value(s) ({examples}) cannot be summarised; recode or remove them first")
    return converted.astype("float64").to_numpy()


def _positive_values(values: Iterable, what: str) -> np.ndarray:
    arr = _numeric(values)
    if arr.size == 0:
        raise DomainError(f"{what} is undefined for an empty set of values")
    nonpos = arr[arr <= 0]
    if nonpos.size:
        raise DomainError(
            f"{what} is undefined for non-positive values "
            f"({nonpos.size} value(s) <= 0, e.g. {nonpos[0]:g})"
        )
    return arr


def _flag(df: pd.DataFrame, col: str) -> pd.Series:
    return df[col].astype("boolean").fillna(False).astype(bool)


def _require(df: pd.DataFrame, columns: Sequence[str]) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ParseError(f"Table has no column(s): {', '.join(missing)}")


def censoring_state(df: pd.DataFrame) -> pd.Series:
    """Label each row as left censored, right censored or uncensored."""
    left = _flag(df, LEFT_FLAG)
    right = _flag(df, RIGHT_FLAG)
    state = pd.Series(CENSOR_NONE, index=df.index, name="Censoring")
    state = state.mask(left, CENSOR_LEFT).mask(right, CENSOR_RIGHT)
    return state.astype(pd.CategoricalDtype(CENSOR_STATES))


# ---------------------------------------------------------------------------
# Missing values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MissingSummary:
    n_rows: int
    n_missing: int
    n_scheduled: int

    @property
    def proportion(self) -> float:
        return self.n_missing / self.n_rows if self.n_rows else 0.0

    def as_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "rows": [self.n_rows],
                "missing": [self.n_missing],
                "proportion": [self.proportion],
                "scheduled_uncollected": [self.n_scheduled],
            }
        )


def missing_summary(df: pd.DataFrame) -> MissingSummary:
    """
    Count samples without a reported ``ColiVal``.

    ``n_scheduled`` counts the subset whose site and date metadata are
    complete: samples that were scheduled but not collected.
    """
    _require(df, [VALUE_COL, *METADATA_COLUMNS])
    missing = df[VALUE_COL].isna()
    complete_meta = df[METADATA_COLUMNS].notna().all(axis=1)
    return MissingSummary(
        n_rows=int(len(df)),
        n_missing=int(missing.sum()),
        n_scheduled=int((missing & complete_meta).sum()),
    )


# ---------------------------------------------------------------------------
# Value inspection
# ---------------------------------------------------------------------------


def distinct_values(df: pd.DataFrame) -> pd.DataFrame:
    """
    One row per distinct ``ColiVal`` with its sample count and whether any
    sample at that value carries a censoring flag.
    """
    _require(df, [VALUE_COL, LEFT_FLAG, RIGHT_FLAG])
    present = df[VALUE_COL].notna()
    frame = pd.DataFrame(
        {
            VALUE_COL: df.loc[present, VALUE_COL].astype("float64"),
            "left": _flag(df, LEFT_FLAG)[present],
            "right": _flag(df, RIGHT_FLAG)[present],
        }
    )
    out = frame.groupby(VALUE_COL, sort=True).agg(
        n=("left", "size"),
        left_censored=("left", "any"),
        right_censored=("right", "any"),
    )
    out["censored"] = out["left_censored"] | out["right_censored"]
    return out.reset_index()


def low_values(values: Iterable, threshold: float = LOW_VALUE_THRESHOLD) -> List[float]:
    """Distinct values at or below ``threshold``, ascending."""
    arr = _numeric(values)
    return [float(v) for v in np.unique(arr[arr <= threshold])]


def non_integer_values(values: Iterable) -> List[float]:
    """Distinct values with a fractional part, ascending."""
    arr = _numeric(values)
    return [float(v) for v in np.unique(arr[arr != np.floor(arr)])]


# ---------------------------------------------------------------------------
# Geometric means and percentiles
# ---------------------------------------------------------------------------


def geometric_mean(values: Iterable) -> float:
    """exp(mean(log(x))) over the non-missing values."""
    arr = _positive_values(values, "Geometric mean")
    return float(np.exp(np.mean(np.log(arr))))


def estimated_p90(values: Iterable) -> float:
    """
    90th percentile of a log-normal fit, ``10 ** (mean + 1.2816 * sd)`` on
    log10 values. Needs at least two values; returns NaN otherwise.
    """
    arr = _positive_values(values, "Estimated 90th percentile")
    if arr.size < 2:
        return float("nan")
    logs = np.log10(arr)
    return float(10 ** (logs.mean() + Z_90 * logs.std(ddof=1)))


def _group_label(by: Sequence[str], key) -> str:
    key = key if isinstance(key, tuple) else (key,)
    return ", ".join(f"{col}={val}" for col, val in zip(by, key))


def group_geometric_means(df: pd.DataFrame, by: Sequence[str] = DEFAULT_GROUP_BY) -> pd.DataFrame:
    """Sample count and geometric mean of ``ColiVal`` per group, missing values excluded."""
    by = list(by)
    _require(df, [VALUE_COL, *by])
    rows = []
    for key, grp in df.groupby(by, observed=True, sort=True):
        values = grp[VALUE_COL].dropna()
        if values.empty:
            gmean = float("nan")
        else:
            try:
                gmean = geometric_mean(values)
            except DomainError as exc:
                raise DomainError(f"Group {_group_label(by, key)}: {exc}") from exc
        key = key if isinstance(key, tuple) else (key,)
        rows.append({**dict(zip(by, key)), "n": int(values.size), "geomean": gmean})
    return pd.DataFrame(rows, columns=[*by, "n", "geomean"])


# ---------------------------------------------------------------------------
# Shape, correlation and coverage
# ---------------------------------------------------------------------------


def spearman_matrix(df: pd.DataFrame, columns: Sequence[str] = DEFAULT_CORRELATION_COLUMNS) -> pd.DataFrame:
    columns = list(columns)
    _require(df, columns)
    num = df[columns].apply(pd.to_numeric, errors="coerce").astype("float64")
    return num.corr(method="spearman")


def distribution_shape(values: Iterable) -> pd.DataFrame:
    """Skewness and excess kurtosis of the raw and log10-transformed values."""
    arr = _numeric(values)
    rows = {}
    for name, data in (("raw", arr), ("log10", np.log10(arr[arr > 0]))):
        if data.size < 3:
            rows[name] = {"n": int(data.size), "mean": np.nan, "median": np.nan, "skewness": np.nan, "excess_kurtosis": np.nan}
            continue
        rows[name] = {
            "n": int(data.size),
            "mean": float(np.mean(data)),
            "median": float(np.median(data)),
            "skewness": float(stats.skew(data, bias=False)),
            "excess_kurtosis": float(stats.kurtosis(data, fisher=True, bias=False)),
        }
    return pd.DataFrame.from_dict(rows, orient="index")


def censoring_summary(df: pd.DataFrame, by: str = "YEAR") -> pd.DataFrame:
    """Per-group counts of left censored, right censored and uncensored samples."""
    _require(df, [by, VALUE_COL, LEFT_FLAG, RIGHT_FLAG])
    present = df[df[VALUE_COL].notna()]
    state = censoring_state(present)
    table = pd.crosstab(present[by], state, dropna=False).reindex(columns=CENSOR_STATES, fill_value=0)
    table.columns = [str(c) for c in table.columns]
    table.columns.name = None
    table["n"] = table[CENSOR_STATES].sum(axis=1)
    table["pct_censored"] = 100.0 * (table[CENSOR_LEFT] + table[CENSOR_RIGHT]) / table["n"].where(table["n"] > 0)
    return table


def site_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Sample coverage per site: counts, missing values and sampling date span."""
    _require(df, [SITE_COL, AREA_COL, DATE_COL, VALUE_COL])
    grouped = df.groupby(SITE_COL, observed=True, sort=True)
    out = pd.DataFrame(
        {
            AREA_COL: grouped[AREA_COL].first(),
            "n_samples": grouped.size(),
            "n_missing": grouped[VALUE_COL].apply(lambda s: int(s.isna().sum())),
            "first_sample": grouped[DATE_COL].min(),
            "last_sample": grouped[DATE_COL].max(),
        }
    )
    return out.sort_values("n_samples", ascending=False)


__all__ = [
    "MissingSummary",
    "missing_summary",
    "distinct_values",
    "low_values",
    "non_integer_values",
    "geometric_mean",
    "estimated_p90",
    "group_geometric_means",
    "spearman_matrix",
    "distribution_shape",
    "censoring_summary",
    "censoring_state",
    "site_summary",
    "LOW_VALUE_THRESHOLD",
    "DEFAULT_GROUP_BY",
    "DEFAULT_CORRELATION_COLUMNS",
    "CENSOR_STATES",
]
