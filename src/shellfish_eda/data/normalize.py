from __future__ import annotations

import logging
from typing import Dict, List

import pandas as pd
from pandas.api.types import CategoricalDtype, is_bool_dtype, is_datetime64_any_dtype

from ..exceptions import DomainError, ParseError, describe_rows
from ..schema import (
    DATE_COL,
    DERIVED_COLUMNS,
    FLAG_COLUMNS,
    INTEGER_COLUMNS,
    MONTH_LEVELS,
    OPTIONAL_COLUMNS,
    ORDERED_CATEGORIES,
    REQUIRED_COLUMNS,
    UNORDERED_CATEGORIES,
)

logger = logging.getLogger(__name__)

UNKNOWN_POLICIES = ("raise", "missing")

FLAG_VALUES: Dict[str, bool] = {
    "true": True,
    "t": True,
    "yes": True,
    "y": True,
    "1": True,
    "1.0": True,
    "false": False,
    "f": False,
    "no": False,
    "n": False,
    "0": False,
    "0.0": False,
}

MONTH_DTYPE = CategoricalDtype(MONTH_LEVELS, ordered=True)


def _coerce_flag(series: pd.Series, col: str) -> pd.Series:
    if is_bool_dtype(series):
        return series.astype("boolean")
    text = series.astype("string").str.strip().str.lower().astype(object)
    mapped = text.map(FLAG_VALUES)
    bad = text.notna() & mapped.isna()
    if bad.any():
        examples = ", ".join(repr(v) for v in series[bad].unique()[:5])
        raise ParseError(f"Column '{col}' has unrecognised flag values ({examples}) at {describe_rows(series.index[bad])}")
    return mapped.astype("boolean")


def _order_category(series: pd.Series, col: str, levels: List[str], unknown: str) -> pd.Series:
    dtype = CategoricalDtype(levels, ordered=True)
    if series.dtype == dtype:
        return series
    text = series.astype("string").str.strip().str.upper()
    bad = (text.notna() & ~text.isin(levels)).fillna(False).astype(bool)
    if bad.any():
        values = sorted(str(v) for v in text[bad].unique())
        msg = (
            f"Column '{col}' has value(s) outside the allowed levels {levels}: "
            f"{values} at {describe_rows(series.index[bad])}"
        )
        if unknown == "raise":
            raise DomainError(msg)
        logger.warning("%s; treating %d value(s) as missing", msg, int(bad.sum()))
        text = text.mask(bad)
    return text.astype(object).astype(dtype)


def _parse_dates(series: pd.Series, col: str, day_only: bool) -> pd.Series:
    if is_datetime64_any_dtype(series):
        dates = series
    else:
        dates = pd.to_datetime(series, errors="coerce")
        bad = series.notna() & dates.isna()
        if bad.any():
            examples = ", ".join(repr(v) for v in series[bad].unique()[:5])
            raise ParseError(f"Column '{col}' has malformed dates ({examples}) at {describe_rows(series.index[bad])}")
    if day_only:
        dates = dates.dt.normalize()
    return dates


def _derive_calendar(dates: pd.Series) -> Dict[str, pd.Series]:
    doy = dates.dt.dayofyear.astype("Int64")
    codes = dates.dt.month.fillna(0).astype(int) - 1
    month = pd.Series(
        pd.Categorical.from_codes(codes.to_numpy(), dtype=MONTH_DTYPE),
        index=dates.index,
        name=DERIVED_COLUMNS[1],
    )
    return dict(zip(DERIVED_COLUMNS, (doy, month)))


def normalize(df: pd.DataFrame, unknown: str = "raise") -> pd.DataFrame:
    """
    Return a typed copy of the sample table.

    Casts site/area identifiers to categoricals, censoring flags to nullable
    booleans and ``Class``/``Tide`` to ordered categoricals with fixed levels,
    then derives ``DOY`` and ``Month`` from ``SDate``. ``unknown`` decides what
    happens to Class/Tide values outside the vocabulary: ``"raise"`` raises
    ``DomainError``, ``"missing"`` logs a warning and blanks them.

    Applying ``normalize`` to its own output returns an equal frame.
    """
    if unknown not in UNKNOWN_POLICIES:
        raise ValueError(f"unknown must be one of {UNKNOWN_POLICIES}, got {unknown!r}")
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ParseError(f"Cannot normalize table without column(s): {', '.join(missing)}")

    df = df.copy()
    for col in UNORDERED_CATEGORIES:
        if not isinstance(df[col].dtype, CategoricalDtype):
            df[col] = df[col].astype("category")
    for col in INTEGER_COLUMNS:
        df[col] = df[col].astype("Int64")
    for col in FLAG_COLUMNS:
        df[col] = _coerce_flag(df[col], col)
    for col, levels in ORDERED_CATEGORIES.items():
        df[col] = _order_category(df[col], col, levels, unknown)

    df[DATE_COL] = _parse_dates(df[DATE_COL], DATE_COL, day_only=True)
    for col in OPTIONAL_COLUMNS:
        if col not in df.columns:
            continue
        df[col] = _parse_dates(df[col], col, day_only=False)

    for name, values in _derive_calendar(df[DATE_COL]).items():
        df[name] = values
    return df


__all__ = ["normalize", "UNKNOWN_POLICIES", "FLAG_VALUES"]
