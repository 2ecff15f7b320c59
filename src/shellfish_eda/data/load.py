from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from ..config import data_path
from ..exceptions import DataFileNotFoundError, ParseError, describe_rows
from ..schema import FLOAT_COLUMNS, INTEGER_COLUMNS, REQUIRED_COLUMNS

logger = logging.getLogger(__name__)

NA_VALUES: List[str] = ["", "NA", "N/A", "NaN", "nan", "None", "null", "NULL"]


def _read_csv(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise DataFileNotFoundError(f"Monitoring data file not found: '{path}'")
    try:
        df = pd.read_csv(
            path,
            dtype=str,
            na_values=NA_VALUES,
            keep_default_na=False,
            skipinitialspace=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise ParseError(f"Could not parse '{path}': {exc}") from exc
    except OSError as exc:
        raise DataFileNotFoundError(f"Could not read '{path}': {exc}") from exc
    df.columns = [str(c).strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].str.strip().replace("", pd.NA)
    return df


def _check_columns(df: pd.DataFrame, path: Path) -> None:
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ParseError(f"'{path.name}' is missing required column(s): {', '.join(missing)}")


def _coerce_numeric(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    for col in FLOAT_COLUMNS + INTEGER_COLUMNS:
        raw = df[col]
        values = pd.to_numeric(raw, errors="coerce")
        bad = raw.notna() & values.isna()
        if bad.any():
            examples = ", ".join(repr(v) for v in raw[bad].unique()[:5])
            raise ParseError(
                f"Column '{col}' has non-numeric values ({examples}) at {describe_rows(df.index[bad])}"
            )
        if col in INTEGER_COLUMNS:
            fractional = values.notna() & (values != values.round())
            if fractional.any():
                raise ParseError(f"Column '{col}' has non-integer values at {describe_rows(df.index[fractional])}")
            df[col] = values.astype("Int64")
        else:
            df[col] = values.astype("float64")
    return df


def load_samples(path: str | os.PathLike) -> pd.DataFrame:
    """
    Read the shellfish monitoring CSV into a table with numeric columns parsed.

    Categorical casts, flags and date handling are left to ``normalize``.
    """
    path = Path(path)
    logger.info("Loading samples from %s", path)
    df = _read_csv(path)
    _check_columns(df, path)
    df = _coerce_numeric(df)
    logger.info("Loaded %d records with %d columns", len(df), len(df.columns))
    return df


def load_raw(cfg: Dict[str, Any]) -> pd.DataFrame:
    return load_samples(data_path(cfg))


__all__ = ["load_samples", "load_raw", "NA_VALUES"]
