"""
Screen sampling groups against growing-area classification thresholds.

Shellfish growing areas are classified from the geometric mean and the
estimated 90th percentile of recent E. coli counts at each station. The
defaults below are the systematic-random-sampling limits for MPN counts
(MPN/100 mL); projects can override them via `analysis.classification` in the
config file. The screen is descriptive: it reports which class the counts are
consistent with next to the class actually assigned, and never changes data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from ..exceptions import DomainError, ParseError
from ..schema import CLASS_LEVELS, SITE_COL, VALUE_COL
from .describe import estimated_p90, geometric_mean

DEFAULT_THRESHOLDS: Dict[str, Dict[str, float]] = {
    "approved": {
        "code": "A",
        "max_geomean": 14.0,
        "max_p90": 31.0,
    },
    "restricted": {
        "code": "R",
        "max_geomean": 88.0,
        "max_p90": 163.0,
    },
}

DEFAULT_MIN_SAMPLES = 15
INSUFFICIENT = "insufficient data"

# Conditional classes are held to the limits of the class they open to.
THRESHOLD_TIER: Dict[str, str] = {
    "A": "A",
    "CA": "A",
    "CR": "R",
    "R": "R",
    "P": "P",
    "X": "P",
}


@dataclass(frozen=True)
class ClassificationThreshold:
    code: str
    max_geomean: float
    max_p90: float

    @staticmethod
    def from_mapping(mapping: Mapping[str, float]) -> "ClassificationThreshold":
        code = str(mapping["code"]).strip().upper()
        if code not in CLASS_LEVELS:
            raise DomainError(f"Threshold class '{code}' is not one of {CLASS_LEVELS}")
        return ClassificationThreshold(
            code=code,
            max_geomean=float(mapping["max_geomean"]),
            max_p90=float(mapping["max_p90"]),
        )

    def admits(self, gmean: float, p90: float) -> bool:
        if not (np.isfinite(gmean) and np.isfinite(p90)):
            return False
        return gmean <= self.max_geomean + 1e-9 and p90 <= self.max_p90 + 1e-9


def pick_thresholds(cfg_section: Optional[Mapping[str, Mapping[str, float]]] = None) -> List[ClassificationThreshold]:
    """
    Return thresholds ordered from least to most restrictive class.
    """
    data = dict(DEFAULT_THRESHOLDS)
    if cfg_section:
        for key, entry in cfg_section.items():
            if not isinstance(entry, Mapping):
                continue
            data[key] = {**data.get(key, {}), **entry}
    thresholds = [ClassificationThreshold.from_mapping(v) for v in data.values()]
    thresholds.sort(key=lambda t: CLASS_LEVELS.index(t.code))
    return thresholds


def indicated_class(gmean: float, p90: float, thresholds: Sequence[ClassificationThreshold]) -> str:
    for threshold in thresholds:
        if threshold.admits(gmean, p90):
            return threshold.code
    return "P"


def _assigned_class(classes: pd.Series) -> Optional[str]:
    counts = classes.dropna().astype(str).value_counts()
    if counts.empty:
        return None
    return str(counts.index[0])


def _verdict(indicated: str, assigned: Optional[str]) -> str:
    if indicated == INSUFFICIENT:
        return INSUFFICIENT
    if assigned is None:
        return "no assigned class"
    tier = THRESHOLD_TIER.get(assigned, assigned)
    rank_assigned = CLASS_LEVELS.index(tier)
    rank_indicated = CLASS_LEVELS.index(indicated)
    if rank_assigned == rank_indicated:
        return "Consistent"
    if rank_assigned > rank_indicated:
        return "Assigned class stricter than data"
    return "Data exceed assigned class"


def screen_groups(
    df: pd.DataFrame,
    by: Sequence[str] = (SITE_COL,),
    thresholds: Optional[Sequence[ClassificationThreshold]] = None,
    min_samples: int = DEFAULT_MIN_SAMPLES,
) -> pd.DataFrame:
    """
    Compare each group's geometric mean and estimated 90th percentile with the
    classification thresholds.

    Returns one row per group with ``n``, ``geomean``, ``p90``, the class the
    counts indicate, the most frequently assigned ``Class`` and a verdict.
    Groups with fewer than ``min_samples`` counts are reported as
    ``insufficient data``.
    """
    by = list(by)
    missing = [c for c in [*by, VALUE_COL, "Class"] if c not in df.columns]
    if missing:
        raise ParseError(f"Table has no column(s): {', '.join(missing)}")
    thresholds = list(thresholds) if thresholds is not None else pick_thresholds()

    rows = []
    for key, grp in df.groupby(by, observed=True, sort=True):
        key = key if isinstance(key, tuple) else (key,)
        values = grp[VALUE_COL].dropna()
        label = ", ".join(f"{c}={v}" for c, v in zip(by, key))
        try:
            gmean = geometric_mean(values) if not values.empty else float("nan")
            p90 = estimated_p90(values) if not values.empty else float("nan")
        except DomainError as exc:
            raise DomainError(f"Group {label}: {exc}") from exc

        if values.size < min_samples:
            indicated = INSUFFICIENT
        else:
            indicated = indicated_class(gmean, p90, thresholds)
        assigned = _assigned_class(grp["Class"])
        rows.append(
            {
                **dict(zip(by, key)),
                "n": int(values.size),
                "geomean": gmean,
                "p90": p90,
                "indicated": indicated,
                "assigned": assigned,
                "verdict": _verdict(indicated, assigned),
            }
        )
    return pd.DataFrame(rows, columns=[*by, "n", "geomean", "p90", "indicated", "assigned", "verdict"])


__all__ = [
    "ClassificationThreshold",
    "DEFAULT_THRESHOLDS",
    "DEFAULT_MIN_SAMPLES",
    "pick_thresholds",
    "indicated_class",
    "screen_groups",
]
