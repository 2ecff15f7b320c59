"""Descriptive summaries and classification screening."""

from .classification import (
    ClassificationThreshold,
    DEFAULT_THRESHOLDS,
    pick_thresholds,
    screen_groups,
)
from .describe import (
    MissingSummary,
    censoring_summary,
    distinct_values,
    distribution_shape,
    estimated_p90,
    geometric_mean,
    group_geometric_means,
    low_values,
    missing_summary,
    non_integer_values,
    site_summary,
    spearman_matrix,
)

__all__ = [
    "ClassificationThreshold",
    "DEFAULT_THRESHOLDS",
    "pick_thresholds",
    "screen_groups",
    "MissingSummary",
    "censoring_summary",
    "distinct_values",
    "distribution_shape",
    "estimated_p90",
    "geometric_mean",
    "group_geometric_means",
    "low_values",
    "missing_summary",
    "non_integer_values",
    "site_summary",
    "spearman_matrix",
]
