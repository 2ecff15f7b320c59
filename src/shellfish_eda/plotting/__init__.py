"""Exploratory figures."""

from .figures import (
    plot_by_category,
    plot_geomean_by_area,
    plot_log_histogram,
    plot_loglog_histogram,
    plot_pair_grid,
    plot_time_scatter,
    render_all,
)

__all__ = [
    "plot_by_category",
    "plot_geomean_by_area",
    "plot_log_histogram",
    "plot_loglog_histogram",
    "plot_pair_grid",
    "plot_time_scatter",
    "render_all",
]
