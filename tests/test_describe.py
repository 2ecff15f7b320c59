from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from shellfish_eda.analysis.describe import (
    CENSOR_LEFT,
    CENSOR_NONE,
    CENSOR_RIGHT,
    censoring_state,
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
from shellfish_eda.exceptions import DomainError, ParseError


def _ten_row_table() -> pd.DataFrame:
    coli = [4.0, np.nan, 13.0, 2.0, 49.0, np.nan, 7.8, 23.0, 110.0, 2.0]
    return pd.DataFrame(
        {
            "SiteCode": ["S1", "S2"] * 5,
            "GROW_AREA": ["WA"] * 10,
            "YEAR": [2016] * 10,
            "SDate": pd.date_range("2016-03-01", periods=10, freq="7D"),
            "ColiVal": coli,
            "LCFlag": pd.array([False, None, False, True, False, None, False, False, False, True], dtype="boolean"),
            "RCFlag": pd.array([False] * 10, dtype="boolean"),
        }
    )


def test_missing_count_for_scheduled_samples():
    summary = missing_summary(_ten_row_table())
    assert summary.n_rows == 10
    assert summary.n_missing == 2
    assert summary.n_scheduled == 2
    assert summary.proportion == pytest.approx(0.2)


def test_missing_without_metadata_is_not_scheduled():
    df = _ten_row_table()
    df.loc[1, "SDate"] = pd.NaT
    summary = missing_summary(df)
    assert summary.n_missing == 2
    assert summary.n_scheduled == 1


def test_missing_summary_on_loaded_data(normalized_df):
    summary = missing_summary(normalized_df)
    assert summary.n_missing == 2
    assert summary.n_scheduled == 2
    frame = summary.as_frame()
    assert frame.loc[0, "missing"] == 2


def test_geometric_mean_of_geometric_progression():
    assert geometric_mean([2, 8, 32]) == pytest.approx(8.0)


def test_geometric_mean_ignores_missing():
    assert geometric_mean(pd.Series([2.0, np.nan, 8.0, 32.0])) == pytest.approx(8.0)


@pytest.mark.parametrize("values", [[2, 0, 8], [4, -1], []])
def test_geometric_mean_domain_errors(values):
    with pytest.raises(DomainError):
        geometric_mean(values)


def test_low_values():
    assert low_values([1.9, 2.0, 5, 15, 50]) == [1.9, 2.0, 5]


def test_low_values_custom_threshold_and_duplicates():
    assert low_values(pd.Series([20.0, 2.0, 2.0, np.nan, 31.0]), threshold=20) == [2.0, 20.0]


def test_non_integer_values():
    assert non_integer_values([1.9, 2.0, 3, 4.5]) == [1.9, 4.5]


def test_distinct_values_flags_censoring():
    df = pd.DataFrame(
        {
            "ColiVal": [2.0, 2.0, 4.0, 1600.0, 1600.0, np.nan],
            "LCFlag": pd.array([True, False, False, False, False, False], dtype="boolean"),
            "RCFlag": pd.array([False, False, False, False, True, None], dtype="boolean"),
        }
    )
    out = distinct_values(df).set_index("ColiVal")
    assert list(out.index) == [2.0, 4.0, 1600.0]
    assert out.loc[2.0, "n"] == 2
    assert bool(out.loc[2.0, "censored"]) and bool(out.loc[2.0, "left_censored"])
    assert not bool(out.loc[4.0, "censored"])
    assert bool(out.loc[1600.0, "right_censored"])


def test_group_geometric_means():
    df = pd.DataFrame(
        {
            "GROW_AREA": ["WA", "WA", "WA", "WB", "WB"],
            "YEAR": [2015, 2015, 2015, 2015, 2016],
            "ColiVal": [2.0, 8.0, 32.0, np.nan, 10.0],
        }
    )
    out = group_geometric_means(df)
    assert list(out.columns) == ["GROW_AREA", "YEAR", "n", "geomean"]
    wa = out[(out["GROW_AREA"] == "WA") & (out["YEAR"] == 2015)].iloc[0]
    assert wa["n"] == 3
    assert wa["geomean"] == pytest.approx(8.0)
    wb15 = out[(out["GROW_AREA"] == "WB") & (out["YEAR"] == 2015)].iloc[0]
    assert wb15["n"] == 0
    assert np.isnan(wb15["geomean"])


def test_group_geometric_means_names_offending_group():
    df = pd.DataFrame({"GROW_AREA": ["WA", "WB"], "YEAR": [2015, 2015], "ColiVal": [4.0, 0.0]})
    with pytest.raises(DomainError, match="GROW_AREA=WB"):
        group_geometric_means(df)


def test_group_geometric_means_on_loaded_data(normalized_df):
    out = group_geometric_means(normalized_df)
    assert (out["geomean"] > 0).all()
    assert out["n"].sum() == normalized_df["ColiVal"].notna().sum()


def test_spearman_matrix(normalized_df):
    corr = spearman_matrix(normalized_df)
    cols = ["ColiVal", "Temp", "Sal", "DOY", "YEAR"]
    assert list(corr.columns) == cols
    assert np.allclose(np.diag(corr.to_numpy()), 1.0)
    assert np.allclose(corr.to_numpy(), corr.to_numpy().T)


def test_spearman_detects_monotonic_relationship():
    df = pd.DataFrame({"a": [1, 2, 3, 4, 5], "b": [1, 10, 100, 1000, 10000]})
    assert spearman_matrix(df, columns=["a", "b"]).loc["a", "b"] == pytest.approx(1.0)


def test_spearman_requires_columns(normalized_df):
    with pytest.raises(ParseError):
        spearman_matrix(normalized_df, columns=["ColiVal", "Depth"])


def test_estimated_p90():
    assert estimated_p90([10, 10, 10]) == pytest.approx(10.0)
    assert np.isnan(estimated_p90([10]))
    assert estimated_p90([1, 10, 100]) > 10


def test_censoring_state_labels(normalized_df):
    state = censoring_state(normalized_df)
    assert state[normalized_df["ColiVal"] == 1600].eq(CENSOR_RIGHT).all()
    assert state[normalized_df["ColiVal"] == 1.9].eq(CENSOR_LEFT).all()
    assert state[normalized_df["ColiVal"] == 49].eq(CENSOR_NONE).all()


def test_censoring_summary_counts(normalized_df):
    table = censoring_summary(normalized_df)
    present = normalized_df[normalized_df["ColiVal"].notna()]
    assert int(table["n"].sum()) == len(present)
    assert int(table[CENSOR_RIGHT].sum()) == int((present["ColiVal"] == 1600).sum())
    assert ((table["pct_censored"] >= 0) & (table["pct_censored"] <= 100)).all()


def test_distribution_shape_reports_right_skew(normalized_df):
    shape = distribution_shape(normalized_df["ColiVal"])
    assert list(shape.index) == ["raw", "log10"]
    assert shape.loc["raw", "skewness"] > shape.loc["log10", "skewness"]
    assert shape.loc["raw", "n"] == normalized_df["ColiVal"].notna().sum()


def test_site_summary(normalized_df):
    out = site_summary(normalized_df)
    assert out["n_samples"].sum() == len(normalized_df)
    assert out["n_missing"].sum() == 2
    assert (out["first_sample"] <= out["last_sample"]).all()


def test_reporter_does_not_mutate_input(normalized_df):
    before = normalized_df.copy()
    distinct_values(normalized_df)
    group_geometric_means(normalized_df)
    spearman_matrix(normalized_df)
    censoring_summary(normalized_df)
    pd.testing.assert_frame_equal(normalized_df, before)


def test_non_numeric_entries_are_reported_not_dropped():
    with pytest.raises(ParseError, match="'<2'"):
        geometric_mean(["<2", 2, 8, 32])
    with pytest.raises(ParseError, match="'<2'"):
        low_values(["<2", 5, 15])
    with pytest.raises(ParseError, match="'TNTC'"):
        non_integer_values(["TNTC", 1.5])
    with pytest.raises(ParseError):
        estimated_p90(pd.Series(["10", "x", "100"], dtype=object))


def test_missing_entries_are_still_skipped():
    assert geometric_mean([None, 2, np.nan, 8, pd.NA, 32]) == pytest.approx(8.0)
    assert low_values(pd.Series([np.nan, 5.0, 15.0])) == [5.0]
