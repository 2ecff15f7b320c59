from __future__ import annotations

import pytest

from shellfish_eda.exceptions import DataFileNotFoundError, DomainError
from shellfish_eda.report import run_report, scan_samples


def test_run_report_end_to_end(config_path, capsys):
    result = run_report(config_path)
    out = capsys.readouterr().out

    assert result.missing.n_missing == 2
    assert result.low_values == [1.9, 2.0, 4.0, 7.8]
    assert result.non_integer_values == [1.9, 7.8]
    assert {"missing", "distinct_values", "spearman", "group_geomeans", "classification_screen"} <= set(result.tables)
    assert all(path.exists() for path in result.figures.values())
    assert "Geometric mean by group" in out
    assert "Spearman rank correlations" in out


def test_run_report_without_figures(cfg, capsys):
    result = run_report(cfg=cfg, render=False)
    assert result.figures == {}
    assert "DOY" in result.data.columns


def test_scan_samples_prints_shape(config_path, capsys):
    df = scan_samples(config_path)
    out = capsys.readouterr().out
    assert f"Shape: {df.shape}" in out
    assert "Samples per site" in out


def test_missing_data_file_aborts(cfg, tmp_path):
    cfg = {**cfg, "data": {"file": "absent.csv"}}
    with pytest.raises(DataFileNotFoundError):
        run_report(cfg=cfg, render=False)


def test_unknown_category_surfaces_as_domain_error(cfg, sample_csv):
    text = sample_csv.read_text()
    lines = text.splitlines()
    header = lines[0].split(",")
    first = lines[1].split(",")
    first[header.index("Class")] = "Q"
    lines[1] = ",".join(first)
    sample_csv.write_text("\n".join(lines) + "\n")
    with pytest.raises(DomainError, match="Class"):
        run_report(cfg=cfg, render=False)
    relaxed = {**cfg, "normalize": {"unknown_categories": "missing"}}
    result = run_report(cfg=relaxed, render=False)
    assert result.data["Class"].isna().sum() == 1
