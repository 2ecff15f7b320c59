import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest
import yaml

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from shellfish_eda.config import load_config
from shellfish_eda.data.load import load_samples
from shellfish_eda.data.normalize import normalize
from shellfish_eda.schema import TIDE_LEVELS

DATA_FILE = "Shellfish data 2015 2018.csv"

SITES = [
    ("CB001", "WA", "A"),
    ("CB002", "WA", "CA"),
    ("CB003", "WB", "R"),
]
COLI_CYCLE = [2.0, 1.9, 4.0, 7.8, 13.0, 23.0, 49.0, 110.0, 1600.0]
MISSING_ROWS = {5, 17}


def make_raw_records(n: int = 48) -> pd.DataFrame:
    """Synthetic monitoring rows formatted the way the CSV stores them."""
    rows = []
    for i in range(n):
        site, area, cls = SITES[i % len(SITES)]
        year = 2015 + (i % 4)
        date = pd.Timestamp(year, 1 + (i * 5) % 12, 1 + (i * 7) % 28)
        coli = None if i in MISSING_ROWS else COLI_CYCLE[i % len(COLI_CYCLE)]
        rows.append(
            {
                "SiteCode": site,
                "GROW_AREA": area,
                "YEAR": year,
                "SDate": date.strftime("%Y-%m-%d"),
                "SDateTime": (date + pd.Timedelta(hours=9, minutes=i)).strftime("%Y-%m-%d %H:%M"),
                "ColiVal": coli,
                "LCFlag": "TRUE" if coli is not None and coli <= 2.0 else "FALSE",
                "RCFlag": "TRUE" if coli is not None and coli >= 1600 else "FALSE",
                "Class": cls,
                "Tide": TIDE_LEVELS[i % len(TIDE_LEVELS)],
                "Temp": 4.0 + (i % 10) * 1.7,
                "Sal": 22.0 + (i % 7) * 1.3,
            }
        )
    return pd.DataFrame(rows)


@pytest.fixture
def raw_records() -> pd.DataFrame:
    return make_raw_records()


@pytest.fixture
def data_dir(tmp_path) -> Path:
    d = tmp_path / "Derived_Data"
    d.mkdir()
    return d


@pytest.fixture
def sample_csv(data_dir, raw_records) -> Path:
    path = data_dir / DATA_FILE
    raw_records.to_csv(path, index=False)
    return path


@pytest.fixture
def config_path(tmp_path, data_dir, sample_csv) -> Path:
    cfg = {
        "paths": {"data_dir": str(data_dir), "outputs": str(tmp_path / "outputs")},
        "data": {"file": DATA_FILE},
        "normalize": {"unknown_categories": "raise"},
        "analysis": {
            "low_value_threshold": 10,
            "group_by": ["GROW_AREA", "YEAR"],
            "classification_group_by": ["SiteCode"],
            "min_samples": 5,
        },
        "plots": {"dpi": 60},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(cfg))
    return path


@pytest.fixture
def cfg(config_path):
    return load_config(config_path)


@pytest.fixture
def raw_df(sample_csv) -> pd.DataFrame:
    return load_samples(sample_csv)


@pytest.fixture
def normalized_df(raw_df) -> pd.DataFrame:
    return normalize(raw_df)


@pytest.fixture(scope="session")
def script_module():
    import importlib.util

    def _load(name: str):
        script_path = ROOT / "scripts" / f"{name}.py"
        spec = importlib.util.spec_from_file_location(f"script_{name}", script_path)
        module = importlib.util.module_from_spec(spec)
        assert spec.loader is not None
        spec.loader.exec_module(module)
        return module

    return _load
