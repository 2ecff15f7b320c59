from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import DataFileNotFoundError, ParseError


DEFAULT_CONFIG_PATH = Path("config.yaml")

DEFAULT_DATA_DIR = "Derived_Data"
DEFAULT_DATA_FILE = "Shellfish data 2015 2018.csv"


def load_config(path: str | os.PathLike | None = None) -> Dict[str, Any]:
    cfg_path = Path(path) if path else DEFAULT_CONFIG_PATH
    try:
        with open(cfg_path, "r") as f:
            cfg = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise DataFileNotFoundError(f"Configuration file not found: '{cfg_path}'") from exc
    except yaml.YAMLError as exc:
        raise ParseError(f"Could not parse configuration '{cfg_path}': {exc}") from exc
    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ParseError(f"Configuration '{cfg_path}' must be a mapping, got {type(cfg).__name__}")
    return cfg


def data_path(cfg: Dict[str, Any]) -> Path:
    paths = cfg.get("paths", {})
    data_cfg = cfg.get("data", {})
    return Path(paths.get("data_dir", DEFAULT_DATA_DIR)) / data_cfg.get("file", DEFAULT_DATA_FILE)


def figs_dir(cfg: Dict[str, Any]) -> Path:
    return Path(cfg.get("paths", {}).get("outputs", "outputs")) / "figs"


def section(cfg: Optional[Dict[str, Any]], name: str) -> Dict[str, Any]:
    if not cfg:
        return {}
    value = cfg.get(name)
    return value if isinstance(value, dict) else {}


__all__ = [
    "load_config",
    "data_path",
    "figs_dir",
    "section",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_DATA_DIR",
    "DEFAULT_DATA_FILE",
]
