#!/usr/bin/env python3
"""
run_pipeline.py
~~~~~~~~~~~~~~~
Convenience orchestrator that runs the exploratory stages in order:

01_scan   → load, type and scan the monitoring data
02_report → descriptive tables and figures
"""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path
from typing import Iterable

from shellfish_eda.config import data_path, load_config


def _run(step: list[str]) -> None:
    print(f"\nRunning: {' '.join(step)}")
    subprocess.run(step, check=True)


def _ensure_dataset(config_path: str) -> Path:
    cfg = load_config(config_path)
    dataset = data_path(cfg)
    if not dataset.exists():
        raise FileNotFoundError(
            f"Expected dataset at '{dataset}'. Place the monitoring CSV under the data directory and rerun."
        )
    return dataset


def build_steps(config_path: str, figures: bool = True) -> Iterable[list[str]]:
    exe = [sys.executable]
    report = exe + ["scripts/02_report.py", "--config", config_path]
    if not figures:
        report.append("--no-figures")
    return [
        exe + ["scripts/01_scan.py", "--config", config_path],
        report,
    ]


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the shellfish exploratory report.")
    parser.add_argument("--config", default="config.yaml", help="Path to config file.")
    parser.add_argument("--no-figures", action="store_true", help="Skip figure rendering.")
    args = parser.parse_args()

    _ensure_dataset(args.config)
    for step in build_steps(args.config, figures=not args.no_figures):
        _run(step)

    print("\nReport complete. See outputs/figs for figures.")


if __name__ == "__main__":
    main()
