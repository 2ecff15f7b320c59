"""
01_scan.py
~~~~~~~~~~
First stage of the exploratory report: confirm the monitoring CSV can be read
and typed, and print its shape, column types, missing values and per-site
sample coverage.
"""

import argparse
import sys
from pathlib import Path

from shellfish_eda.config import DEFAULT_CONFIG_PATH
from shellfish_eda.exceptions import ShellfishDataError
from shellfish_eda.report import scan_samples
from shellfish_eda.utils.log import setup_logging


def main() -> int:
    ap = argparse.ArgumentParser(description="Stage 01 – load, type and scan the shellfish monitoring data.")
    ap.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    args = ap.parse_args()
    logger = setup_logging()
    try:
        scan_samples(Path(args.config))
    except ShellfishDataError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
