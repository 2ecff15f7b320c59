"""
02_report.py
~~~~~~~~~~~~
Full exploratory report: descriptive tables on the console and the figure
sequence (time scatter, log histograms, pair grid, geometric means, tide and
class boxplots) under ``outputs/figs``.
"""

import argparse
import sys
from pathlib import Path

from shellfish_eda.config import DEFAULT_CONFIG_PATH
from shellfish_eda.exceptions import ShellfishDataError
from shellfish_eda.report import run_report
from shellfish_eda.utils.log import setup_logging


def main() -> int:
    ap = argparse.ArgumentParser(description="Stage 02 – print summaries and render exploratory figures.")
    ap.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    ap.add_argument("--no-figures", action="store_true", help="Print tables only.")
    args = ap.parse_args()
    logger = setup_logging()
    try:
        run_report(Path(args.config), render=not args.no_figures)
    except ShellfishDataError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
