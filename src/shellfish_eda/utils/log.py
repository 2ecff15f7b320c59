from __future__ import annotations

import logging

LOGGER_NAME = "shellfish_eda"


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Configure console logging for the package and return its root logger."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter("%(levelname)-8s | %(message)s"))
    logger.addHandler(ch)
    return logger


__all__ = ["setup_logging", "LOGGER_NAME"]
