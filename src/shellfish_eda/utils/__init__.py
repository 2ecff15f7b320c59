"""Utility helpers for figure output and logging."""

from .io import savefig
from .log import setup_logging

__all__ = ["savefig", "setup_logging"]
