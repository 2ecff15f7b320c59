"""Data loading and type normalization."""

from .load import load_raw, load_samples
from .normalize import normalize

__all__ = ["load_raw", "load_samples", "normalize"]
